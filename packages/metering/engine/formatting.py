"""Display formatting for usage amounts and quantities."""

from decimal import Decimal, ROUND_HALF_UP

# en-US display symbols; other currencies render with their code
CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "BRL": "R$",
    "MXN": "MX$",
    "CAD": "CA$",
    "AUD": "A$",
}

CENTS = Decimal("0.01")


def format_usage_amount(amount: int, currency: str) -> str:
    """
    Format an amount in minor units for display, e.g. 123456 USD -> "$1,234.56".
    """
    code = currency.upper()
    value = (Decimal(amount) / 100).quantize(CENTS, rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    number = format(abs(value), ",f")

    symbol = CURRENCY_SYMBOLS.get(code)
    if symbol:
        return f"{sign}{symbol}{number}"
    return f"{sign}{code} {number}"


def format_usage_quantity(quantity: float, unit: str) -> str:
    """Format a quantity with at most two decimals and its unit, e.g. "1,234.5 GB"."""
    value = Decimal(str(quantity)).quantize(CENTS, rounding=ROUND_HALF_UP)
    number = format(value, ",f")
    if "." in number:
        number = number.rstrip("0").rstrip(".")
    return f"{number} {unit}"
