"""
Non-throwing validators for usage events and metered prices.

Each validator collects every violation rather than stopping at the first one,
so callers can show the complete list at once.
"""

import math
import numbers
from typing import Any, Optional

from packages.metering.models.domain.charges import ValidationResult
from packages.metering.models.domain.enums import PricingModel
from packages.metering.models.domain.pricing import MeteredPrice, PricingTier


def _is_blank(value: Optional[str]) -> bool:
    return not value or not value.strip()


def validate_usage_event(
    customer_id: Optional[str], meter_key: Optional[str], quantity: Any
) -> ValidationResult:
    """Check the fields a usage event needs before it can be recorded."""
    errors: list[str] = []

    if _is_blank(customer_id):
        errors.append("Customer ID is required")

    if _is_blank(meter_key):
        errors.append("Meter key is required")

    is_number = isinstance(quantity, numbers.Real) and not isinstance(quantity, bool)
    if not is_number or not math.isfinite(quantity):
        errors.append("Quantity must be a valid number")
    elif quantity < 0:
        errors.append("Quantity cannot be negative")

    return ValidationResult(valid=not errors, errors=errors)


def _validate_basic_fields(price: MeteredPrice, errors: list[str]) -> None:
    if _is_blank(price.price_id):
        errors.append("Price ID is required")

    if _is_blank(price.meter_key):
        errors.append("Meter key is required")

    if _is_blank(price.currency):
        errors.append("Currency is required")

    if not price.pricing_model:
        errors.append("Pricing model is required")


def _validate_pricing_model(price: MeteredPrice, errors: list[str]) -> None:
    model = price.pricing_model

    if not model.requires_tiers():
        if price.unit_amount is None:
            errors.append(f"Unit amount is required for {model.value} pricing")
        return

    if model != PricingModel.PACKAGE:
        if not price.tiers:
            errors.append("Tiers are required for tiered pricing")
    elif not price.tiers:
        errors.append("A package tier is required for package pricing")
    elif not price.tiers[0].up_to or price.tiers[0].up_to <= 0:
        errors.append("Package tier upTo (package size) must be a positive number")


def _validate_tiers(tiers: list[PricingTier], model: PricingModel, errors: list[str]) -> None:
    previous_up_to: float = 0
    for position, tier in enumerate(tiers, start=1):
        if tier.up_to is not None and tier.up_to <= previous_up_to:
            errors.append(f"Tier {position}: upTo must be greater than previous tier")

        if tier.unit_amount < 0:
            errors.append(f"Tier {position}: unitAmount cannot be negative")

        if tier.flat_amount is not None and tier.flat_amount < 0:
            errors.append(f"Tier {position}: flatAmount cannot be negative")

        if tier.up_to is None and position < len(tiers):
            errors.append(f"Tier {position}: only the last tier can be unlimited")

        if tier.up_to is not None:
            previous_up_to = tier.up_to

    # Package pricing reads up_to as a package size, so only banded models need this
    if model in (PricingModel.TIERED_GRADUATED, PricingModel.TIERED_VOLUME):
        if tiers and tiers[-1].up_to is not None:
            errors.append("Last tier should have upTo set to null (unlimited)")


def _validate_amount_limits(price: MeteredPrice, errors: list[str]) -> None:
    if price.minimum_amount is not None and price.minimum_amount < 0:
        errors.append("Minimum amount cannot be negative")

    if price.maximum_amount is not None and price.maximum_amount < 0:
        errors.append("Maximum amount cannot be negative")

    if (
        price.minimum_amount is not None
        and price.maximum_amount is not None
        and price.minimum_amount > price.maximum_amount
    ):
        errors.append("Minimum amount cannot exceed maximum amount")


def validate_metered_price(price: MeteredPrice) -> ValidationResult:
    """Check that a metered price can be billed the way its model expects."""
    errors: list[str] = []

    _validate_basic_fields(price, errors)
    _validate_pricing_model(price, errors)

    if price.tiers:
        _validate_tiers(price.tiers, price.pricing_model, errors)

    _validate_amount_limits(price, errors)

    return ValidationResult(valid=not errors, errors=errors)
