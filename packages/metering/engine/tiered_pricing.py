"""
Tiered pricing calculator.

Prices a quantity against a metered price under one of the five pricing
models. Every multiplication is rounded half-up to a whole minor currency unit
before it is added to a total, so fractional cents never accumulate across tiers.
"""

import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from common.core.telemetry import get_logger
from packages.metering.models.domain.enums import PricingModel
from packages.metering.models.domain.pricing import (
    MeteredPrice,
    PricingTier,
    TierBreakdownItem,
    TieredAmount,
)

logger = get_logger(__name__)


def round_minor_units(value: float) -> int:
    """Round half-up to an integer amount (2.5 -> 3), unlike the built-in round()."""
    return int(Decimal(value).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def calculate_tiered_amount(quantity: float, price: MeteredPrice) -> TieredAmount:
    """
    Calculate the amount for a quantity using the price's pricing model.

    Assumes a non-negative, non-NaN quantity; validate events upstream.
    Malformed tier configuration degrades to a zero or single-line result
    instead of raising.

    Args:
        quantity: Aggregated quantity to price
        price: Metered price configuration

    Returns:
        TieredAmount with the total and a per-tier breakdown
    """
    unit_amount = price.unit_amount or 0

    if not price.tiers:
        # No tiers: fall back to unit amount, whatever the declared model
        return _single_line(quantity, unit_amount, _per_unit(quantity, unit_amount))

    if price.pricing_model == PricingModel.FLAT_FEE:
        return _single_line(quantity, unit_amount, unit_amount)

    if price.pricing_model == PricingModel.TIERED_VOLUME:
        return _volume_pricing(quantity, price.tiers)

    if price.pricing_model == PricingModel.TIERED_GRADUATED:
        return _graduated_pricing(quantity, price.tiers)

    if price.pricing_model == PricingModel.PACKAGE:
        return _package_pricing(quantity, price.tiers)

    # per_unit with stray tiers
    return _single_line(quantity, unit_amount, _per_unit(quantity, unit_amount))


def _per_unit(quantity: float, unit_amount: int) -> int:
    return round_minor_units(quantity * unit_amount)


def _single_line(quantity: float, unit_amount: int, amount: int) -> TieredAmount:
    return TieredAmount(
        amount=amount,
        breakdown=[
            TierBreakdownItem(
                tier_index=0,
                quantity=quantity,
                unit_price=unit_amount,
                amount=amount,
                from_unit=0,
                to_unit=None,
            )
        ],
    )


def _volume_pricing(quantity: float, tiers: list[PricingTier]) -> TieredAmount:
    """Volume pricing: every unit priced at the tier the total volume falls into."""
    applicable_tier: Optional[PricingTier] = None
    tier_index = 0
    previous_up_to: float = 0

    for index, tier in enumerate(tiers):
        if tier.up_to is None or quantity <= tier.up_to:
            applicable_tier = tier
            tier_index = index
            break
        previous_up_to = tier.up_to

    if applicable_tier is None:
        # Quantity exceeds every bounded tier; price it at the last one
        applicable_tier = tiers[-1]
        tier_index = len(tiers) - 1

    amount = round_minor_units(quantity * applicable_tier.unit_amount) + (
        applicable_tier.flat_amount or 0
    )

    return TieredAmount(
        amount=amount,
        breakdown=[
            TierBreakdownItem(
                tier_index=tier_index,
                quantity=quantity,
                unit_price=applicable_tier.unit_amount,
                amount=amount,
                from_unit=previous_up_to,
                to_unit=applicable_tier.up_to,
            )
        ],
    )


def _graduated_pricing(quantity: float, tiers: list[PricingTier]) -> TieredAmount:
    """Graduated pricing: each tier prices only the units inside its band."""
    total_amount = 0
    remaining = quantity
    previous_up_to: float = 0
    breakdown: list[TierBreakdownItem] = []

    for index, tier in enumerate(tiers):
        if remaining <= 0:
            break

        capacity = tier.up_to - previous_up_to if tier.up_to is not None else remaining
        in_tier = min(remaining, capacity)

        tier_amount = round_minor_units(in_tier * tier.unit_amount)
        if in_tier > 0:
            tier_amount += tier.flat_amount or 0
            breakdown.append(
                TierBreakdownItem(
                    tier_index=index,
                    quantity=in_tier,
                    unit_price=tier.unit_amount,
                    amount=tier_amount,
                    from_unit=previous_up_to,
                    to_unit=tier.up_to,
                )
            )

        total_amount += tier_amount
        remaining -= in_tier

        if tier.up_to is not None:
            previous_up_to = tier.up_to

    return TieredAmount(amount=total_amount, breakdown=breakdown)


def _package_pricing(quantity: float, tiers: list[PricingTier]) -> TieredAmount:
    """Package pricing: the first tier defines package size (up_to) and price."""
    package_tier = tiers[0]
    if not package_tier.up_to:
        logger.debug("Package price has no package size, charging nothing")
        return TieredAmount(amount=0, breakdown=[])

    package_size = package_tier.up_to
    package_price = (
        package_tier.flat_amount
        if package_tier.flat_amount is not None
        else package_tier.unit_amount
    )

    packages_needed = math.ceil(quantity / package_size)
    amount = round_minor_units(packages_needed * package_price)

    return TieredAmount(
        amount=amount,
        breakdown=[
            TierBreakdownItem(
                tier_index=0,
                quantity=packages_needed,
                unit_price=package_price,
                amount=amount,
                from_unit=0,
                to_unit=None,
            )
        ],
    )
