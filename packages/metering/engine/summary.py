"""
Builds the priced usage summary for one customer, meter and billing period.
"""

from datetime import datetime
from typing import Optional, Sequence

from packages.metering.engine.aggregation import aggregate_usage_events
from packages.metering.engine.tiered_pricing import calculate_tiered_amount
from packages.metering.models.domain.pricing import MeteredPrice, TierBreakdownItem
from packages.metering.models.domain.usage import UsageEvent, UsageMeter, UsageSummary


def apply_amount_limits(amount: int, price: MeteredPrice) -> int:
    """
    Clamp a period charge to the price's minimum and maximum.

    The minimum is applied first, so when minimum > maximum the maximum wins.
    """
    if price.minimum_amount is not None and amount < price.minimum_amount:
        amount = price.minimum_amount
    if price.maximum_amount is not None and amount > price.maximum_amount:
        amount = price.maximum_amount
    return amount


def _significant_breakdown(
    breakdown: list[TierBreakdownItem],
) -> Optional[list[TierBreakdownItem]]:
    """Drop the breakdown when it only restates a single default tier."""
    if len(breakdown) > 1:
        return breakdown
    if len(breakdown) == 1 and breakdown[0].tier_index != 0:
        return breakdown
    return None


def create_usage_summary(
    customer_id: str,
    subscription_id: Optional[str],
    meter_key: str,
    events: Sequence[UsageEvent],
    meter: UsageMeter,
    price: MeteredPrice,
    period_start: datetime,
    period_end: datetime,
) -> UsageSummary:
    """
    Aggregate a period's events, price the result and apply min/max clamps.

    Args:
        customer_id: Customer identifier
        subscription_id: Subscription identifier, or None for unattached usage
        meter_key: Meter key identifier
        events: Usage events already filtered to the period
        meter: Meter configuration (aggregation type)
        price: Metered price configuration
        period_start: Billing period start (inclusive)
        period_end: Billing period end (exclusive)

    Returns:
        UsageSummary with the clamped amount
    """
    aggregated_value = aggregate_usage_events(events, meter)
    tiered = calculate_tiered_amount(aggregated_value, price)

    return UsageSummary(
        customer_id=customer_id,
        subscription_id=subscription_id,
        meter_key=meter_key,
        period_start=period_start,
        period_end=period_end,
        aggregated_value=aggregated_value,
        event_count=len(events),
        amount=apply_amount_limits(tiered.amount, price),
        currency=price.currency,
        tier_breakdown=_significant_breakdown(tiered.breakdown),
    )
