"""
Billing period calculator.

Periods are computed with calendar arithmetic (relativedelta), never fixed
second counts, so month and year intervals follow real month lengths and leap
years. Each period is one interval step from the previous period start, so a
day clamped by a short month carries forward: a subscription started on Jan 31
renews on Feb 29, then Mar 29.
"""

from datetime import datetime
from typing import Optional, Union

from dateutil.relativedelta import relativedelta

from packages.metering.models.domain.charges import BillingPeriod
from packages.metering.models.domain.enums import BillingInterval


def interval_delta(interval: Union[BillingInterval, str], count: int) -> relativedelta:
    """Calendar offset of `count` billing intervals."""
    interval = BillingInterval(interval)
    if interval == BillingInterval.DAY:
        return relativedelta(days=count)
    if interval == BillingInterval.WEEK:
        return relativedelta(weeks=count)
    if interval == BillingInterval.MONTH:
        return relativedelta(months=count)
    return relativedelta(years=count)


def get_billing_period(
    subscription_start: datetime,
    interval: Union[BillingInterval, str],
    interval_count: int,
    reference_date: Optional[datetime] = None,
) -> BillingPeriod:
    """
    Get the billing period containing the reference date.

    Starts from the subscription start and rolls forward one period at a time
    while the period end is on or before the reference date. A reference date
    earlier than the subscription start yields the first period.

    Args:
        subscription_start: Subscription anchor date
        interval: Billing interval unit
        interval_count: Intervals per billing period, at least 1
        reference_date: Date to find the period for (default: now)

    Returns:
        BillingPeriod with period_start (inclusive) and period_end (exclusive)
    """
    if interval_count < 1:
        raise ValueError(f"interval_count must be at least 1, got {interval_count}")

    if reference_date is None:
        reference_date = datetime.now(subscription_start.tzinfo)

    step = interval_delta(interval, interval_count)
    period_start = subscription_start
    period_end = period_start + step

    while period_end <= reference_date:
        period_start = period_end
        period_end = period_start + step

    return BillingPeriod(period_start=period_start, period_end=period_end)


def get_usage_billing_period(
    subscription_start: datetime,
    interval: Union[BillingInterval, str],
    interval_count: int,
) -> BillingPeriod:
    """Get the billing period a subscription is currently in."""
    return get_billing_period(subscription_start, interval, interval_count)
