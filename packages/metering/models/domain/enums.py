"""
Metering enums - strongly typed enumerations for meters, prices and billing periods.
"""

from enum import Enum


class AggregationType(str, Enum):
    """
    How usage events are reduced within a billing period.
    """

    SUM = "sum"  # Sum of all event quantities
    MAX = "max"  # Highest quantity recorded
    LAST = "last"  # Most recent quantity (gauge metrics)
    COUNT = "count"  # Number of events, quantities ignored


class PricingModel(str, Enum):
    """Pricing models for metered billing."""

    PER_UNIT = "per_unit"  # Fixed price per unit
    TIERED_GRADUATED = "tiered_graduated"  # Each tier priced separately
    TIERED_VOLUME = "tiered_volume"  # All units at the rate of the reached tier
    PACKAGE = "package"  # Price per bundle of units, rounded up
    FLAT_FEE = "flat_fee"  # Flat fee regardless of usage

    def requires_tiers(self) -> bool:
        """Check if this model is driven by a tier list rather than a unit amount."""
        return self in (
            PricingModel.TIERED_GRADUATED,
            PricingModel.TIERED_VOLUME,
            PricingModel.PACKAGE,
        )


class BillingInterval(str, Enum):
    """Calendar unit a billing period is measured in."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class BillingMode(str, Enum):
    """Whether usage is billed at the start or end of a period."""

    ADVANCE = "advance"
    ARREARS = "arrears"


class ResetBehavior(str, Enum):
    """When accumulated usage resets."""

    BILLING_PERIOD = "billing_period"
    CALENDAR_MONTH = "calendar_month"
    NEVER = "never"
