"""Domain models for usage metering."""

from packages.metering.models.domain.enums import (
    AggregationType,
    PricingModel,
    BillingInterval,
    BillingMode,
    ResetBehavior,
)
from packages.metering.models.domain.pricing import (
    PricingTier,
    TierBreakdownItem,
    TieredAmount,
    MeteredPrice,
    MeteredPriceCreateModel,
    TierSpec,
    UsageEstimate,
    UsageEstimateItem,
)
from packages.metering.models.domain.usage import (
    UsageMeter,
    UsageMeterCreateModel,
    UsageEvent,
    UsageEventCreateModel,
    RecordUsageResult,
    UsageSummary,
    UsageQueryOptions,
    UsageQueryResult,
)
from packages.metering.models.domain.charges import (
    BillingPeriod,
    ValidationResult,
    UsageLineItem,
    UsageChargeResult,
    SubscriptionBillingWindow,
    UsageBillingJobConfig,
    UsageBillingJobError,
    UsageBillingJobResult,
)

__all__ = [
    # Enums
    "AggregationType",
    "PricingModel",
    "BillingInterval",
    "BillingMode",
    "ResetBehavior",
    # Pricing
    "PricingTier",
    "TierBreakdownItem",
    "TieredAmount",
    "MeteredPrice",
    "MeteredPriceCreateModel",
    "TierSpec",
    "UsageEstimate",
    "UsageEstimateItem",
    # Usage
    "UsageMeter",
    "UsageMeterCreateModel",
    "UsageEvent",
    "UsageEventCreateModel",
    "RecordUsageResult",
    "UsageSummary",
    "UsageQueryOptions",
    "UsageQueryResult",
    # Charges
    "BillingPeriod",
    "ValidationResult",
    "UsageLineItem",
    "UsageChargeResult",
    "SubscriptionBillingWindow",
    "UsageBillingJobConfig",
    "UsageBillingJobError",
    "UsageBillingJobResult",
]
