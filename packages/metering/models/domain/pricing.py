"""
Domain models for metered prices and tiered pricing results.
"""

from datetime import datetime, timezone
from typing import Optional
from pydantic import BaseModel, Field

from packages.metering.models.domain.enums import (
    BillingMode,
    PricingModel,
    ResetBehavior,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PricingTier(BaseModel):
    """
    One band of a tiered price.

    Tiers are ordered ascending by up_to; a tier with up_to=None is unbounded
    and must be last. Package pricing reads up_to as the package size.
    """

    up_to: Optional[float] = None
    unit_amount: int  # Minor currency units per unit
    flat_amount: Optional[int] = None


class TierBreakdownItem(BaseModel):
    """How much of a charge one tier contributed."""

    tier_index: int
    quantity: float  # Package count for package pricing
    unit_price: int
    amount: int
    from_unit: float
    to_unit: Optional[float] = None  # None = unbounded


class TieredAmount(BaseModel):
    """Result of pricing a quantity against a metered price."""

    amount: int
    breakdown: list[TierBreakdownItem]


class MeteredPrice(BaseModel):
    """
    Configuration binding a meter to a pricing model.

    Graduated, volume and package models are driven by tiers; per_unit and
    flat_fee are driven by unit_amount.
    """

    price_id: str
    meter_key: str
    currency: str
    pricing_model: PricingModel

    tiers: Optional[list[PricingTier]] = None
    unit_amount: Optional[int] = None

    # Per-period charge clamps
    minimum_amount: Optional[int] = None
    maximum_amount: Optional[int] = None

    billing_mode: BillingMode = BillingMode.ARREARS
    reset_behavior: Optional[ResetBehavior] = None  # None = per billing period

    metadata: dict = Field(default_factory=dict)

    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    class Config:
        from_attributes = True


class MeteredPriceCreateModel(BaseModel):
    """Model for creating a metered price."""

    price_id: str
    meter_key: str
    currency: str
    pricing_model: PricingModel
    tiers: Optional[list[PricingTier]] = None
    unit_amount: Optional[int] = None
    minimum_amount: Optional[int] = None
    maximum_amount: Optional[int] = None
    billing_mode: BillingMode = BillingMode.ARREARS
    reset_behavior: Optional[ResetBehavior] = None
    metadata: dict = {}


class TierSpec(BaseModel):
    """Shorthand for building graduated or volume tiers."""

    up_to: Optional[float] = None
    price_per_unit: int


class UsageEstimateItem(BaseModel):
    """Compact per-tier line of a usage estimate."""

    tier: int
    quantity: float
    amount: int


class UsageEstimate(BaseModel):
    """Projected charge for a quantity, without aggregation or clamps."""

    amount: int
    breakdown: list[UsageEstimateItem]
