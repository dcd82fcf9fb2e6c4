"""
Domain models for billing periods, usage charges and usage billing jobs.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel

from packages.metering.models.domain.pricing import TierBreakdownItem


class BillingPeriod(BaseModel):
    """A half-open billing window [period_start, period_end)."""

    period_start: datetime
    period_end: datetime

    def contains(self, moment: datetime) -> bool:
        """Check if a moment falls inside this period."""
        return self.period_start <= moment < self.period_end


class ValidationResult(BaseModel):
    """Non-throwing validation outcome listing every violation found."""

    valid: bool
    errors: list[str]


class UsageLineItem(BaseModel):
    """Invoice-ready charge for one meter."""

    meter_key: str
    description: str
    quantity: float
    unit: str
    amount: int
    tier_breakdown: Optional[list[TierBreakdownItem]] = None


class UsageChargeResult(BaseModel):
    """All usage charges for a customer's billing period."""

    customer_id: str
    subscription_id: Optional[str] = None
    period_start: datetime
    period_end: datetime
    line_items: list[UsageLineItem]
    total_amount: int
    currency: str


class SubscriptionBillingWindow(BaseModel):
    """Subscription snapshot consumed by the usage billing job."""

    id: str
    customer_id: str
    current_period_start: datetime
    current_period_end: datetime

    class Config:
        from_attributes = True


class UsageBillingJobConfig(BaseModel):
    """Usage billing job configuration."""

    name: str
    schedule: str  # Cron expression
    subscription_ids: Optional[list[str]] = None  # None = all metered subscriptions
    auto_invoice: bool = True
    auto_charge: bool = False
    grace_period_hours: int = 24


class UsageBillingJobError(BaseModel):
    """A subscription the job could not bill."""

    subscription_id: str
    customer_id: str
    error: str


class UsageBillingJobResult(BaseModel):
    """Outcome of one usage billing job run."""

    job_id: str
    executed_at: datetime
    processed_count: int
    invoices_created: int
    charges_succeeded: int
    charges_failed: int
    errors: list[UsageBillingJobError]
