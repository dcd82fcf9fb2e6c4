"""
Domain models for usage meters, usage events and usage summaries.
"""

from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4
from pydantic import BaseModel, Field

from packages.metering.models.domain.enums import AggregationType
from packages.metering.models.domain.pricing import TierBreakdownItem


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid4().hex


class UsageMeter(BaseModel):
    """
    Definition of a trackable usage metric.

    The key is what application code passes when recording usage.
    """

    id: str = Field(default_factory=_new_id)
    key: str
    name: str
    description: Optional[str] = None
    unit: str  # e.g. "requests", "GB"
    aggregation_type: AggregationType
    active: bool = True
    metadata: dict = Field(default_factory=dict)

    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    class Config:
        from_attributes = True


class UsageMeterCreateModel(BaseModel):
    """Model for creating a usage meter."""

    key: str
    name: str
    description: Optional[str] = None
    unit: str
    aggregation_type: Optional[AggregationType] = None  # Defaults from settings
    metadata: dict = {}


class UsageEvent(BaseModel):
    """
    One raw usage observation.

    Immutable once recorded; summaries only ever read events.
    """

    id: str = Field(default_factory=_new_id)
    customer_id: str
    subscription_id: Optional[str] = None
    meter_key: str

    quantity: float

    # When the usage occurred (not when it was recorded)
    timestamp: datetime

    # Used by storage to drop duplicate submissions
    idempotency_key: Optional[str] = None

    properties: dict = Field(default_factory=dict)

    created_at: datetime = Field(default_factory=_utcnow)

    class Config:
        from_attributes = True


class UsageEventCreateModel(BaseModel):
    """Model for recording a usage event."""

    customer_id: str
    subscription_id: Optional[str] = None
    meter_key: str
    quantity: float
    timestamp: Optional[datetime] = None  # Defaults to now
    idempotency_key: Optional[str] = None
    properties: dict = {}


class RecordUsageResult(BaseModel):
    """Outcome of building a usage event; event is None when errors are present."""

    event: Optional[UsageEvent] = None
    errors: list[str] = []


class UsageSummary(BaseModel):
    """
    Aggregated and priced usage for one customer, meter and billing period.

    The period is half-open: [period_start, period_end).
    """

    customer_id: str
    subscription_id: Optional[str] = None
    meter_key: str

    period_start: datetime
    period_end: datetime

    aggregated_value: float
    event_count: int

    # Charge in minor currency units, after minimum/maximum clamps
    amount: int
    currency: str

    # Only present when it explains more than a single default tier
    tier_breakdown: Optional[list[TierBreakdownItem]] = None


class UsageQueryOptions(BaseModel):
    """Filters for summarising a customer's usage."""

    customer_id: str
    subscription_id: Optional[str] = None
    meter_key: Optional[str] = None  # All meters when not set
    start_date: datetime
    end_date: datetime
    include_events: bool = False


class UsageQueryResult(BaseModel):
    """Per-meter summaries for a customer over a query window."""

    customer_id: str
    period_start: datetime
    period_end: datetime
    summaries: list[UsageSummary]
    events: Optional[list[UsageEvent]] = None
