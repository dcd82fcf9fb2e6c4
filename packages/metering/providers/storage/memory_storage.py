import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from common.core.exceptions import NotFoundError
from common.core.telemetry import get_logger
from packages.metering.models.domain.pricing import MeteredPrice
from packages.metering.models.domain.usage import UsageEvent, UsageMeter, UsageSummary
from packages.metering.providers.storage.interface import UsageStorageInterface

logger = get_logger(__name__)

SummaryKey = Tuple[str, str, datetime, datetime]


@dataclass
class _IdempotencyEntry:
    """Remembered idempotency key with expiration."""

    expires_at: float

    def is_expired(self) -> bool:
        return time.time() > self.expires_at


@dataclass
class _Tables:
    meters: Dict[str, UsageMeter] = field(default_factory=dict)
    prices: Dict[str, MeteredPrice] = field(default_factory=dict)
    events: List[UsageEvent] = field(default_factory=list)
    idempotency_keys: Dict[str, _IdempotencyEntry] = field(default_factory=dict)
    summaries: Dict[SummaryKey, UsageSummary] = field(default_factory=dict)


class MemoryUsageStorage(UsageStorageInterface):
    """In-memory usage storage implementation."""

    def __init__(self):
        self._tables = _Tables()
        logger.info("Memory usage storage provider initialized")

    async def create_meter(self, meter: UsageMeter) -> UsageMeter:
        self._tables.meters[meter.key] = meter
        logger.debug(f"Stored meter {meter.key}")
        return meter

    async def get_meter(self, key: str) -> Optional[UsageMeter]:
        return self._tables.meters.get(key)

    async def list_meters(self) -> list[UsageMeter]:
        return list(self._tables.meters.values())

    async def update_meter(self, key: str, update: dict) -> UsageMeter:
        meter = self._tables.meters.get(key)
        if meter is None:
            raise NotFoundError(f"Usage meter {key} not found")

        updated = meter.model_copy(
            update={**update, "updated_at": datetime.now(timezone.utc)}
        )
        self._tables.meters[key] = updated
        return updated

    async def create_metered_price(self, price: MeteredPrice) -> MeteredPrice:
        self._tables.prices[price.price_id] = price
        logger.debug(f"Stored metered price {price.price_id} for meter {price.meter_key}")
        return price

    async def get_metered_price(self, price_id: str) -> Optional[MeteredPrice]:
        return self._tables.prices.get(price_id)

    async def get_metered_price_by_meter(self, meter_key: str) -> Optional[MeteredPrice]:
        for price in self._tables.prices.values():
            if price.meter_key == meter_key:
                return price
        return None

    async def record_event(self, event: UsageEvent) -> UsageEvent:
        self._tables.events.append(event)
        return event

    async def get_events(
        self,
        customer_id: str,
        meter_key: str,
        start_date: datetime,
        end_date: datetime,
    ) -> list[UsageEvent]:
        return [
            event
            for event in self._tables.events
            if event.customer_id == customer_id
            and event.meter_key == meter_key
            and start_date <= event.timestamp < end_date
        ]

    def _cleanup_expired_keys(self) -> None:
        """Remove expired idempotency keys."""
        expired = [
            key
            for key, entry in self._tables.idempotency_keys.items()
            if entry.is_expired()
        ]
        for key in expired:
            del self._tables.idempotency_keys[key]

        if expired:
            logger.debug(f"Cleaned up {len(expired)} expired idempotency keys")

    async def check_idempotency_key(self, key: str) -> bool:
        entry = self._tables.idempotency_keys.get(key)
        if entry is None:
            return False

        if entry.is_expired():
            del self._tables.idempotency_keys[key]
            return False

        return True

    async def claim_idempotency_key(self, key: str, ttl_hours: int) -> bool:
        # No await between the check and the write, so claims cannot interleave
        self._cleanup_expired_keys()
        if key in self._tables.idempotency_keys:
            return False

        self._tables.idempotency_keys[key] = _IdempotencyEntry(
            expires_at=time.time() + ttl_hours * 3600
        )
        return True

    async def release_idempotency_key(self, key: str) -> None:
        self._tables.idempotency_keys.pop(key, None)

    async def save_summary(self, summary: UsageSummary) -> None:
        key = (
            summary.customer_id,
            summary.meter_key,
            summary.period_start,
            summary.period_end,
        )
        self._tables.summaries[key] = summary

    async def get_summary(
        self,
        customer_id: str,
        meter_key: str,
        period_start: datetime,
        period_end: datetime,
    ) -> Optional[UsageSummary]:
        return self._tables.summaries.get(
            (customer_id, meter_key, period_start, period_end)
        )
