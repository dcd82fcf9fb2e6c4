"""
Interface for usage storage providers.

Persists meters, metered prices, raw events and closed-period summaries.
All pricing math happens in the engine; storage only stores and filters.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from packages.metering.models.domain.pricing import MeteredPrice
from packages.metering.models.domain.usage import UsageEvent, UsageMeter, UsageSummary


class UsageStorageInterface(ABC):
    """Abstract interface for usage storage providers."""

    @abstractmethod
    async def create_meter(self, meter: UsageMeter) -> UsageMeter:
        """Store a new meter."""
        pass

    @abstractmethod
    async def get_meter(self, key: str) -> Optional[UsageMeter]:
        """Get a meter by key, or None if it doesn't exist."""
        pass

    @abstractmethod
    async def list_meters(self) -> list[UsageMeter]:
        """List all meters."""
        pass

    @abstractmethod
    async def update_meter(self, key: str, update: dict) -> UsageMeter:
        """
        Update fields of an existing meter.

        Raises:
            NotFoundError: If no meter has this key
        """
        pass

    @abstractmethod
    async def create_metered_price(self, price: MeteredPrice) -> MeteredPrice:
        """Store a new metered price."""
        pass

    @abstractmethod
    async def get_metered_price(self, price_id: str) -> Optional[MeteredPrice]:
        """Get a metered price by its ID."""
        pass

    @abstractmethod
    async def get_metered_price_by_meter(self, meter_key: str) -> Optional[MeteredPrice]:
        """Get the metered price attached to a meter."""
        pass

    @abstractmethod
    async def record_event(self, event: UsageEvent) -> UsageEvent:
        """Append a usage event."""
        pass

    @abstractmethod
    async def get_events(
        self,
        customer_id: str,
        meter_key: str,
        start_date: datetime,
        end_date: datetime,
    ) -> list[UsageEvent]:
        """
        Get a customer's events for a meter within [start_date, end_date).

        Events are returned in recording order.
        """
        pass

    @abstractmethod
    async def check_idempotency_key(self, key: str) -> bool:
        """Check if an idempotency key has been seen and not yet expired."""
        pass

    @abstractmethod
    async def claim_idempotency_key(self, key: str, ttl_hours: int) -> bool:
        """
        Reserve an idempotency key for ttl_hours.

        The check and the reservation must be atomic: of several concurrent
        claims for the same key, exactly one returns True.

        Returns:
            bool: True if the key was free and is now held, False if already held
        """
        pass

    @abstractmethod
    async def release_idempotency_key(self, key: str) -> None:
        """Forget an idempotency key so the same request can be retried."""
        pass

    @abstractmethod
    async def save_summary(self, summary: UsageSummary) -> None:
        """Store a usage summary, replacing any for the same customer/meter/period."""
        pass

    @abstractmethod
    async def get_summary(
        self,
        customer_id: str,
        meter_key: str,
        period_start: datetime,
        period_end: datetime,
    ) -> Optional[UsageSummary]:
        """Get a stored usage summary."""
        pass
