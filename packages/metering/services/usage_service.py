"""
Service for usage meters, metered prices, usage events and period summaries.
"""

from datetime import datetime, timezone
from typing import Optional, Sequence

from common.core.config import settings
from common.core.exceptions import (
    ConfigurationError,
    DuplicateUsageEventError,
    NotFoundError,
    ValidationError,
)
from common.core.telemetry import trace_span, get_logger
from packages.metering.engine.summary import create_usage_summary
from packages.metering.engine.tiered_pricing import calculate_tiered_amount
from packages.metering.engine.validation import (
    validate_metered_price,
    validate_usage_event,
)
from packages.metering.models.domain.charges import BillingPeriod
from packages.metering.models.domain.enums import AggregationType
from packages.metering.models.domain.pricing import (
    MeteredPrice,
    MeteredPriceCreateModel,
    UsageEstimate,
    UsageEstimateItem,
)
from packages.metering.models.domain.usage import (
    RecordUsageResult,
    UsageEvent,
    UsageEventCreateModel,
    UsageMeter,
    UsageMeterCreateModel,
    UsageQueryOptions,
    UsageQueryResult,
    UsageSummary,
)
from packages.metering.providers.storage.factory import get_usage_storage
from packages.metering.providers.storage.interface import UsageStorageInterface

logger = get_logger(__name__)


class UsageService:
    """Service for usage metering."""

    def __init__(self, storage: Optional[UsageStorageInterface] = None):
        self.storage = storage or get_usage_storage()

    def create_usage_meter(self, data: UsageMeterCreateModel) -> UsageMeter:
        """Build a new, active usage meter."""
        aggregation_type = data.aggregation_type or AggregationType(
            settings.default_aggregation_type
        )
        return UsageMeter(
            key=data.key,
            name=data.name,
            description=data.description,
            unit=data.unit,
            aggregation_type=aggregation_type,
            metadata=dict(data.metadata),
        )

    def create_metered_price(self, data: MeteredPriceCreateModel) -> MeteredPrice:
        """Build a new metered price. Billing mode defaults to arrears."""
        return MeteredPrice(**data.model_dump())

    def create_usage_event(self, data: UsageEventCreateModel) -> RecordUsageResult:
        """
        Build a usage event from recording input.

        Validation problems are returned in the result rather than raised;
        the event is None whenever errors are present.
        """
        validation = validate_usage_event(
            customer_id=data.customer_id,
            meter_key=data.meter_key,
            quantity=data.quantity,
        )
        if not validation.valid:
            return RecordUsageResult(event=None, errors=validation.errors)

        event = UsageEvent(
            customer_id=data.customer_id,
            subscription_id=data.subscription_id,
            meter_key=data.meter_key,
            quantity=data.quantity,
            timestamp=data.timestamp or datetime.now(timezone.utc),
            idempotency_key=data.idempotency_key,
            properties=dict(data.properties),
        )
        return RecordUsageResult(event=event, errors=[])

    @trace_span
    def query_usage(
        self,
        events: Sequence[UsageEvent],
        meters: Sequence[UsageMeter],
        prices: Sequence[MeteredPrice],
        options: UsageQueryOptions,
    ) -> UsageQueryResult:
        """
        Summarise a customer's usage per meter over [start_date, end_date).

        Meters without both a meter definition and a metered price are skipped.
        """
        window = BillingPeriod(period_start=options.start_date, period_end=options.end_date)
        events_by_meter: dict[str, list[UsageEvent]] = {}
        matched: list[UsageEvent] = []

        for event in events:
            if options.meter_key and event.meter_key != options.meter_key:
                continue
            if not window.contains(event.timestamp):
                continue
            if options.subscription_id and event.subscription_id != options.subscription_id:
                continue

            events_by_meter.setdefault(event.meter_key, []).append(event)
            matched.append(event)

        meters_by_key = {meter.key: meter for meter in meters}
        summaries: list[UsageSummary] = []

        for meter_key, meter_events in events_by_meter.items():
            meter = meters_by_key.get(meter_key)
            price = next((p for p in prices if p.meter_key == meter_key), None)

            if meter is None or price is None:
                logger.debug(
                    f"Skipping usage for unpriced meter {meter_key}",
                    extra={"meter_key": meter_key, "event_count": len(meter_events)},
                )
                continue

            summaries.append(
                create_usage_summary(
                    customer_id=options.customer_id,
                    subscription_id=options.subscription_id,
                    meter_key=meter_key,
                    events=meter_events,
                    meter=meter,
                    price=price,
                    period_start=options.start_date,
                    period_end=options.end_date,
                )
            )

        return UsageQueryResult(
            customer_id=options.customer_id,
            period_start=options.start_date,
            period_end=options.end_date,
            summaries=summaries,
            events=matched if options.include_events else None,
        )

    def estimate_usage_charge(self, quantity: float, price: MeteredPrice) -> UsageEstimate:
        """Preview the charge for a projected quantity (no aggregation, no clamps)."""
        tiered = calculate_tiered_amount(quantity, price)
        return UsageEstimate(
            amount=tiered.amount,
            breakdown=[
                UsageEstimateItem(
                    tier=item.tier_index, quantity=item.quantity, amount=item.amount
                )
                for item in tiered.breakdown
            ],
        )

    @trace_span
    async def register_meter(self, data: UsageMeterCreateModel) -> UsageMeter:
        """Create a usage meter and store it."""
        meter = self.create_usage_meter(data)
        meter = await self.storage.create_meter(meter)

        logger.info(
            f"Registered usage meter {meter.key} ({meter.aggregation_type.value})",
            extra={"meter_key": meter.key, "meter_id": meter.id},
        )

        return meter

    @trace_span
    async def register_price(self, data: MeteredPriceCreateModel) -> MeteredPrice:
        """
        Create a metered price and store it.

        Raises:
            ConfigurationError: If the price cannot be billed as configured
        """
        price = self.create_metered_price(data)
        self._ensure_billable(price)

        price = await self.storage.create_metered_price(price)

        logger.info(
            f"Registered {price.pricing_model.value} price {price.price_id} for meter {price.meter_key}",
            extra={"price_id": price.price_id, "meter_key": price.meter_key},
        )

        return price

    @trace_span
    async def record_usage(self, data: UsageEventCreateModel) -> UsageEvent:
        """
        Validate and record a usage event.

        Raises:
            ValidationError: With every problem found in the input
            NotFoundError: If the meter doesn't exist or is inactive
            DuplicateUsageEventError: If the idempotency key was already used
        """
        result = self.create_usage_event(data)
        if result.event is None:
            logger.warning(
                f"Rejected usage event for meter {data.meter_key}",
                extra={"customer_id": data.customer_id, "errors": result.errors},
            )
            raise ValidationError("Invalid usage event", errors=result.errors)

        meter = await self.storage.get_meter(data.meter_key)
        if meter is None or not meter.active:
            raise NotFoundError(f"Active usage meter {data.meter_key} not found")

        idempotency_key = data.idempotency_key if settings.enable_idempotency else None
        if idempotency_key:
            claimed = await self.storage.claim_idempotency_key(
                idempotency_key, settings.idempotency_ttl_hours
            )
            if not claimed:
                logger.info(
                    f"Dropping duplicate usage event {idempotency_key}",
                    extra={"idempotency_key": idempotency_key},
                )
                raise DuplicateUsageEventError(idempotency_key)

        try:
            event = await self.storage.record_event(result.event)
        except Exception:
            if idempotency_key:
                await self.storage.release_idempotency_key(idempotency_key)
            raise

        logger.info(
            f"Recorded usage event {event.id} (quantity={event.quantity})",
            extra={
                "event_id": event.id,
                "customer_id": event.customer_id,
                "meter_key": event.meter_key,
                "quantity": event.quantity,
            },
        )

        return event

    @trace_span
    async def summarize_period(
        self,
        customer_id: str,
        meter_key: str,
        period_start: datetime,
        period_end: datetime,
        subscription_id: Optional[str] = None,
    ) -> UsageSummary:
        """
        Build and store the usage summary for a closed billing period.

        Raises:
            NotFoundError: If the meter or its metered price doesn't exist
            ConfigurationError: If the metered price is malformed
        """
        meter = await self.storage.get_meter(meter_key)
        if meter is None:
            raise NotFoundError(f"Usage meter {meter_key} not found")

        price = await self.storage.get_metered_price_by_meter(meter_key)
        if price is None:
            raise NotFoundError(f"No metered price for meter {meter_key}")

        self._ensure_billable(price)

        events = await self.storage.get_events(
            customer_id, meter_key, period_start, period_end
        )
        if subscription_id:
            events = [e for e in events if e.subscription_id == subscription_id]

        summary = create_usage_summary(
            customer_id=customer_id,
            subscription_id=subscription_id,
            meter_key=meter_key,
            events=events,
            meter=meter,
            price=price,
            period_start=period_start,
            period_end=period_end,
        )
        await self.storage.save_summary(summary)

        logger.info(
            f"Summarized {summary.event_count} events for {customer_id}/{meter_key}: {summary.amount} {summary.currency}",
            extra={
                "customer_id": customer_id,
                "meter_key": meter_key,
                "aggregated_value": summary.aggregated_value,
                "amount": summary.amount,
            },
        )

        return summary

    def _ensure_billable(self, price: MeteredPrice) -> None:
        """Raise ConfigurationError listing everything wrong with a price."""
        validation = validate_metered_price(price)
        if not validation.valid:
            logger.warning(
                f"Metered price {price.price_id} is misconfigured",
                extra={"price_id": price.price_id, "errors": validation.errors},
            )
            raise ConfigurationError(
                f"Metered price {price.price_id} is misconfigured",
                errors=validation.errors,
            )
