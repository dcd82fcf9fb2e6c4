"""
Service for turning usage summaries into charges and running usage billing jobs.
"""

from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional, Sequence
from uuid import uuid4

from common.core.config import settings
from common.core.telemetry import trace_span, get_logger, log_span_event
from packages.metering.models.domain.charges import (
    SubscriptionBillingWindow,
    UsageBillingJobConfig,
    UsageBillingJobError,
    UsageBillingJobResult,
    UsageChargeResult,
    UsageLineItem,
)
from packages.metering.models.domain.pricing import MeteredPrice
from packages.metering.models.domain.usage import (
    UsageEvent,
    UsageMeter,
    UsageQueryOptions,
    UsageSummary,
)
from packages.metering.services.usage_service import UsageService

logger = get_logger(__name__)

GetUsageEvents = Callable[[str, datetime, datetime], Awaitable[list[UsageEvent]]]
CreateInvoice = Callable[[str, UsageChargeResult], Awaitable[Any]]


class UsageBillingService:
    """Service for usage charges and the periodic usage billing job."""

    def __init__(self, usage_service: Optional[UsageService] = None):
        self.usage_service = usage_service or UsageService()

    def calculate_usage_charges(
        self,
        summaries: Sequence[UsageSummary],
        meters: Sequence[UsageMeter],
        currency: Optional[str] = None,
    ) -> UsageChargeResult:
        """
        Build invoice line items from usage summaries.

        Summaries whose meter is unknown are left out. Customer, subscription
        and period come from the first summary. Without a currency the
        configured default currency is used.
        """
        meters_by_key = {meter.key: meter for meter in meters}
        line_items: list[UsageLineItem] = []
        total_amount = 0

        for summary in summaries:
            meter = meters_by_key.get(summary.meter_key)
            if meter is None:
                continue

            line_items.append(
                UsageLineItem(
                    meter_key=summary.meter_key,
                    description=f"{meter.name} usage",
                    quantity=summary.aggregated_value,
                    unit=meter.unit,
                    amount=summary.amount,
                    tier_breakdown=summary.tier_breakdown,
                )
            )
            total_amount += summary.amount

        now = datetime.now(timezone.utc)
        first = summaries[0] if summaries else None

        return UsageChargeResult(
            customer_id=first.customer_id if first else "",
            subscription_id=first.subscription_id if first else None,
            period_start=first.period_start if first else now,
            period_end=first.period_end if first else now,
            line_items=line_items,
            total_amount=total_amount,
            currency=currency or settings.default_currency,
        )

    def create_usage_billing_job_config(
        self,
        name: str,
        schedule: Optional[str] = None,
        subscription_ids: Optional[list[str]] = None,
        auto_invoice: bool = True,
        auto_charge: bool = False,
        grace_period_hours: Optional[int] = None,
    ) -> UsageBillingJobConfig:
        """Build a job configuration, filling gaps from settings."""
        return UsageBillingJobConfig(
            name=name,
            schedule=schedule or settings.usage_billing_schedule,
            subscription_ids=subscription_ids,
            auto_invoice=auto_invoice,
            auto_charge=auto_charge,
            grace_period_hours=(
                grace_period_hours
                if grace_period_hours is not None
                else settings.grace_period_hours
            ),
        )

    @trace_span
    async def process_usage_billing(
        self,
        subscriptions: Sequence[SubscriptionBillingWindow],
        get_usage_events: GetUsageEvents,
        meters: Sequence[UsageMeter],
        prices: Sequence[MeteredPrice],
        create_invoice: CreateInvoice,
        config: UsageBillingJobConfig,
    ) -> UsageBillingJobResult:
        """
        Bill usage for each subscription's current period.

        Subscriptions with no events, no priced meters or a zero total are
        skipped. A failure for one subscription is recorded and the job moves
        on to the next one.

        Args:
            subscriptions: Subscriptions with their current period windows
            get_usage_events: Fetches a customer's events for a window
            meters: Meter definitions
            prices: Metered price definitions
            create_invoice: Creates an invoice for a customer's charges
            config: Job configuration

        Returns:
            UsageBillingJobResult with counts and per-subscription errors
        """
        job_id = uuid4().hex
        executed_at = datetime.now(timezone.utc)
        errors: list[UsageBillingJobError] = []
        invoices_created = 0
        charges_succeeded = 0
        charges_failed = 0

        if config.subscription_ids is not None:
            selected = set(config.subscription_ids)
            subscriptions = [s for s in subscriptions if s.id in selected]

        logger.info(
            f"Starting usage billing job {config.name} for {len(subscriptions)} subscriptions",
            extra={"job_id": job_id, "job_name": config.name},
        )

        for subscription in subscriptions:
            try:
                events = await get_usage_events(
                    subscription.customer_id,
                    subscription.current_period_start,
                    subscription.current_period_end,
                )
                if not events:
                    continue

                query_result = self.usage_service.query_usage(
                    events,
                    meters,
                    prices,
                    UsageQueryOptions(
                        customer_id=subscription.customer_id,
                        subscription_id=subscription.id,
                        start_date=subscription.current_period_start,
                        end_date=subscription.current_period_end,
                    ),
                )
                if not query_result.summaries:
                    continue

                charges = self.calculate_usage_charges(
                    query_result.summaries,
                    meters,
                    query_result.summaries[0].currency,
                )
                if charges.total_amount == 0:
                    continue

                if config.auto_invoice:
                    await create_invoice(subscription.customer_id, charges)
                    invoices_created += 1

                charges_succeeded += 1
            except Exception as e:
                charges_failed += 1
                errors.append(
                    UsageBillingJobError(
                        subscription_id=subscription.id,
                        customer_id=subscription.customer_id,
                        error=str(e) or e.__class__.__name__,
                    )
                )
                log_span_event(
                    f"Usage billing failed for subscription {subscription.id}",
                    {"subscription_id": subscription.id, "error": str(e)},
                )
                logger.error(
                    f"Usage billing failed for subscription {subscription.id}: {e}",
                    exc_info=True,
                )

        logger.info(
            f"Usage billing job {config.name} finished: {charges_succeeded} charged, {charges_failed} failed",
            extra={
                "job_id": job_id,
                "invoices_created": invoices_created,
                "charges_failed": charges_failed,
            },
        )

        return UsageBillingJobResult(
            job_id=job_id,
            executed_at=executed_at,
            processed_count=len(subscriptions),
            invoices_created=invoices_created,
            charges_succeeded=charges_succeeded,
            charges_failed=charges_failed,
            errors=errors,
        )
