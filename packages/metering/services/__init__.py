"""Metering services."""

from packages.metering.services.usage_service import UsageService
from packages.metering.services.usage_billing_service import UsageBillingService

__all__ = [
    "UsageService",
    "UsageBillingService",
]
