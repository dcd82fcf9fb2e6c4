"""Usage storage providers - meters, prices, events and summaries."""

from packages.metering.providers.storage.interface import UsageStorageInterface
from packages.metering.providers.storage.factory import get_usage_storage

__all__ = [
    "UsageStorageInterface",
    "get_usage_storage",
]
