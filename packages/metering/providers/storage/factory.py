"""
Factory for getting the usage storage provider instance.
"""

from typing import Optional

from common.core.config import settings
from common.core.constants import StorageProvider
from common.core.telemetry import get_logger
from packages.metering.providers.storage.interface import UsageStorageInterface
from packages.metering.providers.storage.memory_storage import MemoryUsageStorage

logger = get_logger(__name__)

# Global instance
_usage_storage: Optional[UsageStorageInterface] = None


def get_usage_storage() -> UsageStorageInterface:
    """
    Get the configured usage storage provider.

    Only the in-memory provider ships here; database-backed storage plugs in
    behind the same interface.

    Returns:
        UsageStorageInterface: The usage storage instance
    """
    global _usage_storage

    if _usage_storage is None:
        if settings.usage_storage_provider == StorageProvider.MEMORY:
            _usage_storage = MemoryUsageStorage()
            logger.info("Initialized memory usage storage provider")
        else:
            raise ValueError(
                f"Unsupported usage storage provider: {settings.usage_storage_provider}"
            )

    return _usage_storage
