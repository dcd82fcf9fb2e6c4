"""Metering providers - abstracted persistence for usage data."""

from packages.metering.providers.storage.factory import get_usage_storage

__all__ = [
    "get_usage_storage",
]
