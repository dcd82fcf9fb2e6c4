from enum import Enum


class Environment(str, Enum):
    """Environment profiles."""

    LOCAL = "local"
    DEV = "dev"
    STAGING = "staging"
    PRODUCTION = "production"


class StorageProvider(str, Enum):
    """Usage storage provider types."""

    MEMORY = "memory"
