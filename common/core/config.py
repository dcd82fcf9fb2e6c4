from typing import Dict, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

from common.core.constants import Environment, StorageProvider


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Environment Profile
    environment: Environment = Environment.LOCAL

    app_name: str = "usage-billing"
    log_level: str = "INFO"

    # OpenTelemetry (exporting is off unless an endpoint is configured)
    otel_enabled: bool = False
    otel_service_name: str = "usage-billing"
    otel_service_version: str = "0.1.0"
    otel_exporter_endpoint: Optional[str] = None  # e.g. https://collector:4318/v1/traces
    otel_exporter_headers: Dict[str, str] = {}

    # Usage Storage
    usage_storage_provider: StorageProvider = StorageProvider.MEMORY

    # Usage Billing Defaults
    default_currency: str = "USD"
    default_aggregation_type: str = "sum"

    # Deduplicate recorded events by idempotency key
    enable_idempotency: bool = True
    idempotency_ttl_hours: int = 24

    # Usage billing job
    grace_period_hours: int = 24
    usage_billing_schedule: str = "0 0 * * *"  # Daily at midnight

    @property
    def tracing_export_enabled(self) -> bool:
        """Spans are exported only when telemetry is on and has a destination."""
        return self.otel_enabled and bool(self.otel_exporter_endpoint)


settings = Settings()
