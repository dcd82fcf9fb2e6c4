"""Pure usage billing calculations: pricing, aggregation, summaries and periods."""

from packages.metering.engine.tiered_pricing import (
    calculate_tiered_amount,
    round_minor_units,
)
from packages.metering.engine.aggregation import aggregate_usage_events
from packages.metering.engine.summary import apply_amount_limits, create_usage_summary
from packages.metering.engine.billing_period import (
    get_billing_period,
    get_usage_billing_period,
)
from packages.metering.engine.validation import (
    validate_metered_price,
    validate_usage_event,
)
from packages.metering.engine.formatting import (
    format_usage_amount,
    format_usage_quantity,
)
from packages.metering.engine.tiers import (
    create_graduated_tiers,
    create_package_pricing,
    create_volume_tiers,
)

__all__ = [
    "calculate_tiered_amount",
    "round_minor_units",
    "aggregate_usage_events",
    "apply_amount_limits",
    "create_usage_summary",
    "get_billing_period",
    "get_usage_billing_period",
    "validate_metered_price",
    "validate_usage_event",
    "format_usage_amount",
    "format_usage_quantity",
    "create_graduated_tiers",
    "create_package_pricing",
    "create_volume_tiers",
]
