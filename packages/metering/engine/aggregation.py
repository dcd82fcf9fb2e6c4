"""
Reduces raw usage events to the single quantity a billing period is priced on.
"""

from typing import Sequence

from packages.metering.models.domain.enums import AggregationType
from packages.metering.models.domain.usage import UsageEvent, UsageMeter


def aggregate_usage_events(events: Sequence[UsageEvent], meter: UsageMeter) -> float:
    """
    Aggregate usage events using the meter's aggregation type.

    An empty event list aggregates to 0 for every type. For "last", the event
    with the latest timestamp wins; between events with the same timestamp the
    one that comes later in the input wins. Unknown types aggregate as "sum".
    """
    if not events:
        return 0

    aggregation_type = meter.aggregation_type

    if aggregation_type == AggregationType.MAX:
        return max(event.quantity for event in events)

    if aggregation_type == AggregationType.LAST:
        latest = events[0]
        for event in events[1:]:
            if event.timestamp >= latest.timestamp:
                latest = event
        return latest.quantity

    if aggregation_type == AggregationType.COUNT:
        return len(events)

    return sum(event.quantity for event in events)
