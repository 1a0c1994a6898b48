from __future__ import annotations

from dataclasses import dataclass

from queue_stats.core.metrics import (
    DESTINATION_CONFIG_LABEL,
    DESTINATION_NS_LABEL,
    DESTINATION_POD_LABEL,
    DESTINATION_REV_LABEL,
)


@dataclass(frozen=True, slots=True)
class RequestStatsReport:
    """Request statistics for one reporting interval.

    request_count:               non-proxied requests completed in the interval
    proxied_request_count:       proxied requests completed in the interval
    average_concurrency:         average non-proxied requests in flight
    average_proxied_concurrency: average proxied requests in flight

    The counts are totals for the interval; the concurrencies are already
    averages over it.
    """

    request_count: float = 0.0
    proxied_request_count: float = 0.0
    average_concurrency: float = 0.0
    average_proxied_concurrency: float = 0.0


@dataclass(frozen=True, slots=True)
class ReporterIdentity:
    """The workload instance a reporter publishes for."""

    namespace: str
    config: str
    revision: str
    pod: str

    def labels(self) -> dict[str, str]:
        return {
            DESTINATION_NS_LABEL: self.namespace,
            DESTINATION_CONFIG_LABEL: self.config,
            DESTINATION_REV_LABEL: self.revision,
            DESTINATION_POD_LABEL: self.pod,
        }
