"""Reporter metrics using the Prometheus client library.

This module defines every series the stats reporter publishes in one
place, a single inventory shared by the write path (the reporter) and
anything that reads the values back (tests, debugging tools).

WHY GAUGES (NOT COUNTERS)
---------------------------
The upstream collector hands us a snapshot per reporting interval:
"39 requests completed in the last 2 seconds, 3 in flight on average".
We publish the NORMALIZED value of that snapshot (19.5 req/s), and the
next snapshot replaces it.  A value that is overwritten each tick and
can go down is a GAUGE.  A counter would only ever accumulate.

THE LABEL SCHEMA
-----------------
Every series carries the same four labels identifying the workload:

  destination_namespace     the namespace the revision runs in
  destination_configuration the logical service
  destination_revision      the versioned deployment
  destination_pod           the replica

The names are a contract between the writer and every reader.  A reader
asking for a label combination with a misspelled label name gets "not
found", not a wrong value, so both sides import the constants below
instead of typing the strings.

ONE REGISTRY, MANY REPORTERS
------------------------------
A CollectorRegistry refuses to register the same metric name twice.
Several reporters (one per replica in a multi-tenant host) share one
registry, so the gauges are registered once per registry by
gauges_for() and every later caller binds to the same vectors.
"""

from __future__ import annotations

import threading
import weakref
from dataclasses import dataclass, fields

from prometheus_client import CollectorRegistry, Gauge

# ---------------------------------------------------------------------------
# Label schema
# ---------------------------------------------------------------------------

DESTINATION_NS_LABEL = "destination_namespace"
DESTINATION_CONFIG_LABEL = "destination_configuration"
DESTINATION_REV_LABEL = "destination_revision"
DESTINATION_POD_LABEL = "destination_pod"

REPORTER_LABELS = (
    DESTINATION_NS_LABEL,
    DESTINATION_CONFIG_LABEL,
    DESTINATION_REV_LABEL,
    DESTINATION_POD_LABEL,
)

# ---------------------------------------------------------------------------
# Metric names
# ---------------------------------------------------------------------------

REQUESTS_PER_SECOND = "requests_per_second"
PROXIED_REQUESTS_PER_SECOND = "proxied_requests_per_second"
AVERAGE_CONCURRENT_REQUESTS = "average_concurrent_requests"
AVERAGE_PROXIED_CONCURRENT_REQUESTS = "average_proxied_concurrent_requests"
PROCESS_UPTIME_SECONDS = "process_uptime_seconds"


@dataclass(frozen=True, slots=True)
class ReporterGauges:
    """The five gauge vectors registered in one registry."""

    requests_per_second: Gauge
    proxied_requests_per_second: Gauge
    average_concurrent_requests: Gauge
    average_proxied_concurrent_requests: Gauge
    process_uptime_seconds: Gauge


def _new_gauges() -> ReporterGauges:
    return ReporterGauges(
        requests_per_second=Gauge(
            REQUESTS_PER_SECOND,
            "Number of requests received since last Stat",
            REPORTER_LABELS,
            registry=None,
        ),
        proxied_requests_per_second=Gauge(
            PROXIED_REQUESTS_PER_SECOND,
            "Number of proxied requests received since last Stat",
            REPORTER_LABELS,
            registry=None,
        ),
        average_concurrent_requests=Gauge(
            AVERAGE_CONCURRENT_REQUESTS,
            "Number of requests currently being handled by this pod",
            REPORTER_LABELS,
            registry=None,
        ),
        average_proxied_concurrent_requests=Gauge(
            AVERAGE_PROXIED_CONCURRENT_REQUESTS,
            "Number of proxied requests currently being handled by this pod",
            REPORTER_LABELS,
            registry=None,
        ),
        process_uptime_seconds=Gauge(
            PROCESS_UPTIME_SECONDS,
            "The number of seconds that the process has been up",
            REPORTER_LABELS,
            registry=None,
        ),
    )


def _register_all(registry: CollectorRegistry, gauges: ReporterGauges) -> None:
    """Register every gauge or none of them."""
    registered: list[Gauge] = []
    try:
        for field in fields(gauges):
            gauge = getattr(gauges, field.name)
            registry.register(gauge)
            registered.append(gauge)
    except ValueError:
        for gauge in registered:
            registry.unregister(gauge)
        raise


_gauges_by_registry: weakref.WeakKeyDictionary[CollectorRegistry, ReporterGauges] = (
    weakref.WeakKeyDictionary()
)
_gauges_lock = threading.Lock()


def gauges_for(registry: CollectorRegistry) -> ReporterGauges:
    """Return the reporter gauges of *registry*, registering them on first use.

    A name clash with a collector already in *registry* raises ValueError
    and leaves the registry as it was.
    """
    with _gauges_lock:
        gauges = _gauges_by_registry.get(registry)
        if gauges is None:
            gauges = _new_gauges()
            _register_all(registry, gauges)
            _gauges_by_registry[registry] = gauges
        return gauges
