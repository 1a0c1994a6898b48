"""Prometheus stats reporter: turns interval snapshots into gauges.

WHAT THE REPORTER RECEIVES
----------------------------
Once per reporting period, the upstream collector calls report() with a
RequestStatsReport covering the interval since the previous call:

  request_count=39, proxied_request_count=15,
  average_concurrency=3, average_proxied_concurrency=2

WHAT IT PUBLISHES
-------------------
  requests_per_second                  = request_count / period
  proxied_requests_per_second          = proxied_request_count / period
  average_concurrent_requests          = average_concurrency
  average_proxied_concurrent_requests  = average_proxied_concurrency
  process_uptime_seconds               = now - start_time

With a 2s period the example above becomes 19.5 req/s, 7.5 proxied
req/s, concurrency 3 and proxied concurrency 2.  A consumer reading
requests_per_second never needs to know how often we report.

Concurrency is NOT divided.  It is an average over the interval already;
a 10s interval with 3 requests in flight the whole time still had 3
requests in flight, not 0.3.

The period is the one the caller promised at construction.  The reporter
does not time the actual calls: if the caller reports every 2s but
configured 1s, every rate is off by 2x.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import timedelta
from typing import Protocol, runtime_checkable

from prometheus_client import REGISTRY, CollectorRegistry

from queue_stats.core.metrics import gauges_for
from queue_stats.models.stats import ReporterIdentity, RequestStatsReport

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class ReporterConfigError(ValueError):
    pass


@runtime_checkable
class StatsReporter(Protocol):
    def report(self, stats: RequestStatsReport) -> None:
        """Publish the snapshot for one reporting interval."""
        ...


class PrometheusStatsReporter:
    """Publishes request stats for one revision replica into a registry.

    Construction fails with ReporterConfigError when any identity field is
    empty (checked namespace, config, revision, pod; first failure wins)
    or when the reporting period is not positive.  Nothing is registered
    in that case.

    The registry is injectable and defaults to the process-wide REGISTRY.
    """

    def __init__(
        self,
        namespace: str,
        config: str,
        revision: str,
        pod: str,
        reporting_period: timedelta,
        *,
        registry: CollectorRegistry = REGISTRY,
        clock: Clock = time.monotonic,
    ) -> None:
        if not namespace:
            raise ReporterConfigError("namespace must not be empty")
        if not config:
            raise ReporterConfigError("config must not be empty")
        if not revision:
            raise ReporterConfigError("revision must not be empty")
        if not pod:
            raise ReporterConfigError("pod must not be empty")
        if reporting_period <= timedelta(0):
            raise ReporterConfigError("reporting period must be positive")

        self._identity = ReporterIdentity(
            namespace=namespace, config=config, revision=revision, pod=pod
        )
        self._reporting_period = reporting_period
        self._period_seconds = reporting_period.total_seconds()
        self._clock = clock

        # Bind the labeled children once; every report() overwrites the
        # same series for this identity.
        gauges = gauges_for(registry)
        labels = self._identity.labels()
        self._requests_per_second = gauges.requests_per_second.labels(**labels)
        self._proxied_requests_per_second = (
            gauges.proxied_requests_per_second.labels(**labels)
        )
        self._average_concurrent_requests = (
            gauges.average_concurrent_requests.labels(**labels)
        )
        self._average_proxied_concurrent_requests = (
            gauges.average_proxied_concurrent_requests.labels(**labels)
        )
        self._process_uptime_seconds = gauges.process_uptime_seconds.labels(**labels)

        self._start_time = clock()

        logger.info(
            "stats reporter created  namespace=%s config=%s revision=%s pod=%s period=%.3fs",
            namespace,
            config,
            revision,
            pod,
            self._period_seconds,
            extra={
                "namespace": namespace,
                "configuration": config,
                "revision": revision,
                "pod": pod,
                "reporting_period_s": self._period_seconds,
            },
        )

    @property
    def identity(self) -> ReporterIdentity:
        return self._identity

    @property
    def reporting_period(self) -> timedelta:
        return self._reporting_period

    @property
    def start_time(self) -> float:
        return self._start_time

    def uptime(self) -> float:
        """Seconds elapsed since the reporter was created."""
        return self._clock() - self._start_time

    def report(self, stats: RequestStatsReport) -> None:
        """Publish the snapshot, replacing the previous one for this identity.

        Inputs are not range-checked: negative or NaN values are
        published as given.
        """
        self._requests_per_second.set(stats.request_count / self._period_seconds)
        self._proxied_requests_per_second.set(
            stats.proxied_request_count / self._period_seconds
        )
        self._average_concurrent_requests.set(stats.average_concurrency)
        self._average_proxied_concurrent_requests.set(
            stats.average_proxied_concurrency
        )
        self._process_uptime_seconds.set(self.uptime())

        logger.debug(
            "reported  requests=%s proxied=%s concurrency=%s proxied_concurrency=%s",
            stats.request_count,
            stats.proxied_request_count,
            stats.average_concurrency,
            stats.average_proxied_concurrency,
        )
