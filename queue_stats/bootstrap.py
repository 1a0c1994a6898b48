"""Hosting-process wiring: settings → logging → reporter → reporting loop.

This module is a library entry point, not a command: the process that
owns the request counters imports it, passes its StatsSource (whatever
gathers request counts) and awaits serve().  Without a source there is
nothing to report, so no ``python -m`` entry is provided.

Settings are read from the environment when serve() is called, not at
import.  A bad identity fails here, before the loop starts.
"""

from __future__ import annotations

import asyncio
import logging
import time

from prometheus_client import REGISTRY, CollectorRegistry

from queue_stats.core.config import Settings, load_settings
from queue_stats.core.logging import setup_logging
from queue_stats.reporting_loop import StatsSource, run_reporting_loop
from queue_stats.services.stats_reporter import (
    Clock,
    PrometheusStatsReporter,
    ReporterConfigError,
)

logger = logging.getLogger(__name__)


def build_reporter(
    settings: Settings,
    *,
    registry: CollectorRegistry = REGISTRY,
    clock: Clock = time.monotonic,
) -> PrometheusStatsReporter:
    try:
        return PrometheusStatsReporter(
            settings.serving_namespace,
            settings.serving_configuration,
            settings.serving_revision,
            settings.serving_pod,
            settings.reporting_period,
            registry=registry,
            clock=clock,
        )
    except ReporterConfigError as exc:
        logger.error("stats reporter failed to start: %s", exc)
        raise


async def serve(
    source: StatsSource,
    settings: Settings | None = None,
    *,
    registry: CollectorRegistry = REGISTRY,
    stop: asyncio.Event | None = None,
) -> int:
    """Run the reporter for this replica until *stop* is set."""
    settings = settings or load_settings()
    setup_logging(settings.log_level, json_format=settings.log_json)

    reporter = build_reporter(settings, registry=registry)
    logger.info(
        "stats reporter started  env=%s revision=%s pod=%s",
        settings.app_env,
        settings.serving_revision,
        settings.serving_pod,
    )
    return await run_reporting_loop(
        reporter, source, settings.reporting_period, stop=stop
    )
