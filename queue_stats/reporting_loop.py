"""Periodic reporting loop: the caller that drives report() once per tick.

THE LOOP
---------
  1. Wait one reporting period (or until asked to stop)
  2. Take the interval snapshot from the stats source
  3. Hand it to the reporter
  4. Log failures and move on to the next tick

The reporter divides counts by the CONFIGURED period, so this loop must
tick at that same period.  Pass the same timedelta to both.

FAILURE POLICY
---------------
A misconfigured reporter never gets here: construction fails at startup.
A failure during one tick (the source raising, the registry rejecting a
write) is logged with its traceback and the loop carries on.  The next
tick publishes a fresh snapshot, so one lost tick costs one stale value.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import timedelta
from typing import Protocol, runtime_checkable

from queue_stats.models.stats import RequestStatsReport
from queue_stats.services.stats_reporter import StatsReporter

logger = logging.getLogger(__name__)


@runtime_checkable
class StatsSource(Protocol):
    def take(self) -> RequestStatsReport:
        """Return the stats for the interval since the previous take()."""
        ...


async def _wait(stop: asyncio.Event, seconds: float) -> bool:
    """Sleep up to *seconds*; return True if *stop* was set meanwhile."""
    try:
        await asyncio.wait_for(stop.wait(), timeout=seconds)
    except asyncio.TimeoutError:
        return False
    return True


async def run_reporting_loop(
    reporter: StatsReporter,
    source: StatsSource,
    period: timedelta,
    *,
    stop: asyncio.Event | None = None,
    max_ticks: int | None = None,
) -> int:
    """Report one snapshot per period until stopped.

    Returns the number of ticks that reported successfully.
    """
    stop = stop or asyncio.Event()
    period_s = period.total_seconds()
    logger.info("reporting loop started  period=%.3fs", period_s)

    tick = 0
    reported = 0
    while max_ticks is None or tick < max_ticks:
        if await _wait(stop, period_s):
            break
        tick += 1
        try:
            reporter.report(source.take())
            reported += 1
        except Exception:
            logger.exception("report failed on tick %d", tick, extra={"tick": tick})

    logger.info("reporting loop stopped  ticks=%d reported=%d", tick, reported)
    return reported
