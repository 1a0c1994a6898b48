from __future__ import annotations

import sys
from pathlib import Path

import pytest
from prometheus_client import CollectorRegistry

# Ensure repo root is on sys.path so `import queue_stats` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from queue_stats.core.metrics import (  # noqa: E402
    DESTINATION_CONFIG_LABEL,
    DESTINATION_NS_LABEL,
    DESTINATION_POD_LABEL,
    DESTINATION_REV_LABEL,
)

NAMESPACE = "default"
CONFIG = "helloworld-go"
REVISION = "helloworld-go-00001"
POD = "helloworld-go-00001-deployment-8ff587cc9-7g9gc"

LABELS = {
    DESTINATION_NS_LABEL: NAMESPACE,
    DESTINATION_CONFIG_LABEL: CONFIG,
    DESTINATION_REV_LABEL: REVISION,
    DESTINATION_POD_LABEL: POD,
}


class FakeClock:
    """Manually advanced clock for uptime assertions."""

    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def registry() -> CollectorRegistry:
    """A private registry per test; the global REGISTRY can't be reset."""
    return CollectorRegistry()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


def get_sample(
    registry: CollectorRegistry, name: str, labels: dict[str, str] | None = None
) -> float | None:
    """Read a gauge value for *labels* (defaults to the test identity)."""
    return registry.get_sample_value(name, labels=LABELS if labels is None else labels)
