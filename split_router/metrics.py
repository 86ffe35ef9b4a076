"""Metric emission for routing calls.

Metrics are observational only. The default sink writes them as structlog
events so they land next to the routing logs; a deployment can inject any
object implementing MetricsSink instead.
"""

from __future__ import annotations

import time
from collections.abc import Iterator
from contextlib import contextmanager
from enum import Enum
from typing import Protocol

import structlog

logger = structlog.get_logger()


class MetricUnit(str, Enum):
    """Unit attached to a metric value."""

    MILLISECONDS = "Milliseconds"
    COUNT = "Count"


class MetricsSink(Protocol):
    """Protocol for metric backends."""

    def put_metric(self, name: str, value: float, unit: MetricUnit) -> None:
        """Record one metric value."""
        ...


class LogMetrics:
    """Metrics sink that emits a structlog event per metric."""

    def put_metric(self, name: str, value: float, unit: MetricUnit) -> None:
        logger.info("metric", name=name, value=value, unit=unit.value)


class RecordingMetrics:
    """Metrics sink that keeps values in memory (for tests and benchmarks)."""

    def __init__(self) -> None:
        self.values: dict[str, list[float]] = {}

    def put_metric(self, name: str, value: float, unit: MetricUnit) -> None:  # noqa: ARG002
        self.values.setdefault(name, []).append(value)

    def last(self, name: str) -> float | None:
        """Most recent value recorded under `name`, if any."""
        recorded = self.values.get(name)
        return recorded[-1] if recorded else None


@contextmanager
def timed(sink: MetricsSink, name: str) -> Iterator[None]:
    """Record the wall time of the enclosed block in milliseconds."""
    start = time.perf_counter()
    try:
        yield
    finally:
        sink.put_metric(name, (time.perf_counter() - start) * 1000, MetricUnit.MILLISECONDS)


# Default sink instance
DEFAULT_METRICS: MetricsSink = LogMetrics()
