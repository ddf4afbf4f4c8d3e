"""Metrics sinks handed to providers and workflows through the execution context.

The core only ever calls the three ``MetricsCollector`` methods. Where the
numbers go is up to the sink:

- ``LoggingMetricsCollector`` writes DEBUG lines and keeps nothing.
- ``InMemoryMetricsCollector`` keeps counters, timings and gauges so callers
  (and tests) can inspect them.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Dict, List, Optional, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class MetricsCollector(Protocol):
    def increment(self, metric: str, value: float = 1) -> None: ...

    def timing(self, metric: str, duration_ms: float) -> None: ...

    def gauge(self, metric: str, value: float) -> None: ...


class LoggingMetricsCollector:
    """Metrics sink that only logs."""

    def __init__(self, log: Optional[logging.Logger] = None) -> None:
        self._log = log or logger

    def increment(self, metric: str, value: float = 1) -> None:
        self._log.debug(f"METRIC INCREMENT: {metric} +{value}")

    def timing(self, metric: str, duration_ms: float) -> None:
        self._log.debug(f"METRIC TIMING: {metric} {duration_ms:.2f}ms")

    def gauge(self, metric: str, value: float) -> None:
        self._log.debug(f"METRIC GAUGE: {metric} = {value}")


class InMemoryMetricsCollector:
    """Metrics sink that records everything it receives."""

    def __init__(self) -> None:
        self.counters: Dict[str, float] = defaultdict(float)
        self.timings: Dict[str, List[float]] = defaultdict(list)
        self.gauges: Dict[str, float] = {}

    def increment(self, metric: str, value: float = 1) -> None:
        self.counters[metric] += value

    def timing(self, metric: str, duration_ms: float) -> None:
        self.timings[metric].append(duration_ms)

    def gauge(self, metric: str, value: float) -> None:
        self.gauges[metric] = value

    def reset(self) -> None:
        self.counters.clear()
        self.timings.clear()
        self.gauges.clear()
