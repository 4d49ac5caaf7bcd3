"""In-process metrics for the search gateway."""

import time
from collections import defaultdict, deque
from contextlib import contextmanager
from dataclasses import asdict, dataclass
from threading import Lock
from typing import Any, Dict, List, Optional

from gateway.observability.logging import get_logger

logger = get_logger(__name__)


@dataclass
class TimerSummary:
    """Summary statistics for a timer."""
    count: int
    sum: float
    min: float
    max: float
    avg: float
    p50: float
    p95: float


class MetricsCollector:
    """Counters, gauges and timers keyed by name and labels."""

    def __init__(self, max_history: int = 1000):
        """Initialize metrics collector.

        Args:
            max_history: Number of durations kept per timer
        """
        self.max_history = max_history
        self._counters: Dict[str, int] = defaultdict(int)
        self._gauges: Dict[str, float] = {}
        self._timers: Dict[str, deque] = defaultdict(lambda: deque(maxlen=max_history))
        self._lock = Lock()

    def increment_counter(self, name: str, value: int = 1, labels: Optional[Dict[str, str]] = None):
        """Increment a counter metric."""
        with self._lock:
            key = self._make_key(name, labels)
            self._counters[key] += value

        logger.debug("Counter incremented", counter=key, value=value)

    def set_gauge(self, name: str, value: float, labels: Optional[Dict[str, str]] = None):
        """Set a gauge metric value."""
        with self._lock:
            self._gauges[self._make_key(name, labels)] = value

    def record_timer(self, name: str, duration: float, labels: Optional[Dict[str, str]] = None):
        """Record a duration in seconds."""
        with self._lock:
            self._timers[self._make_key(name, labels)].append(duration)

    @contextmanager
    def time_operation(self, name: str, labels: Optional[Dict[str, str]] = None):
        """Context manager to time an operation."""
        start_time = time.perf_counter()
        try:
            yield
        finally:
            self.record_timer(name, time.perf_counter() - start_time, labels)

    def get_counter(self, name: str, labels: Optional[Dict[str, str]] = None) -> int:
        with self._lock:
            return self._counters.get(self._make_key(name, labels), 0)

    def get_gauge(self, name: str, labels: Optional[Dict[str, str]] = None) -> Optional[float]:
        with self._lock:
            return self._gauges.get(self._make_key(name, labels))

    def get_timer_summary(self, name: str, labels: Optional[Dict[str, str]] = None) -> Optional[TimerSummary]:
        """Get timer summary statistics, or None if nothing was recorded."""
        with self._lock:
            values = self._timers.get(self._make_key(name, labels))
            if not values:
                return None
            return self._summarize(list(values))

    def get_all_metrics(self) -> Dict[str, Any]:
        """Get all metrics as a JSON-serializable dictionary."""
        with self._lock:
            return {
                "counters": dict(self._counters),
                "gauges": dict(self._gauges),
                "timers": {
                    key: asdict(self._summarize(list(values)))
                    for key, values in self._timers.items()
                    if values
                },
            }

    def reset_metrics(self):
        """Reset all metrics."""
        with self._lock:
            self._counters.clear()
            self._gauges.clear()
            self._timers.clear()

    @staticmethod
    def _make_key(name: str, labels: Optional[Dict[str, str]] = None) -> str:
        if not labels:
            return name
        label_str = ",".join(f"{k}={v}" for k, v in sorted(labels.items()))
        return f"{name}{{{label_str}}}"

    @staticmethod
    def _summarize(values: List[float]) -> TimerSummary:
        ordered = sorted(values)
        count = len(ordered)
        total = sum(ordered)

        def percentile(p: float) -> float:
            return ordered[int(p * (count - 1))]

        return TimerSummary(
            count=count,
            sum=total,
            min=ordered[0],
            max=ordered[-1],
            avg=total / count,
            p50=percentile(0.5),
            p95=percentile(0.95),
        )


# Global metrics collector instance
_metrics_collector: Optional[MetricsCollector] = None


def get_metrics_collector() -> MetricsCollector:
    """Get the global metrics collector instance."""
    global _metrics_collector

    if _metrics_collector is None:
        _metrics_collector = MetricsCollector()

    return _metrics_collector
