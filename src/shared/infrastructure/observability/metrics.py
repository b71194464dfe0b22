"""
Metrics Collection
In-process counters and latency summaries, exported through /health
"""
from __future__ import annotations

import threading
from collections import defaultdict
from typing import Any

from src.shared.infrastructure.observability.logger import get_logger

logger = get_logger(__name__)


class MetricsCollector:
    """
    Collects application metrics for observability.

    Supports:
    - Counters (monotonically increasing values)
    - Histograms (distributions of values, summarised on export)

    Resolution calls run concurrently, so updates are guarded by a lock.
    """

    def __init__(self, enabled: bool = True) -> None:
        self.enabled = enabled
        self._lock = threading.Lock()
        self._counters: dict[str, float] = defaultdict(float)
        self._histograms: dict[str, list[float]] = defaultdict(list)

    def increment_counter(self, name: str, value: float = 1.0, **labels: Any) -> None:
        """
        Increment a counter metric.

        Args:
            name: Metric name (e.g., "resolutions_total")
            value: Amount to increment by
            **labels: Metric labels (e.g., strategy="poll", outcome="resolved")
        """
        if not self.enabled:
            return

        key = self._make_key(name, labels)
        with self._lock:
            self._counters[key] += value

        logger.debug("Counter incremented", metric=name, value=value, labels=labels)

    def observe_histogram(self, name: str, value: float, **labels: Any) -> None:
        """Add an observation to a histogram metric."""
        if not self.enabled:
            return

        key = self._make_key(name, labels)
        with self._lock:
            self._histograms[key].append(value)

    def counter_value(self, name: str, **labels: Any) -> float:
        with self._lock:
            return self._counters.get(self._make_key(name, labels), 0.0)

    def get_metrics(self) -> dict[str, Any]:
        """
        Get all collected metrics (for debugging/export).

        Returns:
            Dictionary of all metrics
        """
        with self._lock:
            return {
                "counters": dict(self._counters),
                "histograms": {
                    k: {
                        "count": len(v),
                        "sum": sum(v),
                        "min": min(v) if v else 0,
                        "max": max(v) if v else 0,
                    }
                    for k, v in self._histograms.items()
                },
            }

    def reset_metrics(self) -> None:
        """Reset all collected metrics (for testing)."""
        with self._lock:
            self._counters.clear()
            self._histograms.clear()

    @staticmethod
    def _make_key(name: str, labels: dict[str, Any]) -> str:
        """Create a unique key from metric name and labels."""
        label_str = ",".join(f"{k}={v}" for k, v in sorted(labels.items()))
        return f"{name}{{{label_str}}}" if label_str else name
