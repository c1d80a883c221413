"""In-process metrics reporting for the duplicate-detection engine.

Events are kept in memory so tests can assert on emitted telemetry without a
StatsD or OpenTelemetry backend. The API mirrors a subset of common metrics
clients.
"""

from __future__ import annotations

from dataclasses import dataclass
from threading import Lock
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class MetricEvent:
    """Represents a single metric emission."""

    name: str
    value: float
    attributes: Dict[str, Any]


class MetricsReporter:
    """Simple thread-safe metrics reporter."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._events: List[MetricEvent] = []

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def record_window_scan(
        self,
        *,
        candidate_id: str,
        window_size: int,
        duplicates: int,
        latency: float,
    ) -> None:
        """Emit comparison, duplicate and latency metrics for one window scan."""

        attributes = {"candidate_id": candidate_id}
        self._emit("dedup.classify.count", window_size, attributes)
        self._emit("dedup.duplicate.count", duplicates, attributes)
        self._emit("dedup.window.latency", latency, attributes)

    def record_merge(self, *, canonical_id: str, incoming_id: str) -> None:
        """Emit a merge counter."""

        attributes = {"canonical_id": canonical_id, "incoming_id": incoming_id}
        self._emit("dedup.merge.count", 1, attributes)

    def snapshot(self) -> List[MetricEvent]:
        """Return a copy of the emitted events for inspection."""

        with self._lock:
            return list(self._events)

    def reset(self) -> None:
        with self._lock:
            self._events.clear()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _emit(self, name: str, value: float, attributes: Optional[Dict[str, Any]] = None) -> None:
        event = MetricEvent(name=name, value=value, attributes=attributes or {})
        with self._lock:
            self._events.append(event)


_metrics_reporter: Optional[MetricsReporter] = None


def get_metrics_reporter() -> MetricsReporter:
    """Return a process-wide singleton metrics reporter."""

    global _metrics_reporter
    if _metrics_reporter is None:
        _metrics_reporter = MetricsReporter()
    return _metrics_reporter
