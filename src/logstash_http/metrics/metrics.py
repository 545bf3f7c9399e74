"""
Async-first delivery metrics for logstash_http.

Implements minimal Prometheus-compatible counters and histograms for the
batching and delivery path.

Design goals:
- Pure async/await, no blocking I/O
- Zero global state; instances are sink-scoped or shared explicitly
- Safe no-op behavior when metrics are disabled by settings
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any

from prometheus_client import CollectorRegistry, Counter, Histogram


@dataclass
class DeliveryMetrics:
    """Captured runtime metrics for quick assertions in tests."""

    events_submitted: int = 0
    events_delivered: int = 0
    events_dropped: int = 0
    requests: int = 0
    flushes: int = 0
    errors_by_kind: dict[str, int] = field(default_factory=dict)


class MetricsCollector:
    """Async metrics collector.

    When metrics are disabled all exporter calls are no-ops while basic
    in-memory counters are still tracked for tests.
    """

    def __init__(self, *, enabled: bool = False) -> None:
        self._enabled = bool(enabled)
        # Threading lock: render failures are counted from emit() on any thread
        self._lock = threading.Lock()
        self._state = DeliveryMetrics()

        self._c_submitted: Any | None = None
        self._c_delivered: Any | None = None
        self._c_dropped: Any | None = None
        self._c_requests: Any | None = None
        self._c_errors: Any | None = None
        self._h_batch_size: Any | None = None
        self._h_flush_latency: Any | None = None
        self._registry: CollectorRegistry | None = None

        if self._enabled:
            # Isolated registry to avoid global duplication in tests
            self._registry = CollectorRegistry()
            self._c_submitted = Counter(
                "logstash_http_events_submitted_total",
                "Total number of events accepted into a sink buffer",
                registry=self._registry,
            )
            self._c_delivered = Counter(
                "logstash_http_events_delivered_total",
                "Total number of events acknowledged by the endpoint",
                registry=self._registry,
            )
            self._c_dropped = Counter(
                "logstash_http_events_dropped_total",
                "Total number of events lost to render or delivery failures",
                registry=self._registry,
            )
            self._c_requests = Counter(
                "logstash_http_requests_total",
                "Total number of POST requests attempted",
                registry=self._registry,
            )
            self._c_errors = Counter(
                "logstash_http_errors_total",
                "Total number of render and delivery errors",
                ["kind"],
                registry=self._registry,
            )
            self._h_batch_size = Histogram(
                "logstash_http_batch_size",
                "Number of documents taken per flush",
                buckets=(1, 5, 10, 25, 50, 100, 250, 500, 1000),
                registry=self._registry,
            )
            self._h_flush_latency = Histogram(
                "logstash_http_flush_seconds",
                "Latency of one flush pass",
                buckets=(
                    0.001,
                    0.005,
                    0.01,
                    0.025,
                    0.05,
                    0.1,
                    0.25,
                    0.5,
                    1.0,
                    2.5,
                    5.0,
                ),
                registry=self._registry,
            )

    @property
    def is_enabled(self) -> bool:
        return self._enabled

    @property
    def registry(self) -> CollectorRegistry | None:
        """Expose the isolated Prometheus registry when enabled."""
        return self._registry

    def record_event_accepted(self) -> None:
        """Synchronous: counts one event accepted into the buffer."""
        with self._lock:
            self._state.events_submitted += 1
        if self._c_submitted is not None:
            self._c_submitted.inc()

    def record_render_failure(self) -> None:
        """Synchronous: a render failure drops the event before buffering."""
        with self._lock:
            self._state.events_dropped += 1
            self._state.errors_by_kind["RenderError"] = (
                self._state.errors_by_kind.get("RenderError", 0) + 1
            )
        if self._c_dropped is not None:
            self._c_dropped.inc()
        if self._c_errors is not None:
            self._c_errors.labels(kind="RenderError").inc()

    async def record_events_delivered(self, count: int = 1) -> None:
        with self._lock:
            self._state.events_delivered += count
        if self._c_delivered is not None:
            self._c_delivered.inc(count)

    async def record_events_dropped(self, count: int = 1) -> None:
        with self._lock:
            self._state.events_dropped += count
        if self._c_dropped is not None:
            self._c_dropped.inc(count)

    async def record_request(self) -> None:
        with self._lock:
            self._state.requests += 1
        if self._c_requests is not None:
            self._c_requests.inc()

    async def record_error(self, kind: str) -> None:
        with self._lock:
            self._state.errors_by_kind[kind] = (
                self._state.errors_by_kind.get(kind, 0) + 1
            )
        if self._c_errors is not None:
            self._c_errors.labels(kind=kind).inc()

    async def record_flush(self, *, batch_size: int, latency_seconds: float) -> None:
        with self._lock:
            self._state.flushes += 1
        if not self._enabled:
            return
        if self._h_batch_size is not None:
            self._h_batch_size.observe(batch_size)
        if self._h_flush_latency is not None:
            self._h_flush_latency.observe(latency_seconds)

    async def snapshot(self) -> DeliveryMetrics:
        with self._lock:
            return DeliveryMetrics(
                events_submitted=self._state.events_submitted,
                events_delivered=self._state.events_delivered,
                events_dropped=self._state.events_dropped,
                requests=self._state.requests,
                flushes=self._state.flushes,
                errors_by_kind=dict(self._state.errors_by_kind),
            )
