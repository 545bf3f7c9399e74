"""
Timer- and size-triggered flushing of a ``BatchBuffer`` through a channel.

State machine per instance: ``Idle -> Flushing -> Idle``. Both triggers (the
period elapsing, or ``notify`` seeing the buffer reach ``batch_size``) funnel
into the same ``flush``, which is guarded by a per-instance lock so that
flushes of one scheduler never overlap. ``stop`` performs one final forced
flush of whatever is still buffered.

Failures are collected, never short-circuited: in non-bulk mode every
document gets its own attempt even if an earlier one failed. Nothing is
retried and nothing is re-buffered.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Callable

from ..metrics.metrics import MetricsCollector
from . import diagnostics
from .buffer import BatchBuffer
from .channel import DeliveryChannel
from .errors import DeliveryError, LogstashHttpError
from .serialization import Document, serialize_batch

ErrorHandler = Callable[[LogstashHttpError], None]


@dataclass
class FlushReport:
    """Outcome of one flush pass."""

    documents: int = 0
    requests: int = 0
    delivered: int = 0
    errors: list[DeliveryError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def dropped(self) -> int:
        return self.documents - self.delivered


def report_error(
    component: str,
    error: LogstashHttpError,
    on_error: ErrorHandler | None,
) -> None:
    """Surface a contained failure to diagnostics and the caller's handler."""
    diagnostics.warn(
        component,
        "failed to deliver log" if isinstance(error, DeliveryError) else "dropped log",
        error=error.kind,
        detail=error.message,
        **error.context,
    )
    if on_error is None:
        return
    try:
        on_error(error)
    except Exception as exc:
        diagnostics.warn(component, "error handler raised", error=str(exc))


class BatchScheduler:
    """Drives flushes of one buffer; at most one flush in flight at a time."""

    def __init__(
        self,
        *,
        buffer: BatchBuffer,
        channel: DeliveryChannel,
        batch_size: int,
        period_seconds: float,
        bulk: bool = False,
        metrics: MetricsCollector | None = None,
        on_error: ErrorHandler | None = None,
        component: str = "logstash-http-sink",
    ) -> None:
        if batch_size <= 0:
            raise ValueError("batch_size must be > 0")
        if period_seconds <= 0:
            raise ValueError("period_seconds must be > 0")
        self._buffer = buffer
        self._channel = channel
        self._batch_size = batch_size
        self._period_seconds = period_seconds
        self._bulk = bulk
        self._metrics = metrics
        self._on_error = on_error
        self._component = component

        self._flush_lock = asyncio.Lock()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._trigger: asyncio.Event | None = None
        self._task: asyncio.Task[None] | None = None
        self._stopping = False

        self.last_error: DeliveryError | None = None
        self.last_success: bool | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def bulk(self) -> bool:
        return self._bulk

    async def start(self) -> None:
        if self.is_running:
            return
        self._stopping = False
        self._loop = asyncio.get_running_loop()
        self._trigger = asyncio.Event()
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> FlushReport:
        """Stop the timer, then drain the buffer with one last flush."""
        self._stopping = True
        task = self._task
        if task is not None:
            if self._trigger is not None:
                self._trigger.set()
            try:
                await task
            finally:
                self._task = None
        report = await self.flush()
        self._loop = None
        self._trigger = None
        return report

    def notify(self, size: int) -> None:
        """Called after each buffer append with the new buffer size."""
        if size >= self._batch_size:
            self.request_flush()

    def request_flush(self) -> None:
        """Wake the flush loop; safe to call from any thread.

        Without a running loop this is a no-op and documents stay buffered
        until the next explicit ``flush`` or ``stop``.
        """
        loop = self._loop
        trigger = self._trigger
        if loop is None or trigger is None:
            return
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is loop:
            trigger.set()
            return
        try:
            loop.call_soon_threadsafe(trigger.set)
        except RuntimeError:
            # Loop already closed; the final flush picks the documents up
            pass

    async def flush(self) -> FlushReport:
        async with self._flush_lock:
            return await self._flush_locked()

    async def _run(self) -> None:
        trigger = self._trigger
        if trigger is None:
            return
        while not self._stopping:
            try:
                await asyncio.wait_for(trigger.wait(), timeout=self._period_seconds)
            except asyncio.TimeoutError:
                pass
            trigger.clear()
            if self._stopping:
                return
            try:
                await self.flush()
            except Exception as exc:  # noqa: BLE001
                # Keep the timer alive; an unexpected fault loses this batch only
                diagnostics.warn(
                    self._component,
                    "flush error",
                    error=type(exc).__name__,
                    detail=str(exc),
                )

    async def _flush_locked(self) -> FlushReport:
        documents = self._buffer.take_and_reset()
        report = FlushReport(documents=len(documents))
        if not documents:
            return report

        started = time.perf_counter()
        for offset in range(0, len(documents), self._batch_size):
            chunk = documents[offset : offset + self._batch_size]
            await self._deliver_chunk(chunk, offset, report)

        if self._metrics is not None:
            await self._metrics.record_flush(
                batch_size=len(documents),
                latency_seconds=time.perf_counter() - started,
            )
        diagnostics.debug(
            self._component,
            "flush complete",
            documents=report.documents,
            requests=report.requests,
            delivered=report.delivered,
            errors=len(report.errors),
        )
        return report

    async def _deliver_chunk(
        self, chunk: list[Document], offset: int, report: FlushReport
    ) -> None:
        bodies = serialize_batch(chunk, bulk=self._bulk)
        if self._bulk:
            # One body for the whole chunk; it fails or succeeds as a unit
            await self._attempt(bodies[0], None, len(chunk), report)
            return
        for index, body in enumerate(bodies):
            await self._attempt(body, offset + index, 1, report)

    async def _attempt(
        self,
        body: bytes,
        document_index: int | None,
        count: int,
        report: FlushReport,
    ) -> None:
        report.requests += 1
        if self._metrics is not None:
            await self._metrics.record_request()
        try:
            await self._channel.deliver(body, document_index=document_index)
        except DeliveryError as err:
            if count > 1:
                err.context["documents"] = count
            report.errors.append(err)
            self.last_error = err
            self.last_success = False
            if self._metrics is not None:
                await self._metrics.record_events_dropped(count)
                await self._metrics.record_error(err.kind)
            report_error(self._component, err, self._on_error)
            return
        report.delivered += count
        self.last_error = None
        self.last_success = True
        if self._metrics is not None:
            await self._metrics.record_events_delivered(count)
