from __future__ import annotations

from typing import Protocol, runtime_checkable

from .logstash_http import LogstashHttpSink, LogstashHttpSinkConfig


@runtime_checkable
class BaseSink(Protocol):
    """Base async sink interface.

    Sinks are responsible for emitting finalized log entries to an external
    destination. Implementations should be non-blocking and resilient; errors
    must be contained and must not crash the host pipeline.
    """

    async def start(self) -> None:  # Optional lifecycle hook
        ...

    async def stop(self) -> object:  # Optional lifecycle hook
        ...

    async def write(self, _entry: dict) -> None:  # noqa: ARG002, D401
        """Write a single structured log entry to the sink destination."""
        ...


__all__ = [
    "BaseSink",
    "LogstashHttpSink",
    "LogstashHttpSinkConfig",
]
