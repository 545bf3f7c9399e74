"""
Bridge from the standard ``logging`` module into a Logstash HTTP sink.

Records are converted to ``LogEvent`` instances and handed to
``sink.emit``; the handler itself never touches the network.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from .events import LogEvent, normalize_level

if TYPE_CHECKING:
    from ..plugins.sinks.logstash_http import LogstashHttpSink

# Attributes present on every LogRecord; anything else came from ``extra=``
_RESERVED_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "asctime", "taskName"}


def record_to_event(record: logging.LogRecord) -> LogEvent:
    properties: dict[str, Any] = {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RESERVED_ATTRS and not key.startswith("_")
    }
    properties["logger"] = record.name
    properties["module"] = record.module
    properties["line"] = record.lineno

    exception: str | None = None
    if record.exc_info:
        exception = logging.Formatter().formatException(record.exc_info)
    elif record.exc_text:
        exception = record.exc_text

    template = record.msg if isinstance(record.msg, str) else None
    return LogEvent(
        message=record.getMessage(),
        level=normalize_level(record.levelname),
        timestamp=datetime.fromtimestamp(record.created, tz=timezone.utc),
        message_template=template,
        properties=properties,
        exception=exception,
    )


class LogstashHttpHandler(logging.Handler):
    """``logging.Handler`` that forwards records to a sink's buffer."""

    def __init__(self, sink: LogstashHttpSink, level: int = logging.NOTSET) -> None:
        super().__init__(level=level)
        self.sink = sink

    def emit(self, record: logging.LogRecord) -> None:
        try:
            event = record_to_event(record)
        except Exception:
            self.handleError(record)
            return
        # Render failures are reported by the sink itself
        self.sink.emit(event)


def enable_stdlib_bridge(
    sink: LogstashHttpSink,
    *,
    level: int = logging.INFO,
    logger_name: str | None = None,
    remove_existing_handlers: bool = False,
) -> LogstashHttpHandler:
    """Attach a ``LogstashHttpHandler`` to a stdlib logger (root by default)."""
    target = logging.getLogger(logger_name)
    if remove_existing_handlers:
        for existing in list(target.handlers):
            target.removeHandler(existing)
    handler = LogstashHttpHandler(sink, level=level)
    target.addHandler(handler)
    if target.level == logging.NOTSET or target.level > level:
        target.setLevel(level)
    return handler
