"""
Log event record consumed by the default renderer.

Events are created by the application (or the stdlib bridge), rendered
exactly once when they enter a sink, and then discarded.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping


class EventLevel(str, Enum):
    VERBOSE = "Verbose"
    DEBUG = "Debug"
    INFORMATION = "Information"
    WARNING = "Warning"
    ERROR = "Error"
    FATAL = "Fatal"


# stdlib level names -> Logstash-facing level names
_STDLIB_LEVELS: dict[str, EventLevel] = {
    "NOTSET": EventLevel.VERBOSE,
    "DEBUG": EventLevel.DEBUG,
    "INFO": EventLevel.INFORMATION,
    "WARNING": EventLevel.WARNING,
    "WARN": EventLevel.WARNING,
    "ERROR": EventLevel.ERROR,
    "CRITICAL": EventLevel.FATAL,
    "FATAL": EventLevel.FATAL,
}


def normalize_level(level: str | EventLevel) -> EventLevel:
    if isinstance(level, EventLevel):
        return level
    mapped = _STDLIB_LEVELS.get(level.upper())
    if mapped is not None:
        return mapped
    try:
        return EventLevel(level.capitalize())
    except ValueError:
        return EventLevel.INFORMATION


@dataclass(frozen=True)
class LogEvent:
    """Immutable log event with a timestamp and named properties."""

    message: str
    level: EventLevel = EventLevel.INFORMATION
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    message_template: str | None = None
    properties: Mapping[str, Any] = field(default_factory=dict)
    exception: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.timestamp, datetime):
            raise ValueError("Timestamp must be a datetime object")
        if self.timestamp.tzinfo is None:
            # Naive timestamps are taken to be UTC
            object.__setattr__(
                self, "timestamp", self.timestamp.replace(tzinfo=timezone.utc)
            )
        object.__setattr__(self, "level", normalize_level(self.level))

    @classmethod
    def create(
        cls,
        message: str,
        *,
        level: str | EventLevel = EventLevel.INFORMATION,
        **properties: Any,
    ) -> LogEvent:
        return cls(message=message, level=normalize_level(level), properties=properties)
