"""
Internal diagnostics for non-fatal errors.

Sinks and the scheduler report contained failures here instead of raising.
Output is structured (one dict per diagnostic) and disabled unless
``core.internal_logging_enabled`` is set, e.g. via the
``LOGSTASH_HTTP_CORE__INTERNAL_LOGGING_ENABLED`` environment variable.
"""

from __future__ import annotations

import sys
import threading
import time
from typing import Any, Callable

import orjson

Writer = Callable[[dict[str, Any]], None]

# Cached after first lookup; tests reset it to None
_internal_logging_enabled: bool | None = None
_lock = threading.Lock()


def _default_writer(payload: dict[str, Any]) -> None:
    line = orjson.dumps(payload, default=str)
    buf = sys.stderr.buffer if hasattr(sys.stderr, "buffer") else None
    if buf is not None:
        buf.write(line + b"\n")
        buf.flush()
    else:  # pragma: no cover - replaced stderr without a buffer
        sys.stderr.write(line.decode("utf-8") + "\n")


_writer: Writer = _default_writer


def is_enabled() -> bool:
    global _internal_logging_enabled
    if _internal_logging_enabled is None:
        with _lock:
            if _internal_logging_enabled is None:
                try:
                    from .settings import Settings

                    _internal_logging_enabled = bool(
                        Settings().core.internal_logging_enabled
                    )
                except Exception:
                    _internal_logging_enabled = False
    return _internal_logging_enabled


def _emit(level: str, component: str, message: str, fields: dict[str, Any]) -> None:
    if not is_enabled():
        return
    payload: dict[str, Any] = {
        "timestamp": time.time(),
        "level": level,
        "component": component,
        "message": message,
    }
    payload.update(fields)
    try:
        _writer(payload)
    except Exception:
        # Diagnostics must never break the caller
        pass


def warn(component: str, message: str, **fields: Any) -> None:
    _emit("WARN", component, message, fields)


def debug(component: str, message: str, **fields: Any) -> None:
    _emit("DEBUG", component, message, fields)


def set_writer_for_tests(writer: Writer) -> None:
    global _writer
    _writer = writer


def _reset_for_tests() -> None:
    global _internal_logging_enabled, _writer
    _internal_logging_enabled = None
    _writer = _default_writer
