"""
Rendering of single events and serialization of batches into request bodies.

Documents are handled as UTF-8 ``bytes`` end to end. Batch serialization is
pure concatenation: documents are assumed to already be valid JSON text and
are never re-encoded or escaped.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping, Sequence, Union

import orjson

from .errors import RenderError
from .events import LogEvent

Document = bytes
Renderer = Callable[[Any], Union[bytes, str]]

_BULK_OPEN = b"["
_BULK_SEPARATOR = b","
_BULK_CLOSE = b"]"


def _default(obj: Any) -> Any:
    """Default serializer hook for unsupported types.

    Log properties are best effort: anything orjson cannot encode natively
    is rendered through ``str()``.
    """
    if hasattr(obj, "model_dump"):
        return obj.model_dump(exclude_none=True)
    if isinstance(obj, (set, frozenset)):
        return list(obj)
    return str(obj)


@dataclass
class SerializedView:
    """A lightweight container exposing an already-rendered document."""

    data: bytes

    def __bytes__(self) -> bytes:
        return self.data


def _dumps(payload: Any) -> bytes:
    try:
        return orjson.dumps(payload, default=_default)
    except (TypeError, orjson.JSONEncodeError) as e:
        raise RenderError("Serialization failed", cause=e) from e


def render_event(event: LogEvent, *, inline_fields: bool = False) -> bytes:
    """Render one event as a compact Logstash-friendly JSON document.

    With ``inline_fields`` the event properties are merged into the top
    level; reserved keys (``@timestamp``, ``level``...) are never replaced
    by a property of the same name.
    """
    doc: dict[str, Any] = {
        "@timestamp": event.timestamp.isoformat(),
        "level": event.level.value,
        "messageTemplate": event.message_template or event.message,
        "message": event.message,
    }
    if event.exception:
        doc["exception"] = event.exception
    if event.properties:
        if inline_fields:
            for key, value in event.properties.items():
                doc.setdefault(key, value)
        else:
            doc["fields"] = dict(event.properties)
    return _dumps(doc)


def render_mapping(entry: Mapping[str, Any]) -> bytes:
    """Render an already-structured entry (e.g. a pipeline envelope)."""
    return _dumps(dict(entry))


def to_document(rendered: bytes | bytearray | memoryview | str) -> Document:
    """Normalize renderer output into the ``bytes`` the buffer stores."""
    if isinstance(rendered, bytes):
        return rendered
    if isinstance(rendered, str):
        return rendered.encode("utf-8")
    if isinstance(rendered, (bytearray, memoryview)):
        return bytes(rendered)
    raise RenderError(
        "Renderer returned an unsupported type",
        rendered_type=type(rendered).__name__,
    )


def serialize_bulk(documents: Sequence[Document]) -> bytes:
    """Join documents into one JSON array body: ``[d1,d2,...]``.

    A single document is still wrapped; bulk bodies are always arrays.
    """
    if not documents:
        raise ValueError("cannot serialize an empty batch")
    return _BULK_OPEN + _BULK_SEPARATOR.join(documents) + _BULK_CLOSE


def serialize_batch(documents: Sequence[Document], *, bulk: bool) -> list[bytes]:
    """Produce the request bodies for one batch.

    Bulk mode yields exactly one body; otherwise one body per document,
    unmodified and in order.
    """
    if not documents:
        raise ValueError("cannot serialize an empty batch")
    if bulk:
        return [serialize_bulk(documents)]
    return list(documents)


__all__ = [
    "Document",
    "Renderer",
    "SerializedView",
    "render_event",
    "render_mapping",
    "serialize_batch",
    "serialize_bulk",
    "to_document",
]
