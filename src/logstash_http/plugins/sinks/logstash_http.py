"""
Logstash HTTP sink.

Buffers rendered events and POSTs them to a Logstash ``http`` input, either
one request per event or one JSON array per batch (``bulk``). Delivery
failures are contained: they are reported through diagnostics, metrics and
the optional ``on_error`` callback, and never raised into the caller.
"""

from __future__ import annotations

import types
from typing import Any, Mapping

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ...core import diagnostics
from ...core.buffer import BatchBuffer
from ...core.channel import DEFAULT_ACK_BODY, DeliveryChannel
from ...core.errors import ConfigurationError, RenderError
from ...core.events import LogEvent
from ...core.scheduler import BatchScheduler, ErrorHandler, FlushReport, report_error
from ...core.serialization import (
    Renderer,
    SerializedView,
    render_event,
    render_mapping,
    to_document,
)
from ...core.settings import Settings
from ...core.transport import SharedTransport
from ...metrics.metrics import MetricsCollector
from ..utils import parse_plugin_config

__all__ = ["LogstashHttpSink", "LogstashHttpSinkConfig"]

_COMPONENT = "logstash-http-sink"


class LogstashHttpSinkConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    endpoint: str
    username: str | None = None
    password: str | None = None
    period_seconds: float = Field(default=2.0, gt=0.0)
    batch_size: int = Field(default=50, ge=1)
    bulk: bool = False
    inline_fields: bool = False
    timeout_seconds: float = Field(default=5.0, gt=0.0)
    headers: dict[str, str] = Field(default_factory=dict)
    ack_body: str = DEFAULT_ACK_BODY

    @field_validator("endpoint")
    @classmethod
    def _validate_endpoint(cls, value: str) -> str:
        value = value.strip()
        try:
            url = httpx.URL(value)
        except Exception as exc:
            raise ValueError(f"endpoint is not a valid URL: {exc}") from exc
        if url.scheme not in ("http", "https") or not url.host:
            raise ValueError("endpoint must be an absolute http(s) URL")
        return value

    @field_validator("headers", mode="before")
    @classmethod
    def _coerce_headers(cls, value: Mapping[str, str] | None) -> dict[str, str]:
        if value is None:
            return {}
        return dict(value)

    @property
    def has_credentials(self) -> bool:
        return bool(self.username) and bool(self.password)


def _default_renderer(inline_fields: bool) -> Renderer:
    def _render(event: Any) -> bytes:
        if isinstance(event, LogEvent):
            return render_event(event, inline_fields=inline_fields)
        if isinstance(event, Mapping):
            return render_mapping(event)
        raise RenderError(
            "No renderer for event type", event_type=type(event).__name__
        )

    return _render


class LogstashHttpSink:
    """Batching sink that ships JSON documents to Logstash over HTTP.

    Pass a ``SharedTransport`` to share one outbound client (and its
    one-request-at-a-time gate) between several sinks; the sink then never
    closes it. Without one, the sink creates a private transport and closes
    it on ``stop``.
    """

    name = "logstash-http"

    def __init__(
        self,
        config: LogstashHttpSinkConfig | dict | None = None,
        *,
        transport: SharedTransport | None = None,
        renderer: Renderer | None = None,
        metrics: MetricsCollector | None = None,
        on_error: ErrorHandler | None = None,
        **kwargs: Any,
    ) -> None:
        cfg = parse_plugin_config(LogstashHttpSinkConfig, config, **kwargs)
        self._config = cfg
        self._metrics = metrics
        self._on_error = on_error
        self._owns_transport = transport is None
        self._transport = transport or SharedTransport(
            timeout_seconds=cfg.timeout_seconds
        )
        self._renderer = renderer or _default_renderer(cfg.inline_fields)
        self._buffer = BatchBuffer()
        self._channel = DeliveryChannel(
            endpoint=cfg.endpoint,
            transport=self._transport,
            username=cfg.username,
            password=cfg.password,
            headers=cfg.headers,
            ack_body=cfg.ack_body,
        )
        self._scheduler = BatchScheduler(
            buffer=self._buffer,
            channel=self._channel,
            batch_size=cfg.batch_size,
            period_seconds=cfg.period_seconds,
            bulk=cfg.bulk,
            metrics=metrics,
            on_error=on_error,
            component=_COMPONENT,
        )
        if bool(cfg.username) != bool(cfg.password):
            diagnostics.warn(
                _COMPONENT,
                "incomplete credentials; sending without authorization",
                endpoint=cfg.endpoint,
            )

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        *,
        transport: SharedTransport | None = None,
        renderer: Renderer | None = None,
        on_error: ErrorHandler | None = None,
    ) -> LogstashHttpSink:
        """Build a sink from ``LOGSTASH_HTTP_*`` environment settings."""
        settings = settings or Settings()
        if not settings.sink.endpoint:
            raise ConfigurationError(
                "sink endpoint is required (LOGSTASH_HTTP_SINK__ENDPOINT)"
            )
        return cls(
            settings.sink.model_dump(),
            transport=transport,
            renderer=renderer,
            metrics=MetricsCollector(enabled=settings.core.enable_metrics),
            on_error=on_error,
        )

    @property
    def config(self) -> LogstashHttpSinkConfig:
        return self._config

    @property
    def transport(self) -> SharedTransport:
        return self._transport

    @property
    def metrics(self) -> MetricsCollector | None:
        return self._metrics

    @property
    def buffered(self) -> int:
        return len(self._buffer)

    async def start(self) -> None:
        await self._scheduler.start()

    async def stop(self) -> FlushReport:
        """Final flush, then release owned resources."""
        try:
            return await self._scheduler.stop()
        finally:
            if self._owns_transport:
                await self._transport.aclose()

    async def flush(self) -> FlushReport:
        return await self._scheduler.flush()

    def emit(self, event: Any) -> bool:
        """Render and buffer one event; never blocks on the network.

        Returns False when the event was dropped because rendering failed.
        """
        try:
            document = to_document(self._renderer(event))
        except Exception as exc:
            if isinstance(exc, RenderError):
                err = exc
            else:
                err = RenderError(
                    f"Event rendering failed: {exc}",
                    cause=exc,
                    event_type=type(event).__name__,
                )
            if self._metrics is not None:
                self._metrics.record_render_failure()
            report_error(_COMPONENT, err, self._on_error)
            return False
        self._accept(document)
        return True

    async def write(self, entry: dict[str, Any]) -> None:
        self.emit(entry)

    async def write_serialized(self, view: SerializedView) -> None:
        """Buffer an already-rendered document as-is."""
        self._accept(bytes(view.data))

    def _accept(self, document: bytes) -> None:
        size = self._buffer.add(document)
        if self._metrics is not None:
            self._metrics.record_event_accepted()
        self._scheduler.notify(size)

    async def health_check(self) -> bool:
        return self._scheduler.last_error is None and not self._transport.is_closed

    async def __aenter__(self) -> LogstashHttpSink:
        await self.start()
        return self

    async def __aexit__(
        self,
        _exc_type: type[BaseException] | None,
        _exc: BaseException | None,
        _tb: types.TracebackType | None,
    ) -> None:
        await self.stop()


# Plugin metadata for discovery
PLUGIN_METADATA = {
    "name": "logstash-http",
    "version": "1.0.0",
    "plugin_type": "sink",
    "entry_point": "logstash_http.plugins.sinks.logstash_http:LogstashHttpSink",
    "description": "Batching sink that POSTs JSON documents to a Logstash http input.",
    "author": "logstash-http",
    "api_version": "1.0",
}

# Mark Pydantic validators as used for vulture
_VULTURE_USED: tuple[object, ...] = (
    LogstashHttpSinkConfig._validate_endpoint,
    LogstashHttpSinkConfig._coerce_headers,
)
