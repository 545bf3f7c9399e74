"""
logstash-http - batching log shipper for the Logstash http input.

Events are rendered to JSON documents, buffered in memory, and flushed
periodically (or when a batch fills up) as HTTP POSTs, either one request
per event or one JSON array per batch.
"""

from ._version import __version__
from .core.buffer import BatchBuffer
from .core.channel import DeliveryChannel
from .core.errors import (
    ConfigurationError,
    DeliveryError,
    DeliveryRejected,
    ErrorCategory,
    LogstashHttpError,
    RenderError,
    TransportError,
    UnexpectedAcknowledgement,
)
from .core.events import EventLevel, LogEvent
from .core.scheduler import BatchScheduler, FlushReport
from .core.serialization import (
    SerializedView,
    render_event,
    render_mapping,
    serialize_batch,
)
from .core.settings import Settings
from .core.stdlib_bridge import LogstashHttpHandler, enable_stdlib_bridge
from .core.transport import SharedTransport
from .metrics.metrics import MetricsCollector
from .plugins.sinks.logstash_http import LogstashHttpSink, LogstashHttpSinkConfig

__all__ = [
    "__version__",
    # Sink
    "LogstashHttpSink",
    "LogstashHttpSinkConfig",
    "Settings",
    # Engine
    "BatchBuffer",
    "BatchScheduler",
    "DeliveryChannel",
    "FlushReport",
    "SharedTransport",
    "MetricsCollector",
    # Events and rendering
    "EventLevel",
    "LogEvent",
    "SerializedView",
    "render_event",
    "render_mapping",
    "serialize_batch",
    # stdlib logging
    "LogstashHttpHandler",
    "enable_stdlib_bridge",
    # Errors
    "ConfigurationError",
    "DeliveryError",
    "DeliveryRejected",
    "ErrorCategory",
    "LogstashHttpError",
    "RenderError",
    "TransportError",
    "UnexpectedAcknowledgement",
]
