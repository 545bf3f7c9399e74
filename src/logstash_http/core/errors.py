"""
Structured error taxonomy for the batching and delivery engine.

Every failure carries a category and a context mapping populated at the
point of failure (endpoint, status code, offending document index), so that
callers and diagnostics never have to reconstruct it later.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    RENDER = "render"
    TRANSPORT = "transport"
    DELIVERY = "delivery"
    CONFIG = "config"


class LogstashHttpError(Exception):
    """Base class for all errors raised by logstash_http."""

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory,
        context: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.category = category
        self.context: dict[str, Any] = dict(context or {})
        self.cause = cause

    @property
    def kind(self) -> str:
        """Short identifier used as a metrics label and diagnostics field."""
        return type(self).__name__

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "error": self.kind,
            "category": self.category.value,
            "message": self.message,
        }
        data.update(self.context)
        if self.cause is not None:
            data["cause"] = f"{type(self.cause).__name__}: {self.cause}"
        return data


class ConfigurationError(LogstashHttpError):
    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message, category=ErrorCategory.CONFIG, context=context)


class RenderError(LogstashHttpError):
    """The event renderer failed on one event; that event is dropped."""

    def __init__(
        self,
        message: str = "Event rendering failed",
        *,
        cause: BaseException | None = None,
        **context: Any,
    ) -> None:
        super().__init__(
            message, category=ErrorCategory.RENDER, context=context, cause=cause
        )


class DeliveryError(LogstashHttpError):
    """A single POST of one body did not succeed."""

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory = ErrorCategory.DELIVERY,
        endpoint: str | None = None,
        document_index: int | None = None,
        context: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        ctx: dict[str, Any] = {
            "endpoint": endpoint,
            "document_index": document_index,
        }
        ctx.update(context or {})
        super().__init__(message, category=category, context=ctx, cause=cause)
        self.endpoint = endpoint
        self.document_index = document_index


class TransportError(DeliveryError):
    """No response was obtained (connection, DNS, timeout, protocol)."""

    def __init__(
        self,
        message: str = "No response from endpoint",
        *,
        endpoint: str | None = None,
        document_index: int | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(
            message,
            category=ErrorCategory.TRANSPORT,
            endpoint=endpoint,
            document_index=document_index,
            cause=cause,
        )


class DeliveryRejected(DeliveryError):
    """The endpoint answered with a non-success status code."""

    def __init__(
        self,
        status_code: int,
        reason_phrase: str,
        *,
        endpoint: str | None = None,
        document_index: int | None = None,
    ) -> None:
        super().__init__(
            f"Can not send message to logstash. Response: {status_code} "
            f"Description: {reason_phrase}",
            endpoint=endpoint,
            document_index=document_index,
            context={"status_code": status_code, "reason_phrase": reason_phrase},
        )
        self.status_code = status_code
        self.reason_phrase = reason_phrase


class UnexpectedAcknowledgement(DeliveryError):
    """The endpoint answered 200 but the body was not the expected ack."""

    # Bodies are echoed into diagnostics; keep them bounded
    MAX_BODY_CHARS = 256

    def __init__(
        self,
        body: str,
        *,
        endpoint: str | None = None,
        document_index: int | None = None,
    ) -> None:
        super().__init__(
            "Logstash response status is not OK",
            endpoint=endpoint,
            document_index=document_index,
            context={"body": body[: self.MAX_BODY_CHARS]},
        )
        self.body = body


__all__ = [
    "ConfigurationError",
    "DeliveryError",
    "DeliveryRejected",
    "ErrorCategory",
    "LogstashHttpError",
    "RenderError",
    "TransportError",
    "UnexpectedAcknowledgement",
]
