"""
Delivery of one serialized body to the Logstash http input.
"""

from __future__ import annotations

import base64
from typing import Any

import httpx

from .errors import (
    DeliveryRejected,
    TransportError,
    UnexpectedAcknowledgement,
)
from .transport import SharedTransport

SUCCESS_STATUS = 200
DEFAULT_ACK_BODY = "ok"
JSON_CONTENT_TYPE = "application/json"


def basic_authorization(username: str | None, password: str | None) -> str | None:
    """Return a Basic ``Authorization`` header value, or None.

    Auth is enabled only when both username and password are non-empty.
    """
    if not username or not password:
        return None
    token = base64.b64encode(f"{username}:{password}".encode("utf-8"))
    return f"Basic {token.decode('ascii')}"


class DeliveryChannel:
    """POSTs request bodies through a (possibly shared) transport.

    Exactly one attempt is made per body. Outcomes:

    - no response -> ``TransportError``
    - status other than 200 -> ``DeliveryRejected``
    - 200 with a body other than ``ok`` -> ``UnexpectedAcknowledgement``
    - 200 with ``ok`` -> success
    """

    def __init__(
        self,
        *,
        endpoint: str,
        transport: SharedTransport,
        username: str | None = None,
        password: str | None = None,
        headers: dict[str, str] | None = None,
        ack_body: str = DEFAULT_ACK_BODY,
    ) -> None:
        self._endpoint = endpoint
        self._transport = transport
        self._authorization = basic_authorization(username, password)
        self._ack_body = ack_body
        self._headers = self._build_headers(headers)

    @property
    def endpoint(self) -> str:
        return self._endpoint

    @property
    def transport(self) -> SharedTransport:
        return self._transport

    @property
    def has_authorization(self) -> bool:
        return self._authorization is not None

    def _build_headers(self, extra: dict[str, str] | None) -> dict[str, str]:
        # Case-insensitive overwrite so a caller-supplied content type never wins
        headers = {
            k: v
            for k, v in (extra or {}).items()
            if k.lower() not in ("content-type", "authorization")
        }
        headers["Content-Type"] = JSON_CONTENT_TYPE
        if self._authorization is not None:
            headers["Authorization"] = self._authorization
        return headers

    async def deliver(self, body: bytes, *, document_index: int | None = None) -> None:
        """Send one body; raises a ``DeliveryError`` subclass on failure."""
        try:
            response: Any = await self._transport.post(
                self._endpoint, content=body, headers=self._headers
            )
        except (httpx.HTTPError, OSError, RuntimeError) as exc:
            # RuntimeError: the transport or its client was closed underneath us
            raise TransportError(
                f"Can not send message to logstash: {exc}",
                endpoint=self._endpoint,
                document_index=document_index,
                cause=exc,
            ) from exc

        if response is None:
            raise TransportError(
                "Response is null",
                endpoint=self._endpoint,
                document_index=document_index,
            )
        if response.status_code != SUCCESS_STATUS:
            raise DeliveryRejected(
                response.status_code,
                response.reason_phrase,
                endpoint=self._endpoint,
                document_index=document_index,
            )
        text = response.text
        if text != self._ack_body:
            raise UnexpectedAcknowledgement(
                text,
                endpoint=self._endpoint,
                document_index=document_index,
            )
