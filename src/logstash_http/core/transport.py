"""
Outbound HTTP transport shared between sink instances.

``SharedTransport`` wraps a single ``httpx.AsyncClient`` behind an
exclusive-access gate. It is constructed explicitly and injected into each
``DeliveryChannel`` that should share it.

Contract: at most one POST is in flight through a given transport at any
instant. The gate is held from sending the request until the response body
has been fully read. All users must run on the same event loop.
"""

from __future__ import annotations

import asyncio
import types
from typing import Callable, Mapping

import httpx

ClientFactory = Callable[[], httpx.AsyncClient]


class SharedTransport:
    """Single-writer-at-a-time wrapper around one ``httpx.AsyncClient``.

    The client is created lazily on first use. A client passed in by the
    caller is used as-is and left open by ``aclose``; a client created by
    the transport is closed with it.
    """

    def __init__(
        self,
        *,
        timeout_seconds: float = 5.0,
        client: httpx.AsyncClient | None = None,
        client_factory: ClientFactory | None = None,
    ) -> None:
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")
        self._timeout_seconds = timeout_seconds
        self._client = client
        self._owns_client = client is None
        self._client_factory = client_factory
        self._gate = asyncio.Lock()
        self._closed = False
        self._requests = 0

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def requests_sent(self) -> int:
        return self._requests

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            if self._client_factory is not None:
                self._client = self._client_factory()
            else:
                self._client = httpx.AsyncClient(timeout=self._timeout_seconds)
        return self._client

    async def post(
        self,
        url: str,
        *,
        content: bytes,
        headers: Mapping[str, str],
    ) -> httpx.Response:
        """POST ``content`` and return the fully-read response.

        Transport-level failures propagate as ``httpx.HTTPError``, ``OSError``
        or ``RuntimeError`` (closed transport or client); classification is
        the caller's job.
        """
        if self._closed:
            raise RuntimeError("Transport is closed")
        async with self._gate:
            client = self._ensure_client()
            self._requests += 1
            # Non-streaming request: httpx reads the whole body before returning
            return await client.post(url, content=content, headers=dict(headers))

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        async with self._gate:
            if self._client is not None and self._owns_client:
                await self._client.aclose()

    async def __aenter__(self) -> SharedTransport:
        return self

    async def __aexit__(
        self,
        _exc_type: type[BaseException] | None,
        _exc: BaseException | None,
        _tb: types.TracebackType | None,
    ) -> None:
        await self.aclose()
