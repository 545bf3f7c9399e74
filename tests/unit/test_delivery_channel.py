from __future__ import annotations

import base64

import httpx
import pytest

from logstash_http.core.channel import DeliveryChannel, basic_authorization
from logstash_http.core.errors import (
    DeliveryError,
    DeliveryRejected,
    ErrorCategory,
    TransportError,
    UnexpectedAcknowledgement,
)
from logstash_http.core.transport import SharedTransport

URL = "http://logstash.example.com:8080/"


def _channel(endpoint, **kwargs) -> DeliveryChannel:
    return DeliveryChannel(
        endpoint=URL,
        transport=SharedTransport(client=endpoint.client()),
        **kwargs,
    )


@pytest.mark.asyncio
async def test_deliver_success_posts_json_body(endpoint) -> None:
    channel = _channel(endpoint)
    await channel.deliver(b'{"message":"hello"}')

    assert len(endpoint.requests) == 1
    request = endpoint.requests[0]
    assert request.method == "POST"
    assert str(request.url) == URL
    assert request.content == b'{"message":"hello"}'
    assert request.headers["Content-Type"] == "application/json"
    assert "Authorization" not in request.headers


@pytest.mark.security
@pytest.mark.asyncio
async def test_basic_auth_header_decodes_to_credentials(endpoint) -> None:
    channel = _channel(endpoint, username="user", password="p@ss:word")
    assert channel.has_authorization
    await channel.deliver(b"{}")

    header = endpoint.requests[0].headers["Authorization"]
    scheme, token = header.split(" ", 1)
    assert scheme == "Basic"
    assert base64.b64decode(token, validate=True).decode("utf-8") == "user:p@ss:word"
    assert "\n" not in token


@pytest.mark.security
@pytest.mark.parametrize(
    ("username", "password"),
    [("user", ""), ("", "secret"), (None, "secret"), ("user", None), (None, None)],
)
@pytest.mark.asyncio
async def test_no_auth_header_unless_both_credentials(
    endpoint, username: str | None, password: str | None
) -> None:
    channel = _channel(endpoint, username=username, password=password)
    await channel.deliver(b"{}")
    assert "Authorization" not in endpoint.requests[0].headers
    assert channel.has_authorization is False


def test_basic_authorization_uses_standard_base64_of_utf8() -> None:
    value = basic_authorization("usér", "pässword")
    assert value is not None
    token = value.removeprefix("Basic ")
    assert token == base64.standard_b64encode("usér:pässword".encode()).decode()


@pytest.mark.asyncio
async def test_content_type_overrides_caller_headers(endpoint) -> None:
    channel = _channel(
        endpoint,
        headers={"content-type": "text/plain", "X-Env": "test"},
    )
    await channel.deliver(b"[]")
    headers = endpoint.requests[0].headers
    assert headers["Content-Type"] == "application/json"
    assert headers.get_list("Content-Type") == ["application/json"]
    assert headers["X-Env"] == "test"


@pytest.mark.critical
@pytest.mark.asyncio
async def test_non_200_raises_delivery_rejected(make_endpoint) -> None:
    endpoint = make_endpoint([httpx.Response(500, text="boom")])
    channel = _channel(endpoint)

    with pytest.raises(DeliveryRejected) as info:
        await channel.deliver(b"{}", document_index=4)

    err = info.value
    assert err.status_code == 500
    assert err.reason_phrase == "Internal Server Error"
    assert err.document_index == 4
    assert err.endpoint == URL
    assert err.category is ErrorCategory.DELIVERY
    assert "500" in str(err)


@pytest.mark.asyncio
async def test_other_success_codes_are_still_rejected(make_endpoint) -> None:
    endpoint = make_endpoint([httpx.Response(204)])
    with pytest.raises(DeliveryRejected) as info:
        await _channel(endpoint).deliver(b"{}")
    assert info.value.status_code == 204


@pytest.mark.critical
@pytest.mark.asyncio
async def test_200_with_unexpected_body_raises(make_endpoint) -> None:
    endpoint = make_endpoint([httpx.Response(200, text="not ok")])
    with pytest.raises(UnexpectedAcknowledgement) as info:
        await _channel(endpoint).deliver(b"{}")
    assert info.value.body == "not ok"
    assert info.value.context["body"] == "not ok"


@pytest.mark.asyncio
async def test_ack_body_must_match_exactly(make_endpoint) -> None:
    endpoint = make_endpoint([httpx.Response(200, text="ok\n")])
    with pytest.raises(UnexpectedAcknowledgement):
        await _channel(endpoint).deliver(b"{}")


@pytest.mark.asyncio
async def test_connection_failure_raises_transport_error(make_endpoint) -> None:
    cause = httpx.ConnectError("connection refused")
    endpoint = make_endpoint([cause])

    with pytest.raises(TransportError) as info:
        await _channel(endpoint).deliver(b"{}", document_index=0)

    err = info.value
    assert isinstance(err, DeliveryError)
    assert err.category is ErrorCategory.TRANSPORT
    assert err.cause is cause
    assert err.__cause__ is cause
    assert err.to_dict()["document_index"] == 0


@pytest.mark.asyncio
async def test_closed_transport_raises_transport_error(endpoint) -> None:
    transport = SharedTransport(client=endpoint.client())
    channel = DeliveryChannel(endpoint=URL, transport=transport)
    await transport.aclose()

    with pytest.raises(TransportError) as info:
        await channel.deliver(b"{}", document_index=3)

    assert isinstance(info.value.__cause__, RuntimeError)
    assert info.value.to_dict()["document_index"] == 3
    assert endpoint.requests == []


@pytest.mark.asyncio
async def test_closed_client_raises_transport_error(endpoint) -> None:
    client = endpoint.client()
    channel = DeliveryChannel(endpoint=URL, transport=SharedTransport(client=client))
    await client.aclose()

    with pytest.raises(TransportError):
        await channel.deliver(b"{}")


@pytest.mark.asyncio
async def test_failure_leaves_channel_usable(make_endpoint) -> None:
    endpoint = make_endpoint([httpx.ReadTimeout("slow"), httpx.Response(200, text="ok")])
    channel = _channel(endpoint)
    with pytest.raises(TransportError):
        await channel.deliver(b"1")
    await channel.deliver(b"2")
    assert endpoint.bodies == [b"1", b"2"]
