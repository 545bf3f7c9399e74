from __future__ import annotations

import json
import logging
from collections.abc import Generator

import pytest

from logstash_http import LogstashHttpSink, SharedTransport
from logstash_http.core.events import EventLevel
from logstash_http.core.stdlib_bridge import (
    LogstashHttpHandler,
    enable_stdlib_bridge,
    record_to_event,
)

URL = "http://logstash.example.com/"


@pytest.fixture
def bridged_logger() -> Generator[logging.Logger, None, None]:
    logger = logging.getLogger("thirdparty.module")
    logger.propagate = False
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.mark.asyncio
async def test_forward_basic_and_extras(endpoint, bridged_logger) -> None:
    sink = LogstashHttpSink(
        endpoint=URL,
        transport=SharedTransport(client=endpoint.client()),
        period_seconds=60.0,
    )
    handler = enable_stdlib_bridge(
        sink, level=logging.INFO, logger_name="thirdparty.module"
    )
    assert isinstance(handler, LogstashHttpHandler)

    bridged_logger.info("hello %s", "world", extra={"user_id": "u1", "k": 2})
    bridged_logger.debug("below threshold")
    await sink.stop()

    assert len(endpoint.requests) == 1
    doc = json.loads(endpoint.bodies[0])
    assert doc["message"] == "hello world"
    assert doc["messageTemplate"] == "hello %s"
    assert doc["level"] == "Information"
    assert doc["fields"]["user_id"] == "u1"
    assert doc["fields"]["k"] == 2
    assert doc["fields"]["logger"] == "thirdparty.module"


@pytest.mark.asyncio
async def test_forward_exception(endpoint, bridged_logger) -> None:
    sink = LogstashHttpSink(
        endpoint=URL,
        transport=SharedTransport(client=endpoint.client()),
        period_seconds=60.0,
    )
    enable_stdlib_bridge(
        sink,
        level=logging.DEBUG,
        logger_name="thirdparty.module",
        remove_existing_handlers=True,
    )

    try:
        raise RuntimeError("boom")
    except RuntimeError:
        bridged_logger.exception("failed")
    await sink.stop()

    doc = json.loads(endpoint.bodies[0])
    assert doc["level"] == "Error"
    assert "RuntimeError: boom" in doc["exception"]


def test_remove_existing_handlers(bridged_logger) -> None:
    stale = logging.NullHandler()
    bridged_logger.addHandler(stale)
    sink = LogstashHttpSink(endpoint=URL)

    enable_stdlib_bridge(
        sink, logger_name="thirdparty.module", remove_existing_handlers=True
    )

    assert stale not in bridged_logger.handlers
    assert len(bridged_logger.handlers) == 1


def test_record_to_event_maps_levels_and_time() -> None:
    record = logging.LogRecord(
        "svc", logging.CRITICAL, __file__, 10, "down: %d", (3,), None
    )
    event = record_to_event(record)
    assert event.level is EventLevel.FATAL
    assert event.message == "down: 3"
    assert event.timestamp.tzinfo is not None
    assert event.properties["line"] == 10
