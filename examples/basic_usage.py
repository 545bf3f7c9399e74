"""
Basic usage example for logstash-http.

Ships two events to a local Logstash http input in bulk mode, using Basic
auth, and prints any delivery failures.
"""

import asyncio
import logging

from logstash_http import (
    LogEvent,
    LogstashHttpError,
    LogstashHttpSink,
    LogstashHttpSinkConfig,
    enable_stdlib_bridge,
)


def report(error: LogstashHttpError) -> None:
    print(f"delivery failed: {error.to_dict()}")


async def main() -> None:
    config = LogstashHttpSinkConfig(
        endpoint="http://localhost:8080/",
        username="user",
        password="password",
        inline_fields=True,
        bulk=True,
    )
    async with LogstashHttpSink(config, on_error=report) as sink:
        sink.emit(LogEvent.create("Test message", app="def"))

        # Route stdlib logging through the same sink
        enable_stdlib_bridge(sink, level=logging.INFO, logger_name="example")
        logging.getLogger("example").info("hello from %s", "logging")

        report_ = await sink.flush()
        print(f"flushed {report_.documents} documents in {report_.requests} request(s)")


if __name__ == "__main__":
    asyncio.run(main())
