"""
Root pytest configuration.
"""

from __future__ import annotations

from collections.abc import Callable, Generator
from typing import Any

import httpx
import pytest


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line(
        "markers",
        "critical: Tests that must never fail - core functionality",
    )
    config.addinivalue_line(
        "markers",
        "security: Security-critical tests (auth headers, secrets)",
    )
    config.addinivalue_line(
        "markers",
        "standard: Default risk category for typical unit tests",
    )
    config.addinivalue_line(
        "markers",
        "slow: Tests that take >1 second",
    )
    config.addinivalue_line(
        "markers",
        "asyncio: Async tests",
    )


@pytest.fixture(autouse=True)
def reset_diagnostics_cache() -> Generator[None, None, None]:
    """Reset the diagnostics module cache before each test.

    The diagnostics module caches the `internal_logging_enabled` setting
    at first access. Resetting it keeps tests from inheriting cached state.
    """
    import logstash_http.core.diagnostics as diag

    diag._reset_for_tests()
    yield
    diag._reset_for_tests()


@pytest.fixture
def capture_diagnostics(
    monkeypatch: pytest.MonkeyPatch,
) -> Generator[list[dict[str, Any]], None, None]:
    """Enable internal diagnostics and collect every payload written."""
    from logstash_http.core import diagnostics

    monkeypatch.setenv("LOGSTASH_HTTP_CORE__INTERNAL_LOGGING_ENABLED", "true")
    captured: list[dict[str, Any]] = []
    diagnostics.set_writer_for_tests(captured.append)
    yield captured


class RecordingEndpoint:
    """Scripted stand-in for a Logstash http input.

    Each POST pops the next outcome: an ``httpx.Response`` or an exception
    to raise. When the script runs out, ``200 ok`` is returned.
    """

    def __init__(self, outcomes: list[Any] | None = None) -> None:
        self.outcomes = list(outcomes or [])
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.outcomes:
            return httpx.Response(200, text="ok")
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    @property
    def bodies(self) -> list[bytes]:
        return [r.content for r in self.requests]

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


@pytest.fixture
def endpoint() -> RecordingEndpoint:
    return RecordingEndpoint()


@pytest.fixture
def make_endpoint() -> Callable[..., RecordingEndpoint]:
    def _make(outcomes: list[Any] | None = None) -> RecordingEndpoint:
        return RecordingEndpoint(outcomes)

    return _make
