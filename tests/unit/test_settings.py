from __future__ import annotations

import pytest

from logstash_http.core.settings import Settings


def test_defaults_without_environment() -> None:
    settings = Settings()
    assert settings.core.internal_logging_enabled is False
    assert settings.core.enable_metrics is False
    assert settings.sink.endpoint is None
    assert settings.sink.period_seconds == 2.0
    assert settings.sink.batch_size == 50
    assert settings.sink.bulk is False


def test_nested_environment_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOGSTASH_HTTP_SINK__ENDPOINT", "http://logstash:8080/")
    monkeypatch.setenv("LOGSTASH_HTTP_SINK__USERNAME", "user")
    monkeypatch.setenv("LOGSTASH_HTTP_SINK__PASSWORD", "")
    monkeypatch.setenv("LOGSTASH_HTTP_SINK__PERIOD_SECONDS", "0.5")
    monkeypatch.setenv("logstash_http_core__internal_logging_enabled", "1")

    settings = Settings()

    assert settings.sink.endpoint == "http://logstash:8080/"
    assert settings.sink.username == "user"
    assert settings.sink.password is None
    assert settings.sink.period_seconds == 0.5
    assert settings.core.internal_logging_enabled is True


def test_invalid_values_are_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    from pydantic import ValidationError

    monkeypatch.setenv("LOGSTASH_HTTP_SINK__BATCH_SIZE", "0")
    with pytest.raises(ValidationError):
        Settings()


def test_to_dict_omits_unset_optionals() -> None:
    data = Settings().to_dict()
    sink = data["sink"]
    assert isinstance(sink, dict)
    assert "endpoint" not in sink
    assert sink["batch_size"] == 50
