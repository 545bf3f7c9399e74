"""
Environment-driven configuration using Pydantic v2 Settings.

Only the ambient knobs live here; the sink itself is configured by
``LogstashHttpSinkConfig``. ``LogstashHttpSink.from_settings`` bridges the
two so a sink can be built entirely from ``LOGSTASH_HTTP_*`` variables.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import (  # type: ignore[import-not-found]
    BaseSettings,
    SettingsConfigDict,
)

class CoreSettings(BaseModel):
    """Process-wide behavior shared by every sink instance."""

    internal_logging_enabled: bool = Field(
        default=False,
        description=("Emit DEBUG/WARN diagnostics for delivery and render errors"),
    )
    enable_metrics: bool = Field(
        default=False,
        description=("Enable Prometheus-compatible metrics"),
    )


class SinkSettings(BaseModel):
    """Sink options as they appear in the environment.

    ``endpoint`` is optional here so that ``Settings()`` can always be
    constructed; ``from_settings`` rejects a missing endpoint.
    """

    endpoint: str | None = Field(
        default=None, description="Logstash http input URI, e.g. http://host:8080/"
    )
    username: str | None = Field(default=None, description="Basic auth user")
    password: str | None = Field(default=None, description="Basic auth password")
    period_seconds: float = Field(
        default=2.0,
        gt=0.0,
        description=("Maximum time to wait before flushing a partial batch"),
    )
    batch_size: int = Field(
        default=50,
        ge=1,
        description=("Maximum number of events per batch before a flush is triggered"),
    )
    bulk: bool = Field(
        default=False,
        description=("POST each batch as one JSON array instead of one request per event"),
    )
    inline_fields: bool = Field(
        default=False,
        description=("Render event properties at top level instead of under 'fields'"),
    )
    timeout_seconds: float = Field(
        default=5.0,
        gt=0.0,
        description=("Per-request timeout for the HTTP transport"),
    )

    @field_validator("username", "password", mode="before")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        if isinstance(value, str) and not value:
            return None
        return value


class Settings(BaseSettings):
    """Top-level configuration model."""

    core: CoreSettings = Field(default_factory=CoreSettings)
    sink: SinkSettings = Field(default_factory=SinkSettings)

    model_config = SettingsConfigDict(
        env_prefix="LOGSTASH_HTTP_",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    def to_dict(self) -> dict[str, object]:
        from typing import cast

        return cast(
            dict[str, object],
            self.model_dump(by_alias=True, exclude_none=True),
        )
