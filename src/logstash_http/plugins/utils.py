"""
Plugin utilities for configuration parsing.
"""

from __future__ import annotations

from typing import Any, Mapping, TypeVar

from pydantic import BaseModel, ValidationError

from ..core.errors import ConfigurationError

ConfigT = TypeVar("ConfigT", bound=BaseModel)


def parse_plugin_config(
    config_cls: type[ConfigT],
    config: ConfigT | Mapping[str, Any] | None = None,
    **kwargs: Any,
) -> ConfigT:
    """Build a plugin config model from a model, a mapping, or keyword args.

    Keyword arguments override keys from a mapping. An existing model
    instance is returned untouched unless overrides are given.

    Raises:
        ConfigurationError: when validation fails.
    """
    if isinstance(config, config_cls) and not kwargs:
        return config
    data: dict[str, Any] = {}
    if isinstance(config, BaseModel):
        data.update(config.model_dump())
    elif config is not None:
        data.update(dict(config))
    data.update(kwargs)
    try:
        return config_cls.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(
            f"Invalid {config_cls.__name__}: {exc.error_count()} error(s)",
            errors=[
                {"loc": ".".join(str(p) for p in e["loc"]), "msg": e["msg"]}
                for e in exc.errors()
            ],
        ) from exc
