"""Sink plugins and plugin helpers."""

from .utils import parse_plugin_config

__all__ = ["parse_plugin_config"]
