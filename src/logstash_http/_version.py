"""Package version; keep in sync with ``project.version`` in pyproject.toml."""

__version__ = "1.0.0"
