"""Environment configuration for the hexorder rules engine.

Settings are read once at import time. Tests that need a different value
call the ``read_*`` helpers directly or patch the module constants.

Environment Variables:
    HEXORDER_FALLBACK_BUDGET_PER_CONCEPT: Movement budget granted per
        registered concept when a unit has no resolvable budget property
        (default: 10)
    HEXORDER_LOG_LEVEL: Default level for ``setup_logging`` (default: INFO)
    HEXORDER_METRICS_ENABLED: Record Prometheus metrics (default: on)
"""

from __future__ import annotations

import os

from .errors import ConfigurationError

__all__ = [
    "FALLBACK_BUDGET_PER_CONCEPT",
    "LOG_LEVEL",
    "METRICS_ENABLED",
    "read_bool",
    "read_int",
]

_TRUTHY = {"1", "true", "yes", "on"}


def read_bool(name: str, default: bool) -> bool:
    """Return a boolean flag from the environment."""
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


def read_int(name: str, default: int, minimum: int | None = None) -> int:
    """Return an integer setting from the environment.

    Raises:
        ConfigurationError: If the value is not an integer or is below
            ``minimum``.
    """
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigurationError(
            f"{name} must be an integer, got {raw!r}", setting=name
        ) from exc
    if minimum is not None and value < minimum:
        raise ConfigurationError(
            f"{name} must be >= {minimum}, got {value}", setting=name
        )
    return value


FALLBACK_BUDGET_PER_CONCEPT = read_int(
    "HEXORDER_FALLBACK_BUDGET_PER_CONCEPT", 10, minimum=0
)
LOG_LEVEL = os.getenv("HEXORDER_LOG_LEVEL", "INFO").upper()
METRICS_ENABLED = read_bool("HEXORDER_METRICS_ENABLED", True)
