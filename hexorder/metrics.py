"""Prometheus metrics for the hexorder rules engine.

Counters and histograms live here so the validator, auto-generator and
move evaluator can record lightweight telemetry without each managing
its own metric instances. Recording goes through the ``record_*`` helpers,
which do nothing when ``HEXORDER_METRICS_ENABLED`` is off.
"""

from __future__ import annotations

from typing import Final

from prometheus_client import Counter, Histogram

from . import config


SCHEMA_VALIDATIONS: Final[Counter] = Counter(
    "hexorder_schema_validations_total",
    "Total full schema validation passes, labeled by outcome (valid/invalid).",
    labelnames=("outcome",),
)

SCHEMA_ERRORS: Final[Counter] = Counter(
    "hexorder_schema_errors_total",
    "Total schema errors reported, labeled by error category.",
    labelnames=("category",),
)

AUTO_CONSTRAINT_CHANGES: Final[Counter] = Counter(
    "hexorder_auto_constraints_changes_total",
    (
        "Total auto-generated constraint changes, labeled by action "
        "(inserted, regenerated, retracted)."
    ),
    labelnames=("action",),
)

MOVE_COMPUTATIONS: Final[Counter] = Counter(
    "hexorder_move_computations_total",
    "Total valid-move computations, labeled by path (free, budgeted, cleared).",
    labelnames=("path",),
)

MOVE_COMPUTATION_LATENCY: Final[Histogram] = Histogram(
    "hexorder_move_computation_seconds",
    "Wall time of a single valid-move computation in seconds.",
    # Boards are tens to a few hundred hexes; anything past 100ms is a
    # regression worth seeing.
    buckets=(
        0.0005,
        0.001,
        0.005,
        0.01,
        0.05,
        0.1,
        0.5,
    ),
)


def record_schema_validation(is_valid: bool, categories: list[str]) -> None:
    if not config.METRICS_ENABLED:
        return
    SCHEMA_VALIDATIONS.labels(outcome="valid" if is_valid else "invalid").inc()
    for category in categories:
        SCHEMA_ERRORS.labels(category=category).inc()


def record_auto_constraint_change(action: str) -> None:
    if not config.METRICS_ENABLED:
        return
    AUTO_CONSTRAINT_CHANGES.labels(action=action).inc()


def record_move_computation(path: str, seconds: float | None = None) -> None:
    if not config.METRICS_ENABLED:
        return
    MOVE_COMPUTATIONS.labels(path=path).inc()
    if seconds is not None:
        MOVE_COMPUTATION_LATENCY.observe(seconds)
