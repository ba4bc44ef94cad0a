"""Movement rules: budget resolution, step evaluation and valid-move search."""

from .bindings import binds_role, resolve_concept_property, subject_bound
from .conditions import evaluate_block_condition
from .move_engine import (
    MoveEvaluator,
    compute_valid_moves,
    determine_budget,
    fallback_budget,
)
from .step import StepBlocked, StepContext, StepResult, StepValid, evaluate_step

__all__ = [
    "MoveEvaluator",
    "StepBlocked",
    "StepContext",
    "StepResult",
    "StepValid",
    "binds_role",
    "compute_valid_moves",
    "determine_budget",
    "evaluate_block_condition",
    "evaluate_step",
    "fallback_budget",
    "resolve_concept_property",
    "subject_bound",
]
