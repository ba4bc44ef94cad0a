"""
hexorder: ontology rules engine for hex-grid wargames.

Designers describe rules as concepts, roles, relations and constraints
bound to their own entity types; the engine validates that vocabulary,
keeps derived constraints in sync, and computes where a selected unit
may move.
"""

from .errors import (
    ConfigurationError,
    DuplicateIdentifierError,
    HexorderError,
    UnknownReferenceError,
)
from .ontology import (
    ConstraintAutoGenerator,
    SchemaValidator,
    auto_generate_constraints,
    validate_schema,
)
from .pipeline import OntologyPipeline, TickResult
from .rules import MoveEvaluator, compute_valid_moves

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "ConstraintAutoGenerator",
    "DuplicateIdentifierError",
    "HexorderError",
    "MoveEvaluator",
    "OntologyPipeline",
    "SchemaValidator",
    "TickResult",
    "UnknownReferenceError",
    "auto_generate_constraints",
    "compute_valid_moves",
    "validate_schema",
]
