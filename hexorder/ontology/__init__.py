"""Ontology maintenance: constraint auto-generation and schema validation."""

from .auto_constraints import ConstraintAutoGenerator, auto_generate_constraints
from .schema_validator import SchemaValidator, validate_schema

__all__ = [
    "ConstraintAutoGenerator",
    "SchemaValidator",
    "auto_generate_constraints",
    "validate_schema",
]
