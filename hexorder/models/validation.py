"""
Validation output types.

Schema-level results (is the ontology internally consistent?) and
state-level results (which positions can the selected unit reach?). Both
are produced wholesale by pure functions and replaced, never patched.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .core import TypeId
from .hex import HexPosition


class SchemaErrorCategory(str, Enum):
    """Category of schema-level error"""
    # A reference points to a type/concept/role/property that doesn't exist.
    DANGLING_REFERENCE = "dangling_reference"
    # An entity type's role is not in the concept role's allowed roles.
    ROLE_MISMATCH = "role_mismatch"
    # A property binding names a property the entity type doesn't have.
    PROPERTY_MISMATCH = "property_mismatch"
    # A concept role has no entity types bound to it.
    MISSING_BINDING = "missing_binding"
    # An expression or relation references invalid roles or properties.
    INVALID_EXPRESSION = "invalid_expression"


@dataclass(frozen=True)
class SchemaError:
    category: SchemaErrorCategory
    message: str
    # Id of the offending concept, relation, constraint or binding.
    source_id: TypeId

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category.value,
            "message": self.message,
            "source_id": str(self.source_id),
        }


@dataclass
class SchemaValidation:
    """Schema validation results for the whole ontology."""
    errors: list[SchemaError] = field(default_factory=list)
    is_valid: bool = True

    def errors_of(self, category: SchemaErrorCategory) -> list[SchemaError]:
        return [e for e in self.errors if e.category == category]

    def has(self, category: SchemaErrorCategory) -> bool:
        return any(e.category == category for e in self.errors)


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of evaluating one relation or constraint at one position."""
    constraint_id: TypeId
    constraint_name: str
    satisfied: bool
    explanation: str


@dataclass
class ValidMoveSet:
    """Valid moves for the selected unit.

    Attributes:
        valid_positions: Positions the unit can move to.
        blocked_explanations: For each unreachable position that was
            evaluated, the reasons it is blocked.
        for_entity: The unit the set was computed for, or None when
            nothing is selected.
        remaining_budgets: Best remaining budget the unit arrives with at
            each valid position (empty for free movement).
    """
    valid_positions: set[HexPosition] = field(default_factory=set)
    blocked_explanations: dict[HexPosition, list[ValidationResult]] = field(
        default_factory=dict
    )
    for_entity: str | None = None
    remaining_budgets: dict[HexPosition, int] = field(default_factory=dict)

    def is_valid(self, position: HexPosition) -> bool:
        return position in self.valid_positions

    def reasons_for(self, position: HexPosition) -> list[ValidationResult]:
        return self.blocked_explanations.get(position, [])
