"""Per-tick orchestration of the reactive ontology components.

Run order is fixed: the auto-generator writes the constraint registry
first, so the schema validator in the same tick sees the regenerated
constraints. The move evaluator runs last and only reads.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from .models import (
    BoardState,
    ConceptRegistry,
    ConstraintRegistry,
    EntityTypeRegistry,
    HexGridConfig,
    RelationRegistry,
    SchemaValidation,
    SelectedUnit,
    ValidMoveSet,
)
from .ontology import ConstraintAutoGenerator, SchemaValidator
from .rules import MoveEvaluator

logger = logging.getLogger(__name__)

__all__ = ["OntologyPipeline", "TickResult"]


@dataclass
class TickResult:
    """Outputs of one pipeline tick."""
    constraints_changed: bool
    schema: SchemaValidation
    moves: ValidMoveSet


@dataclass
class OntologyPipeline:
    """Holds the shared handles and the three reactive components.

    The handles are edited from outside (by an editor, a test, a script);
    ``tick`` then brings every derived output up to date.
    """
    entity_types: EntityTypeRegistry = field(default_factory=EntityTypeRegistry)
    concepts: ConceptRegistry = field(default_factory=ConceptRegistry)
    relations: RelationRegistry = field(default_factory=RelationRegistry)
    constraints: ConstraintRegistry = field(default_factory=ConstraintRegistry)
    selected: SelectedUnit = field(default_factory=SelectedUnit)
    grid: HexGridConfig = field(default_factory=lambda: HexGridConfig(map_radius=5))
    board: BoardState = field(default_factory=BoardState)

    auto_generator: ConstraintAutoGenerator = field(
        default_factory=ConstraintAutoGenerator
    )
    validator: SchemaValidator = field(default_factory=SchemaValidator)
    move_evaluator: MoveEvaluator = field(default_factory=MoveEvaluator)

    def tick(self) -> TickResult:
        constraints_changed = self.auto_generator.run(self.relations, self.constraints)
        schema = self.validator.run(
            self.concepts, self.relations, self.constraints, self.entity_types
        )
        moves = self.move_evaluator.run(
            self.selected,
            self.concepts,
            self.relations,
            self.constraints,
            self.entity_types,
            self.grid,
            self.board,
        )
        if constraints_changed:
            logger.debug(
                "Tick regenerated constraints; schema valid=%s", schema.is_valid
            )
        return TickResult(
            constraints_changed=constraints_changed,
            schema=schema,
            moves=moves,
        )

    def select(self, unit_id: Optional[str]) -> None:
        self.selected.select(unit_id)

    def refresh_moves(self) -> ValidMoveSet:
        """Force a move recomputation, e.g. after board edits."""
        self.move_evaluator.invalidate()
        return self.tick().moves
