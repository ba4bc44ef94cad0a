"""Valid-move computation for the selected unit.

Budgeted best-first search from the unit's hex. Costs and blocks come
entirely from the ontology: ``OnEnter`` relations are evaluated for every
step (see ``step.evaluate_step``) against the tile occupying the
destination. The frontier is ordered by remaining budget, highest first,
and a position is only re-expanded when it is reached with strictly more
budget than before.

Missing wiring never disables movement: an unresolvable budget falls back
to a generous default, an unresolvable cost counts as zero, and an
unbound tile participates in no relation. The worst case is
overestimated reachability.

Remaining budget never exceeds the starting budget. An ``Add`` refund that
would raise it is capped there, so gain cycles cannot grow the budget
without bound; a refund still offsets costs paid earlier on the path.
"""

from __future__ import annotations

import heapq
import itertools
import logging
import time
from typing import Optional

from .. import config, metrics
from ..board_manager import BoardManager
from ..change_tracking import ChangeTracker
from ..models import (
    BoardState,
    ConceptBinding,
    ConceptRegistry,
    ConstraintRegistry,
    EntityData,
    EntityTypeRegistry,
    HexGridConfig,
    HexPosition,
    ModifyOperation,
    ModifyProperty,
    Relation,
    RelationRegistry,
    SelectedUnit,
    ValidMoveSet,
    as_int,
)
from .step import StepContext, StepValid, evaluate_step

logger = logging.getLogger(__name__)

__all__ = [
    "BUDGET_FALLBACK_NAME",
    "MoveEvaluator",
    "compute_valid_moves",
    "determine_budget",
    "fallback_budget",
]

# Concept-local name tried when no Subtract relation identifies the budget.
BUDGET_FALLBACK_NAME = "budget"


def fallback_budget(concepts: ConceptRegistry) -> int:
    return config.FALLBACK_BUDGET_PER_CONCEPT * max(1, len(concepts.concepts))


def _read_int(
    unit_data: EntityData, binding: ConceptBinding, concept_local_name: str
) -> Optional[int]:
    property_id = binding.property_for(concept_local_name)
    if property_id is None:
        return None
    return as_int(unit_data.get(property_id))


def determine_budget(
    unit_bindings: list[ConceptBinding],
    on_enter_relations: list[Relation],
    unit_data: EntityData,
    concepts: ConceptRegistry,
) -> int:
    """Initial movement budget for a unit.

    1. The ``target_property`` of an ``OnEnter`` Subtract relation whose
       subject role the unit is bound to, read through that binding.
    2. Any bound property with concept-local name "budget".
    3. ``fallback_budget(concepts)``.
    """
    for relation in on_enter_relations:
        effect = relation.effect
        if not (
            isinstance(effect, ModifyProperty)
            and effect.operation == ModifyOperation.SUBTRACT
        ):
            continue
        for binding in unit_bindings:
            if not binding.binds(relation.concept_id, relation.subject_role_id):
                continue
            budget = _read_int(unit_data, binding, effect.target_property)
            if budget is not None:
                return budget

    for binding in unit_bindings:
        budget = _read_int(unit_data, binding, BUDGET_FALLBACK_NAME)
        if budget is not None:
            return budget

    budget = fallback_budget(concepts)
    logger.debug("No budget property resolved; using fallback budget %d", budget)
    return budget


def _search(
    ctx: StepContext,
    start: HexPosition,
    initial_budget: int,
    map_radius: int,
    board: BoardState,
    result: ValidMoveSet,
) -> None:
    best_budget: dict[HexPosition, int] = {start: initial_budget}
    order = itertools.count()
    frontier: list[tuple[int, int, HexPosition]] = [
        (-initial_budget, next(order), start)
    ]

    while frontier:
        neg_budget, _, current = heapq.heappop(frontier)
        remaining = -neg_budget
        if remaining < best_budget[current]:
            # Superseded by a better arrival already queued or expanded.
            continue

        for neighbor in current.neighbors():
            if not BoardManager.is_within_bounds(neighbor, map_radius):
                continue
            if neighbor == start:
                continue

            tile_data = BoardManager.get_tile_data(neighbor, board)
            step = evaluate_step(ctx, tile_data, remaining, neighbor)

            if isinstance(step, StepValid):
                # Refunds never push a unit past its starting allotment.
                new_budget = min(step.new_budget, initial_budget)
                previous = best_budget.get(neighbor)
                if previous is not None and previous >= new_budget:
                    continue
                best_budget[neighbor] = new_budget
                result.valid_positions.add(neighbor)
                result.remaining_budgets[neighbor] = new_budget
                result.blocked_explanations.pop(neighbor, None)
                if new_budget > 0:
                    heapq.heappush(frontier, (-new_budget, next(order), neighbor))
            elif neighbor not in result.valid_positions and step.reasons:
                recorded = result.blocked_explanations.setdefault(neighbor, [])
                # The same block is usually hit from several neighbours.
                recorded.extend(r for r in step.reasons if r not in recorded)


def compute_valid_moves(
    selected: SelectedUnit,
    concepts: ConceptRegistry,
    relations: RelationRegistry,
    constraints: ConstraintRegistry,
    entity_types: EntityTypeRegistry,
    grid: HexGridConfig,
    board: BoardState,
) -> ValidMoveSet:
    """Compute the valid moves of the selected unit.

    Returns an empty set (``for_entity`` None) when nothing is selected or
    the selected unit is not on the board. With no ``OnEnter`` relations
    and no constraints at all, every in-bounds hex is reachable.
    """
    started = time.perf_counter()

    unit = BoardManager.get_unit(selected.entity, board)
    if unit is None:
        metrics.record_move_computation("cleared")
        return ValidMoveSet()

    result = ValidMoveSet(for_entity=unit.id)
    on_enter_relations = relations.on_enter()
    unit_bindings = concepts.bindings_for_entity_type(unit.data.entity_type_id)

    if not on_enter_relations and not constraints.constraints:
        result.valid_positions = BoardManager.flood_fill(unit.position, grid.map_radius)
        metrics.record_move_computation("free", time.perf_counter() - started)
        logger.debug(
            "Free movement for %s: %d position(s)",
            unit.id,
            len(result.valid_positions),
        )
        return result

    # A unit already below zero cannot move, not even onto free hexes.
    initial_budget = determine_budget(
        unit_bindings, on_enter_relations, unit.data, concepts
    )
    ctx = StepContext(
        unit_data=unit.data,
        unit_bindings=unit_bindings,
        on_enter_relations=on_enter_relations,
        concepts=concepts,
        entity_types=entity_types,
    )
    _search(ctx, unit.position, initial_budget, grid.map_radius, board, result)

    metrics.record_move_computation("budgeted", time.perf_counter() - started)
    logger.debug(
        "Budgeted movement for %s (budget %d): %d valid, %d blocked",
        unit.id,
        initial_budget,
        len(result.valid_positions),
        len(result.blocked_explanations),
    )
    return result


class MoveEvaluator:
    """Reactive wrapper around ``compute_valid_moves``.

    Recomputes when the selection or any ontology registry changed. Board
    edits alone do not trigger a recomputation; call ``invalidate`` to
    force one.
    """

    def __init__(self) -> None:
        self._tracker = ChangeTracker()
        self.result = ValidMoveSet()

    def invalidate(self) -> None:
        self._tracker.reset()

    def run(
        self,
        selected: SelectedUnit,
        concepts: ConceptRegistry,
        relations: RelationRegistry,
        constraints: ConstraintRegistry,
        entity_types: EntityTypeRegistry,
        grid: HexGridConfig,
        board: BoardState,
    ) -> ValidMoveSet:
        if self._tracker.changed(selected, concepts, relations, constraints):
            self.result = compute_valid_moves(
                selected, concepts, relations, constraints, entity_types, grid, board
            )
            self._tracker.mark_seen(selected, concepts, relations, constraints)
        return self.result
