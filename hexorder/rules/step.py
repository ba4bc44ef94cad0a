"""Evaluation of a single search step into a neighbouring hex.

For each ``OnEnter`` relation that binds the unit as subject and the
destination tile as object:

- ``ModifyProperty`` accumulates a cost (Subtract adds, Add refunds;
  Multiply/Min/Max do not apply to movement),
- ``Block`` blocks when its condition holds (always, without one),
- ``Allow`` has no effect on movement.

Blocks win over budget. Every blocked step carries at least one
explanation naming the relation responsible.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

from ..models import (
    Allow,
    Block,
    ConceptBinding,
    ConceptRegistry,
    EntityData,
    EntityTypeRegistry,
    HexPosition,
    ModifyOperation,
    ModifyProperty,
    Relation,
    ValidationResult,
    as_int,
)
from .bindings import binds_role, resolve_concept_property, subject_bound
from .conditions import evaluate_block_condition

__all__ = [
    "StepBlocked",
    "StepContext",
    "StepResult",
    "StepValid",
    "evaluate_step",
]


@dataclass
class StepContext:
    """Everything constant across one search."""
    unit_data: EntityData
    unit_bindings: list[ConceptBinding]
    on_enter_relations: list[Relation]
    concepts: ConceptRegistry
    entity_types: EntityTypeRegistry

    @property
    def unit_type_name(self) -> str:
        return self.entity_types.name_of(self.unit_data.entity_type_id, "Unit")


@dataclass(frozen=True)
class StepValid:
    new_budget: int


@dataclass(frozen=True)
class StepBlocked:
    reasons: list[ValidationResult] = field(default_factory=list)


StepResult = Union[StepValid, StepBlocked]


def _applies(
    ctx: StepContext,
    relation: Relation,
    tile_data: Optional[EntityData],
) -> bool:
    if not subject_bound(relation, ctx.unit_bindings):
        return False
    if tile_data is None:
        return False
    return binds_role(
        ctx.concepts.bindings,
        tile_data.entity_type_id,
        relation.concept_id,
        relation.object_role_id,
    )


def evaluate_step(
    ctx: StepContext,
    tile_data: Optional[EntityData],
    remaining_budget: int,
    target: HexPosition,
) -> StepResult:
    """Decide whether the unit can enter ``target`` with ``remaining_budget``."""
    reasons: list[ValidationResult] = []
    cost = 0
    has_block = False

    for relation in ctx.on_enter_relations:
        if not _applies(ctx, relation, tile_data):
            continue

        effect = relation.effect
        if isinstance(effect, ModifyProperty):
            source_value = resolve_concept_property(
                tile_data,
                effect.source_property,
                relation.concept_id,
                relation.object_role_id,
                ctx.concepts.bindings,
            )
            amount = as_int(source_value) or 0

            if effect.operation == ModifyOperation.SUBTRACT:
                cost += amount
            elif effect.operation == ModifyOperation.ADD:
                cost -= amount

            if remaining_budget - cost < 0:
                reasons.append(ValidationResult(
                    constraint_id=relation.id,
                    constraint_name=relation.name,
                    satisfied=False,
                    explanation=(
                        f"{ctx.unit_type_name} cannot reach ({target.q}, {target.r}): "
                        f"path cost {cost} exceeds {effect.target_property} "
                        f"of {remaining_budget}"
                    ),
                ))
        elif isinstance(effect, Block):
            blocked = effect.condition is None or evaluate_block_condition(
                effect.condition, ctx.unit_data, tile_data, relation
            )
            if blocked:
                has_block = True
                tile_type_name = ctx.entity_types.name_of(
                    tile_data.entity_type_id, "Unknown"
                )
                reasons.append(ValidationResult(
                    constraint_id=relation.id,
                    constraint_name=relation.name,
                    satisfied=False,
                    explanation=(
                        f"{ctx.unit_type_name} cannot enter {tile_type_name}: "
                        f"{relation.name} blocks entry"
                    ),
                ))
        elif isinstance(effect, Allow):
            # Absence of a block is already an implicit allow.
            pass

    if has_block:
        return StepBlocked(reasons=reasons)

    new_budget = remaining_budget - cost
    if new_budget < 0:
        return StepBlocked(reasons=reasons)
    return StepValid(new_budget=new_budget)
