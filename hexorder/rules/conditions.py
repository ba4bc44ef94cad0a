"""Interpretation of ``Block`` conditions during movement.

Only type checks and boolean composition are meaningful while stepping a
unit onto a tile. Any other expression kind evaluates to True, so an
unsupported condition blocks rather than silently allowing entry.
"""

from __future__ import annotations

from typing import Optional

from ..models import (
    AllOf,
    AnyOf,
    ConstraintExpr,
    EntityData,
    IsNotType,
    IsType,
    Not,
    Relation,
    TypeId,
)

__all__ = ["evaluate_block_condition"]


def _data_for_role(
    role_id: TypeId,
    relation: Relation,
    unit_data: EntityData,
    tile_data: Optional[EntityData],
) -> Optional[EntityData]:
    if role_id == relation.subject_role_id:
        return unit_data
    if role_id == relation.object_role_id:
        return tile_data
    return None


def evaluate_block_condition(
    expr: ConstraintExpr,
    unit_data: EntityData,
    tile_data: Optional[EntityData],
    relation: Relation,
) -> bool:
    """Evaluate ``expr`` for a unit stepping onto a tile under ``relation``.

    A type check against a role that is neither the relation's subject nor
    its object (or against a missing tile) is False.
    """
    if isinstance(expr, IsType):
        data = _data_for_role(expr.role_id, relation, unit_data, tile_data)
        return data is not None and data.entity_type_id == expr.entity_type_id
    if isinstance(expr, IsNotType):
        data = _data_for_role(expr.role_id, relation, unit_data, tile_data)
        return data is not None and data.entity_type_id != expr.entity_type_id
    if isinstance(expr, AllOf):
        return all(
            evaluate_block_condition(e, unit_data, tile_data, relation)
            for e in expr.exprs
        )
    if isinstance(expr, AnyOf):
        return any(
            evaluate_block_condition(e, unit_data, tile_data, relation)
            for e in expr.exprs
        )
    if isinstance(expr, Not):
        return not evaluate_block_condition(expr.expr, unit_data, tile_data, relation)
    # PropertyCompare, CrossCompare, PathBudget: not evaluated here.
    return True
