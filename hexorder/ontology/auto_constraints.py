"""Auto-generation of companion constraints for ``Subtract`` relations.

Every relation whose effect is ``ModifyProperty`` with
``ModifyOperation.SUBTRACT`` gets exactly one auto-generated guard::

    <subject role>.<target_property> >= 0

The guard references its relation by id and is kept in lockstep with it:

- a new Subtract relation gets a fresh guard,
- a Subtract relation whose target changed gets its guard regenerated in
  the same list slot,
- a relation that was deleted or stopped being a Subtract loses its guard,
- extra guards for the same relation are dropped, keeping the first slot.

Manual constraints, and auto-generated constraints that carry no
``relation_id``, are never touched.
"""

from __future__ import annotations

import logging

from .. import metrics
from ..models import (
    CompareOp,
    Constraint,
    ConstraintRegistry,
    IntValue,
    PropertyCompare,
    Relation,
    RelationRegistry,
    new_type_id,
)
from ..change_tracking import ChangeTracker

logger = logging.getLogger(__name__)

__all__ = [
    "ConstraintAutoGenerator",
    "auto_constraint_description",
    "auto_constraint_name",
    "auto_generate_constraints",
    "expected_guard_expression",
]


def auto_constraint_name(target_property: str) -> str:
    return f"[auto] {target_property} >= 0"


def auto_constraint_description(target_property: str, relation_name: str) -> str:
    return (
        f"Auto-generated: ensures {target_property} does not go negative "
        f'from relation "{relation_name}"'
    )


def expected_guard_expression(relation: Relation) -> PropertyCompare:
    """The non-negativity guard a Subtract relation should have.

    ``relation`` must carry a ``ModifyProperty`` effect.
    """
    return PropertyCompare(
        role_id=relation.subject_role_id,
        property_name=relation.effect.target_property,
        operator=CompareOp.GE,
        value=IntValue(value=0),
    )


def _build_guard(relation: Relation) -> Constraint:
    target_property = relation.effect.target_property
    return Constraint(
        id=new_type_id(),
        name=auto_constraint_name(target_property),
        description=auto_constraint_description(target_property, relation.name),
        concept_id=relation.concept_id,
        relation_id=relation.id,
        expression=expected_guard_expression(relation),
        auto_generated=True,
    )


def auto_generate_constraints(
    relations: RelationRegistry,
    constraints: ConstraintRegistry,
) -> bool:
    """Synchronise auto-generated guards with the Subtract relations.

    Mutates ``constraints`` in place and bumps its version only if
    something changed.

    Returns:
        True if any guard was inserted, regenerated or retracted.
    """
    subtract_relations = [r for r in relations.relations if r.is_subtract()]
    subtract_ids = {r.id for r in subtract_relations}

    changed = False

    # Retract guards whose relation is gone or no longer subtracts.
    kept: list[Constraint] = []
    for constraint in constraints.constraints:
        if (
            constraint.auto_generated
            and constraint.relation_id is not None
            and constraint.relation_id not in subtract_ids
        ):
            logger.info(
                "Retracting auto-constraint %r (relation %s no longer subtracts)",
                constraint.name,
                constraint.relation_id,
            )
            metrics.record_auto_constraint_change("retracted")
            changed = True
            continue
        kept.append(constraint)

    for relation in subtract_relations:
        expected = expected_guard_expression(relation)
        indices = [
            i for i, c in enumerate(kept)
            if c.auto_generated and c.relation_id == relation.id
        ]
        if not indices:
            guard = _build_guard(relation)
            kept.append(guard)
            logger.debug("Inserted auto-constraint %r for %r", guard.name, relation.name)
            metrics.record_auto_constraint_change("inserted")
            changed = True
            continue

        index, duplicates = indices[0], indices[1:]
        if kept[index].expression != expected:
            guard = _build_guard(relation)
            logger.info(
                "Regenerating auto-constraint %r -> %r for %r",
                kept[index].name,
                guard.name,
                relation.name,
            )
            kept[index] = guard
            metrics.record_auto_constraint_change("regenerated")
            changed = True
        # Up to date: leave the existing constraint (and its id) alone.

        if duplicates:
            # One guard per relation; extra copies come from loaded or pasted data.
            logger.info(
                "Dropping %d duplicate auto-constraint(s) for %r",
                len(duplicates),
                relation.name,
            )
            for _ in duplicates:
                metrics.record_auto_constraint_change("retracted")
            dropped = set(duplicates)
            kept = [c for i, c in enumerate(kept) if i not in dropped]
            changed = True

    if changed:
        constraints.constraints = kept
        constraints.mark_changed()
    return changed


class ConstraintAutoGenerator:
    """Reactive wrapper: only synchronises when its inputs changed."""

    def __init__(self) -> None:
        self._tracker = ChangeTracker()

    def run(
        self,
        relations: RelationRegistry,
        constraints: ConstraintRegistry,
    ) -> bool:
        if not self._tracker.changed(relations, constraints):
            return False
        changed = auto_generate_constraints(relations, constraints)
        # Observe our own write so it doesn't retrigger next tick.
        self._tracker.mark_seen(relations, constraints)
        return changed
