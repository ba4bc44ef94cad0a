"""Resolution of concept-local property names through concept bindings.

A relation names properties by concept-local name ("budget", "cost"). To
read a concrete value, find the binding of the entity's type to the
relation's concept and role, map the local name to a property id, and
read that id off the instance data.
"""

from __future__ import annotations

from typing import Iterable, Optional

from ..models import (
    ConceptBinding,
    EntityData,
    PropertyValue,
    Relation,
    TypeId,
)

__all__ = [
    "binds_role",
    "resolve_concept_property",
    "subject_bound",
]


def binds_role(
    bindings: Iterable[ConceptBinding],
    entity_type_id: TypeId,
    concept_id: TypeId,
    role_id: TypeId,
) -> bool:
    """True if some binding ties ``entity_type_id`` to (concept, role)."""
    return any(
        b.entity_type_id == entity_type_id and b.binds(concept_id, role_id)
        for b in bindings
    )


def resolve_concept_property(
    entity_data: EntityData,
    concept_local_name: str,
    concept_id: TypeId,
    role_id: TypeId,
    bindings: Iterable[ConceptBinding],
) -> Optional[PropertyValue]:
    """Read the value behind a concept-local name, or None if unresolvable."""
    for binding in bindings:
        if (
            binding.entity_type_id != entity_data.entity_type_id
            or not binding.binds(concept_id, role_id)
        ):
            continue
        property_id = binding.property_for(concept_local_name)
        if property_id is not None:
            return entity_data.get(property_id)
    return None


def subject_bound(relation: Relation, unit_bindings: Iterable[ConceptBinding]) -> bool:
    return any(
        b.binds(relation.concept_id, relation.subject_role_id) for b in unit_bindings
    )
