"""Schema validation of the ontology registries.

Checks the concept/relation/constraint definitions for internal
consistency and against the entity-type registry. Validation is purely
diagnostic: it never raises and never blocks editing; it reports.

Checks performed (all of them, every pass, never short-circuited):

1. ``ConceptBinding`` references an existing entity type, concept and
   concept role.
2. The bound entity type's role is allowed by the concept role.
3. Each ``PropertyBinding`` references a property of the entity type.
4. Each ``Relation`` references an existing concept and two distinct
   roles within it.
5. Each ``Constraint`` expression references roles of its concept and
   concept-local property names bound for those roles.
6. Every concept role has at least one binding.
"""

from __future__ import annotations

import logging

from .. import metrics
from ..change_tracking import ChangeTracker
from ..models import (
    AllOf,
    AnyOf,
    Concept,
    ConceptBinding,
    ConceptRegistry,
    ConstraintExpr,
    ConstraintRegistry,
    CrossCompare,
    EntityTypeRegistry,
    IsNotType,
    IsType,
    Not,
    PathBudget,
    PropertyCompare,
    RelationRegistry,
    SchemaError,
    SchemaErrorCategory,
    SchemaValidation,
    TypeId,
)

logger = logging.getLogger(__name__)

__all__ = ["SchemaValidator", "validate_schema"]


def _check_bindings(
    concepts: ConceptRegistry,
    entity_types: EntityTypeRegistry,
    errors: list[SchemaError],
) -> None:
    for binding in concepts.bindings:
        entity_type = entity_types.get(binding.entity_type_id)
        if entity_type is None:
            errors.append(SchemaError(
                category=SchemaErrorCategory.DANGLING_REFERENCE,
                message=(
                    "ConceptBinding references non-existent entity type "
                    f"{binding.entity_type_id}"
                ),
                source_id=binding.id,
            ))

        concept = concepts.get_concept(binding.concept_id)
        if concept is None:
            errors.append(SchemaError(
                category=SchemaErrorCategory.DANGLING_REFERENCE,
                message=(
                    "ConceptBinding references non-existent concept "
                    f"{binding.concept_id}"
                ),
                source_id=binding.id,
            ))

        concept_role = concept.get_role(binding.concept_role_id) if concept else None
        if concept is not None and concept_role is None:
            errors.append(SchemaError(
                category=SchemaErrorCategory.DANGLING_REFERENCE,
                message=(
                    "ConceptBinding references non-existent concept role "
                    f"{binding.concept_role_id} within concept \"{concept.name}\""
                ),
                source_id=binding.id,
            ))

        if (
            entity_type is not None
            and concept_role is not None
            and entity_type.role not in concept_role.allowed_entity_roles
        ):
            allowed = ", ".join(r.value for r in concept_role.allowed_entity_roles)
            errors.append(SchemaError(
                category=SchemaErrorCategory.ROLE_MISMATCH,
                message=(
                    f"Entity type \"{entity_type.name}\" has role "
                    f"{entity_type.role.value} but concept role "
                    f"\"{concept_role.name}\" only allows [{allowed}]"
                ),
                source_id=binding.id,
            ))

        if entity_type is not None:
            for prop_binding in binding.property_bindings:
                if not entity_type.has_property(prop_binding.property_id):
                    errors.append(SchemaError(
                        category=SchemaErrorCategory.PROPERTY_MISMATCH,
                        message=(
                            "PropertyBinding references non-existent property "
                            f"{prop_binding.property_id} on entity type "
                            f"\"{entity_type.name}\""
                        ),
                        source_id=binding.id,
                    ))


def _check_relations(
    concepts: ConceptRegistry,
    relations: RelationRegistry,
    errors: list[SchemaError],
) -> None:
    for relation in relations.relations:
        concept = concepts.get_concept(relation.concept_id)
        if concept is None:
            errors.append(SchemaError(
                category=SchemaErrorCategory.DANGLING_REFERENCE,
                message=(
                    f"Relation \"{relation.name}\" references non-existent "
                    f"concept {relation.concept_id}"
                ),
                source_id=relation.id,
            ))
            continue

        subject_exists = concept.has_role(relation.subject_role_id)
        object_exists = concept.has_role(relation.object_role_id)

        if not subject_exists:
            errors.append(SchemaError(
                category=SchemaErrorCategory.DANGLING_REFERENCE,
                message=(
                    f"Relation \"{relation.name}\" references non-existent subject "
                    f"role {relation.subject_role_id} in concept \"{concept.name}\""
                ),
                source_id=relation.id,
            ))
        if not object_exists:
            errors.append(SchemaError(
                category=SchemaErrorCategory.DANGLING_REFERENCE,
                message=(
                    f"Relation \"{relation.name}\" references non-existent object "
                    f"role {relation.object_role_id} in concept \"{concept.name}\""
                ),
                source_id=relation.id,
            ))
        if (
            subject_exists
            and object_exists
            and relation.subject_role_id == relation.object_role_id
        ):
            errors.append(SchemaError(
                category=SchemaErrorCategory.INVALID_EXPRESSION,
                message=(
                    f"Relation \"{relation.name}\" has the same role for "
                    "subject and object"
                ),
                source_id=relation.id,
            ))


def _check_role_exists(
    role_id: TypeId,
    concept: Concept,
    source_id: TypeId,
    errors: list[SchemaError],
) -> bool:
    if concept.has_role(role_id):
        return True
    errors.append(SchemaError(
        category=SchemaErrorCategory.INVALID_EXPRESSION,
        message=(
            f"Constraint expression references non-existent role {role_id} "
            f"in concept \"{concept.name}\""
        ),
        source_id=source_id,
    ))
    return False


def _check_role_and_property(
    role_id: TypeId,
    property_name: str,
    concept: Concept,
    bindings: list[ConceptBinding],
    source_id: TypeId,
    errors: list[SchemaError],
) -> None:
    if not _check_role_exists(role_id, concept, source_id, errors):
        return

    role_bindings = [b for b in bindings if b.binds(concept.id, role_id)]
    # An unbound role is reported once by the missing-binding check.
    if not role_bindings:
        return

    if not any(b.property_for(property_name) is not None for b in role_bindings):
        errors.append(SchemaError(
            category=SchemaErrorCategory.INVALID_EXPRESSION,
            message=(
                "Constraint expression references unknown concept-local "
                f"property \"{property_name}\" for role {role_id} in concept "
                f"\"{concept.name}\""
            ),
            source_id=source_id,
        ))


def _check_expression(
    expr: ConstraintExpr,
    concept: Concept,
    bindings: list[ConceptBinding],
    source_id: TypeId,
    errors: list[SchemaError],
) -> None:
    if isinstance(expr, PropertyCompare):
        _check_role_and_property(
            expr.role_id, expr.property_name, concept, bindings, source_id, errors
        )
    elif isinstance(expr, CrossCompare):
        _check_role_and_property(
            expr.left_role_id, expr.left_property, concept, bindings, source_id, errors
        )
        _check_role_and_property(
            expr.right_role_id, expr.right_property, concept, bindings, source_id, errors
        )
    elif isinstance(expr, (IsType, IsNotType)):
        _check_role_exists(expr.role_id, concept, source_id, errors)
    elif isinstance(expr, PathBudget):
        _check_role_and_property(
            expr.cost_role_id, expr.cost_property, concept, bindings, source_id, errors
        )
        _check_role_and_property(
            expr.budget_role_id, expr.budget_property, concept, bindings, source_id, errors
        )
    elif isinstance(expr, (AllOf, AnyOf)):
        for sub in expr.exprs:
            _check_expression(sub, concept, bindings, source_id, errors)
    elif isinstance(expr, Not):
        _check_expression(expr.expr, concept, bindings, source_id, errors)


def _check_constraints(
    concepts: ConceptRegistry,
    constraints: ConstraintRegistry,
    errors: list[SchemaError],
) -> None:
    for constraint in constraints.constraints:
        concept = concepts.get_concept(constraint.concept_id)
        if concept is None:
            errors.append(SchemaError(
                category=SchemaErrorCategory.DANGLING_REFERENCE,
                message=(
                    f"Constraint \"{constraint.name}\" references non-existent "
                    f"concept {constraint.concept_id}"
                ),
                source_id=constraint.id,
            ))
            continue
        _check_expression(
            constraint.expression, concept, concepts.bindings, constraint.id, errors
        )


def _check_missing_bindings(
    concepts: ConceptRegistry,
    errors: list[SchemaError],
) -> None:
    for concept in concepts.concepts:
        for role in concept.role_labels:
            if not concepts.bindings_for_role(concept.id, role.id):
                errors.append(SchemaError(
                    category=SchemaErrorCategory.MISSING_BINDING,
                    message=(
                        f"Concept role \"{role.name}\" in concept "
                        f"\"{concept.name}\" has no entity type bindings"
                    ),
                    source_id=concept.id,
                ))


def validate_schema(
    concepts: ConceptRegistry,
    relations: RelationRegistry,
    constraints: ConstraintRegistry,
    entity_types: EntityTypeRegistry,
) -> SchemaValidation:
    """Run every schema check and return the accumulated result."""
    errors: list[SchemaError] = []

    _check_bindings(concepts, entity_types, errors)
    _check_relations(concepts, relations, errors)
    _check_constraints(concepts, constraints, errors)
    _check_missing_bindings(concepts, errors)

    validation = SchemaValidation(errors=errors, is_valid=not errors)
    logger.debug(
        "Schema validation: %d error(s) across %d binding(s), %d relation(s), "
        "%d constraint(s)",
        len(errors),
        len(concepts.bindings),
        len(relations.relations),
        len(constraints.constraints),
    )
    metrics.record_schema_validation(
        validation.is_valid, [e.category.value for e in errors]
    )
    return validation


class SchemaValidator:
    """Reactive wrapper around ``validate_schema``.

    Re-validates only when one of the four registries changed since the
    last pass; otherwise returns the previous result object unchanged.
    """

    def __init__(self) -> None:
        self._tracker = ChangeTracker()
        self.result = SchemaValidation()

    def run(
        self,
        concepts: ConceptRegistry,
        relations: RelationRegistry,
        constraints: ConstraintRegistry,
        entity_types: EntityTypeRegistry,
    ) -> SchemaValidation:
        if self._tracker.changed(concepts, relations, constraints, entity_types):
            self.result = validate_schema(concepts, relations, constraints, entity_types)
            self._tracker.mark_seen(concepts, relations, constraints, entity_types)
        return self.result
