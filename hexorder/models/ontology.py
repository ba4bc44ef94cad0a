"""
Ontology model: concepts, roles, bindings, relations and constraints.

These are designer-defined abstractions that give meaning to entity types
and their properties without hardcoding any game terms. Everything here
is a plain value type; the validator, auto-generator and move evaluator
are separate pure functions over these registries.

Relation effects and constraint expressions are closed tagged unions
discriminated by ``kind``, so the whole ontology round-trips through
``model_dump_json`` / ``model_validate_json``.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from ..errors import DuplicateIdentifierError, UnknownReferenceError
from .core import EntityRole, PropertyValue, TypeId, VersionedModel, new_type_id


# ---------------------------------------------------------------------------
# Concepts
# ---------------------------------------------------------------------------


class ConceptRole(BaseModel):
    """A named slot within a concept that entity types bind to.

    Example: the "Motion" concept has roles "traveler" (Token) and
    "terrain" (BoardPosition).
    """
    id: TypeId = Field(default_factory=new_type_id)
    name: str
    allowed_entity_roles: List[EntityRole] = Field(default_factory=list)


class Concept(BaseModel):
    """An abstract category grouping related behaviours, e.g. "Motion"."""
    id: TypeId = Field(default_factory=new_type_id)
    name: str
    description: str = ""
    role_labels: List[ConceptRole] = Field(default_factory=list)

    def get_role(self, role_id: TypeId) -> Optional[ConceptRole]:
        return next((r for r in self.role_labels if r.id == role_id), None)

    def has_role(self, role_id: TypeId) -> bool:
        return self.get_role(role_id) is not None


class PropertyBinding(BaseModel):
    """Maps an entity type's property to a concept-local name."""
    property_id: TypeId
    concept_local_name: str


class ConceptBinding(BaseModel):
    """Binds an entity type to a concept role.

    Example: Infantry binds to Motion's "traveler" role, mapping its
    ``movement_points`` property as concept-local name "budget".
    """
    id: TypeId = Field(default_factory=new_type_id)
    entity_type_id: TypeId
    concept_id: TypeId
    concept_role_id: TypeId
    property_bindings: List[PropertyBinding] = Field(default_factory=list)

    def binds(self, concept_id: TypeId, role_id: TypeId) -> bool:
        return self.concept_id == concept_id and self.concept_role_id == role_id

    def property_for(self, concept_local_name: str) -> Optional[TypeId]:
        for prop_binding in self.property_bindings:
            if prop_binding.concept_local_name == concept_local_name:
                return prop_binding.property_id
        return None


# ---------------------------------------------------------------------------
# Constraint expressions
# ---------------------------------------------------------------------------


class CompareOp(str, Enum):
    EQ = "eq"
    NE = "ne"
    LT = "lt"
    LE = "le"
    GT = "gt"
    GE = "ge"

    @property
    def symbol(self) -> str:
        return _COMPARE_SYMBOLS[self]


_COMPARE_SYMBOLS = {
    CompareOp.EQ: "==",
    CompareOp.NE: "!=",
    CompareOp.LT: "<",
    CompareOp.LE: "<=",
    CompareOp.GT: ">",
    CompareOp.GE: ">=",
}


class PropertyCompare(BaseModel):
    """Compare a property against a literal, e.g. traveler.budget >= 0"""
    kind: Literal["property_compare"] = "property_compare"
    role_id: TypeId
    property_name: str
    operator: CompareOp
    value: PropertyValue


class CrossCompare(BaseModel):
    """Compare two properties across roles, e.g. traveler.budget >= terrain.cost"""
    kind: Literal["cross_compare"] = "cross_compare"
    left_role_id: TypeId
    left_property: str
    operator: CompareOp
    right_role_id: TypeId
    right_property: str


class IsType(BaseModel):
    kind: Literal["is_type"] = "is_type"
    role_id: TypeId
    entity_type_id: TypeId


class IsNotType(BaseModel):
    kind: Literal["is_not_type"] = "is_not_type"
    role_id: TypeId
    entity_type_id: TypeId


class PathBudget(BaseModel):
    """sum(path.<cost_role>.<cost_property>) <= <budget_role>.<budget_property>"""
    kind: Literal["path_budget"] = "path_budget"
    concept_id: TypeId
    cost_property: str
    cost_role_id: TypeId
    budget_property: str
    budget_role_id: TypeId


class AllOf(BaseModel):
    kind: Literal["all"] = "all"
    exprs: List[ConstraintExpr] = Field(default_factory=list)


class AnyOf(BaseModel):
    kind: Literal["any"] = "any"
    exprs: List[ConstraintExpr] = Field(default_factory=list)


class Not(BaseModel):
    kind: Literal["not"] = "not"
    expr: ConstraintExpr


ConstraintExpr = Annotated[
    Union[
        PropertyCompare,
        CrossCompare,
        IsType,
        IsNotType,
        PathBudget,
        AllOf,
        AnyOf,
        Not,
    ],
    Field(discriminator="kind"),
]


# ---------------------------------------------------------------------------
# Relations
# ---------------------------------------------------------------------------


class RelationTrigger(str, Enum):
    ON_ENTER = "on_enter"
    ON_EXIT = "on_exit"
    WHILE_PRESENT = "while_present"


class ModifyOperation(str, Enum):
    ADD = "add"
    SUBTRACT = "subtract"
    MULTIPLY = "multiply"
    MIN = "min"
    MAX = "max"


class ModifyProperty(BaseModel):
    """Modify a numeric property of the subject using one of the object.

    ``target_property`` is the concept-local name on the subject,
    ``source_property`` the concept-local name on the object.
    """
    kind: Literal["modify_property"] = "modify_property"
    target_property: str
    source_property: str
    operation: ModifyOperation


class Block(BaseModel):
    """Block the subject from the position; no condition blocks always."""
    kind: Literal["block"] = "block"
    condition: Optional[ConstraintExpr] = None


class Allow(BaseModel):
    kind: Literal["allow"] = "allow"
    condition: Optional[ConstraintExpr] = None


RelationEffect = Annotated[
    Union[ModifyProperty, Block, Allow],
    Field(discriminator="kind"),
]


class Relation(BaseModel):
    """A triggered rule between two roles of one concept.

    Example: "Terrain Movement Cost": when a traveler enters terrain,
    subtract the terrain's cost from the traveler's budget.
    """
    id: TypeId = Field(default_factory=new_type_id)
    name: str
    concept_id: TypeId
    subject_role_id: TypeId
    object_role_id: TypeId
    trigger: RelationTrigger = RelationTrigger.ON_ENTER
    effect: RelationEffect

    def is_subtract(self) -> bool:
        return (
            isinstance(self.effect, ModifyProperty)
            and self.effect.operation == ModifyOperation.SUBTRACT
        )


# ---------------------------------------------------------------------------
# Constraints
# ---------------------------------------------------------------------------


class Constraint(BaseModel):
    """A named condition that should hold within a concept.

    Auto-generated constraints carry the id of the relation they were
    derived from and are kept in lockstep with it.
    """
    id: TypeId = Field(default_factory=new_type_id)
    name: str
    description: str = ""
    concept_id: TypeId
    relation_id: Optional[TypeId] = None
    expression: ConstraintExpr
    auto_generated: bool = False


for _model in (AllOf, AnyOf, Not, Block, Allow, Relation, Constraint):
    _model.model_rebuild()


# ---------------------------------------------------------------------------
# Registries
# ---------------------------------------------------------------------------


class ConceptRegistry(VersionedModel):
    """All concepts and their bindings."""
    concepts: List[Concept] = Field(default_factory=list)
    bindings: List[ConceptBinding] = Field(default_factory=list)

    def get_concept(self, concept_id: TypeId) -> Optional[Concept]:
        return next((c for c in self.concepts if c.id == concept_id), None)

    def require_concept(self, concept_id: TypeId) -> Concept:
        concept = self.get_concept(concept_id)
        if concept is None:
            raise UnknownReferenceError(
                "Concept is not registered", kind="concept", reference_id=concept_id
            )
        return concept

    def get_binding(self, binding_id: TypeId) -> Optional[ConceptBinding]:
        return next((b for b in self.bindings if b.id == binding_id), None)

    def bindings_for_entity_type(self, entity_type_id: TypeId) -> List[ConceptBinding]:
        return [b for b in self.bindings if b.entity_type_id == entity_type_id]

    def bindings_for_role(
        self, concept_id: TypeId, role_id: TypeId
    ) -> List[ConceptBinding]:
        return [b for b in self.bindings if b.binds(concept_id, role_id)]

    def add_concept(self, concept: Concept) -> Concept:
        if self.get_concept(concept.id) is not None:
            raise DuplicateIdentifierError(
                f"Concept {concept.name!r} is already registered",
                reference_id=concept.id,
            )
        self.concepts.append(concept)
        self.mark_changed()
        return concept

    def remove_concept(self, concept_id: TypeId) -> Concept:
        """Remove a concept. Bindings that referenced it are left dangling."""
        concept = self.require_concept(concept_id)
        self.concepts = [c for c in self.concepts if c.id != concept_id]
        self.mark_changed()
        return concept

    def add_binding(self, binding: ConceptBinding) -> ConceptBinding:
        if self.get_binding(binding.id) is not None:
            raise DuplicateIdentifierError(
                "Concept binding is already registered", reference_id=binding.id
            )
        self.bindings.append(binding)
        self.mark_changed()
        return binding

    def remove_binding(self, binding_id: TypeId) -> ConceptBinding:
        binding = self.get_binding(binding_id)
        if binding is None:
            raise UnknownReferenceError(
                "Concept binding is not registered",
                kind="binding",
                reference_id=binding_id,
            )
        self.bindings = [b for b in self.bindings if b.id != binding_id]
        self.mark_changed()
        return binding


class RelationRegistry(VersionedModel):
    """All relations."""
    relations: List[Relation] = Field(default_factory=list)

    def get(self, relation_id: TypeId) -> Optional[Relation]:
        return next((r for r in self.relations if r.id == relation_id), None)

    def require(self, relation_id: TypeId) -> Relation:
        relation = self.get(relation_id)
        if relation is None:
            raise UnknownReferenceError(
                "Relation is not registered", kind="relation", reference_id=relation_id
            )
        return relation

    def on_enter(self) -> List[Relation]:
        return [r for r in self.relations if r.trigger == RelationTrigger.ON_ENTER]

    def add_relation(self, relation: Relation) -> Relation:
        if self.get(relation.id) is not None:
            raise DuplicateIdentifierError(
                f"Relation {relation.name!r} is already registered",
                reference_id=relation.id,
            )
        self.relations.append(relation)
        self.mark_changed()
        return relation

    def update_relation(self, relation_id: TypeId, **changes) -> Relation:
        """Replace a relation with a copy carrying ``changes``; id is kept."""
        current = self.require(relation_id)
        updated = current.model_copy(update=changes)
        self.relations = [updated if r.id == relation_id else r for r in self.relations]
        self.mark_changed()
        return updated

    def remove_relation(self, relation_id: TypeId) -> Relation:
        relation = self.require(relation_id)
        self.relations = [r for r in self.relations if r.id != relation_id]
        self.mark_changed()
        return relation


class ConstraintRegistry(VersionedModel):
    """All constraints, designer-authored and auto-generated."""
    constraints: List[Constraint] = Field(default_factory=list)

    def get(self, constraint_id: TypeId) -> Optional[Constraint]:
        return next((c for c in self.constraints if c.id == constraint_id), None)

    def auto_generated_for(self, relation_id: TypeId) -> Optional[Constraint]:
        return next(
            (
                c for c in self.constraints
                if c.auto_generated and c.relation_id == relation_id
            ),
            None,
        )

    def add_constraint(self, constraint: Constraint) -> Constraint:
        if self.get(constraint.id) is not None:
            raise DuplicateIdentifierError(
                f"Constraint {constraint.name!r} is already registered",
                reference_id=constraint.id,
            )
        self.constraints.append(constraint)
        self.mark_changed()
        return constraint

    def remove_constraint(self, constraint_id: TypeId) -> Constraint:
        constraint = self.get(constraint_id)
        if constraint is None:
            raise UnknownReferenceError(
                "Constraint is not registered",
                kind="constraint",
                reference_id=constraint_id,
            )
        self.constraints = [c for c in self.constraints if c.id != constraint_id]
        self.mark_changed()
        return constraint
