"""Builders shared by the hexorder test suites.

``build_motion_ontology`` creates the canonical Motion ontology: an
Infantry token bound as traveler (movement_points aliased to "budget"),
a Plains board position bound as terrain (terrain_cost aliased to
"cost"), and a Subtract relation charging the terrain cost on entry.
"""

from dataclasses import dataclass
from typing import Optional

from hexorder.board_manager import BoardManager
from hexorder.models import (
    ORIGIN,
    BoardState,
    Concept,
    ConceptBinding,
    ConceptRegistry,
    ConceptRole,
    ConstraintRegistry,
    EntityData,
    EntityRole,
    EntityType,
    EntityTypeRegistry,
    HexGridConfig,
    HexPosition,
    IntValue,
    ModifyOperation,
    ModifyProperty,
    PropertyBinding,
    PropertyDefinition,
    PropertyType,
    PropertyValue,
    Relation,
    RelationRegistry,
)


@dataclass
class MotionOntology:
    """Handles and ids for the Motion test ontology."""
    entity_types: EntityTypeRegistry
    concepts: ConceptRegistry
    relations: RelationRegistry
    constraints: ConstraintRegistry

    infantry: EntityType
    plains: EntityType
    movement_points: PropertyDefinition
    terrain_cost: PropertyDefinition

    concept: Concept
    traveler: ConceptRole
    terrain: ConceptRole
    infantry_binding: ConceptBinding
    plains_binding: ConceptBinding
    cost_relation: Relation

    def unit_data(self, movement_points: Optional[PropertyValue] = None) -> EntityData:
        data = EntityData.spawn(self.infantry)
        if movement_points is not None:
            data.properties[self.movement_points.id] = movement_points
        return data

    def plains_data(self, cost: int = 1) -> EntityData:
        data = EntityData.spawn(self.plains)
        data.properties[self.terrain_cost.id] = IntValue(value=cost)
        return data


def build_motion_ontology(with_relation: bool = True) -> MotionOntology:
    movement_points = PropertyDefinition(
        name="movement_points",
        property_type=PropertyType.INT,
        default_value=IntValue(value=4),
    )
    infantry = EntityType(
        name="Infantry", role=EntityRole.TOKEN, properties=[movement_points]
    )
    terrain_cost = PropertyDefinition(
        name="terrain_cost",
        property_type=PropertyType.INT,
        default_value=IntValue(value=1),
    )
    plains = EntityType(
        name="Plains", role=EntityRole.BOARD_POSITION, properties=[terrain_cost]
    )
    entity_types = EntityTypeRegistry(types=[infantry, plains])

    traveler = ConceptRole(name="traveler", allowed_entity_roles=[EntityRole.TOKEN])
    terrain = ConceptRole(
        name="terrain", allowed_entity_roles=[EntityRole.BOARD_POSITION]
    )
    concept = Concept(name="Motion", role_labels=[traveler, terrain])

    infantry_binding = ConceptBinding(
        entity_type_id=infantry.id,
        concept_id=concept.id,
        concept_role_id=traveler.id,
        property_bindings=[
            PropertyBinding(property_id=movement_points.id, concept_local_name="budget")
        ],
    )
    plains_binding = ConceptBinding(
        entity_type_id=plains.id,
        concept_id=concept.id,
        concept_role_id=terrain.id,
        property_bindings=[
            PropertyBinding(property_id=terrain_cost.id, concept_local_name="cost")
        ],
    )
    concepts = ConceptRegistry(
        concepts=[concept], bindings=[infantry_binding, plains_binding]
    )

    cost_relation = Relation(
        name="Terrain Movement Cost",
        concept_id=concept.id,
        subject_role_id=traveler.id,
        object_role_id=terrain.id,
        effect=ModifyProperty(
            target_property="budget",
            source_property="cost",
            operation=ModifyOperation.SUBTRACT,
        ),
    )
    relations = RelationRegistry(relations=[cost_relation] if with_relation else [])

    return MotionOntology(
        entity_types=entity_types,
        concepts=concepts,
        relations=relations,
        constraints=ConstraintRegistry(),
        infantry=infantry,
        plains=plains,
        movement_points=movement_points,
        terrain_cost=terrain_cost,
        concept=concept,
        traveler=traveler,
        terrain=terrain,
        infantry_binding=infantry_binding,
        plains_binding=plains_binding,
        cost_relation=cost_relation,
    )


def make_board(
    motion: MotionOntology,
    grid: HexGridConfig,
    movement_points: Optional[PropertyValue] = None,
    cost: int = 1,
    unit_id: str = "unit-1",
    unit_at: HexPosition = ORIGIN,
) -> BoardState:
    """Board fully tiled with Plains of uniform ``cost`` and one Infantry."""
    board = BoardManager.fill_board(
        BoardState(), grid, lambda _pos: motion.plains_data(cost)
    )
    board.place_unit(unit_id, unit_at, motion.unit_data(movement_points))
    return board
