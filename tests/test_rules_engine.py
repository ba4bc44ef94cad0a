"""Tests for hexorder.rules - budget resolution, step evaluation and search."""

import pytest

from hexorder import config
from hexorder.board_manager import BoardManager
from hexorder.models import (
    ORIGIN,
    AllOf,
    Block,
    CompareOp,
    Concept,
    ConceptBinding,
    ConceptRegistry,
    ConceptRole,
    Constraint,
    EntityData,
    EntityRole,
    EntityType,
    FloatValue,
    HexGridConfig,
    HexPosition,
    IntValue,
    IsNotType,
    IsType,
    ModifyOperation,
    ModifyProperty,
    Not,
    PropertyBinding,
    PropertyCompare,
    PropertyDefinition,
    PropertyType,
    Relation,
    RelationTrigger,
    SelectedUnit,
    StringValue,
)
from hexorder.rules import (
    MoveEvaluator,
    StepBlocked,
    StepContext,
    StepValid,
    compute_valid_moves,
    determine_budget,
    evaluate_block_condition,
    evaluate_step,
)
from tests.helpers import build_motion_ontology, make_board


def _moves(motion, selected, grid, board):
    return compute_valid_moves(
        selected,
        motion.concepts,
        motion.relations,
        motion.constraints,
        motion.entity_types,
        grid,
        board,
    )


def _ring(radius):
    return {
        p for p in BoardManager.iter_positions(radius) if p.distance(ORIGIN) == radius
    }


def _add_terrain_type(motion, name, cost=1, roles=("terrain",)):
    """Register a BoardPosition type bound to the named Motion roles."""
    cost_prop = PropertyDefinition(
        name="terrain_cost",
        property_type=PropertyType.INT,
        default_value=IntValue(value=1),
    )
    entity_type = EntityType(
        name=name, role=EntityRole.BOARD_POSITION, properties=[cost_prop]
    )
    motion.entity_types.add_type(entity_type)
    for role_name in roles:
        role = next(r for r in motion.concept.role_labels if r.name == role_name)
        motion.concepts.add_binding(ConceptBinding(
            entity_type_id=entity_type.id,
            concept_id=motion.concept.id,
            concept_role_id=role.id,
            property_bindings=[
                PropertyBinding(property_id=cost_prop.id, concept_local_name="cost")
            ],
        ))
    data = EntityData.spawn(entity_type)
    data.properties[cost_prop.id] = IntValue(value=cost)
    return entity_type, data


def _block_relation(motion, name, object_role_id=None, condition=None):
    relation = Relation(
        name=name,
        concept_id=motion.concept.id,
        subject_role_id=motion.traveler.id,
        object_role_id=object_role_id or motion.terrain.id,
        effect=Block(condition=condition),
    )
    motion.relations.add_relation(relation)
    return relation


class TestNoSelection:
    """Empty results when there is nothing to move."""

    def test_nothing_selected(self, motion, grid):
        board = make_board(motion, grid)
        result = _moves(motion, SelectedUnit(), grid, board)
        assert result.valid_positions == set()
        assert result.blocked_explanations == {}
        assert result.for_entity is None

    def test_selected_unit_not_on_board(self, motion, grid, selected):
        board = make_board(motion, grid, unit_id="someone-else")
        result = _moves(motion, selected, grid, board)
        assert result.for_entity is None
        assert result.valid_positions == set()


class TestFreeMovement:
    """Without OnEnter relations or constraints every hex is reachable."""

    @pytest.mark.parametrize("radius", [0, 1, 3, 5])
    def test_all_hexes_but_own(self, radius, selected):
        motion = build_motion_ontology(with_relation=False)
        grid = HexGridConfig(map_radius=radius)
        board = make_board(motion, grid)

        result = _moves(motion, selected, grid, board)

        assert len(result.valid_positions) == 3 * radius * (radius + 1)
        assert ORIGIN not in result.valid_positions
        assert result.for_entity == "unit-1"

    def test_on_exit_relations_do_not_constrain(self, motion, grid, selected):
        motion.relations.update_relation(
            motion.cost_relation.id, trigger=RelationTrigger.ON_EXIT
        )
        board = make_board(motion, grid, movement_points=IntValue(value=0))

        result = _moves(motion, selected, grid, board)

        assert len(result.valid_positions) == 36

    def test_constraints_alone_use_budgeted_search(self, grid, selected):
        """Constraints force the search path; with no costs it still reaches all."""
        motion = build_motion_ontology(with_relation=False)
        motion.constraints.add_constraint(Constraint(
            name="Manual",
            concept_id=motion.concept.id,
            expression=PropertyCompare(
                role_id=motion.traveler.id,
                property_name="budget",
                operator=CompareOp.GE,
                value=IntValue(value=0),
            ),
        ))
        board = make_board(motion, grid)

        result = _moves(motion, selected, grid, board)

        assert len(result.valid_positions) == 36
        assert set(result.remaining_budgets.values()) == {4}


class TestBudgetLimiting:
    """Subtract relations spend the unit's budget."""

    def test_budget_two_uniform_cost_one(self, motion, grid, selected):
        board = make_board(motion, grid, movement_points=IntValue(value=2), cost=1)

        result = _moves(motion, selected, grid, board)

        assert result.valid_positions == _ring(1) | _ring(2)
        assert not result.valid_positions & _ring(3)
        assert all(result.remaining_budgets[p] == 1 for p in _ring(1))
        assert all(result.remaining_budgets[p] == 0 for p in _ring(2))

    def test_float_budget_truncates(self, motion, grid, selected):
        board = make_board(motion, grid, movement_points=FloatValue(value=1.9))

        result = _moves(motion, selected, grid, board)

        assert result.valid_positions == _ring(1)

    def test_over_budget_explanation(self, motion, grid, selected):
        board = make_board(motion, grid, movement_points=IntValue(value=1))
        expensive = HexPosition(q=1, r=0)
        board.place_tile(expensive, motion.plains_data(cost=3))

        result = _moves(motion, selected, grid, board)

        assert not result.is_valid(expensive)
        reasons = result.reasons_for(expensive)
        assert len(reasons) == 1
        assert reasons[0].constraint_id == motion.cost_relation.id
        assert reasons[0].constraint_name == "Terrain Movement Cost"
        assert reasons[0].satisfied is False
        assert reasons[0].explanation == (
            "Infantry cannot reach (1, 0): path cost 3 exceeds budget of 1"
        )

    def test_negative_budget_blocks_even_free_steps(self, motion, grid, selected):
        board = make_board(motion, grid, movement_points=IntValue(value=-3), cost=0)

        result = _moves(motion, selected, grid, board)

        assert result.valid_positions == set()
        assert set(result.blocked_explanations) == _ring(1)
        assert result.reasons_for(HexPosition(q=1, r=0))[0].explanation == (
            "Infantry cannot reach (1, 0): path cost 0 exceeds budget of -3"
        )

    def test_negative_budget_on_bare_board(self, motion, selected):
        """Unbound hexes produce no reasons, so nothing is recorded at all."""
        grid = HexGridConfig(map_radius=2)
        board = make_board(motion, grid, movement_points=IntValue(value=-1))
        board.tiles.clear()

        result = _moves(motion, selected, grid, board)

        assert result.valid_positions == set()
        assert result.blocked_explanations == {}

    def test_missing_tiles_cost_nothing(self, motion, grid, selected):
        board = make_board(motion, grid, movement_points=IntValue(value=1))
        board.tiles.clear()

        result = _moves(motion, selected, grid, board)

        assert len(result.valid_positions) == 36

    def test_add_refund_capped_at_initial_budget(self, grid, selected):
        motion = build_motion_ontology(with_relation=False)
        motion.relations.add_relation(Relation(
            name="Road Bonus",
            concept_id=motion.concept.id,
            subject_role_id=motion.traveler.id,
            object_role_id=motion.terrain.id,
            effect=ModifyProperty(
                target_property="budget",
                source_property="cost",
                operation=ModifyOperation.ADD,
            ),
        ))
        board = make_board(motion, grid, movement_points=IntValue(value=2))

        result = _moves(motion, selected, grid, board)

        assert len(result.valid_positions) == 36
        assert set(result.remaining_budgets.values()) == {2}

    def test_non_movement_operations_ignored(self, motion, grid, selected):
        motion.relations.update_relation(
            motion.cost_relation.id,
            effect=ModifyProperty(
                target_property="budget",
                source_property="cost",
                operation=ModifyOperation.MULTIPLY,
            ),
        )
        board = make_board(motion, grid, movement_points=IntValue(value=1), cost=5)

        result = _moves(motion, selected, grid, board)

        assert len(result.valid_positions) == 36


class TestDetermineBudget:
    """Budget resolution strategies, in order."""

    def _budget(self, motion, data):
        return determine_budget(
            motion.concepts.bindings_for_entity_type(motion.infantry.id),
            motion.relations.on_enter(),
            data,
            motion.concepts,
        )

    def test_from_subtract_relation_target(self, motion):
        assert self._budget(motion, motion.unit_data(IntValue(value=7))) == 7

    def test_falls_back_to_budget_name(self, motion):
        motion.relations.update_relation(
            motion.cost_relation.id,
            effect=ModifyProperty(
                target_property="stamina",
                source_property="cost",
                operation=ModifyOperation.SUBTRACT,
            ),
        )
        assert self._budget(motion, motion.unit_data(IntValue(value=5))) == 5

    def test_non_numeric_budget_uses_default(self, motion, monkeypatch):
        monkeypatch.setattr(config, "FALLBACK_BUDGET_PER_CONCEPT", 10)
        data = motion.unit_data(StringValue(value="lots"))
        assert self._budget(motion, data) == 10

    def test_default_scales_with_concepts(self, motion, monkeypatch):
        monkeypatch.setattr(config, "FALLBACK_BUDGET_PER_CONCEPT", 3)
        motion.infantry_binding.property_bindings.clear()
        motion.concepts.add_concept(Concept(name="Supply"))
        motion.concepts.add_concept(Concept(name="Morale"))

        assert self._budget(motion, motion.unit_data()) == 9

    def test_default_with_no_concepts(self, motion, monkeypatch):
        monkeypatch.setattr(config, "FALLBACK_BUDGET_PER_CONCEPT", 10)
        assert determine_budget([], [], motion.unit_data(), ConceptRegistry()) == 10


class TestHardBlocks:
    """Block effects remove positions regardless of budget."""

    def test_unconditional_block_on_tile_type(self, motion, grid, selected):
        obstacle = ConceptRole(
            name="obstacle", allowed_entity_roles=[EntityRole.BOARD_POSITION]
        )
        motion.concept.role_labels.append(obstacle)
        motion.concepts.mark_changed()
        _forest, forest_data = _add_terrain_type(motion, "Forest", roles=("obstacle",))
        relation = _block_relation(motion, "Impassable Forest", obstacle.id)
        board = make_board(motion, grid, movement_points=IntValue(value=10))
        target = HexPosition(q=1, r=0)
        board.place_tile(target, forest_data)

        result = _moves(motion, selected, grid, board)

        assert not result.is_valid(target)
        assert len(result.valid_positions) == 35
        reasons = result.reasons_for(target)
        assert [r.explanation for r in reasons] == [
            "Infantry cannot enter Forest: Impassable Forest blocks entry"
        ]
        assert reasons[0].constraint_id == relation.id

    def test_block_wins_over_budget(self, motion, grid, selected):
        _block_relation(motion, "Lockdown")
        board = make_board(motion, grid, movement_points=IntValue(value=100))

        result = _moves(motion, selected, grid, board)

        assert result.valid_positions == set()
        assert set(result.blocked_explanations) == _ring(1)

    def test_conditional_is_type_block(self, motion, grid, selected):
        swamp, swamp_data = _add_terrain_type(motion, "Swamp")
        _block_relation(
            motion,
            "Swamp Blocks",
            condition=IsType(role_id=motion.terrain.id, entity_type_id=swamp.id),
        )
        board = make_board(motion, grid, movement_points=IntValue(value=3))
        swamp_pos = HexPosition(q=0, r=1)
        board.place_tile(swamp_pos, swamp_data)

        result = _moves(motion, selected, grid, board)

        assert not result.is_valid(swamp_pos)
        assert result.is_valid(HexPosition(q=1, r=0))
        assert result.reasons_for(swamp_pos)[0].explanation == (
            "Infantry cannot enter Swamp: Swamp Blocks blocks entry"
        )

    def test_is_not_type_block(self, motion, grid, selected):
        _rough, rough_data = _add_terrain_type(motion, "Rough")
        _block_relation(
            motion,
            "Plains Only",
            condition=IsNotType(role_id=motion.terrain.id, entity_type_id=motion.plains.id),
        )
        board = make_board(motion, grid, movement_points=IntValue(value=5))
        rough_pos = HexPosition(q=-1, r=0)
        board.place_tile(rough_pos, rough_data)

        result = _moves(motion, selected, grid, board)

        assert not result.is_valid(rough_pos)
        assert len(result.valid_positions) == 35

    def test_block_and_cost_both_explained(self, motion, grid, selected):
        _block_relation(motion, "Lockdown")
        board = make_board(motion, grid, movement_points=IntValue(value=0), cost=2)

        result = _moves(motion, selected, grid, board)

        names = {r.constraint_name for r in result.reasons_for(HexPosition(q=1, r=0))}
        assert names == {"Terrain Movement Cost", "Lockdown"}

    def test_unbound_tile_ignores_relations(self, motion, grid, selected):
        _block_relation(motion, "Lockdown")
        unbound = EntityType(name="Void", role=EntityRole.BOARD_POSITION)
        motion.entity_types.add_type(unbound)
        board = make_board(motion, grid, movement_points=IntValue(value=1))
        open_pos = HexPosition(q=1, r=-1)
        board.place_tile(open_pos, EntityData.spawn(unbound))

        result = _moves(motion, selected, grid, board)

        assert result.valid_positions == {open_pos}

    def test_allow_is_inert(self, motion, grid, selected):
        motion.relations.add_relation(Relation(
            name="Allow Everything",
            concept_id=motion.concept.id,
            subject_role_id=motion.traveler.id,
            object_role_id=motion.terrain.id,
            effect={"kind": "allow"},
        ))
        board = make_board(motion, grid, movement_points=IntValue(value=1))

        result = _moves(motion, selected, grid, board)

        assert result.valid_positions == _ring(1)


class TestBlockConditions:
    """Interpretation of block conditions."""

    @pytest.fixture
    def parts(self, motion):
        unit = motion.unit_data()
        tile = motion.plains_data()
        return motion, unit, tile, motion.cost_relation

    def test_is_type_on_subject(self, parts):
        motion, unit, tile, relation = parts
        expr = IsType(role_id=motion.traveler.id, entity_type_id=motion.infantry.id)
        assert evaluate_block_condition(expr, unit, tile, relation) is True

    def test_foreign_role_is_false_for_both_checks(self, parts):
        motion, unit, tile, relation = parts
        foreign = motion.concept.id
        assert not evaluate_block_condition(
            IsType(role_id=foreign, entity_type_id=motion.plains.id), unit, tile, relation
        )
        assert not evaluate_block_condition(
            IsNotType(role_id=foreign, entity_type_id=motion.plains.id),
            unit,
            tile,
            relation,
        )

    def test_composition(self, parts):
        motion, unit, tile, relation = parts
        on_plains = IsType(role_id=motion.terrain.id, entity_type_id=motion.plains.id)
        is_infantry = IsType(role_id=motion.traveler.id, entity_type_id=motion.infantry.id)
        assert evaluate_block_condition(
            AllOf(exprs=[on_plains, is_infantry]), unit, tile, relation
        )
        assert not evaluate_block_condition(
            AllOf(exprs=[on_plains, Not(expr=is_infantry)]), unit, tile, relation
        )

    def test_unsupported_expression_blocks(self, parts):
        motion, unit, tile, relation = parts
        expr = PropertyCompare(
            role_id=motion.traveler.id,
            property_name="budget",
            operator=CompareOp.LT,
            value=IntValue(value=0),
        )
        assert evaluate_block_condition(expr, unit, tile, relation) is True


class TestEvaluateStep:
    """Single-step outcomes."""

    def _ctx(self, motion, unit):
        return StepContext(
            unit_data=unit,
            unit_bindings=motion.concepts.bindings_for_entity_type(motion.infantry.id),
            on_enter_relations=motion.relations.on_enter(),
            concepts=motion.concepts,
            entity_types=motion.entity_types,
        )

    def test_valid_step_spends_cost(self, motion):
        ctx = self._ctx(motion, motion.unit_data())
        step = evaluate_step(ctx, motion.plains_data(cost=2), 5, HexPosition(q=1, r=0))
        assert step == StepValid(new_budget=3)

    def test_over_budget_blocked_with_reason(self, motion):
        ctx = self._ctx(motion, motion.unit_data())
        step = evaluate_step(ctx, motion.plains_data(cost=2), 1, HexPosition(q=0, r=1))
        assert isinstance(step, StepBlocked)
        assert len(step.reasons) == 1

    def test_unknown_unit_type_renders_as_unit(self, motion):
        stranger = EntityData(entity_type_id=motion.concept.id)
        ctx = self._ctx(motion, stranger)
        ctx.unit_bindings = [motion.infantry_binding]
        step = evaluate_step(ctx, motion.plains_data(cost=2), 0, HexPosition(q=0, r=1))
        assert step.reasons[0].explanation.startswith("Unit cannot reach (0, 1)")


class TestDominance:
    """Positions are recorded once, with their cheapest arrival."""

    def test_cheaper_detour_wins(self, motion, selected):
        grid = HexGridConfig(map_radius=2)
        board = make_board(motion, grid, movement_points=IntValue(value=5))
        wall = HexPosition(q=1, r=0)
        board.place_tile(wall, motion.plains_data(cost=3))
        beyond = HexPosition(q=2, r=0)

        result = _moves(motion, selected, grid, board)

        # Through the wall costs 4, around it 3.
        assert result.remaining_budgets[wall] == 2
        assert result.remaining_budgets[beyond] == 2
        assert result.remaining_budgets[HexPosition(q=1, r=-1)] == 4
        assert not result.valid_positions & set(result.blocked_explanations)

    def test_valid_via_one_path_clears_block_from_another(self, motion, selected):
        grid = HexGridConfig(map_radius=2)
        board = make_board(motion, grid, movement_points=IntValue(value=2))
        wall = HexPosition(q=1, r=0)
        board.place_tile(wall, motion.plains_data(cost=2))

        result = _moves(motion, selected, grid, board)

        # Reached from the origin with budget 2, refused from neighbours with 1.
        assert result.is_valid(wall)
        assert result.reasons_for(wall) == []


class TestMoveEvaluator:
    """The reactive wrapper recomputes on selection or ontology change only."""

    def _run(self, evaluator, motion, selected, grid, board):
        return evaluator.run(
            selected,
            motion.concepts,
            motion.relations,
            motion.constraints,
            motion.entity_types,
            grid,
            board,
        )

    def test_board_edit_alone_does_not_recompute(self, motion, grid, selected):
        evaluator = MoveEvaluator()
        board = make_board(motion, grid, movement_points=IntValue(value=1))
        first = self._run(evaluator, motion, selected, grid, board)
        board.place_tile(HexPosition(q=1, r=0), motion.plains_data(cost=5))

        assert self._run(evaluator, motion, selected, grid, board) is first

        evaluator.invalidate()
        refreshed = self._run(evaluator, motion, selected, grid, board)
        assert not refreshed.is_valid(HexPosition(q=1, r=0))

    def test_selection_change_recomputes(self, motion, grid, selected):
        evaluator = MoveEvaluator()
        board = make_board(motion, grid)
        first = self._run(evaluator, motion, selected, grid, board)
        assert first.for_entity == "unit-1"

        selected.clear()
        cleared = self._run(evaluator, motion, selected, grid, board)

        assert cleared is not first
        assert cleared.for_entity is None

    def test_relation_change_recomputes(self, motion, grid, selected):
        evaluator = MoveEvaluator()
        board = make_board(motion, grid, movement_points=IntValue(value=1))
        first = self._run(evaluator, motion, selected, grid, board)
        assert len(first.valid_positions) == 6

        motion.relations.remove_relation(motion.cost_relation.id)
        second = self._run(evaluator, motion, selected, grid, board)

        assert len(second.valid_positions) == 36
