import pytest

from starbattle_hints.board import BoardDef, BoardState, CellMark
from starbattle_hints.constants import TECH_SCHEMA_BASED
from starbattle_hints.deductions import HintKind, TechniqueResult
from starbattle_hints.schemas import (
    Schema, SchemaApplication, SchemaRegistry, apply_band_exact_cages, apply_cage_exclusion,
    apply_cages_region_quota, apply_candidate_deficit, apply_col_band_budget, apply_exclusive_cols_in_region,
    apply_exclusive_regions_col_band, apply_exclusive_regions_row_band, apply_exclusive_rows_in_region,
    apply_internal_cage_placement, apply_region_band_intersection, apply_region_band_squeeze,
    apply_row_band_budget, apply_row_col_intersection, default_registry,
)
from starbattle_hints.techniques import TechniqueContext
from starbattle_hints.techniques.patterns import find_schema_based_hint
from starbattle_hints.z3_solver import Z3StarBattleSolver

X, S = CellMark.CROSS, CellMark.STAR

# 10x10 states built around the rectangle board; each leaves SOLUTION_10 open.
BAND_CAGE_CROSSES = [(0, 1), (1, 0), (1, 1), (0, 4), (1, 4), (0, 9), (1, 9)]
REGION_QUOTA_CROSSES = [(0, 8), (0, 9), (1, 8), (1, 9)]
REGION_CAGE_CROSSES = [(0, 1), (1, 0), (1, 1), (0, 4), (1, 4)]

_verdicts = {}


def _transpose(board):
    return BoardDef(size=board.size, stars_per_unit=board.stars_per_unit, regions=[list(col) for col in zip(*board.regions)])


def _deductions(applications):
    return [set(application.deductions) for application in applications]


@pytest.fixture
def schema_states(board5, board10):
    flipped = _transpose(board5)
    return {
        'blank': BoardState.empty(board5),
        'blank transposed': BoardState.empty(flipped),
        'narrowed': BoardState.empty(board5).with_marks([(1, 1)], X),
        'star': BoardState.empty(board5).with_marks([(0, 0)], S),
        'star transposed': BoardState.empty(flipped).with_marks([(0, 0)], S),
        'band cages': BoardState.empty(board10).with_marks(BAND_CAGE_CROSSES, X),
        'region quota': BoardState.empty(board10).with_marks(REGION_QUOTA_CROSSES, X),
        'region cages': BoardState.empty(board10).with_marks(REGION_CAGE_CROSSES, X),
    }


def _holds(name, state, cell, mark):
    """True when z3 finds no solution with the opposite mark at ``cell``."""
    key = (name, tuple(cell), mark)
    if key not in _verdicts:
        opposite = X if mark == S else S
        solutions, timed_out = Z3StarBattleSolver(state.board).solve(state.with_marks([cell], opposite), max_solutions=1)
        _verdicts[key] = not timed_out and not solutions
    return _verdicts[key]


def test_registry_orders_by_priority():
    registry = SchemaRegistry()
    registry.register(Schema('late', 5, lambda state: []))
    registry.register(Schema('early', 1, lambda state: []))
    assert [schema.id for schema in registry.all()] == ['early', 'late']
    assert registry.get('late').priority == 5
    assert registry.get('missing') is None
    assert len(registry) == 2


def test_default_registry():
    registry = default_registry()
    ids = [schema.id for schema in registry.all()]
    assert ids[0] == 'E1_candidateDeficit'
    assert {i[:1] for i in ids} == {'A', 'B', 'C', 'D', 'E'}
    assert len(registry) == 14
    priorities = [schema.priority for schema in registry.all()]
    assert priorities == sorted(priorities)


def test_candidate_deficit(board5):
    state = BoardState.empty(board5).with_marks([(1, 1)], X)
    applications = apply_candidate_deficit(state)
    assert applications[0].deductions == (((1, 2), S),)
    assert apply_candidate_deficit(BoardState.empty(board5)) == []


def test_row_band_budget(board5):
    # Region B fills row 1 on its own, so regions A and C have nothing left for it.
    applications = apply_row_band_budget(BoardState.empty(board5))
    deductions = _deductions(applications)
    assert {((1, 0), X)} in deductions
    assert {((1, 3), X), ((1, 4), X)} in deductions
    assert all(a.schema_id == 'A1_rowBand_regionBudget' for a in applications)


def test_col_band_budget_mirrors_rows(board5):
    applications = apply_col_band_budget(BoardState.empty(_transpose(board5)))
    deductions = _deductions(applications)
    assert {((0, 1), X)} in deductions
    assert {((3, 1), X), ((4, 1), X)} in deductions
    assert all(a.schema_id == 'A2_colBand_regionBudget' for a in applications)


def test_exclusive_regions_row_band(board5):
    # With A complete, only B and C reach row 1 and B lies wholly inside it.
    state = BoardState.empty(board5).with_marks([(0, 0)], S)
    applications = apply_exclusive_regions_row_band(state)
    assert {((1, 3), X), ((1, 4), X)} in _deductions(applications)
    assert all(a.schema_id == 'B1_exclusiveRegions_rowBand' for a in applications)
    assert apply_exclusive_regions_row_band(BoardState.empty(board5)) == []


def test_exclusive_regions_col_band(board5):
    state = BoardState.empty(_transpose(board5)).with_marks([(0, 0)], S)
    applications = apply_exclusive_regions_col_band(state)
    assert {((3, 1), X), ((4, 1), X)} in _deductions(applications)
    assert all(a.schema_id == 'B2_exclusiveRegions_colBand' for a in applications)


def test_exclusive_lines_in_region(board5):
    state = BoardState.empty(board5).with_marks([(1, 1)], X)
    rows = apply_exclusive_rows_in_region(state)
    cols = apply_exclusive_cols_in_region(state)
    assert [a.deductions for a in rows] == [(((1, 2), S),)]
    assert [a.deductions for a in cols] == [(((1, 2), S),)]
    assert "row 1: 1" in rows[0].explanation
    assert "column 2: 1" in cols[0].explanation


def test_band_exact_cages(board10):
    # Rows 0-1 owe four stars and their candidates fit in four blocks; (0,0) is alone in its block.
    state = BoardState.empty(board10).with_marks(BAND_CAGE_CROSSES, X)
    applications = apply_band_exact_cages(state)
    assert [a.deductions for a in applications] == [(((0, 0), S),)]
    assert apply_band_exact_cages(BoardState.empty(board10)) == []


def test_cages_region_quota(board10):
    # Four blocks cover rows 0-1; region A owns two of them and owes the band two stars.
    state = BoardState.empty(board10).with_marks(REGION_QUOTA_CROSSES, X)
    applications = apply_cages_region_quota(state)
    assert _deductions(applications) == [{((0, 4), X), ((1, 4), X)}]


def test_internal_cage_placement(board10):
    state = BoardState.empty(board10).with_marks(REGION_CAGE_CROSSES, X)
    applications = apply_internal_cage_placement(state)
    assert [a.deductions for a in applications] == [(((0, 0), S),)]
    assert applications[0].schema_id == 'C3_internalCagePlacement'


def test_cage_exclusion(board5):
    # Region B is two cells; both 2x2 blocks holding them lose their other cells.
    applications = apply_cage_exclusion(BoardState.empty(board5))
    assert _deductions(applications) == [{((0, 1), X), ((0, 2), X)}, {((2, 1), X), ((2, 2), X)}]
    assert "Region B" in applications[0].explanation


def test_row_col_intersection(board5):
    state = BoardState.empty(board5).with_marks([(0, 0)], S)
    applications = apply_row_col_intersection(state)
    crosses = {cell for a in applications for cell, mark in a.deductions if mark == X}
    assert crosses == {(0, 1), (0, 2), (0, 3), (0, 4), (1, 0), (2, 0), (3, 0), (4, 0)}
    assert all(mark == X for a in applications for _, mark in a.deductions)

    state = BoardState.empty(board5).with_marks([(0, 1), (0, 2), (0, 3), (0, 4)], X)
    stars = [a.deductions for a in apply_row_col_intersection(state)]
    assert (((0, 0), S),) in stars


def test_region_band_intersection(board5):
    state = BoardState.empty(board5).with_marks([(1, 1)], X)
    applications = apply_region_band_intersection(state)
    assert {((1, 2), S)} in _deductions(applications)
    assert all(mark == S for a in applications for _, mark in a.deductions)


def test_region_band_squeeze(board5):
    state = BoardState.empty(board5).with_marks([(1, 1)], X)
    applications = apply_region_band_squeeze(state)
    assert {((1, 2), S)} in _deductions(applications)
    assert apply_region_band_squeeze(BoardState.empty(board5)) == []


@pytest.mark.parametrize("schema", default_registry().all(), ids=lambda s: s.id)
def test_schema_deductions_hold_in_every_solution(schema, schema_states):
    fired = False
    for name, state in schema_states.items():
        for application in schema.apply(state):
            fired = True
            for cell, mark in application.deductions:
                assert _holds(name, state, cell, mark), f"{schema.id} on {name}: {application.explanation}"
    assert fired, f"{schema.id} fired on none of the sample states"


def test_sample_states_are_solvable(schema_states):
    for name, state in schema_states.items():
        solutions, _ = Z3StarBattleSolver(state.board).solve(state, max_solutions=1)
        assert solutions, name


def test_schema_based_hint(board5, verified_ctx):
    state = BoardState.empty(board5).with_marks([(1, 1)], X)
    hint = find_schema_based_hint(state, verified_ctx).hint
    assert hint.technique == TECH_SCHEMA_BASED
    assert hint.kind == HintKind.PLACE_STAR
    assert hint.result_cells == ((1, 2),)
    assert hint.explanation.startswith("Schema E1_candidateDeficit")


def test_schema_based_uses_injected_registry(board5):
    registry = SchemaRegistry()
    registry.register(Schema('bogus', 1, lambda state: [
        SchemaApplication('bogus', (((0, 0), X),), "made up"),
    ]))
    ctx = TechniqueContext(schemas=registry)
    hint = find_schema_based_hint(BoardState.empty(board5), ctx).hint
    assert hint.result_cells == ((0, 0),)


def test_schema_based_drops_unproven_claims(board5, verified_ctx):
    registry = SchemaRegistry()
    registry.register(Schema('bogus', 1, lambda state: [
        SchemaApplication('bogus', (((0, 0), X),), "made up"),
    ]))
    verified_ctx.schemas = registry
    assert find_schema_based_hint(BoardState.empty(board5), verified_ctx).kind == TechniqueResult.NONE
