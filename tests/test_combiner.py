import pytest

from starbattle_hints.board import BoardState, CellMark, Coord
from starbattle_hints.combiner import analyze_deductions
from starbattle_hints.constants import TECH_COMBINED
from starbattle_hints.deductions import (
    AreaDeduction, BlockDeduction, CellDeduction, ExclusiveSetDeduction, HintIdGenerator, HintKind,
    TechniqueResult, extract_cell_deductions, filter_valid_deductions, merge_deductions,
)


def test_id_generator_is_per_instance():
    first, second = HintIdGenerator(), HintIdGenerator()
    assert first.next_id('saturation') == 'saturation-1'
    assert first.next_id('exclusion') == 'exclusion-2'
    assert second.next_id('saturation') == 'saturation-1'


def test_area_deduction_needs_exactly_one_bound():
    with pytest.raises(ValueError):
        AreaDeduction('row', 0, ((0, 0),), 't')
    with pytest.raises(ValueError):
        AreaDeduction('row', 0, ((0, 0),), 't', stars_required=1, max_stars=1)


def test_technique_result_kinds():
    assert not TechniqueResult.none()
    assert not TechniqueResult.of_deductions([])
    result = TechniqueResult.of_deductions([CellDeduction(Coord(0, 0), CellMark.CROSS, 't')])
    assert result and result.kind == TechniqueResult.DEDUCTIONS


def test_filter_drops_settled_deductions(board5):
    state = BoardState.empty(board5).with_marks([(0, 0)], CellMark.STAR)
    deductions = [
        CellDeduction(Coord(0, 0), CellMark.STAR, 't'),
        CellDeduction(Coord(2, 2), CellMark.CROSS, 't'),
        ExclusiveSetDeduction(((0, 0), (0, 1)), 1, 't'),
    ]
    assert filter_valid_deductions(deductions, state) == [deductions[1]]


def test_merge_prefers_exact_count_then_tighter_bound():
    cells = ((0, 0), (0, 1))
    loose = AreaDeduction('row', 0, cells, 'a', max_stars=2)
    tight = AreaDeduction('row', 0, cells, 'b', max_stars=1)
    exact = AreaDeduction('row', 0, cells, 'c', stars_required=1)
    assert merge_deductions([loose], [tight]) == [tight]
    assert merge_deductions([tight], [exact]) == [exact]
    assert merge_deductions([exact], [loose]) == [exact]


def test_extract_cell_deductions():
    cell = CellDeduction(Coord(1, 1), CellMark.CROSS, 't')
    block = BlockDeduction(Coord(0, 0), 't')
    assert extract_cell_deductions([block, cell]) == [cell]


def test_combines_agreeing_cell_deductions(board5):
    state = BoardState.empty(board5)
    deductions = [
        CellDeduction(Coord(0, 1), CellMark.CROSS, 'a'),
        CellDeduction(Coord(1, 0), CellMark.CROSS, 'b'),
    ]
    hint = analyze_deductions(deductions, state, HintIdGenerator())
    assert hint.kind == HintKind.PLACE_CROSS
    assert hint.result_cells == ((0, 1), (1, 0))
    assert hint.technique == TECH_COMBINED


def test_conflicting_cell_deductions_give_nothing(board5):
    deductions = [
        CellDeduction(Coord(0, 1), CellMark.CROSS, 'a'),
        CellDeduction(Coord(0, 1), CellMark.STAR, 'b'),
    ]
    assert analyze_deductions(deductions, BoardState.empty(board5), HintIdGenerator()) is None


def test_area_with_every_candidate_owed(board5):
    state = BoardState.empty(board5)
    ded = AreaDeduction('region', 1, ((1, 1),), 't', stars_required=1)
    hint = analyze_deductions([ded], state, HintIdGenerator())
    assert hint.kind == HintKind.PLACE_STAR and hint.result_cells == ((1, 1),)


def test_area_already_at_its_maximum(board5):
    state = BoardState.empty(board5).with_marks([(0, 0)], CellMark.STAR)
    ded = AreaDeduction('row', 4, ((0, 0), (4, 4)), 't', max_stars=1)
    hint = analyze_deductions([ded], state, HintIdGenerator())
    assert hint.kind == HintKind.PLACE_CROSS and hint.result_cells == ((4, 4),)


def test_block_with_single_valid_cell(board5):
    state = BoardState.empty(board5).with_marks([(0, 0)], CellMark.STAR)
    state = state.with_marks([(3, 3), (3, 2)], CellMark.CROSS)
    ded = BlockDeduction(Coord(2, 2), 't')
    # (2,2) and (2,3) are both still open
    assert analyze_deductions([ded], state, HintIdGenerator()) is None
    state = state.with_marks([(2, 3)], CellMark.CROSS)
    hint = analyze_deductions([ded], state, HintIdGenerator())
    assert hint.kind == HintKind.PLACE_STAR and hint.result_cells == ((2, 2),)


def test_exclusive_set_with_exact_room(board10):
    state = BoardState.empty(board10)
    ded = ExclusiveSetDeduction(((0, 0), (0, 2)), 2, 't')
    hint = analyze_deductions([ded], state, HintIdGenerator())
    assert hint.kind == HintKind.PLACE_STAR and hint.result_cells == ((0, 0), (0, 2))


def test_combined_star_hint_must_be_placeable(board5):
    ded = ExclusiveSetDeduction(((0, 0), (0, 2)), 2, 't')
    # two stars in one row of a one-star board can never be placed together
    assert analyze_deductions([ded], BoardState.empty(board5), HintIdGenerator()) is None
