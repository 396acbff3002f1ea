import pytest

from starbattle_hints.board import (
    UNIT_COLUMN, UNIT_REGION, UNIT_ROW, BoardState, CellMark, Coord, all_units, are_adjacent,
    blocks_containing, contiguous_runs, count_stars, difference, format_cells, format_region,
    format_regions, intersection, neighbors8, remaining_stars, row_cells, union, units_of,
)


def test_region_map_groups_cells(board5):
    assert board5.region_ids == (0, 1, 2, 3, 4)
    assert board5.region_map[1] == ((1, 1), (1, 2))
    assert sum(len(cells) for cells in board5.region_map.values()) == 25


def test_all_units_order(board5):
    units = all_units(board5)
    assert [u.kind for u in units[:5]] == [UNIT_ROW] * 5
    assert [u.kind for u in units[5:10]] == [UNIT_COLUMN] * 5
    assert [u.kind for u in units[10:]] == [UNIT_REGION] * 5
    assert units[0].label == "Row 0"
    assert units[12].label == "Region C"


def test_units_of(board5):
    row, col, region = units_of(board5, Coord(2, 4))
    assert row.index == 2 and col.index == 4 and region.index == 2


def test_neighbors8_clipped():
    assert sorted(neighbors8((0, 0), 5)) == [(0, 1), (1, 0), (1, 1)]
    assert len(neighbors8((2, 2), 5)) == 8


def test_are_adjacent():
    assert are_adjacent((1, 1), (2, 2))
    assert not are_adjacent((1, 1), (1, 1))
    assert not are_adjacent((1, 1), (1, 3))


def test_blocks_containing_corner_and_middle():
    assert blocks_containing((0, 0), 5) == [(0, 0)]
    assert len(blocks_containing((2, 2), 5)) == 4


def test_contiguous_runs():
    cells = [Coord(0, 4), Coord(0, 0), Coord(0, 1), Coord(0, 5), Coord(0, 7)]
    runs = contiguous_runs(cells, UNIT_ROW)
    assert runs == [[(0, 0), (0, 1)], [(0, 4), (0, 5)], [(0, 7)]]


def test_set_algebra_keeps_order():
    a = [(0, 0), (0, 1), (0, 2)]
    b = [(0, 2), (1, 1)]
    assert union(a, b) == [(0, 0), (0, 1), (0, 2), (1, 1)]
    assert intersection(a, b) == [(0, 2)]
    assert difference(a, b) == [(0, 0), (0, 1)]


def test_from_rows_and_counts(board5):
    state = BoardState.from_rows(board5, ["*xx..", ".....", ".....", ".....", "....."])
    assert state.is_star((0, 0))
    assert state.mark_of((0, 1)) == CellMark.CROSS
    assert count_stars(state, row_cells(board5, 0)) == 1
    assert remaining_stars(state, row_cells(board5, 0)) == 0
    assert state.to_rows()[0] == "*xx.."


def test_from_rows_rejects_unknown_character(board5):
    with pytest.raises(ValueError):
        BoardState.from_rows(board5, ["*?...", ".....", ".....", ".....", "....."])


def test_wrong_grid_shape_raises(board5):
    with pytest.raises(ValueError):
        BoardState(board5, [[0] * 4] * 5)


def test_with_marks_returns_new_state(board5):
    state = BoardState.empty(board5)
    after = state.with_marks([(0, 0), (4, 4)], CellMark.STAR)
    assert state.is_empty((0, 0))
    assert after.stars() == [(0, 0), (4, 4)]
    assert after != state


def test_formatting():
    assert format_cells([(0, 1), Coord(2, 3)]) == "(0,1), (2,3)"
    assert format_region(0) == "Region A"
    assert format_regions([0, 1, 2]) == "regions A, B, and C"
