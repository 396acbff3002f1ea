import pytest

from starbattle_hints.board import BoardState, CellMark, all_units, col_cells, empty_cells, region_cells, row_cells
from starbattle_hints.bounds import (
    block_capacity, can_place_all_stars_simultaneously, covering_areas, is_valid_star_placement,
    is_viable_cell, max_stars, min_stars, viable_cells,
)


def test_valid_placement_respects_neighbours(board5):
    state = BoardState.empty(board5).with_marks([(2, 2)], CellMark.STAR)
    assert not is_valid_star_placement(state, (1, 1))
    assert not is_valid_star_placement(state, (2, 2))
    assert is_valid_star_placement(state, (0, 0))


def test_viable_cell_needs_room_in_every_unit(board5):
    state = BoardState.empty(board5).with_marks([(0, 0)], CellMark.STAR)
    # row 0, column 0 and region A are full
    assert not is_viable_cell(state, (0, 3))
    assert not is_viable_cell(state, (4, 0))
    assert not is_viable_cell(state, (2, 0))
    assert is_viable_cell(state, (2, 2))
    assert viable_cells(state, row_cells(board5, 0)) == []


def test_can_place_all_accepts_a_solution(board5, solution5):
    assert can_place_all_stars_simultaneously(BoardState.empty(board5), solution5) == tuple(solution5)


def test_can_place_all_rejects_adjacent_pair(board5):
    assert can_place_all_stars_simultaneously(BoardState.empty(board5), [(0, 0), (1, 1)]) is None


def test_can_place_all_rejects_quota_overflow(board10):
    assert can_place_all_stars_simultaneously(BoardState.empty(board10), [(0, 0), (0, 3), (0, 6)]) is None


def test_can_place_all_rejects_filled_cell(board5):
    state = BoardState.empty(board5).with_marks([(0, 0)], CellMark.CROSS)
    assert can_place_all_stars_simultaneously(state, [(0, 0)]) is None


def test_min_stars_from_forced_area(board5):
    state = BoardState.empty(board5)
    # Region B has both its cells in row 1, so row 1 takes at least one star there.
    assert min_stars(state, region_cells(board5, 1)) == 1
    assert min_stars(state, [(1, 1)]) == 0


def test_min_stars_never_below_existing(board5, solution5):
    state = BoardState.empty(board5).with_marks(solution5[:2], CellMark.STAR)
    assert min_stars(state, solution5) >= 2


def test_max_stars_capped_by_containing_unit(board10):
    state = BoardState.empty(board10)
    assert max_stars(state, row_cells(board10, 0)[:4]) == 2
    assert max_stars(state, [(0, 0)]) == 1


def test_max_stars_counts_blocked_tile(board10):
    state = BoardState.empty(board10).with_marks([(0, 0)], CellMark.STAR)
    block = [(0, 0), (0, 1), (1, 0), (1, 1)]
    assert max_stars(state, block) == 1


def test_bounds_are_monotone_under_more_stars(board10):
    shape = col_cells(board10, 0)
    earlier = BoardState.empty(board10)
    later = earlier.with_marks([(0, 0)], CellMark.STAR)
    assert min_stars(later, shape) >= min_stars(earlier, shape)
    assert max_stars(later, shape) <= max_stars(earlier, shape)


def test_covering_areas(board5):
    labels = {area.label for area in covering_areas(board5, [(0, 0), (0, 1)])}
    assert labels == {"Row 0", "Column 0", "Column 1", "Region A"}


def test_block_capacity(board10):
    state = BoardState.empty(board10)
    assert block_capacity(state, row_cells(board10, 0)) == 5


@pytest.mark.parametrize("name", ['blank', 'star', 'band', 'two stars', 'kissing', 'rooks', 'shared column'])
def test_crossing_a_cell_never_loosens_the_bounds(name, technique_states):
    state = technique_states[name]
    board = state.board
    shapes = [unit.cells for unit in all_units(board)]
    shapes += [row_cells(board, r) + row_cells(board, r + 1) for r in range(board.size - 1)]
    for cell in empty_cells(state, board.all_cells):
        crossed = state.with_marks([cell], CellMark.CROSS)
        for shape in shapes:
            assert max_stars(crossed, shape) <= max_stars(state, shape), cell
            assert min_stars(crossed, shape) >= min_stars(state, shape), cell
