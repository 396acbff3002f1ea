"""**********************************************************************************
 * Title: bounds.py
 *
 * @author Isaiah Tadrous
 * @version 3.0.0
 * -------------------------------------------------------------------------------
 * Description:
 * Star-count bounds for arbitrary cell sets. Counting techniques build composite
 * shapes out of rows, columns and regions and compare how many stars the shape
 * must hold against how many it can hold. This module computes both sides of
 * that comparison under the quota, adjacency and 2x2 rules, and provides the
 * joint feasibility check every technique runs before proposing that a whole
 * set of cells be marked as stars at once. A loose bound only costs a missed
 * deduction; a bound that is too tight would make the engine unsound, so every
 * function here errs on the loose side.
 **********************************************************************************"""

# --- IMPORTS ---
from collections import Counter
from typing import Iterable, List, NamedTuple, Optional, Sequence, Tuple

from starbattle_hints.board import (
    CellMark, Coord, all_units, are_adjacent, block_cells, blocks_containing,
    count_stars, empty_cells, neighbors8, two_by_two_blocks, unique_cells,
)


class Area(NamedTuple):
    """A cell set that must hold exactly ``quota`` stars (a unit or a union of units)."""
    cells: Tuple[Coord, ...]
    quota: int
    label: str


def unit_area(unit, stars_per_unit):
    return Area(tuple(unit.cells), stars_per_unit, unit.label)


def combined_area(units, stars_per_unit, label):
    """Disjoint units of one kind taken together; their quotas add up."""
    cells = tuple(cell for unit in units for cell in unit.cells)
    return Area(cells, stars_per_unit * len(units), label)


def covering_areas(board, shape) -> List[Area]:
    """Every row, column and region that shares at least one cell with ``shape``."""
    shape_set = set(shape)
    return [
        unit_area(unit, board.stars_per_unit)
        for unit in all_units(board)
        if any(cell in shape_set for cell in unit.cells)
    ]


# --- SINGLE-CELL LEGALITY ---
def is_valid_star_placement(state, cell) -> bool:
    """
    True when ``cell`` is empty and no star touches it. Any 2x2 block holding
    ``cell`` and another star would have that star adjacent, so this also
    enforces the 2x2 rule.
    """
    if state.cells[cell[0]][cell[1]] != CellMark.EMPTY:
        return False
    return not any(state.cells[r][c] == CellMark.STAR for r, c in neighbors8(cell, state.size))


def is_viable_cell(state, cell) -> bool:
    """A valid placement whose row, column and region still owe at least one star."""
    if not is_valid_star_placement(state, cell):
        return False
    board = state.board
    quota = board.stars_per_unit
    row, col = cell
    if sum(1 for c in range(board.size) if state.cells[row][c] == CellMark.STAR) >= quota:
        return False
    if sum(1 for r in range(board.size) if state.cells[r][col] == CellMark.STAR) >= quota:
        return False
    return count_stars(state, board.region_map[board.region_of(cell)]) < quota


def viable_cells(state, cells) -> List[Coord]:
    return [cell for cell in empty_cells(state, cells) if is_viable_cell(state, cell)]


# --- JOINT FEASIBILITY ---
def can_place_all_stars_simultaneously(state, cells: Sequence) -> Optional[Tuple[Coord, ...]]:
    """
    Checks that every cell in ``cells`` can be marked as a star at the same time.

    The cells must all be empty, must not touch each other or an existing star,
    must not put two stars into any 2x2 block, and must not push any row,
    column or region over its quota once all of them are counted together.

    :param BoardState state: The current board.
    :param cells: The cells proposed as stars.
    :returns: The cells as a tuple when the placement is feasible, otherwise None.
    :rtype: tuple[Coord] | None
    """
    board = state.board
    planned = unique_cells(cells)
    for index, cell in enumerate(planned):
        if not (board.in_bounds(cell.row, cell.col) and state.is_empty(cell)):
            return None
        if any(state.is_star(nb) for nb in neighbors8(cell, board.size)):
            return None
        if any(are_adjacent(cell, other) for other in planned[:index]):
            return None

    planned_set = set(planned)
    touched_blocks = {top_left for cell in planned for top_left in blocks_containing(cell, board.size)}
    for top_left in touched_blocks:
        occupied = sum(1 for b in block_cells(top_left) if b in planned_set or state.is_star(b))
        if occupied > 1:
            return None

    quota = board.stars_per_unit
    row_load = Counter(cell.row for cell in planned)
    col_load = Counter(cell.col for cell in planned)
    region_load = Counter(board.region_of(cell) for cell in planned)
    for row, extra in row_load.items():
        if sum(1 for c in range(board.size) if state.cells[row][c] == CellMark.STAR) + extra > quota:
            return None
    for col, extra in col_load.items():
        if sum(1 for r in range(board.size) if state.cells[r][col] == CellMark.STAR) + extra > quota:
            return None
    for region_id, extra in region_load.items():
        if count_stars(state, board.region_map[region_id]) + extra > quota:
            return None
    return tuple(planned)


# --- BOUNDS ---
def forced_into(state, shape, area: Area) -> int:
    """
    Stars ``area`` must still place inside ``shape``: its remaining quota minus
    the empty cells it has outside the shape. Zero or negative means nothing is
    forced.
    """
    shape_set = set(shape)
    remaining = area.quota - count_stars(state, area.cells)
    outside_empties = sum(1 for cell in area.cells if cell not in shape_set and state.is_empty(cell))
    return remaining - outside_empties


def min_stars(state, shape: Iterable, areas: Optional[Sequence[Area]] = None) -> int:
    """
    A sound lower bound on the stars ``shape`` holds in every completion.

    It is at least the stars already present; every area overlapping the shape
    may raise it by the stars that area is forced to absorb inside the shape.

    :param BoardState state: The current board.
    :param shape: Any set of cells.
    :param areas: Quota-carrying areas to argue from. Defaults to every row,
                  column and region overlapping the shape.
    :returns: The lower bound.
    :rtype: int
    """
    shape = unique_cells(shape)
    shape_set = set(shape)
    existing = count_stars(state, shape)
    if areas is None:
        areas = covering_areas(state.board, shape)
    best = existing
    for area in areas:
        if not any(cell in shape_set for cell in area.cells):
            continue
        forced = forced_into(state, shape, area)
        if forced > 0:
            best = max(best, existing + forced)
    return best


def max_stars(state, shape: Iterable) -> int:
    """
    A sound upper bound on the stars ``shape`` can hold.

    Starts from existing stars plus empties. Every 2x2 block lying entirely
    inside the shape that already holds a star contributes none of its empties,
    and every unit that fully contains the shape caps the total at what its
    quota leaves over.

    :param BoardState state: The current board.
    :param shape: Any set of cells.
    :returns: The upper bound.
    :rtype: int
    """
    board = state.board
    shape = unique_cells(shape)
    shape_set = set(shape)
    existing = count_stars(state, shape)
    empties = empty_cells(state, shape)
    blocked = set()
    for top_left in two_by_two_blocks(board.size):
        cells = block_cells(top_left)
        if all(cell in shape_set for cell in cells) and any(state.is_star(cell) for cell in cells):
            blocked.update(cell for cell in cells if state.is_empty(cell))
    bound = existing + len(empties) - len(blocked)

    for unit in all_units(board):
        unit_set = set(unit.cells)
        if shape_set and shape_set <= unit_set:
            outside_stars = sum(1 for cell in unit.cells if cell not in shape_set and state.is_star(cell))
            bound = min(bound, board.stars_per_unit - outside_stars)
    return bound


def max_stars_with_two_by_two(state, shape: Iterable, existing_stars=None) -> int:
    """
    Greedy star count: walks the empties in row-major order and accepts each
    one that touches neither an existing star nor an already accepted cell.
    Used as evidence that no empty cell of the shape can take a star at all.
    """
    shape = unique_cells(shape)
    if existing_stars is None:
        existing_stars = [cell for cell in shape if state.is_star(cell)]
    accepted: List[Coord] = []
    for cell in sorted(empty_cells(state, shape)):
        if not is_valid_star_placement(state, cell):
            continue
        if any(are_adjacent(cell, other) for other in accepted):
            continue
        accepted.append(cell)
    return len(existing_stars) + len(accepted)


def block_capacity(state, cells: Iterable) -> int:
    """
    Upper bound from the fixed 2x2 tiling anchored at (0, 0): each tile holds at
    most one star, so the cells can hold no more stars than the number of tiles
    containing a star or a valid placement among them.
    """
    tiles = set()
    for cell in cells:
        if state.is_star(cell) or is_valid_star_placement(state, cell):
            tiles.add((cell[0] // 2, cell[1] // 2))
    return len(tiles)
