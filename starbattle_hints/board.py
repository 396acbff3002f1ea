"""**********************************************************************************
 * Title: board.py
 *
 * @author Isaiah Tadrous
 * @version 3.0.0
 * -------------------------------------------------------------------------------
 * Description:
 * Defines the board model used throughout the hint engine: the immutable puzzle
 * definition (size, stars per unit and region layout), the mutable grid of cell
 * marks that the driver updates as hints are accepted, and the hashable
 * coordinate type. It also provides the allocation-light primitives every
 * technique is built from: row, column and region enumeration, star, cross and
 * empty counting over arbitrary cell lists, king-move neighbourhoods, 2x2 block
 * enumeration, order-preserving set algebra over coordinates, and the helpers
 * that format rows, columns and regions for hint explanations.
 **********************************************************************************"""

# --- IMPORTS ---
from dataclasses import dataclass
from enum import IntEnum
from functools import cached_property
from typing import Dict, Iterable, List, NamedTuple, Sequence, Tuple

from starbattle_hints.constants import STATE_EMPTY, STATE_STAR, STATE_SECONDARY_MARK


# --- CORE TYPES ---
class CellMark(IntEnum):
    """The three states a cell can be in. Values match the player grid encoding."""
    EMPTY = STATE_EMPTY
    STAR = STATE_STAR
    CROSS = STATE_SECONDARY_MARK


class Coord(NamedTuple):
    """A 0-indexed (row, col) position on the board."""
    row: int
    col: int

    def __str__(self):
        return f"({self.row},{self.col})"


class Unit(NamedTuple):
    """A row, column or region: a named, ordered list of N coordinates."""
    kind: str
    index: int
    cells: Tuple[Coord, ...]

    @property
    def label(self):
        if self.kind == 'row':
            return format_row(self.index)
        if self.kind == 'column':
            return format_col(self.index)
        return format_region(self.index)


UNIT_ROW = 'row'
UNIT_COLUMN = 'column'
UNIT_REGION = 'region'

_MARK_CHARS = {'.': CellMark.EMPTY, '*': CellMark.STAR, 'x': CellMark.CROSS, 'X': CellMark.CROSS}
_CHAR_FOR_MARK = {CellMark.EMPTY: '.', CellMark.STAR: '*', CellMark.CROSS: 'x'}


@dataclass(frozen=True)
class BoardDef:
    """
    The immutable definition of a puzzle.

    Region ids are expected to lie in [0, size); use
    :func:`starbattle_hints.validation.validate_regions` to check a layout
    before trusting it.

    :param int size: The board dimension N.
    :param int stars_per_unit: The quota K for every row, column and region.
    :param regions: An N x N grid of region ids.
    """
    size: int
    stars_per_unit: int
    regions: Tuple[Tuple[int, ...], ...]

    def __post_init__(self):
        object.__setattr__(self, 'regions', tuple(tuple(int(v) for v in row) for row in self.regions))

    @cached_property
    def region_map(self) -> Dict[int, Tuple[Coord, ...]]:
        cells: Dict[int, List[Coord]] = {}
        for r, row in enumerate(self.regions):
            for c, region_id in enumerate(row):
                cells.setdefault(region_id, []).append(Coord(r, c))
        return {region_id: tuple(coords) for region_id, coords in sorted(cells.items())}

    @cached_property
    def region_ids(self) -> Tuple[int, ...]:
        return tuple(self.region_map.keys())

    @cached_property
    def all_cells(self) -> Tuple[Coord, ...]:
        return tuple(Coord(r, c) for r in range(self.size) for c in range(self.size))

    def region_of(self, coord) -> int:
        return self.regions[coord[0]][coord[1]]

    def in_bounds(self, row, col) -> bool:
        return 0 <= row < self.size and 0 <= col < self.size


class BoardState:
    """
    A board definition plus the current grid of cell marks.

    The hint engine never mutates a state it was handed; exploratory work is
    done on :meth:`clone` copies and results are applied by the driver through
    :meth:`with_marks`, which returns a new state.
    """

    def __init__(self, board: BoardDef, cells=None):
        self.board = board
        if cells is None:
            self.cells = [[CellMark.EMPTY] * board.size for _ in range(board.size)]
            return
        if len(cells) != board.size or any(len(row) != board.size for row in cells):
            raise ValueError(f"Cell grid does not match a {board.size}x{board.size} board.")
        self.cells = [[CellMark(value) for value in row] for row in cells]

    @classmethod
    def empty(cls, board):
        return cls(board)

    @classmethod
    def from_rows(cls, board, rows: Sequence[str]):
        """
        Builds a state from text rows using '.' for empty, '*' for a star and
        'x' for a cross. Whitespace inside a row is ignored.

        :param BoardDef board: The puzzle definition.
        :param list[str] rows: One string per board row.
        :returns: The parsed state.
        :rtype: BoardState
        """
        grid = []
        for text in rows:
            chars = [ch for ch in text if not ch.isspace()]
            try:
                grid.append([_MARK_CHARS[ch] for ch in chars])
            except KeyError as e:
                raise ValueError(f"Unknown cell character {e.args[0]!r} in row {text!r}.") from e
        return cls(board, grid)

    @property
    def size(self):
        return self.board.size

    @property
    def stars_per_unit(self):
        return self.board.stars_per_unit

    def mark_of(self, coord) -> CellMark:
        return self.cells[coord[0]][coord[1]]

    def is_empty(self, coord) -> bool:
        return self.cells[coord[0]][coord[1]] == CellMark.EMPTY

    def is_star(self, coord) -> bool:
        return self.cells[coord[0]][coord[1]] == CellMark.STAR

    def clone(self):
        copy = BoardState.__new__(BoardState)
        copy.board = self.board
        copy.cells = [row[:] for row in self.cells]
        return copy

    def set_mark(self, coord, mark):
        """Sets a mark in place. Only ever called on private clones."""
        self.cells[coord[0]][coord[1]] = CellMark(mark)

    def with_marks(self, coords: Iterable, mark):
        copy = self.clone()
        for coord in coords:
            copy.set_mark(coord, mark)
        return copy

    def stars(self) -> List[Coord]:
        return [cell for cell in self.board.all_cells if self.cells[cell.row][cell.col] == CellMark.STAR]

    def empties(self) -> List[Coord]:
        return [cell for cell in self.board.all_cells if self.cells[cell.row][cell.col] == CellMark.EMPTY]

    def to_rows(self) -> List[str]:
        return ["".join(_CHAR_FOR_MARK[mark] for mark in row) for row in self.cells]

    def __eq__(self, other):
        if not isinstance(other, BoardState):
            return NotImplemented
        return self.board == other.board and self.cells == other.cells

    def __repr__(self):
        return f"BoardState(size={self.size}, rows={self.to_rows()!r})"


# --- UNIT ENUMERATION ---
def row_cells(board: BoardDef, row: int) -> List[Coord]:
    return [Coord(row, c) for c in range(board.size)]


def col_cells(board: BoardDef, col: int) -> List[Coord]:
    return [Coord(r, col) for r in range(board.size)]


def region_cells(board: BoardDef, region_id: int) -> List[Coord]:
    return list(board.region_map.get(region_id, ()))


def line_cells(board, orientation, index):
    """Row cells for orientation 'row', column cells otherwise."""
    return row_cells(board, index) if orientation == UNIT_ROW else col_cells(board, index)


def all_units(board: BoardDef) -> List[Unit]:
    units = [Unit(UNIT_ROW, r, tuple(row_cells(board, r))) for r in range(board.size)]
    units += [Unit(UNIT_COLUMN, c, tuple(col_cells(board, c))) for c in range(board.size)]
    units += [Unit(UNIT_REGION, region_id, cells) for region_id, cells in board.region_map.items()]
    return units


def units_of(board: BoardDef, coord) -> List[Unit]:
    """The row, column and region containing ``coord``."""
    region_id = board.region_of(coord)
    return [
        Unit(UNIT_ROW, coord[0], tuple(row_cells(board, coord[0]))),
        Unit(UNIT_COLUMN, coord[1], tuple(col_cells(board, coord[1]))),
        Unit(UNIT_REGION, region_id, board.region_map[region_id]),
    ]


# --- COUNTING ---
def count_stars(state: BoardState, cells) -> int:
    return sum(1 for r, c in cells if state.cells[r][c] == CellMark.STAR)


def count_crosses(state: BoardState, cells) -> int:
    return sum(1 for r, c in cells if state.cells[r][c] == CellMark.CROSS)


def empty_cells(state: BoardState, cells) -> List[Coord]:
    return [Coord(r, c) for r, c in cells if state.cells[r][c] == CellMark.EMPTY]


def star_cells(state: BoardState, cells) -> List[Coord]:
    return [Coord(r, c) for r, c in cells if state.cells[r][c] == CellMark.STAR]


def non_cross_cells(state: BoardState, cells) -> List[Coord]:
    return [Coord(r, c) for r, c in cells if state.cells[r][c] != CellMark.CROSS]


def remaining_stars(state: BoardState, cells, quota=None) -> int:
    """Stars still owed by a unit (``quota`` defaults to the per-unit quota)."""
    if quota is None:
        quota = state.board.stars_per_unit
    return quota - count_stars(state, cells)


# --- GEOMETRY ---
def neighbors8(coord, size: int) -> List[Coord]:
    """King-move neighbours of ``coord`` clipped to the board."""
    row, col = coord
    result = []
    for dr in (-1, 0, 1):
        for dc in (-1, 0, 1):
            if dr == 0 and dc == 0:
                continue
            nr, nc = row + dr, col + dc
            if 0 <= nr < size and 0 <= nc < size:
                result.append(Coord(nr, nc))
    return result


def are_adjacent(a, b) -> bool:
    return a != b and abs(a[0] - b[0]) <= 1 and abs(a[1] - b[1]) <= 1


def two_by_two_blocks(size: int) -> List[Coord]:
    """Top-left corners of every 2x2 block on the board."""
    return [Coord(r, c) for r in range(size - 1) for c in range(size - 1)]


def block_cells(top_left) -> List[Coord]:
    r, c = top_left
    return [Coord(r, c), Coord(r, c + 1), Coord(r + 1, c), Coord(r + 1, c + 1)]


def blocks_containing(coord, size: int) -> List[Coord]:
    row, col = coord
    return [
        Coord(r, c)
        for r in (row - 1, row)
        for c in (col - 1, col)
        if 0 <= r < size - 1 and 0 <= c < size - 1
    ]


def contiguous_runs(cells: Sequence[Coord], orientation: str) -> List[List[Coord]]:
    """
    Splits cells lying on one line into runs of consecutive positions.

    :param cells: Cells of a single row (orientation 'row') or column.
    :returns: The runs, each sorted along the line.
    """
    axis = 1 if orientation == UNIT_ROW else 0
    ordered = sorted(cells, key=lambda cell: cell[axis])
    runs: List[List[Coord]] = []
    for cell in ordered:
        if runs and cell[axis] == runs[-1][-1][axis] + 1:
            runs[-1].append(cell)
        else:
            runs.append([cell])
    return runs


# --- SET ALGEBRA ---
def unique_cells(cells: Iterable) -> List[Coord]:
    seen = set()
    result = []
    for cell in cells:
        key = Coord(*cell)
        if key not in seen:
            seen.add(key)
            result.append(key)
    return result


def union(*groups) -> List[Coord]:
    return unique_cells(cell for group in groups for cell in group)


def intersection(a, b) -> List[Coord]:
    other = {Coord(*cell) for cell in b}
    return [cell for cell in unique_cells(a) if cell in other]


def difference(a, b) -> List[Coord]:
    other = {Coord(*cell) for cell in b}
    return [cell for cell in unique_cells(a) if cell not in other]


# --- FORMATTING ---
def region_letter(region_id: int) -> str:
    if 0 <= region_id < 26:
        return chr(ord('A') + region_id)
    return str(region_id)


def format_row(row: int) -> str:
    return f"Row {row}"


def format_col(col: int) -> str:
    return f"Column {col}"


def format_region(region_id: int) -> str:
    return f"Region {region_letter(region_id)}"


def format_line(orientation, index) -> str:
    return format_row(index) if orientation == UNIT_ROW else format_col(index)


def format_regions(region_ids) -> str:
    letters = [region_letter(region_id) for region_id in region_ids]
    if not letters:
        return ''
    if len(letters) == 1:
        return f"region {letters[0]}"
    if len(letters) == 2:
        return f"regions {letters[0]} and {letters[1]}"
    return f"regions {', '.join(letters[:-1])}, and {letters[-1]}"


def format_cells(cells) -> str:
    return ", ".join(str(Coord(*cell)) for cell in cells)
