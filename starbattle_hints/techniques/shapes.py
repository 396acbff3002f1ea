"""**********************************************************************************
 * Title: shapes.py
 *
 * @author Isaiah Tadrous
 * @version 3.0.0
 * -------------------------------------------------------------------------------
 * Description:
 * Techniques keyed on the geometry of individual regions. Straight strips,
 * L, M and T shapes are recognised from the region layout, and each recognised
 * region is put under "shape pressure": its stars can only go in its viable
 * cells, and a candidate whose star would knock out too many of the others
 * cannot be a star. Two L-shaped regions that touch put the same pressure on
 * each other.
 **********************************************************************************"""

# --- IMPORTS ---
from collections import defaultdict

from starbattle_hints.board import (
    UNIT_COLUMN, UNIT_ROW, Coord, are_adjacent, contiguous_runs, empty_cells,
    format_cells, format_line, format_region, format_regions, line_cells,
    neighbors8, remaining_stars,
)
from starbattle_hints.bounds import viable_cells
from starbattle_hints.constants import TECH_KISSING_LS, TECH_PRESSURED_TS, TECH_SIMPLE_SHAPES, TECH_THE_M
from starbattle_hints.deductions import HintKind, TechniqueResult
from starbattle_hints.techniques.common import make_hint


# --- SHAPE RECOGNITION ---
def _is_contiguous(values):
    ordered = sorted(values)
    return all(b == a + 1 for a, b in zip(ordered, ordered[1:]))


def find_l_shapes(board):
    """Regions made of a corner cell plus one arm along its row and one along its column."""
    shapes = {}
    for region_id, cells in board.region_map.items():
        if len(cells) < 3:
            continue
        for corner in cells:
            across = [c for c in cells if c.row == corner.row and c != corner]
            down = [c for c in cells if c.col == corner.col and c != corner]
            if not across or not down or 1 + len(across) + len(down) != len(cells):
                continue
            if _is_contiguous([c.col for c in across] + [corner.col]) and _is_contiguous([c.row for c in down] + [corner.row]):
                if min(c.col for c in across) > corner.col or max(c.col for c in across) < corner.col:
                    if min(c.row for c in down) > corner.row or max(c.row for c in down) < corner.row:
                        shapes[region_id] = corner
                        break
    return shapes


def find_t_shapes(board):
    """Regions made of a straight crossbar of three or more cells and a stem leaving it from an inner cell."""
    shapes = {}
    for region_id, cells in board.region_map.items():
        if len(cells) < 4:
            continue
        for bar_axis, stem_axis in ((0, 1), (1, 0)):
            groups = defaultdict(list)
            for cell in cells:
                groups[cell[bar_axis]].append(cell)
            for line, bar in groups.items():
                if len(bar) < 3 or not _is_contiguous([c[stem_axis] for c in bar]):
                    continue
                inner = sorted(bar)[1:-1]
                for joint in inner:
                    stem = [c for c in cells if c[stem_axis] == joint[stem_axis] and c[bar_axis] != line]
                    if stem and len(stem) + len(bar) == len(cells) and _is_contiguous([c[bar_axis] for c in stem] + [line]):
                        shapes[region_id] = tuple(sorted(bar))
                        break
                if region_id in shapes:
                    break
            if region_id in shapes:
                break
    return shapes


def find_m_shapes(board):
    """
    Regions spanning three or more columns whose column tops rise, fall and
    rise again: exactly two peaks and a valley between them.
    """
    shapes = {}
    for region_id, cells in board.region_map.items():
        if len(cells) < 5:
            continue
        tops = {}
        for cell in cells:
            tops[cell.col] = min(tops.get(cell.col, cell.row), cell.row)
        cols = sorted(tops)
        if len(cols) < 3 or not _is_contiguous(cols):
            continue
        peaks, valley = [], None
        for i, col in enumerate(cols):
            left = tops[cols[i - 1]] if i > 0 else None
            right = tops[cols[i + 1]] if i < len(cols) - 1 else None
            if (left is None or tops[col] < left) and (right is None or tops[col] < right):
                peaks.append(Coord(tops[col], col))
            elif left is not None and right is not None and tops[col] > left and tops[col] > right and valley is None:
                valley = Coord(tops[col], col)
        if len(peaks) == 2 and valley is not None and peaks[0].col < valley.col < peaks[1].col:
            shapes[region_id] = (tuple(peaks), valley)
    return shapes


# --- SHAPE PRESSURE ---
def shape_pressure(state, cells):
    """
    Runs the two pressure rules over one region.

    :returns: (kind, cells) for the first rule that forces something, or None.
    """
    need = remaining_stars(state, cells)
    candidates = viable_cells(state, cells)
    if need <= 0 or len(candidates) < need:
        return None
    if len(candidates) == need and len(candidates) < len(empty_cells(state, cells)):
        return HintKind.PLACE_STAR, candidates
    crosses = []
    for cell in candidates:
        blocked = set(neighbors8(cell, state.size))
        left = [other for other in candidates if other != cell and other not in blocked]
        if len(left) < need - 1:
            crosses.append(cell)
    if crosses:
        return HintKind.PLACE_CROSS, crosses
    return None


def _pressure_hint(state, ctx, technique, region_id, shape_name):
    cells = state.board.region_map[region_id]
    outcome = shape_pressure(state, cells)
    if outcome is None:
        return None
    kind, targets = outcome
    need = remaining_stars(state, cells)
    if kind == HintKind.PLACE_STAR:
        explanation = (f"{format_region(region_id)} is {shape_name} that needs {need} star(s) and only "
                       f"{format_cells(targets)} can still take one, so they are stars.")
    else:
        explanation = (f"{format_region(region_id)} is {shape_name} that needs {need} star(s). A star at "
                       f"{format_cells(targets)} would rule out too many of its other cells, so they are crosses.")
    return make_hint(state, ctx, technique, kind, targets, explanation, regions=(region_id,),
                     highlight_cells=list(cells))


# --- TECHNIQUES ---
def find_simple_shapes_hint(state, ctx):
    """
    A region whose viable cells form one straight run of exactly twice its need
    holds one star in each consecutive pair of the run. The cells beside the run
    in the neighbouring lines touch both cells of some pair and are crosses;
    when the region covers everything the line still owes, the rest of the line
    is crossed too.
    """
    board = state.board
    for region_id, cells in board.region_map.items():
        need = remaining_stars(state, cells)
        candidates = viable_cells(state, cells)
        if need <= 0 or len(candidates) != 2 * need:
            continue
        for orientation, axis in ((UNIT_ROW, 0), (UNIT_COLUMN, 1)):
            if len({cell[axis] for cell in candidates}) != 1 or len(contiguous_runs(candidates, orientation)) != 1:
                continue
            index = candidates[0][axis]
            strip = set(candidates)
            beside = sorted({
                nb for cell in candidates for nb in neighbors8(cell, state.size)
                if nb[axis] != index and all(are_adjacent(nb, other) for other in _pair_of(candidates, cell, orientation))
            })
            crosses = [cell for cell in beside if state.is_empty(cell)]
            line = line_cells(board, orientation, index)
            if remaining_stars(state, line) == need:
                crosses += [cell for cell in empty_cells(state, line) if cell not in strip and board.region_of(cell) != region_id]
            if not crosses:
                continue
            explanation = (f"{format_region(region_id)} must place {need} star(s) in the strip {format_cells(candidates)} "
                           f"along {format_line(orientation, index)}, one in each consecutive pair, so "
                           f"{format_cells(sorted(set(crosses)))} are crosses.")
            extra = {'rows': (index,)} if orientation == UNIT_ROW else {'cols': (index,)}
            hint = make_hint(state, ctx, TECH_SIMPLE_SHAPES, HintKind.PLACE_CROSS, crosses, explanation,
                             regions=(region_id,), highlight_cells=candidates, **extra)
            if hint:
                return TechniqueResult.of_hint(hint)
    return TechniqueResult.none()


def _pair_of(strip, cell, orientation):
    """The consecutive pair of the strip that ``cell`` belongs to."""
    axis = 1 if orientation == UNIT_ROW else 0
    ordered = sorted(strip, key=lambda c: c[axis])
    position = ordered.index(cell)
    start = position - position % 2
    return ordered[start:start + 2]


def find_kissing_ls_hint(state, ctx):
    """
    Two L-shaped regions that touch: a viable cell of one whose star would
    leave the other with fewer viable cells than it needs is crossed.
    """
    board = state.board
    l_regions = sorted(find_l_shapes(board))
    for i, first in enumerate(l_regions):
        for second in l_regions[i + 1:]:
            first_cells, second_cells = board.region_map[first], board.region_map[second]
            if not any(are_adjacent(a, b) for a in first_cells for b in second_cells):
                continue
            crosses = []
            for mine, theirs in ((first_cells, second_cells), (second_cells, first_cells)):
                their_need = remaining_stars(state, theirs)
                their_options = viable_cells(state, theirs)
                if their_need <= 0:
                    continue
                for cell in viable_cells(state, mine):
                    left = [other for other in their_options if not are_adjacent(cell, other)]
                    if len(left) < their_need:
                        crosses.append(cell)
            if not crosses:
                continue
            explanation = (f"{format_regions([first, second])} are touching L shapes. A star at {format_cells(crosses)} "
                           f"would leave the other region without room for its stars, so those cells are crosses.")
            hint = make_hint(state, ctx, TECH_KISSING_LS, HintKind.PLACE_CROSS, crosses, explanation,
                             regions=(first, second), highlight_cells=list(first_cells) + list(second_cells))
            if hint:
                return TechniqueResult.of_hint(hint)
    return TechniqueResult.none()


def find_the_m_hint(state, ctx):
    for region_id in sorted(find_m_shapes(state.board)):
        hint = _pressure_hint(state, ctx, TECH_THE_M, region_id, "an M shape")
        if hint:
            return TechniqueResult.of_hint(hint)
    return TechniqueResult.none()


def find_pressured_ts_hint(state, ctx):
    for region_id in sorted(find_t_shapes(state.board)):
        hint = _pressure_hint(state, ctx, TECH_PRESSURED_TS, region_id, "a T shape")
        if hint:
            return TechniqueResult.of_hint(hint)
    return TechniqueResult.none()
