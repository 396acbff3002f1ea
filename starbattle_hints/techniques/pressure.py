"""**********************************************************************************
 * Title: pressure.py
 *
 * @author Isaiah Tadrous
 * @version 3.0.0
 * -------------------------------------------------------------------------------
 * Description:
 * Line-pressure techniques. A row or column whose remaining empty cells form a
 * few short runs can only spread its stars in limited ways: a run of length L
 * holds at most ceil(L/2) stars. Comparing those capacities with what the line
 * still needs pins stars to particular runs, and a star confined to a short run
 * rules out every cell in the neighbouring lines that touches the whole run.
 **********************************************************************************"""

# --- IMPORTS ---
from functools import reduce

from starbattle_hints.board import (
    UNIT_COLUMN, UNIT_ROW, contiguous_runs, empty_cells, format_cells, format_line,
    line_cells, neighbors8, remaining_stars,
)
from starbattle_hints.constants import TECH_ADJACENT_ROW_COL, TECH_CROSS_EMPTY_PATTERNS, TECH_CROSS_PRESSURE
from starbattle_hints.deductions import HintKind, TechniqueResult
from starbattle_hints.techniques.common import make_hint


def _lines(state):
    for orientation in (UNIT_ROW, UNIT_COLUMN):
        for index in range(state.size):
            cells = line_cells(state.board, orientation, index)
            yield orientation, index, cells


def _line_highlight(orientation, index):
    return {'rows': (index,)} if orientation == UNIT_ROW else {'cols': (index,)}


def _capacity(run):
    return (len(run) + 1) // 2


def _touching_all(state, run):
    """Empty cells outside ``run`` that touch every cell of it."""
    shared = reduce(lambda acc, cell: acc & set(neighbors8(cell, state.size)), run[1:], set(neighbors8(run[0], state.size)))
    return sorted(cell for cell in shared - set(run) if state.is_empty(cell))


def find_cross_pressure_hint(state, ctx):
    """
    Two patterns on a single line.

    A line needing one star whose empties are two or three consecutive cells
    crosses the cells in the neighbouring lines that touch all of them. A line
    needing two stars with exactly three empties either stars both ends of a
    consecutive three, or stars the one empty that is not part of an adjacent
    pair.
    """
    for orientation, index, cells in _lines(state):
        need = remaining_stars(state, cells)
        empties = empty_cells(state, cells)
        if need <= 0 or not empties:
            continue
        runs = contiguous_runs(empties, orientation)
        name = format_line(orientation, index)

        if need == 1 and len(runs) == 1 and len(empties) in (2, 3):
            crosses = _touching_all(state, empties)
            if crosses:
                explanation = (f"{name} needs one more star and it must go in {format_cells(empties)}. "
                               f"Every one of those cells touches {format_cells(crosses)}, so they are crosses.")
                hint = make_hint(state, ctx, TECH_CROSS_PRESSURE, HintKind.PLACE_CROSS, crosses, explanation,
                                 highlight_cells=empties + crosses, **_line_highlight(orientation, index))
                if hint:
                    return TechniqueResult.of_hint(hint)

        if need == 2 and len(empties) == 3:
            if len(runs) == 1:
                stars = [runs[0][0], runs[0][2]]
                explanation = (f"{name} needs two stars in three consecutive cells {format_cells(empties)}; "
                               f"two stars cannot be adjacent, so both ends are stars.")
            elif len(runs) == 2:
                pair, single = (runs[0], runs[1]) if len(runs[0]) == 2 else (runs[1], runs[0])
                stars = single
                explanation = (f"{name} needs two stars but the adjacent cells {format_cells(pair)} can hold only one, "
                               f"so {format_cells(single)} is a star.")
            else:
                continue
            hint = make_hint(state, ctx, TECH_CROSS_PRESSURE, HintKind.PLACE_STAR, stars, explanation,
                             highlight_cells=empties, **_line_highlight(orientation, index))
            if hint:
                return TechniqueResult.of_hint(hint)
    return TechniqueResult.none()


def find_cross_empty_patterns_hint(state, ctx):
    """
    A short run that must hold at least one star because the line's other runs
    cannot absorb everything it still needs. The cells in the neighbouring lines
    that touch the whole run are crosses.
    """
    for orientation, index, cells in _lines(state):
        need = remaining_stars(state, cells)
        if need <= 0:
            continue
        runs = contiguous_runs(empty_cells(state, cells), orientation)
        if len(runs) < 2:
            continue
        total = sum(_capacity(run) for run in runs)
        for run in runs:
            if len(run) not in (2, 3):
                continue
            at_least = need - (total - _capacity(run))
            if at_least < 1:
                continue
            crosses = _touching_all(state, run)
            if not crosses:
                continue
            others = [len(other) for other in runs if other is not run]
            explanation = (f"{format_line(orientation, index)} needs {need} star(s); its other empty runs (lengths "
                           f"{', '.join(str(n) for n in others)}) can take at most {total - _capacity(run)}, so the run "
                           f"{format_cells(run)} holds a star. {format_cells(crosses)} touch every cell of that run and are crosses.")
            hint = make_hint(state, ctx, TECH_CROSS_EMPTY_PATTERNS, HintKind.PLACE_CROSS, crosses, explanation,
                             highlight_cells=list(run) + crosses, **_line_highlight(orientation, index))
            if hint:
                return TechniqueResult.of_hint(hint)
    return TechniqueResult.none()


def find_adjacent_row_col_hint(state, ctx):
    """
    When the runs of a line can hold exactly the stars it needs, each run is
    filled to capacity. An odd run of length 2m-1 holding m stars has them on
    its first, third, fifth cell and so on.
    """
    for orientation, index, cells in _lines(state):
        need = remaining_stars(state, cells)
        if need <= 0:
            continue
        runs = contiguous_runs(empty_cells(state, cells), orientation)
        if not runs or sum(_capacity(run) for run in runs) != need:
            continue
        stars = [cell for run in runs if len(run) % 2 == 1 for cell in run[::2]]
        if not stars:
            continue
        explanation = (f"{format_line(orientation, index)} needs {need} star(s) and its empty runs can hold exactly that many, "
                       f"so every run is full. Odd-length runs force stars at {format_cells(stars)}.")
        hint = make_hint(state, ctx, TECH_ADJACENT_ROW_COL, HintKind.PLACE_STAR, stars, explanation,
                         highlight_cells=[cell for run in runs for cell in run], **_line_highlight(orientation, index))
        if hint:
            return TechniqueResult.of_hint(hint)
    return TechniqueResult.none()
