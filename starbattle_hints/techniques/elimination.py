"""**********************************************************************************
 * Title: elimination.py
 *
 * @author Isaiah Tadrous
 * @version 3.0.0
 * -------------------------------------------------------------------------------
 * Description:
 * Elimination techniques: a cell is crossed because starring it breaks
 * something. exclusion looks for a unit left with too few empty cells once the
 * hypothetical star and its neighbourhood are marked; pressured-exclusion makes
 * the same test against the 2x2 tile capacity of each unit; fish finds groups
 * of lines whose stars are confined to an equal number of perpendicular lines.
 * The last two are heuristic enough that every claim they make is checked by
 * the verifier first.
 **********************************************************************************"""

# --- IMPORTS ---
import itertools

from starbattle_hints.board import (
    UNIT_COLUMN, UNIT_ROW, CellMark, all_units, count_crosses, count_stars,
    empty_cells, format_cells, format_line, line_cells, neighbors8, non_cross_cells,
    units_of,
)
from starbattle_hints.bounds import block_capacity, viable_cells
from starbattle_hints.constants import MAX_FISH_SIZE, TECH_EXCLUSION, TECH_FISH, TECH_PRESSURED_EXCLUSION
from starbattle_hints.deductions import HintKind, TechniqueResult
from starbattle_hints.techniques.common import confirmed, make_hint


def _hypothetical_star(state, cell):
    """A clone with ``cell`` starred and its empty neighbours crossed."""
    trial = state.clone()
    trial.set_mark(cell, CellMark.STAR)
    for nb in neighbors8(cell, state.size):
        if trial.is_empty(nb):
            trial.set_mark(nb, CellMark.CROSS)
    return trial


def _affected_units(state, cell):
    """Every unit containing the cell or one of its neighbours."""
    seen = {}
    for spot in [cell] + neighbors8(cell, state.size):
        for unit in units_of(state.board, spot):
            seen[(unit.kind, unit.index)] = unit
    return list(seen.values())


def find_exclusion_hint(state, ctx):
    quota = state.stars_per_unit
    for cell in viable_cells(state, state.board.all_cells):
        trial = _hypothetical_star(state, cell)
        for unit in _affected_units(state, cell):
            need = quota - count_stars(trial, unit.cells)
            room = len(empty_cells(trial, unit.cells))
            if need > room:
                explanation = (f"Exclusion: a star at {cell} would cross its neighbours and leave {unit.label} "
                               f"with {room} empty cell(s) for the {need} star(s) it still needs, so {cell} is a cross.")
                hint = make_hint(state, ctx, TECH_EXCLUSION, HintKind.PLACE_CROSS, [cell], explanation,
                                 highlight_cells=[cell] + list(unit.cells))
                if hint:
                    return TechniqueResult.of_hint(hint)
                break
    return TechniqueResult.none()


def find_pressured_exclusion_hint(state, ctx):
    """
    A star at a cell that leaves some unit unable to fit its quota into the
    2x2 tiles that can still hold a star. Only runs once the board carries
    marks, and every claim is verified.
    """
    board = state.board
    if not any(count_stars(state, row) or count_crosses(state, row) for row in
               (line_cells(board, UNIT_ROW, r) for r in range(board.size))):
        return TechniqueResult.none()
    quota = board.stars_per_unit
    for cell in viable_cells(state, board.all_cells):
        trial = _hypothetical_star(state, cell)
        for unit in all_units(board):
            capacity = block_capacity(trial, unit.cells)
            if capacity >= quota:
                continue
            if not confirmed(state, ctx, [cell], CellMark.CROSS, required=True):
                break
            explanation = (f"Pressured exclusion: with a star at {cell}, {unit.label} could place at most {capacity} "
                           f"star(s) in the 2x2 tiles left to it, short of {quota}; {cell} is a cross.")
            hint = make_hint(state, ctx, TECH_PRESSURED_EXCLUSION, HintKind.PLACE_CROSS, [cell], explanation,
                             highlight_cells=[cell] + list(unit.cells))
            if hint:
                return TechniqueResult.of_hint(hint)
            break
    return TechniqueResult.none()


def find_fish_hint(state, ctx):
    """
    n base lines whose stars and candidates all sit in the same n perpendicular
    cover lines fill those cover lines, so the cover lines' other cells are
    crosses. Every claim is verified.
    """
    board, size = state.board, state.size
    for base, cover, axis in ((UNIT_ROW, UNIT_COLUMN, 1), (UNIT_COLUMN, UNIT_ROW, 0)):
        spans = [{cell[axis] for cell in non_cross_cells(state, line_cells(board, base, i))} for i in range(size)]
        for n in range(2, min(MAX_FISH_SIZE, size - 1) + 1):
            for group in itertools.combinations(range(size), n):
                covered = set().union(*(spans[i] for i in group))
                if len(covered) != n:
                    continue
                group_set = set(group)
                targets = [
                    cell for j in sorted(covered) for cell in empty_cells(state, line_cells(board, cover, j))
                    if cell[1 - axis] not in group_set
                ]
                targets = confirmed(state, ctx, targets, CellMark.CROSS, required=True)
                if not targets:
                    continue
                bases = ", ".join(format_line(base, i) for i in group)
                covers = ", ".join(format_line(cover, j) for j in sorted(covered))
                explanation = (f"Fish: every possible star of {bases} lies in {covers}. Those {n} lines take all "
                               f"{n * state.stars_per_unit} stars of the cover lines, so {format_cells(targets)} are crosses.")
                extra = {'rows': group, 'cols': tuple(sorted(covered))} if base == UNIT_ROW else \
                    {'cols': group, 'rows': tuple(sorted(covered))}
                hint = make_hint(state, ctx, TECH_FISH, HintKind.PLACE_CROSS, targets, explanation, **extra)
                if hint:
                    return TechniqueResult.of_hint(hint)
    return TechniqueResult.none()
