"""**********************************************************************************
 * Title: basic.py
 *
 * @author Isaiah Tadrous
 * @version 3.0.0
 * -------------------------------------------------------------------------------
 * Description:
 * The first-tier techniques: direct consequences of the placement rules that a
 * player applies without thinking. Crossing around stars, crossing the rest of
 * a full unit, filling a unit that has exactly as many empty cells as stars
 * still owed, and locking a region's stars into the one line its candidates
 * share.
 **********************************************************************************"""

# --- IMPORTS ---
from starbattle_hints.board import (
    UNIT_COLUMN, UNIT_ROW, all_units, block_cells, count_stars,
    empty_cells, format_cells, format_line, format_region, line_cells, neighbors8,
    remaining_stars, two_by_two_blocks, unique_cells,
)
from starbattle_hints.bounds import viable_cells
from starbattle_hints.constants import (
    TECH_EXACT_FILL, TECH_LOCKED_LINE, TECH_SATURATION, TECH_TRIVIAL_MARKS, TECH_TWO_BY_TWO,
)
from starbattle_hints.deductions import AreaDeduction, HintKind, TechniqueResult
from starbattle_hints.techniques.common import hint_result, make_hint


def _unit_highlights(unit):
    if unit.kind == UNIT_ROW:
        return {'rows': (unit.index,)}
    if unit.kind == UNIT_COLUMN:
        return {'cols': (unit.index,)}
    return {'regions': (unit.index,)}


def find_trivial_marks_hint(state, ctx):
    """Crosses every empty neighbour of a star and every empty cell of a full unit."""
    quota = state.stars_per_unit
    crosses = []
    sources = []
    for star in state.stars():
        around = empty_cells(state, neighbors8(star, state.size))
        if around:
            crosses.extend(around)
            sources.append(star)
    full_units = []
    for unit in all_units(state.board):
        if count_stars(state, unit.cells) >= quota:
            empties = empty_cells(state, unit.cells)
            if empties:
                crosses.extend(empties)
                full_units.append(unit.label)
    crosses = unique_cells(crosses)
    if not crosses:
        return TechniqueResult.none()
    parts = []
    if sources:
        parts.append(f"no star may touch the star(s) at {format_cells(sources)}")
    if full_units:
        parts.append(f"{', '.join(full_units)} already hold {quota} star(s)")
    explanation = f"Trivial marks: {' and '.join(parts)}, so {format_cells(sorted(crosses))} are crosses."
    return hint_result(state, ctx, TECH_TRIVIAL_MARKS, HintKind.PLACE_CROSS, crosses, explanation,
                       highlight_cells=sources + crosses)


def find_two_by_two_hint(state, ctx):
    for top_left in two_by_two_blocks(state.size):
        cells = block_cells(top_left)
        if count_stars(state, cells) == 0:
            continue
        empties = empty_cells(state, cells)
        if empties:
            explanation = (f"The 2x2 block at {top_left} already holds a star and a 2x2 block can hold only one, "
                           f"so {format_cells(empties)} are crosses.")
            hint = make_hint(state, ctx, TECH_TWO_BY_TWO, HintKind.PLACE_CROSS, empties, explanation,
                             highlight_cells=cells)
            if hint:
                return TechniqueResult.of_hint(hint)
    return TechniqueResult.none()


def find_saturation_hint(state, ctx):
    quota = state.stars_per_unit
    for unit in all_units(state.board):
        if count_stars(state, unit.cells) < quota:
            continue
        empties = empty_cells(state, unit.cells)
        if not empties:
            continue
        explanation = f"{unit.label} already has its {quota} star(s), so its remaining cells {format_cells(empties)} are crosses."
        hint = make_hint(state, ctx, TECH_SATURATION, HintKind.PLACE_CROSS, empties, explanation,
                         **_unit_highlights(unit))
        if hint:
            return TechniqueResult.of_hint(hint)
    return TechniqueResult.none()


def find_exact_fill_hint(state, ctx):
    """
    A unit whose empty cells number exactly the stars it still owes gets them
    all as stars. Units that are close to that point are reported as area
    deductions so the combiner can use them.
    """
    quota = state.stars_per_unit
    deductions = []
    for unit in all_units(state.board):
        need = remaining_stars(state, unit.cells)
        if need <= 0:
            continue
        empties = empty_cells(state, unit.cells)
        if len(empties) == need:
            explanation = f"{unit.label} needs {need} more star(s) and has exactly {need} empty cell(s): {format_cells(empties)}."
            hint = make_hint(state, ctx, TECH_EXACT_FILL, HintKind.PLACE_STAR, empties, explanation,
                             **_unit_highlights(unit))
            if hint:
                return TechniqueResult.of_hint(hint)
            continue
        candidates = viable_cells(state, unit.cells)
        if len(candidates) <= need + 1:
            placed = [cell for cell in unit.cells if state.is_star(cell)]
            deductions.append(AreaDeduction(
                area_kind=unit.kind, area_id=unit.index,
                candidate_cells=tuple(placed + candidates), technique=TECH_EXACT_FILL,
                explanation=f"{unit.label} must place its {need} remaining star(s) among {format_cells(candidates)}.",
                stars_required=quota,
            ))
    return TechniqueResult.of_deductions(deductions)


def find_locked_line_hint(state, ctx):
    """
    A region whose candidate cells all lie in one line places its remaining
    stars there; when that covers everything the line still owes, the rest of
    the line is crossed.
    """
    board = state.board
    for region_id, cells in board.region_map.items():
        need = remaining_stars(state, cells)
        if need <= 0:
            continue
        candidates = viable_cells(state, cells)
        if not candidates:
            continue
        for orientation, axis in ((UNIT_ROW, 0), (UNIT_COLUMN, 1)):
            indices = {cell[axis] for cell in candidates}
            if len(indices) != 1:
                continue
            index = indices.pop()
            line = line_cells(board, orientation, index)
            if remaining_stars(state, line) != need:
                continue
            region_set = set(cells)
            others = [cell for cell in empty_cells(state, line) if cell not in region_set]
            if not others:
                continue
            explanation = (f"Every cell that can still hold a star in {format_region(region_id)} lies in "
                           f"{format_line(orientation, index)}, and the region's {need} remaining star(s) are all the line still needs. "
                           f"The other cells of the line, {format_cells(others)}, are crosses.")
            extra = {'rows': (index,)} if orientation == UNIT_ROW else {'cols': (index,)}
            hint = make_hint(state, ctx, TECH_LOCKED_LINE, HintKind.PLACE_CROSS, others, explanation,
                             regions=(region_id,), **extra)
            if hint:
                return TechniqueResult.of_hint(hint)
    return TechniqueResult.none()
