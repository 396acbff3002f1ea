"""**********************************************************************************
 * Title: placement.py
 *
 * @author Isaiah Tadrous
 * @version 3.0.0
 * -------------------------------------------------------------------------------
 * Description:
 * Techniques that reason about where a unit's remaining stars can go.
 * forced-placement and adjacent-exclusion enumerate every joint placement of a
 * unit's remaining stars (within fixed caps, giving up when a cap is hit);
 * shared-row-column locks several regions into one line; n-rooks tiles boards
 * such as 10x10 with two stars into 2x2 blocks and tracks the one star-free
 * block every block row and block column must contain.
 **********************************************************************************"""

# --- IMPORTS ---
import itertools
import logging

from starbattle_hints.board import (
    UNIT_COLUMN, UNIT_ROW, Coord, all_units, are_adjacent, count_stars, empty_cells,
    format_cells, format_line, format_regions, line_cells, neighbors8, remaining_stars,
)
from starbattle_hints.bounds import (
    can_place_all_stars_simultaneously, is_valid_star_placement, viable_cells,
)
from starbattle_hints.constants import (
    MAX_PLACEMENT_CANDIDATES, MAX_PLACEMENT_SETS, TECH_ADJACENT_EXCLUSION,
    TECH_FORCED_PLACEMENT, TECH_N_ROOKS, TECH_SHARED_ROW_COLUMN,
)
from starbattle_hints.deductions import BlockDeduction, HintKind, TechniqueResult
from starbattle_hints.techniques.common import make_hint


# --- PLACEMENT ENUMERATION ---
def enumerate_placements(state, cells, need):
    """
    Every set of ``need`` viable cells from ``cells`` that can all be stars at
    once.

    :returns: The placements as tuples, or None when a cap was hit or the
              unit has no candidate at all.
    :rtype: list[tuple[Coord]] | None
    """
    candidates = viable_cells(state, cells)
    if not candidates or need <= 0:
        return None
    if len(candidates) > MAX_PLACEMENT_CANDIDATES and need > 1:
        return None
    placements = []
    for combo in itertools.combinations(candidates, need):
        if any(are_adjacent(a, b) for a, b in itertools.combinations(combo, 2)):
            continue
        if can_place_all_stars_simultaneously(state, combo) is None:
            continue
        placements.append(combo)
        if len(placements) > MAX_PLACEMENT_SETS:
            logging.debug(f"Placement enumeration passed {MAX_PLACEMENT_SETS} sets; giving up on this unit.")
            return None
    return placements or None


def find_forced_placement_hint(state, ctx):
    for unit in all_units(state.board):
        need = remaining_stars(state, unit.cells)
        placements = enumerate_placements(state, unit.cells, need)
        if not placements:
            continue
        common = set(placements[0]).intersection(*placements[1:])
        if not common:
            continue
        stars = sorted(common)
        explanation = (f"{unit.label} has {len(placements)} possible arrangement(s) of its remaining {need} star(s), "
                       f"and every one of them uses {format_cells(stars)}.")
        hint = make_hint(state, ctx, TECH_FORCED_PLACEMENT, HintKind.PLACE_STAR, stars, explanation,
                         highlight_cells=sorted({cell for p in placements for cell in p}))
        if hint:
            return TechniqueResult.of_hint(hint)
    return TechniqueResult.none()


def find_adjacent_exclusion_hint(state, ctx):
    """
    A cell outside every possible arrangement of a unit's stars that touches a
    star of every arrangement can never be a star.
    """
    size = state.size
    for unit in all_units(state.board):
        need = remaining_stars(state, unit.cells)
        placements = enumerate_placements(state, unit.cells, need)
        if not placements:
            continue
        used = {cell for p in placements for cell in p}
        around = {nb for cell in used for nb in neighbors8(cell, size) if state.is_empty(nb)} - used
        crosses = sorted(
            cell for cell in around
            if all(any(are_adjacent(cell, star) for star in p) for p in placements)
        )
        if not crosses:
            continue
        explanation = (f"Wherever {unit.label} places its remaining {need} star(s), one of them touches "
                       f"{format_cells(crosses)}, so those cells are crosses.")
        hint = make_hint(state, ctx, TECH_ADJACENT_EXCLUSION, HintKind.PLACE_CROSS, crosses, explanation,
                         highlight_cells=sorted(used) + crosses)
        if hint:
            return TechniqueResult.of_hint(hint)
    return TechniqueResult.none()


def find_shared_row_column_hint(state, ctx):
    """
    Several regions whose candidates all lie in one line, and whose needs add
    up to what the line still owes, leave no star for the line's other cells.
    """
    board = state.board
    confined = {UNIT_ROW: {}, UNIT_COLUMN: {}}
    for region_id, cells in board.region_map.items():
        need = remaining_stars(state, cells)
        candidates = viable_cells(state, cells)
        if need <= 0 or not candidates:
            continue
        for orientation, axis in ((UNIT_ROW, 0), (UNIT_COLUMN, 1)):
            indices = {cell[axis] for cell in candidates}
            if len(indices) == 1:
                confined[orientation].setdefault(indices.pop(), []).append((region_id, need))

    for orientation in (UNIT_ROW, UNIT_COLUMN):
        for index, regions in sorted(confined[orientation].items()):
            if len(regions) < 2:
                continue
            line = line_cells(board, orientation, index)
            total = sum(need for _, need in regions)
            if total != remaining_stars(state, line):
                continue
            region_ids = [region_id for region_id, _ in regions]
            others = [cell for cell in empty_cells(state, line) if board.region_of(cell) not in region_ids]
            if not others:
                continue
            explanation = (f"The remaining stars of {format_regions(region_ids)} must all go in "
                           f"{format_line(orientation, index)}, using up its {total} remaining star(s). "
                           f"{format_cells(others)} are crosses.")
            extra = {'rows': (index,)} if orientation == UNIT_ROW else {'cols': (index,)}
            hint = make_hint(state, ctx, TECH_SHARED_ROW_COLUMN, HintKind.PLACE_CROSS, others, explanation,
                             regions=region_ids, **extra)
            if hint:
                return TechniqueResult.of_hint(hint)
    return TechniqueResult.none()


# --- N-ROOKS ---
def _tile_cells(tile_row, tile_col):
    r, c = 2 * tile_row, 2 * tile_col
    return [Coord(r, c), Coord(r, c + 1), Coord(r + 1, c), Coord(r + 1, c + 1)]


def find_n_rooks_hint(state, ctx):
    """
    On an even board where each band of two rows holds exactly one star fewer
    than it has 2x2 tiles (N/2 - 2K == 1), every block row and every block
    column contains exactly one star-free tile. A tile is the star-free one of
    its block row when every other tile there either holds a star or sits in a
    block column whose star-free tile is already known.
    """
    size, quota = state.size, state.stars_per_unit
    if size % 2 or size // 2 - 2 * quota != 1:
        return TechniqueResult.none()
    tiles = size // 2
    has_star = {}
    known_empty = {}
    for tr in range(tiles):
        for tc in range(tiles):
            cells = _tile_cells(tr, tc)
            has_star[tr, tc] = count_stars(state, cells) > 0
            known_empty[tr, tc] = not has_star[tr, tc] and not any(is_valid_star_placement(state, cell) for cell in cells)

    def star_free_in_band(fixed, by_row):
        key = (lambda t: (fixed, t)) if by_row else (lambda t: (t, fixed))
        other = (lambda k: k[1]) if by_row else (lambda k: k[0])
        candidates = []
        for t in range(tiles):
            k = key(t)
            if has_star[k]:
                continue
            elsewhere = any(
                known_empty[(j, other(k)) if by_row else (other(k), j)]
                for j in range(tiles) if j != fixed
            )
            if not elsewhere:
                candidates.append(k)
        return candidates[0] if len(candidates) == 1 else None

    deductions = []
    for fixed in range(tiles):
        for by_row in (True, False):
            tile = star_free_in_band(fixed, by_row)
            if tile is None:
                continue
            cells = _tile_cells(*tile)
            empties = empty_cells(state, cells)
            band = f"block row {fixed}" if by_row else f"block column {fixed}"
            if empties:
                explanation = (f"N-Rooks: every block row and block column of 2x2 tiles has exactly one tile without a star. "
                               f"In {band} the tile at {cells[0]} is the only one that can be star-free, so "
                               f"{format_cells(empties)} are crosses.")
                hint = make_hint(state, ctx, TECH_N_ROOKS, HintKind.PLACE_CROSS, empties, explanation,
                                 rows=(cells[0].row, cells[2].row), cols=(cells[0].col, cells[1].col),
                                 highlight_cells=cells)
                if hint:
                    return TechniqueResult.of_hint(hint)
            band_tiles = [(fixed, t) if by_row else (t, fixed) for t in range(tiles)]
            for k in band_tiles:
                if k != tile and not has_star[k]:
                    deductions.append(BlockDeduction(
                        top_left=_tile_cells(*k)[0], technique=TECH_N_ROOKS,
                        explanation=f"The tile at {_tile_cells(*k)[0]} is not the star-free tile of {band}, so it holds one star.",
                    ))
    return TechniqueResult.of_deductions(deductions)
