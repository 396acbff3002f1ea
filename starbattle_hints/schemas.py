"""**********************************************************************************
 * Title: schemas.py
 *
 * @author Isaiah Tadrous
 * @version 3.0.0
 * -------------------------------------------------------------------------------
 * Description:
 * Schemas are small, self-describing deduction rules kept in a priority-ordered
 * registry. Each schema looks at the whole board and returns applications:
 * lists of forced cells together with an explanation. The built-in registry
 * carries five families: the candidate deficit (E), band budgets that bound
 * what every region gives a band of lines (A), exclusive areas where a few
 * regions share a band or a region keeps to a few lines (B), 2x2 cages that
 * hold one star each once they cover a band or region (C), and intersections
 * of lines, regions and bands (D).
 **********************************************************************************"""

# --- IMPORTS ---
import logging
from dataclasses import dataclass
from typing import Callable, List, Tuple

from starbattle_hints.board import (
    UNIT_COLUMN, UNIT_ROW, CellMark, Coord, all_units, block_cells, blocks_containing, col_cells, count_stars,
    format_cells, format_col, format_line, format_region, format_regions, format_row, line_cells, remaining_stars,
    row_cells,
)
from starbattle_hints.bounds import viable_cells
from starbattle_hints.constants import MAX_EXCLUSIVE_UNITS


@dataclass(frozen=True)
class SchemaApplication:
    schema_id: str
    deductions: Tuple[Tuple[Coord, CellMark], ...]
    explanation: str


@dataclass(frozen=True)
class Schema:
    id: str
    priority: int
    apply: Callable


class SchemaRegistry:
    """Schemas sorted by priority; a lower number runs first."""

    def __init__(self):
        self._schemas: List[Schema] = []

    def register(self, schema):
        self._schemas.append(schema)
        self._schemas.sort(key=lambda s: s.priority)

    def all(self):
        return list(self._schemas)

    def get(self, schema_id):
        return next((s for s in self._schemas if s.id == schema_id), None)

    def apply_all(self, state) -> List[SchemaApplication]:
        applications = []
        for schema in self._schemas:
            found = schema.apply(state)
            if found:
                logging.debug(f"Schema {schema.id} produced {len(found)} application(s).")
            applications.extend(found)
        return applications

    def __len__(self):
        return len(self._schemas)


# --- E1: CANDIDATE DEFICIT ---
def apply_candidate_deficit(state):
    applications = []
    for unit in all_units(state.board):
        need = remaining_stars(state, unit.cells)
        candidates = viable_cells(state, unit.cells)
        if need > 0 and len(candidates) == need:
            applications.append(SchemaApplication(
                schema_id='E1_candidateDeficit',
                deductions=tuple((cell, CellMark.STAR) for cell in candidates),
                explanation=f"{unit.label} needs {need} more star(s) and has exactly {need} candidate(s): {format_cells(candidates)}.",
            ))
    return applications


# --- A1 / A2: BAND BUDGETS ---
def _bands(size):
    """Every contiguous run of lines narrower than the board, as (start, width)."""
    for width in range(1, size):
        for start in range(size - width + 1):
            yield start, width


def _band_label(orientation, start, width):
    return f"{orientation}s {start}-{start + width - 1}" if width > 1 else f"{orientation} {start}"


def _region_band_range(state, cells, band_set, axis):
    """Lowest and highest number of stars a region can have inside the band."""
    quota = state.stars_per_unit
    inside = [cell for cell in cells if cell[axis] in band_set]
    outside = [cell for cell in cells if cell[axis] not in band_set]
    stars_in = count_stars(state, inside)
    stars_out = count_stars(state, outside)
    need = quota - stars_in - stars_out
    room_out = len(viable_cells(state, outside))
    room_in = len(viable_cells(state, inside))
    low = stars_in + max(0, need - room_out)
    high = min(stars_in + room_in, quota - stars_out)
    return low, high, inside


def _band_budget(state, axis, schema_id):
    board, quota = state.board, state.stars_per_unit
    orientation = UNIT_ROW if axis == 0 else UNIT_COLUMN
    applications = []
    for start, width in _bands(board.size):
        band_set = set(range(start, start + width))
        ranges = {}
        for region_id, cells in board.region_map.items():
            if any(cell[axis] in band_set for cell in cells):
                ranges[region_id] = _region_band_range(state, cells, band_set, axis)
        budget = width * quota
        for target, (low, high, inside) in ranges.items():
            if low == high:
                continue
            others_low = sum(r[0] for rid, r in ranges.items() if rid != target)
            others_high = sum(r[1] for rid, r in ranges.items() if rid != target)
            most = budget - others_low
            least = budget - others_high
            stars_in = count_stars(state, inside)
            candidates = viable_cells(state, inside)
            lines = _band_label(orientation, start, width)
            if candidates and most <= stars_in:
                applications.append(SchemaApplication(
                    schema_id=schema_id,
                    deductions=tuple((cell, CellMark.CROSS) for cell in candidates),
                    explanation=(f"The band of {lines} needs {budget} stars and the other regions supply at least "
                                 f"{others_low}, so {format_region(target)} has no stars left for the band: "
                                 f"{format_cells(candidates)} are crosses."),
                ))
            elif candidates and least >= stars_in + len(candidates):
                applications.append(SchemaApplication(
                    schema_id=schema_id,
                    deductions=tuple((cell, CellMark.STAR) for cell in candidates),
                    explanation=(f"The band of {lines} needs {budget} stars and the other regions supply at most "
                                 f"{others_high}, so {format_region(target)} must fill {format_cells(candidates)} with stars."),
                ))
    return applications


def apply_row_band_budget(state):
    return _band_budget(state, 0, 'A1_rowBand_regionBudget')


def apply_col_band_budget(state):
    return _band_budget(state, 1, 'A2_colBand_regionBudget')


# --- B1 / B2: EXCLUSIVE REGIONS IN A BAND ---
def _known_band_quota(state, cells, inside):
    """
    The exact number of stars a region puts inside a band, or None while that
    is still open. It is known when the region lies wholly in the band, when
    the region is complete, or when none of its cells outside the band can
    still take a star.
    """
    inside_set = set(inside)
    outside = [cell for cell in cells if cell not in inside_set]
    if not outside:
        return state.stars_per_unit
    stars_in = count_stars(state, inside)
    need = remaining_stars(state, cells)
    if need <= 0:
        return stars_in
    if not viable_cells(state, outside):
        return stars_in + need
    return None


def _exclusive_regions(state, axis, schema_id):
    board, quota = state.board, state.stars_per_unit
    orientation = UNIT_ROW if axis == 0 else UNIT_COLUMN
    applications = []
    for start, width in _bands(board.size):
        band_set = set(range(start, start + width))
        settled = 0
        involved = {}
        for region_id, cells in board.region_map.items():
            inside = [cell for cell in cells if cell[axis] in band_set]
            if not inside:
                continue
            if viable_cells(state, inside):
                involved[region_id] = (cells, inside)
            else:
                settled += count_stars(state, inside)
        if not involved or len(involved) > MAX_EXCLUSIVE_UNITS:
            continue
        known = {rid: _known_band_quota(state, cells, inside) for rid, (cells, inside) in involved.items()}
        budget = width * quota
        for target, (cells, inside) in involved.items():
            if len(inside) == len(cells):
                continue
            others = [known[rid] for rid in involved if rid != target]
            if None in others:
                continue
            owed = budget - settled - sum(others) - count_stars(state, inside)
            candidates = viable_cells(state, inside)
            if owed == 0:
                mark, verdict = CellMark.CROSS, "are crosses"
            elif owed == len(candidates):
                mark, verdict = CellMark.STAR, "are stars"
            else:
                continue
            applications.append(SchemaApplication(
                schema_id=schema_id,
                deductions=tuple((cell, mark) for cell in candidates),
                explanation=(f"Only {format_regions(sorted(involved))} can still place stars in the band of "
                             f"{_band_label(orientation, start, width)}. The other regions' shares are fixed, leaving "
                             f"{owed} star(s) for {format_region(target)}, so {format_cells(candidates)} {verdict}."),
            ))
    return applications


def apply_exclusive_regions_row_band(state):
    return _exclusive_regions(state, 0, 'B1_exclusiveRegions_rowBand')


def apply_exclusive_regions_col_band(state):
    return _exclusive_regions(state, 1, 'B2_exclusiveRegions_colBand')


# --- B3 / B4: EXCLUSIVE LINES IN A REGION ---
def _exclusive_lines(state, axis, schema_id):
    orientation = UNIT_ROW if axis == 0 else UNIT_COLUMN
    applications = []
    for region_id, cells in state.board.region_map.items():
        need = remaining_stars(state, cells)
        candidates = viable_cells(state, cells)
        if need <= 0 or len(candidates) != need:
            continue
        lines = sorted({cell[axis] for cell in candidates})
        if len(lines) > MAX_EXCLUSIVE_UNITS:
            continue
        shares = ", ".join(f"{orientation} {i}: {sum(1 for cell in candidates if cell[axis] == i)}" for i in lines)
        applications.append(SchemaApplication(
            schema_id=schema_id,
            deductions=tuple((cell, CellMark.STAR) for cell in candidates),
            explanation=(f"{format_region(region_id)} still needs {need} star(s) and its candidates give each of its "
                         f"{orientation}s exactly that many ({shares}), so {format_cells(candidates)} are stars."),
        ))
    return applications


def apply_exclusive_rows_in_region(state):
    return _exclusive_lines(state, 0, 'B3_exclusiveRows_region')


def apply_exclusive_cols_in_region(state):
    return _exclusive_lines(state, 1, 'B4_exclusiveCols_region')


# --- C1 - C4: 2x2 CAGES ---
def _cage_cover(state, cells, count):
    """
    Exactly ``count`` disjoint 2x2 blocks lying within ``cells`` that together
    hold every cell of ``cells`` still able to take a star, as top-left
    corners, or None. A block holds one star at most, so when ``cells`` owe
    ``count`` stars and such a cover exists, every block holds exactly one.
    """
    allowed = set(cells)
    targets = viable_cells(state, cells)
    if count <= 0 or not targets:
        return None

    def extend(remaining, chosen, used):
        if not remaining:
            return chosen if len(chosen) == count else None
        if len(chosen) == count:
            return None
        for top_left in blocks_containing(remaining[0], state.size):
            block = block_cells(top_left)
            if any(cell not in allowed or cell in used for cell in block):
                continue
            found = extend([cell for cell in remaining if cell not in block], chosen + [top_left], used | set(block))
            if found:
                return found
        return None

    return extend(targets, [], frozenset())


def _pair_bands(board):
    """Every band of two neighbouring lines, in both directions."""
    for orientation in (UNIT_ROW, UNIT_COLUMN):
        for start in range(board.size - 1):
            yield orientation, start, line_cells(board, orientation, start) + line_cells(board, orientation, start + 1)


def _lone_candidates(state, cover):
    """Cells that are the only candidate left in their block of the cover."""
    lone = []
    for top_left in cover:
        candidates = viable_cells(state, block_cells(top_left))
        if len(candidates) == 1:
            lone.append(candidates[0])
    return lone


def apply_band_exact_cages(state):
    applications = []
    for orientation, start, cells in _pair_bands(state.board):
        owed = 2 * state.stars_per_unit - count_stars(state, cells)
        cover = _cage_cover(state, cells, owed)
        if not cover:
            continue
        stars = _lone_candidates(state, cover)
        if stars:
            applications.append(SchemaApplication(
                schema_id='C1_band_exactCages',
                deductions=tuple((cell, CellMark.STAR) for cell in stars),
                explanation=(f"The band of {orientation}s {start}-{start + 1} owes {owed} star(s) and its candidates fit "
                             f"in {owed} separate 2x2 blocks, so every block holds one star and "
                             f"{format_cells(stars)} are stars."),
            ))
    return applications


def apply_cages_region_quota(state):
    board = state.board
    applications = []
    for orientation, start, cells in _pair_bands(board):
        owed = 2 * state.stars_per_unit - count_stars(state, cells)
        cover = _cage_cover(state, cells, owed)
        if not cover:
            continue
        band_set = set(cells)
        blocks = [viable_cells(state, block_cells(top_left)) for top_left in cover]
        for region_id, region in board.region_map.items():
            inside = [cell for cell in region if cell in band_set]
            if not inside:
                continue
            quota = _known_band_quota(state, region, inside)
            if quota is None:
                continue
            share = quota - count_stars(state, inside)
            region_set = set(region)
            own = [block for block in blocks if all(cell in region_set for cell in block)]
            if share <= 0 or len(own) != share:
                continue
            kept = {cell for block in own for cell in block}
            crosses = [cell for cell in viable_cells(state, inside) if cell not in kept]
            if crosses:
                applications.append(SchemaApplication(
                    schema_id='C2_cages_regionQuota',
                    deductions=tuple((cell, CellMark.CROSS) for cell in crosses),
                    explanation=(f"Each of the {owed} 2x2 blocks covering {orientation}s {start}-{start + 1} holds one star. "
                                 f"{format_region(region_id)} owns {share} of them and owes the band exactly {share}, "
                                 f"so {format_cells(crosses)} are crosses."),
                ))
    return applications


def apply_internal_cage_placement(state):
    applications = []
    for region_id, cells in state.board.region_map.items():
        need = remaining_stars(state, cells)
        cover = _cage_cover(state, cells, need)
        if not cover:
            continue
        stars = _lone_candidates(state, cover)
        if stars:
            applications.append(SchemaApplication(
                schema_id='C3_internalCagePlacement',
                deductions=tuple((cell, CellMark.STAR) for cell in stars),
                explanation=(f"{format_region(region_id)} owes {need} star(s) and its candidates fit in {need} separate "
                             f"2x2 blocks inside it, so every block holds one star and {format_cells(stars)} are stars."),
            ))
    return applications


def apply_cage_exclusion(state):
    applications = []
    for unit in all_units(state.board):
        candidates = viable_cells(state, unit.cells)
        if remaining_stars(state, unit.cells) <= 0 or not candidates or len(candidates) > 4:
            continue
        unit_set = set(unit.cells)
        for top_left in blocks_containing(candidates[0], state.size):
            block = block_cells(top_left)
            if not all(cell in block for cell in candidates):
                continue
            crosses = [cell for cell in viable_cells(state, block) if cell not in unit_set]
            if crosses:
                applications.append(SchemaApplication(
                    schema_id='C4_cageExclusion',
                    deductions=tuple((cell, CellMark.CROSS) for cell in crosses),
                    explanation=(f"Every candidate of {unit.label} lies in the 2x2 block at {format_cells([top_left])}. "
                                 f"The block holds one star at most and it must be {unit.label}'s, "
                                 f"so {format_cells(crosses)} are crosses."),
                ))
    return applications


# --- D1 - D3: INTERSECTIONS ---
def apply_row_col_intersection(state):
    board = state.board
    rows = [row_cells(board, r) for r in range(board.size)]
    cols = [col_cells(board, c) for c in range(board.size)]
    row_need = [remaining_stars(state, cells) for cells in rows]
    col_need = [remaining_stars(state, cells) for cells in cols]
    row_viable = [viable_cells(state, cells) for cells in rows]
    col_viable = [viable_cells(state, cells) for cells in cols]
    applications = []
    for cell in state.empties():
        r, c = cell
        where = f"{format_cells([cell])} sits where {format_row(r)} meets {format_col(c)}"
        if row_need[r] <= 0 or col_need[c] <= 0:
            applications.append(SchemaApplication(
                schema_id='D1_rowColIntersection',
                deductions=((cell, CellMark.CROSS),),
                explanation=f"{where}, and one of them already has all its stars, so it is a cross.",
            ))
        elif cell in row_viable[r] and (len(row_viable[r]) <= row_need[r] or len(col_viable[c]) <= col_need[c]):
            applications.append(SchemaApplication(
                schema_id='D1_rowColIntersection',
                deductions=((cell, CellMark.STAR),),
                explanation=f"{where}, and without it one of them runs out of candidates, so it is a star.",
            ))
    return applications


def apply_region_band_intersection(state):
    board = state.board
    applications = []
    for axis, orientation in ((0, UNIT_ROW), (1, UNIT_COLUMN)):
        for start, width in _bands(board.size):
            band_set = set(range(start, start + width))
            for region_id, cells in board.region_map.items():
                if not any(cell[axis] in band_set for cell in cells):
                    continue
                low, _, inside = _region_band_range(state, cells, band_set, axis)
                share = low - count_stars(state, inside)
                candidates = viable_cells(state, inside)
                if share > 0 and share == len(candidates):
                    applications.append(SchemaApplication(
                        schema_id='D2_regionBandIntersection',
                        deductions=tuple((cell, CellMark.STAR) for cell in candidates),
                        explanation=(f"{format_region(region_id)} has too little room outside the band of "
                                     f"{_band_label(orientation, start, width)} and must place {share} more star(s) in it, "
                                     f"so {format_cells(candidates)} are stars."),
                    ))
    return applications


def apply_region_band_squeeze(state):
    board = state.board
    region_need = {rid: remaining_stars(state, cells) for rid, cells in board.region_map.items()}
    region_viable = {rid: viable_cells(state, cells) for rid, cells in board.region_map.items()}
    applications = []
    for axis, orientation in ((0, UNIT_ROW), (1, UNIT_COLUMN)):
        for index in range(board.size):
            line = line_cells(board, orientation, index)
            line_need = remaining_stars(state, line)
            if line_need <= 0:
                continue
            line_viable = viable_cells(state, line)
            for region_id, region in board.region_map.items():
                if region_need[region_id] <= 0:
                    continue
                region_set = set(region)
                shape = [cell for cell in line_viable if cell in region_set]
                if not shape:
                    continue
                forced = max(
                    line_need - (len(line_viable) - len(shape)),
                    region_need[region_id] - sum(1 for cell in region_viable[region_id] if cell[axis] != index),
                )
                if forced == len(shape):
                    applications.append(SchemaApplication(
                        schema_id='D3_regionBandSqueeze',
                        deductions=tuple((cell, CellMark.STAR) for cell in shape),
                        explanation=(f"Where {format_line(orientation, index)} crosses {format_region(region_id)} "
                                     f"one of them runs short of candidates elsewhere and needs {forced} star(s) there, "
                                     f"so {format_cells(shape)} are stars."),
                    ))
    return applications


def default_registry():
    registry = SchemaRegistry()
    for schema in (
        Schema('E1_candidateDeficit', 1, apply_candidate_deficit),
        Schema('A1_rowBand_regionBudget', 2, apply_row_band_budget),
        Schema('A2_colBand_regionBudget', 2, apply_col_band_budget),
        Schema('B1_exclusiveRegions_rowBand', 3, apply_exclusive_regions_row_band),
        Schema('B2_exclusiveRegions_colBand', 3, apply_exclusive_regions_col_band),
        Schema('B3_exclusiveRows_region', 3, apply_exclusive_rows_in_region),
        Schema('B4_exclusiveCols_region', 3, apply_exclusive_cols_in_region),
        Schema('D3_regionBandSqueeze', 3, apply_region_band_squeeze),
        Schema('C1_band_exactCages', 4, apply_band_exact_cages),
        Schema('C2_cages_regionQuota', 4, apply_cages_region_quota),
        Schema('C3_internalCagePlacement', 4, apply_internal_cage_placement),
        Schema('C4_cageExclusion', 4, apply_cage_exclusion),
        Schema('D1_rowColIntersection', 5, apply_row_col_intersection),
        Schema('D2_regionBandIntersection', 5, apply_region_band_intersection),
    ):
        registry.register(schema)
    return registry
