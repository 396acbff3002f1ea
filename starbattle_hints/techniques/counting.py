"""**********************************************************************************
 * Title: counting.py
 *
 * @author Isaiah Tadrous
 * @version 3.0.0
 * -------------------------------------------------------------------------------
 * Description:
 * Counting techniques. Each one builds a composite shape out of rows, columns
 * and regions, works out how many stars the shape must hold (from the quotas
 * of the units around it) and how many it can hold, and acts when the two
 * bounds pin the shape down. Group counting extends the argument to whole sets
 * of lines: X regions living entirely inside X lines use up every star those
 * lines have, and X lines served by only X regions use up every star those
 * regions have.
 **********************************************************************************"""

# --- IMPORTS ---
import itertools
from typing import NamedTuple, Tuple

from starbattle_hints.board import (
    UNIT_COLUMN, UNIT_REGION, UNIT_ROW, CellMark, Coord, all_units, count_stars,
    empty_cells, format_cells, format_line, format_regions, line_cells, neighbors8,
    non_cross_cells, remaining_stars,
)
from starbattle_hints.bounds import (
    Area, combined_area, is_valid_star_placement, min_stars, unit_area, viable_cells,
)
from starbattle_hints.constants import (
    MAX_COUNTING_GROUP, MAX_UNION_SIZE, TECH_COMPOSITE_SHAPES, TECH_FINNED_COUNTS,
    TECH_OVERCOUNTING, TECH_SQUARE_COUNTING, TECH_SQUEEZE, TECH_UNDERCOUNTING,
)
from starbattle_hints.deductions import BlockDeduction, ExclusiveSetDeduction, HintKind, TechniqueResult
from starbattle_hints.techniques.common import confirmed, make_hint


class Shape(NamedTuple):
    cells: Tuple[Coord, ...]
    areas: Tuple[Area, ...]
    label: str
    rows: Tuple[int, ...] = ()
    cols: Tuple[int, ...] = ()
    regions: Tuple[int, ...] = ()


# --- SHAPE BUILDERS ---
def _lines(board):
    return [unit for unit in all_units(board) if unit.kind != UNIT_REGION]


def _regions(board):
    return [unit for unit in all_units(board) if unit.kind == UNIT_REGION]


def _line_extra(lines):
    rows = tuple(line.index for line in lines if line.kind == UNIT_ROW)
    cols = tuple(line.index for line in lines if line.kind == UNIT_COLUMN)
    return rows, cols


def _line_region_shapes(state, union_sizes):
    """Line ∩ (union of regions) for every union size in ``union_sizes``."""
    board, quota = state.board, state.stars_per_unit
    regions = _regions(board)
    for line in _lines(board):
        line_set = set(line.cells)
        touching = [g for g in regions if empty_cells(state, [c for c in g.cells if c in line_set])]
        for size in union_sizes:
            for combo in itertools.combinations(touching, size):
                ids = {g.index for g in combo}
                cells = tuple(c for c in line.cells if board.region_of(c) in ids)
                label = f"{line.label} ∩ {format_regions(sorted(ids))}"
                areas = (unit_area(line, quota), combined_area(combo, quota, format_regions(sorted(ids))))
                rows, cols = _line_extra([line])
                yield Shape(cells, areas, label, rows, cols, tuple(sorted(ids)))


def _region_lines_shapes(state, union_sizes):
    """Region ∩ (union of parallel lines) for every union size in ``union_sizes``."""
    board, quota = state.board, state.stars_per_unit
    lines = _lines(board)
    for region in _regions(board):
        region_set = set(region.cells)
        for orientation in (UNIT_ROW, UNIT_COLUMN):
            touching = [
                line for line in lines
                if line.kind == orientation and empty_cells(state, [c for c in line.cells if c in region_set])
            ]
            for size in union_sizes:
                for combo in itertools.combinations(touching, size):
                    cells = tuple(c for line in combo for c in line.cells if c in region_set)
                    names = ", ".join(line.label for line in combo)
                    areas = (unit_area(region, quota), combined_area(combo, quota, names))
                    rows, cols = _line_extra(combo)
                    yield Shape(cells, areas, f"{region.label} ∩ ({names})", rows, cols, (region.index,))


def _line_groups(size):
    """Contiguous bands of every width plus small non-contiguous groups, each once."""
    seen = set()
    for width in range(1, size):
        for start in range(size - width + 1):
            group = tuple(range(start, start + width))
            seen.add(group)
            yield group
    for width in range(2, MAX_COUNTING_GROUP + 1):
        for group in itertools.combinations(range(size), width):
            if group not in seen:
                yield group


def _shape_hint(state, ctx, technique, shape, verify_stars):
    """Undercount then overcount one shape. Returns (hint, deduction)."""
    existing = count_stars(state, shape.cells)
    lower = min_stars(state, shape.cells, shape.areas)
    candidates = viable_cells(state, shape.cells)
    forced = lower - existing
    extra = {'rows': shape.rows, 'cols': shape.cols, 'regions': shape.regions, 'highlight_cells': shape.cells}
    if forced > 0 and forced == len(candidates):
        stars = candidates
        if verify_stars or len(stars) == 1:
            stars = confirmed(state, ctx, stars, CellMark.STAR, required=True)
        if len(stars) == len(candidates):
            explanation = (f"{shape.label} must hold at least {lower} star(s) and only {forced} more cell(s) can take one, "
                           f"so {format_cells(stars)} are stars.")
            return make_hint(state, ctx, technique, HintKind.PLACE_STAR, stars, explanation, **extra), None
    deduction = None
    if 0 < forced < len(candidates):
        deduction = ExclusiveSetDeduction(
            cells=shape.cells, stars_required=lower, technique=technique,
            explanation=f"{shape.label} must hold at least {lower} star(s).",
        )

    empties = empty_cells(state, shape.cells)
    if not empties:
        return None, deduction
    shape_set = set(shape.cells)
    upper = None
    for area in shape.areas:
        rest = [c for c in area.cells if c not in shape_set]
        if rest:
            bound = area.quota - min_stars(state, rest)
            upper = bound if upper is None else min(upper, bound)
    if upper is not None and upper <= existing:
        explanation = (f"{shape.label} can hold at most {upper} star(s) once the rest of its units are counted, "
                       f"and it already has {existing}; {format_cells(empties)} are crosses.")
        return make_hint(state, ctx, technique, HintKind.PLACE_CROSS, empties, explanation, **extra), deduction
    return None, deduction


# --- TECHNIQUES ---
def _group_counting(state, ctx, technique, under):
    """
    Works over groups of parallel lines. With ``under`` set, X regions lying
    inside X lines clear the lines' other cells; otherwise X lines covered by X
    regions clear those regions' cells outside the lines.
    """
    board = state.board
    size = board.size
    for orientation, axis in ((UNIT_ROW, 0), (UNIT_COLUMN, 1)):
        region_spans = {
            region_id: {cell[axis] for cell in non_cross_cells(state, cells)}
            for region_id, cells in board.region_map.items()
        }
        line_regions = [
            {board.region_of(cell) for cell in non_cross_cells(state, line_cells(board, orientation, i))}
            for i in range(size)
        ]
        for group in _line_groups(size):
            group_set = set(group)
            names = ", ".join(format_line(orientation, i) for i in group)
            extra = {'rows': group} if orientation == UNIT_ROW else {'cols': group}
            if under:
                inside = [region_id for region_id, span in region_spans.items() if span and span <= group_set]
                if len(inside) != len(group):
                    continue
                inside_set = set(inside)
                targets = [
                    cell for i in group for cell in empty_cells(state, line_cells(board, orientation, i))
                    if board.region_of(cell) not in inside_set
                ]
                explanation = (f"{format_regions(inside)} lie entirely within {names}. They supply all "
                               f"{len(group) * state.stars_per_unit} stars those lines need, so {format_cells(targets)} are crosses.")
                regions = inside
            else:
                covering = set().union(*(line_regions[i] for i in group))
                if len(covering) != len(group):
                    continue
                targets = [
                    cell for region_id in sorted(covering) for cell in empty_cells(state, board.region_map[region_id])
                    if cell[axis] not in group_set
                ]
                explanation = (f"Every cell that can still hold a star in {names} belongs to {format_regions(sorted(covering))}. "
                               f"Those lines need all of the regions' stars, so {format_cells(targets)} are crosses.")
                regions = sorted(covering)
            if not targets:
                continue
            hint = make_hint(state, ctx, technique, HintKind.PLACE_CROSS, targets, explanation, regions=regions, **extra)
            if hint:
                return hint
    return None


def find_undercounting_hint(state, ctx):
    hint = _group_counting(state, ctx, TECH_UNDERCOUNTING, under=True)
    if hint:
        return TechniqueResult.of_hint(hint)
    deductions = []
    union_sizes = range(1, MAX_UNION_SIZE + 1)
    shapes = itertools.chain(
        _line_region_shapes(state, union_sizes),
        _region_lines_shapes(state, range(2, MAX_UNION_SIZE + 1)),
    )
    for shape in shapes:
        existing = count_stars(state, shape.cells)
        lower = min_stars(state, shape.cells, shape.areas)
        candidates = viable_cells(state, shape.cells)
        forced = lower - existing
        if forced <= 0:
            continue
        if forced == len(candidates):
            stars = candidates
            if len(candidates) == 1:
                stars = confirmed(state, ctx, candidates, CellMark.STAR, required=True)
            if not stars:
                continue
            explanation = (f"Undercounting: {shape.label} must hold at least {lower} star(s), and only "
                           f"{format_cells(stars)} can still take one, so they are stars.")
            hint = make_hint(state, ctx, TECH_UNDERCOUNTING, HintKind.PLACE_STAR, stars, explanation,
                             rows=shape.rows, cols=shape.cols, regions=shape.regions, highlight_cells=shape.cells)
            if hint:
                return TechniqueResult.of_hint(hint)
        elif forced < len(candidates):
            deductions.append(ExclusiveSetDeduction(
                cells=shape.cells, stars_required=lower, technique=TECH_UNDERCOUNTING,
                explanation=f"{shape.label} must hold at least {lower} star(s).",
            ))
    return TechniqueResult.of_deductions(deductions)


def find_overcounting_hint(state, ctx):
    hint = _group_counting(state, ctx, TECH_OVERCOUNTING, under=False)
    if hint:
        return TechniqueResult.of_hint(hint)
    quota = state.stars_per_unit
    for shape in _line_region_shapes(state, (1,)):
        empties = empty_cells(state, shape.cells)
        if not empties:
            continue
        existing = count_stars(state, shape.cells)
        shape_set = set(shape.cells)
        line_rest = [c for c in shape.areas[0].cells if c not in shape_set]
        region_rest = [c for c in shape.areas[1].cells if c not in shape_set]
        upper = min(quota - min_stars(state, line_rest), quota - min_stars(state, region_rest))
        if upper > existing:
            continue
        explanation = (f"Overcounting: the rest of the line and the rest of the region force enough stars elsewhere that "
                       f"{shape.label} can hold at most {upper} star(s). It already has {existing}, "
                       f"so {format_cells(empties)} are crosses.")
        hint = make_hint(state, ctx, TECH_OVERCOUNTING, HintKind.PLACE_CROSS, empties, explanation,
                         rows=shape.rows, cols=shape.cols, regions=shape.regions, highlight_cells=shape.cells)
        if hint:
            return TechniqueResult.of_hint(hint)
    return TechniqueResult.none()


def find_composite_shapes_hint(state, ctx):
    """A line against a union of three regions, counted from both sides; star claims are verified."""
    deductions = []
    for shape in _line_region_shapes(state, (min(3, state.size),)):
        hint, deduction = _shape_hint(state, ctx, TECH_COMPOSITE_SHAPES, shape, verify_stars=True)
        if hint:
            return TechniqueResult.of_hint(hint)
        if deduction:
            deductions.append(deduction)
    return TechniqueResult.of_deductions(deductions)


def find_squeeze_hint(state, ctx):
    """
    A line and a region squeeze their shared cells: when the valid placements
    they have outside the intersection leave exactly as many stars as the
    intersection has valid placements, all of those are stars. A single unit
    whose valid placements equal its remaining quota is the degenerate case.
    """
    board = state.board
    for unit in all_units(board):
        need = remaining_stars(state, unit.cells)
        candidates = viable_cells(state, unit.cells)
        if need > 0 and len(candidates) == need and len(candidates) < len(empty_cells(state, unit.cells)):
            explanation = (f"Squeeze: {unit.label} needs {need} star(s) and only {format_cells(candidates)} can still "
                           f"take one, so they are stars.")
            hint = make_hint(state, ctx, TECH_SQUEEZE, HintKind.PLACE_STAR, candidates, explanation,
                             highlight_cells=unit.cells)
            if hint:
                return TechniqueResult.of_hint(hint)

    for shape in _line_region_shapes(state, (1,)):
        shape_set = set(shape.cells)
        inside = viable_cells(state, shape.cells)
        if not inside:
            continue
        forced = 0
        for area in shape.areas:
            outside = viable_cells(state, [c for c in area.cells if c not in shape_set])
            forced = max(forced, remaining_stars(state, area.cells, area.quota) - len(outside))
        if forced <= 0 or forced != len(inside):
            continue
        explanation = (f"Squeeze: outside {shape.label} there are too few valid cells for the line or the region, "
                       f"so {forced} star(s) must go in {format_cells(inside)}.")
        hint = make_hint(state, ctx, TECH_SQUEEZE, HintKind.PLACE_STAR, inside, explanation,
                         rows=shape.rows, cols=shape.cols, regions=shape.regions, highlight_cells=shape.cells)
        if hint:
            return TechniqueResult.of_hint(hint)
    return TechniqueResult.none()


def _band_tiles(size, start, orientation):
    """Disjoint 2x2 tiles across a band of two lines, with a 2x1 tile at the end of odd boards."""
    tiles = []
    for offset in range(0, size, 2):
        span = [offset] if offset + 1 >= size else [offset, offset + 1]
        if orientation == UNIT_ROW:
            tiles.append([Coord(r, c) for r in (start, start + 1) for c in span])
        else:
            tiles.append([Coord(r, c) for c in (start, start + 1) for r in span])
    return tiles


def find_square_counting_hint(state, ctx):
    """
    Two adjacent lines hold 2K stars, and each tile of a 2x2 tiling of the band
    holds at most one. When exactly 2K tiles can still hold a star, each of
    them holds exactly one.
    """
    size, quota = state.size, state.stars_per_unit
    deductions = []
    for orientation in (UNIT_ROW, UNIT_COLUMN):
        for start in range(size - 1):
            tiles = _band_tiles(size, start, orientation)
            live = [
                tile for tile in tiles
                if count_stars(state, tile) > 0 or viable_cells(state, tile)
            ]
            if len(live) != 2 * quota:
                continue
            band = f"{format_line(orientation, start)} and {format_line(orientation, start + 1)}"
            singles = []
            for tile in live:
                if count_stars(state, tile):
                    continue
                options = viable_cells(state, tile)
                if len(options) == 1:
                    singles.append(options[0])
                if len(tile) == 4:
                    deductions.append(BlockDeduction(
                        top_left=min(tile), technique=TECH_SQUARE_COUNTING,
                        explanation=f"{band} need {2 * quota} stars from exactly {2 * quota} usable 2x2 tiles, so the tile at {min(tile)} holds one.",
                    ))
            if singles:
                explanation = (f"{band} need {2 * quota} stars and only {2 * quota} of their 2x2 tiles can hold one, "
                               f"so each such tile holds exactly one star. {format_cells(singles)} are the only "
                               f"possible cells in their tiles.")
                extra = {'rows': (start, start + 1)} if orientation == UNIT_ROW else {'cols': (start, start + 1)}
                hint = make_hint(state, ctx, TECH_SQUARE_COUNTING, HintKind.PLACE_STAR, singles, explanation,
                                 highlight_cells=[cell for tile in live for cell in tile], **extra)
                if hint:
                    return TechniqueResult.of_hint(hint)
    return TechniqueResult.of_deductions(deductions)


def find_finned_counts_hint(state, ctx):
    """
    A counting shape that would be filled except for one extra "fin" cell. In
    one case the fin is a star, in the other the rest of the shape is; cells
    crossed in both cases are crosses. Every claim is verified.
    """
    if ctx.verifier is None:
        return TechniqueResult.none()
    shapes = itertools.chain(
        _line_region_shapes(state, (1, 2)),
        _region_lines_shapes(state, (2,)),
    )
    for shape in shapes:
        candidates = viable_cells(state, shape.cells)
        forced = min_stars(state, shape.cells, shape.areas) - count_stars(state, shape.cells)
        if forced < 1 or forced != len(candidates) - 1:
            continue
        candidate_set = set(candidates)
        for fin in candidates:
            body = [cell for cell in candidates if cell != fin]
            if any(nb in candidate_set for cell in body for nb in neighbors8(cell, state.size) if nb in body):
                continue
            body_cross = {nb for cell in body for nb in neighbors8(cell, state.size)}
            fin_cross = set(neighbors8(fin, state.size))
            both = sorted(
                cell for cell in body_cross & fin_cross
                if cell not in candidate_set and state.is_empty(cell) and is_valid_star_placement(state, cell)
            )
            crosses = confirmed(state, ctx, both, CellMark.CROSS, required=True)
            if not crosses:
                continue
            explanation = (f"Finned counts: {shape.label} needs {forced} more star(s) in {format_cells(candidates)}. "
                           f"Either the fin {fin} is a star or {format_cells(body)} all are; both cases rule out "
                           f"{format_cells(crosses)}.")
            hint = make_hint(state, ctx, TECH_FINNED_COUNTS, HintKind.PLACE_CROSS, crosses, explanation,
                             rows=shape.rows, cols=shape.cols, regions=shape.regions,
                             highlight_cells=list(shape.cells) + crosses)
            if hint:
                return TechniqueResult.of_hint(hint)
    return TechniqueResult.none()
