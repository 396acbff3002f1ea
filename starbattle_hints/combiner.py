"""**********************************************************************************
 * Title: combiner.py
 *
 * @author Isaiah Tadrous
 * @version 3.0.0
 * -------------------------------------------------------------------------------
 * Description:
 * Turns the deduction lists collected from techniques that found no hint of
 * their own into a single hint. The strategies are tried in a fixed order:
 * plain cell agreement, exact or capped area counts, one-star 2x2 blocks, and
 * finally exclusive sets and area relations whose empty candidates exactly
 * match what they still owe. Every combined hint goes through the same
 * consistency check as technique hints before it is returned.
 **********************************************************************************"""

# --- IMPORTS ---
import logging
from typing import Optional

from starbattle_hints.board import CellMark, count_stars, empty_cells, format_cells
from starbattle_hints.bounds import can_place_all_stars_simultaneously, is_valid_star_placement
from starbattle_hints.constants import TECH_COMBINED
from starbattle_hints.deductions import (
    Highlights, Hint, HintKind, extract_cell_deductions, filter_valid_deductions,
    merge_deductions,
)
from starbattle_hints.validation import is_hint_consistent


def _build(state, ids, kind, cells, explanation, sources) -> Optional[Hint]:
    cells = tuple(sorted(set(cells)))
    if not cells:
        return None
    if kind == HintKind.PLACE_STAR and can_place_all_stars_simultaneously(state, cells) is None:
        return None
    hint = Hint(
        id='', kind=kind, technique=TECH_COMBINED, result_cells=cells, explanation=explanation,
        highlights=Highlights(cells=cells), deductions=tuple(sources),
    )
    if not is_hint_consistent(state, hint):
        logging.debug(f"Combined proposal for {format_cells(cells)} is inconsistent with the board; dropped.")
        return None
    return Hint(
        id=ids.next_id(TECH_COMBINED), kind=kind, technique=TECH_COMBINED, result_cells=cells,
        explanation=explanation, highlights=hint.highlights, deductions=hint.deductions,
    )


def _has_cell_conflict(deductions):
    marks = {}
    for ded in extract_cell_deductions(deductions):
        if marks.setdefault(ded.cell, ded.mark) != ded.mark:
            logging.debug(f"Techniques disagree about {ded.cell}; no combined hint.")
            return True
    return False


def _from_cells(state, deductions, ids):
    cell_deds = extract_cell_deductions(deductions)
    marks = {ded.cell: ded.mark for ded in cell_deds}
    for mark, kind in ((CellMark.STAR, HintKind.PLACE_STAR), (CellMark.CROSS, HintKind.PLACE_CROSS)):
        cells = [cell for cell, m in marks.items() if m == mark]
        if not cells:
            continue
        sources = [ded for ded in cell_deds if ded.mark == mark]
        techniques = sorted({ded.technique for ded in sources})
        word = 'stars' if mark == CellMark.STAR else 'crosses'
        explanation = f"Earlier deductions ({', '.join(techniques)}) show {format_cells(sorted(cells))} must be {word}."
        hint = _build(state, ids, kind, cells, explanation, sources)
        if hint:
            return hint
    return None


def _from_areas(state, deductions, ids):
    for ded in deductions:
        if ded.kind != 'area':
            continue
        empties = empty_cells(state, ded.candidate_cells)
        present = count_stars(state, ded.candidate_cells)
        if ded.stars_required is not None:
            owed = ded.stars_required - present
            if owed == 0:
                explanation = f"The candidate cells of {ded.area_kind} {ded.area_id} already hold their {ded.stars_required} star(s), so the rest are crosses."
                hint = _build(state, ids, HintKind.PLACE_CROSS, empties, explanation, [ded])
            elif owed == len(empties):
                explanation = f"The candidate cells of {ded.area_kind} {ded.area_id} must hold {owed} more star(s) and only {owed} remain, so they are all stars."
                hint = _build(state, ids, HintKind.PLACE_STAR, empties, explanation, [ded])
            else:
                hint = None
        elif ded.max_stars <= present:
            explanation = f"The candidate cells of {ded.area_kind} {ded.area_id} can hold at most {ded.max_stars} star(s), which are already placed."
            hint = _build(state, ids, HintKind.PLACE_CROSS, empties, explanation, [ded])
        else:
            hint = None
        if hint:
            return hint
    return None


def _from_blocks(state, deductions, ids):
    for ded in deductions:
        if ded.kind != 'block' or count_stars(state, ded.cells) >= ded.stars_required:
            continue
        valid = [cell for cell in ded.cells if is_valid_star_placement(state, cell)]
        if len(valid) == 1 and ded.stars_required == 1:
            explanation = f"The 2x2 block at {ded.top_left} must hold a star and {valid[0]} is the only cell in it that can."
            hint = _build(state, ids, HintKind.PLACE_STAR, valid, explanation, [ded])
            if hint:
                return hint
    return None


def _from_sets(state, deductions, ids):
    for ded in deductions:
        if ded.kind == 'exclusive-set':
            cells, required = ded.cells, ded.stars_required
        elif ded.kind == 'area-relation':
            cells, required = ded.candidate_cells, ded.total_stars
        else:
            continue
        owed = required - count_stars(state, cells)
        valid = [cell for cell in cells if is_valid_star_placement(state, cell)]
        if owed > 0 and len(valid) == owed:
            explanation = f"{format_cells(cells)} must hold {required} star(s) and only {format_cells(valid)} can still take one."
            hint = _build(state, ids, HintKind.PLACE_STAR, valid, explanation, [ded])
            if hint:
                return hint
    return None


def analyze_deductions(deductions, state, ids) -> Optional[Hint]:
    """
    Combines deductions from several techniques into one hint.

    :param deductions: Deductions gathered this round, in technique order.
    :param BoardState state: The current board.
    :param HintIdGenerator ids: Source of the hint id.
    :returns: The combined hint, or None when nothing can be concluded.
    :rtype: Hint | None
    """
    live = filter_valid_deductions(deductions, state)
    if not live:
        return None
    if _has_cell_conflict(live):
        return None
    hint = _from_cells(state, live, ids)
    if hint:
        logging.info(f"Combined {len(live)} deduction(s) into hint {hint.id}.")
        return hint
    merged = merge_deductions([], live)
    for strategy in (_from_areas, _from_blocks, _from_sets):
        hint = strategy(state, merged, ids)
        if hint:
            logging.info(f"Combined {len(live)} deduction(s) into hint {hint.id}.")
            return hint
    return None
