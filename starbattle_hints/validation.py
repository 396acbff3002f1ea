"""**********************************************************************************
 * Title: validation.py
 *
 * @author Isaiah Tadrous
 * @version 3.0.0
 * -------------------------------------------------------------------------------
 * Description:
 * Rule checking for boards and hints. Region layouts are checked for shape and
 * for missing or out-of-range region ids; board states are checked for units
 * over quota and for touching stars. Every problem is reported
 * as a readable string rather than raised, so the same checks can serve the
 * verification solver, the techniques that test hypothetical assignments, and
 * the driver deciding whether the puzzle is finished.
 **********************************************************************************"""

# --- IMPORTS ---
from typing import List, Set

from starbattle_hints.board import (
    CellMark, Coord, format_col, format_row, neighbors8, region_letter,
)
from starbattle_hints.deductions import HintKind


# --- REGION LAYOUT ---
def validate_regions(board) -> List[str]:
    """
    Reports problems with a board's region layout.

    :param BoardDef board: The puzzle definition to check.
    :returns: Descriptive messages; an empty list means the layout is usable.
    :rtype: list[str]
    """
    issues = []
    size = board.size
    if len(board.regions) != size or any(len(row) != size for row in board.regions):
        issues.append(f"Region grid is not {size}x{size}.")
        return issues
    if board.stars_per_unit < 1:
        issues.append(f"Stars per unit must be at least 1 (got {board.stars_per_unit}).")

    seen = set()
    for r, row in enumerate(board.regions):
        for c, region_id in enumerate(row):
            if 0 <= region_id < size:
                seen.add(region_id)
            else:
                issues.append(
                    f"Cell ({r},{c}) has invalid region id {region_id}; "
                    f"expected 0-{size - 1} ({region_letter(0)}-{region_letter(size - 1)})."
                )
    for region_id in range(size):
        if region_id not in seen:
            issues.append(f"Region {region_letter(region_id)} does not appear anywhere on the board.")
    return issues


# --- STATE CHECKS ---
def _unit_star_counts(state):
    board = state.board
    rows = [0] * board.size
    cols = [0] * board.size
    regions = {}
    for r in range(board.size):
        for c in range(board.size):
            if state.cells[r][c] == CellMark.STAR:
                rows[r] += 1
                cols[c] += 1
                region_id = board.regions[r][c]
                regions[region_id] = regions.get(region_id, 0) + 1
    return rows, cols, regions


def validate_state(state) -> List[str]:
    """
    Lists every rule the current marks already break: rows, columns and regions
    over quota and pairs of touching stars (which covers overfull 2x2 blocks).

    :param BoardState state: The board to check.
    :returns: One message per violation.
    :rtype: list[str]
    """
    board = state.board
    quota = board.stars_per_unit
    messages = []
    rows, cols, regions = _unit_star_counts(state)
    for r, count in enumerate(rows):
        if count > quota:
            messages.append(f"{format_row(r)} has {count} stars (maximum is {quota}).")
    for c, count in enumerate(cols):
        if count > quota:
            messages.append(f"{format_col(c)} has {count} stars (maximum is {quota}).")
    for region_id, count in sorted(regions.items()):
        if count > quota:
            messages.append(f"Region {region_letter(region_id)} has {count} stars (maximum is {quota}).")

    for r in range(board.size):
        for c in range(board.size):
            if state.cells[r][c] != CellMark.STAR:
                continue
            for nr, nc in neighbors8((r, c), board.size):
                # report each pair once
                if (nr, nc) > (r, c) and state.cells[nr][nc] == CellMark.STAR:
                    messages.append(f"Two stars touch at ({r},{c}) and ({nr},{nc}).")
    return messages


def get_rule_violations(state) -> Set[Coord]:
    """
    The cells taking part in a violation, for highlighting: every star of an
    over-quota unit and both stars of every touching pair.
    """
    board = state.board
    quota = board.stars_per_unit
    rows, cols, regions = _unit_star_counts(state)
    bad = set()
    for r in range(board.size):
        for c in range(board.size):
            if state.cells[r][c] != CellMark.STAR:
                continue
            if rows[r] > quota or cols[c] > quota or regions[board.regions[r][c]] > quota:
                bad.add(Coord(r, c))
            for nb in neighbors8((r, c), board.size):
                if state.is_star(nb):
                    bad.add(Coord(r, c))
                    bad.add(nb)
    return bad


def is_puzzle_complete(state) -> bool:
    """True iff no cell is empty, every unit holds exactly K stars and no stars touch."""
    board = state.board
    quota = board.stars_per_unit
    if any(mark == CellMark.EMPTY for row in state.cells for mark in row):
        return False
    rows, cols, regions = _unit_star_counts(state)
    if any(count != quota for count in rows) or any(count != quota for count in cols):
        return False
    if any(regions.get(region_id, 0) != quota for region_id in board.region_ids):
        return False
    return not validate_state(state)


def is_hint_consistent(state, hint) -> bool:
    """
    Applies ``hint`` to a copy of ``state`` and checks that it neither
    overwrites a different mark nor creates a violation.
    """
    desired = CellMark.STAR if hint.kind == HintKind.PLACE_STAR else CellMark.CROSS
    candidate = state.clone()
    for cell in hint.result_cells:
        current = candidate.mark_of(cell)
        if current == desired:
            continue
        if current != CellMark.EMPTY:
            return False
        candidate.set_mark(cell, desired)
    return not validate_state(candidate)
