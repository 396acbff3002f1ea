"""**********************************************************************************
 * Title: search.py
 *
 * @author Isaiah Tadrous
 * @version 3.0.0
 * -------------------------------------------------------------------------------
 * Description:
 * The backtracking verification solver. It counts completions of a partially
 * marked board by depth-first search, always branching inside the unit with the
 * least slack (empty cells minus stars still owed) and trying a star before a
 * cross. Branches die as soon as a unit would go over quota, a star would touch
 * another, or a unit could no longer reach its quota. The search stops at the
 * requested solution count, at a wall-clock deadline or at a depth limit; the
 * last two leave the answer inconclusive, and the Verifier built on top of it
 * treats an inconclusive answer as "not proven", so a slow search can only ever
 * withhold a hint, never produce a wrong one.
 **********************************************************************************"""

# --- IMPORTS ---
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from starbattle_hints.board import CellMark, neighbors8
from starbattle_hints.constants import (
    DEFAULT_MAX_COUNT, DEFAULT_MAX_DEPTH, DEFAULT_TIMEOUT_MS,
)
from starbattle_hints.validation import validate_state

EMPTY, STAR, CROSS = int(CellMark.EMPTY), int(CellMark.STAR), int(CellMark.CROSS)
_DEAD = -1
_CLOCK_INTERVAL = 256  # nodes between deadline checks


class SearchOutcome(str, Enum):
    FOUND = 'found'
    EXHAUSTED = 'exhausted'
    TIMED_OUT = 'timed-out'
    DEPTH_LIMITED = 'depth-limited'


@dataclass(frozen=True)
class SearchResult:
    count: int
    timed_out: bool = False
    capped_at_max: bool = False
    depth_limited: bool = False

    @property
    def conclusive(self):
        return not (self.timed_out or self.depth_limited)

    @property
    def outcome(self):
        if self.timed_out:
            return SearchOutcome.TIMED_OUT
        if self.depth_limited:
            return SearchOutcome.DEPTH_LIMITED
        if self.capped_at_max:
            return SearchOutcome.FOUND
        return SearchOutcome.EXHAUSTED


class _Search:
    """One bounded search over a private copy of the grid."""

    def __init__(self, state, max_count, deadline, max_depth):
        board = state.board
        self.size = board.size
        self.quota = board.stars_per_unit
        self.max_count = max_count
        self.deadline = deadline
        self.max_depth = max_depth
        self.grid = [[int(mark) for mark in row] for row in state.cells]
        self.count = 0
        self.nodes = 0
        self.timed_out = False
        self.depth_limited = False

        size = self.size
        region_index = {region_id: i for i, region_id in enumerate(board.region_ids)}
        self.units = [[(r, c) for c in range(size)] for r in range(size)]
        self.units += [[(r, c) for r in range(size)] for c in range(size)]
        self.units += [list(cells) for cells in board.region_map.values()]
        self.cell_units = [
            [(r, size + c, 2 * size + region_index[board.regions[r][c]]) for c in range(size)]
            for r in range(size)
        ]
        self.stars = [sum(1 for r, c in cells if self.grid[r][c] == STAR) for cells in self.units]
        self.empties = [sum(1 for r, c in cells if self.grid[r][c] == EMPTY) for cells in self.units]

    # --- grid updates ---
    def _mark(self, r, c, value):
        self.grid[r][c] = value
        for u in self.cell_units[r][c]:
            self.empties[u] -= 1
            if value == STAR:
                self.stars[u] += 1

    def _unmark(self, r, c):
        value = self.grid[r][c]
        self.grid[r][c] = EMPTY
        for u in self.cell_units[r][c]:
            self.empties[u] += 1
            if value == STAR:
                self.stars[u] -= 1

    def _place_star(self, r, c):
        """Places a star and crosses its empty neighbours; returns the crossed cells."""
        self._mark(r, c, STAR)
        crossed = []
        for nr, nc in neighbors8((r, c), self.size):
            if self.grid[nr][nc] == EMPTY:
                self._mark(nr, nc, CROSS)
                crossed.append((nr, nc))
        return crossed

    def _remove_star(self, r, c, crossed):
        for nr, nc in crossed:
            self._unmark(nr, nc)
        self._unmark(r, c)

    def cross_neighbours_of_stars(self):
        for r in range(self.size):
            for c in range(self.size):
                if self.grid[r][c] != STAR:
                    continue
                for nr, nc in neighbors8((r, c), self.size):
                    if self.grid[nr][nc] == EMPTY:
                        self._mark(nr, nc, CROSS)

    # --- checks ---
    def _can_star(self, r, c):
        if any(self.stars[u] >= self.quota for u in self.cell_units[r][c]):
            return False
        return not any(self.grid[nr][nc] == STAR for nr, nc in neighbors8((r, c), self.size))

    def feasible(self):
        quota = self.quota
        for u in range(len(self.units)):
            if self.stars[u] > quota or self.stars[u] + self.empties[u] < quota:
                return False
        return True

    def _select_unit(self):
        """The unit with the least slack that still owes stars, None when all are full."""
        best, best_slack = None, None
        for u in range(len(self.units)):
            need = self.quota - self.stars[u]
            if need <= 0:
                continue
            slack = self.empties[u] - need
            if slack < 0:
                return _DEAD
            if best_slack is None or slack < best_slack:
                best, best_slack = u, slack
                if slack == 0:
                    break
        return best

    def _out_of_time(self):
        self.nodes += 1
        if self.deadline is not None and self.nodes % _CLOCK_INTERVAL == 0:
            if time.monotonic() > self.deadline:
                self.timed_out = True
        return self.timed_out

    def _stopped(self):
        return self.timed_out or self.count >= self.max_count

    # --- search ---
    def run(self, depth=0):
        if self._stopped() or self._out_of_time():
            return
        unit = self._select_unit()
        if unit == _DEAD:
            return
        if unit is None:
            self.count += 1
            return
        if self.max_depth is not None and depth >= self.max_depth:
            self.depth_limited = True
            return

        r, c = next((r, c) for r, c in self.units[unit] if self.grid[r][c] == EMPTY)
        if self._can_star(r, c):
            crossed = self._place_star(r, c)
            if self.feasible():
                self.run(depth + 1)
            self._remove_star(r, c, crossed)
            if self._stopped():
                return

        self._mark(r, c, CROSS)
        if self.feasible():
            self.run(depth + 1)
        self._unmark(r, c)


def count_solutions(state, max_count: int = DEFAULT_MAX_COUNT,
                    timeout_ms: Optional[float] = DEFAULT_TIMEOUT_MS,
                    max_depth: Optional[int] = None) -> SearchResult:
    """
    Counts valid completions of ``state`` up to ``max_count``.

    The state itself is never modified. An input that already breaks a rule has
    no completions. When the deadline or the depth limit cuts the search short
    the returned count is only a lower bound and ``conclusive`` is False.

    :param BoardState state: The board to complete.
    :param int max_count: Stop once this many completions are found.
    :param timeout_ms: Wall-clock budget in milliseconds, or None for no limit.
    :param max_depth: Maximum number of branching decisions, or None for no limit.
    :returns: The count and the flags describing how the search ended.
    :rtype: SearchResult
    """
    if validate_state(state):
        return SearchResult(count=0)
    deadline = None if timeout_ms is None else time.monotonic() + timeout_ms / 1000.0
    search = _Search(state, max_count, deadline, max_depth)
    search.cross_neighbours_of_stars()
    if search.feasible():
        search.run()

    result = SearchResult(
        count=search.count,
        timed_out=search.timed_out,
        capped_at_max=search.count >= max_count,
        depth_limited=search.depth_limited and search.count < max_count,
    )
    if result.timed_out:
        logging.warning(f"Solution count timed out after {timeout_ms} ms ({search.nodes} nodes, {search.count} found).")
    elif result.depth_limited:
        logging.warning(f"Solution count hit the depth limit of {max_depth} ({search.count} found).")
    else:
        logging.debug(f"Solution count finished: {result.outcome.value}, {search.count} found in {search.nodes} nodes.")
    return result


class Verifier:
    """
    The bounded solution counter techniques use to certify forced cells.

    The orchestrator owns the budget: every technique holding a Verifier checks
    its claims against the same timeout and depth limit.

    :param timeout_ms: Wall-clock budget per check, or None for no limit.
    :param max_depth: Decision depth per check, or None for no limit.
    :param int max_count: Default solution cap for :meth:`count_solutions`.
    """

    def __init__(self, timeout_ms=DEFAULT_TIMEOUT_MS, max_depth=DEFAULT_MAX_DEPTH, max_count=1):
        self.timeout_ms = timeout_ms
        self.max_depth = max_depth
        self.max_count = max_count

    def count_solutions(self, state, max_count=None) -> SearchResult:
        if max_count is None:
            max_count = self.max_count
        return count_solutions(state, max_count=max_count, timeout_ms=self.timeout_ms, max_depth=self.max_depth)

    def has_no_solution(self, state) -> bool:
        """True only when the search finished and found nothing."""
        result = self.count_solutions(state, max_count=1)
        return result.conclusive and result.count == 0

    def is_forced(self, state, cell, mark) -> bool:
        """
        Certifies that ``cell`` must take ``mark`` by showing the opposite mark
        admits no completion. Any inconclusive search returns False.

        :param BoardState state: The current board.
        :param Coord cell: The cell the hint would mark.
        :param CellMark mark: The mark the hint proposes.
        :returns: True when the opposite assignment is proven impossible.
        :rtype: bool
        """
        current = state.mark_of(cell)
        if current == mark:
            return True
        if current != CellMark.EMPTY:
            return False
        opposite = CellMark.CROSS if mark == CellMark.STAR else CellMark.STAR
        hypothesis = state.clone()
        hypothesis.set_mark(cell, opposite)
        return self.has_no_solution(hypothesis)

    def are_forced(self, state, cells, mark) -> bool:
        return all(self.is_forced(state, cell, mark) for cell in cells)
