"""**********************************************************************************
 * Title: z3_solver.py
 *
 * @author Isaiah Tadrous
 * @version 3.0.0
 * -------------------------------------------------------------------------------
 * Description:
 * An independent solution counter built on the z3 SMT solver. The puzzle is
 * encoded as one boolean per cell with pseudo-boolean equalities for the row,
 * column and region quotas and an implication per cell forbidding touching
 * stars; existing stars and crosses become unit constraints. Solutions are
 * enumerated by adding a blocking clause after each model. Z3Verifier exposes
 * the same interface as the backtracking Verifier so either can be handed to
 * the hint engine, and the test suite uses it as the oracle for soundness.
 **********************************************************************************"""

# --- IMPORTS ---
import logging
import time
from collections import defaultdict

from z3 import And, Bool, Implies, Not, Or, PbEq, Solver, sat, unknown

from starbattle_hints.board import CellMark, neighbors8
from starbattle_hints.constants import DEFAULT_TIMEOUT_MS
from starbattle_hints.search import SearchResult, Verifier
from starbattle_hints.validation import validate_state


def format_duration(seconds):
    if seconds >= 60:
        return f"{int(seconds // 60)} min {seconds % 60:.2f} s"
    if seconds >= 1:
        return f"{seconds:.3f} s"
    return f"{seconds * 1000:.2f} ms"


class Z3StarBattleSolver:
    """
    Counts completions of a board with z3.

    :param BoardDef board: The puzzle definition.
    """

    def __init__(self, board):
        self.board = board
        self.dim = board.size

    def _build(self, state, timeout_ms):
        s = Solver()
        if timeout_ms is not None:
            s.set("timeout", int(timeout_ms))
        grid_vars = [[Bool(f"c_{r}_{c}") for c in range(self.dim)] for r in range(self.dim)]
        quota = self.board.stars_per_unit
        # Rule: K stars per row and column
        for i in range(self.dim):
            s.add(PbEq([(grid_vars[i][c], 1) for c in range(self.dim)], quota))
            s.add(PbEq([(grid_vars[r][i], 1) for r in range(self.dim)], quota))
        # Rule: K stars per region
        regions = defaultdict(list)
        for r in range(self.dim):
            for c in range(self.dim):
                regions[self.board.regions[r][c]].append(grid_vars[r][c])
        for region_vars in regions.values():
            s.add(PbEq([(var, 1) for var in region_vars], quota))
        # Rule: stars cannot touch
        for r in range(self.dim):
            for c in range(self.dim):
                neighbours = [Not(grid_vars[nr][nc]) for nr, nc in neighbors8((r, c), self.dim)]
                if neighbours:
                    s.add(Implies(grid_vars[r][c], And(neighbours)))
        # Marks already on the board
        if state is not None:
            for r in range(self.dim):
                for c in range(self.dim):
                    mark = state.cells[r][c]
                    if mark == CellMark.STAR:
                        s.add(grid_vars[r][c])
                    elif mark == CellMark.CROSS:
                        s.add(Not(grid_vars[r][c]))
        return s, grid_vars

    def solve(self, state=None, max_solutions=2, timeout_ms=None):
        """
        Enumerates up to ``max_solutions`` completions.

        :param state: A BoardState whose marks are honoured, or None for a blank board.
        :param int max_solutions: Stop after this many.
        :param timeout_ms: z3 budget per check in milliseconds, or None.
        :returns: (solutions as 0/1 grids, timed_out flag)
        :rtype: tuple[list, bool]
        """
        s, grid_vars = self._build(state, timeout_ms)
        solutions, timed_out, start_time = [], False, time.monotonic()
        while len(solutions) < max_solutions:
            verdict = s.check()
            if verdict == unknown:
                timed_out = True
                break
            if verdict != sat:
                break
            model = s.model()
            solution = [[1 if model.evaluate(grid_vars[r][c], model_completion=True) else 0
                         for c in range(self.dim)] for r in range(self.dim)]
            solutions.append(solution)
            # Block this solution and check for another
            s.add(Or([Not(v) if solution[r][c] else v for r, row in enumerate(grid_vars) for c, v in enumerate(row)]))
        logging.debug(f"Z3 found {len(solutions)} solution(s) in {format_duration(time.monotonic() - start_time)}")
        return solutions, timed_out


class Z3Verifier(Verifier):
    """A Verifier whose counts come from z3 instead of the backtracking search."""

    def __init__(self, timeout_ms=DEFAULT_TIMEOUT_MS, max_count=1):
        super().__init__(timeout_ms=timeout_ms, max_depth=None, max_count=max_count)

    def count_solutions(self, state, max_count=None) -> SearchResult:
        if max_count is None:
            max_count = self.max_count
        if validate_state(state):
            return SearchResult(count=0)
        solutions, timed_out = Z3StarBattleSolver(state.board).solve(state, max_count, self.timeout_ms)
        if timed_out:
            logging.warning(f"Z3 timed out after {self.timeout_ms} ms ({len(solutions)} found).")
        return SearchResult(count=len(solutions), timed_out=timed_out, capped_at_max=len(solutions) >= max_count)
