"""Logical hint engine for Star Battle puzzles."""

from starbattle_hints.board import BoardDef, BoardState, CellMark, Coord
from starbattle_hints.deductions import Hint, HintIdGenerator, HintKind, TechniqueResult
from starbattle_hints.engine import HintEngine, SolveReport
from starbattle_hints.search import SearchResult, Verifier, count_solutions

__version__ = "3.0.0"
