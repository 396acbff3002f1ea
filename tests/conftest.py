import pytest

from starbattle_hints.board import BoardDef, BoardState, CellMark, Coord
from starbattle_hints.deductions import HintIdGenerator
from starbattle_hints.search import Verifier
from starbattle_hints.techniques import TechniqueContext

# A 5x5 one-star puzzle with a unique solution.
REGIONS_5 = [
    [0, 0, 0, 2, 2],
    [0, 1, 1, 2, 2],
    [0, 3, 3, 3, 2],
    [3, 3, 4, 4, 2],
    [3, 4, 4, 4, 4],
]
SOLUTION_5 = [(0, 0), (1, 2), (2, 4), (3, 1), (4, 3)]

# A 10x10 two-star board of 2x5 rectangles, and one of its solutions.
REGIONS_10 = [[(r // 2) * 2 + (c // 5) for c in range(10)] for r in range(10)]
SOLUTION_10 = [
    (0, 0), (0, 5), (1, 2), (1, 7), (2, 4), (2, 9), (3, 1), (3, 6), (4, 3), (4, 8),
    (5, 0), (5, 5), (6, 2), (6, 7), (7, 4), (7, 9), (8, 1), (8, 6), (9, 3), (9, 8),
]


def fill(board, stars, rows=None):
    """A state with ``stars`` starred and every other cell crossed, limited to ``rows`` when given."""
    star_set = {Coord(*s) for s in stars}
    rows = range(board.size) if rows is None else rows
    state = BoardState.empty(board)
    for r in rows:
        for c in range(board.size):
            state.set_mark((r, c), CellMark.STAR if (r, c) in star_set else CellMark.CROSS)
    return state


@pytest.fixture
def board5():
    return BoardDef(size=5, stars_per_unit=1, regions=REGIONS_5)


@pytest.fixture
def board10():
    return BoardDef(size=10, stars_per_unit=2, regions=REGIONS_10)


@pytest.fixture
def solution5():
    return [Coord(*s) for s in SOLUTION_5]


@pytest.fixture
def solution10():
    return [Coord(*s) for s in SOLUTION_10]


@pytest.fixture
def ctx():
    return TechniqueContext(ids=HintIdGenerator())


@pytest.fixture
def verified_ctx():
    return TechniqueContext(ids=HintIdGenerator(), verifier=Verifier(timeout_ms=5000, max_depth=None))


@pytest.fixture
def scenario_a(board10):
    """Row 5: a star at (5,0) and crosses everywhere except (5,4) and (5,5)."""
    state = BoardState.empty(board10)
    state.set_mark((5, 0), CellMark.STAR)
    for c in range(1, 10):
        if c not in (4, 5):
            state.set_mark((5, c), CellMark.CROSS)
    return state


@pytest.fixture
def scenario_d(board10):
    """Row 0 has empties only at (0,0), (0,1) and (0,5)."""
    state = BoardState.empty(board10)
    for c in range(10):
        if c not in (0, 1, 5):
            state.set_mark((0, c), CellMark.CROSS)
    return state


@pytest.fixture
def filled():
    return fill


# A 5x5 one-star board with a T (region 0) sitting on an M (region 2).
REGIONS_SHAPES_5 = [
    [0, 0, 0, 1, 1],
    [2, 0, 2, 1, 1],
    [2, 2, 2, 3, 3],
    [4, 4, 4, 3, 3],
    [4, 4, 4, 3, 3],
]
SOLUTION_SHAPES_5 = [(0, 0), (1, 3), (2, 1), (3, 4), (4, 2)]

# A 5x5 one-star board whose regions 0 and 1 are touching L shapes.
REGIONS_KISSING_5 = [
    [0, 0, 0, 2, 2],
    [0, 1, 1, 2, 2],
    [0, 1, 3, 2, 2],
    [3, 3, 3, 4, 4],
    [3, 4, 4, 4, 4],
]
SOLUTION_KISSING_5 = [(0, 0), (1, 2), (2, 4), (3, 1), (4, 3)]

BLANK_10 = ".........."


@pytest.fixture
def shapes5():
    return BoardDef(size=5, stars_per_unit=1, regions=REGIONS_SHAPES_5)


@pytest.fixture
def kissing5():
    return BoardDef(size=5, stars_per_unit=1, regions=REGIONS_KISSING_5)


@pytest.fixture
def technique_states(board5, board10, shapes5, kissing5):
    """Named positions, each consistent with a known solution, used to make techniques fire."""
    def five(board, *rows):
        return BoardState.from_rows(board, rows)

    def ten(*rows):
        return BoardState.from_rows(board10, list(rows) + [BLANK_10] * (10 - len(rows)))

    return {
        'blank': BoardState.empty(board5),
        'star': five(board5, "*....", ".....", ".....", ".....", "....."),
        'narrowed': five(board5, ".....", ".x...", ".....", ".....", "....."),
        'row pair': five(board5, ".....", "xx..x", ".....", ".....", "....."),
        'row single': five(board5, ".....", "xx.xx", ".....", ".....", "....."),
        'band': five(board5, "*....", "...xx", ".....", ".....", "....."),
        'pinned': five(board5, "..x..", "xx.xx", "..x..", "..x..", "..x.."),
        'two stars': five(board5, "*....", ".....", "....*", ".....", "....."),
        'fish': five(board5, "..xxx", ".....", ".....", "..xxx", "....."),
        'm shape': five(shapes5, "*....", "..x..", "..x..", ".....", "....."),
        't shape': five(shapes5, "..x..", ".....", ".*...", ".....", "....."),
        'kissing': five(kissing5, ".....", ".....", ".x...", ".....", "....."),
        'rooks': ten("*....*....", "..*....*.."),
        'shared column': ten("*.xxx.....", "...xx.....", "xxx.*.....", "xx........"),
        'split row': ten("..xxx...xx"),
    }
