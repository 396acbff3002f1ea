from starbattle_hints.board import BoardState, CellMark
from starbattle_hints.search import SearchOutcome, SearchResult, Verifier, count_solutions


def test_unique_puzzle_has_one_solution(board5):
    result = count_solutions(BoardState.empty(board5), max_count=2, timeout_ms=None)
    assert result.count == 1
    assert result.conclusive
    assert not result.capped_at_max
    assert result.outcome == SearchOutcome.EXHAUSTED


def test_complete_board_counts_itself(board10, solution10, filled):
    result = count_solutions(filled(board10, solution10), timeout_ms=None)
    assert result.count == 1 and result.conclusive


def test_partial_board_counts_every_completion(board10, solution10, filled):
    state = filled(board10, solution10, rows=range(2, 10))
    result = count_solutions(state, max_count=5, timeout_ms=None)
    assert result.count == 3
    assert result.outcome == SearchOutcome.EXHAUSTED


def test_search_stops_at_max_count(board10, solution10, filled):
    state = filled(board10, solution10, rows=range(2, 10))
    result = count_solutions(state, max_count=2, timeout_ms=None)
    assert result.count == 2
    assert result.capped_at_max
    assert result.outcome == SearchOutcome.FOUND


def test_invalid_input_has_no_solution(board5):
    state = BoardState.empty(board5).with_marks([(0, 0), (1, 1)], CellMark.STAR)
    result = count_solutions(state)
    assert result.count == 0 and result.conclusive


def test_depth_limit_is_inconclusive(board5):
    result = count_solutions(BoardState.empty(board5), max_count=1, timeout_ms=None, max_depth=1)
    assert result.depth_limited
    assert not result.conclusive
    assert result.outcome == SearchOutcome.DEPTH_LIMITED


def test_search_does_not_touch_input(board5):
    state = BoardState.empty(board5)
    before = state.clone()
    count_solutions(state)
    assert state == before


def test_scenario_d_cross_leaves_no_solution(scenario_d):
    hypothesis = scenario_d.with_marks([(0, 5)], CellMark.CROSS)
    result = count_solutions(hypothesis, max_count=1)
    assert result.count == 0
    assert result.conclusive


def test_verifier_is_forced(scenario_d):
    verifier = Verifier()
    assert verifier.is_forced(scenario_d, (0, 5), CellMark.STAR)
    assert not verifier.is_forced(scenario_d, (0, 5), CellMark.CROSS)
    assert verifier.is_forced(scenario_d, (0, 2), CellMark.CROSS)
    assert not verifier.is_forced(scenario_d, (0, 2), CellMark.STAR)


def test_verifier_on_unique_puzzle(board5, solution5):
    verifier = Verifier(max_depth=None)
    state = BoardState.empty(board5)
    assert verifier.are_forced(state, solution5, CellMark.STAR)
    assert verifier.is_forced(state, (0, 1), CellMark.CROSS)
    assert not verifier.is_forced(state, (0, 1), CellMark.STAR)


class _TimingOutVerifier(Verifier):
    def count_solutions(self, state, max_count=None):
        return SearchResult(count=0, timed_out=True)


class _DepthLimitedVerifier(Verifier):
    def count_solutions(self, state, max_count=None):
        return SearchResult(count=0, depth_limited=True)


def test_inconclusive_search_never_proves_anything(board5):
    state = BoardState.empty(board5)
    for verifier in (_TimingOutVerifier(), _DepthLimitedVerifier()):
        assert not verifier.is_forced(state, (0, 0), CellMark.STAR)
        assert not verifier.has_no_solution(state)
