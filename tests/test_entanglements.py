import json

from starbattle_hints.board import BoardState, CellMark, Coord
from starbattle_hints.deductions import HintKind, TechniqueResult
from starbattle_hints.entanglements import (
    EntanglementRuleTable, PairPattern, TripleRule, apply_pair_pattern, apply_triple_rule,
    board_symmetry, evaluate_feature, find_pattern_mappings, load_rule_table, parse_document,
)
from starbattle_hints.techniques import TechniqueContext
from starbattle_hints.techniques.patterns import find_entanglement_patterns_hint

PAIR_DOC = {
    'board_size': 5,
    'stars_per_row': 1,
    'initial_star_count': 1,
    'patterns': [
        {'initial_stars': [[0, 0]], 'compatible_solutions': 3, 'forced_empty': [[4, 4]]},
    ],
}

TRIPLE_DOC = {
    'board_size': 10,
    'initial_stars': 2,
    'unconstrained_rules': [
        {'canonical_stars': [[0, 0], [0, 2]], 'canonical_candidate': [1, 1], 'forced': True, 'occurrences': 12},
    ],
    'constrained_rules': [],
}


def test_parse_pair_document():
    spec = parse_document('pairs', PAIR_DOC)
    assert spec.has_pair_patterns and not spec.has_triple_rules
    assert spec.stars_per_unit == 1
    assert spec.pair_patterns[0].forced_empty == (Coord(4, 4),)


def test_parse_triple_document():
    spec = parse_document('triples', TRIPLE_DOC)
    assert spec.has_triple_rules and not spec.has_pair_patterns
    rule = spec.unconstrained_rules[0]
    assert rule.canonical_stars == ((0, 0), (0, 2))
    assert rule.rule_id == "[0,0;0,2]->1,1"


def test_unknown_or_malformed_documents_are_skipped():
    assert parse_document('list', [1, 2]) is None
    assert parse_document('empty', {'board_size': 5}) is None
    assert parse_document('broken', {'patterns': [{'initial_stars': [[0, 0]]}]}) is None


def test_rules_for_filters_by_size_and_quota():
    table = EntanglementRuleTable.from_documents({'pairs': PAIR_DOC, 'triples': TRIPLE_DOC})
    assert len(table) == 2
    assert [spec.id for spec in table.rules_for(10, 2)] == ['triples']
    assert [spec.id for spec in table.rules_for(5, 1)] == ['pairs']
    assert table.rules_for(5, 2) == []


def test_load_rule_table(tmp_path):
    (tmp_path / 'pairs.json').write_text(json.dumps(PAIR_DOC))
    (tmp_path / 'bad.json').write_text("{not json")
    (tmp_path / 'notes.txt').write_text("ignored")
    table = load_rule_table(str(tmp_path))
    assert [spec.id for spec in table.specs] == ['pairs']
    assert len(load_rule_table(str(tmp_path / 'missing'))) == 0


def test_feature_evaluation():
    stars = [Coord(3, 3), Coord(5, 3)]
    assert evaluate_feature('candidate_in_same_col_as_any_star', 10, Coord(4, 3), stars)
    assert not evaluate_feature('candidate_in_same_row_as_any_star', 10, Coord(4, 2), stars)
    assert evaluate_feature('candidate_in_ring_1', 10, Coord(1, 5), stars)
    assert not evaluate_feature('candidate_in_ring_1', 10, Coord(0, 5), stars)
    assert not evaluate_feature('no_such_feature', 10, Coord(4, 2), stars)


def test_pattern_mappings_cover_rotations_and_translation():
    mappings = find_pattern_mappings([(0, 0), (0, 2)], [Coord(3, 3), Coord(5, 3)], 10)
    names = {name for name, _, _ in mappings}
    assert names == {'rotate90', 'rotate270', 'reflectD1', 'reflectD2'}
    assert find_pattern_mappings([(0, 0), (0, 2)], [Coord(3, 3)], 10) == []


def test_apply_triple_rule(board10):
    state = BoardState.empty(board10).with_marks([(3, 3), (5, 3)], CellMark.STAR)
    rule = TripleRule(canonical_stars=((0, 0), (0, 2)), canonical_candidate=(1, 1))
    assert apply_triple_rule(rule, state, state.stars()) == [(4, 2), (4, 4)]
    constrained = TripleRule(canonical_stars=((0, 0), (0, 2)), canonical_candidate=(1, 1),
                             constraint_features=('candidate_in_same_row_as_any_star',))
    assert apply_triple_rule(constrained, state, state.stars()) == []
    unforced = TripleRule(canonical_stars=((0, 0), (0, 2)), canonical_candidate=(1, 1), forced=False)
    assert apply_triple_rule(unforced, state, state.stars()) == []


def test_board_symmetry():
    assert board_symmetry((0, 0), 'rotate90', 5) == (0, 4)
    assert board_symmetry((1, 2), 'reflectD2', 5) == (2, 3)


def test_apply_pair_pattern(board5):
    state = BoardState.empty(board5).with_marks([(0, 4)], CellMark.STAR)
    pattern = PairPattern(initial_stars=(Coord(0, 0),), compatible_solutions=3, forced_empty=(Coord(4, 4),))
    assert apply_pair_pattern(pattern, state, state.stars()) == ([(4, 0)], [])
    empty = PairPattern(initial_stars=(Coord(0, 0),), compatible_solutions=0, forced_empty=(Coord(4, 4),))
    assert apply_pair_pattern(empty, state, state.stars()) == ([], [])


def test_entanglement_technique_needs_a_table(board10):
    state = BoardState.empty(board10).with_marks([(3, 3), (5, 3)], CellMark.STAR)
    result = find_entanglement_patterns_hint(state, TechniqueContext())
    assert result.kind == TechniqueResult.NONE


def test_entanglement_technique_with_verified_rule(board10, verified_ctx):
    state = BoardState.empty(board10).with_marks([(3, 3), (5, 3)], CellMark.STAR)
    verified_ctx.entanglement_table = EntanglementRuleTable.from_documents({'triples': TRIPLE_DOC})
    hint = find_entanglement_patterns_hint(state, verified_ctx).hint
    assert hint.kind == HintKind.PLACE_CROSS
    assert hint.result_cells == ((4, 2), (4, 4))
    assert "seen in 12 solutions" in hint.explanation


def test_entanglement_claims_the_verifier_rejects_are_dropped(board10, verified_ctx):
    state = BoardState.empty(board10).with_marks([(3, 3), (5, 3)], CellMark.STAR)
    wrong = dict(TRIPLE_DOC, unconstrained_rules=[
        {'canonical_stars': [[0, 0], [0, 2]], 'canonical_candidate': [1, 6]},
    ])
    verified_ctx.entanglement_table = EntanglementRuleTable.from_documents({'wrong': wrong})
    assert find_entanglement_patterns_hint(state, verified_ctx).kind == TechniqueResult.NONE
