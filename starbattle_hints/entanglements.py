"""**********************************************************************************
 * Title: entanglements.py
 *
 * @author Isaiah Tadrous
 * @version 3.0.0
 * -------------------------------------------------------------------------------
 * Description:
 * Reads and evaluates precomputed entanglement rule tables. The tables come as
 * JSON documents of two shapes. Pair files list absolute initial star layouts
 * for a board size together with the cells every compatible solution leaves
 * empty (or fills). Triple files list canonical star groups, given relative to
 * each other, with a candidate cell that is forced empty whenever the group
 * appears on the board under any rotation, reflection and translation, and
 * optionally only when named features of the candidate hold. This module
 * parses both shapes into immutable rule objects, indexes them by board size
 * and quota, and maps them onto the stars of a board.
 **********************************************************************************"""

# --- IMPORTS ---
import itertools
import json
import logging
import os
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from starbattle_hints.board import Coord

# --- D4 SYMMETRY ---
TRANSFORMS = {
    'identity': lambda r, c: (r, c),
    'rotate90': lambda r, c: (c, -r),
    'rotate180': lambda r, c: (-r, -c),
    'rotate270': lambda r, c: (-c, r),
    'reflectH': lambda r, c: (r, -c),
    'reflectV': lambda r, c: (-r, c),
    'reflectD1': lambda r, c: (c, r),
    'reflectD2': lambda r, c: (-c, -r),
}


def transform_coord(coord, name):
    """Applies a D4 transformation to a relative coordinate."""
    return TRANSFORMS[name](coord[0], coord[1])


# --- RULE TYPES ---
@dataclass(frozen=True)
class PairPattern:
    initial_stars: Tuple[Coord, ...]
    compatible_solutions: int
    forced_empty: Tuple[Coord, ...] = ()
    forced_star: Tuple[Coord, ...] = ()


@dataclass(frozen=True)
class TripleRule:
    canonical_stars: Tuple[Tuple[int, int], ...]
    canonical_candidate: Tuple[int, int]
    constraint_features: Tuple[str, ...] = ()
    forced: bool = True
    occurrences: int = 0

    @property
    def rule_id(self):
        stars = ";".join(f"{r},{c}" for r, c in self.canonical_stars)
        cand = f"{self.canonical_candidate[0]},{self.canonical_candidate[1]}"
        features = "+".join(self.constraint_features)
        return f"[{stars}]->{cand}" + (f"|{features}" if features else "")


@dataclass(frozen=True)
class EntanglementSpec:
    id: str
    board_size: int
    initial_stars: int
    stars_per_unit: Optional[int] = None
    pair_patterns: Tuple[PairPattern, ...] = ()
    unconstrained_rules: Tuple[TripleRule, ...] = ()
    constrained_rules: Tuple[TripleRule, ...] = ()

    @property
    def has_pair_patterns(self):
        return bool(self.pair_patterns)

    @property
    def has_triple_rules(self):
        return bool(self.unconstrained_rules or self.constrained_rules)


# --- PARSING ---
def _coords(values):
    return tuple(Coord(int(r), int(c)) for r, c in values or ())


def _triple(raw):
    return TripleRule(
        canonical_stars=tuple((int(r), int(c)) for r, c in raw['canonical_stars']),
        canonical_candidate=(int(raw['canonical_candidate'][0]), int(raw['canonical_candidate'][1])),
        constraint_features=tuple(raw.get('constraint_features') or ()),
        forced=bool(raw.get('forced', True)),
        occurrences=int(raw.get('occurrences', 0)),
    )


def parse_document(spec_id, data) -> Optional[EntanglementSpec]:
    """
    Parses one JSON document into an EntanglementSpec.

    :param str spec_id: Name for the spec, usually the file stem.
    :param dict data: The decoded JSON.
    :returns: The spec, or None when the document has neither known shape.
    :rtype: EntanglementSpec | None
    """
    if not isinstance(data, dict):
        logging.warning(f"Entanglement document '{spec_id}' is not an object; skipped.")
        return None
    try:
        if isinstance(data.get('patterns'), list):
            patterns = tuple(
                PairPattern(
                    initial_stars=_coords(p['initial_stars']),
                    compatible_solutions=int(p.get('compatible_solutions', 0)),
                    forced_empty=_coords(p.get('forced_empty')),
                    forced_star=_coords(p.get('forced_star')),
                )
                for p in data['patterns']
            )
            return EntanglementSpec(
                id=spec_id, board_size=int(data['board_size']),
                initial_stars=int(data.get('initial_star_count', 0)),
                stars_per_unit=int(data['stars_per_row']) if 'stars_per_row' in data else None,
                pair_patterns=patterns,
            )
        if isinstance(data.get('unconstrained_rules'), list) and isinstance(data.get('constrained_rules'), list):
            return EntanglementSpec(
                id=spec_id, board_size=int(data['board_size']),
                initial_stars=int(data.get('initial_stars', 0)),
                unconstrained_rules=tuple(_triple(raw) for raw in data['unconstrained_rules']),
                constrained_rules=tuple(_triple(raw) for raw in data['constrained_rules']),
            )
    except (KeyError, TypeError, ValueError) as e:
        logging.error(f"Malformed entanglement document '{spec_id}': {e}")
        return None
    logging.warning(f"Entanglement document '{spec_id}' has no pair patterns or triple rules; skipped.")
    return None


class EntanglementRuleTable:
    """
    The rule tables available to entanglement-patterns, indexed by board size.

    :param specs: Parsed EntanglementSpec objects.
    """

    def __init__(self, specs: Iterable[EntanglementSpec] = ()):
        self.specs: List[EntanglementSpec] = list(specs)

    @classmethod
    def from_documents(cls, documents):
        """
        Builds a table from already decoded JSON.

        :param documents: A mapping of spec id to document, or an iterable of
                          (spec id, document) pairs.
        :rtype: EntanglementRuleTable
        """
        items = documents.items() if isinstance(documents, dict) else documents
        specs = [spec for spec in (parse_document(spec_id, data) for spec_id, data in items) if spec]
        return cls(specs)

    def rules_for(self, size, stars_per_unit) -> List[EntanglementSpec]:
        """Specs for this board size whose star quota, when they state one, matches."""
        return [
            spec for spec in self.specs
            if spec.board_size == size and (spec.stars_per_unit is None or spec.stars_per_unit == stars_per_unit)
        ]

    def __len__(self):
        return len(self.specs)


def load_rule_table(directory) -> EntanglementRuleTable:
    """
    Loads every ``*.json`` file in ``directory``. Files that cannot be read or
    parsed are logged and skipped.
    """
    documents = []
    if not os.path.isdir(directory):
        logging.warning(f"Entanglement directory not found: {directory}")
        return EntanglementRuleTable()
    for filename in sorted(os.listdir(directory)):
        if not filename.endswith('.json'):
            continue
        path = os.path.join(directory, filename)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                documents.append((os.path.splitext(filename)[0], json.load(f)))
        except (OSError, json.JSONDecodeError) as e:
            logging.error(f"Could not load entanglement file {path}: {e}")
    table = EntanglementRuleTable.from_documents(documents)
    logging.info(f"Loaded {len(table)} entanglement spec(s) from {directory}.")
    return table


# --- FEATURES ---
def _on_outer_ring(size, cell, stars):
    last = size - 1
    on_ring = cell.row in (1, last - 1) or cell.col in (1, last - 1)
    on_edge = cell.row in (0, last) or cell.col in (0, last)
    return on_ring and not on_edge


def _in_ring_1(size, cell, stars):
    return ((cell.row in (1, size - 2) and 1 <= cell.col < size - 1)
            or (cell.col in (1, size - 2) and 1 <= cell.row < size - 1))


def _same_row_as_star(size, cell, stars):
    return any(star.row == cell.row for star in stars)


def _same_col_as_star(size, cell, stars):
    return any(star.col == cell.col for star in stars)


FEATURES = {
    'candidate_on_outer_ring': _on_outer_ring,
    'candidate_in_ring_1': _in_ring_1,
    'candidate_in_same_row_as_any_star': _same_row_as_star,
    'candidate_in_same_col_as_any_star': _same_col_as_star,
}


def evaluate_feature(name, size, candidate, mapped_stars) -> bool:
    """Unknown feature names evaluate to False."""
    check = FEATURES.get(name)
    if check is None:
        logging.warning(f"Unknown entanglement constraint feature: {name}")
        return False
    return check(size, candidate, mapped_stars)


# --- MATCHING ---
def find_pattern_mappings(canonical_stars, actual_stars, size):
    """
    Every way the canonical star group lands on a subset of the actual stars.

    :returns: (transform name, (dr, dc) offset, mapped stars) triples.
    """
    mappings = []
    count = len(canonical_stars)
    if count == 0 or len(actual_stars) < count:
        return mappings
    actual_sorted = sorted(actual_stars)
    for name in TRANSFORMS:
        moved = sorted(transform_coord(coord, name) for coord in canonical_stars)
        for combo in itertools.combinations(actual_sorted, count):
            dr, dc = combo[0][0] - moved[0][0], combo[0][1] - moved[0][1]
            if all((r + dr, c + dc) == tuple(target) for (r, c), target in zip(moved, combo)):
                mappings.append((name, (dr, dc), [Coord(*cell) for cell in combo]))
    return mappings


def apply_triple_rule(rule, state, actual_stars) -> List[Coord]:
    """Empty cells the rule forces, over every placement of its star group."""
    if not rule.forced:
        return []
    size = state.size
    forced = []
    for name, (dr, dc), mapped in find_pattern_mappings(rule.canonical_stars, actual_stars, size):
        r, c = transform_coord(rule.canonical_candidate, name)
        candidate = Coord(r + dr, c + dc)
        if not state.board.in_bounds(*candidate) or not state.is_empty(candidate):
            continue
        if all(evaluate_feature(feature, size, candidate, mapped) for feature in rule.constraint_features):
            if candidate not in forced:
                forced.append(candidate)
    return forced


def board_symmetry(coord, name, size):
    """Maps a board position through one of the eight symmetries of the N x N square."""
    last = size - 1
    r, c = coord
    table = {
        'identity': (r, c),
        'rotate90': (c, last - r),
        'rotate180': (last - r, last - c),
        'rotate270': (last - c, r),
        'reflectH': (r, last - c),
        'reflectV': (last - r, c),
        'reflectD1': (c, r),
        'reflectD2': (last - c, last - r),
    }
    return Coord(*table[name])


def apply_pair_pattern(pattern, state, actual_stars) -> Tuple[List[Coord], List[Coord]]:
    """
    Forced crosses and stars from a pair pattern whose initial stars appear on
    the board under some symmetry of the square.

    :returns: (cells to cross, cells to star), both limited to empty cells.
    """
    if pattern.compatible_solutions <= 0 or not pattern.initial_stars:
        return [], []
    size = state.size
    present = set(actual_stars)
    crosses: Dict[Coord, None] = {}
    stars: Dict[Coord, None] = {}
    for name in TRANSFORMS:
        mapped = [board_symmetry(cell, name, size) for cell in pattern.initial_stars]
        if not all(cell in present for cell in mapped):
            continue
        for cell in pattern.forced_empty:
            target = board_symmetry(cell, name, size)
            if state.board.in_bounds(*target) and state.is_empty(target):
                crosses[target] = None
        for cell in pattern.forced_star:
            target = board_symmetry(cell, name, size)
            if state.board.in_bounds(*target) and state.is_empty(target):
                stars[target] = None
    return list(crosses), list(stars)
