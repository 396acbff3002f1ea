"""**********************************************************************************
 * Title: patterns.py
 *
 * @author Isaiah Tadrous
 * @version 3.0.0
 * -------------------------------------------------------------------------------
 * Description:
 * Techniques driven by precomputed knowledge rather than a local argument.
 * entanglement-patterns maps the rule tables from entanglements.py onto the
 * stars already placed; schema-based runs the schema registry. Both hand their
 * claims to the verifier when one is present before building a hint.
 **********************************************************************************"""

# --- IMPORTS ---
import logging

from starbattle_hints.board import CellMark, format_cells
from starbattle_hints.constants import TECH_ENTANGLEMENT_PATTERNS, TECH_SCHEMA_BASED
from starbattle_hints.deductions import HintKind, TechniqueResult
from starbattle_hints.entanglements import apply_pair_pattern, apply_triple_rule
from starbattle_hints.schemas import default_registry
from starbattle_hints.techniques.common import confirmed, make_hint, mark_kind


def _triple_hint(state, ctx, spec, stars):
    for group in (spec.unconstrained_rules, spec.constrained_rules):
        for rule in group:
            forced = apply_triple_rule(rule, state, stars)
            forced = confirmed(state, ctx, forced, CellMark.CROSS)
            if not forced:
                continue
            seen = f" (seen in {rule.occurrences} solutions)" if rule.occurrences else ""
            explanation = (f"Entanglement: the stars on the board match pattern {rule.rule_id} from "
                           f"{spec.id}{seen}, which leaves {format_cells(forced)} empty in every solution.")
            hint = make_hint(state, ctx, TECH_ENTANGLEMENT_PATTERNS, HintKind.PLACE_CROSS, forced, explanation,
                             highlight_cells=list(stars) + list(forced))
            if hint:
                return hint
    return None


def _pair_hint(state, ctx, spec, stars):
    for pattern in spec.pair_patterns:
        crosses, forced_stars = apply_pair_pattern(pattern, state, stars)
        for mark, cells in ((CellMark.CROSS, crosses), (CellMark.STAR, forced_stars)):
            cells = confirmed(state, ctx, cells, mark)
            if not cells:
                continue
            verb = "empty" if mark == CellMark.CROSS else "starred"
            explanation = (f"Entanglement: the stars at {format_cells(pattern.initial_stars)} of {spec.id} appear "
                           f"on this board; all {pattern.compatible_solutions} compatible solutions leave "
                           f"{format_cells(cells)} {verb}.")
            hint = make_hint(state, ctx, TECH_ENTANGLEMENT_PATTERNS, mark_kind(mark), cells, explanation,
                             highlight_cells=list(stars) + list(cells))
            if hint:
                return hint
    return None


def find_entanglement_patterns_hint(state, ctx):
    """
    Maps every rule table that fits the board onto its stars. Triple rules are
    tried before pair patterns, unconstrained before constrained.
    """
    table = ctx.entanglement_table
    if table is None:
        return TechniqueResult.none()
    stars = state.stars()
    if not stars:
        return TechniqueResult.none()
    for spec in table.rules_for(state.size, state.stars_per_unit):
        hint = _triple_hint(state, ctx, spec, stars) if spec.has_triple_rules else None
        if hint is None and spec.has_pair_patterns:
            hint = _pair_hint(state, ctx, spec, stars)
        if hint:
            return TechniqueResult.of_hint(hint)
    return TechniqueResult.none()


def find_schema_based_hint(state, ctx):
    registry = ctx.schemas if ctx.schemas is not None else default_registry()
    for application in registry.apply_all(state):
        for mark in (CellMark.STAR, CellMark.CROSS):
            cells = [cell for cell, m in application.deductions if m == mark and state.is_empty(cell)]
            cells = confirmed(state, ctx, cells, mark)
            if not cells:
                continue
            hint = make_hint(state, ctx, TECH_SCHEMA_BASED, mark_kind(mark), cells,
                             f"Schema {application.schema_id}: {application.explanation}")
            if hint:
                return TechniqueResult.of_hint(hint)
            logging.debug(f"Schema {application.schema_id} proposal {format_cells(cells)} suppressed.")
    return TechniqueResult.none()
