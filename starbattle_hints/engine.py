"""**********************************************************************************
 * Title: engine.py
 *
 * @author Isaiah Tadrous
 * @version 3.0.0
 * -------------------------------------------------------------------------------
 * Description:
 * The hint driver. HintEngine walks the technique catalog in priority order
 * and returns the first hint any technique produces; when none does, it hands
 * the deductions gathered along the way to the combiner. solve() applies hints
 * one after another until the board is complete or nothing more can be
 * deduced, keeping a per-technique usage log and scoring the solve the way
 * the logical solver always has: points per technique tier plus a one-time
 * break-in bonus for the first use of a hard tier.
 **********************************************************************************"""

# --- IMPORTS ---
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from starbattle_hints.combiner import analyze_deductions
from starbattle_hints.constants import BREAK_IN_BONUS, TECH_COMBINED, TECHNIQUE_SCORES
from starbattle_hints.deductions import Hint, HintIdGenerator, TechniqueResult
from starbattle_hints.search import Verifier
from starbattle_hints.techniques import TECHNIQUES_IN_ORDER, TechniqueContext, technique_by_id
from starbattle_hints.validation import is_puzzle_complete, validate_state


@dataclass
class SolveReport:
    state: object
    hints: List[Hint] = field(default_factory=list)
    technique_log: Dict[str, int] = field(default_factory=dict)
    solved: bool = False
    difficulty_score: int = 0


def calculate_difficulty(technique_log, tiers):
    """
    Scores a solve from its technique usage.

    :param dict technique_log: Technique id -> number of hints it produced.
    :param dict tiers: Technique id -> tier.
    :returns: The difficulty score.
    :rtype: int
    """
    score, bonus_applied = 0, set()
    for tech, count in sorted(technique_log.items()):
        tier = tiers.get(tech, 0)
        score += TECHNIQUE_SCORES.get(tier, 0) * count
        if tier in BREAK_IN_BONUS and tier not in bonus_applied:
            score += BREAK_IN_BONUS[tier]
            bonus_applied.add(tier)
    return score


class HintEngine:
    """
    Finds hints for a board.

    :param verifier: A Verifier-like object; defaults to a fresh Verifier.
    :param enabled: Technique ids to run, in catalog order. Defaults to every
                    technique enabled by default.
    :param entanglement_table: Optional EntanglementRuleTable.
    :param schemas: Optional SchemaRegistry; None uses the built-in registry.
    :param ids: Optional HintIdGenerator shared with the caller.
    :raises ValueError: If ``enabled`` names an unknown technique.
    """

    def __init__(self, verifier=None, enabled=None, entanglement_table=None, schemas=None, ids=None):
        if enabled is None:
            self.techniques = [t for t in TECHNIQUES_IN_ORDER if t.enabled_by_default]
        else:
            unknown = [tech_id for tech_id in enabled if technique_by_id(tech_id) is None]
            if unknown:
                raise ValueError(f"Unknown technique id(s): {', '.join(unknown)}")
            wanted = set(enabled)
            self.techniques = [t for t in TECHNIQUES_IN_ORDER if t.id in wanted]
        self.ctx = TechniqueContext(
            ids=ids if ids is not None else HintIdGenerator(),
            verifier=verifier if verifier is not None else Verifier(),
            entanglement_table=entanglement_table,
            schemas=schemas,
        )
        self.tiers = {t.id: t.tier for t in TECHNIQUES_IN_ORDER}
        self.tiers[TECH_COMBINED] = 3

    def find_next_hint(self, state) -> Optional[Hint]:
        """The first hint in priority order, else a combined one, else None."""
        if validate_state(state):
            logging.warning("Board breaks the rules; no hints offered.")
            return None
        collected = []
        for technique in self.techniques:
            result = technique.find(state, self.ctx)
            if result.kind == TechniqueResult.HINT:
                logging.info(f"Applying Tier {technique.tier} technique: '{technique.id}' -> {result.hint.id}")
                return result.hint
            if result.kind == TechniqueResult.DEDUCTIONS:
                logging.debug(f"{technique.id} contributed {len(result.deductions)} deduction(s).")
                collected.extend(result.deductions)
        if collected:
            return analyze_deductions(collected, state, self.ctx.ids)
        return None

    @staticmethod
    def apply_hint(state, hint):
        return state.with_marks(hint.result_cells, hint.kind.mark)

    def solve(self, state, max_steps=1000) -> SolveReport:
        technique_log = defaultdict(int)
        hints = []
        for _ in range(max_steps):
            if is_puzzle_complete(state):
                break
            hint = self.find_next_hint(state)
            if hint is None:
                logging.info("No more logical deductions can be made.")
                break
            hints.append(hint)
            technique_log[hint.technique] += 1
            state = self.apply_hint(state, hint)
        solved = is_puzzle_complete(state)
        score = calculate_difficulty(technique_log, self.tiers)
        logging.info(f"Solver finished: solved={solved}, hints={len(hints)}, difficulty={score}")
        return SolveReport(state=state, hints=hints, technique_log=dict(technique_log),
                           solved=solved, difficulty_score=score)


def format_report(report, tiers=None):
    """Lines describing a finished solve, in the logical solver's layout."""
    tiers = tiers or {t.id: t.tier for t in TECHNIQUES_IN_ORDER}
    lines = [
        "--- Solver Results ---",
        f"Puzzle Solved: {report.solved}",
        f"Final Difficulty Score: {report.difficulty_score}",
    ]
    if not report.technique_log:
        lines.append("Technique Log: (No techniques were applied)")
        return lines
    lines.append("Technique Breakdown:")
    for tech, count in sorted(report.technique_log.items()):
        tier = tiers.get(tech, 3)
        points = TECHNIQUE_SCORES.get(tier, 0)
        lines.append(f"  - {tech:<22} (Tier {tier}): {count:>3} uses x {points:>3} pts = {count * points:>5}")
    return lines
