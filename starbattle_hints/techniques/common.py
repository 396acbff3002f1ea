"""**********************************************************************************
 * Title: common.py
 *
 * @author Isaiah Tadrous
 * @version 3.0.0
 * -------------------------------------------------------------------------------
 * Description:
 * Shared plumbing for the technique modules: the per-call context object that
 * carries the hint id generator, the injected verifier and the optional rule
 * tables, and the helpers that turn a proposed set of cells into a checked
 * Hint. Every technique hands its proposal to make_hint, which drops cells that
 * are already filled, runs the joint star-placement check for star hints,
 * re-validates the result against the board and only then draws an id.
 **********************************************************************************"""

# --- IMPORTS ---
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from starbattle_hints.board import CellMark, format_cells, unique_cells
from starbattle_hints.bounds import can_place_all_stars_simultaneously
from starbattle_hints.deductions import Highlights, Hint, HintIdGenerator, HintKind, TechniqueResult
from starbattle_hints.validation import is_hint_consistent


@dataclass
class TechniqueContext:
    """
    Everything a technique may use besides the board.

    :param HintIdGenerator ids: Source of hint ids for this session.
    :param verifier: A Verifier (or Z3Verifier), or None to skip verification.
    :param entanglement_table: An EntanglementRuleTable for entanglement-patterns.
    :param schemas: A SchemaRegistry for schema-based; None means the built-in one.
    """
    ids: HintIdGenerator = field(default_factory=HintIdGenerator)
    verifier: Any = None
    entanglement_table: Any = None
    schemas: Any = None


@dataclass(frozen=True)
class Technique:
    id: str
    name: str
    find: Callable
    tier: int = 1
    enabled_by_default: bool = True


def make_hint(state, ctx, technique, kind, cells, explanation,
              rows=(), cols=(), regions=(), highlight_cells=None, deductions=None) -> Optional[Hint]:
    """
    Builds a hint from a proposal, or returns None when the proposal does not
    survive the checks every hint must pass.

    :param BoardState state: The board the hint applies to.
    :param TechniqueContext ctx: Supplies the id.
    :param str technique: The technique id.
    :param HintKind kind: Star or cross.
    :param cells: Proposed cells; cells already filled are dropped.
    :param str explanation: Human-readable reasoning.
    :returns: The hint or None.
    :rtype: Hint | None
    """
    targets = tuple(sorted(cell for cell in unique_cells(cells) if state.is_empty(cell)))
    if not targets:
        return None
    if kind == HintKind.PLACE_STAR and can_place_all_stars_simultaneously(state, targets) is None:
        logging.debug(f"{technique}: stars at {format_cells(targets)} cannot coexist; suppressed.")
        return None
    highlights = Highlights(
        rows=tuple(sorted(set(rows))),
        cols=tuple(sorted(set(cols))),
        regions=tuple(sorted(set(regions))),
        cells=tuple(unique_cells(highlight_cells)) if highlight_cells is not None else targets,
    )
    draft = Hint(id='', kind=kind, technique=technique, result_cells=targets,
                 explanation=explanation, highlights=highlights,
                 deductions=tuple(deductions) if deductions else None)
    if not is_hint_consistent(state, draft):
        logging.debug(f"{technique}: proposal {format_cells(targets)} conflicts with the board; suppressed.")
        return None
    return Hint(id=ctx.ids.next_id(technique), kind=kind, technique=technique, result_cells=targets,
                explanation=explanation, highlights=highlights, deductions=draft.deductions)


def hint_result(state, ctx, technique, kind, cells, explanation, **extra) -> TechniqueResult:
    hint = make_hint(state, ctx, technique, kind, cells, explanation, **extra)
    return TechniqueResult.of_hint(hint) if hint else TechniqueResult.none()


def confirmed(state, ctx, cells, mark, required=False):
    """
    The subset of ``cells`` the verifier proves must take ``mark``.

    Without a verifier the cells pass through unchanged, unless ``required`` is
    set, in which case nothing passes.
    """
    cells = unique_cells(cells)
    if ctx.verifier is None:
        return [] if required else cells
    proven = [cell for cell in cells if ctx.verifier.is_forced(state, cell, mark)]
    if len(proven) < len(cells):
        dropped = [cell for cell in cells if cell not in proven]
        logging.debug(f"Verifier could not confirm {CellMark(mark).name.lower()} at {format_cells(dropped)}.")
    return proven


def mark_kind(mark):
    return HintKind.PLACE_STAR if mark == CellMark.STAR else HintKind.PLACE_CROSS
