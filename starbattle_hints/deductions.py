"""**********************************************************************************
 * Title: deductions.py
 *
 * @author Isaiah Tadrous
 * @version 3.0.0
 * -------------------------------------------------------------------------------
 * Description:
 * The value objects exchanged between techniques and the driver. A technique
 * either returns a ready-to-apply Hint, a list of weaker Deductions that a
 * combiner may intersect with the output of other techniques, or nothing. All
 * of these objects are immutable. The module also provides the hint id
 * generator that callers pass into techniques, and the helpers that filter,
 * merge and unpack deduction lists.
 **********************************************************************************"""

# --- IMPORTS ---
import itertools
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from starbattle_hints.board import CellMark, Coord, block_cells, count_stars, empty_cells


# --- HINTS ---
class HintKind(str, Enum):
    PLACE_STAR = 'place-star'
    PLACE_CROSS = 'place-cross'

    @property
    def mark(self):
        return CellMark.STAR if self is HintKind.PLACE_STAR else CellMark.CROSS


@dataclass(frozen=True)
class Highlights:
    """Rows, columns, regions and cells a UI may emphasise alongside a hint."""
    rows: Tuple[int, ...] = ()
    cols: Tuple[int, ...] = ()
    regions: Tuple[int, ...] = ()
    cells: Tuple[Coord, ...] = ()


@dataclass(frozen=True)
class Hint:
    id: str
    kind: HintKind
    technique: str
    result_cells: Tuple[Coord, ...]
    explanation: str
    highlights: Highlights = field(default_factory=Highlights)
    deductions: Optional[Tuple] = None


class HintIdGenerator:
    """
    Hands out hint ids of the form ``<technique>-<n>``. One generator is owned
    by the caller and passed to every technique call, so ids stay unique within
    a session and repeatable across sessions.
    """

    def __init__(self, start=1):
        self._counter = itertools.count(start)

    def next_id(self, technique):
        return f"{technique}-{next(self._counter)}"


# --- DEDUCTIONS ---
@dataclass(frozen=True)
class CellDeduction:
    """One cell forced to a star or a cross."""
    cell: Coord
    mark: CellMark
    technique: str
    explanation: str = ''
    kind = 'cell'


@dataclass(frozen=True)
class AreaDeduction:
    """
    A bound on the stars a unit places among ``candidate_cells``. Exactly one
    of ``stars_required`` (the candidates hold exactly that many stars, counting
    any already placed) or ``max_stars`` is set.
    """
    area_kind: str
    area_id: int
    candidate_cells: Tuple[Coord, ...]
    technique: str
    explanation: str = ''
    stars_required: Optional[int] = None
    max_stars: Optional[int] = None
    kind = 'area'

    def __post_init__(self):
        if (self.stars_required is None) == (self.max_stars is None):
            raise ValueError("AreaDeduction needs exactly one of stars_required or max_stars.")


@dataclass(frozen=True)
class AreaRelationDeduction:
    """The candidate cells of several areas jointly hold at least ``total_stars`` stars."""
    areas: Tuple[Tuple[str, int], ...]
    candidate_cells: Tuple[Coord, ...]
    total_stars: int
    technique: str
    explanation: str = ''
    kind = 'area-relation'


@dataclass(frozen=True)
class ExclusiveSetDeduction:
    """An unordered cell set holding at least ``stars_required`` stars collectively."""
    cells: Tuple[Coord, ...]
    stars_required: int
    technique: str
    explanation: str = ''
    kind = 'exclusive-set'


@dataclass(frozen=True)
class BlockDeduction:
    """The 2x2 block anchored at ``top_left`` holds exactly ``stars_required`` stars."""
    top_left: Coord
    technique: str
    explanation: str = ''
    stars_required: int = 1
    kind = 'block'

    @property
    def cells(self):
        return block_cells(self.top_left)


# --- TECHNIQUE RESULT ---
class TechniqueResult:
    """What every technique returns: a hint, a list of deductions, or nothing."""
    HINT = 'hint'
    DEDUCTIONS = 'deductions'
    NONE = 'none'

    __slots__ = ('kind', 'hint', 'deductions')

    def __init__(self, kind, hint=None, deductions=()):
        self.kind = kind
        self.hint = hint
        self.deductions = tuple(deductions)

    @classmethod
    def of_hint(cls, hint, deductions=()):
        return cls(cls.HINT, hint, deductions)

    @classmethod
    def of_deductions(cls, deductions):
        deductions = tuple(deductions)
        if not deductions:
            return cls.none()
        return cls(cls.DEDUCTIONS, None, deductions)

    @classmethod
    def none(cls):
        return cls(cls.NONE)

    def __bool__(self):
        return self.kind != self.NONE

    def __repr__(self):
        if self.kind == self.HINT:
            return f"TechniqueResult(hint={self.hint.id!r})"
        if self.kind == self.DEDUCTIONS:
            return f"TechniqueResult(deductions={len(self.deductions)})"
        return "TechniqueResult(none)"


# --- DEDUCTION UTILITIES ---
def filter_valid_deductions(deductions, state):
    """
    Drops deductions the current state has already settled or contradicts:
    cell deductions on filled cells, and set deductions with no empty cell
    left or whose requirement is already met.
    """
    valid = []
    for ded in deductions:
        if ded.kind == 'cell':
            if state.mark_of(ded.cell) != CellMark.EMPTY:
                continue
        elif ded.kind == 'block':
            cells = ded.cells
            if not empty_cells(state, cells) or count_stars(state, cells) == ded.stars_required:
                continue
        elif ded.kind == 'area':
            if not empty_cells(state, ded.candidate_cells):
                continue
            if ded.stars_required is not None and count_stars(state, ded.candidate_cells) == ded.stars_required:
                continue
        elif ded.kind == 'exclusive-set':
            if not empty_cells(state, ded.cells) or count_stars(state, ded.cells) >= ded.stars_required:
                continue
        elif ded.kind == 'area-relation':
            if not empty_cells(state, ded.candidate_cells):
                continue
        valid.append(ded)
    return valid


def _deduction_key(ded):
    if ded.kind == 'cell':
        return ('cell', ded.cell)
    if ded.kind == 'block':
        return ('block', ded.top_left)
    if ded.kind == 'area':
        return ('area', ded.area_kind, ded.area_id, frozenset(ded.candidate_cells))
    if ded.kind == 'exclusive-set':
        return ('exclusive-set', frozenset(ded.cells))
    return None


def _resolve_conflict(existing, new):
    """The more specific of two deductions about the same target, or None when they contradict."""
    if existing == new:
        return existing
    if existing.kind == 'cell':
        return existing if existing.mark == new.mark else None
    if existing.kind == 'area':
        if existing.stars_required is not None and new.stars_required is not None:
            return existing if existing.stars_required == new.stars_required else None
        if existing.stars_required is not None:
            return existing
        if new.stars_required is not None:
            return new
        return existing if existing.max_stars <= new.max_stars else new
    if existing.kind == 'exclusive-set':
        return existing if existing.stars_required >= new.stars_required else new
    return existing


def merge_deductions(existing, new_deductions):
    """
    Merges two deduction lists, keeping one deduction per target. An exact
    count beats a bound and a tighter bound beats a looser one; contradicting
    cell deductions keep the first one seen.
    """
    merged = list(existing)
    index = {}
    for position, ded in enumerate(merged):
        key = _deduction_key(ded)
        if key is not None:
            index[key] = position
    for ded in new_deductions:
        key = _deduction_key(ded)
        if key is None or key not in index:
            if key is not None:
                index[key] = len(merged)
            merged.append(ded)
            continue
        resolved = _resolve_conflict(merged[index[key]], ded)
        if resolved is not None:
            merged[index[key]] = resolved
    return merged


def extract_cell_deductions(deductions):
    return [ded for ded in deductions if ded.kind == 'cell']
