"""**********************************************************************************
 * Title: techniques/__init__.py
 *
 * @author Isaiah Tadrous
 * @version 3.0.0
 * -------------------------------------------------------------------------------
 * Description:
 * The technique catalog. TECHNIQUES_IN_ORDER lists every technique from the
 * cheapest, most local rules to the expensive pattern and verifier-backed ones;
 * the engine tries them in this order and stops at the first hint. Tiers feed
 * the difficulty score of a full solve.
 **********************************************************************************"""

from starbattle_hints.constants import (
    TECH_ADJACENT_EXCLUSION, TECH_ADJACENT_ROW_COL, TECH_COMPOSITE_SHAPES, TECH_CROSS_EMPTY_PATTERNS,
    TECH_CROSS_PRESSURE, TECH_ENTANGLEMENT_PATTERNS, TECH_EXACT_FILL, TECH_EXCLUSION, TECH_FINNED_COUNTS,
    TECH_FISH, TECH_FORCED_PLACEMENT, TECH_KISSING_LS, TECH_LOCKED_LINE, TECH_N_ROOKS, TECH_OVERCOUNTING,
    TECH_PRESSURED_EXCLUSION, TECH_PRESSURED_TS, TECH_SATURATION, TECH_SCHEMA_BASED, TECH_SHARED_ROW_COLUMN,
    TECH_SIMPLE_SHAPES, TECH_SQUARE_COUNTING, TECH_SQUEEZE, TECH_THE_M, TECH_TRIVIAL_MARKS, TECH_TWO_BY_TWO,
    TECH_UNDERCOUNTING,
)
from starbattle_hints.techniques.basic import (
    find_exact_fill_hint, find_locked_line_hint, find_saturation_hint, find_trivial_marks_hint,
    find_two_by_two_hint,
)
from starbattle_hints.techniques.common import Technique, TechniqueContext
from starbattle_hints.techniques.counting import (
    find_composite_shapes_hint, find_finned_counts_hint, find_overcounting_hint, find_square_counting_hint,
    find_squeeze_hint, find_undercounting_hint,
)
from starbattle_hints.techniques.elimination import find_exclusion_hint, find_fish_hint, find_pressured_exclusion_hint
from starbattle_hints.techniques.patterns import find_entanglement_patterns_hint, find_schema_based_hint
from starbattle_hints.techniques.placement import (
    find_adjacent_exclusion_hint, find_forced_placement_hint, find_n_rooks_hint, find_shared_row_column_hint,
)
from starbattle_hints.techniques.pressure import (
    find_adjacent_row_col_hint, find_cross_empty_patterns_hint, find_cross_pressure_hint,
)
from starbattle_hints.techniques.shapes import (
    find_kissing_ls_hint, find_pressured_ts_hint, find_simple_shapes_hint, find_the_m_hint,
)

TECHNIQUES_IN_ORDER = [
    # Tier 1: direct consequences of the rules
    Technique(TECH_TRIVIAL_MARKS, "Trivial Marks", find_trivial_marks_hint, 1),
    Technique(TECH_TWO_BY_TWO, "Two by Two", find_two_by_two_hint, 1),
    Technique(TECH_SATURATION, "Saturation", find_saturation_hint, 1),
    Technique(TECH_EXACT_FILL, "Exact Fill", find_exact_fill_hint, 1),
    Technique(TECH_LOCKED_LINE, "Locked Line", find_locked_line_hint, 1),
    # Tier 2: line patterns and placement enumeration
    Technique(TECH_CROSS_PRESSURE, "Cross Pressure", find_cross_pressure_hint, 2),
    Technique(TECH_CROSS_EMPTY_PATTERNS, "Cross Empty Patterns", find_cross_empty_patterns_hint, 2),
    Technique(TECH_ADJACENT_ROW_COL, "Adjacent Row/Column", find_adjacent_row_col_hint, 2),
    Technique(TECH_SIMPLE_SHAPES, "Simple Shapes", find_simple_shapes_hint, 2),
    Technique(TECH_SHARED_ROW_COLUMN, "Shared Row/Column", find_shared_row_column_hint, 2),
    Technique(TECH_EXCLUSION, "Exclusion", find_exclusion_hint, 2),
    Technique(TECH_FORCED_PLACEMENT, "Forced Placement", find_forced_placement_hint, 2),
    Technique(TECH_ADJACENT_EXCLUSION, "Adjacent Exclusion", find_adjacent_exclusion_hint, 2),
    # Tier 3: counting and region shapes
    Technique(TECH_UNDERCOUNTING, "Undercounting", find_undercounting_hint, 3),
    Technique(TECH_OVERCOUNTING, "Overcounting", find_overcounting_hint, 3),
    Technique(TECH_SQUEEZE, "Squeeze", find_squeeze_hint, 3),
    Technique(TECH_SQUARE_COUNTING, "Square Counting", find_square_counting_hint, 3),
    Technique(TECH_N_ROOKS, "N-Rooks", find_n_rooks_hint, 3),
    Technique(TECH_COMPOSITE_SHAPES, "Composite Shapes", find_composite_shapes_hint, 3),
    Technique(TECH_KISSING_LS, "Kissing Ls", find_kissing_ls_hint, 3),
    Technique(TECH_THE_M, "The M", find_the_m_hint, 3),
    Technique(TECH_PRESSURED_TS, "Pressured Ts", find_pressured_ts_hint, 3),
    Technique(TECH_PRESSURED_EXCLUSION, "Pressured Exclusion", find_pressured_exclusion_hint, 3),
    # Tier 4: tables, schemas and verifier-backed searches
    Technique(TECH_ENTANGLEMENT_PATTERNS, "Entanglement Patterns", find_entanglement_patterns_hint, 4),
    Technique(TECH_SCHEMA_BASED, "Schema Based", find_schema_based_hint, 4),
    Technique(TECH_FISH, "Fish", find_fish_hint, 4, enabled_by_default=False),
    Technique(TECH_FINNED_COUNTS, "Finned Counts", find_finned_counts_hint, 4, enabled_by_default=False),
]

_BY_ID = {technique.id: technique for technique in TECHNIQUES_IN_ORDER}


def technique_by_id(technique_id):
    """Looks up a catalog entry; None for an unknown id."""
    return _BY_ID.get(technique_id)


__all__ = ['TECHNIQUES_IN_ORDER', 'Technique', 'TechniqueContext', 'technique_by_id']
