"""**********************************************************************************
 * Title: constants.py
 *
 * @author Isaiah Tadrous
 * @version 3.0.0
 * -------------------------------------------------------------------------------
 * Description:
 * Contains all the static DATA constants for the Star Battle hint engine. This
 * includes the cell mark values shared with the player grid encoding, the SBN
 * (Star Battle Notation) alphabet and size codes used by the puzzle loader, the
 * default star counts per size, the technique identifiers, and the default search
 * budgets that keep the verification solver and the combinatorial techniques
 * bounded in time.
 **********************************************************************************"""

# --- CELL STATES ---
STATE_EMPTY = 0
STATE_STAR = 1
STATE_SECONDARY_MARK = 2

# --- SBN (STAR BATTLE NOTATION) ---
SBN_B64_ALPHABET = '0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz-_'
SBN_CHAR_TO_INT = {c: i for i, c in enumerate(SBN_B64_ALPHABET)}
# A size code repeats the alphabet digit of the dimension: '55' is 5, 'AA' is 10.
SBN_CODE_TO_DIM_MAP = {SBN_B64_ALPHABET[dim] * 2: dim for dim in range(5, 26)}
DIM_TO_SBN_CODE_MAP = {v: k for k, v in SBN_CODE_TO_DIM_MAP.items()}

# --- DEFAULT STAR COUNTS ---
# Stars per unit for the standard sizes; used when a task string does not carry one.
DEFAULT_STARS_BY_DIM = {5: 1, 6: 1, 8: 1, 10: 2, 14: 3, 17: 4, 21: 5, 25: 6}

# --- TECHNIQUE IDENTIFIERS ---
TECH_TRIVIAL_MARKS = 'trivial-marks'
TECH_TWO_BY_TWO = 'two-by-two'
TECH_SATURATION = 'saturation'
TECH_EXACT_FILL = 'exact-fill'
TECH_LOCKED_LINE = 'locked-line'
TECH_CROSS_PRESSURE = 'cross-pressure'
TECH_CROSS_EMPTY_PATTERNS = 'cross-empty-patterns'
TECH_ADJACENT_ROW_COL = 'adjacent-row-col'
TECH_SIMPLE_SHAPES = 'simple-shapes'
TECH_SHARED_ROW_COLUMN = 'shared-row-column'
TECH_EXCLUSION = 'exclusion'
TECH_PRESSURED_EXCLUSION = 'pressured-exclusion'
TECH_ADJACENT_EXCLUSION = 'adjacent-exclusion'
TECH_FORCED_PLACEMENT = 'forced-placement'
TECH_UNDERCOUNTING = 'undercounting'
TECH_OVERCOUNTING = 'overcounting'
TECH_FINNED_COUNTS = 'finned-counts'
TECH_COMPOSITE_SHAPES = 'composite-shapes'
TECH_SQUEEZE = 'squeeze'
TECH_SQUARE_COUNTING = 'square-counting'
TECH_KISSING_LS = 'kissing-ls'
TECH_THE_M = 'the-m'
TECH_PRESSURED_TS = 'pressured-ts'
TECH_FISH = 'fish'
TECH_N_ROOKS = 'n-rooks'
TECH_ENTANGLEMENT_PATTERNS = 'entanglement-patterns'
TECH_SCHEMA_BASED = 'schema-based'
TECH_COMBINED = 'combined-deductions'

# --- SEARCH BUDGETS ---
DEFAULT_TIMEOUT_MS = 2000      # verifier budget for a single forced-cell check
DEFAULT_MAX_DEPTH = 200        # decisions on the search stack before giving up
DEFAULT_MAX_COUNT = 2          # enough to tell "unique" from "ambiguous"

# --- ENUMERATION CAPS ---
MAX_PLACEMENT_SETS = 1000      # forced-placement / adjacent-exclusion result cap
MAX_PLACEMENT_CANDIDATES = 20  # skip multi-star enumerations above this many cells
MAX_UNION_SIZE = 3             # unions of regions or lines used by counting shapes
MAX_COUNTING_GROUP = 3         # non-contiguous line groups checked by counting rules
MAX_FISH_SIZE = 3              # largest base set tried by fish
MAX_EXCLUSIVE_UNITS = 4        # regions per band, or lines per region, for the exclusive-area schemas

# --- DIFFICULTY SCORING ---
TECHNIQUE_SCORES = {
    1: 1, 2: 5, 3: 25, 4: 100
}
BREAK_IN_BONUS = {
    3: 50, 4: 150
}
