"""**********************************************************************************
 * Title: puzzle_handler.py
 *
 * @author Isaiah Tadrous
 * @version 3.0.0
 * -------------------------------------------------------------------------------
 * Description:
 * Loads boards from the formats the Star Battle tools exchange. SBN (Star
 * Battle Notation) strings carry the size, the star count, the region borders
 * as a base64 bitfield and optionally the player's marks; web task strings are
 * comma-separated region numbers. Decoders log and return None on input they
 * cannot read. Region numbers are renumbered to 0..N-1 in order of first
 * appearance so they can feed a BoardDef directly.
 **********************************************************************************"""

# --- IMPORTS ---
import logging
import math
import re
from collections import deque

from starbattle_hints.board import BoardDef, BoardState, CellMark
from starbattle_hints.constants import (
    DEFAULT_STARS_BY_DIM, DIM_TO_SBN_CODE_MAP, SBN_B64_ALPHABET, SBN_CHAR_TO_INT, SBN_CODE_TO_DIM_MAP,
    STATE_EMPTY, STATE_SECONDARY_MARK, STATE_STAR,
)

_SBN_TO_STATE = {0: STATE_EMPTY, 1: STATE_SECONDARY_MARK, 2: STATE_STAR}
_STATE_TO_SBN = {STATE_EMPTY: 0, STATE_SECONDARY_MARK: 1, STATE_STAR: 2}
_STATE_TO_MARK = {STATE_EMPTY: CellMark.EMPTY, STATE_STAR: CellMark.STAR, STATE_SECONDARY_MARK: CellMark.CROSS}


# --- GRID HELPERS ---
def parse_and_validate_grid(task_string):
    """
    Splits a comma-separated task into a square grid.

    :returns: (grid, dim), or (None, None) when the task is not a square list of integers.
    """
    if not task_string:
        return None, None
    try:
        nums = [int(n) for n in task_string.split(',')]
    except (ValueError, TypeError):
        logging.error(f"Task string is not a list of integers: {task_string[:40]!r}")
        return None, None
    dim = math.isqrt(len(nums))
    if dim == 0 or dim * dim != len(nums):
        logging.error(f"Task string has {len(nums)} entries, which is not a square.")
        return None, None
    return [nums[i * dim:(i + 1) * dim] for i in range(dim)], dim


def normalize_regions(grid):
    """Renumbers region ids to 0..R-1 in row-major order of first appearance."""
    mapping = {}
    for row in grid:
        for value in row:
            if value not in mapping:
                mapping[value] = len(mapping)
    return [[mapping[value] for value in row] for row in grid]


def reconstruct_grid_from_borders(dim, v_bits, h_bits):
    """
    Flood-fills regions from SBN border bits. Vertical borders are read row by
    row and horizontal borders column by column. Region ids start at 1.
    """
    grid, region_id = [[0] * dim for _ in range(dim)], 1
    for r_start in range(dim):
        for c_start in range(dim):
            if grid[r_start][c_start]:
                continue
            queue = deque([(r_start, c_start)])
            grid[r_start][c_start] = region_id
            while queue:
                r, c = queue.popleft()
                steps = []
                if c < dim - 1 and v_bits[r * (dim - 1) + c] == '0':
                    steps.append((r, c + 1))
                if c > 0 and v_bits[r * (dim - 1) + c - 1] == '0':
                    steps.append((r, c - 1))
                if r < dim - 1 and h_bits[c * (dim - 1) + r] == '0':
                    steps.append((r + 1, c))
                if r > 0 and h_bits[c * (dim - 1) + r - 1] == '0':
                    steps.append((r - 1, c))
                for nr, nc in steps:
                    if grid[nr][nc] == 0:
                        grid[nr][nc] = region_id
                        queue.append((nr, nc))
            region_id += 1
    return grid


# --- SBN ---
def _border_chars(dim):
    return math.ceil(2 * dim * (dim - 1) / 6)


def decode_sbn(sbn_string):
    """
    Decodes an SBN string.

    :param str sbn_string: e.g. ``"55" + stars + flag + borders [+ annotations]``.
    :returns: ``{'task', 'stars', 'dim', 'annotations'}`` or None.
    :rtype: dict | None
    """
    if not sbn_string or len(sbn_string) < 4:
        logging.error("SBN string is too short.")
        return None
    dim = SBN_CODE_TO_DIM_MAP.get(sbn_string[0:2])
    if dim is None:
        logging.error(f"Unknown SBN size code: {sbn_string[0:2]!r}")
        return None
    try:
        stars = int(sbn_string[2])
    except ValueError:
        logging.error(f"SBN star count is not a digit: {sbn_string[2]!r}")
        return None
    border_bits_needed = 2 * dim * (dim - 1)
    border_chars = _border_chars(dim)
    region_data = sbn_string[4:4 + border_chars].ljust(border_chars, SBN_B64_ALPHABET[0])
    if any(ch not in SBN_CHAR_TO_INT for ch in region_data):
        logging.error("SBN border data contains characters outside the SBN alphabet.")
        return None
    bitfield = "".join(bin(SBN_CHAR_TO_INT[ch])[2:].zfill(6) for ch in region_data)[-border_bits_needed:]
    v_bits, h_bits = bitfield[:dim * (dim - 1)], bitfield[dim * (dim - 1):]
    region_grid = reconstruct_grid_from_borders(dim, v_bits, h_bits)
    annotations = sbn_string[4 + border_chars:] if sbn_string[3] == 'e' else ""
    return {
        'task': ",".join(str(cell) for row in region_grid for cell in row),
        'stars': stars,
        'dim': dim,
        'annotations': annotations,
    }


def encode_player_annotations(player_grid):
    if not player_grid:
        return ""
    dim = len(player_grid)
    flat = [_STATE_TO_SBN.get(player_grid[r][c], 0) for r in range(dim) for c in range(dim)]
    if not any(flat):
        return ""
    chars = [str(flat.pop(0))] if dim in (10, 11) else []
    for i in range(0, len(flat), 3):
        chunk = flat[i:i + 3] + [0] * (3 - len(flat[i:i + 3]))
        chars.append(SBN_B64_ALPHABET[chunk[0] * 16 + chunk[1] * 4 + chunk[2]])
    return "".join(chars)


def decode_player_annotations(annotation_data_str, dim):
    """Player marks as a grid of STATE_* values; undecodable data gives an empty grid."""
    grid = [[STATE_EMPTY] * dim for _ in range(dim)]
    if not annotation_data_str:
        return grid
    flat_indices = [(r, c) for r in range(dim) for c in range(dim)]
    char_cursor, cell_cursor = 0, 0
    if dim in (10, 11) and annotation_data_str[0].isdigit():
        grid[0][0] = _SBN_TO_STATE.get(int(annotation_data_str[0]), STATE_EMPTY)
        char_cursor, cell_cursor = 1, 1
    while cell_cursor < dim * dim and char_cursor < len(annotation_data_str):
        value = SBN_CHAR_TO_INT.get(annotation_data_str[char_cursor])
        if value is None:
            logging.error(f"Bad annotation character {annotation_data_str[char_cursor]!r}; marks ignored.")
            return [[STATE_EMPTY] * dim for _ in range(dim)]
        states = [value // 16, (value % 16) // 4, value % 4]
        for i, state in enumerate(states):
            if cell_cursor + i < dim * dim:
                r, c = flat_indices[cell_cursor + i]
                grid[r][c] = _SBN_TO_STATE.get(state, STATE_EMPTY)
        cell_cursor, char_cursor = cell_cursor + 3, char_cursor + 1
    return grid


def encode_to_sbn(region_grid, stars, player_grid=None):
    dim = len(region_grid)
    sbn_code = DIM_TO_SBN_CODE_MAP.get(dim)
    if not sbn_code:
        logging.error(f"No SBN size code for a {dim}x{dim} board.")
        return None
    vertical_bits = ['1' if region_grid[r][c] != region_grid[r][c + 1] else '0'
                     for r in range(dim) for c in range(dim - 1)]
    horizontal_bits = ['1' if region_grid[r][c] != region_grid[r + 1][c] else '0'
                       for c in range(dim) for r in range(dim - 1)]
    bitfield = "".join(vertical_bits) + "".join(horizontal_bits)
    bitfield = '0' * ((6 - len(bitfield) % 6) % 6) + bitfield
    region_data = "".join(SBN_B64_ALPHABET[int(bitfield[i:i + 6], 2)] for i in range(0, len(bitfield), 6))
    annotations = encode_player_annotations(player_grid) if player_grid else ""
    flag = 'e' if annotations else 'W'
    return f"{sbn_code}{stars}{flag}{region_data}{annotations}"


# --- WEB TASKS ---
def decode_web_task_string(task_string):
    """A comma-separated task; the star count comes from the default for its size."""
    region_grid, dim = parse_and_validate_grid(task_string)
    if not region_grid:
        return None
    stars = DEFAULT_STARS_BY_DIM.get(dim, 1)
    return {'task': task_string, 'stars': stars, 'dim': dim, 'annotations': ""}


def _split_web_task(main_part):
    """Finds the longest square-sized task prefix; what follows is annotation data."""
    for i in range(len(main_part), 0, -1):
        candidate = main_part[:i]
        if not candidate[-1].isdigit() or not re.fullmatch(r'[\d,]+', candidate):
            continue
        count = len(candidate.split(','))
        if math.isqrt(count) ** 2 == count:
            return candidate, main_part[i:]
    return None, None


def universal_import(input_string):
    """
    Decodes SBN or a web task string, whichever the input is.

    :returns: The puzzle dict with a decoded ``player_grid``, or None.
    """
    main_part = input_string.strip().split('~')[0]
    if len(main_part) >= 4 and main_part[0:2] in SBN_CODE_TO_DIM_MAP:
        puzzle_data = decode_sbn(main_part)
        if puzzle_data:
            logging.info("Decoded puzzle as SBN.")
    else:
        task_part, ann_part = _split_web_task(main_part)
        puzzle_data = decode_web_task_string(task_part) if task_part else None
        if puzzle_data:
            puzzle_data['annotations'] = ann_part
            logging.info("Decoded puzzle as a web task.")
    if not puzzle_data:
        logging.error("Could not recognize puzzle format.")
        return None
    puzzle_data['player_grid'] = decode_player_annotations(puzzle_data['annotations'], puzzle_data['dim'])
    return puzzle_data


# --- BOARD CONSTRUCTION ---
def board_from_puzzle_data(puzzle_data):
    """A BoardDef for a decoded puzzle, or None when its task does not parse."""
    if not puzzle_data or 'task' not in puzzle_data:
        return None
    region_grid, dim = parse_and_validate_grid(puzzle_data['task'])
    if not region_grid:
        return None
    return BoardDef(size=dim, stars_per_unit=int(puzzle_data['stars']), regions=normalize_regions(region_grid))


def state_from_annotations(board, player_grid=None):
    if not player_grid:
        return BoardState.empty(board)
    return BoardState(board, [[_STATE_TO_MARK.get(v, CellMark.EMPTY) for v in row] for row in player_grid])


def state_to_player_grid(state):
    to_state = {mark: value for value, mark in _STATE_TO_MARK.items()}
    return [[to_state[mark] for mark in row] for row in state.cells]


def display_terminal_grid(grid, title, content_grid=None):
    """
    A plain-text rendering of a region grid with stars and crosses on top.

    :returns: The rendered lines.
    :rtype: list[str]
    """
    if not grid:
        return []
    lines = [f"--- {title} ---"]
    for r, row in enumerate(grid):
        cells = []
        for c, region in enumerate(row):
            symbol = SBN_B64_ALPHABET[region % len(SBN_B64_ALPHABET)]
            if content_grid and content_grid[r][c] == STATE_STAR:
                symbol = '*'
            elif content_grid and content_grid[r][c] == STATE_SECONDARY_MARK:
                symbol = 'x'
            cells.append(f"{symbol:^3}")
        lines.append("".join(cells))
    return lines
