from starbattle_hints.board import CellMark
from starbattle_hints.constants import (
    DIM_TO_SBN_CODE_MAP, SBN_CODE_TO_DIM_MAP, STATE_EMPTY, STATE_SECONDARY_MARK, STATE_STAR,
)
from starbattle_hints.puzzle_handler import (
    board_from_puzzle_data, decode_player_annotations, decode_sbn, decode_web_task_string,
    display_terminal_grid, encode_player_annotations, encode_to_sbn, normalize_regions,
    parse_and_validate_grid, state_from_annotations, state_to_player_grid, universal_import,
)


def _partition(grid):
    groups = {}
    for r, row in enumerate(grid):
        for c, value in enumerate(row):
            groups.setdefault(value, set()).add((r, c))
    return {frozenset(cells) for cells in groups.values()}


def _task(grid):
    return ",".join(str(value + 1) for row in grid for value in row)


def test_parse_and_validate_grid():
    grid, dim = parse_and_validate_grid("1,1,2,2")
    assert dim == 2 and grid == [[1, 1], [2, 2]]
    assert parse_and_validate_grid("1,2,3") == (None, None)
    assert parse_and_validate_grid("1,x,2,2") == (None, None)
    assert parse_and_validate_grid("") == (None, None)


def test_normalize_regions():
    assert normalize_regions([[7, 7], [3, 9]]) == [[0, 0], [1, 2]]


def test_sbn_round_trip_keeps_regions(board5):
    sbn = encode_to_sbn(board5.regions, 1)
    assert sbn.startswith("551W")
    decoded = decode_sbn(sbn)
    assert decoded['dim'] == 5 and decoded['stars'] == 1 and decoded['annotations'] == ""
    grid, _ = parse_and_validate_grid(decoded['task'])
    assert _partition(grid) == _partition(board5.regions)


def test_sbn_round_trip_on_two_star_board(board10):
    decoded = decode_sbn(encode_to_sbn(board10.regions, 2))
    grid, _ = parse_and_validate_grid(decoded['task'])
    assert decoded['stars'] == 2
    assert _partition(grid) == _partition(board10.regions)


def test_bad_sbn_is_rejected():
    assert decode_sbn("55") is None
    assert decode_sbn("ZZ1W0000") is None
    assert decode_sbn("55xW0000") is None
    assert decode_sbn("551W!!!!") is None
    assert encode_to_sbn([[0, 0, 0, 0]] * 4, 1) is None


def test_player_annotations_round_trip():
    for dim in (5, 10):
        grid = [[STATE_EMPTY] * dim for _ in range(dim)]
        grid[0][0] = STATE_STAR
        grid[0][1] = STATE_SECONDARY_MARK
        grid[dim - 1][dim - 1] = STATE_STAR
        assert decode_player_annotations(encode_player_annotations(grid), dim) == grid
    assert encode_player_annotations([[STATE_EMPTY] * 5 for _ in range(5)]) == ""


def test_bad_annotation_characters_are_ignored():
    grid = decode_player_annotations("!!", 5)
    assert all(value == STATE_EMPTY for row in grid for value in row)


def test_web_task_string(board10):
    data = decode_web_task_string(_task(board10.regions))
    assert data['dim'] == 10 and data['stars'] == 2
    assert decode_web_task_string("1,2,3") is None


def test_universal_import_sbn_with_marks(board5):
    player = [[STATE_EMPTY] * 5 for _ in range(5)]
    player[0][0] = STATE_STAR
    data = universal_import(encode_to_sbn(board5.regions, 1, player) + "~extra")
    assert data['player_grid'] == player
    board = board_from_puzzle_data(data)
    assert board.size == 5 and board.stars_per_unit == 1
    state = state_from_annotations(board, data['player_grid'])
    assert state.mark_of((0, 0)) == CellMark.STAR
    assert state_to_player_grid(state) == player


def test_universal_import_web_task(board5):
    data = universal_import(_task(board5.regions))
    board = board_from_puzzle_data(data)
    assert _partition(board.regions) == _partition(board5.regions)
    assert data['player_grid'] == [[STATE_EMPTY] * 5 for _ in range(5)]


def test_universal_import_rejects_garbage():
    assert universal_import("not a puzzle") is None
    assert board_from_puzzle_data(None) is None


def test_display_terminal_grid(board5):
    player = [[STATE_EMPTY] * 5 for _ in range(5)]
    player[0][0] = STATE_STAR
    player[0][1] = STATE_SECONDARY_MARK
    lines = display_terminal_grid(board5.regions, "Board", player)
    assert lines[0] == "--- Board ---"
    assert lines[1].split()[:2] == ['*', 'x']
    assert display_terminal_grid([], "Empty") == []


def test_size_codes_cover_every_supported_dimension():
    assert SBN_CODE_TO_DIM_MAP['55'] == 5 and SBN_CODE_TO_DIM_MAP['AA'] == 10 and SBN_CODE_TO_DIM_MAP['PP'] == 25
    assert len(SBN_CODE_TO_DIM_MAP) == 21
    assert all(DIM_TO_SBN_CODE_MAP[dim] == code for code, dim in SBN_CODE_TO_DIM_MAP.items())


def test_web_task_star_count_defaults(board5):
    assert decode_web_task_string(_task(board5.regions))['stars'] == 1
    seven = ",".join(str(r + 1) for r in range(7) for _ in range(7))
    assert decode_web_task_string(seven)['stars'] == 1
