from starbattle_hints.__main__ import main


def _task(board):
    return ",".join(str(value + 1) for row in board.regions for value in row)


def test_next_hint(board5, capsys):
    assert main([_task(board5), "--next"]) == 0
    out = capsys.readouterr().out
    assert "--- Initial Puzzle State ---" in out
    assert "locked-line:" in out


def test_full_solve(board5, capsys):
    assert main([_task(board5)]) == 0
    out = capsys.readouterr().out
    assert "Puzzle Solved: True" in out
    assert "--- Final Puzzle State ---" in out


def test_bad_puzzle(capsys):
    assert main(["not a puzzle"]) == 1
    assert "Failed to load" in capsys.readouterr().out


def test_unknown_technique(board5, capsys):
    assert main([_task(board5), "--enable", "no-such-technique"]) == 2
    assert "no-such-technique" in capsys.readouterr().out
