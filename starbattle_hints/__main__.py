"""**********************************************************************************
 * Title: __main__.py
 *
 * @author Isaiah Tadrous
 * @version 3.0.0
 * -------------------------------------------------------------------------------
 * Description:
 * Command-line front end: python -m starbattle_hints <SBN or task string>.
 * Decodes the puzzle (with any player marks it carries), then either prints
 * the single next hint or runs the engine to the end and prints every hint
 * followed by the solve summary.
 **********************************************************************************"""

# --- IMPORTS ---
import argparse
import logging
import sys

from starbattle_hints.constants import DEFAULT_MAX_DEPTH, DEFAULT_TIMEOUT_MS
from starbattle_hints.engine import HintEngine, format_report
from starbattle_hints.entanglements import load_rule_table
from starbattle_hints.puzzle_handler import (
    board_from_puzzle_data, display_terminal_grid, state_from_annotations, state_to_player_grid,
    universal_import,
)
from starbattle_hints.search import Verifier
from starbattle_hints.techniques import TECHNIQUES_IN_ORDER


def build_parser():
    parser = argparse.ArgumentParser(description="Step-by-step logical hints for Star Battle puzzles.")
    parser.add_argument("puzzle", type=str, help="An SBN string or a comma-separated web task string.")
    parser.add_argument("--timeout-ms", type=int, default=DEFAULT_TIMEOUT_MS,
                        help="Verifier budget per check in milliseconds.")
    parser.add_argument("--max-depth", type=int, default=DEFAULT_MAX_DEPTH,
                        help="Verifier decision depth per check.")
    parser.add_argument("--enable", action="append", default=[], metavar="TECHNIQUE",
                        help="Also run a technique that is off by default (repeatable).")
    parser.add_argument("--entanglements", type=str, default=None,
                        help="Directory of entanglement rule JSON files.")
    parser.add_argument("--next", action="store_true", help="Print only the next hint.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log at DEBUG level.")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format='%(asctime)s - %(levelname)s - %(message)s')

    puzzle_data = universal_import(args.puzzle)
    board = board_from_puzzle_data(puzzle_data)
    if board is None:
        print("\nFailed to load a valid puzzle. Exiting.")
        return 1
    state = state_from_annotations(board, puzzle_data.get('player_grid'))

    enabled = [t.id for t in TECHNIQUES_IN_ORDER if t.enabled_by_default] + args.enable
    table = load_rule_table(args.entanglements) if args.entanglements else None
    try:
        engine = HintEngine(verifier=Verifier(timeout_ms=args.timeout_ms, max_depth=args.max_depth),
                            enabled=enabled, entanglement_table=table)
    except ValueError as e:
        print(f"Error: {e}")
        return 2

    print("\n".join(display_terminal_grid(board.regions, "Initial Puzzle State", state_to_player_grid(state))))
    if args.next:
        hint = engine.find_next_hint(state)
        print(f"{hint.technique}: {hint.explanation}" if hint else "No hint available.")
        return 0

    report = engine.solve(state)
    for step, hint in enumerate(report.hints, start=1):
        print(f"{step:>3}. [{hint.technique}] {hint.explanation}")
    print("\n".join(display_terminal_grid(board.regions, "Final Puzzle State", state_to_player_grid(report.state))))
    print("\n".join(format_report(report)))
    return 0


if __name__ == "__main__":
    sys.exit(main())
