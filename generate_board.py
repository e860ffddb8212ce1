"""
Print the candidate board for a target round.

Usage:
    python generate_board.py
    python generate_board.py --round 1150 --total 30 --k 10 --objective hiHit
    python generate_board.py --csv data/feed.csv --k 7
"""
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from lotto645.core.board import BoardService
from lotto645.core.db import init_db
from lotto645.core.tuner import SqlTunedWeightStore
from lotto645.features.dataset import DataPreparer
from lotto645.features.loader import load_dataset, read_raw_csv
from lotto645.config import VALID_NUMBERS, logger


def parse_args(argv):
    """--flag value pairs into a dict"""
    opts = {}
    i = 0
    while i < len(argv):
        if argv[i].startswith('--') and i + 1 < len(argv):
            opts[argv[i][2:]] = argv[i + 1]
            i += 2
        else:
            logger.warning(f"Ignoring argument {argv[i]!r}")
            i += 1
    return opts


def format_row(label, values):
    return f"  {label:<12} " + ' '.join(f'{v:>2}' for v in values)


def main():
    opts = parse_args(sys.argv[1:])

    if 'csv' in opts:
        dataset = DataPreparer().prepare(read_raw_csv(opts['csv']))
        service = BoardService(dataset)
    else:
        init_db()
        dataset = load_dataset()
        service = BoardService(dataset, store=SqlTunedWeightStore())

    board = service.compute_board(
        total_rounds=opts.get('total'),
        target_round=opts.get('round'),
        candidate_count=opts.get('k'),
        objective=opts.get('objective', 'avg'),
    )

    print("=" * 70)
    print("🎰 LOTTO 6/45 - CANDIDATE BOARD")
    print("=" * 70)
    badge = " (predicted round)" if board.is_predicted_round else ""
    print(f"  Target round:   {board.target_round}{badge}")
    print(f"  Window:         rounds {board.window[0]} - {board.window[1]} ({board.total_rounds})")
    print(f"  Candidates:     {board.candidate_count}")
    print(f"  Weights:        {board.weights_source} {board.weights_used}")

    print("\n" + "-" * 70)
    numbers = VALID_NUMBERS
    for start in range(0, len(numbers), 15):
        chunk = numbers[start:start + 15]
        print(format_row("number", chunk))
        print(format_row("count", [f'{board.counts[n]:g}' for n in chunk]))
        print(format_row("candidate", ['●' if n in board.candidates else '·' for n in chunk]))
        print(format_row("non-exposed", ['○' if n in board.non_exposed else '·' for n in chunk]))
        print()

    print(f"🎯 Candidates:   {board.candidates}")
    print(f"🚫 Non-exposed:  {board.non_exposed}")

    if board.actual is not None:
        print(f"✅ Actual draw:  {board.actual} + {board.actual_bonus} "
              f"({board.hits}/{len(board.actual)} in candidates)")
    elif not board.is_predicted_round:
        print("⚠️  No recorded draw for this round")

    if board.sample is not None:
        print(f"🎲 Sample pick:  {board.sample}")

    print("=" * 70)


if __name__ == "__main__":
    main()
