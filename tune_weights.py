"""
Tune scoring weights for the 7- and 10-number boards and store them.

Usage:
    python tune_weights.py
    python tune_weights.py --total 45 --sample 300
    python tune_weights.py --k 12 --target 4
    python tune_weights.py --k 7 --report 10
"""
import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from lotto645.core.db import init_db
from lotto645.core.tuner import SqlTunedWeightStore, WeightTuner, select_sample_rounds
from lotto645.evaluation.backtest import backtest_report
from lotto645.features.loader import load_dataset
from lotto645.config import (
    AUTO_TUNE_TARGETS, DEFAULT_TOTAL_ROUNDS, TUNING_SAMPLE_SIZE, K_MIN, K_MAX
)


def main():
    args = sys.argv[1:]
    opts = dict(zip(args[::2], args[1::2]))

    total_rounds = int(opts.get('--total', DEFAULT_TOTAL_ROUNDS))
    sample_size = int(opts.get('--sample', TUNING_SAMPLE_SIZE))
    report_rounds = int(opts.get('--report', 0))

    if '--k' in opts:
        k = int(opts['--k'])
        if not (K_MIN <= k <= K_MAX):
            print(f"❌ k must be between {K_MIN} and {K_MAX}")
            sys.exit(1)
        targets = {k: int(opts.get('--target', AUTO_TUNE_TARGETS.get(k, 3)))}
    else:
        targets = AUTO_TUNE_TARGETS

    init_db()
    dataset = load_dataset()
    tuner = WeightTuner(dataset, SqlTunedWeightStore())

    print("=" * 70)
    print("🧠 WEIGHT TUNING")
    print("=" * 70)

    for k, target in targets.items():
        started = time.perf_counter()
        result = tuner.tune(k, target, total_rounds, sample_size)
        elapsed = time.perf_counter() - started

        if result is None:
            print(f"\n⚠️  k={k}: not enough history for total_rounds={total_rounds}")
            continue

        s = result.stats
        print(f"\n🎯 k={k} (target {target} hits) - {elapsed:.1f}s")
        print(f"   Weights:          {result.weights.as_dict()}")
        print(f"   Rounds tested:    {s.tested}")
        print(f"   Avg hits:         {s.avg_hits:.3f}  (random {s.random_avg_hits:.3f})")
        print(f"   P(>={target}):          {s.p_ge_target:.1%}  (random {s.random_p_ge_target:.1%})")
        print(f"   P(>={target - 1}):          {s.p_ge_target_minus1:.1%}")

        if report_rounds:
            rounds = select_sample_rounds(dataset, total_rounds, report_rounds)
            df = backtest_report(dataset, rounds, total_rounds, k, result.weights)
            print(f"\n   Last {len(df)} rounds:")
            print(df.to_string(index=False))

    print("=" * 70)


if __name__ == "__main__":
    main()
