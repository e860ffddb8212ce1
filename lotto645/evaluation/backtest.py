"""
Backtesting candidate sets against recorded draws.

Every backtested round is scored from the window ending the round before
it, so the outcome being checked never feeds its own candidate set.
"""
from dataclasses import dataclass, asdict

import numpy as np
import pandas as pd
from scipy import stats as scipy_stats

from lotto645.config import MAX_NUMBER, NUMBERS_PER_DRAW, logger
from lotto645.features.frequency import FrequencyAggregator
from lotto645.models.scoring import CandidateScorer


@dataclass(frozen=True)
class TuningStats:
    avg_hits: float
    p_ge_target: float
    p_ge_target_minus1: float
    tested: int
    target_hits: int
    random_avg_hits: float
    random_p_ge_target: float

    def as_dict(self):
        return asdict(self)


# -----------------------------
# Metrics
# -----------------------------
def count_hits(candidates, actual):
    """Count how many numbers match"""
    return len(set(candidates) & set(actual))


def random_baseline(k, target_hits):
    """Hits of a uniformly random k-set: (mean, P(hits >= target_hits))"""
    dist = scipy_stats.hypergeom(MAX_NUMBER, NUMBERS_PER_DRAW, k)
    return float(dist.mean()), float(dist.sf(target_hits - 1))


def summarize_hits(hits, k, target_hits):
    """Aggregate per-round hits into TuningStats"""
    arr = np.asarray(hits, dtype=float)
    random_avg, random_p = random_baseline(k, target_hits)

    if arr.size == 0:
        return TuningStats(0.0, 0.0, 0.0, 0, target_hits, random_avg, random_p)

    return TuningStats(
        avg_hits=float(arr.mean()),
        p_ge_target=float((arr >= target_hits).mean()),
        p_ge_target_minus1=float((arr >= target_hits - 1).mean()),
        tested=int(arr.size),
        target_hits=target_hits,
        random_avg_hits=random_avg,
        random_p_ge_target=random_p,
    )


# -----------------------------
# Backtest
# -----------------------------
def backtest_round(dataset, round_number, total_rounds, k, weights,
                   aggregator=None, scorer=None, post=None):
    """Candidate set for a recorded round and its hits against the real draw"""
    aggregator = aggregator or FrequencyAggregator(dataset)
    scorer = scorer or CandidateScorer(dataset)

    draw = dataset.get_draw(round_number)
    counts = aggregator.aggregate(round_number - 1, total_rounds)
    result = scorer.score(counts, round_number, total_rounds, k, weights, post)
    return count_hits(result.candidates, draw.numbers), result.candidates


def backtest_weights(dataset, rounds, total_rounds, k, weights,
                     aggregator=None, scorer=None):
    """Hits per round for one weight vector"""
    aggregator = aggregator or FrequencyAggregator(dataset)
    scorer = scorer or CandidateScorer(dataset)
    return [
        backtest_round(dataset, r, total_rounds, k, weights, aggregator, scorer)[0]
        for r in rounds
    ]


def backtest_report(dataset, rounds, total_rounds, k, weights):
    """Per-round backtest detail as a DataFrame"""
    aggregator = FrequencyAggregator(dataset)
    scorer = CandidateScorer(dataset)

    records = []
    for r in rounds:
        hits, candidates = backtest_round(dataset, r, total_rounds, k, weights,
                                          aggregator, scorer)
        records.append({
            'round': r,
            'actual': list(dataset.get_draw(r).numbers),
            'candidates': sorted(candidates),
            'hits': hits,
        })

    df = pd.DataFrame(records, columns=['round', 'actual', 'candidates', 'hits'])
    logger.info(f"Backtested {len(df)} rounds, k={k}: "
                f"{df['hits'].mean() if len(df) else 0:.3f} avg hits")
    return df
