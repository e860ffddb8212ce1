"""
Hit counting, summary statistics and per-round backtests
"""
import pytest

from lotto645.core.errors import RoundNotFoundError
from lotto645.evaluation.backtest import (
    backtest_report, backtest_round, backtest_weights, count_hits,
    random_baseline, summarize_hits
)
from lotto645.models.scoring import Weights

WEIGHTS = Weights(1.0, 0.3, 0.8, 0.2)


def test_count_hits():
    assert count_hits({1, 2, 3}, (3, 4, 5, 6, 7, 8)) == 1
    assert count_hits([], (1, 2, 3, 4, 5, 6)) == 0
    assert count_hits(range(1, 7), (1, 2, 3, 4, 5, 6)) == 6


def test_summarize_hits():
    stats = summarize_hits([0, 1, 2, 3, 4], 10, 3)
    assert stats.avg_hits == pytest.approx(2.0)
    assert stats.p_ge_target == pytest.approx(0.4)
    assert stats.p_ge_target_minus1 == pytest.approx(0.6)
    assert stats.tested == 5
    assert stats.target_hits == 3


def test_summarize_no_hits_is_all_zero():
    stats = summarize_hits([], 7, 3)
    assert (stats.avg_hits, stats.p_ge_target, stats.p_ge_target_minus1, stats.tested) == (0, 0, 0, 0)


def test_random_baseline():
    mean, p = random_baseline(10, 4)
    assert mean == pytest.approx(10 * 6 / 45)
    assert 0 < p < 0.05
    assert random_baseline(6, 0)[1] == pytest.approx(1.0)


def test_backtest_round_matches_manual_hits(dataset):
    hits, candidates = backtest_round(dataset, 80, 30, 10, WEIGHTS)
    assert len(candidates) == 10
    assert hits == len(candidates & set(dataset.get(80).numbers))


def test_backtest_round_needs_a_recorded_draw(dataset):
    with pytest.raises(RoundNotFoundError):
        backtest_round(dataset, 121, 30, 10, WEIGHTS)


def test_backtest_weights_one_entry_per_round(dataset):
    hits = backtest_weights(dataset, [50, 60, 70], 30, 7, WEIGHTS)
    assert len(hits) == 3
    assert all(0 <= h <= 6 for h in hits)
    assert hits[1] == backtest_round(dataset, 60, 30, 7, WEIGHTS)[0]


def test_backtest_report(dataset):
    df = backtest_report(dataset, range(100, 111), 30, 10, WEIGHTS)
    assert list(df.columns) == ['round', 'actual', 'candidates', 'hits']
    assert df['round'].tolist() == list(range(100, 111))
    assert all(len(c) == 10 for c in df['candidates'])
    assert df['hits'].tolist() == backtest_weights(dataset, range(100, 111), 30, 10, WEIGHTS)


def test_backtest_report_empty(dataset):
    df = backtest_report(dataset, [], 30, 10, WEIGHTS)
    assert df.empty
