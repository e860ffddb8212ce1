"""
Weight grid search, objective ordering and tuned-weight stores
"""
import pytest

from lotto645.core.tuner import (
    SqlTunedWeightStore, TunedWeightStore, TuningResult, WeightTuner,
    compare_tuples, objective_priority, select_sample_rounds, weight_grid
)
from lotto645.evaluation.backtest import backtest_weights, summarize_hits
from lotto645.models.scoring import Weights


def test_compare_tuples_follows_priority():
    a = {'p_ge_target': 0.2, 'avg_hits': 1.1, 'p_ge_target_minus1': 0.50}
    b = {'p_ge_target': 0.2, 'avg_hits': 1.0, 'p_ge_target_minus1': 0.55}

    assert compare_tuples(a, b, objective_priority(10)) == 1
    assert compare_tuples(a, b, objective_priority(7)) == -1
    assert compare_tuples(a, a, objective_priority(7)) == 0
    assert compare_tuples({}, {'avg_hits': 0}, ('avg_hits',)) == 0
    assert compare_tuples({'x': 1}, {}, ('x',)) == 1


def test_priorities_per_k():
    assert objective_priority(7) == ('p_ge_target', 'p_ge_target_minus1', 'avg_hits')
    assert objective_priority(10) == ('p_ge_target', 'avg_hits', 'p_ge_target_minus1')
    assert objective_priority(12) == objective_priority(10)


def test_grids_differ_per_k():
    g7, g10, g12 = list(weight_grid(7)), list(weight_grid(10)), list(weight_grid(12))
    assert len(g7) == len(g10) == len(g12) == 54
    assert g7[0] == Weights(0.6, 0.0, 0.8, 0.0)
    assert g10[0] == Weights(0.8, 0.3, 0.5, 0.0)
    assert g7[-1] == Weights(1.0, 0.3, 1.6, 0.4)
    assert set(g7) != set(g10) != set(g12)


def test_select_sample_rounds(dataset):
    assert select_sample_rounds(dataset, 30, 250) == list(range(31, 121))
    assert select_sample_rounds(dataset, 30, 10) == list(range(111, 121))
    assert select_sample_rounds(dataset, 1, 3) == [118, 119, 120]
    assert select_sample_rounds(dataset, 180, 250) == []
    assert select_sample_rounds(dataset, 30, 0) == []


def test_tune_picks_first_best_grid_point(dataset):
    store = TunedWeightStore()
    tuner = WeightTuner(dataset, store)
    best = tuner.tune(7, 3, total_rounds=20, sample_size=6)

    assert store.get(7) == best
    assert 7 in store
    assert best.stats.tested == 6
    assert best.stats.target_hits == 3

    rounds = select_sample_rounds(dataset, 20, 6)
    priority = objective_priority(7)
    first_equal = None
    for w in weight_grid(7):
        stats = summarize_hits(backtest_weights(dataset, rounds, 20, 7, w), 7, 3)
        assert compare_tuples(stats.as_dict(), best.stats.as_dict(), priority) <= 0
        if first_equal is None and compare_tuples(stats.as_dict(), best.stats.as_dict(), priority) == 0:
            first_equal = w
    assert first_equal == best.weights


def test_tune_other_k_is_cached_under_its_own_key(dataset):
    store = TunedWeightStore()
    result = WeightTuner(dataset, store).tune(12, 4, total_rounds=30, sample_size=3)
    assert result.weights in set(weight_grid(12))
    assert 12 in store and 10 not in store


def test_tune_without_history_caches_nothing(dataset):
    store = TunedWeightStore()
    assert WeightTuner(dataset, store).tune(10, 4, total_rounds=180, sample_size=50) is None
    assert 10 not in store


def test_memory_store_clear():
    store = TunedWeightStore()
    result = TuningResult(Weights(1, 0, 0, 0), None)
    store.put(7, result)
    store.put(10, result)
    store.clear(7)
    assert 7 not in store and 10 in store
    store.clear()
    assert store.get(10) is None


def test_sql_store_round_trip(engine, dataset):
    store = SqlTunedWeightStore(engine)
    assert store.get(7) is None

    first = WeightTuner(dataset, TunedWeightStore()).tune(7, 3, 20, 4)
    store.put(7, first, total_rounds=20)
    loaded = store.get(7)
    assert loaded.weights == first.weights
    assert loaded.stats.avg_hits == pytest.approx(first.stats.avg_hits)
    assert loaded.stats.random_avg_hits == pytest.approx(7 * 6 / 45)

    newer = TuningResult(Weights(1.0, 0.3, 1.6, 0.4), first.stats)
    store.put(7, newer)
    assert store.get(7).weights == newer.weights

    store.clear(7)
    assert 7 not in store


def test_tuner_writes_through_sql_store(engine, dataset):
    store = SqlTunedWeightStore(engine)
    best = WeightTuner(dataset, store).tune(10, 4, 30, 3)
    assert store.get(10).weights == best.weights
