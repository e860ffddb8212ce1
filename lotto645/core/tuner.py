"""
Grid-search weight tuner with an injectable result store.

For a candidate count k, every weight vector of a fixed grid is backtested
on the most recent rounds and the winner is chosen by a lexicographic
objective over named statistics. Results are kept per k in a store owned by
the caller (in memory or in the database).
"""
from collections import namedtuple
from datetime import datetime
import itertools

from lotto645.config import DEFAULT_TOTAL_ROUNDS, TUNING_SAMPLE_SIZE, logger
from lotto645.core.db import get_session, TunedWeight
from lotto645.evaluation.backtest import backtest_weights, summarize_hits, TuningStats, random_baseline
from lotto645.features.frequency import FrequencyAggregator
from lotto645.models.scoring import CandidateScorer, Weights

TuningResult = namedtuple('TuningResult', ['weights', 'stats'])

WEIGHT_GRIDS = {
    7: {'w1': [0.6, 0.8, 1.0], 'w2': [0.0, 0.3], 'w3': [0.8, 1.2, 1.6], 'w4': [0.0, 0.2, 0.4]},
    10: {'w1': [0.8, 1.0, 1.2], 'w2': [0.3, 0.6], 'w3': [0.5, 0.8, 1.2], 'w4': [0.0, 0.2, 0.4]},
}
DEFAULT_GRID = {'w1': [0.8, 1.0, 1.2], 'w2': [0.0, 0.3, 0.6], 'w3': [0.5, 1.0], 'w4': [0.0, 0.2, 0.4]}

# Order matters: it decides which grid point wins near-ties
OBJECTIVE_PRIORITIES = {
    7: ('p_ge_target', 'p_ge_target_minus1', 'avg_hits'),
}
DEFAULT_PRIORITY = ('p_ge_target', 'avg_hits', 'p_ge_target_minus1')


def weight_grid(k):
    grid = WEIGHT_GRIDS.get(k, DEFAULT_GRID)
    for w1, w2, w3, w4 in itertools.product(grid['w1'], grid['w2'], grid['w3'], grid['w4']):
        yield Weights(w1, w2, w3, w4)


def objective_priority(k):
    return OBJECTIVE_PRIORITIES.get(k, DEFAULT_PRIORITY)


def compare_tuples(a, b, priority):
    """
    Lexicographically compare two stats mappings on the keys in `priority`

    Missing keys count as 0. Returns 1 if a ranks higher, -1 if lower, 0 on
    a tie.
    """
    for key in priority:
        va = a.get(key, 0) or 0
        vb = b.get(key, 0) or 0
        if va > vb:
            return 1
        if va < vb:
            return -1
    return 0


def select_sample_rounds(dataset, total_rounds, sample_size=TUNING_SAMPLE_SIZE):
    """Most recent rounds whose previous round and full window lie in the dataset"""
    eligible = [
        r for r in dataset.rounds_ascending()
        if r - 1 >= dataset.round_min and r - total_rounds >= dataset.round_min
    ]
    if sample_size <= 0:
        return []
    return eligible[-sample_size:]


class TunedWeightStore:
    """In-memory tuned weights keyed by candidate count"""

    def __init__(self):
        self._results = {}

    def get(self, k):
        return self._results.get(k)

    def put(self, k, result, total_rounds=None):
        self._results[k] = result

    def clear(self, k=None):
        if k is None:
            self._results.clear()
        else:
            self._results.pop(k, None)

    def __contains__(self, k):
        return k in self._results


class SqlTunedWeightStore:
    """Tuned weights persisted in the tuned_weights table; latest row per k wins"""

    def __init__(self, bind=None):
        self.bind = bind

    def get(self, k):
        session = get_session(self.bind)
        try:
            row = session.query(TunedWeight).filter_by(k=k).order_by(
                TunedWeight.weight_id.desc()
            ).first()
            if row is None:
                return None

            random_avg, random_p = random_baseline(k, row.target_hits)
            stats = TuningStats(
                avg_hits=row.avg_hits,
                p_ge_target=row.p_ge_target,
                p_ge_target_minus1=row.p_ge_target_minus1,
                tested=row.tested,
                target_hits=row.target_hits,
                random_avg_hits=random_avg,
                random_p_ge_target=random_p,
            )
            return TuningResult(Weights(row.w1, row.w2, row.w3, row.w4), stats)
        finally:
            session.close()

    def put(self, k, result, total_rounds=None):
        session = get_session(self.bind)
        try:
            w, s = result.weights, result.stats
            session.add(TunedWeight(
                updated_at=datetime.now().isoformat(),
                k=k, w1=w.w1, w2=w.w2, w3=w.w3, w4=w.w4,
                target_hits=s.target_hits,
                total_rounds=total_rounds,
                avg_hits=s.avg_hits,
                p_ge_target=s.p_ge_target,
                p_ge_target_minus1=s.p_ge_target_minus1,
                tested=s.tested,
            ))
            session.commit()
            logger.info(f"Saved tuned weights for k={k}")
        except Exception as e:
            session.rollback()
            logger.error(f"Error saving tuned weights for k={k}: {e}")
            raise
        finally:
            session.close()

    def clear(self, k=None):
        session = get_session(self.bind)
        try:
            query = session.query(TunedWeight)
            if k is not None:
                query = query.filter_by(k=k)
            deleted = query.delete()
            session.commit()
            logger.info(f"Cleared {deleted} tuned weight rows")
        except Exception as e:
            session.rollback()
            logger.error(f"Error clearing tuned weights: {e}")
            raise
        finally:
            session.close()

    def __contains__(self, k):
        return self.get(k) is not None


class WeightTuner:
    """
    Backtests each grid point and keeps the best one per k

    Not safe for concurrent tuning of the same k; callers run one tuning
    job at a time.
    """

    def __init__(self, dataset, store=None, aggregator=None, scorer=None):
        self.dataset = dataset
        self.store = store if store is not None else TunedWeightStore()
        self.aggregator = aggregator or FrequencyAggregator(dataset)
        self.scorer = scorer or CandidateScorer(dataset)

    def tune(self, k, target_hits, total_rounds=DEFAULT_TOTAL_ROUNDS,
             sample_size=TUNING_SAMPLE_SIZE):
        rounds = select_sample_rounds(self.dataset, total_rounds, sample_size)
        if not rounds:
            logger.warning(f"No rounds to backtest for k={k} "
                           f"(total_rounds={total_rounds}); keeping current weights")
            return None

        priority = objective_priority(k)
        logger.info(f"Tuning k={k} target={target_hits} on {len(rounds)} rounds "
                    f"({rounds[0]}-{rounds[-1]}), priority {priority}")

        best = None
        n_points = 0
        for weights in weight_grid(k):
            n_points += 1
            hits = backtest_weights(self.dataset, rounds, total_rounds, k, weights,
                                    self.aggregator, self.scorer)
            stats = summarize_hits(hits, k, target_hits)
            if best is None or compare_tuples(stats.as_dict(), best.stats.as_dict(), priority) > 0:
                best = TuningResult(weights, stats)

        self.store.put(k, best, total_rounds=total_rounds)

        s = best.stats
        logger.info(f"Best of {n_points} weight vectors for k={k}: {best.weights.as_dict()}")
        logger.info(f"  avg hits {s.avg_hits:.3f} (random {s.random_avg_hits:.3f}), "
                    f"P(>={target_hits}) {s.p_ge_target:.1%} (random {s.random_p_ge_target:.1%}), "
                    f"P(>={target_hits - 1}) {s.p_ge_target_minus1:.1%}")
        return best
