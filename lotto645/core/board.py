"""
Board query: everything a UI or CLI needs for one target round.

Inputs are clamped into range instead of rejected (the board should always
render something); the effective values are echoed back on the Board. In
strict mode any value that would need clamping raises InvalidParameterError.
"""
from dataclasses import dataclass, field
import threading

from lotto645.config import (
    K_MIN, K_MAX, DEFAULT_CANDIDATE_COUNT, TOTAL_ROUNDS_MIN, TOTAL_ROUNDS_MAX,
    DEFAULT_TOTAL_ROUNDS, DEFAULT_OBJECTIVE, OBJECTIVES, DEFAULT_WEIGHTS,
    HINT_WEIGHTS, AUTO_TUNE_TARGETS, TUNING_SAMPLE_SIZE, SAMPLE_SIZE,
    STRICT_PARAMETERS, AUTO_TUNE, logger
)
from lotto645.core.errors import InvalidParameterError, RoundNotFoundError
from lotto645.core.tuner import TunedWeightStore, WeightTuner
from lotto645.features.frequency import FrequencyAggregator, window_bounds
from lotto645.models.probability import ProbabilityModel
from lotto645.models.scoring import CandidateScorer, PostOptions, Weights


def _parse_int(value):
    if isinstance(value, bool) or value is None:
        return None
    try:
        as_float = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return None
    if as_float != as_float or as_float in (float('inf'), float('-inf')):
        return None
    return int(as_float)


def clamp_int(value, lo, hi, fallback=None):
    """Integer value of `value` clamped to [lo, hi]; non-numeric gives fallback"""
    v = _parse_int(value)
    if v is None:
        return lo if fallback is None else fallback
    return max(lo, min(hi, v))


def clamp_round(dataset, value):
    """Clamp a target round into [round_min, predictable_max]"""
    v = _parse_int(value)
    if v is None:
        return dataset.round_max
    return max(dataset.round_min, min(dataset.predictable_max, v))


@dataclass
class Board:
    total_rounds: int
    target_round: int
    candidate_count: int
    objective: str
    window: tuple
    counts: dict
    scores: dict
    candidates: list
    non_exposed: list
    probabilities: dict
    weights_used: dict
    weights_source: str
    is_predicted_round: bool
    actual: list = None
    actual_bonus: int = None
    hits: int = None
    sample: list = field(default=None)

    def to_dict(self):
        return {
            'total_rounds': self.total_rounds,
            'target_round': self.target_round,
            'candidate_count': self.candidate_count,
            'objective': self.objective,
            'window': list(self.window),
            'counts': {str(n): c for n, c in self.counts.items()},
            'scores': {str(n): s for n, s in self.scores.items()},
            'candidates': self.candidates,
            'non_exposed': self.non_exposed,
            'probabilities': {str(n): p for n, p in self.probabilities.items()},
            'weights_used': self.weights_used,
            'weights_source': self.weights_source,
            'is_predicted_round': self.is_predicted_round,
            'actual': self.actual,
            'actual_bonus': self.actual_bonus,
            'hits': self.hits,
            'sample': self.sample,
        }


class BoardService:
    """Computes boards over one prepared dataset"""

    def __init__(self, dataset, store=None, probability_model=None,
                 auto_tune=AUTO_TUNE, strict=STRICT_PARAMETERS):
        self.dataset = dataset
        self.store = store if store is not None else TunedWeightStore()
        self.probability_model = probability_model or ProbabilityModel()
        self.auto_tune = auto_tune
        self.strict = strict

        self.aggregator = FrequencyAggregator(dataset)
        self.scorer = CandidateScorer(dataset)
        self.tuner = WeightTuner(dataset, self.store, self.aggregator, self.scorer)

        # one grid search per k at a time
        self._locks_guard = threading.Lock()
        self._tune_locks = {}

    # ------------------------------------------------------------------
    # Parameters
    # ------------------------------------------------------------------
    def _check(self, name, raw, effective):
        # None means "use the default" even in strict mode
        if self.strict and raw is not None and _parse_int(raw) != effective:
            raise InvalidParameterError(f"{name}={raw!r} is out of range (nearest valid: {effective})")

    def resolve_parameters(self, total_rounds, target_round, candidate_count, objective):
        eff_total = clamp_int(total_rounds, TOTAL_ROUNDS_MIN, TOTAL_ROUNDS_MAX, DEFAULT_TOTAL_ROUNDS)
        eff_k = clamp_int(candidate_count, K_MIN, K_MAX, DEFAULT_CANDIDATE_COUNT)
        eff_round = clamp_round(self.dataset, target_round)

        self._check('total_rounds', total_rounds, eff_total)
        self._check('candidate_count', candidate_count, eff_k)
        self._check('target_round', target_round, eff_round)

        if objective not in OBJECTIVES:
            if self.strict:
                raise InvalidParameterError(f"objective must be one of {OBJECTIVES}, got {objective!r}")
            objective = DEFAULT_OBJECTIVE

        return eff_total, eff_round, eff_k, objective

    def select_weights(self, k, total_rounds, objective):
        """Tuned weights first, then the hint preset, then the defaults"""
        tuned = self.store.get(k)
        if tuned is None and self.auto_tune and k in AUTO_TUNE_TARGETS:
            with self._tuning_lock(k):
                # another request may have finished tuning while we waited
                tuned = self.store.get(k)
                if tuned is None:
                    tuned = self.tuner.tune(k, AUTO_TUNE_TARGETS[k], total_rounds,
                                            TUNING_SAMPLE_SIZE)
        if tuned is not None:
            return tuned.weights, 'tuned'
        if objective == 'hiHit' and k in HINT_WEIGHTS:
            return Weights.from_dict(HINT_WEIGHTS[k]), 'hint'
        return Weights.from_dict(DEFAULT_WEIGHTS), 'default'

    def _tuning_lock(self, k):
        with self._locks_guard:
            return self._tune_locks.setdefault(k, threading.Lock())

    def tune_weights(self, k, target_hits, total_rounds=DEFAULT_TOTAL_ROUNDS,
                     sample_size=TUNING_SAMPLE_SIZE):
        k = clamp_int(k, K_MIN, K_MAX, DEFAULT_CANDIDATE_COUNT)
        total_rounds = clamp_int(total_rounds, TOTAL_ROUNDS_MIN, TOTAL_ROUNDS_MAX, DEFAULT_TOTAL_ROUNDS)
        with self._tuning_lock(k):
            return self.tuner.tune(k, target_hits, total_rounds, sample_size)

    # ------------------------------------------------------------------
    # Board
    # ------------------------------------------------------------------
    def compute_board(self, total_rounds=DEFAULT_TOTAL_ROUNDS, target_round=None,
                      candidate_count=DEFAULT_CANDIDATE_COUNT, objective=DEFAULT_OBJECTIVE):
        total_rounds, target_round, k, objective = self.resolve_parameters(
            total_rounds, target_round, candidate_count, objective
        )

        counts = self.aggregator.aggregate(target_round - 1, total_rounds)
        is_predicted = self.dataset.is_predicted_round(target_round)

        actual = None
        if not is_predicted:
            try:
                actual = self.dataset.get_draw(target_round)
            except RoundNotFoundError as e:
                logger.warning(f"{e}; showing board without the actual outcome")

        weights, source = self.select_weights(k, total_rounds, objective)
        result = self.scorer.score(counts, target_round, total_rounds, k, weights, PostOptions())

        probabilities = self.probability_model.to_probabilities(result.scores)
        non_exposed = self.probability_model.non_exposed(probabilities, result.candidates, k)

        sample = None
        if is_predicted:
            pool = {n: probabilities[n] for n in result.candidates}
            sample = self.probability_model.sample_without_replacement(
                pool or probabilities, SAMPLE_SIZE
            )

        board = Board(
            total_rounds=total_rounds,
            target_round=target_round,
            candidate_count=k,
            objective=objective,
            window=window_bounds(target_round - 1, total_rounds),
            counts=counts,
            scores=result.scores,
            candidates=sorted(result.candidates),
            non_exposed=sorted(non_exposed),
            probabilities=probabilities,
            weights_used=weights.as_dict(),
            weights_source=source,
            is_predicted_round=is_predicted,
            actual=list(actual.numbers) if actual else None,
            actual_bonus=actual.bonus if actual else None,
            hits=len(result.candidates & set(actual.numbers)) if actual else None,
            sample=sample,
        )

        logger.info(f"Board for round {target_round}{' (predicted)' if is_predicted else ''}: "
                    f"window {board.window[0]}-{board.window[1]}, k={k}, "
                    f"weights {source} {board.weights_used}")
        return board
