"""
Score → probability conversion and weighted sampling.
"""
import numpy as np
from scipy.special import softmax

from lotto645.config import SAMPLE_SIZE, SOFTMAX_TEMPERATURE, logger
from lotto645.core.errors import InvalidParameterError


def scores_to_probabilities(scores, temperature=SOFTMAX_TEMPERATURE):
    """
    Softmax over a {number: score} map

    scipy subtracts the maximum before exponentiating, so large scores do
    not overflow and adding a constant to every score changes nothing.
    """
    if temperature <= 0:
        raise InvalidParameterError(f"temperature must be positive, got {temperature}")
    if not scores:
        return {}

    keys = list(scores)
    values = np.array([scores[k] for k in keys], dtype=float) / temperature
    probs = softmax(values)
    z = probs.sum() or 1.0
    return {k: float(p / z) for k, p in zip(keys, probs)}


def weighted_sample_without_replacement(weights, count=SAMPLE_SIZE, rng=None):
    """
    Draw `count` distinct keys, each with probability proportional to its weight

    The pool shrinks after every pick and the running total is reduced by
    the picked weight, which renormalizes the remainder. Returns the picks
    sorted ascending; asking for more than the pool yields the whole pool.
    """
    if count < 0:
        raise InvalidParameterError(f"count must be >= 0, got {count}")
    if rng is None:
        rng = np.random.default_rng()

    pool = sorted(weights)
    pool_weights = [float(weights[n]) for n in pool]
    if any(w < 0 for w in pool_weights):
        raise InvalidParameterError("Sampling weights must be non-negative")

    total = sum(pool_weights)
    picked = []
    while len(picked) < count and pool:
        r = rng.random() * total
        idx = 0
        while idx < len(pool) and r > pool_weights[idx]:
            r -= pool_weights[idx]
            idx += 1
        if idx >= len(pool):
            idx = len(pool) - 1

        picked.append(pool.pop(idx))
        total -= pool_weights.pop(idx)

    return sorted(picked)


def non_exposed_numbers(probabilities, candidates, k):
    """The k least probable numbers outside the candidate set"""
    by_low_p = sorted(probabilities.items(), key=lambda item: (item[1], item[0]))
    return [n for n, _ in by_low_p if n not in candidates][:k]


class ProbabilityModel:
    """Softmax distribution plus a seedable sampler"""

    def __init__(self, temperature=SOFTMAX_TEMPERATURE, seed=None):
        if temperature <= 0:
            raise InvalidParameterError(f"temperature must be positive, got {temperature}")
        self.temperature = temperature
        self.rng = np.random.default_rng(seed)

    def to_probabilities(self, scores):
        return scores_to_probabilities(scores, self.temperature)

    def sample_without_replacement(self, weights, count=SAMPLE_SIZE):
        picks = weighted_sample_without_replacement(weights, count, self.rng)
        logger.debug(f"Sampled {picks} from a pool of {len(weights)}")
        return picks

    def non_exposed(self, probabilities, candidates, k):
        return non_exposed_numbers(probabilities, candidates, k)
