"""
Softmax distribution and weighted sampling
"""
import numpy as np
import pytest

from lotto645.core.errors import InvalidParameterError
from lotto645.models.probability import (
    ProbabilityModel, non_exposed_numbers, scores_to_probabilities,
    weighted_sample_without_replacement
)

SCORES = {n: float(np.sin(n)) * 3 for n in range(1, 46)}


def test_probabilities_sum_to_one():
    probs = scores_to_probabilities(SCORES)
    assert sorted(probs) == list(range(1, 46))
    assert abs(sum(probs.values()) - 1.0) < 1e-9
    assert all(p > 0 for p in probs.values())


def test_shift_invariance():
    base = scores_to_probabilities(SCORES)
    shifted = scores_to_probabilities({n: s + 123.4 for n, s in SCORES.items()})
    for n in base:
        assert shifted[n] == pytest.approx(base[n], abs=1e-12)


def test_large_scores_do_not_overflow():
    probs = scores_to_probabilities({1: 1000.0, 2: 1001.0})
    assert probs[2] > probs[1]
    assert abs(sum(probs.values()) - 1.0) < 1e-9


def test_order_follows_scores_and_temperature_flattens():
    sharp = scores_to_probabilities(SCORES, temperature=0.5)
    flat = scores_to_probabilities(SCORES, temperature=10.0)
    best = max(SCORES, key=SCORES.get)
    assert sharp[best] == max(sharp.values())
    assert max(flat.values()) < max(sharp.values())


def test_bad_temperature():
    with pytest.raises(InvalidParameterError):
        scores_to_probabilities(SCORES, temperature=0)
    with pytest.raises(InvalidParameterError):
        ProbabilityModel(temperature=-1)


def test_empty_scores():
    assert scores_to_probabilities({}) == {}


def test_sample_distinct_sorted_subset():
    rng = np.random.default_rng(3)
    weights = scores_to_probabilities(SCORES)
    for _ in range(50):
        picks = weighted_sample_without_replacement(weights, 6, rng)
        assert len(picks) == 6
        assert len(set(picks)) == 6
        assert picks == sorted(picks)
        assert set(picks) <= set(weights)


def test_sample_never_exceeds_pool():
    weights = {3: 0.2, 9: 0.5, 40: 0.3}
    assert weighted_sample_without_replacement(weights, 6) == [3, 9, 40]
    assert weighted_sample_without_replacement(weights, 0) == []
    assert weighted_sample_without_replacement({}, 6) == []


def test_sample_takes_the_only_weighted_item_first():
    weights = {1: 1.0, 2: 0.0, 3: 0.0}
    rng = np.random.default_rng(0)
    for _ in range(20):
        assert weighted_sample_without_replacement(weights, 1, rng) == [1]


def test_sample_is_reproducible_with_seed():
    weights = scores_to_probabilities(SCORES)
    a = ProbabilityModel(seed=42).sample_without_replacement(weights)
    b = ProbabilityModel(seed=42).sample_without_replacement(weights)
    assert a == b


def test_sample_rejects_negative_input():
    with pytest.raises(InvalidParameterError):
        weighted_sample_without_replacement({1: -0.5, 2: 1.0}, 1)
    with pytest.raises(InvalidParameterError):
        weighted_sample_without_replacement({1: 1.0}, -1)


def test_sampling_frequency_tracks_weights():
    weights = {1: 0.7, 2: 0.2, 3: 0.1}
    rng = np.random.default_rng(11)
    firsts = [weighted_sample_without_replacement(weights, 1, rng)[0] for _ in range(4000)]
    share = firsts.count(1) / len(firsts)
    assert 0.65 < share < 0.75


def test_non_exposed_excludes_candidates_and_breaks_ties_by_number():
    probs = {n: 0.01 for n in range(1, 46)}
    probs[45] = 0.001
    candidates = {45, 1, 2}
    assert non_exposed_numbers(probs, candidates, 4) == [3, 4, 5, 6]

    probs[44] = 0.0001
    assert non_exposed_numbers(probs, {1}, 3) == [44, 45, 2]
