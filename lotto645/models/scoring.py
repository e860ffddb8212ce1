"""
Multi-factor candidate scoring.

score[n] = w1 * deficit + w2 * gap + w3 * [n in previous draw]
           + w4 * [n next to a previous-draw number]

deficit is the shortfall of the windowed count below the uniform
expectation, gap is the rounds since the number was last drawn relative to
the window size. The top k numbers are then post-processed so that every
band of BANDS is represented and no last digit appears more than
MAX_PER_ENDING times.
"""
from collections import Counter, namedtuple
from dataclasses import dataclass, asdict

import numpy as np

from lotto645.config import (
    VALID_NUMBERS, NUMBERS_PER_DRAW, MAX_NUMBER, BANDS, MAX_PER_ENDING,
    DEFAULT_WEIGHTS, K_MIN, K_MAX
)
from lotto645.core.errors import InvalidParameterError
from lotto645.features.frequency import last_seen_rounds, previous_draw_sets


@dataclass(frozen=True)
class Weights:
    w1: float
    w2: float
    w3: float
    w4: float

    @classmethod
    def from_dict(cls, d):
        return cls(float(d['w1']), float(d['w2']), float(d['w3']), float(d['w4']))

    def as_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class PostOptions:
    range_coverage: bool = True
    ending_diversity: bool = True
    normalize: bool = True


ScoringResult = namedtuple('ScoringResult', ['candidates', 'scores', 'ranked'])


def z_normalize(values):
    """Population z-score; a flat vector keeps std 1"""
    arr = np.asarray(values, dtype=float)
    if arr.size == 0:
        return arr
    std = arr.std()
    if std < 1e-12:
        std = 1.0
    return (arr - arr.mean()) / std


def rank_numbers(scores):
    """Numbers by descending score, ties by ascending number"""
    return sorted(scores, key=lambda n: (-scores[n], n))


def _band_of(n):
    for lo, hi in BANDS:
        if lo <= n <= hi:
            return lo, hi
    return None


def _in_band(n, band):
    return band[0] <= n <= band[1]


def _band_covered(cand, band):
    return any(_in_band(n, band) for n in cand)


def _eviction_order(numbers, scores):
    # lowest score first, lower number first on ties
    return sorted(numbers, key=lambda n: (scores[n], n))


class CandidateScorer:
    """Scores all numbers for a target round and selects k candidates"""

    def __init__(self, dataset):
        self.dataset = dataset

    def score(self, counts, target_round, total_rounds, k,
              weights=None, post=None):
        if not (K_MIN <= k <= K_MAX):
            raise InvalidParameterError(f"k must be in [{K_MIN}, {K_MAX}], got {k}")
        if total_rounds < 1:
            raise InvalidParameterError(f"total_rounds must be >= 1, got {total_rounds}")

        if weights is None:
            weights = Weights.from_dict(DEFAULT_WEIGHTS)
        elif isinstance(weights, dict):
            weights = Weights.from_dict(weights)
        if post is None:
            post = PostOptions()

        scores = self.score_map(counts, target_round, total_rounds, weights, post.normalize)
        ranked = rank_numbers(scores)

        cand = set(ranked[:k])
        if post.range_coverage:
            self._cover_ranges(cand, ranked, scores, k)
        if post.ending_diversity:
            self._diversify_endings(cand, ranked, scores, k, post.range_coverage)

        return ScoringResult(frozenset(cand), scores, tuple(ranked))

    def score_map(self, counts, target_round, total_rounds, weights, normalize=True):
        # the target round's own outcome is never an input
        end = target_round - 1
        prev_set, prev_adj = previous_draw_sets(self.dataset, target_round)
        last_seen = last_seen_rounds(self.dataset, end)

        target_avg = total_rounds * NUMBERS_PER_DRAW / MAX_NUMBER
        deficit = np.array([target_avg - counts.get(n, 0) for n in VALID_NUMBERS], dtype=float)
        gap = np.array([
            (end - last_seen[n]) if last_seen[n] is not None else total_rounds
            for n in VALID_NUMBERS
        ], dtype=float) / total_rounds

        if normalize:
            deficit = z_normalize(deficit)
            gap = z_normalize(gap)

        in_prev = np.array([n in prev_set for n in VALID_NUMBERS], dtype=float)
        in_adj = np.array([n in prev_adj for n in VALID_NUMBERS], dtype=float)

        total = (weights.w1 * deficit + weights.w2 * gap
                 + weights.w3 * in_prev + weights.w4 * in_adj)
        return {n: float(s) for n, s in zip(VALID_NUMBERS, total)}

    @staticmethod
    def _cover_ranges(cand, ranked, scores, k):
        for band in BANDS:
            if _band_covered(cand, band):
                continue
            add = next((n for n in ranked if _in_band(n, band) and n not in cand), None)
            if add is None:
                continue
            cand.add(add)
            if len(cand) <= k:
                continue

            # never empty another band while making room
            evictable = [
                n for n in cand
                if not _in_band(n, band)
                and sum(1 for m in cand if _band_of(m) == _band_of(n)) > 1
            ]
            if evictable:
                cand.discard(_eviction_order(evictable, scores)[0])

    @staticmethod
    def _diversify_endings(cand, ranked, scores, k, keep_bands):
        groups = {}
        for n in cand:
            groups.setdefault(n % 10, []).append(n)
        for members in groups.values():
            excess = len(members) - MAX_PER_ENDING
            if excess > 0:
                for n in _eviction_order(members, scores)[:excess]:
                    cand.discard(n)

        if len(cand) >= k:
            return

        endings = Counter(n % 10 for n in cand)

        def can_add(n):
            return n not in cand and endings[n % 10] < MAX_PER_ENDING

        def add(n):
            cand.add(n)
            endings[n % 10] += 1

        if keep_bands:
            for band in BANDS:
                if len(cand) < k and not _band_covered(cand, band):
                    pick = next((n for n in ranked if _in_band(n, band) and can_add(n)), None)
                    if pick is not None:
                        add(pick)

        for n in ranked:
            if len(cand) >= k:
                break
            if can_add(n):
                add(n)
