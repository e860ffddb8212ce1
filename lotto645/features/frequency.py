"""
Windowed frequency and recency signals.

Everything here reads the dataset strictly up to a given end round; rounds
after it are never looked up.
"""
from lotto645.config import (
    MIN_NUMBER, MAX_NUMBER, VALID_NUMBERS, BONUS_WEIGHT
)


def window_bounds(end_round, total_rounds):
    """Inclusive (start, end) of the window of total_rounds ending at end_round"""
    return end_round - total_rounds + 1, end_round


class FrequencyAggregator:
    """Weighted occurrence counts over a closed window of rounds"""

    def __init__(self, dataset):
        self.dataset = dataset

    def aggregate(self, end_round, total_rounds):
        """
        Count each number over rounds [end_round - total_rounds + 1, end_round]

        Main numbers add 1, the bonus adds BONUS_WEIGHT. Rounds missing from
        the dataset (before its first round, gaps) add nothing.
        """
        start, end = window_bounds(end_round, total_rounds)
        counts = {n: 0 for n in VALID_NUMBERS}

        lo = max(start, self.dataset.round_min)
        hi = min(end, self.dataset.round_max)
        for rnd in range(lo, hi + 1):
            draw = self.dataset.get(rnd)
            if draw is None:
                continue
            for n in draw.numbers:
                counts[n] += 1
            if draw.has_bonus:
                counts[draw.bonus] += BONUS_WEIGHT

        return counts


def last_seen_rounds(dataset, end):
    """Most recent round <= end in which each number appeared (main or bonus)"""
    last_seen = {n: None for n in VALID_NUMBERS}
    missing = len(last_seen)

    for rnd in range(min(end, dataset.round_max), dataset.round_min - 1, -1):
        draw = dataset.get(rnd)
        if draw is None:
            continue
        for n in draw.numbers:
            if last_seen[n] is None:
                last_seen[n] = rnd
                missing -= 1
        if draw.has_bonus and last_seen[draw.bonus] is None:
            last_seen[draw.bonus] = rnd
            missing -= 1
        if missing == 0:
            break

    return last_seen


def previous_draw_sets(dataset, target_round):
    """Main numbers of the round before target_round and their +-1 neighbours"""
    prev = dataset.get(target_round - 1)
    prev_set = frozenset(prev.numbers) if prev is not None else frozenset()

    prev_adj = set()
    for n in prev_set:
        if n > MIN_NUMBER:
            prev_adj.add(n - 1)
        if n < MAX_NUMBER:
            prev_adj.add(n + 1)

    return prev_set, frozenset(prev_adj)
