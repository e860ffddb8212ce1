"""
Draw-history cleaning for the 6/45 feed.

The raw feed arrives newest-first as rows of ``[round, n1..n6, bonus]``.
Cleaning drops placeholder rounds (all seven values zero, i.e. not yet
drawn), keeps the first occurrence of a repeated round and rejects rows
that are not a valid draw. The result is an immutable ``CleanedDataset``
that every other component receives explicitly.
"""
from dataclasses import dataclass
import numbers as _numbers

import pandas as pd

from lotto645.config import MIN_NUMBER, MAX_NUMBER, NUMBERS_PER_DRAW, logger
from lotto645.core.errors import EmptyDatasetError, RoundNotFoundError

RAW_ROW_LENGTH = NUMBERS_PER_DRAW + 2
FRAME_COLUMNS = ['round'] + [f'n{i}' for i in range(1, NUMBERS_PER_DRAW + 1)] + ['bonus']


@dataclass(frozen=True)
class DrawRecord:
    round: int
    numbers: tuple
    bonus: int

    @property
    def has_bonus(self):
        return MIN_NUMBER <= self.bonus <= MAX_NUMBER

    def as_row(self):
        return [self.round, *self.numbers, self.bonus]


def _to_int(value):
    if isinstance(value, bool):
        raise ValueError(f"Not a draw value: {value!r}")
    if isinstance(value, _numbers.Integral):
        return int(value)
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        return int(value.strip())
    # numpy scalars and friends
    as_float = float(value)
    if not as_float.is_integer():
        raise ValueError(f"Not a draw value: {value!r}")
    return int(as_float)


def parse_raw_row(row):
    """Split a raw ``[round, n1..n6, bonus]`` row into (round, numbers, bonus)"""
    values = list(row)
    if len(values) != RAW_ROW_LENGTH:
        raise ValueError(f"Expected {RAW_ROW_LENGTH} values, got {len(values)}")
    values = [_to_int(v) for v in values]
    return values[0], tuple(values[1:NUMBERS_PER_DRAW + 1]), values[-1]


def is_placeholder(numbers, bonus):
    """A round with no recorded outcome has every value set to zero"""
    return bonus == 0 and all(n == 0 for n in numbers)


def validate_draw(numbers, bonus):
    """Return a reason string when (numbers, bonus) is not a valid draw"""
    if any(not (MIN_NUMBER <= n <= MAX_NUMBER) for n in numbers):
        return f"main number out of range {numbers}"
    if len(set(numbers)) != NUMBERS_PER_DRAW:
        return f"duplicate main numbers {numbers}"
    if bonus != 0 and not (MIN_NUMBER <= bonus <= MAX_NUMBER):
        return f"bonus out of range {bonus}"
    return None


class CleanedDataset:
    """One record per round, placeholders excluded, read-only after build"""

    def __init__(self, records, placeholder_rounds=(), rejected_rows=0):
        self._records = tuple(records)
        if not self._records:
            raise EmptyDatasetError("No valid draws after cleaning")

        self._by_round = {r.round: r for r in self._records}
        if len(self._by_round) != len(self._records):
            raise ValueError("Round numbers must be unique in a cleaned dataset")

        self.placeholder_rounds = frozenset(placeholder_rounds)
        self.max_placeholder_round = (max(self.placeholder_rounds)
                                      if self.placeholder_rounds else None)
        self.rejected_rows = rejected_rows
        self.round_min = min(self._by_round)
        self.round_max = max(self._by_round)

    def __len__(self):
        return len(self._records)

    def __iter__(self):
        return iter(self._records)

    def __contains__(self, round_number):
        return round_number in self._by_round

    def get(self, round_number):
        return self._by_round.get(round_number)

    def get_draw(self, round_number):
        record = self._by_round.get(round_number)
        if record is None:
            raise RoundNotFoundError(round_number)
        return record

    def rounds_ascending(self):
        return sorted(self._by_round)

    @property
    def predictable_max(self):
        """Highest round a board may target: next round or last placeholder"""
        last_placeholder = (self.max_placeholder_round
                            if self.max_placeholder_round is not None
                            else self.round_max)
        return max(self.round_max + 1, last_placeholder)

    def is_predicted_round(self, round_number):
        return (round_number in self.placeholder_rounds
                or round_number == self.round_max + 1)

    def to_frame(self):
        """Draws as a DataFrame, ascending by round"""
        df = pd.DataFrame([r.as_row() for r in self._records], columns=FRAME_COLUMNS)
        return df.sort_values('round').reset_index(drop=True)

    def summary(self):
        return {
            'n_draws': len(self),
            'round_min': self.round_min,
            'round_max': self.round_max,
            'placeholder_rounds': sorted(self.placeholder_rounds),
            'max_placeholder_round': self.max_placeholder_round,
            'rejected_rows': self.rejected_rows,
            'missing_rounds': (self.round_max - self.round_min + 1) - len(self),
        }


def clean_rows(raw_rows):
    """Build a CleanedDataset from raw feed rows (newest first)"""
    n_rows = 0
    rejected = 0
    placeholder_rounds = set()
    seen = set()
    records = []
    for row in raw_rows:
        n_rows += 1
        try:
            rnd, nums, bonus = parse_raw_row(row)
        except (TypeError, ValueError) as e:
            rejected += 1
            logger.warning(f"Skipping malformed feed row {row!r}: {e}")
            continue

        if is_placeholder(nums, bonus):
            placeholder_rounds.add(rnd)
            continue
        if rnd in seen:
            logger.debug(f"Round {rnd} repeated in feed, keeping the newest row")
            continue

        # the newest row decides the round, even when it is invalid
        seen.add(rnd)
        problem = validate_draw(nums, bonus)
        if problem:
            rejected += 1
            logger.warning(f"Skipping round {rnd}: {problem}; older rows for it are ignored")
            continue
        records.append(DrawRecord(rnd, nums, bonus))

    if not records:
        raise EmptyDatasetError(
            f"Feed of {n_rows} rows has no drawn round "
            f"({len(placeholder_rounds)} placeholders, {rejected} rejected)"
        )

    return CleanedDataset(records, placeholder_rounds, rejected)


class DataPreparer:
    """
    Cleans a raw feed once and hands back the same dataset afterwards.

    The cache is keyed on the feed object itself, so preparing a freshly
    loaded feed rebuilds the dataset while repeated calls are no-ops.
    """

    def __init__(self):
        self._source = None
        self._dataset = None

    def prepare(self, raw_rows):
        if self._dataset is not None and raw_rows is self._source:
            logger.debug("Dataset already prepared, reusing cache")
            return self._dataset

        dataset = clean_rows(raw_rows)
        self._source = raw_rows
        self._dataset = dataset

        logger.info(f"Prepared {len(dataset)} draws "
                    f"(rounds {dataset.round_min}-{dataset.round_max}, "
                    f"{len(dataset.placeholder_rounds)} placeholders, "
                    f"{dataset.rejected_rows} rejected)")
        return dataset

    @property
    def dataset(self):
        return self._dataset

    def reset(self):
        self._source = None
        self._dataset = None
