"""
Shared fixtures: a seeded synthetic 6/45 feed, newest round first.
"""
import os

# keep test runs away from the real database file
os.environ.setdefault("LOTTO645_DB_URL", "sqlite://")
os.environ.setdefault("LOTTO645_LOG_LEVEL", "WARNING")

import numpy as np
import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from lotto645.core.board import BoardService
from lotto645.core.db import init_db
from lotto645.features.dataset import DataPreparer
from lotto645.models.probability import ProbabilityModel

PLACEHOLDER = [0, 0, 0, 0, 0, 0, 0]


def make_feed(n_rounds=120, seed=7, placeholder_rounds=(121,), skip_rounds=()):
    """Rows [round, n1..n6, bonus] for rounds 1..n_rounds, newest first"""
    rng = np.random.default_rng(seed)
    rows = []
    for rnd in range(1, n_rounds + 1):
        picks = rng.choice(np.arange(1, 46), size=7, replace=False)
        if rnd in skip_rounds:
            continue
        rows.append([rnd, *sorted(int(x) for x in picks[:6]), int(picks[6])])
    rows.reverse()
    placeholders = [[r, *PLACEHOLDER] for r in sorted(placeholder_rounds, reverse=True)]
    return placeholders + rows


@pytest.fixture
def raw_feed():
    return make_feed()


@pytest.fixture
def dataset(raw_feed):
    return DataPreparer().prepare(raw_feed)


@pytest.fixture
def board_service(dataset):
    return BoardService(dataset, probability_model=ProbabilityModel(seed=1),
                        auto_tune=False, strict=False)


@pytest.fixture
def engine():
    eng = create_engine("sqlite://", poolclass=StaticPool,
                        connect_args={"check_same_thread": False})
    init_db(eng)
    return eng
