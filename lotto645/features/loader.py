"""
Raw feed ingestion: CSV files and the raw_draws table.

Rows keep their feed order (newest first) so that cleaning can apply the
first-occurrence rule.
"""
import pandas as pd

from lotto645.config import NUMBERS_PER_DRAW, logger
from lotto645.core.db import get_session, RawDraw
from lotto645.features.dataset import DataPreparer, FRAME_COLUMNS, parse_raw_row

NUMBER_COLUMNS = [f'n{i}' for i in range(1, NUMBERS_PER_DRAW + 1)]


def read_raw_csv(path):
    """
    Read a feed CSV with columns round, n1..n6, bonus

    A missing bonus column or a blank bonus cell is read as 0. Row order is
    preserved.
    """
    df = pd.read_csv(path)
    df.columns = [str(c).strip().lower() for c in df.columns]
    if 'bonus' not in df.columns:
        df['bonus'] = 0
    df['bonus'] = df['bonus'].fillna(0)

    missing = [c for c in FRAME_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Feed CSV {path} is missing columns {missing}")

    rows = df[FRAME_COLUMNS].values.tolist()
    logger.info(f"Read {len(rows)} feed rows from {path}")
    return rows


def load_raw_rows(bind=None):
    """All stored feed rows in insertion order"""
    session = get_session(bind)
    try:
        draws = session.query(RawDraw).order_by(RawDraw.row_id).all()
        return [d.as_row() for d in draws]
    finally:
        session.close()


def insert_raw_rows(rows, bind=None):
    """
    Append feed rows to the raw_draws table, keeping their order

    Rows that are not eight integers are skipped with a warning. Placeholder
    and out-of-range rows are stored as given; cleaning deals with them.
    Returns the number of rows stored.
    """
    session = get_session(bind)
    try:
        count = 0
        skipped = 0
        for row in rows:
            try:
                rnd, numbers, bonus = parse_raw_row(row)
            except (TypeError, ValueError) as e:
                skipped += 1
                logger.warning(f"Not storing malformed feed row {row!r}: {e}")
                continue
            session.add(RawDraw(
                round_number=rnd,
                bonus=bonus,
                **dict(zip(NUMBER_COLUMNS, numbers))
            ))
            count += 1
        session.commit()
        logger.info(f"Inserted {count} feed rows ({skipped} skipped)")
        return count
    except Exception as e:
        session.rollback()
        logger.error(f"Error inserting feed rows: {e}")
        raise
    finally:
        session.close()


def load_dataset(bind=None, preparer=None):
    """Load the stored feed and clean it"""
    preparer = preparer or DataPreparer()
    return preparer.prepare(load_raw_rows(bind))
