"""
Import a draw feed CSV into the database.

Usage:
    python import_draws.py data/feed.csv
    python import_draws.py data/feed.csv --replace

The CSV needs columns round, n1..n6, bonus, newest round first. Placeholder
rounds (all zeros) are kept as they are; cleaning happens when boards are
computed.
"""
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from lotto645.core.db import init_db, get_session, RawDraw
from lotto645.core.errors import EmptyDatasetError
from lotto645.features.dataset import DataPreparer
from lotto645.features.loader import read_raw_csv, insert_raw_rows, load_raw_rows
from lotto645.config import logger


def clear_raw_draws():
    session = get_session()
    try:
        deleted = session.query(RawDraw).delete()
        session.commit()
        logger.info(f"Removed {deleted} stored feed rows")
    except Exception as e:
        session.rollback()
        logger.error(f"Error clearing feed rows: {e}")
        raise
    finally:
        session.close()


def main():
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)

    path = sys.argv[1]
    init_db()

    rows = read_raw_csv(path)
    if '--replace' in sys.argv[2:]:
        clear_raw_draws()
    n = insert_raw_rows(rows)
    print(f"✅ Imported {n} rows from {path}")
    if n < len(rows):
        print(f"❌ Skipped {len(rows) - n} malformed rows (see log)")

    try:
        dataset = DataPreparer().prepare(load_raw_rows())
    except EmptyDatasetError as e:
        print(f"⚠️  Stored feed has no drawn rounds yet: {e}")
        return

    summary = dataset.summary()
    print(f"📊 Draws: {summary['n_draws']} "
          f"(rounds {summary['round_min']}-{summary['round_max']})")
    print(f"⏳ Placeholder rounds: {summary['placeholder_rounds'] or 'none'}")
    if summary['rejected_rows']:
        print(f"❌ Rejected rows: {summary['rejected_rows']}")
    if summary['missing_rounds']:
        print(f"⚠️  Missing rounds inside range: {summary['missing_rounds']}")


if __name__ == "__main__":
    main()
