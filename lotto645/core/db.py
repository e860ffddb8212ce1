"""
Database layer using SQLAlchemy for safer access
"""
from sqlalchemy import create_engine, Column, Integer, String, Float
from sqlalchemy.orm import declarative_base, sessionmaker
from lotto645.config import DB_URL, NUMBERS_PER_DRAW, logger

Base = declarative_base()


class RawDraw(Base):
    """
    One row of the raw feed, stored exactly as received.

    Rounds are not unique here: the feed may repeat a round or carry an
    all-zero placeholder, and row_id keeps the feed order for cleaning.
    """
    __tablename__ = 'raw_draws'

    row_id = Column(Integer, primary_key=True, autoincrement=True)
    round_number = Column(Integer, nullable=False, index=True)
    n1 = Column(Integer, default=0)
    n2 = Column(Integer, default=0)
    n3 = Column(Integer, default=0)
    n4 = Column(Integer, default=0)
    n5 = Column(Integer, default=0)
    n6 = Column(Integer, default=0)
    bonus = Column(Integer, default=0)

    def get_numbers(self):
        return [getattr(self, f'n{i}') for i in range(1, NUMBERS_PER_DRAW + 1)]

    def as_row(self):
        return [self.round_number, *self.get_numbers(), self.bonus]


class TunedWeight(Base):
    __tablename__ = 'tuned_weights'

    weight_id = Column(Integer, primary_key=True, autoincrement=True)
    updated_at = Column(String, nullable=False)
    k = Column(Integer, nullable=False, index=True)
    w1 = Column(Float, nullable=False)
    w2 = Column(Float, nullable=False)
    w3 = Column(Float, nullable=False)
    w4 = Column(Float, nullable=False)
    target_hits = Column(Integer)
    total_rounds = Column(Integer)
    avg_hits = Column(Float)
    p_ge_target = Column(Float)
    p_ge_target_minus1 = Column(Float)
    tested = Column(Integer, default=0)


def make_engine(url=None):
    return create_engine(url or DB_URL, echo=False)


# Database engine and session
engine = make_engine()
SessionLocal = sessionmaker(bind=engine)


def init_db(bind=None):
    """Initialize database tables"""
    try:
        Base.metadata.create_all(bind or engine)
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise


def get_session(bind=None):
    """Get database session"""
    if bind is None:
        return SessionLocal()
    return sessionmaker(bind=bind)()
