"""SQLAlchemy ORM model definitions."""

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    String,
    Enum as SqlEnum,
)

from wealthtrack.repositories.sqlalchemy.database import Base
from wealthtrack.domain.models.enums import TransactionKind


class TransactionORM(Base):
    """SQLAlchemy model for Transaction (ledger entry)."""

    __tablename__ = "transactions"

    txn_id = Column(String(36), primary_key=True)
    instrument_id = Column(String(32), nullable=False, index=True)
    occurred_at = Column(Date, nullable=False)
    kind = Column(SqlEnum(TransactionKind), nullable=False)
    quantity = Column(Float, nullable=False)
    unit_price = Column(Float, nullable=False)
    commission = Column(Float, default=0.0, nullable=False)
    is_cash = Column(Boolean, default=False, nullable=False)
    category = Column(String(64), nullable=False)


class PriceSnapshotORM(Base):
    """SQLAlchemy model for a cached PriceSnapshot (one row per instrument)."""

    __tablename__ = "price_snapshots"

    instrument_id = Column(String(32), primary_key=True)
    price = Column(Float, nullable=False)
    as_of_utc = Column(DateTime, nullable=False)
    source = Column(String(64), nullable=False)
    change = Column(Float, nullable=True)
    change_percent = Column(Float, nullable=True)
