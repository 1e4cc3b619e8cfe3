"""SQLAlchemy implementation of PriceStore."""

from typing import Callable, Mapping, Optional

import pytz
from sqlalchemy.orm import Session

from wealthtrack.domain.models import PriceSnapshot
from wealthtrack.repositories.sqlalchemy.orm_models import PriceSnapshotORM


class SqlAlchemyPriceStore:
    """
    Persistent price snapshot store; timestamps are kept as naive UTC.

    Opens a short-lived session per operation so one store can back a
    process-wide price cache shared by request threads.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    def get(self, instrument_id: str) -> Optional[PriceSnapshot]:
        with self._session_factory() as db:
            row = db.get(PriceSnapshotORM, instrument_id)
            return self._to_domain(row) if row else None

    def put_many(self, snapshots: Mapping[str, PriceSnapshot]) -> None:
        # One commit for the whole batch
        with self._session_factory() as db:
            try:
                for instrument_id, snapshot in snapshots.items():
                    db.merge(
                        PriceSnapshotORM(
                            instrument_id=instrument_id,
                            price=snapshot.price,
                            as_of_utc=self._to_naive_utc(snapshot),
                            source=snapshot.source,
                            change=snapshot.change,
                            change_percent=snapshot.change_percent,
                        )
                    )
                db.commit()
            except Exception:
                db.rollback()
                raise

    def clear(self) -> None:
        with self._session_factory() as db:
            db.query(PriceSnapshotORM).delete()
            db.commit()

    @staticmethod
    def _to_naive_utc(snapshot: PriceSnapshot):
        as_of = snapshot.as_of
        if as_of.tzinfo is not None:
            as_of = as_of.astimezone(pytz.utc)
        return as_of.replace(tzinfo=None)

    @staticmethod
    def _to_domain(orm: PriceSnapshotORM) -> PriceSnapshot:
        """Convert ORM snapshot to domain model."""
        return PriceSnapshot(
            instrument_id=orm.instrument_id,
            price=float(orm.price),
            as_of=pytz.utc.localize(orm.as_of_utc),
            source=orm.source,
            change=orm.change,
            change_percent=orm.change_percent,
        )
