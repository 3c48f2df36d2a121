"""SQLAlchemy-backed observation store (SQLite by default, Postgres in deployment).

Timestamps are written as naive UTC so SQLite and Postgres compare them the
same way; they are made timezone-aware again on the way out.
"""

from __future__ import annotations

import datetime as dt
from typing import List, Optional

from sqlalchemy import BigInteger, DateTime, Float, Index, Integer, String, create_engine, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column
from sqlalchemy.pool import StaticPool

from weathermon.models import Observation
from weathermon.observation_store.base import ObservationStore
from utils.logging_utils import get_tagged_logger, mask_url

logger = get_tagged_logger(__name__, tag="observation_store/sql")


class Base(DeclarativeBase):
    pass


class ObservationRow(Base):
    """One persisted observation."""

    __tablename__ = "observations"
    __table_args__ = (Index("ix_observations_location_recorded_at", "location", "recorded_at"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    location: Mapped[str] = mapped_column(String(64), nullable=False)
    condition: Mapped[str] = mapped_column(String(64), nullable=False)
    temperature: Mapped[float] = mapped_column(Float, nullable=False)
    feels_like: Mapped[float] = mapped_column(Float, nullable=False)
    humidity: Mapped[float] = mapped_column(Float, nullable=False)
    wind_speed: Mapped[float] = mapped_column(Float, nullable=False)
    observed_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    recorded_at: Mapped[dt.datetime] = mapped_column(DateTime, nullable=False)

    def to_observation(self) -> Observation:
        return Observation(
            location=self.location,
            condition=self.condition,
            temperature=self.temperature,
            feels_like=self.feels_like,
            humidity=self.humidity,
            wind_speed=self.wind_speed,
            observed_at=self.observed_at,
        )


def _naive_utc(value: dt.datetime) -> dt.datetime:
    if value.tzinfo is None:
        raise ValueError("timestamps passed to the store must be timezone-aware")
    return value.astimezone(dt.timezone.utc).replace(tzinfo=None)


class SqlObservationStore(ObservationStore):
    """Observations in a single `observations` table."""

    def __init__(self, engine: Engine) -> None:
        """Bind to an engine; the table must already exist (see `create_schema`)."""
        self.engine = engine

    @classmethod
    def from_url(cls, database_url: str, *, create_schema: bool = True) -> "SqlObservationStore":
        """Create an engine from a URL, optionally creating the table."""
        kwargs = {}
        if database_url.startswith("sqlite"):
            # the poller thread and API worker threads share the engine
            kwargs["connect_args"] = {"check_same_thread": False}
            if database_url in ("sqlite://", "sqlite:///:memory:"):
                kwargs["poolclass"] = StaticPool
        engine = create_engine(database_url, **kwargs)
        logger.info("Using SQL observation store", extra={"db_url": mask_url(database_url)})
        store = cls(engine)
        if create_schema:
            store.create_schema()
        return store

    def create_schema(self) -> None:
        Base.metadata.create_all(self.engine)

    def save(self, observation: Observation) -> None:
        row = ObservationRow(
            location=observation.location,
            condition=observation.condition,
            temperature=observation.temperature,
            feels_like=observation.feels_like,
            humidity=observation.humidity,
            wind_speed=observation.wind_speed,
            observed_at=observation.observed_at,
            recorded_at=_naive_utc(observation.recorded_at),
        )
        with Session(self.engine) as session, session.begin():
            session.add(row)

    def latest(self, location: str) -> Optional[Observation]:
        query = (
            select(ObservationRow)
            .where(ObservationRow.location == location)
            .order_by(ObservationRow.observed_at.desc(), ObservationRow.id.desc())
            .limit(1)
        )
        with Session(self.engine) as session:
            row = session.scalars(query).first()
            return row.to_observation() if row else None

    def between(self, location: str, start: dt.datetime, end: dt.datetime) -> List[Observation]:
        query = (
            select(ObservationRow)
            .where(
                ObservationRow.location == location,
                ObservationRow.recorded_at >= _naive_utc(start),
                ObservationRow.recorded_at <= _naive_utc(end),
            )
            .order_by(ObservationRow.recorded_at, ObservationRow.id)
        )
        logger.debug("Querying observations for %s between %s and %s", location, start, end)
        with Session(self.engine) as session:
            return [row.to_observation() for row in session.scalars(query)]
