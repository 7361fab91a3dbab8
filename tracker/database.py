"""Database models and helpers for events, teams, and location updates."""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Iterator

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy import event as sa_event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Field, Session, SQLModel, create_engine

from .config import DATABASE_URL
from .errors import ConstraintViolation

logger = logging.getLogger(__name__)

DEFAULT_TEAM_COLOR = "#3B82F6"
MAX_ROW_ID = 2**63 - 1


def utc_now() -> datetime:
    """Current time as naive UTC, the form timestamps are stored in."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite ignores ON DELETE CASCADE unless enforcement is switched on per connection.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str | None = None) -> Engine:
    """Create an engine for ``url`` or the configured ``DATABASE_URL``."""
    url = url or DATABASE_URL
    engine_kwargs = {}
    if url.startswith("sqlite"):
        # SQLite needs check_same_thread disabled for FastAPI's threadpool,
        # but passing this flag to other drivers (e.g., psycopg2) raises errors.
        engine_kwargs["connect_args"] = {"check_same_thread": False}
    built = create_engine(url, **engine_kwargs)
    if built.dialect.name == "sqlite":
        sa_event.listen(built, "connect", _enable_sqlite_foreign_keys)
    return built


engine = build_engine()


class Event(SQLModel, table=True):
    __tablename__ = "events"
    __table_args__ = (Index("idx_events_name_keycode", "name", "keycode"),)

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(max_length=255, nullable=False, unique=True)
    keycode: str = Field(max_length=255, nullable=False)
    image_data: str | None = Field(default=None, sa_column=Column(Text))
    image_mime_type: str | None = Field(default=None, max_length=100)
    logo_data: str | None = Field(default=None, sa_column=Column(Text))
    logo_mime_type: str | None = Field(default=None, max_length=100)
    organization_name: str | None = Field(default=None, max_length=255)
    expiration_date: date | None = Field(default=None)


class Team(SQLModel, table=True):
    __tablename__ = "teams"
    __table_args__ = (
        UniqueConstraint("event_id", "name", name="uq_teams_event_id_name"),
        Index("idx_teams_event_id", "event_id"),
    )

    id: int | None = Field(default=None, primary_key=True)
    event_id: int = Field(
        sa_column=Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    )
    name: str = Field(max_length=255, nullable=False)
    color: str = Field(default=DEFAULT_TEAM_COLOR, max_length=7, nullable=False)
    expiration_date: date | None = Field(default=None)


class LocationUpdate(SQLModel, table=True):
    __tablename__ = "location_updates"
    __table_args__ = (Index("idx_location_updates_team", "team"),)

    id: int | None = Field(default=None, primary_key=True)
    team: str = Field(max_length=255, nullable=False)
    event: str = Field(
        sa_column=Column(String(255), ForeignKey("events.name", ondelete="CASCADE"), nullable=False)
    )
    # Resolved from (team, event) on insert; carries the cascade from team deletion.
    team_id: int = Field(
        sa_column=Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    )
    lat: Decimal = Field(sa_column=Column(Numeric(10, 8), nullable=False))
    lon: Decimal = Field(sa_column=Column(Numeric(11, 8), nullable=False))
    timestamp: datetime = Field(
        default_factory=utc_now, sa_column=Column(DateTime(timezone=False), nullable=False)
    )


Index("idx_location_updates_timestamp", LocationUpdate.timestamp.desc())


def init_db(bind: Engine | None = None) -> None:
    """Create tables and indexes if they don't already exist.

    Failures are logged rather than raised so the service still starts; the
    first data operation then reports the underlying connection error.
    """
    try:
        SQLModel.metadata.create_all(bind or engine)
    except SQLAlchemyError:
        logger.exception("Database schema initialization failed")
        return
    logger.info("Database schema initialized")


def get_session() -> Iterator[Session]:
    """Yield a SQLModel session for dependency injection."""
    with Session(engine) as session:
        yield session


def commit_or_raise(session: Session, message: str) -> None:
    """Commit the session, translating integrity failures to ``ConstraintViolation``."""
    try:
        session.commit()
    except IntegrityError as exc:
        session.rollback()
        logger.info("Constraint violation: %s (%s)", message, exc.orig)
        raise ConstraintViolation(message) from exc


def as_utc_naive(value: datetime) -> datetime:
    """Normalize aware datetimes to naive UTC, the form timestamps are stored in."""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value
