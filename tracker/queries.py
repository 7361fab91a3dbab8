"""Read-only lookups over events, teams, and location history."""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime

from sqlmodel import Session, col, select

from . import config
from .auth import authorize_event
from .database import Event, LocationUpdate, Team, as_utc_naive
from .errors import InvalidCredentials, NotFound
from .schemas import EventRead, ExportData, LocationUpdateRead, LoginResponse, TeamExport, TeamRead

TEAM_UPDATES_LIMIT = 100


def _teams_for_event(session: Session, event_id: int) -> list[Team]:
    return list(session.exec(select(Team).where(Team.event_id == event_id).order_by(Team.name)).all())


def get_event(session: Session, event_id: int) -> EventRead | None:
    event = session.get(Event, event_id)
    if event is None:
        return None
    return EventRead.model_validate(event)


def get_event_by_name(session: Session, event_name: str) -> EventRead | None:
    """Public lookup used for branding; the keycode is always blanked."""
    event = session.exec(select(Event).where(Event.name == event_name)).first()
    if event is None:
        return None
    public = EventRead.model_validate(event)
    public.keycode = ""
    return public


def list_teams(session: Session, event_id: int) -> list[TeamRead]:
    return [TeamRead.model_validate(team) for team in _teams_for_event(session, event_id)]


def login(session: Session, event_name: str, keycode: str) -> LoginResponse:
    event = session.exec(select(Event).where(Event.name == event_name, Event.keycode == keycode)).first()
    if event is None:
        raise InvalidCredentials("Invalid event name or keycode")
    return LoginResponse(
        success=True,
        event=EventRead.model_validate(event),
        teams=list_teams(session, event.id),
    )


def recent_updates(session: Session, team: str, limit: int | None = None) -> list[LocationUpdateRead]:
    """Most recent updates submitted under ``team``, newest first."""
    if limit is None:
        limit = config.DEFAULT_UPDATES_LIMIT
    statement = (
        select(LocationUpdate)
        .where(LocationUpdate.team == team)
        .order_by(col(LocationUpdate.timestamp).desc(), col(LocationUpdate.id).desc())
        .limit(limit)
    )
    return [LocationUpdateRead.from_row(row) for row in session.exec(statement)]


def team_updates(session: Session, team_id: int) -> list[LocationUpdateRead]:
    if session.get(Team, team_id) is None:
        raise NotFound("Team not found")
    statement = (
        select(LocationUpdate)
        .where(LocationUpdate.team_id == team_id)
        .order_by(col(LocationUpdate.timestamp).desc(), col(LocationUpdate.id).desc())
        .limit(TEAM_UPDATES_LIMIT)
    )
    return [LocationUpdateRead.from_row(row) for row in session.exec(statement)]


def export_event_data(
    session: Session,
    event_id: int,
    keycode: str,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
) -> ExportData:
    """Return every team of the event with its location history, oldest first.

    Either bound may be omitted; both are inclusive. All teams are read with a
    single query and regrouped, so the cost stays flat as teams are added.
    """
    event = authorize_event(session, event_id, keycode)
    teams = _teams_for_event(session, event.id)

    grouped: dict[int, list[LocationUpdateRead]] = defaultdict(list)
    if teams:
        statement = select(LocationUpdate).where(col(LocationUpdate.team_id).in_([team.id for team in teams]))
        if start_date is not None:
            statement = statement.where(LocationUpdate.timestamp >= as_utc_naive(start_date))
        if end_date is not None:
            statement = statement.where(LocationUpdate.timestamp <= as_utc_naive(end_date))
        statement = statement.order_by(col(LocationUpdate.timestamp).asc(), col(LocationUpdate.id).asc())
        for row in session.exec(statement):
            grouped[row.team_id].append(LocationUpdateRead.from_row(row))

    exports = [
        TeamExport(
            id=team.id,
            name=team.name,
            color=team.color,
            expiration_date=team.expiration_date,
            locationCount=len(grouped[team.id]),
            locations=grouped[team.id],
        )
        for team in teams
    ]
    return ExportData(
        event=EventRead.model_validate(event),
        teams=exports,
        startDate=start_date,
        endDate=end_date,
    )
