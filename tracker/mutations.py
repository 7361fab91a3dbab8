"""Write operations: creation, keycode-gated metadata updates, and cleanup.

createTeam and createLocationUpdate carry no credential on purpose: anyone
holding a team and event name may submit, which keeps field trackers
friction-free.
"""

from __future__ import annotations

import hmac
import logging
from datetime import date, datetime

from sqlmodel import Session, select

from . import config
from .auth import authorize_event, ensure_team_in_event
from .cleanup import sweep_expired
from .database import DEFAULT_TEAM_COLOR, Event, LocationUpdate, Team, as_utc_naive, commit_or_raise, utc_now
from .errors import ConstraintViolation, PayloadTooLarge, Unauthorized
from .keycodes import generate_keycode
from .schemas import CleanupResult, EventRead, LocationUpdateRead, TeamRead

logger = logging.getLogger(__name__)


def _check_media_size(field: str, value: str | None) -> None:
    limit = config.MAX_MEDIA_LENGTH
    if limit and value is not None and len(value) > limit:
        raise PayloadTooLarge(f"{field} exceeds the {limit} character limit")


def create_event(
    session: Session,
    name: str,
    organization_name: str | None = None,
    image_data: str | None = None,
    image_mime_type: str | None = None,
    logo_data: str | None = None,
    logo_mime_type: str | None = None,
    expiration_date: date | None = None,
) -> EventRead:
    """Insert a new event and return it with its freshly generated keycode."""
    _check_media_size("image_data", image_data)
    _check_media_size("logo_data", logo_data)
    event = Event(
        name=name,
        keycode=generate_keycode(),
        organization_name=organization_name,
        image_data=image_data,
        image_mime_type=image_mime_type,
        logo_data=logo_data,
        logo_mime_type=logo_mime_type,
        expiration_date=expiration_date,
    )
    session.add(event)
    commit_or_raise(session, f"An event named '{name}' already exists")
    session.refresh(event)
    logger.info("Created event %s (%s)", event.id, event.name)
    return EventRead.model_validate(event)


def create_team(
    session: Session,
    event_id: int,
    name: str,
    color: str | None = None,
    expiration_date: date | None = None,
) -> TeamRead:
    team = Team(
        event_id=event_id,
        name=name,
        color=color or DEFAULT_TEAM_COLOR,
        expiration_date=expiration_date,
    )
    session.add(team)
    commit_or_raise(session, f"Team '{name}' already exists or event {event_id} does not exist")
    session.refresh(team)
    logger.info("Created team %s (%s) for event %s", team.id, team.name, event_id)
    return TeamRead.model_validate(team)


def create_location_update(
    session: Session,
    team: str,
    event: str,
    lat: float,
    lon: float,
    timestamp: datetime | None = None,
) -> LocationUpdateRead:
    team_id = session.exec(
        select(Team.id).join(Event, Event.id == Team.event_id).where(Team.name == team, Event.name == event)
    ).first()
    if team_id is None:
        raise ConstraintViolation(f"Team '{team}' does not exist in event '{event}'")

    update = LocationUpdate(
        team=team,
        event=event,
        team_id=team_id,
        lat=lat,
        lon=lon,
        timestamp=as_utc_naive(timestamp) if timestamp is not None else utc_now(),
    )
    session.add(update)
    commit_or_raise(session, f"Team '{team}' does not exist in event '{event}'")
    session.refresh(update)
    return LocationUpdateRead.from_row(update)


def _save_event(session: Session, event: Event) -> EventRead:
    session.add(event)
    commit_or_raise(session, f"Event {event.id} could not be updated")
    session.refresh(event)
    return EventRead.model_validate(event)


def update_event_image(
    session: Session, event_id: int, keycode: str, image_data: str, image_mime_type: str
) -> EventRead:
    event = authorize_event(session, event_id, keycode)
    _check_media_size("image_data", image_data)
    event.image_data = image_data
    event.image_mime_type = image_mime_type
    return _save_event(session, event)


def update_event_logo(
    session: Session, event_id: int, keycode: str, logo_data: str, logo_mime_type: str
) -> EventRead:
    event = authorize_event(session, event_id, keycode)
    _check_media_size("logo_data", logo_data)
    event.logo_data = logo_data
    event.logo_mime_type = logo_mime_type
    return _save_event(session, event)


def update_organization_name(
    session: Session, event_id: int, keycode: str, organization_name: str
) -> EventRead:
    event = authorize_event(session, event_id, keycode)
    event.organization_name = organization_name
    return _save_event(session, event)


def update_team_color(session: Session, team_id: int, event_id: int, keycode: str, color: str) -> TeamRead:
    event = authorize_event(session, event_id, keycode)
    team = ensure_team_in_event(session, team_id, event)
    team.color = color
    session.add(team)
    commit_or_raise(session, f"Team {team_id} could not be updated")
    session.refresh(team)
    return TeamRead.model_validate(team)


def cleanup_expired_data(session: Session, secret: str) -> CleanupResult:
    """Run the expiration sweep when ``secret`` matches the operator secret."""
    expected = config.require_cleanup_secret()
    if not hmac.compare_digest(expected.encode("utf-8"), secret.encode("utf-8")):
        logger.warning("Rejected cleanup request with an invalid secret")
        raise Unauthorized("Invalid cleanup secret")

    deleted_teams, deleted_events = sweep_expired(session)
    return CleanupResult(
        deletedTeams=deleted_teams,
        deletedEvents=deleted_events,
        message=f"Cleanup completed: {deleted_teams} teams and {deleted_events} events deleted",
    )
