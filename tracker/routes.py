from __future__ import annotations

import hmac
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Header, Path, Query
from sqlmodel import Session

from . import mutations, queries
from .config import require_cleanup_secret
from .database import MAX_ROW_ID, get_session
from .errors import NotFound, Unauthorized
from .schemas import (
    CleanupRequest,
    CleanupResult,
    CleanupTriggerResult,
    EventCreate,
    EventImageUpdate,
    EventLogoUpdate,
    EventRead,
    ExportData,
    ExportRequest,
    LocationUpdateCreate,
    LocationUpdateRead,
    LoginRequest,
    LoginResponse,
    OrganizationNameUpdate,
    TeamColorUpdate,
    TeamCreate,
    TeamRead,
)

router = APIRouter(prefix="/api")

logger = logging.getLogger(__name__)

RowId = Annotated[int, Path(ge=1, le=MAX_ROW_ID)]


@router.get("/events/by-name/{event_name}", response_model=EventRead, name="event_by_name")
def event_by_name(event_name: str, session: Session = Depends(get_session)):
    event = queries.get_event_by_name(session, event_name)
    if event is None:
        raise NotFound("Event not found")
    return event


@router.get("/events/{event_id}", response_model=EventRead, name="event")
def event_detail(event_id: RowId, session: Session = Depends(get_session)):
    event = queries.get_event(session, event_id)
    if event is None:
        raise NotFound("Event not found")
    return event


@router.get("/events/{event_id}/teams", response_model=list[TeamRead], name="teams")
def event_teams(event_id: RowId, session: Session = Depends(get_session)):
    return queries.list_teams(session, event_id)


@router.post("/login", response_model=LoginResponse, name="login")
def login(payload: LoginRequest, session: Session = Depends(get_session)):
    return queries.login(session, payload.event_name, payload.keycode)


@router.get("/updates", response_model=list[LocationUpdateRead], name="updates")
def updates(
    team: str,
    limit: int | None = Query(default=None, ge=1, le=MAX_ROW_ID),
    session: Session = Depends(get_session),
):
    return queries.recent_updates(session, team, limit)


@router.get("/teams/{team_id}/updates", response_model=list[LocationUpdateRead], name="team_updates")
def team_updates(team_id: RowId, session: Session = Depends(get_session)):
    return queries.team_updates(session, team_id)


@router.post("/events/{event_id}/export", response_model=ExportData, name="export_event_data")
def export_event_data(event_id: RowId, payload: ExportRequest, session: Session = Depends(get_session)):
    return queries.export_event_data(session, event_id, payload.keycode, payload.startDate, payload.endDate)


@router.post("/events", response_model=EventRead, name="create_event")
def create_event(payload: EventCreate, session: Session = Depends(get_session)):
    return mutations.create_event(session, **payload.model_dump())


@router.post("/teams", response_model=TeamRead, name="create_team")
def create_team(payload: TeamCreate, session: Session = Depends(get_session)):
    return mutations.create_team(session, **payload.model_dump())


@router.post("/updates", response_model=LocationUpdateRead, name="create_location_update")
def create_location_update(payload: LocationUpdateCreate, session: Session = Depends(get_session)):
    return mutations.create_location_update(session, **payload.model_dump())


@router.put("/events/{event_id}/image", response_model=EventRead, name="update_event_image")
def update_event_image(event_id: RowId, payload: EventImageUpdate, session: Session = Depends(get_session)):
    return mutations.update_event_image(
        session, event_id, payload.keycode, payload.image_data, payload.image_mime_type
    )


@router.put("/events/{event_id}/logo", response_model=EventRead, name="update_event_logo")
def update_event_logo(event_id: RowId, payload: EventLogoUpdate, session: Session = Depends(get_session)):
    return mutations.update_event_logo(session, event_id, payload.keycode, payload.logo_data, payload.logo_mime_type)


@router.put("/events/{event_id}/organization", response_model=EventRead, name="update_organization_name")
def update_organization_name(
    event_id: RowId, payload: OrganizationNameUpdate, session: Session = Depends(get_session)
):
    return mutations.update_organization_name(session, event_id, payload.keycode, payload.organization_name)


@router.put("/teams/{team_id}/color", response_model=TeamRead, name="update_team_color")
def update_team_color(team_id: RowId, payload: TeamColorUpdate, session: Session = Depends(get_session)):
    return mutations.update_team_color(session, team_id, payload.event_id, payload.keycode, payload.color)


@router.post("/cleanup/run", response_model=CleanupResult, name="cleanup_expired_data")
def cleanup_expired_data(payload: CleanupRequest, session: Session = Depends(get_session)):
    return mutations.cleanup_expired_data(session, payload.secret)


@router.api_route(
    "/cleanup",
    methods=["GET", "POST"],
    response_model=CleanupTriggerResult,
    name="scheduled_cleanup",
)
def scheduled_cleanup(
    authorization: str | None = Header(default=None),
    session: Session = Depends(get_session),
):
    """Entry point for the cron scheduler and manual runs (``Authorization: Bearer <secret>``)."""
    secret = require_cleanup_secret()
    expected = f"Bearer {secret}".encode("utf-8")
    if not authorization or not hmac.compare_digest(authorization.encode("utf-8"), expected):
        raise Unauthorized("Unauthorized")

    result = mutations.cleanup_expired_data(session, secret)
    logger.info("Scheduled cleanup completed: %s", result.message)
    return CleanupTriggerResult(**result.model_dump())
