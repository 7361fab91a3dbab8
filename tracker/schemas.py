"""Request and response shapes for the tracker API.

Field names follow the public operation surface, including the camelCase
names used by export and cleanup results.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Annotated

from pydantic import AfterValidator
from sqlmodel import Field, SQLModel

from .database import DEFAULT_TEAM_COLOR, MAX_ROW_ID, LocationUpdate

HEX_COLOR_RE = re.compile(r"^#[0-9A-Fa-f]{6}$")


def _check_hex_color(value: str) -> str:
    if not HEX_COLOR_RE.match(value):
        raise ValueError("color must be a hex value such as #3B82F6")
    return value


HexColor = Annotated[str, AfterValidator(_check_hex_color)]


class EventRead(SQLModel):
    id: int
    name: str
    keycode: str
    image_data: str | None = None
    image_mime_type: str | None = None
    logo_data: str | None = None
    logo_mime_type: str | None = None
    organization_name: str | None = None
    expiration_date: date | None = None


class TeamRead(SQLModel):
    id: int
    event_id: int
    name: str
    color: str
    expiration_date: date | None = None


class LocationUpdateRead(SQLModel):
    id: int
    team: str
    event: str
    lat: float
    lon: float
    timestamp: datetime

    @classmethod
    def from_row(cls, row: LocationUpdate) -> "LocationUpdateRead":
        # Coordinates are stored as fixed-precision decimals but exposed as floats.
        return cls(
            id=row.id,
            team=row.team,
            event=row.event,
            lat=float(row.lat),
            lon=float(row.lon),
            timestamp=row.timestamp,
        )


class LoginResponse(SQLModel):
    success: bool = True
    event: EventRead
    teams: list[TeamRead]


class TeamExport(SQLModel):
    id: int
    name: str
    color: str
    expiration_date: date | None = None
    locationCount: int
    locations: list[LocationUpdateRead]


class ExportData(SQLModel):
    event: EventRead
    teams: list[TeamExport]
    startDate: datetime | None = None
    endDate: datetime | None = None


class CleanupResult(SQLModel):
    deletedTeams: int
    deletedEvents: int
    message: str


class CleanupTriggerResult(CleanupResult):
    success: bool = True


class EventCreate(SQLModel):
    name: str = Field(min_length=1, max_length=255)
    organization_name: str | None = Field(default=None, max_length=255)
    image_data: str | None = None
    image_mime_type: str | None = Field(default=None, max_length=100)
    logo_data: str | None = None
    logo_mime_type: str | None = Field(default=None, max_length=100)
    expiration_date: date | None = None


class TeamCreate(SQLModel):
    event_id: int = Field(ge=1, le=MAX_ROW_ID)
    name: str = Field(min_length=1, max_length=255)
    color: HexColor | None = None
    expiration_date: date | None = None


class LocationUpdateCreate(SQLModel):
    team: str
    event: str
    lat: float = Field(ge=-90, le=90)
    lon: float = Field(ge=-180, le=180)
    timestamp: datetime | None = None


class LoginRequest(SQLModel):
    event_name: str
    keycode: str


class ExportRequest(SQLModel):
    keycode: str
    startDate: datetime | None = None
    endDate: datetime | None = None


class EventImageUpdate(SQLModel):
    keycode: str
    image_data: str
    image_mime_type: str = Field(max_length=100)


class EventLogoUpdate(SQLModel):
    keycode: str
    logo_data: str
    logo_mime_type: str = Field(max_length=100)


class OrganizationNameUpdate(SQLModel):
    keycode: str
    organization_name: str = Field(max_length=255)


class TeamColorUpdate(SQLModel):
    event_id: int = Field(ge=1, le=MAX_ROW_ID)
    keycode: str
    color: HexColor


class CleanupRequest(SQLModel):
    secret: str
