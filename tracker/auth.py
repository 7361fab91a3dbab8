"""Keycode checks guarding privileged event and team operations.

The keycode is the capability: it is supplied with every privileged call
and checked against the stored row each time. Nothing is cached between
requests.
"""

from __future__ import annotations

import hmac
import logging

from sqlmodel import Session

from .database import Event, Team
from .errors import NotFound, Unauthorized

logger = logging.getLogger(__name__)


def keycodes_match(expected: str, candidate: str) -> bool:
    return hmac.compare_digest(expected.encode("utf-8"), candidate.encode("utf-8"))


def authorize_event(session: Session, event_id: int, keycode: str) -> Event:
    """Return the event when ``keycode`` matches it exactly.

    A missing event and a wrong keycode fail the same way so callers cannot
    probe which event ids exist.
    """
    event = session.get(Event, event_id)
    if event is None or not keycodes_match(event.keycode, keycode):
        logger.warning("Rejected keycode for event %s", event_id)
        raise Unauthorized("Invalid event ID or keycode")
    return event


def ensure_team_in_event(session: Session, team_id: int, event: Event) -> Team:
    team = session.get(Team, team_id)
    if team is None or team.event_id != event.id:
        logger.warning("Team %s is not part of event %s", team_id, event.id)
        raise NotFound("Team not found in this event")
    return team
