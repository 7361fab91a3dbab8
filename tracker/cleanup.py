"""Expiration sweep for events and teams.

An entity is live while its ``expiration_date`` is empty or not yet past;
an expiration date equal to today is still live. Scheduling is left to an
external trigger (see ``routes.scheduled_cleanup``).
"""

from __future__ import annotations

import logging
from datetime import date

from sqlalchemy import delete
from sqlmodel import Session, col

from .database import Event, Team

logger = logging.getLogger(__name__)


def sweep_expired(session: Session, today: date | None = None) -> tuple[int, int]:
    """Delete expired teams, then expired events, returning both counts.

    The two predicates are independent. Teams removed by the event cascade
    are not included in the team count.
    """
    today = today or date.today()
    team_result = session.exec(
        delete(Team).where(col(Team.expiration_date) < today).execution_options(synchronize_session=False)
    )
    event_result = session.exec(
        delete(Event).where(col(Event.expiration_date) < today).execution_options(synchronize_session=False)
    )
    deleted_teams = team_result.rowcount or 0
    deleted_events = event_result.rowcount or 0
    session.commit()

    logger.info("Expiration sweep for %s removed %s teams and %s events", today, deleted_teams, deleted_events)
    return deleted_teams, deleted_events
