"""
Occurrence writer.

Persists occurrences and, for recurring series, their Pending participant
invitations. Both entry points write inside the caller's transaction and
flush before returning, so ids are assigned and constraint violations
surface here. On failure a PersistenceError is raised; the caller's
transaction scope rolls everything back, leaving no partial series.
"""

import logging
from datetime import datetime
from typing import Iterable, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from friendsocial.exceptions import PersistenceError
from friendsocial.models.activities import ActivityPreference
from friendsocial.models.scheduling import InviteStatus, Participation, ScheduledOccurrence

logger = logging.getLogger(__name__)


def _flush(session: Session, operation: str, context: dict) -> None:
    try:
        session.flush()
    except SQLAlchemyError as e:
        logger.error(f"{operation} failed: {e} (inputs: {context})")
        raise PersistenceError(
            f"Failed to {operation}: {e}",
            original_error=e,
            context={"operation": operation, **context},
        ) from e


def write_adhoc(
    session: Session,
    activity_id: int,
    instants: Iterable[datetime],
) -> list[ScheduledOccurrence]:
    """
    Insert one active, ad-hoc occurrence per instant.

    No participants are created; callers invite users separately.

    Args:
        session: Database session (caller owns the transaction)
        activity_id: Activity being scheduled
        instants: Start instants

    Returns:
        Created occurrences with ids assigned

    Raises:
        PersistenceError: If the insert fails
    """
    occurrences = [
        ScheduledOccurrence(
            activity_id=activity_id,
            is_active=True,
            scheduled_at=instant,
            user_activity_preference_id=None,
        )
        for instant in instants
    ]
    session.add_all(occurrences)
    _flush(
        session,
        "insert scheduled activities",
        {"activity_id": activity_id, "count": len(occurrences)},
    )
    return occurrences


def write_series(
    session: Session,
    preference: ActivityPreference,
    instants: Iterable[datetime],
    roster: Sequence[int],
) -> list[ScheduledOccurrence]:
    """
    Insert a recurring series and fan out Pending invitations.

    Creates one occurrence per instant tagged with the preference id, then
    one Pending participation per (occurrence, roster member) pair.

    Args:
        session: Database session (caller owns the transaction)
        preference: Originating preference
        instants: Start instants from the recurrence calculator
        roster: User ids invited by default

    Returns:
        Created occurrences with ids assigned

    Raises:
        PersistenceError: If any occurrence or participation insert fails
    """
    occurrences = [
        ScheduledOccurrence(
            activity_id=preference.activity_id,
            is_active=True,
            scheduled_at=instant,
            user_activity_preference_id=preference.id,
        )
        for instant in instants
    ]
    session.add_all(occurrences)
    _flush(
        session,
        "insert scheduled activities",
        {"preference_id": preference.id, "count": len(occurrences)},
    )

    participations = [
        Participation(
            user_id=user_id,
            scheduled_activity_id=occurrence.id,
            invite_status=InviteStatus.PENDING.value,
        )
        for occurrence in occurrences
        for user_id in roster
    ]
    session.add_all(participations)
    _flush(
        session,
        "insert activity participants",
        {
            "preference_id": preference.id,
            "occurrences": len(occurrences),
            "roster": list(roster),
        },
    )

    logger.info(
        f"Wrote series for preference {preference.id}: "
        f"{len(occurrences)} occurrences, {len(participations)} invitations"
    )
    return occurrences
