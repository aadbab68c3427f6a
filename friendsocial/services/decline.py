"""
Series decline handler.

Removes one user's future participations in a recurring series. Past
occurrences, the occurrences themselves and other users' invitations are
left untouched.
"""

import logging
from datetime import datetime

from sqlalchemy import delete, select, and_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from friendsocial.exceptions import NotFoundError, PersistenceError
from friendsocial.models.scheduling import Participation, ScheduledOccurrence

logger = logging.getLogger(__name__)


def decline_series(
    session: Session,
    user_id: int,
    occurrence_id: int,
    now: datetime,
) -> int:
    """
    Delete a user's participations in the future occurrences of a series.

    The series is identified through any one of its occurrences. Repeating
    the call is a no-op.

    Args:
        session: Database session (caller owns the transaction)
        user_id: User declining the series
        occurrence_id: Any occurrence of the series
        now: Occurrences starting at or after this instant count as future

    Returns:
        Number of participations removed

    Raises:
        NotFoundError: If the occurrence does not exist or is ad-hoc
        PersistenceError: If the delete fails
    """
    occurrence = session.get(ScheduledOccurrence, occurrence_id)
    if occurrence is None:
        raise NotFoundError(
            f"Scheduled activity {occurrence_id} not found",
            context={"scheduled_activity_id": occurrence_id},
        )

    preference_id = occurrence.user_activity_preference_id
    if preference_id is None:
        raise NotFoundError(
            f"Scheduled activity {occurrence_id} is not part of a recurring series",
            context={"scheduled_activity_id": occurrence_id},
        )

    future_series = (
        select(ScheduledOccurrence.id)
        .where(
            and_(
                ScheduledOccurrence.user_activity_preference_id == preference_id,
                ScheduledOccurrence.scheduled_at >= now,
            )
        )
    )
    stmt = (
        delete(Participation)
        .where(
            and_(
                Participation.user_id == user_id,
                Participation.scheduled_activity_id.in_(future_series),
            )
        )
        .execution_options(synchronize_session=False)
    )

    try:
        result = session.execute(stmt)
    except SQLAlchemyError as e:
        logger.error(
            f"Declining series {preference_id} for user {user_id} failed: {e}"
        )
        raise PersistenceError(
            f"Failed to delete activity participants: {e}",
            original_error=e,
            context={
                "operation": "decline series",
                "user_id": user_id,
                "scheduled_activity_id": occurrence_id,
                "preference_id": preference_id,
            },
        ) from e

    removed = result.rowcount or 0
    logger.info(
        f"User {user_id} declined series {preference_id}: "
        f"{removed} future invitations removed"
    )
    return removed
