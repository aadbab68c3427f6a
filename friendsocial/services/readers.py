"""
Read-side collaborators of the scheduling engine.

Defines the interfaces the Scheduling Service depends on and their
SQLAlchemy implementations:
- PreferenceReader: read an ActivityPreference by id
- RosterReader: read a preference's invited-user set
- ActivityDurationResolver: resolve an activity's estimated duration

Each method receives the caller's session so reads share the caller's
transaction.
"""

from datetime import timedelta
from typing import Optional, Protocol, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from friendsocial.exceptions import NotFoundError
from friendsocial.models.activities import Activity, ActivityPreference, PreferenceParticipant


class PreferenceReader(Protocol):
    """Reads activity preferences by id."""

    def get_preference(self, session: Session, preference_id: int) -> Optional[ActivityPreference]:
        """Return the preference, or None if it does not exist."""
        ...


class RosterReader(Protocol):
    """Reads the default roster of a preference."""

    def get_roster(self, session: Session, preference_id: int) -> Sequence[int]:
        """Return the user ids invited by default, in a stable order."""
        ...


class ActivityDurationResolver(Protocol):
    """Resolves how long one occurrence of an activity lasts."""

    def get_estimated_duration(self, session: Session, activity_id: int) -> timedelta:
        """
        Return the activity's estimated duration.

        Raises:
            NotFoundError: If the activity does not exist
        """
        ...


class SQLPreferenceReader:
    """PreferenceReader backed by the user_activity_preferences table."""

    def get_preference(self, session: Session, preference_id: int) -> Optional[ActivityPreference]:
        return session.get(ActivityPreference, preference_id)


class SQLRosterReader:
    """RosterReader backed by the user_activity_preferences_participants table."""

    def get_roster(self, session: Session, preference_id: int) -> Sequence[int]:
        stmt = (
            select(PreferenceParticipant.user_id)
            .where(PreferenceParticipant.user_activity_preference_id == preference_id)
            .order_by(PreferenceParticipant.user_id)
        )
        return list(session.scalars(stmt).all())


class SQLActivityDurationResolver:
    """ActivityDurationResolver backed by activities.estimated_time."""

    def get_estimated_duration(self, session: Session, activity_id: int) -> timedelta:
        stmt = select(Activity.estimated_time).where(Activity.id == activity_id)
        duration = session.scalars(stmt).first()
        if duration is None:
            raise NotFoundError(
                f"Activity {activity_id} not found",
                context={"activity_id": activity_id},
            )
        return duration
