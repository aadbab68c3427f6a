"""
Scheduling service - orchestrates the scheduling engine.

Composes the recurrence calculator, duration resolver, conflict detector,
occurrence writer and series decline handler into the public operations:
- Ad-hoc multi-date creation (with conflict detection)
- Recurring series creation (atomic occurrences + invitations)
- Series decline
- Single occurrence CRUD

Only the ad-hoc path checks for overlaps; recurring series are written
without conflict detection.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Mapping, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from friendsocial.exceptions import NotFoundError, ValidationError
from friendsocial.models.activities import Activity, ActivityPreference
from friendsocial.models.scheduling import ScheduledOccurrence
from friendsocial.services.base import TransactionalService
from friendsocial.services.conflicts import is_window_available
from friendsocial.services.decline import decline_series
from friendsocial.services.occurrence_writer import write_adhoc, write_series
from friendsocial.services.readers import (
    ActivityDurationResolver,
    PreferenceReader,
    RosterReader,
    SQLActivityDurationResolver,
    SQLPreferenceReader,
    SQLRosterReader,
)
from friendsocial.services.recurrence import (
    DEFAULT_HORIZON_MONTHS,
    combine,
    expand_preference,
    load_timezone,
    parse_calendar_date,
    parse_time_of_day,
)

logger = logging.getLogger(__name__)

# Fields a direct update may touch; anything else is rejected
UPDATABLE_FIELDS = frozenset({"activity_id", "is_active", "scheduled_at"})


def _require_aware(value: Any, field: str) -> datetime:
    if not isinstance(value, datetime) or value.tzinfo is None:
        raise ValidationError(
            f"{field} must be a timezone-aware datetime",
            context={field: value},
        )
    return value


class SchedulingService(TransactionalService):
    """
    Scheduling engine entry point.

    Collaborators are injected at construction; the SQL-backed readers are
    used when none are given.

    Args:
        session_factory: Factory for new sessions
        preferences: Reads activity preferences by id
        rosters: Reads a preference's invited users
        durations: Resolves activity durations for overlap checks
        clock: Returns "now"; injectable for tests
        serialize_writes: Serialize mutating calls with a process-local lock
        horizon_months: How far ahead recurring series are expanded
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        preferences: Optional[PreferenceReader] = None,
        rosters: Optional[RosterReader] = None,
        durations: Optional[ActivityDurationResolver] = None,
        clock: Optional[Callable[[], datetime]] = None,
        serialize_writes: bool = False,
        horizon_months: int = DEFAULT_HORIZON_MONTHS,
    ):
        super().__init__(session_factory, clock=clock, serialize_writes=serialize_writes)
        self._preferences = preferences or SQLPreferenceReader()
        self._rosters = rosters or SQLRosterReader()
        self._durations = durations or SQLActivityDurationResolver()
        self._horizon_months = horizon_months

    def _require_activity(self, session: Session, activity_id: int) -> None:
        if session.get(Activity, activity_id) is None:
            raise NotFoundError(
                f"Activity {activity_id} not found",
                context={"activity_id": activity_id},
            )

    def _require_preference(self, session: Session, preference_id: int) -> ActivityPreference:
        preference = self._preferences.get_preference(session, preference_id)
        if preference is None:
            raise NotFoundError(
                f"Activity preference {preference_id} not found",
                context={"preference_id": preference_id},
            )
        return preference

    # =========================================================================
    # Creation
    # =========================================================================

    def create_occurrence(
        self,
        activity_id: int,
        scheduled_at: datetime,
        is_active: bool = True,
        preference_id: Optional[int] = None,
    ) -> ScheduledOccurrence:
        """
        Persist a single occurrence.

        Raises:
            ValidationError: If scheduled_at is naive
            NotFoundError: If the activity or the given preference does not exist
            PersistenceError: If the insert fails
        """
        _require_aware(scheduled_at, "scheduled_at")

        with self._transaction(
            "insert scheduled activity",
            activity_id=activity_id,
            scheduled_at=scheduled_at,
            preference_id=preference_id,
        ) as session:
            self._require_activity(session, activity_id)
            if preference_id is not None:
                self._require_preference(session, preference_id)
            occurrence = ScheduledOccurrence(
                activity_id=activity_id,
                is_active=is_active,
                scheduled_at=scheduled_at,
                user_activity_preference_id=preference_id,
            )
            session.add(occurrence)
            session.flush()

        logger.info(f"Created scheduled activity {occurrence.id} for activity {activity_id}")
        return occurrence

    def create_multiple(
        self,
        activity_id: int,
        selected_dates: Sequence[str],
        start_time: str,
        end_time: str,
        time_zone: str,
    ) -> list[ScheduledOccurrence]:
        """
        Create ad-hoc occurrences on several dates.

        Each date resolves to ``start_time`` in ``time_zone``. Dates whose
        start is already past and dates whose window overlaps an existing
        occurrence are skipped, not reported as errors. The whole batch is
        committed in one transaction.

        Args:
            activity_id: Activity being scheduled
            selected_dates: Calendar dates ('YYYY-MM-DD')
            start_time: Window start (RFC 3339 timestamp or 'HH:MM')
            end_time: Window end (RFC 3339 timestamp or 'HH:MM')
            time_zone: IANA timezone of the window

        Returns:
            Created occurrences in input order

        Raises:
            ValidationError: If the window, timezone or any date is malformed
            NotFoundError: If the activity does not exist
            PersistenceError: If the batch could not be written
        """
        zone = load_timezone(time_zone)
        window_start = parse_time_of_day(start_time)
        window_end = parse_time_of_day(end_time)
        if window_end <= window_start:
            raise ValidationError(
                f"End time {end_time!r} must be after start time {start_time!r}",
                context={"start_time": start_time, "end_time": end_time},
            )
        days = [parse_calendar_date(value) for value in selected_dates]

        created: list[ScheduledOccurrence] = []
        with self._transaction(
            "create scheduled activities",
            activity_id=activity_id,
            selected_dates=list(selected_dates),
            time_zone=time_zone,
        ) as session:
            self._require_activity(session, activity_id)
            now = self._now()

            for day in days:
                scheduled_at = combine(day, window_start, zone)

                if scheduled_at < now:
                    logger.info(f"Skipping {day}: start {scheduled_at.isoformat()} is in the past")
                    continue

                if not is_window_available(
                    session, day, window_start, window_end, zone, self._durations
                ):
                    logger.info(
                        f"Skipping {day}: {window_start}-{window_end} {time_zone} "
                        f"conflicts with an existing activity"
                    )
                    continue

                created.extend(write_adhoc(session, activity_id, [scheduled_at]))

        logger.info(
            f"Created {len(created)} of {len(days)} requested scheduled activities "
            f"for activity {activity_id}"
        )
        return created

    def create_recurring_series(
        self,
        preference_id: int,
        start_time: str,
        time_zone: str,
    ) -> list[ScheduledOccurrence]:
        """
        Expand a preference into a series and invite its roster.

        Occurrences cover the horizon from now; every roster member gets a
        Pending invitation to every occurrence. Either everything is
        committed or nothing is.

        Raises:
            NotFoundError: If the preference does not exist
            ValidationError: If the preference, time or timezone is malformed
            PersistenceError: If the series could not be written
        """
        with self._transaction(
            "create recurring scheduled activities",
            preference_id=preference_id,
            start_time=start_time,
            time_zone=time_zone,
        ) as session:
            preference = self._require_preference(session, preference_id)

            instants = expand_preference(
                preference,
                start_time,
                time_zone,
                now=self._now(),
                horizon_months=self._horizon_months,
            )
            roster = self._rosters.get_roster(session, preference.id)
            occurrences = write_series(session, preference, instants, roster)

        return occurrences

    # =========================================================================
    # Series decline
    # =========================================================================

    def decline_series(self, user_id: int, occurrence_id: int) -> int:
        """
        Remove a user's future participations in an occurrence's series.

        Idempotent: a repeated call removes nothing and does not fail.

        Returns:
            Number of participations removed

        Raises:
            NotFoundError: If the occurrence is missing or not part of a series
            PersistenceError: If the delete fails
        """
        with self._transaction(
            "decline recurring activity",
            user_id=user_id,
            scheduled_activity_id=occurrence_id,
        ) as session:
            return decline_series(session, user_id, occurrence_id, self._now())

    # =========================================================================
    # Single occurrence CRUD
    # =========================================================================

    def read(self, occurrence_id: int) -> Optional[ScheduledOccurrence]:
        """Get an occurrence by id, or None."""
        with self._transaction("read scheduled activity", writes=False, id=occurrence_id) as session:
            return session.get(ScheduledOccurrence, occurrence_id)

    def read_all(self, active: Optional[bool] = None) -> list[ScheduledOccurrence]:
        """
        List occurrences ordered by start.

        Args:
            active: Filter by the active flag (None = all)
        """
        stmt = select(ScheduledOccurrence).order_by(
            ScheduledOccurrence.scheduled_at, ScheduledOccurrence.id
        )
        if active is not None:
            stmt = stmt.where(ScheduledOccurrence.is_active.is_(active))

        with self._transaction("read scheduled activities", writes=False, active=active) as session:
            return list(session.scalars(stmt).all())

    def get_active(self) -> list[ScheduledOccurrence]:
        return self.read_all(active=True)

    def get_inactive(self) -> list[ScheduledOccurrence]:
        return self.read_all(active=False)

    def update(
        self,
        occurrence_id: int,
        changes: Mapping[str, Any],
    ) -> Optional[ScheduledOccurrence]:
        """
        Apply a partial update to an occurrence.

        Only activity_id, is_active and scheduled_at can change.

        Returns:
            Updated occurrence, or None if no occurrence matched

        Raises:
            ValidationError: If a field is not updatable or a value is malformed
            NotFoundError: If the new activity does not exist
        """
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(
                f"Fields cannot be updated: {sorted(unknown)}",
                context={"fields": sorted(unknown)},
            )
        if "scheduled_at" in changes:
            _require_aware(changes["scheduled_at"], "scheduled_at")
        if "is_active" in changes and not isinstance(changes["is_active"], bool):
            raise ValidationError("is_active must be a boolean", context={"is_active": changes["is_active"]})

        with self._transaction(
            "update scheduled activity", id=occurrence_id, changes=dict(changes)
        ) as session:
            occurrence = session.get(ScheduledOccurrence, occurrence_id)
            if occurrence is None:
                return None

            if "activity_id" in changes:
                self._require_activity(session, changes["activity_id"])

            for field in UPDATABLE_FIELDS & set(changes):
                setattr(occurrence, field, changes[field])
            session.flush()

        return occurrence

    def deactivate(self, occurrence_id: int) -> bool:
        """Mark an occurrence inactive. Returns False if it does not exist."""
        return self.update(occurrence_id, {"is_active": False}) is not None

    def delete(self, occurrence_id: int) -> bool:
        """
        Delete an occurrence and its participations.

        Returns:
            True if deleted, False if no occurrence matched
        """
        with self._transaction("delete scheduled activity", id=occurrence_id) as session:
            occurrence = session.get(ScheduledOccurrence, occurrence_id)
            if occurrence is None:
                return False
            session.delete(occurrence)

        logger.info(f"Deleted scheduled activity {occurrence_id}")
        return True
