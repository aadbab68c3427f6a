"""
Conflict detection for ad-hoc scheduling.

A candidate window on a date is available when no occurrence already
scheduled on that date overlaps it. Overlap uses half-open intervals:
a window ending at 11:00 does not conflict with one starting at 11:00.
"""

import logging
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Optional, Sequence

from sqlalchemy import select, and_
from sqlalchemy.orm import Session

from friendsocial.models.scheduling import ScheduledOccurrence
from friendsocial.services.readers import ActivityDurationResolver
from friendsocial.services.recurrence import combine

logger = logging.getLogger(__name__)


def windows_overlap(
    a_start: datetime,
    a_end: datetime,
    b_start: datetime,
    b_end: datetime,
) -> bool:
    """
    Check whether two half-open intervals [start, end) overlap.

    Touching boundaries (a_end == b_start) are not an overlap.
    """
    return a_start < b_end and a_end > b_start


def day_bounds(day: date, zone: tzinfo) -> tuple[datetime, datetime]:
    """Start of ``day`` and start of the following day in ``zone``."""
    start = combine(day, time(0, 0), zone)
    end = combine(day + timedelta(days=1), time(0, 0), zone)
    return start, end


def get_occurrences_on_date(
    session: Session,
    day: date,
    zone: tzinfo,
) -> Sequence[ScheduledOccurrence]:
    """
    Get all occurrences starting on a calendar day.

    The day is interpreted in ``zone``. Inactive occurrences are included.

    Args:
        session: Database session
        day: Calendar day
        zone: Timezone the day is expressed in

    Returns:
        Occurrences ordered by start instant
    """
    start, end = day_bounds(day, zone)
    stmt = (
        select(ScheduledOccurrence)
        .where(
            and_(
                ScheduledOccurrence.scheduled_at >= start,
                ScheduledOccurrence.scheduled_at < end,
            )
        )
        .order_by(ScheduledOccurrence.scheduled_at)
    )
    return session.scalars(stmt).all()


def find_conflicts(
    session: Session,
    day: date,
    start_time: time,
    end_time: time,
    zone: tzinfo,
    durations: ActivityDurationResolver,
    existing: Optional[Sequence[ScheduledOccurrence]] = None,
) -> list[ScheduledOccurrence]:
    """
    Find occurrences on ``day`` that overlap the desired window.

    Each existing occurrence's end is its start plus its activity's
    estimated duration, resolved at check time.

    Args:
        session: Database session
        day: Candidate calendar day
        start_time: Desired window start (wall clock in ``zone``)
        end_time: Desired window end (wall clock in ``zone``)
        zone: Timezone of the window
        durations: Resolver for activity durations
        existing: Occurrences to check against (default: loaded for ``day``)

    Returns:
        Conflicting occurrences (empty if the window is free)

    Raises:
        NotFoundError: If an existing occurrence references a missing activity
    """
    desired_start = combine(day, start_time, zone)
    desired_end = combine(day, end_time, zone)

    if existing is None:
        existing = get_occurrences_on_date(session, day, zone)

    conflicts = []
    for occurrence in existing:
        duration = durations.get_estimated_duration(session, occurrence.activity_id)
        occurrence_start = occurrence.scheduled_at
        occurrence_end = occurrence_start + duration

        if windows_overlap(occurrence_start, occurrence_end, desired_start, desired_end):
            conflicts.append(occurrence)

    return conflicts


def is_window_available(
    session: Session,
    day: date,
    start_time: time,
    end_time: time,
    zone: tzinfo,
    durations: ActivityDurationResolver,
) -> bool:
    """
    Check whether the desired window on ``day`` is free.

    Returns:
        True if no existing occurrence overlaps the window
    """
    conflicts = find_conflicts(session, day, start_time, end_time, zone, durations)
    if conflicts:
        logger.debug(
            f"Window {start_time}-{end_time} on {day} conflicts with "
            f"occurrences {[o.id for o in conflicts]}"
        )
        return False
    return True
