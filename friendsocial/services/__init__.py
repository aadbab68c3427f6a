"""
Service layer for FriendSocial.

Provides the scheduling engine:
- Recurrence expansion of activity preferences
- Conflict detection for ad-hoc scheduling
- Atomic occurrence and invitation writes
- Series decline
- Participation management
"""

from friendsocial.services.recurrence import (
    DEFAULT_HORIZON_MONTHS,
    expand_preference,
    load_timezone,
    parse_calendar_date,
    parse_time_of_day,
    parse_weekdays,
    should_schedule,
)

from friendsocial.services.readers import (
    ActivityDurationResolver,
    PreferenceReader,
    RosterReader,
    SQLActivityDurationResolver,
    SQLPreferenceReader,
    SQLRosterReader,
)

from friendsocial.services.conflicts import (
    find_conflicts,
    get_occurrences_on_date,
    is_window_available,
    windows_overlap,
)

from friendsocial.services.occurrence_writer import write_adhoc, write_series
from friendsocial.services.decline import decline_series
from friendsocial.services.scheduling_service import SchedulingService, UPDATABLE_FIELDS
from friendsocial.services.participants import ParticipationService, parse_invite_status

__all__ = [
    # Recurrence
    "DEFAULT_HORIZON_MONTHS",
    "expand_preference",
    "load_timezone",
    "parse_calendar_date",
    "parse_time_of_day",
    "parse_weekdays",
    "should_schedule",
    # Readers
    "ActivityDurationResolver",
    "PreferenceReader",
    "RosterReader",
    "SQLActivityDurationResolver",
    "SQLPreferenceReader",
    "SQLRosterReader",
    # Conflicts
    "find_conflicts",
    "get_occurrences_on_date",
    "is_window_available",
    "windows_overlap",
    # Writers
    "write_adhoc",
    "write_series",
    "decline_series",
    # Services
    "SchedulingService",
    "UPDATABLE_FIELDS",
    "ParticipationService",
    "parse_invite_status",
]
