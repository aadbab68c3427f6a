"""
Recurrence expansion service.

Turns an ActivityPreference's frequency rule into concrete start instants:
- Walks every calendar day from "now" to the horizon (6 months by default)
- Keeps days whose weekday is in the preference's weekday set
- Keeps every N-th period, counted in fixed-size buckets from "now"

Month buckets are a fixed 730 hours (about 30.4 days), not calendar months.

Uses python-dateutil for time parsing, timezone lookup and month arithmetic.
"""

import re
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Iterable, Iterator, Optional

from dateutil import tz
from dateutil.parser import isoparse
from dateutil.relativedelta import relativedelta

from friendsocial.exceptions import ValidationError
from friendsocial.models.activities import ActivityPreference, FrequencyPeriod

DEFAULT_HORIZON_MONTHS = 6

HOURS_PER_DAY = 24
HOURS_PER_WEEK = 168
HOURS_PER_MONTH = 730  # average month, rounded

# Bare wall-clock time: H:MM, HH:MM or HH:MM:SS
BARE_TIME = re.compile(r"(\d{1,2}):(\d{2})(?::(\d{2}))?")

# Stored weekday numbering: 0 = Sunday ... 6 = Saturday
WEEKDAY_NAMES = {
    "sunday": 0, "sun": 0,
    "monday": 1, "mon": 1,
    "tuesday": 2, "tue": 2,
    "wednesday": 3, "wed": 3,
    "thursday": 4, "thu": 4,
    "friday": 5, "fri": 5,
    "saturday": 6, "sat": 6,
}


def weekday_number(day: date) -> int:
    """Weekday of ``day`` in stored numbering (0 = Sunday)."""
    return day.isoweekday() % 7


def parse_weekdays(tokens: Iterable[str]) -> frozenset[int]:
    """
    Parse weekday tokens into a set of weekday numbers.

    Accepts integers 0-6 (0 = Sunday) and English day names or their
    three-letter abbreviations, case-insensitive.

    Args:
        tokens: Raw tokens (e.g. ['1', '3'] or ['Mon', 'wednesday'])

    Returns:
        Non-empty frozenset of weekday numbers

    Raises:
        ValidationError: If a token is malformed or the set is empty
    """
    days = set()
    for raw in tokens:
        token = str(raw).strip().lower()
        if token in WEEKDAY_NAMES:
            days.add(WEEKDAY_NAMES[token])
            continue
        try:
            number = int(token)
        except ValueError:
            raise ValidationError(
                f"Invalid day of week: '{raw}'",
                context={"token": raw},
            )
        if not 0 <= number <= 6:
            raise ValidationError(
                f"Day of week out of range (0-6): {number}",
                context={"token": raw},
            )
        days.add(number)

    if not days:
        raise ValidationError("At least one day of week is required")

    return frozenset(days)


def parse_time_of_day(value: str) -> time:
    """
    Parse a time of day.

    Accepts an RFC 3339 timestamp (only its wall-clock hour, minute and
    second are kept) or a bare 'HH:MM[:SS]'.

    Raises:
        ValidationError: If the value cannot be parsed
    """
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"Invalid time format: {value!r}", context={"time": value})

    text = value.strip()
    match = BARE_TIME.fullmatch(text)
    try:
        if match:
            hour, minute, second = match.groups()
            return time(int(hour), int(minute), int(second or 0))

        # A timestamp must carry a time part after its YYYY-MM-DD date
        if len(text) > 10 and text[10] in "Tt ":
            parsed = isoparse(text)
            return time(parsed.hour, parsed.minute, parsed.second)
    except (ValueError, OverflowError) as e:
        raise ValidationError(
            f"Invalid time format: {value!r}",
            original_error=e,
            context={"time": value},
        )

    raise ValidationError(f"Invalid time format: {value!r}", context={"time": value})


def load_timezone(name: str) -> tzinfo:
    """
    Resolve an IANA timezone identifier.

    Raises:
        ValidationError: If the identifier is empty or unknown
    """
    # gettz('') silently returns the local zone
    if not isinstance(name, str) or not name.strip():
        raise ValidationError(f"Invalid time zone: {name!r}", context={"time_zone": name})

    zone = tz.gettz(name.strip())
    if zone is None:
        raise ValidationError(f"Invalid time zone: {name!r}", context={"time_zone": name})
    return zone


def combine(day: date, time_of_day: time, zone: tzinfo) -> datetime:
    """Resolve a calendar day and wall-clock time in ``zone`` to an aware instant."""
    return datetime(
        day.year, day.month, day.day,
        time_of_day.hour, time_of_day.minute, time_of_day.second,
        tzinfo=zone,
    )


def elapsed_periods(day_offset: int, period: str) -> int:
    """
    Whole periods elapsed ``day_offset`` days after the start of the walk.

    Weeks are 7-day buckets; months are fixed 730-hour buckets.
    """
    hours = day_offset * HOURS_PER_DAY
    if period == FrequencyPeriod.WEEK.value:
        return hours // HOURS_PER_WEEK
    if period == FrequencyPeriod.MONTH.value:
        return hours // HOURS_PER_MONTH
    raise ValidationError(f"Unknown frequency period: {period!r}", context={"frequency_period": period})


def should_schedule(day_offset: int, frequency: int, period: str) -> bool:
    """Check whether a day falls in a scheduled period (every N-th)."""
    return elapsed_periods(day_offset, period) % frequency == 0


def validate_frequency(frequency: int, period: str) -> None:
    """
    Validate a preference's frequency rule.

    Raises:
        ValidationError: If frequency is not a positive integer or period is unknown
    """
    if isinstance(frequency, bool) or not isinstance(frequency, int) or frequency < 1:
        raise ValidationError(
            f"Frequency must be a positive integer, got {frequency!r}",
            context={"frequency": frequency},
        )

    valid_periods = {p.value for p in FrequencyPeriod}
    if period not in valid_periods:
        raise ValidationError(
            f"Frequency period must be one of {sorted(valid_periods)}, got {period!r}",
            context={"frequency_period": period},
        )


def _walk(
    now: datetime,
    horizon_end: datetime,
    weekdays: frozenset[int],
    frequency: int,
    period: str,
    time_of_day: time,
    zone: tzinfo,
) -> Iterator[datetime]:
    day_offset = 0
    current = now
    while current < horizon_end:
        day = current.date()
        if weekday_number(day) in weekdays and should_schedule(day_offset, frequency, period):
            yield combine(day, time_of_day, zone)
        day_offset += 1
        current = now + timedelta(days=day_offset)


def expand_preference(
    preference: ActivityPreference,
    start_time: str,
    time_zone: str,
    now: Optional[datetime] = None,
    horizon_months: int = DEFAULT_HORIZON_MONTHS,
) -> Iterator[datetime]:
    """
    Expand a preference into candidate start instants.

    All inputs are validated before this returns, so malformed input fails
    before any day is walked. The returned iterator is ordered and finite
    and can only be consumed once.

    Args:
        preference: Preference carrying frequency, period and weekday set
        start_time: Time of day (RFC 3339 timestamp or 'HH:MM[:SS]')
        time_zone: IANA timezone the time of day is expressed in
        now: Start of the walk (default: current time)
        horizon_months: Calendar months to walk ahead

    Returns:
        Iterator of timezone-aware datetimes

    Raises:
        ValidationError: If any input is malformed
    """
    zone = load_timezone(time_zone)
    time_of_day = parse_time_of_day(start_time)
    weekdays = parse_weekdays(preference.weekday_tokens)
    validate_frequency(preference.frequency, preference.frequency_period)

    if now is None:
        now = datetime.now(zone)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=zone)
    else:
        now = now.astimezone(zone)

    horizon_end = now + relativedelta(months=horizon_months)

    return _walk(
        now,
        horizon_end,
        weekdays,
        preference.frequency,
        preference.frequency_period,
        time_of_day,
        zone,
    )


def parse_calendar_date(value: str) -> date:
    """
    Parse a 'YYYY-MM-DD' calendar date.

    Raises:
        ValidationError: If the value is not a valid ISO date
    """
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError as e:
        raise ValidationError(
            f"Invalid date format: {value!r}",
            original_error=e,
            context={"date": value},
        )
