"""
Unit tests for the recurrence service.

Tests weekday/time/timezone parsing and preference expansion.
"""

import pytest
from datetime import date, datetime, time, timedelta, timezone

from dateutil.relativedelta import relativedelta

from friendsocial.exceptions import ValidationError
from friendsocial.models.activities import ActivityPreference
from friendsocial.services.recurrence import (
    elapsed_periods,
    expand_preference,
    load_timezone,
    parse_calendar_date,
    parse_time_of_day,
    parse_weekdays,
    should_schedule,
    weekday_number,
)

MONDAY = datetime(2024, 6, 3, 8, 0, tzinfo=timezone.utc)


def make_preference(frequency=1, period="week", days="1") -> ActivityPreference:
    return ActivityPreference(
        user_id=1,
        activity_id=1,
        frequency=frequency,
        frequency_period=period,
        days_of_week=days,
    )


class TestParseWeekdays:
    """Test parse_weekdays function."""

    def test_numeric_tokens(self):
        assert parse_weekdays(["1", "3", "5"]) == {1, 3, 5}

    def test_sunday_is_zero(self):
        assert parse_weekdays(["0", "6"]) == {0, 6}

    def test_day_names_case_insensitive(self):
        assert parse_weekdays(["Mon", "wednesday", " SUN "]) == {1, 3, 0}

    def test_duplicates_collapse(self):
        assert parse_weekdays(["1", "monday", "1"]) == {1}

    @pytest.mark.parametrize("token", ["7", "-1", "Funday", "1.5"])
    def test_invalid_token_raises(self, token):
        with pytest.raises(ValidationError):
            parse_weekdays([token])

    def test_empty_set_raises(self):
        with pytest.raises(ValidationError, match="At least one day"):
            parse_weekdays([])


class TestParseTimeOfDay:
    """Test parse_time_of_day function."""

    def test_rfc3339_keeps_wall_clock_only(self):
        """Only hour/minute/second of a full timestamp are used."""
        assert parse_time_of_day("2024-06-10T18:30:00Z") == time(18, 30)
        assert parse_time_of_day("1999-01-01T18:30:15+05:00") == time(18, 30, 15)

    def test_bare_time(self):
        assert parse_time_of_day("14:30") == time(14, 30)
        assert parse_time_of_day("9:05:30") == time(9, 5, 30)

    @pytest.mark.parametrize(
        "value",
        ["", "   ", "not a time", None, "june", "monday", "5", "2024-06-10", "25:00", "14:30 pm"],
    )
    def test_invalid_raises(self, value):
        with pytest.raises(ValidationError):
            parse_time_of_day(value)


class TestLoadTimezone:
    """Test load_timezone function."""

    def test_known_zone(self):
        zone = load_timezone("Europe/Berlin")
        summer = datetime(2024, 6, 10, 12, 0, tzinfo=zone)
        assert summer.utcoffset() == timedelta(hours=2)

    def test_utc(self):
        zone = load_timezone("UTC")
        assert datetime(2024, 1, 1, tzinfo=zone).utcoffset() == timedelta(0)

    @pytest.mark.parametrize("name", ["Mars/Olympus_Mons", "", "  ", None])
    def test_unknown_zone_raises(self, name):
        with pytest.raises(ValidationError, match="Invalid time zone"):
            load_timezone(name)


class TestParseCalendarDate:

    def test_iso_date(self):
        assert parse_calendar_date("2024-06-10") == date(2024, 6, 10)

    @pytest.mark.parametrize("value", ["10/06/2024", "2024-13-01", "tomorrow"])
    def test_invalid_raises(self, value):
        with pytest.raises(ValidationError, match="Invalid date"):
            parse_calendar_date(value)


class TestPeriodBuckets:
    """Test fixed-size week and month buckets."""

    def test_weekday_number_sunday_zero(self):
        assert weekday_number(date(2024, 6, 2)) == 0  # Sunday
        assert weekday_number(date(2024, 6, 3)) == 1  # Monday
        assert weekday_number(date(2024, 6, 8)) == 6  # Saturday

    def test_week_buckets(self):
        assert elapsed_periods(0, "week") == 0
        assert elapsed_periods(6, "week") == 0
        assert elapsed_periods(7, "week") == 1
        assert elapsed_periods(14, "week") == 2

    def test_month_buckets_are_730_hours(self):
        """Month buckets are ~30.4 days, not calendar months."""
        assert elapsed_periods(30, "month") == 0  # 720h
        assert elapsed_periods(31, "month") == 1  # 744h
        assert elapsed_periods(60, "month") == 1  # 1440h
        assert elapsed_periods(61, "month") == 2  # 1464h

    def test_unknown_period_raises(self):
        with pytest.raises(ValidationError):
            elapsed_periods(3, "fortnight")

    def test_should_schedule_every_other_week(self):
        assert should_schedule(0, 2, "week") is True
        assert should_schedule(7, 2, "week") is False
        assert should_schedule(14, 2, "week") is True


class TestExpandPreference:
    """Test expand_preference function."""

    def test_every_second_monday(self):
        """First occurrence is today's Monday; the next one is 14 days later."""
        instants = list(expand_preference(
            make_preference(frequency=2, days="1"), "18:00", "UTC", now=MONDAY
        ))

        assert instants[0] == datetime(2024, 6, 3, 18, 0, tzinfo=timezone.utc)
        assert instants[1] == datetime(2024, 6, 17, 18, 0, tzinfo=timezone.utc)
        assert instants[1] - instants[0] == timedelta(days=14)

    @pytest.mark.parametrize("frequency", [1, 2, 3])
    def test_same_weekday_spacing_is_n_weeks(self, frequency):
        instants = list(expand_preference(
            make_preference(frequency=frequency, days="3"), "09:00", "UTC", now=MONDAY
        ))

        assert len(instants) > 2
        gaps = {later - earlier for earlier, later in zip(instants, instants[1:])}
        assert gaps == {timedelta(weeks=frequency)}

    def test_occurrences_within_horizon_and_weekday_set(self):
        now = MONDAY
        horizon_end = now + relativedelta(months=6)
        instants = list(expand_preference(
            make_preference(frequency=1, days="0,2,4"), "07:15", "UTC", now=now
        ))

        assert instants
        for instant in instants:
            assert now.date() <= instant.date() <= horizon_end.date()
            assert weekday_number(instant.date()) in {0, 2, 4}

    def test_today_included_even_after_start_time(self):
        """The walk starts at today's date regardless of the time of day."""
        late_monday = datetime(2024, 6, 3, 20, 0, tzinfo=timezone.utc)
        instants = list(expand_preference(make_preference(days="1"), "18:00", "UTC", now=late_monday))

        assert instants[0] == datetime(2024, 6, 3, 18, 0, tzinfo=timezone.utc)

    def test_time_zone_applied_to_wall_clock(self):
        instants = list(expand_preference(
            make_preference(days="1"), "2024-01-01T18:00:00Z", "America/New_York", now=MONDAY
        ))

        first = instants[0]
        assert (first.hour, first.minute) == (18, 0)
        assert first.utcoffset() == timedelta(hours=-4)
        assert first.astimezone(timezone.utc) == datetime(2024, 6, 3, 22, 0, tzinfo=timezone.utc)

    def test_now_is_read_in_target_zone(self):
        """Late Sunday UTC is already Monday in Tokyo."""
        sunday_night_utc = datetime(2024, 6, 2, 20, 0, tzinfo=timezone.utc)
        instants = list(expand_preference(
            make_preference(days="1"), "10:00", "Asia/Tokyo", now=sunday_night_utc
        ))

        assert instants[0].date() == date(2024, 6, 3)

    def test_monthly_every_period_keeps_every_matching_weekday(self):
        weekly = list(expand_preference(make_preference(frequency=1, period="week"), "10:00", "UTC", now=MONDAY))
        monthly = list(expand_preference(make_preference(frequency=1, period="month"), "10:00", "UTC", now=MONDAY))

        assert monthly == weekly

    def test_every_other_month_bucket(self):
        instants = list(expand_preference(
            make_preference(frequency=2, period="month", days="0,1,2,3,4,5,6"), "10:00", "UTC", now=MONDAY
        ))

        offsets = [(instant.date() - MONDAY.date()).days for instant in instants]
        assert all(((offset * 24) // 730) % 2 == 0 for offset in offsets)
        assert 30 in offsets
        assert 31 not in offsets
        assert 61 in offsets

    def test_custom_horizon(self):
        instants = list(expand_preference(
            make_preference(days="1"), "10:00", "UTC", now=MONDAY, horizon_months=1
        ))

        assert instants[-1] < MONDAY + relativedelta(months=1) + timedelta(days=1)
        assert len(instants) == 5  # June 3, 10, 17, 24, July 1

    def test_naive_now_interpreted_in_zone(self):
        instants = list(expand_preference(
            make_preference(days="1"), "10:00", "UTC", now=datetime(2024, 6, 3, 8, 0)
        ))

        assert instants[0] == datetime(2024, 6, 3, 10, 0, tzinfo=timezone.utc)

    @pytest.mark.parametrize(
        "preference",
        [
            make_preference(frequency=0),
            make_preference(frequency=-1),
            make_preference(period="year"),
            make_preference(days=""),
            make_preference(days="1,9"),
        ],
    )
    def test_invalid_preference_raises_before_iteration(self, preference):
        """Validation happens when the expansion is requested, not when consumed."""
        with pytest.raises(ValidationError):
            expand_preference(preference, "10:00", "UTC", now=MONDAY)

    def test_invalid_time_zone_raises(self):
        with pytest.raises(ValidationError):
            expand_preference(make_preference(), "10:00", "Nowhere/Land", now=MONDAY)

    def test_invalid_start_time_raises(self):
        with pytest.raises(ValidationError):
            expand_preference(make_preference(), "half past six", "UTC", now=MONDAY)
