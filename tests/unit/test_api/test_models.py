"""
Unit tests for API request/response models.
"""

import pytest
from datetime import datetime, timezone

from pydantic import ValidationError

from friendsocial.api.models import (
    CreateMultipleRequest,
    CreateParticipantRequest,
    CreateScheduledActivityRequest,
    DeclineRepeatedActivityRequest,
    RepeatScheduledActivityRequest,
    ScheduledActivityResponse,
    UpdateParticipantRequest,
    UpdateScheduledActivityRequest,
)
from friendsocial.models.scheduling import ScheduledOccurrence


class TestCreateScheduledActivityRequest:

    def test_valid_request(self):
        request = CreateScheduledActivityRequest(activity_id=1, scheduled_at="2024-06-10T18:00:00Z")

        assert request.scheduled_at == datetime(2024, 6, 10, 18, 0, tzinfo=timezone.utc)
        assert request.is_active is True
        assert request.user_activity_preference_id is None

    def test_naive_timestamp_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            CreateScheduledActivityRequest(activity_id=1, scheduled_at="2024-06-10T18:00:00")

        assert "timezone" in str(exc_info.value)


class TestCreateMultipleRequest:

    def test_defaults(self):
        request = CreateMultipleRequest(activity_id="3", start_time="14:00", end_time="15:00")

        assert request.activity_id == 3
        assert request.selected_dates == []
        assert request.time_zone is None

    def test_activity_id_required(self):
        with pytest.raises(ValidationError):
            CreateMultipleRequest(start_time="14:00", end_time="15:00", time_zone="UTC")


class TestSeriesRequests:

    def test_numeric_string_ids_accepted(self):
        repeat = RepeatScheduledActivityRequest(preference_id="12", start_time="18:00", time_zone="UTC")
        decline = DeclineRepeatedActivityRequest(user_id="4", scheduled_activity_id="9")

        assert repeat.preference_id == 12
        assert (decline.user_id, decline.scheduled_activity_id) == (4, 9)

    def test_non_numeric_id_rejected(self):
        with pytest.raises(ValidationError):
            DeclineRepeatedActivityRequest(user_id="bob", scheduled_activity_id=1)


class TestUpdateScheduledActivityRequest:

    def test_unset_fields_excluded(self):
        request = UpdateScheduledActivityRequest(is_active=False)

        assert request.model_dump(exclude_unset=True) == {"is_active": False}

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            UpdateScheduledActivityRequest(user_activity_preference_id=3)


class TestParticipantRequests:

    def test_default_status(self):
        assert CreateParticipantRequest(user_id=1, scheduled_activity_id=2).invite_status == "Pending"

    def test_invalid_status(self):
        with pytest.raises(ValidationError):
            UpdateParticipantRequest(invite_status="Maybe")


class TestResponses:

    def test_from_orm_object(self):
        occurrence = ScheduledOccurrence(
            id=5,
            activity_id=1,
            is_active=True,
            scheduled_at=datetime(2024, 6, 10, 18, 0, tzinfo=timezone.utc),
            user_activity_preference_id=None,
        )

        response = ScheduledActivityResponse.model_validate(occurrence)

        assert response.id == 5
        assert response.user_activity_preference_id is None
