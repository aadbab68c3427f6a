"""
Pydantic request and response models for the FriendSocial API.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _require_timezone(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is None:
        raise ValueError("Timestamp must include a timezone offset")
    return value


# =============================================================================
# Request Models
# =============================================================================


class CreateScheduledActivityRequest(BaseModel):
    """Request to create a single scheduled activity."""

    activity_id: int = Field(..., description="Activity to schedule")
    scheduled_at: datetime = Field(
        ...,
        description="Start instant (RFC 3339 with offset)",
        examples=["2026-11-02T18:00:00Z"],
    )
    is_active: bool = Field(default=True)
    user_activity_preference_id: Optional[int] = Field(
        None,
        description="Originating preference (omit for ad-hoc activities)",
    )

    @field_validator("scheduled_at")
    @classmethod
    def validate_scheduled_at_has_timezone(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _require_timezone(v)


class CreateMultipleRequest(BaseModel):
    """Request to schedule an activity on several dates."""

    activity_id: int = Field(..., description="Activity to schedule")
    selected_dates: list[str] = Field(
        default_factory=list,
        description="Calendar dates (YYYY-MM-DD)",
        examples=[["2026-11-02", "2026-11-09"]],
    )
    start_time: str = Field(
        ...,
        description="Window start (RFC 3339 timestamp or HH:MM; only the wall clock is used)",
        examples=["2026-11-02T14:30:00Z"],
    )
    end_time: str = Field(
        ...,
        description="Window end (RFC 3339 timestamp or HH:MM; only the wall clock is used)",
        examples=["2026-11-02T15:30:00Z"],
    )
    time_zone: Optional[str] = Field(
        None,
        description="IANA timezone (default: the server's configured timezone)",
        examples=["Europe/Berlin"],
    )


class RepeatScheduledActivityRequest(BaseModel):
    """Request to expand a preference into a recurring series."""

    preference_id: int = Field(..., description="Activity preference to expand")
    start_time: str = Field(
        ...,
        description="Time of day for every occurrence (RFC 3339 timestamp or HH:MM)",
        examples=["2026-11-02T18:00:00Z"],
    )
    time_zone: Optional[str] = Field(
        None,
        description="IANA timezone (default: the server's configured timezone)",
        examples=["UTC"],
    )


class DeclineRepeatedActivityRequest(BaseModel):
    """Request to decline a recurring series."""

    user_id: int = Field(..., description="User declining the series")
    scheduled_activity_id: int = Field(..., description="Any occurrence of the series")


class UpdateScheduledActivityRequest(BaseModel):
    """Partial update of a scheduled activity. Unknown fields are rejected."""

    model_config = ConfigDict(extra="forbid")

    activity_id: Optional[int] = None
    is_active: Optional[bool] = None
    scheduled_at: Optional[datetime] = None

    @field_validator("scheduled_at")
    @classmethod
    def validate_scheduled_at_has_timezone(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _require_timezone(v)


class CreateParticipantRequest(BaseModel):
    """Invite a user to a scheduled activity."""

    user_id: int
    scheduled_activity_id: int
    invite_status: Literal["Pending", "Accepted", "Rejected"] = "Pending"


class UpdateParticipantRequest(BaseModel):
    """Answer an invitation."""

    invite_status: Literal["Pending", "Accepted", "Rejected"]


# =============================================================================
# Response Models
# =============================================================================


class ScheduledActivityResponse(BaseModel):
    """A scheduled activity."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    activity_id: int
    is_active: bool
    scheduled_at: datetime
    user_activity_preference_id: Optional[int] = None


class ParticipantResponse(BaseModel):
    """A user's participation in a scheduled activity."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    scheduled_activity_id: int
    invite_status: str


class ErrorResponse(BaseModel):
    """Error body returned for every failed request."""

    status_code: int
    error: str


class HealthResponse(BaseModel):
    """Health check response."""

    status: Literal["healthy", "unhealthy"]
    version: str
    database_connected: bool
