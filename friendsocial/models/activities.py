"""
Activity, ActivityPreference and PreferenceParticipant models.

Entities:
- Activity: Something a group can do, with an estimated duration
- ActivityPreference: A user's recurring wish to do an activity (frequency rule)
- PreferenceParticipant: Roster of users invited by default to a preference's occurrences
"""

import enum
from datetime import timedelta
from typing import Optional, TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    Interval,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from friendsocial.models.base import BaseModel

if TYPE_CHECKING:
    from friendsocial.models.scheduling import ScheduledOccurrence


class FrequencyPeriod(str, enum.Enum):
    """Period a preference's frequency count is measured in."""

    WEEK = "week"
    MONTH = "month"


class Activity(BaseModel):
    """
    Represents an activity that can be scheduled.

    The estimated duration is resolved whenever an occurrence's end is
    needed, so editing it never rewrites stored occurrences.
    """

    __tablename__ = "activities"

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        doc="Activity name"
    )

    emoji: Mapped[Optional[str]] = mapped_column(
        String(10),
        nullable=True,
    )

    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
        doc="Free-text description"
    )

    estimated_time: Mapped[timedelta] = mapped_column(
        Interval,
        nullable=False,
        doc="Estimated duration of one occurrence"
    )

    location_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("locations.id"),
        nullable=True,
        doc="Where the activity takes place"
    )

    user_created: Mapped[bool] = mapped_column(default=False, nullable=False)

    occurrences: Mapped[list["ScheduledOccurrence"]] = relationship(
        "ScheduledOccurrence",
        back_populates="activity",
        doc="Scheduled occurrences of this activity"
    )

    def __repr__(self) -> str:
        return f"<Activity(name='{self.name}', estimated_time='{self.estimated_time}')>"


class ActivityPreference(BaseModel):
    """
    A user's recurring activity preference.

    Expanded by the recurrence calculator into a series of occurrences.

    Fields:
    - frequency: every N-th period (N >= 1)
    - frequency_period: 'week' or 'month'
    - days_of_week: comma-separated weekday tokens, 0 = Sunday ... 6 = Saturday
    """

    __tablename__ = "user_activity_preferences"

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        doc="Owning user"
    )

    activity_id: Mapped[int] = mapped_column(
        ForeignKey("activities.id", ondelete="CASCADE"),
        nullable=False,
        doc="Preferred activity"
    )

    frequency: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=1,
        doc="Schedule every N-th period"
    )

    frequency_period: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default=FrequencyPeriod.WEEK.value,
        doc="Period: 'week' or 'month'"
    )

    days_of_week: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        doc="Comma-separated weekday tokens (0 = Sunday)"
    )

    activity: Mapped["Activity"] = relationship("Activity")

    participants: Mapped[list["PreferenceParticipant"]] = relationship(
        "PreferenceParticipant",
        back_populates="preference",
        cascade="all, delete-orphan",
        passive_deletes=True,
        doc="Default roster for generated occurrences"
    )

    __table_args__ = (
        CheckConstraint("frequency >= 1", name="ck_preference_frequency_positive"),
        CheckConstraint(
            "frequency_period IN ('week', 'month')",
            name="ck_preference_frequency_period",
        ),
        Index("idx_user_activity_preferences_user_id", "user_id"),
        Index("idx_user_activity_preferences_activity_id", "activity_id"),
    )

    @property
    def weekday_tokens(self) -> list[str]:
        """Raw weekday tokens, whitespace-trimmed, empties dropped."""
        return [token.strip() for token in (self.days_of_week or "").split(",") if token.strip()]

    def __repr__(self) -> str:
        return (
            f"<ActivityPreference(activity_id={self.activity_id}, "
            f"frequency={self.frequency}/{self.frequency_period}, days='{self.days_of_week}')>"
        )


class PreferenceParticipant(BaseModel):
    """Roster entry: a user invited by default to a preference's occurrences."""

    __tablename__ = "user_activity_preferences_participants"

    user_activity_preference_id: Mapped[int] = mapped_column(
        ForeignKey("user_activity_preferences.id", ondelete="CASCADE"),
        nullable=False,
    )

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    preference: Mapped["ActivityPreference"] = relationship(
        "ActivityPreference",
        back_populates="participants",
    )

    __table_args__ = (
        UniqueConstraint(
            "user_activity_preference_id", "user_id",
            name="uq_user_activity_preference_user",
        ),
        Index("idx_preference_participants_preference_id", "user_activity_preference_id"),
        Index("idx_preference_participants_user_id", "user_id"),
    )
