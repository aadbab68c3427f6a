"""
ScheduledOccurrence and Participation models.

Entities:
- ScheduledOccurrence: One concrete, dated instance of an activity
- Participation: A user's invitation to an occurrence
"""

import enum
from datetime import datetime
from typing import Optional, TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, Index, String, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from friendsocial.models.base import BaseModel, UTCDateTime

if TYPE_CHECKING:
    from friendsocial.models.activities import Activity, ActivityPreference
    from friendsocial.models.people import User


class InviteStatus(str, enum.Enum):
    """Invitation response status."""

    PENDING = "Pending"
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"


class ScheduledOccurrence(BaseModel):
    """
    One concrete, dated instance of an activity.

    Occurrences are either ad-hoc (no preference) or members of a series
    generated from an ActivityPreference. Deleting an occurrence removes its
    participations.
    """

    __tablename__ = "scheduled_activities"

    activity_id: Mapped[int] = mapped_column(
        ForeignKey("activities.id"),
        nullable=False,
        doc="Activity being scheduled"
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
        doc="False once the occurrence is deactivated"
    )

    scheduled_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        nullable=False,
        doc="Start instant (stored as UTC)"
    )

    user_activity_preference_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("user_activity_preferences.id"),
        nullable=True,
        doc="Originating preference (NULL for ad-hoc occurrences)"
    )

    activity: Mapped["Activity"] = relationship(
        "Activity",
        back_populates="occurrences",
    )

    preference: Mapped[Optional["ActivityPreference"]] = relationship("ActivityPreference")

    participants: Mapped[list["Participation"]] = relationship(
        "Participation",
        back_populates="occurrence",
        cascade="all, delete-orphan",
        passive_deletes=True,
        doc="Invitations to this occurrence"
    )

    __table_args__ = (
        Index("idx_scheduled_activities_activity_id", "activity_id"),
        Index("idx_scheduled_activities_user_activity_preference_id", "user_activity_preference_id"),
        Index("idx_scheduled_activities_scheduled_at", "scheduled_at"),
    )

    @property
    def is_series_member(self) -> bool:
        return self.user_activity_preference_id is not None

    def __repr__(self) -> str:
        return (
            f"<ScheduledOccurrence(activity_id={self.activity_id}, "
            f"scheduled_at='{self.scheduled_at}', active={self.is_active})>"
        )


class Participation(BaseModel):
    """
    A user's participation in one occurrence.

    At most one row per (user, occurrence). Rows have no lifecycle beyond
    their occurrence.
    """

    __tablename__ = "activity_participants"

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        doc="Invited user"
    )

    scheduled_activity_id: Mapped[int] = mapped_column(
        ForeignKey("scheduled_activities.id", ondelete="CASCADE"),
        nullable=False,
        doc="Occurrence the user is invited to"
    )

    invite_status: Mapped[str] = mapped_column(
        String(25),
        nullable=False,
        default=InviteStatus.PENDING.value,
        doc="Status: 'Pending', 'Accepted', 'Rejected'"
    )

    occurrence: Mapped["ScheduledOccurrence"] = relationship(
        "ScheduledOccurrence",
        back_populates="participants",
    )

    user: Mapped["User"] = relationship(
        "User",
        back_populates="participations",
    )

    __table_args__ = (
        UniqueConstraint("user_id", "scheduled_activity_id", name="uq_activity_user"),
        CheckConstraint(
            "invite_status IN ('Pending', 'Accepted', 'Rejected')",
            name="ck_activity_participant_invite_status",
        ),
        Index("idx_activity_participants_user_id", "user_id"),
        Index("idx_activity_participants_scheduled_activity_id", "scheduled_activity_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<Participation(user_id={self.user_id}, "
            f"occurrence_id={self.scheduled_activity_id}, status='{self.invite_status}')>"
        )
