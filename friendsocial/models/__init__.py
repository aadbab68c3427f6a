"""
SQLAlchemy models for FriendSocial.

This module exports all database models for easy importing and
ensures Alembic can discover them for migrations.
"""

# Import base classes
from friendsocial.models.base import Base, BaseModel, UTCDateTime

# Import all models (must be imported for Alembic autogenerate)
from friendsocial.models.people import User, Location
from friendsocial.models.activities import (
    Activity,
    ActivityPreference,
    FrequencyPeriod,
    PreferenceParticipant,
)
from friendsocial.models.scheduling import InviteStatus, Participation, ScheduledOccurrence

# Export all for easy importing
__all__ = [
    # Base classes
    "Base",
    "BaseModel",
    "UTCDateTime",
    # People
    "User",
    "Location",
    # Activities and preferences
    "Activity",
    "ActivityPreference",
    "FrequencyPeriod",
    "PreferenceParticipant",
    # Scheduling
    "InviteStatus",
    "Participation",
    "ScheduledOccurrence",
]
