"""
FastAPI dependency injection providers.

Builds the scheduling and participation services once per process with
their collaborators wired explicitly.
"""

import logging
from functools import lru_cache

from friendsocial.config import get_settings
from friendsocial.database import SessionLocal
from friendsocial.services.participants import ParticipationService
from friendsocial.services.readers import (
    SQLActivityDurationResolver,
    SQLPreferenceReader,
    SQLRosterReader,
)
from friendsocial.services.scheduling_service import SchedulingService

logger = logging.getLogger(__name__)


@lru_cache()
def get_scheduling_service() -> SchedulingService:
    """
    Dependency injection for the scheduling service.

    Returns the process-wide SchedulingService instance.
    """
    settings = get_settings()
    service = SchedulingService(
        SessionLocal,
        preferences=SQLPreferenceReader(),
        rosters=SQLRosterReader(),
        durations=SQLActivityDurationResolver(),
        serialize_writes=settings.serialize_writes,
        horizon_months=settings.scheduling_horizon_months,
    )
    logger.info("Scheduling service initialized")
    return service


@lru_cache()
def get_participation_service() -> ParticipationService:
    """Dependency injection for the participation service."""
    settings = get_settings()
    return ParticipationService(SessionLocal, serialize_writes=settings.serialize_writes)
