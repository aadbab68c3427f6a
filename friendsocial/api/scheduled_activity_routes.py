"""
Scheduled activity routes.

Thin HTTP adapter over SchedulingService. Engine errors are mapped to
status codes by the exception handlers registered in main.py.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from friendsocial.api.dependencies import get_participation_service, get_scheduling_service
from friendsocial.api.models import (
    CreateMultipleRequest,
    CreateScheduledActivityRequest,
    DeclineRepeatedActivityRequest,
    ErrorResponse,
    ParticipantResponse,
    RepeatScheduledActivityRequest,
    ScheduledActivityResponse,
    UpdateScheduledActivityRequest,
)
from friendsocial.config import get_settings
from friendsocial.services.participants import ParticipationService
from friendsocial.services.scheduling_service import SchedulingService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Scheduled Activities"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid input"},
    404: {"model": ErrorResponse, "description": "Not found"},
    500: {"model": ErrorResponse, "description": "Persistence failure"},
}


@router.post(
    "/scheduled_activity",
    response_model=ScheduledActivityResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a scheduled activity",
    responses=ERROR_RESPONSES,
)
def create_scheduled_activity(
    request: CreateScheduledActivityRequest,
    service: SchedulingService = Depends(get_scheduling_service),
):
    return service.create_occurrence(
        activity_id=request.activity_id,
        scheduled_at=request.scheduled_at,
        is_active=request.is_active,
        preference_id=request.user_activity_preference_id,
    )


@router.post(
    "/scheduled_activities",
    response_model=list[ScheduledActivityResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Schedule an activity on several dates",
    description="""
Create one scheduled activity per selected date.

Dates whose start is in the past, or whose window overlaps an activity
already scheduled that day, are skipped. The response only lists the
activities that were created.
    """,
    responses=ERROR_RESPONSES,
)
def create_multiple_scheduled_activities(
    request: CreateMultipleRequest,
    service: SchedulingService = Depends(get_scheduling_service),
):
    return service.create_multiple(
        activity_id=request.activity_id,
        selected_dates=request.selected_dates,
        start_time=request.start_time,
        end_time=request.end_time,
        time_zone=request.time_zone or get_settings().timezone,
    )


@router.get(
    "/scheduled_activity",
    response_model=list[ScheduledActivityResponse],
    summary="List scheduled activities",
    responses=ERROR_RESPONSES,
)
def list_scheduled_activities(
    active: Optional[bool] = Query(None, description="Filter by active flag"),
    service: SchedulingService = Depends(get_scheduling_service),
):
    return service.read_all(active=active)


@router.get(
    "/scheduled_activities/{scheduled_activity_id}",
    response_model=ScheduledActivityResponse,
    summary="Get a scheduled activity",
    responses=ERROR_RESPONSES,
)
def get_scheduled_activity(
    scheduled_activity_id: int,
    service: SchedulingService = Depends(get_scheduling_service),
):
    occurrence = service.read(scheduled_activity_id)
    if occurrence is None:
        raise HTTPException(status_code=404, detail="Not Found")
    return occurrence


@router.put(
    "/scheduled_activities/{scheduled_activity_id}",
    response_model=ScheduledActivityResponse,
    summary="Update a scheduled activity",
    description="Change the activity, start instant or active flag. Omitted fields are kept.",
    responses=ERROR_RESPONSES,
)
def update_scheduled_activity(
    scheduled_activity_id: int,
    request: UpdateScheduledActivityRequest,
    service: SchedulingService = Depends(get_scheduling_service),
):
    occurrence = service.update(
        scheduled_activity_id,
        request.model_dump(exclude_unset=True, exclude_none=True),
    )
    if occurrence is None:
        raise HTTPException(status_code=404, detail="Not Found")
    return occurrence


@router.delete(
    "/scheduled_activities/{scheduled_activity_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a scheduled activity",
    responses=ERROR_RESPONSES,
)
def delete_scheduled_activity(
    scheduled_activity_id: int,
    service: SchedulingService = Depends(get_scheduling_service),
):
    if not service.delete(scheduled_activity_id):
        raise HTTPException(status_code=404, detail="Not Found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/scheduled_activities/{scheduled_activity_id}/participants",
    response_model=list[ParticipantResponse],
    summary="List participants of a scheduled activity",
    responses=ERROR_RESPONSES,
)
def list_scheduled_activity_participants(
    scheduled_activity_id: int,
    participants: ParticipationService = Depends(get_participation_service),
):
    return participants.list_for_occurrence(scheduled_activity_id)


@router.post(
    "/scheduled_activity/repeat",
    response_model=list[ScheduledActivityResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create a recurring series from a preference",
    description="""
Expand an activity preference into scheduled activities for the next six
months and invite the preference's roster to each of them.

All activities and invitations are created together, or none are.
    """,
    responses=ERROR_RESPONSES,
)
def create_recurring_series(
    request: RepeatScheduledActivityRequest,
    service: SchedulingService = Depends(get_scheduling_service),
):
    return service.create_recurring_series(
        preference_id=request.preference_id,
        start_time=request.start_time,
        time_zone=request.time_zone or get_settings().timezone,
    )


@router.post(
    "/scheduled_activity/repeat/decline",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Decline a recurring series",
    description="Remove the user's invitations to all future activities of the series.",
    responses=ERROR_RESPONSES,
)
def decline_recurring_series(
    request: DeclineRepeatedActivityRequest,
    service: SchedulingService = Depends(get_scheduling_service),
):
    removed = service.decline_series(request.user_id, request.scheduled_activity_id)
    logger.debug(f"Decline removed {removed} invitations for user {request.user_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
