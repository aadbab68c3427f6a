"""
Activity participant routes.
"""

from fastapi import APIRouter, Depends, HTTPException, Response, status

from friendsocial.api.dependencies import get_participation_service
from friendsocial.api.models import (
    CreateParticipantRequest,
    ErrorResponse,
    ParticipantResponse,
    UpdateParticipantRequest,
)
from friendsocial.services.participants import ParticipationService

router = APIRouter(tags=["Activity Participants"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid input"},
    404: {"model": ErrorResponse, "description": "Not found"},
    500: {"model": ErrorResponse, "description": "Persistence failure"},
}


@router.post(
    "/activity_participant",
    response_model=ParticipantResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Invite a user to a scheduled activity",
    responses=ERROR_RESPONSES,
)
def create_participant(
    request: CreateParticipantRequest,
    participants: ParticipationService = Depends(get_participation_service),
):
    return participants.invite(
        occurrence_id=request.scheduled_activity_id,
        user_id=request.user_id,
        status=request.invite_status,
    )


@router.get(
    "/activity_participant/{participant_id}",
    response_model=ParticipantResponse,
    summary="Get a participation",
    responses=ERROR_RESPONSES,
)
def get_participant(
    participant_id: int,
    participants: ParticipationService = Depends(get_participation_service),
):
    participation = participants.read(participant_id)
    if participation is None:
        raise HTTPException(status_code=404, detail="Not Found")
    return participation


@router.put(
    "/activity_participant/{participant_id}",
    response_model=ParticipantResponse,
    summary="Answer an invitation",
    responses=ERROR_RESPONSES,
)
def update_participant(
    participant_id: int,
    request: UpdateParticipantRequest,
    participants: ParticipationService = Depends(get_participation_service),
):
    participation = participants.set_status(participant_id, request.invite_status)
    if participation is None:
        raise HTTPException(status_code=404, detail="Not Found")
    return participation


@router.delete(
    "/activity_participant/{participant_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a participation",
    responses=ERROR_RESPONSES,
)
def delete_participant(
    participant_id: int,
    participants: ParticipationService = Depends(get_participation_service),
):
    if not participants.delete(participant_id):
        raise HTTPException(status_code=404, detail="Not Found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
