"""
Participation service.

Individual invitation management for occurrences: invite a user, list an
occurrence's participants, answer an invitation and remove one.
"""

import logging
from typing import Optional

from sqlalchemy import select, and_
from sqlalchemy.orm import Session

from friendsocial.exceptions import NotFoundError, ValidationError
from friendsocial.models.people import User
from friendsocial.models.scheduling import InviteStatus, Participation, ScheduledOccurrence
from friendsocial.services.base import TransactionalService

logger = logging.getLogger(__name__)


def parse_invite_status(value: str) -> InviteStatus:
    """
    Resolve an invite status, case-insensitive.

    Raises:
        ValidationError: If the value is not Pending, Accepted or Rejected
    """
    for status in InviteStatus:
        if isinstance(value, str) and value.strip().lower() == status.value.lower():
            return status
    raise ValidationError(
        f"Invalid invite status: {value!r}",
        context={"invite_status": value},
    )


class ParticipationService(TransactionalService):
    """Manage individual participations."""

    def _require_occurrence(self, session: Session, occurrence_id: int) -> ScheduledOccurrence:
        occurrence = session.get(ScheduledOccurrence, occurrence_id)
        if occurrence is None:
            raise NotFoundError(
                f"Scheduled activity {occurrence_id} not found",
                context={"scheduled_activity_id": occurrence_id},
            )
        return occurrence

    def invite(
        self,
        occurrence_id: int,
        user_id: int,
        status: str = InviteStatus.PENDING.value,
    ) -> Participation:
        """
        Invite a user to an occurrence.

        Raises:
            NotFoundError: If the occurrence or user does not exist
            ValidationError: If the user is already invited or status is invalid
        """
        invite_status = parse_invite_status(status)

        with self._transaction(
            "insert activity participant",
            scheduled_activity_id=occurrence_id,
            user_id=user_id,
        ) as session:
            self._require_occurrence(session, occurrence_id)
            if session.get(User, user_id) is None:
                raise NotFoundError(f"User {user_id} not found", context={"user_id": user_id})

            existing = session.scalars(
                select(Participation).where(
                    and_(
                        Participation.user_id == user_id,
                        Participation.scheduled_activity_id == occurrence_id,
                    )
                )
            ).first()
            if existing is not None:
                raise ValidationError(
                    f"User {user_id} is already invited to scheduled activity {occurrence_id}",
                    context={"user_id": user_id, "scheduled_activity_id": occurrence_id},
                )

            participation = Participation(
                user_id=user_id,
                scheduled_activity_id=occurrence_id,
                invite_status=invite_status.value,
            )
            session.add(participation)
            session.flush()

        logger.info(f"Invited user {user_id} to scheduled activity {occurrence_id}")
        return participation

    def list_for_occurrence(self, occurrence_id: int) -> list[Participation]:
        """
        List an occurrence's participations ordered by user.

        Raises:
            NotFoundError: If the occurrence does not exist
        """
        with self._transaction(
            "read activity participants", writes=False, scheduled_activity_id=occurrence_id
        ) as session:
            self._require_occurrence(session, occurrence_id)
            stmt = (
                select(Participation)
                .where(Participation.scheduled_activity_id == occurrence_id)
                .order_by(Participation.user_id)
            )
            return list(session.scalars(stmt).all())

    def read(self, participation_id: int) -> Optional[Participation]:
        with self._transaction("read activity participant", writes=False, id=participation_id) as session:
            return session.get(Participation, participation_id)

    def set_status(self, participation_id: int, status: str) -> Optional[Participation]:
        """
        Answer an invitation.

        Returns:
            Updated participation, or None if it does not exist
        """
        invite_status = parse_invite_status(status)

        with self._transaction(
            "update activity participant", id=participation_id, invite_status=status
        ) as session:
            participation = session.get(Participation, participation_id)
            if participation is None:
                return None
            participation.invite_status = invite_status.value
            session.flush()

        return participation

    def delete(self, participation_id: int) -> bool:
        """Remove a participation. Returns False if it does not exist."""
        with self._transaction("delete activity participant", id=participation_id) as session:
            participation = session.get(Participation, participation_id)
            if participation is None:
                return False
            session.delete(participation)

        return True
