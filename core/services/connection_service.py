"""
Connection Service - the student/tutor relationship ledger.

A student requests a connection to a tutor; the tutor accepts or rejects it
exactly once. There is at most one connection per (student, tutor) pair,
ever: a rejected student cannot ask again.

Lifecycle:
    pending --accept--> accepted
    pending --reject--> rejected
"""

import logging
from typing import Optional
from uuid import uuid4

from sqlalchemy import and_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from core.auth import AuthContext
from core.database import commit_or_rollback
from core.exceptions import NotFoundError, ValidationError
from models.connection import Connection, ConnectionStatus
from models.user import User, UserRole

logger = logging.getLogger(__name__)

DECISIONS = {
    "accept": ConnectionStatus.ACCEPTED,
    "reject": ConnectionStatus.REJECTED,
}

# Statuses a tutor may filter their incoming requests by
TUTOR_LIST_FILTERS = (ConnectionStatus.PENDING, ConnectionStatus.ACCEPTED)


class ConnectionService:
    """
    Service for the connection ledger.

    This service:
    1. Creates pending requests from students to tutors
    2. Records the tutor's one-time accept/reject decision
    3. Lists connections from either side, joined with the counterpart's profile
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_user(self, user_id: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_connection_for_pair(self, student_id: str, tutor_id: str) -> Optional[Connection]:
        """Get the connection between a student and tutor, in any status."""
        result = await self.db.execute(
            select(Connection).where(
                and_(
                    Connection.student_id == student_id,
                    Connection.tutor_id == tutor_id,
                )
            )
        )
        return result.scalar_one_or_none()

    async def request_connection(self, student_id: str, tutor_id: str) -> Connection:
        """
        Create a pending connection request from a student to a tutor.

        Args:
            student_id: Requesting user (must have the student role)
            tutor_id: Target user (must have the tutor role)

        Returns:
            Created Connection in `pending` status

        Raises:
            ValidationError: If the caller is not a student, the target is not
                             a tutor, or a connection for the pair exists
        """
        student = await self._get_user(student_id)
        if student is None or not student.is_student:
            raise ValidationError("Only students can send connection requests")

        if not tutor_id:
            raise ValidationError("Tutor ID is required")

        tutor = await self._get_user(tutor_id)
        if tutor is None or not tutor.is_tutor:
            raise ValidationError("Target user is not a tutor")

        if await self.get_connection_for_pair(student_id, tutor_id) is not None:
            raise ValidationError("Connection request already exists")

        connection = Connection(
            id=str(uuid4()),
            student_id=student_id,
            tutor_id=tutor_id,
            status=ConnectionStatus.PENDING,
        )
        self.db.add(connection)
        try:
            await self.db.flush()
        except IntegrityError:
            # Race: a concurrent request for the same pair committed first
            await self.db.rollback()
            raise ValidationError("Connection request already exists")
        await commit_or_rollback(self.db, "create connection request")

        logger.info("Connection %s requested by student %s to tutor %s", connection.id, student_id, tutor_id)
        return connection

    async def respond_to_connection(self, connection_id: str, tutor_id: str, decision: str) -> Connection:
        """
        Accept or reject a pending request.

        Args:
            connection_id: Connection to resolve
            tutor_id: Responding user (must be the connection's tutor)
            decision: "accept" or "reject"

        Returns:
            Updated Connection

        Raises:
            ValidationError: If decision is not accept/reject
            NotFoundError: If no pending connection with that id exists for the tutor
        """
        new_status = DECISIONS.get(decision)
        if new_status is None:
            raise ValidationError('Invalid action. Must be "accept" or "reject"')

        result = await self.db.execute(
            select(Connection)
            .where(
                and_(
                    Connection.id == connection_id,
                    Connection.tutor_id == tutor_id,
                    Connection.status == ConnectionStatus.PENDING,
                )
            )
            .with_for_update(of=Connection)
        )
        connection = result.scalar_one_or_none()
        if connection is None:
            raise NotFoundError("Request not found or already processed")

        connection.status = new_status
        await commit_or_rollback(self.db, "respond to connection request")

        logger.info("Connection %s %s by tutor %s", connection_id, new_status.value, tutor_id)
        return connection

    async def list_connections_for(
        self,
        identity: AuthContext,
        status: Optional[str] = None,
    ) -> list[Connection]:
        """
        List connections from the caller's side, newest first.

        Tutors see requests directed at them, optionally narrowed to pending
        or accepted. Students see every connection they initiated in any
        status, optionally narrowed to one status.

        Raises:
            ValidationError: If the status filter is not allowed for the role
        """
        status_filter = None
        if status is not None:
            try:
                status_filter = ConnectionStatus(status)
            except ValueError:
                raise ValidationError(f"Invalid status filter: {status}")

        if identity.role == UserRole.TUTOR.value:
            if status_filter is not None and status_filter not in TUTOR_LIST_FILTERS:
                raise ValidationError("Tutors can filter by pending or accepted only")
            conditions = [Connection.tutor_id == identity.user_id]
        else:
            conditions = [Connection.student_id == identity.user_id]

        if status_filter is not None:
            conditions.append(Connection.status == status_filter)

        result = await self.db.execute(
            select(Connection)
            .where(and_(*conditions))
            .options(selectinload(Connection.student).selectinload(User.student_profile))
            .order_by(Connection.created_at.desc())
        )
        return list(result.scalars().all())
