"""
Access Guard - participant and relationship-state checks.

Every connection-scoped read or write in the scheduler and messaging
services goes through here first. The guard only reads; it never changes
state.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import ForbiddenError, NotFoundError
from models.connection import Connection, ConnectionStatus
from models.session import Session

logger = logging.getLogger(__name__)


class AccessGuard:
    """Capability checks against the connection ledger."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def assert_participant(
        self,
        connection_id: str,
        identity_id: str,
        required_status: ConnectionStatus = ConnectionStatus.ACCEPTED,
    ) -> Connection:
        """
        Verify the identity takes part in the connection and its state.

        Args:
            connection_id: Connection to check
            identity_id: Acting user
            required_status: Status the connection must currently have

        Returns:
            The loaded Connection

        Raises:
            NotFoundError: If the connection does not exist
            ForbiddenError: If the identity is not a participant, or the
                            connection is not in the required status
        """
        result = await self.db.execute(select(Connection).where(Connection.id == connection_id))
        connection = result.scalar_one_or_none()
        if connection is None:
            raise NotFoundError("Connection not found")

        if not connection.has_participant(identity_id):
            logger.warning("User %s denied access to connection %s: not a participant", identity_id, connection_id)
            raise ForbiddenError("You are not a participant of this connection")

        if connection.status != required_status:
            logger.warning(
                "User %s denied access to connection %s: status is %s, requires %s",
                identity_id, connection_id, ConnectionStatus(connection.status).value, required_status.value,
            )
            raise ForbiddenError(f"Connection is not {required_status.value}")

        return connection

    async def assert_session_participant(self, session_id: str, identity_id: str) -> Session:
        """
        Verify the identity is the tutor or student of a session.

        Sessions carry both participant ids, so this check does not consult
        the connection's current status.

        Raises:
            NotFoundError: If the session does not exist
            ForbiddenError: If the identity is neither tutor nor student
        """
        result = await self.db.execute(select(Session).where(Session.id == session_id))
        session = result.scalar_one_or_none()
        if session is None:
            raise NotFoundError("Session not found")

        if not session.has_participant(identity_id):
            logger.warning("User %s denied access to session %s", identity_id, session_id)
            raise ForbiddenError("You are not a participant of this session")

        return session
