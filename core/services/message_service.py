"""
Messaging Channel - text messages scoped to an accepted connection.

Delivery is pull-based: clients poll list endpoints. The service guarantees
ordering by timestamp and monotonic read state; reading a thread marks the
counterpart's unread messages as read exactly once.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from uuid import uuid4

from sqlalchemy import and_, distinct, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import commit_or_rollback
from core.exceptions import ValidationError
from core.services.access_guard import AccessGuard
from models.connection import Connection, ConnectionStatus
from models.message import Message
from models.user import User

logger = logging.getLogger(__name__)


@dataclass
class ConversationSummary:
    """One accepted connection as seen from one participant's inbox."""

    connection_id: str
    counterpart: User
    last_message: Optional[str] = None
    last_message_time: Optional[datetime] = None
    unread_count: int = 0


class MessageService:
    """
    Service for connection-scoped messaging.

    This service:
    1. Appends messages to accepted connections
    2. Returns a thread in timestamp order and marks it read for the reader
    3. Builds the caller's conversation list and messaging stats
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.guard = AccessGuard(db)

    async def send_message(self, connection_id: str, sender_id: str, content: str) -> Message:
        """
        Append a message to a connection's thread.

        Raises:
            NotFoundError: If the connection does not exist
            ForbiddenError: If sender is not a participant or connection is not accepted
            ValidationError: If content is empty
        """
        await self.guard.assert_participant(connection_id, sender_id, ConnectionStatus.ACCEPTED)

        if content is None or not content.strip():
            raise ValidationError("Message content is required")

        message = Message(
            id=str(uuid4()),
            connection_id=connection_id,
            sender_id=sender_id,
            content=content,
            timestamp=datetime.utcnow(),
            read_at=None,
        )
        self.db.add(message)
        await commit_or_rollback(self.db, "send message")
        await self.db.refresh(message, attribute_names=["sender"])

        logger.info("Message %s sent on connection %s by %s", message.id, connection_id, sender_id)
        return message

    async def list_messages(
        self,
        connection_id: str,
        reader_id: str,
        now: Optional[datetime] = None,
    ) -> list[Message]:
        """
        Return the thread oldest first and mark the counterpart's messages read.

        The returned messages reflect their read state before this call. Only
        messages with no read_at are touched, so re-reading never moves an
        existing read_at.

        Raises:
            NotFoundError: If the connection does not exist
            ForbiddenError: If reader is not a participant or connection is not accepted
        """
        await self.guard.assert_participant(connection_id, reader_id, ConnectionStatus.ACCEPTED)

        result = await self.db.execute(
            select(Message)
            .where(Message.connection_id == connection_id)
            .order_by(Message.timestamp.asc())
        )
        messages = list(result.scalars().all())

        marked = await self.db.execute(
            update(Message)
            .where(
                and_(
                    Message.connection_id == connection_id,
                    Message.sender_id != reader_id,
                    Message.read_at.is_(None),
                )
            )
            .values(read_at=now or datetime.utcnow())
            .execution_options(synchronize_session=False)
        )
        await commit_or_rollback(self.db, "mark messages read")

        if marked.rowcount:
            logger.info("Marked %d messages read on connection %s for %s", marked.rowcount, connection_id, reader_id)
        return messages

    async def list_conversations(self, identity_id: str) -> list[ConversationSummary]:
        """
        List the caller's accepted connections with their latest message.

        Ordered by latest message time, newest first; conversations without
        messages come last.
        """
        result = await self.db.execute(
            select(Connection).where(
                and_(
                    or_(Connection.student_id == identity_id, Connection.tutor_id == identity_id),
                    Connection.status == ConnectionStatus.ACCEPTED,
                )
            )
        )
        connections = list(result.scalars().all())
        if not connections:
            return []

        connection_ids = [c.id for c in connections]

        # Latest message per connection
        latest_ts = (
            select(
                Message.connection_id.label("connection_id"),
                func.max(Message.timestamp).label("last_ts"),
            )
            .where(Message.connection_id.in_(connection_ids))
            .group_by(Message.connection_id)
            .subquery()
        )
        latest_result = await self.db.execute(
            select(Message.connection_id, Message.content, Message.timestamp).join(
                latest_ts,
                and_(
                    Message.connection_id == latest_ts.c.connection_id,
                    Message.timestamp == latest_ts.c.last_ts,
                ),
            )
        )
        latest = {row.connection_id: (row.content, row.timestamp) for row in latest_result}

        unread_result = await self.db.execute(
            select(Message.connection_id, func.count(Message.id))
            .where(
                and_(
                    Message.connection_id.in_(connection_ids),
                    Message.sender_id != identity_id,
                    Message.read_at.is_(None),
                )
            )
            .group_by(Message.connection_id)
        )
        unread = {connection_id: count for connection_id, count in unread_result}

        summaries = []
        for connection in connections:
            content, timestamp = latest.get(connection.id, (None, None))
            summaries.append(
                ConversationSummary(
                    connection_id=connection.id,
                    counterpart=connection.counterpart(identity_id),
                    last_message=content,
                    last_message_time=timestamp,
                    unread_count=unread.get(connection.id, 0),
                )
            )

        summaries.sort(key=lambda s: (s.last_message_time is not None, s.last_message_time or datetime.min), reverse=True)
        return summaries

    async def get_message_stats(self, identity_id: str) -> dict:
        """Messages sent, accepted connections and distinct counterparts."""
        sent = await self.db.execute(
            select(func.count(Message.id)).where(Message.sender_id == identity_id)
        )
        messages_sent = sent.scalar() or 0

        accepted = and_(
            or_(Connection.student_id == identity_id, Connection.tutor_id == identity_id),
            Connection.status == ConnectionStatus.ACCEPTED,
        )
        counterpart = func.coalesce(
            func.nullif(Connection.student_id, identity_id),
            Connection.tutor_id,
        )
        counts = await self.db.execute(
            select(
                func.count(Connection.id),
                func.count(distinct(counterpart)),
            ).where(accepted)
        )
        active_connections, people_helped = counts.one()

        return {
            "messages_sent": int(messages_sent),
            "active_connections": int(active_connections or 0),
            "people_helped": int(people_helped or 0),
        }
