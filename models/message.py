"""
Message model.

Messages form an append-only sequence per connection, ordered by timestamp.
read_at is set once by the counterpart reading the thread and never reset.
"""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import relationship

from .base import Base


class Message(Base):
    """Text message sent by one participant of an accepted connection."""

    __tablename__ = "messages"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    connection_id = Column(String, ForeignKey("connections.id", ondelete="CASCADE"), nullable=False, index=True)
    sender_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    content = Column(Text, nullable=False)

    # Timestamps
    timestamp = Column(DateTime, default=datetime.utcnow, nullable=False)
    read_at = Column(DateTime, nullable=True)

    # =========================================================================
    # Relationships
    # =========================================================================

    connection = relationship("Connection", back_populates="messages")
    sender = relationship("User", lazy="joined")

    # =========================================================================
    # Indexes
    # =========================================================================

    __table_args__ = (Index("ix_messages_connection_timestamp", "connection_id", "timestamp"),)

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def is_read(self) -> bool:
        return self.read_at is not None

    @property
    def sender_name(self) -> str | None:
        return self.sender.name if self.sender is not None else None

