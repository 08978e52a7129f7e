"""
Connection model.

A connection is the relationship between one student and one tutor. It gates
both scheduling and messaging: only participants of an accepted connection
may book sessions or exchange messages.
"""

import uuid
from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import Base


class ConnectionStatus(str, PyEnum):
    """Lifecycle of a connection request. Non-pending states are terminal."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class Connection(Base):
    """Student to tutor relationship, at most one per pair, ever."""

    __tablename__ = "connections"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    student_id = Column(
        String,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    tutor_id = Column(
        String,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    status = Column(
        Enum(ConnectionStatus, name="connection_status", values_callable=lambda e: [m.value for m in e]),
        default=ConnectionStatus.PENDING,
        nullable=False,
    )

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("student_id", "tutor_id", name="uq_connections_student_tutor"),
        Index("ix_connections_tutor_status", "tutor_id", "status"),
    )

    # Relationships
    student = relationship("User", foreign_keys=[student_id], lazy="joined")
    tutor = relationship("User", foreign_keys=[tutor_id], lazy="joined")
    messages = relationship(
        "Message",
        back_populates="connection",
        cascade="all, delete-orphan",
        order_by="Message.timestamp"
    )
    sessions = relationship("Session", back_populates="connection", cascade="all, delete-orphan")

    # =========================================================================
    # Helper Properties
    # =========================================================================

    @property
    def is_pending(self) -> bool:
        return self.status == ConnectionStatus.PENDING

    @property
    def is_accepted(self) -> bool:
        return self.status == ConnectionStatus.ACCEPTED

    def has_participant(self, user_id: str) -> bool:
        """Check if user is the student or the tutor of this connection."""
        return user_id in (self.student_id, self.tutor_id)

    def counterpart_id(self, user_id: str) -> str:
        """Return the other participant's id."""
        return self.tutor_id if user_id == self.student_id else self.student_id

    def counterpart(self, user_id: str):
        """Return the other participant's User (relationships must be loaded)."""
        return self.tutor if user_id == self.student_id else self.student
