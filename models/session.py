"""
Tutoring session model.

Sessions are booked on an accepted connection. Tutor and student ids are
copied from the connection at creation time so conflict scans and listings
never have to join through connections.
"""
import uuid
from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Time,
)
from sqlalchemy.orm import relationship

from .base import Base


class SessionStatus(str, PyEnum):
    """Session status label. Any status may be set from any other."""

    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]


class Session(Base):
    """
    A scheduled tutoring meeting tied to one connection.

    Time window is the half-open interval [start_time, end_time) on
    scheduled_date. While status is `scheduled` the window must not overlap
    any other scheduled window of the same tutor or student.
    """
    __tablename__ = "sessions"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    connection_id = Column(
        String,
        ForeignKey("connections.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    tutor_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    student_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    title = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    subject = Column(String, nullable=False, default="")

    scheduled_date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    duration_minutes = Column(Integer, nullable=False)

    status = Column(
        Enum(SessionStatus, name="session_status", values_callable=lambda e: [m.value for m in e]),
        default=SessionStatus.SCHEDULED,
        nullable=False,
    )
    meeting_link = Column(String, nullable=False, default="")
    notes = Column(Text, nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        CheckConstraint("end_time > start_time", name="ck_sessions_window_positive"),
        CheckConstraint("duration_minutes > 0", name="ck_sessions_duration_positive"),
        # Conflict scans filter by participant, date and status
        Index("ix_sessions_tutor_date_status", "tutor_id", "scheduled_date", "status"),
        Index("ix_sessions_student_date_status", "student_id", "scheduled_date", "status"),
    )

    # Relationships
    connection = relationship("Connection", back_populates="sessions")
    tutor = relationship("User", foreign_keys=[tutor_id], lazy="joined")
    student = relationship("User", foreign_keys=[student_id], lazy="joined")

    # =========================================================================
    # Helper Properties
    # =========================================================================

    @property
    def is_scheduled(self) -> bool:
        return self.status == SessionStatus.SCHEDULED

    @property
    def tutor_name(self) -> str | None:
        return self.tutor.name if self.tutor is not None else None

    @property
    def student_name(self) -> str | None:
        return self.student.name if self.student is not None else None

    @property
    def tutor_email(self) -> str | None:
        return self.tutor.email if self.tutor is not None else None

    @property
    def student_email(self) -> str | None:
        return self.student.email if self.student is not None else None

    def has_participant(self, user_id: str) -> bool:
        return user_id in (self.tutor_id, self.student_id)
