"""
User model.

Identity (id, role) comes from the auth collaborator's token and is synced
here on first sight. Name, email, bio and avatar are read-only join sources
for connection, session and message payloads.
"""

from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import Column, String, Text, DateTime, Enum, Index
from sqlalchemy.orm import relationship

from .base import Base


class UserRole(str, PyEnum):
    """Role of a platform user."""

    STUDENT = "student"
    TUTOR = "tutor"


class User(Base):
    """Student or tutor account."""

    __tablename__ = "users"

    # Primary key (from the auth provider's `sub` claim)
    id = Column(String, primary_key=True)

    email = Column(String, unique=True, nullable=True)
    name = Column(String, nullable=False, default="")
    role = Column(Enum(UserRole, values_callable=lambda e: [m.value for m in e]), nullable=False)
    bio = Column(Text, nullable=True)
    avatar_url = Column(String, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # =========================================================================
    # Relationships
    # =========================================================================

    tutor_profile = relationship(
        "TutorProfile", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )
    student_profile = relationship(
        "StudentProfile", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )

    __table_args__ = (Index("ix_users_role", "role"),)

    # =========================================================================
    # Helper Properties
    # =========================================================================

    @property
    def is_tutor(self) -> bool:
        return self.role == UserRole.TUTOR

    @property
    def is_student(self) -> bool:
        return self.role == UserRole.STUDENT

    def to_summary(self) -> dict:
        """Profile summary joined into other payloads."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "bio": self.bio,
            "avatar_url": self.avatar_url,
        }
