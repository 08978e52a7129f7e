"""
Role-specific profiles.

Subjects and availability are structured JSON columns: callers always see
lists and mappings, never encoded text.
"""

from sqlalchemy import Column, Float, ForeignKey, JSON, String
from sqlalchemy.orm import relationship

from .base import Base


class TutorProfile(Base):
    """Subjects, weekly availability and rate for a tutor."""

    __tablename__ = "tutor_profiles"

    id = Column(String, primary_key=True)
    user_id = Column(
        String,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    subjects = Column(JSON, nullable=False, default=list)
    # e.g. {"monday": ["09:00-12:00"], "friday": ["14:00-18:00"]}
    availability = Column(JSON, nullable=False, default=dict)
    hourly_rate = Column(Float, nullable=False, default=0.0)

    user = relationship("User", back_populates="tutor_profile")

    def teaches(self, subject: str) -> bool:
        """Case-insensitive subject match."""
        wanted = subject.strip().lower()
        return any(s.lower() == wanted for s in (self.subjects or []))


class StudentProfile(Base):
    """Grade level and subjects a student is looking for help with."""

    __tablename__ = "student_profiles"

    id = Column(String, primary_key=True)
    user_id = Column(
        String,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    grade_level = Column(String, nullable=True)
    subjects_needed = Column(JSON, nullable=False, default=list)

    user = relationship("User", back_populates="student_profile")
