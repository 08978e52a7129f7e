"""Tutor directory - read-only discovery of tutors and their profiles."""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from models.user import User, UserRole

logger = logging.getLogger(__name__)


class TutorDirectoryService:
    """Lists tutors with structured subjects, availability and rate."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_tutors(self, subject: Optional[str] = None) -> list[User]:
        """
        List tutors ordered by name.

        Args:
            subject: Optional case-insensitive subject the tutor must teach.
                     Tutors without a profile never match a subject filter.
        """
        result = await self.db.execute(
            select(User)
            .where(User.role == UserRole.TUTOR)
            .options(selectinload(User.tutor_profile))
            .order_by(User.name.asc())
        )
        tutors = list(result.scalars().all())

        if subject and subject.strip():
            tutors = [t for t in tutors if t.tutor_profile is not None and t.tutor_profile.teaches(subject)]

        return tutors
