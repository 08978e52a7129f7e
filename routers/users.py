"""User API endpoints: identity sync, current user and the tutor directory."""

import logging
from typing import List, Optional
from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from core.auth import AuthContext, get_current_user
from core.database import get_db
from core.services.tutor_service import TutorDirectoryService
from models.profile import StudentProfile, TutorProfile
from models.user import User, UserRole
from schemas.user import CurrentUserResponse, TutorListItem, UserSyncResponse

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/sync", response_model=UserSyncResponse)
async def sync_user(auth: AuthContext = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    """Ensures the logged-in user exists in the database, with an empty role profile."""
    user_id = auth.user_id

    result = await db.execute(select(User).filter(User.id == user_id))
    user = result.scalars().first()

    if not user:
        role = UserRole(auth.role)
        new_user = User(id=user_id, role=role, name=auth.name or "", email=auth.email)
        if role == UserRole.TUTOR:
            new_user.tutor_profile = TutorProfile(id=str(uuid4()), subjects=[], availability={}, hourly_rate=0.0)
        else:
            new_user.student_profile = StudentProfile(id=str(uuid4()), subjects_needed=[])
        db.add(new_user)
        try:
            await db.commit()
            logger.info("Synced new %s user %s", role.value, user_id)
            return UserSyncResponse(status="created", user_id=user_id)
        except IntegrityError:
            # Another request created the user first; sync is idempotent.
            # Rollback resets the failed transaction before the session is reused.
            await db.rollback()
            logger.debug("User sync race condition handled: %s", user_id)
            return UserSyncResponse(status="exists", user_id=user_id)
        except SQLAlchemyError as e:
            logger.error("Database error on user sync for %s: %s", user_id, e)
            await db.rollback()
            raise HTTPException(status_code=500, detail="Database operation failed")

    return UserSyncResponse(status="exists", user_id=user_id)


@router.get("/me", response_model=CurrentUserResponse)
async def get_me(auth: AuthContext = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    """Current user's row and role profile."""
    result = await db.execute(
        select(User)
        .where(User.id == auth.user_id)
        .options(selectinload(User.tutor_profile), selectinload(User.student_profile))
    )
    user = result.scalars().first()
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    return CurrentUserResponse.model_validate(user)


@router.get("/tutors", response_model=List[TutorListItem])
async def list_tutors(
    subject: Optional[str] = Query(None, description="Case-insensitive subject the tutor teaches"),
    db: AsyncSession = Depends(get_db),
):
    """
    Public tutor directory.

    Every tutor is listed with structured subjects and availability; tutors
    that never filled in a profile show empty defaults.
    """
    service = TutorDirectoryService(db)
    tutors = await service.list_tutors(subject)

    items = []
    for tutor in tutors:
        profile = tutor.tutor_profile
        items.append(
            TutorListItem(
                id=tutor.id,
                name=tutor.name,
                bio=tutor.bio,
                avatar_url=tutor.avatar_url,
                subjects=list(profile.subjects or []) if profile else [],
                availability=dict(profile.availability or {}) if profile else {},
                hourly_rate=profile.hourly_rate if profile else 0.0,
            )
        )
    return items
