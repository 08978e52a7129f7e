"""Sessions router: booking, listing, status changes and stats."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import AuthContext, get_current_user
from core.config import settings
from core.database import get_db
from core.exceptions import TutoringServiceError
from core.services.session_service import SessionService
from routers.errors import handle_service_error
from schemas.session import (
    CreateSessionRequest,
    DeleteSessionResponse,
    SessionResponse,
    SessionStatsResponse,
    UpdateSessionStatusRequest,
)

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=SessionResponse,
    summary="Book a session",
    description=(
        "Either participant of an accepted connection books a session. "
        "Fails with 409 if the tutor or the student already has a scheduled "
        "session overlapping the window on that date."
    ),
    operation_id="create_session",
    responses={
        400: {"description": "Missing fields or end time not after start time"},
        403: {"description": "Not a participant, or connection not accepted"},
        404: {"description": "Connection not found"},
        409: {"description": "Time conflict"},
    },
)
async def create_session(
    request: CreateSessionRequest,
    auth: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> SessionResponse:
    service = SessionService(db)
    try:
        session = await service.create_session(
            connection_id=request.connection_id,
            caller_id=auth.user_id,
            title=request.title,
            scheduled_date=request.scheduled_date,
            start_time=request.start_time,
            end_time=request.end_time,
            description=request.description,
            subject=request.subject,
            meeting_link=request.meeting_link,
        )
    except TutoringServiceError as e:
        handle_service_error(e)

    return SessionResponse.model_validate(session)


@router.get(
    "",
    response_model=list[SessionResponse],
    summary="List my sessions",
    description="Sessions where the caller is tutor or student, newest date first.",
    operation_id="list_sessions",
)
async def list_sessions(
    status_filter: Optional[str] = Query(None, alias="status"),
    month: Optional[int] = Query(None),
    year: Optional[int] = Query(None),
    auth: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[SessionResponse]:
    service = SessionService(db)
    try:
        sessions = await service.list_sessions(auth.user_id, status_filter, month, year)
    except TutoringServiceError as e:
        handle_service_error(e)

    return [SessionResponse.model_validate(s) for s in sessions]


@router.get(
    "/upcoming",
    response_model=list[SessionResponse],
    summary="List upcoming sessions",
    description="Scheduled sessions that have not started yet, soonest first.",
    operation_id="list_upcoming_sessions",
)
async def list_upcoming(
    limit: int = Query(settings.UPCOMING_SESSIONS_DEFAULT_LIMIT),
    auth: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[SessionResponse]:
    service = SessionService(db)
    try:
        sessions = await service.list_upcoming(auth.user_id, limit)
    except TutoringServiceError as e:
        handle_service_error(e)

    return [SessionResponse.model_validate(s) for s in sessions]


@router.get(
    "/stats",
    response_model=SessionStatsResponse,
    summary="Session statistics",
    description="Counts per status and total minutes of completed sessions.",
    operation_id="get_session_stats",
)
async def get_stats(
    auth: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> SessionStatsResponse:
    service = SessionService(db)
    stats = await service.get_stats(auth.user_id)
    return SessionStatsResponse(**stats)


@router.patch(
    "/{session_id}/status",
    response_model=SessionResponse,
    summary="Update session status",
    description="Either participant relabels the session and may attach notes.",
    operation_id="update_session_status",
    responses={
        400: {"description": "Invalid status"},
        403: {"description": "Not a participant"},
        404: {"description": "Session not found"},
        409: {"description": "Re-scheduling would overlap another session"},
    },
)
async def update_status(
    session_id: str,
    request: UpdateSessionStatusRequest,
    auth: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> SessionResponse:
    service = SessionService(db)
    try:
        session = await service.update_status(session_id, auth.user_id, request.status, request.notes)
    except TutoringServiceError as e:
        handle_service_error(e)

    return SessionResponse.model_validate(session)


@router.delete(
    "/{session_id}",
    response_model=DeleteSessionResponse,
    summary="Delete a session",
    description="Only scheduled sessions can be deleted.",
    operation_id="delete_session",
    responses={
        400: {"description": "Session is not scheduled"},
        403: {"description": "Not a participant"},
        404: {"description": "Session not found"},
    },
)
async def delete_session(
    session_id: str,
    auth: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> DeleteSessionResponse:
    service = SessionService(db)
    try:
        await service.delete_session(session_id, auth.user_id)
    except TutoringServiceError as e:
        handle_service_error(e)

    return DeleteSessionResponse(message="Session deleted successfully")
