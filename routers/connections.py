"""Connections router: student requests, tutor responses, listings."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import AuthContext, get_current_user, require_student, require_tutor
from core.database import get_db
from core.exceptions import TutoringServiceError
from core.services.connection_service import ConnectionService
from models.connection import Connection
from routers.errors import handle_service_error
from schemas.connection import (
    ConnectionCreatedResponse,
    ConnectionRequest,
    ConnectionRespondRequest,
    ConnectionRespondResponse,
    ConnectionResponse,
)
from schemas.user import UserSummary

logger = logging.getLogger(__name__)
router = APIRouter()


def _to_response(connection: Connection, viewer_id: str) -> ConnectionResponse:
    """Render a connection from the viewer's side, joined with the counterpart."""
    counterpart = connection.counterpart(viewer_id)
    response = ConnectionResponse(
        id=connection.id,
        status=connection.status.value,
        created_at=connection.created_at,
        student_id=connection.student_id,
        tutor_id=connection.tutor_id,
        counterpart=UserSummary.model_validate(counterpart),
    )
    if viewer_id == connection.tutor_id and counterpart.student_profile is not None:
        response.grade_level = counterpart.student_profile.grade_level
        response.subjects_needed = counterpart.student_profile.subjects_needed
    return response


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=ConnectionCreatedResponse,
    summary="Request a connection",
    description="A student asks a tutor to connect. At most one connection exists per student/tutor pair.",
    operation_id="request_connection",
    responses={
        400: {"description": "Target is not a tutor, or a request already exists"},
        403: {"description": "Caller is not a student"},
    },
)
async def request_connection(
    request: ConnectionRequest,
    auth: AuthContext = Depends(require_student),
    db: AsyncSession = Depends(get_db),
) -> ConnectionCreatedResponse:
    service = ConnectionService(db)
    try:
        connection = await service.request_connection(auth.user_id, request.tutor_id)
    except TutoringServiceError as e:
        handle_service_error(e)

    return ConnectionCreatedResponse(
        message="Connection request sent successfully",
        connection_id=connection.id,
        status=connection.status.value,
    )


@router.get(
    "",
    response_model=list[ConnectionResponse],
    summary="List my connections",
    description=(
        "Tutors see requests directed at them (filter: pending or accepted). "
        "Students see every connection they initiated."
    ),
    operation_id="list_connections",
)
async def list_connections(
    status_filter: Optional[str] = Query(None, alias="status"),
    auth: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[ConnectionResponse]:
    service = ConnectionService(db)
    try:
        connections = await service.list_connections_for(auth, status_filter)
    except TutoringServiceError as e:
        handle_service_error(e)

    return [_to_response(c, auth.user_id) for c in connections]


@router.get(
    "/requests",
    response_model=list[ConnectionResponse],
    summary="List pending requests",
    description="Pending connection requests directed at the calling tutor, newest first.",
    operation_id="list_connection_requests",
    responses={403: {"description": "Caller is not a tutor"}},
)
async def list_requests(
    auth: AuthContext = Depends(require_tutor),
    db: AsyncSession = Depends(get_db),
) -> list[ConnectionResponse]:
    service = ConnectionService(db)
    try:
        connections = await service.list_connections_for(auth, "pending")
    except TutoringServiceError as e:
        handle_service_error(e)

    return [_to_response(c, auth.user_id) for c in connections]


@router.put(
    "/{connection_id}/respond",
    response_model=ConnectionRespondResponse,
    summary="Respond to a request",
    description="The tutor accepts or rejects a pending request. A request can be answered once.",
    operation_id="respond_to_connection",
    responses={
        403: {"description": "Caller is not a tutor"},
        404: {"description": "Request not found or already processed"},
    },
)
async def respond_to_connection(
    connection_id: str,
    request: ConnectionRespondRequest,
    auth: AuthContext = Depends(require_tutor),
    db: AsyncSession = Depends(get_db),
) -> ConnectionRespondResponse:
    service = ConnectionService(db)
    try:
        connection = await service.respond_to_connection(connection_id, auth.user_id, request.action)
    except TutoringServiceError as e:
        handle_service_error(e)

    return ConnectionRespondResponse(
        message=f"Request {request.action}ed successfully",
        status=connection.status.value,
    )
