"""Messages router: connection-scoped threads and the conversation inbox."""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import AuthContext, get_current_user
from core.database import get_db
from core.exceptions import TutoringServiceError
from core.services.message_service import MessageService
from routers.errors import handle_service_error
from schemas.message import (
    ConversationResponse,
    MessageResponse,
    MessageStatsResponse,
    SendMessageRequest,
)

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=MessageResponse,
    summary="Send a message",
    operation_id="send_message",
    responses={
        400: {"description": "Empty content"},
        403: {"description": "Not a participant, or connection not accepted"},
        404: {"description": "Connection not found"},
    },
)
async def send_message(
    request: SendMessageRequest,
    auth: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    service = MessageService(db)
    try:
        message = await service.send_message(request.connection_id, auth.user_id, request.content)
    except TutoringServiceError as e:
        handle_service_error(e)

    return MessageResponse.model_validate(message)


@router.get(
    "",
    response_model=list[ConversationResponse],
    summary="List conversations",
    description="Accepted connections with their latest message and unread count, most recent first.",
    operation_id="list_conversations",
)
async def list_conversations(
    auth: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[ConversationResponse]:
    service = MessageService(db)
    conversations = await service.list_conversations(auth.user_id)
    return [ConversationResponse.model_validate(c) for c in conversations]


@router.get(
    "/stats",
    response_model=MessageStatsResponse,
    summary="Messaging statistics",
    operation_id="get_message_stats",
)
async def get_message_stats(
    auth: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> MessageStatsResponse:
    service = MessageService(db)
    stats = await service.get_message_stats(auth.user_id)
    return MessageStatsResponse(**stats)


@router.get(
    "/{connection_id}",
    response_model=list[MessageResponse],
    summary="Read a thread",
    description=(
        "Messages on the connection, oldest first. Reading marks the "
        "counterpart's unread messages as read."
    ),
    operation_id="list_messages",
    responses={
        403: {"description": "Not a participant, or connection not accepted"},
        404: {"description": "Connection not found"},
    },
)
async def list_messages(
    connection_id: str,
    auth: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[MessageResponse]:
    service = MessageService(db)
    try:
        messages = await service.list_messages(connection_id, auth.user_id)
    except TutoringServiceError as e:
        handle_service_error(e)

    return [MessageResponse.model_validate(m) for m in messages]
