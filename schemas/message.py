"""Pydantic schemas for messaging endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from schemas.user import UserSummary


class SendMessageRequest(BaseModel):
    connection_id: str = Field(..., min_length=1)
    content: str


class MessageResponse(BaseModel):
    id: str
    connection_id: str
    sender_id: str
    sender_name: Optional[str] = None
    content: str
    timestamp: datetime
    read_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ConversationResponse(BaseModel):
    """Inbox entry for one accepted connection."""

    connection_id: str
    counterpart: UserSummary
    last_message: Optional[str] = None
    last_message_time: Optional[datetime] = None
    unread_count: int = 0

    model_config = {"from_attributes": True}


class MessageStatsResponse(BaseModel):
    messages_sent: int
    active_connections: int
    people_helped: int
