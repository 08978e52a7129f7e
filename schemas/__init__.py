"""Pydantic schemas for API request/response validation."""

from .connection import (
    ConnectionRequest,
    ConnectionRespondRequest,
    ConnectionCreatedResponse,
    ConnectionRespondResponse,
    ConnectionResponse,
)
from .message import (
    SendMessageRequest,
    MessageResponse,
    ConversationResponse,
    MessageStatsResponse,
)
from .session import (
    CreateSessionRequest,
    UpdateSessionStatusRequest,
    SessionResponse,
    SessionStatsResponse,
    DeleteSessionResponse,
)
from .user import (
    UserSummary,
    TutorProfileResponse,
    StudentProfileResponse,
    TutorListItem,
    UserSyncResponse,
    CurrentUserResponse,
)

__all__ = [
    # Connections
    "ConnectionRequest",
    "ConnectionRespondRequest",
    "ConnectionCreatedResponse",
    "ConnectionRespondResponse",
    "ConnectionResponse",
    # Messages
    "SendMessageRequest",
    "MessageResponse",
    "ConversationResponse",
    "MessageStatsResponse",
    # Sessions
    "CreateSessionRequest",
    "UpdateSessionStatusRequest",
    "SessionResponse",
    "SessionStatsResponse",
    "DeleteSessionResponse",
    # Users
    "UserSummary",
    "TutorProfileResponse",
    "StudentProfileResponse",
    "TutorListItem",
    "UserSyncResponse",
    "CurrentUserResponse",
]
