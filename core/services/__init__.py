"""
Core services for the tutoring platform.

Services encapsulate the connection ledger, access checks, session
scheduling and messaging. Each takes an AsyncSession and owns one unit of
work per call.
"""

from .access_guard import AccessGuard
from .connection_service import ConnectionService
from .message_service import ConversationSummary, MessageService
from .session_service import SessionService
from .tutor_service import TutorDirectoryService

__all__ = [
    "AccessGuard",
    "ConnectionService",
    "ConversationSummary",
    "MessageService",
    "SessionService",
    "TutorDirectoryService",
]
