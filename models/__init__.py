"""Database models for the tutoring platform."""

from .base import Base
from .user import User, UserRole
from .profile import TutorProfile, StudentProfile
from .connection import Connection, ConnectionStatus
from .session import Session, SessionStatus
from .message import Message

__all__ = [
    "Base",
    "User",
    "UserRole",
    "TutorProfile",
    "StudentProfile",
    "Connection",
    "ConnectionStatus",
    "Session",
    "SessionStatus",
    "Message",
]
