"""Test factories for creating model instances."""

from .connection_factory import ConnectionFactory
from .message_factory import MessageFactory
from .session_factory import SessionFactory
from .user_factory import StudentFactory, TutorFactory, UserFactory

__all__ = [
    "ConnectionFactory",
    "MessageFactory",
    "SessionFactory",
    "StudentFactory",
    "TutorFactory",
    "UserFactory",
]
