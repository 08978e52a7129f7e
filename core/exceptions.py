"""
Service-layer error taxonomy.

Services raise these; routers translate them into HTTP responses.
No error implies a partial write: every service rolls back before raising.
"""


class TutoringServiceError(Exception):
    """Base exception for scheduling, messaging and connection errors."""

    status_code = 500


class ValidationError(TutoringServiceError):
    """Malformed, missing or contradictory input."""

    status_code = 400


class ForbiddenError(TutoringServiceError):
    """Caller lacks the relationship or role required for the action."""

    status_code = 403


class NotFoundError(TutoringServiceError):
    """Referenced record does not exist or is not in the expected state."""

    status_code = 404


class ConflictError(TutoringServiceError):
    """A scheduling overlap was detected."""

    status_code = 409


class StorageError(TutoringServiceError):
    """Underlying persistence failure."""

    status_code = 500
