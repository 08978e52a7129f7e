"""Translation of service-layer errors into HTTP exceptions."""

from fastapi import HTTPException, status

from core.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    StorageError,
    TutoringServiceError,
    ValidationError,
)


def handle_service_error(e: TutoringServiceError):
    """Convert service errors to HTTP exceptions."""
    if isinstance(e, ValidationError):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    elif isinstance(e, ForbiddenError):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    elif isinstance(e, NotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    elif isinstance(e, ConflictError):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    elif isinstance(e, StorageError):
        # Logged by the app-level handler; details stay server-side
        raise e
    else:
        raise HTTPException(status_code=e.status_code, detail=str(e))
