"""Pydantic schemas for the connection ledger endpoints."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from schemas.user import UserSummary


class ConnectionRequest(BaseModel):
    """Request body for a student asking a tutor to connect."""

    tutor_id: str = Field(..., min_length=1, description="User ID of the tutor")


class ConnectionRespondRequest(BaseModel):
    """Tutor's decision on a pending request."""

    action: Literal["accept", "reject"]


class ConnectionCreatedResponse(BaseModel):
    message: str
    connection_id: str
    status: str


class ConnectionRespondResponse(BaseModel):
    message: str
    status: str


class ConnectionResponse(BaseModel):
    """A connection seen from the caller's side."""

    id: str
    status: str
    created_at: Optional[datetime] = None
    student_id: str
    tutor_id: str
    counterpart: UserSummary
    # Present for tutors viewing their students
    grade_level: Optional[str] = None
    subjects_needed: Optional[list[str]] = None
