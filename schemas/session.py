"""Pydantic schemas for session scheduling endpoints."""

from datetime import date, datetime, time
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from core.scheduling import parse_hhmm


class CreateSessionRequest(BaseModel):
    """Request to book a session on an accepted connection."""

    connection_id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    scheduled_date: date
    start_time: time = Field(..., description="HH:MM")
    end_time: time = Field(..., description="HH:MM, same day, after start_time")
    description: Optional[str] = None
    subject: Optional[str] = None
    meeting_link: Optional[str] = None

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def parse_wall_clock(cls, v):
        if isinstance(v, str):
            try:
                return parse_hhmm(v)
            except ValueError:
                raise ValueError("Time must be in HH:MM format")
        return v


class UpdateSessionStatusRequest(BaseModel):
    status: str
    notes: Optional[str] = None


class SessionResponse(BaseModel):
    """Session joined with participant display names."""

    id: str
    connection_id: str
    tutor_id: str
    student_id: str
    tutor_name: Optional[str] = None
    student_name: Optional[str] = None
    tutor_email: Optional[str] = None
    student_email: Optional[str] = None
    title: str
    description: str = ""
    subject: str = ""
    scheduled_date: date
    start_time: time
    end_time: time
    duration_minutes: int
    status: str
    meeting_link: str = ""
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

    @field_validator("status", mode="before")
    @classmethod
    def status_value(cls, v):
        return getattr(v, "value", v)


class SessionStatsResponse(BaseModel):
    total_sessions: int
    scheduled_sessions: int
    completed_sessions: int
    cancelled_sessions: int
    no_show_sessions: int
    total_minutes_taught: int


class DeleteSessionResponse(BaseModel):
    message: str
