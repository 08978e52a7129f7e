"""Pydantic schemas for users, profiles and the tutor directory."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class UserSummary(BaseModel):
    """Profile summary joined into connection and conversation payloads."""

    id: str
    name: str
    email: Optional[str] = None
    bio: Optional[str] = None
    avatar_url: Optional[str] = None

    model_config = {"from_attributes": True}


class TutorProfileResponse(BaseModel):
    subjects: list[str] = Field(default_factory=list)
    availability: dict = Field(default_factory=dict)
    hourly_rate: float = 0.0

    model_config = {"from_attributes": True}


class StudentProfileResponse(BaseModel):
    grade_level: Optional[str] = None
    subjects_needed: list[str] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class TutorListItem(BaseModel):
    """Tutor directory entry."""

    id: str
    name: str
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    subjects: list[str] = Field(default_factory=list)
    availability: dict = Field(default_factory=dict)
    hourly_rate: float = 0.0


class UserSyncResponse(BaseModel):
    status: str  # "created", "exists"
    user_id: str


class CurrentUserResponse(BaseModel):
    id: str
    email: Optional[str] = None
    name: str
    role: str
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    created_at: Optional[datetime] = None
    tutor_profile: Optional[TutorProfileResponse] = None
    student_profile: Optional[StudentProfileResponse] = None

    model_config = {"from_attributes": True}

    @field_validator("role", mode="before")
    @classmethod
    def role_value(cls, v):
        return getattr(v, "value", v)
