"""Schemas for profile capture."""
from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ProfileRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    user_id: UUID
    work_study: str = Field(..., min_length=1, description="What the user works on or studies.")
    hobbies: str = Field(..., min_length=1)
    sports: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1)
    weight: Optional[float] = Field(default=None, ge=0, description="Weight in kg.")
    height: Optional[float] = Field(default=None, ge=0, description="Height in cm.")
    age: Optional[int] = Field(default=None, ge=0)
    reading: Optional[str] = None


class ProfilePayload(BaseModel):
    id: UUID
    user_id: UUID
    work_study: str
    hobbies: str
    sports: str
    location: str
    weight: Optional[float]
    height: Optional[float]
    age: Optional[int]
    reading: Optional[str]
    created_at: datetime
    updated_at: datetime


class ProfileResponse(BaseModel):
    message: str
    profile: ProfilePayload
    request_id: str
