"""Schemas for the AI daily task list endpoints."""
from __future__ import annotations

from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from lifeplan.api.schemas.common import IsoDate, TimezoneName
from lifeplan.api.schemas.plan import DailyTask


class DailyTasksRequest(BaseModel):
    user_id: UUID
    date: Optional[IsoDate] = Field(default=None, description="Defaults to today in the timezone.")
    timezone: Optional[TimezoneName] = None


class DailyTasksResponse(BaseModel):
    daily_tasks: List[DailyTask]
    date: str
    timezone: str
    fallback_used: bool
    request_id: str


class ToggleTaskRequest(BaseModel):
    user_id: UUID
    date: IsoDate
    id: str = Field(..., min_length=1)
    completed: bool


class ToggleTaskResponse(BaseModel):
    message: str
    daily_tasks: List[Dict[str, Any]]
    request_id: str
