"""Schemas for plan generation, retrieval and task updates."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from lifeplan.api.schemas.common import ClockTime, IsoDate, TimezoneName


class GeneratePlanRequest(BaseModel):
    user_id: UUID
    date: Optional[IsoDate] = Field(default=None, description="Defaults to today in the timezone.")
    timezone: Optional[TimezoneName] = Field(default=None, description="IANA timezone name.")


class GeneratePlanResponse(BaseModel):
    message: str
    date: str
    timezone: str
    fallback_used: bool
    request_id: str


class PlanDocumentPayload(BaseModel):
    id: UUID
    user_id: UUID
    date: str
    timezone: str
    data: Dict[str, Any]
    created_at: datetime
    updated_at: datetime


class PlanResponse(BaseModel):
    message: str
    plan: PlanDocumentPayload
    request_id: str


class DailyTask(BaseModel):
    id: str = Field(..., min_length=1)
    title: str
    time: ClockTime = Field(..., description="HH:MM, 24h.")
    type: Literal["workout", "meal", "reading", "work", "rest"]
    completed: bool = False
    description: Optional[str] = None


class LongTermPlan(BaseModel):
    model_config = ConfigDict(extra="allow")

    description: str
    milestones: List[str] = Field(default_factory=list)


class MonthlyPlan(BaseModel):
    model_config = ConfigDict(extra="allow")

    description: str
    key_tasks: List[str] = Field(default_factory=list)


class ComprehensivePlanRequest(BaseModel):
    user_id: UUID
    long_term_plan: Optional[LongTermPlan] = None
    monthly_plan: Optional[MonthlyPlan] = None
    daily_tasks: Optional[List[DailyTask]] = None
    timezone: Optional[TimezoneName] = None

    @model_validator(mode="after")
    def check_task_ids_unique(self) -> "ComprehensivePlanRequest":
        if self.daily_tasks:
            ids = [task.id for task in self.daily_tasks]
            if len(ids) != len(set(ids)):
                raise ValueError("daily_tasks ids must be unique")
        return self


class ComprehensivePlanSaveResponse(BaseModel):
    message: str
    saved: Dict[str, bool]
    request_id: str


class ComprehensivePlanData(BaseModel):
    long_term_plan: Optional[Dict[str, Any]] = None
    monthly_plan: Optional[Dict[str, Any]] = None
    daily_tasks: Optional[List[Dict[str, Any]]] = None


class ComprehensivePlanResponse(BaseModel):
    message: str
    data: ComprehensivePlanData
    request_id: str


class UpdateTaskRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: UUID
    task_id: str = Field(..., alias="taskId", min_length=1)
    completed: bool
    date: Optional[IsoDate] = None
    timezone: Optional[TimezoneName] = Field(default=None, description="Used only when a new plan has to be created.")


class UpdateTaskResponse(BaseModel):
    message: str
    task: Dict[str, Any]
    request_id: str
