"""Daily plan generation, retrieval and task update routes."""
from __future__ import annotations

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from lifeplan.api.schemas.common import DATE_PATTERN, check_timezone
from lifeplan.api.schemas.plan import (
    ComprehensivePlanData,
    ComprehensivePlanRequest,
    ComprehensivePlanResponse,
    ComprehensivePlanSaveResponse,
    GeneratePlanRequest,
    GeneratePlanResponse,
    PlanDocumentPayload,
    PlanResponse,
    UpdateTaskRequest,
    UpdateTaskResponse,
)
from lifeplan.core.config import settings
from lifeplan.core.context import bind_user
from lifeplan.db.deps import get_db
from lifeplan.observability.metrics import log_metric, timed
from lifeplan.observability.tracing import trace
from lifeplan.services.comprehensive_plans import load_comprehensive_plans, save_comprehensive_plans
from lifeplan.services.daily_planning import generate_and_store_daily_plan
from lifeplan.services.errors import PlanDataCorruptedError, ProfileNotFoundError, TaskNotFoundError
from lifeplan.services.plan_store import PlanStore, daily_key, today_in
from lifeplan.services.task_updates import update_task

logger = logging.getLogger(__name__)

router = APIRouter()

PROFILE_MISSING_DETAIL = "Profile not found. Please complete your profile first."
CORRUPT_PLAN_DETAIL = "Error parsing plan data"


@router.post(
    "/plan/generate",
    response_model=GeneratePlanResponse,
    status_code=status.HTTP_202_ACCEPTED,
    tags=["plan"],
)
def generate_plan(
    payload: GeneratePlanRequest,
    http_request: Request,
    db: Session = Depends(get_db),
) -> GeneratePlanResponse:
    """Generate the timeline plan for a day and store it, replacing any previous one."""
    request_id = getattr(http_request.state, "request_id", None)
    timezone = payload.timezone or settings.default_timezone
    date_key = payload.date or daily_key(today_in(timezone))
    metadata = {"route": "/plan/generate", "date": date_key, "timezone": timezone}

    with bind_user(payload.user_id), timed("plan.generate", metadata), trace("plan.generate.request", metadata=metadata):
        try:
            stored = generate_and_store_daily_plan(db, user_id=payload.user_id, date_key=date_key, timezone=timezone)
        except ProfileNotFoundError:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=PROFILE_MISSING_DETAIL)

    log_metric("plan.generate.request.success", 1, metadata={"fallback_used": stored.fallback_used})
    return GeneratePlanResponse(
        message="Plan generated",
        date=date_key,
        timezone=timezone,
        fallback_used=stored.fallback_used,
        request_id=request_id or "",
    )


@router.get("/plan/today", response_model=PlanResponse, tags=["plan"])
def read_today_plan(
    http_request: Request,
    user_id: UUID = Query(..., description="User ID owning the plan"),
    timezone: Optional[str] = Query(default=None, description="IANA timezone used to decide what 'today' is"),
    db: Session = Depends(get_db),
) -> PlanResponse:
    resolved = _resolve_timezone(timezone)
    date_key = daily_key(today_in(resolved))
    with bind_user(user_id):
        return _plan_response(db, user_id, date_key, http_request, not_found="Plan not found for today")


@router.get("/plan", response_model=PlanResponse, tags=["plan"])
def read_plan(
    http_request: Request,
    user_id: UUID = Query(..., description="User ID owning the plan"),
    date: str = Query(..., pattern=DATE_PATTERN, description="Plan day, YYYY-MM-DD"),
    db: Session = Depends(get_db),
) -> PlanResponse:
    """Return the stored plan for a day."""
    with bind_user(user_id):
        return _plan_response(db, user_id, date, http_request, not_found="Plan not found for this date")


@router.post("/plan/comprehensive", response_model=ComprehensivePlanSaveResponse, tags=["plan"])
def save_comprehensive(
    payload: ComprehensivePlanRequest,
    http_request: Request,
    db: Session = Depends(get_db),
) -> ComprehensivePlanSaveResponse:
    """Save long-term, monthly and today's task plans in one call."""
    request_id = getattr(http_request.state, "request_id", None)
    timezone = payload.timezone or settings.default_timezone

    with bind_user(payload.user_id), trace("plan.comprehensive.save", metadata={"timezone": timezone}):
        saved = save_comprehensive_plans(
            db,
            user_id=payload.user_id,
            today=today_in(timezone),
            timezone=timezone,
            long_term_plan=payload.long_term_plan.model_dump() if payload.long_term_plan else None,
            monthly_plan=payload.monthly_plan.model_dump() if payload.monthly_plan else None,
            daily_tasks=[task.model_dump(exclude_none=True) for task in payload.daily_tasks]
            if payload.daily_tasks is not None
            else None,
        )

    log_metric("plan.comprehensive.save.success", 1, metadata=saved)
    return ComprehensivePlanSaveResponse(
        message="Planning data saved successfully",
        saved=saved,
        request_id=request_id or "",
    )


@router.get("/plan/comprehensive", response_model=ComprehensivePlanResponse, tags=["plan"])
def read_comprehensive(
    http_request: Request,
    user_id: UUID = Query(..., description="User ID owning the plans"),
    timezone: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
) -> ComprehensivePlanResponse:
    request_id = getattr(http_request.state, "request_id", None)
    resolved = _resolve_timezone(timezone)

    with bind_user(user_id):
        try:
            data = load_comprehensive_plans(db, user_id=user_id, today=today_in(resolved))
        except PlanDataCorruptedError as exc:
            logger.error("Comprehensive plan read failed: %s", exc)
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=CORRUPT_PLAN_DETAIL)

    return ComprehensivePlanResponse(
        message="Planning data retrieved successfully",
        data=ComprehensivePlanData(**data),
        request_id=request_id or "",
    )


@router.post("/plan/update-task", response_model=UpdateTaskResponse, tags=["plan"])
def update_plan_task(
    payload: UpdateTaskRequest,
    http_request: Request,
    db: Session = Depends(get_db),
) -> UpdateTaskResponse:
    """Mark one task of a day's plan complete or incomplete.

    A day without a stored plan first gets the default full-day template.
    """
    request_id = getattr(http_request.state, "request_id", None)
    timezone = payload.timezone or settings.default_timezone
    date_key = payload.date or daily_key(today_in(timezone))
    metadata = {"route": "/plan/update-task", "date": date_key, "task_id": payload.task_id}

    with bind_user(payload.user_id), timed("task.update", metadata):
        try:
            result = update_task(
                db,
                user_id=payload.user_id,
                date_key=date_key,
                task_id=payload.task_id,
                completed=payload.completed,
                timezone=timezone,
            )
        except TaskNotFoundError:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
        except PlanDataCorruptedError as exc:
            logger.error("Task update aborted: %s", exc)
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=CORRUPT_PLAN_DETAIL)

    log_metric("task.update.changed", 1 if result.changed else 0, metadata={"materialized": result.materialized})
    return UpdateTaskResponse(message="Task updated successfully", task=result.task, request_id=request_id or "")


def _plan_response(db: Session, user_id: UUID, date_key: str, http_request: Request, *, not_found: str) -> PlanResponse:
    request_id = getattr(http_request.state, "request_id", None)
    store = PlanStore(db)
    document = store.get(user_id, date_key)
    if document is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=not_found)
    try:
        payload = store.load_payload(document)
    except PlanDataCorruptedError as exc:
        logger.error("Plan read failed: %s", exc)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=CORRUPT_PLAN_DETAIL)

    return PlanResponse(
        message="Plan retrieved successfully",
        plan=PlanDocumentPayload(
            id=document.id,
            user_id=document.user_id,
            date=document.date_key,
            timezone=document.timezone,
            data=payload,
            created_at=document.created_at,
            updated_at=document.updated_at,
        ),
        request_id=request_id or "",
    )


def _resolve_timezone(timezone: Optional[str]) -> str:
    if not timezone:
        return settings.default_timezone
    try:
        return check_timezone(timezone)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
