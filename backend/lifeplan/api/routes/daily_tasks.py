"""AI daily task list routes."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from lifeplan.api.schemas.daily_tasks import (
    DailyTasksRequest,
    DailyTasksResponse,
    ToggleTaskRequest,
    ToggleTaskResponse,
)
from lifeplan.core.config import settings
from lifeplan.core.context import bind_user
from lifeplan.db.deps import get_db
from lifeplan.observability.metrics import log_metric, timed
from lifeplan.services.daily_planning import generate_and_store_daily_tasks
from lifeplan.services.errors import (
    PlanDataCorruptedError,
    PlanNotFoundError,
    ProfileNotFoundError,
    TaskNotFoundError,
)
from lifeplan.services.plan_store import daily_key, today_in
from lifeplan.services.task_updates import update_task

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ai")


@router.post("/daily-tasks", response_model=DailyTasksResponse, tags=["daily-tasks"])
def create_daily_tasks(
    payload: DailyTasksRequest,
    http_request: Request,
    db: Session = Depends(get_db),
) -> DailyTasksResponse:
    """Generate today's task list from the profile and store it for the day."""
    request_id = getattr(http_request.state, "request_id", None)
    timezone = payload.timezone or settings.default_timezone
    date_key = payload.date or daily_key(today_in(timezone))

    with bind_user(payload.user_id), timed("daily_tasks.generate", {"date": date_key}):
        try:
            stored = generate_and_store_daily_tasks(db, user_id=payload.user_id, date_key=date_key, timezone=timezone)
        except ProfileNotFoundError:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Profile not found. Please complete your profile first.",
            )

    log_metric("daily_tasks.generate.count", len(stored.daily_tasks), metadata={"fallback_used": stored.fallback_used})
    return DailyTasksResponse(
        daily_tasks=stored.daily_tasks,
        date=date_key,
        timezone=timezone,
        fallback_used=stored.fallback_used,
        request_id=request_id or "",
    )


@router.post("/daily-tasks/toggle", response_model=ToggleTaskResponse, tags=["daily-tasks"])
def toggle_daily_task(
    payload: ToggleTaskRequest,
    http_request: Request,
    db: Session = Depends(get_db),
) -> ToggleTaskResponse:
    request_id = getattr(http_request.state, "request_id", None)

    with bind_user(payload.user_id):
        try:
            result = update_task(
                db,
                user_id=payload.user_id,
                date_key=payload.date,
                task_id=payload.id,
                completed=payload.completed,
                materialize_missing=False,
            )
        except PlanNotFoundError:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No daily tasks found for this date")
        except TaskNotFoundError:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
        except PlanDataCorruptedError as exc:
            logger.error("Toggle aborted: %s", exc)
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Error parsing plan data")

    return ToggleTaskResponse(
        message="Task updated successfully",
        daily_tasks=result.tasks,
        request_id=request_id or "",
    )
