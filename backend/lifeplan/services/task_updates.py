"""Apply task completion changes to persisted daily plans."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy.orm import Session

from lifeplan.core.config import settings
from lifeplan.db.models.action_log import PlanActionLog
from lifeplan.observability.tracing import trace
from lifeplan.services.errors import PlanDataCorruptedError, PlanNotFoundError, TaskNotFoundError
from lifeplan.services.plan_locks import plan_lock
from lifeplan.services.plan_store import PlanStore

logger = logging.getLogger(__name__)

# Two generators historically wrote different list keys; checked in this order.
TASK_LIST_KEYS = ("daily_tasks", "items")

DEFAULT_DAY_TEMPLATE: Tuple[Dict[str, Any], ...] = (
    {"id": "1", "title": "Sleep", "time": "23:00", "type": "rest", "completed": False, "description": "Sleep from 11:00 PM to 6:00 AM"},
    {"id": "2", "title": "Morning Routine", "time": "06:00", "type": "rest", "completed": False, "description": "Wake up and morning preparation"},
    {"id": "3", "title": "Morning Workout", "time": "07:00", "type": "workout", "completed": False, "description": "30min cardio + stretching"},
    {"id": "4", "title": "Healthy Breakfast", "time": "08:30", "type": "meal", "completed": False, "description": "Oatmeal with berries"},
    {"id": "5", "title": "Deep Work Session", "time": "09:00", "type": "work", "completed": False, "description": "Focus block - main projects"},
    {"id": "6", "title": "Lunch Break", "time": "12:30", "type": "meal", "completed": False, "description": "Healthy lunch and short walk"},
    {"id": "7", "title": "Afternoon Work", "time": "14:00", "type": "work", "completed": False, "description": "Secondary tasks and meetings"},
    {"id": "8", "title": "Evening Reading", "time": "20:00", "type": "reading", "completed": False, "description": "Read for 30-45 minutes"},
    {"id": "9", "title": "Wind Down", "time": "21:30", "type": "rest", "completed": False, "description": "Prepare for sleep and relaxation"},
)


@dataclass
class TaskUpdateResult:
    task: Dict[str, Any]
    tasks: List[Dict[str, Any]]
    list_key: str
    changed: bool
    materialized: bool


def default_day_template() -> Dict[str, Any]:
    return {"daily_tasks": [dict(task) for task in DEFAULT_DAY_TEMPLATE]}


def update_task(
    db: Session,
    *,
    user_id: UUID,
    date_key: str,
    task_id: str,
    completed: bool,
    timezone: Optional[str] = None,
    materialize_missing: bool = True,
) -> TaskUpdateResult:
    """
    Set ``completed`` on one task of a stored plan, leaving everything else as-is.

    A missing plan is first materialized from the nine-task template (or raises
    PlanNotFoundError when ``materialize_missing`` is False). The write goes back
    under whichever list key the document already used, with its original
    timezone.
    """
    store = PlanStore(db)
    metadata = {"date_key": date_key, "task_id": task_id, "completed": completed}

    with trace("task.update", metadata=metadata, user_id=str(user_id)), plan_lock(user_id, date_key):
        document = store.get(user_id, date_key)
        materialized = False
        if document is None:
            if not materialize_missing:
                raise PlanNotFoundError(date_key)
            document = _materialize_template(db, store, user_id, date_key, timezone or settings.default_timezone)
            materialized = True

        payload = store.load_payload(document)
        list_key, tasks = locate_task_list(payload, date_key)

        task = next((entry for entry in tasks if _has_id(entry, task_id)), None)
        if task is None:
            raise TaskNotFoundError(task_id, date_key)

        changed = bool(task.get("completed")) != completed
        task["completed"] = completed

        if changed:
            store.ensure_user(user_id)
            db.add(
                PlanActionLog(
                    user_id=user_id,
                    action_type="task_completed" if completed else "task_uncompleted",
                    action_payload={"date_key": date_key, "task_id": str(task_id), "list_key": list_key},
                    reason="Task completion toggled",
                )
            )
        store.upsert(user_id, date_key, document.timezone, payload)

    logger.info("Task %s in plan %s set completed=%s (changed=%s)", task_id, date_key, completed, changed)
    return TaskUpdateResult(task=task, tasks=tasks, list_key=list_key, changed=changed, materialized=materialized)


def _materialize_template(db: Session, store: PlanStore, user_id: UUID, date_key: str, timezone: str):
    logger.info("No plan stored for %s; materializing default day template", date_key)
    store.ensure_user(user_id)
    db.add(
        PlanActionLog(
            user_id=user_id,
            action_type="plan_template_materialized",
            action_payload={"date_key": date_key, "task_count": len(DEFAULT_DAY_TEMPLATE)},
            reason="Task update requested before any plan existed",
        )
    )
    return store.upsert(user_id, date_key, timezone, default_day_template())


def locate_task_list(payload: Dict[str, Any], date_key: str) -> Tuple[str, List[Any]]:
    for key in TASK_LIST_KEYS:
        if key in payload:
            tasks = payload[key]
            if not isinstance(tasks, list):
                raise PlanDataCorruptedError(date_key, f"'{key}' is not a list")
            return key, tasks
    return TASK_LIST_KEYS[0], []


def _has_id(entry: Any, task_id: str) -> bool:
    # entries without an id (timeline blocks) never match
    if not isinstance(entry, dict) or entry.get("id") is None:
        return False
    return str(entry["id"]) == str(task_id)
