"""Generate-and-store workflows for daily plans."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from lifeplan.db.models.action_log import PlanActionLog
from lifeplan.db.models.plan_document import PlanDocument
from lifeplan.services.daily_plan_generator import generate_daily_plan
from lifeplan.services.daily_tasks_generator import generate_daily_tasks
from lifeplan.services.errors import ProfileNotFoundError
from lifeplan.services.plan_locks import plan_lock
from lifeplan.services.plan_normalizer import normalize_tasks
from lifeplan.services.plan_store import PlanStore
from lifeplan.services.profile_service import get_profile

logger = logging.getLogger(__name__)


@dataclass
class StoredPlan:
    document: PlanDocument
    payload: Dict[str, Any]
    fallback_used: bool
    failure_reason: Optional[str] = None

    @property
    def daily_tasks(self) -> List[Dict[str, Any]]:
        return self.payload.get("daily_tasks", [])


def generate_and_store_daily_plan(db: Session, *, user_id: UUID, date_key: str, timezone: str) -> StoredPlan:
    """Build the timeline plan for a day and replace whatever was stored for it."""
    profile = get_profile(db, user_id)
    if profile is None:
        raise ProfileNotFoundError(str(user_id))

    result = generate_daily_plan(profile, date_key, timezone)
    store = PlanStore(db)
    with plan_lock(user_id, date_key):
        _record(
            db,
            user_id,
            "plan_generated",
            {"date_key": date_key, "fallback_used": result.fallback_used, "item_count": len(result.plan["items"])},
            result.failure_reason,
        )
        document = store.upsert(user_id, date_key, timezone, result.plan)

    logger.info("Stored timeline plan for %s (fallback=%s)", date_key, result.fallback_used)
    return StoredPlan(document, result.plan, result.fallback_used, result.failure_reason)


def generate_and_store_daily_tasks(db: Session, *, user_id: UUID, date_key: str, timezone: str) -> StoredPlan:
    """Build, normalize and persist the task list for a day under ``daily_tasks``."""
    profile = get_profile(db, user_id)
    if profile is None:
        raise ProfileNotFoundError(str(user_id))

    result = generate_daily_tasks(profile)
    payload = {"daily_tasks": normalize_tasks(result.tasks)}
    store = PlanStore(db)
    with plan_lock(user_id, date_key):
        _record(
            db,
            user_id,
            "daily_tasks_generated",
            {"date_key": date_key, "fallback_used": result.fallback_used, "task_count": len(payload["daily_tasks"])},
            result.failure_reason,
        )
        document = store.upsert(user_id, date_key, timezone, payload)

    logger.info("Stored %d daily tasks for %s (fallback=%s)", len(payload["daily_tasks"]), date_key, result.fallback_used)
    return StoredPlan(document, payload, result.fallback_used, result.failure_reason)


def _record(db: Session, user_id: UUID, action_type: str, payload: Dict[str, Any], reason: Optional[str]) -> None:
    db.add(
        PlanActionLog(
            user_id=user_id,
            action_type=action_type,
            action_payload=payload,
            reason=reason or "Generated by model",
        )
    )
