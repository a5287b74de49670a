"""Long-term, monthly and daily plans saved and read as one bundle."""
from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from lifeplan.services.plan_locks import plan_lock
from lifeplan.services.plan_store import PlanStore, daily_key, long_term_key, monthly_key
from lifeplan.services.task_updates import locate_task_list


def save_comprehensive_plans(
    db: Session,
    *,
    user_id: UUID,
    today: date,
    timezone: str,
    long_term_plan: Optional[Dict[str, Any]] = None,
    monthly_plan: Optional[Dict[str, Any]] = None,
    daily_tasks: Optional[List[Dict[str, Any]]] = None,
) -> Dict[str, bool]:
    """Upsert each provided part under its own key; returns which parts were written."""
    store = PlanStore(db)
    writes = []
    if long_term_plan is not None:
        writes.append((long_term_key(today.year), long_term_plan))
    if monthly_plan is not None:
        writes.append((monthly_key(today.year, today.month), monthly_plan))
    if daily_tasks is not None:
        writes.append((daily_key(today), {"daily_tasks": daily_tasks}))

    for date_key, payload in writes:
        with plan_lock(user_id, date_key):
            store.upsert(user_id, date_key, timezone, payload)

    return {
        "long_term": long_term_plan is not None,
        "monthly": monthly_plan is not None,
        "daily": daily_tasks is not None,
    }


def load_comprehensive_plans(db: Session, *, user_id: UUID, today: date) -> Dict[str, Any]:
    store = PlanStore(db)
    long_term = store.get(user_id, long_term_key(today.year))
    monthly = store.get(user_id, monthly_key(today.year, today.month))
    daily = store.get(user_id, daily_key(today))

    daily_tasks = None
    if daily is not None:
        _, daily_tasks = locate_task_list(store.load_payload(daily), daily.date_key)

    return {
        "long_term_plan": store.load_payload(long_term) if long_term else None,
        "monthly_plan": store.load_payload(monthly) if monthly else None,
        "daily_tasks": daily_tasks,
    }
