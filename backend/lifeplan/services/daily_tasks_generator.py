"""LLM-backed daily task list generation (task flavor of the daily plan)."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from lifeplan.core.config import settings
from lifeplan.observability.metrics import log_metric
from lifeplan.observability.tracing import trace
from lifeplan.services.llm_client import ModelAttempt, attempt_json_completion, get_llm_client

logger = logging.getLogger(__name__)

FALLBACK_DAILY_TASKS: List[Dict[str, Any]] = [
    {"id": "1", "title": "Morning Workout", "time": "07:00", "type": "workout", "completed": False, "description": "20min jog + stretching"},
    {"id": "2", "title": "Healthy Breakfast", "time": "08:00", "type": "meal", "completed": False, "description": "Oatmeal with berries"},
    {"id": "3", "title": "Deep Work", "time": "09:00", "type": "work", "completed": False, "description": "Focus block on priority task"},
]

TASKS_SYSTEM_PROMPT = """You are an intelligent health and productivity planner.
Based on user inputs (height, weight, age, goals, interests), generate a structured multi-layer plan:

1. Roadmap (long-term: 3+ months) with monthly milestones.
2. Monthly Planner (weekly breakdowns for habit/skill focus).
3. Daily Planner (JSON list of daily tasks).

Each task in the Daily Planner must include:
id, title, time (HH:MM, 24h), type (workout, meal, reading, work, rest), description, and completed: false.

Return ONLY valid JSON (no markdown, no prose) in this format:
{
  "roadmap": { ... },
  "monthly_plans": { ... },
  "daily_tasks": [
    {
      "id": "1",
      "title": "Morning Workout",
      "time": "07:00",
      "type": "workout",
      "completed": false,
      "description": "30min cardio + stretching"
    }
  ]
}"""


@dataclass
class TaskGenerationResult:
    tasks: List[Dict[str, Any]]
    fallback_used: bool
    failure_reason: Optional[str] = None
    roadmap: Dict[str, Any] = field(default_factory=dict)
    monthly_plans: Dict[str, Any] = field(default_factory=dict)


def build_task_user_context(profile: Any) -> Dict[str, Any]:
    return {
        "heightCm": profile.height_cm,
        "weightKg": profile.weight_kg,
        "ageYears": profile.age_years,
        "interests": profile.hobbies,
        "sports": profile.sports,
        "goals": profile.work_study,
        "location": profile.location,
        "reading": profile.reading or "",
    }


def generate_daily_tasks(profile: Any) -> TaskGenerationResult:
    """Return raw (not yet normalized) daily tasks, falling back to a fixed list."""
    client = get_llm_client()
    if client is None:
        logger.info("LLM API key not configured; using fallback daily tasks.")
        log_metric("plan.fallback.used", 1, {"reason": "no_api_key", "flavor": "tasks"})
        return TaskGenerationResult(tasks=_fallback_tasks(), fallback_used=True, failure_reason="no_api_key")

    model = settings.llm_tasks_model or settings.llm_model
    with trace("daily_tasks.generate", metadata={"model": model}):
        attempt = _attempt_model_tasks(client, profile, model)

    if not attempt.ok:
        logger.warning("Daily task generation failed, using fallback tasks: %s", attempt.failure)
        log_metric("plan.fallback.used", 1, {"reason": "model_failure", "flavor": "tasks"})
        return TaskGenerationResult(tasks=_fallback_tasks(), fallback_used=True, failure_reason=attempt.failure)

    payload = attempt.payload
    log_metric("daily_tasks.generate.count", len(payload["daily_tasks"]))
    return TaskGenerationResult(
        tasks=payload["daily_tasks"],
        fallback_used=False,
        roadmap=payload.get("roadmap") if isinstance(payload.get("roadmap"), dict) else {},
        monthly_plans=payload.get("monthly_plans") if isinstance(payload.get("monthly_plans"), dict) else {},
    )


def _attempt_model_tasks(client, profile: Any, model: str) -> ModelAttempt:
    user_prompt = f"User context: {json.dumps(build_task_user_context(profile))}"
    attempt = attempt_json_completion(client, model=model, system_prompt=TASKS_SYSTEM_PROMPT, user_prompt=user_prompt)
    if attempt.ok and not isinstance(attempt.payload.get("daily_tasks"), list):
        return ModelAttempt.failed("reply has no 'daily_tasks' array")
    return attempt


def _fallback_tasks() -> List[Dict[str, Any]]:
    return [dict(task) for task in FALLBACK_DAILY_TASKS]
