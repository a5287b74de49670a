"""LLM-backed daily timeline generation with a deterministic fallback."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from lifeplan.core.config import settings
from lifeplan.observability.metrics import log_metric
from lifeplan.observability.tracing import trace
from lifeplan.services.llm_client import ModelAttempt, attempt_json_completion, get_llm_client
from lifeplan.services.profile_context import build_profile_context

logger = logging.getLogger(__name__)

TimelineType = Literal["work", "study", "exercise", "meal", "reading", "break", "sleep", "other"]


class DailyPlanItem(BaseModel):
    """A single time block of the day."""

    start: str = Field(..., description="Start time, HH:MM 24h.")
    end: str = Field(..., description="End time, HH:MM 24h.")
    title: str
    type: TimelineType
    priority: Optional[Literal["low", "medium", "high"]] = None
    notes: Optional[str] = None


class DailyPlan(BaseModel):
    """Timeline plan for one calendar day."""

    date: str = Field(..., description="YYYY-MM-DD")
    timezone: str
    items: List[DailyPlanItem]


@dataclass
class PlanGenerationResult:
    plan: Dict[str, Any]
    fallback_used: bool
    failure_reason: Optional[str] = None


SAMPLE_TIMELINE: List[Dict[str, str]] = [
    {"start": "07:00", "end": "07:30", "title": "Morning routine", "type": "other", "priority": "medium"},
    {"start": "07:30", "end": "08:00", "title": "Breakfast", "type": "meal", "priority": "high"},
    {"start": "08:00", "end": "12:00", "title": "Work/Study time", "type": "work", "priority": "high"},
    {"start": "12:00", "end": "13:00", "title": "Lunch break", "type": "meal", "priority": "high"},
    {"start": "13:00", "end": "17:00", "title": "Work/Study time", "type": "work", "priority": "high"},
    {"start": "17:00", "end": "18:00", "title": "Exercise", "type": "exercise", "priority": "medium"},
    {"start": "18:00", "end": "19:00", "title": "Personal time", "type": "break", "priority": "low"},
    {"start": "19:00", "end": "20:00", "title": "Dinner", "type": "meal", "priority": "high"},
    {"start": "20:00", "end": "21:00", "title": "Reading/Hobbies", "type": "reading", "priority": "low"},
    {"start": "21:00", "end": "22:00", "title": "Wind down", "type": "break", "priority": "low"},
    {"start": "22:00", "end": "07:00", "title": "Sleep", "type": "sleep", "priority": "high"},
]
EXERCISE_SLOT = 5
READING_SLOT = 8

PLAN_GUIDELINES = (
    "Guidelines:\n"
    "- Create 8-12 realistic time blocks\n"
    "- Include work/study based on their profile\n"
    "- Add exercise based on their sports preferences\n"
    "- Include meals, breaks, and sleep\n"
    "- Add reading time if they have reading preferences\n"
    "- Use realistic time slots (e.g., 08:00-09:00)\n"
    "- Consider their location and typical daily patterns\n"
    "- Make it practical and achievable"
)


def generate_daily_plan(profile: Any, date: str, timezone: str) -> PlanGenerationResult:
    """Return a timeline plan for ``date``; never fails because of the model."""
    client = get_llm_client()
    if client is None:
        logger.info("LLM API key not configured; using sample daily plan.")
        log_metric("plan.fallback.used", 1, {"reason": "no_api_key", "flavor": "timeline"})
        return PlanGenerationResult(
            plan=build_sample_plan(profile, date, timezone),
            fallback_used=True,
            failure_reason="no_api_key",
        )

    with trace("plan.generate", metadata={"date": date, "timezone": timezone, "model": settings.llm_model}):
        attempt = _attempt_model_plan(client, profile, date, timezone)

    if attempt.ok:
        log_metric("plan.generate.success", 1, {"flavor": "timeline"})
        return PlanGenerationResult(plan=attempt.payload, fallback_used=False)

    logger.warning("Daily plan generation failed for %s, falling back to sample plan: %s", date, attempt.failure)
    log_metric("plan.fallback.used", 1, {"reason": "model_failure", "flavor": "timeline"})
    return PlanGenerationResult(
        plan=build_sample_plan(profile, date, timezone),
        fallback_used=True,
        failure_reason=attempt.failure,
    )


def build_sample_plan(profile: Any, date: str, timezone: str) -> Dict[str, Any]:
    """Deterministic 11-block day, lightly tailored to sports and reading."""
    items = [dict(item) for item in SAMPLE_TIMELINE]

    sports = (getattr(profile, "sports", None) or "").lower()
    if "yoga" in sports:
        items[EXERCISE_SLOT] = {
            "start": "17:00",
            "end": "18:00",
            "title": "Yoga session",
            "type": "exercise",
            "priority": "medium",
        }

    reading = getattr(profile, "reading", None) or ""
    if reading.strip():
        items[READING_SLOT] = {
            "start": "20:00",
            "end": "21:00",
            "title": "Reading time",
            "type": "reading",
            "priority": "medium",
        }

    return {"date": date, "timezone": timezone, "items": items}


def build_plan_prompts(profile: Any, date: str, timezone: str) -> tuple[str, str]:
    schema_json = json.dumps(DailyPlan.model_json_schema(), indent=2)
    system_prompt = (
        f"{build_profile_context(profile)}\n\n"
        "You are a personal productivity AI that creates daily schedules. "
        "Generate a realistic daily plan as JSON only (no markdown, no code fences).\n\n"
        "Required JSON schema:\n"
        f"{schema_json}\n\n"
        f"{PLAN_GUIDELINES}"
    )
    user_prompt = (
        f"Create a daily plan for {date} in timezone {timezone}. "
        "Consider the user's work/study situation, hobbies, and preferences. "
        "Make it realistic and balanced."
    )
    return system_prompt, user_prompt


def _attempt_model_plan(client, profile: Any, date: str, timezone: str) -> ModelAttempt:
    system_prompt, user_prompt = build_plan_prompts(profile, date, timezone)
    attempt = attempt_json_completion(
        client,
        model=settings.llm_model,
        system_prompt=system_prompt,
        user_prompt=user_prompt,
    )
    if not attempt.ok:
        return attempt
    problem = _timeline_shape_problem(attempt.payload)
    if problem:
        return ModelAttempt.failed(problem)
    return attempt


def _timeline_shape_problem(payload: Dict[str, Any]) -> Optional[str]:
    if not payload.get("date"):
        return "plan is missing 'date'"
    if not payload.get("timezone"):
        return "plan is missing 'timezone'"
    if not isinstance(payload.get("items"), list):
        return "plan 'items' is not an array"
    return None
