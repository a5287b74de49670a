"""Repair raw model task lists into canonical daily tasks."""
from __future__ import annotations

import re
from typing import Any, Dict, Iterable, List, Optional, Set
from uuid import uuid4

TASK_TYPES = ("workout", "meal", "reading", "work", "rest")
DEFAULT_TASK_TYPE = "work"
MINUTES_PER_DAY = 24 * 60

_TIME_RE = re.compile(r"^\d{2}:\d{2}$")
_TRUE_STRINGS = {"true", "1", "yes", "y"}


def is_valid_time(value: Any) -> bool:
    """True for ``HH:MM`` strings with a real hour (00-23) and minute (00-59)."""
    if not isinstance(value, str) or not _TIME_RE.match(value):
        return False
    hours, minutes = int(value[:2]), int(value[3:])
    return hours < 24 and minutes < 60


def time_to_minutes(value: str) -> int:
    return int(value[:2]) * 60 + int(value[3:])


def minutes_to_time(total_minutes: int) -> str:
    total_minutes %= MINUTES_PER_DAY
    return f"{total_minutes // 60:02d}:{total_minutes % 60:02d}"


def normalize_tasks(raw_tasks: Optional[Iterable[Any]]) -> List[Dict[str, Any]]:
    """
    Coerce a raw task list into canonical tasks.

    Valid ``HH:MM`` times are kept verbatim and reserved first (a time repeated
    by several tasks stays with the first of them). Tasks without one
    get ``index * floor(1440 / N)`` minutes past midnight, nudged forward a
    minute at a time (wrapping, at most 1440 probes) until the slot is free.
    Unknown types become ``work``; missing or repeated ids are replaced with a
    random hex id. Entries that are not objects are dropped.
    """
    tasks = [task for task in (raw_tasks or []) if isinstance(task, dict)]
    if not tasks:
        return []

    reserved: Set[str] = {str(task["time"]) for task in tasks if is_valid_time(task.get("time"))}
    claimed: Set[str] = set()
    step = MINUTES_PER_DAY // len(tasks)
    used_ids: Set[str] = set()
    normalized: List[Dict[str, Any]] = []

    for index, task in enumerate(tasks):
        time_value = task.get("time")
        if is_valid_time(time_value) and time_value not in claimed:
            slot = str(time_value)
        elif is_valid_time(time_value):
            # repeated hint: first holder keeps it, later ones move just after
            slot = _claim_slot(time_to_minutes(time_value), reserved)
        else:
            slot = _claim_slot(index * step, reserved)
        reserved.add(slot)
        claimed.add(slot)

        task_id = _coerce_id(task.get("id"), used_ids)
        used_ids.add(task_id)

        entry: Dict[str, Any] = {
            "id": task_id,
            "title": _coerce_text(task.get("title")),
            "time": slot,
            "type": _coerce_type(task.get("type")),
            "completed": _coerce_bool(task.get("completed")),
        }
        description = task.get("description")
        if description is not None:
            entry["description"] = _coerce_text(description)
        normalized.append(entry)

    return normalized


def _claim_slot(start_minute: int, reserved: Set[str]) -> str:
    # Linear probe; O(N^2) worst case, fine for day-sized lists.
    candidate = start_minute % MINUTES_PER_DAY
    slot = minutes_to_time(candidate)
    probes = 0
    while slot in reserved and probes < MINUTES_PER_DAY:
        candidate = (candidate + 1) % MINUTES_PER_DAY
        slot = minutes_to_time(candidate)
        probes += 1
    return slot


def _coerce_type(value: Any) -> str:
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in TASK_TYPES:
            return lowered
    return DEFAULT_TASK_TYPE


def _coerce_id(value: Any, used_ids: Set[str]) -> str:
    if value is not None and not isinstance(value, (dict, list)):
        candidate = str(value).strip()
        if candidate and candidate not in used_ids:
            return candidate
    return uuid4().hex


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    if isinstance(value, (int, float)):
        return value != 0
    return False


def _coerce_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)
