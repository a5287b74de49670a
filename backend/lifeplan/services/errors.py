"""Domain errors raised by plan services and mapped to HTTP responses by routes."""
from __future__ import annotations


class ProfileNotFoundError(LookupError):
    """The user has not completed a profile yet."""


class PlanNotFoundError(LookupError):
    """No plan document exists for the requested (user, date key)."""

    def __init__(self, date_key: str):
        super().__init__(f"Plan not found for {date_key}")
        self.date_key = date_key


class TaskNotFoundError(LookupError):
    """The plan exists but holds no task with the requested id."""

    def __init__(self, task_id: str, date_key: str):
        super().__init__(f"Task {task_id} not found in plan {date_key}")
        self.task_id = task_id
        self.date_key = date_key


class PlanDataCorruptedError(ValueError):
    """A stored plan payload is not a JSON object."""

    def __init__(self, date_key: str, detail: str):
        super().__init__(f"Stored plan {date_key} is unreadable: {detail}")
        self.date_key = date_key
