"""Render a stored profile as the context block used by planning prompts."""
from __future__ import annotations

from typing import Any, List

READING_FALLBACK_LINE = "- Reading: Open to AI recommendations based on interests"


def build_profile_context(profile: Any) -> str:
    """Summarize a profile in a few deterministic lines.

    Age is included when set; height and weight only when both are set. An empty
    reading preference yields a placeholder line so the model knows to suggest
    books itself.
    """
    lines: List[str] = [
        "User Profile:",
        f"- Work/Study: {profile.work_study}",
        f"- Hobbies: {profile.hobbies}",
        f"- Sports/Exercise: {profile.sports}",
        f"- Location: {profile.location}",
    ]

    if profile.age_years:
        lines.append(f"- Age: {_format_number(profile.age_years)} years")
    if profile.weight_kg and profile.height_cm:
        lines.append(f"- Physical: {_format_number(profile.weight_kg)}kg, {_format_number(profile.height_cm)}cm")

    reading = (profile.reading or "").strip()
    if reading:
        lines.append(f"- Reading: {profile.reading}")
    else:
        lines.append(READING_FALLBACK_LINE)

    return "\n".join(lines)


def _format_number(value: float | int) -> str:
    # 70.0 -> "70", 70.5 -> "70.5"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
