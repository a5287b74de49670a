"""Chat-completion plumbing shared by the plan generators."""
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

import openai

from lifeplan.core.config import settings

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?\n?", re.IGNORECASE)


@dataclass(frozen=True)
class ModelAttempt:
    """Outcome of one model call: a parsed payload or the reason it was unusable."""

    payload: Optional[Dict[str, Any]] = None
    failure: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.payload is not None

    @classmethod
    def succeeded(cls, payload: Dict[str, Any]) -> "ModelAttempt":
        return cls(payload=payload)

    @classmethod
    def failed(cls, reason: str) -> "ModelAttempt":
        return cls(failure=reason)


def get_llm_client() -> Optional[openai.OpenAI]:
    """Return a configured client, or None when no API key is set."""
    if not settings.llm_api_key:
        return None
    return openai.OpenAI(
        api_key=settings.llm_api_key,
        base_url=settings.llm_base_url or None,
        timeout=settings.llm_timeout_seconds,
        max_retries=settings.llm_max_retries,
    )


def request_completion(client: openai.OpenAI, *, model: str, system_prompt: str, user_prompt: str) -> str:
    """Run a single chat completion and return its text content."""
    completion = client.chat.completions.create(
        model=model,
        temperature=settings.llm_temperature,
        max_tokens=settings.llm_max_tokens,
        messages=[
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ],
    )
    if not completion.choices or not completion.choices[0].message.content:
        raise ValueError("model returned no content")
    return completion.choices[0].message.content


def strip_code_fences(content: str) -> str:
    """Remove markdown code fences (```json ... ```) wrapped around a reply."""
    if "```" not in content:
        return content.strip()
    return _FENCE_RE.sub("", content).strip()


def parse_json_object(content: str) -> Dict[str, Any]:
    """Parse a reply as a JSON object.

    Falls back to the outermost ``{...}`` span when the model wraps the JSON in
    prose. Raises ValueError when no object can be recovered.
    """
    text = strip_code_fences(content)
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        start, end = text.find("{"), text.rfind("}")
        if start == -1 or end <= start:
            raise
        parsed = json.loads(text[start : end + 1])
    if not isinstance(parsed, dict):
        raise ValueError(f"expected a JSON object, got {type(parsed).__name__}")
    return parsed


def attempt_json_completion(
    client: openai.OpenAI,
    *,
    model: str,
    system_prompt: str,
    user_prompt: str,
) -> ModelAttempt:
    """Call the model and parse its reply; every failure becomes a failed attempt."""
    try:
        content = request_completion(client, model=model, system_prompt=system_prompt, user_prompt=user_prompt)
        payload = parse_json_object(content)
    except openai.OpenAIError as exc:
        return ModelAttempt.failed(f"model request failed: {type(exc).__name__}: {exc}")
    except ValueError as exc:
        return ModelAttempt.failed(f"unusable model output: {exc}")
    return ModelAttempt.succeeded(payload)
