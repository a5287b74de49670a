"""Tests for metrics helpers."""
from __future__ import annotations

from typing import Any, Dict

import pytest

from lifeplan.core.context import bind_user
from lifeplan.observability import metrics
from lifeplan.observability import tracing


class _DummyTrace:
    def __init__(self, name: str, metadata: Dict[str, Any]):
        self.name = name
        self.metadata = metadata
        self.ended = False
        self.error_info = None

    def update(self, error_info=None, **kwargs) -> None:
        self.error_info = error_info

    def end(self) -> None:
        self.ended = True


class _DummyClient:
    def __init__(self):
        self.traces: list[_DummyTrace] = []

    def trace(self, name: str, metadata: Dict[str, Any] | None = None):
        trace = _DummyTrace(name, metadata or {})
        self.traces.append(trace)
        return trace


def test_log_metric_closes_trace(monkeypatch) -> None:
    dummy_client = _DummyClient()
    monkeypatch.setattr(tracing, "get_opik_client", lambda: dummy_client)

    with bind_user("user-7"):
        metrics.log_metric("plan.fallback.used", 1, metadata={"reason": "no_api_key"})

    recorded = dummy_client.traces[0]
    assert recorded.name == "metric:plan.fallback.used"
    assert recorded.metadata["value"] == 1
    assert recorded.metadata["reason"] == "no_api_key"
    assert recorded.metadata["user_id"] == "user-7"
    assert recorded.ended is True


def test_timed_emits_latency_even_on_error(monkeypatch) -> None:
    dummy_client = _DummyClient()
    monkeypatch.setattr(tracing, "get_opik_client", lambda: dummy_client)

    with pytest.raises(RuntimeError):
        with metrics.timed("task.update", {"date": "2024-01-01"}):
            raise RuntimeError("boom")

    latency = dummy_client.traces[-1]
    assert latency.name == "metric:task.update.latency_ms"
    assert latency.metadata["value"] >= 0
    assert latency.metadata["date"] == "2024-01-01"


def test_trace_records_errors(monkeypatch) -> None:
    dummy_client = _DummyClient()
    monkeypatch.setattr(tracing, "get_opik_client", lambda: dummy_client)

    with pytest.raises(ValueError):
        with tracing.trace("plan.generate", metadata={"skip": None}):
            raise ValueError("bad plan")

    recorded = dummy_client.traces[0]
    assert "skip" not in recorded.metadata
    assert recorded.error_info == {"exception_type": "ValueError", "message": "bad plan"}
    assert recorded.ended is True


def test_trace_is_noop_without_client(monkeypatch) -> None:
    monkeypatch.setattr(tracing, "get_opik_client", lambda: None)

    with tracing.trace("plan.generate") as opened:
        assert opened is None
