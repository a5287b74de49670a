from __future__ import annotations

import json
from types import SimpleNamespace
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from lifeplan.db.base import Base
from lifeplan.db.deps import get_db
from lifeplan.db.models.plan_document import PlanDocument
from lifeplan.main import app
from lifeplan.services import daily_tasks_generator
from lifeplan.services.daily_tasks_generator import FALLBACK_DAILY_TASKS


class _StubClient:
    """Minimal stand-in for the OpenAI client returning one canned reply."""

    def __init__(self, content: str):
        message = SimpleNamespace(content=content)
        completion = SimpleNamespace(choices=[SimpleNamespace(message=message)])
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=lambda **kwargs: completion))


@pytest.fixture()
def client(monkeypatch):
    monkeypatch.setattr(daily_tasks_generator, "get_llm_client", lambda: None)
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):  # pragma: no cover - sqlite setup
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    Base.metadata.create_all(bind=engine)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client, TestingSessionLocal
    app.dependency_overrides.clear()


def _create_profile(test_client: TestClient) -> UUID:
    user_id = uuid4()
    resp = test_client.post(
        "/profile",
        json={
            "user_id": str(user_id),
            "work_study": "Designer",
            "hobbies": "Photography",
            "sports": "Cycling",
            "location": "Utrecht",
        },
    )
    assert resp.status_code == 200
    return user_id


def test_daily_tasks_require_profile(client):
    test_client, _ = client

    resp = test_client.post("/ai/daily-tasks", json={"user_id": str(uuid4())})

    assert resp.status_code == 404


def test_fallback_tasks_are_stored_for_the_day(client):
    test_client, session_factory = client
    user_id = _create_profile(test_client)

    resp = test_client.post("/ai/daily-tasks", json={"user_id": str(user_id), "date": "2024-06-10"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["fallback_used"] is True
    assert [task["title"] for task in body["daily_tasks"]] == [task["title"] for task in FALLBACK_DAILY_TASKS]

    with session_factory() as db:
        document = db.query(PlanDocument).filter_by(user_id=user_id, date_key="2024-06-10").one()
        assert json.loads(document.plan_json)["daily_tasks"] == body["daily_tasks"]


def test_model_tasks_are_normalized(client, monkeypatch):
    test_client, _ = client
    user_id = _create_profile(test_client)
    reply = {
        "daily_tasks": [
            {"id": "1", "title": "Ride", "time": "06:30", "type": "Workout"},
            {"id": "1", "title": "Edit photos", "time": "later", "type": "hobby"},
        ]
    }
    monkeypatch.setattr(daily_tasks_generator, "get_llm_client", lambda: _StubClient(json.dumps(reply)))

    resp = test_client.post("/ai/daily-tasks", json={"user_id": str(user_id), "date": "2024-06-10"})

    assert resp.status_code == 200
    tasks = resp.json()["daily_tasks"]
    assert resp.json()["fallback_used"] is False
    assert tasks[0]["type"] == "workout"
    assert tasks[1]["type"] == "work"
    assert tasks[0]["id"] != tasks[1]["id"]
    assert tasks[1]["time"] == "12:00"


def test_toggle_returns_whole_list(client):
    test_client, _ = client
    user_id = _create_profile(test_client)
    tasks = test_client.post(
        "/ai/daily-tasks", json={"user_id": str(user_id), "date": "2024-06-10"}
    ).json()["daily_tasks"]

    resp = test_client.post(
        "/ai/daily-tasks/toggle",
        json={"user_id": str(user_id), "date": "2024-06-10", "id": tasks[1]["id"], "completed": True},
    )

    assert resp.status_code == 200
    toggled = resp.json()["daily_tasks"]
    assert [task["completed"] for task in toggled] == [False, True, False]


def test_toggle_without_plan_returns_404(client):
    test_client, session_factory = client

    resp = test_client.post(
        "/ai/daily-tasks/toggle",
        json={"user_id": str(uuid4()), "date": "2024-06-10", "id": "1", "completed": True},
    )

    assert resp.status_code == 404
    with session_factory() as db:
        assert db.query(PlanDocument).count() == 0


def test_toggle_requires_date(client):
    test_client, _ = client

    resp = test_client.post(
        "/ai/daily-tasks/toggle",
        json={"user_id": str(uuid4()), "id": "1", "completed": True},
    )

    assert resp.status_code == 422
