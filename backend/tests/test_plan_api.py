from __future__ import annotations

from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from lifeplan.db.base import Base
from lifeplan.db.deps import get_db
from lifeplan.db.models.action_log import PlanActionLog
from lifeplan.db.models.plan_document import PlanDocument
from lifeplan.main import app
from lifeplan.services import daily_plan_generator
from lifeplan.services.daily_plan_generator import SAMPLE_TIMELINE
from lifeplan.services.plan_store import daily_key, today_in


@pytest.fixture()
def client(monkeypatch):
    monkeypatch.setattr(daily_plan_generator, "get_llm_client", lambda: None)
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


def _create_profile(test_client: TestClient, **overrides) -> UUID:
    user_id = uuid4()
    payload = {
        "user_id": str(user_id),
        "work_study": "Architect",
        "hobbies": "Sketching",
        "sports": "Yoga",
        "location": "Oslo",
        "reading": "Biographies",
    }
    payload.update(overrides)
    resp = test_client.post("/profile", json=payload)
    assert resp.status_code == 200
    return user_id


def test_generate_plan_requires_profile(client):
    test_client, _ = client

    resp = test_client.post("/plan/generate", json={"user_id": str(uuid4()), "date": "2024-05-01"})

    assert resp.status_code == 404
    assert resp.json()["detail"] == "Profile not found. Please complete your profile first."


def test_generate_then_read_fallback_plan(client):
    test_client, session_factory = client
    user_id = _create_profile(test_client)

    resp = test_client.post(
        "/plan/generate",
        json={"user_id": str(user_id), "date": "2024-05-01", "timezone": "Europe/Oslo"},
    )
    assert resp.status_code == 202
    assert resp.json()["fallback_used"] is True
    assert resp.json()["date"] == "2024-05-01"

    read = test_client.get("/plan", params={"user_id": str(user_id), "date": "2024-05-01"})
    assert read.status_code == 200
    plan = read.json()["plan"]
    assert plan["timezone"] == "Europe/Oslo"
    assert plan["data"]["date"] == "2024-05-01"
    items = plan["data"]["items"]
    assert len(items) == len(SAMPLE_TIMELINE)
    assert items[5]["title"] == "Yoga session"
    assert items[8]["title"] == "Reading time"

    with session_factory() as db:
        log = db.query(PlanActionLog).filter_by(user_id=user_id, action_type="plan_generated").one()
        assert log.action_payload["fallback_used"] is True


def test_regenerating_replaces_the_day(client):
    test_client, session_factory = client
    user_id = _create_profile(test_client)

    for _ in range(2):
        resp = test_client.post("/plan/generate", json={"user_id": str(user_id), "date": "2024-05-01"})
        assert resp.status_code == 202

    with session_factory() as db:
        assert db.query(PlanDocument).filter_by(user_id=user_id).count() == 1


@pytest.mark.parametrize(
    "body",
    [
        {"date": "2024-13-01"},
        {"date": "2024-02-30"},
        {"date": "05/01/2024"},
        {"timezone": "Mars/Olympus"},
        {"timezone": "America"},
    ],
)
def test_generate_rejects_bad_date_or_timezone(client, body):
    test_client, _ = client
    user_id = _create_profile(test_client)

    resp = test_client.post("/plan/generate", json={"user_id": str(user_id), **body})

    assert resp.status_code == 422


def test_read_missing_plan_returns_404(client):
    test_client, _ = client

    resp = test_client.get("/plan", params={"user_id": str(uuid4()), "date": "2024-05-01"})

    assert resp.status_code == 404


def test_read_corrupt_plan_returns_500(client):
    test_client, session_factory = client
    user_id = _create_profile(test_client)
    test_client.post("/plan/generate", json={"user_id": str(user_id), "date": "2024-05-01"})

    with session_factory() as db:
        document = db.query(PlanDocument).filter_by(user_id=user_id).one()
        document.plan_json = "not json at all"
        db.commit()

    resp = test_client.get("/plan", params={"user_id": str(user_id), "date": "2024-05-01"})

    assert resp.status_code == 500
    assert resp.json()["detail"] == "Error parsing plan data"


def test_today_plan_uses_timezone(client):
    test_client, _ = client
    user_id = _create_profile(test_client)
    today = daily_key(today_in("Pacific/Kiritimati"))
    test_client.post(
        "/plan/generate",
        json={"user_id": str(user_id), "timezone": "Pacific/Kiritimati"},
    )

    resp = test_client.get("/plan/today", params={"user_id": str(user_id), "timezone": "Pacific/Kiritimati"})

    assert resp.status_code == 200
    assert resp.json()["plan"]["date"] == today

    bad = test_client.get("/plan/today", params={"user_id": str(user_id), "timezone": "Nowhere/Land"})
    assert bad.status_code == 422


def test_update_task_materializes_default_day(client):
    test_client, session_factory = client
    user_id = uuid4()

    resp = test_client.post(
        "/plan/update-task",
        json={"user_id": str(user_id), "taskId": "5", "completed": True, "date": "2024-05-02"},
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "Task updated successfully"
    assert body["task"]["title"] == "Deep Work Session"
    assert body["task"]["completed"] is True

    read = test_client.get("/plan", params={"user_id": str(user_id), "date": "2024-05-02"})
    tasks = read.json()["plan"]["data"]["daily_tasks"]
    assert len(tasks) == 9
    assert [task["id"] for task in tasks if task["completed"]] == ["5"]


def test_update_task_unknown_id_returns_404(client):
    test_client, _ = client

    resp = test_client.post(
        "/plan/update-task",
        json={"user_id": str(uuid4()), "taskId": "99", "completed": True, "date": "2024-05-02"},
    )

    assert resp.status_code == 404
    assert resp.json()["detail"] == "Task not found"


def test_update_task_requires_task_id(client):
    test_client, _ = client

    resp = test_client.post("/plan/update-task", json={"user_id": str(uuid4()), "completed": True})

    assert resp.status_code == 422


def test_comprehensive_plans_round_trip(client):
    test_client, _ = client
    user_id = uuid4()
    body = {
        "user_id": str(user_id),
        "timezone": "UTC",
        "long_term_plan": {"description": "Run a marathon", "milestones": ["10k", "half"]},
        "monthly_plan": {"description": "Base building", "key_tasks": ["3 runs a week"]},
        "daily_tasks": [
            {"id": "1", "title": "Easy run", "time": "07:00", "type": "workout"},
            {"id": "2", "title": "Stretch", "time": "21:00", "type": "rest", "completed": True},
        ],
    }

    saved = test_client.post("/plan/comprehensive", json=body)
    assert saved.status_code == 200
    assert saved.json()["saved"] == {"long_term": True, "monthly": True, "daily": True}

    read = test_client.get("/plan/comprehensive", params={"user_id": str(user_id), "timezone": "UTC"})
    assert read.status_code == 200
    data = read.json()["data"]
    assert data["long_term_plan"]["milestones"] == ["10k", "half"]
    assert data["monthly_plan"]["key_tasks"] == ["3 runs a week"]
    assert [task["id"] for task in data["daily_tasks"]] == ["1", "2"]
    assert data["daily_tasks"][0]["completed"] is False

    today = daily_key(today_in("UTC"))
    toggled = test_client.post(
        "/plan/update-task",
        json={"user_id": str(user_id), "taskId": "1", "completed": True, "date": today},
    )
    assert toggled.status_code == 200


def test_comprehensive_plans_reject_duplicate_task_ids(client):
    test_client, _ = client
    task = {"id": "1", "title": "Run", "time": "07:00", "type": "workout"}

    resp = test_client.post(
        "/plan/comprehensive",
        json={"user_id": str(uuid4()), "daily_tasks": [task, dict(task, time="08:00")]},
    )

    assert resp.status_code == 422


def test_comprehensive_read_without_data_is_empty(client):
    test_client, _ = client

    resp = test_client.get("/plan/comprehensive", params={"user_id": str(uuid4())})

    assert resp.status_code == 200
    assert resp.json()["data"] == {"long_term_plan": None, "monthly_plan": None, "daily_tasks": None}


def test_comprehensive_plans_reject_impossible_times(client):
    test_client, _ = client

    resp = test_client.post(
        "/plan/comprehensive",
        json={
            "user_id": str(uuid4()),
            "daily_tasks": [{"id": "1", "title": "Run", "time": "25:00", "type": "workout"}],
        },
    )

    assert resp.status_code == 422


@pytest.mark.parametrize("timezone", ["Europe", "posix"])
def test_today_plan_rejects_zone_directories(client, timezone):
    test_client, _ = client

    resp = test_client.get("/plan/today", params={"user_id": str(uuid4()), "timezone": timezone})

    assert resp.status_code == 422


def test_update_task_never_matches_blocks_without_ids(client):
    test_client, _ = client
    user_id = _create_profile(test_client)
    test_client.post("/plan/generate", json={"user_id": str(user_id), "date": "2024-05-01"})

    resp = test_client.post(
        "/plan/update-task",
        json={"user_id": str(user_id), "taskId": "None", "completed": True, "date": "2024-05-01"},
    )

    assert resp.status_code == 404
    read = test_client.get("/plan", params={"user_id": str(user_id), "date": "2024-05-01"})
    assert all("completed" not in item for item in read.json()["plan"]["data"]["items"])
