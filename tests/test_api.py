"""
HTTP tests for the planner endpoint and the read endpoints (FastAPI TestClient).
"""
from __future__ import annotations

import asyncio
import os

import pytest
from fastapi.testclient import TestClient

from aurora_planner.api.app import PLANNER_PATH, create_app
from aurora_planner.domain.suggestions.models import PENDING, Suggestion

from support import NOW, FakeGenerator, make_services, suggestion_item, temp_db_path


@pytest.fixture
def env():
    path = temp_db_path()
    gen = FakeGenerator()
    services = asyncio.run(make_services(path, generator=gen))
    user_token = asyncio.run(services.auth.issue("u1"))
    service_token = asyncio.run(services.auth.issue("cron", is_service=True))
    client = TestClient(create_app(services=services))
    yield client, services, gen, {"Authorization": f"Bearer {user_token}"}, {"Authorization": f"Bearer {service_token}"}
    if os.path.exists(path):
        os.unlink(path)


def _seed_pending(services, sid: str = "s-1", user_id: str = "u1") -> None:
    asyncio.run(services.suggestions_repo.insert(Suggestion(
        id=sid, user_id=user_id, suggestion_type="new_task", title="Walk", reason="Sunny",
        data={"title": "Walk", "scheduled_date": "2024-05-06T17:00:00Z"}, confidence=0.5,
        status=PENDING, created_at=NOW,
    )))


def test_health(env):
    client, *_ = env
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


def test_requires_bearer_token(env):
    client, *_ = env
    assert client.post(PLANNER_PATH, json={"action": "analyze_and_suggest"}).status_code == 401
    r = client.post(PLANNER_PATH, json={"action": "analyze_and_suggest"}, headers={"Authorization": "Bearer nope"})
    assert r.status_code == 401
    assert "error" in r.json()


def test_analyze_and_suggest(env):
    client, services, gen, user, _ = env
    gen.items = [
        suggestion_item("new_task", {"title": "Gym", "scheduled_date": "2024-05-07T17:00:00Z"}, 0.9),
        suggestion_item("time_block", {"start": "2024-05-07T09:00:00Z", "end": "2024-05-07T11:00:00Z"}, 0.4),
    ]
    r = client.post(PLANNER_PATH, json={"action": "analyze_and_suggest"}, headers=user)
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["message"] == "Generated 2 intelligent suggestions"
    assert [s["status"] for s in body["suggestions"]] == ["auto_applied", "pending"]
    assert body["suggestions"][0]["type"] == "new_task"

    tasks = client.get("/tasks", headers=user).json()["tasks"]
    assert [t["title"] for t in tasks] == ["Gym"]

    pending = client.get("/suggestions", headers=user).json()["suggestions"]
    assert [s["type"] for s in pending] == ["time_block"]


def test_apply_and_reject(env):
    client, services, _, user, _ = env
    _seed_pending(services, "s-1")
    _seed_pending(services, "s-2")

    r = client.post(PLANNER_PATH, json={"action": "apply_suggestion", "suggestionId": "s-1"}, headers=user)
    assert r.status_code == 200
    assert r.json() == {"success": True, "message": "Suggestion applied"}

    r = client.post(PLANNER_PATH, json={"action": "reject_suggestion", "suggestionId": "s-2"}, headers=user)
    assert r.json() == {"success": True, "message": "Suggestion rejected"}

    r = client.post(PLANNER_PATH, json={"action": "apply_suggestion", "suggestionId": "s-1"}, headers=user)
    assert r.status_code == 409

    r = client.post(PLANNER_PATH, json={"action": "apply_suggestion", "suggestionId": "zzz"}, headers=user)
    assert r.status_code == 404


def test_bad_requests(env):
    client, _, _, user, _ = env
    r = client.post(PLANNER_PATH, json={"action": "dance"}, headers=user)
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid action"}

    r = client.post(PLANNER_PATH, json={"action": "apply_suggestion"}, headers=user)
    assert r.status_code == 400


def test_user_id_override_requires_service_token(env):
    client, services, _, user, service = env
    _seed_pending(services, "s-9", user_id="u2")

    r = client.post(
        PLANNER_PATH, json={"action": "reject_suggestion", "suggestionId": "s-9", "userId": "u2"}, headers=user
    )
    assert r.status_code == 403

    r = client.post(
        PLANNER_PATH, json={"action": "reject_suggestion", "suggestionId": "s-9", "userId": "u2"}, headers=service
    )
    assert r.status_code == 200


def test_tasks_and_insights(env):
    client, _, _, user, _ = env
    r = client.post(
        "/tasks",
        json={"title": "Laundry", "scheduled_date": "2024-05-06T07:00:00Z", "category": "Home"},
        headers=user,
    )
    assert r.status_code == 201
    task_id = r.json()["task"]["id"]

    r = client.post(f"/tasks/{task_id}/complete", json={}, headers=user)
    assert r.json()["task"]["completed"] is True

    insights = client.get("/insights", headers=user).json()
    assert insights["completionRate"] == 100
    assert insights["tasksCompleted"] == 1
    assert insights["totalTasks"] == 1
    assert insights["avgDelay"] == 1


def test_empty_title_is_bad_request(env):
    client, _, _, user, _ = env
    r = client.post("/tasks", json={"title": " ", "scheduled_date": "2024-05-06T07:00:00Z"}, headers=user)
    assert r.status_code == 400


def test_import_skips_known_notion_ids(env):
    client, _, _, user, _ = env
    body = {
        "tasks": [
            {"notion_id": "n-1", "title": "Synced page", "scheduled_date": "2024-05-08T09:00:00Z"},
            {"notion_id": "n-2", "title": "Other page", "scheduled_date": "2024-05-08T10:00:00Z", "priority": "high"},
        ]
    }
    r = client.post("/tasks/import", json=body, headers=user)
    assert r.status_code == 200
    assert r.json() == {"imported": 2, "skipped": 0}

    r = client.post("/tasks/import", json=body, headers=user)
    assert r.json() == {"imported": 0, "skipped": 2}

    tasks = client.get("/tasks", headers=user).json()["tasks"]
    assert sorted(t["notion_id"] for t in tasks) == ["n-1", "n-2"]


def test_import_requires_auth(env):
    client, *_ = env
    assert client.post("/tasks/import", json={"tasks": []}).status_code == 401
