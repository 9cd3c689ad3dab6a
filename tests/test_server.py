# tests/test_server.py

from __future__ import annotations

import json
from types import SimpleNamespace

from taskboard.cli.bootstrap import create_server_app


def _create(http, **body):
    return http.post("/api/tasks", json=body)


def test_list_starts_empty(http) -> None:
    resp = http.get("/api/tasks")
    assert resp.status_code == 200
    assert resp.get_json() == []


def test_create_then_get(http) -> None:
    resp = _create(http, title="Create API endpoints", priority="high", dueDate="2025-03-04")
    assert resp.status_code == 201
    created = resp.get_json()
    assert created["status"] == "todo"
    assert created["priority"] == "high"
    assert created["createdAt"] == created["updatedAt"]

    fetched = http.get(f"/api/tasks/{created['id']}")
    assert fetched.status_code == 200
    assert fetched.get_json() == created


def test_create_without_title_is_400(http) -> None:
    resp = _create(http, description="no title")
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Title is required"}
    assert http.get("/api/tasks").get_json() == []


def test_create_with_non_json_body_is_400(http) -> None:
    resp = http.post("/api/tasks", data="title=x", content_type="application/x-www-form-urlencoded")
    assert resp.status_code == 400
    assert "error" in resp.get_json()


def test_get_unknown_is_404(http) -> None:
    resp = http.get("/api/tasks/404")
    assert resp.status_code == 404
    assert resp.get_json() == {"error": "Task not found"}


def test_put_merges_and_clears(http) -> None:
    task = _create(http, title="Docs", assignee="bob", description="old").get_json()

    resp = http.put(f"/api/tasks/{task['id']}", json={"status": "in-review", "assignee": None})
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["status"] == "in-review"
    assert body["description"] == "old"
    assert "assignee" not in body
    assert body["updatedAt"] >= task["updatedAt"]


def test_put_invalid_status_is_400_and_unknown_is_404(http) -> None:
    task = _create(http, title="Docs").get_json()
    assert http.put(f"/api/tasks/{task['id']}", json={"status": "doing"}).status_code == 400
    assert http.put("/api/tasks/missing", json={"status": "done"}).status_code == 404


def test_delete_twice(http) -> None:
    task = _create(http, title="Temp").get_json()

    first = http.delete(f"/api/tasks/{task['id']}")
    assert first.status_code == 204
    assert first.data == b""

    second = http.delete(f"/api/tasks/{task['id']}")
    assert second.status_code == 404


def test_duplicate_endpoint(http) -> None:
    task = _create(http, title="Report").get_json()
    _create(http, title="Report Card")

    one = http.post(f"/api/tasks/{task['id']}/duplicate")
    assert one.status_code == 201
    assert one.get_json()["title"] == "Report (1)"

    two = http.post(f"/api/tasks/{one.get_json()['id']}/duplicate")
    assert two.get_json()["title"] == "Report (2)"

    assert http.post("/api/tasks/missing/duplicate").status_code == 404
    titles = [t["title"] for t in http.get("/api/tasks").get_json()]
    assert titles == ["Report", "Report Card", "Report (1)", "Report (2)"]


def test_every_mutation_is_persisted_to_the_json_file(http, settings) -> None:
    task = _create(http, title="Persist me").get_json()
    http.put(f"/api/tasks/{task['id']}", json={"dueDate": "2025-09-09"})

    doc = json.loads(settings.tasks_path.read_text("utf-8"))
    assert doc["tasks"][0]["title"] == "Persist me"
    assert doc["tasks"][0]["dueDate"] == "2025-09-09"


def test_corrupt_store_is_500(http, settings) -> None:
    settings.tasks_path.write_text("{broken", "utf-8")
    resp = http.get("/api/tasks")
    assert resp.status_code == 500
    assert "error" in resp.get_json()


def test_cors_and_health(http) -> None:
    resp = http.get("/api/health")
    assert resp.get_json() == {"status": "ok"}
    assert resp.headers["Access-Control-Allow-Origin"] == "*"
    assert "PUT" in resp.headers["Access-Control-Allow-Methods"]


def test_seeded_server_lists_demo_tasks(tmp_path) -> None:
    settings = SimpleNamespace(
        data_dir=tmp_path,
        tasks_path=tmp_path / "seeded.json",
        seed_demo=True,
        cors_origin="http://localhost:5173",
    )
    http = create_server_app(settings=settings).test_client()

    resp = http.get("/api/tasks")
    assert len(resp.get_json()) == 5
    assert resp.headers["Access-Control-Allow-Origin"] == "http://localhost:5173"
