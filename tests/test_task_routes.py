# tests/test_task_routes.py

from __future__ import annotations

from bson import ObjectId


def _create(client, **body):
    body.setdefault("title", "Buy milk")
    resp = client.post("/api/tasks", json=body)
    assert resp.status_code == 201
    return resp.get_json()


def test_health(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["ok"] is True
    assert data["status"] == "ok"
    assert data["time"].endswith("Z")


def test_create_returns_full_task(client):
    data = _create(client, category=" errands ", dueDate="2024-01-01T00:00:00Z")
    assert ObjectId.is_valid(data["id"])
    assert data["title"] == "Buy milk"
    assert data["category"] == "errands"
    assert data["dueDate"] == "2024-01-01T00:00:00Z"
    assert data["done"] is False
    assert data["archived"] is False
    assert data["createdAt"] and data["updatedAt"]


def test_create_validation_error_shape(client):
    resp = client.post("/api/tasks", json={"title": "   "})
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Title is required", "field": "title"}


def test_create_without_body(client):
    resp = client.post("/api/tasks", data="not json", content_type="text/plain")
    assert resp.status_code == 400
    assert "error" in resp.get_json()


def test_create_rejects_bad_due_date(client):
    resp = client.post("/api/tasks", json={"title": "x", "dueDate": "31/12/2024"})
    assert resp.status_code == 400
    assert resp.get_json()["field"] == "dueDate"


def test_list_query_params(client):
    work = _create(client, title="a", category="work")
    _create(client, title="b", category="home")
    client.post(f"/api/tasks/{work['id']}/toggle", json={"field": "done"})

    resp = client.get("/api/tasks?category=work&done=true")
    assert resp.status_code == 200
    assert [t["title"] for t in resp.get_json()] == ["a"]

    resp = client.get("/api/tasks?sort=title&order=asc")
    assert [t["title"] for t in resp.get_json()] == ["a", "b"]


def test_list_hides_archived_unless_requested(client):
    _create(client, title="live")
    old = _create(client, title="old")
    resp = client.patch(f"/api/tasks/{old['id']}/archive")
    assert resp.status_code == 200
    assert resp.get_json()["archived"] is True

    assert [t["title"] for t in client.get("/api/tasks").get_json()] == ["live"]
    everything = client.get("/api/tasks?includeArchived=true").get_json()
    assert {t["title"] for t in everything} == {"live", "old"}


def test_get_single(client):
    task = _create(client)
    resp = client.get(f"/api/tasks/{task['id']}")
    assert resp.status_code == 200
    assert resp.get_json() == task


def test_patch_partial(client):
    task = _create(client, dueDate="2024-01-01T00:00:00Z")
    resp = client.patch(f"/api/tasks/{task['id']}", json={"category": "work"})
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["category"] == "work"
    assert data["title"] == task["title"]
    assert data["dueDate"] == task["dueDate"]

    resp = client.patch(f"/api/tasks/{task['id']}", json={"dueDate": None})
    assert resp.get_json()["dueDate"] is None


def test_patch_errors(client):
    task = _create(client)
    assert client.patch("/api/tasks/bad-id", json={"title": "x"}).status_code == 400
    assert client.patch(f"/api/tasks/{ObjectId()}", json={"title": "x"}).status_code == 404
    assert client.patch(f"/api/tasks/{task['id']}", json={"title": ""}).status_code == 400
    assert client.patch(f"/api/tasks/{task['id']}", json=["x"]).status_code == 400


def test_toggle_post_and_patch(client):
    task = _create(client)
    resp = client.post(f"/api/tasks/{task['id']}/toggle", json={"field": "done"})
    assert resp.status_code == 200
    assert resp.get_json()["done"] is True

    resp = client.patch(f"/api/tasks/{task['id']}/toggle", json={"field": "done", "value": True})
    assert resp.get_json()["done"] is True


def test_toggle_errors(client):
    task = _create(client)
    resp = client.post(f"/api/tasks/{task['id']}/toggle", json={})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "field required"
    assert client.post(f"/api/tasks/{ObjectId()}/toggle", json={"field": "done"}).status_code == 404


def test_archive_missing(client):
    assert client.patch(f"/api/tasks/{ObjectId()}/archive").status_code == 404


def test_delete(client):
    task = _create(client)
    resp = client.delete(f"/api/tasks/{task['id']}")
    assert resp.status_code == 204
    assert resp.data == b""

    assert client.get(f"/api/tasks/{task['id']}").status_code == 404
    assert client.delete(f"/api/tasks/{task['id']}").status_code == 404
    assert client.delete("/api/tasks/nope").status_code == 400


def test_todos_alias(client):
    task = _create(client)
    resp = client.get("/api/todos")
    assert [t["id"] for t in resp.get_json()] == [task["id"]]


def test_unknown_route_is_json_404(client):
    resp = client.get("/api/unknown")
    assert resp.status_code == 404
    assert resp.get_json() == {"error": "Not Found"}


def test_store_failure_is_500(app, client, store, monkeypatch):
    from backend.services.errors import StoreError

    def boom(*_args, **_kwargs):
        raise StoreError("Failed to list tasks")

    monkeypatch.setattr(store, "find", boom)
    resp = client.get("/api/tasks")
    assert resp.status_code == 500
    assert resp.get_json() == {"error": "Internal Server Error"}


def test_collection_accepts_trailing_slash(client):
    resp = client.post("/api/tasks/", json={"title": "x"})
    assert resp.status_code == 201
    created = resp.get_json()

    for path in ("/api/tasks/", "/api/todos/"):
        resp = client.get(path)
        assert resp.status_code == 200
        assert [t["id"] for t in resp.get_json()] == [created["id"]]
    assert client.post("/api/todos/", json={"title": "y"}).status_code == 201
