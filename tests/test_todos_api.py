from __future__ import annotations

from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from todo_note.main import create_app
from todo_note.settings import Settings

from .fakes import RecordingWindow

TODOS = "/api/v1/todos"


def create(client, title="Test Task", **extra):
    payload = {"title": title}
    payload.update(extra)
    return client.post(f"{TODOS}/", json=payload)


def assert_todo_shape(todo: dict):
    for key in ["id", "title", "recurrenceTag", "note", "completed", "dueDate", "createdAt", "updatedAt"]:
        assert key in todo
    assert "sortOrder" not in todo and "sort_order" not in todo
    assert isinstance(todo["id"], str)
    assert isinstance(todo["completed"], bool)
    # ISO-8601 with offset
    assert datetime.fromisoformat(todo["createdAt"]).tzinfo is not None
    assert datetime.fromisoformat(todo["updatedAt"]).tzinfo is not None


class TestHealth:
    def test_health_check(self, client):
        res = client.get("/")
        assert res.status_code == 200
        assert res.json() == {"message": "Healthy", "schemaVersion": 2}


class TestTodosCRUD:
    def test_create_minimal(self, client):
        res = create(client, " Buy milk ")
        assert res.status_code == 201
        todo = res.json()
        assert_todo_shape(todo)
        assert todo["title"] == "Buy milk"
        assert todo["completed"] is False
        assert todo["recurrenceTag"] == "none"
        assert todo["note"] == ""
        assert todo["dueDate"] is None

    def test_create_with_all_fields(self, client):
        todo = create(client, "Stretch", recurrenceTag="daily", note="10 min", dueDate="2099-12-25").json()
        assert todo["recurrenceTag"] == "daily"
        assert todo["note"] == "10 min"
        assert todo["dueDate"] == "2099-12-25"

    @pytest.mark.parametrize("title", ["", "   "])
    def test_create_blank_title(self, client, title):
        res = create(client, title)
        assert res.status_code == 400
        assert res.json() == {"error": "ValidationError", "message": "Title cannot be empty"}

    def test_create_missing_title_is_request_validation_error(self, client):
        res = client.post(f"{TODOS}/", json={"note": "x"})
        assert res.status_code == 422
        body = res.json()
        assert body.get("error") == "ValidationError"
        assert body.get("message") == "Request validation failed"
        assert isinstance(body.get("detail"), list)

    def test_list_newest_first(self, client):
        ids = [create(client, f"Task {i}").json()["id"] for i in range(4)]
        res = client.get(f"{TODOS}/")
        assert res.status_code == 200
        assert [t["id"] for t in res.json()] == list(reversed(ids))

    def test_list_filters(self, client):
        done = create(client, "Pay rent").json()["id"]
        open_ = create(client, "Water plants", note="rent a hose").json()["id"]
        client.post(f"{TODOS}/{done}/toggle")

        assert [t["id"] for t in client.get(f"{TODOS}/", params={"completed": "true"}).json()] == [done]
        assert [t["id"] for t in client.get(f"{TODOS}/", params={"completed": "false"}).json()] == [open_]
        assert [t["id"] for t in client.get(f"{TODOS}/", params={"q": "RENT"}).json()] == [open_, done]
        assert client.get(f"{TODOS}/", params={"completed": "false", "q": "pay"}).json() == []
        assert client.get(f"{TODOS}/", params={"completed": "maybe"}).status_code == 422

    def test_get_and_not_found(self, client):
        tid = create(client, "Read book").json()["id"]
        assert client.get(f"{TODOS}/{tid}").json()["title"] == "Read book"

        res = client.get(f"{TODOS}/missing")
        assert res.status_code == 404
        assert res.json() == {"error": "NotFoundError", "message": "Todo not found: missing"}

    def test_patch_partial_update_and_due_date_tri_state(self, client):
        tid = create(client, "Partial", note="X", dueDate="2024-01-01").json()["id"]

        patched = client.patch(f"{TODOS}/{tid}", json={"title": "Partial Updated", "completed": True}).json()
        assert patched["title"] == "Partial Updated"
        assert patched["completed"] is True
        assert patched["note"] == "X"
        assert patched["dueDate"] == "2024-01-01"

        cleared = client.patch(f"{TODOS}/{tid}", json={"dueDate": None}).json()
        assert cleared["dueDate"] is None

        set_again = client.patch(f"{TODOS}/{tid}", json={"dueDate": "2024-02-02"}).json()
        assert set_again["dueDate"] == "2024-02-02"

    def test_patch_errors(self, client):
        res = client.patch(f"{TODOS}/nope", json={"title": "Nope"})
        assert res.status_code == 404
        assert res.json()["message"] == "Todo not found: nope"

        tid = create(client, "Keep").json()["id"]
        res = client.patch(f"{TODOS}/{tid}", json={"title": " "})
        assert res.status_code == 400
        assert res.json()["message"] == "Title cannot be empty"

    def test_toggle_and_delete(self, client):
        todo = create(client, "Buy milk").json()

        toggled = client.post(f"{TODOS}/{todo['id']}/toggle")
        assert toggled.status_code == 200
        assert toggled.json()["completed"] is True
        assert toggled.json()["createdAt"] == todo["createdAt"]

        assert client.post(f"{TODOS}/missing/toggle").status_code == 404

        res_del = client.delete(f"{TODOS}/{todo['id']}")
        assert res_del.status_code == 204
        assert res_del.text == ""
        assert client.get(f"{TODOS}/").json() == []
        # Deleting again is still a success
        assert client.delete(f"{TODOS}/{todo['id']}").status_code == 204

    def test_reorder(self, client):
        c = create(client, "c").json()["id"]
        b = create(client, "b").json()["id"]
        a = create(client, "a").json()["id"]

        res = client.put(f"{TODOS}/order", json={"ids": [c, a, b]})
        assert res.status_code == 204
        assert [t["id"] for t in client.get(f"{TODOS}/").json()] == [c, a, b]


class TestLegacyMigration:
    def test_migrates_once(self, client):
        payload = [
            {
                "id": "legacy-1",
                "title": "From local storage",
                "note": "",
                "completed": False,
                "dueDate": None,
                "createdAt": "2023-01-01T00:00:00+00:00",
                "updatedAt": "2023-01-01T00:00:00+00:00",
                "recurrenceTag": "weekly",
                "recurrenceCheckedAt": None,
            },
            {"id": "legacy-2", "title": "  ", "note": "", "completed": False, "createdAt": "", "updatedAt": ""},
        ]
        first = client.post(f"{TODOS}/migrate-legacy", json={"payload": payload})
        assert first.status_code == 200
        assert first.json() == {"migratedCount": 1, "alreadyMigrated": False}

        [todo] = client.get(f"{TODOS}/").json()
        assert todo["id"] == "legacy-1"
        assert todo["recurrenceTag"] == "none"

        second = client.post(f"{TODOS}/migrate-legacy", json={"payload": payload})
        assert second.json() == {"migratedCount": 0, "alreadyMigrated": True}


class TestPrefsAndWindow:
    def test_window_prefs_defaults_and_save(self, client):
        res = client.get("/api/v1/prefs/window")
        assert res.json() == {"x": 80, "y": 80, "width": 380, "height": 520, "mode": "mini", "alwaysOnTop": True}

        new = {"x": 1, "y": 2, "width": 300, "height": 400, "mode": "expanded", "alwaysOnTop": False}
        assert client.put("/api/v1/prefs/window", json=new).json() == new
        assert client.get("/api/v1/prefs/window").json() == new

    def test_ui_prefs(self, client):
        assert client.get("/api/v1/prefs/ui").json() == {
            "motionMode": "balanced",
            "readabilityMode": "adaptive",
            "reduceMotionOverride": "system",
        }
        new = {"motionMode": "high", "readabilityMode": "pure", "reduceMotionOverride": "off"}
        client.put("/api/v1/prefs/ui", json=new)
        assert client.get("/api/v1/prefs/ui").json() == new

        bad = client.put("/api/v1/prefs/ui", json={"motionMode": "turbo"})
        assert bad.status_code == 422

    def test_panel_mode(self, client, window):
        res = client.put("/api/v1/window/panel-mode", json={"mode": "expanded"})
        assert res.status_code == 200
        assert res.json()["width"] == 920
        assert res.json()["height"] == 680
        assert res.json()["mode"] == "expanded"
        assert window.calls[-1] == ("size", 920.0, 680.0)

        mini = client.put("/api/v1/window/panel-mode", json={"mode": "mini"}).json()
        assert (mini["width"], mini["height"], mini["mode"]) == (380, 520, "mini")
        assert client.get("/api/v1/prefs/window").json() == mini

    def test_always_on_top(self, client, window):
        res = client.put("/api/v1/window/always-on-top", json={"enabled": False})
        assert res.json()["alwaysOnTop"] is False
        assert window.calls[-1] == ("always_on_top", False)

    def test_move_resize_notifications(self, client):
        assert client.post("/api/v1/window/events/moved", json={"x": 50, "y": 60}).status_code == 204
        assert client.post("/api/v1/window/events/resized", json={"width": 410, "height": 530}).status_code == 204
        prefs = client.get("/api/v1/prefs/window").json()
        assert (prefs["x"], prefs["y"], prefs["width"], prefs["height"]) == (50, 60, 410, 530)

    @pytest.mark.parametrize(
        "url, body",
        [
            ("/api/v1/window/events/moved", '{"x": NaN, "y": 1}'),
            ("/api/v1/window/events/resized", '{"width": Infinity, "height": 500}'),
            ("/api/v1/prefs/window", '{"x": -Infinity}'),
        ],
    )
    def test_non_finite_geometry_is_rejected(self, client, url, body):
        method = client.put if url.startswith("/api/v1/prefs") else client.post
        res = method(url, content=body, headers={"Content-Type": "application/json"})
        assert res.status_code == 422
        assert res.json()["error"] == "ValidationError"

        prefs = client.get("/api/v1/prefs/window")
        assert prefs.status_code == 200
        assert prefs.json()["width"] == 380


def test_startup_restores_window_and_refusal_is_reported(db_path):
    window = RecordingWindow()
    with TestClient(create_app(Settings(sqlite_db_path=db_path), window=window)) as c:
        assert window.calls == [("size", 380.0, 520.0), ("position", 80.0, 80.0), ("always_on_top", True)]
        c.put("/api/v1/window/panel-mode", json={"mode": "expanded"})

    refusing = RecordingWindow(fail=True)
    with TestClient(create_app(Settings(sqlite_db_path=db_path), window=refusing)) as c:
        res = c.put("/api/v1/window/panel-mode", json={"mode": "mini"})
        assert res.status_code == 502
        assert res.json()["error"] == "WindowError"
        assert c.get("/api/v1/prefs/window").json()["mode"] == "expanded"
