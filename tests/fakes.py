# tests/fakes.py

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

import httpx

BASE_URL = "http://testserver/api"


def _now_iso() -> str:
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _json(status: int, body: dict[str, Any]) -> httpx.Response:
    return httpx.Response(status, json=body)


@dataclass(slots=True)
class _Failure:
    method: str
    path: str
    status: int | None
    exc: Exception | None
    message: str


class FakeBackend:
    """
    In-memory backend speaking the workdesk HTTP contract.

    Plug it into the real client with httpx.MockTransport(backend). Tests can:
    - seed users/tasks/notes directly,
    - inject one-shot failures (HTTP status or transport exception) per route,
    - hold requests on a route until an asyncio.Event is set,
    - inspect every request that reached it in `requests`.
    """

    def __init__(self) -> None:
        self.users: list[dict[str, Any]] = []
        self.tasks: list[dict[str, Any]] = []
        self.notes: list[dict[str, Any]] = []
        self.requests: list[tuple[str, str]] = []
        self.leak_other_users = False

        self._next_user_id = 1
        self._next_task_id = 1
        self._next_note_id = 1
        self._failures: list[_Failure] = []
        self._holds: list[tuple[str, str, asyncio.Event]] = []

    # ---- seeding ----

    def add_user(self, username: str, password: str = "secret", name: str = "") -> dict[str, Any]:
        user = {
            "id": self._next_user_id,
            "username": username,
            "password": password,
            "name": name or username.capitalize(),
            "email": "",
        }
        self._next_user_id += 1
        self.users.append(user)
        return user

    def add_task(
        self,
        user_id: int,
        title: str,
        *,
        completed: bool = False,
        due_date: str | None = None,
    ) -> dict[str, Any]:
        task: dict[str, Any] = {
            "id": self._next_task_id,
            "title": title,
            "completed": completed,
            "userId": user_id,
            "createdAt": _now_iso(),
        }
        if due_date:
            task["dueDate"] = due_date
        self._next_task_id += 1
        self.tasks.append(task)
        return task

    def add_note(self, user_id: int, title: str, body: str) -> dict[str, Any]:
        now = _now_iso()
        note = {
            "id": self._next_note_id,
            "title": title,
            "body": body,
            "userId": user_id,
            "createdAt": now,
            "updatedAt": now,
        }
        self._next_note_id += 1
        self.notes.append(note)
        return note

    # ---- fault injection ----

    def fail_next(
        self,
        method: str,
        path: str,
        *,
        status: int | None = None,
        exc: Exception | None = None,
        message: str = "Internal server error",
    ) -> None:
        """Fail the next request whose method matches and whose path starts with `path`."""
        self._failures.append(_Failure(method.upper(), path, status, exc, message))

    def hold(self, method: str, path: str) -> asyncio.Event:
        """Block matching requests until the returned event is set."""
        event = asyncio.Event()
        self._holds.append((method.upper(), path, event))
        return event

    def count(self, method: str, path: str) -> int:
        return sum(1 for m, p in self.requests if m == method.upper() and p.startswith(path))

    # ---- transport entry point ----

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        method = request.method
        path = request.url.path
        self.requests.append((method, path))

        for m, p, event in list(self._holds):
            if m == method and path.startswith(p):
                await event.wait()

        for f in list(self._failures):
            if f.method == method and path.startswith(f.path):
                self._failures.remove(f)
                if f.exc is not None:
                    raise f.exc
                return _json(f.status or 500, {"success": False, "message": f.message})

        return self._route(method, path, request)

    def _route(self, method: str, path: str, request: httpx.Request) -> httpx.Response:
        parts = [p for p in path.split("/") if p]
        if not parts or parts[0] != "api":
            return _json(404, {"success": False, "message": "Route not found"})
        parts = parts[1:]
        body = json.loads(request.content) if request.content else {}
        params = request.url.params

        if parts in (["health"], ["test"]) and method == "GET":
            return _json(200, {"success": True, "message": "Server is running!", "timestamp": _now_iso()})

        if parts == ["auth", "login"] and method == "POST":
            return self._login(body)
        if parts == ["auth", "register"] and method == "POST":
            return self._register(body)

        if parts and parts[0] in ("tasks", "notes"):
            table = self.tasks if parts[0] == "tasks" else self.notes
            label = "Task" if parts[0] == "tasks" else "Note"
            if len(parts) == 1 and method == "GET":
                return self._list(table, params.get("userId"))
            if len(parts) == 1 and method == "POST":
                return self._create(parts[0], body)
            if len(parts) == 2 and method == "PUT":
                return self._update(table, label, int(parts[1]), body)
            if len(parts) == 2 and method == "DELETE":
                return self._delete(table, label, int(parts[1]), params.get("userId"))

        return _json(404, {"success": False, "message": "Route not found"})

    # ---- handlers ----

    @staticmethod
    def _public(user: dict[str, Any]) -> dict[str, Any]:
        return {k: v for k, v in user.items() if k != "password"}

    def _login(self, body: dict[str, Any]) -> httpx.Response:
        username, password = body.get("username"), body.get("password")
        if not username or not password:
            return _json(400, {"success": False, "message": "Username and password are required"})
        for u in self.users:
            if u["username"] == username and u["password"] == password:
                return _json(200, {"success": True, "message": "Login successful", "data": self._public(u)})
        return _json(401, {"success": False, "message": "Invalid username or password"})

    def _register(self, body: dict[str, Any]) -> httpx.Response:
        username, password, name = body.get("username"), body.get("password"), body.get("name")
        if not username or not password or not name:
            return _json(400, {"success": False, "message": "Username, password, and name are required"})
        if any(u["username"] == username for u in self.users):
            return _json(409, {"success": False, "message": "Username already exists"})
        user = self.add_user(username, password, name)
        user["email"] = body.get("email") or ""
        return _json(201, {"success": True, "message": "User registered successfully", "data": self._public(user)})

    def _list(self, table: list[dict[str, Any]], raw_user_id: str | None) -> httpx.Response:
        if self.leak_other_users:
            data = list(table)
        else:
            data = [r for r in table if str(r["userId"]) == str(raw_user_id)]
        return _json(200, {"success": True, "data": data, "count": len(data)})

    def _create(self, kind: str, body: dict[str, Any]) -> httpx.Response:
        title = (body.get("title") or "").strip()
        user_id = body.get("userId")
        if not title or user_id is None:
            return _json(400, {"success": False, "message": "Title is required"})
        if kind == "tasks":
            record = self.add_task(int(user_id), title, due_date=body.get("dueDate"))
        else:
            text = (body.get("body") or "").strip()
            if not text:
                return _json(400, {"success": False, "message": "Body is required"})
            record = self.add_note(int(user_id), title, text)
        return _json(201, {"success": True, "data": record, "message": "Created successfully"})

    @staticmethod
    def _find(table: list[dict[str, Any]], entity_id: int, user_id: Any) -> int | None:
        for i, r in enumerate(table):
            if r["id"] == entity_id and str(r["userId"]) == str(user_id):
                return i
        return None

    def _update(
        self,
        table: list[dict[str, Any]],
        label: str,
        entity_id: int,
        body: dict[str, Any],
    ) -> httpx.Response:
        idx = self._find(table, entity_id, body.get("userId"))
        if idx is None:
            return _json(404, {"success": False, "message": f"{label} not found"})
        record = table[idx]
        for key in ("title", "body"):
            if body.get(key) is not None:
                record[key] = str(body[key]).strip()
        if "completed" in body:
            record["completed"] = bool(body["completed"])
        if "dueDate" in body:
            record["dueDate"] = body["dueDate"]
        record["updatedAt"] = _now_iso()
        return _json(200, {"success": True, "data": dict(record), "message": f"{label} updated successfully"})

    def _delete(
        self,
        table: list[dict[str, Any]],
        label: str,
        entity_id: int,
        raw_user_id: str | None,
    ) -> httpx.Response:
        idx = self._find(table, entity_id, raw_user_id)
        if idx is None:
            return _json(404, {"success": False, "message": f"{label} not found"})
        record = table.pop(idx)
        return _json(200, {"success": True, "data": record, "message": f"{label} deleted successfully"})


@dataclass(slots=True)
class RecordingPresenter:
    """Presenter port that records everything instead of printing."""

    prompts: list[tuple[str, str]] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    infos: list[str] = field(default_factory=list)

    def show_prompt(self, title: str, message: str) -> None:
        self.prompts.append((title, message))

    def show_error(self, message: str) -> None:
        self.errors.append(message)

    def show_info(self, message: str) -> None:
        self.infos.append(message)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds
