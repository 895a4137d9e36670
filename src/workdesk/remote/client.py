# src/workdesk/remote/client.py

"""
Async client for the workdesk backend.

One method per endpoint, one HTTP round trip per call, no retries.
Every failure is raised as exactly one WorkdeskError subclass; nothing is swallowed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, TypeVar

import httpx

from .errors import (
    AuthError,
    ConflictError,
    NetworkError,
    NotFoundError,
    ServerError,
    ValidationError,
    WorkdeskError,
)
from .models import Note, ServerStatus, Task, User

logger = logging.getLogger(__name__)

R = TypeVar("R")

_STATUS_ERRORS: dict[int, type[WorkdeskError]] = {
    400: ValidationError,
    401: AuthError,
    403: AuthError,
    404: NotFoundError,
    409: ConflictError,
}


def _make_timeout(connect_s: float, read_s: float) -> httpx.Timeout:
    return httpx.Timeout(connect=connect_s, read=read_s, write=10.0, pool=connect_s)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        msg = body.get("message")
        if isinstance(msg, str) and msg.strip():
            return msg.strip()
    return f"HTTP {response.status_code}"


def _parse(kind: str, raw: Any, factory: Callable[[dict[str, Any]], R]) -> R:
    if not isinstance(raw, dict):
        raise ServerError(f"Malformed {kind} in response")
    try:
        return factory(raw)
    except (KeyError, TypeError, ValueError) as e:
        raise ServerError(f"Malformed {kind} in response") from e


class WorkdeskApiClient:
    """
    Typed wrapper around the backend's auth/task/note endpoints.

    Pass `transport` to route requests somewhere other than the network
    (tests use httpx.MockTransport).
    """

    def __init__(
        self,
        base_url: str,
        *,
        connect_timeout: float = 5.0,
        read_timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._http = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=_make_timeout(connect_timeout, read_timeout),
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    @classmethod
    def from_settings(cls, settings) -> WorkdeskApiClient:
        return cls(
            settings.api_base_url,
            connect_timeout=settings.connect_timeout_seconds,
            read_timeout=settings.read_timeout_seconds,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> WorkdeskApiClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # ---- low-level ----

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
        status_errors: dict[int, type[WorkdeskError]] | None = None,
    ) -> dict[str, Any]:
        try:
            response = await self._http.request(method, path, params=params, json=json)
        except httpx.TransportError as e:
            logger.info("%s %s failed: %s", method, path, e.__class__.__name__)
            raise NetworkError(f"Transport failure: {e.__class__.__name__}") from e

        status = response.status_code
        if status >= 500:
            raise ServerError(_error_message(response), status=status)
        if not 200 <= status < 300:
            mapping = dict(_STATUS_ERRORS)
            if status_errors:
                mapping.update(status_errors)
            err_cls = mapping.get(status, ServerError)
            raise err_cls(_error_message(response), status=status)

        try:
            body = response.json()
        except ValueError as e:
            raise ServerError("Response is not valid JSON", status=status) from e

        if not isinstance(body, dict):
            raise ServerError("Response is not a JSON object", status=status)
        if body.get("success") is False:
            raise ServerError(str(body.get("message") or "Request was not successful"), status=status)

        logger.debug("%s %s -> %s", method, path, status)
        return body

    @staticmethod
    def _data(body: dict[str, Any]) -> Any:
        if "data" not in body or body["data"] is None:
            raise ServerError("Response has no data")
        return body["data"]

    def _records(
        self,
        body: dict[str, Any],
        kind: str,
        factory: Callable[[dict[str, Any]], R],
        user_id: int,
    ) -> list[R]:
        raw = self._data(body)
        if not isinstance(raw, list):
            raise ServerError(f"Malformed {kind} list in response")
        out: list[R] = []
        for item in raw:
            record = _parse(kind, item, factory)
            if getattr(record, "user_id") != user_id:
                # Never expose another user's records, even if the server leaks them.
                logger.warning("Dropping %s id=%s owned by another user", kind, getattr(record, "id"))
                continue
            out.append(record)
        return out

    # ---- health ----

    async def health(self) -> ServerStatus:
        return self._status(await self._request("GET", "/health"))

    async def ping(self) -> ServerStatus:
        return self._status(await self._request("GET", "/test"))

    @staticmethod
    def _status(body: dict[str, Any]) -> ServerStatus:
        ts = body.get("timestamp")
        return ServerStatus(
            success=bool(body.get("success", False)),
            message=str(body.get("message") or ""),
            timestamp=str(ts) if ts is not None else None,
        )

    # ---- auth ----

    async def login(self, username: str, password: str) -> User:
        body = await self._request(
            "POST",
            "/auth/login",
            json={"username": username, "password": password},
            status_errors={400: AuthError, 401: AuthError},
        )
        return _parse("user", self._data(body), User.from_wire)

    async def register(
        self,
        username: str,
        password: str,
        name: str,
        email: str | None = None,
    ) -> User:
        payload: dict[str, Any] = {"username": username, "password": password, "name": name}
        if email:
            payload["email"] = email
        body = await self._request("POST", "/auth/register", json=payload)
        return _parse("user", self._data(body), User.from_wire)

    # ---- tasks ----

    async def list_tasks(self, user_id: int) -> list[Task]:
        body = await self._request("GET", "/tasks", params={"userId": user_id})
        return self._records(body, "task", Task.from_wire, user_id)

    async def create_task(self, user_id: int, title: str, due_date: str | None = None) -> Task:
        payload: dict[str, Any] = {"title": title, "userId": user_id}
        if due_date:
            payload["dueDate"] = due_date
        body = await self._request("POST", "/tasks", json=payload)
        return _parse("task", self._data(body), Task.from_wire)

    async def update_task(self, user_id: int, task_id: int, **fields: Any) -> Task:
        payload = _task_fields(fields)
        payload["userId"] = user_id
        body = await self._request("PUT", f"/tasks/{task_id}", json=payload)
        return _parse("task", self._data(body), Task.from_wire)

    async def delete_task(self, user_id: int, task_id: int) -> Task:
        body = await self._request("DELETE", f"/tasks/{task_id}", params={"userId": user_id})
        return _parse("task", self._data(body), Task.from_wire)

    # ---- notes ----

    async def list_notes(self, user_id: int) -> list[Note]:
        body = await self._request("GET", "/notes", params={"userId": user_id})
        return self._records(body, "note", Note.from_wire, user_id)

    async def create_note(self, user_id: int, title: str, body: str) -> Note:
        resp = await self._request(
            "POST", "/notes", json={"title": title, "body": body, "userId": user_id}
        )
        return _parse("note", self._data(resp), Note.from_wire)

    async def update_note(self, user_id: int, note_id: int, **fields: Any) -> Note:
        payload: dict[str, Any] = {k: v for k, v in fields.items() if k in ("title", "body") and v is not None}
        payload["userId"] = user_id
        resp = await self._request("PUT", f"/notes/{note_id}", json=payload)
        return _parse("note", self._data(resp), Note.from_wire)

    async def delete_note(self, user_id: int, note_id: int) -> Note:
        resp = await self._request("DELETE", f"/notes/{note_id}", params={"userId": user_id})
        return _parse("note", self._data(resp), Note.from_wire)


def _task_fields(fields: dict[str, Any]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    if fields.get("title") is not None:
        out["title"] = fields["title"]
    if fields.get("completed") is not None:
        out["completed"] = bool(fields["completed"])
    if "due_date" in fields:
        out["dueDate"] = fields["due_date"]
    return out
