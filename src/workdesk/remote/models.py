# src/workdesk/remote/models.py

"""
Wire records returned by the backend.

The backend speaks camelCase JSON; these dataclasses use snake_case and keep
timestamps as the ISO strings the server sent (parsing belongs to sync.dates).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


def _opt_str(raw: Any) -> str | None:
    if raw is None:
        return None
    s = str(raw).strip()
    return s or None


@dataclass(slots=True, frozen=True)
class User:
    id: int
    username: str
    name: str
    email: str

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> User:
        return cls(
            id=int(data["id"]),
            username=str(data.get("username", "")),
            name=str(data.get("name", "")),
            email=str(data.get("email") or ""),
        )


@dataclass(slots=True, frozen=True)
class Task:
    id: int
    title: str
    completed: bool
    user_id: int
    due_date: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> Task:
        return cls(
            id=int(data["id"]),
            title=str(data.get("title", "")),
            completed=bool(data.get("completed", False)),
            user_id=int(data["userId"]),
            due_date=_opt_str(data.get("dueDate")),
            created_at=_opt_str(data.get("createdAt")),
            updated_at=_opt_str(data.get("updatedAt")),
        )


@dataclass(slots=True, frozen=True)
class Note:
    id: int
    title: str
    body: str
    user_id: int
    created_at: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> Note:
        return cls(
            id=int(data["id"]),
            title=str(data.get("title", "")),
            body=str(data.get("body", "")),
            user_id=int(data["userId"]),
            created_at=_opt_str(data.get("createdAt")),
            updated_at=_opt_str(data.get("updatedAt")),
        )


@dataclass(slots=True, frozen=True)
class ServerStatus:
    success: bool
    message: str
    timestamp: str | None
