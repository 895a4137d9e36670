# src/workdesk/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The stores and the delete-confirmation machine depend on Protocols instead of
concrete implementations: the HTTP client, the console, and the test fakes are
all swappable.
"""

from typing import Any, Protocol

from ..remote.models import Note, ServerStatus, Task, User


class WorkdeskApi(Protocol):
    """Remote task/note/auth store (see remote.client.WorkdeskApiClient)."""

    async def health(self) -> ServerStatus: ...

    async def login(self, username: str, password: str) -> User: ...
    async def register(
            self,
            username: str,
            password: str,
            name: str,
            email: str | None = None,
    ) -> User: ...

    async def list_tasks(self, user_id: int) -> list[Task]: ...
    async def create_task(self, user_id: int, title: str, due_date: str | None = None) -> Task: ...
    async def update_task(self, user_id: int, task_id: int, **fields: Any) -> Task: ...
    async def delete_task(self, user_id: int, task_id: int) -> Task: ...

    async def list_notes(self, user_id: int) -> list[Note]: ...
    async def create_note(self, user_id: int, title: str, body: str) -> Note: ...
    async def update_note(self, user_id: int, note_id: int, **fields: Any) -> Note: ...
    async def delete_note(self, user_id: int, note_id: int) -> Note: ...


class Presenter(Protocol):
    """
    UI-side port for the opaque "show a prompt / show an error" calls.

    The console connector prints; tests record.
    """

    def show_prompt(self, title: str, message: str) -> None: ...
    def show_error(self, message: str) -> None: ...
    def show_info(self, message: str) -> None: ...
