# src/workdesk/sync/entity_store.py

"""
Client-side task/note collections kept in sync with the backend.

Rules every store follows:
- No signed-in user -> every operation is a no-op returning None.
- Optimistic changes (task completion, removal) are applied before the network
  call and rolled back if it fails; the original error is re-raised.
- Creation and edits are not optimistic: the local collection changes only
  after the server returns the stored record with its server-assigned id.
- New records are appended, matching the order the server returns on refresh.
- Results that arrive after the session changed are dropped.
"""

from __future__ import annotations

import contextlib
import itertools
import logging
from collections.abc import Awaitable, Callable, Iterator
from dataclasses import replace
from typing import Generic, TypeVar

from ..core.ports import WorkdeskApi
from ..core.session import SessionGate
from ..remote.errors import NotFoundError, ValidationError
from ..remote.models import Note, Task, User

logger = logging.getLogger(__name__)

E = TypeVar("E", Task, Note)

Listener = Callable[[], None]


def _required(value: str | None, message: str) -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationError(message)
    return text


class EntityStore(Generic[E]):
    """Ordered in-memory collection for the signed-in user, generic over Task | Note."""

    kind = "entity"

    def __init__(self, api: WorkdeskApi, session: SessionGate) -> None:
        self._api = api
        self._session = session

        self._items: list[E] = []
        self._op_ids = itertools.count(1)
        self._in_flight: set[int] = set()
        self._creating = 0

        # Refresh ordering: only the latest issued refresh may be applied, and
        # only if no mutation settled while it was in flight.
        self._refresh_seq = 0
        self._refreshing = 0
        self._epoch = 0

        self._removing: dict[int, E] = {}
        self._version = 0
        self._listeners: list[Listener] = []

        session.on_logout(self.clear)

    # ---- read side ----

    @property
    def items(self) -> list[E]:
        return list(self._items)

    @property
    def is_settled(self) -> bool:
        return not self._in_flight

    @property
    def submitting(self) -> bool:
        return self._creating > 0

    @property
    def version(self) -> int:
        return self._version

    def get(self, entity_id: int) -> E | None:
        idx = self._index_of(entity_id)
        return None if idx is None else self._items[idx]

    def __len__(self) -> int:
        return len(self._items)

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    # ---- operations ----

    async def refresh(self, *, skip_if_running: bool = False) -> list[E] | None:
        """
        Replace the collection with the server's.

        Returns the new collection, or None when nothing was applied (no user,
        skipped, superseded by a newer refresh, or by a mutation that settled meanwhile).
        On failure the collection is left untouched and the error propagates.
        """
        ctx = self._context()
        if ctx is None:
            return None
        user, gen = ctx

        if skip_if_running and self._refreshing:
            logger.debug("%s refresh skipped: one is already in flight", self.kind)
            return None

        self._refresh_seq += 1
        seq = self._refresh_seq
        epoch = self._epoch

        self._refreshing += 1
        try:
            with self._tracked():
                fetched = await self._fetch(user.id)
        finally:
            self._refreshing -= 1

        if not self._is_current(gen):
            return None
        if seq != self._refresh_seq:
            logger.debug("%s refresh seq=%s discarded (latest=%s)", self.kind, seq, self._refresh_seq)
            return None
        if epoch != self._epoch:
            logger.debug("%s refresh seq=%s discarded: local mutation settled meanwhile", self.kind, seq)
            return None

        self._items = self._reconcile(fetched)
        self._changed()
        logger.debug("%s refresh applied: %d items", self.kind, len(self._items))
        return self.items

    async def remove(self, entity_id: int) -> E | None:
        """
        Optimistically remove a record, then delete it remotely.

        Call this only after the delete was confirmed (see PendingDeleteConfirmation).
        On failure the record goes back to its original position.
        """
        ctx = self._context()
        if ctx is None:
            return None
        user, gen = ctx

        idx = self._index_of(entity_id)
        if idx is None:
            raise NotFoundError(f"{self.kind.capitalize()} not found")

        record = self._items.pop(idx)
        self._removing[entity_id] = record
        self._changed()

        try:
            with self._tracked():
                deleted = await self._delete(user.id, entity_id)
        except Exception:
            self._removing.pop(entity_id, None)
            if self._is_current(gen):
                self._items.insert(min(idx, len(self._items)), record)
                self._changed()
            logger.info("%s id=%s delete failed; restored at index %s", self.kind, entity_id, idx)
            raise

        self._removing.pop(entity_id, None)
        if not self._is_current(gen):
            return None
        self._epoch += 1
        logger.info("%s id=%s deleted", self.kind, entity_id)
        return deleted

    def clear(self) -> None:
        """Drop everything (logout). In-flight work finishing later is ignored."""
        self._items = []
        self._removing.clear()
        self._refresh_seq += 1
        self._epoch += 1
        self._changed()

    # ---- hooks for subclasses ----

    async def _fetch(self, user_id: int) -> list[E]:
        raise NotImplementedError

    async def _delete(self, user_id: int, entity_id: int) -> E:
        raise NotImplementedError

    def _reconcile(self, fetched: list[E]) -> list[E]:
        """Keep records with a pending removal hidden."""
        return [r for r in fetched if r.id not in self._removing]

    # ---- shared helpers ----

    async def _create_with(self, call: Callable[[int], Awaitable[E]]) -> E | None:
        ctx = self._context()
        if ctx is None:
            return None
        user, gen = ctx

        self._creating += 1
        try:
            with self._tracked():
                created = await call(user.id)
        except Exception:
            logger.info("%s create failed", self.kind)
            raise
        finally:
            self._creating -= 1

        if not self._is_current(gen):
            return None

        idx = self._index_of(created.id)
        if idx is None:
            self._items.append(created)
        else:
            # A refresh that raced the create may already contain it.
            self._items[idx] = created
        self._epoch += 1
        self._changed()
        logger.info("%s id=%s created", self.kind, created.id)
        return created

    async def _update_with(self, entity_id: int, call: Callable[[int], Awaitable[E]]) -> E | None:
        ctx = self._context()
        if ctx is None:
            return None
        user, gen = ctx

        if self._index_of(entity_id) is None:
            raise NotFoundError(f"{self.kind.capitalize()} not found")

        with self._tracked():
            saved = await call(user.id)

        if not self._is_current(gen):
            return None
        self._put(saved)
        self._epoch += 1
        self._changed()
        return saved

    def _context(self) -> tuple[User, int] | None:
        user = self._session.current_user
        if user is None:
            logger.debug("%s operation ignored: no signed-in user", self.kind)
            return None
        return user, self._session.generation

    def _signed_in(self) -> bool:
        # Input checks only apply to a signed-in user; otherwise every call is a no-op.
        return self._context() is not None

    def _is_current(self, gen: int) -> bool:
        return self._session.generation == gen

    def _index_of(self, entity_id: int) -> int | None:
        for i, r in enumerate(self._items):
            if r.id == entity_id:
                return i
        return None

    def _put(self, record: E) -> None:
        idx = self._index_of(record.id)
        if idx is not None:
            self._items[idx] = record

    @contextlib.contextmanager
    def _tracked(self) -> Iterator[int]:
        op_id = next(self._op_ids)
        self._in_flight.add(op_id)
        try:
            yield op_id
        finally:
            self._in_flight.discard(op_id)

    def _changed(self) -> None:
        self._version += 1
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception("%s change listener failed", self.kind)


class TaskStore(EntityStore[Task]):
    kind = "task"

    def __init__(self, api: WorkdeskApi, session: SessionGate) -> None:
        super().__init__(api, session)
        # Latest completion value the user asked for, per task with a toggle in flight.
        self._intended: dict[int, bool] = {}
        self._toggling: dict[int, object] = {}

    async def _fetch(self, user_id: int) -> list[Task]:
        return await self._api.list_tasks(user_id)

    async def _delete(self, user_id: int, entity_id: int) -> Task:
        return await self._api.delete_task(user_id, entity_id)

    def _reconcile(self, fetched: list[Task]) -> list[Task]:
        out = super()._reconcile(fetched)
        if not self._intended:
            return out
        return [
            replace(t, completed=self._intended[t.id]) if t.id in self._intended else t
            for t in out
        ]

    def clear(self) -> None:
        self._intended.clear()
        self._toggling.clear()
        super().clear()

    async def create(self, title: str, due_date: str | None = None) -> Task | None:
        if not self._signed_in():
            return None
        clean = _required(title, "Task title is required")
        due = (due_date or "").strip() or None
        return await self._create_with(lambda uid: self._api.create_task(uid, clean, due))

    async def update(self, task_id: int, *, title: str | None = None) -> Task | None:
        if not self._signed_in():
            return None
        clean = _required(title, "Task title is required")
        return await self._update_with(
            task_id, lambda uid: self._api.update_task(uid, task_id, title=clean)
        )

    async def toggle(self, task_id: int) -> Task | None:
        current = self.get(task_id)
        if current is None:
            if self._session.current_user is None:
                return None
            raise NotFoundError("Task not found")
        return await self.set_completed(task_id, not current.completed)

    async def set_completed(self, task_id: int, completed: bool) -> Task | None:
        """
        Optimistically set `completed`, then persist it.

        Toggles on the same task while a call is in flight are coalesced: the
        latest intent is recorded and sent once the current call settles, and
        only if it differs from what the server now holds. Only the caller that
        started the call loop sees a failure; the field reverts to the last
        value the server confirmed.
        """
        ctx = self._context()
        if ctx is None:
            return None
        user, gen = ctx
        completed = bool(completed)

        current = self.get(task_id)
        if current is None:
            raise NotFoundError("Task not found")

        if task_id in self._toggling:
            self._intended[task_id] = completed
            self._patch(task_id, completed=completed)
            logger.debug("task id=%s toggle coalesced -> %s", task_id, completed)
            return self.get(task_id)

        if current.completed == completed:
            return current

        token = object()
        self._toggling[task_id] = token
        self._intended[task_id] = completed
        self._patch(task_id, completed=completed)
        confirmed = current.completed

        try:
            with self._tracked():
                while True:
                    target = self._intended.get(task_id, confirmed)
                    if target == confirmed:
                        break
                    try:
                        saved = await self._api.update_task(user.id, task_id, completed=target)
                    except Exception:
                        if self._is_current(gen):
                            self._patch(task_id, completed=confirmed)
                        logger.info(
                            "task id=%s set completed=%s failed; reverted to %s",
                            task_id,
                            target,
                            confirmed,
                        )
                        raise
                    if not self._is_current(gen):
                        return None
                    confirmed = saved.completed
                    self._put(replace(saved, completed=self._intended.get(task_id, confirmed)))
                    self._changed()
        finally:
            if self._toggling.get(task_id) is token:
                del self._toggling[task_id]
                self._intended.pop(task_id, None)

        self._epoch += 1
        return self.get(task_id)

    def _patch(self, task_id: int, **changes: object) -> None:
        idx = self._index_of(task_id)
        if idx is None:
            return
        self._items[idx] = replace(self._items[idx], **changes)
        self._changed()


class NoteStore(EntityStore[Note]):
    kind = "note"

    async def _fetch(self, user_id: int) -> list[Note]:
        return await self._api.list_notes(user_id)

    async def _delete(self, user_id: int, entity_id: int) -> Note:
        return await self._api.delete_note(user_id, entity_id)

    async def create(self, title: str, body: str) -> Note | None:
        if not self._signed_in():
            return None
        clean_title = _required(title, "Please enter a title for your note.")
        clean_body = _required(body, "Please enter some content for your note.")
        return await self._create_with(
            lambda uid: self._api.create_note(uid, clean_title, clean_body)
        )

    async def update(
        self,
        note_id: int,
        *,
        title: str | None = None,
        body: str | None = None,
    ) -> Note | None:
        """Edit title/body. Not optimistic: local state changes after the server confirms."""
        if not self._signed_in():
            return None
        fields: dict[str, str] = {}
        if title is not None:
            fields["title"] = _required(title, "Please enter a title for your note.")
        if body is not None:
            fields["body"] = _required(body, "Please enter some content for your note.")
        if not fields:
            raise ValidationError("Nothing to update")
        return await self._update_with(
            note_id, lambda uid: self._api.update_note(uid, note_id, **fields)
        )
