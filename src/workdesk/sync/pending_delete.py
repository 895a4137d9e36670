# src/workdesk/sync/pending_delete.py

"""
Two-tap delete confirmation.

    Idle --request(id)--> Pending(id, now+window)
    Pending(id) --request(id)--> Idle, then store.remove(id)
    Pending(id) --request(other)--> Pending(other, now+window)
    Pending(id) --timeout / cancel--> Idle

One instance per entity list, so a pending task delete is never consumed by a
notes action. The expiry timer is cancellable and every callback carries the
generation it was armed for, so a stale timeout cannot clear a newer prompt.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

from ..core.ports import Presenter

logger = logging.getLogger(__name__)

CONFIRM_TITLE = "Confirm Delete"
CONFIRM_MESSAGE = "Tap delete again to confirm removal"


class Removable(Protocol):
    kind: str

    async def remove(self, entity_id: int) -> Any: ...


@dataclass(slots=True, frozen=True)
class Idle:
    pass


@dataclass(slots=True, frozen=True)
class PendingConfirmation:
    entity_id: int
    expires_at: float


DeleteState = Idle | PendingConfirmation

IDLE = Idle()


class PendingDeleteConfirmation:
    def __init__(
        self,
        store: Removable,
        *,
        window_seconds: float = 5.0,
        presenter: Presenter | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._store = store
        self._window = max(0.0, float(window_seconds))
        self._presenter = presenter
        self._clock = clock

        self._state: DeleteState = IDLE
        self._generation = 0
        self._timer: asyncio.TimerHandle | None = None

    @property
    def state(self) -> DeleteState:
        return self._state

    @property
    def pending_id(self) -> int | None:
        if isinstance(self._state, PendingConfirmation):
            return self._state.entity_id
        return None

    def is_pending(self, entity_id: int) -> bool:
        return self.pending_id == entity_id

    async def request_delete(self, entity_id: int) -> Any:
        """
        Handle one tap on an entity's delete button.

        Returns whatever store.remove returned when this tap confirmed a delete,
        else None. Removal errors come from the store and propagate unchanged.
        """
        state = self._state
        if (
            isinstance(state, PendingConfirmation)
            and state.entity_id == entity_id
            and self._clock() < state.expires_at
        ):
            self._reset()
            logger.info("%s id=%s delete confirmed", self._store.kind, entity_id)
            return await self._store.remove(entity_id)

        self._arm(entity_id)
        return None

    def cancel(self) -> None:
        if isinstance(self._state, PendingConfirmation):
            logger.debug("%s id=%s delete cancelled", self._store.kind, self._state.entity_id)
        self._reset()

    def _arm(self, entity_id: int) -> None:
        self._cancel_timer()
        self._generation += 1
        gen = self._generation
        self._state = PendingConfirmation(entity_id=entity_id, expires_at=self._clock() + self._window)

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop (sync caller): expiry is still enforced by the clock check.
            loop = None
        if loop is not None:
            self._timer = loop.call_later(self._window, self._expire, gen)

        logger.debug("%s id=%s pending delete (%.1fs)", self._store.kind, entity_id, self._window)
        if self._presenter is not None:
            self._presenter.show_prompt(CONFIRM_TITLE, CONFIRM_MESSAGE)

    def _expire(self, gen: int) -> None:
        if gen != self._generation:
            return
        self._timer = None
        if isinstance(self._state, PendingConfirmation):
            logger.debug("%s id=%s pending delete expired", self._store.kind, self._state.entity_id)
        self._state = IDLE

    def _reset(self) -> None:
        self._cancel_timer()
        self._generation += 1
        self._state = IDLE

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
