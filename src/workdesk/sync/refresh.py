# src/workdesk/sync/refresh.py

from __future__ import annotations

"""
Scheduled refresh.

A small polling loop that re-fetches a store every `interval_seconds` while a
view is active. Ticks that find a refresh already in flight are skipped, and
failures are logged and reported but never retried before the next tick.

To stop polling, cancel the coroutine/task (RefreshPoller.stop does this).
"""

import asyncio
import contextlib
import logging
from collections.abc import Callable
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class Refreshable(Protocol):
    kind: str

    async def refresh(self, *, skip_if_running: bool = False) -> Any: ...


async def run_periodic_refresh(
        store: Refreshable,
        *,
        interval_seconds: float = 5.0,
        on_error: Callable[[Exception], None] | None = None,
) -> None:
    sleep_s = max(0.01, float(interval_seconds))

    while True:
        await asyncio.sleep(sleep_s)
        try:
            await store.refresh(skip_if_running=True)
        except Exception as e:
            logger.warning("%s scheduled refresh failed: %s", store.kind, e)
            if on_error is not None:
                try:
                    on_error(e)
                except Exception:
                    logger.exception("refresh on_error callback failed")


class RefreshPoller:
    """Start/stop wrapper around run_periodic_refresh for one store."""

    def __init__(
        self,
        store: Refreshable,
        *,
        interval_seconds: float = 5.0,
        on_error: Callable[[Exception], None] | None = None,
    ) -> None:
        self._store = store
        self._interval = interval_seconds
        self._on_error = on_error
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(
            run_periodic_refresh(
                self._store,
                interval_seconds=self._interval,
                on_error=self._on_error,
            )
        )
        logger.debug("%s poller started (every %.1fs)", self._store.kind, self._interval)

    def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        self._task = None
        logger.debug("%s poller stopped", self._store.kind)

    async def aclose(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
