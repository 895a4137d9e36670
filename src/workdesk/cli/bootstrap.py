# src/workdesk/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures the local (gitignored) data directory exists,
- wires the HTTP client, session, stores, confirmations, views and poller into AppState,
- connects logout and navigation hooks between them.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..connectors.console_connector import ConsolePresenter
from ..core.navigation import LoginRoute, Navigator, NotesRoute
from ..core.ports import Presenter, WorkdeskApi
from ..core.session import SessionGate
from ..core.state import AppState
from ..remote.client import WorkdeskApiClient
from ..remote.errors import friendly_error_message
from ..sync.entity_store import NoteStore, TaskStore
from ..sync.pending_delete import PendingDeleteConfirmation
from ..sync.refresh import RefreshPoller
from ..sync.views import TaskCalendarView

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)


def create_initial_state(
    *,
    settings=None,
    api: WorkdeskApi | None = None,
    presenter: Presenter | None = None,
) -> AppState:
    """
    Create AppState from the provided settings.

    Settings, API client and presenter are injectable so tests can swap in fakes.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    if api is None:
        api = WorkdeskApiClient.from_settings(settings)
    if presenter is None:
        presenter = ConsolePresenter()

    session = SessionGate(api)
    tasks = TaskStore(api, session)
    notes = NoteStore(api, session)

    window = float(settings.delete_confirm_seconds)
    task_deletes = PendingDeleteConfirmation(tasks, window_seconds=window, presenter=presenter)
    note_deletes = PendingDeleteConfirmation(notes, window_seconds=window, presenter=presenter)

    def _poll_failed(err: Exception) -> None:
        presenter.show_error(f"Failed to fetch notes. {friendly_error_message(err)}")

    notes_poller = RefreshPoller(
        notes,
        interval_seconds=float(settings.notes_refresh_seconds),
        on_error=_poll_failed,
    )

    navigator = Navigator(LoginRoute())
    navigator.on_enter(NotesRoute, notes_poller.start)
    navigator.on_leave(NotesRoute, notes_poller.stop)

    calendar = TaskCalendarView(lambda: tasks.items)

    session.on_logout(task_deletes.cancel)
    session.on_logout(note_deletes.cancel)
    session.on_logout(calendar.clear_selection)
    session.on_logout(lambda: navigator.navigate(LoginRoute()))

    logger.info("State ready api=%s", getattr(api, "base_url", type(api).__name__))

    return AppState(
        settings=settings,
        api=api,
        presenter=presenter,
        session=session,
        tasks=tasks,
        notes=notes,
        task_deletes=task_deletes,
        note_deletes=note_deletes,
        calendar=calendar,
        notes_poller=notes_poller,
        navigator=navigator,
    )


async def shutdown(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    try:
        await state.notes_poller.aclose()
    except Exception:
        logger.debug("Notes poller close failed.", exc_info=True)

    state.task_deletes.cancel()
    state.note_deletes.cancel()

    close = getattr(state.api, "aclose", None)
    if close is not None:
        try:
            await close()
        except Exception:
            logger.debug("API client close failed.", exc_info=True)
