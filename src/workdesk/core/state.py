# src/workdesk/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..sync.entity_store import NoteStore, TaskStore
from ..sync.pending_delete import PendingDeleteConfirmation
from ..sync.refresh import RefreshPoller
from ..sync.views import TaskCalendarView
from .navigation import Navigator
from .ports import Presenter, WorkdeskApi
from .session import SessionGate


@dataclass
class AppState:
    # Settings are stored on the state so commands can read them without global lookups.
    settings: Any

    api: WorkdeskApi
    presenter: Presenter
    session: SessionGate
    tasks: TaskStore
    notes: NoteStore
    task_deletes: PendingDeleteConfirmation
    note_deletes: PendingDeleteConfirmation
    calendar: TaskCalendarView
    notes_poller: RefreshPoller
    navigator: Navigator
