# src/workdesk/core/navigation.py

"""
Screens the app can navigate to, one dataclass per destination.

`Route` is a closed union: adding a screen means adding a variant here and a
branch in route_name(), which raises for anything it does not know.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum

logger = logging.getLogger(__name__)


class EditorMode(StrEnum):
    CREATE = "create"
    EDIT = "edit"


@dataclass(slots=True, frozen=True)
class LoginRoute:
    pass


@dataclass(slots=True, frozen=True)
class DashboardRoute:
    pass


@dataclass(slots=True, frozen=True)
class TasksRoute:
    pass


@dataclass(slots=True, frozen=True)
class NotesRoute:
    pass


@dataclass(slots=True, frozen=True)
class NoteEditorRoute:
    mode: EditorMode
    note_id: int | None = None

    def __post_init__(self) -> None:
        if self.mode == EditorMode.EDIT and self.note_id is None:
            raise ValueError("note_id is required when editing a note")


@dataclass(slots=True, frozen=True)
class CalendarRoute:
    selected_date: str | None = None


Route = LoginRoute | DashboardRoute | TasksRoute | NotesRoute | NoteEditorRoute | CalendarRoute


def route_name(route: Route) -> str:
    if isinstance(route, LoginRoute):
        return "Login"
    if isinstance(route, DashboardRoute):
        return "Dashboard"
    if isinstance(route, TasksRoute):
        return "Tasks"
    if isinstance(route, NotesRoute):
        return "Notes"
    if isinstance(route, NoteEditorRoute):
        return "NoteEditor"
    if isinstance(route, CalendarRoute):
        return "Calendar"
    raise TypeError(f"Unknown route: {route!r}")


class Navigator:
    """
    Tracks the current screen and runs enter/leave hooks.

    Hooks are keyed by route class; the notes screen uses them to start and
    stop its scheduled refresh.
    """

    def __init__(self, initial: Route | None = None) -> None:
        self._current: Route = initial if initial is not None else LoginRoute()
        self._on_enter: dict[type, list] = {}
        self._on_leave: dict[type, list] = {}

    @property
    def current(self) -> Route:
        return self._current

    def on_enter(self, route_cls: type, callback) -> None:
        self._on_enter.setdefault(route_cls, []).append(callback)

    def on_leave(self, route_cls: type, callback) -> None:
        self._on_leave.setdefault(route_cls, []).append(callback)

    def navigate(self, route: Route) -> None:
        name = route_name(route)
        previous = self._current
        if type(previous) is not type(route):
            for cb in self._on_leave.get(type(previous), []):
                cb()
        self._current = route
        if type(previous) is not type(route):
            for cb in self._on_enter.get(type(route), []):
                cb()
        logger.debug("navigate %s -> %s", route_name(previous), name)
