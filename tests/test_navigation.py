# tests/test_navigation.py

from __future__ import annotations

import pytest

from workdesk.core.navigation import (
    CalendarRoute,
    DashboardRoute,
    EditorMode,
    LoginRoute,
    Navigator,
    NoteEditorRoute,
    NotesRoute,
    route_name,
)


def test_edit_mode_needs_note_id() -> None:
    with pytest.raises(ValueError):
        NoteEditorRoute(EditorMode.EDIT)
    assert NoteEditorRoute(EditorMode.CREATE).note_id is None
    assert NoteEditorRoute(EditorMode.EDIT, 4).note_id == 4


def test_route_name_rejects_unknown() -> None:
    assert route_name(CalendarRoute("2025-03-14")) == "Calendar"
    with pytest.raises(TypeError):
        route_name("Dashboard")  # type: ignore[arg-type]


def test_hooks_fire_only_on_route_change() -> None:
    events: list[str] = []
    nav = Navigator()
    nav.on_enter(NotesRoute, lambda: events.append("enter"))
    nav.on_leave(NotesRoute, lambda: events.append("leave"))

    assert isinstance(nav.current, LoginRoute)

    nav.navigate(NotesRoute())
    nav.navigate(NotesRoute())
    nav.navigate(DashboardRoute())
    nav.navigate(CalendarRoute())

    assert events == ["enter", "leave"]
    assert isinstance(nav.current, CalendarRoute)
