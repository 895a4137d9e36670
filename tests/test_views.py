# tests/test_views.py

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from workdesk.remote.models import Note, Task
from workdesk.sync.views import (
    TaskCalendarView,
    describe_due,
    has_tasks_on_date,
    notes_activity,
    task_progress,
    tasks_on_date,
    tasks_today,
)

EST = timezone(timedelta(hours=-5))
NOW = datetime(2025, 3, 14, 10, 0, tzinfo=EST)


def _task(task_id: int, due: str | None = None, completed: bool = False) -> Task:
    return Task(id=task_id, title=f"t{task_id}", completed=completed, user_id=1, due_date=due)


def test_late_local_task_is_on_local_day_not_utc_day() -> None:
    late = _task(1, "2025-03-15T04:30:00Z")  # 23:30 on the 14th in EST
    tasks = [late, _task(2)]

    assert tasks_on_date(tasks, "2025-03-14", EST) == [late]
    assert tasks_on_date(tasks, "2025-03-15", EST) == []


def test_tasks_without_or_with_bad_due_date_never_match() -> None:
    tasks = [_task(1), _task(2, "not a date")]
    assert tasks_on_date(tasks, "2025-03-14", EST) == []
    assert not has_tasks_on_date(tasks, "2025-03-14", EST)


def test_tasks_today_and_has_tasks() -> None:
    today = _task(1, "2025-03-14T18:00:00-05:00")
    tomorrow = _task(2, "2025-03-15T18:00:00-05:00")
    tasks = [today, tomorrow]

    assert tasks_today(tasks, NOW, EST) == [today]
    assert has_tasks_on_date(tasks, "2025-03-15", EST)
    assert not has_tasks_on_date(tasks, "2025-03-16", EST)


def test_select_date_toggles_filter() -> None:
    tasks = [_task(1, "2025-03-14T12:00:00-05:00"), _task(2, "2025-03-20T12:00:00-05:00"), _task(3)]
    view = TaskCalendarView(lambda: tasks, tz=EST, clock=lambda: NOW)

    assert [t.id for t in view.visible_tasks] == [1, 2, 3]

    assert view.select_date("2025-03-20") == "2025-03-20"
    assert [t.id for t in view.visible_tasks] == [2]

    # new date replaces the filter
    view.select_date("2025-03-14")
    assert [t.id for t in view.visible_tasks] == [1]

    # same date again turns the filter off
    assert view.select_date("2025-03-14") is None
    assert [t.id for t in view.visible_tasks] == [1, 2, 3]


def test_select_date_rejects_non_keys() -> None:
    view = TaskCalendarView(lambda: [], tz=EST, clock=lambda: NOW)
    with pytest.raises(ValueError):
        view.select_date("14/03/2025")


def test_view_recomputes_from_source() -> None:
    tasks: list[Task] = []
    view = TaskCalendarView(lambda: list(tasks), tz=EST, clock=lambda: NOW)
    assert view.todays_tasks == []

    tasks.append(_task(7, "2025-03-14T08:00:00-05:00"))
    assert [t.id for t in view.todays_tasks] == [7]
    assert view.has_tasks_on("2025-03-14")


def test_month_grid_shape_and_markers() -> None:
    tasks = [_task(1, "2025-03-20T12:00:00-05:00"), _task(2, "2025-04-01T12:00:00-05:00")]
    view = TaskCalendarView(lambda: tasks, tz=EST, clock=lambda: NOW)
    view.select_date("2025-03-20")

    cells = view.month_grid(2025, 3)

    assert len(cells) == 42
    # March 1st 2025 is a Saturday: six leading February days, Sunday first.
    assert cells[0].key == "2025-02-23" and not cells[0].in_month
    assert cells[6].key == "2025-03-01" and cells[6].in_month

    by_key = {c.key: c for c in cells}
    assert by_key["2025-03-14"].is_today
    assert by_key["2025-03-20"].has_tasks and by_key["2025-03-20"].is_selected
    assert by_key["2025-04-01"].has_tasks and not by_key["2025-04-01"].in_month
    assert sum(1 for c in cells if c.is_today) == 1


def test_task_progress() -> None:
    assert task_progress([]).percentage == 0.0

    p = task_progress([_task(1, completed=True), _task(2), _task(3), _task(4, completed=True)])
    assert (p.total, p.completed, p.remaining) == (4, 2, 2)
    assert p.percentage == pytest.approx(50.0)


def test_notes_activity_counts_created_and_updated_today_separately() -> None:
    notes = [
        Note(1, "a", "x", 1, created_at="2025-03-14T09:00:00-05:00", updated_at="2025-03-14T09:00:00-05:00"),
        Note(2, "b", "y", 1, created_at="2025-03-01T09:00:00-05:00", updated_at="2025-03-14T09:30:00-05:00"),
        Note(3, "c", "z", 1, created_at="2025-03-01T09:00:00-05:00", updated_at="2025-03-02T09:30:00-05:00"),
    ]
    activity = notes_activity(notes, NOW, EST)
    assert activity.created_today == 1
    assert activity.updated_today == 1


def test_describe_due() -> None:
    assert describe_due(None, NOW, EST) == ""
    assert describe_due("2025-03-14T20:00:00-05:00", NOW, EST) == "Due Today"
    assert describe_due("2025-03-15T20:00:00-05:00", NOW, EST) == "Due Tomorrow"
    assert describe_due("2025-03-10T20:00:00-05:00", NOW, EST) == "Overdue"
    assert describe_due("2025-04-02T12:00:00-05:00", NOW, EST) == "Due Apr 2"
    assert describe_due("2026-01-05T12:00:00-05:00", NOW, EST) == "Due Jan 5, 2026"
