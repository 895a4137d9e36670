# src/workdesk/sync/views.py

"""
Derived views over the task/note collections.

Everything here is recomputed from the store on each access; the only state
kept is the calendar's selected date.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo

from ..remote.models import Note, Task
from .dates import (
    date_key,
    is_date_key,
    local_date_key,
    now_local,
    parse_instant,
    safe_local_date_key,
    to_local,
    today_key,
)

GRID_CELLS = 42  # 6 weeks x 7 days


def tasks_on_date(tasks: Iterable[Task], key: str, tz: tzinfo | None = None) -> list[Task]:
    """Tasks whose due date falls on local day `key`; tasks without a due date never match."""
    return [t for t in tasks if safe_local_date_key(t.due_date, tz) == key]


def tasks_today(
    tasks: Iterable[Task],
    now: datetime | None = None,
    tz: tzinfo | None = None,
) -> list[Task]:
    return tasks_on_date(tasks, today_key(now, tz), tz)


def has_tasks_on_date(tasks: Iterable[Task], key: str, tz: tzinfo | None = None) -> bool:
    return any(safe_local_date_key(t.due_date, tz) == key for t in tasks)


@dataclass(slots=True, frozen=True)
class TaskProgress:
    total: int
    completed: int
    remaining: int
    percentage: float


def task_progress(tasks: Iterable[Task]) -> TaskProgress:
    items = list(tasks)
    total = len(items)
    done = sum(1 for t in items if t.completed)
    pct = (done / total) * 100.0 if total else 0.0
    return TaskProgress(total=total, completed=done, remaining=total - done, percentage=pct)


@dataclass(slots=True, frozen=True)
class NotesActivity:
    created_today: int
    updated_today: int  # updated today, created earlier


def notes_activity(
    notes: Iterable[Note],
    now: datetime | None = None,
    tz: tzinfo | None = None,
) -> NotesActivity:
    today = today_key(now, tz)
    created = 0
    updated = 0
    for n in notes:
        created_today = safe_local_date_key(n.created_at, tz) == today
        if created_today:
            created += 1
        elif safe_local_date_key(n.updated_at, tz) == today:
            updated += 1
    return NotesActivity(created_today=created, updated_today=updated)


@dataclass(slots=True, frozen=True)
class CalendarDay:
    key: str
    day: int
    in_month: bool
    is_today: bool
    is_selected: bool
    has_tasks: bool


class TaskCalendarView:
    """
    Calendar/"today" projection over a task source.

    `source` is any zero-arg callable returning the current tasks (normally
    `lambda: task_store.items`), so the view never holds a stale copy.
    """

    def __init__(
        self,
        source: Callable[[], list[Task]],
        *,
        tz: tzinfo | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._source = source
        self._tz = tz
        self._clock = clock or (lambda: now_local(tz))
        self._selected: str | None = None

    @property
    def selected_date(self) -> str | None:
        return self._selected

    def select_date(self, key: str) -> str | None:
        """Select a day; selecting the already-selected day clears the filter."""
        if not is_date_key(key):
            raise ValueError(f"Not a YYYY-MM-DD date: {key!r}")
        self._selected = None if self._selected == key else key
        return self._selected

    def clear_selection(self) -> None:
        self._selected = None

    def today(self) -> str:
        return today_key(self._clock(), self._tz)

    @property
    def visible_tasks(self) -> list[Task]:
        tasks = self._source()
        if self._selected is None:
            return tasks
        return tasks_on_date(tasks, self._selected, self._tz)

    @property
    def todays_tasks(self) -> list[Task]:
        return tasks_on_date(self._source(), self.today(), self._tz)

    def has_tasks_on(self, key: str) -> bool:
        return has_tasks_on_date(self._source(), key, self._tz)

    def progress(self) -> TaskProgress:
        return task_progress(self._source())

    def month_grid(self, year: int, month: int) -> list[CalendarDay]:
        """42 cells starting on the Sunday on/before the 1st, padded with adjacent months."""
        first = date(year, month, 1)
        lead = (first.weekday() + 1) % 7  # Monday=0 -> Sunday-first offset
        start = first - timedelta(days=lead)

        tasks = self._source()
        marked = {k for k in (safe_local_date_key(t.due_date, self._tz) for t in tasks) if k}
        today = self.today()

        cells: list[CalendarDay] = []
        for offset in range(GRID_CELLS):
            d = start + timedelta(days=offset)
            key = date_key(d.year, d.month, d.day)
            in_month = d.month == month
            cells.append(
                CalendarDay(
                    key=key,
                    day=d.day,
                    in_month=in_month,
                    is_today=in_month and key == today,
                    is_selected=key == self._selected,
                    has_tasks=key in marked,
                )
            )
        return cells


def describe_due(
    due_date: str | None,
    now: datetime | None = None,
    tz: tzinfo | None = None,
) -> str:
    """Short label for a task's due date: Due Today / Due Tomorrow / Overdue / Due Mar 14."""
    if not due_date:
        return ""
    try:
        due = to_local(parse_instant(due_date), tz)
    except ValueError:
        return ""
    current = now if now is not None else now_local(tz)
    due_day = local_date_key(due, tz)
    today = today_key(current, tz)
    tomorrow = (date.fromisoformat(today) + timedelta(days=1)).isoformat()

    if due_day == today:
        return "Due Today"
    if due_day == tomorrow:
        return "Due Tomorrow"
    if due_day < today:
        return "Overdue"
    label = f"Due {due.strftime('%b')} {due.day}"
    if due.year != date.fromisoformat(today).year:
        label += f", {due.year}"
    return label
