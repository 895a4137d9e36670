# src/workdesk/cli/commands.py

from __future__ import annotations

import logging
import shlex
from collections.abc import Awaitable, Callable
from datetime import date

from ..core.navigation import (
    CalendarRoute,
    DashboardRoute,
    EditorMode,
    NoteEditorRoute,
    NotesRoute,
    TasksRoute,
    route_name,
)
from ..core.state import AppState
from ..remote.errors import ValidationError
from ..remote.models import Note, Task
from ..sync.dates import is_date_key, local_instant
from ..sync.views import describe_due, notes_activity

CommandHandler = Callable[[AppState, list[str]], Awaitable[str]]

logger = logging.getLogger(__name__)

NOT_SIGNED_IN = "Not signed in. Use /login <username> <password> or /register."


class CommandRegistry:
    """Slash-command registry used by the console connector (/help, /tasks, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    async def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        Store/client errors propagate to the caller for display.
        """
        if not line.startswith("/"):
            return None

        try:
            parts = shlex.split(line[1:])
        except ValueError:
            parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        return await handler(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- formatting ----


def format_task(task: Task, *, pending_delete: bool = False) -> str:
    box = "[x]" if task.completed else "[ ]"
    line = f"{task.id:>4} {box} {task.title}"
    due = describe_due(task.due_date)
    if due:
        line += f"  ({due})"
    if pending_delete:
        line += "  <- tap /rm again to delete"
    return line


def format_note(note: Note, *, pending_delete: bool = False) -> str:
    preview = note.body.replace("\n", " ")
    if len(preview) > 60:
        preview = preview[:57] + "..."
    line = f"{note.id:>4} {note.title}: {preview}"
    if pending_delete:
        line += "  <- tap /rmnote again to delete"
    return line


def _task_lines(state: AppState, tasks: list[Task]) -> list[str]:
    return [format_task(t, pending_delete=state.task_deletes.is_pending(t.id)) for t in tasks]


def _parse_id(args: list[str], usage: str) -> int:
    if not args:
        raise ValidationError(usage)
    try:
        return int(args[0])
    except ValueError as e:
        raise ValidationError(usage) from e


def _split_title_body(args: list[str], usage: str) -> tuple[str, str]:
    raw = " ".join(args)
    if "|" not in raw:
        raise ValidationError(usage)
    title, body = raw.split("|", 1)
    return title.strip(), body.strip()


# ---- session ----


async def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


async def cmd_status(state: AppState, args: list[str]) -> str:
    user = state.session.current_user
    who = f"{user.name} ({user.username}, id={user.id})" if user else "not signed in"
    synced = "settled" if state.tasks.is_settled and state.notes.is_settled else "syncing"
    return (
        "Status:\n"
        f"  User: {who}\n"
        f"  Server: {getattr(state.api, 'base_url', '?')}\n"
        f"  Screen: {route_name(state.navigator.current)}\n"
        f"  Tasks: {len(state.tasks)}  Notes: {len(state.notes)}  ({synced})\n"
        f"  Notes auto-refresh: {'ON' if state.notes_poller.running else 'OFF'}"
    )


async def cmd_health(state: AppState, args: list[str]) -> str:
    status = await state.api.health()
    when = f" at {status.timestamp}" if status.timestamp else ""
    return f"Server says: {status.message or 'OK'}{when}"


async def _load_workspace(state: AppState) -> str:
    await state.tasks.refresh()
    await state.notes.refresh()
    return await cmd_home(state, [])


async def cmd_login(state: AppState, args: list[str]) -> str:
    if len(args) < 2:
        raise ValidationError("Username and password are required")
    user = await state.session.login(args[0], args[1])
    header = f"Welcome back, {user.name or user.username}!"
    return header + "\n" + await _load_workspace(state)


async def cmd_register(state: AppState, args: list[str]) -> str:
    """
    /register <username> <password> <name> [email]
    Quote the name if it has spaces.
    """
    if len(args) < 2:
        raise ValidationError("Username and password are required")
    if len(args) < 3:
        raise ValidationError("Name is required for registration")
    email = args[3] if len(args) > 3 else None
    user = await state.session.register(args[0], args[1], args[2], email)
    header = f"Account created. Welcome, {user.name}!"
    return header + "\n" + await _load_workspace(state)


async def cmd_logout(state: AppState, args: list[str]) -> str:
    if not state.session.is_signed_in:
        return "Already signed out."
    state.session.logout()
    return "Signed out."


# ---- dashboard / tasks ----


async def cmd_home(state: AppState, args: list[str]) -> str:
    if not state.session.is_signed_in:
        return NOT_SIGNED_IN
    state.navigator.navigate(DashboardRoute())

    progress = state.calendar.progress()
    activity = notes_activity(state.notes.items)
    today = state.calendar.todays_tasks

    lines = ["Dashboard:"]
    if progress.total:
        lines.append(
            f"  Tasks: {progress.completed}/{progress.total} completed ({progress.percentage:.0f}%)"
        )
    else:
        lines.append("  Tasks: no tasks yet")
    lines.append(
        f"  Notes: {len(state.notes)} total, {activity.created_today} created today, "
        f"{activity.updated_today} updated today"
    )
    lines.append(f"  Today's tasks ({len(today)}):")
    if today:
        lines.extend("  " + s for s in _task_lines(state, today))
    else:
        lines.append("    No tasks for today.")
    return "\n".join(lines)


async def cmd_tasks(state: AppState, args: list[str]) -> str:
    if not state.session.is_signed_in:
        return NOT_SIGNED_IN
    state.navigator.navigate(TasksRoute())
    if args and args[0].lower() in ("refresh", "r"):
        await state.tasks.refresh()

    tasks = state.calendar.visible_tasks
    selected = state.calendar.selected_date
    title = f"Tasks on {selected}" if selected else "Tasks"
    if not tasks:
        return f"{title}: none."
    return "\n".join([f"{title}:"] + _task_lines(state, tasks))


async def cmd_add(state: AppState, args: list[str]) -> str:
    """/add <title> [@YYYY-MM-DD]"""
    if not state.session.is_signed_in:
        return NOT_SIGNED_IN
    due = None
    if args and args[-1].startswith("@"):
        key = args[-1][1:]
        if not is_date_key(key):
            raise ValidationError("Due date must look like @YYYY-MM-DD")
        due = local_instant(key)
        args = args[:-1]
    task = await state.tasks.create(" ".join(args), due)
    if task is None:
        return NOT_SIGNED_IN
    return "Added: " + format_task(task)


async def _set_done(state: AppState, args: list[str], completed: bool) -> str:
    if not state.session.is_signed_in:
        return NOT_SIGNED_IN
    task_id = _parse_id(args, "Usage: /done <id> | /undo <id>")
    task = await state.tasks.set_completed(task_id, completed)
    return format_task(task) if task else NOT_SIGNED_IN


async def cmd_done(state: AppState, args: list[str]) -> str:
    return await _set_done(state, args, True)


async def cmd_undo(state: AppState, args: list[str]) -> str:
    return await _set_done(state, args, False)


async def cmd_rename(state: AppState, args: list[str]) -> str:
    if not state.session.is_signed_in:
        return NOT_SIGNED_IN
    task_id = _parse_id(args, "Usage: /rename <id> <title>")
    task = await state.tasks.update(task_id, title=" ".join(args[1:]))
    return "Renamed: " + format_task(task) if task else NOT_SIGNED_IN


async def cmd_rm(state: AppState, args: list[str]) -> str:
    if not state.session.is_signed_in:
        return NOT_SIGNED_IN
    task_id = _parse_id(args, "Usage: /rm <id>")
    if state.tasks.get(task_id) is None:
        return f"No task with id {task_id}."
    deleted = await state.task_deletes.request_delete(task_id)
    if deleted is None:
        return f"Task {task_id} marked for deletion. Run /rm {task_id} again to confirm."
    return f"Task deleted successfully: {deleted.title}"


async def cmd_today(state: AppState, args: list[str]) -> str:
    if not state.session.is_signed_in:
        return NOT_SIGNED_IN
    today = state.calendar.todays_tasks
    if not today:
        return "No tasks for today."
    return "\n".join([f"Today's tasks ({len(today)}):"] + _task_lines(state, today))


async def cmd_date(state: AppState, args: list[str]) -> str:
    if not state.session.is_signed_in:
        return NOT_SIGNED_IN
    if not args:
        state.calendar.clear_selection()
        return "Date filter cleared."
    if not is_date_key(args[0]):
        raise ValidationError("Usage: /date <YYYY-MM-DD>")
    selected = state.calendar.select_date(args[0])
    state.navigator.navigate(CalendarRoute(selected))
    if selected is None:
        return "Date filter cleared."
    return await cmd_tasks(state, [])


async def cmd_cal(state: AppState, args: list[str]) -> str:
    if not state.session.is_signed_in:
        return NOT_SIGNED_IN
    if args:
        try:
            year_s, month_s = args[0].split("-", 1)
            year, month = int(year_s), int(month_s)
            date(year, month, 1)
        except ValueError as e:
            raise ValidationError("Usage: /cal [YYYY-MM]") from e
    else:
        today = date.fromisoformat(state.calendar.today())
        year, month = today.year, today.month

    state.navigator.navigate(CalendarRoute(state.calendar.selected_date))
    cells = state.calendar.month_grid(year, month)

    lines = [f"{year:04d}-{month:02d}", " Sun  Mon  Tue  Wed  Thu  Fri  Sat"]
    for week in range(0, len(cells), 7):
        row = []
        for c in cells[week : week + 7]:
            day = f"{c.day:>2}" if c.in_month else "  "
            left = "[" if c.is_selected else ("<" if c.is_today else " ")
            right = "]" if c.is_selected else (">" if c.is_today else " ")
            mark = "*" if c.has_tasks and c.in_month else " "
            row.append(f"{left}{day}{right}{mark}")
        lines.append("".join(row))
    lines.append("* has tasks   <today>   [selected]")
    return "\n".join(lines)


# ---- notes ----


async def cmd_notes(state: AppState, args: list[str]) -> str:
    if not state.session.is_signed_in:
        return NOT_SIGNED_IN
    state.navigator.navigate(NotesRoute())
    if args and args[0].lower() in ("refresh", "r"):
        await state.notes.refresh()

    notes = state.notes.items
    if not notes:
        return "Notes: none yet. Use /note <title> | <body>."
    lines = ["Notes:"]
    lines.extend(format_note(n, pending_delete=state.note_deletes.is_pending(n.id)) for n in notes)
    return "\n".join(lines)


async def cmd_note(state: AppState, args: list[str]) -> str:
    if not state.session.is_signed_in:
        return NOT_SIGNED_IN
    title, body = _split_title_body(args, "Usage: /note <title> | <body>")
    state.navigator.navigate(NoteEditorRoute(EditorMode.CREATE))
    try:
        note = await state.notes.create(title, body)
    finally:
        state.navigator.navigate(NotesRoute())
    return "Note created successfully!" if note else NOT_SIGNED_IN


async def cmd_edit(state: AppState, args: list[str]) -> str:
    if not state.session.is_signed_in:
        return NOT_SIGNED_IN
    usage = "Usage: /edit <id> <title> | <body>"
    note_id = _parse_id(args, usage)
    title, body = _split_title_body(args[1:], usage)
    state.navigator.navigate(NoteEditorRoute(EditorMode.EDIT, note_id))
    try:
        note = await state.notes.update(note_id, title=title, body=body)
    finally:
        state.navigator.navigate(NotesRoute())
    return "Note updated successfully!" if note else NOT_SIGNED_IN


async def cmd_rmnote(state: AppState, args: list[str]) -> str:
    if not state.session.is_signed_in:
        return NOT_SIGNED_IN
    note_id = _parse_id(args, "Usage: /rmnote <id>")
    if state.notes.get(note_id) is None:
        return f"No note with id {note_id}."
    deleted = await state.note_deletes.request_delete(note_id)
    if deleted is None:
        return f"Note {note_id} marked for deletion. Run /rmnote {note_id} again to confirm."
    return f"Note deleted: {deleted.title}"


async def cmd_cancel(state: AppState, args: list[str]) -> str:
    state.task_deletes.cancel()
    state.note_deletes.cancel()
    return "Pending deletes cancelled."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show user, server and sync state.")
registry.register("health", cmd_health, help_text="Check that the server is reachable.")
registry.register("login", cmd_login, help_text="Sign in: /login <username> <password>.")
registry.register(
    "register",
    cmd_register,
    help_text="Create account: /register <username> <password> <name> [email].",
)
registry.register("logout", cmd_logout, help_text="Sign out and clear local data.")
registry.register("home", cmd_home, help_text="Dashboard: progress, today's tasks, notes activity.")
registry.register("tasks", cmd_tasks, help_text="List tasks: /tasks [refresh].", aliases=["t"])
registry.register("add", cmd_add, help_text="Add a task: /add <title> [@YYYY-MM-DD].")
registry.register("done", cmd_done, help_text="Mark a task completed: /done <id>.")
registry.register("undo", cmd_undo, help_text="Mark a task not completed: /undo <id>.")
registry.register("rename", cmd_rename, help_text="Rename a task: /rename <id> <title>.")
registry.register("rm", cmd_rm, help_text="Delete a task (run twice to confirm): /rm <id>.")
registry.register("today", cmd_today, help_text="Tasks due today.")
registry.register("date", cmd_date, help_text="Toggle date filter: /date <YYYY-MM-DD>.")
registry.register("cal", cmd_cal, help_text="Month calendar with task markers: /cal [YYYY-MM].")
registry.register("notes", cmd_notes, help_text="List notes (auto-refreshes): /notes [refresh].")
registry.register("note", cmd_note, help_text="New note: /note <title> | <body>.")
registry.register("edit", cmd_edit, help_text="Edit a note: /edit <id> <title> | <body>.")
registry.register("rmnote", cmd_rmnote, help_text="Delete a note (run twice to confirm): /rmnote <id>.")
registry.register("cancel", cmd_cancel, help_text="Cancel pending delete confirmations.")
