# src/taskboard/cli/commands.py

from __future__ import annotations

import contextlib
import inspect
import logging
import shlex
from collections.abc import Awaitable, Callable
from datetime import date
from typing import cast

from ..client.views import (
    SORT_FIELDS,
    TaskFilter,
    filter_tasks,
    group_by_status,
    month_cells,
    sort_tasks,
)
from ..core.state import ClientState
from ..tasks.task_models import Task, TaskPriority, TaskStatus

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[ClientState, list[str]], Awaitable[str]]
CommandHandler3 = Callable[[ClientState, list[str], CommandEmitter | None], Awaitable[str]]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Slash-command registry used by the console client (/help, /move, ...)."""

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

    async def handle(
        self,
        state: ClientState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
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

        try:
            nparams = len(inspect.signature(handler).parameters)
        except Exception:
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return await h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return await h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- rendering ----


def format_task(task: Task, *, assignees: bool) -> str:
    parts = [f"[{task.id}]", task.title, f"({task.priority.value})"]
    if assignees and task.assignee:
        parts.append(f"@{task.assignee}")
    if task.due_date:
        parts.append(f"due {task.due_date}")
    if task.is_provisional:
        parts.append("*saving*")
    return " ".join(parts)


def render_board(state: ClientState) -> str:
    visible = filter_tasks(state.cache, state.task_filter)
    lines: list[str] = []
    for status, tasks in group_by_status(visible).items():
        lines.append(f"== {status.label} ({len(tasks)})")
        for t in tasks:
            lines.append("  " + format_task(t, assignees=state.assignees_enabled))
    return "\n".join(lines)


def render_list(state: ClientState) -> str:
    visible = filter_tasks(state.cache, state.task_filter)
    ordered = sort_tasks(visible, state.sort_field, state.sort_direction)
    if not ordered:
        return "No tasks match."
    header = f"{len(ordered)} task(s), sorted by {state.sort_field} {state.sort_direction}:"
    rows = [f"  {t.status.value:<11} " + format_task(t, assignees=state.assignees_enabled) for t in ordered]
    return "\n".join([header, *rows])


def render_calendar(state: ClientState, year: int, month: int) -> str:
    capacity = int(getattr(state.settings, "calendar_cell_capacity", 3))
    visible = filter_tasks(state.cache, state.task_filter)
    lines = [f"Calendar {year:04d}-{month:02d}:"]
    for cell in month_cells(visible, year, month, capacity):
        if not cell.visible:
            continue
        titles = ", ".join(f"[{t.id}] {t.title}" for t in cell.visible)
        more = f" {cell.more_label}" if cell.overflow else ""
        lines.append(f"  {cell.day}: {titles}{more}")
    if len(lines) == 1:
        lines.append("  (nothing due this month)")
    return "\n".join(lines)


def _dispatched(pending: object, message: str) -> str:
    # None means the mutator refused or had nothing to do; it already notified.
    return message if pending is not None else "Nothing sent."


def _key_values(args: list[str]) -> dict[str, str] | None:
    out: dict[str, str] = {}
    for a in args:
        if "=" not in a:
            return None
        k, v = a.split("=", 1)
        out[k.strip()] = v.strip()
    return out


# ---- handlers ----


async def cmd_help(state: ClientState, args: list[str]) -> str:
    return registry.build_help()


async def cmd_status(state: ClientState, args: list[str]) -> str:
    flt = state.task_filter
    return (
        "Status:\n"
        f"  API: {getattr(state.settings, 'api_base_url', '?')}\n"
        f"  Mode: {getattr(state.settings, 'app_mode', 'personal')}\n"
        f"  Tasks cached: {len(state.cache)} (requests in flight: {state.mutator.in_flight})\n"
        f"  Filter: search={flt.search!r} status={flt.status or '-'} "
        f"priority={flt.priority or '-'} assignee={flt.assignee or '-'}\n"
        f"  Sort: {state.sort_field} {state.sort_direction}"
    )


async def cmd_reload(state: ClientState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if emit:
        with contextlib.suppress(Exception):
            emit("Loading tasks...")
    ok = await state.mutator.refresh()
    return f"Loaded {len(state.cache)} task(s)." if ok else "Reload failed; keeping the current view."


async def cmd_board(state: ClientState, args: list[str]) -> str:
    return render_board(state)


async def cmd_list(state: ClientState, args: list[str]) -> str:
    """
    /list           -> list with the current filter and sort
    /list <text>    -> same, with <text> as the search term
    """
    if args:
        flt = state.task_filter
        state.task_filter = TaskFilter(
            search=" ".join(args),
            status=flt.status,
            priority=flt.priority,
            assignee=flt.assignee,
        )
    return render_list(state)


async def cmd_filter(state: ClientState, args: list[str]) -> str:
    """
    /filter                          -> show usage
    /filter clear                    -> drop all filters
    /filter status=done priority=high search=api assignee=jane
    """
    if not args:
        return "Usage: /filter key=value ... (keys: search, status, priority, assignee) | /filter clear"
    if args == ["clear"]:
        state.task_filter = TaskFilter()
        return "Filters cleared."

    pairs = _key_values(args)
    if pairs is None:
        return "Usage: /filter key=value ..."

    flt = state.task_filter
    search, status, priority, assignee = flt.search, flt.status, flt.priority, flt.assignee
    for key, value in pairs.items():
        if key == "search":
            search = value
        elif key == "status":
            try:
                status = TaskStatus(value) if value else None
            except ValueError:
                return f"Unknown status: {value}. Use one of: {', '.join(s.value for s in TaskStatus)}."
        elif key == "priority":
            try:
                priority = TaskPriority(value) if value else None
            except ValueError:
                return f"Unknown priority: {value}. Use one of: {', '.join(p.value for p in TaskPriority)}."
        elif key == "assignee":
            if not state.assignees_enabled:
                return "Assignees are only available in business mode."
            assignee = value
        else:
            return f"Unknown filter key: {key}."

    state.task_filter = TaskFilter(search=search, status=status, priority=priority, assignee=assignee)
    return render_list(state)


async def cmd_sort(state: ClientState, args: list[str]) -> str:
    if not args or args[0] not in SORT_FIELDS:
        return f"Usage: /sort <{'|'.join(SORT_FIELDS)}> [asc|desc]"
    direction = args[1].lower() if len(args) > 1 else "asc"
    if direction not in ("asc", "desc"):
        return "Direction must be asc or desc."
    state.sort_field = args[0]
    state.sort_direction = direction
    return render_list(state)


async def cmd_add(state: ClientState, args: list[str]) -> str:
    """/add title [| priority [| assignee [| YYYY-MM-DD]]]"""
    fields = [p.strip() for p in " ".join(args).split("|")]
    if not fields[0]:
        return "Usage: /add title [| priority [| assignee [| YYYY-MM-DD]]]"

    draft: dict[str, str] = {"title": fields[0]}
    if len(fields) > 1 and fields[1]:
        draft["priority"] = fields[1].lower()
    if len(fields) > 2 and fields[2] and state.assignees_enabled:
        draft["assignee"] = fields[2]
    if len(fields) > 3 and fields[3]:
        draft["dueDate"] = fields[3]

    pending = state.mutator.create(draft)
    return _dispatched(pending, f"Added {fields[0]!r} (saving...)")


async def cmd_edit(state: ClientState, args: list[str]) -> str:
    """/edit <id> title="New title" description= priority=high dueDate=2025-01-31"""
    if len(args) < 2:
        return "Usage: /edit <id> field=value ... (empty value clears description/assignee/dueDate)"
    pairs = _key_values(args[1:])
    if pairs is None:
        return "Usage: /edit <id> field=value ..."
    if "assignee" in pairs and not state.assignees_enabled:
        return "Assignees are only available in business mode."
    pending = state.mutator.update(args[0], pairs)
    return _dispatched(pending, f"Updated {args[0]} (saving...)")


async def cmd_move(state: ClientState, args: list[str]) -> str:
    if len(args) != 2:
        return f"Usage: /move <id> <{'|'.join(s.value for s in TaskStatus)}>"
    current = state.cache.get(args[0])
    if current is not None and current.status.value == args[1]:
        return f"Task {args[0]} is already in {args[1]}."
    pending = state.mutator.move_to_status(args[0], args[1])
    return _dispatched(pending, f"Moved {args[0]} -> {args[1]} (saving...)")


async def cmd_due(state: ClientState, args: list[str]) -> str:
    if len(args) != 2:
        return "Usage: /due <id> <YYYY-MM-DD|none>"
    day = None if args[1].lower() in ("none", "-") else args[1]
    pending = state.mutator.move_to_date(args[0], day)
    return _dispatched(pending, f"Task {args[0]} due {day or 'cleared'} (saving...)")


async def cmd_del(state: ClientState, args: list[str]) -> str:
    if len(args) != 1:
        return "Usage: /del <id>"
    pending = state.mutator.delete(args[0])
    return _dispatched(pending, f"Deleted {args[0]} (saving...)")


async def cmd_dup(state: ClientState, args: list[str]) -> str:
    if len(args) != 1:
        return "Usage: /dup <id>"
    pending = state.mutator.duplicate(args[0])
    return _dispatched(pending, f"Duplicating {args[0]} (saving...)")


async def cmd_cal(state: ClientState, args: list[str]) -> str:
    today = date.today()
    year, month = today.year, today.month
    if args:
        try:
            y, m = args[0].split("-", 1)
            year, month = int(y), int(m)
            if not 1 <= month <= 12:
                raise ValueError(month)
        except ValueError:
            return "Usage: /cal [YYYY-MM]"
    return render_calendar(state, year, month)


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show API, mode, filter and sort.")
registry.register("reload", cmd_reload, help_text="Reload all tasks from the server.")
registry.register("board", cmd_board, help_text="Show the board by status column.", aliases=["b"])
registry.register("list", cmd_list, help_text="List tasks (filtered, sorted): /list [search].", aliases=["ls"])
registry.register("filter", cmd_filter, help_text="Set filters: /filter status=todo priority=high | clear.")
registry.register("sort", cmd_sort, help_text="Sort the list: /sort <field> [asc|desc].")
registry.register("add", cmd_add, help_text="Create: /add title [| priority [| assignee [| YYYY-MM-DD]]].")
registry.register("edit", cmd_edit, help_text="Update fields: /edit <id> field=value ...")
registry.register("move", cmd_move, help_text="Move to a column: /move <id> <status>.", aliases=["mv"])
registry.register("due", cmd_due, help_text="Move on the calendar: /due <id> <YYYY-MM-DD|none>.")
registry.register("del", cmd_del, help_text="Delete: /del <id>.", aliases=["rm"])
registry.register("dup", cmd_dup, help_text="Duplicate: /dup <id>.")
registry.register("cal", cmd_cal, help_text="Show tasks by due date: /cal [YYYY-MM].")
