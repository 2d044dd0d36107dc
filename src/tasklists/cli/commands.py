# src/tasklists/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from typing import cast

from ..core.state import AppState
from ..core.tasks_screen import TasksScreen
from ..tasks.task_errors import NotFoundError, ValidationError
from ..tasks.task_models import Section

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

_SECTION_WORDS = {
    "c": Section.CURRENT,
    "cur": Section.CURRENT,
    "current": Section.CURRENT,
    "d": Section.COMPLETED,
    "done": Section.COMPLETED,
    "completed": Section.COMPLETED,
}


class CommandRegistry:
    """Simple slash-command registry used by connectors (/help, /add, ...)."""

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

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

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
        except (TypeError, ValueError):
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- rendering ----


def render_screen(screen: TasksScreen) -> str:
    """Plain-text rendering of both sections, rows numbered from 1."""
    lines = [f"== {screen.title} =="]
    for section in Section:
        lines.append(screen.section_title(section))
        tasks = screen.rows(section)
        if not tasks:
            lines.append("  (empty)")
            continue
        for i, task in enumerate(tasks, start=1):
            note = f"  [{task.note}]" if task.note else ""
            lines.append(f"  {i}. {task.title}{note}")
    return "\n".join(lines)


# ---- argument helpers ----


def _split_title_note(args: list[str]) -> tuple[str, str]:
    """`Buy milk | 2%` -> ("Buy milk", "2%")."""
    text = " ".join(args)
    title, _, note = text.partition("|")
    return title.strip(), note.strip()


def _parse_row(raw: str) -> int | None:
    try:
        row = int(raw)
    except ValueError:
        return None
    return row - 1 if row >= 1 else None


def parse_position(args: list[str]) -> tuple[Section, int] | None:
    if len(args) < 2:
        return None
    section = _SECTION_WORDS.get(args[0].lower())
    row = _parse_row(args[1])
    if section is None or row is None:
        return None
    return section, row


def _screen(state: AppState) -> TasksScreen:
    if state.screen is None:
        state.open_list(state.ensure_default_list())
    assert state.screen is not None
    return state.screen


def stale_reply(state: AppState, exc: NotFoundError) -> str:
    logger.info("Stale reference dropped: %s", exc)
    screen = _screen(state)
    screen.projection.refresh()
    return "That task no longer exists. View refreshed.\n" + render_screen(screen)


def row_missing(section: Section, row: int) -> str:
    return f"No row {row + 1} in {TasksScreen.section_title(section)}."


# ---- handlers ----


def cmd_help(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    screen = _screen(state)
    current, completed = screen.projection.counts()
    return (
        "Status:\n"
        f"  Database: {state.store.db_path}\n"
        f"  Open list: {screen.title}\n"
        f"  Current: {current}, completed: {completed}"
    )


def cmd_show(state: AppState, args: list[str]) -> str:
    return render_screen(_screen(state))


def cmd_lists(state: AppState, args: list[str]) -> str:
    lists = state.store.list_lists()
    if not lists:
        return "No lists yet. Use /newlist <title>."
    open_id = state.screen.task_list.id if state.screen is not None else None
    lines = ["Lists:"]
    for task_list in lists:
        marker = "*" if task_list.id == open_id else " "
        total = state.store.count_tasks(task_list)
        lines.append(f" {marker} {task_list.title} ({total})")
    return "\n".join(lines)


def cmd_open(state: AppState, args: list[str]) -> str:
    title = " ".join(args).strip()
    if not title:
        return "Usage: /open <list title>"
    task_list = state.store.find_list(title)
    if task_list is None:
        return f"No list named {title!r}. Use /newlist {title} to create it."
    return render_screen(state.open_list(task_list))


def cmd_newlist(state: AppState, args: list[str]) -> str:
    try:
        task_list = state.store.create_list(" ".join(args))
    except ValidationError:
        return "Usage: /newlist <list title>"
    return render_screen(state.open_list(task_list))


def cmd_dellist(state: AppState, args: list[str]) -> str:
    title = " ".join(args).strip()
    if not title:
        return "Usage: /dellist <list title>"
    task_list = state.store.find_list(title)
    if task_list is None:
        return f"No list named {title!r}."
    try:
        state.store.delete_list(task_list)
    except NotFoundError:
        return f"No list named {title!r}."
    if state.screen is not None and state.screen.task_list.id == task_list.id:
        state.open_list(state.ensure_default_list())
    return f"Deleted list {task_list.title!r}."


def cmd_add(state: AppState, args: list[str]) -> str:
    title, note = _split_title_note(args)
    screen = _screen(state)
    try:
        screen.add(title, note)
    except ValidationError:
        return "Task title is required. Usage: /add <title> [| note]"
    return render_screen(screen)


def cmd_edit(state: AppState, args: list[str]) -> str:
    pos = parse_position(args)
    if pos is None:
        return "Usage: /edit <c|d> <row> <title> [| note]"
    section, row = pos
    title, note = _split_title_note(args[2:])
    screen = _screen(state)
    try:
        screen.edit_at(section, row, title, note)
    except IndexError:
        return row_missing(section, row)
    except ValidationError:
        return "Task title is required. Usage: /edit <c|d> <row> <title> [| note]"
    except NotFoundError as e:
        return stale_reply(state, e)
    return render_screen(screen)


def cmd_delete(state: AppState, args: list[str]) -> str:
    pos = parse_position(args)
    if pos is None:
        return "Usage: /delete <c|d> <row>"
    section, row = pos
    screen = _screen(state)
    try:
        screen.delete_at(section, row)
    except IndexError:
        return row_missing(section, row)
    except NotFoundError as e:
        return stale_reply(state, e)
    return render_screen(screen)


def _toggle(state: AppState, args: list[str], section: Section) -> str:
    verb = TasksScreen.action_title(section).lower()
    row = _parse_row(args[0]) if args else None
    if row is None:
        return f"Usage: /{verb} <row>"
    screen = _screen(state)
    try:
        screen.toggle_at(section, row)
    except IndexError:
        return row_missing(section, row)
    except NotFoundError as e:
        return stale_reply(state, e)
    return render_screen(screen)


def cmd_done(state: AppState, args: list[str]) -> str:
    return _toggle(state, args, Section.CURRENT)


def cmd_undone(state: AppState, args: list[str]) -> str:
    return _toggle(state, args, Section.COMPLETED)


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show database path, open list and counts.")
registry.register("show", cmd_show, help_text="Show the open list.", aliases=["ls"])
registry.register("lists", cmd_lists, help_text="Show all lists.")
registry.register("open", cmd_open, help_text="Open a list: /open <title>.")
registry.register("newlist", cmd_newlist, help_text="Create and open a list: /newlist <title>.")
registry.register("dellist", cmd_dellist, help_text="Delete a list and its tasks: /dellist <title>.")
registry.register("add", cmd_add, help_text="Add a task: /add <title> [| note].")
registry.register(
    "edit", cmd_edit, help_text="Edit a task: /edit <c|d> <row> [<title> [| note]] (no text opens the form)."
)
registry.register("delete", cmd_delete, help_text="Delete a task: /delete <c|d> <row>.", aliases=["rm"])
registry.register("done", cmd_done, help_text="Mark a current task done: /done <row>.")
registry.register("undone", cmd_undone, help_text="Move a completed task back: /undone <row>.")
