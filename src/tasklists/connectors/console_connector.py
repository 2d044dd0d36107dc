# src/tasklists/connectors/console_connector.py

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..cli.commands import parse_position, render_screen, row_missing, stale_reply
from ..core.state import AppState
from ..tasks.task_errors import NotFoundError, StorageError, ValidationError
from ..tasks.task_models import Section, Task

logger = logging.getLogger(__name__)

CANCEL_WORDS = ("/cancel", "/c")
CLEAR_NOTE = "-"

InputFn = Callable[[str], str]


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


def run_task_form(
    state: AppState,
    read: InputFn = input,
    position: tuple[Section, int] | None = None,
) -> str | None:
    """
    Ask for a task's title and note until the title is valid.

    With `position` the form edits that row: the prompts show the current
    values and an empty answer keeps them ("-" clears the note).
    Returns the rendered screen after saving, or None if the user cancelled.
    """
    screen = state.screen
    if screen is None:
        screen = state.open_list(state.ensure_default_list())

    editing = position is not None
    current: Task | None = None
    if position is not None:
        try:
            current = screen.row(*position)
        except IndexError:
            return row_missing(*position)

    print(f"{screen.form_title(editing)}: What do you want to do? ({CANCEL_WORDS[0]} to cancel)")
    while True:
        if current is None:
            title = read("Title: ").strip()
        else:
            title = read(f"Title [{current.title}]: ").strip()
        if title.lower() in CANCEL_WORDS:
            return None

        if current is None:
            note = read("Note: ").strip()
        else:
            note = read(f"Note [{current.note}]: ").strip()
            title = title or current.title
            note = "" if note == CLEAR_NOTE else (note or current.note)

        try:
            if position is None:
                screen.add(title, note)
            else:
                screen.edit_at(*position, title, note)
        except ValidationError:
            print("Title is required.")
            continue
        except NotFoundError as e:
            return stale_reply(state, e)
        print(f"[{screen.form_action(editing)}]")
        return render_screen(screen)


def run_console_loop(state: AppState, read: InputFn = input) -> None:
    logger.info("Console connector started.")
    _print_ts("[CONSOLE] Use /help for commands, /add for a new task, /exit to quit.\n")

    def emit(text: str) -> None:
        print(f"[{_ts_local()}] {text}", flush=True)

    if state.screen is not None:
        print(render_screen(state.screen))

    while True:
        try:
            user_input = read(">>> ").strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        if not user_input.startswith("/"):
            user_input = "/add " + user_input

        parts = user_input.split()
        edit_position = parse_position(parts[1:]) if len(parts) == 3 and parts[0].lower() == "/edit" else None

        try:
            if user_input.lower() == "/add" or edit_position is not None:
                response = run_task_form(state, read, edit_position)
                if response is None:
                    _print_ts("Cancelled.")
                    continue
            else:
                response = command_registry.handle(state, user_input, emit=emit)
        except StorageError as e:
            logger.error("Storage failure while handling %r: %s", user_input, e)
            _print_ts(f"[STORAGE] Operation failed and was not applied: {e}")
            continue
        except (EOFError, KeyboardInterrupt):
            print()
            _print_ts("Cancelled.")
            continue
        except Exception:
            logger.exception("Command handler crashed.")
            response = "Internal error while handling a command."

        if response is not None:
            print(response)

    logger.info("Console connector finished.")
