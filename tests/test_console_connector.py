# tests/test_console_connector.py

from __future__ import annotations

from tasklists.connectors.console_connector import run_console_loop, run_task_form
from tasklists.tasks.task_errors import NotFoundError, StorageError
from tasklists.tasks.task_models import Section

from .fakes import ScriptedInput


def test_form_reprompts_until_title_given(state, capsys) -> None:
    read = ScriptedInput(["", "orphan note", "Buy milk", "2%"])

    out = run_task_form(state, read)

    assert out is not None and "1. Buy milk  [2%]" in out
    assert "Title is required." in capsys.readouterr().out
    assert read.prompts == ["Title: ", "Note: ", "Title: ", "Note: "]
    assert state.store.count_tasks() == 1


def test_form_can_be_cancelled(state) -> None:
    assert run_task_form(state, ScriptedInput(["/cancel"])) is None
    assert state.store.count_tasks() == 0


def test_console_loop_runs_commands_until_exit(state, capsys) -> None:
    read = ScriptedInput(["/add", "Laundry", "", "Dishes", "/done 1", "/exit", "/add never"])

    run_console_loop(state, read)

    projection = state.screen.projection
    assert [t.title for t in projection.incomplete] == ["Dishes"]
    assert [t.title for t in projection.complete] == ["Laundry"]
    assert "COMPLETED TASKS" in capsys.readouterr().out


def test_console_loop_stops_on_eof(state) -> None:
    run_console_loop(state, ScriptedInput(["/add one"]))
    assert state.store.count_tasks() == 1


def test_console_reports_storage_failure_and_continues(state, capsys, monkeypatch) -> None:
    def failing_create(*args, **kwargs):
        raise StorageError("database is locked")

    monkeypatch.setattr(state.store, "create", failing_create)

    run_console_loop(state, ScriptedInput(["/add doomed", "/show"]))

    out = capsys.readouterr().out
    assert "[STORAGE] Operation failed and was not applied: database is locked" in out
    assert "CURRENT TASKS" in out


def test_edit_form_prefills_and_keeps_empty_fields(state, capsys) -> None:
    state.screen.add("Buy milk", "2%")
    read = ScriptedInput(["", "skim"])

    out = run_task_form(state, read, (Section.CURRENT, 0))

    assert out is not None and "1. Buy milk  [skim]" in out
    assert read.prompts == ["Title [Buy milk]: ", "Note [2%]: "]
    printed = capsys.readouterr().out
    assert "Edit Task: What do you want to do?" in printed
    assert "[Update Task]" in printed


def test_edit_form_can_clear_note_and_rename(state) -> None:
    state.screen.add("draft", "old note")
    state.screen.toggle_at(Section.CURRENT, 0)

    run_task_form(state, ScriptedInput(["final", "-"]), (Section.COMPLETED, 0))

    task = state.screen.row(Section.COMPLETED, 0)
    assert (task.title, task.note, task.is_complete) == ("final", "", True)


def test_edit_form_reports_missing_row(state) -> None:
    read = ScriptedInput([])
    assert run_task_form(state, read, (Section.CURRENT, 4)) == "No row 5 in CURRENT TASKS."
    assert read.prompts == []


def test_edit_form_drops_stale_task(state, monkeypatch) -> None:
    state.screen.add("vanishing")

    def gone(*args, **kwargs):
        raise NotFoundError("Task 1 not found")

    monkeypatch.setattr(state.screen, "edit_at", gone)

    out = run_task_form(state, ScriptedInput(["new title", ""]), (Section.CURRENT, 0))
    assert out is not None and out.startswith("That task no longer exists. View refreshed.")


def test_console_edit_without_text_opens_form(state) -> None:
    read = ScriptedInput(["/add Laundry | whites", "/edit c 1", "Laundry today", "", "/exit"])

    run_console_loop(state, read)

    task = state.screen.row(Section.CURRENT, 0)
    assert (task.title, task.note) == ("Laundry today", "whites")
    assert "Title [Laundry]: " in read.prompts
