# tests/test_commands.py

from __future__ import annotations

from tasklists.cli.commands import CommandRegistry, registry, render_screen
from tasklists.tasks.task_models import Section


def test_command_registry_routes_2_and_3_params(state) -> None:
    reg = CommandRegistry()
    called = {"h2": 0, "h3": 0}

    def h2(state, args):
        called["h2"] += 1
        return "h2"

    def h3(state, args, emit):
        called["h3"] += 1
        if emit is not None:
            emit("note")
        return "h3"

    reg.register("a", h2, "a")
    reg.register("b", h3, "b")

    assert reg.handle(state, "/a x") == "h2"
    assert reg.handle(state, "/b y", emit=lambda _: None) == "h3"
    assert called["h2"] == 1
    assert called["h3"] == 1


def test_command_registry_unknown_and_non_command(state) -> None:
    reg = CommandRegistry()
    assert reg.handle(state, "hello") is None
    assert "Unknown command" in (reg.handle(state, "/nope") or "")
    assert "Empty command" in (reg.handle(state, "/") or "")


def test_bootstrap_opens_default_list(state) -> None:
    assert state.screen is not None
    assert state.screen.title == "Tasks"
    out = registry.handle(state, "/show") or ""
    assert "CURRENT TASKS" in out
    assert "COMPLETED TASKS" in out


def test_add_done_undone_flow(state) -> None:
    out = registry.handle(state, "/add Buy milk | 2%") or ""
    assert "1. Buy milk  [2%]" in out

    registry.handle(state, "/add Bread")
    registry.handle(state, "/done 2")

    projection = state.screen.projection
    assert [t.title for t in projection.incomplete] == ["Buy milk"]
    assert [t.title for t in projection.complete] == ["Bread"]

    registry.handle(state, "/undone 1")
    assert projection.complete == []
    assert [t.title for t in projection.incomplete] == ["Buy milk", "Bread"]


def test_add_without_title_reports_usage(state) -> None:
    out = registry.handle(state, "/add | only a note") or ""
    assert "title is required" in out
    assert state.store.count_tasks() == 0


def test_edit_and_delete_by_position(state) -> None:
    registry.handle(state, "/add draft")
    registry.handle(state, "/done 1")

    registry.handle(state, "/edit d 1 final | reviewed")
    task = state.screen.row(Section.COMPLETED, 0)
    assert (task.title, task.note) == ("final", "reviewed")

    out = registry.handle(state, "/delete c 1") or ""
    assert "No row 1 in CURRENT TASKS" in out

    registry.handle(state, "/rm done 1")
    assert state.store.count_tasks() == 0


def test_bad_positions_show_usage(state) -> None:
    assert "Usage" in (registry.handle(state, "/done") or "")
    assert "Usage" in (registry.handle(state, "/done zero") or "")
    assert "Usage" in (registry.handle(state, "/edit x 1 title") or "")
    assert "Usage" in (registry.handle(state, "/delete c 0") or "")


def test_list_management(state) -> None:
    out = registry.handle(state, "/newlist Work") or ""
    assert out.startswith("== Work ==")
    registry.handle(state, "/add Report")

    lists = registry.handle(state, "/lists") or ""
    assert " * Work (1)" in lists
    assert "   Tasks (0)" in lists

    registry.handle(state, "/open tasks")
    assert state.screen.title == "Tasks"

    registry.handle(state, "/open Work")
    out = registry.handle(state, "/dellist Work") or ""
    assert "Deleted list 'Work'" in out
    assert state.screen.title == "Tasks"
    assert state.store.count_tasks() == 0

    assert "No list named" in (registry.handle(state, "/open Work") or "")


def test_render_screen_empty_sections(state) -> None:
    text = render_screen(state.screen)
    assert text.splitlines() == [
        "== Tasks ==",
        "CURRENT TASKS",
        "  (empty)",
        "COMPLETED TASKS",
        "  (empty)",
    ]


def test_status_reports_counts(state) -> None:
    registry.handle(state, "/add a")
    registry.handle(state, "/add b")
    registry.handle(state, "/done 1")
    out = registry.handle(state, "/status") or ""
    assert "Open list: Tasks" in out
    assert "Current: 1, completed: 1" in out


def test_done_puts_latest_task_on_top_of_completed(state) -> None:
    registry.handle(state, "/add A")
    registry.handle(state, "/add B")
    registry.handle(state, "/done 1")
    out = registry.handle(state, "/done 1") or ""

    completed = out.split("COMPLETED TASKS\n", 1)[1].splitlines()
    assert completed == ["  1. B", "  2. A"]

    registry.handle(state, "/undone 1")
    assert [t.title for t in state.store.list_tasks(state.screen.task_list, is_complete=False)] == ["B"]
