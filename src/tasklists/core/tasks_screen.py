# src/tasklists/core/tasks_screen.py

"""
Screen controller for a single task list.

It is UI-agnostic: renderers ask it for sections and rows, forward user
intents addressed by (section, row), and apply the returned RowChange to
their own widgets. Storage always goes through the TaskRepo.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum

from ..tasks.task_models import Section, Task, TaskList
from ..tasks.task_projection import ViewProjection
from .ports import TaskRepo

logger = logging.getLogger(__name__)

SECTION_TITLES = {
    Section.CURRENT: "CURRENT TASKS",
    Section.COMPLETED: "COMPLETED TASKS",
}


class RowAction(StrEnum):
    INSERT = "insert"
    RELOAD = "reload"
    DELETE = "delete"
    MOVE = "move"


@dataclass(frozen=True, slots=True)
class RowChange:
    action: RowAction
    section: Section
    row: int
    to_section: Section | None = None
    to_row: int | None = None


class TasksScreen:
    """
    Rows are shown in display order, which starts out as creation order.
    A task marked done or undone goes to row 0 of its new section, new tasks
    are appended to CURRENT TASKS, and tasks changed elsewhere are appended
    to the section they now belong to. Stored order never changes.
    """

    def __init__(self, store: TaskRepo, task_list: TaskList) -> None:
        self._store = store
        self._task_list = task_list
        self._projection = ViewProjection(store, task_list)
        self._order: dict[Section, list[int]] = {section: [] for section in Section}

    @property
    def task_list(self) -> TaskList:
        return self._task_list

    @property
    def title(self) -> str:
        return self._task_list.title

    @property
    def projection(self) -> ViewProjection:
        return self._projection

    def close(self) -> None:
        self._projection.close()

    # ---- data source ----

    @staticmethod
    def number_of_sections() -> int:
        return len(Section)

    def rows(self, section: Section) -> list[Task]:
        return self._resolve()[section]

    def number_of_rows(self, section: Section) -> int:
        return len(self.rows(section))

    @staticmethod
    def section_title(section: Section) -> str:
        return SECTION_TITLES[section]

    def row(self, section: Section, row: int) -> Task:
        tasks = self.rows(section)
        if row < 0 or row >= len(tasks):
            raise IndexError(f"row {row} out of range for section {section.name} ({len(tasks)} rows)")
        return tasks[row]

    def _resolve(self) -> dict[Section, list[Task]]:
        incomplete, complete = self._projection.snapshot()
        resolved: dict[Section, list[Task]] = {}
        for section, tasks in ((Section.CURRENT, incomplete), (Section.COMPLETED, complete)):
            by_id = {t.id: t for t in tasks}
            order = [task_id for task_id in self._order[section] if task_id in by_id]
            shown = set(order)
            order.extend(t.id for t in tasks if t.id not in shown)
            self._order[section] = order
            resolved[section] = [by_id[task_id] for task_id in order]
        return resolved

    # ---- labels ----

    @staticmethod
    def action_title(section: Section) -> str:
        return "Undone" if section is Section.COMPLETED else "Done"

    @staticmethod
    def form_title(editing: bool) -> str:
        return "Edit Task" if editing else "New Task"

    @staticmethod
    def form_action(editing: bool) -> str:
        return "Update Task" if editing else "Save Task"

    # ---- intents ----

    def add(self, title: str, note: str = "") -> RowChange:
        self._resolve()
        task = self._store.create(self._task_list, title, note)
        self._order[Section.CURRENT].append(task.id)
        row = [t.id for t in self.rows(Section.CURRENT)].index(task.id)
        logger.debug("Inserted task id=%s at row %s", task.id, row)
        return RowChange(RowAction.INSERT, Section.CURRENT, row)

    def edit_at(self, section: Section, row: int, title: str, note: str = "") -> RowChange:
        task = self.row(section, row)
        self._store.update(task, title, note)
        return RowChange(RowAction.RELOAD, section, row)

    def delete_at(self, section: Section, row: int) -> RowChange:
        task = self.row(section, row)
        self._store.delete(task)
        self._order[section].remove(task.id)
        return RowChange(RowAction.DELETE, section, row)

    def toggle_at(self, section: Section, row: int) -> RowChange:
        """
        Mark the task done (or undone) and move its row to the top of the other
        section. Only the display order changes; the stored order is untouched.
        """
        task = self.row(section, row)
        self._store.toggle_complete(task)
        self._order[section].remove(task.id)
        self._order[section.other()].insert(0, task.id)
        return RowChange(RowAction.MOVE, section, row, to_section=section.other(), to_row=0)
