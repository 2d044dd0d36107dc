# src/tasklists/tasks/task_projection.py

from __future__ import annotations

import logging
import threading

from ..core.ports import TaskRepo
from .task_models import ChangeKind, Section, StoreChange, Task, TaskList

logger = logging.getLogger(__name__)


class ViewProjection:
    """
    Two live, disjoint views over one task list:

    - incomplete: tasks with is_complete == False
    - complete:   tasks with is_complete == True

    Both keep creation order. The projection subscribes to the store and
    marks itself stale on every committed change touching its list; the next
    read recomputes both views from a single snapshot, so together they always
    partition the list's current tasks.
    """

    def __init__(self, store: TaskRepo, task_list: TaskList | int) -> None:
        self._store = store
        self._list_id = int(task_list.id if isinstance(task_list, TaskList) else task_list)
        self._lock = threading.Lock()
        self._stale = True
        self._list_gone = False
        self._incomplete: list[Task] = []
        self._complete: list[Task] = []
        self._unsubscribe = store.subscribe(self._on_change)

    @property
    def list_id(self) -> int:
        return self._list_id

    @property
    def incomplete(self) -> list[Task]:
        self._ensure_fresh()
        return list(self._incomplete)

    @property
    def complete(self) -> list[Task]:
        self._ensure_fresh()
        return list(self._complete)

    def snapshot(self) -> tuple[list[Task], list[Task]]:
        """Both views taken from the same recomputation: (incomplete, complete)."""
        with self._lock:
            self._refresh_locked()
            return list(self._incomplete), list(self._complete)

    def section(self, section: Section) -> list[Task]:
        return self.complete if section is Section.COMPLETED else self.incomplete

    def counts(self) -> tuple[int, int]:
        self._ensure_fresh()
        return len(self._incomplete), len(self._complete)

    def task_at(self, section: Section, row: int) -> Task:
        tasks = self.section(section)
        if row < 0 or row >= len(tasks):
            raise IndexError(f"row {row} out of range for section {section.name} ({len(tasks)} rows)")
        return tasks[row]

    def index_of(self, task: Task | int) -> tuple[Section, int] | None:
        task_id = int(task.id if isinstance(task, Task) else task)
        self._ensure_fresh()
        for section, tasks in ((Section.CURRENT, self._incomplete), (Section.COMPLETED, self._complete)):
            for row, t in enumerate(tasks):
                if t.id == task_id:
                    return section, row
        return None

    def refresh(self) -> None:
        """Force recomputation on the next read."""
        with self._lock:
            self._stale = True

    def close(self) -> None:
        self._unsubscribe()

    # ---- internals ----

    def _on_change(self, change: StoreChange) -> None:
        if change.list_id != self._list_id:
            return
        with self._lock:
            self._stale = True
            if change.kind is ChangeKind.LIST_DELETED:
                self._list_gone = True

    def _ensure_fresh(self) -> None:
        with self._lock:
            self._refresh_locked()

    def _refresh_locked(self) -> None:
        if not self._stale:
            return
        if self._list_gone:
            tasks: list[Task] = []
        else:
            tasks = self._store.list_tasks(self._list_id)
        self._incomplete = [t for t in tasks if not t.is_complete]
        self._complete = [t for t in tasks if t.is_complete]
        self._stale = False
        logger.debug(
            "Projection recomputed list_id=%s incomplete=%d complete=%d",
            self._list_id,
            len(self._incomplete),
            len(self._complete),
        )
