# src/tasklists/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the views and the screen controller.

They depend on Protocols instead of the concrete SQLite store.
This keeps storage swappable and makes testing easier.
"""

from collections.abc import Callable
from typing import Protocol

from ..tasks.task_models import StoreChange, Task, TaskList


class TaskRepo(Protocol):
    # Reads used by projections
    def list_tasks(
            self, task_list: TaskList | int, *, is_complete: bool | None = None
    ) -> list[Task]: ...

    # Live-view invalidation
    def subscribe(self, listener: Callable[[StoreChange], None]) -> Callable[[], None]: ...

    # Mutations (sole writer)
    def create(self, task_list: TaskList | int, title: str, note: str = "") -> Task: ...
    def update(self, task: Task | int, title: str, note: str = "") -> Task: ...
    def delete(self, task: Task | int) -> None: ...
    def toggle_complete(self, task: Task | int) -> Task: ...
