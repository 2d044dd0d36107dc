# src/tasklists/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum, StrEnum


class Section(IntEnum):
    """Table section a task is shown in. Membership is exactly `Task.is_complete`."""

    CURRENT = 0
    COMPLETED = 1

    def other(self) -> Section:
        return Section.CURRENT if self is Section.COMPLETED else Section.COMPLETED


class ChangeKind(StrEnum):
    TASK_CREATED = "task_created"
    TASK_UPDATED = "task_updated"
    TASK_DELETED = "task_deleted"
    TASK_TOGGLED = "task_toggled"
    LIST_CREATED = "list_created"
    LIST_DELETED = "list_deleted"


@dataclass(slots=True)
class TaskList:
    id: int
    title: str
    created_at: float


@dataclass(slots=True)
class Task:
    id: int
    list_id: int
    position: int
    title: str
    note: str
    is_complete: bool
    created_at: float
    updated_at: float

    def refresh_from(self, other: Task) -> None:
        """Copy persisted field values from `other` into this instance."""
        self.list_id = other.list_id
        self.position = other.position
        self.title = other.title
        self.note = other.note
        self.is_complete = other.is_complete
        self.created_at = other.created_at
        self.updated_at = other.updated_at


@dataclass(frozen=True, slots=True)
class StoreChange:
    """Committed mutation, delivered to store subscribers."""

    kind: ChangeKind
    list_id: int
    task_id: int | None = None
