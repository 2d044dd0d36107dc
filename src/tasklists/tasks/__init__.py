# src/tasklists/tasks/__init__.py

from .task_errors import NotFoundError, StorageError, TaskStoreError, ValidationError
from .task_models import ChangeKind, Section, StoreChange, Task, TaskList
from .task_projection import ViewProjection
from .task_store import TaskStore

__all__ = [
    "ChangeKind",
    "NotFoundError",
    "Section",
    "StorageError",
    "StoreChange",
    "Task",
    "TaskList",
    "TaskStore",
    "TaskStoreError",
    "ValidationError",
    "ViewProjection",
]
