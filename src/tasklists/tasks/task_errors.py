# src/tasklists/tasks/task_errors.py

from __future__ import annotations


class TaskStoreError(Exception):
    """Base class for everything TaskStore raises."""


class ValidationError(TaskStoreError, ValueError):
    """Invalid input (e.g. empty title). The store is left unchanged."""


class NotFoundError(TaskStoreError, LookupError):
    """The referenced task or list no longer exists."""


class StorageError(TaskStoreError):
    """The database is unavailable or corrupted. Prior committed state is intact."""
