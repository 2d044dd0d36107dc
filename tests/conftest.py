# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from tasklists.cli.bootstrap import create_initial_state
from tasklists.core.state import AppState
from tasklists.tasks.task_models import TaskList
from tasklists.tasks.task_store import TaskStore


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="tasklists-test",
        log_level="DEBUG",
        console_enabled=True,
        data_dir=tmp_path / "data",
        db_path=tmp_path / "data" / "tasks.sqlite3",
        default_list_title="Tasks",
    )


@pytest.fixture()
def store(tmp_path: Path) -> TaskStore:
    return TaskStore(tmp_path / "tasks.sqlite3")


@pytest.fixture()
def task_list(store: TaskStore) -> TaskList:
    return store.create_list("Groceries")


@pytest.fixture()
def state(settings: SimpleNamespace) -> AppState:
    """
    AppState wired through the real composition root.

    NOTE: We keep the real SQLite store here because its correctness is
    part of what we want to test.
    """
    return create_initial_state(settings=settings)
