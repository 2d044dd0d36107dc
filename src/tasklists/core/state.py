# src/tasklists/core/state.py

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from ..tasks.task_models import TaskList
from ..tasks.task_store import TaskStore
from .tasks_screen import TasksScreen

logger = logging.getLogger(__name__)


@dataclass
class AppState:
    # Settings object (tasklists.config.Settings or a test double).
    settings: Any
    store: TaskStore
    screen: TasksScreen | None = field(default=None)

    def open_list(self, task_list: TaskList) -> TasksScreen:
        """Switch the screen to `task_list`, releasing the previous projection."""
        if self.screen is not None:
            self.screen.close()
        self.screen = TasksScreen(self.store, task_list)
        logger.info("Opened list id=%s title=%r", task_list.id, task_list.title)
        return self.screen

    def ensure_default_list(self) -> TaskList:
        title = str(getattr(self.settings, "default_list_title", "Tasks"))
        existing = self.store.find_list(title)
        if existing is not None:
            return existing
        return self.store.create_list(title)
