# src/tasklists/tasks/task_store.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
import threading
import time
from collections.abc import Callable, Iterator
from pathlib import Path

from .task_errors import NotFoundError, StorageError, ValidationError
from .task_models import ChangeKind, StoreChange, Task, TaskList

logger = logging.getLogger(__name__)

StoreListener = Callable[[StoreChange], None]


def _task_id(task: Task | int) -> int:
    return int(task.id if isinstance(task, Task) else task)


def _list_id(task_list: TaskList | int) -> int:
    return int(task_list.id if isinstance(task_list, TaskList) else task_list)


def _clean_title(title: str | None, what: str) -> str:
    cleaned = (title or "").strip()
    if not cleaned:
        raise ValidationError(f"{what} title is required")
    return cleaned


class TaskStore:
    """
    SQLite store for task lists and their tasks.

    Every mutation runs in a single transaction (all-or-nothing) and is
    serialized by a re-entrant writer lock, so readers never observe a
    half-applied change. Subscribers are notified after the commit.

    Schema handling follows the usual pattern:
    - create tables if missing
    - use PRAGMA table_info to detect missing columns
    - add columns with ALTER TABLE only when needed

    Each method opens its own short-lived SQLite connection.
    """

    def __init__(self, db_path: str | Path = "tasks.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.RLock()
        self._listeners: list[StoreListener] = []
        self._ensure_schema()
        try:
            total = self.count_tasks()
        except StorageError:
            total = -1
        logger.info("TaskStore ready db=%s total=%s", self._db_path, total)

    @property
    def db_path(self) -> Path:
        return self._db_path

    def close(self) -> None:
        """Drop subscribers. There are no persistent connections to close."""
        with self._lock:
            self._listeners.clear()

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        try:
            self._configure_conn(conn)
        except sqlite3.Error:
            conn.close()
            raise
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")
        # Needed on every connection for ON DELETE CASCADE.
        conn.execute("PRAGMA foreign_keys=ON")

    def _open(self) -> sqlite3.Connection:
        try:
            return self._get_conn()
        except sqlite3.Error as e:
            raise StorageError(f"Cannot open task database {self._db_path}") from e

    @contextlib.contextmanager
    def _transaction(self) -> Iterator[sqlite3.Cursor]:
        with self._lock:
            conn = self._open()
            try:
                cur = conn.cursor()
                cur.execute("BEGIN IMMEDIATE")
                yield cur
                conn.commit()
            except sqlite3.Error as e:
                with contextlib.suppress(sqlite3.Error):
                    conn.rollback()
                logger.error("TaskStore transaction failed db=%s: %s", self._db_path, e)
                raise StorageError(f"Task database write failed: {e}") from e
            except BaseException:
                with contextlib.suppress(sqlite3.Error):
                    conn.rollback()
                raise
            finally:
                conn.close()

    @contextlib.contextmanager
    def _reading(self) -> Iterator[sqlite3.Cursor]:
        with self._lock:
            conn = self._open()
            try:
                yield conn.cursor()
            except sqlite3.Error as e:
                raise StorageError(f"Task database read failed: {e}") from e
            finally:
                conn.close()

    def _ensure_schema(self) -> None:
        with self._transaction() as cur:
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS task_lists (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    title TEXT NOT NULL,
                    created_at REAL NOT NULL
                )
                """
            )
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    list_id INTEGER NOT NULL
                        REFERENCES task_lists(id) ON DELETE CASCADE,
                    position INTEGER NOT NULL DEFAULT 0,
                    title TEXT NOT NULL,
                    note TEXT NOT NULL DEFAULT '',
                    is_complete INTEGER NOT NULL DEFAULT 0,
                    created_at REAL NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )

            # Migrations (safe): add missing columns.
            cur.execute("PRAGMA table_info(tasks)")
            cols = {row["name"] for row in cur.fetchall()}

            def add_col(name: str, decl: str) -> None:
                if name in cols:
                    return
                cur.execute(f"ALTER TABLE tasks ADD COLUMN {name} {decl}")
                logger.info("TaskStore migration: added column %s", name)

            add_col("position", "INTEGER NOT NULL DEFAULT 0")
            add_col("note", "TEXT NOT NULL DEFAULT ''")
            add_col("is_complete", "INTEGER NOT NULL DEFAULT 0")
            add_col("updated_at", "REAL NOT NULL DEFAULT 0")

            cur.execute(
                "CREATE INDEX IF NOT EXISTS idx_tasks_list_position ON tasks(list_id, position)"
            )

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        return Task(
            id=int(row["id"]),
            list_id=int(row["list_id"]),
            position=int(row["position"] or 0),
            title=str(row["title"] or ""),
            note=str(row["note"] or ""),
            is_complete=bool(row["is_complete"]),
            created_at=float(row["created_at"] or 0.0),
            updated_at=float(row["updated_at"] or 0.0),
        )

    @staticmethod
    def _row_to_list(row: sqlite3.Row) -> TaskList:
        return TaskList(
            id=int(row["id"]),
            title=str(row["title"] or ""),
            created_at=float(row["created_at"] or 0.0),
        )

    def _fetch_task(self, cur: sqlite3.Cursor, task_id: int) -> Task:
        cur.execute("SELECT * FROM tasks WHERE id = ?", (task_id,))
        row = cur.fetchone()
        if row is None:
            raise NotFoundError(f"Task {task_id} not found")
        return self._row_to_task(row)

    def _fetch_list(self, cur: sqlite3.Cursor, list_id: int) -> TaskList:
        cur.execute("SELECT * FROM task_lists WHERE id = ?", (list_id,))
        row = cur.fetchone()
        if row is None:
            raise NotFoundError(f"Task list {list_id} not found")
        return self._row_to_list(row)

    # ---- subscriptions ----

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """
        Register `listener` for committed changes.
        Returns a callable that removes the subscription.
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock, contextlib.suppress(ValueError):
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, change: StoreChange) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(change)
            except Exception:
                logger.exception("TaskStore listener failed kind=%s", change.kind)

    # ---- task lists ----

    def create_list(self, title: str) -> TaskList:
        cleaned = _clean_title(title, "Task list")
        now = time.time()
        with self._transaction() as cur:
            cur.execute(
                "INSERT INTO task_lists(title, created_at) VALUES (?, ?)",
                (cleaned, now),
            )
            rowid = cur.lastrowid
            if rowid is None:
                raise StorageError("SQLite did not return lastrowid for task_lists insert")
            task_list = self._fetch_list(cur, int(rowid))
        logger.debug("Task list created id=%s title=%r", task_list.id, task_list.title)
        self._notify(StoreChange(ChangeKind.LIST_CREATED, task_list.id))
        return task_list

    def get_list(self, task_list: TaskList | int) -> TaskList:
        with self._reading() as cur:
            return self._fetch_list(cur, _list_id(task_list))

    def find_list(self, title: str) -> TaskList | None:
        """Oldest list whose title matches (case-insensitive), or None."""
        cleaned = (title or "").strip()
        if not cleaned:
            return None
        with self._reading() as cur:
            cur.execute(
                "SELECT * FROM task_lists WHERE title = ? COLLATE NOCASE ORDER BY id ASC LIMIT 1",
                (cleaned,),
            )
            row = cur.fetchone()
            return self._row_to_list(row) if row else None

    def list_lists(self) -> list[TaskList]:
        with self._reading() as cur:
            cur.execute("SELECT * FROM task_lists ORDER BY created_at ASC, id ASC")
            return [self._row_to_list(r) for r in cur.fetchall()]

    def delete_list(self, task_list: TaskList | int) -> None:
        """Delete a list together with all of its tasks."""
        list_id = _list_id(task_list)
        with self._transaction() as cur:
            self._fetch_list(cur, list_id)
            cur.execute("DELETE FROM task_lists WHERE id = ?", (list_id,))
        logger.debug("Task list deleted id=%s", list_id)
        self._notify(StoreChange(ChangeKind.LIST_DELETED, list_id))

    # ---- tasks: reads ----

    def get_task(self, task: Task | int) -> Task:
        with self._reading() as cur:
            return self._fetch_task(cur, _task_id(task))

    def list_tasks(
        self, task_list: TaskList | int, *, is_complete: bool | None = None
    ) -> list[Task]:
        """Tasks of one list in creation order, optionally filtered by completion."""
        list_id = _list_id(task_list)
        sql = "SELECT * FROM tasks WHERE list_id = ?"
        params: list[object] = [list_id]
        if is_complete is not None:
            sql += " AND is_complete = ?"
            params.append(1 if is_complete else 0)
        sql += " ORDER BY position ASC, id ASC"

        with self._reading() as cur:
            cur.execute(sql, params)
            return [self._row_to_task(r) for r in cur.fetchall()]

    def count_tasks(self, task_list: TaskList | int | None = None) -> int:
        with self._reading() as cur:
            if task_list is None:
                cur.execute("SELECT COUNT(*) FROM tasks")
            else:
                cur.execute("SELECT COUNT(*) FROM tasks WHERE list_id = ?", (_list_id(task_list),))
            (n,) = cur.fetchone()
            return int(n)

    # ---- tasks: mutations ----

    def create(self, task_list: TaskList | int, title: str, note: str = "") -> Task:
        """Append a new, incomplete task to `task_list`."""
        cleaned = _clean_title(title, "Task")
        list_id = _list_id(task_list)
        now = time.time()

        with self._transaction() as cur:
            self._fetch_list(cur, list_id)
            cur.execute(
                "SELECT COALESCE(MAX(position), -1) + 1 FROM tasks WHERE list_id = ?",
                (list_id,),
            )
            (position,) = cur.fetchone()
            cur.execute(
                """
                INSERT INTO tasks(list_id, position, title, note, is_complete, created_at, updated_at)
                VALUES (?, ?, ?, ?, 0, ?, ?)
                """,
                (list_id, int(position), cleaned, (note or "").strip(), now, now),
            )
            rowid = cur.lastrowid
            if rowid is None:
                raise StorageError("SQLite did not return lastrowid for tasks insert")
            task = self._fetch_task(cur, int(rowid))

        logger.debug("Task created id=%s list_id=%s position=%s", task.id, list_id, task.position)
        self._notify(StoreChange(ChangeKind.TASK_CREATED, list_id, task.id))
        return task

    def update(self, task: Task | int, title: str, note: str = "") -> Task:
        """
        Replace title and note of an existing task. Completion is untouched.

        When a Task instance is passed it is refreshed in place and returned.
        """
        cleaned = _clean_title(title, "Task")
        task_id = _task_id(task)

        with self._transaction() as cur:
            cur.execute(
                "UPDATE tasks SET title = ?, note = ?, updated_at = ? WHERE id = ?",
                (cleaned, (note or "").strip(), time.time(), task_id),
            )
            if cur.rowcount != 1:
                raise NotFoundError(f"Task {task_id} not found")
            updated = self._fetch_task(cur, task_id)

        logger.debug("Task updated id=%s", task_id)
        self._notify(StoreChange(ChangeKind.TASK_UPDATED, updated.list_id, task_id))
        return self._apply(task, updated)

    def delete(self, task: Task | int) -> None:
        """Remove a task permanently. Deleting it again raises NotFoundError."""
        task_id = _task_id(task)
        with self._transaction() as cur:
            existing = self._fetch_task(cur, task_id)
            cur.execute("DELETE FROM tasks WHERE id = ?", (task_id,))

        logger.debug("Task deleted id=%s list_id=%s", task_id, existing.list_id)
        self._notify(StoreChange(ChangeKind.TASK_DELETED, existing.list_id, task_id))

    def toggle_complete(self, task: Task | int) -> Task:
        """Flip `is_complete`; the only operation that changes section membership."""
        task_id = _task_id(task)
        with self._transaction() as cur:
            cur.execute(
                """
                UPDATE tasks
                SET is_complete = CASE is_complete WHEN 0 THEN 1 ELSE 0 END,
                    updated_at = ?
                WHERE id = ?
                """,
                (time.time(), task_id),
            )
            if cur.rowcount != 1:
                raise NotFoundError(f"Task {task_id} not found")
            toggled = self._fetch_task(cur, task_id)

        logger.debug("Task toggled id=%s is_complete=%s", task_id, toggled.is_complete)
        self._notify(StoreChange(ChangeKind.TASK_TOGGLED, toggled.list_id, task_id))
        return self._apply(task, toggled)

    @staticmethod
    def _apply(task: Task | int, fresh: Task) -> Task:
        if isinstance(task, Task):
            task.refresh_from(fresh)
            return task
        return fresh
