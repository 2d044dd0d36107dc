# tests/test_concurrency.py

from __future__ import annotations

import threading

from tasklists.tasks.task_projection import ViewProjection
from tasklists.tasks.task_store import TaskStore

WRITERS = 4
TASKS_PER_WRITER = 12


def test_mutations_look_atomic_to_projection_readers(store: TaskStore, task_list) -> None:
    projection = ViewProjection(store, task_list)
    start = threading.Barrier(WRITERS + 1)
    writers_done = threading.Event()
    problems: list[str] = []
    reads = {"n": 0}

    def writer(n: int) -> None:
        start.wait()
        for i in range(TASKS_PER_WRITER):
            task = store.create(task_list, f"w{n}-{i}")
            if i % 2 == 0:
                store.toggle_complete(task)

    def reader() -> None:
        start.wait()
        last_total = 0
        while True:
            finished = writers_done.is_set()
            incomplete, complete = projection.snapshot()
            reads["n"] += 1
            ids_in = [t.id for t in incomplete]
            ids_done = [t.id for t in complete]
            if any(t.is_complete for t in incomplete) or not all(t.is_complete for t in complete):
                problems.append("task shown in the wrong view")
            if set(ids_in) & set(ids_done):
                problems.append("task shown in both views")
            if len(set(ids_in + ids_done)) != len(ids_in) + len(ids_done):
                problems.append("duplicate task in a view")
            total = len(ids_in) + len(ids_done)
            if total < last_total:
                problems.append(f"task count went back from {last_total} to {total}")
            last_total = total
            if finished:
                return

    threads = [threading.Thread(target=writer, args=(n,)) for n in range(WRITERS)]
    read_thread = threading.Thread(target=reader)
    read_thread.start()
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=60)
    writers_done.set()
    read_thread.join(timeout=60)

    assert not read_thread.is_alive()
    assert problems == []
    assert reads["n"] >= 1

    total = WRITERS * TASKS_PER_WRITER
    incomplete, complete = projection.snapshot()
    assert len(incomplete) + len(complete) == total
    assert len(complete) == WRITERS * (TASKS_PER_WRITER // 2)
    assert store.count_tasks(task_list) == total
    projection.close()
