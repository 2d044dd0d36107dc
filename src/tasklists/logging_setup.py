# src/tasklists/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path


class _ConsoleNoiseFilter(logging.Filter):
    """
    Console filter for the REPL, which re-renders the open list after every
    command. tasklists.tasks.* (store and projections) logs each commit and each
    recomputation, which would interleave with that output, so on the console it
    only shows WARNING+. The file handler still gets all of it.
    Anything outside tasklists shows ERROR+ only.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name

        if name.startswith("tasklists.tasks."):
            return record.levelno >= logging.WARNING
        if name.startswith("tasklists."):
            return True
        # py.warnings and third-party loggers
        return record.levelno >= logging.ERROR


LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    *,
    log_dir: str | Path = ".local/tasklists",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Send filtered logs to stderr and everything to <log_dir>/tasklists.log.

    Replaces any handlers already on the root logger. Returns the log file path.
    """
    log_file = Path(log_dir) / "tasklists.log"
    log_file.parent.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.addFilter(_ConsoleNoiseFilter())

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(file_level)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)
    for h in (console, file_handler):
        h.setFormatter(formatter)
        root.addHandler(h)

    logging.captureWarnings(True)
    return log_file
