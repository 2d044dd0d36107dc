# src/tasklists/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then runs the console REPL.
"""

from __future__ import annotations

import logging

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..logging_setup import setup_logging
from ..tasks.task_errors import StorageError

logger = logging.getLogger(__name__)


def _shutdown(state) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    try:
        if state.screen is not None:
            state.screen.close()
    except Exception:
        logger.debug("Screen close failed.", exc_info=True)

    # TaskStore uses short-lived sqlite connections per call.
    try:
        state.store.close()
    except Exception:
        logger.debug("Store close failed.", exc_info=True)


def main() -> int:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    log_dir = getattr(settings, "data_dir", ".local/tasklists")
    setup_logging(log_dir=log_dir, console_level=console_level)

    logger.info("Starting %s...", getattr(settings, "app_name", "tasklists"))

    try:
        state = create_initial_state(settings=settings)
    except StorageError:
        logger.exception("Cannot open the task database at %s.", settings.db_path)
        return 1

    try:
        if settings.console_enabled:
            run_console_loop(state)
        else:
            logger.info("Console disabled; nothing to run.")
    finally:
        _shutdown(state)
        logger.info("Bye.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
