# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TASKLISTS_APP_NAME": "App display name (default: tasklists).",
    "TASKLISTS_LOG_LEVEL": "Console logging level (default: INFO).",
    # Connectors
    "TASKLISTS_CONSOLE_ENABLED": "Run the console REPL (true/false, default: true).",
    # Paths (gitignored)
    "TASKLISTS_DATA_DIR": "Local data directory, also holds tasklists.log (default: .local/tasklists).",
    "TASKLISTS_DB_PATH": "TaskStore SQLite path (default: <data_dir>/tasks.sqlite3).",
    # Lists
    "TASKLISTS_DEFAULT_LIST": "Title of the list opened at startup (default: Tasks).",
}
