# src/tasklists/__init__.py

"""Two-section task lists (current / completed) on a local SQLite store."""

__version__ = "0.1.0"
