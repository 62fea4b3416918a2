# src/todolist/__init__.py

"""Local to-do list: SQLite task store, live snapshot feed, coordinator and console."""

__version__ = "0.1.0"
