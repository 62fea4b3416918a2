# src/todolist/errors.py

from __future__ import annotations


class TodoError(Exception):
    """Base class for todolist errors."""


class StorageFailure(TodoError):
    """
    The task database could not be used.

    Raised for an unavailable medium, disk/IO errors, a locked database
    or an unusable schema. The underlying sqlite3 error is chained as __cause__.
    """


class SubscriptionClosed(TodoError):
    """Read from a live task sequence after it was closed."""
