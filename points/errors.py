"""Exception types for the Points engine.

All engine errors inherit from PointsError so callers can catch the whole
family while still telling storage problems apart from lookups.
"""

from __future__ import annotations


class PointsError(Exception):
    """Base exception for all Points engine errors."""


class StorageFailure(PointsError):
    """A read or write against the entity store backend failed.

    The pending in-memory changes were not persisted; nothing is retried.
    """


class TaskNotFound(PointsError):
    """No task with the requested id exists in the store."""
