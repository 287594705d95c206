"""Dense zero-based ordering of tasks within a day or the template collection."""

from __future__ import annotations

from typing import Sequence

from points.models import Task


def sort_key(task: Task) -> tuple[bool, int]:
    """Critical tasks first, then by position."""
    return (not task.critical, task.position)


def append_position(collection: Sequence[Task]) -> int:
    """Position for a new item: the collection's size before insertion."""
    return len(collection)


def densify(items: Sequence[Task]) -> list[Task]:
    """Re-assign positions 0..N-1 in the given order."""
    result = list(items)
    for i, task in enumerate(result):
        task.position = i
    return result


def reorder(items: Sequence[Task], from_index: int, to_index: int) -> list[Task]:
    """Move the item at *from_index* to *to_index* and re-densify.

    Indices refer to the visible order of *items*, not stored positions.
    An out-of-range *from_index* moves nothing; *to_index* is clamped.
    Positions are re-assigned in every case.
    """
    result = list(items)
    if 0 <= from_index < len(result):
        moved = result.pop(from_index)
        to_index = min(max(0, to_index), len(result))
        result.insert(to_index, moved)
    return densify(result)
