"""Tests for points/positions.py: dense ordering."""

from points.models import Task
from points.positions import append_position, densify, reorder, sort_key


def _tasks(n):
    return [Task(title=f"t{i}", position=i) for i in range(n)]


def test_append_position_is_collection_size():
    assert append_position([]) == 0
    assert append_position(_tasks(3)) == 3


def test_reorder_last_to_first():
    items = _tasks(4)
    last = items[3]
    result = reorder(items, 3, 0)
    assert result[0] is last
    assert [t.position for t in result] == [0, 1, 2, 3]
    assert last.position == 0
    assert [t.title for t in result] == ["t3", "t0", "t1", "t2"]


def test_reorder_forward_move():
    result = reorder(_tasks(4), 0, 2)
    assert [t.title for t in result] == ["t1", "t2", "t0", "t3"]


def test_reorder_positions_always_dense():
    for src in range(5):
        for dst in range(5):
            result = reorder(_tasks(5), src, dst)
            assert sorted(t.position for t in result) == [0, 1, 2, 3, 4]


def test_reorder_out_of_range_from_is_noop():
    result = reorder(_tasks(3), 7, 0)
    assert [t.title for t in result] == ["t0", "t1", "t2"]


def test_reorder_clamps_destination():
    result = reorder(_tasks(3), 0, 99)
    assert [t.title for t in result] == ["t1", "t2", "t0"]
    result = reorder(_tasks(3), 2, -5)
    assert [t.title for t in result] == ["t2", "t0", "t1"]


def test_reorder_empty_list():
    assert reorder([], 0, 0) == []


def test_densify_closes_gaps():
    items = [Task(position=0), Task(position=4), Task(position=9)]
    densify(items)
    assert [t.position for t in items] == [0, 1, 2]


def test_sort_key_critical_first():
    a = Task(title="a", position=0)
    b = Task(title="b", position=1, critical=True)
    c = Task(title="c", position=2)
    assert [t.title for t in sorted([a, b, c], key=sort_key)] == ["b", "a", "c"]
