"""Tests for points/aggregate.py: totals, progress, bonuses, recompute."""

import random
from decimal import Decimal

import pytest

from points.aggregate import (
    earned_points,
    is_day_complete,
    progress,
    progress_ratio,
    recompute,
    streak_bonus,
    summarize,
    task_bonus,
    total_points,
)
from points.errors import StorageFailure
from points.dates import resolve_day
from points.models import Settings, Task
from points.store import EntityStore


def test_total_points_two_tasks():
    tasks = [
        Task(points=Decimal("2"), target=1, max=5, completed=3),
        Task(points=Decimal("5"), target=1, max=5, completed=1),
    ]
    assert total_points(tasks) == 11


def test_total_points_truncates_decimal_points():
    tasks = [Task(points=Decimal("1.9"), target=1, max=5, completed=3)]
    assert total_points(tasks) == 3


def test_total_points_empty():
    assert total_points([]) == 0


def test_total_points_order_independent():
    tasks = [Task(points=Decimal(p), target=1, max=9, completed=c) for p, c in [(1, 2), (3, 4), (7, 1), (2, 9)]]
    expected = total_points(tasks)
    shuffled = list(tasks)
    random.Random(42).shuffle(shuffled)
    assert total_points(shuffled) == expected
    assert total_points(reversed(tasks)) == expected


def test_progress_ratio_per_day():
    assert progress_ratio(3, 6, task_count=4) == 0.5
    assert progress_ratio(20, 6, task_count=4) == 1.0


def test_progress_ratio_per_task():
    assert progress_ratio(10, 5, task_count=4, mode="per_task") == 0.5


def test_progress_ratio_no_tasks_or_goal():
    assert progress_ratio(10, 5, task_count=0) == 0.0
    assert progress_ratio(10, 0, task_count=3) == 0.0


def test_is_day_complete_ignores_optional():
    tasks = [
        Task(target=2, max=3, completed=2),
        Task(target=1, max=1, completed=0, optional=True),
    ]
    assert is_day_complete(tasks) is True
    tasks[0].completed = 1
    assert is_day_complete(tasks) is False
    assert is_day_complete([]) is False


def test_streak_bonus():
    assert streak_bonus(1) == Decimal("0")
    assert streak_bonus(3) == Decimal("0.2")
    assert streak_bonus(50) == Decimal("1.0")


def test_task_bonus_routine_only():
    one_off = Task(target=1, max=3, completed=3)
    assert task_bonus(one_off, consecutive_days=5) == Decimal("0")

    routine = Task(target=2, max=4, completed=3, routine=True)
    # streak 0.1 + target met 0.2 + half of the extra range 0.05
    assert task_bonus(routine, consecutive_days=2) == Decimal("0.35")


def test_earned_points_one_off_all_or_nothing():
    task = Task(points=Decimal("4"), target=2, max=2, completed=1, reward=Decimal("1"))
    assert earned_points(task) == Decimal("1")
    task.completed = 2
    assert earned_points(task) == Decimal("5")


def test_earned_points_routine_pro_rata():
    task = Task(points=Decimal("4"), target=2, max=4, completed=1, routine=True)
    assert earned_points(task) == Decimal("2")
    task.completed = 4
    assert earned_points(task, Decimal("0.5")) == Decimal("12")


def _add(store, day, points, completed, **kw):
    task = Task(points=Decimal(points), target=1, max=10, completed=completed, day=day.key, **kw)
    return store.add_task(task)


def test_recompute_writes_cached_points(store, settings, day, backend):
    _add(store, day, 2, 3)
    _add(store, day, 5, 1)
    summary = recompute(store, day, settings)
    assert summary.points == 11
    assert day.cached_points == Decimal("11")
    assert backend.data["days"][0]["points"] == "11"


def test_recompute_ignores_templates_and_other_days(store, settings, day):
    _add(store, day, 2, 3)
    store.add_task(Task(points=Decimal("9"), target=1, max=9, completed=9, day=None))
    other = resolve_day(store, "2026-02-12", settings)
    _add(store, other, 4, 4)
    assert recompute(store, day, settings).points == 6


def test_recompute_failure_surfaces(failing_backend, settings):
    store = EntityStore(failing_backend)
    day = resolve_day(store, "2026-02-11", settings)
    _add(store, day, 2, 2)
    failing_backend.fail = True
    with pytest.raises(StorageFailure):
        recompute(store, day, settings)


def test_summarize_does_not_write(store, settings, day, backend):
    _add(store, day, 3, 1)
    saves = backend.saves
    summary = summarize(store, day, settings)
    assert summary.points == 3
    assert summary.task_count == 1
    assert backend.saves == saves
    assert day.cached_points == Decimal("0")


def test_progress_per_day_convention(store, day):
    s = Settings(progress_mode="per_day")
    day.target = 10
    _add(store, day, 2, 2)
    _add(store, day, 1, 1)
    assert progress(store, day, s) == 0.5


def test_progress_per_task_convention(store, day):
    s = Settings(progress_mode="per_task")
    day.target = 5
    _add(store, day, 2, 2)
    _add(store, day, 1, 1)
    assert progress(store, day, s) == 0.5


def test_progress_zero_without_tasks(store, settings, day):
    assert progress(store, day, settings) == 0.0


def test_progress_capped_at_one(store, settings, day):
    day.target = 1
    _add(store, day, 5, 5)
    assert progress(store, day, settings) == 1.0
