"""Calendar day resolution and first-run seeding for Points."""

from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal

from points.errors import StorageFailure
from points.models import Day, Settings, Task
from points.store import EntityStore
from points.workspace import get_timezone, today_str

logger = logging.getLogger(__name__)

# (title, points factor, target)
DEFAULT_TASKS = [
    ("Meditate", Decimal("1"), None),
    ("Shower", Decimal("0.8"), 1),
    ("Exercise", Decimal("1.5"), 1),
    ("Produce", Decimal("1.2"), 2),
    ("Study", Decimal("1.3"), 2),
]


def normalize_day(value: date | datetime | str, settings: Settings) -> str:
    """Reduce a date, datetime or ISO string to its ISO calendar day.

    Aware datetimes are converted to the configured time zone first, so two
    instants on the same local day normalize to the same key.
    """
    if isinstance(value, str):
        text = value.strip()
        try:
            value = date.fromisoformat(text)
        except ValueError:
            value = datetime.fromisoformat(text)
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(get_timezone(settings))
        return value.date().isoformat()
    return value.isoformat()


def resolve_day(store: EntityStore, value: date | datetime | str, settings: Settings) -> Day:
    """Return the single Day for a calendar day, creating it on first access."""
    key = normalize_day(value, settings)
    day = store.get_day(key)
    if day is not None:
        return day
    day = store.add_day(Day(key=key, target=settings.default_day_target, cached_points=Decimal("0")))
    try:
        store.save()
    except StorageFailure:
        store.discard_day(key)
        raise
    logger.info("day_created day=%s target=%s", key, day.target)
    return day


def today(store: EntityStore, settings: Settings) -> Day:
    return resolve_day(store, today_str(settings), settings)


def ensure_tasks_exist(store: EntityStore, day: Day, settings: Settings) -> list[Task]:
    """Seed a day that has no tasks with the default set. Returns new tasks."""
    if store.count_tasks(lambda t: t.day == day.key) > 0:
        return []
    created = []
    for position, (title, factor, target) in enumerate(DEFAULT_TASKS):
        task = Task(
            title=title,
            points=settings.default_task_points * factor,
            target=target or settings.default_task_target,
            max=settings.default_task_max,
            day=day.key,
            position=position,
        )
        task.clamp()
        created.append(store.add_task(task))
    store.save()
    logger.info("default_tasks_seeded day=%s count=%s", day.key, len(created))
    return created


def _ordinal_suffix(n: int) -> str:
    if n in (1, 21, 31):
        return "st"
    if n in (2, 22):
        return "nd"
    if n in (3, 23):
        return "rd"
    return "th"


def format_day(key: str | None) -> str:
    """Display form of an ISO day: '2025-04-01' -> 'April 1st, 2025'."""
    if not key:
        return "Unknown Date"
    d = date.fromisoformat(key)
    return f"{d.strftime('%B')} {d.day}{_ordinal_suffix(d.day)}, {d.year}"
