"""Templates: reusable task definitions and their dated instances.

A template has no day. Materializing copies it onto a day with a
``source_id`` back-reference; neither side's lifecycle depends on the other.
"""

from __future__ import annotations

import logging

from points.aggregate import recompute
from points.models import Day, Settings, Task
from points.positions import append_position, densify, sort_key
from points.store import EntityStore
from points.tasks import list_templates

logger = logging.getLogger(__name__)


def template_exists(store: EntityStore, title: str) -> bool:
    """Advisory check: is there already a template with this title?"""
    wanted = title.strip()
    return any(t.title.strip() == wanted for t in list_templates(store))


def copy_as_template(store: EntityStore, task: Task) -> tuple[Task | None, list[str]]:
    """Save a copy of *task* as a template. Returns (template, errors).

    A template with the same title is reported as a duplicate and nothing is
    created.
    """
    if template_exists(store, task.title):
        logger.info("template_duplicate title=%s", task.title)
        return None, [f"Template already exists: {task.title}"]

    template = Task(
        title=task.title,
        points=task.points,
        target=task.target,
        max=task.max,
        completed=0,
        reward=task.reward,
        bonus=task.bonus,
        scalar=task.scalar,
        routine=task.routine,
        optional=task.optional,
        critical=task.critical,
        template=True,
        position=append_position(list_templates(store)),
        day=None,
    )
    template.clamp()
    store.add_task(template)
    store.save()
    logger.info("template_created id=%s from=%s", template.id, task.id)
    return template, []


def materialize(store: EntityStore, template: Task, day: Day, settings: Settings) -> Task:
    """Create a fresh instance of *template* on *day*; the template is untouched."""
    instance = Task(
        title=template.title,
        points=template.points,
        target=template.target,
        max=template.max,
        completed=0,
        reward=template.reward,
        bonus=template.bonus,
        scalar=template.scalar,
        routine=template.routine,
        optional=template.optional,
        critical=template.critical,
        template=False,
        position=template.position,
        day=day.key,
        source_id=template.id,
    )
    instance.clamp()
    store.add_task(instance)
    recompute(store, day, settings)
    return instance


def apply_templates(
    store: EntityStore,
    day: Day,
    settings: Settings,
    routines_only: bool | None = None,
) -> list[Task]:
    """Materialize every template not yet on *day*. Returns the new instances.

    Each instance is saved on its own, so a storage failure part way leaves
    the earlier ones in place and a retry only adds what is missing.
    """
    applied = {t.source_id for t in store.fetch_tasks(lambda t: t.day == day.key and t.source_id)}
    created = []
    for template in list_templates(store, routines_only):
        if template.id in applied:
            continue
        created.append(materialize(store, template, day, settings))

    if created:
        new_ids = {t.id for t in created}
        ordered = sorted(
            store.fetch_tasks(lambda t: t.day == day.key and not t.template),
            key=lambda t: (t.id in new_ids, sort_key(t)),
        )
        densify(ordered)
        recompute(store, day, settings)
        logger.info("templates_applied day=%s count=%s", day.key, len(created))
    return created
