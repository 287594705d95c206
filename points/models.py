"""Typed dataclasses for the Points data model.

All models use from_dict/to_dict for YAML serialization.
camelCase on disk is mapped to snake_case in Python.
Unknown keys are ignored; missing keys use defaults.
Decimal values are stored as strings so no precision is lost.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, fields
from decimal import Decimal, InvalidOperation
from typing import Any


def _dec(value: Any, default: str = "0") -> Decimal:
    if value is None or value == "":
        return Decimal(default)
    result = Decimal(str(value))
    if not result.is_finite():
        raise InvalidOperation(f"Not a finite number: {value!r}")
    return result


TRUE_WORDS = {"1", "true", "yes", "on"}
FALSE_WORDS = {"0", "false", "no", "off", ""}


def parse_bool(value: Any) -> bool:
    """Strict boolean: real bools, 0/1, or true/false style words."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        word = value.strip().lower()
        if word in TRUE_WORDS:
            return True
        if word in FALSE_WORDS:
            return False
    raise ValueError(f"Not a boolean: {value!r}")


def new_id() -> str:
    return uuid.uuid4().hex


# ── Settings ──────────────────────────────────────────────────


PROGRESS_MODES = {"per_day", "per_task"}


@dataclass
class Settings:
    timezone: str = "UTC"
    default_day_target: int = 5
    default_task_points: Decimal = Decimal("1.0")
    default_task_target: int = 3
    default_task_max: int = 8
    progress_mode: str = "per_day"  # per_day, per_task
    seed_defaults: bool = True

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Settings:
        if not d or not isinstance(d, dict):
            return cls()
        mode = str(d.get("progress_mode", "per_day")).strip().lower()
        if mode not in PROGRESS_MODES:
            mode = "per_day"
        return cls(
            timezone=str(d.get("timezone", "UTC")),
            default_day_target=int(d.get("default_day_target", 5)),
            default_task_points=_dec(d.get("default_task_points"), "1.0"),
            default_task_target=max(1, int(d.get("default_task_target", 3))),
            default_task_max=max(1, int(d.get("default_task_max", 8))),
            progress_mode=mode,
            seed_defaults=bool(d.get("seed_defaults", True)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "timezone": self.timezone,
            "default_day_target": self.default_day_target,
            "default_task_points": str(self.default_task_points),
            "default_task_target": self.default_task_target,
            "default_task_max": self.default_task_max,
            "progress_mode": self.progress_mode,
            "seed_defaults": self.seed_defaults,
        }


# ── Days ──────────────────────────────────────────────────────


@dataclass
class Day:
    """One calendar day. ``key`` is the normalized ISO date."""

    key: str = ""
    target: int = 5
    cached_points: Decimal = Decimal("0")

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Day:
        return cls(
            key=str(d.get("day", "")),
            target=int(d.get("target", 5)),
            cached_points=_dec(d.get("points")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"day": self.key, "target": self.target, "points": str(self.cached_points)}


# ── Tasks ─────────────────────────────────────────────────────


@dataclass
class Task:
    id: str = field(default_factory=new_id)
    title: str = ""
    points: Decimal = Decimal("0")
    target: int = 1
    max: int = 1
    completed: int = 0
    reward: Decimal = Decimal("0")
    bonus: Decimal = Decimal("0")
    scalar: Decimal = Decimal("1")
    routine: bool = False
    optional: bool = False
    critical: bool = False
    template: bool = False
    position: int = 0
    day: str | None = None  # ISO date of the owning Day
    source_id: str | None = None  # template this instance came from

    @property
    def is_template(self) -> bool:
        return self.template or self.day is None

    def clamp(self) -> None:
        """Restore 1 <= target <= max and 0 <= completed <= max."""
        self.target = max(1, self.target)
        if self.max < self.target:
            self.max = self.target
        self.completed = min(max(0, self.completed), self.max)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Task:
        template = bool(d.get("template", False))
        task = cls(
            id=str(d.get("id") or new_id()),
            title=str(d.get("title", "")),
            points=_dec(d.get("points")),
            target=int(d.get("target", 1)),
            max=int(d.get("max", d.get("target", 1))),
            completed=int(d.get("completed", 0)),
            reward=_dec(d.get("reward")),
            bonus=_dec(d.get("bonus")),
            scalar=_dec(d.get("scalar"), "1"),
            routine=bool(d.get("routine", False)),
            optional=bool(d.get("optional", False)),
            critical=bool(d.get("critical", False)),
            template=template,
            position=int(d.get("position", 0)),
            day=None if template else d.get("day"),
            source_id=d.get("sourceId"),
        )
        task.clamp()
        return task

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "points": str(self.points),
            "target": self.target,
            "max": self.max,
            "completed": self.completed,
            "reward": str(self.reward),
            "bonus": str(self.bonus),
            "scalar": str(self.scalar),
            "routine": self.routine,
            "optional": self.optional,
            "critical": self.critical,
            "template": self.template,
            "position": self.position,
            "day": self.day,
        }
        if self.source_id:
            d["sourceId"] = self.source_id
        return d


@dataclass
class TaskPatch:
    """Partial update for a task. ``None`` means leave the field alone."""

    title: str | None = None
    points: Decimal | None = None
    target: int | None = None
    reward: Decimal | None = None
    max: int | None = None
    routine: bool | None = None
    optional: bool | None = None
    critical: bool | None = None

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> TaskPatch:
        if not d or not isinstance(d, dict):
            return cls()
        return cls(
            title=str(d["title"]) if d.get("title") is not None else None,
            points=_dec(d["points"]) if d.get("points") is not None else None,
            target=int(d["target"]) if d.get("target") is not None else None,
            reward=_dec(d["reward"]) if d.get("reward") is not None else None,
            max=int(d["max"]) if d.get("max") is not None else None,
            routine=parse_bool(d["routine"]) if d.get("routine") is not None else None,
            optional=parse_bool(d["optional"]) if d.get("optional") is not None else None,
            critical=parse_bool(d["critical"]) if d.get("critical") is not None else None,
        )

    def apply(self, task: Task) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if value is not None:
                setattr(task, f.name, value)
        task.clamp()

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))


# ── Completions ───────────────────────────────────────────────


@dataclass
class Completion:
    id: str = field(default_factory=new_id)
    task_id: str = ""
    day: str = ""
    timestamp: str = ""

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Completion:
        return cls(
            id=str(d.get("id") or new_id()),
            task_id=str(d.get("taskId", "")),
            day=str(d.get("day", "")),
            timestamp=str(d.get("timestamp", "")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "taskId": self.task_id, "day": self.day, "timestamp": self.timestamp}


# ── Store snapshot ────────────────────────────────────────────


@dataclass
class Snapshot:
    days: list[Day] = field(default_factory=list)
    tasks: list[Task] = field(default_factory=list)
    completions: list[Completion] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Snapshot:
        if not d or not isinstance(d, dict):
            return cls()
        return cls(
            days=[Day.from_dict(x) for x in (d.get("days") or [])],
            tasks=[Task.from_dict(x) for x in (d.get("tasks") or [])],
            completions=[Completion.from_dict(x) for x in (d.get("completions") or [])],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "days": [x.to_dict() for x in self.days],
            "tasks": [x.to_dict() for x in self.tasks],
            "completions": [x.to_dict() for x in self.completions],
        }


# ── Aggregates ────────────────────────────────────────────────


@dataclass
class DaySummary:
    day: str = ""
    points: int = 0
    target: int = 0
    progress: float = 0.0
    task_count: int = 0
    complete: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "day": self.day,
            "points": self.points,
            "target": self.target,
            "progress": round(self.progress, 3),
            "taskCount": self.task_count,
            "complete": self.complete,
        }
