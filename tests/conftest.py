"""Shared test fixtures for Points tests."""

from __future__ import annotations

import os
from pathlib import Path

import pytest
import yaml

from points.dates import resolve_day
from points.errors import StorageFailure
from points.models import Day, Settings
from points.store import EntityStore, MemoryBackend


class FailingBackend(MemoryBackend):
    """Memory backend whose writes can be switched to fail."""

    def __init__(self) -> None:
        super().__init__()
        self.fail = False

    def write(self, data):
        if self.fail:
            raise StorageFailure("disk full")
        super().write(data)


@pytest.fixture
def settings() -> Settings:
    return Settings(seed_defaults=False)


@pytest.fixture
def backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture
def store(backend: MemoryBackend) -> EntityStore:
    return EntityStore(backend)


@pytest.fixture
def failing_backend() -> FailingBackend:
    return FailingBackend()


@pytest.fixture
def day(store: EntityStore, settings: Settings) -> Day:
    return resolve_day(store, "2026-02-11", settings)


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Create a temporary workspace with config files."""
    root = tmp_path / "workspace"
    (root / "config").mkdir(parents=True)
    (root / "data").mkdir(parents=True)

    config = {
        "timezone": "UTC",
        "default_day_target": 10,
        "default_task_points": "2",
        "default_task_target": 2,
        "default_task_max": 6,
        "progress_mode": "per_day",
        "seed_defaults": False,
    }
    (root / "config" / "settings.yaml").write_text(
        yaml.dump(config, default_flow_style=False), encoding="utf-8"
    )

    os.environ["POINTS_ROOT"] = str(root)
    yield root
    if "POINTS_ROOT" in os.environ:
        del os.environ["POINTS_ROOT"]
