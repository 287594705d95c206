"""Workspace root, settings, time zone and path helpers for Points."""

from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from points.fileio import read_yaml
from points.models import Settings

logger = logging.getLogger(__name__)


def workspace_root() -> Path:
    """Get the workspace root directory (contains data/ and config/)."""
    return Path(
        os.environ.get("POINTS_ROOT", str(Path.home() / "points"))
    ).expanduser().resolve()


def load_settings(root: Path | None = None) -> Settings:
    """Load config/settings.yaml, defaulting every missing value."""
    return Settings.from_dict(read_yaml(settings_path(root)))


def get_timezone(settings: Settings) -> ZoneInfo:
    try:
        return ZoneInfo(settings.timezone)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("unknown_timezone tz=%s fallback=UTC", settings.timezone)
        return ZoneInfo("UTC")


def now_local(settings: Settings) -> datetime:
    """Get current datetime in the configured time zone."""
    return datetime.now(get_timezone(settings))


def today_str(settings: Settings) -> str:
    """Get today's date string (YYYY-MM-DD) in the configured time zone."""
    return now_local(settings).date().isoformat()


# ── Path helpers ──────────────────────────────────────────────

def store_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "data" / "store.yaml"


def settings_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "config" / "settings.yaml"


def hooks_config_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "config" / "hooks.yaml"
