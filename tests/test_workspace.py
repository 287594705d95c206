"""Tests for points/workspace.py."""

from decimal import Decimal

from points.models import Settings
from points.workspace import (
    get_timezone,
    load_settings,
    settings_path,
    store_path,
    today_str,
    workspace_root,
)


def test_workspace_root_from_env(workspace):
    assert workspace_root() == workspace.resolve()
    assert store_path() == workspace.resolve() / "data" / "store.yaml"


def test_load_settings(workspace):
    settings = load_settings(workspace)
    assert settings.default_day_target == 10
    assert settings.default_task_points == Decimal("2")
    assert settings.default_task_max == 6
    assert settings.seed_defaults is False


def test_load_settings_defaults_when_missing(tmp_path):
    settings = load_settings(tmp_path)
    assert settings == Settings()
    assert not settings_path(tmp_path).exists()


def test_unknown_timezone_falls_back_to_utc():
    assert str(get_timezone(Settings(timezone="Mars/Olympus"))) == "UTC"


def test_today_str_is_iso():
    value = today_str(Settings(timezone="Europe/Berlin"))
    assert len(value) == 10
    assert value[4] == "-" and value[7] == "-"
