"""Tests for points/hooks.py: subscribers and shell hooks."""

import json

import pytest
import yaml

from points.hooks import Notifier, load_hooks_config, run_hooks


def test_run_hooks_no_config(workspace):
    """No hooks.yaml -> no hooks run."""
    assert load_hooks_config(workspace) == {}
    assert run_hooks("on_points_changed", {"day": "2026-02-11"}, workspace) == []


def test_run_hooks_with_echo(workspace):
    """Hook that echoes the context it receives on stdin."""
    config = {"on_points_changed": ["cat"]}
    (workspace / "config" / "hooks.yaml").write_text(yaml.dump(config), encoding="utf-8")

    results = run_hooks("on_points_changed", {"day": "2026-02-11", "points": 7}, workspace)
    assert len(results) == 1
    assert results[0]["exit_code"] == 0
    output = json.loads(results[0]["stdout"])
    assert output["points"] == 7


def test_run_hooks_invalid_hook_point(workspace):
    assert run_hooks("post_finalize", {}, workspace) == []


def test_run_hooks_timeout(workspace):
    config = {"on_task_complete": [{"command": "sleep 10", "timeout": 1}]}
    (workspace / "config" / "hooks.yaml").write_text(yaml.dump(config), encoding="utf-8")

    results = run_hooks("on_task_complete", {}, workspace)
    assert len(results) == 1
    assert results[0]["exit_code"] == -1
    assert "timed out" in results[0].get("error", "").lower()


def test_notifier_subscribers():
    received = []
    notifier = Notifier()
    notifier.subscribe("on_points_changed", lambda point, ctx: received.append((point, ctx)))
    assert notifier.emit("on_points_changed", {"points": 3}) == []
    assert received == [("on_points_changed", {"points": 3})]


def test_notifier_unsubscribe():
    received = []
    listener = lambda point, ctx: received.append(ctx)  # noqa: E731
    notifier = Notifier()
    notifier.subscribe("on_tasks_changed", listener)
    notifier.unsubscribe("on_tasks_changed", listener)
    notifier.emit("on_tasks_changed", {})
    assert received == []


def test_notifier_rejects_unknown_point():
    with pytest.raises(ValueError, match="Unknown hook point"):
        Notifier().subscribe("on_nothing", lambda point, ctx: None)


def test_notifier_runs_shell_hooks(workspace):
    config = {"on_tasks_changed": ["cat"]}
    (workspace / "config" / "hooks.yaml").write_text(yaml.dump(config), encoding="utf-8")
    results = Notifier(workspace).emit("on_tasks_changed", {"tasks": ["a"]})
    assert json.loads(results[0]["stdout"]) == {"tasks": ["a"]}


def test_run_hooks_malformed_config(workspace):
    (workspace / "config" / "hooks.yaml").write_text("on_points_changed: [unclosed\n", encoding="utf-8")
    assert run_hooks("on_points_changed", {}, workspace) == []


def test_run_hooks_string_timeout(workspace):
    config = {"on_task_complete": [{"command": "cat", "timeout": "soon"}]}
    (workspace / "config" / "hooks.yaml").write_text(yaml.dump(config), encoding="utf-8")
    results = run_hooks("on_task_complete", {"ok": True}, workspace)
    assert results[0]["exit_code"] == 0
    assert json.loads(results[0]["stdout"]) == {"ok": True}


def test_failing_subscriber_does_not_stop_others():
    received = []

    def broken(point, ctx):
        raise RuntimeError("boom")

    notifier = Notifier()
    notifier.subscribe("on_points_changed", broken)
    notifier.subscribe("on_points_changed", lambda point, ctx: received.append(ctx))
    notifier.emit("on_points_changed", {"points": 1})
    assert received == [{"points": 1}]
