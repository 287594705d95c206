"""Change notifications for Points.

Two delivery paths, both fed by ``Notifier.emit``:
- in-process subscribers (callables registered per hook point)
- shell commands configured in config/hooks.yaml, which get the event
  context as JSON on stdin

Hook points:
- on_points_changed   (day summary after a recompute)
- on_tasks_changed    (ordered task ids after create/delete/reorder)
- on_task_complete    (a task just reached its target)
"""

from __future__ import annotations

import json
import logging
import subprocess
from pathlib import Path
from typing import Any, Callable

from points.errors import StorageFailure
from points.fileio import read_yaml
from points.workspace import hooks_config_path

logger = logging.getLogger(__name__)

VALID_HOOK_POINTS = {
    "on_points_changed",
    "on_tasks_changed",
    "on_task_complete",
}

DEFAULT_TIMEOUT = 30
MAX_OUTPUT = 4096

Listener = Callable[[str, dict[str, Any]], None]


def load_hooks_config(root: Path) -> dict[str, Any]:
    """Load hooks configuration from config/hooks.yaml."""
    path = hooks_config_path(root)
    if not path.exists():
        return {}
    return read_yaml(path)


def _hook_entries(config: dict[str, Any], hook_point: str) -> list[tuple[str, float]]:
    """(command, timeout) pairs for a hook point; malformed entries are skipped."""
    entries = config.get(hook_point) or []
    if not isinstance(entries, list):
        logger.warning("hooks_config_invalid point=%s", hook_point)
        return []
    parsed = []
    for entry in entries:
        if isinstance(entry, str):
            parsed.append((entry, DEFAULT_TIMEOUT))
        elif isinstance(entry, dict) and entry.get("command"):
            parsed.append((str(entry["command"]), _timeout(entry.get("timeout"))))
    return [(cmd, timeout) for cmd, timeout in parsed if cmd]


def _timeout(value: Any) -> float:
    if value is None:
        return DEFAULT_TIMEOUT
    try:
        timeout = float(value)
    except (TypeError, ValueError):
        logger.warning("hook_timeout_invalid value=%r fallback=%s", value, DEFAULT_TIMEOUT)
        return DEFAULT_TIMEOUT
    return timeout if timeout > 0 else DEFAULT_TIMEOUT


def _run_command(command: str, timeout: float, payload: str, root: Path) -> dict[str, Any]:
    try:
        proc = subprocess.run(
            command,
            shell=True,
            input=payload,
            capture_output=True,
            text=True,
            timeout=timeout,
            cwd=str(root),
        )
    except subprocess.TimeoutExpired:
        return {"exit_code": -1, "error": f"Hook timed out after {timeout}s"}
    except Exception as e:
        return {"exit_code": -1, "error": str(e)}
    return {
        "exit_code": proc.returncode,
        "stdout": proc.stdout[:MAX_OUTPUT],
        "stderr": proc.stderr[:MAX_OUTPUT],
    }


def run_hooks(hook_point: str, context: dict[str, Any], root: Path) -> list[dict[str, Any]]:
    """Run the shell hooks configured for *hook_point*.

    Each command gets *context* as JSON on stdin and runs in the workspace
    root. Returns one result dict per command; failures are logged and
    reported, never raised.
    """
    if hook_point not in VALID_HOOK_POINTS:
        return []
    try:
        config = load_hooks_config(root)
    except StorageFailure as e:
        logger.warning("hooks_config_unreadable point=%s error=%s", hook_point, e)
        return []
    payload = json.dumps(context, ensure_ascii=False, default=str)
    results = []
    for command, timeout in _hook_entries(config, hook_point):
        result = {"command": command, "hook_point": hook_point}
        result.update(_run_command(command, timeout, payload, root))
        if result["exit_code"] != 0:
            logger.warning("hook_failed point=%s command=%s exit=%s", hook_point, command, result["exit_code"])
        results.append(result)
    return results


class Notifier:
    """Fan-out of engine events to subscribers and configured shell hooks."""

    def __init__(self, root: Path | None = None) -> None:
        self.root = root
        self._listeners: dict[str, list[Listener]] = {}

    def subscribe(self, hook_point: str, listener: Listener) -> None:
        if hook_point not in VALID_HOOK_POINTS:
            raise ValueError(f"Unknown hook point: {hook_point}")
        self._listeners.setdefault(hook_point, []).append(listener)

    def unsubscribe(self, hook_point: str, listener: Listener) -> None:
        listeners = self._listeners.get(hook_point, [])
        if listener in listeners:
            listeners.remove(listener)

    def emit(self, hook_point: str, context: dict[str, Any]) -> list[dict[str, Any]]:
        """Deliver an event; returns shell hook results (empty without a root).

        Events follow a change that is already saved, so a failing listener
        or hook is logged and never reaches the caller.
        """
        for listener in list(self._listeners.get(hook_point, [])):
            try:
                listener(hook_point, context)
            except Exception:
                logger.exception("subscriber_failed point=%s listener=%r", hook_point, listener)
        if self.root is None:
            return []
        return run_hooks(hook_point, context, self.root)
