"""Atomic YAML file I/O for the Points store and config files."""

from __future__ import annotations

import fcntl
import os
import tempfile
from pathlib import Path
from typing import Any

import yaml

from points.errors import StorageFailure


def read_yaml(path: Path) -> dict[str, Any]:
    """Read a YAML mapping, returning empty dict if missing or empty.

    Unreadable or malformed files raise StorageFailure.
    """
    if not path.exists():
        return {}
    try:
        text = path.read_text(encoding="utf-8")
        if not text.strip():
            return {}
        result = yaml.safe_load(text)
    except (OSError, yaml.YAMLError) as e:
        raise StorageFailure(f"Cannot read {path}: {e}") from e
    return result if isinstance(result, dict) else {}


def _atomic_write(path: Path, content: str) -> None:
    """Temp file + flock + fsync + rename; the target is never half-written."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=".tmp_", suffix=".yaml")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            fcntl.flock(f.fileno(), fcntl.LOCK_EX)
            try:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            finally:
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        os.replace(temp_path, path)
    except Exception:
        if os.path.exists(temp_path):
            os.unlink(temp_path)
        raise


def write_yaml_atomic(path: Path, data: dict[str, Any]) -> None:
    """Atomic YAML write. OS and encoding errors surface as StorageFailure."""
    try:
        content = yaml.safe_dump(data, default_flow_style=False, allow_unicode=True, sort_keys=False)
        _atomic_write(path, content)
    except (OSError, yaml.YAMLError) as e:
        raise StorageFailure(f"Cannot write {path}: {e}") from e
