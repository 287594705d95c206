from __future__ import annotations

import functools
from pathlib import Path
from decimal import InvalidOperation
from typing import Any

from fastapi import Body, Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from points import (
    StorageFailure,
    TaskNotFound,
    TaskPatch,
    Tracker,
    Day,
    Task,
    completion_state,
    parse_bool,
    format_day,
    workspace_root,
)
from points.log import setup_logging

setup_logging()

app = FastAPI(title="Points API", version="0.1.0")


@functools.lru_cache(maxsize=None)
def _tracker_for(root: Path) -> Tracker:
    return Tracker.open(root)


def get_tracker() -> Tracker:
    return _tracker_for(workspace_root())


# ── Helpers ───────────────────────────────────────────────────

def _task_json(task: Task) -> dict[str, Any]:
    d = task.to_dict()
    d["state"] = completion_state(task).value
    return d


def _resolve(tracker: Tracker, day_str: str) -> Day:
    try:
        return tracker.day(None if day_str == "today" else day_str)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid date: {day_str}")


def _day_json(tracker: Tracker, day: Day) -> dict[str, Any]:
    return {
        "day": day.key,
        "label": format_day(day.key),
        "summary": tracker.summary(day).to_dict(),
        "tasks": [_task_json(t) for t in tracker.tasks(day)],
    }


def _optional_bool(value: Any) -> bool | None:
    if value is None or value == "":
        return None
    try:
        return parse_bool(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Expected a boolean, got {value!r}")


def _patch(payload: dict[str, Any]) -> TaskPatch:
    try:
        return TaskPatch.from_dict(payload)
    except (ValueError, TypeError, InvalidOperation) as e:
        raise HTTPException(status_code=400, detail=f"Invalid task fields: {e}")


# ── Errors ────────────────────────────────────────────────────

@app.exception_handler(StorageFailure)
async def storage_failure_handler(request: Request, exc: StorageFailure) -> JSONResponse:
    return JSONResponse(status_code=503, content={"ok": False, "detail": str(exc), "retryable": True})


@app.exception_handler(TaskNotFound)
async def task_not_found_handler(request: Request, exc: TaskNotFound) -> JSONResponse:
    return JSONResponse(status_code=404, content={"ok": False, "detail": str(exc)})


# ── Endpoints ─────────────────────────────────────────────────

@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"ok": "true"}


@app.get("/api/days/{day_str}")
def api_get_day(day_str: str, routine: str | None = None, tracker: Tracker = Depends(get_tracker)) -> dict[str, Any]:
    """Day summary plus its ordered tasks."""
    day = _resolve(tracker, day_str)
    data = _day_json(tracker, day)
    flag = _optional_bool(routine)
    if flag is not None:
        data["tasks"] = [_task_json(t) for t in tracker.tasks(day, routine=flag)]
    return data


@app.post("/api/days/{day_str}/tasks")
def api_create_task(day_str: str, payload: dict[str, Any] = Body(...), tracker: Tracker = Depends(get_tracker)) -> dict[str, Any]:
    """Create a task on a day (or a template with ``template: true``)."""
    title = str(payload.get("title", "")).strip()
    if not title:
        raise HTTPException(status_code=400, detail="Missing title")
    patch = _patch(payload)
    template = bool(_optional_bool(payload.get("template")))
    day = None if template else _resolve(tracker, day_str)
    task = tracker.create(
        title,
        day=day,
        points=patch.points,
        target=patch.target,
        maximum=patch.max,
        reward=patch.reward if patch.reward is not None else 0,
        routine=bool(patch.routine),
        optional=bool(patch.optional),
        critical=bool(patch.critical),
        template=template,
    )
    return {"ok": True, "task": _task_json(task)}


@app.post("/api/days/{day_str}/move")
def api_move_task(day_str: str, payload: dict[str, Any] = Body(...), tracker: Tracker = Depends(get_tracker)) -> dict[str, Any]:
    """Move a task within a day's visible order."""
    day = _resolve(tracker, day_str)
    try:
        from_index = int(payload["from"])
        to_index = int(payload["to"])
    except (KeyError, TypeError, ValueError):
        raise HTTPException(status_code=400, detail="Expected integer 'from' and 'to'")
    ordered = tracker.move(day, from_index, to_index)
    return {"ok": True, "tasks": [_task_json(t) for t in ordered]}


@app.post("/api/days/{day_str}/apply-templates")
def api_apply_templates(
    day_str: str,
    payload: dict[str, Any] = Body(default={}),
    tracker: Tracker = Depends(get_tracker),
) -> dict[str, Any]:
    """Materialize templates onto a day."""
    day = _resolve(tracker, day_str)
    created = tracker.apply_templates(day, _optional_bool(payload.get("routines_only")))
    return {"ok": True, "created": [_task_json(t) for t in created], **_day_json(tracker, day)}


@app.post("/api/days/{day_str}/clear")
def api_clear_day(day_str: str, tracker: Tracker = Depends(get_tracker)) -> dict[str, Any]:
    day = _resolve(tracker, day_str)
    return {"ok": True, "summary": tracker.clear(day).to_dict()}


@app.post("/api/days/{day_str}/reset")
def api_reset_day(day_str: str, tracker: Tracker = Depends(get_tracker)) -> dict[str, Any]:
    day = _resolve(tracker, day_str)
    return {"ok": True, "summary": tracker.reset(day).to_dict()}


@app.put("/api/tasks/{task_id}")
def api_update_task(task_id: str, payload: dict[str, Any] = Body(...), tracker: Tracker = Depends(get_tracker)) -> dict[str, Any]:
    patch = _patch(payload)
    if patch.is_empty():
        raise HTTPException(status_code=400, detail="Missing updates")
    return {"ok": True, "task": _task_json(tracker.update(task_id, patch))}


@app.delete("/api/tasks/{task_id}")
def api_delete_task(task_id: str, tracker: Tracker = Depends(get_tracker)) -> dict[str, Any]:
    tracker.delete(task_id)
    return {"ok": True, "task_id": task_id}


@app.post("/api/tasks/{task_id}/increment")
def api_increment(task_id: str, tracker: Tracker = Depends(get_tracker)) -> dict[str, Any]:
    task = tracker.increment(task_id)
    return _completion_response(tracker, task)


@app.post("/api/tasks/{task_id}/decrement")
def api_decrement(task_id: str, tracker: Tracker = Depends(get_tracker)) -> dict[str, Any]:
    task = tracker.decrement(task_id)
    return _completion_response(tracker, task)


def _completion_response(tracker: Tracker, task: Task) -> dict[str, Any]:
    result: dict[str, Any] = {"ok": True, "task": _task_json(task)}
    if not task.is_template:
        result["summary"] = tracker.summary(tracker.store.get_day(task.day)).to_dict()
    return result


@app.post("/api/tasks/{task_id}/duplicate")
def api_duplicate(task_id: str, tracker: Tracker = Depends(get_tracker)) -> dict[str, Any]:
    return {"ok": True, "task": _task_json(tracker.duplicate(task_id))}


@app.post("/api/tasks/{task_id}/template")
def api_copy_as_template(task_id: str, tracker: Tracker = Depends(get_tracker)) -> dict[str, Any]:
    """Save a task as a template; a duplicate title is reported, not created."""
    template, errors = tracker.copy_as_template(task_id)
    if errors:
        return {"ok": False, "duplicate": True, "detail": "; ".join(errors)}
    return {"ok": True, "task": _task_json(template)}


@app.get("/api/templates")
def api_list_templates(routines: str | None = None, tracker: Tracker = Depends(get_tracker)) -> dict[str, Any]:
    templates = tracker.templates(_optional_bool(routines))
    return {"templates": [_task_json(t) for t in templates]}


@app.post("/api/templates/move")
def api_move_template(payload: dict[str, Any] = Body(...), tracker: Tracker = Depends(get_tracker)) -> dict[str, Any]:
    try:
        from_index = int(payload["from"])
        to_index = int(payload["to"])
    except (KeyError, TypeError, ValueError):
        raise HTTPException(status_code=400, detail="Expected integer 'from' and 'to'")
    ordered = tracker.move(None, from_index, to_index)
    return {"ok": True, "templates": [_task_json(t) for t in ordered]}
