"""Points core library: task/day data model and aggregation engine.

Public API re-exports for convenient imports:
    from points import Tracker, EntityStore, resolve_day, increment, ...
"""

# Workspace & config
from points.workspace import (
    workspace_root,
    load_settings,
    get_timezone,
    today_str,
    now_local,
    store_path,
    settings_path,
    hooks_config_path,
)

# Errors
from points.errors import PointsError, StorageFailure, TaskNotFound

# Store
from points.store import EntityStore, MemoryBackend, YamlBackend

# Days
from points.dates import (
    normalize_day,
    resolve_day,
    today,
    ensure_tasks_exist,
    format_day,
)

# Tasks
from points.tasks import (
    find_task,
    list_tasks,
    list_templates,
    siblings,
    create_task,
    update_task,
    delete_task,
    duplicate_task,
    move_task,
    clear_tasks,
    reset_completions,
)

# Templates
from points.templates import (
    template_exists,
    copy_as_template,
    materialize,
    apply_templates,
)

# Completions
from points.completion import CompletionState, completion_state, increment, decrement

# Aggregation
from points.aggregate import (
    total_points,
    progress_ratio,
    is_day_complete,
    streak_bonus,
    task_bonus,
    earned_points,
    summarize,
    recompute,
    progress,
)

# Ordering
from points.positions import append_position, densify, reorder, sort_key

# Notifications & facade
from points.hooks import Notifier, run_hooks
from points.engine import Tracker

# Models
from points.models import (
    Settings,
    Day,
    Task,
    TaskPatch,
    Completion,
    Snapshot,
    DaySummary,
    parse_bool,
)
