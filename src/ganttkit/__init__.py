"""Gantt dependency and scheduling engine."""

from ganttkit.cascade import (
    PreviewEntry,
    auto_schedule_dependents,
    auto_schedule_many,
    calculate_cascade_preview,
)
from ganttkit.errors import (
    CircularDependencyError,
    GanttError,
    MissingReferenceError,
    SnapshotError,
    TaskNotFoundError,
)
from ganttkit.graph import (
    DependencyGraph,
    add_dependency,
    build_graph,
    find_cycles,
    get_dependency_tasks,
    get_dependent_tasks,
    remove_dependency,
    validate_dependencies,
    validate_dependency,
)
from ganttkit.hierarchy import find_task_by_id, flatten_tasks
from ganttkit.models import FlatTask, Task, TaskSegment, TaskStatus, TimelineConfig
from ganttkit.scheduler import (
    ScheduledTask,
    calculate_schedule,
    compute_critical_path,
    compute_slack,
)
from ganttkit.split import split_task

__version__ = "0.1.0"

__all__ = [
    "CircularDependencyError",
    "DependencyGraph",
    "FlatTask",
    "GanttError",
    "MissingReferenceError",
    "PreviewEntry",
    "ScheduledTask",
    "SnapshotError",
    "Task",
    "TaskNotFoundError",
    "TaskSegment",
    "TaskStatus",
    "TimelineConfig",
    "add_dependency",
    "auto_schedule_dependents",
    "auto_schedule_many",
    "build_graph",
    "calculate_cascade_preview",
    "calculate_schedule",
    "compute_critical_path",
    "compute_slack",
    "find_cycles",
    "find_task_by_id",
    "flatten_tasks",
    "get_dependency_tasks",
    "get_dependent_tasks",
    "remove_dependency",
    "split_task",
    "validate_dependencies",
    "validate_dependency",
]
