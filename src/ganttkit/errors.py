"""Exceptions raised by the ganttkit engine."""

from __future__ import annotations


class GanttError(Exception):
    """Base exception for all ganttkit errors."""

    pass


class TaskNotFoundError(GanttError, LookupError):
    """Raised when a task id does not exist in the current snapshot."""

    def __init__(self, task_id: str):
        super().__init__(f"Task {task_id} not found")
        self.task_id = task_id


class CircularDependencyError(GanttError):
    """Raised when a dependency would close, or already closes, a cycle.

    *cycle* is set when the snapshot itself is cyclic; ``from_id -> to_id``
    is then the edge that closes it.
    """

    def __init__(self, from_id: str, to_id: str, cycle: list[str] | None = None):
        if cycle:
            message = "Circular dependency detected: " + " -> ".join([*cycle, cycle[0]])
        else:
            message = f"Adding {from_id} -> {to_id} would create a circular dependency"
        super().__init__(message)
        self.from_id = from_id
        self.to_id = to_id
        self.cycle = cycle


class MissingReferenceError(GanttError):
    """Raised when a task depends on an id that is not in the snapshot."""

    def __init__(self, task_id: str, missing_id: str):
        super().__init__(f"Task {task_id} depends on unknown task {missing_id}")
        self.task_id = task_id
        self.missing_id = missing_id


class HierarchyError(GanttError):
    """Raised when the subtask tree is deeper than the traversal guard allows."""

    pass


class SnapshotError(GanttError):
    """Raised when a snapshot file cannot be parsed."""

    pass
