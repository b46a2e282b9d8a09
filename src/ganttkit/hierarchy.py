"""Subtask tree traversal: flattening, lookup and immutable replacement."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import replace

from ganttkit.errors import HierarchyError, TaskNotFoundError
from ganttkit.models import FlatTask, Task

# Trees are shallow in practice; anything deeper is a reference cycle.
MAX_DEPTH = 256


def _walk(tasks: list[Task], *, visible_only: bool) -> Iterator[tuple[Task, int, str | None]]:
    """Pre-order walk yielding (task, level, parent_id)."""
    stack: list[tuple[Task, int, str | None]] = [(t, 0, None) for t in reversed(tasks)]
    while stack:
        task, level, parent_id = stack.pop()
        if level > MAX_DEPTH:
            raise HierarchyError(f"Task tree deeper than {MAX_DEPTH} levels at {task.id}")
        yield task, level, parent_id
        if visible_only and not task.is_expanded:
            continue
        for child in reversed(task.subtasks):
            stack.append((child, level + 1, task.id))


def flatten_tasks(tasks: list[Task]) -> list[FlatTask]:
    """Flatten the tree into visible rows.

    Rows follow a stable pre-order traversal. Children of a collapsed task
    are omitted, along with everything beneath them.
    """
    rows: list[FlatTask] = []
    for task, level, parent_id in _walk(tasks, visible_only=True):
        rows.append(
            FlatTask(
                task=task,
                level=level,
                has_children=bool(task.subtasks),
                row_index=len(rows),
                parent_id=parent_id,
            )
        )
    return rows


def iter_tasks(tasks: list[Task]) -> Iterator[Task]:
    """Yield every task in pre-order, ignoring collapsed state."""
    for task, _, _ in _walk(tasks, visible_only=False):
        yield task


def find_task_by_id(tasks: list[Task], task_id: str) -> Task | None:
    for task in iter_tasks(tasks):
        if task.id == task_id:
            return task
    return None


def require_task(tasks: list[Task], task_id: str) -> Task:
    """Like find_task_by_id, but an unknown id is a caller error."""
    task = find_task_by_id(tasks, task_id)
    if task is None:
        raise TaskNotFoundError(task_id)
    return task


def get_parent_tasks(tasks: list[Task], task_id: str) -> list[Task]:
    """Return the ancestors of *task_id*, root first."""
    parent_of: dict[str, str | None] = {}
    by_id: dict[str, Task] = {}
    for task, _, parent_id in _walk(tasks, visible_only=False):
        parent_of[task.id] = parent_id
        by_id[task.id] = task
    if task_id not in by_id:
        raise TaskNotFoundError(task_id)

    parents: list[Task] = []
    current = parent_of[task_id]
    while current is not None:
        parents.append(by_id[current])
        current = parent_of[current]
    parents.reverse()
    return parents


def replace_tasks(tasks: list[Task], updates: Mapping[str, Task], _level: int = 0) -> list[Task]:
    """Return a new tree in which tasks whose id is in *updates* are swapped.

    The input is never mutated. Untouched subtrees are shared with the input.
    A replacement keeps the original's subtasks (with their own updates
    applied) so callers only need to supply the changed fields.
    """
    if not updates:
        return list(tasks)
    if _level > MAX_DEPTH:
        raise HierarchyError(f"Task tree deeper than {MAX_DEPTH} levels")

    result: list[Task] = []
    for task in tasks:
        node = updates.get(task.id, task)
        if task.subtasks:
            subtasks = replace_tasks(task.subtasks, updates, _level + 1)
            if node is not task or any(a is not b for a, b in zip(subtasks, task.subtasks)):
                node = replace(node, subtasks=subtasks)
        result.append(node)
    return result
