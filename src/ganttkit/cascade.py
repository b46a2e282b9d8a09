"""Cascading date shifts through dependents, committed or previewed."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from datetime import date, timedelta

from ganttkit.graph import build_graph, transitive_dependents
from ganttkit.hierarchy import replace_tasks
from ganttkit.logger import get_logger
from ganttkit.models import FlatTask, Task, TaskSegment, TimelineConfig
from ganttkit.timeline import date_to_x, task_width

log = get_logger("cascade")


@dataclass(frozen=True)
class PreviewEntry:
    """Where a dependent's bar would land if the current drag were dropped."""

    task_id: str
    task_name: str
    original_x: float
    preview_x: float
    width: float
    y: float
    row_index: int
    days_delta: int
    color: str | None = None


def shift_task(task: Task, days: int) -> Task:
    """Return a copy of *task* moved by *days*, segments included."""
    if days == 0:
        return task
    delta = timedelta(days=days)

    def move(d: date | None) -> date | None:
        return d + delta if d is not None else None

    segments = None
    if task.segments is not None:
        segments = [TaskSegment(s.start_date + delta, s.end_date + delta) for s in task.segments]
    return replace(
        task,
        start_date=move(task.start_date),
        end_date=move(task.end_date),
        segments=segments,
    )


def auto_schedule_dependents(tasks: list[Task], changed_task_id: str, days_delta: int) -> list[Task]:
    """Shift every transitive dependent of *changed_task_id* by *days_delta*.

    The changed task itself is assumed to have been moved by the caller.
    Each dependent moves exactly once, however many paths reach it, so
    the gap to its predecessors is preserved. Returns a new snapshot.
    """
    graph = build_graph(tasks)
    dependents = transitive_dependents(graph, changed_task_id)
    if days_delta == 0 or not dependents:
        return list(tasks)

    updates = {tid: shift_task(graph.by_id[tid], days_delta) for tid in dependents}
    log.info(
        "Cascaded %+d day(s) from %s to %d dependent(s)", days_delta, changed_task_id, len(updates)
    )
    return replace_tasks(tasks, updates)


def auto_schedule_many(tasks: list[Task], deltas: Mapping[str, int]) -> list[Task]:
    """Cascade several independently moved tasks in one pass.

    A dependent reachable from more than one moved task shifts by the
    largest of their deltas. The moved tasks themselves are left alone,
    even when one of them depends on another.
    """
    graph = build_graph(tasks)
    shifts: dict[str, int] = {}
    for root, delta in deltas.items():
        for tid in transitive_dependents(graph, root):
            if tid in deltas:
                continue
            shifts[tid] = max(shifts.get(tid, delta), delta)

    updates = {
        tid: shift_task(graph.by_id[tid], delta) for tid, delta in shifts.items() if delta != 0
    }
    log.info("Cascaded %d root move(s) to %d dependent(s)", len(deltas), len(updates))
    return replace_tasks(tasks, updates)


def calculate_cascade_preview(
    tasks: list[Task],
    dragged_task_id: str,
    days_delta: int,
    flat_tasks: list[FlatTask],
    timeline_start: date,
    day_width: float,
    row_height: float,
    header_height: float,
) -> list[PreviewEntry]:
    """Project the cascade of a drag into pixel space without committing it.

    *day_width* must already include zoom. Dependents without dates or
    without a visible row are walked through but produce no entry.
    """
    if days_delta == 0:
        return []

    graph = build_graph(tasks)
    row_of = {row.id: row.row_index for row in flat_tasks}
    previews: list[PreviewEntry] = []
    for tid in transitive_dependents(graph, dragged_task_id):
        task = graph.by_id[tid]
        row_index = row_of.get(tid)
        if row_index is None or not task.has_dates:
            continue
        moved = shift_task(task, days_delta)
        previews.append(
            PreviewEntry(
                task_id=tid,
                task_name=task.name,
                original_x=date_to_x(task.start_date, timeline_start, day_width),
                preview_x=date_to_x(moved.start_date, timeline_start, day_width),
                width=task_width(task, day_width),
                y=header_height + row_index * row_height,
                row_index=row_index,
                days_delta=days_delta,
                color=task.color,
            )
        )
    log.debug("Preview for %s (%+d): %d bar(s)", dragged_task_id, days_delta, len(previews))
    return previews


def preview_from_config(
    tasks: list[Task],
    dragged_task_id: str,
    days_delta: int,
    flat_tasks: list[FlatTask],
    config: TimelineConfig,
) -> list[PreviewEntry]:
    return calculate_cascade_preview(
        tasks,
        dragged_task_id,
        days_delta,
        flat_tasks,
        config.timeline_start,
        config.scaled_day_width,
        config.row_height,
        config.header_height,
    )
