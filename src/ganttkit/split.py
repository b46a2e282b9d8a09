"""Splitting a task into segments separated by a paused gap."""

from __future__ import annotations

from dataclasses import replace
from datetime import date, timedelta

from ganttkit.hierarchy import replace_tasks, require_task
from ganttkit.logger import get_logger
from ganttkit.models import Task, TaskSegment

log = get_logger("split")


def _current_segments(task: Task) -> list[TaskSegment]:
    if task.segments:
        return list(task.segments)
    return [TaskSegment(task.start_date, task.end_date)]


def split_problem(task: Task, split_date: date, gap_days: int) -> str | None:
    """Why *task* cannot be split at *split_date*, or None if it can."""
    if not task.has_dates:
        return f"Task {task.id} has no dates"
    if gap_days <= 0:
        return f"Gap must be positive, got {gap_days}"
    if not task.start_date < split_date < task.end_date:
        return "Split date must be between task start and end dates"
    if not any(s.start_date < split_date <= s.end_date for s in _current_segments(task)):
        return f"Split date {split_date} falls in a paused period or on a segment start"
    return None


def split_segments(segments: list[TaskSegment], split_date: date, gap_days: int) -> list[TaskSegment]:
    """Cut the segment containing *split_date* and pause for *gap_days*.

    Earlier segments are kept as they are; the remainder of the cut segment
    and every later segment move by *gap_days*.
    """
    gap = timedelta(days=gap_days)
    result: list[TaskSegment] = []
    for seg in segments:
        if seg.end_date < split_date:
            result.append(seg)
        elif seg.start_date < split_date:
            result.append(TaskSegment(seg.start_date, split_date - timedelta(days=1)))
            result.append(TaskSegment(split_date + gap, seg.end_date + gap))
        else:
            result.append(TaskSegment(seg.start_date + gap, seg.end_date + gap))
    return result


def split_task(tasks: list[Task], task_id: str, split_date: date, gap_days: int = 3) -> list[Task]:
    """Pause *task_id* for *gap_days* starting at *split_date*.

    Example: Jan 1-10 split at Jan 5 with a 3 day gap becomes Jan 1-4 and
    Jan 8-13. Active days are unchanged and the envelope grows by
    *gap_days*. An invalid split is logged and the input returned as is.
    """
    task = require_task(tasks, task_id)
    problem = split_problem(task, split_date, gap_days)
    if problem is not None:
        log.warning("Split of %s ignored: %s", task_id, problem)
        return tasks

    segments = split_segments(_current_segments(task), split_date, gap_days)
    updated = replace(
        task,
        segments=segments,
        start_date=segments[0].start_date,
        end_date=segments[-1].end_date,
    )
    log.info("Split %s at %s with %d day gap", task_id, split_date, gap_days)
    return replace_tasks(tasks, {task_id: updated})
