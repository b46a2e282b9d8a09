"""Calendar-day arithmetic and date-to-pixel mapping."""

from __future__ import annotations

from datetime import date

from ganttkit.hierarchy import iter_tasks
from ganttkit.models import Task


def calculate_duration(start: date, end: date) -> int:
    """Whole days from *start* to *end* (the bar span, end exclusive)."""
    return (end - start).days


def date_to_x(day: date, timeline_start: date, day_width: float) -> float:
    """Horizontal pixel offset of *day* on a timeline starting at *timeline_start*.

    *day_width* is the already-zoomed width of one day.
    """
    return (day - timeline_start).days * day_width


def task_width(task: Task, day_width: float) -> float:
    """Bar width of a dated task; never narrower than one day."""
    span = calculate_duration(task.start_date, task.end_date)
    return max(span * day_width, day_width)


def get_earliest_start_date(tasks: list[Task]) -> date | None:
    starts = [t.start_date for t in iter_tasks(tasks) if t.start_date]
    return min(starts, default=None)


def get_latest_end_date(tasks: list[Task]) -> date | None:
    ends = [t.end_date for t in iter_tasks(tasks) if t.end_date]
    return max(ends, default=None)


def tasks_overlap(a: Task, b: Task) -> bool:
    if not a.has_dates or not b.has_dates:
        return False
    return a.start_date <= b.end_date and b.start_date <= a.end_date


def calculate_total_progress(tasks: list[Task]) -> int:
    """Average progress across every task in the tree, rounded."""
    flat = list(iter_tasks(tasks))
    if not flat:
        return 0
    return round(sum(t.progress for t in flat) / len(flat))
