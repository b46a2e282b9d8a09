"""Critical path analysis: forward and backward passes, slack, critical chains."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta

import networkx as nx

from ganttkit.graph import build_graph
from ganttkit.hierarchy import require_task
from ganttkit.logger import get_logger
from ganttkit.models import Task

log = get_logger("scheduler")


@dataclass
class ScheduledTask:
    """A task with its computed schedule and slack.

    All values are whole-day offsets from *anchor*. Finishes are the last
    day the task occupies, so a one-day task starts and finishes on the
    same offset. Milestones have duration 0.
    """

    task: Task
    anchor: date
    duration: int
    earliest_start: int
    earliest_finish: int
    latest_start: int
    latest_finish: int
    slack: int

    @property
    def is_critical(self) -> bool:
        return self.slack == 0

    def _day(self, offset: int) -> date:
        return self.anchor + timedelta(days=offset)

    @property
    def earliest_start_date(self) -> date:
        return self._day(self.earliest_start)

    @property
    def earliest_finish_date(self) -> date:
        return self._day(self.earliest_finish)

    @property
    def latest_start_date(self) -> date:
        return self._day(self.latest_start)

    @property
    def latest_finish_date(self) -> date:
        return self._day(self.latest_finish)


def task_duration(task: Task) -> int | None:
    """Inclusive working span in days; 0 for milestones, None for placeholders."""
    if not task.has_dates:
        return None
    if task.is_milestone:
        return 0
    return (task.end_date - task.start_date).days + 1


def _last_day(start: int, duration: int) -> int:
    return start + duration - 1 if duration > 0 else start


def calculate_schedule(
    tasks: list[Task],
    anchor: date | None = None,
    per_component: bool = True,
) -> list[ScheduledTask]:
    """Full forward + backward pass over every dated task.

    Placeholder tasks (missing dates) take no part, and neither do edges
    touching them. Tasks without predecessors start on their declared start;
    every other task starts as soon as its last predecessor releases it, so
    a zero-slack chain always runs from a root to a sink. Sink tasks finish
    by the horizon of their weakly connected component, or of the whole
    project when *per_component* is False.

    Returns [] for an empty snapshot or, after logging, when the dependency
    edges contain a cycle.
    """
    graph = build_graph(tasks, dated_only=True)
    if not graph.by_id:
        return []

    try:
        topo_order = list(nx.topological_sort(graph.dag))
    except nx.NetworkXUnfeasible:
        log.error("Circular dependency detected; critical path not computed")
        return []

    if anchor is None:
        anchor = min(t.start_date for t in graph.by_id.values())

    duration = {tid: task_duration(t) for tid, t in graph.by_id.items()}

    # --- Forward pass (earliest start); release = first day a successor may start ---
    es: dict[str, int] = {}
    release: dict[str, int] = {}
    for tid in topo_order:
        preds = graph.predecessors_of[tid]
        if preds:
            start = max(release[p] for p in preds)
        else:
            start = (graph.by_id[tid].start_date - anchor).days
        es[tid] = start
        release[tid] = start + duration[tid]

    # --- Horizon per component (or for the whole project) ---
    horizon: dict[str, int] = {}
    if per_component:
        for component in nx.weakly_connected_components(graph.dag):
            end = max(release[tid] for tid in component)
            for tid in component:
                horizon[tid] = end
    else:
        end = max(release.values())
        horizon = dict.fromkeys(topo_order, end)

    # --- Backward pass (latest start); deadline = day after the last allowed day ---
    ls: dict[str, int] = {}
    deadline: dict[str, int] = {}
    for tid in reversed(topo_order):
        succs = graph.successors_of[tid]
        deadline[tid] = min(ls[s] for s in succs) if succs else horizon[tid]
        ls[tid] = deadline[tid] - duration[tid]

    results: list[ScheduledTask] = []
    for tid in topo_order:
        results.append(
            ScheduledTask(
                task=graph.by_id[tid],
                anchor=anchor,
                duration=duration[tid],
                earliest_start=es[tid],
                earliest_finish=_last_day(es[tid], duration[tid]),
                latest_start=ls[tid],
                latest_finish=_last_day(ls[tid], duration[tid]),
                slack=ls[tid] - es[tid],
            )
        )
    log.debug("Scheduled %d tasks anchored at %s", len(results), anchor)
    return results


def get_critical_path(scheduled: list[ScheduledTask]) -> list[ScheduledTask]:
    """Return only the zero-slack tasks, ordered by earliest start."""
    # sorted() is stable, so ties keep topological order
    return sorted((s for s in scheduled if s.is_critical), key=lambda s: s.earliest_start)


def compute_critical_path(
    tasks: list[Task],
    anchor: date | None = None,
    per_component: bool = True,
) -> list[str]:
    """Ids of the zero-slack tasks, ordered by earliest start."""
    scheduled = calculate_schedule(tasks, anchor=anchor, per_component=per_component)
    return [s.task.id for s in get_critical_path(scheduled)]


def compute_slack(tasks: list[Task], task_id: str) -> int | None:
    """Slack of one task in days; None for placeholders or a cyclic snapshot."""
    task = require_task(tasks, task_id)
    if not task.has_dates:
        return None
    for s in calculate_schedule(tasks):
        if s.task.id == task_id:
            return s.slack
    return None


def is_on_critical_path(tasks: list[Task], task_id: str) -> bool:
    require_task(tasks, task_id)
    return task_id in compute_critical_path(tasks)


def critical_chains(scheduled: list[ScheduledTask]) -> list[list[ScheduledTask]]:
    """Group critical tasks into connected chains, earliest chain first."""
    crit = {s.task.id: s for s in get_critical_path(scheduled)}
    sub = nx.DiGraph()
    sub.add_nodes_from(crit)
    for tid, s in crit.items():
        for dep in s.task.dependencies:
            if dep in crit:
                sub.add_edge(dep, tid)

    order = {tid: i for i, tid in enumerate(crit)}
    chains = [
        sorted((crit[tid] for tid in component), key=lambda s: order[s.task.id])
        for component in nx.weakly_connected_components(sub)
    ]
    chains.sort(key=lambda chain: (chain[0].earliest_start, order[chain[0].task.id]))
    return chains
