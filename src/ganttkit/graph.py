"""Dependency graph construction and cycle detection."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field, replace

import networkx as nx

from ganttkit.errors import CircularDependencyError, MissingReferenceError, TaskNotFoundError
from ganttkit.hierarchy import iter_tasks, replace_tasks, require_task
from ganttkit.logger import get_logger
from ganttkit.models import Task

log = get_logger("graph")


@dataclass
class DependencyGraph:
    """Id-indexed dependency maps over one task snapshot.

    An edge ``a -> b`` means *b* depends on *a* (finish-to-start).
    """

    by_id: dict[str, Task] = field(default_factory=dict)
    successors_of: dict[str, list[str]] = field(default_factory=dict)
    predecessors_of: dict[str, list[str]] = field(default_factory=dict)
    dag: nx.DiGraph = field(default_factory=nx.DiGraph)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self.by_id

    def require(self, task_id: str) -> Task:
        try:
            return self.by_id[task_id]
        except KeyError:
            raise TaskNotFoundError(task_id) from None


def build_graph(tasks: list[Task], dated_only: bool = False) -> DependencyGraph:
    """Build id, successor and predecessor maps in one pass over the tree.

    Every task in the tree takes part, collapsed or not. Predecessor ids that
    do not resolve to a task are skipped. With *dated_only*, placeholder tasks
    (no start or end date) are left out along with their edges.
    """
    graph = DependencyGraph()
    for task in iter_tasks(tasks):
        if dated_only and not task.has_dates:
            continue
        graph.by_id[task.id] = task
        graph.successors_of[task.id] = []
        graph.predecessors_of[task.id] = []
        graph.dag.add_node(task.id, task=task)

    for tid, task in graph.by_id.items():
        for dep in task.dependencies:
            if dep not in graph.by_id:
                if not dated_only:
                    log.warning("Task %s depends on non-existent task %s; ignoring", tid, dep)
                continue
            if graph.dag.has_edge(dep, tid):
                continue
            graph.predecessors_of[tid].append(dep)
            graph.successors_of[dep].append(tid)
            graph.dag.add_edge(dep, tid)
    return graph


def would_create_cycle(graph: DependencyGraph, from_id: str, to_id: str) -> bool:
    """Would the edge ``from_id -> to_id`` close a cycle in *graph*?

    Walks backward from *from_id* along predecessor edges; the edge is
    circular exactly when *to_id* is already a transitive predecessor.
    """
    if from_id == to_id:
        return True
    graph.require(from_id)
    graph.require(to_id)

    seen = {from_id}
    stack = [from_id]
    while stack:
        current = stack.pop()
        for pred in graph.predecessors_of[current]:
            if pred == to_id:
                return True
            if pred not in seen:
                seen.add(pred)
                stack.append(pred)
    return False


def validate_dependency(tasks: list[Task], from_id: str, to_id: str) -> bool:
    """Return True if making *to_id* depend on *from_id* would create a cycle."""
    if from_id == to_id:
        return True
    return would_create_cycle(build_graph(tasks), from_id, to_id)


def add_dependency(tasks: list[Task], from_id: str, to_id: str) -> list[Task]:
    """Return a new snapshot in which *to_id* depends on *from_id*.

    The cycle check runs to completion before anything is built; a rejected
    edge raises CircularDependencyError and the input is left as it was.
    """
    graph = build_graph(tasks)
    if would_create_cycle(graph, from_id, to_id):
        log.warning("Rejected dependency %s -> %s: would create a cycle", from_id, to_id)
        raise CircularDependencyError(from_id, to_id)

    target = graph.by_id[to_id]
    if from_id in target.dependencies:
        return list(tasks)
    log.info("Added dependency %s -> %s", from_id, to_id)
    updated = replace(target, dependencies=[*target.dependencies, from_id])
    return replace_tasks(tasks, {to_id: updated})


def remove_dependency(tasks: list[Task], from_id: str, to_id: str) -> list[Task]:
    """Return a new snapshot without the edge ``from_id -> to_id``."""
    target = require_task(tasks, to_id)
    if from_id not in target.dependencies:
        return list(tasks)
    log.info("Removed dependency %s -> %s", from_id, to_id)
    updated = replace(target, dependencies=[d for d in target.dependencies if d != from_id])
    return replace_tasks(tasks, {to_id: updated})


def get_dependent_tasks(tasks: list[Task], task_id: str) -> list[Task]:
    """Tasks that directly depend on *task_id*."""
    graph = build_graph(tasks)
    graph.require(task_id)
    return [graph.by_id[s] for s in graph.successors_of[task_id]]


def get_dependency_tasks(tasks: list[Task], task_id: str) -> list[Task]:
    """Tasks that *task_id* directly depends on."""
    graph = build_graph(tasks)
    graph.require(task_id)
    return [graph.by_id[p] for p in graph.predecessors_of[task_id]]


def transitive_dependents(graph: DependencyGraph, task_id: str) -> list[str]:
    """Every task reachable along successor edges, in BFS order, each once."""
    graph.require(task_id)
    visited = {task_id}
    order: list[str] = []
    queue = deque([task_id])
    while queue:
        current = queue.popleft()
        for succ in graph.successors_of[current]:
            if succ in visited:
                continue
            visited.add(succ)
            order.append(succ)
            queue.append(succ)
    return order


def find_cycles(tasks: list[Task]) -> list[list[str]]:
    """Every elementary cycle among the dependency edges, as lists of ids.

    Each cycle is listed in dependency order, so ``c[i + 1]`` depends on
    ``c[i]`` and ``c[0]`` depends on ``c[-1]``. An acyclic snapshot gives [].
    """
    return [list(c) for c in nx.simple_cycles(build_graph(tasks).dag)]


def validate_dependencies(tasks: list[Task]) -> None:
    """Check a whole snapshot for dangling ids and cycles.

    Raises MissingReferenceError for the first dependency naming an unknown
    task, then CircularDependencyError for the first cycle found.
    """
    known = {t.id for t in iter_tasks(tasks)}
    for task in iter_tasks(tasks):
        for dep in task.dependencies:
            if dep not in known:
                raise MissingReferenceError(task.id, dep)

    cycles = find_cycles(tasks)
    if cycles:
        cycle = cycles[0]
        log.error("Dependency cycle found: %s", " -> ".join(cycle))
        raise CircularDependencyError(cycle[-1], cycle[0], cycle=cycle)
