import logging

import pytest

from conftest import day
from ganttkit.errors import CircularDependencyError, MissingReferenceError, TaskNotFoundError
from ganttkit.graph import (
    add_dependency,
    build_graph,
    find_cycles,
    get_dependency_tasks,
    get_dependent_tasks,
    remove_dependency,
    transitive_dependents,
    validate_dependencies,
    validate_dependency,
)
from ganttkit.hierarchy import find_task_by_id
from ganttkit.models import Task


class TestBuildGraph:
    def test_maps(self, diamond):
        g = build_graph(diamond)
        assert set(g.by_id) == {"A", "B", "C", "D"}
        assert g.successors_of["A"] == ["B", "C"]
        assert g.predecessors_of["D"] == ["B", "C"]
        assert g.successors_of["D"] == []
        assert g.dag.number_of_edges() == 4

    def test_includes_collapsed_subtasks(self, nested):
        g = build_graph(nested)
        assert "P2a" in g
        assert g.successors_of["P1"] == ["P2"]
        assert g.successors_of["P2"] == ["Q"]

    def test_dangling_dependency_is_skipped(self, caplog):
        tasks = [Task("A", "a", dependencies=["ghost"])]
        with caplog.at_level(logging.WARNING, logger="ganttkit"):
            g = build_graph(tasks)
        assert g.predecessors_of["A"] == []
        assert "ghost" in caplog.text

    def test_dated_only_drops_placeholders(self):
        tasks = [
            Task("A", "a", day(1), day(2)),
            Task("X", "placeholder", dependencies=["A"]),
            Task("B", "b", day(3), day(4), dependencies=["X"]),
        ]
        g = build_graph(tasks, dated_only=True)
        assert set(g.by_id) == {"A", "B"}
        assert g.predecessors_of["B"] == []

    def test_empty(self):
        g = build_graph([])
        assert g.by_id == {} and g.dag.number_of_nodes() == 0

    def test_duplicate_dependency_is_one_edge(self):
        tasks = [
            Task("A", "a", day(1), day(2)),
            Task("B", "b", day(3), day(4), dependencies=["A", "A"]),
        ]
        g = build_graph(tasks)
        assert g.predecessors_of["B"] == ["A"]
        assert g.successors_of["A"] == ["B"]


class TestValidateDependency:
    def test_self_dependency_is_circular(self, chain):
        assert validate_dependency(chain, "A", "A") is True

    def test_reverse_edge_closes_cycle(self, chain):
        # B already depends on A, so A depending on B is circular
        assert validate_dependency(chain, "B", "A") is True

    def test_forward_edge_is_fine(self, diamond):
        assert validate_dependency(diamond, "B", "C") is False

    def test_transitive_cycle(self, diamond):
        assert validate_dependency(diamond, "D", "A") is True
        assert validate_dependency(diamond, "C", "A") is True

    def test_commit_then_reverse(self):
        tasks = [Task("A", "a", day(1), day(2)), Task("B", "b", day(3), day(4))]
        assert validate_dependency(tasks, "A", "B") is False
        tasks = add_dependency(tasks, "A", "B")
        assert validate_dependency(tasks, "B", "A") is True

    def test_unknown_id(self, chain):
        with pytest.raises(TaskNotFoundError):
            validate_dependency(chain, "A", "Z")

    def test_long_chain_does_not_recurse(self):
        tasks = [Task("0", "t0", day(0), day(0))]
        for i in range(1, 5000):
            tasks.append(Task(str(i), f"t{i}", day(0), day(0), dependencies=[str(i - 1)]))
        assert validate_dependency(tasks, "4999", "0") is True
        assert validate_dependency(tasks, "0", "4999") is False


class TestCommit:
    def test_add_dependency_returns_new_snapshot(self, diamond):
        result = add_dependency(diamond, "B", "C")
        assert find_task_by_id(result, "C").dependencies == ["A", "B"]
        assert find_task_by_id(diamond, "C").dependencies == ["A"]

    def test_add_rejected_leaves_input(self, chain):
        with pytest.raises(CircularDependencyError):
            add_dependency(chain, "B", "A")
        assert chain[0].dependencies == []

    def test_add_existing_edge_is_noop(self, chain):
        result = add_dependency(chain, "A", "B")
        assert find_task_by_id(result, "B").dependencies == ["A"]

    def test_add_inside_tree(self, nested):
        result = add_dependency(nested, "P1", "P2a")
        assert find_task_by_id(result, "P2a").dependencies == ["P1"]
        assert find_task_by_id(nested, "P2a").dependencies == []

    def test_remove_dependency(self, diamond):
        result = remove_dependency(diamond, "B", "D")
        assert find_task_by_id(result, "D").dependencies == ["C"]
        assert find_task_by_id(diamond, "D").dependencies == ["B", "C"]
        assert remove_dependency(diamond, "C", "B") == diamond


class TestValidateSnapshot:
    def test_clean_snapshot(self, diamond, nested):
        assert find_cycles(diamond) == []
        validate_dependencies(diamond)
        validate_dependencies(nested)

    def test_find_cycles(self):
        tasks = [
            Task("A", "a", dependencies=["C"]),
            Task("B", "b", dependencies=["A"]),
            Task("C", "c", dependencies=["B"]),
            Task("D", "d", dependencies=["C"]),
        ]
        cycles = find_cycles(tasks)
        assert len(cycles) == 1
        assert sorted(cycles[0]) == ["A", "B", "C"]

    def test_cycle_raises(self):
        tasks = [
            Task("A", "a", dependencies=["B"]),
            Task("B", "b", dependencies=["A"]),
        ]
        with pytest.raises(CircularDependencyError) as exc:
            validate_dependencies(tasks)
        assert sorted(exc.value.cycle) == ["A", "B"]
        assert "Circular dependency detected" in str(exc.value)
        # the reported edge is the one that closes the cycle
        assert exc.value.from_id in find_task_by_id(tasks, exc.value.to_id).dependencies

    def test_missing_reference_raises(self, chain):
        tasks = [*chain, Task("C", "c", dependencies=["B", "ghost"])]
        with pytest.raises(MissingReferenceError) as exc:
            validate_dependencies(tasks)
        assert exc.value.task_id == "C"
        assert exc.value.missing_id == "ghost"

    def test_missing_reference_in_subtask(self, nested):
        broken = [*nested, Task("R", "r", subtasks=[Task("R1", "r1", dependencies=["nope"])])]
        with pytest.raises(MissingReferenceError, match="R1 depends on unknown task nope"):
            validate_dependencies(broken)


def test_direct_neighbours(diamond):
    assert [t.id for t in get_dependent_tasks(diamond, "A")] == ["B", "C"]
    assert [t.id for t in get_dependency_tasks(diamond, "D")] == ["B", "C"]
    assert get_dependency_tasks(diamond, "A") == []
    with pytest.raises(TaskNotFoundError):
        get_dependent_tasks(diamond, "Z")


def test_transitive_dependents_visits_once(diamond):
    g = build_graph(diamond)
    assert transitive_dependents(g, "A") == ["B", "C", "D"]
    assert transitive_dependents(g, "D") == []
