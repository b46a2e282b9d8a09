import logging

import pytest

from conftest import DAY0, day
from ganttkit.errors import TaskNotFoundError
from ganttkit.graph import build_graph
from ganttkit.models import Task
from ganttkit.scheduler import (
    calculate_schedule,
    compute_critical_path,
    compute_slack,
    critical_chains,
    get_critical_path,
    is_on_critical_path,
    task_duration,
)


def _by_id(scheduled):
    return {s.task.id: s for s in scheduled}


def test_simple_chain(chain):
    s = _by_id(calculate_schedule(chain, anchor=DAY0))
    assert s["A"].earliest_start == 1
    assert s["A"].earliest_finish == 5
    assert s["B"].earliest_start == 6
    assert s["B"].earliest_finish == 10
    assert s["A"].slack == 0 and s["B"].slack == 0
    assert compute_critical_path(chain, anchor=DAY0) == ["A", "B"]


def test_dates_follow_anchor(chain):
    s = _by_id(calculate_schedule(chain, anchor=DAY0))
    assert s["A"].earliest_start_date == day(1)
    assert s["B"].latest_finish_date == day(10)


def test_default_anchor_is_project_start(chain, diamond):
    for tasks in (chain, diamond):
        for s in calculate_schedule(tasks):
            if not s.task.dependencies:
                assert s.earliest_start_date == s.task.start_date
    assert _by_id(calculate_schedule(chain))["A"].earliest_start == 0


def test_diamond_slack(diamond):
    s = _by_id(calculate_schedule(diamond, anchor=DAY0))
    assert [s[t].slack for t in "ABCD"] == [0, 0, 2, 0]
    assert s["C"].earliest_finish == 5
    assert s["C"].latest_start == 5
    assert s["C"].latest_finish == 7
    assert compute_critical_path(diamond) == ["A", "B", "D"]


def test_dependent_ignores_declared_gap():
    tasks = [
        Task("A", "a", day(1), day(5)),
        Task("B", "b", day(8), day(10), dependencies=["A"]),
    ]
    s = _by_id(calculate_schedule(tasks, anchor=DAY0))
    assert s["B"].earliest_start == 6
    assert s["B"].earliest_finish == 8
    assert s["A"].slack == 0
    assert compute_critical_path(tasks) == ["A", "B"]


def test_predecessor_pushes_successor():
    # B declared to start before A finishes; the forward pass pushes it
    tasks = [
        Task("A", "a", day(1), day(5)),
        Task("B", "b", day(3), day(4), dependencies=["A"]),
    ]
    s = _by_id(calculate_schedule(tasks, anchor=DAY0))
    assert s["B"].earliest_start == 6
    assert s["B"].earliest_finish == 7


def test_milestone_has_zero_duration(nested):
    s = _by_id(calculate_schedule(nested, anchor=DAY0))
    q = s["Q"]
    assert q.duration == 0
    assert q.earliest_start == q.earliest_finish == 9
    assert q.slack == 0
    assert s["P2"].slack == 0
    assert s["P1"].slack == 0


def test_milestone_successor_may_start_same_day():
    tasks = [
        Task("M", "gate", day(3), day(3), is_milestone=True),
        Task("B", "b", day(3), day(5), dependencies=["M"]),
    ]
    s = _by_id(calculate_schedule(tasks, anchor=DAY0))
    assert s["B"].earliest_start == 3
    assert s["M"].slack == 0


def test_placeholders_are_ignored():
    tasks = [
        Task("A", "a", day(1), day(2)),
        Task("X", "placeholder", dependencies=["A"]),
    ]
    assert [s.task.id for s in calculate_schedule(tasks)] == ["A"]
    assert compute_slack(tasks, "X") is None


def test_empty_graph():
    assert calculate_schedule([]) == []
    assert compute_critical_path([]) == []


def test_cycle_returns_empty(caplog):
    tasks = [
        Task("A", "a", day(1), day(2), dependencies=["B"]),
        Task("B", "b", day(3), day(4), dependencies=["A"]),
    ]
    with caplog.at_level(logging.ERROR, logger="ganttkit"):
        assert calculate_schedule(tasks) == []
    assert "Circular dependency" in caplog.text
    assert compute_critical_path(tasks) == []
    assert compute_slack(tasks, "A") is None


class TestDisconnected:
    @pytest.fixture
    def tasks(self, chain):
        return [*chain, Task("X", "Side quest", day(1), day(3))]

    def test_per_component_union(self, tasks):
        assert compute_critical_path(tasks, anchor=DAY0) == ["A", "X", "B"]

    def test_project_horizon(self, tasks):
        s = _by_id(calculate_schedule(tasks, anchor=DAY0, per_component=False))
        assert s["X"].slack == 7
        assert compute_critical_path(tasks, per_component=False) == ["A", "B"]

    def test_chains(self, tasks):
        chains = critical_chains(calculate_schedule(tasks))
        assert [[s.task.id for s in c] for c in chains] == [["A", "B"], ["X"]]


def test_critical_path_members_have_zero_slack(diamond):
    crit = get_critical_path(calculate_schedule(diamond))
    assert all(s.slack == 0 for s in crit)
    assert [s.earliest_start for s in crit] == sorted(s.earliest_start for s in crit)


def test_compute_slack(diamond):
    assert compute_slack(diamond, "C") == 2
    assert compute_slack(diamond, "B") == 0
    with pytest.raises(TaskNotFoundError):
        compute_slack(diamond, "Z")


def test_is_on_critical_path(diamond):
    assert is_on_critical_path(diamond, "B")
    assert not is_on_critical_path(diamond, "C")


def test_task_duration():
    assert task_duration(Task("A", "a", day(1), day(5))) == 5
    assert task_duration(Task("M", "m", day(1), day(1), is_milestone=True)) == 0
    assert task_duration(Task("X", "x")) is None


@pytest.mark.parametrize("fixture", ["chain", "diamond", "nested"])
def test_critical_chains_run_from_root_to_sink(fixture, request):
    tasks = request.getfixturevalue(fixture)
    graph = build_graph(tasks, dated_only=True)
    for chain in critical_chains(calculate_schedule(tasks)):
        assert graph.predecessors_of[chain[0].task.id] == []
        assert graph.successors_of[chain[-1].task.id] == []


def test_late_declared_dependents_stay_on_one_chain():
    tasks = [
        Task("A", "a", day(1), day(5)),
        Task("B", "b", day(8), day(10), dependencies=["A"]),
        Task("C", "c", day(20), day(21), dependencies=["B"]),
    ]
    chains = critical_chains(calculate_schedule(tasks))
    assert [[s.task.id for s in c] for c in chains] == [["A", "B", "C"]]
