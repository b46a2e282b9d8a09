from datetime import date, timedelta

import pytest

from ganttkit.logger import reset_logger
from ganttkit.models import Task

DAY0 = date(2026, 3, 1)


def day(n: int) -> date:
    """Calendar date of project day *n* (day 0 is DAY0)."""
    return DAY0 + timedelta(days=n)


@pytest.fixture(autouse=True)
def clean_logger():
    reset_logger()
    yield
    reset_logger()


@pytest.fixture
def chain() -> list[Task]:
    """A[day1-day5] -> B[day6-day10]."""
    return [
        Task("A", "Design", day(1), day(5)),
        Task("B", "Build", day(6), day(10), dependencies=["A"]),
    ]


@pytest.fixture
def diamond() -> list[Task]:
    """A -> B, A -> C, B -> D, C -> D."""
    return [
        Task("A", "Kickoff", day(1), day(2)),
        Task("B", "Backend", day(3), day(7), dependencies=["A"]),
        Task("C", "Frontend", day(3), day(5), dependencies=["A"]),
        Task("D", "Release", day(8), day(9), dependencies=["B", "C"]),
    ]


@pytest.fixture
def nested() -> list[Task]:
    """A phase with subtasks; a dependency crosses the hierarchy."""
    return [
        Task(
            "P",
            "Phase 1",
            day(1),
            day(10),
            subtasks=[
                Task("P1", "Spec", day(1), day(3)),
                Task(
                    "P2",
                    "Prototype",
                    day(4),
                    day(8),
                    dependencies=["P1"],
                    is_expanded=False,
                    subtasks=[Task("P2a", "Spike", day(4), day(5))],
                ),
            ],
        ),
        Task("Q", "Launch", day(11), day(11), is_milestone=True, dependencies=["P2"]),
    ]
