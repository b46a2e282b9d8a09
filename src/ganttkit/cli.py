"""Typer CLI for inspecting and editing a Gantt snapshot."""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Annotated, NoReturn, Optional

import typer
from rich.console import Console
from rich.table import Table

from ganttkit.cascade import auto_schedule_dependents, preview_from_config, shift_task
from ganttkit.errors import CircularDependencyError, GanttError, TaskNotFoundError
from ganttkit.graph import add_dependency, remove_dependency, validate_dependencies, validate_dependency
from ganttkit.hierarchy import flatten_tasks, get_parent_tasks, iter_tasks, replace_tasks, require_task
from ganttkit.logger import setup_logger
from ganttkit.models import Task, TimelineConfig
from ganttkit.scheduler import (
    ScheduledTask,
    calculate_schedule,
    critical_chains,
    get_critical_path,
)
from ganttkit.snapshot import DEFAULT_SNAPSHOT_FILE, Store
from ganttkit.split import split_problem, split_task
from ganttkit.timeline import (
    calculate_total_progress,
    get_earliest_start_date,
    get_latest_end_date,
    tasks_overlap,
)

app = typer.Typer(
    name="ganttkit",
    help="Dependency, critical path and cascade tools for Gantt task snapshots.",
    no_args_is_help=True,
)
console = Console()


@app.callback()
def main(
    ctx: typer.Context,
    file: Annotated[Path, typer.Option("--file", "-f", help="Snapshot file (JSON)")] = Path(DEFAULT_SNAPSHOT_FILE),
    verbose: Annotated[int, typer.Option("--verbose", "-v", count=True, help="Increase log verbosity")] = 0,
) -> None:
    setup_logger(verbose)
    ctx.obj = Store(file)


def _fail(message: str) -> NoReturn:
    console.print(f"[red]{message}[/red]")
    raise typer.Exit(1)


def _load(ctx: typer.Context) -> tuple[Store, TimelineConfig | None, list[Task]]:
    store: Store = ctx.obj
    try:
        config, tasks = store.load()
    except GanttError as e:
        _fail(f"Error: {e}")
    return store, config, tasks


def _fmt(d: date | None) -> str:
    return d.strftime("%b %d, %Y") if d else "-"


def _path(tasks: list[Task], task: Task) -> str:
    return " / ".join([*(p.name for p in get_parent_tasks(tasks, task.id)), task.name])


# ---------------------------------------------------------------------------
# Read-only commands
# ---------------------------------------------------------------------------


@app.command()
def rows(ctx: typer.Context) -> None:
    """Show the visible rows of the task tree (collapsed subtasks hidden)."""
    _, _, tasks = _load(ctx)
    if not tasks:
        console.print("No tasks found.")
        return

    table = Table(title="Rows")
    table.add_column("Row", justify="right")
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Start")
    table.add_column("End")
    table.add_column("Depends On")

    for row in flatten_tasks(tasks):
        t = row.task
        marker = ("- " if t.is_expanded else "+ ") if row.has_children else "  "
        table.add_row(
            str(row.row_index),
            t.id,
            "  " * row.level + marker + t.name,
            _fmt(t.start_date),
            _fmt(t.end_date),
            ", ".join(t.dependencies) or "-",
        )
    console.print(table)
    console.print(
        f"[dim]{_fmt(get_earliest_start_date(tasks))} - {_fmt(get_latest_end_date(tasks))}, "
        f"{calculate_total_progress(tasks)}% complete[/dim]"
    )


@app.command()
def schedule(
    ctx: typer.Context,
    anchor: Annotated[Optional[str], typer.Option(help="Day 0 of the schedule (YYYY-MM-DD)")] = None,
    project_horizon: Annotated[
        bool, typer.Option("--project-horizon", help="Measure slack against the whole project end")
    ] = False,
) -> None:
    """Show earliest/latest dates and slack for every dated task."""
    _, _, tasks = _load(ctx)
    anchor_date = None
    if anchor:
        try:
            anchor_date = date.fromisoformat(anchor)
        except ValueError:
            _fail(f"Invalid date format '{anchor}'. Use YYYY-MM-DD.")
    scheduled = calculate_schedule(tasks, anchor=anchor_date, per_component=not project_horizon)
    if not scheduled:
        console.print("No tasks to schedule.")
        return

    table = Table(title="Schedule")
    table.add_column("ID")
    table.add_column("Task Name")
    table.add_column("Days", justify="right")
    table.add_column("Earliest Start")
    table.add_column("Earliest Finish")
    table.add_column("Latest Start")
    table.add_column("Latest Finish")
    table.add_column("Slack", justify="right")
    table.add_column("Flags")

    for s in scheduled:
        flags = []
        if s.is_critical:
            flags.append("CRITICAL")
        if s.task.is_milestone:
            flags.append("MILESTONE")
        table.add_row(
            s.task.id,
            s.task.name,
            str(s.duration),
            _fmt(s.earliest_start_date),
            _fmt(s.earliest_finish_date),
            _fmt(s.latest_start_date),
            _fmt(s.latest_finish_date),
            str(s.slack),
            " | ".join(flags) or "-",
            style="bold yellow" if s.is_critical else None,
        )
    console.print(table)


@app.command("critical-path")
def critical_path(
    ctx: typer.Context,
    sort: Annotated[str, typer.Option(help="Sort order: chrono (default) or chain")] = "chrono",
) -> None:
    """Display only the tasks on the critical path."""
    _, _, tasks = _load(ctx)
    scheduled = calculate_schedule(tasks)
    crit = get_critical_path(scheduled)
    if not crit:
        console.print("No critical path found.")
        return

    if sort == "chain":
        chains = critical_chains(scheduled)
        for i, chain in enumerate(chains, 1):
            days = sum(s.duration for s in chain)
            console.print(f"\n[bold]Chain {i}[/bold]  ({days} days)")
            _print_critical_table(chain, title=None)
        console.print(f"\n[dim]{len(chains)} chain(s), {len(crit)} critical tasks total[/dim]")
    else:
        _print_critical_table(crit, title="Critical Path")


def _print_critical_table(tasks_list: list[ScheduledTask], title: str | None) -> None:
    table = Table(title=title)
    table.add_column("ID")
    table.add_column("Task Name")
    table.add_column("Days", justify="right")
    table.add_column("Start")
    table.add_column("End")

    for s in tasks_list:
        table.add_row(
            s.task.id,
            s.task.name,
            str(s.duration),
            _fmt(s.earliest_start_date),
            _fmt(s.earliest_finish_date),
        )
    console.print(table)


@app.command("check-dep")
def check_dep(
    ctx: typer.Context,
    from_id: Annotated[str, typer.Argument(help="Predecessor task ID")],
    to_id: Annotated[str, typer.Argument(help="Task that would depend on it")],
) -> None:
    """Check whether TO_ID may depend on FROM_ID without creating a cycle."""
    _, _, tasks = _load(ctx)
    try:
        circular = validate_dependency(tasks, from_id, to_id)
    except TaskNotFoundError as e:
        _fail(str(e))
    if circular:
        _fail(f"{from_id} -> {to_id} would create a circular dependency.")
    console.print(f"[green]{from_id} -> {to_id} is allowed.[/green]")


@app.command()
def validate(ctx: typer.Context) -> None:
    """Check dependency references and cycles, and list tasks overlapping a predecessor."""
    _, _, tasks = _load(ctx)
    try:
        validate_dependencies(tasks)
    except GanttError as e:
        _fail(f"Error: {e}")

    by_id = {t.id: t for t in iter_tasks(tasks)}
    overlaps = [
        (by_id[dep], t)
        for t in by_id.values()
        for dep in t.dependencies
        if not by_id[dep].is_milestone and tasks_overlap(by_id[dep], t)
    ]
    if not overlaps:
        console.print("[green]All dependencies are valid.[/green]")
        return

    table = Table(title="Tasks overlapping a predecessor")
    table.add_column("Task")
    table.add_column("Starts")
    table.add_column("Predecessor")
    table.add_column("Finishes")
    for pred, t in overlaps:
        table.add_row(_path(tasks, t), _fmt(t.start_date), _path(tasks, pred), _fmt(pred.end_date))
    console.print(table)


@app.command()
def preview(
    ctx: typer.Context,
    task_id: Annotated[str, typer.Argument(help="Task being dragged")],
    days: Annotated[int, typer.Argument(help="Days the task is dragged by")],
) -> None:
    """Show where dependents would land if TASK_ID moved by DAYS (nothing saved)."""
    _, config, tasks = _load(ctx)
    if config is None:
        start = get_earliest_start_date(tasks) or date.today()
        config = TimelineConfig(timeline_start=start)

    try:
        entries = preview_from_config(tasks, task_id, days, flatten_tasks(tasks), config)
    except TaskNotFoundError as e:
        _fail(str(e))
    if not entries:
        console.print("No dependents would move.")
        return

    table = Table(title=f"Preview: {task_id} {days:+d} day(s)")
    table.add_column("ID")
    table.add_column("Task Name")
    table.add_column("Row", justify="right")
    table.add_column("X", justify="right")
    table.add_column("Preview X", justify="right")
    table.add_column("Width", justify="right")
    table.add_column("Y", justify="right")
    for e in entries:
        table.add_row(
            e.task_id,
            e.task_name,
            str(e.row_index),
            f"{e.original_x:.0f}",
            f"{e.preview_x:.0f}",
            f"{e.width:.0f}",
            f"{e.y:.0f}",
        )
    console.print(table)


# ---------------------------------------------------------------------------
# Commands that write a new snapshot
# ---------------------------------------------------------------------------


@app.command()
def link(
    ctx: typer.Context,
    from_id: Annotated[str, typer.Argument(help="Predecessor task ID")],
    to_id: Annotated[str, typer.Argument(help="Task that will depend on it")],
) -> None:
    """Make TO_ID depend on FROM_ID (rejected if it would close a cycle)."""
    store, config, tasks = _load(ctx)
    try:
        tasks = add_dependency(tasks, from_id, to_id)
    except (CircularDependencyError, TaskNotFoundError) as e:
        _fail(f"Error: {e}")
    store.save(config, tasks)
    console.print(f"[green]{to_id} now depends on {from_id}[/green]")


@app.command()
def unlink(
    ctx: typer.Context,
    from_id: Annotated[str, typer.Argument(help="Predecessor task ID")],
    to_id: Annotated[str, typer.Argument(help="Dependent task ID")],
) -> None:
    """Remove the dependency of TO_ID on FROM_ID."""
    store, config, tasks = _load(ctx)
    try:
        tasks = remove_dependency(tasks, from_id, to_id)
    except TaskNotFoundError as e:
        _fail(f"Error: {e}")
    store.save(config, tasks)
    console.print(f"[green]{to_id} no longer depends on {from_id}[/green]")


@app.command()
def shift(
    ctx: typer.Context,
    task_id: Annotated[str, typer.Argument(help="Task to move")],
    days: Annotated[int, typer.Argument(help="Days to move by (use -- before negative values)")],
) -> None:
    """Move TASK_ID by DAYS and cascade the shift to every dependent."""
    store, config, tasks = _load(ctx)
    try:
        task = require_task(tasks, task_id)
    except TaskNotFoundError as e:
        _fail(str(e))
    if not task.has_dates:
        _fail(f"Task {task_id} has no dates to move.")

    tasks = replace_tasks(tasks, {task_id: shift_task(task, days)})
    tasks = auto_schedule_dependents(tasks, task_id, days)
    store.save(config, tasks)
    console.print(f"[green]Moved {task_id} by {days:+d} day(s)[/green]")


@app.command()
def split(
    ctx: typer.Context,
    task_id: Annotated[str, typer.Argument(help="Task to split")],
    split_date: Annotated[str, typer.Argument(help="First paused day (YYYY-MM-DD)")],
    gap: Annotated[int, typer.Option("--gap", "-g", help="Days of pause")] = 3,
) -> None:
    """Pause TASK_ID for GAP days starting at SPLIT_DATE."""
    store, config, tasks = _load(ctx)
    try:
        day = date.fromisoformat(split_date)
    except ValueError:
        _fail(f"Invalid date format '{split_date}'. Use YYYY-MM-DD.")
    try:
        task = require_task(tasks, task_id)
    except TaskNotFoundError as e:
        _fail(str(e))

    problem = split_problem(task, day, gap)
    if problem is not None:
        console.print(f"[yellow]Not split: {problem}[/yellow]")
        raise typer.Exit(1)

    tasks = split_task(tasks, task_id, day, gap)
    updated = require_task(tasks, task_id)
    segs = ", ".join(f"{_fmt(s.start_date)} - {_fmt(s.end_date)}" for s in updated.segments)
    store.save(config, tasks)
    console.print(f"[green]Split {task_id}: {segs}[/green]")


if __name__ == "__main__":
    app()
