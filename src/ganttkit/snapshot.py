"""JSON snapshot files for the command line tool."""

from __future__ import annotations

import json
from pathlib import Path

from ganttkit.errors import SnapshotError
from ganttkit.models import Task, TimelineConfig

DEFAULT_SNAPSHOT_FILE = "gantt.json"


class Store:
    """Reads and writes a task snapshot (JSON file)."""

    def __init__(self, path: str | Path = DEFAULT_SNAPSHOT_FILE):
        self.path = Path(path)

    def load(self) -> tuple[TimelineConfig | None, list[Task]]:
        """Return (config_or_None, root tasks)."""
        if not self.path.exists():
            return None, []

        try:
            raw = json.loads(self.path.read_text())
        except json.JSONDecodeError as e:
            raise SnapshotError(f"{self.path} is not valid JSON: {e}") from e

        # Either {"config": {...}, "tasks": [...]} or a bare list of tasks
        if isinstance(raw, list):
            raw = {"tasks": raw}
        if not isinstance(raw, dict) or not isinstance(raw.get("tasks", []), list):
            raise SnapshotError(f"{self.path}: expected a list of tasks")

        config = None
        try:
            if raw.get("config"):
                config = TimelineConfig.from_dict(raw["config"])
        except (KeyError, TypeError, ValueError) as e:
            raise SnapshotError(f"{self.path}: invalid config: {e!r}") from e

        try:
            tasks = [Task.from_dict(t) for t in raw.get("tasks", [])]
        except (KeyError, TypeError, ValueError) as e:
            raise SnapshotError(f"{self.path}: invalid task entry: {e!r}") from e
        return config, tasks

    def save(self, config: TimelineConfig | None, tasks: list[Task]) -> None:
        """Write config + tasks to disk."""
        raw: dict = {}
        if config is not None:
            raw["config"] = config.to_dict()
        raw["tasks"] = [t.to_dict() for t in tasks]
        self.path.write_text(json.dumps(raw, indent=4))
