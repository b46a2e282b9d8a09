"""Task model, segments and timeline geometry."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import date


class TaskStatus(enum.StrEnum):
    TODO = "todo"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


def _parse_date(value: str | None) -> date | None:
    return date.fromisoformat(value) if value else None


def _format_date(value: date | None) -> str | None:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class TaskSegment:
    """One active range of a split task. Both ends are inclusive."""

    start_date: date
    end_date: date

    @property
    def days(self) -> int:
        return (self.end_date - self.start_date).days + 1

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

    def to_dict(self) -> dict:
        return {
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
        }

    @classmethod
    def from_dict(cls, d: dict) -> TaskSegment:
        return cls(
            start_date=date.fromisoformat(d["start_date"]),
            end_date=date.fromisoformat(d["end_date"]),
        )


@dataclass
class TimelineConfig:
    """Pixel geometry of the host timeline, used for drag previews."""

    timeline_start: date
    day_width: float = 40.0
    zoom: float = 1.0
    row_height: float = 48.0
    header_height: float = 60.0

    @property
    def scaled_day_width(self) -> float:
        return self.day_width * self.zoom

    def to_dict(self) -> dict:
        return {
            "timeline_start": self.timeline_start.isoformat(),
            "day_width": self.day_width,
            "zoom": self.zoom,
            "row_height": self.row_height,
            "header_height": self.header_height,
        }

    @classmethod
    def from_dict(cls, d: dict) -> TimelineConfig:
        return cls(
            timeline_start=date.fromisoformat(d["timeline_start"]),
            day_width=d.get("day_width", 40.0),
            zoom=d.get("zoom", 1.0),
            row_height=d.get("row_height", 48.0),
            header_height=d.get("header_height", 60.0),
        )


@dataclass
class Task:
    """A Gantt task. Subtask containment and dependencies are independent."""

    id: str
    name: str
    start_date: date | None = None
    end_date: date | None = None
    progress: int = 0
    status: TaskStatus = TaskStatus.TODO
    dependencies: list[str] = field(default_factory=list)  # predecessor ids, finish-to-start
    subtasks: list[Task] = field(default_factory=list)
    is_expanded: bool = True
    is_milestone: bool = False
    segments: list[TaskSegment] | None = None  # when set, start/end are the envelope
    color: str | None = None

    @property
    def has_dates(self) -> bool:
        return self.start_date is not None and self.end_date is not None

    @property
    def active_days(self) -> int:
        """Days of actual work: segment lengths summed, or the inclusive span."""
        if self.segments:
            return sum(seg.days for seg in self.segments)
        if not self.has_dates:
            return 0
        return (self.end_date - self.start_date).days + 1

    def to_dict(self) -> dict:
        d = {
            "id": self.id,
            "name": self.name,
            "start_date": _format_date(self.start_date),
            "end_date": _format_date(self.end_date),
            "progress": self.progress,
            "status": self.status.value,
            "dependencies": list(self.dependencies),
            "subtasks": [t.to_dict() for t in self.subtasks],
            "is_expanded": self.is_expanded,
            "is_milestone": self.is_milestone,
        }
        if self.segments is not None:
            d["segments"] = [seg.to_dict() for seg in self.segments]
        if self.color is not None:
            d["color"] = self.color
        return d

    @classmethod
    def from_dict(cls, d: dict) -> Task:
        segments = d.get("segments")
        return cls(
            id=d["id"],
            name=d["name"],
            start_date=_parse_date(d.get("start_date")),
            end_date=_parse_date(d.get("end_date")),
            progress=d.get("progress", 0),
            status=TaskStatus(d.get("status", "todo")),
            dependencies=list(d.get("dependencies", [])),
            subtasks=[cls.from_dict(s) for s in d.get("subtasks", [])],
            is_expanded=d.get("is_expanded", True),
            is_milestone=d.get("is_milestone", False),
            segments=[TaskSegment.from_dict(s) for s in segments] if segments is not None else None,
            color=d.get("color"),
        )


@dataclass(frozen=True)
class FlatTask:
    """A visible row of the flattened task tree."""

    task: Task
    level: int
    has_children: bool
    row_index: int
    parent_id: str | None = None

    @property
    def id(self) -> str:
        return self.task.id
