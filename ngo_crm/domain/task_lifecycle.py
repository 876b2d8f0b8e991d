"""
Name: Task Lifecycle Rules

Responsibilities:
  - Define the status state machine (closed is terminal)
  - Filter task sequences by search term / status / priority / type
  - Compute task statistics (totals, urgent, overdue)

Collaborators:
  - domain.entities: Task, TaskStatus, TaskPriority, TaskType
  - application/task_service.py: applies these rules to the task repository

Constraints:
  - Pure functions: the caller supplies "today"
  - Filtering is stable (input order preserved, no re-sorting)
  - Statistics are recomputed on every call

Notes:
  - Any open status may move to any status, including itself.
  - Leaving "closed" is rejected.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Iterable, Mapping

from .entities import Task, TaskPriority, TaskStatus

ALL = "all"

_FILTER_KEYS = {
    "search_term": "search_term",
    "searchTerm": "search_term",
    "status": "status",
    "priority": "priority",
    "type": "type",
}

TERMINAL_STATUSES = frozenset({TaskStatus.CLOSED})


def is_terminal(status: TaskStatus) -> bool:
    return status in TERMINAL_STATUSES


def can_transition(current: TaskStatus, target: TaskStatus) -> bool:
    """R: True when a task in `current` may move to `target`."""
    return not is_terminal(current)


def allowed_targets(current: TaskStatus) -> list[TaskStatus]:
    """Statuses offered by the status selector, in declaration order."""
    return [s for s in TaskStatus if can_transition(current, s)]


# ---------------------------------------------------------------------------
# Filtering
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class TaskFilter:
    """
    R: Independently optional criteria, combined with AND.

    "all" (or empty) disables status/priority/type; an empty search term
    disables the text match. The term is matched as given (no trimming).
    """

    search_term: str = ""
    status: str = ALL
    priority: str = ALL
    type: str = ALL

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "TaskFilter":
        """
        R: Build criteria from a mapping (searchTerm or search_term accepted).

        Raises:
            ValueError: On keys that are not filter criteria
        """
        values: dict[str, str] = {}
        for key, value in data.items():
            field_name = _FILTER_KEYS.get(key)
            if field_name is None:
                raise ValueError(f"Unknown filter criterion: {key}")
            if isinstance(value, Enum):
                value = value.value
            values[field_name] = "" if value is None else str(value)
        return cls(**values)

    @staticmethod
    def _active(value: str | None) -> bool:
        return bool(value) and value != ALL

    def matches(self, task: Task) -> bool:
        term = (self.search_term or "").lower()
        if term and not (
            term in task.title.lower()
            or term in task.description.lower()
            or term in task.id.lower()
        ):
            return False
        if self._active(self.status) and task.status.value != self.status:
            return False
        if self._active(self.priority) and task.priority.value != self.priority:
            return False
        if self._active(self.type) and task.type.value != self.type:
            return False
        return True


def filter_tasks(
    tasks: Iterable[Task], criteria: TaskFilter | Mapping[str, Any]
) -> list[Task]:
    if not isinstance(criteria, TaskFilter):
        criteria = TaskFilter.from_mapping(criteria)
    return [task for task in tasks if criteria.matches(task)]


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class TaskStats:
    total: int
    pending: int
    in_progress: int
    resolved: int
    urgent: int
    overdue: int

    def to_dict(self) -> dict[str, int]:
        return {
            "total": self.total,
            "pending": self.pending,
            "inProgress": self.in_progress,
            "resolved": self.resolved,
            "urgent": self.urgent,
            "overdue": self.overdue,
        }


def compute_stats(tasks: Iterable[Task], today: date) -> TaskStats:
    """R: Simple tallies; overdue = due before today and not closed."""
    items = list(tasks)
    return TaskStats(
        total=len(items),
        pending=sum(1 for t in items if t.status == TaskStatus.PENDING),
        in_progress=sum(1 for t in items if t.status == TaskStatus.IN_PROGRESS),
        resolved=sum(1 for t in items if t.status == TaskStatus.RESOLVED),
        urgent=sum(1 for t in items if t.priority == TaskPriority.URGENT),
        overdue=sum(1 for t in items if t.is_overdue(today)),
    )


def next_reference(existing_ids: Iterable[str], prefix: str = "FB-") -> str:
    """
    R: Next human-readable reference ("FB-001", "FB-002", ...).

    Non-numeric suffixes are ignored; numbering continues after the highest.
    """
    highest = 0
    for task_id in existing_ids:
        if not task_id.startswith(prefix):
            continue
        suffix = task_id[len(prefix):]
        if suffix.isdigit():
            highest = max(highest, int(suffix))
    return f"{prefix}{highest + 1:03d}"


def parse_status(value: TaskStatus | str) -> TaskStatus:
    """Raises ValueError for unknown statuses."""
    return value if isinstance(value, TaskStatus) else TaskStatus(value)

