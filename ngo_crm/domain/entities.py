"""
Name: Domain Entities

Responsibilities:
  - Define core entities of the CRM (User, Task) and their enums
  - Provide JSON snapshot helpers for the persisted session slot and seeds
  - Keep minimal behavior that protects simple invariants

Collaborators:
  - domain/permissions.py: consumes Role
  - domain/task_lifecycle.py: consumes TaskStatus and Task
  - domain/repositories.py: persistence contracts over these entities

Constraints:
  - No dependencies on infrastructure or frameworks
  - Dates are calendar dates (ISO-8601 in snapshots)
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from enum import Enum
from typing import Any, Optional

UNASSIGNED = "Unassigned"
ANONYMOUS_REPORTER = "Anonymous"


class Role(str, Enum):
    """R: Roles of the dashboard; the sole input of permission checks."""

    ADMIN = "admin"
    FOCAL_PERSON = "focal_person"
    VIEWER = "viewer"


class TaskStatus(str, Enum):
    """R: Lifecycle status of a feedback task."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class TaskType(str, Enum):
    """R: Feedback classification (immutable after creation)."""

    PROGRAMMATIC = "programmatic"
    SENSITIVE = "sensitive"
    OUT_OF_SCOPE = "out_of_scope"


def _parse_date(value: Any) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


@dataclass(frozen=True)
class User:
    """
    R: Roster entry.

    Attributes:
        id: Opaque unique identifier
        email: Unique login key
        name: Display name
        role: Exactly one Role
        joined_at: Set on creation, never updated
        avatar: Optional avatar reference
        department: Optional department label
    """

    id: str
    email: str
    name: str
    role: Role
    joined_at: date
    avatar: Optional[str] = None
    department: Optional[str] = None

    def to_snapshot(self) -> dict[str, Any]:
        """R: JSON-serializable snapshot (session slot / seeds)."""
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "role": self.role.value,
            "avatar": self.avatar,
            "department": self.department,
            "joinedAt": self.joined_at.isoformat(),
        }

    @classmethod
    def from_snapshot(cls, data: dict[str, Any]) -> "User":
        """
        R: Build a User from a snapshot.

        Accepts both joinedAt and joined_at keys.

        Raises:
            KeyError / ValueError: If required fields are missing or invalid
        """
        joined = data.get("joinedAt", data.get("joined_at"))
        return cls(
            id=str(data["id"]),
            email=str(data["email"]),
            name=str(data["name"]),
            role=Role(data["role"]),
            joined_at=_parse_date(joined),
            avatar=data.get("avatar"),
            department=data.get("department"),
        )


@dataclass
class Task:
    """
    R: Feedback record tracked through the resolution lifecycle.

    Mutable fields are status, assignee and updated_at; everything else is
    fixed at creation.
    """

    id: str
    title: str
    description: str
    status: TaskStatus
    priority: TaskPriority
    type: TaskType
    assignee: str
    reporter: str
    created_at: date
    updated_at: date
    due_date: date
    project: str
    location: str
    age: Optional[int] = None
    gender: Optional[str] = None

    @property
    def is_closed(self) -> bool:
        return self.status == TaskStatus.CLOSED

    def is_overdue(self, today: date) -> bool:
        """True if the due date is strictly before today and the task is open."""
        return self.due_date < today and not self.is_closed

    def touch(self, today: date) -> None:
        """R: Stamp updated_at, never earlier than created_at."""
        self.updated_at = max(today, self.created_at)

    def copy(self) -> "Task":
        return replace(self)

    def to_snapshot(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
            "priority": self.priority.value,
            "type": self.type.value,
            "assignee": self.assignee,
            "reporter": self.reporter,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
            "dueDate": self.due_date.isoformat(),
            "project": self.project,
            "location": self.location,
            "age": self.age,
            "gender": self.gender,
        }

    @classmethod
    def from_snapshot(cls, data: dict[str, Any]) -> "Task":
        created = _parse_date(data.get("createdAt", data.get("created_at")))
        updated = data.get("updatedAt", data.get("updated_at"))
        return cls(
            id=str(data["id"]),
            title=str(data["title"]),
            description=str(data.get("description", "")),
            status=TaskStatus(data.get("status", TaskStatus.PENDING.value)),
            priority=TaskPriority(data["priority"]),
            type=TaskType(data["type"]),
            assignee=str(data.get("assignee") or UNASSIGNED),
            reporter=str(data.get("reporter") or ANONYMOUS_REPORTER),
            created_at=created,
            updated_at=max(_parse_date(updated), created) if updated else created,
            due_date=_parse_date(data.get("dueDate", data.get("due_date"))),
            project=str(data.get("project", "")),
            location=str(data.get("location", "")),
            age=data.get("age"),
            gender=data.get("gender"),
        )
