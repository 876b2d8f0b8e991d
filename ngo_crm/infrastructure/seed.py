"""
Name: Roster & Task Seed Loader

Responsibilities:
  - Provide the initial roster and task collection at startup
  - Load a JSON seed file ({"users": [...], "tasks": [...]}) when configured
  - Fall back to the built-in demo data otherwise

Collaborators:
  - domain.entities: User.from_snapshot / Task.from_snapshot
  - container.py: seeds the in-memory repositories
  - crosscutting.exceptions.SeedError

Constraints:
  - Seed records use the snapshot shape (camelCase dates accepted)
  - Duplicate user ids/emails or task ids are rejected
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List

from ..crosscutting.exceptions import SeedError
from ..crosscutting.logger import logger
from ..domain.entities import Task, User

DEMO_USERS: list[dict[str, Any]] = [
    {
        "id": "1",
        "email": "admin@ngo.org",
        "name": "John Admin",
        "role": "admin",
        "department": "Management",
        "joinedAt": "2023-01-15",
    },
    {
        "id": "2",
        "email": "focal@ngo.org",
        "name": "Sarah Focal",
        "role": "focal_person",
        "department": "Field Operations",
        "joinedAt": "2023-02-20",
    },
    {
        "id": "3",
        "email": "viewer@ngo.org",
        "name": "Mike Viewer",
        "role": "viewer",
        "department": "Monitoring",
        "joinedAt": "2023-03-10",
    },
]

DEMO_TASKS: list[dict[str, Any]] = [
    {
        "id": "FB-001",
        "title": "Teacher attendance issue in rural school",
        "description": "Students report that their teacher is frequently absent.",
        "status": "pending",
        "priority": "high",
        "type": "programmatic",
        "assignee": "Sarah Focal",
        "reporter": "Anonymous",
        "createdAt": "2024-01-15",
        "updatedAt": "2024-01-15",
        "dueDate": "2024-01-20",
        "project": "Education Support Program",
        "location": "Rural District A",
    },
    {
        "id": "FB-002",
        "title": "Inappropriate behavior by project staff",
        "description": "Confidential report about staff misconduct.",
        "status": "in_progress",
        "priority": "urgent",
        "type": "sensitive",
        "assignee": "John Admin",
        "reporter": "Protected Identity",
        "createdAt": "2024-01-14",
        "updatedAt": "2024-01-16",
        "dueDate": "2024-01-18",
        "project": "Women Empowerment Program",
        "location": "Urban District B",
    },
    {
        "id": "FB-003",
        "title": "Request for additional water pump",
        "description": "Community requests a pump outside the current project scope.",
        "status": "resolved",
        "priority": "medium",
        "type": "out_of_scope",
        "assignee": "Sarah Focal",
        "reporter": "Community Leader",
        "createdAt": "2024-01-10",
        "updatedAt": "2024-01-17",
        "dueDate": "2024-01-25",
        "project": "Water & Sanitation Project",
        "location": "Central District",
    },
]


@dataclass
class Seed:
    users: List[User] = field(default_factory=list)
    tasks: List[Task] = field(default_factory=list)


def _build(users_raw: Any, tasks_raw: Any) -> Seed:
    if not isinstance(users_raw, list) or not isinstance(tasks_raw, list):
        raise SeedError("Seed must contain 'users' and 'tasks' lists")

    try:
        users = [User.from_snapshot(u) for u in users_raw]
        tasks = [Task.from_snapshot(t) for t in tasks_raw]
    except (KeyError, TypeError, ValueError) as exc:
        raise SeedError(f"Invalid seed record: {exc}", original_error=exc) from exc

    if len({u.id for u in users}) != len(users):
        raise SeedError("Duplicate user id in seed")
    if len({u.email.strip().lower() for u in users}) != len(users):
        raise SeedError("Duplicate user email in seed")
    if len({t.id for t in tasks}) != len(tasks):
        raise SeedError("Duplicate task id in seed")

    return Seed(users=users, tasks=tasks)


def default_seed() -> Seed:
    """R: Built-in demo roster (one user per role) and demo tasks."""
    return _build(DEMO_USERS, DEMO_TASKS)


def load_seed(path: str | Path) -> Seed:
    """
    R: Load a seed JSON file.

    Raises:
        SeedError: If the file is missing, unreadable or malformed
    """
    seed_path = Path(path)
    try:
        data = json.loads(seed_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise SeedError(f"Cannot load seed {seed_path}", original_error=exc) from exc

    if not isinstance(data, dict):
        raise SeedError("Seed root must be an object")

    seed = _build(data.get("users", []), data.get("tasks", []))
    logger.info(
        "Seed loaded",
        extra={"path": str(seed_path), "users": len(seed.users), "tasks": len(seed.tasks)},
    )
    return seed
