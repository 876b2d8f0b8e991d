"""
Domain layer: entities, permission policy, lifecycle rules and repository
ports. No infrastructure imports.
"""

from .entities import (
    ANONYMOUS_REPORTER,
    UNASSIGNED,
    Role,
    Task,
    TaskPriority,
    TaskStatus,
    TaskType,
    User,
)
from .task_lifecycle import TaskFilter, TaskStats

__all__ = [
    "ANONYMOUS_REPORTER",
    "UNASSIGNED",
    "Role",
    "Task",
    "TaskFilter",
    "TaskPriority",
    "TaskStats",
    "TaskStatus",
    "TaskType",
    "User",
]
