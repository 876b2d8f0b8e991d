"""
============================================================
Class: InMemoryTaskRepository

Responsibilities:
  - Hold the feedback task collection in memory
  - Implement the TaskRepository contract
  - Preserve insertion order for listings (filters rely on it)

Collaborators:
  - domain.entities.Task
  - domain.repositories.TaskRepository

Constraints / Notes:
  - Thread-safe: access guarded by a Lock
  - Defensive copies: Task is mutable, callers never share stored instances
============================================================
"""

from __future__ import annotations

from threading import Lock
from typing import Dict, Iterable, List, Optional

from ....domain.entities import Task
from ....domain.repositories import TaskRepository


class InMemoryTaskRepository(TaskRepository):
    """Task collection held in an insertion-ordered dict (id -> Task)."""

    def __init__(self, tasks: Iterable[Task] = ()) -> None:
        self._lock = Lock()
        self._tasks: Dict[str, Task] = {}
        for task in tasks:
            self._tasks[task.id] = task.copy()

    def list_tasks(self) -> List[Task]:
        with self._lock:
            return [t.copy() for t in self._tasks.values()]

    def get_task(self, task_id: str) -> Optional[Task]:
        with self._lock:
            task = self._tasks.get(task_id)
            return task.copy() if task else None

    def add_task(self, task: Task) -> None:
        with self._lock:
            self._tasks[task.id] = task.copy()

    def save_task(self, task: Task) -> bool:
        """R: Replace in place so the task keeps its position."""
        with self._lock:
            if task.id not in self._tasks:
                return False
            self._tasks[task.id] = task.copy()
            return True

    def delete_task(self, task_id: str) -> bool:
        with self._lock:
            return self._tasks.pop(task_id, None) is not None

    # -------------------------------------------------------------------------
    # Testing helpers
    # -------------------------------------------------------------------------
    def clear(self) -> None:
        with self._lock:
            self._tasks.clear()
