"""
Name: Domain Repository Interfaces (Protocols)

Responsibilities:
  - Define persistence contracts for the roster, the task collection and the
    persisted session slot (ports)
  - Keep identity/application independent from storage details

Collaborators:
  - domain.entities: User, Task
  - infrastructure.repositories.in_memory: roster/task implementations
  - infrastructure.session_store: session slot implementations

Constraints:
  - Pure interfaces only: no side effects, no infrastructure imports
  - Mutations on unknown ids report False instead of raising

Notes:
  - We use typing.Protocol for structural subtyping ("duck typing")
  - Listing methods return new lists in insertion order
"""

from typing import Any, List, Optional, Protocol

from .entities import Task, User


class UserRepository(Protocol):
    """R: Roster persistence."""

    def list_users(self) -> List[User]:
        """R: All users in roster order."""
        ...

    def get_user(self, user_id: str) -> Optional[User]: ...

    def get_user_by_email(self, email: str) -> Optional[User]:
        """R: Case-insensitive lookup by email."""
        ...

    def add_user(self, user: User) -> None: ...

    def replace_user(self, user: User) -> bool:
        """R: Replace the entry with the same id; False if absent."""
        ...

    def delete_user(self, user_id: str) -> Optional[User]:
        """R: Remove and return the entry; None if absent."""
        ...


class TaskRepository(Protocol):
    """R: Task collection persistence."""

    def list_tasks(self) -> List[Task]: ...

    def get_task(self, task_id: str) -> Optional[Task]: ...

    def add_task(self, task: Task) -> None: ...

    def save_task(self, task: Task) -> bool:
        """R: Replace the task with the same id; False if absent."""
        ...

    def delete_task(self, task_id: str) -> bool: ...


class SessionStore(Protocol):
    """R: Single named key-value slot holding the signed-in user snapshot."""

    def load(self) -> Optional[dict[str, Any]]: ...

    def save(self, snapshot: dict[str, Any]) -> None: ...

    def clear(self) -> None: ...
