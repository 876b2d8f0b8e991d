"""
============================================================
Class: InMemoryUserRepository

Responsibilities:
  - Hold the roster in memory (seeded at startup, local dev, tests)
  - Implement the UserRepository contract
  - Keep roster order stable (insertion order)

Collaborators:
  - domain.entities.User
  - domain.repositories.UserRepository

Constraints / Notes:
  - Thread-safe: access guarded by a Lock
  - Pure repository: no permission or validation decisions
  - Users are frozen dataclasses, so no defensive copies are needed
============================================================
"""

from __future__ import annotations

from threading import Lock
from typing import Dict, Iterable, List, Optional

from ....domain.entities import User
from ....domain.repositories import UserRepository


class InMemoryUserRepository(UserRepository):
    """Roster held in an insertion-ordered dict (id -> User)."""

    def __init__(self, users: Iterable[User] = ()) -> None:
        self._lock = Lock()
        self._users: Dict[str, User] = {}
        for user in users:
            self._users[user.id] = user

    @staticmethod
    def _normalize_email(email: str) -> str:
        """R: Single normalization rule for email lookups."""
        return (email or "").strip().lower()

    def list_users(self) -> List[User]:
        with self._lock:
            return list(self._users.values())

    def get_user(self, user_id: str) -> Optional[User]:
        with self._lock:
            return self._users.get(user_id)

    def get_user_by_email(self, email: str) -> Optional[User]:
        wanted = self._normalize_email(email)
        if not wanted:
            return None
        with self._lock:
            for user in self._users.values():
                if self._normalize_email(user.email) == wanted:
                    return user
        return None

    def add_user(self, user: User) -> None:
        with self._lock:
            self._users[user.id] = user

    def replace_user(self, user: User) -> bool:
        with self._lock:
            if user.id not in self._users:
                return False
            self._users[user.id] = user
            return True

    def delete_user(self, user_id: str) -> Optional[User]:
        with self._lock:
            return self._users.pop(user_id, None)

    # -------------------------------------------------------------------------
    # Testing helpers
    # -------------------------------------------------------------------------
    def clear(self) -> None:
        with self._lock:
            self._users.clear()
