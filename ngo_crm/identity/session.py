"""
Name: Session

Responsibilities:
  - Hold the single signed-in user of the running process
  - Expose the current role for permission checks

Collaborators:
  - identity/identity_service.py: starts/ends the session, persists its shadow
  - container.py: creates one Session per process and passes it by reference

Notes:
  - Explicit object instead of a module global; tests build their own
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..domain.entities import Role, User


@dataclass
class Session:
    """R: Current session state. user is None when signed out."""

    user: Optional[User] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def role(self) -> Optional[Role]:
        return self.user.role if self.user else None

    def start(self, user: User) -> None:
        self.user = user

    def end(self) -> None:
        self.user = None
