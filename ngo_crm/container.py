"""
Name: Dependency Injection Container

Responsibilities:
  - Wire repositories, the session slot and both services
  - Seed the roster and task collection at startup
  - Restore the persisted session
  - Register the user-deletion listener on the lifecycle manager

Collaborators:
  - crosscutting.config: Settings
  - infrastructure: in-memory repositories, session slot backends, seed loader
  - identity.IdentityService, application.TaskLifecycleManager

Constraints:
  - Manual DI (no container library)
  - One Session per Container; nothing is a module-level singleton except
    the cached default container

Notes:
  - Tests build Containers directly with their own settings / clock / store
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from functools import lru_cache
from typing import Callable, Optional

from .application.task_service import TaskLifecycleManager
from .crosscutting.config import Settings, get_settings
from .crosscutting.logger import logger
from .domain.repositories import SessionStore
from .identity.identity_service import IdentityService
from .identity.session import Session
from .infrastructure.repositories import InMemoryTaskRepository, InMemoryUserRepository
from .infrastructure.seed import Seed, default_seed, load_seed
from .infrastructure.session_store import build_session_store


@dataclass
class Container:
    """R: Wired application graph for one process."""

    settings: Settings
    session: Session
    users: InMemoryUserRepository
    tasks: InMemoryTaskRepository
    identity: IdentityService
    lifecycle: TaskLifecycleManager


def build_container(
    settings: Optional[Settings] = None,
    *,
    seed: Optional[Seed] = None,
    session_store: Optional[SessionStore] = None,
    today: Callable[[], date] = date.today,
    restore_session: bool = True,
) -> Container:
    """
    R: Composition root.

    Seed precedence: explicit seed > settings.seed_path > built-in demo.
    """
    settings = settings or get_settings()

    if seed is None:
        seed = load_seed(settings.seed_path) if settings.seed_path else default_seed()

    users = InMemoryUserRepository(seed.users)
    tasks = InMemoryTaskRepository(seed.tasks)
    session = Session()
    store = session_store or build_session_store(settings)

    identity = IdentityService(users, session, store, today=today)
    lifecycle = TaskLifecycleManager(
        tasks, today=today, default_due_days=settings.default_due_days
    )
    identity.on_user_deleted(lifecycle.release_assignments)

    if restore_session:
        identity.restore()

    logger.info(
        "Container ready",
        extra={
            "users": len(seed.users),
            "tasks": len(seed.tasks),
            "session_backend": settings.session_backend,
            "signed_in": session.is_authenticated,
        },
    )
    return Container(
        settings=settings,
        session=session,
        users=users,
        tasks=tasks,
        identity=identity,
        lifecycle=lifecycle,
    )


@lru_cache(maxsize=1)
def get_container() -> Container:
    """R: Process-wide default container (cached)."""
    return build_container()
