"""
Name: Pytest Configuration and Shared Fixtures

Responsibilities:
  - Isolate Settings from local .env files
  - Provide a fixed "today" clock
  - Build seeded repositories and services per test

Collaborators:
  - pytest: Test framework
  - ngo_crm.infrastructure: in-memory repositories, session slot, demo seed
  - ngo_crm.identity / ngo_crm.application: services under test

Notes:
  - Fixtures are function-scoped for per-test isolation
"""

import os
from datetime import date

import pytest

from ngo_crm.crosscutting import config as app_config

app_config.Settings.model_config["env_file"] = None
os.environ.setdefault("APP_ENV", "test")

from ngo_crm.application.task_service import TaskLifecycleManager  # noqa: E402
from ngo_crm.domain.entities import (  # noqa: E402
    Role,
    Task,
    TaskPriority,
    TaskStatus,
    TaskType,
    User,
)
from ngo_crm.identity.identity_service import IdentityService  # noqa: E402
from ngo_crm.identity.session import Session  # noqa: E402
from ngo_crm.infrastructure.repositories import (  # noqa: E402
    InMemoryTaskRepository,
    InMemoryUserRepository,
)
from ngo_crm.infrastructure.seed import default_seed  # noqa: E402
from ngo_crm.infrastructure.session_store import InMemorySessionStore  # noqa: E402

TODAY = date(2024, 1, 19)


def pytest_configure(config) -> None:
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    app_config.get_settings.cache_clear()
    yield
    app_config.get_settings.cache_clear()


def make_task(
    task_id: str,
    *,
    status: TaskStatus = TaskStatus.PENDING,
    priority: TaskPriority = TaskPriority.MEDIUM,
    type: TaskType = TaskType.PROGRAMMATIC,
    due_date: date = date(2024, 1, 25),
    created_at: date = date(2024, 1, 10),
    title: str | None = None,
    description: str = "Beneficiary feedback",
    assignee: str = "Sarah Focal",
) -> Task:
    """R: Task factory with sensible defaults."""
    return Task(
        id=task_id,
        title=title or f"Task {task_id}",
        description=description,
        status=status,
        priority=priority,
        type=type,
        assignee=assignee,
        reporter="Anonymous",
        created_at=created_at,
        updated_at=created_at,
        due_date=due_date,
        project="Education Support Program",
        location="Rural District A",
    )


@pytest.fixture
def task_factory():
    return make_task


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def demo_users() -> list[User]:
    return default_seed().users


@pytest.fixture
def user_repo(demo_users) -> InMemoryUserRepository:
    return InMemoryUserRepository(demo_users)


@pytest.fixture
def session() -> Session:
    return Session()


@pytest.fixture
def session_store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def identity(user_repo, session, session_store) -> IdentityService:
    return IdentityService(user_repo, session, session_store, today=lambda: TODAY)


@pytest.fixture
def five_tasks() -> list[Task]:
    """
    R: Fixed collection used by filter/stats tests (today = 2024-01-19).

    FB-001 pending  high    due 01-20  (not overdue)
    FB-002 progress urgent  due 01-18  (overdue)
    FB-003 resolved medium  due 01-15  (overdue)
    FB-004 pending  high    due 01-19  (due today, not overdue)
    FB-005 closed   low     due 01-10  (closed, not overdue)
    """
    return [
        make_task(
            "FB-001",
            status=TaskStatus.PENDING,
            priority=TaskPriority.HIGH,
            due_date=date(2024, 1, 20),
            title="Teacher attendance issue in rural school",
        ),
        make_task(
            "FB-002",
            status=TaskStatus.IN_PROGRESS,
            priority=TaskPriority.URGENT,
            type=TaskType.SENSITIVE,
            due_date=date(2024, 1, 18),
            title="Inappropriate behavior by project staff",
            assignee="Michael Chen",
        ),
        make_task(
            "FB-003",
            status=TaskStatus.RESOLVED,
            priority=TaskPriority.MEDIUM,
            type=TaskType.OUT_OF_SCOPE,
            due_date=date(2024, 1, 15),
            title="Request for additional water pump",
            description="Community requesting a pump outside the project scope",
        ),
        make_task(
            "FB-004",
            status=TaskStatus.PENDING,
            priority=TaskPriority.HIGH,
            due_date=date(2024, 1, 19),
            title="Healthcare supplies shortage",
        ),
        make_task(
            "FB-005",
            status=TaskStatus.CLOSED,
            priority=TaskPriority.LOW,
            due_date=date(2024, 1, 10),
            title="Youth training program feedback",
        ),
    ]


@pytest.fixture
def task_repo(five_tasks) -> InMemoryTaskRepository:
    return InMemoryTaskRepository(five_tasks)


@pytest.fixture
def lifecycle(task_repo) -> TaskLifecycleManager:
    return TaskLifecycleManager(task_repo, today=lambda: TODAY, default_due_days=7)


@pytest.fixture
def focal_user(user_repo) -> User:
    user = user_repo.get_user_by_email("focal@ngo.org")
    assert user is not None and user.role == Role.FOCAL_PERSON
    return user
