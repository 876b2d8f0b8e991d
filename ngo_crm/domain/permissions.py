"""
Name: Role Permission Policy

Responsibilities:
  - Define pure permission predicates over an explicit Role
  - Describe which navigation entries and routes each role may reach
  - Describe per-task affordances (view/edit/status/delete) for a role

Collaborators:
  - domain.entities: Role, Task
  - identity/identity_service.py: evaluates predicates for the session role
  - application/task_service.py: re-checks predicates before mutations

Constraints:
  - Pure functions, explicit inputs, no session or global state
  - A missing role (no session) never grants anything
  - Predicates never raise

Notes:
  - Truth table:
        predicate            admin  focal_person  viewer
        can_edit               x        x
        can_submit_feedback             x
        can_view_analytics     x                    x
        can_manage_users       x
        can_delete_tasks       x
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from .entities import Role, Task

_EDITOR_ROLES = frozenset({Role.ADMIN, Role.FOCAL_PERSON})
_ANALYTICS_ROLES = frozenset({Role.ADMIN, Role.VIEWER})


def _coerce(role: Role | str | None) -> Optional[Role]:
    """R: Accept Role or its string value; anything unknown is no role."""
    if role is None or isinstance(role, Role):
        return role
    try:
        return Role(role)
    except ValueError:
        return None


def can_edit(role: Role | str | None) -> bool:
    return _coerce(role) in _EDITOR_ROLES


def can_submit_feedback(role: Role | str | None) -> bool:
    return _coerce(role) == Role.FOCAL_PERSON


def can_view_analytics(role: Role | str | None) -> bool:
    return _coerce(role) in _ANALYTICS_ROLES


def can_manage_users(role: Role | str | None) -> bool:
    return _coerce(role) == Role.ADMIN


def can_delete_tasks(role: Role | str | None) -> bool:
    """Deleting tasks is stricter than editing: admins only."""
    return _coerce(role) == Role.ADMIN


PREDICATES: dict[str, Callable[[Role | str | None], bool]] = {
    "can_edit": can_edit,
    "can_submit_feedback": can_submit_feedback,
    "can_view_analytics": can_view_analytics,
    "can_manage_users": can_manage_users,
}


def permission_matrix() -> dict[str, dict[str, bool]]:
    """R: Full role x predicate table (role value -> predicate name -> bool)."""
    return {
        role.value: {name: check(role) for name, check in PREDICATES.items()}
        for role in Role
    }


# ---------------------------------------------------------------------------
# Navigation / route access
# ---------------------------------------------------------------------------

LOGIN_ROUTE = "/login"
HOME_ROUTE = "/dashboard"


def _always(role: Role | str | None) -> bool:
    return _coerce(role) is not None


@dataclass(frozen=True, slots=True)
class NavItem:
    """R: Sidebar entry guarded by a predicate."""

    name: str
    href: str
    check: Callable[[Role | str | None], bool]

    def is_visible(self, role: Role | str | None) -> bool:
        return self.check(role)


NAVIGATION: tuple[NavItem, ...] = (
    NavItem("Dashboard", "/dashboard", _always),
    NavItem("Feedback Form", "/feedback", can_submit_feedback),
    NavItem("Task Manager", "/tasks", can_edit),
    NavItem("Analytics", "/analytics", can_view_analytics),
    NavItem("User Management", "/users", can_manage_users),
)

_ROUTES: dict[str, NavItem] = {item.href: item for item in NAVIGATION}


def visible_navigation(role: Role | str | None) -> list[NavItem]:
    """Navigation entries the role may see, in sidebar order."""
    return [item for item in NAVIGATION if item.is_visible(role)]


def _normalize_path(path: str) -> str:
    cleaned = (path or "").strip().split("?", 1)[0]
    if len(cleaned) > 1:
        cleaned = cleaned.rstrip("/")
    return cleaned or "/"


def resolve_route(path: str) -> str:
    """R: Apply the root redirect ("/" -> dashboard)."""
    normalized = _normalize_path(path)
    return HOME_ROUTE if normalized == "/" else normalized


def can_access_route(role: Role | str | None, path: str) -> bool:
    """
    R: Route guard.

    - /login is always reachable.
    - Every other route requires a session.
    - Any session reaches every known route; pages fall back to read-only
      for roles that lack the entry's predicate (see task_affordances).
    - Unknown routes are denied.
    """
    route = resolve_route(path)
    if route == LOGIN_ROUTE:
        return True
    if _coerce(role) is None:
        return False
    return route in _ROUTES


# ---------------------------------------------------------------------------
# Task affordances
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class TaskAffordances:
    """R: What the task list may offer a role for one task."""

    can_view: bool
    can_edit: bool
    can_change_status: bool
    can_delete: bool


def task_affordances(role: Role | str | None, task: Task) -> TaskAffordances:
    """Closed tasks keep their edit entry but lose the status selector."""
    editable = can_edit(role)
    return TaskAffordances(
        can_view=_coerce(role) is not None,
        can_edit=editable,
        can_change_status=editable and not task.is_closed,
        can_delete=can_delete_tasks(role),
    )
