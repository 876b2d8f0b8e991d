"""
Name: Identity & Permission Service

Responsibilities:
  - Own "who is the current user" (login, logout, restore from the slot)
  - Own the roster (add / update / delete / search / stats)
  - Answer permission predicates for the current session role

Collaborators:
  - identity/session.py: Session (passed by reference)
  - domain/repositories.py: UserRepository, SessionStore
  - domain/permissions.py: pure predicates over a Role
  - application/results.py: UserResult / ErrorCode
  - crosscutting: logger, metrics

Constraints:
  - Placeholder authentication: any password is accepted for a known email.
    The password is never stored or logged.
  - Predicates are recomputed on every call; a role edit on the signed-in
    user takes effect immediately.
  - Roster gating (can_manage_users) is the caller's responsibility.

Notes:
  - Deleting a user does not touch tasks directly; deletion listeners
    (registered by the container) decide what happens to references.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Any, Callable, List, Mapping, Optional
from uuid import uuid4

from ..application.results import ErrorCode, UserResult, failure
from ..crosscutting.logger import logger
from ..crosscutting.metrics import record_login
from ..domain import permissions
from ..domain.entities import Role, User
from ..domain.repositories import SessionStore, UserRepository
from .session import Session

_EDITABLE_FIELDS = {"email", "name", "role", "avatar", "department"}
_IMMUTABLE_FIELDS = {"id": "id", "joined_at": "joined_at", "joinedAt": "joined_at"}

UserDeletedListener = Callable[[User], Any]


def _normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def _parse_role(value: Any) -> Optional[Role]:
    if isinstance(value, Role):
        return value
    try:
        return Role(str(value))
    except ValueError:
        return None


class IdentityService:
    """
    R: Session + roster owner.

    Args:
        users: Roster repository
        session: Session shared with the rest of the process
        store: Persisted session slot
        today: Clock returning the current date (joined_at stamping)
    """

    def __init__(
        self,
        users: UserRepository,
        session: Session,
        store: SessionStore,
        *,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._users = users
        self._session = session
        self._store = store
        self._today = today
        self._deleted_listeners: List[UserDeletedListener] = []

    # =========================================================================
    # Session
    # =========================================================================

    @property
    def session(self) -> Session:
        return self._session

    @property
    def current_user(self) -> Optional[User]:
        return self._session.user

    def restore(self) -> Optional[User]:
        """
        R: Initialize the session from the persisted slot.

        The persisted email is resolved against the current roster; when the
        roster has no match, the raw persisted record is used as-is (it may
        be stale). An unreadable record clears the slot.
        """
        snapshot = self._store.load()
        if not snapshot:
            return None

        user = self._users.get_user_by_email(str(snapshot.get("email", "")))
        if user is None:
            try:
                user = User.from_snapshot(snapshot)
            except (KeyError, TypeError, ValueError):
                logger.warning("Discarding unreadable session snapshot")
                self._store.clear()
                return None
            logger.info(
                "Session restored from persisted record (no roster match)",
                extra={"email": user.email},
            )

        self._session.start(user)
        return user

    def login(self, email: str, password: str) -> bool:
        """
        R: Placeholder login: succeeds for any known email.

        On success the session is set and persisted. On failure the session
        is left untouched.
        """
        user = self._users.get_user_by_email(email)
        if user is None:
            record_login(False)
            logger.info("Login failed: unknown email", extra={"email": _normalize_email(email)})
            return False

        self._session.start(user)
        self._store.save(user.to_snapshot())
        record_login(True)
        logger.info("Login succeeded", extra={"email": user.email, "role": user.role.value})
        return True

    def logout(self) -> None:
        """R: Clear session and slot. Idempotent."""
        was_signed_in = self._session.is_authenticated
        self._session.end()
        self._store.clear()
        if was_signed_in:
            logger.info("Logged out")

    # =========================================================================
    # Permission predicates (current session role)
    # =========================================================================

    def can_edit(self) -> bool:
        return permissions.can_edit(self._session.role)

    def can_submit_feedback(self) -> bool:
        return permissions.can_submit_feedback(self._session.role)

    def can_view_analytics(self) -> bool:
        return permissions.can_view_analytics(self._session.role)

    def can_manage_users(self) -> bool:
        return permissions.can_manage_users(self._session.role)

    # =========================================================================
    # Roster
    # =========================================================================

    def list_users(self) -> List[User]:
        return self._users.list_users()

    def get_user(self, user_id: str) -> Optional[User]:
        return self._users.get_user(user_id)

    def find_by_email(self, email: str) -> Optional[User]:
        return self._users.get_user_by_email(email)

    def on_user_deleted(self, listener: UserDeletedListener) -> None:
        """R: Register a callback invoked with each deleted User."""
        self._deleted_listeners.append(listener)

    def add_user(self, data: Mapping[str, Any]) -> UserResult:
        """
        R: Append a roster entry with a generated id and today's joined_at.

        Rejects blank name/email, unknown roles and duplicate emails; the
        roster is unchanged on error. Any id/joined_at in data is ignored.
        """
        name = str(data.get("name") or "").strip()
        email = str(data.get("email") or "").strip()
        if not name or not email:
            return UserResult(
                error=failure(ErrorCode.VALIDATION_ERROR, "Name and email are required.")
            )

        role = _parse_role(data.get("role"))
        if role is None:
            return UserResult(error=failure(ErrorCode.VALIDATION_ERROR, "Invalid role."))

        if self._users.get_user_by_email(email) is not None:
            return UserResult(
                error=failure(ErrorCode.CONFLICT, "A user with this email already exists.")
            )

        user = User(
            id=uuid4().hex,
            email=email,
            name=name,
            role=role,
            joined_at=self._today(),
            avatar=data.get("avatar") or None,
            department=data.get("department") or None,
        )
        self._users.add_user(user)
        logger.info("User added", extra={"user_id": user.id, "role": role.value})
        return UserResult(user=user)

    def update_user(self, user_id: str, partial: Mapping[str, Any]) -> UserResult:
        """
        R: Merge partial data into an existing entry.

        Unknown id => NOT_FOUND (no-op). id and joined_at may be echoed back
        unchanged but never modified. When the signed-in user is edited, the
        session and its persisted shadow are refreshed.
        """
        current = self._users.get_user(user_id)
        if current is None:
            logger.info("Update ignored: unknown user", extra={"user_id": user_id})
            return UserResult(error=failure(ErrorCode.NOT_FOUND, "User not found."))

        changes: dict[str, Any] = {}
        for key, value in partial.items():
            if key in _IMMUTABLE_FIELDS:
                attr = _IMMUTABLE_FIELDS[key]
                existing = getattr(current, attr)
                echoed = existing.isoformat() if isinstance(existing, date) else existing
                if value not in (existing, echoed):
                    return UserResult(
                        error=failure(ErrorCode.VALIDATION_ERROR, f"{attr} cannot be changed.")
                    )
                continue
            if key not in _EDITABLE_FIELDS:
                return UserResult(
                    error=failure(ErrorCode.VALIDATION_ERROR, f"Unknown field: {key}.")
                )
            changes[key] = value

        if "role" in changes:
            role = _parse_role(changes["role"])
            if role is None:
                return UserResult(error=failure(ErrorCode.VALIDATION_ERROR, "Invalid role."))
            changes["role"] = role

        for required in ("name", "email"):
            if required in changes:
                changes[required] = str(changes[required] or "").strip()
                if not changes[required]:
                    return UserResult(
                        error=failure(ErrorCode.VALIDATION_ERROR, "Name and email are required.")
                    )

        if "email" in changes:
            owner = self._users.get_user_by_email(changes["email"])
            if owner is not None and owner.id != user_id:
                return UserResult(
                    error=failure(ErrorCode.CONFLICT, "A user with this email already exists.")
                )

        updated = replace(current, **changes)
        if not self._users.replace_user(updated):
            return UserResult(error=failure(ErrorCode.NOT_FOUND, "User not found."))

        if self._session.user is not None and self._session.user.id == user_id:
            self._session.start(updated)
            self._store.save(updated.to_snapshot())

        logger.info("User updated", extra={"user_id": user_id, "fields": sorted(changes)})
        return UserResult(user=updated)

    def delete_user(self, user_id: str) -> UserResult:
        """R: Remove an entry. Unknown id => NOT_FOUND, roster unchanged."""
        removed = self._users.delete_user(user_id)
        if removed is None:
            logger.info("Delete ignored: unknown user", extra={"user_id": user_id})
            return UserResult(error=failure(ErrorCode.NOT_FOUND, "User not found."))

        logger.info("User deleted", extra={"user_id": user_id})
        for listener in self._deleted_listeners:
            listener(removed)
        return UserResult(user=removed)

    def search_users(self, search_term: str = "", role: str = "all") -> List[User]:
        """R: Case-insensitive name/email match AND role filter, roster order kept."""
        term = (search_term or "").strip().lower()

        def matches(user: User) -> bool:
            if term and term not in user.name.lower() and term not in user.email.lower():
                return False
            if role and role != "all" and user.role.value != role:
                return False
            return True

        return [u for u in self._users.list_users() if matches(u)]

    def user_stats(self) -> dict[str, int]:
        users = self._users.list_users()
        return {
            "total": len(users),
            "admins": sum(1 for u in users if u.role == Role.ADMIN),
            "focal_persons": sum(1 for u in users if u.role == Role.FOCAL_PERSON),
            "viewers": sum(1 for u in users if u.role == Role.VIEWER),
        }
