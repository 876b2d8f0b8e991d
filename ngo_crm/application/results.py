"""
===============================================================================
USE CASE RESULTS (Shared Result / Error Models)
===============================================================================

Name:
    Roster and Task Operation Results

Business Goal:
    Give roster and task operations a stable, explicit outcome contract:
      - validation failures
      - authorization denials
      - unknown ids
      - uniqueness conflicts
      - rejected status transitions

Why:
    - Operations return results instead of raising, so callers decide how to
      surface a denial or a not-found to the user.
    - A single code set keeps messages and categories consistent.

Collaborators:
    - domain.entities.User, domain.entities.Task
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ..domain.entities import Task, User


class ErrorCode(str, Enum):
    """
    Stable error categories (not messages).

      - VALIDATION_ERROR: invalid or incomplete input
      - FORBIDDEN: the acting role may not perform the operation
      - NOT_FOUND: unknown user/task id
      - CONFLICT: uniqueness violation (duplicate email)
      - INVALID_TRANSITION: status change out of a terminal status
    """

    VALIDATION_ERROR = "VALIDATION_ERROR"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    INVALID_TRANSITION = "INVALID_TRANSITION"


@dataclass(frozen=True)
class OperationError:
    """Error code plus a human message, safe for UI and logs."""

    code: ErrorCode
    message: str


@dataclass
class UserResult:
    """
    Result of a roster operation.

    Contract:
      - error is None => success (user holds the affected entry)
      - error set     => roster unchanged
    """

    user: User | None = None
    error: OperationError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class TaskResult:
    """
    Result of a task operation.

    Fields:
      - task: affected task (None for deletes or failures)
      - error: present when the operation was rejected
      - message: confirmation for the caller on success
    """

    task: Task | None = None
    error: OperationError | None = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None


def failure(code: ErrorCode, message: str) -> OperationError:
    return OperationError(code=code, message=message)
