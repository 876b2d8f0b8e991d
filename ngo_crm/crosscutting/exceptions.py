"""
Name: Typed Internal Exceptions

Responsibilities:
  - Standardize infrastructure errors (session slot, seed loading)
  - Provide a stable error_code and an error_id for log correlation

Collaborators:
  - infrastructure/session_store.py: raises SessionStoreError
  - infrastructure/seed.py: raises SeedError
  - container.py: surfaces startup failures

Notes:
  - Domain and application operations report outcomes with result objects
    (see application/results.py); these exceptions are for infrastructure.
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import uuid4


@dataclass(frozen=True)
class ErrorResponse:
    """R: Minimal serializable error shape."""

    error_code: str
    message: str
    error_id: str

    def to_dict(self) -> dict:
        return {
            "error_code": self.error_code,
            "message": self.message,
            "error_id": self.error_id,
        }


class CRMError(Exception):
    """R: Base class for internal CRM errors."""

    error_code: str = "CRM_ERROR"

    def __init__(
        self,
        message: str,
        error_id: str | None = None,
        original_error: Exception | None = None,
    ):
        self.message = message
        self.error_id = error_id or str(uuid4())
        self.original_error = original_error
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(
            error_code=self.error_code, message=self.message, error_id=self.error_id
        )


class SessionStoreError(CRMError):
    """Session slot backend failures (file I/O, Redis)."""

    error_code: str = "SESSION_STORE_ERROR"


class SeedError(CRMError):
    """Invalid or unreadable roster/task seed."""

    error_code: str = "SEED_ERROR"
