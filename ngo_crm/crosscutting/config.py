"""
Name: Application Configuration (Settings)

Responsibilities:
  - Centralized, typed configuration using pydantic-settings
  - Validate environment variables at startup
  - Provide defaults that match the local dashboard behavior

Collaborators:
  - container.py: selects session slot backend and seed source
  - crosscutting/logger.py: log level and format
  - application/task_service.py: default due window for new feedback

Constraints:
  - No business logic, configuration only

Notes:
  - Singleton via lru_cache
  - SESSION_BACKEND=redis requires REDIS_URL
"""

from functools import lru_cache

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_SESSION_BACKENDS = {"memory", "file", "redis"}


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        app_env: Application environment (development/production/test)
        log_level: Logging level name (default: INFO)
        log_json: Emit JSON logs (default: True)
        session_backend: memory|file|redis (default: memory)
        session_slot_key: Name of the persisted session slot (default: crm-user)
        session_file_path: JSON file used by the file backend
        redis_url: Redis connection string (required for redis backend)
        seed_path: Optional JSON seed with users/tasks (empty = built-in demo)
        default_due_days: Days until a submitted feedback is due (default: 7)
        metrics_enabled: Record Prometheus counters (default: True)
    """

    # Environment
    app_env: str = "development"

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    # Session slot
    session_backend: str = "memory"
    session_slot_key: str = "crm-user"
    session_file_path: str = ".crm-session.json"
    redis_url: str = ""

    # Seed data
    seed_path: str = ""

    # Lifecycle
    default_due_days: int = 7

    # Observability
    metrics_enabled: bool = True

    @field_validator("session_backend")
    @classmethod
    def session_backend_valid(cls, v: str) -> str:
        backend = (v or "memory").strip().lower()
        if backend not in _SESSION_BACKENDS:
            raise ValueError("session_backend must be memory, file, or redis")
        return backend

    @field_validator("session_slot_key")
    @classmethod
    def session_slot_key_not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("session_slot_key must not be empty")
        return v.strip()

    @field_validator("default_due_days")
    @classmethod
    def default_due_days_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("default_due_days must be greater than 0")
        return v

    @model_validator(mode="after")
    def validate_session_backend_requirements(self):
        if self.session_backend == "redis" and not self.redis_url.strip():
            raise ValueError("REDIS_URL is required when SESSION_BACKEND=redis")
        return self

    def is_production(self) -> bool:
        return self.app_env.strip().lower() == "production"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore unknown env vars
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get singleton Settings instance.

    Raises:
        ValidationError: If env vars are invalid
    """
    return Settings()
