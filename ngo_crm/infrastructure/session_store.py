"""
============================================================
Module: Persisted Session Slot (Backends + Factory)

Responsibilities:
  - Persist the signed-in user snapshot under a fixed slot name
  - Provide interchangeable backends:
      - memory: process-local (default, tests)
      - file: JSON key-value file that survives restarts
      - redis: shared slot via redis-py
  - Select the backend from Settings

Collaborators:
  - domain.repositories.SessionStore (contract)
  - identity/identity_service.py (reads on restore, writes on login/logout)
  - crosscutting.exceptions.SessionStoreError

Constraints / Notes:
  - Snapshots are JSON-serializable dicts (at minimum the email)
  - Backend failures surface as SessionStoreError; a corrupt stored value
    loads as None and is logged
============================================================
"""

from __future__ import annotations

import json
from pathlib import Path
from threading import Lock
from typing import Any, Optional

import redis

from ..crosscutting.config import Settings
from ..crosscutting.exceptions import SessionStoreError
from ..crosscutting.logger import logger
from ..domain.repositories import SessionStore


def _decode(raw: str | None, *, slot: str) -> Optional[dict[str, Any]]:
    """R: Parse a stored slot value; anything that is not a JSON object is None."""
    if raw is None:
        return None
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Session slot holds invalid JSON", extra={"slot": slot})
        return None
    if not isinstance(value, dict):
        logger.warning("Session slot holds a non-object value", extra={"slot": slot})
        return None
    return value


class InMemorySessionStore(SessionStore):
    """Process-local slot. Stores the serialized form to mimic real backends."""

    def __init__(self, slot: str = "crm-user") -> None:
        self._slot = slot
        self._raw: str | None = None
        self._lock = Lock()

    def load(self) -> Optional[dict[str, Any]]:
        with self._lock:
            raw = self._raw
        return _decode(raw, slot=self._slot)

    def save(self, snapshot: dict[str, Any]) -> None:
        with self._lock:
            self._raw = json.dumps(snapshot, default=str)

    def clear(self) -> None:
        with self._lock:
            self._raw = None

    def put_raw(self, raw: str | None) -> None:
        """R: Store an arbitrary raw value (tests for corrupt slots)."""
        with self._lock:
            self._raw = raw


class FileSessionStore(SessionStore):
    """
    JSON file holding a {slot_name: serialized_snapshot} map.

    Other keys in the file are preserved when the slot is written or cleared.
    """

    def __init__(self, path: str | Path, slot: str = "crm-user") -> None:
        self._path = Path(path)
        self._slot = slot
        self._lock = Lock()

    def _read_all(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8") or "{}")
        except ValueError:
            logger.warning(
                "Session file is not valid UTF-8 JSON", extra={"path": str(self._path)}
            )
            return {}
        except OSError as exc:
            raise SessionStoreError(
                f"Cannot read session file {self._path}", original_error=exc
            ) from exc
        return data if isinstance(data, dict) else {}

    def _write_all(self, data: dict[str, Any]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(data), encoding="utf-8")
        except OSError as exc:
            raise SessionStoreError(
                f"Cannot write session file {self._path}", original_error=exc
            ) from exc

    def load(self) -> Optional[dict[str, Any]]:
        with self._lock:
            raw = self._read_all().get(self._slot)
        return _decode(raw if isinstance(raw, str) else None, slot=self._slot)

    def save(self, snapshot: dict[str, Any]) -> None:
        with self._lock:
            data = self._read_all()
            data[self._slot] = json.dumps(snapshot, default=str)
            self._write_all(data)

    def clear(self) -> None:
        with self._lock:
            data = self._read_all()
            if self._slot in data:
                del data[self._slot]
                self._write_all(data)


class RedisSessionStore(SessionStore):
    """Slot stored under a namespaced Redis key."""

    KEY_PREFIX = "ngo-crm:session:"

    def __init__(
        self,
        *,
        redis_url: str = "",
        slot: str = "crm-user",
        client: "redis.Redis | None" = None,
    ) -> None:
        if client is None and not redis_url:
            raise ValueError("redis_url is required")
        self._client = client or redis.from_url(redis_url, decode_responses=True)
        self._slot = slot

    def _k(self) -> str:
        return f"{self.KEY_PREFIX}{self._slot}"

    def load(self) -> Optional[dict[str, Any]]:
        try:
            raw = self._client.get(self._k())
        except redis.RedisError as exc:
            raise SessionStoreError("Cannot read session slot", original_error=exc) from exc
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        return _decode(raw, slot=self._slot)

    def save(self, snapshot: dict[str, Any]) -> None:
        try:
            self._client.set(self._k(), json.dumps(snapshot, default=str))
        except redis.RedisError as exc:
            raise SessionStoreError("Cannot write session slot", original_error=exc) from exc

    def clear(self) -> None:
        try:
            self._client.delete(self._k())
        except redis.RedisError as exc:
            raise SessionStoreError("Cannot clear session slot", original_error=exc) from exc


def build_session_store(settings: Settings) -> SessionStore:
    """
    R: Factory selecting the slot backend from settings.session_backend.

    Settings validation guarantees redis_url when the backend is redis.
    """
    slot = settings.session_slot_key
    if settings.session_backend == "file":
        return FileSessionStore(settings.session_file_path, slot=slot)
    if settings.session_backend == "redis":
        return RedisSessionStore(redis_url=settings.redis_url, slot=slot)
    return InMemorySessionStore(slot=slot)
