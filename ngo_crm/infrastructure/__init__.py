from .repositories import InMemoryTaskRepository, InMemoryUserRepository
from .seed import Seed, default_seed, load_seed
from .session_store import (
    FileSessionStore,
    InMemorySessionStore,
    RedisSessionStore,
    build_session_store,
)

__all__ = [
    "FileSessionStore",
    "InMemorySessionStore",
    "InMemoryTaskRepository",
    "InMemoryUserRepository",
    "RedisSessionStore",
    "Seed",
    "build_session_store",
    "default_seed",
    "load_seed",
]
