"""
In-Memory Repository Implementations.

Roster and task collection seeded at startup. Data is lost on process restart.
"""

from .tasks import InMemoryTaskRepository
from .users import InMemoryUserRepository

__all__ = [
    "InMemoryTaskRepository",
    "InMemoryUserRepository",
]
