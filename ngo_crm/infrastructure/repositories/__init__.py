from .in_memory import InMemoryTaskRepository, InMemoryUserRepository

__all__ = [
    "InMemoryTaskRepository",
    "InMemoryUserRepository",
]
