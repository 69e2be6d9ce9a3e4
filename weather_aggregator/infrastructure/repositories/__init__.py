"""Infrastructure repositories."""

from .memory_history_store import InMemoryHistoryStore

__all__ = ["InMemoryHistoryStore"]
