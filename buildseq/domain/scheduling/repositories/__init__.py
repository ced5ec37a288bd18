"""Repository interfaces for the scheduling domain."""

from .task_store import InMemoryTaskStore, TaskStore

__all__ = ["InMemoryTaskStore", "TaskStore"]
