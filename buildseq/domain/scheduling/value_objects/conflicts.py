"""
Conflict Value Objects

Structured, derived descriptions of schedule conflicts. Conflicts are
recomputed on demand and never persisted; presentation is left to callers.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, model_validator

from ...shared.base import ValueObject
from .enums import DependencyConflictReason
from .time_window import TimeWindow


class DependencyConflict(ValueObject):
    """A task whose dependency is unmet."""

    task_number: str
    dependency: str
    reason: DependencyConflictReason
    dependency_end: datetime | None = None
    task_start: datetime | None = None

    def to_dict(self) -> dict[str, str | None]:
        return {
            "task_number": self.task_number,
            "dependency": self.dependency,
            "reason": self.reason.value,
            "dependency_end": (
                self.dependency_end.isoformat() if self.dependency_end else None
            ),
            "task_start": self.task_start.isoformat() if self.task_start else None,
        }


class ResourceConflict(ValueObject):
    """
    Two shared-resource tasks on different lanes whose windows overlap.

    The pair is unordered; ``first`` always sorts before ``second`` so that
    each pair has exactly one representation.
    """

    first: str
    second: str
    overlap: TimeWindow

    @model_validator(mode="after")
    def _pair_is_ordered(self) -> ResourceConflict:
        if not self.first < self.second:
            raise ValueError(
                f"Resource conflict pair must be ordered: {self.first!r}, {self.second!r}"
            )
        return self

    @classmethod
    def between(cls, a: str, b: str, overlap: TimeWindow) -> ResourceConflict:
        first, second = sorted((a, b))
        return cls(first=first, second=second, overlap=overlap)

    def involves(self, task_number: str) -> bool:
        return task_number in (self.first, self.second)

    def other(self, task_number: str) -> str:
        """Return the task on the other side of the conflict."""
        return self.second if task_number == self.first else self.first

    def to_dict(self) -> dict[str, object]:
        return {
            "first": self.first,
            "second": self.second,
            "overlap": self.overlap.to_dict(),
        }


class TaskConflicts(ValueObject):
    """Conflicts touching a single task, as used for per-task warnings."""

    task_number: str
    dependency_conflicts: tuple[DependencyConflict, ...] = ()
    resource_conflicts: tuple[ResourceConflict, ...] = ()

    @property
    def has_conflicts(self) -> bool:
        return bool(self.dependency_conflicts or self.resource_conflicts)


class ConflictReport(ValueObject):
    """Result of a full conflict detection pass over a snapshot."""

    dependency_conflicts: tuple[DependencyConflict, ...] = Field(default=())
    resource_conflicts: tuple[ResourceConflict, ...] = Field(default=())

    @property
    def dependency_count(self) -> int:
        return len(self.dependency_conflicts)

    @property
    def resource_count(self) -> int:
        return len(self.resource_conflicts)

    @property
    def total(self) -> int:
        """Total number of conflicts."""
        return self.dependency_count + self.resource_count

    @property
    def has_conflicts(self) -> bool:
        return self.total > 0

    def for_task(self, task_number: str) -> TaskConflicts:
        """
        Collect the conflicts a task participates in.

        Dependency conflicts are those where the task is the dependent;
        resource conflicts are those where it is either side of the pair.
        """
        return TaskConflicts(
            task_number=task_number,
            dependency_conflicts=tuple(
                conflict
                for conflict in self.dependency_conflicts
                if conflict.task_number == task_number
            ),
            resource_conflicts=tuple(
                conflict
                for conflict in self.resource_conflicts
                if conflict.involves(task_number)
            ),
        )

    def to_dict(self) -> dict[str, list[dict[str, object]]]:
        return {
            "dependency_conflicts": [c.to_dict() for c in self.dependency_conflicts],
            "resource_conflicts": [c.to_dict() for c in self.resource_conflicts],
        }
