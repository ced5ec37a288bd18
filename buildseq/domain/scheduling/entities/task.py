"""Task entity ("assembly card") and its status lifecycle."""

from __future__ import annotations

from datetime import datetime, timedelta

from pydantic import Field, field_validator, model_validator

from ...shared.base import Entity
from ...shared.exceptions import InvalidStatusTransitionError
from ..value_objects.enums import TaskKind, TaskStatus
from ..value_objects.time_window import TaskTiming, resolve_timing
from ..value_objects.timeline import as_naive_utc

MIN_ACTUAL_DURATION_HOURS = 0.01


class Task(Entity):
    """
    Task entity representing one unit of assembly work.

    Tasks are identified by ``id`` and referenced by other tasks through
    their human-readable ``task_number``. Explicit ``start_time``/``end_time``
    stamps, once recorded, take precedence over the timing implied by
    ``position``.
    """

    task_number: str = Field(min_length=1)
    name: str = ""
    kind: TaskKind
    duration_hours: float = Field(gt=0)
    phase: int = Field(default=1, ge=1, le=4)
    assigned_lane: str | None = None
    status: TaskStatus = Field(default=TaskStatus.SCHEDULED)
    dependencies: tuple[str, ...] = ()
    position: int = Field(default=0, ge=0)

    # Explicit timing
    start_time: datetime | None = None
    end_time: datetime | None = None

    requires_shared_resource: bool = False
    locked: bool = False

    # Execution tracking
    elapsed_seconds: int = Field(default=0, ge=0)
    actual_duration_hours: float | None = Field(default=None, gt=0)
    picking_start_time: datetime | None = None
    sub_assembly_area: int | None = Field(default=None, ge=1, le=6)

    @field_validator("dependencies")
    @classmethod
    def _deduplicate_dependencies(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(dict.fromkeys(dep.strip() for dep in value if dep.strip()))

    @field_validator("start_time", "end_time", "picking_start_time")
    @classmethod
    def _normalize_timestamp(cls, value: datetime | None) -> datetime | None:
        return as_naive_utc(value) if value is not None else None

    @model_validator(mode="after")
    def _validate_dependencies(self) -> Task:
        if self.task_number in self.dependencies:
            raise ValueError(f"Task {self.task_number} cannot depend on itself")
        if self.kind.is_dead_time and self.dependencies:
            raise ValueError("Dead-time tasks cannot declare dependencies")
        return self

    @property
    def is_dead_time(self) -> bool:
        return self.kind.is_dead_time

    @property
    def is_completed(self) -> bool:
        return self.status is TaskStatus.COMPLETED

    @property
    def is_blocked(self) -> bool:
        return self.status is TaskStatus.BLOCKED

    @property
    def timing(self) -> TaskTiming:
        """Timing variant that governs this task (explicit or position-derived)."""
        return resolve_timing(
            self.start_time, self.end_time, self.position, self.duration_hours
        )

    def elapsed_at(self, now: datetime) -> int:
        """Accumulated assembly seconds as of ``now``."""
        if self.status is TaskStatus.ASSEMBLING and self.start_time is not None:
            return max(0, int((as_naive_utc(now) - self.start_time).total_seconds()))
        return self.elapsed_seconds

    def transition_to(
        self,
        new_status: TaskStatus,
        now: datetime,
        actual_duration_hours: float | None = None,
    ) -> Task:
        """
        Move the task to a new lifecycle status.

        Timing fields are updated so that assembly time accumulates across
        pauses: resuming back-dates ``start_time`` by the time already
        worked, pausing or blocking running work freezes the total into
        ``elapsed_seconds``. Resetting to ready for build, including release
        from a block, discards any recorded work.

        Args:
            new_status: Target status
            now: Current timestamp
            actual_duration_hours: Explicit actual duration on completion

        Returns:
            A new task in the target status

        Raises:
            InvalidStatusTransitionError: If the transition is not allowed
        """
        if not self.status.can_transition_to(new_status):
            raise InvalidStatusTransitionError(
                self.task_number, self.status.value, new_status.value
            )

        now = as_naive_utc(now)
        update: dict[str, object] = {"status": new_status}

        if new_status is TaskStatus.ASSEMBLING:
            update["start_time"] = now - timedelta(seconds=self.elapsed_seconds)
            update["end_time"] = None

        elif new_status is TaskStatus.PAUSED:
            # start_time was back-dated on resume, so this is the full total
            update["elapsed_seconds"] = self.elapsed_at(now)
            update["start_time"] = None

        elif new_status is TaskStatus.COMPLETED:
            elapsed = self.elapsed_at(now)
            if actual_duration_hours is None:
                actual_duration_hours = max(
                    round(elapsed / 3600, 2), MIN_ACTUAL_DURATION_HOURS
                )
            update["elapsed_seconds"] = elapsed
            update["start_time"] = self.start_time or now - timedelta(seconds=elapsed)
            update["end_time"] = now
            update["actual_duration_hours"] = actual_duration_hours

        elif new_status is TaskStatus.BLOCKED:
            if self.status is TaskStatus.ASSEMBLING:
                update["elapsed_seconds"] = self.elapsed_at(now)
                update["start_time"] = None

        elif new_status is TaskStatus.READY_FOR_BUILD and (
            self.status.is_in_progress or self.is_blocked
        ):
            update["start_time"] = None
            update["end_time"] = None
            update["elapsed_seconds"] = 0

        if new_status is TaskStatus.PICKING:
            update["picking_start_time"] = now

        return self.model_copy(update=update)

    def with_assignment(self, lane_id: str | None, position: int) -> Task:
        """Return a copy placed on ``lane_id`` at ``position``."""
        return self.model_copy(update={"assigned_lane": lane_id, "position": position})
