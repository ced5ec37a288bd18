"""Optimization plan, quality report and outcome."""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import Field, model_validator

from ...shared.base import ValueObject
from ...shared.exceptions import (
    CyclicDependencyError,
    DomainError,
    InvalidScheduleInputError,
    OptimizationTimeoutError,
)
from ..value_objects.enums import OutcomeStatus
from .task import Task


class PlanAssignment(ValueObject):
    """Proposed lane and position for one task."""

    task_id: str
    task_number: str
    lane_id: str | None
    position: int = Field(ge=0)
    previous_lane_id: str | None = None
    previous_position: int = 0

    @property
    def lane_changed(self) -> bool:
        return self.lane_id != self.previous_lane_id

    @property
    def position_changed(self) -> bool:
        return self.position != self.previous_position


class QualityReport(ValueObject):
    """Summary of how good a plan is."""

    max_workload: float = 0.0
    avg_workload: float = 0.0
    dependency_conflicts: int = 0
    resource_conflicts: int = 0
    moved_count: int = 0
    repositioned_count: int = 0
    unassignable: tuple[str, ...] = ()
    attempts: int = 0

    @property
    def remaining_conflicts(self) -> int:
        return self.dependency_conflicts + self.resource_conflicts

    @property
    def is_conflict_free(self) -> bool:
        return self.remaining_conflicts == 0


class OptimizationPlan(ValueObject):
    """Assignments for every non-locked, non-dead-time task."""

    assignments: tuple[PlanAssignment, ...] = ()
    quality: QualityReport = Field(default_factory=QualityReport)
    strategy: str = "topological"

    def for_task(self, task_id: str) -> PlanAssignment | None:
        for assignment in self.assignments:
            if assignment.task_id == task_id:
                return assignment
        return None

    @property
    def changed_assignments(self) -> tuple[PlanAssignment, ...]:
        return tuple(
            a for a in self.assignments if a.lane_changed or a.position_changed
        )

    def apply_to(self, tasks: Iterable[Task]) -> list[Task]:
        """Tasks as they will look once the plan is written back."""
        return apply_assignments(tasks, self.assignments)


def apply_assignments(
    tasks: Iterable[Task], assignments: Iterable[PlanAssignment]
) -> list[Task]:
    """
    Apply lane and position assignments to tasks.

    Only lane and position change; recorded timestamps and every other
    field are kept. Tasks without an assignment are returned unchanged.
    """
    by_task_id = {assignment.task_id: assignment for assignment in assignments}
    applied = []
    for task in tasks:
        assignment = by_task_id.get(task.id)
        if assignment is None or not (
            assignment.lane_changed or assignment.position_changed
        ):
            applied.append(task)
        else:
            applied.append(task.with_assignment(assignment.lane_id, assignment.position))
    return applied


class OptimizationOutcome(ValueObject):
    """
    Typed result of an optimization run.

    Outcomes with status ``valid``, ``best_effort`` or ``timeout`` carry a
    plan; ``cycle_detected`` and ``invalid_input`` never do.
    """

    status: OutcomeStatus
    plan: OptimizationPlan | None = None
    cycle: tuple[str, ...] = ()
    problems: tuple[str, ...] = ()
    attempts: int = 0

    @model_validator(mode="after")
    def _plan_matches_status(self) -> OptimizationOutcome:
        if self.status.has_plan and self.plan is None:
            raise ValueError(f"Outcome with status {self.status.value} requires a plan")
        if not self.status.has_plan and self.plan is not None:
            raise ValueError(f"Outcome with status {self.status.value} cannot carry a plan")
        return self

    @classmethod
    def cycle_detected(cls, task_numbers: tuple[str, ...]) -> OptimizationOutcome:
        return cls(status=OutcomeStatus.CYCLE_DETECTED, cycle=task_numbers)

    @classmethod
    def invalid_input(cls, problems: list[str]) -> OptimizationOutcome:
        return cls(status=OutcomeStatus.INVALID_INPUT, problems=tuple(problems))

    @property
    def is_valid(self) -> bool:
        return self.status is OutcomeStatus.VALID

    @property
    def is_best_effort(self) -> bool:
        return self.status in {OutcomeStatus.BEST_EFFORT, OutcomeStatus.TIMEOUT}

    @property
    def error(self) -> DomainError | None:
        """Domain error describing why the outcome is not fully valid."""
        if self.status is OutcomeStatus.CYCLE_DETECTED:
            return CyclicDependencyError(list(self.cycle))
        if self.status is OutcomeStatus.INVALID_INPUT:
            return InvalidScheduleInputError(list(self.problems))
        if self.status is OutcomeStatus.TIMEOUT and self.plan is not None:
            return OptimizationTimeoutError(
                self.attempts, self.plan.quality.remaining_conflicts
            )
        return None
