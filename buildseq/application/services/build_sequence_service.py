"""
Build sequence application service.

Coordinates the store and the scheduling engine: snapshots the store, runs
conflict detection or optimization, and writes plans and status changes
back.
"""

from __future__ import annotations

import threading
from collections.abc import Sequence
from datetime import datetime

from ...core.config import Settings
from ...core.config import settings as default_settings
from ...core.observability import get_logger
from ...domain.shared.base import ValueObject
from ...domain.shared.exceptions import TaskNotFoundError
from ...domain.scheduling.entities.plan import OptimizationOutcome
from ...domain.scheduling.entities.snapshot import ScheduleSnapshot
from ...domain.scheduling.entities.task import Task
from ...domain.scheduling.repositories.task_store import TaskStore
from ...domain.scheduling.services.assignment_optimizer import AssignmentOptimizer
from ...domain.scheduling.services.conflict_detector import ConflictDetector
from ...domain.scheduling.services.dependency_graph import (
    DependencyValidation,
    validate_proposed_dependencies,
)
from ...domain.scheduling.value_objects.conflicts import ConflictReport, TaskConflicts
from ...domain.scheduling.value_objects.enums import TaskStatus

logger = get_logger(__name__)


class OptimizeAndApplyResult(ValueObject):
    """Outcome of an optimization plus the tasks written back."""

    outcome: OptimizationOutcome
    applied: tuple[Task, ...] = ()

    @property
    def was_applied(self) -> bool:
        return bool(self.applied)


class BuildSequenceService:
    """
    Application service for build sequence operations.

    Optimize-and-apply sequences are serialized per service instance, so a
    store should be shared through a single service. Every optimization
    starts from a fresh snapshot; the last writer wins.
    """

    def __init__(self, store: TaskStore, settings: Settings | None = None) -> None:
        """
        Initialize the build sequence service.

        Args:
            store: Task store to read from and write plans to
            settings: Application settings; defaults to the module settings
        """
        self._store = store
        self._settings = settings if settings is not None else default_settings
        self._lock = threading.Lock()

    def snapshot(self, active_lane_ids: Sequence[str] | None = None) -> ScheduleSnapshot:
        """Read the current store contents into a snapshot."""
        return ScheduleSnapshot(
            tasks=tuple(self._store.list_tasks()),
            lanes=tuple(self._store.list_lanes()),
            active_lane_ids=tuple(active_lane_ids) if active_lane_ids is not None else None,
            timeline=self._settings.timeline_config(),
        )

    def _optimizer(self) -> AssignmentOptimizer:
        return AssignmentOptimizer(
            weights=self._settings.scoring_weights(),
            attempt_budget=self._settings.OPTIMIZER_ATTEMPT_BUDGET,
            seed=self._settings.OPTIMIZER_RANDOM_SEED,
            time_limit_seconds=self._settings.OPTIMIZER_TIME_LIMIT_SECONDS,
        )

    def optimize_and_apply(
        self,
        active_lane_ids: Sequence[str] | None = None,
        attempt_budget: int | None = None,
        apply_best_effort: bool = True,
    ) -> OptimizeAndApplyResult:
        """
        Optimize the current schedule and write the plan back.

        Args:
            active_lane_ids: Ordered lane ids to plan onto; all lanes when None
            attempt_budget: Overrides the configured attempt budget
            apply_best_effort: Whether plans that still carry conflicts are
                written back

        Returns:
            The optimization outcome and the tasks that changed. Nothing is
            written when the outcome carries no plan.
        """
        with self._lock:
            snapshot = self.snapshot(active_lane_ids)
            outcome = self._optimizer().optimize(snapshot, attempt_budget=attempt_budget)

            if outcome.plan is None:
                logger.warning(
                    "Optimization produced no plan",
                    status=outcome.status.value,
                    cycle=list(outcome.cycle),
                    problems=list(outcome.problems),
                )
                return OptimizeAndApplyResult(outcome=outcome)

            if not outcome.is_valid and not apply_best_effort:
                logger.info(
                    "Best-effort plan not applied",
                    status=outcome.status.value,
                    remaining_conflicts=outcome.plan.quality.remaining_conflicts,
                )
                return OptimizeAndApplyResult(outcome=outcome)

            applied = self._store.apply_plan(outcome.plan)
            logger.info(
                "Plan applied",
                status=outcome.status.value,
                changed=len(applied),
            )
            return OptimizeAndApplyResult(outcome=outcome, applied=tuple(applied))

    def detect_conflicts(self) -> ConflictReport:
        """Detect conflicts on live assignments and timing."""
        return ConflictDetector(self.snapshot()).detect()

    def task_warnings(self, task_number: str) -> TaskConflicts:
        """
        Conflicts a single task participates in.

        Raises:
            TaskNotFoundError: If no task has this number
        """
        snapshot = self.snapshot()
        if task_number not in snapshot.task_by_number:
            raise TaskNotFoundError(task_number)
        return ConflictDetector(snapshot).detect().for_task(task_number)

    def validate_dependencies(
        self, task_number: str, dependencies: Sequence[str]
    ) -> DependencyValidation:
        """Validate a proposed dependency list for a task."""
        return validate_proposed_dependencies(self.snapshot(), task_number, dependencies)

    def overdue_tasks(self, now: datetime) -> list[Task]:
        """Tasks that are not completed and whose expected end has passed."""
        return ConflictDetector(self.snapshot()).overdue_tasks(now)

    def change_status(
        self,
        task_number: str,
        new_status: TaskStatus,
        now: datetime,
        actual_duration_hours: float | None = None,
    ) -> Task:
        """
        Move a task through its lifecycle and save it.

        Raises:
            TaskNotFoundError: If no task has this number
            InvalidStatusTransitionError: If the transition is not allowed
        """
        with self._lock:
            task = self._store.get_task_by_number(task_number)
            if task is None:
                raise TaskNotFoundError(task_number)

            updated = task.transition_to(new_status, now, actual_duration_hours)
            logger.info(
                "Task status changed",
                task_number=task_number,
                from_status=task.status.value,
                to_status=new_status.value,
            )
            return self._store.save_task(updated)
