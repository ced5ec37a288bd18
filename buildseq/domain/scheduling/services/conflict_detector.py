"""
Conflict Detector Domain Service

Pure checks over a schedule snapshot: dependency ordering violations and
shared-resource ("crane") overlaps between lanes.
"""

from __future__ import annotations

from datetime import datetime

from ....core.observability import get_logger, record_conflict_detection
from ...shared.base import DomainService
from ..entities.snapshot import ScheduleSnapshot
from ..entities.task import Task
from ..value_objects.conflicts import (
    ConflictReport,
    DependencyConflict,
    ResourceConflict,
)
from ..value_objects.enums import DependencyConflictReason
from ..value_objects.time_window import TaskTiming, TimeWindow, windows_overlap
from ..value_objects.timeline import as_naive_utc

logger = get_logger(__name__)


class ConflictDetector(DomainService):
    """
    Domain service that answers "is this task in conflict" from a snapshot.

    Each task's timing is resolved once, when the detector is built. The
    detector never mutates the snapshot and never raises on malformed
    timing: degenerate windows are simply excluded from overlap checks.
    """

    def __init__(self, snapshot: ScheduleSnapshot) -> None:
        self.snapshot = snapshot
        self.config = snapshot.timeline
        self._timings: dict[str, TaskTiming] = {
            task.id: task.timing for task in snapshot.tasks
        }

    def timing_of(self, task: Task) -> TaskTiming:
        timing = self._timings.get(task.id)
        if timing is None:
            timing = task.timing
        return timing

    def dependency_conflicts_for(self, task: Task) -> list[DependencyConflict]:
        """
        Check every declared dependency of a task.

        A dependency conflicts when it:
        - does not exist in the snapshot (missing)
        - sits on the same lane at the same or a later position (misordered)
        - sits on another lane and finishes after the task starts, using
          recorded timestamps when present and position-derived timing
          otherwise (late_finish)
        - sits on another lane and is blocked (blocked)

        Args:
            task: Dependent task

        Returns:
            At most one conflict per dependency, in declaration order
        """
        conflicts = []
        for dep_number in task.dependencies:
            conflict = self._check_dependency(task, dep_number)
            if conflict is not None:
                conflicts.append(conflict)
        return conflicts

    def _check_dependency(
        self, task: Task, dep_number: str
    ) -> DependencyConflict | None:
        dependency = self.snapshot.task_by_number.get(dep_number)
        if dependency is None:
            return DependencyConflict(
                task_number=task.task_number,
                dependency=dep_number,
                reason=DependencyConflictReason.MISSING,
            )

        if _same_lane(task, dependency):
            if dependency.position >= task.position:
                return DependencyConflict(
                    task_number=task.task_number,
                    dependency=dep_number,
                    reason=DependencyConflictReason.MISORDERED,
                )
            return None

        dependency_end = self.timing_of(dependency).calendar_end(self.config)
        task_start = self.timing_of(task).calendar_start(self.config)
        if dependency_end > task_start:
            return DependencyConflict(
                task_number=task.task_number,
                dependency=dep_number,
                reason=DependencyConflictReason.LATE_FINISH,
                dependency_end=dependency_end,
                task_start=task_start,
            )

        if dependency.is_blocked:
            return DependencyConflict(
                task_number=task.task_number,
                dependency=dep_number,
                reason=DependencyConflictReason.BLOCKED,
            )
        return None

    def resource_overlap(self, a: Task, b: Task) -> TimeWindow | None:
        """
        Overlap window of two tasks competing for the shared resource.

        Only tasks that both require the shared resource and are assigned to
        different lanes can conflict; a lane serializes its own work.
        Position-timed pairs are compared in work hours, anything involving
        recorded timestamps on the calendar. The result is symmetric.

        Returns:
            The overlapping window, or None when there is no conflict
        """
        if a.id == b.id:
            return None
        if not (a.requires_shared_resource and b.requires_shared_resource):
            return None
        if a.assigned_lane is None or b.assigned_lane is None:
            return None
        if a.assigned_lane == b.assigned_lane:
            return None
        return windows_overlap(self.timing_of(a), self.timing_of(b), self.config)

    def dependency_conflicts(self) -> list[DependencyConflict]:
        conflicts: list[DependencyConflict] = []
        for task in self.snapshot.tasks:
            conflicts.extend(self.dependency_conflicts_for(task))
        return conflicts

    def resource_conflicts(self) -> list[ResourceConflict]:
        """Every unordered pair of overlapping shared-resource tasks, once."""
        shared = [
            task
            for task in self.snapshot.tasks
            if task.requires_shared_resource and task.assigned_lane is not None
        ]

        conflicts = []
        for i, first in enumerate(shared):
            for second in shared[i + 1 :]:
                if first.task_number == second.task_number:
                    continue
                overlap = self.resource_overlap(first, second)
                if overlap is not None:
                    conflicts.append(
                        ResourceConflict.between(
                            first.task_number, second.task_number, overlap
                        )
                    )

        conflicts.sort(key=lambda conflict: (conflict.first, conflict.second))
        return conflicts

    def detect(self) -> ConflictReport:
        """Run both checks over the whole snapshot."""
        report = ConflictReport(
            dependency_conflicts=tuple(self.dependency_conflicts()),
            resource_conflicts=tuple(self.resource_conflicts()),
        )
        logger.debug(
            "Conflict detection finished",
            tasks=len(self.snapshot.tasks),
            dependency_conflicts=report.dependency_count,
            resource_conflicts=report.resource_count,
        )
        return report

    def expected_end(self, task: Task) -> datetime:
        """Recorded end, or the end implied by the task's timing."""
        return self.timing_of(task).calendar_end(self.config)

    def overdue_tasks(self, now: datetime) -> list[Task]:
        """
        Tasks that are behind schedule.

        A task is overdue when it is not completed and its expected end
        lies before ``now``. Dead-time placeholders are never overdue.
        """
        now = as_naive_utc(now)
        return [
            task
            for task in self.snapshot.tasks
            if not task.is_completed
            and not task.is_dead_time
            and self.expected_end(task) < now
        ]


def _same_lane(a: Task, b: Task) -> bool:
    return a.assigned_lane is not None and a.assigned_lane == b.assigned_lane


def detect_conflicts(snapshot: ScheduleSnapshot) -> ConflictReport:
    """
    Detect all dependency and shared-resource conflicts in a snapshot.

    Args:
        snapshot: Schedule snapshot with live assignments and timing

    Returns:
        ConflictReport with structured conflict values
    """
    report = ConflictDetector(snapshot).detect()
    record_conflict_detection(report.dependency_count, report.resource_count)
    return report
