"""Read-only schedule snapshot consumed by the engine."""

from __future__ import annotations

from collections import Counter

from pydantic import PrivateAttr

from ...shared.base import ValueObject
from ..value_objects.timeline import TimelineConfig
from .lane import Lane
from .task import Task


class ScheduleSnapshot(ValueObject):
    """
    All tasks and lanes plus the timeline configuration.

    ``active_lane_ids`` is the ordered set of lanes currently in play; a
    lane's index in it is its distance reference for movement penalties.
    When omitted, every lane is active in declaration order.

    Lookup indices are built once at construction. When identifiers are
    duplicated the first occurrence wins; ``input_errors`` reports them.
    """

    tasks: tuple[Task, ...] = ()
    lanes: tuple[Lane, ...] = ()
    active_lane_ids: tuple[str, ...] | None = None
    timeline: TimelineConfig

    _task_by_number: dict[str, Task] = PrivateAttr(default_factory=dict)
    _task_by_id: dict[str, Task] = PrivateAttr(default_factory=dict)
    _lane_by_id: dict[str, Lane] = PrivateAttr(default_factory=dict)

    def model_post_init(self, __context: object) -> None:
        for task in self.tasks:
            self._task_by_number.setdefault(task.task_number, task)
            self._task_by_id.setdefault(task.id, task)
        for lane in self.lanes:
            self._lane_by_id.setdefault(lane.id, lane)

    @property
    def task_by_number(self) -> dict[str, Task]:
        return self._task_by_number

    @property
    def task_by_id(self) -> dict[str, Task]:
        return self._task_by_id

    @property
    def lane_by_id(self) -> dict[str, Lane]:
        return self._lane_by_id

    @property
    def active_lanes(self) -> list[Lane]:
        """Active lanes in display order; unknown ids are skipped."""
        if self.active_lane_ids is None:
            return list(self._lane_by_id.values())
        return [
            self._lane_by_id[lane_id]
            for lane_id in dict.fromkeys(self.active_lane_ids)
            if lane_id in self._lane_by_id
        ]

    @property
    def schedulable_tasks(self) -> list[Task]:
        """Tasks that take part in ordering (everything but dead time)."""
        return [task for task in self.tasks if not task.is_dead_time]

    def input_errors(self) -> list[str]:
        """
        Structural problems that make the snapshot unusable for optimization.

        Returns:
            Human-readable problem descriptions; empty when the snapshot is valid
        """
        problems: list[str] = []

        number_counts = Counter(task.task_number for task in self.tasks)
        for task_number, count in number_counts.items():
            if count > 1:
                problems.append(f"Duplicate task number {task_number} ({count} tasks)")

        id_counts = Counter(task.id for task in self.tasks)
        for task_id, count in id_counts.items():
            if count > 1:
                problems.append(f"Duplicate task id {task_id} ({count} tasks)")

        lane_counts = Counter(lane.id for lane in self.lanes)
        for lane_id, count in lane_counts.items():
            if count > 1:
                problems.append(f"Duplicate lane id {lane_id} ({count} lanes)")

        for lane_id in self.active_lane_ids or ():
            if lane_id not in self._lane_by_id:
                problems.append(f"Active lane {lane_id} does not exist")

        return problems

    def with_tasks(self, tasks: list[Task] | tuple[Task, ...]) -> ScheduleSnapshot:
        """Return a snapshot with the same lanes and timeline but new tasks."""
        return ScheduleSnapshot(
            tasks=tuple(tasks),
            lanes=self.lanes,
            active_lane_ids=self.active_lane_ids,
            timeline=self.timeline,
        )
