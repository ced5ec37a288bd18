"""
Test fixtures and factories for scheduling domain entities.

Provides reusable test data for tasks, lanes, timelines and snapshots.
Includes both simple fixtures and configurable factory functions for more
complex scenarios.
"""

from datetime import date, datetime, time

import pytest

from buildseq.domain.scheduling.entities.lane import Lane
from buildseq.domain.scheduling.entities.snapshot import ScheduleSnapshot
from buildseq.domain.scheduling.entities.task import Task
from buildseq.domain.scheduling.value_objects.enums import (
    LaneKind,
    TaskKind,
    TaskStatus,
)
from buildseq.domain.scheduling.value_objects.timeline import TimelineConfig

MONDAY = date(2024, 1, 15)


class TaskFactory:
    """Factory for creating test tasks."""

    @staticmethod
    def create_task(
        task_number: str = "M1",
        kind: TaskKind = TaskKind.MECHANICAL,
        duration_hours: float = 1.0,
        assigned_lane: str | None = None,
        position: int = 0,
        dependencies: list[str] | None = None,
        status: TaskStatus = TaskStatus.SCHEDULED,
        requires_shared_resource: bool = False,
        locked: bool = False,
        start_time: datetime | None = None,
        end_time: datetime | None = None,
        **kwargs,
    ) -> Task:
        """Create a task with sensible defaults; the id is derived from the number."""
        return Task(
            id=kwargs.pop("id", f"task-{task_number}"),
            task_number=task_number,
            kind=kind,
            duration_hours=duration_hours,
            assigned_lane=assigned_lane,
            position=position,
            dependencies=tuple(dependencies or ()),
            status=status,
            requires_shared_resource=requires_shared_resource,
            locked=locked,
            start_time=start_time,
            end_time=end_time,
            **kwargs,
        )

    @staticmethod
    def create_shared_resource_task(
        task_number: str, assigned_lane: str, position: int, duration_hours: float
    ) -> Task:
        """Create a task that needs the crane."""
        return TaskFactory.create_task(
            task_number=task_number,
            kind=TaskKind.KANBAN,
            assigned_lane=assigned_lane,
            position=position,
            duration_hours=duration_hours,
            requires_shared_resource=True,
        )

    @staticmethod
    def create_dead_time(
        task_number: str, assigned_lane: str, position: int, duration_hours: float
    ) -> Task:
        """Create a dead-time placeholder."""
        return TaskFactory.create_task(
            task_number=task_number,
            kind=TaskKind.DEAD_TIME,
            assigned_lane=assigned_lane,
            position=position,
            duration_hours=duration_hours,
        )

    @staticmethod
    def create_chain(count: int, prefix: str = "M", **kwargs) -> list[Task]:
        """Create tasks where each depends on the previous one."""
        tasks = []
        for i in range(1, count + 1):
            dependencies = [f"{prefix}{i - 1}"] if i > 1 else []
            tasks.append(
                TaskFactory.create_task(
                    task_number=f"{prefix}{i}", dependencies=dependencies, **kwargs
                )
            )
        return tasks


class LaneFactory:
    """Factory for creating test lanes."""

    @staticmethod
    def create_lane(
        lane_id: str = "L1", kind: LaneKind = LaneKind.GENERAL, name: str | None = None
    ) -> Lane:
        """Create a lane."""
        return Lane(id=lane_id, name=name or f"Lane {lane_id}", kind=kind)

    @staticmethod
    def create_standard_lanes() -> list[Lane]:
        """Mechanical, electrical and final lanes."""
        return [
            LaneFactory.create_lane("MECH", LaneKind.MECHANICAL),
            LaneFactory.create_lane("ELEC", LaneKind.ELECTRICAL),
            LaneFactory.create_lane("FINAL", LaneKind.FINAL),
        ]


class SnapshotFactory:
    """Factory for creating schedule snapshots."""

    @staticmethod
    def create_timeline(
        start_date: date = MONDAY, hours_per_day: float = 9.0
    ) -> TimelineConfig:
        """Timeline starting 06:00 on a Monday."""
        return TimelineConfig(
            hours_per_day=hours_per_day, start_date=start_date, start_time=time(6, 0)
        )

    @staticmethod
    def create_snapshot(
        tasks: list[Task],
        lanes: list[Lane] | None = None,
        active_lane_ids: list[str] | None = None,
        timeline: TimelineConfig | None = None,
    ) -> ScheduleSnapshot:
        """
        Create a snapshot.

        Without explicit lanes, a general lane is created for every lane id the
        tasks reference, in sorted order.
        """
        if lanes is None:
            lane_ids = sorted({t.assigned_lane for t in tasks if t.assigned_lane})
            lanes = [LaneFactory.create_lane(lane_id) for lane_id in lane_ids]
        return ScheduleSnapshot(
            tasks=tuple(tasks),
            lanes=tuple(lanes),
            active_lane_ids=tuple(active_lane_ids) if active_lane_ids is not None else None,
            timeline=timeline or SnapshotFactory.create_timeline(),
        )


# Time fixtures
@pytest.fixture
def monday():
    """Monday 2024-01-15."""
    return MONDAY


@pytest.fixture
def base_time():
    """Start of the work day on Monday."""
    return datetime(2024, 1, 15, 6, 0, 0)


@pytest.fixture
def timeline():
    """Standard 9-hour timeline starting Monday 06:00."""
    return SnapshotFactory.create_timeline()


# Lane fixtures
@pytest.fixture
def standard_lanes():
    """Mechanical, electrical and final lanes."""
    return LaneFactory.create_standard_lanes()


# Task fixtures
@pytest.fixture
def same_lane_sequence():
    """Three tasks on one lane with dependencies placed before the dependent."""
    return [
        TaskFactory.create_task("M4", duration_hours=4, assigned_lane="L1", position=0),
        TaskFactory.create_task(
            "S4", kind=TaskKind.SUB_ASSEMBLY, duration_hours=3, assigned_lane="L1", position=1
        ),
        TaskFactory.create_task(
            "M5",
            duration_hours=6,
            assigned_lane="L1",
            position=2,
            dependencies=["M4", "S4"],
        ),
    ]


@pytest.fixture
def three_task_cycle():
    """X -> Y -> Z -> X."""
    return [
        TaskFactory.create_task("X", dependencies=["Z"]),
        TaskFactory.create_task("Y", dependencies=["X"]),
        TaskFactory.create_task("Z", dependencies=["Y"]),
    ]
