"""
Unit Tests for the Conflict Detector

Tests dependency ordering violations, cross-lane timing checks and
shared-resource overlaps.
"""

from datetime import datetime, timedelta, timezone

import pytest

from buildseq.domain.scheduling.services.conflict_detector import (
    ConflictDetector,
    detect_conflicts,
)
from buildseq.domain.scheduling.value_objects.enums import (
    DependencyConflictReason,
    TaskStatus,
)
from buildseq.domain.scheduling.value_objects.time_window import TimeWindow

from ..fixtures import SnapshotFactory, TaskFactory


class TestSameLaneDependencies:
    """Test ordering checks for dependencies on the same lane."""

    def test_dependencies_before_dependent(self, same_lane_sequence):
        """Test dependencies placed earlier on the lane are satisfied."""
        snapshot = SnapshotFactory.create_snapshot(same_lane_sequence)

        report = detect_conflicts(snapshot)

        assert report.dependency_count == 0
        assert not report.has_conflicts

    def test_dependent_moved_before_dependencies(self, same_lane_sequence):
        """Test moving the dependent to the front misorders both dependencies."""
        m4, s4, m5 = same_lane_sequence
        snapshot = SnapshotFactory.create_snapshot([m4, s4, m5.with_assignment("L1", 0)])

        report = detect_conflicts(snapshot)

        assert report.dependency_count == 2
        assert [(c.dependency, c.reason) for c in report.dependency_conflicts] == [
            ("M4", DependencyConflictReason.MISORDERED),
            ("S4", DependencyConflictReason.MISORDERED),
        ]
        assert all(c.task_number == "M5" for c in report.dependency_conflicts)

    def test_equal_position_is_misordered(self):
        """Test a dependency at the same position is not strictly before."""
        snapshot = SnapshotFactory.create_snapshot(
            [
                TaskFactory.create_task("A", assigned_lane="L1", position=3),
                TaskFactory.create_task(
                    "B", assigned_lane="L1", position=3, dependencies=["A"]
                ),
            ]
        )

        conflicts = ConflictDetector(snapshot).dependency_conflicts()

        assert [c.reason for c in conflicts] == [DependencyConflictReason.MISORDERED]

    def test_same_lane_ignores_timing_overlap(self):
        """Test same-lane order is judged by position only."""
        snapshot = SnapshotFactory.create_snapshot(
            [
                TaskFactory.create_task("A", assigned_lane="L1", position=0, duration_hours=8),
                TaskFactory.create_task(
                    "B", assigned_lane="L1", position=1, dependencies=["A"]
                ),
            ]
        )

        assert ConflictDetector(snapshot).dependency_conflicts() == []


class TestCrossLaneDependencies:
    """Test timing checks for dependencies on other lanes."""

    def test_late_finish_from_positions(self):
        """Test a dependency ending after the dependent's start."""
        snapshot = SnapshotFactory.create_snapshot(
            [
                TaskFactory.create_task("D", assigned_lane="L1", position=0, duration_hours=4),
                TaskFactory.create_task(
                    "T", assigned_lane="L2", position=2, dependencies=["D"]
                ),
            ]
        )

        (conflict,) = ConflictDetector(snapshot).dependency_conflicts()

        assert conflict.reason is DependencyConflictReason.LATE_FINISH
        assert conflict.dependency_end == datetime(2024, 1, 15, 10, 0)
        assert conflict.task_start == datetime(2024, 1, 15, 8, 0)

    def test_dependency_finishing_at_start_is_fine(self):
        """Test finishing exactly when the dependent starts is allowed."""
        snapshot = SnapshotFactory.create_snapshot(
            [
                TaskFactory.create_task("D", assigned_lane="L1", position=0, duration_hours=4),
                TaskFactory.create_task(
                    "T", assigned_lane="L2", position=4, dependencies=["D"]
                ),
            ]
        )

        assert ConflictDetector(snapshot).dependency_conflicts() == []

    def test_recorded_timestamps_take_precedence(self, base_time):
        """Test recorded times override positions."""
        snapshot = SnapshotFactory.create_snapshot(
            [
                TaskFactory.create_task(
                    "D",
                    assigned_lane="L1",
                    position=0,
                    start_time=base_time,
                    end_time=base_time + timedelta(days=1),
                ),
                TaskFactory.create_task(
                    "T", assigned_lane="L2", position=2, dependencies=["D"]
                ),
            ]
        )

        (conflict,) = ConflictDetector(snapshot).dependency_conflicts()

        assert conflict.reason is DependencyConflictReason.LATE_FINISH
        assert conflict.dependency_end == base_time + timedelta(days=1)

    def test_aware_start_compared_with_positional_dependency(self):
        """Test a zone-aware recorded start is compared on the UTC timeline."""
        plus_two = timezone(timedelta(hours=2))
        snapshot = SnapshotFactory.create_snapshot(
            [
                TaskFactory.create_task("D", assigned_lane="L1", position=0, duration_hours=2),
                TaskFactory.create_task(
                    "T",
                    assigned_lane="L2",
                    position=5,
                    dependencies=["D"],
                    start_time=datetime(2024, 1, 15, 8, 0, tzinfo=plus_two),
                ),
            ]
        )

        (conflict,) = detect_conflicts(snapshot).dependency_conflicts

        assert conflict.reason is DependencyConflictReason.LATE_FINISH
        assert conflict.dependency_end == datetime(2024, 1, 15, 8, 0)
        assert conflict.task_start == datetime(2024, 1, 15, 6, 0)

    def test_aware_start_after_dependency_is_fine(self):
        """Test an aware start after the dependency's end is not a conflict."""
        snapshot = SnapshotFactory.create_snapshot(
            [
                TaskFactory.create_task("D", assigned_lane="L1", position=0, duration_hours=2),
                TaskFactory.create_task(
                    "T",
                    assigned_lane="L2",
                    position=5,
                    dependencies=["D"],
                    start_time=datetime(2024, 1, 15, 14, 0, tzinfo=timezone.utc),
                ),
            ]
        )

        assert detect_conflicts(snapshot).dependency_count == 0

    def test_blocked_dependency_on_other_lane(self):
        """Test a blocked dependency on another lane conflicts."""
        snapshot = SnapshotFactory.create_snapshot(
            [
                TaskFactory.create_task(
                    "D", assigned_lane="L1", position=0, status=TaskStatus.BLOCKED
                ),
                TaskFactory.create_task(
                    "T", assigned_lane="L2", position=5, dependencies=["D"]
                ),
            ]
        )

        (conflict,) = ConflictDetector(snapshot).dependency_conflicts()

        assert conflict.reason is DependencyConflictReason.BLOCKED

    def test_blocked_dependency_on_same_lane_is_not_reported(self):
        """Test blocked status only matters across lanes."""
        snapshot = SnapshotFactory.create_snapshot(
            [
                TaskFactory.create_task(
                    "D", assigned_lane="L1", position=0, status=TaskStatus.BLOCKED
                ),
                TaskFactory.create_task(
                    "T", assigned_lane="L1", position=5, dependencies=["D"]
                ),
            ]
        )

        assert ConflictDetector(snapshot).dependency_conflicts() == []

    def test_missing_dependency(self):
        """Test a dependency naming no task."""
        snapshot = SnapshotFactory.create_snapshot(
            [TaskFactory.create_task("T", assigned_lane="L1", dependencies=["GHOST"])]
        )

        (conflict,) = ConflictDetector(snapshot).dependency_conflicts()

        assert conflict.reason is DependencyConflictReason.MISSING
        assert conflict.dependency == "GHOST"
        assert conflict.to_dict() == {
            "task_number": "T",
            "dependency": "GHOST",
            "reason": "missing",
            "dependency_end": None,
            "task_start": None,
        }


class TestResourceConflicts:
    """Test shared-resource overlap detection."""

    def test_overlap_on_different_lanes(self):
        """Test overlapping crane work on two lanes conflicts."""
        snapshot = SnapshotFactory.create_snapshot(
            [
                TaskFactory.create_shared_resource_task("A", "L1", 0, 3),
                TaskFactory.create_shared_resource_task("B", "L2", 1, 2),
            ]
        )

        report = detect_conflicts(snapshot)

        assert report.resource_count == 1
        conflict = report.resource_conflicts[0]
        assert (conflict.first, conflict.second) == ("A", "B")
        assert conflict.overlap == TimeWindow(start_hours=1, end_hours=3)

    def test_same_lane_never_conflicts(self):
        """Test a lane serializes its own crane work."""
        snapshot = SnapshotFactory.create_snapshot(
            [
                TaskFactory.create_shared_resource_task("A", "L1", 0, 3),
                TaskFactory.create_shared_resource_task("B", "L1", 1, 2),
            ]
        )

        assert detect_conflicts(snapshot).resource_count == 0

    def test_touching_windows_do_not_conflict(self):
        """Test back-to-back crane work is fine."""
        snapshot = SnapshotFactory.create_snapshot(
            [
                TaskFactory.create_shared_resource_task("A", "L1", 0, 3),
                TaskFactory.create_shared_resource_task("B", "L2", 3, 2),
            ]
        )

        assert detect_conflicts(snapshot).resource_count == 0

    def test_only_shared_resource_tasks_conflict(self):
        """Test a task not needing the crane never conflicts."""
        snapshot = SnapshotFactory.create_snapshot(
            [
                TaskFactory.create_shared_resource_task("A", "L1", 0, 3),
                TaskFactory.create_task("B", assigned_lane="L2", position=1, duration_hours=2),
            ]
        )

        assert detect_conflicts(snapshot).resource_count == 0

    def test_unassigned_tasks_never_conflict(self):
        """Test tasks without a lane are ignored."""
        unassigned = TaskFactory.create_task(
            "B", position=1, duration_hours=2, requires_shared_resource=True
        )
        snapshot = SnapshotFactory.create_snapshot(
            [TaskFactory.create_shared_resource_task("A", "L1", 0, 3), unassigned]
        )

        detector = ConflictDetector(snapshot)

        assert detector.resource_conflicts() == []
        assert detector.resource_overlap(snapshot.tasks[0], unassigned) is None

    def test_overlap_is_symmetric(self):
        """Test the overlap does not depend on argument order."""
        a = TaskFactory.create_shared_resource_task("A", "L1", 0, 3)
        b = TaskFactory.create_shared_resource_task("B", "L2", 1, 2)
        detector = ConflictDetector(SnapshotFactory.create_snapshot([a, b]))

        assert detector.resource_overlap(a, b) == detector.resource_overlap(b, a)

    def test_each_pair_reported_once_in_order(self):
        """Test three mutually overlapping tasks give three sorted pairs."""
        snapshot = SnapshotFactory.create_snapshot(
            [
                TaskFactory.create_shared_resource_task("C", "L3", 0, 4),
                TaskFactory.create_shared_resource_task("A", "L1", 0, 4),
                TaskFactory.create_shared_resource_task("B", "L2", 0, 4),
            ]
        )

        pairs = [(c.first, c.second) for c in detect_conflicts(snapshot).resource_conflicts]

        assert pairs == [("A", "B"), ("A", "C"), ("B", "C")]

    def test_degenerate_recorded_window_excluded(self, base_time):
        """Test an end before start never overlaps."""
        broken = TaskFactory.create_task(
            "A",
            assigned_lane="L1",
            requires_shared_resource=True,
            start_time=base_time + timedelta(hours=2),
            end_time=base_time,
        )
        snapshot = SnapshotFactory.create_snapshot(
            [broken, TaskFactory.create_shared_resource_task("B", "L2", 0, 4)]
        )

        assert detect_conflicts(snapshot).resource_count == 0

    def test_recorded_and_positional_compared_on_calendar(self, base_time):
        """Test mixed timing is compared in calendar time."""
        recorded = TaskFactory.create_task(
            "A",
            assigned_lane="L1",
            requires_shared_resource=True,
            start_time=base_time,
            end_time=base_time + timedelta(hours=3),
        )
        snapshot = SnapshotFactory.create_snapshot(
            [recorded, TaskFactory.create_shared_resource_task("B", "L2", 1, 2)]
        )

        (conflict,) = detect_conflicts(snapshot).resource_conflicts

        assert conflict.overlap == TimeWindow(
            start_time=datetime(2024, 1, 15, 7, 0),
            end_time=datetime(2024, 1, 15, 9, 0),
        )

    def test_aware_recorded_window_against_positional(self):
        """Test a zone-aware recorded window is converted before comparing."""
        plus_two = timezone(timedelta(hours=2))
        recorded = TaskFactory.create_task(
            "A",
            assigned_lane="L1",
            requires_shared_resource=True,
            start_time=datetime(2024, 1, 15, 9, 0, tzinfo=plus_two),
            end_time=datetime(2024, 1, 15, 12, 0, tzinfo=plus_two),
        )
        snapshot = SnapshotFactory.create_snapshot(
            [recorded, TaskFactory.create_shared_resource_task("B", "L2", 1, 2)]
        )

        (conflict,) = detect_conflicts(snapshot).resource_conflicts

        assert conflict.overlap == TimeWindow(
            start_time=datetime(2024, 1, 15, 7, 0),
            end_time=datetime(2024, 1, 15, 9, 0),
        )


class TestConflictReport:
    """Test report aggregation and per-task views."""

    @pytest.fixture
    def conflicted_snapshot(self):
        return SnapshotFactory.create_snapshot(
            [
                TaskFactory.create_shared_resource_task("A", "L1", 0, 3),
                TaskFactory.create_shared_resource_task("B", "L2", 1, 2),
                TaskFactory.create_task(
                    "C", assigned_lane="L2", position=0, dependencies=["GHOST"]
                ),
            ]
        )

    def test_totals(self, conflicted_snapshot):
        """Test counts across both conflict kinds."""
        report = detect_conflicts(conflicted_snapshot)

        assert report.dependency_count == 1
        assert report.resource_count == 1
        assert report.total == 2

    def test_for_task(self, conflicted_snapshot):
        """Test per-task view of conflicts."""
        report = detect_conflicts(conflicted_snapshot)

        b = report.for_task("B")
        c = report.for_task("C")

        assert b.has_conflicts
        assert b.dependency_conflicts == ()
        assert b.resource_conflicts[0].other("B") == "A"
        assert [d.dependency for d in c.dependency_conflicts] == ["GHOST"]
        assert not report.for_task("Z").has_conflicts

    def test_detection_is_idempotent(self, conflicted_snapshot):
        """Test detecting twice gives equal reports."""
        assert detect_conflicts(conflicted_snapshot) == detect_conflicts(
            conflicted_snapshot
        )

    def test_to_dict(self, conflicted_snapshot):
        """Test reports serialize to plain data."""
        data = detect_conflicts(conflicted_snapshot).to_dict()

        assert data["resource_conflicts"] == [
            {"first": "A", "second": "B", "overlap": {"start": 1.0, "end": 3.0}}
        ]
        assert data["dependency_conflicts"][0]["reason"] == "missing"


class TestOverdueTasks:
    """Test detection of tasks running behind."""

    def test_expected_end_passed(self):
        """Test a task whose expected end has passed is overdue."""
        snapshot = SnapshotFactory.create_snapshot(
            [
                TaskFactory.create_task("A", assigned_lane="L1", position=0, duration_hours=2),
                TaskFactory.create_task("B", assigned_lane="L1", position=5, duration_hours=2),
            ]
        )

        overdue = ConflictDetector(snapshot).overdue_tasks(datetime(2024, 1, 15, 9, 0))

        assert [task.task_number for task in overdue] == ["A"]

    def test_completed_and_dead_time_never_overdue(self, base_time):
        """Test finished work and placeholders are excluded."""
        snapshot = SnapshotFactory.create_snapshot(
            [
                TaskFactory.create_task(
                    "A",
                    assigned_lane="L1",
                    status=TaskStatus.COMPLETED,
                    start_time=base_time,
                    end_time=base_time + timedelta(hours=1),
                ),
                TaskFactory.create_dead_time("DT1", "L1", 1, 1),
            ]
        )

        assert ConflictDetector(snapshot).overdue_tasks(base_time + timedelta(days=3)) == []

    def test_running_work_uses_projected_end(self, base_time):
        """Test assembling work is overdue once its projected end passes."""
        running = TaskFactory.create_task(
            "A",
            assigned_lane="L1",
            duration_hours=2,
            status=TaskStatus.ASSEMBLING,
            start_time=base_time,
        )
        detector = ConflictDetector(SnapshotFactory.create_snapshot([running]))

        assert detector.expected_end(running) == base_time + timedelta(hours=2)
        assert detector.overdue_tasks(base_time + timedelta(hours=1)) == []
        assert detector.overdue_tasks(base_time + timedelta(hours=3)) == [running]

    def test_aware_now(self):
        """Test a zone-aware current time is accepted."""
        snapshot = SnapshotFactory.create_snapshot(
            [TaskFactory.create_task("A", assigned_lane="L1", position=0, duration_hours=2)]
        )
        detector = ConflictDetector(snapshot)

        assert detector.overdue_tasks(datetime(2024, 1, 15, 9, 0, tzinfo=timezone.utc))
        assert detector.overdue_tasks(datetime(2024, 1, 15, 7, 0, tzinfo=timezone.utc)) == []
