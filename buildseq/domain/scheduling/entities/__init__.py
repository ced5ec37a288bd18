"""Scheduling domain entities."""

from .lane import Lane, default_lanes
from .plan import OptimizationOutcome, OptimizationPlan, PlanAssignment, QualityReport
from .snapshot import ScheduleSnapshot
from .task import Task

__all__ = [
    "Lane",
    "OptimizationOutcome",
    "OptimizationPlan",
    "PlanAssignment",
    "QualityReport",
    "ScheduleSnapshot",
    "Task",
    "default_lanes",
]
