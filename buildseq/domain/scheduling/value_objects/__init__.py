"""Value objects for the scheduling domain."""

from .conflicts import (
    ConflictReport,
    DependencyConflict,
    ResourceConflict,
    TaskConflicts,
)
from .enums import (
    DependencyConflictReason,
    DependencyIssueReason,
    LaneKind,
    LaneStatus,
    OrderingStrategy,
    OutcomeStatus,
    TaskKind,
    TaskStatus,
)
from .scoring import ScoringWeights
from .time_window import (
    ExplicitTiming,
    PositionTiming,
    TaskTiming,
    TimeWindow,
    resolve_timing,
    windows_overlap,
)
from .timeline import (
    TimelineConfig,
    add_work_hours,
    as_naive_utc,
    business_day,
    is_business_day,
    position_to_timestamp,
    position_window,
)

__all__ = [
    "ConflictReport",
    "DependencyConflict",
    "DependencyConflictReason",
    "DependencyIssueReason",
    "ExplicitTiming",
    "LaneKind",
    "LaneStatus",
    "OrderingStrategy",
    "OutcomeStatus",
    "PositionTiming",
    "ResourceConflict",
    "ScoringWeights",
    "TaskConflicts",
    "TaskKind",
    "TaskStatus",
    "TaskTiming",
    "TimeWindow",
    "TimelineConfig",
    "add_work_hours",
    "as_naive_utc",
    "business_day",
    "is_business_day",
    "position_to_timestamp",
    "position_window",
    "resolve_timing",
    "windows_overlap",
]
