"""Domain enums for build sequence scheduling."""

from enum import Enum


class TaskKind(str, Enum):
    """Assembly card kind."""

    MECHANICAL = "M"
    ELECTRICAL = "E"
    SUB_ASSEMBLY = "S"
    PRE_ASSEMBLY = "P"
    KANBAN = "KB"
    DEAD_TIME = "DEAD_TIME"

    @property
    def is_dead_time(self) -> bool:
        """Dead-time placeholders never take part in optimization."""
        return self is TaskKind.DEAD_TIME


class LaneKind(str, Enum):
    """Assembler (lane) kind."""

    MECHANICAL = "mechanical"
    ELECTRICAL = "electrical"
    FINAL = "final"
    QC = "qc"
    GENERAL = "general"  # catch-all lane

    def accepts(self, task_kind: TaskKind) -> bool:
        """Check whether a task of the given kind may run on this lane kind."""
        if self is LaneKind.GENERAL:
            return True
        allowed = _LANE_KINDS_BY_TASK_KIND.get(task_kind)
        return allowed is None or self in allowed


# None means "any lane kind"
_LANE_KINDS_BY_TASK_KIND: dict[TaskKind, frozenset[LaneKind] | None] = {
    TaskKind.MECHANICAL: frozenset({LaneKind.MECHANICAL}),
    TaskKind.ELECTRICAL: frozenset({LaneKind.ELECTRICAL}),
    TaskKind.SUB_ASSEMBLY: frozenset({LaneKind.MECHANICAL, LaneKind.ELECTRICAL}),
    TaskKind.PRE_ASSEMBLY: frozenset({LaneKind.MECHANICAL, LaneKind.ELECTRICAL}),
    TaskKind.KANBAN: None,
    TaskKind.DEAD_TIME: None,
}


class LaneStatus(str, Enum):
    """Assembler availability, informational only."""

    AVAILABLE = "available"
    BUSY = "busy"
    OFFLINE = "offline"


class TaskStatus(str, Enum):
    """Assembly card lifecycle status."""

    SCHEDULED = "scheduled"
    CLEARED_FOR_PICKING = "cleared_for_picking"
    PICKING = "picking"
    DELIVERED_TO_PAINT = "delivered_to_paint"
    READY_FOR_BUILD = "ready_for_build"
    ASSEMBLING = "assembling"
    PAUSED = "paused"
    COMPLETED = "completed"
    BLOCKED = "blocked"

    @property
    def is_terminal(self) -> bool:
        """Check if task status is terminal."""
        return self is TaskStatus.COMPLETED

    @property
    def is_in_progress(self) -> bool:
        """Check if assembly work has started and not finished."""
        return self in {TaskStatus.ASSEMBLING, TaskStatus.PAUSED}

    def can_transition_to(self, target_status: "TaskStatus") -> bool:
        """Check if task can transition from current status to target status."""
        if target_status is self:
            return False
        if self is TaskStatus.BLOCKED:
            return not target_status.is_terminal
        if target_status is TaskStatus.BLOCKED:
            return not self.is_terminal

        valid_transitions = {
            TaskStatus.SCHEDULED: {
                TaskStatus.CLEARED_FOR_PICKING,
                TaskStatus.READY_FOR_BUILD,
            },
            TaskStatus.CLEARED_FOR_PICKING: {TaskStatus.PICKING},
            TaskStatus.PICKING: {
                TaskStatus.DELIVERED_TO_PAINT,
                TaskStatus.READY_FOR_BUILD,
            },
            TaskStatus.DELIVERED_TO_PAINT: {TaskStatus.READY_FOR_BUILD},
            TaskStatus.READY_FOR_BUILD: {TaskStatus.ASSEMBLING},
            TaskStatus.ASSEMBLING: {
                TaskStatus.PAUSED,
                TaskStatus.COMPLETED,
                TaskStatus.READY_FOR_BUILD,  # timer reset
            },
            TaskStatus.PAUSED: {
                TaskStatus.ASSEMBLING,
                TaskStatus.COMPLETED,
                TaskStatus.READY_FOR_BUILD,  # timer reset
            },
            TaskStatus.COMPLETED: set(),  # Terminal state
        }
        return target_status in valid_transitions.get(self, set())


class DependencyConflictReason(str, Enum):
    """Why a dependency of a task is in conflict."""

    MISSING = "missing"
    MISORDERED = "misordered"  # same lane, dependency not strictly before
    LATE_FINISH = "late_finish"  # other lane, dependency ends after task starts
    BLOCKED = "blocked"


class DependencyIssueReason(str, Enum):
    """Why a proposed dependency list is rejected."""

    UNKNOWN_TASK = "unknown_task"
    UNKNOWN_DEPENDENCY = "unknown_dependency"
    SELF_DEPENDENCY = "self_dependency"
    DEAD_TIME = "dead_time"
    CIRCULAR = "circular"
    BLOCKED = "blocked"
    LATE_FINISH = "late_finish"


class OutcomeStatus(str, Enum):
    """Status of an optimization outcome."""

    VALID = "valid"
    BEST_EFFORT = "best_effort"
    TIMEOUT = "timeout"
    CYCLE_DETECTED = "cycle_detected"
    INVALID_INPUT = "invalid_input"

    @property
    def has_plan(self) -> bool:
        """Check if outcomes with this status carry a plan."""
        return self in {
            OutcomeStatus.VALID,
            OutcomeStatus.BEST_EFFORT,
            OutcomeStatus.TIMEOUT,
        }


class OrderingStrategy(str, Enum):
    """Tie-break strategy used to perturb the processing order between attempts."""

    TOPOLOGICAL = "topological"
    SHUFFLE = "shuffle"
    MOST_DEPENDENCIES_FIRST = "most_dependencies_first"
    GROUPED_BY_KIND = "grouped_by_kind"
