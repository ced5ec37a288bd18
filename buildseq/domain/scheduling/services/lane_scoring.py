"""
Lane scoring for the assignment optimizer.

Positions here are work hours from the schedule start; each lane keeps a
running cursor plus the fixed blocks (locked work, dead time) it must
schedule around.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from ..entities.task import Task
from ..value_objects.scoring import ScoringWeights


@dataclass
class LaneState:
    """Mutable per-attempt bookkeeping for one active lane."""

    lane_id: str
    index: int
    workload: float = 0.0
    cursor: int = 0
    blocks: list[tuple[float, float]] = field(default_factory=list)

    def add_block(self, start: float, end: float) -> None:
        if end > start:
            self.blocks.append((start, end))
            self.blocks.sort()

    def next_slot(self, earliest: float, duration: float) -> int:
        """
        Earliest integer position at or after both the cursor and
        ``earliest`` whose span does not intersect a fixed block.
        """
        position = max(self.cursor, math.ceil(earliest))
        moved = True
        while moved:
            moved = False
            for start, end in self.blocks:
                if position < end and start < position + duration:
                    position = math.ceil(end)
                    moved = True
        return position

    def place(self, position: int, duration: float) -> None:
        self.workload += duration
        self.cursor = max(self.cursor, math.ceil(position + duration))


@dataclass(frozen=True)
class SharedWindow:
    """Position window of a shared-resource task already on a lane."""

    lane_id: str
    start: float
    end: float

    def overlaps(self, start: float, end: float) -> bool:
        return self.start < end and start < self.end


@dataclass(frozen=True)
class LaneScore:
    """Score components of placing one task on one lane (lower is better)."""

    lane_id: str
    position: int
    balance: float
    load: float
    dependency: float
    resource: float
    movement: float

    @property
    def total(self) -> float:
        return self.balance + self.load + self.dependency + self.resource + self.movement


class LaneScorer:
    """
    Weighted lane scoring.

    Terms, in decreasing weight:
    - balance: projected workload above the average of the other lanes
    - resource: overlaps with shared-resource work on other lanes
    - dependency: dependencies placed on other lanes (bonus when on this one)
    - load: workload already on the lane
    - movement: lane-index distance from the task's original lane
    """

    def __init__(self, weights: ScoringWeights) -> None:
        self.weights = weights

    def score(
        self,
        task: Task,
        lane: LaneState,
        lanes: Sequence[LaneState],
        earliest: float,
        dependency_lanes: Mapping[str, str | None],
        shared_windows: Sequence[SharedWindow],
        original_index: int | None,
    ) -> LaneScore:
        """
        Score placing ``task`` on ``lane``.

        Args:
            task: Task being placed
            lane: Candidate lane state
            lanes: All active lane states
            earliest: Earliest start imposed by already placed dependencies
            dependency_lanes: Lane of every placed task, by task number
            shared_windows: Windows of shared-resource work placed so far
            original_index: Active-lane index of the task's current lane

        Returns:
            LaneScore with the chosen slot and each weighted term
        """
        weights = self.weights
        position = lane.next_slot(earliest, task.duration_hours)

        others = [other.workload for other in lanes if other.lane_id != lane.lane_id]
        average_others = sum(others) / len(others) if others else 0.0
        projected = lane.workload + task.duration_hours
        balance = weights.balance * max(0.0, projected - average_others)

        load = weights.load * lane.workload

        dependency = 0.0
        for dep_number in task.dependencies:
            if dep_number not in dependency_lanes:
                continue
            if dependency_lanes[dep_number] == lane.lane_id:
                dependency -= weights.same_lane_bonus
            else:
                dependency += weights.cross_lane_dependency

        resource = 0.0
        if task.requires_shared_resource:
            end = position + task.duration_hours
            overlaps = sum(
                1
                for window in shared_windows
                if window.lane_id != lane.lane_id and window.overlaps(position, end)
            )
            resource = weights.resource_overlap * overlaps

        movement = 0.0
        if original_index is not None:
            movement = weights.movement * abs(lane.index - original_index)

        return LaneScore(
            lane_id=lane.lane_id,
            position=position,
            balance=balance,
            load=load,
            dependency=dependency,
            resource=resource,
            movement=movement,
        )

    def best(self, scores: Sequence[LaneScore]) -> LaneScore:
        """Lowest total wins; ties go to the lane scored first."""
        best = scores[0]
        for candidate in scores[1:]:
            if candidate.total < best.total:
                best = candidate
        return best
