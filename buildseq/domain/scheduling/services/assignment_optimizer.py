"""
Assignment Optimizer Domain Service

Greedy lane assignment with restarts. Each attempt walks a topological order
once, placing every movable task on its best-scoring compatible lane; the
search keeps the best plan seen and stops early at the first conflict-free
one.

This is deliberately a heuristic, not an exact solver: shop-floor schedules
must be re-planned interactively, and a fast, explainable plan is preferred
over an optimal but opaque one.
"""

from __future__ import annotations

import random
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from ....core.observability import (
    get_logger,
    monitor_performance,
    record_optimization_outcome,
)
from ...shared.base import DomainService
from ..entities.lane import Lane
from ..entities.plan import (
    OptimizationOutcome,
    OptimizationPlan,
    PlanAssignment,
    QualityReport,
    apply_assignments,
)
from ..entities.snapshot import ScheduleSnapshot
from ..value_objects.conflicts import ConflictReport
from ..value_objects.enums import OrderingStrategy, OutcomeStatus
from ..value_objects.scoring import ScoringWeights
from .conflict_detector import ConflictDetector
from .dependency_graph import validate_and_order
from .lane_scoring import LaneScorer, LaneState, SharedWindow
from .ordering_strategies import priority_key, strategy_for_attempt

logger = get_logger(__name__)

DEFAULT_ATTEMPT_BUDGET = 20


@dataclass(frozen=True)
class _Candidate:
    """One attempt's plan together with the conflicts it leaves behind."""

    attempt: int
    strategy: OrderingStrategy
    assignments: tuple[PlanAssignment, ...]
    conflicts: ConflictReport
    max_workload: float
    avg_workload: float

    def rank(self) -> tuple[int, float]:
        return (self.conflicts.total, self.max_workload)


def _better(best: _Candidate, candidate: _Candidate) -> _Candidate:
    """Fewest conflicts wins, then lowest peak workload; earlier attempts win ties."""
    if candidate.rank() < best.rank():
        return candidate
    return best


class AssignmentOptimizer(DomainService):
    """
    Domain service computing lane/position plans for a schedule snapshot.

    Locked tasks keep their lane and position and count towards workload.
    Dead-time tasks are never moved; together with locked tasks they form
    fixed blocks other work is scheduled around. Tasks without a compatible
    active lane stay where they are and are reported as unassignable.
    """

    def __init__(
        self,
        weights: ScoringWeights | None = None,
        attempt_budget: int = DEFAULT_ATTEMPT_BUDGET,
        seed: int | None = None,
        time_limit_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if attempt_budget < 1:
            raise ValueError("Attempt budget must be at least 1")
        self.scorer = LaneScorer(weights or ScoringWeights())
        self.attempt_budget = attempt_budget
        self.seed = seed
        self.time_limit_seconds = time_limit_seconds
        self._clock = clock

    @monitor_performance("build_sequence_optimization")
    def optimize(
        self,
        snapshot: ScheduleSnapshot,
        active_lanes: Sequence[str] | None = None,
        attempt_budget: int | None = None,
    ) -> OptimizationOutcome:
        """
        Compute an assignment plan for a snapshot.

        Args:
            snapshot: Read-only schedule snapshot
            active_lanes: Ordered lane ids to plan onto; defaults to the
                snapshot's active lanes
            attempt_budget: Overrides the configured attempt budget

        Returns:
            OptimizationOutcome; only ``valid``, ``best_effort`` and
            ``timeout`` outcomes carry a plan
        """
        budget = attempt_budget if attempt_budget is not None else self.attempt_budget
        if budget < 1:
            raise ValueError("Attempt budget must be at least 1")

        if active_lanes is not None:
            snapshot = ScheduleSnapshot(
                tasks=snapshot.tasks,
                lanes=snapshot.lanes,
                active_lane_ids=tuple(active_lanes),
                timeline=snapshot.timeline,
            )

        problems = snapshot.input_errors()
        if problems:
            logger.warning("Optimization rejected invalid input", problems=problems)
            outcome = OptimizationOutcome.invalid_input(problems)
            record_optimization_outcome(outcome.status.value, 0)
            return outcome

        baseline = validate_and_order(snapshot.tasks)
        if not baseline.is_acyclic:
            outcome = OptimizationOutcome.cycle_detected(baseline.cycle)
            record_optimization_outcome(outcome.status.value, 0)
            return outcome

        search = _Search(snapshot, self.scorer)
        rng = random.Random(self.seed)
        deadline = (
            self._clock() + self.time_limit_seconds
            if self.time_limit_seconds is not None
            else None
        )

        def run_attempt(attempt: int) -> _Candidate:
            strategy = strategy_for_attempt(attempt, budget)
            if strategy is OrderingStrategy.TOPOLOGICAL:
                order = baseline.order
            else:
                key = priority_key(strategy, search.regular, rng)
                order = validate_and_order(snapshot.tasks, priority=key).order

            candidate = search.run(attempt, strategy, order)
            logger.debug(
                "Optimization attempt finished",
                attempt=attempt,
                strategy=strategy.value,
                conflicts=candidate.conflicts.total,
                max_workload=candidate.max_workload,
            )
            return candidate

        # the first attempt always runs, so a plan exists even on timeout
        best = run_attempt(0)
        attempts = 1
        status = (
            OutcomeStatus.VALID
            if best.conflicts.total == 0
            else OutcomeStatus.BEST_EFFORT
        )

        for attempt in range(1, budget):
            if status is OutcomeStatus.VALID:
                break
            if deadline is not None and self._clock() >= deadline:
                status = OutcomeStatus.TIMEOUT
                break

            candidate = run_attempt(attempt)
            attempts = attempt + 1
            best = _better(best, candidate)
            if candidate.conflicts.total == 0:
                status = OutcomeStatus.VALID

        outcome = OptimizationOutcome(
            status=status,
            plan=search.plan_for(best, attempts),
            attempts=attempts,
        )

        quality = outcome.plan.quality  # type: ignore[union-attr]
        logger.info(
            "Optimization finished",
            status=status.value,
            attempts=attempts,
            best_attempt=best.attempt,
            strategy=best.strategy.value,
            dependency_conflicts=quality.dependency_conflicts,
            resource_conflicts=quality.resource_conflicts,
            moved=quality.moved_count,
            unassignable=len(quality.unassignable),
        )
        record_optimization_outcome(
            status.value,
            attempts,
            quality.dependency_conflicts,
            quality.resource_conflicts,
        )
        return outcome


class _Search:
    """Per-snapshot data shared by every attempt; attempts do not mutate it."""

    def __init__(self, snapshot: ScheduleSnapshot, scorer: LaneScorer) -> None:
        self.snapshot = snapshot
        self.scorer = scorer
        self.active_lanes: list[Lane] = snapshot.active_lanes
        self.lane_index = {lane.id: i for i, lane in enumerate(self.active_lanes)}

        self.regular = snapshot.schedulable_tasks
        self.movable = [task for task in self.regular if not task.locked]
        self.compatible: dict[str, list[Lane]] = {
            task.id: [lane for lane in self.active_lanes if lane.accepts(task.kind)]
            for task in self.movable
        }
        self.unassignable = [
            task for task in self.movable if not self.compatible[task.id]
        ]
        unassignable_ids = {task.id for task in self.unassignable}

        # work that stays where it is
        self.fixed = [
            task
            for task in snapshot.tasks
            if task.is_dead_time or task.locked or task.id in unassignable_ids
        ]

    def _initial_lanes(self) -> dict[str, LaneState]:
        lanes = {
            lane.id: LaneState(lane_id=lane.id, index=index)
            for index, lane in enumerate(self.active_lanes)
        }
        for task in self.fixed:
            state = lanes.get(task.assigned_lane or "")
            if state is None:
                continue
            state.add_block(task.position, task.position + task.duration_hours)
            if not task.is_dead_time:
                state.workload += task.duration_hours
        return lanes

    def run(
        self, attempt: int, strategy: OrderingStrategy, order: Sequence[str]
    ) -> _Candidate:
        """Place every movable task once, in ``order``."""
        lanes = self._initial_lanes()
        lane_list = list(lanes.values())

        placed_lane: dict[str, str | None] = {}
        finish: dict[str, float] = {}
        shared: list[SharedWindow] = []

        for task in self.fixed:
            if task.is_dead_time:
                continue
            placed_lane[task.task_number] = task.assigned_lane
            finish[task.task_number] = task.position + task.duration_hours
            if task.requires_shared_resource and task.assigned_lane is not None:
                shared.append(
                    SharedWindow(
                        task.assigned_lane,
                        task.position,
                        task.position + task.duration_hours,
                    )
                )

        placements: dict[str, tuple[str | None, int]] = {}
        for task_id in order:
            task = self.snapshot.task_by_id[task_id]
            candidates = self.compatible.get(task.id)
            if not candidates:
                # locked or unassignable: already accounted for as fixed work
                continue

            earliest = max(
                (finish[dep] for dep in task.dependencies if dep in finish),
                default=0.0,
            )
            scores = [
                self.scorer.score(
                    task,
                    lanes[lane.id],
                    lane_list,
                    earliest,
                    placed_lane,
                    shared,
                    self.lane_index.get(task.assigned_lane or ""),
                )
                for lane in candidates
            ]
            choice = self.scorer.best(scores)

            lanes[choice.lane_id].place(choice.position, task.duration_hours)
            placements[task.id] = (choice.lane_id, choice.position)
            placed_lane[task.task_number] = choice.lane_id
            finish[task.task_number] = choice.position + task.duration_hours
            if task.requires_shared_resource:
                shared.append(
                    SharedWindow(
                        choice.lane_id,
                        choice.position,
                        choice.position + task.duration_hours,
                    )
                )

        assignments = []
        for task in self.movable:
            lane_id, position = placements.get(
                task.id, (task.assigned_lane, task.position)
            )
            assignments.append(
                PlanAssignment(
                    task_id=task.id,
                    task_number=task.task_number,
                    lane_id=lane_id,
                    position=position,
                    previous_lane_id=task.assigned_lane,
                    previous_position=task.position,
                )
            )

        proposed = self.snapshot.with_tasks(
            apply_assignments(self.snapshot.tasks, assignments)
        )
        conflicts = ConflictDetector(proposed).detect()
        workloads = self._workloads(proposed)

        return _Candidate(
            attempt=attempt,
            strategy=strategy,
            assignments=tuple(assignments),
            conflicts=conflicts,
            max_workload=max(workloads, default=0.0),
            avg_workload=sum(workloads) / len(workloads) if workloads else 0.0,
        )

    def _workloads(self, proposed: ScheduleSnapshot) -> list[float]:
        totals = {lane.id: 0.0 for lane in self.active_lanes}
        for task in proposed.schedulable_tasks:
            if task.assigned_lane in totals:
                totals[task.assigned_lane] += task.duration_hours
        return list(totals.values())

    def plan_for(self, candidate: _Candidate, attempts: int) -> OptimizationPlan:
        quality = QualityReport(
            max_workload=candidate.max_workload,
            avg_workload=candidate.avg_workload,
            dependency_conflicts=candidate.conflicts.dependency_count,
            resource_conflicts=candidate.conflicts.resource_count,
            moved_count=sum(1 for a in candidate.assignments if a.lane_changed),
            repositioned_count=sum(
                1 for a in candidate.assignments if a.position_changed
            ),
            unassignable=tuple(task.task_number for task in self.unassignable),
            attempts=attempts,
        )
        return OptimizationPlan(
            assignments=candidate.assignments,
            quality=quality,
            strategy=candidate.strategy.value,
        )


def optimize(
    snapshot: ScheduleSnapshot,
    active_lanes: Sequence[str] | None = None,
    attempt_budget: int = DEFAULT_ATTEMPT_BUDGET,
    weights: ScoringWeights | None = None,
    seed: int | None = None,
    time_limit_seconds: float | None = None,
) -> OptimizationOutcome:
    """
    Compute an assignment plan for a snapshot.

    Convenience wrapper around AssignmentOptimizer.

    Args:
        snapshot: Read-only schedule snapshot
        active_lanes: Ordered lane ids to plan onto
        attempt_budget: Maximum number of attempts
        weights: Lane scoring weights
        seed: Random seed for restart strategies
        time_limit_seconds: Optional wall-clock ceiling

    Returns:
        OptimizationOutcome
    """
    optimizer = AssignmentOptimizer(
        weights=weights,
        attempt_budget=attempt_budget,
        seed=seed,
        time_limit_seconds=time_limit_seconds,
    )
    return optimizer.optimize(snapshot, active_lanes=active_lanes)
