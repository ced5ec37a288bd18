"""
Dependency Graph Builder & Validator

Builds the task precedence graph from declared dependencies, detects cycles
and produces a topological processing order.
"""

from __future__ import annotations

import heapq
from collections import deque
from collections.abc import Callable, Hashable, Iterable, Sequence
from typing import Any

from ....core.observability import get_logger
from ...shared.base import ValueObject
from ...shared.exceptions import CyclicDependencyError
from ..entities.snapshot import ScheduleSnapshot
from ..entities.task import Task
from ..value_objects.enums import DependencyIssueReason

logger = get_logger(__name__)

PriorityKey = Callable[[Task], Any]


class DependencyOrder(ValueObject):
    """
    Outcome of ordering a task set.

    Exactly one of ``order`` (task ids, dependencies first) or ``cycle``
    (task numbers on a dependency cycle) is meaningful: a non-empty
    ``cycle`` means no order exists.
    """

    order: tuple[str, ...] = ()
    cycle: tuple[str, ...] = ()

    @property
    def is_acyclic(self) -> bool:
        return not self.cycle

    @property
    def error(self) -> CyclicDependencyError | None:
        if self.is_acyclic:
            return None
        return CyclicDependencyError(list(self.cycle))


class DependencyIssue(ValueObject):
    """One problem with a proposed dependency."""

    dependency: str | None
    reason: DependencyIssueReason

    @property
    def message(self) -> str:
        messages = {
            DependencyIssueReason.UNKNOWN_TASK: "Task not found",
            DependencyIssueReason.UNKNOWN_DEPENDENCY: f"Dependency {self.dependency} not found",
            DependencyIssueReason.SELF_DEPENDENCY: "Task cannot depend on itself",
            DependencyIssueReason.DEAD_TIME: f"Dependency {self.dependency} is dead time",
            DependencyIssueReason.CIRCULAR: f"Dependency {self.dependency} would create a cycle",
            DependencyIssueReason.BLOCKED: f"Dependency {self.dependency} is blocked",
            DependencyIssueReason.LATE_FINISH: (
                f"Dependency {self.dependency} finishes after the task starts"
            ),
        }
        return messages[self.reason]


class DependencyValidation(ValueObject):
    """Result of validating a proposed dependency list."""

    task_number: str
    issues: tuple[DependencyIssue, ...] = ()

    @property
    def valid(self) -> bool:
        return not self.issues


class _Graph:
    """Adjacency over task ids; edges run from dependency to dependent."""

    def __init__(self, tasks: Sequence[Task]) -> None:
        self.tasks = tasks
        self.index: dict[str, int] = {}
        by_number: dict[str, Task] = {}
        for i, task in enumerate(tasks):
            self.index.setdefault(task.id, i)
            by_number.setdefault(task.task_number, task)

        self.dependents: dict[str, list[str]] = {task.id: [] for task in tasks}
        self.in_degree: dict[str, int] = {task.id: 0 for task in tasks}

        for task in tasks:
            for dep_number in task.dependencies:
                dep = by_number.get(dep_number)
                # unknown dependencies are reported by conflict detection
                if dep is None:
                    continue
                self.dependents[dep.id].append(task.id)
                self.in_degree[task.id] += 1


def validate_and_order(
    tasks: Iterable[Task], priority: PriorityKey | None = None
) -> DependencyOrder:
    """
    Topologically order tasks with Kahn's algorithm.

    Dead-time tasks are excluded. Dependencies naming unknown task numbers
    are ignored for ordering purposes.

    Args:
        tasks: Tasks to order
        priority: Optional sort key used to break ties between tasks that
            become ready at the same time (lower first). Without it, ready
            tasks are processed first-in first-out.

    Returns:
        DependencyOrder holding either the order or the tasks on a cycle
    """
    regular = _unique_by_id(task for task in tasks if not task.is_dead_time)
    graph = _Graph(regular)
    in_degree = dict(graph.in_degree)

    if priority is None:
        order = _kahn_fifo(graph, in_degree)
    else:
        order = _kahn_prioritized(graph, in_degree, priority)

    if len(order) == len(regular):
        return DependencyOrder(order=tuple(order))

    cycle = _cycle_members(graph, set(order))
    logger.warning(
        "Circular dependencies detected",
        task_count=len(regular),
        ordered=len(order),
        cycle=cycle,
    )
    return DependencyOrder(cycle=tuple(cycle))


def _unique_by_id(tasks: Iterable[Task]) -> list[Task]:
    seen: set[str] = set()
    unique = []
    for task in tasks:
        if task.id not in seen:
            seen.add(task.id)
            unique.append(task)
    return unique


def _kahn_fifo(graph: _Graph, in_degree: dict[str, int]) -> list[str]:
    queue = deque(task.id for task in graph.tasks if in_degree[task.id] == 0)
    order = []
    while queue:
        current = queue.popleft()
        order.append(current)
        for dependent in graph.dependents[current]:
            in_degree[dependent] -= 1
            if in_degree[dependent] == 0:
                queue.append(dependent)
    return order


def _kahn_prioritized(
    graph: _Graph, in_degree: dict[str, int], priority: PriorityKey
) -> list[str]:
    keys: dict[str, tuple[Hashable, int]] = {
        task.id: (priority(task), graph.index[task.id]) for task in graph.tasks
    }
    heap = [(keys[task.id], task.id) for task in graph.tasks if in_degree[task.id] == 0]
    heapq.heapify(heap)

    order = []
    while heap:
        _, current = heapq.heappop(heap)
        order.append(current)
        for dependent in graph.dependents[current]:
            in_degree[dependent] -= 1
            if in_degree[dependent] == 0:
                heapq.heappush(heap, (keys[dependent], dependent))
    return order


def _cycle_members(graph: _Graph, ordered: set[str]) -> list[str]:
    """
    Task numbers that lie on a cycle.

    Tasks left over by Kahn's algorithm are either on a cycle or downstream
    of one; only those that can reach themselves are reported.
    """
    remaining = {task.id for task in graph.tasks if task.id not in ordered}

    def reaches_itself(start: str) -> bool:
        stack = [d for d in graph.dependents[start] if d in remaining]
        seen: set[str] = set()
        while stack:
            node = stack.pop()
            if node == start:
                return True
            if node in seen:
                continue
            seen.add(node)
            stack.extend(d for d in graph.dependents[node] if d in remaining)
        return False

    return [
        task.task_number
        for task in graph.tasks
        if task.id in remaining and reaches_itself(task.id)
    ]


def validate_proposed_dependencies(
    snapshot: ScheduleSnapshot, task_number: str, dependencies: Sequence[str]
) -> DependencyValidation:
    """
    Check a proposed dependency list for a task before it is saved.

    Reports unknown tasks, self-dependency, dependencies on dead time,
    cycles the proposal would introduce (directly or transitively), blocked
    dependencies and recorded timestamps where the dependency finishes
    after the task starts.

    Args:
        snapshot: Current schedule snapshot
        task_number: Task whose dependencies are being edited
        dependencies: Proposed dependency task numbers

    Returns:
        DependencyValidation with structured issues
    """
    task = snapshot.task_by_number.get(task_number)
    if task is None:
        return DependencyValidation(
            task_number=task_number,
            issues=(
                DependencyIssue(dependency=None, reason=DependencyIssueReason.UNKNOWN_TASK),
            ),
        )

    issues: list[DependencyIssue] = []
    for dep_number in dict.fromkeys(dependencies):
        if dep_number == task_number:
            issues.append(
                DependencyIssue(
                    dependency=dep_number, reason=DependencyIssueReason.SELF_DEPENDENCY
                )
            )
            continue

        dep = snapshot.task_by_number.get(dep_number)
        if dep is None:
            issues.append(
                DependencyIssue(
                    dependency=dep_number,
                    reason=DependencyIssueReason.UNKNOWN_DEPENDENCY,
                )
            )
            continue

        if dep.is_dead_time:
            issues.append(
                DependencyIssue(dependency=dep_number, reason=DependencyIssueReason.DEAD_TIME)
            )
            continue

        if _depends_transitively(snapshot, dep_number, task_number):
            issues.append(
                DependencyIssue(dependency=dep_number, reason=DependencyIssueReason.CIRCULAR)
            )

        if dep.is_blocked:
            issues.append(
                DependencyIssue(dependency=dep_number, reason=DependencyIssueReason.BLOCKED)
            )
        elif (
            dep.end_time is not None
            and task.start_time is not None
            and dep.end_time > task.start_time
        ):
            issues.append(
                DependencyIssue(
                    dependency=dep_number, reason=DependencyIssueReason.LATE_FINISH
                )
            )

    return DependencyValidation(task_number=task_number, issues=tuple(issues))


def _depends_transitively(
    snapshot: ScheduleSnapshot, from_number: str, target_number: str
) -> bool:
    """Check whether ``from_number`` already depends on ``target_number``."""
    stack = [from_number]
    seen: set[str] = set()
    while stack:
        current = stack.pop()
        if current in seen:
            continue
        seen.add(current)
        task = snapshot.task_by_number.get(current)
        if task is None:
            continue
        for dep_number in task.dependencies:
            if dep_number == target_number:
                return True
            stack.append(dep_number)
    return False
