"""
Ordering strategies for optimizer restarts.

Each restart perturbs the order in which ready tasks are processed. The
perturbation is applied as a tie-break key inside the topological sort, so
every strategy still yields a dependency-respecting order.
"""

from __future__ import annotations

import random
from collections.abc import Sequence

from ..entities.task import Task
from ..value_objects.enums import OrderingStrategy, TaskKind
from .dependency_graph import PriorityKey


def strategy_for_attempt(attempt: int, attempt_budget: int) -> OrderingStrategy:
    """
    Pick the ordering strategy for an attempt.

    The first attempt is the plain topological order. Later attempts move
    through random shuffles, dependency-heavy tasks first, tasks grouped by
    kind, and back to random shuffles over the course of the budget.

    Args:
        attempt: Zero-based attempt number
        attempt_budget: Total number of attempts

    Returns:
        Strategy to use
    """
    if attempt == 0:
        return OrderingStrategy.TOPOLOGICAL

    fraction = attempt / max(attempt_budget, 1)
    if fraction < 0.25:
        return OrderingStrategy.SHUFFLE
    if fraction < 0.5:
        return OrderingStrategy.MOST_DEPENDENCIES_FIRST
    if fraction < 0.75:
        return OrderingStrategy.GROUPED_BY_KIND
    return OrderingStrategy.SHUFFLE


def priority_key(
    strategy: OrderingStrategy, tasks: Sequence[Task], rng: random.Random
) -> PriorityKey | None:
    """
    Build the tie-break key for a strategy.

    Random components are drawn once per task so that the key is stable
    for the duration of one attempt.

    Returns:
        Key function, or None for first-in first-out tie-breaking
    """
    if strategy is OrderingStrategy.TOPOLOGICAL:
        return None

    noise = {task.id: rng.random() for task in tasks}

    if strategy is OrderingStrategy.SHUFFLE:
        return lambda task: noise[task.id]

    if strategy is OrderingStrategy.MOST_DEPENDENCIES_FIRST:
        return lambda task: (-len(task.dependencies), noise[task.id])

    kinds = list(TaskKind)
    rng.shuffle(kinds)
    kind_rank = {kind: rank for rank, kind in enumerate(kinds)}
    return lambda task: (kind_rank[task.kind], noise[task.id])
