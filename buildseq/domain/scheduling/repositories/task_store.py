"""
Task Store Interface

Defines the contract for reading schedule state and writing optimization
plans back, plus an in-memory implementation.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable

from ...shared.exceptions import LaneNotFoundError, TaskNotFoundError
from ..entities.lane import Lane
from ..entities.plan import OptimizationPlan
from ..entities.task import Task


class TaskStore(ABC):
    """
    Abstract store for tasks and lanes.

    The engine itself never performs I/O; callers read a snapshot from a
    store, optimize it and hand the plan back through ``apply_plan``.
    """

    @abstractmethod
    def list_tasks(self) -> list[Task]:
        """
        Retrieve all tasks.

        Returns:
            List of all task entities
        """
        pass

    @abstractmethod
    def list_lanes(self) -> list[Lane]:
        """
        Retrieve all lanes.

        Returns:
            List of all lane entities
        """
        pass

    @abstractmethod
    def get_task_by_number(self, task_number: str) -> Task | None:
        """
        Retrieve a task by its task number.

        Args:
            task_number: Human-readable task code

        Returns:
            Task entity or None if not found
        """
        pass

    @abstractmethod
    def save_task(self, task: Task) -> Task:
        """
        Save a task, replacing any task with the same id.

        Args:
            task: Task entity to save

        Returns:
            Saved task entity
        """
        pass

    @abstractmethod
    def apply_plan(self, plan: OptimizationPlan) -> list[Task]:
        """
        Write the lane and position of every planned task.

        Args:
            plan: Plan returned by the optimizer

        Returns:
            Tasks whose assignment changed

        Raises:
            TaskNotFoundError: If the plan names an unknown task
            LaneNotFoundError: If the plan names an unknown lane
        """
        pass


class InMemoryTaskStore(TaskStore):
    """Dictionary-backed task store; plans are applied all-or-nothing."""

    def __init__(
        self, tasks: Iterable[Task] = (), lanes: Iterable[Lane] = ()
    ) -> None:
        self._tasks: dict[str, Task] = {task.id: task for task in tasks}
        self._lanes: dict[str, Lane] = {lane.id: lane for lane in lanes}

    def list_tasks(self) -> list[Task]:
        return list(self._tasks.values())

    def list_lanes(self) -> list[Lane]:
        return list(self._lanes.values())

    def get_task_by_number(self, task_number: str) -> Task | None:
        for task in self._tasks.values():
            if task.task_number == task_number:
                return task
        return None

    def save_task(self, task: Task) -> Task:
        self._tasks[task.id] = task
        return task

    def apply_plan(self, plan: OptimizationPlan) -> list[Task]:
        # validate everything before the first write
        for assignment in plan.assignments:
            if assignment.task_id not in self._tasks:
                raise TaskNotFoundError(assignment.task_id)
            if assignment.lane_id is not None and assignment.lane_id not in self._lanes:
                raise LaneNotFoundError(assignment.lane_id)

        current = list(self._tasks.values())
        changed = []
        for before, after in zip(current, plan.apply_to(current)):
            if after is not before:
                self._tasks[after.id] = after
                changed.append(after)
        return changed
