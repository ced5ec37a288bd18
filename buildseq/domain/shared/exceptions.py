"""
Domain Exceptions

Defines typed errors for the build sequence domain with discriminated error
types. Engine entry points return these as values inside their outcomes;
they are raised only at API boundaries (stores, status transitions).
"""

from enum import Enum


class ErrorType(str, Enum):
    """Error type enumeration for discriminated unions."""

    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    CYCLIC_DEPENDENCY = "cyclic_dependency"
    INVALID_INPUT = "invalid_input"
    NOT_FOUND = "not_found"
    TIMEOUT = "timeout"


DetailValue = str | int | float | bool | list[str] | None


class DomainError(Exception):
    """Base class for all domain errors with type discrimination."""

    def __init__(
        self,
        message: str,
        error_type: ErrorType,
        details: dict[str, DetailValue] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_type = error_type
        self.details = details or {}

    def to_dict(self) -> dict[str, str | dict[str, DetailValue]]:
        """Convert error to dictionary for API responses."""
        return {
            "type": self.error_type.value,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(DomainError):
    """Raised when domain validation rules are violated."""

    def __init__(
        self,
        field_name: str,
        value: str | int | float | bool | None,
        message: str,
        error_code: str | None = None,
    ) -> None:
        self.field_name = field_name
        self.value = value
        self.error_code = error_code or "VALIDATION_ERROR"

        details: dict[str, DetailValue] = {
            "field": field_name,
            "value": str(value) if value is not None else None,
            "error_code": self.error_code,
        }
        super().__init__(
            f"Validation failed for field '{field_name}': {message}",
            ErrorType.VALIDATION,
            details,
        )


class BusinessRuleError(DomainError):
    """Raised when business rules are violated."""

    def __init__(
        self, message: str, details: dict[str, DetailValue] | None = None
    ) -> None:
        super().__init__(message, ErrorType.BUSINESS_RULE, details)


class CyclicDependencyError(DomainError):
    """Dependency graph contains at least one cycle; no plan can be built."""

    def __init__(self, task_numbers: list[str]) -> None:
        self.task_numbers = list(task_numbers)
        listed = ", ".join(self.task_numbers) if self.task_numbers else "unknown"
        super().__init__(
            f"Circular dependencies detected between tasks: {listed}",
            ErrorType.CYCLIC_DEPENDENCY,
            {"task_numbers": self.task_numbers},
        )


class InvalidScheduleInputError(DomainError):
    """Snapshot is structurally invalid (duplicate codes, unknown lanes)."""

    def __init__(self, problems: list[str]) -> None:
        self.problems = list(problems)
        super().__init__(
            "Schedule snapshot is invalid: " + "; ".join(self.problems),
            ErrorType.INVALID_INPUT,
            {"problems": self.problems},
        )


class OptimizationTimeoutError(DomainError):
    """Wall-clock ceiling was reached before a conflict-free plan was found."""

    def __init__(self, attempts: int, remaining_conflicts: int) -> None:
        self.attempts = attempts
        self.remaining_conflicts = remaining_conflicts
        super().__init__(
            f"Optimization stopped after {attempts} attempts with "
            f"{remaining_conflicts} conflicts remaining",
            ErrorType.TIMEOUT,
            {"attempts": attempts, "remaining_conflicts": remaining_conflicts},
        )


class TaskNotFoundError(DomainError):
    """Raised when a task is not found."""

    def __init__(self, task_ref: str) -> None:
        super().__init__(
            f"Task not found: {task_ref}",
            ErrorType.NOT_FOUND,
            {"task": task_ref, "entity_type": "task"},
        )
        self.task_ref = task_ref


class LaneNotFoundError(DomainError):
    """Raised when a lane is not found."""

    def __init__(self, lane_id: str) -> None:
        super().__init__(
            f"Lane not found: {lane_id}",
            ErrorType.NOT_FOUND,
            {"lane_id": lane_id, "entity_type": "lane"},
        )
        self.lane_id = lane_id


class InvalidStatusTransitionError(BusinessRuleError):
    """Raised when task status transition is invalid."""

    def __init__(
        self, task_number: str, current_status: str, attempted_status: str
    ) -> None:
        super().__init__(
            f"Cannot change task {task_number} from {current_status} to {attempted_status}",
            {
                "task_number": task_number,
                "current_status": current_status,
                "attempted_status": attempted_status,
            },
        )
        self.task_number = task_number
        self.current_status = current_status
        self.attempted_status = attempted_status
