"""
Observability Infrastructure

Provides structured logging and Prometheus metrics for the scheduling engine.
"""

import functools
import logging
import sys
import time
from collections.abc import Callable
from typing import Any, TypeVar

import structlog
from prometheus_client import Counter, Histogram

from .config import settings

F = TypeVar("F", bound=Callable[..., Any])

# Prometheus metrics
SCHEDULER_OPERATIONS = Counter(
    "buildseq_scheduler_operations_total",
    "Total scheduler operations",
    ["operation_type", "status"],
)

SCHEDULER_DURATION = Histogram(
    "buildseq_scheduler_operation_duration_seconds",
    "Scheduler operation duration",
    ["operation_type"],
)

OPTIMIZATION_OUTCOMES = Counter(
    "buildseq_optimization_outcomes_total",
    "Optimization runs by outcome status",
    ["status"],
)

OPTIMIZATION_ATTEMPTS = Histogram(
    "buildseq_optimization_attempts",
    "Attempts used per optimization run",
    buckets=(1, 2, 5, 10, 20, 50, 100),
)

RESIDUAL_CONFLICTS = Histogram(
    "buildseq_optimization_residual_conflicts",
    "Conflicts remaining in the returned plan",
    ["conflict_type"],
    buckets=(0, 1, 2, 5, 10, 25, 50),
)

CONFLICT_DETECTIONS = Counter(
    "buildseq_conflicts_detected_total",
    "Conflicts reported by detection passes",
    ["conflict_type"],
)


def setup_structured_logging() -> None:
    """Configure structured logging with JSON or console output."""

    # Configure log level
    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="ISO"),
        structlog.processors.add_log_level,
        structlog.stdlib.add_logger_name,
    ]

    if settings.LOG_FORMAT == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(colors=settings.ENVIRONMENT == "local")
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Configure standard library logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )


def get_logger(name: str) -> Any:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


def record_optimization_outcome(
    status: str,
    attempts: int,
    dependency_conflicts: int = 0,
    resource_conflicts: int = 0,
) -> None:
    """Record metrics for a finished optimization run."""
    if not settings.ENABLE_METRICS:
        return

    OPTIMIZATION_OUTCOMES.labels(status=status).inc()
    OPTIMIZATION_ATTEMPTS.observe(attempts)
    RESIDUAL_CONFLICTS.labels(conflict_type="dependency").observe(dependency_conflicts)
    RESIDUAL_CONFLICTS.labels(conflict_type="resource").observe(resource_conflicts)


def record_conflict_detection(dependency_conflicts: int, resource_conflicts: int) -> None:
    """Record metrics for a conflict detection pass."""
    if not settings.ENABLE_METRICS:
        return

    CONFLICT_DETECTIONS.labels(conflict_type="dependency").inc(dependency_conflicts)
    CONFLICT_DETECTIONS.labels(conflict_type="resource").inc(resource_conflicts)


def monitor_performance(operation_type: str):
    """Decorator to monitor function performance with metrics and logging."""

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            logger = get_logger(func.__module__)
            start_time = time.perf_counter()

            log_context: dict[str, Any] = {
                "operation": operation_type,
                "function": func.__name__,
            }

            logger.debug("Operation started", **log_context)

            try:
                result = func(*args, **kwargs)
            except Exception as e:
                duration = time.perf_counter() - start_time

                if settings.ENABLE_METRICS:
                    SCHEDULER_OPERATIONS.labels(
                        operation_type=operation_type, status="error"
                    ).inc()

                logger.error(
                    "Operation failed",
                    **log_context,
                    duration_seconds=duration,
                    error=str(e),
                    error_type=type(e).__name__,
                    exc_info=True,
                )
                raise

            duration = time.perf_counter() - start_time

            if settings.ENABLE_METRICS:
                SCHEDULER_OPERATIONS.labels(
                    operation_type=operation_type, status="success"
                ).inc()
                SCHEDULER_DURATION.labels(operation_type=operation_type).observe(
                    duration
                )

            logger.debug(
                "Operation completed successfully",
                **log_context,
                duration_seconds=duration,
            )
            return result

        return wrapper  # type: ignore[return-value]

    return decorator
