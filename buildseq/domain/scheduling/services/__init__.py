"""Scheduling domain services."""

from .assignment_optimizer import AssignmentOptimizer, optimize
from .conflict_detector import ConflictDetector, detect_conflicts
from .dependency_graph import (
    DependencyIssue,
    DependencyOrder,
    DependencyValidation,
    validate_and_order,
    validate_proposed_dependencies,
)

__all__ = [
    "AssignmentOptimizer",
    "ConflictDetector",
    "DependencyIssue",
    "DependencyOrder",
    "DependencyValidation",
    "detect_conflicts",
    "optimize",
    "validate_and_order",
    "validate_proposed_dependencies",
]
