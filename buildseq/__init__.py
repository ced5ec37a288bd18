"""Build sequence scheduling and conflict engine."""

from .domain.scheduling.services.assignment_optimizer import optimize
from .domain.scheduling.services.conflict_detector import detect_conflicts
from .domain.scheduling.services.dependency_graph import validate_and_order

__all__ = ["detect_conflicts", "optimize", "validate_and_order"]
