"""Application services."""

from .build_sequence_service import BuildSequenceService, OptimizeAndApplyResult

__all__ = ["BuildSequenceService", "OptimizeAndApplyResult"]
