"""Lane scoring weights."""

from pydantic import Field

from ...shared.base import ValueObject


class ScoringWeights(ValueObject):
    """
    Weights of the lane scoring terms (lower total score wins).

    The balance weight dominates; movement is the lowest-weight tie-breaker.
    """

    balance: float = Field(default=100.0, ge=0)
    load: float = Field(default=1.0, ge=0)
    cross_lane_dependency: float = Field(default=50.0, ge=0)
    same_lane_bonus: float = Field(default=5.0, ge=0)
    resource_overlap: float = Field(default=200.0, ge=0)
    movement: float = Field(default=2.0, ge=0)
