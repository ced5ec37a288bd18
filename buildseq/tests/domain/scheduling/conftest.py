from .fixtures import (  # noqa: F401
    base_time,
    monday,
    same_lane_sequence,
    standard_lanes,
    three_task_cycle,
    timeline,
)
