from ..domain.scheduling.fixtures import (  # noqa: F401
    standard_lanes,
    three_task_cycle,
)
