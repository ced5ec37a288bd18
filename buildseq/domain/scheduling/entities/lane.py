"""Lane entity ("assembler")."""

from pydantic import Field

from ...shared.base import Entity
from ..value_objects.enums import LaneKind, LaneStatus, TaskKind


class Lane(Entity):
    """
    A work center hosting a sequence of tasks.

    The lane ``kind`` decides which task kinds it may host; ``status`` is
    informational and does not affect assignment.
    """

    name: str = Field(min_length=1)
    kind: LaneKind = LaneKind.GENERAL
    status: LaneStatus = LaneStatus.AVAILABLE

    def accepts(self, task_kind: TaskKind) -> bool:
        """Check whether this lane may host a task of the given kind."""
        return self.kind.accepts(task_kind)


def default_lanes() -> list[Lane]:
    """The stock shop-floor lane set."""
    return [
        Lane(id="turbo-505", name="Turbo 505", kind=LaneKind.MECHANICAL),
        Lane(id="precision-200", name="Precision 200", kind=LaneKind.ELECTRICAL),
        Lane(id="assembly-300", name="Assembly 300", kind=LaneKind.FINAL),
        Lane(id="qc-station", name="QC Station", kind=LaneKind.QC),
    ]
