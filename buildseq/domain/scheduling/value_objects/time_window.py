"""
Time Window Value Objects

Represents a time period with start and end boundaries, and the two ways a
task can be timed: explicitly (recorded timestamps) or implicitly by its
position on the timeline.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from .timeline import TimelineConfig, add_work_hours, position_window


class TimeWindow:
    """
    A half-open time window ``[start, end)``.

    Can represent absolute time windows (with datetime) or relative time
    windows (with work hours from the schedule start, i.e. positions).
    """

    def __init__(
        self,
        *,
        start_time: datetime | None = None,
        end_time: datetime | None = None,
        start_hours: float | None = None,
        end_hours: float | None = None,
    ) -> None:
        """
        Initialize a TimeWindow.

        Must provide either absolute times (start_time/end_time) or
        relative hours (start_hours/end_hours).

        Raises:
            ValueError: If invalid parameters provided
        """
        if start_time is not None and end_time is not None:
            if start_time > end_time:
                raise ValueError("Start time must be before end time")
            self._start_time: datetime | None = start_time
            self._end_time: datetime | None = end_time
            self._start_hours: float | None = None
            self._end_hours: float | None = None

        elif start_hours is not None and end_hours is not None:
            if start_hours > end_hours:
                raise ValueError("Start hours must be less than end hours")
            self._start_time = None
            self._end_time = None
            self._start_hours = float(start_hours)
            self._end_hours = float(end_hours)

        else:
            raise ValueError("Must provide either absolute times or relative hours")

    @property
    def start(self) -> datetime | float:
        """Start boundary in this window's reference system."""
        if self.is_absolute:
            return self._start_time  # type: ignore[return-value]
        return self._start_hours  # type: ignore[return-value]

    @property
    def end(self) -> datetime | float:
        """End boundary in this window's reference system."""
        if self.is_absolute:
            return self._end_time  # type: ignore[return-value]
        return self._end_hours  # type: ignore[return-value]

    @property
    def is_absolute(self) -> bool:
        """Check if this is an absolute time window."""
        return self._start_time is not None

    @property
    def is_relative(self) -> bool:
        """Check if this is a relative time window."""
        return self._start_hours is not None

    @property
    def is_degenerate(self) -> bool:
        """Zero-length windows never overlap anything."""
        return not self.end > self.start  # type: ignore[operator]

    def duration_hours(self) -> float:
        """
        Get duration of the time window in hours.

        Returns:
            Duration in hours
        """
        if self.is_absolute:
            delta = self._end_time - self._start_time  # type: ignore[operator]
            return delta.total_seconds() / 3600
        return self._end_hours - self._start_hours  # type: ignore[operator]

    def overlaps_with(self, other: TimeWindow) -> bool:
        """
        Check if this window overlaps with another window.

        Uses the half-open test ``a.start < b.end and b.start < a.end``;
        degenerate windows never overlap.

        Raises:
            ValueError: If windows have different reference systems
        """
        if self.is_absolute != other.is_absolute:
            raise ValueError("Cannot compare absolute and relative time windows")
        if self.is_degenerate or other.is_degenerate:
            return False
        return self.start < other.end and other.start < self.end  # type: ignore[operator]

    def intersection_with(self, other: TimeWindow) -> TimeWindow | None:
        """
        Get intersection with another time window.

        Returns:
            Intersection time window or None if no overlap
        """
        if not self.overlaps_with(other):
            return None

        start = max(self.start, other.start)  # type: ignore[type-var]
        end = min(self.end, other.end)  # type: ignore[type-var]
        if self.is_absolute:
            return TimeWindow(start_time=start, end_time=end)  # type: ignore[arg-type]
        return TimeWindow(start_hours=start, end_hours=end)  # type: ignore[arg-type]

    def to_dict(self) -> dict[str, str | float]:
        """Serialize the window boundaries."""
        if self.is_absolute:
            return {
                "start": self._start_time.isoformat(),  # type: ignore[union-attr]
                "end": self._end_time.isoformat(),  # type: ignore[union-attr]
            }
        return {"start": self._start_hours, "end": self._end_hours}  # type: ignore[dict-item]

    def __eq__(self, other: object) -> bool:
        """Check equality."""
        if not isinstance(other, TimeWindow):
            return False
        if self.is_absolute != other.is_absolute:
            return False
        return self.start == other.start and self.end == other.end

    def __hash__(self) -> int:
        """Hash for use in sets and dicts."""
        return hash((self.start, self.end))

    def __str__(self) -> str:
        """String representation."""
        if self.is_absolute:
            return f"{self._start_time} to {self._end_time}"
        return f"{self._start_hours:g}h-{self._end_hours:g}h"

    def __repr__(self) -> str:
        """Detailed string representation."""
        if self.is_absolute:
            return f"TimeWindow(start_time={self._start_time!r}, end_time={self._end_time!r})"
        return f"TimeWindow(start_hours={self._start_hours!r}, end_hours={self._end_hours!r})"


@dataclass(frozen=True)
class ExplicitTiming:
    """Timing taken from recorded timestamps; authoritative once present."""

    start: datetime
    end: datetime | None
    duration_hours: float

    def calendar_start(self, config: TimelineConfig) -> datetime:
        return self.start

    def calendar_end(self, config: TimelineConfig) -> datetime:
        """Recorded end, or the projected end of work still running."""
        if self.end is not None:
            return self.end
        return add_work_hours(
            self.start,
            self.duration_hours,
            config.day_start_hour,
            config.hours_per_day,
            config.holidays,
        )

    def calendar_window(self, config: TimelineConfig) -> TimeWindow | None:
        end = self.calendar_end(config)
        if end <= self.start:
            return None
        return TimeWindow(start_time=self.start, end_time=end)


@dataclass(frozen=True)
class PositionTiming:
    """Timing implied by a task's position and duration."""

    position: float
    duration_hours: float

    def position_window(self) -> TimeWindow | None:
        if self.duration_hours <= 0:
            return None
        return TimeWindow(
            start_hours=self.position,
            end_hours=self.position + self.duration_hours,
        )

    def calendar_start(self, config: TimelineConfig) -> datetime:
        return position_window(self.position, self.duration_hours, config)[0]

    def calendar_end(self, config: TimelineConfig) -> datetime:
        return position_window(self.position, self.duration_hours, config)[1]

    def calendar_window(self, config: TimelineConfig) -> TimeWindow | None:
        start, end = position_window(self.position, self.duration_hours, config)
        if end <= start:
            return None
        return TimeWindow(start_time=start, end_time=end)


TaskTiming = ExplicitTiming | PositionTiming


def resolve_timing(
    start_time: datetime | None,
    end_time: datetime | None,
    position: float,
    duration_hours: float,
) -> TaskTiming:
    """
    Resolve which timing variant governs a task.

    A recorded start time makes the timing explicit; otherwise the position
    on the timeline implies it.
    """
    if start_time is not None:
        return ExplicitTiming(
            start=start_time, end=end_time, duration_hours=duration_hours
        )
    return PositionTiming(position=position, duration_hours=duration_hours)


def windows_overlap(
    first: TaskTiming, second: TaskTiming, config: TimelineConfig
) -> TimeWindow | None:
    """
    Overlap of two task timings, or None.

    Two position-timed tasks are compared directly in work hours; any pair
    involving recorded timestamps is compared on the calendar.
    """
    if isinstance(first, PositionTiming) and isinstance(second, PositionTiming):
        first_window = first.position_window()
        second_window = second.position_window()
    else:
        first_window = first.calendar_window(config)
        second_window = second.calendar_window(config)

    if first_window is None or second_window is None:
        return None
    return first_window.intersection_with(second_window)
