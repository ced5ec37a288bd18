"""
Timeline Value Objects

Converts abstract work-hour positions into calendar timestamps over a
business-day calendar (fixed-length work day, weekends and holidays skipped).
"""

from __future__ import annotations

import math
from datetime import date, datetime, time, timedelta, timezone

from pydantic import Field, model_validator

from ...shared.base import ValueObject
from ...shared.exceptions import ValidationError

SATURDAY = 5
SUNDAY = 6


def _minutes(hours: float) -> int:
    """Round a fractional hour count to whole minutes."""
    return int(round(hours * 60))


def as_naive_utc(value: datetime) -> datetime:
    """
    Express a timestamp on the timeline's clock.

    The timeline is naive UTC: aware timestamps are converted to UTC and
    stripped of their zone, naive ones are taken as UTC already.
    """
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def is_business_day(target_date: date, holidays: frozenset[date] = frozenset()) -> bool:
    """
    Check if a date is a working day.

    Args:
        target_date: Date to check
        holidays: Dates that are never worked

    Returns:
        True if date is neither a weekend day nor a holiday
    """
    if target_date in holidays:
        return False
    return target_date.weekday() not in (SATURDAY, SUNDAY)


def next_business_day(
    from_date: date, holidays: frozenset[date] = frozenset()
) -> date:
    """Return the first business day strictly after ``from_date``."""
    current = from_date + timedelta(days=1)
    while not is_business_day(current, holidays):
        current += timedelta(days=1)
    return current


def business_day(
    start_date: date, day_offset: int, holidays: frozenset[date] = frozenset()
) -> date:
    """
    Advance ``day_offset`` business days from ``start_date``.

    An offset of zero returns the start date unchanged, even when the start
    date itself falls on a weekend.

    Args:
        start_date: Calendar day of schedule day 1
        day_offset: Number of business days to add (>= 0)
        holidays: Dates that are skipped like weekends

    Returns:
        The resulting calendar date
    """
    if day_offset < 0:
        raise ValueError(f"Day offset cannot be negative: {day_offset}")

    current = start_date
    for _ in range(day_offset):
        current = next_business_day(current, holidays)
    return current


class TimelineConfig(ValueObject):
    """
    Timeline configuration of a schedule.

    Position ``0`` is ``start_time`` on ``start_date``; every ``hours_per_day``
    positions roll over to the next business day. Clock times are UTC.
    """

    hours_per_day: float = Field(default=9.0, gt=0, le=24)
    start_date: date
    start_time: time = time(6, 0)
    holidays: frozenset[date] = frozenset()

    @model_validator(mode="after")
    def _work_day_fits_in_calendar_day(self) -> TimelineConfig:
        if self.day_start_hour + self.hours_per_day > 24:
            raise ValueError(
                f"Work day starting at {self.start_time.strftime('%H:%M')} "
                f"cannot last {self.hours_per_day} hours"
            )
        return self

    @classmethod
    def from_strings(
        cls, start_date: str, start_time: str, hours_per_day: float = 9.0
    ) -> TimelineConfig:
        """
        Build a config from ``YYYY-MM-DD`` and ``HH:MM`` strings.

        Args:
            start_date: Calendar start date
            start_time: Start-of-day clock time
            hours_per_day: Business day length in hours

        Returns:
            Timeline configuration

        Raises:
            ValidationError: If either string is malformed
        """
        try:
            parsed_date = date.fromisoformat(start_date)
        except ValueError as e:
            raise ValidationError("start_date", start_date, str(e)) from e

        try:
            hour, minute = (int(part) for part in start_time.split(":"))
            parsed_time = time(hour, minute)
        except ValueError as e:
            raise ValidationError("start_time", start_time, str(e)) from e

        return cls(
            hours_per_day=hours_per_day,
            start_date=parsed_date,
            start_time=parsed_time,
        )

    @property
    def day_start_hour(self) -> float:
        """Start of the work day as a fractional hour."""
        return self.start_time.hour + self.start_time.minute / 60

    @property
    def schedule_start(self) -> datetime:
        """Timestamp of position zero."""
        return datetime.combine(self.start_date, self.start_time)


def position_to_timestamp(position: float, config: TimelineConfig) -> datetime:
    """
    Convert a work-hour position into a calendar timestamp.

    Args:
        position: Work hours elapsed since the schedule start (>= 0)
        config: Timeline configuration

    Returns:
        Timestamp, with fractional hours carried into minutes
    """
    if position < 0:
        raise ValueError(f"Position cannot be negative: {position}")

    day_offset = math.floor(position / config.hours_per_day)
    hour_offset = position - day_offset * config.hours_per_day
    day = business_day(config.start_date, day_offset, config.holidays)
    return datetime.combine(day, config.start_time) + timedelta(
        minutes=_minutes(hour_offset)
    )


def add_work_hours(
    start: datetime,
    hours_to_add: float,
    day_start_hour: float,
    hours_per_day: float,
    holidays: frozenset[date] = frozenset(),
) -> datetime:
    """
    Advance a timestamp by a number of work hours.

    Time left in the current work day is consumed first; the remainder spills
    into following business days, always resuming at ``day_start_hour``.

    Args:
        start: Starting timestamp
        hours_to_add: Work hours to add; zero or negative returns ``start``
        day_start_hour: Start of the work day as a fractional hour
        hours_per_day: Length of the work day in hours
        holidays: Dates that are skipped like weekends

    Returns:
        The resulting timestamp, honored to the minute
    """
    if hours_to_add <= 0:
        return start
    if hours_per_day <= 0:
        raise ValueError("Work day length must be positive")

    day_start_minutes = _minutes(day_start_hour)
    day_end_minutes = day_start_minutes + _minutes(hours_per_day)

    current = start
    remaining = _minutes(hours_to_add)

    while remaining > 0:
        minute_of_day = current.hour * 60 + current.minute + current.second / 60
        left_in_day = max(0, int(day_end_minutes - minute_of_day))

        if left_in_day >= remaining:
            current = current + timedelta(minutes=remaining)
            remaining = 0
        else:
            remaining -= left_in_day
            resume_day = next_business_day(current.date(), holidays)
            current = datetime.combine(resume_day, time()) + timedelta(
                minutes=day_start_minutes
            )

    return current


def position_window(
    position: float, duration_hours: float, config: TimelineConfig
) -> tuple[datetime, datetime]:
    """
    Calendar window of a task timed by its position.

    Args:
        position: Work-hour offset of the task start
        duration_hours: Task duration in work hours
        config: Timeline configuration

    Returns:
        Tuple of (start, end) timestamps
    """
    start = position_to_timestamp(position, config)
    end = add_work_hours(
        start,
        duration_hours,
        config.day_start_hour,
        config.hours_per_day,
        config.holidays,
    )
    return start, end
