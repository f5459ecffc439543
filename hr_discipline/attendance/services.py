"""Attendance time arithmetic shared by check-in, check-out and auto-checkout."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from decimal import ROUND_HALF_UP
from decimal import Decimal
from zoneinfo import ZoneInfo

from django.utils import timezone

from hr_discipline import policies
from hr_discipline.exceptions import StateConflictError
from hr_discipline.shifts.schedule import DaySchedule

TWO_PLACES = Decimal("0.01")


def local_today(now: dt.datetime | None = None, tz: ZoneInfo | None = None) -> dt.date:
    """Calendar date of ``now`` in ``tz`` (default: the attendance zone)."""

    now = now or timezone.now()
    return now.astimezone(tz or policies.attendance_time_zone()).date()


def scheduled_at(day: dt.date, at: dt.time, tz: ZoneInfo) -> dt.datetime:
    return dt.datetime.combine(day, at, tzinfo=tz)


def calculate_minutes_late(
    check_in: dt.datetime,
    schedule: DaySchedule,
    tz: ZoneInfo,
    grace_minutes: int = 0,
) -> int:
    """Whole minutes between the day's first period start and ``check_in``.

    The grace period is a tolerance window: arriving within it is not late,
    arriving after it is late by the full delay from the scheduled start.
    Returns 0 when the day has no periods or the employee was on time.
    """

    first_start = schedule.first_start
    if first_start is None:
        return 0
    local_check_in = check_in.astimezone(tz)
    start = scheduled_at(local_check_in.date(), first_start, tz)
    if local_check_in <= start + dt.timedelta(minutes=max(0, grace_minutes)):
        return 0
    return int((local_check_in - start).total_seconds() // 60)


@dataclass(frozen=True)
class WorkedHours:
    worked: Decimal
    expected: Decimal
    overtime: Decimal


def compute_worked_hours(
    check_in: dt.datetime,
    check_out: dt.datetime,
    schedule: DaySchedule | None = None,
) -> WorkedHours:
    """Worked hours for a session; overtime only counts against a known schedule."""

    if check_out < check_in:
        msg = "Check-out time precedes check-in time"
        raise StateConflictError(msg)
    worked = Decimal(str((check_out - check_in).total_seconds() / 3600))
    expected = Decimal(str(schedule.expected_hours if schedule else 0))
    overtime = max(Decimal(0), worked - expected) if expected > 0 else Decimal(0)
    return WorkedHours(
        worked=worked.quantize(TWO_PLACES, rounding=ROUND_HALF_UP),
        expected=expected.quantize(TWO_PLACES, rounding=ROUND_HALF_UP),
        overtime=overtime.quantize(TWO_PLACES, rounding=ROUND_HALF_UP),
    )
