from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Protocol
from zoneinfo import ZoneInfo
from zoneinfo import ZoneInfoNotFoundError

from hr_discipline import policies
from hr_discipline.employees.models import Employee
from hr_discipline.exceptions import ConfigurationError
from hr_discipline.shifts.models import ShiftOverride
from hr_discipline.shifts.models import WorkShift
from hr_discipline.shifts.schedule import WeeklySchedule


@dataclass(frozen=True)
class ResolvedShift:
    """A shift decoded for business logic: no ORM access past this point."""

    shift_id: int
    code: str
    schedule: WeeklySchedule
    tz: ZoneInfo
    grace_minutes: int
    auto_checkout_enabled: bool


def resolve_zone(*names: str) -> ZoneInfo:
    """First configured zone among ``names``, else the attendance default."""

    for name in names:
        if not name:
            continue
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            msg = f"Unknown time zone {name!r}"
            raise ConfigurationError(msg) from exc
    return policies.attendance_time_zone()


def resolve_shift(shift: WorkShift, employee_zone: str = "") -> ResolvedShift:
    grace = shift.grace_period_minutes
    if grace is None:
        grace = policies.default_grace_period_minutes()
    return ResolvedShift(
        shift_id=shift.pk,
        code=shift.code,
        schedule=WeeklySchedule.from_periods(shift.periods.all()),
        tz=resolve_zone(shift.time_zone, employee_zone),
        grace_minutes=int(grace),
        auto_checkout_enabled=shift.auto_checkout_enabled,
    )


class ShiftRepository(Protocol):
    def effective_shift(self, employee_id: int, day: dt.date) -> ResolvedShift | None:
        """Override for ``day`` if any, else the employee's default shift."""

        raise NotImplementedError

    def home_zone(self, employee_id: int) -> ZoneInfo:
        """Zone of the employee's default shift, else the employee's own."""

        raise NotImplementedError


class DjangoShiftRepository:
    def effective_shift(self, employee_id: int, day: dt.date) -> ResolvedShift | None:
        employee = (
            Employee.objects.select_related("default_shift")
            .filter(pk=employee_id)
            .first()
        )
        if employee is None:
            return None
        override = (
            ShiftOverride.objects.select_related("shift")
            .filter(employee_id=employee_id, date=day, shift__is_active=True)
            .first()
        )
        shift = override.shift if override else employee.default_shift
        if shift is None or not shift.is_active:
            return None
        return resolve_shift(shift, employee.time_zone)

    def home_zone(self, employee_id: int) -> ZoneInfo:
        employee = (
            Employee.objects.select_related("default_shift")
            .filter(pk=employee_id)
            .first()
        )
        if employee is None:
            return policies.attendance_time_zone()
        shift = employee.default_shift
        return resolve_zone(shift.time_zone if shift else "", employee.time_zone)


def local_workday(
    shifts: ShiftRepository, employee_id: int, at: dt.datetime
) -> tuple[dt.date, ResolvedShift | None]:
    """Calendar date of ``at`` where the employee works, with that day's shift.

    The home zone picks the date first; an override shift in another zone
    moves it to that zone's date.
    """

    tz = shifts.home_zone(employee_id)
    day = at.astimezone(tz).date()
    shift = shifts.effective_shift(employee_id, day)
    if shift is not None and shift.tz != tz:
        shifted = at.astimezone(shift.tz).date()
        if shifted != day:
            day = shifted
            shift = shifts.effective_shift(employee_id, day)
    return day, shift
