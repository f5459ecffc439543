import datetime as dt
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest

from hr_discipline.attendance.services import calculate_minutes_late
from hr_discipline.attendance.services import compute_worked_hours
from hr_discipline.attendance.services import local_today
from hr_discipline.exceptions import StateConflictError
from tests.fakes import at
from tests.fakes import office_shift

MONDAY = dt.date(2026, 3, 2)
UTC = ZoneInfo("UTC")


def _monday():
    return office_shift().schedule.for_date(MONDAY)


@pytest.mark.parametrize(
    ("hhmm", "grace", "expected"),
    [
        ("08:59", 0, 0),
        ("09:00", 0, 0),
        ("09:00", 10, 0),
        ("09:10", 10, 0),
        ("09:11", 10, 11),
        ("09:16", 0, 16),
    ],
)
def test_minutes_late(hhmm, grace, expected):
    assert calculate_minutes_late(at(MONDAY, hhmm), _monday(), UTC, grace) == expected


def test_partial_minutes_are_floored():
    check_in = at(MONDAY, "09:05") + dt.timedelta(seconds=59)
    assert calculate_minutes_late(check_in, _monday(), UTC) == 5


def test_minutes_late_uses_shift_zone():
    bogota = ZoneInfo("America/Bogota")
    # 14:20 UTC is 09:20 in Bogota (UTC-5)
    assert calculate_minutes_late(at(MONDAY, "14:20"), _monday(), bogota) == 20


def test_day_without_periods_is_never_late():
    saturday = office_shift().schedule.for_date(dt.date(2026, 3, 7))
    assert calculate_minutes_late(at(MONDAY, "12:00"), saturday, UTC) == 0


def test_worked_hours_and_overtime():
    hours = compute_worked_hours(at(MONDAY, "09:00"), at(MONDAY, "18:30"), _monday())
    assert hours.worked == Decimal("9.50")
    assert hours.expected == Decimal("8.00")
    assert hours.overtime == Decimal("1.50")


def test_no_overtime_without_schedule():
    hours = compute_worked_hours(at(MONDAY, "09:00"), at(MONDAY, "20:00"))
    assert hours.worked == Decimal("11.00")
    assert hours.overtime == Decimal("0.00")


def test_check_out_before_check_in_is_rejected():
    with pytest.raises(StateConflictError):
        compute_worked_hours(at(MONDAY, "10:00"), at(MONDAY, "09:00"))


def test_local_today_uses_attendance_zone(settings):
    settings.ATTENDANCE_TIME_ZONE = "Asia/Tokyo"
    late_evening_utc = at(MONDAY, "20:00")
    assert local_today(late_evening_utc) == MONDAY + dt.timedelta(days=1)
