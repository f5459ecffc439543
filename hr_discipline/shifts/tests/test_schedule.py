import datetime as dt

import pytest

from hr_discipline.exceptions import ConfigurationError
from hr_discipline.shifts.schedule import DaySchedule
from hr_discipline.shifts.schedule import Period
from hr_discipline.shifts.schedule import WeeklySchedule


def _week(enabled_days=range(5), start="09:00", end="17:00"):
    return [
        {"day": d, "enabled": d in enabled_days, "startTime": start, "endTime": end}
        for d in range(7)
    ]


def test_working_hours_are_decoded_per_weekday():
    schedule = WeeklySchedule.from_working_hours(_week())

    monday = schedule.for_date(dt.date(2026, 3, 2))
    sunday = schedule.for_weekday(6)

    assert monday.first_start == dt.time(9, 0)
    assert monday.last_end == dt.time(17, 0)
    assert monday.expected_hours == 8.0
    assert sunday.is_working_day is False
    assert sunday.first_start is None


def test_to_working_hours_keeps_enabled_days():
    entries = WeeklySchedule.from_working_hours(_week(start="08:30")).to_working_hours()

    assert entries[0] == {
        "day": 0,
        "enabled": True,
        "startTime": "08:30",
        "endTime": "17:00",
        "duration": 8.5,
    }
    assert entries[6]["enabled"] is False


@pytest.mark.parametrize(
    "entries",
    [
        _week()[:6],
        _week(enabled_days=()),
        _week(start="9am"),
        _week(start="18:00"),
        [*_week()[:6], {"day": 0, "enabled": False}],
    ],
)
def test_invalid_working_hours(entries):
    with pytest.raises(ConfigurationError):
        WeeklySchedule.from_working_hours(entries)


def test_split_shift_from_periods():
    class Row:
        def __init__(self, day, start, end):
            self.day_of_week = day
            self.start_time = start
            self.end_time = end

    schedule = WeeklySchedule.from_periods(
        [
            Row(0, dt.time(14, 0), dt.time(18, 0)),
            Row(0, dt.time(8, 0), dt.time(12, 0)),
        ]
    )
    monday = schedule.for_weekday(0)

    assert monday.first_start == dt.time(8, 0)
    assert monday.last_end == dt.time(18, 0)
    assert monday.expected_hours == 8.0
    assert schedule.for_weekday(1) == DaySchedule()


def test_period_must_end_after_start():
    with pytest.raises(ConfigurationError):
        Period(dt.time(10, 0), dt.time(9, 0))
