"""Typed weekly schedules.

Shift timing reaches business logic only as a :class:`WeeklySchedule`. It is
built once from ``ShiftPeriod`` rows or decoded once from the administrative
"working hours" list (seven ``{day, enabled, startTime, endTime}`` entries,
``day`` 0 = Monday).
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Iterable
from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import field

from hr_discipline.exceptions import ConfigurationError

DAYS_IN_WEEK = 7


def _parse_hhmm(value: str) -> dt.time:
    try:
        hours, minutes = (int(part) for part in str(value).split(":"))
        return dt.time(hours, minutes)
    except (TypeError, ValueError) as exc:
        msg = f"Invalid time {value!r}; expected HH:MM"
        raise ConfigurationError(msg) from exc


def _seconds(value: dt.time) -> int:
    return value.hour * 3600 + value.minute * 60 + value.second


@dataclass(frozen=True)
class Period:
    start: dt.time
    end: dt.time

    def __post_init__(self):
        if self.end <= self.start:
            msg = f"Period end {self.end} must be after start {self.start}"
            raise ConfigurationError(msg)

    @property
    def hours(self) -> float:
        return (_seconds(self.end) - _seconds(self.start)) / 3600


@dataclass(frozen=True)
class DaySchedule:
    enabled: bool = False
    periods: tuple[Period, ...] = ()

    @property
    def is_working_day(self) -> bool:
        return self.enabled and bool(self.periods)

    @property
    def first_start(self) -> dt.time | None:
        if not self.is_working_day:
            return None
        return min(p.start for p in self.periods)

    @property
    def last_end(self) -> dt.time | None:
        if not self.is_working_day:
            return None
        return max(p.end for p in self.periods)

    @property
    def expected_hours(self) -> float:
        if not self.is_working_day:
            return 0.0
        return sum(p.hours for p in self.periods)


@dataclass(frozen=True)
class WeeklySchedule:
    days: tuple[DaySchedule, ...] = field(
        default_factory=lambda: tuple(DaySchedule() for _ in range(DAYS_IN_WEEK))
    )

    def __post_init__(self):
        if len(self.days) != DAYS_IN_WEEK:
            msg = "A weekly schedule needs exactly 7 days"
            raise ConfigurationError(msg)

    def for_weekday(self, weekday: int) -> DaySchedule:
        return self.days[weekday]

    def for_date(self, day: dt.date) -> DaySchedule:
        return self.days[day.weekday()]

    @classmethod
    def from_periods(cls, rows: Iterable) -> WeeklySchedule:
        """Build from objects exposing ``day_of_week``/``start_time``/``end_time``."""

        buckets: dict[int, list[Period]] = {d: [] for d in range(DAYS_IN_WEEK)}
        for row in rows:
            buckets[int(row.day_of_week)].append(Period(row.start_time, row.end_time))
        return cls(
            days=tuple(
                DaySchedule(
                    enabled=bool(buckets[d]),
                    periods=tuple(sorted(buckets[d], key=lambda p: p.start)),
                )
                for d in range(DAYS_IN_WEEK)
            )
        )

    @classmethod
    def from_working_hours(cls, entries: Iterable[Mapping]) -> WeeklySchedule:
        entries = list(entries)
        if len(entries) != DAYS_IN_WEEK:
            msg = "Working hours must configure all 7 days"
            raise ConfigurationError(msg)
        days: list[DaySchedule | None] = [None] * DAYS_IN_WEEK
        for entry in entries:
            try:
                day = int(entry["day"])
            except (KeyError, TypeError, ValueError) as exc:
                msg = f"Working hours entry without a valid day: {entry!r}"
                raise ConfigurationError(msg) from exc
            if not 0 <= day < DAYS_IN_WEEK or days[day] is not None:
                msg = f"Invalid or repeated day {day} in working hours"
                raise ConfigurationError(msg)
            if entry.get("enabled"):
                period = Period(
                    _parse_hhmm(entry.get("startTime", "")),
                    _parse_hhmm(entry.get("endTime", "")),
                )
                days[day] = DaySchedule(enabled=True, periods=(period,))
            else:
                days[day] = DaySchedule()
        if not any(d.is_working_day for d in days):
            msg = "At least one weekday must be enabled"
            raise ConfigurationError(msg)
        return cls(days=tuple(days))

    def to_working_hours(self) -> list[dict]:
        """Inverse of :meth:`from_working_hours`, one period per day."""

        out = []
        for day, schedule in enumerate(self.days):
            if schedule.is_working_day:
                out.append(
                    {
                        "day": day,
                        "enabled": True,
                        "startTime": schedule.first_start.strftime("%H:%M"),
                        "endTime": schedule.last_end.strftime("%H:%M"),
                        "duration": round(schedule.expected_hours, 2),
                    }
                )
            else:
                out.append(
                    {
                        "day": day,
                        "enabled": False,
                        "startTime": "09:00",
                        "endTime": "17:00",
                        "duration": 0,
                    }
                )
        return out
