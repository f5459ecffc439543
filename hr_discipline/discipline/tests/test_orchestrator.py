import datetime as dt
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest

from hr_discipline.attendance.models import Attendance
from hr_discipline.employees.models import Employee
from hr_discipline.exceptions import EmployeeTerminatedError
from hr_discipline.exceptions import NotFoundError
from hr_discipline.exceptions import StateConflictError
from hr_discipline.exceptions import TransientError
from tests.fakes import FakeLedgerRepository
from tests.fakes import FakeWorld
from tests.fakes import at
from tests.fakes import office_shift

MONDAY = dt.date(2026, 3, 2)
TOKYO = ZoneInfo("Asia/Tokyo")
MEXICO_CITY = ZoneInfo("America/Mexico_City")


class FlakyLedgerRepository(FakeLedgerRepository):
    def __init__(self, failures):
        super().__init__()
        self.failures = failures

    def get_or_create_for_update(self, employee_id, year, month):
        if self.failures:
            self.failures -= 1
            msg = "row locked"
            raise TransientError(msg)
        return super().get_or_create_for_update(employee_id, year, month)


@pytest.fixture
def world():
    return FakeWorld().seed()


def test_on_time_check_in(world):
    result = world.services().orchestrator.check_in(1, at=at(MONDAY, "08:55"))

    assert result.minutes_late == 0
    assert result.outcome is None
    assert result.attendance.status == Attendance.Status.PRESENT
    assert world.ledger.rows == {}


def test_grace_period_is_a_tolerance_window(world):
    world.shifts.default = office_shift(grace_minutes=5)
    services = world.services()

    on_time = services.orchestrator.check_in(1, at=at(MONDAY, "09:05"))
    late = services.orchestrator.check_in(1, at=at(MONDAY + dt.timedelta(days=1), "09:06"))

    assert on_time.minutes_late == 0
    assert late.minutes_late == 6
    assert late.attendance.status == Attendance.Status.LATE
    assert late.attendance.tardiness_processed is True


def test_day_off_and_missing_shift_are_never_late(world):
    services = world.services()
    saturday = services.orchestrator.check_in(1, at=at(dt.date(2026, 3, 7), "11:00"))
    world.shifts.default = None
    no_shift = services.orchestrator.check_in(1, at=at(MONDAY, "11:00"))

    assert saturday.minutes_late == 0
    assert no_shift.minutes_late == 0


def test_second_check_in_same_day_conflicts(world):
    services = world.services()
    services.orchestrator.check_in(1, at=at(MONDAY, "09:00"))

    with pytest.raises(StateConflictError):
        services.orchestrator.check_in(1, at=at(MONDAY, "13:00"))


def test_unknown_and_terminated_employees(world):
    world.employees.add(2, status=Employee.Status.TERMINATED)
    services = world.services()

    with pytest.raises(NotFoundError):
        services.orchestrator.check_in(99, at=at(MONDAY, "09:00"))
    with pytest.raises(EmployeeTerminatedError):
        services.orchestrator.check_in(2, at=at(MONDAY, "09:00"))


def test_transient_contention_is_retried_in_process(settings):
    settings.TARDINESS_MAX_RETRIES = 3
    world = FakeWorld(ledger=FlakyLedgerRepository(failures=2)).seed()

    result = world.services().orchestrator.check_in(1, at=at(MONDAY, "09:30"))

    assert result.outcome.row.formal_tardies_count == 1
    assert result.deferred is False
    assert len(world.sleeps) == 2
    assert world.retries == []


def test_exhausted_retries_hand_off_to_queue(settings):
    settings.TARDINESS_MAX_RETRIES = 2
    world = FakeWorld(ledger=FlakyLedgerRepository(failures=10)).seed()

    result = world.services().orchestrator.check_in(1, at=at(MONDAY, "09:30"))

    assert result.deferred is True
    assert result.outcome is None
    assert world.retries == [result.attendance.pk]
    assert result.attendance.tardiness_processed is False


def test_processing_failure_never_loses_the_check_in():
    world = FakeWorld()  # no rules configured

    result = world.services().orchestrator.check_in(1, at=at(MONDAY, "09:30"))

    assert result.minutes_late == 30
    assert result.outcome is None
    assert result.deferred is False
    assert world.attendance.get(result.attendance.pk).tardiness_processed is False


def test_replayed_processing_is_idempotent(world):
    services = world.services()
    result = services.orchestrator.check_in(1, at=at(MONDAY, "09:30"))

    assert services.orchestrator.process_tardiness(result.attendance.pk) is None
    assert services.ledger.formal_tardies(1, 2026, 3) == 1


def test_check_out_computes_hours(world):
    services = world.services()
    services.orchestrator.check_in(1, at=at(MONDAY, "08:30"))

    attendance = services.orchestrator.check_out(1, at=at(MONDAY, "17:30"))

    assert attendance.worked_hours == Decimal("9.00")
    assert attendance.overtime_hours == Decimal("1.00")
    assert attendance.check_out_method == Attendance.Method.MANUAL
    with pytest.raises(StateConflictError):
        services.orchestrator.check_out(1, at=at(MONDAY, "18:00"))


def test_check_out_without_check_in(world):
    with pytest.raises(NotFoundError):
        world.services().orchestrator.check_out(1, at=at(MONDAY, "17:00"))


def test_check_in_date_follows_the_shift_zone(world):
    world.shifts.default = office_shift("08:00", "17:00", tz=TOKYO)
    services = world.services()

    # Still Sunday evening in UTC.
    result = services.orchestrator.check_in(1, at=at(MONDAY, "08:30", TOKYO))

    assert result.attendance.date == MONDAY
    assert result.minutes_late == 30
    assert services.ledger.formal_tardies(1, 2026, 3) == 1


def test_ledger_month_follows_the_shift_zone(world):
    world.shifts.default = office_shift("08:00", "17:00", tz=TOKYO)
    services = world.services()
    first_of_april = dt.date(2026, 4, 1)

    result = services.orchestrator.check_in(1, at=at(first_of_april, "08:30", TOKYO))

    assert result.attendance.date == first_of_april
    assert services.ledger.formal_tardies(1, 2026, 4) == 1
    assert services.ledger.current(1, 2026, 3) is None


def test_check_out_after_local_midnight_closes_previous_session(world):
    world.shifts.default = office_shift("14:00", "22:00", tz=MEXICO_CITY)
    services = world.services()
    services.orchestrator.check_in(1, at=at(MONDAY, "14:00", MEXICO_CITY))

    tuesday = MONDAY + dt.timedelta(days=1)
    attendance = services.orchestrator.check_out(1, at=at(tuesday, "00:30", MEXICO_CITY))

    assert attendance.date == MONDAY
    assert attendance.check_out_time == at(tuesday, "00:30", MEXICO_CITY)
    assert attendance.worked_hours == Decimal("10.50")
