import datetime as dt

import pytest

from hr_discipline.discipline.escalation import ALL_TRIGGERS
from hr_discipline.discipline.models import DisciplinaryActionRule
from hr_discipline.discipline.models import EmployeeDisciplinaryRecord
from hr_discipline.employees.models import Employee
from tests.fakes import FakeWorld
from tests.fakes import at

ActionType = EmployeeDisciplinaryRecord.ActionType
TriggerType = EmployeeDisciplinaryRecord.TriggerType
Status = EmployeeDisciplinaryRecord.Status

# Working days, early March 2026
LATE_CHECK_INS = [
    (dt.date(2026, 3, 2), "09:05"),
    (dt.date(2026, 3, 3), "09:07"),
    (dt.date(2026, 3, 4), "09:03"),
    (dt.date(2026, 3, 5), "09:10"),
    (dt.date(2026, 3, 6), "09:01"),
    (dt.date(2026, 3, 9), "09:20"),
    (dt.date(2026, 3, 10), "09:02"),
    (dt.date(2026, 3, 11), "09:04"),
]
TODAY = dt.date(2026, 3, 20)
NOW = at(TODAY, "18:00")


@pytest.fixture
def world():
    return FakeWorld().seed()


def _rule(world, code) -> DisciplinaryActionRule:
    return next(r for r in world.rules.disciplinary if r.code == code)


def _add_acts(world, count, status=Status.ACTIVE, applied=TODAY):
    for _ in range(count):
        world.records.create(
            employee_id=1,
            action_type=ActionType.ADMINISTRATIVE_ACT,
            trigger_type=TriggerType.FORMAL_TARDIES,
            trigger_count=5,
            applied_date=applied,
            status=status,
        )


def test_monthly_tardiness_scenario(world):
    services = world.services()
    formal = []
    for day, hhmm in LATE_CHECK_INS:
        result = services.orchestrator.check_in(1, at=at(day, hhmm))
        formal.append(result.outcome.row.formal_tardies_count)

    # 4 accumulated, then one post-first, one direct, two more post-first.
    assert formal == [0, 0, 0, 1, 2, 3, 4, 5]
    row = services.ledger.current(1, 2026, 3)
    assert row.late_arrivals_count == 7
    assert row.direct_tardiness_count == 1
    assert row.administrative_acts == 1

    records = world.records.for_employee(1)
    assert len(records) == 1
    act = records[0]
    assert act.action_type == ActionType.ADMINISTRATIVE_ACT
    assert act.status == Status.PENDING
    assert act.suspension_days == 1
    assert act.applied_date == dt.date(2026, 3, 11)
    assert [e.action_type for e in world.publisher.events] == [
        ActionType.ADMINISTRATIVE_ACT
    ]


def test_reevaluation_does_not_duplicate(world):
    services = world.services()
    for day, hhmm in LATE_CHECK_INS:
        services.orchestrator.check_in(1, at=at(day, hhmm))

    again = services.evaluator.evaluate(1, now=at(dt.date(2026, 3, 12), "10:00"))

    assert again == []
    assert len(world.records.for_employee(1)) == 1
    assert services.ledger.current(1, 2026, 3).administrative_acts == 1


def test_rejected_record_still_blocks_its_window(world):
    services = world.services()
    for day, hhmm in LATE_CHECK_INS:
        services.orchestrator.check_in(1, at=at(day, hhmm))
    record = world.records.for_employee(1)[0]
    services.workflow.reject(record.pk, approver_id=9, reason="disputed")

    assert services.evaluator.evaluate(1, now=at(dt.date(2026, 3, 13), "10:00")) == []


def test_three_applied_acts_escalate_to_termination(world):
    _add_acts(world, 3, applied=TODAY - dt.timedelta(days=40))
    services = world.services()

    created = services.evaluator.evaluate(1, now=NOW)

    assert [r.action_type for r in created] == [ActionType.TERMINATION]
    assert created[0].status == Status.PENDING
    assert created[0].trigger_type == TriggerType.ADMINISTRATIVE_ACTS
    assert services.evaluator.evaluate(1, now=NOW) == []


def test_pending_acts_are_not_counted(world):
    _add_acts(world, 2)
    _add_acts(world, 1, status=Status.PENDING)

    assert world.services().evaluator.evaluate(1, now=NOW) == []


def test_acts_outside_rolling_window_are_not_counted(world):
    _add_acts(world, 2)
    _add_acts(world, 1, applied=TODAY - dt.timedelta(days=91))

    assert world.services().evaluator.evaluate(1, now=NOW) == []


def test_only_highest_absence_threshold_applies(world):
    for offset in (1, 2, 3):
        world.attendance.add_absence(1, TODAY - dt.timedelta(days=offset))
    services = world.services()

    created = services.evaluator.evaluate(1, now=NOW, triggers=ALL_TRIGGERS)

    assert len(created) == 1
    assert created[0].action_type == ActionType.SUSPENSION
    assert created[0].suspension_days == 3
    assert created[0].trigger_count == 3

    world.attendance.add_absence(1, TODAY - dt.timedelta(days=4))
    created = services.evaluator.evaluate(1, now=NOW)
    assert [r.action_type for r in created] == [ActionType.TERMINATION]


def test_auto_applied_suspension_marks_days(world):
    rule = _rule(world, "absences-1")
    rule.auto_apply = True
    rule.requires_approval = False
    world.attendance.add_absence(1, TODAY - dt.timedelta(days=2))

    created = world.services().evaluator.evaluate(1, now=NOW)

    assert len(created) == 1
    record = created[0]
    assert record.status == Status.ACTIVE
    assert record.approved_by_id is None
    assert (record.effective_date, record.expiration_date) == (TODAY, TODAY)
    marked = world.attendance.for_employee_on(1, TODAY)
    assert marked.disciplinary_record_id == record.pk


def test_auto_applied_termination_stops_evaluation(world):
    rule = _rule(world, "administrative-acts-3")
    rule.auto_apply = True
    rule.requires_approval = False
    _add_acts(world, 3)
    world.attendance.add_absence(1, TODAY - dt.timedelta(days=1))

    created = world.services().evaluator.evaluate(1, now=NOW)

    assert [r.status for r in created] == [Status.COMPLETED]
    assert world.employees.get(1).status == Employee.Status.TERMINATED


def test_terminated_employee_is_skipped(world):
    world.employees.add(2, status=Employee.Status.TERMINATED)
    for offset in (1, 2):
        world.attendance.add_absence(2, TODAY - dt.timedelta(days=offset))

    assert world.services().evaluator.evaluate(2, now=NOW) == []


def test_sweep_candidates(world):
    world.employees.add(2)
    world.employees.add(3)
    world.ledger.get_or_create_for_update(1, TODAY.year, TODAY.month)
    world.attendance.add_absence(2, TODAY - dt.timedelta(days=3))
    world.records.create(
        employee_id=3,
        action_type=ActionType.ADMINISTRATIVE_ACT,
        applied_date=TODAY - dt.timedelta(days=60),
        status=Status.COMPLETED,
    )

    assert world.services().evaluator.sweep_candidates(TODAY) == {1, 2, 3}


def test_evaluation_holds_the_employee_lock(world):
    services = world.services()
    world.attendance.add_absence(1, TODAY - dt.timedelta(days=1))

    services.evaluator.evaluate(1, now=NOW)
    services.sweep(now=NOW)

    assert world.employees.locked == [1, 1]
