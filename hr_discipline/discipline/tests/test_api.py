import datetime as dt

import pytest
from rest_framework import status
from rest_framework.test import APIClient

from hr_discipline.discipline.models import DisciplinaryActionRule
from hr_discipline.discipline.models import EmployeeDisciplinaryRecord
from hr_discipline.employees.models import Employee
from hr_discipline.notifications.models import Notification
from tests.factories import create_employee
from tests.factories import create_shift
from tests.factories import create_user
from tests.factories import seed_rules

ActionType = EmployeeDisciplinaryRecord.ActionType
Status = EmployeeDisciplinaryRecord.Status

pytestmark = pytest.mark.django_db

# Working days, early March 2026, with minutes late
LATE_CHECK_INS = [
    ("2026-03-02", 5),
    ("2026-03-03", 7),
    ("2026-03-04", 3),
    ("2026-03-05", 10),
    ("2026-03-06", 1),
    ("2026-03-09", 20),
    ("2026-03-10", 2),
    ("2026-03-11", 4),
]


@pytest.fixture
def setup():
    seed_rules()
    shift = create_shift()
    employee = create_employee("ana", shift=shift)
    admin = create_user("hr", is_staff=True)
    return employee, admin


def _client(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


def _record(employee, action=ActionType.ADMINISTRATIVE_ACT, applied=None):
    return EmployeeDisciplinaryRecord.objects.create(
        employee=employee,
        action_type=action,
        applied_date=applied or dt.date(2026, 3, 10),
        status=Status.PENDING,
    )


def test_month_of_late_check_ins_files_one_pending_act(setup):
    employee, _ = setup
    client = _client(employee.user)

    formal = []
    for day, minutes in LATE_CHECK_INS:
        res = client.post(
            "/api/v1/attendance/check-in/",
            {"timestamp": f"{day}T09:{minutes:02d}:00Z"},
            format="json",
        )
        assert res.status_code == status.HTTP_201_CREATED
        assert res.data["minutes_late"] == minutes
        formal.append(res.data["formal_tardies_count"])

    assert formal == [0, 0, 0, 1, 2, 3, 4, 5]
    record = EmployeeDisciplinaryRecord.objects.get(employee=employee)
    assert record.action_type == ActionType.ADMINISTRATIVE_ACT
    assert record.status == Status.PENDING
    assert record.suspension_days == 1
    notification = Notification.objects.get(recipient=employee.user)
    assert notification.payload["record_id"] == record.pk


def test_decision_flow(setup):
    employee, admin = setup
    record = _record(employee)
    url = f"/api/v1/disciplinary-records/{record.pk}/decision/"

    denied = _client(employee.user).post(url, {"approve": True}, format="json")
    assert denied.status_code == status.HTTP_403_FORBIDDEN

    res = _client(admin).post(url, {"approve": True}, format="json")
    assert res.status_code == status.HTTP_200_OK
    assert res.data["status"] == Status.ACTIVE
    assert res.data["approved_by"] == admin.pk

    again = _client(admin).post(url, {"approve": False, "reason": "late"}, format="json")
    assert again.status_code == status.HTTP_409_CONFLICT

    missing = _client(admin).post(
        "/api/v1/disciplinary-records/999999/decision/", {"approve": True}, format="json"
    )
    assert missing.status_code == status.HTTP_404_NOT_FOUND


def test_approving_termination_terminates_employee(setup):
    employee, admin = setup
    record = _record(employee, action=ActionType.TERMINATION)

    res = _client(admin).post(
        f"/api/v1/disciplinary-records/{record.pk}/decision/",
        {"approve": True},
        format="json",
    )

    assert res.data["status"] == Status.COMPLETED
    employee.refresh_from_db()
    assert employee.status == Employee.Status.TERMINATED
    check_in = _client(employee.user).post(
        "/api/v1/attendance/check-in/", {}, format="json"
    )
    assert check_in.status_code == status.HTTP_409_CONFLICT


def test_records_are_scoped_to_own_employee(setup):
    employee, admin = setup
    other = create_employee("ben")
    _record(employee)
    _record(other)

    own = _client(employee.user).get("/api/v1/disciplinary-records/")
    everyone = _client(admin).get(f"/api/v1/disciplinary-records/?employee={other.pk}")

    assert [r["employee"] for r in own.data] == [employee.pk]
    assert [r["employee"] for r in everyone.data] == [other.pk]


def test_stats_and_at_risk(setup):
    employee, admin = setup

    own = _client(employee.user).get("/api/v1/disciplinary-records/stats/")
    assert own.status_code == status.HTTP_200_OK
    assert own.data["history"]["employee_id"] == employee.pk
    assert "formal_tardies_count" in own.data["monthly"]

    other = create_employee("ben")
    forbidden = _client(employee.user).get(
        f"/api/v1/disciplinary-records/stats/?employee={other.pk}"
    )
    assert forbidden.status_code == status.HTTP_403_FORBIDDEN

    assert (
        _client(employee.user).get("/api/v1/disciplinary-records/at-risk/").status_code
        == status.HTTP_403_FORBIDDEN
    )
    assert _client(admin).get("/api/v1/disciplinary-records/at-risk/").data == []


def test_overlapping_tardiness_rule_is_rejected(setup):
    _, admin = setup
    res = _client(admin).post(
        "/api/v1/tardiness-rules/",
        {
            "code": "overlap",
            "name": "Overlap",
            "type": "LATE_ARRIVAL",
            "start_minutes_late": 10,
            "end_minutes_late": 20,
        },
        format="json",
    )
    assert res.status_code == status.HTTP_400_BAD_REQUEST


def test_deleting_disciplinary_rule_retires_it(setup):
    _, admin = setup
    rule = DisciplinaryActionRule.objects.get(code="absences-4")

    res = _client(admin).delete(f"/api/v1/disciplinary-rules/{rule.pk}/")

    assert res.status_code == status.HTTP_204_NO_CONTENT
    rule.refresh_from_db()
    assert rule.is_active is False


def test_create_disciplinary_rule_through_catalog(setup):
    _, admin = setup
    payload = {
        "code": "formal-tardies-8",
        "name": "Suspension for 8 formal tardies",
        "trigger_type": "FORMAL_TARDIES",
        "trigger_count": 8,
        "period_days": 30,
        "action_type": "SUSPENSION",
    }

    missing_days = _client(admin).post(
        "/api/v1/disciplinary-rules/", payload, format="json"
    )
    created = _client(admin).post(
        "/api/v1/disciplinary-rules/", {**payload, "suspension_days": 2}, format="json"
    )

    assert missing_days.status_code == status.HTTP_400_BAD_REQUEST
    assert created.status_code == status.HTTP_201_CREATED
    assert created.data["suspension_days"] == 2
