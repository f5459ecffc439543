import datetime as dt

import pytest
from rest_framework import status
from rest_framework.test import APIClient

from hr_discipline.attendance.models import Attendance
from tests.factories import create_employee
from tests.factories import create_shift
from tests.factories import create_user
from tests.factories import seed_rules

pytestmark = pytest.mark.django_db

CHECK_IN = "/api/v1/attendance/check-in/"
CHECK_OUT = "/api/v1/attendance/check-out/"


@pytest.fixture
def employee():
    seed_rules()
    return create_employee("ana", shift=create_shift())


def _client(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


def test_check_in_and_out(employee):
    client = _client(employee.user)

    res = client.post(CHECK_IN, {"timestamp": "2026-03-02T09:30:00Z"}, format="json")
    assert res.status_code == status.HTTP_201_CREATED
    assert res.data["minutes_late"] == 30
    assert res.data["attendance"]["status"] == Attendance.Status.LATE
    assert res.data["formal_tardies_added"] == 1

    dup = client.post(CHECK_IN, {"timestamp": "2026-03-02T10:00:00Z"}, format="json")
    assert dup.status_code == status.HTTP_409_CONFLICT

    out = client.post(CHECK_OUT, {"timestamp": "2026-03-02T17:30:00Z"}, format="json")
    assert out.status_code == status.HTTP_200_OK
    assert out.data["worked_hours"] == "8.00"
    assert out.data["logged_time"] == "08:00:00"


def test_check_out_without_check_in(employee):
    res = _client(employee.user).post(
        CHECK_OUT, {"timestamp": "2026-03-02T17:30:00Z"}, format="json"
    )
    assert res.status_code == status.HTTP_404_NOT_FOUND


def test_staff_can_check_in_for_employee(employee):
    admin = create_user("hr", is_staff=True)

    res = _client(admin).post(
        CHECK_IN,
        {
            "employee": employee.pk,
            "timestamp": "2026-03-02T08:55:00Z",
            "method": "DEVICE",
        },
        format="json",
    )

    assert res.status_code == status.HTTP_201_CREATED
    assert res.data["attendance"]["check_in_method"] == "DEVICE"
    assert res.data["minutes_late"] == 0


def test_employee_cannot_act_for_someone_else(employee):
    other = create_employee("ben")
    res = _client(employee.user).post(CHECK_IN, {"employee": other.pk}, format="json")
    assert res.status_code == status.HTTP_403_FORBIDDEN


def test_user_without_profile():
    res = _client(create_user("ghost")).post(CHECK_IN, {}, format="json")
    assert res.status_code == status.HTTP_400_BAD_REQUEST


def test_anonymous_is_rejected():
    assert APIClient().post(CHECK_IN, {}, format="json").status_code in {
        status.HTTP_401_UNAUTHORIZED,
        status.HTTP_403_FORBIDDEN,
    }


def test_manual_auto_checkout(employee):
    admin = create_user("hr", is_staff=True)
    Attendance.objects.create(
        employee=employee,
        date=dt.datetime.now(tz=dt.UTC).date(),
        check_in_time=dt.datetime.now(tz=dt.UTC) - dt.timedelta(minutes=1),
    )

    denied = _client(employee.user).post("/api/v1/attendance/auto-checkout/", {})
    closed = _client(admin).post(
        "/api/v1/attendance/auto-checkout/", {"employee": employee.pk}, format="json"
    )
    sweep = _client(admin).post("/api/v1/attendance/auto-checkout/", {}, format="json")

    assert denied.status_code == status.HTTP_403_FORBIDDEN
    assert closed.status_code == status.HTTP_200_OK
    assert closed.data["is_auto_checkout"] is True
    assert sweep.data["processed"] == 0
