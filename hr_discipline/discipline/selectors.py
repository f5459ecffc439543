"""Read-only reporting queries over disciplinary state."""

from __future__ import annotations

import datetime as dt

from django.db.models import Count

from hr_discipline import policies
from hr_discipline.attendance.services import local_today
from hr_discipline.discipline.models import EmployeeDisciplinaryRecord
from hr_discipline.discipline.models import TardinessAccumulation
from hr_discipline.employees.models import Employee

Status = EmployeeDisciplinaryRecord.Status
ActionType = EmployeeDisciplinaryRecord.ActionType
APPLIED_STATUSES = [Status.ACTIVE, Status.COMPLETED]
RISK_WINDOW_DAYS = 90


def monthly_stats(employee_id: int, year: int, month: int) -> dict:
    row = TardinessAccumulation.objects.filter(
        employee_id=employee_id, year=year, month=month
    ).first()
    records = EmployeeDisciplinaryRecord.objects.filter(
        employee_id=employee_id,
        applied_date__year=year,
        applied_date__month=month,
    )
    return {
        "employee_id": employee_id,
        "year": year,
        "month": month,
        "late_arrivals_count": row.late_arrivals_count if row else 0,
        "direct_tardiness_count": row.direct_tardiness_count if row else 0,
        "formal_tardies_count": row.formal_tardies_count if row else 0,
        "administrative_acts": row.administrative_acts if row else 0,
        "disciplinary_records": records.count(),
        "pending_records": records.filter(status=Status.PENDING).count(),
    }


def employee_disciplinary_stats(employee_id: int, today: dt.date | None = None) -> dict:
    today = today or local_today()
    records = EmployeeDisciplinaryRecord.objects.filter(employee_id=employee_id)
    applied = records.filter(status__in=APPLIED_STATUSES)
    recent_acts = applied.filter(
        action_type=ActionType.ADMINISTRATIVE_ACT,
        applied_date__gte=today - dt.timedelta(days=RISK_WINDOW_DAYS),
    ).count()
    return {
        "employee_id": employee_id,
        "total_records": records.count(),
        "active_records": records.filter(status=Status.ACTIVE).count(),
        "last_30_days": records.filter(
            applied_date__gte=today - dt.timedelta(days=30)
        ).count(),
        "last_90_days": records.filter(
            applied_date__gte=today - dt.timedelta(days=90)
        ).count(),
        "administrative_acts": applied.filter(
            action_type=ActionType.ADMINISTRATIVE_ACT
        ).count(),
        "suspensions": applied.filter(action_type=ActionType.SUSPENSION).count(),
        "recent_administrative_acts": recent_acts,
        "at_risk_of_termination": recent_acts
        >= policies.administrative_acts_risk_threshold(),
    }


def employees_at_risk(today: dt.date | None = None) -> list[dict]:
    """Employees one approved administrative act (or fewer) away from termination."""

    today = today or local_today()
    threshold = policies.administrative_acts_risk_threshold()
    floor = max(1, threshold - 1)
    counts = (
        EmployeeDisciplinaryRecord.objects.filter(
            action_type=ActionType.ADMINISTRATIVE_ACT,
            status__in=APPLIED_STATUSES,
            applied_date__gte=today - dt.timedelta(days=RISK_WINDOW_DAYS),
            employee__status__in=[Employee.Status.ACTIVE, Employee.Status.SUSPENDED],
        )
        .values("employee_id")
        .annotate(acts=Count("id"))
        .filter(acts__gte=floor)
        .order_by("-acts", "employee_id")
    )
    by_id = {row["employee_id"]: row["acts"] for row in counts}
    employees = Employee.objects.select_related("user").filter(pk__in=by_id)
    rows = []
    for employee in employees:
        acts = by_id[employee.pk]
        remaining = max(0, threshold - acts)
        rows.append(
            {
                "employee_id": employee.pk,
                "employee_code": employee.employee_code,
                "name": employee.user.name or employee.user.username,
                "email": employee.user.email,
                "administrative_acts": acts,
                "remaining_acts": remaining,
                # At or past the threshold a termination is already on file.
                "risk_level": "HIGH" if remaining == 1 else "MEDIUM",
            }
        )
    rows.sort(key=lambda r: (-r["administrative_acts"], r["employee_id"]))
    return rows
