from __future__ import annotations

import datetime as dt
from collections.abc import Iterable
from typing import Protocol

from django.db import IntegrityError
from django.db import transaction

from hr_discipline.attendance.models import Attendance
from hr_discipline.exceptions import NotFoundError
from hr_discipline.exceptions import StateConflictError


class AttendanceRepository(Protocol):
    def get(self, attendance_id: int) -> Attendance:
        raise NotImplementedError

    def for_employee_on(self, employee_id: int, day: dt.date) -> Attendance | None:
        raise NotImplementedError

    def create_check_in(
        self,
        *,
        employee_id: int,
        day: dt.date,
        check_in_time: dt.datetime,
        method: str,
        status: str,
        minutes_late: int,
    ) -> Attendance:
        """Raise StateConflictError when the employee already has a row for ``day``."""

        raise NotImplementedError

    def save(self, attendance: Attendance, fields: Iterable[str]) -> Attendance:
        raise NotImplementedError

    def open_sessions_between(self, first: dt.date, last: dt.date) -> list[Attendance]:
        """Sessions dated within ``[first, last]`` still missing a check-out."""

        raise NotImplementedError

    def mark_absent(self, employee_id: int, day: dt.date, record_id: int) -> bool:
        """Create an ABSENT row unless one already exists; True when created."""

        raise NotImplementedError

    def count_unjustified_absences(
        self, employee_id: int, since: dt.date, until: dt.date
    ) -> int:
        raise NotImplementedError

    def employee_ids_with_absences(self, since: dt.date) -> set[int]:
        raise NotImplementedError


class DjangoAttendanceRepository:
    def get(self, attendance_id: int) -> Attendance:
        try:
            return Attendance.objects.get(pk=attendance_id)
        except Attendance.DoesNotExist as exc:
            msg = f"Attendance {attendance_id} not found"
            raise NotFoundError(msg) from exc

    def for_employee_on(self, employee_id: int, day: dt.date) -> Attendance | None:
        return Attendance.objects.filter(employee_id=employee_id, date=day).first()

    def create_check_in(
        self,
        *,
        employee_id: int,
        day: dt.date,
        check_in_time: dt.datetime,
        method: str,
        status: str,
        minutes_late: int,
    ) -> Attendance:
        try:
            with transaction.atomic():
                return Attendance.objects.create(
                    employee_id=employee_id,
                    date=day,
                    check_in_time=check_in_time,
                    check_in_method=method,
                    status=status,
                    minutes_late=minutes_late,
                )
        except IntegrityError as exc:
            msg = f"Employee {employee_id} already has attendance on {day}"
            raise StateConflictError(msg) from exc

    def save(self, attendance: Attendance, fields: Iterable[str]) -> Attendance:
        attendance.save(update_fields=[*fields, "updated_at"])
        return attendance

    def open_sessions_between(self, first: dt.date, last: dt.date) -> list[Attendance]:
        return list(
            Attendance.objects.filter(
                date__range=(first, last),
                check_in_time__isnull=False,
                check_out_time__isnull=True,
            ).order_by("pk")
        )

    def mark_absent(self, employee_id: int, day: dt.date, record_id: int) -> bool:
        _, created = Attendance.objects.get_or_create(
            employee_id=employee_id,
            date=day,
            defaults={
                "status": Attendance.Status.ABSENT,
                "check_in_method": Attendance.Method.SYSTEM,
                "disciplinary_record_id": record_id,
                "notes": "Suspension day",
            },
        )
        return created

    def count_unjustified_absences(
        self, employee_id: int, since: dt.date, until: dt.date
    ) -> int:
        return Attendance.objects.filter(
            employee_id=employee_id,
            status=Attendance.Status.ABSENT,
            disciplinary_record__isnull=True,
            date__gte=since,
            date__lte=until,
        ).count()

    def employee_ids_with_absences(self, since: dt.date) -> set[int]:
        return set(
            Attendance.objects.filter(
                status=Attendance.Status.ABSENT,
                disciplinary_record__isnull=True,
                date__gte=since,
            ).values_list("employee_id", flat=True)
        )
