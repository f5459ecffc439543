from __future__ import annotations

import datetime as dt
import logging

from django.utils import timezone

from hr_discipline.attendance.repositories import AttendanceRepository
from hr_discipline.attendance.services import local_today
from hr_discipline.discipline.models import DisciplinaryActionRule
from hr_discipline.discipline.models import EmployeeDisciplinaryRecord
from hr_discipline.discipline.repositories import RecordRepository
from hr_discipline.discipline.repositories import Transactions
from hr_discipline.employees.repositories import EmployeeRepository
from hr_discipline.exceptions import EmployeeTerminatedError
from hr_discipline.exceptions import StateConflictError

logger = logging.getLogger(__name__)

Status = EmployeeDisciplinaryRecord.Status
ActionType = EmployeeDisciplinaryRecord.ActionType


def suspension_window(
    start: dt.date, suspension_days: int | None
) -> tuple[dt.date | None, dt.date | None]:
    """Inclusive ``(effective, expiration)`` dates, or ``(None, None)``."""

    if not suspension_days:
        return None, None
    return start, start + dt.timedelta(days=suspension_days - 1)


class DisciplinaryWorkflow:
    """Lifecycle of a disciplinary record.

    PENDING -> ACTIVE (approve) | CANCELLED (reject); ACTIVE -> COMPLETED.
    CANCELLED and COMPLETED are terminal.
    """

    def __init__(
        self,
        records: RecordRepository,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        tx: Transactions,
    ):
        self.records = records
        self.attendance = attendance
        self.employees = employees
        self.tx = tx

    def create_record(
        self,
        *,
        employee_id: int,
        action_type: str,
        applied_date: dt.date,
        rule: DisciplinaryActionRule | None = None,
        trigger_type: str = "",
        trigger_count: int | None = None,
        suspension_days: int | None = None,
        affects_salary: bool = False,
        effective_date: dt.date | None = None,
        description: str = "",
        notes: str = "",
    ) -> EmployeeDisciplinaryRecord:
        employee = self.employees.get(employee_id)
        if employee.is_terminated:
            msg = f"Employee {employee_id} is already terminated"
            raise EmployeeTerminatedError(msg)
        if rule is not None:
            action_type = rule.action_type
            trigger_type = rule.trigger_type
            suspension_days = rule.suspension_days
            affects_salary = rule.affects_salary
            description = description or rule.name
        effective, expiration = suspension_window(
            effective_date or applied_date, suspension_days
        )
        record = self.records.create(
            employee_id=employee_id,
            rule=rule,
            action_type=action_type,
            trigger_type=trigger_type,
            trigger_count=trigger_count,
            applied_date=applied_date,
            effective_date=effective,
            expiration_date=expiration,
            suspension_days=suspension_days,
            affects_salary=affects_salary,
            status=Status.PENDING,
            description=description,
            notes=notes,
        )
        logger.info(
            "Disciplinary record %s created: employee=%s action=%s trigger=%s x%s",
            record.pk,
            employee_id,
            action_type,
            trigger_type or "MANUAL",
            trigger_count,
        )
        return record

    def approve(
        self,
        record_id: int,
        approver_id: int | None = None,
        *,
        now: dt.datetime | None = None,
    ) -> EmployeeDisciplinaryRecord:
        """Activate a PENDING record and enforce its side effects.

        ``approver_id`` is None when the system applies a rule automatically.
        """

        now = now or timezone.now()
        with self.tx.atomic():
            record = self.records.get_for_update(record_id)
            self._require_pending(record)
            record.status = Status.ACTIVE
            record.approved_by_id = approver_id
            record.approval_date = now
            self.records.save(record, ["status", "approved_by", "approval_date"])

            if (
                record.action_type == ActionType.SUSPENSION
                and record.effective_date
                and record.expiration_date
            ):
                marked = self.mark_suspension_days(record)
                logger.info(
                    "Suspension %s approved; %s absent day(s) marked", record.pk, marked
                )
            elif record.action_type == ActionType.TERMINATION:
                self.employees.terminate(record.employee_id, local_today(now))
                record.status = Status.COMPLETED
                self.records.save(record, ["status"])
                logger.info(
                    "Termination %s approved; employee %s terminated",
                    record.pk,
                    record.employee_id,
                )
        return record

    def reject(
        self, record_id: int, approver_id: int | None, reason: str = ""
    ) -> EmployeeDisciplinaryRecord:
        with self.tx.atomic():
            record = self.records.get_for_update(record_id)
            self._require_pending(record)
            record.status = Status.CANCELLED
            record.approved_by_id = approver_id
            record.approval_date = timezone.now()
            if reason:
                line = f"Rejected: {reason}"
                record.notes = f"{record.notes}\n{line}" if record.notes else line
            self.records.save(
                record, ["status", "approved_by", "approval_date", "notes"]
            )
        logger.info("Disciplinary record %s rejected", record.pk)
        return record

    def mark_suspension_days(self, record: EmployeeDisciplinaryRecord) -> int:
        """ABSENT rows for each day of the inclusive window; existing days are kept."""

        marked = 0
        day = record.effective_date
        while day <= record.expiration_date:
            if self.attendance.mark_absent(record.employee_id, day, record.pk):
                marked += 1
            day += dt.timedelta(days=1)
        return marked

    def sweep_expired(self, today: dt.date | None = None) -> int:
        today = today or local_today()
        completed = 0
        with self.tx.atomic():
            for record in self.records.expired_suspensions(today):
                record.status = Status.COMPLETED
                self.records.save(record, ["status"])
                completed += 1
        if completed:
            logger.info("Completed %s expired suspension(s)", completed)
        return completed

    @staticmethod
    def _require_pending(record: EmployeeDisciplinaryRecord) -> None:
        if record.status != Status.PENDING:
            msg = f"Disciplinary record {record.pk} already processed ({record.status})"
            raise StateConflictError(msg)
