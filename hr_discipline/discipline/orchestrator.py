from __future__ import annotations

import datetime as dt
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from django.db import OperationalError
from django.utils import timezone

from hr_discipline import policies
from hr_discipline.attendance.models import Attendance
from hr_discipline.attendance.repositories import AttendanceRepository
from hr_discipline.attendance.services import calculate_minutes_late
from hr_discipline.attendance.services import compute_worked_hours
from hr_discipline.discipline.classifier import TardinessClassifier
from hr_discipline.discipline.escalation import CHECK_IN_TRIGGERS
from hr_discipline.discipline.escalation import EscalationEvaluator
from hr_discipline.discipline.ledger import AccumulationLedger
from hr_discipline.discipline.ledger import LedgerOutcome
from hr_discipline.discipline.repositories import Transactions
from hr_discipline.employees.repositories import EmployeeRepository
from hr_discipline.exceptions import EmployeeTerminatedError
from hr_discipline.exceptions import NotFoundError
from hr_discipline.exceptions import StateConflictError
from hr_discipline.exceptions import TransientError
from hr_discipline.shifts.repositories import ShiftRepository
from hr_discipline.shifts.repositories import local_workday

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckInResult:
    attendance: Attendance
    minutes_late: int
    outcome: LedgerOutcome | None = None
    # True when processing was handed to the background queue
    deferred: bool = False


class CheckInOrchestrator:
    """Record a check-in and apply its tardiness consequences.

    The attendance write always comes first and is never undone by a failure
    further down: classification, ledger and escalation are best-effort and
    are retried (in-process, then through Celery) on contention.
    """

    def __init__(
        self,
        *,
        attendance: AttendanceRepository,
        shifts: ShiftRepository,
        employees: EmployeeRepository,
        classifier: TardinessClassifier,
        ledger: AccumulationLedger,
        evaluator: EscalationEvaluator,
        tx: Transactions,
        enqueue_retry: Callable[[int], None] | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.attendance = attendance
        self.shifts = shifts
        self.employees = employees
        self.classifier = classifier
        self.ledger = ledger
        self.evaluator = evaluator
        self.tx = tx
        self.enqueue_retry = enqueue_retry
        self.sleep = sleep

    def check_in(
        self,
        employee_id: int,
        *,
        at: dt.datetime | None = None,
        method: str = Attendance.Method.MANUAL,
    ) -> CheckInResult:
        at = at or timezone.now()
        employee = self.employees.get(employee_id)
        if employee.is_terminated:
            msg = f"Employee {employee_id} is terminated"
            raise EmployeeTerminatedError(msg)

        day, shift = local_workday(self.shifts, employee_id, at)
        minutes_late = 0
        if shift is not None:
            minutes_late = calculate_minutes_late(
                at, shift.schedule.for_date(day), shift.tz, shift.grace_minutes
            )
        attendance = self.attendance.create_check_in(
            employee_id=employee_id,
            day=day,
            check_in_time=at,
            method=method,
            status=Attendance.Status.LATE if minutes_late > 0 else Attendance.Status.PRESENT,
            minutes_late=minutes_late,
        )
        logger.info(
            "Check-in employee=%s date=%s minutes_late=%s", employee_id, day, minutes_late
        )
        if minutes_late <= 0:
            return CheckInResult(attendance=attendance, minutes_late=0)

        outcome, deferred = self._process_with_retry(attendance.pk)
        return CheckInResult(
            attendance=attendance,
            minutes_late=minutes_late,
            outcome=outcome,
            deferred=deferred,
        )

    def _process_with_retry(self, attendance_id: int) -> tuple[LedgerOutcome | None, bool]:
        attempts = policies.tardiness_max_retries()
        backoff = policies.tardiness_retry_backoff_seconds()
        for attempt in range(1, attempts + 1):
            try:
                return self.process_tardiness(attendance_id), False
            except TransientError:
                logger.warning(
                    "Tardiness processing for attendance %s busy (attempt %s/%s)",
                    attendance_id,
                    attempt,
                    attempts,
                )
                if attempt < attempts:
                    self.sleep(backoff * attempt)
            except Exception:  # noqa: BLE001 - the check-in itself must stand
                logger.exception(
                    "Tardiness processing failed for attendance %s", attendance_id
                )
                return None, False
        if self.enqueue_retry is None:
            logger.error(
                "Tardiness processing for attendance %s dropped after %s attempts",
                attendance_id,
                attempts,
            )
            return None, False
        self.enqueue_retry(attendance_id)
        return None, True

    def process_tardiness(self, attendance_id: int) -> LedgerOutcome | None:
        """Classify and count one late attendance row; safe to replay."""

        try:
            return self._process(attendance_id)
        except OperationalError as exc:
            msg = f"Storage busy while processing attendance {attendance_id}"
            raise TransientError(msg) from exc

    def _process(self, attendance_id: int) -> LedgerOutcome | None:
        with self.tx.atomic():
            probe = self.attendance.get(attendance_id)
            # Serializes tardiness work per employee.
            self.employees.lock(probe.employee_id)
            attendance = self.attendance.get(attendance_id)
            if attendance.tardiness_processed or attendance.minutes_late <= 0:
                return None

            year, month = attendance.date.year, attendance.date.month
            formal = self.ledger.formal_tardies(attendance.employee_id, year, month)
            classification = self.classifier.classify(attendance.minutes_late, formal)
            outcome = self.ledger.apply(
                attendance.employee_id,
                year,
                month,
                classification.rule,
                classification.is_immediate_conversion,
            )
            attendance.tardiness_processed = True
            self.attendance.save(attendance, ["tardiness_processed"])

            if outcome.formal_tardies_added > 0:
                self._escalate(
                    attendance.employee_id, attendance.check_in_time, attendance.date
                )
        return outcome

    def _escalate(self, employee_id: int, at: dt.datetime | None, day: dt.date) -> None:
        try:
            self.evaluator.evaluate(
                employee_id, now=at, today=day, triggers=CHECK_IN_TRIGGERS
            )
        except Exception:  # noqa: BLE001 - escalation is best-effort; the sweep re-runs it
            logger.exception("Escalation failed for employee %s", employee_id)

    def check_out(
        self,
        employee_id: int,
        *,
        at: dt.datetime | None = None,
        method: str = Attendance.Method.MANUAL,
    ) -> Attendance:
        at = at or timezone.now()
        day, shift = local_workday(self.shifts, employee_id, at)
        attendance = self.attendance.for_employee_on(employee_id, day)
        if attendance is None:
            # A session opened before local midnight is still closed here.
            previous = self.attendance.for_employee_on(
                employee_id, day - dt.timedelta(days=1)
            )
            if previous is not None and previous.is_open:
                attendance = previous
                shift = self.shifts.effective_shift(employee_id, previous.date)
        if attendance is None or attendance.check_in_time is None:
            msg = f"Employee {employee_id} has no check-in on {day}"
            raise NotFoundError(msg)
        if attendance.check_out_time is not None:
            msg = f"Employee {employee_id} already checked out on {day}"
            raise StateConflictError(msg)
        hours = compute_worked_hours(
            attendance.check_in_time,
            at,
            shift.schedule.for_date(attendance.date) if shift else None,
        )
        attendance.check_out_time = at
        attendance.check_out_method = method
        attendance.worked_hours = hours.worked
        attendance.overtime_hours = hours.overtime
        self.attendance.save(
            attendance,
            ["check_out_time", "check_out_method", "worked_hours", "overtime_hours"],
        )
        logger.info(
            "Check-out employee=%s date=%s worked=%s", employee_id, day, hours.worked
        )
        return attendance
