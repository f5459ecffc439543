from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass
from dataclasses import field

from django.utils import timezone

from hr_discipline.attendance.models import Attendance
from hr_discipline.attendance.repositories import AttendanceRepository
from hr_discipline.attendance.services import compute_worked_hours
from hr_discipline.attendance.services import local_today
from hr_discipline.attendance.services import scheduled_at
from hr_discipline.discipline.repositories import Transactions
from hr_discipline.exceptions import NotFoundError
from hr_discipline.exceptions import SchedulerRunError
from hr_discipline.shifts.repositories import ShiftRepository

logger = logging.getLogger(__name__)


@dataclass
class AutoCheckoutReport:
    processed: int = 0
    skipped: int = 0
    errors: int = 0
    details: list[dict] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.errors == 0

    def as_dict(self) -> dict:
        return {
            "success": self.success,
            "processed": self.processed,
            "skipped": self.skipped,
            "errors": self.errors,
            "details": self.details,
        }


class AutoCheckoutScheduler:
    """Close open sessions whose shift has ended.

    "Today" is the calendar date in each shift's own zone, so one sweep looks
    at sessions dated one day either side of the attendance zone's date. A
    failing record is reported and never stops the others.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        shifts: ShiftRepository,
        tx: Transactions,
    ):
        self.attendance = attendance
        self.shifts = shifts
        self.tx = tx

    def run(self, now: dt.datetime | None = None) -> AutoCheckoutReport:
        now = now or timezone.now()
        today = local_today(now)
        report = AutoCheckoutReport()
        sessions = self.attendance.open_sessions_between(
            today - dt.timedelta(days=1), today + dt.timedelta(days=1)
        )
        for session in sessions:
            try:
                with self.tx.atomic():
                    closed = self._close_if_due(session, now)
            except Exception as exc:  # noqa: BLE001 - isolate per-record failures
                error = SchedulerRunError(
                    str(exc), attendance_id=session.pk, employee_id=session.employee_id
                )
                logger.exception(
                    "Auto-checkout failed for attendance %s", error.attendance_id
                )
                report.errors += 1
                report.details.append(
                    {
                        "attendance_id": error.attendance_id,
                        "employee_id": error.employee_id,
                        "status": "error",
                        "error": str(error),
                    }
                )
                continue
            if closed is None:
                report.skipped += 1
                continue
            report.processed += 1
            report.details.append(
                {
                    "attendance_id": closed.pk,
                    "employee_id": closed.employee_id,
                    "status": "closed",
                    "worked_hours": str(closed.worked_hours),
                    "overtime_hours": str(closed.overtime_hours),
                }
            )
        logger.info(
            "Auto-checkout sweep %s: processed=%s skipped=%s errors=%s",
            today,
            report.processed,
            report.skipped,
            report.errors,
        )
        return report

    def run_for_employee(
        self, employee_id: int, now: dt.datetime | None = None
    ) -> Attendance:
        """Close one employee's open session now, whatever the shift says."""

        now = now or timezone.now()
        today = now.astimezone(self.shifts.home_zone(employee_id)).date()
        session = self.attendance.for_employee_on(employee_id, today)
        if session is None:
            session = self.attendance.for_employee_on(
                employee_id, today - dt.timedelta(days=1)
            )
        if session is None or not session.is_open:
            msg = f"Employee {employee_id} has no open session on {today}"
            raise NotFoundError(msg)
        shift = self.shifts.effective_shift(employee_id, session.date)
        schedule = shift.schedule.for_date(session.date) if shift else None
        return self._close(session, now, schedule)

    def _close_if_due(self, session: Attendance, now: dt.datetime) -> Attendance | None:
        shift = self.shifts.effective_shift(session.employee_id, session.date)
        if shift is None or not shift.auto_checkout_enabled:
            return None
        local_date = now.astimezone(shift.tz).date()
        # Today's sessions, plus yesterday's when the shift ran past midnight.
        if session.date not in (local_date, local_date - dt.timedelta(days=1)):
            return None
        schedule = shift.schedule.for_date(session.date)
        last_end = schedule.last_end
        if last_end is None:
            return None
        if now <= scheduled_at(session.date, last_end, shift.tz):
            return None
        return self._close(session, now, schedule)

    def _close(self, session: Attendance, now: dt.datetime, schedule) -> Attendance:
        hours = compute_worked_hours(session.check_in_time, now, schedule)
        session.check_out_time = now
        session.check_out_method = Attendance.Method.AUTO
        session.is_auto_checkout = True
        session.worked_hours = hours.worked
        session.overtime_hours = hours.overtime
        self.attendance.save(
            session,
            [
                "check_out_time",
                "check_out_method",
                "is_auto_checkout",
                "worked_hours",
                "overtime_hours",
            ],
        )
        logger.info(
            "Auto-checkout closed attendance %s (employee %s) worked=%s overtime=%s",
            session.pk,
            session.employee_id,
            hours.worked,
            hours.overtime,
        )
        return session
