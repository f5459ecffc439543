"""Composition root for the discipline engine.

Nothing here is cached at module level: callers build the object graph when
they need it and may swap any repository for a test double.
"""

from __future__ import annotations

import datetime as dt
import logging
from collections.abc import Callable
from dataclasses import dataclass

from django.db import transaction
from django.utils import timezone

from hr_discipline.attendance.auto_checkout import AutoCheckoutScheduler
from hr_discipline.attendance.repositories import AttendanceRepository
from hr_discipline.attendance.repositories import DjangoAttendanceRepository
from hr_discipline.attendance.services import local_today
from hr_discipline.discipline.catalog import RuleCatalog
from hr_discipline.discipline.classifier import TardinessClassifier
from hr_discipline.discipline.escalation import EscalationEvaluator
from hr_discipline.discipline.ledger import AccumulationLedger
from hr_discipline.discipline.models import EmployeeDisciplinaryRecord
from hr_discipline.discipline.orchestrator import CheckInOrchestrator
from hr_discipline.discipline.repositories import DjangoLedgerRepository
from hr_discipline.discipline.repositories import DjangoRecordRepository
from hr_discipline.discipline.repositories import DjangoRuleRepository
from hr_discipline.discipline.repositories import DjangoTransactions
from hr_discipline.discipline.repositories import LedgerRepository
from hr_discipline.discipline.repositories import RecordRepository
from hr_discipline.discipline.repositories import RuleRepository
from hr_discipline.discipline.repositories import Transactions
from hr_discipline.discipline.workflow import DisciplinaryWorkflow
from hr_discipline.employees.repositories import DjangoEmployeeRepository
from hr_discipline.employees.repositories import EmployeeRepository
from hr_discipline.notifications.events import DjangoEventPublisher
from hr_discipline.notifications.events import EventPublisher
from hr_discipline.shifts.repositories import DjangoShiftRepository
from hr_discipline.shifts.repositories import ShiftRepository

logger = logging.getLogger(__name__)


def enqueue_tardiness_retry(attendance_id: int) -> None:
    from hr_discipline.discipline.tasks import process_tardiness  # noqa: PLC0415

    transaction.on_commit(lambda: process_tardiness.delay(attendance_id))


@dataclass(frozen=True)
class DisciplineServices:
    catalog: RuleCatalog
    classifier: TardinessClassifier
    ledger: AccumulationLedger
    workflow: DisciplinaryWorkflow
    evaluator: EscalationEvaluator
    orchestrator: CheckInOrchestrator
    auto_checkout: AutoCheckoutScheduler

    def decide(
        self,
        record_id: int,
        *,
        approve: bool,
        approver_id: int | None,
        reason: str = "",
    ) -> EmployeeDisciplinaryRecord:
        """Apply an approval decision; an approved act can escalate further."""

        if not approve:
            return self.workflow.reject(record_id, approver_id, reason)
        record = self.workflow.approve(record_id, approver_id)
        if record.action_type == EmployeeDisciplinaryRecord.ActionType.ADMINISTRATIVE_ACT:
            try:
                self.evaluator.evaluate(record.employee_id)
            except Exception:  # noqa: BLE001 - the sweep re-runs escalation
                logger.exception(
                    "Escalation after approving record %s failed", record.pk
                )
        return record

    def sweep(self, now: dt.datetime | None = None) -> dict:
        """Reconcile disciplinary state; escalation failures stay per employee."""

        now = now or timezone.now()
        today = local_today(now)
        completed = self.workflow.sweep_expired(today)
        created = failed = 0
        candidates = sorted(self.evaluator.sweep_candidates(today))
        for employee_id in candidates:
            try:
                created += len(self.evaluator.evaluate(employee_id, now=now))
            except Exception:  # noqa: BLE001 - one employee must not stop the sweep
                failed += 1
                logger.exception("Escalation sweep failed for employee %s", employee_id)
        logger.info(
            "Discipline sweep: completed=%s evaluated=%s created=%s failed=%s",
            completed,
            len(candidates),
            created,
            failed,
        )
        return {
            "completed_suspensions": completed,
            "evaluated_employees": len(candidates),
            "records_created": created,
            "failed_employees": failed,
        }


def build_discipline_services(
    *,
    rules: RuleRepository | None = None,
    ledger_repo: LedgerRepository | None = None,
    records: RecordRepository | None = None,
    attendance: AttendanceRepository | None = None,
    employees: EmployeeRepository | None = None,
    shifts: ShiftRepository | None = None,
    publisher: EventPublisher | None = None,
    tx: Transactions | None = None,
    enqueue_retry: Callable[[int], None] | None = enqueue_tardiness_retry,
    sleep: Callable[[float], None] | None = None,
) -> DisciplineServices:
    rules = rules or DjangoRuleRepository()
    ledger_repo = ledger_repo or DjangoLedgerRepository()
    records = records or DjangoRecordRepository()
    attendance = attendance or DjangoAttendanceRepository()
    employees = employees or DjangoEmployeeRepository()
    shifts = shifts or DjangoShiftRepository()
    publisher = publisher or DjangoEventPublisher()
    tx = tx or DjangoTransactions()

    catalog = RuleCatalog(rules)
    classifier = TardinessClassifier(catalog)
    ledger = AccumulationLedger(ledger_repo, tx)
    workflow = DisciplinaryWorkflow(records, attendance, employees, tx)
    evaluator = EscalationEvaluator(
        catalog=catalog,
        ledger=ledger,
        records=records,
        attendance=attendance,
        employees=employees,
        workflow=workflow,
        publisher=publisher,
        tx=tx,
    )
    orchestrator_kwargs = {"sleep": sleep} if sleep is not None else {}
    orchestrator = CheckInOrchestrator(
        attendance=attendance,
        shifts=shifts,
        employees=employees,
        classifier=classifier,
        ledger=ledger,
        evaluator=evaluator,
        tx=tx,
        enqueue_retry=enqueue_retry,
        **orchestrator_kwargs,
    )
    return DisciplineServices(
        catalog=catalog,
        classifier=classifier,
        ledger=ledger,
        workflow=workflow,
        evaluator=evaluator,
        orchestrator=orchestrator,
        auto_checkout=AutoCheckoutScheduler(attendance, shifts, tx),
    )
