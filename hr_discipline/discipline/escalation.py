from __future__ import annotations

import datetime as dt
import logging
from collections.abc import Iterable

from django.utils import timezone

from hr_discipline.attendance.repositories import AttendanceRepository
from hr_discipline.attendance.services import local_today
from hr_discipline.discipline.catalog import RuleCatalog
from hr_discipline.discipline.ledger import AccumulationLedger
from hr_discipline.discipline.models import DisciplinaryActionRule
from hr_discipline.discipline.models import EmployeeDisciplinaryRecord
from hr_discipline.discipline.repositories import RecordRepository
from hr_discipline.discipline.repositories import Transactions
from hr_discipline.discipline.workflow import DisciplinaryWorkflow
from hr_discipline.employees.repositories import EmployeeRepository
from hr_discipline.notifications.events import EscalationEvent
from hr_discipline.notifications.events import EventPublisher

logger = logging.getLogger(__name__)

TriggerType = DisciplinaryActionRule.TriggerType
ActionType = DisciplinaryActionRule.ActionType
Status = EmployeeDisciplinaryRecord.Status

# PENDING acts are not counted until approved.
COUNTED_ACT_STATUSES = (Status.ACTIVE, Status.COMPLETED)
ALL_TRIGGERS = (
    TriggerType.FORMAL_TARDIES,
    TriggerType.ADMINISTRATIVE_ACTS,
    TriggerType.UNJUSTIFIED_ABSENCES,
)
CHECK_IN_TRIGGERS = (TriggerType.FORMAL_TARDIES, TriggerType.ADMINISTRATIVE_ACTS)


class EscalationEvaluator:
    """Create disciplinary records once a rule's threshold is reached.

    Evaluation only reads ledger and history state, so it can be re-run at any
    time; a record already filed for the same trigger inside the rule's window
    blocks a duplicate.
    """

    def __init__(
        self,
        *,
        catalog: RuleCatalog,
        ledger: AccumulationLedger,
        records: RecordRepository,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        workflow: DisciplinaryWorkflow,
        publisher: EventPublisher,
        tx: Transactions,
    ):
        self.catalog = catalog
        self.ledger = ledger
        self.records = records
        self.attendance = attendance
        self.employees = employees
        self.workflow = workflow
        self.publisher = publisher
        self.tx = tx

    def evaluate(
        self,
        employee_id: int,
        *,
        now: dt.datetime | None = None,
        today: dt.date | None = None,
        triggers: Iterable[str] = ALL_TRIGGERS,
    ) -> list[EmployeeDisciplinaryRecord]:
        now = now or timezone.now()
        today = today or local_today(now)
        created: list[EmployeeDisciplinaryRecord] = []
        with self.tx.atomic():
            # Window checks and record creation are serialized per employee.
            self.employees.lock(employee_id)
            for trigger in triggers:
                if self.employees.get(employee_id).is_terminated:
                    break
                created.extend(self._evaluate_trigger(employee_id, trigger, today, now))
        return created

    def sweep_candidates(self, today: dt.date) -> set[int]:
        """Employees whose state could reach any active rule as of ``today``."""

        candidates = self.ledger.repo.employee_ids_for_month(today.year, today.month)
        for rule in self.catalog.active_disciplinary_rules():
            since = today - dt.timedelta(days=rule.period_days)
            if rule.trigger_type == TriggerType.ADMINISTRATIVE_ACTS:
                candidates |= self.records.employee_ids_with_actions(
                    ActionType.ADMINISTRATIVE_ACT, COUNTED_ACT_STATUSES, since
                )
            elif rule.trigger_type == TriggerType.UNJUSTIFIED_ABSENCES:
                candidates |= self.attendance.employee_ids_with_absences(since)
        return candidates

    def _evaluate_trigger(self, employee_id, trigger, today, now):
        rules = sorted(
            self.catalog.active_disciplinary_rules(trigger),
            key=lambda r: r.trigger_count,
        )
        if trigger == TriggerType.FORMAL_TARDIES:
            # Every reached monthly threshold gets its own record.
            count = self.ledger.formal_tardies(employee_id, today.year, today.month)
            month_start = today.replace(day=1)
            reached = [
                (rule, max(month_start, today - dt.timedelta(days=rule.period_days)))
                for rule in rules
                if count >= rule.trigger_count
            ]
        else:
            reached = []
            for rule in reversed(rules):
                since = today - dt.timedelta(days=rule.period_days)
                if self._rolling_count(employee_id, trigger, since, today) >= rule.trigger_count:
                    # Only the highest threshold reached in the window applies.
                    reached = [(rule, since)]
                    break

        created = []
        for rule, since in reached:
            if self.records.exists_for_trigger(
                employee_id, rule.trigger_type, rule.trigger_count, since
            ):
                continue
            record = self._file(employee_id, rule, today, now)
            created.append(record)
            if (
                record.action_type == ActionType.TERMINATION
                and record.status != Status.PENDING
            ):
                break
        return created

    def _rolling_count(self, employee_id, trigger, since, today) -> int:
        if trigger == TriggerType.ADMINISTRATIVE_ACTS:
            return self.records.count_actions(
                employee_id, ActionType.ADMINISTRATIVE_ACT, COUNTED_ACT_STATUSES, since
            )
        return self.attendance.count_unjustified_absences(employee_id, since, today)

    def _file(self, employee_id, rule, today, now):
        record = self.workflow.create_record(
            employee_id=employee_id,
            action_type=rule.action_type,
            rule=rule,
            trigger_count=rule.trigger_count,
            applied_date=today,
        )
        if rule.action_type == ActionType.ADMINISTRATIVE_ACT:
            self.ledger.record_administrative_act(employee_id, today.year, today.month)
        if rule.auto_apply and not rule.requires_approval:
            record = self.workflow.approve(record.pk, approver_id=None, now=now)
        logger.info(
            "Escalation: employee=%s rule=%s action=%s status=%s",
            employee_id,
            rule.code,
            rule.action_type,
            record.status,
        )
        self.publisher.publish(
            EscalationEvent(
                employee_id=employee_id,
                rule_name=rule.name,
                action_type=rule.action_type,
                trigger_count=rule.trigger_count,
                record_id=record.pk,
            )
        )
        return record
