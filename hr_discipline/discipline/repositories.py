"""Storage interfaces for the discipline engine and their Django ORM backing.

Engine components receive these objects from ``container.build_discipline_services``
and never touch model managers directly, so unit tests can pass in-memory fakes.
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Iterable
from contextlib import AbstractContextManager
from typing import Any
from typing import Protocol

from django.db import OperationalError
from django.db import transaction

from hr_discipline.discipline.models import DisciplinaryActionRule
from hr_discipline.discipline.models import EmployeeDisciplinaryRecord
from hr_discipline.discipline.models import TardinessAccumulation
from hr_discipline.discipline.models import TardinessRule
from hr_discipline.exceptions import NotFoundError
from hr_discipline.exceptions import TransientError


class Transactions(Protocol):
    def atomic(self) -> AbstractContextManager:
        """Open a transaction, or a savepoint when one is already open."""

        raise NotImplementedError


class DjangoTransactions:
    def atomic(self) -> AbstractContextManager:
        return transaction.atomic()


class RuleRepository(Protocol):
    def active_tardiness_rules(self) -> list[TardinessRule]:
        raise NotImplementedError

    def active_disciplinary_rules(
        self, trigger_type: str | None = None
    ) -> list[DisciplinaryActionRule]:
        raise NotImplementedError

    def save_tardiness_rule(self, rule: TardinessRule) -> TardinessRule:
        raise NotImplementedError

    def save_disciplinary_rule(
        self, rule: DisciplinaryActionRule
    ) -> DisciplinaryActionRule:
        raise NotImplementedError

    def upsert_tardiness_rule(
        self, code: str, defaults: dict[str, Any]
    ) -> tuple[TardinessRule, bool]:
        raise NotImplementedError

    def upsert_disciplinary_rule(
        self, code: str, defaults: dict[str, Any]
    ) -> tuple[DisciplinaryActionRule, bool]:
        raise NotImplementedError


class LedgerRepository(Protocol):
    def get(self, employee_id: int, year: int, month: int) -> TardinessAccumulation | None:
        raise NotImplementedError

    def get_or_create_for_update(
        self, employee_id: int, year: int, month: int
    ) -> TardinessAccumulation:
        """Return the month's row, creating it with zero counters, locked.

        Must be called inside ``Transactions.atomic``.
        """

        raise NotImplementedError

    def save(self, row: TardinessAccumulation, fields: Iterable[str]) -> TardinessAccumulation:
        raise NotImplementedError

    def employee_ids_for_month(self, year: int, month: int) -> set[int]:
        raise NotImplementedError


class RecordRepository(Protocol):
    def get(self, record_id: int) -> EmployeeDisciplinaryRecord:
        raise NotImplementedError

    def get_for_update(self, record_id: int) -> EmployeeDisciplinaryRecord:
        raise NotImplementedError

    def create(self, **fields: Any) -> EmployeeDisciplinaryRecord:
        raise NotImplementedError

    def save(
        self, record: EmployeeDisciplinaryRecord, fields: Iterable[str]
    ) -> EmployeeDisciplinaryRecord:
        raise NotImplementedError

    def exists_for_trigger(
        self, employee_id: int, trigger_type: str, trigger_count: int, since: dt.date
    ) -> bool:
        """Any record, whatever its status, for the trigger applied on/after ``since``."""

        raise NotImplementedError

    def count_actions(
        self,
        employee_id: int,
        action_type: str,
        statuses: Iterable[str],
        since: dt.date,
    ) -> int:
        raise NotImplementedError

    def expired_suspensions(self, today: dt.date) -> list[EmployeeDisciplinaryRecord]:
        raise NotImplementedError

    def employee_ids_with_actions(
        self, action_type: str, statuses: Iterable[str], since: dt.date
    ) -> set[int]:
        raise NotImplementedError


class DjangoRuleRepository:
    def active_tardiness_rules(self) -> list[TardinessRule]:
        return list(TardinessRule.objects.filter(is_active=True))

    def active_disciplinary_rules(
        self, trigger_type: str | None = None
    ) -> list[DisciplinaryActionRule]:
        qs = DisciplinaryActionRule.objects.filter(is_active=True)
        if trigger_type:
            qs = qs.filter(trigger_type=trigger_type)
        return list(qs.order_by("trigger_type", "trigger_count"))

    def save_tardiness_rule(self, rule: TardinessRule) -> TardinessRule:
        rule.save()
        return rule

    def save_disciplinary_rule(
        self, rule: DisciplinaryActionRule
    ) -> DisciplinaryActionRule:
        rule.save()
        return rule

    def upsert_tardiness_rule(
        self, code: str, defaults: dict[str, Any]
    ) -> tuple[TardinessRule, bool]:
        return TardinessRule.objects.update_or_create(code=code, defaults=defaults)

    def upsert_disciplinary_rule(
        self, code: str, defaults: dict[str, Any]
    ) -> tuple[DisciplinaryActionRule, bool]:
        return DisciplinaryActionRule.objects.update_or_create(
            code=code, defaults=defaults
        )


class DjangoLedgerRepository:
    def get(self, employee_id: int, year: int, month: int) -> TardinessAccumulation | None:
        return TardinessAccumulation.objects.filter(
            employee_id=employee_id, year=year, month=month
        ).first()

    def get_or_create_for_update(
        self, employee_id: int, year: int, month: int
    ) -> TardinessAccumulation:
        try:
            row, _ = TardinessAccumulation.objects.select_for_update().get_or_create(
                employee_id=employee_id, year=year, month=month
            )
        except OperationalError as exc:
            msg = f"Ledger row for employee {employee_id} {year}-{month:02d} is busy"
            raise TransientError(msg) from exc
        return row

    def save(self, row: TardinessAccumulation, fields: Iterable[str]) -> TardinessAccumulation:
        try:
            row.save(update_fields=[*fields, "updated_at"])
        except OperationalError as exc:
            msg = f"Could not save ledger row for employee {row.employee_id}"
            raise TransientError(msg) from exc
        return row

    def employee_ids_for_month(self, year: int, month: int) -> set[int]:
        return set(
            TardinessAccumulation.objects.filter(year=year, month=month).values_list(
                "employee_id", flat=True
            )
        )


class DjangoRecordRepository:
    def get(self, record_id: int) -> EmployeeDisciplinaryRecord:
        try:
            return EmployeeDisciplinaryRecord.objects.get(pk=record_id)
        except EmployeeDisciplinaryRecord.DoesNotExist as exc:
            msg = f"Disciplinary record {record_id} not found"
            raise NotFoundError(msg) from exc

    def get_for_update(self, record_id: int) -> EmployeeDisciplinaryRecord:
        try:
            return EmployeeDisciplinaryRecord.objects.select_for_update().get(
                pk=record_id
            )
        except EmployeeDisciplinaryRecord.DoesNotExist as exc:
            msg = f"Disciplinary record {record_id} not found"
            raise NotFoundError(msg) from exc

    def create(self, **fields: Any) -> EmployeeDisciplinaryRecord:
        try:
            return EmployeeDisciplinaryRecord.objects.create(**fields)
        except OperationalError as exc:
            msg = "Could not create disciplinary record"
            raise TransientError(msg) from exc

    def save(
        self, record: EmployeeDisciplinaryRecord, fields: Iterable[str]
    ) -> EmployeeDisciplinaryRecord:
        record.save(update_fields=[*fields, "updated_at"])
        return record

    def exists_for_trigger(
        self, employee_id: int, trigger_type: str, trigger_count: int, since: dt.date
    ) -> bool:
        return EmployeeDisciplinaryRecord.objects.filter(
            employee_id=employee_id,
            trigger_type=trigger_type,
            trigger_count=trigger_count,
            applied_date__gte=since,
        ).exists()

    def count_actions(
        self,
        employee_id: int,
        action_type: str,
        statuses: Iterable[str],
        since: dt.date,
    ) -> int:
        return EmployeeDisciplinaryRecord.objects.filter(
            employee_id=employee_id,
            action_type=action_type,
            status__in=list(statuses),
            applied_date__gte=since,
        ).count()

    def expired_suspensions(self, today: dt.date) -> list[EmployeeDisciplinaryRecord]:
        return list(
            EmployeeDisciplinaryRecord.objects.select_for_update().filter(
                status=EmployeeDisciplinaryRecord.Status.ACTIVE,
                action_type=EmployeeDisciplinaryRecord.ActionType.SUSPENSION,
                expiration_date__lt=today,
            )
        )

    def employee_ids_with_actions(
        self, action_type: str, statuses: Iterable[str], since: dt.date
    ) -> set[int]:
        return set(
            EmployeeDisciplinaryRecord.objects.filter(
                action_type=action_type,
                status__in=list(statuses),
                applied_date__gte=since,
            ).values_list("employee_id", flat=True)
        )
