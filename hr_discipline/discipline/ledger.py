from __future__ import annotations

import logging
from dataclasses import dataclass

from hr_discipline.discipline.models import TardinessAccumulation
from hr_discipline.discipline.models import TardinessRule
from hr_discipline.discipline.repositories import LedgerRepository
from hr_discipline.discipline.repositories import Transactions

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerOutcome:
    row: TardinessAccumulation
    formal_tardies_added: int


class AccumulationLedger:
    """Monthly tardiness counters and formal-tardy conversion.

    Conversion is a running modulo over ``late_arrivals_count``: every Nth
    standard late arrival converts, the counter itself is never reset.
    """

    def __init__(self, repo: LedgerRepository, tx: Transactions):
        self.repo = repo
        self.tx = tx

    def current(self, employee_id: int, year: int, month: int) -> TardinessAccumulation | None:
        return self.repo.get(employee_id, year, month)

    def formal_tardies(self, employee_id: int, year: int, month: int) -> int:
        row = self.repo.get(employee_id, year, month)
        return row.formal_tardies_count if row else 0

    def apply(
        self,
        employee_id: int,
        year: int,
        month: int,
        rule: TardinessRule,
        is_immediate_conversion: bool,
    ) -> LedgerOutcome:
        with self.tx.atomic():
            row = self.repo.get_or_create_for_update(employee_id, year, month)
            added = 0
            if rule.type == TardinessRule.Type.DIRECT_TARDINESS:
                row.direct_tardiness_count += 1
                added = rule.equivalent_formal_tardies
            elif is_immediate_conversion:
                row.late_arrivals_count += 1
                added = rule.equivalent_formal_tardies
            else:
                row.late_arrivals_count += 1
                if row.late_arrivals_count % rule.accumulation_count == 0:
                    added = rule.equivalent_formal_tardies
            row.formal_tardies_count += added
            self.repo.save(
                row,
                [
                    "late_arrivals_count",
                    "direct_tardiness_count",
                    "formal_tardies_count",
                ],
            )
        logger.info(
            "Ledger %s-%02d employee=%s rule=%s late=%s direct=%s formal=%s (+%s)",
            year,
            month,
            employee_id,
            rule.code,
            row.late_arrivals_count,
            row.direct_tardiness_count,
            row.formal_tardies_count,
            added,
        )
        return LedgerOutcome(row=row, formal_tardies_added=added)

    def record_administrative_act(
        self, employee_id: int, year: int, month: int
    ) -> TardinessAccumulation:
        with self.tx.atomic():
            row = self.repo.get_or_create_for_update(employee_id, year, month)
            row.administrative_acts += 1
            self.repo.save(row, ["administrative_acts"])
        return row
