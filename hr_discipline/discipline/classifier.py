from __future__ import annotations

import logging
from dataclasses import dataclass

from hr_discipline.discipline.catalog import RuleCatalog
from hr_discipline.discipline.models import TardinessRule
from hr_discipline.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Classification:
    rule: TardinessRule
    is_immediate_conversion: bool


def _first_match(rules, minutes_late: int) -> TardinessRule | None:
    matching = [r for r in rules if r.matches(minutes_late)]
    if not matching:
        return None
    return min(matching, key=lambda r: (r.start_minutes_late, r.pk or 0))


class TardinessClassifier:
    """Pick the single tardiness rule for one late check-in.

    Priority: a matching DIRECT_TARDINESS range, then the post-first-formal-tardy
    tier once the month already has a formal tardy, then the accumulative
    LATE_ARRIVAL tier.
    """

    def __init__(self, catalog: RuleCatalog):
        self.catalog = catalog

    def classify(self, minutes_late: int, formal_tardies_count: int) -> Classification:
        if minutes_late <= 0:
            msg = "Only late check-ins (minutes_late >= 1) can be classified"
            raise ValueError(msg)

        rules = self.catalog.active_tardiness_rules()
        direct = _first_match(
            (r for r in rules if r.type == TardinessRule.Type.DIRECT_TARDINESS),
            minutes_late,
        )
        if direct is not None:
            return Classification(rule=direct, is_immediate_conversion=True)

        late_rules = [r for r in rules if r.type == TardinessRule.Type.LATE_ARRIVAL]
        if formal_tardies_count > 0:
            post_first = _first_match(
                (r for r in late_rules if r.applies_after_formal_tardy), minutes_late
            )
            if post_first is not None:
                return Classification(rule=post_first, is_immediate_conversion=True)

        standard = _first_match(
            (r for r in late_rules if not r.applies_after_formal_tardy), minutes_late
        )
        if standard is not None:
            return Classification(rule=standard, is_immediate_conversion=False)

        msg = f"No active tardiness rule covers {minutes_late} minutes late"
        raise ConfigurationError(msg)
