from __future__ import annotations

import logging
from dataclasses import dataclass

from hr_discipline.discipline.models import DisciplinaryActionRule
from hr_discipline.discipline.models import TardinessRule
from hr_discipline.discipline.repositories import RuleRepository
from hr_discipline.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

ActionType = DisciplinaryActionRule.ActionType
TriggerType = DisciplinaryActionRule.TriggerType

DEFAULT_TARDINESS_RULES = {
    "late-arrival": {
        "name": "Late arrival (1-15 minutes)",
        "description": "Four late arrivals in a month convert into one formal tardy.",
        "type": TardinessRule.Type.LATE_ARRIVAL,
        "start_minutes_late": 1,
        "end_minutes_late": 15,
        "accumulation_count": 4,
        "equivalent_formal_tardies": 1,
        "applies_after_formal_tardy": False,
    },
    "late-arrival-after-formal-tardy": {
        "name": "Late arrival after a formal tardy",
        "description": (
            "Once a formal tardy exists this month, any 1-15 minute lateness "
            "is a formal tardy on its own."
        ),
        "type": TardinessRule.Type.LATE_ARRIVAL,
        "start_minutes_late": 1,
        "end_minutes_late": 15,
        "accumulation_count": 1,
        "equivalent_formal_tardies": 1,
        "applies_after_formal_tardy": True,
    },
    "direct-tardiness": {
        "name": "Direct tardiness (16+ minutes)",
        "description": "Sixteen or more minutes late is an immediate formal tardy.",
        "type": TardinessRule.Type.DIRECT_TARDINESS,
        "start_minutes_late": 16,
        "end_minutes_late": None,
        "accumulation_count": 1,
        "equivalent_formal_tardies": 1,
        "applies_after_formal_tardy": False,
    },
}

DEFAULT_DISCIPLINARY_RULES = {
    "formal-tardies-5": {
        "name": "Administrative act for 5 formal tardies",
        "trigger_type": TriggerType.FORMAL_TARDIES,
        "trigger_count": 5,
        "period_days": 30,
        "action_type": ActionType.ADMINISTRATIVE_ACT,
        "suspension_days": 1,
        "affects_salary": True,
        "requires_approval": True,
        "auto_apply": False,
    },
    "administrative-acts-3": {
        "name": "Termination for 3 administrative acts",
        "trigger_type": TriggerType.ADMINISTRATIVE_ACTS,
        "trigger_count": 3,
        "period_days": 90,
        "action_type": ActionType.TERMINATION,
        "suspension_days": None,
        "affects_salary": True,
        "requires_approval": True,
        "auto_apply": False,
    },
    "absences-1": {
        "name": "One-day suspension for 1 unjustified absence",
        "trigger_type": TriggerType.UNJUSTIFIED_ABSENCES,
        "trigger_count": 1,
        "period_days": 30,
        "action_type": ActionType.SUSPENSION,
        "suspension_days": 1,
        "affects_salary": True,
        "requires_approval": True,
        "auto_apply": False,
    },
    "absences-2": {
        "name": "Two-day suspension for 2 unjustified absences",
        "trigger_type": TriggerType.UNJUSTIFIED_ABSENCES,
        "trigger_count": 2,
        "period_days": 30,
        "action_type": ActionType.SUSPENSION,
        "suspension_days": 2,
        "affects_salary": True,
        "requires_approval": True,
        "auto_apply": False,
    },
    "absences-3": {
        "name": "Three-day suspension for 3 unjustified absences",
        "trigger_type": TriggerType.UNJUSTIFIED_ABSENCES,
        "trigger_count": 3,
        "period_days": 30,
        "action_type": ActionType.SUSPENSION,
        "suspension_days": 3,
        "affects_salary": True,
        "requires_approval": True,
        "auto_apply": False,
    },
    "absences-4": {
        "name": "Termination for 4 unjustified absences",
        "trigger_type": TriggerType.UNJUSTIFIED_ABSENCES,
        "trigger_count": 4,
        "period_days": 30,
        "action_type": ActionType.TERMINATION,
        "suspension_days": None,
        "affects_salary": True,
        "requires_approval": True,
        "auto_apply": False,
    },
}


@dataclass(frozen=True)
class SeedResult:
    created: int
    updated: int


class RuleCatalog:
    """Read access to active rules plus write-time integrity checks."""

    def __init__(self, rules: RuleRepository):
        self.rules = rules

    def active_tardiness_rules(self) -> list[TardinessRule]:
        return self.rules.active_tardiness_rules()

    def active_disciplinary_rules(
        self, trigger_type: str | None = None
    ) -> list[DisciplinaryActionRule]:
        return self.rules.active_disciplinary_rules(trigger_type)

    def validate_tardiness_rule(self, candidate: TardinessRule) -> None:
        start = candidate.start_minutes_late
        end = candidate.end_minutes_late
        if start is None or start < 1:
            msg = "start_minutes_late must be at least 1"
            raise ConfigurationError(msg)
        if end is not None and end <= start:
            msg = "end_minutes_late must be greater than start_minutes_late"
            raise ConfigurationError(msg)
        if not candidate.accumulation_count or candidate.accumulation_count < 1:
            msg = "accumulation_count must be at least 1"
            raise ConfigurationError(msg)
        if (
            not candidate.equivalent_formal_tardies
            or candidate.equivalent_formal_tardies < 1
        ):
            msg = "equivalent_formal_tardies must be at least 1"
            raise ConfigurationError(msg)
        if not candidate.is_active:
            return
        for other in self.rules.active_tardiness_rules():
            if candidate.pk is not None and other.pk == candidate.pk:
                continue
            same_tier = (
                other.type == candidate.type
                and other.applies_after_formal_tardy
                == candidate.applies_after_formal_tardy
            )
            if same_tier and candidate.overlaps(other):
                msg = (
                    f"Minute range overlaps active rule {other.code!r} "
                    f"({other.start_minutes_late}-{other.end_minutes_late or '...'})"
                )
                raise ConfigurationError(msg)

    def validate_disciplinary_rule(self, candidate: DisciplinaryActionRule) -> None:
        if not candidate.trigger_count or candidate.trigger_count < 1:
            msg = "trigger_count must be at least 1"
            raise ConfigurationError(msg)
        if not candidate.period_days or candidate.period_days < 1:
            msg = "period_days must be at least 1"
            raise ConfigurationError(msg)
        if candidate.action_type == ActionType.SUSPENSION and not (
            candidate.suspension_days and candidate.suspension_days > 0
        ):
            msg = "A suspension rule needs suspension_days greater than 0"
            raise ConfigurationError(msg)
        if not candidate.is_active:
            return
        for other in self.rules.active_disciplinary_rules(candidate.trigger_type):
            if candidate.pk is not None and other.pk == candidate.pk:
                continue
            if (
                other.trigger_count == candidate.trigger_count
                and other.period_days == candidate.period_days
            ):
                msg = (
                    f"Active rule {other.code!r} already handles "
                    f"{candidate.trigger_type} x{candidate.trigger_count} "
                    f"in {candidate.period_days} days"
                )
                raise ConfigurationError(msg)

    def save_tardiness_rule(self, candidate: TardinessRule) -> TardinessRule:
        self.validate_tardiness_rule(candidate)
        return self.rules.save_tardiness_rule(candidate)

    def save_disciplinary_rule(
        self, candidate: DisciplinaryActionRule
    ) -> DisciplinaryActionRule:
        self.validate_disciplinary_rule(candidate)
        return self.rules.save_disciplinary_rule(candidate)

    def deactivate(self, rule):
        """Rules referenced by history are retired, never deleted."""

        rule.is_active = False
        if isinstance(rule, TardinessRule):
            return self.rules.save_tardiness_rule(rule)
        return self.rules.save_disciplinary_rule(rule)

    def seed_default_rules(self) -> SeedResult:
        """Install the standard policy; re-running only refreshes the rows."""

        created = updated = 0
        for code, defaults in DEFAULT_TARDINESS_RULES.items():
            _, was_created = self.rules.upsert_tardiness_rule(
                code, {**defaults, "is_active": True}
            )
            created += was_created
            updated += not was_created
        for code, defaults in DEFAULT_DISCIPLINARY_RULES.items():
            _, was_created = self.rules.upsert_disciplinary_rule(
                code, {"description": "", **defaults, "is_active": True}
            )
            created += was_created
            updated += not was_created
        logger.info("Seeded default rules: %s created, %s updated", created, updated)
        return SeedResult(created=created, updated=updated)
