import pytest

from hr_discipline.discipline.catalog import DEFAULT_DISCIPLINARY_RULES
from hr_discipline.discipline.catalog import DEFAULT_TARDINESS_RULES
from hr_discipline.discipline.catalog import RuleCatalog
from hr_discipline.discipline.models import DisciplinaryActionRule
from hr_discipline.discipline.models import TardinessRule
from hr_discipline.exceptions import ConfigurationError
from tests.fakes import FakeRuleRepository

ActionType = DisciplinaryActionRule.ActionType
TriggerType = DisciplinaryActionRule.TriggerType


@pytest.fixture
def catalog():
    catalog = RuleCatalog(FakeRuleRepository())
    catalog.seed_default_rules()
    return catalog


def _late_rule(**overrides):
    fields = {
        "code": "custom",
        "name": "Custom",
        "type": TardinessRule.Type.LATE_ARRIVAL,
        "start_minutes_late": 30,
        "end_minutes_late": 45,
        "accumulation_count": 1,
        "equivalent_formal_tardies": 1,
    }
    fields.update(overrides)
    return TardinessRule(**fields)


def test_seed_is_idempotent():
    catalog = RuleCatalog(FakeRuleRepository())
    first = catalog.seed_default_rules()
    second = catalog.seed_default_rules()

    expected = len(DEFAULT_TARDINESS_RULES) + len(DEFAULT_DISCIPLINARY_RULES)
    assert (first.created, first.updated) == (expected, 0)
    assert (second.created, second.updated) == (0, expected)
    assert len(catalog.active_tardiness_rules()) == len(DEFAULT_TARDINESS_RULES)


def test_seed_reactivates_retired_defaults(catalog):
    rule = catalog.active_disciplinary_rules(TriggerType.ADMINISTRATIVE_ACTS)[0]
    catalog.deactivate(rule)
    assert catalog.active_disciplinary_rules(TriggerType.ADMINISTRATIVE_ACTS) == []

    catalog.seed_default_rules()
    assert rule.is_active is True


def test_overlapping_range_in_same_tier_is_rejected(catalog):
    with pytest.raises(ConfigurationError, match="overlaps"):
        catalog.save_tardiness_rule(_late_rule(start_minutes_late=10, end_minutes_late=20))


def test_post_first_tier_does_not_clash_with_standard_tier(catalog):
    catalog.rules.tardiness = [
        r for r in catalog.rules.tardiness if not r.applies_after_formal_tardy
    ]
    rule = catalog.save_tardiness_rule(
        _late_rule(start_minutes_late=1, end_minutes_late=15, applies_after_formal_tardy=True)
    )
    assert rule.pk is not None


def test_inactive_rule_skips_overlap_check(catalog):
    rule = catalog.save_tardiness_rule(
        _late_rule(start_minutes_late=5, end_minutes_late=8, is_active=False)
    )
    assert rule.pk is not None


@pytest.mark.parametrize(
    ("overrides", "message"),
    [
        ({"start_minutes_late": 0}, "start_minutes_late"),
        ({"start_minutes_late": 40, "end_minutes_late": 40}, "end_minutes_late"),
        ({"accumulation_count": 0}, "accumulation_count"),
        ({"equivalent_formal_tardies": 0}, "equivalent_formal_tardies"),
    ],
)
def test_invalid_tardiness_rule(catalog, overrides, message):
    with pytest.raises(ConfigurationError, match=message):
        catalog.validate_tardiness_rule(_late_rule(**overrides))


def test_suspension_rule_needs_days(catalog):
    rule = DisciplinaryActionRule(
        code="absences-9",
        name="Nine",
        trigger_type=TriggerType.UNJUSTIFIED_ABSENCES,
        trigger_count=9,
        period_days=30,
        action_type=ActionType.SUSPENSION,
    )
    with pytest.raises(ConfigurationError, match="suspension_days"):
        catalog.save_disciplinary_rule(rule)


def test_duplicate_active_trigger_is_rejected(catalog):
    rule = DisciplinaryActionRule(
        code="duplicate",
        name="Duplicate",
        trigger_type=TriggerType.FORMAL_TARDIES,
        trigger_count=5,
        period_days=30,
        action_type=ActionType.TERMINATION,
    )
    with pytest.raises(ConfigurationError, match="already handles"):
        catalog.save_disciplinary_rule(rule)

    rule.period_days = 60
    assert catalog.save_disciplinary_rule(rule).pk is not None
