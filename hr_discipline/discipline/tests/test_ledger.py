from hr_discipline.discipline.ledger import AccumulationLedger
from tests.fakes import FakeWorld


def _rules(world):
    return {r.code: r for r in world.rules.tardiness}


def test_every_fourth_late_arrival_converts():
    world = FakeWorld().seed()
    ledger = AccumulationLedger(world.ledger, world.tx)
    late = _rules(world)["late-arrival"]

    added = [ledger.apply(1, 2026, 3, late, False).formal_tardies_added for _ in range(8)]

    assert added == [0, 0, 0, 1, 0, 0, 0, 1]
    row = ledger.current(1, 2026, 3)
    assert row.late_arrivals_count == 8
    assert row.formal_tardies_count == 2


def test_immediate_and_direct_conversions():
    world = FakeWorld().seed()
    ledger = AccumulationLedger(world.ledger, world.tx)
    rules = _rules(world)

    ledger.apply(1, 2026, 3, rules["late-arrival-after-formal-tardy"], True)
    outcome = ledger.apply(1, 2026, 3, rules["direct-tardiness"], True)

    assert outcome.formal_tardies_added == 1
    assert outcome.row.late_arrivals_count == 1
    assert outcome.row.direct_tardiness_count == 1
    assert outcome.row.formal_tardies_count == 2


def test_months_and_employees_are_isolated():
    world = FakeWorld().seed()
    ledger = AccumulationLedger(world.ledger, world.tx)
    direct = _rules(world)["direct-tardiness"]

    ledger.apply(1, 2026, 3, direct, True)
    ledger.apply(1, 2026, 4, direct, True)
    ledger.apply(2, 2026, 3, direct, True)

    assert ledger.formal_tardies(1, 2026, 3) == 1
    assert ledger.formal_tardies(1, 2026, 4) == 1
    assert ledger.formal_tardies(2, 2026, 3) == 1
    assert ledger.formal_tardies(3, 2026, 3) == 0


def test_administrative_act_counter():
    world = FakeWorld()
    ledger = AccumulationLedger(world.ledger, world.tx)

    ledger.record_administrative_act(1, 2026, 3)
    row = ledger.record_administrative_act(1, 2026, 3)

    assert row.administrative_acts == 2
    assert row.formal_tardies_count == 0
