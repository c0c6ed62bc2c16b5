from seat_autofill.constraints import build_constraint_map, reorder_by_priority
from seat_autofill.models import ProximityRule, ProximityRules

from factories import host


def test_priorities_and_partners():
    guests = [host("a"), host("b"), host("c"), host("d")]
    rules = ProximityRules(
        sit_together=[ProximityRule("a", "b"), ProximityRule("a", "c")],
        sit_away=[ProximityRule("a", "d"), ProximityRule("c", "d")],
    )
    cmap = build_constraint_map(guests, rules)

    # only the first partner is kept
    assert cmap["a"].together_with == "b"
    assert cmap["b"].together_with == "a"
    assert cmap["c"].together_with == "a"
    assert sorted(cmap["d"].away_from) == ["a", "c"]

    assert cmap["a"].priority == 110
    assert cmap["b"].priority == 100
    assert cmap["c"].priority == 110
    assert cmap["d"].priority == 20


def test_rules_with_unknown_guests_are_ignored():
    cmap = build_constraint_map(
        [host("a")],
        ProximityRules(sit_together=[ProximityRule("a", "ghost")], sit_away=[ProximityRule("ghost", "a")]),
    )
    assert cmap["a"].together_with is None
    assert cmap["a"].away_from == []
    assert cmap["a"].priority == 0


def test_reorder_is_stable_within_priority():
    pool = [host("p1"), host("p2"), host("p3"), host("p4"), host("p5")]
    rules = ProximityRules(
        sit_together=[ProximityRule("p4", "p5")],
        sit_away=[ProximityRule("p3", "p1")],
    )
    cmap = build_constraint_map(pool, rules)
    assert [g.id for g in reorder_by_priority(pool, cmap)] == ["p4", "p5", "p1", "p3", "p2"]
