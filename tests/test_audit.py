from seat_autofill.audit import SIT_AWAY, SIT_TOGETHER, compute_table_stats, find_violations
from seat_autofill.layout import SeatingLayout, TableSeatWriter
from seat_autofill.models import ProximityRule, ProximityRules

from factories import external, host, round_table, seat


def audit(tables, rules, guests):
    layout = SeatingLayout(tables, {}, TableSeatWriter(tables))
    return find_violations(layout, rules, {g.id: g for g in guests})


def place(table, number, gid, locked=False):
    s = seat(table, number)
    s.assigned_guest_id = gid
    s.locked = locked


def test_sit_together_not_adjacent():
    table = round_table(seat_count=6)
    place(table, 1, "a")
    place(table, 3, "b")
    guests = [host("a", name="Ann"), host("b", name="Bob")]
    violations = audit([table], ProximityRules(sit_together=[ProximityRule("a", "b")]), guests)

    assert len(violations) == 1
    v = violations[0]
    assert v.type == SIT_TOGETHER
    assert (v.seat1_id, v.seat2_id) == ("t1-s1", "t1-s3")
    assert v.reason == "Ann and Bob should sit together but are not adjacent"


def test_sit_together_on_different_tables():
    t1, t2 = round_table("t1", 4), round_table("t2", 4)
    place(t1, 1, "a")
    place(t2, 1, "b")
    guests = [host("a", name="Ann"), external("b", name="Bob")]
    violations = audit([t1, t2], ProximityRules(sit_together=[ProximityRule("a", "b")]), guests)

    assert len(violations) == 1
    assert "different tables (T1 vs T2)" in violations[0].reason
    assert violations[0].table_id == "t1"


def test_satisfied_pair_is_not_reported():
    table = round_table(seat_count=4)
    place(table, 1, "a")
    place(table, 4, "b")
    violations = audit([table], ProximityRules(sit_together=[ProximityRule("a", "b")]), [host("a"), host("b")])
    assert violations == []


def test_sit_away_adjacent():
    table = round_table(seat_count=4)
    place(table, 1, "a", locked=True)
    place(table, 2, "b", locked=True)
    violations = audit([table], ProximityRules(sit_away=[ProximityRule("a", "b")]), [host("a"), host("b")])

    assert [v.type for v in violations] == [SIT_AWAY]
    assert violations[0].reason == "A and B should not sit together but are adjacent"


def test_duplicate_rules_reported_once():
    table = round_table(seat_count=6)
    place(table, 1, "a")
    place(table, 4, "b")
    rules = ProximityRules(
        sit_together=[ProximityRule("a", "b", id="r1"), ProximityRule("b", "a", id="r2")],
    )
    assert len(audit([table], rules, [host("a"), host("b")])) == 1


def test_unseated_member_is_not_a_violation():
    table = round_table(seat_count=4)
    place(table, 1, "a")
    rules = ProximityRules(
        sit_together=[ProximityRule("a", "b")],
        sit_away=[ProximityRule("a", "b")],
    )
    assert audit([table], rules, [host("a"), host("b")]) == []


def test_compute_table_stats():
    table = round_table(seat_count=5)
    place(table, 1, "h1", locked=True)
    place(table, 2, "e1")
    place(table, 3, "h2")
    seat(table, 4).locked = True
    guests = {g.id: g for g in [host("h1"), host("h2"), external("e1")]}

    stats = compute_table_stats(table, guests)
    assert stats == {
        "table": "t1",
        "label": "T1",
        "seats": 5,
        "filled": 3,
        "empty": 2,
        "locked": 2,
        "host": 2,
        "external": 1,
    }
