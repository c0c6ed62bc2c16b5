import random

from seat_autofill.models import RandomizeOrder, RankPartition, SortRule
from seat_autofill.pools import (
    apply_randomize_order,
    build_candidate_pools,
    collect_locked_guest_ids,
    make_comparator,
    randomize_applicable,
    sort_guests,
)

from factories import external, host, round_table, seat


def ids(guests):
    return [g.id for g in guests]


def test_ranking_compares_numerically():
    guests = [host("a", ranking=10), host("b", ranking=2), host("c", ranking=1)]
    assert ids(sort_guests(guests, make_comparator([SortRule("ranking", "asc")]))) == ["c", "b", "a"]
    assert ids(sort_guests(guests, make_comparator([SortRule("ranking", "desc")]))) == ["a", "b", "c"]


def test_text_fields_are_case_insensitive():
    guests = [host("a", name="charlie"), host("b", name="Alice"), host("c", name="bob")]
    assert ids(sort_guests(guests, make_comparator([SortRule("name", "asc")]))) == ["b", "c", "a"]


def test_multi_field_with_id_tiebreak():
    guests = [
        host("z", country="FR", ranking=2),
        host("y", country="fr", ranking=1),
        host("x", country="DE", ranking=5),
        host("w", country="FR", ranking=2),
    ]
    cmp = make_comparator([SortRule("country", "asc"), SortRule("ranking", "asc")])
    assert ids(sort_guests(guests, cmp)) == ["x", "y", "w", "z"]


def test_pools_drop_deleted_and_locked_guests():
    table = round_table(seat_count=4)
    seat(table, 1).locked = True
    seat(table, 1).assigned_guest_id = "h2"
    # Unlocked pre-assignment does not exclude the guest
    seat(table, 2).assigned_guest_id = "e1"

    locked = collect_locked_guest_ids([table])
    assert locked == {"h2"}

    hosts = [host("h1", ranking=3), host("h2", ranking=1), host("h3", ranking=2, deleted=True)]
    externals = [external("e1", ranking=2), external("e2", ranking=1)]
    host_pool, external_pool = build_candidate_pools(hosts, externals, locked, [SortRule()])
    assert ids(host_pool) == ["h1"]
    assert ids(external_pool) == ["e2", "e1"]


class TestRandomizeOrder:
    def guests(self):
        return [host("h1", ranking=1), host("h2", ranking=2), host("h3", ranking=2),
                host("h4", ranking=2), host("h5", ranking=2), host("h6", ranking=9)]

    def pools(self, randomize, sort_rules=None):
        host_pool, _ = build_candidate_pools(self.guests(), [], set(), sort_rules or [SortRule()], randomize)
        return ids(host_pool)

    def test_shuffles_only_inside_the_partition(self):
        order = self.pools(RandomizeOrder(enabled=True, partitions=[RankPartition(2, 3)], seed=7))
        assert order[0] == "h1"
        assert order[-1] == "h6"
        assert sorted(order[1:5]) == ["h2", "h3", "h4", "h5"]

    def test_same_seed_gives_same_order(self):
        randomize = RandomizeOrder(enabled=True, partitions=[RankPartition(1, 10)], seed=42)
        assert self.pools(randomize) == self.pools(randomize)

    def test_ignored_unless_ranking_is_the_only_sort_rule(self):
        randomize = RandomizeOrder(enabled=True, partitions=[RankPartition(1, 10)], seed=3)
        rules = [SortRule("ranking", "asc"), SortRule("name", "asc")]
        assert self.pools(randomize, rules) == ["h1", "h2", "h3", "h4", "h5", "h6"]
        assert not randomize_applicable(rules)
        assert randomize_applicable([SortRule("ranking", "desc")])

    def test_disabled_keeps_sorted_order(self):
        randomize = RandomizeOrder(enabled=False, partitions=[RankPartition(1, 10)], seed=3)
        assert self.pools(randomize) == ["h1", "h2", "h3", "h4", "h5", "h6"]

    def test_partition_upper_bound_is_exclusive(self):
        guests = [host("a", ranking=1), host("b", ranking=2)]
        rng = random.Random(0)
        assert ids(apply_randomize_order(guests, [RankPartition(1, 2)], rng)) == ["a", "b"]
