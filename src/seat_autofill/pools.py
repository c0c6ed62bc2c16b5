"""Candidate pool building: filtering and multi-field guest ordering."""
from __future__ import annotations

import logging
import random
from functools import cmp_to_key
from typing import Callable, Iterable, List, Optional, Sequence, Set, Tuple

from .models import Guest, RandomizeOrder, RankPartition, SortRule, Table

log = logging.getLogger(__name__)

Comparator = Callable[[Guest, Guest], int]


def _field_value(guest: Guest, field: str) -> object:
    value = getattr(guest, field, None)
    return "" if value is None else value


def _as_number(value: object) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return 0.0 if number != number else number  # NaN counts as 0


def make_comparator(rules: Sequence[SortRule]) -> Comparator:
    """Return a cmp-style comparator applying ``rules`` in order.

    ``ranking`` compares numerically, every other field case-insensitively.
    Ties fall through to the guest id so the order is total.
    """

    def compare(a: Guest, b: Guest) -> int:
        for rule in rules:
            sign = 1 if rule.direction == "asc" else -1
            av = _field_value(a, rule.field)
            bv = _field_value(b, rule.field)
            if rule.field == "ranking":
                na, nb = _as_number(av), _as_number(bv)
            else:
                na, nb = str(av).lower(), str(bv).lower()
            if na < nb:
                return -sign
            if na > nb:
                return sign
        if a.id < b.id:
            return -1
        if a.id > b.id:
            return 1
        return 0

    return compare


def sort_guests(guests: Iterable[Guest], comparator: Comparator) -> List[Guest]:
    return sorted(guests, key=cmp_to_key(comparator))


def collect_locked_guest_ids(tables: Iterable[Table]) -> Set[str]:
    """Guests pinned to locked seats; autofill never moves them."""
    return {
        seat.assigned_guest_id
        for table in tables
        for seat in table.seats
        if seat.locked and seat.assigned_guest_id
    }


def randomize_applicable(sort_rules: Sequence[SortRule]) -> bool:
    """Shuffling rank ranges only makes sense when ranking is the sole sort key."""
    return len(sort_rules) == 1 and sort_rules[0].field == "ranking"


def apply_randomize_order(
    guests: Sequence[Guest], partitions: Sequence[RankPartition], rng: random.Random
) -> List[Guest]:
    """Shuffle guests within each ranking partition, in place of their slots.

    Guests outside a partition keep their positions, so the overall ranking
    order survives.
    """
    result = list(guests)
    for part in partitions:
        slots = [
            i for i, g in enumerate(result)
            if part.min_rank <= _as_number(g.ranking) < part.max_rank
        ]
        if len(slots) < 2:
            continue
        members = [result[i] for i in slots]
        rng.shuffle(members)
        for i, g in zip(slots, members):
            result[i] = g
        log.debug("Shuffled %d guests in ranking range [%s, %s)", len(slots), part.min_rank, part.max_rank)
    return result


def build_candidate_pools(
    host_guests: Iterable[Guest],
    external_guests: Iterable[Guest],
    locked_guest_ids: Set[str],
    sort_rules: Sequence[SortRule],
    randomize: Optional[RandomizeOrder] = None,
) -> Tuple[List[Guest], List[Guest]]:
    """Filter out deleted and locked guests, then sort each pool.

    With ``randomize`` enabled and ranking as the only sort rule, guests are
    shuffled within each rank partition using a ``random.Random`` seeded from
    ``randomize.seed``.
    """
    comparator = make_comparator(sort_rules)

    def eligible(guests: Iterable[Guest]) -> List[Guest]:
        return [g for g in guests if not g.deleted and g.id not in locked_guest_ids]

    host_pool = sort_guests(eligible(host_guests), comparator)
    external_pool = sort_guests(eligible(external_guests), comparator)
    if randomize and randomize.enabled and randomize.partitions:
        if randomize_applicable(sort_rules):
            rng = random.Random(randomize.seed)
            host_pool = apply_randomize_order(host_pool, randomize.partitions, rng)
            external_pool = apply_randomize_order(external_pool, randomize.partitions, rng)
        else:
            log.info("Randomize order ignored: it needs ranking as the only sort rule")
    log.debug("Candidate pools: %d host, %d external", len(host_pool), len(external_pool))
    return host_pool, external_pool
