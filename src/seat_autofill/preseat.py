"""Seat sit-together pairs into adjacent seats before general filling."""
from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

from .constraints import priority_of
from .layout import SeatingLayout
from .models import Guest, ProximityRule, Seat, Table

log = logging.getLogger(__name__)


def rank_pairs(
    rules: List[ProximityRule], layout: SeatingLayout, candidates: Dict[str, Guest]
) -> List[Tuple[Guest, Guest]]:
    """Pairs whose members are both available, highest combined priority first."""
    pairs: List[Tuple[Guest, Guest]] = []
    seen = set()
    for rule in rules:
        a = candidates.get(rule.guest1_id)
        b = candidates.get(rule.guest2_id)
        if a is None or b is None or a.id == b.id:
            continue
        c = layout.constraints.get(a.id)
        if c and b.id in c.away_from:
            log.debug("Pair %s + %s is also a sit-away pair; not pre-seated", a.name, b.name)
            continue
        key = frozenset((a.id, b.id))
        if key in seen:
            continue
        seen.add(key)
        pairs.append((a, b))
    pairs.sort(
        key=lambda p: -(priority_of(layout.constraints, p[0].id) + priority_of(layout.constraints, p[1].id))
    )
    return pairs


def find_adjacent_pair(layout: SeatingLayout, a: Guest, b: Guest) -> Optional[Tuple[Table, Seat, Seat]]:
    """First (seat, adjacent seat) in table and seat order that takes both guests safely."""
    for table in layout.tables:
        for seat in layout.ordered_seats(table):
            if not layout.is_open(table, seat) or not seat.accepts(a):
                continue
            if not layout.can_safely_place(a.id, table, seat):
                continue
            for other in layout.adjacent(table, seat):
                if not layout.is_open(table, other) or not other.accepts(b):
                    continue
                if layout.can_safely_place(b.id, table, other):
                    return table, seat, other
    return None


def preseat_pairs(
    layout: SeatingLayout, rules: List[ProximityRule], candidates: Dict[str, Guest]
) -> int:
    """Greedy pair placement. Returns the number of pairs seated; never moves a guest twice."""
    seated = 0
    for a, b in rank_pairs(rules, layout, candidates):
        if layout.is_assigned(a.id) or layout.is_assigned(b.id):
            continue
        spot = find_adjacent_pair(layout, a, b)
        if spot is None:
            log.debug("No adjacent seats for pair %s + %s; left to the filler", a.name, b.name)
            continue
        table, seat_a, seat_b = spot
        layout.place(table, seat_a, a.id)
        layout.place(table, seat_b, b.id)
        seated += 1
        log.debug("Pre-seated %s (%s) + %s (%s) at %s", a.name, seat_a.id, b.name, seat_b.id, table.id)
    return seated
