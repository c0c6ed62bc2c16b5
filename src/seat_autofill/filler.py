"""
Greedy seat filler.

Walks tables in table order and each table's unlocked seats in ascending
``seat_number``. An allocation policy picks which guest category to try
first at every seat:

    ratio + spacing: spacing phase picks the category, ratio targets override it
    spacing:         fixed period of one host per ``spacing`` externals
    ratio:           category furthest behind its per-table target
    default:         whichever pool's next guest sorts first

Within a category, a seated neighbour's sit-together partner wins the seat;
otherwise the first candidate passing the sit-away safety check does. Seats
with no safe candidate stay empty.
"""
from __future__ import annotations

import logging
import math
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .layout import SeatingLayout
from .models import EXTERNAL, HOST, Guest, Seat, Table, TableRules
from .pools import Comparator

log = logging.getLogger(__name__)


# ----------------------------- candidate selection -----------------------------
def partner_override(
    layout: SeatingLayout, table: Table, seat: Seat, candidates: Sequence[Guest]
) -> Optional[Guest]:
    """Partner of an already seated neighbour, if available and safe here."""
    by_id = {g.id: g for g in candidates}
    for neighbour in layout.adjacent(table, seat):
        nid = layout.guest_at(table, neighbour)
        if not nid:
            continue
        c = layout.constraints.get(nid)
        partner = by_id.get(c.together_with) if c and c.together_with else None
        if partner is None or layout.is_assigned(partner.id):
            continue
        if layout.can_safely_place(partner.id, table, seat):
            return partner
    return None


def first_safe(
    layout: SeatingLayout, table: Table, seat: Seat, candidates: Sequence[Guest]
) -> Optional[Guest]:
    """First safe candidate, preferring guests whose partner is still unseated."""

    def partner_open(g: Guest) -> bool:
        c = layout.constraints.get(g.id)
        return bool(c and c.together_with and not layout.is_assigned(c.together_with))

    ordered = [g for g in candidates if partner_open(g)] + [g for g in candidates if not partner_open(g)]
    for g in ordered:
        if layout.can_safely_place(g.id, table, seat):
            return g
    return None


def select_best_guest_for_seat(
    layout: SeatingLayout, table: Table, seat: Seat, candidates: Sequence[Guest]
) -> Optional[Guest]:
    return partner_override(layout, table, seat, candidates) or first_safe(layout, table, seat, candidates)


# ----------------------------- policies -----------------------------
def ratio_targets(rules: TableRules, unlocked: int) -> Dict[str, int]:
    ratio = rules.ratio_rule
    total = ratio.host_ratio + ratio.external_ratio
    if total <= 0:
        return {HOST: 0, EXTERNAL: 0}
    host = int(math.floor(ratio.host_ratio / total * unlocked))
    return {HOST: host, EXTERNAL: unlocked - host}


def spacing_category(rules: TableRules, index: int) -> str:
    """Category the spacing pattern asks for at the ``index``-th unlocked seat."""
    spacing = max(1, int(rules.spacing_rule.spacing))
    phase = index % (spacing + 1)
    host_phase = spacing if rules.spacing_rule.start_with_external else 0
    return HOST if phase == host_phase else EXTERNAL


def _other(category: str) -> str:
    return EXTERNAL if category == HOST else HOST


class SeatFiller:
    """Fills every open seat under the policy selected by ``table_rules``."""

    def __init__(
        self,
        layout: SeatingLayout,
        host_pool: List[Guest],
        external_pool: List[Guest],
        table_rules: TableRules,
        comparator: Comparator,
    ) -> None:
        self.layout = layout
        self.pools: Dict[str, List[Guest]] = {HOST: host_pool, EXTERNAL: external_pool}
        self.rules = table_rules
        self.comparator = comparator
        self.category_by_id: Dict[str, str] = {
            g.id: cat for cat, pool in self.pools.items() for g in pool
        }

    @property
    def mode(self) -> str:
        ratio = self.rules.ratio_rule.enabled
        spacing = self.rules.spacing_rule.enabled
        if ratio and spacing:
            return "ratio+spacing"
        if spacing:
            return "spacing"
        if ratio:
            return "ratio"
        return "default"

    def fill(self) -> int:
        log.info("Filling seats in %s mode", self.mode)
        placed = 0
        for table in self.layout.tables:
            placed += self._fill_table(table)
        return placed

    # ----------------------------- internals -----------------------------
    def _candidates(self, category: str, seat: Seat) -> List[Guest]:
        return [
            g for g in self.pools[category]
            if not self.layout.is_assigned(g.id) and seat.accepts(g)
        ]

    def _seated_counts(self, table: Table, seats: Iterable[Seat]) -> Dict[str, int]:
        counts = {HOST: 0, EXTERNAL: 0}
        for s in seats:
            cat = self.category_by_id.get(self.layout.guest_at(table, s) or "")
            if cat:
                counts[cat] += 1
        return counts

    def _category_order(self, index: int, counts: Dict[str, int], targets: Dict[str, int]) -> List[str]:
        mode = self.mode
        if mode == "ratio+spacing":
            desired = spacing_category(self.rules, index)
            other = _other(desired)
            if counts[desired] >= targets[desired] and counts[other] < targets[other]:
                desired, other = other, desired
            return [desired, other]
        if mode == "spacing":
            desired = spacing_category(self.rules, index)
            return [desired, _other(desired)]
        if mode == "ratio":
            host_gap = targets[HOST] - counts[HOST]
            external_gap = targets[EXTERNAL] - counts[EXTERNAL]
            if host_gap <= 0 and external_gap <= 0:
                return [HOST, EXTERNAL]
            return [HOST, EXTERNAL] if host_gap >= external_gap else [EXTERNAL, HOST]
        return [HOST, EXTERNAL]

    def _pick_default(self, table: Table, seat: Seat) -> Optional[Guest]:
        """Merge both pools: pairing first, then the pool whose next guest sorts first."""
        host = self._candidates(HOST, seat)
        external = self._candidates(EXTERNAL, seat)
        override = partner_override(self.layout, table, seat, host + external)
        if override is not None:
            return override
        pools: List[Tuple[str, List[Guest]]] = [(HOST, host), (EXTERNAL, external)]
        if host and external and self.comparator(host[0], external[0]) > 0:
            pools.reverse()
        for _, candidates in pools:
            guest = first_safe(self.layout, table, seat, candidates)
            if guest is not None:
                return guest
        return None

    def _pick(self, table: Table, seat: Seat, order: List[str]) -> Optional[Guest]:
        for category in order:
            guest = select_best_guest_for_seat(self.layout, table, seat, self._candidates(category, seat))
            if guest is not None:
                return guest
        return None

    def _fill_table(self, table: Table) -> int:
        unlocked = [s for s in self.layout.ordered_seats(table) if not s.locked]
        targets = ratio_targets(self.rules, len(unlocked))
        counts = self._seated_counts(table, unlocked)
        placed = 0
        for index, seat in enumerate(unlocked):
            if self.layout.guest_at(table, seat) is not None:
                continue
            if self.mode == "default":
                guest = self._pick_default(table, seat)
            else:
                guest = self._pick(table, seat, self._category_order(index, counts, targets))
            if guest is None:
                log.debug("Seat %s at %s left empty", seat.id, table.id)
                continue
            self.layout.place(table, seat, guest.id)
            counts[self.category_by_id[guest.id]] += 1
            placed += 1
        return placed
