"""
Autofill orchestrator.

One run:
    1. build candidate pools and the constraint map
    2. clear every unlocked seat
    3. pre-seat sit-together pairs into adjacent seats
    4. fill the remaining seats table by table
    5. audit proximity rules and return the violations

The run is greedy and never backtracks. Unsatisfied rules are reported, not
raised. Runs must not overlap on the same layout: a run claims every table
it touches, and a second run on any of them raises ``AutoFillInProgressError``
whether it comes through ``AutoFillModel`` or ``auto_fill_seats``.
"""
from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, Set

from .audit import find_violations
from .constraints import build_constraint_map, reorder_by_priority
from .filler import SeatFiller
from .layout import SeatingLayout, SeatWriter, TableSeatWriter
from .models import AutoFillOptions, Guest, Table, Violation
from .pools import build_candidate_pools, collect_locked_guest_ids, make_comparator
from .preseat import preseat_pairs

log = logging.getLogger(__name__)


class AutoFillInProgressError(RuntimeError):
    """Raised when a second run starts on tables that are still being filled."""


# id() of every Table object inside a running solve
_busy_tables: Set[int] = set()
_busy_guard = threading.Lock()


@contextmanager
def _claim_tables(tables: List[Table]) -> Iterator[None]:
    """Reserve ``tables`` for one run; any overlap with a running run is refused."""
    keys = {id(t) for t in tables}
    with _busy_guard:
        if keys & _busy_tables:
            raise AutoFillInProgressError("An autofill run is already in progress for this layout")
        _busy_tables.update(keys)
    try:
        yield
    finally:
        with _busy_guard:
            _busy_tables.difference_update(keys)


class AutoFillModel:
    """Constraint-aware greedy seat assignment."""

    def __init__(self, options: Optional[AutoFillOptions] = None) -> None:
        self.options = options or AutoFillOptions()
        # Inputs
        self.tables: List[Table] = []
        self.host_guests: List[Guest] = []
        self.external_guests: List[Guest] = []
        self.guests_by_id: Dict[str, Guest] = {}
        self._running = threading.Lock()

    def build(self, tables: List[Table], host_guests: List[Guest], external_guests: List[Guest]) -> None:
        """Store the topology and snapshot both guest lists."""
        self.tables = tables
        self.host_guests = list(host_guests)
        self.external_guests = list(external_guests)
        self.guests_by_id = {g.id: g for g in self.host_guests + self.external_guests}

    def solve(self, writer: Optional[SeatWriter] = None) -> List[Violation]:
        """Run autofill once, writing through ``writer`` (defaults to the seats themselves).

        Raises ``AutoFillInProgressError`` if this model, or any other run
        sharing one of its tables, is still solving.
        """
        if not self._running.acquire(blocking=False):
            raise AutoFillInProgressError("An autofill run is already in progress for this layout")
        try:
            with _claim_tables(self.tables):
                return self._solve(writer or TableSeatWriter(self.tables))
        finally:
            self._running.release()

    # ----------------------------- internals -----------------------------
    def _solve(self, writer: SeatWriter) -> List[Violation]:
        opts = self.options
        if not opts.include_host and not opts.include_external:
            log.warning("Autofill skipped: both host and external guests are excluded")
            return []

        locked_ids = collect_locked_guest_ids(self.tables)
        host_pool, external_pool = build_candidate_pools(
            self.host_guests if opts.include_host else [],
            self.external_guests if opts.include_external else [],
            locked_ids,
            opts.sort_rules,
            opts.randomize_order,
        )

        locked_guests = [self.guests_by_id[gid] for gid in sorted(locked_ids) if gid in self.guests_by_id]
        constraints = build_constraint_map(host_pool + external_pool + locked_guests, opts.proximity_rules)
        host_pool = reorder_by_priority(host_pool, constraints)
        external_pool = reorder_by_priority(external_pool, constraints)
        log.info(
            "Autofill: %d host and %d external candidates, %d locked guests, %d tables",
            len(host_pool), len(external_pool), len(locked_ids), len(self.tables),
        )

        layout = SeatingLayout(self.tables, constraints, writer)
        cleared = layout.clear_unlocked()
        log.debug("Cleared %d unlocked seats", cleared)

        candidates = {g.id: g for g in host_pool + external_pool}
        pairs = preseat_pairs(layout, opts.proximity_rules.sit_together, candidates)
        log.info("Pre-seated %d sit-together pairs", pairs)

        filler = SeatFiller(
            layout, host_pool, external_pool, opts.table_rules, make_comparator(opts.sort_rules)
        )
        filled = filler.fill()
        log.info("Filled %d seats", filled + 2 * pairs)

        violations = find_violations(layout, opts.proximity_rules, self.guests_by_id)
        if violations:
            log.info("Autofill finished with %d proximity violations", len(violations))
        return violations


def auto_fill_seats(
    tables: List[Table],
    host_guests: List[Guest],
    external_guests: List[Guest],
    options: Optional[AutoFillOptions] = None,
    writer: Optional[SeatWriter] = None,
) -> List[Violation]:
    """Assign guests to every unlocked seat and return the proximity violations."""
    model = AutoFillModel(options)
    model.build(tables, host_guests, external_guests)
    return model.solve(writer)
