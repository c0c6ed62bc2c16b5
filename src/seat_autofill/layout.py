"""Working seat layout shared by the placement phases of one autofill run."""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Protocol, Set, Tuple

from .constraints import ConstraintMap
from .models import Seat, Table


class SeatWriter(Protocol):
    """Mutation interface the caller injects; the engine writes only through it."""

    def assign(self, table_id: str, seat_id: str, guest_id: str) -> None: ...

    def clear(self, table_id: str, seat_id: str) -> None: ...


class TableSeatWriter:
    """Writer that updates ``Seat.assigned_guest_id`` on the given tables."""

    def __init__(self, tables: Iterable[Table]) -> None:
        self._seats: Dict[Tuple[str, str], Seat] = {
            (t.id, s.id): s for t in tables for s in t.seats
        }

    def assign(self, table_id: str, seat_id: str, guest_id: str) -> None:
        self._seats[(table_id, seat_id)].assigned_guest_id = guest_id

    def clear(self, table_id: str, seat_id: str) -> None:
        self._seats[(table_id, seat_id)].assigned_guest_id = None


def ordered_tables(tables: Iterable[Table]) -> List[Table]:
    indexed = list(enumerate(tables))
    indexed.sort(key=lambda pair: (pair[1].order_key(), pair[0]))
    return [t for _, t in indexed]


class SeatingLayout:
    """Snapshot of the topology plus the assignments made so far in a run."""

    def __init__(self, tables: Iterable[Table], constraints: ConstraintMap, writer: SeatWriter) -> None:
        self.tables: List[Table] = ordered_tables(tables)
        self.constraints = constraints
        self.writer = writer
        self._by_table: Dict[str, Dict[str, Seat]] = {
            t.id: {s.id: s for s in t.seats} for t in self.tables
        }
        self.assignments: Dict[Tuple[str, str], str] = {}
        for t in self.tables:
            for s in t.seats:
                if s.assigned_guest_id:
                    self.assignments[(t.id, s.id)] = s.assigned_guest_id
        self._seated: Set[str] = set(self.assignments.values())

    # ----------------------------- lookups -----------------------------
    def is_assigned(self, guest_id: str) -> bool:
        return guest_id in self._seated

    def ordered_seats(self, table: Table) -> List[Seat]:
        return sorted(table.seats, key=lambda s: s.seat_number)

    def adjacent(self, table: Table, seat: Seat) -> List[Seat]:
        seats = self._by_table[table.id]
        return [seats[sid] for sid in seat.adjacent_seats if sid in seats and sid != seat.id]

    def are_adjacent(self, table: Table, a: Seat, b: Seat) -> bool:
        return b.id in a.adjacent_seats or a.id in b.adjacent_seats

    def guest_at(self, table: Table, seat: Seat) -> Optional[str]:
        return self.assignments.get((table.id, seat.id))

    def is_open(self, table: Table, seat: Seat) -> bool:
        return not seat.locked and self.guest_at(table, seat) is None

    def locate(self) -> Dict[str, Tuple[Table, Seat]]:
        """Map each seated guest id to its table and seat."""
        out: Dict[str, Tuple[Table, Seat]] = {}
        for t in self.tables:
            for s in t.seats:
                gid = self.guest_at(t, s)
                if gid:
                    out[gid] = (t, s)
        return out

    # ----------------------------- safety -----------------------------
    def can_safely_place(self, guest_id: str, table: Table, seat: Seat) -> bool:
        """False when an occupied neighbour is someone this guest must sit away from."""
        c = self.constraints.get(guest_id)
        if c is None or not c.away_from:
            return True
        for neighbour in self.adjacent(table, seat):
            if self.guest_at(table, neighbour) in c.away_from:
                return False
        return True

    # ----------------------------- mutation -----------------------------
    def place(self, table: Table, seat: Seat, guest_id: str) -> None:
        self.assignments[(table.id, seat.id)] = guest_id
        self._seated.add(guest_id)
        self.writer.assign(table.id, seat.id, guest_id)

    def clear_unlocked(self) -> int:
        cleared = 0
        for t in self.tables:
            for s in t.seats:
                if s.locked:
                    continue
                if self.assignments.pop((t.id, s.id), None) is not None:
                    cleared += 1
                self.writer.clear(t.id, s.id)
        self._seated = set(self.assignments.values())
        return cleared
