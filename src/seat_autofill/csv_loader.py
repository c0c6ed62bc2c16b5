"""CSV loading utilities."""
from __future__ import annotations

from pathlib import Path
from typing import IO, Any, Dict, List, Tuple, Union

import pandas as pd

from .models import (
    CATEGORIES,
    EXTERNAL,
    HOST,
    SEAT_MODES,
    Guest,
    ProximityRule,
    ProximityRules,
    Seat,
    Table,
    parse_bool,
    parse_pipe_list,
)

Source = Union[Path, str, IO[Any]]

_TOGETHER = {"together", "sit-together", "sit_together"}
_AWAY = {"away", "sit-away", "sit_away"}


def _read(path: Source) -> pd.DataFrame:
    # Everything as text so ids like "007" survive
    return pd.read_csv(path, dtype=str, keep_default_na=False)


def _require(df: pd.DataFrame, columns: List[str], label: str) -> None:
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise ValueError(f"{label}: missing columns: {', '.join(missing)}")


def _number(value: str, default: float = 0) -> float:
    text = str(value).strip()
    if not text:
        return default
    try:
        return float(text)
    except ValueError as exc:
        raise ValueError(f"Not a number: {value!r}") from exc


def load_guests(path: Source) -> List[Guest]:
    """Load guests from ``guests.csv``.

    ``category`` must be ``host`` or ``external``; ids must be unique.
    """
    df = _read(path)
    _require(df, ["id", "name", "category"], "guests.csv")
    guests: List[Guest] = []
    for _, row in df.iterrows():
        category = row["category"].strip().lower()
        if category not in CATEGORIES:
            raise ValueError(f"Unknown category for guest {row['id']}: {row['category']}")
        guests.append(
            Guest(
                id=row["id"].strip(),
                name=row["name"].strip(),
                category=category,
                country=row.get("country", "").strip(),
                organization=row.get("organization", "").strip(),
                ranking=_number(row.get("ranking", "")),
                deleted=parse_bool(row.get("deleted", "false")),
            )
        )

    ids = [g.id for g in guests]
    duplicates = sorted({i for i in ids if ids.count(i) > 1})
    if duplicates:
        raise ValueError(f"Duplicate guest ids: {', '.join(duplicates)}")
    return guests


def split_guests(guests: List[Guest]) -> Tuple[List[Guest], List[Guest]]:
    """Return (host, external) lists, keeping file order."""
    return [g for g in guests if g.category == HOST], [g for g in guests if g.category == EXTERNAL]


def load_tables(path: Source, guest_ids: set[str] | None = None) -> List[Table]:
    """Load the seat topology from ``seats.csv``, one row per seat.

    Tables appear in order of first mention. If ``guest_ids`` is provided,
    pre-assigned guests are validated against it.
    """
    df = _read(path)
    _require(df, ["table_id", "seat_id", "seat_number"], "seats.csv")
    tables: Dict[str, Table] = {}
    for _, row in df.iterrows():
        table_id = row["table_id"].strip()
        table = tables.get(table_id)
        if table is None:
            number = row.get("table_number", "").strip()
            table = Table(
                id=table_id,
                label=row.get("table_label", "").strip() or table_id,
                table_number=int(_number(number)) if number else None,
            )
            tables[table_id] = table

        mode = row.get("mode", "").strip() or "default"
        if mode not in SEAT_MODES:
            raise ValueError(f"Unknown seat mode for seat {row['seat_id']}: {mode}")
        assigned = row.get("assigned_guest_id", "").strip() or None
        if assigned and guest_ids is not None and assigned not in guest_ids:
            raise ValueError(f"Seat {row['seat_id']} references unknown guest: {assigned}")
        table.seats.append(
            Seat(
                id=row["seat_id"].strip(),
                seat_number=int(_number(row["seat_number"])),
                locked=parse_bool(row.get("locked", "false")),
                assigned_guest_id=assigned,
                adjacent_seats=parse_pipe_list(row.get("adjacent_seats", "")),
                mode=mode,
            )
        )

    for table in tables.values():
        seat_ids = {s.id for s in table.seats}
        for seat in table.seats:
            for other in seat.adjacent_seats:
                if other not in seat_ids:
                    raise ValueError(f"Seat {seat.id} lists unknown adjacent seat {other} on table {table.id}")
    return list(tables.values())


def load_proximity_rules(path: Source, guest_ids: set[str] | None = None) -> ProximityRules:
    """Load sit-together / sit-away pairs from ``rules.csv``."""
    df = _read(path)
    _require(df, ["guest1_id", "guest2_id", "rule"], "rules.csv")
    rules = ProximityRules()
    for i, row in df.iterrows():
        a = row["guest1_id"].strip()
        b = row["guest2_id"].strip()
        if guest_ids is not None and (a not in guest_ids or b not in guest_ids):
            raise ValueError(f"Rule references unknown guest: {a}, {b}")
        kind = row["rule"].strip().lower()
        rule = ProximityRule(guest1_id=a, guest2_id=b, id=row.get("id", "").strip() or str(i))
        if kind in _TOGETHER:
            rules.sit_together.append(rule)
        elif kind in _AWAY:
            rules.sit_away.append(rule)
        else:
            raise ValueError(f"Unknown rule type: {row['rule']}")
    return rules


def load_all(guests_path: Source, seats_path: Source, rules_path: Source | None = None):
    """Convenience wrapper returning guests, tables and proximity rules."""
    guests = load_guests(guests_path)
    guest_ids = {g.id for g in guests}
    tables = load_tables(seats_path, guest_ids)
    rules = load_proximity_rules(rules_path, guest_ids) if rules_path is not None else ProximityRules()
    return guests, tables, rules
