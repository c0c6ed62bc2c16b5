"""Command line interface for SeatAutofill."""
from __future__ import annotations

import argparse
import csv
import logging
from pathlib import Path
from typing import List, Sequence

from .audit import compute_table_stats
from .csv_loader import load_all, split_guests
from .layout import ordered_tables
from .models import (
    AutoFillOptions,
    RandomizeOrder,
    RankPartition,
    RatioRule,
    SortRule,
    SpacingRule,
    TableRules,
    parse_sort_rules,
)
from .solver import AutoFillModel


def _sort_rule(text: str) -> SortRule:
    field, _, direction = text.partition(":")
    return SortRule(field=field.strip(), direction=(direction or "asc").strip())


def _ratio(text: str) -> RatioRule:
    host, sep, external = text.partition(":")
    if not sep:
        raise argparse.ArgumentTypeError("ratio must look like HOST:EXTERNAL, e.g. 50:50")
    try:
        return RatioRule(enabled=True, host_ratio=float(host), external_ratio=float(external))
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid ratio: {text}") from exc


def _partition(text: str) -> RankPartition:
    low, sep, high = text.partition(":")
    try:
        if not sep:
            raise ValueError(text)
        return RankPartition(min_rank=float(low), max_rank=float(high))
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid rank range: {text} (expected MIN:MAX)") from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Automatic seat assignment for event sessions")
    parser.add_argument("--guests", required=True, help="Path to guests.csv")
    parser.add_argument("--seats", required=True, help="Path to seats.csv")
    parser.add_argument("--rules", help="Path to rules.csv with sit-together / sit-away pairs")
    parser.add_argument("--exclude-host", action="store_true", help="Leave host guests out of the run.")
    parser.add_argument("--exclude-external", action="store_true", help="Leave external guests out of the run.")
    parser.add_argument("--sort", action="append", type=_sort_rule, default=[], metavar="FIELD[:asc|desc]",
                        help="Sort rule, repeatable. Fields: name, country, organization, ranking.")
    parser.add_argument("--ratio", type=_ratio, metavar="HOST:EXTERNAL",
                        help="Target host:external seat ratio per table.")
    parser.add_argument("--spacing", type=int,
                        help="Seat one host guest per SPACING external guests.")
    parser.add_argument("--start-with-external", action="store_true",
                        help="Spacing pattern starts with external guests.")
    parser.add_argument("--randomize", action="append", type=_partition, default=[], metavar="MIN:MAX",
                        help="Shuffle guests ranked MIN <= ranking < MAX. Repeatable; needs ranking as the only sort.")
    parser.add_argument("--seed", type=int, help="Seed for --randomize.")
    parser.add_argument("--out-assignments", type=Path,
                        help="Write assignments CSV: table,seat,guest_id,guest.")
    parser.add_argument("--out-violations", type=Path,
                        help="Write proximity violations CSV.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    return parser


def options_from_args(args: argparse.Namespace) -> AutoFillOptions:
    spacing = SpacingRule(
        enabled=args.spacing is not None,
        spacing=args.spacing if args.spacing is not None else 1,
        start_with_external=args.start_with_external,
    )
    return AutoFillOptions(
        include_host=not args.exclude_host,
        include_external=not args.exclude_external,
        sort_rules=parse_sort_rules(args.sort),
        table_rules=TableRules(ratio_rule=args.ratio or RatioRule(), spacing_rule=spacing),
        randomize_order=RandomizeOrder(
            enabled=bool(args.randomize), partitions=args.randomize, seed=args.seed
        ),
    )


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point used by ``python -m seat_autofill.cli``."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s  %(levelname)-8s  %(message)s",
        datefmt="%H:%M:%S",
    )

    guests, tables, rules = load_all(args.guests, args.seats, args.rules)
    host_guests, external_guests = split_guests(guests)
    options = options_from_args(args)
    options.proximity_rules = rules

    model = AutoFillModel(options)
    model.build(tables, host_guests, external_guests)
    violations = model.solve()

    # Print simple assignments
    rows: List[List[str]] = []
    for table in ordered_tables(model.tables):
        for seat in sorted(table.seats, key=lambda s: s.seat_number):
            if not seat.assigned_guest_id:
                continue
            guest = model.guests_by_id.get(seat.assigned_guest_id)
            rows.append([table.id, seat.id, seat.assigned_guest_id, guest.name if guest else ""])
            print(f"{table.id},{seat.id},{rows[-1][3] or seat.assigned_guest_id}")

    if args.out_assignments:
        args.out_assignments.parent.mkdir(parents=True, exist_ok=True)
        with args.out_assignments.open("w", newline="") as f:
            w = csv.writer(f)
            w.writerow(["table", "seat", "guest_id", "guest"])
            w.writerows(rows)

    # Compact per-table summary
    for table in ordered_tables(model.tables):
        s = compute_table_stats(table, model.guests_by_id)
        print(f"[REPORT] {s['table']} filled={s['filled']}/{s['seats']} host={s['host']} "
              f"external={s['external']} locked={s['locked']}")

    for v in violations:
        print(f"[VIOLATION] {v.type} {v.reason}")

    if args.out_violations:
        args.out_violations.parent.mkdir(parents=True, exist_ok=True)
        with args.out_violations.open("w", newline="") as f:
            w = csv.DictWriter(f, fieldnames=[
                "type", "guest1_id", "guest1_name", "guest2_id", "guest2_name",
                "table_id", "seat1_id", "seat2_id", "reason",
            ])
            w.writeheader()
            for v in violations:
                w.writerow({
                    "type": v.type,
                    "guest1_id": v.guest1_id,
                    "guest1_name": v.guest1_name,
                    "guest2_id": v.guest2_id,
                    "guest2_name": v.guest2_name,
                    "table_id": v.table_id,
                    "seat1_id": v.seat1_id,
                    "seat2_id": v.seat2_id,
                    "reason": v.reason,
                })


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    main()
