"""SeatAutofill package."""
from .models import (
    Guest,
    Seat,
    Table,
    SortRule,
    RatioRule,
    SpacingRule,
    TableRules,
    ProximityRule,
    ProximityRules,
    RankPartition,
    RandomizeOrder,
    AutoFillOptions,
    Violation,
    options_from_dict,
)
from .csv_loader import (
    load_guests,
    load_tables,
    load_proximity_rules,
    load_all,
)
from .layout import SeatWriter, TableSeatWriter
from .solver import AutoFillModel, AutoFillInProgressError, auto_fill_seats

__all__ = [
    "Guest",
    "Seat",
    "Table",
    "SortRule",
    "RatioRule",
    "SpacingRule",
    "TableRules",
    "ProximityRule",
    "ProximityRules",
    "RankPartition",
    "RandomizeOrder",
    "AutoFillOptions",
    "Violation",
    "options_from_dict",
    "load_guests",
    "load_tables",
    "load_proximity_rules",
    "load_all",
    "SeatWriter",
    "TableSeatWriter",
    "AutoFillModel",
    "AutoFillInProgressError",
    "auto_fill_seats",
]
