"""Data models for SeatAutofill."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional
import math
import re


HOST = "host"
EXTERNAL = "external"
CATEGORIES = (HOST, EXTERNAL)

SEAT_MODES = ("default", "host-only", "external-only")
SORT_FIELDS = ("name", "country", "organization", "ranking")
SORT_DIRECTIONS = ("asc", "desc")


def parse_pipe_list(value: object) -> List[str]:
    """Split a pipe separated string into a list.

    Empty values such as ``""`` or ``None`` return an empty list.
    ``pandas`` often provides ``float('nan')`` for missing values which is
    also treated as empty.
    """
    if value is None:
        return []
    if isinstance(value, float) and math.isnan(value):
        return []
    text = str(value).strip()
    if not text or text.lower() == "nan":
        return []
    return [part.strip() for part in text.split("|") if part.strip()]


def parse_bool(value: object) -> bool:
    """Parse common truthy strings into bool."""
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("true", "1", "yes")


@dataclass(frozen=True)
class Guest:
    """A guest from either the host or the external list."""

    id: str
    name: str
    category: str = HOST
    country: str = ""
    organization: str = ""
    ranking: float = 0
    deleted: bool = False

    @property
    def is_host(self) -> bool:
        return self.category == HOST


@dataclass
class Seat:
    """One seat at a table. ``seat_number`` drives fill order."""

    id: str
    seat_number: int
    locked: bool = False
    assigned_guest_id: Optional[str] = None
    adjacent_seats: List[str] = field(default_factory=list)
    mode: str = "default"

    def accepts(self, guest: Guest) -> bool:
        """Whether the seat mode allows this guest's category."""
        if self.mode == "host-only":
            return guest.is_host
        if self.mode == "external-only":
            return not guest.is_host
        return True


@dataclass
class Table:
    """A table and its seats."""

    id: str
    seats: List[Seat] = field(default_factory=list)
    label: str = ""
    table_number: Optional[int] = None

    def order_key(self) -> float:
        """``table_number`` if set, else the leading integer of the id ("12b" -> 12), else 0."""
        if self.table_number is not None:
            return self.table_number
        match = re.match(r"\s*([+-]?\d+)", self.id)
        return int(match.group(1)) if match else 0


@dataclass
class SortRule:
    field: str = "ranking"
    direction: str = "asc"


@dataclass
class RatioRule:
    enabled: bool = False
    host_ratio: float = 50
    external_ratio: float = 50


@dataclass
class SpacingRule:
    enabled: bool = False
    spacing: int = 1
    start_with_external: bool = False


@dataclass
class TableRules:
    ratio_rule: RatioRule = field(default_factory=RatioRule)
    spacing_rule: SpacingRule = field(default_factory=SpacingRule)


@dataclass
class ProximityRule:
    """Unordered pair of guests named by a sit-together or sit-away rule."""

    guest1_id: str
    guest2_id: str
    id: str = ""


@dataclass
class ProximityRules:
    sit_together: List[ProximityRule] = field(default_factory=list)
    sit_away: List[ProximityRule] = field(default_factory=list)


@dataclass
class RankPartition:
    """Ranking range ``min_rank <= ranking < max_rank`` whose guests get shuffled."""

    min_rank: float
    max_rank: float
    id: str = ""


@dataclass
class RandomizeOrder:
    enabled: bool = False
    partitions: List[RankPartition] = field(default_factory=list)
    seed: Optional[int] = None


@dataclass
class AutoFillOptions:
    include_host: bool = True
    include_external: bool = True
    sort_rules: List[SortRule] = field(default_factory=lambda: [SortRule()])
    table_rules: TableRules = field(default_factory=TableRules)
    proximity_rules: ProximityRules = field(default_factory=ProximityRules)
    randomize_order: RandomizeOrder = field(default_factory=RandomizeOrder)


@dataclass
class Violation:
    """A proximity rule the final layout does not satisfy."""

    type: str
    guest1_id: str
    guest2_id: str
    guest1_name: str
    guest2_name: str
    table_id: str
    table_label: str = ""
    seat1_id: str = ""
    seat2_id: str = ""
    reason: str = ""


# ----------------------------- option parsing -----------------------------
def _pick(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def parse_sort_rules(raw: Any) -> List[SortRule]:
    if not raw:
        return [SortRule()]
    rules: List[SortRule] = []
    for item in raw:
        if isinstance(item, SortRule):
            rule = item
        else:
            rule = SortRule(
                field=str(_pick(item, "field", default="ranking")),
                direction=str(_pick(item, "direction", default="asc")),
            )
        if rule.field not in SORT_FIELDS:
            raise ValueError(f"Unknown sort field: {rule.field}")
        if rule.direction not in SORT_DIRECTIONS:
            raise ValueError(f"Unknown sort direction: {rule.direction}")
        rules.append(rule)
    return rules


def _parse_pairs(raw: Any) -> List[ProximityRule]:
    pairs: List[ProximityRule] = []
    for i, item in enumerate(raw or []):
        if isinstance(item, ProximityRule):
            pairs.append(item)
            continue
        pairs.append(
            ProximityRule(
                guest1_id=str(_pick(item, "guest1Id", "guest1_id")),
                guest2_id=str(_pick(item, "guest2Id", "guest2_id")),
                id=str(_pick(item, "id", default=i)),
            )
        )
    return pairs


def _parse_randomize(raw: Any) -> RandomizeOrder:
    if isinstance(raw, RandomizeOrder):
        return raw
    raw = raw or {}
    partitions = []
    for i, item in enumerate(_pick(raw, "partitions", default=[])):
        if isinstance(item, RankPartition):
            partitions.append(item)
            continue
        partitions.append(
            RankPartition(
                min_rank=float(_pick(item, "minRank", "min_rank", default=0)),
                max_rank=float(_pick(item, "maxRank", "max_rank", default=0)),
                id=str(_pick(item, "id", default=i)),
            )
        )
    seed = _pick(raw, "seed")
    return RandomizeOrder(
        enabled=parse_bool(_pick(raw, "enabled", default=False)),
        partitions=partitions,
        seed=int(seed) if seed is not None else None,
    )


def options_from_dict(data: Optional[Mapping[str, Any]]) -> AutoFillOptions:
    """Build options from a plain dict, accepting camelCase or snake_case keys."""
    data = data or {}
    table_raw = _pick(data, "tableRules", "table_rules", default={})
    ratio_raw = _pick(table_raw, "ratioRule", "ratio_rule", default={})
    spacing_raw = _pick(table_raw, "spacingRule", "spacing_rule", default={})
    proximity_raw = _pick(data, "proximityRules", "proximity_rules", default={})

    ratio = RatioRule(
        enabled=parse_bool(_pick(ratio_raw, "enabled", default=False)),
        host_ratio=float(_pick(ratio_raw, "hostRatio", "host_ratio", default=50)),
        external_ratio=float(_pick(ratio_raw, "externalRatio", "external_ratio", default=50)),
    )
    spacing = SpacingRule(
        enabled=parse_bool(_pick(spacing_raw, "enabled", default=False)),
        spacing=int(_pick(spacing_raw, "spacing", default=1)),
        start_with_external=parse_bool(
            _pick(spacing_raw, "startWithExternal", "start_with_external", default=False)
        ),
    )
    proximity = ProximityRules(
        sit_together=_parse_pairs(_pick(proximity_raw, "sitTogether", "sit_together", default=[])),
        sit_away=_parse_pairs(_pick(proximity_raw, "sitAway", "sit_away", default=[])),
    )
    return AutoFillOptions(
        include_host=parse_bool(_pick(data, "includeHost", "include_host", default=True)),
        include_external=parse_bool(_pick(data, "includeExternal", "include_external", default=True)),
        sort_rules=parse_sort_rules(_pick(data, "sortRules", "sort_rules", default=None)),
        table_rules=TableRules(ratio_rule=ratio, spacing_rule=spacing),
        proximity_rules=proximity,
        randomize_order=_parse_randomize(_pick(data, "randomizeOrder", "randomize_order")),
    )
