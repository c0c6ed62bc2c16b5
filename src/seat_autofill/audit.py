"""Post-run audit of proximity rules plus per-table summary stats."""
from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional, Set

from .layout import SeatingLayout
from .models import Guest, ProximityRules, Table, Violation

log = logging.getLogger(__name__)

SIT_TOGETHER = "sit-together"
SIT_AWAY = "sit-away"


def _name(guests_by_id: Mapping[str, Guest], guest_id: str) -> str:
    g = guests_by_id.get(guest_id)
    return g.name if g else guest_id


def find_violations(
    layout: SeatingLayout, rules: ProximityRules, guests_by_id: Mapping[str, Guest]
) -> List[Violation]:
    """Deduplicated sit-together and sit-away violations in the current layout.

    A sit-together rule with an unseated member is not a violation; the pair
    simply did not make it into the layout.
    """
    located = layout.locate()
    violations: List[Violation] = []
    seen: Set[tuple] = set()

    def check(rule_type: str, a: str, b: str) -> Optional[Violation]:
        if a == b or a not in located or b not in located:
            return None
        key = (rule_type, frozenset((a, b)))
        if key in seen:
            return None
        seen.add(key)
        table_a, seat_a = located[a]
        table_b, seat_b = located[b]
        adjacent = table_a.id == table_b.id and layout.are_adjacent(table_a, seat_a, seat_b)
        name_a, name_b = _name(guests_by_id, a), _name(guests_by_id, b)
        if rule_type == SIT_TOGETHER:
            if adjacent:
                return None
            if table_a.id != table_b.id:
                reason = (f"{name_a} and {name_b} should sit together but are on different tables "
                          f"({table_a.label or table_a.id} vs {table_b.label or table_b.id})")
            else:
                reason = f"{name_a} and {name_b} should sit together but are not adjacent"
        else:
            if not adjacent:
                return None
            reason = f"{name_a} and {name_b} should not sit together but are adjacent"
        return Violation(
            type=rule_type,
            guest1_id=a,
            guest2_id=b,
            guest1_name=name_a,
            guest2_name=name_b,
            table_id=table_a.id,
            table_label=table_a.label,
            seat1_id=seat_a.id,
            seat2_id=seat_b.id,
            reason=reason,
        )

    for rule in rules.sit_together:
        v = check(SIT_TOGETHER, rule.guest1_id, rule.guest2_id)
        if v:
            violations.append(v)
    for rule in rules.sit_away:
        v = check(SIT_AWAY, rule.guest1_id, rule.guest2_id)
        if v:
            violations.append(v)

    for v in violations:
        log.debug("[%s] %s", v.type, v.reason)
    return violations


def compute_table_stats(table: Table, guests_by_id: Mapping[str, Guest]) -> Dict[str, int | str]:
    """Seat and category counts for one table."""
    filled = host = external = locked = 0
    for seat in table.seats:
        if seat.locked:
            locked += 1
        if not seat.assigned_guest_id:
            continue
        filled += 1
        g = guests_by_id.get(seat.assigned_guest_id)
        if g is None:
            continue
        if g.is_host:
            host += 1
        else:
            external += 1
    return {
        "table": table.id,
        "label": table.label,
        "seats": len(table.seats),
        "filled": filled,
        "empty": len(table.seats) - filled,
        "locked": locked,
        "host": host,
        "external": external,
    }
