"""Per-guest proximity constraints and priority ordering."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from .models import Guest, ProximityRules

PAIRED_PRIORITY = 100
AWAY_PRIORITY = 10


@dataclass
class Constraint:
    together_with: Optional[str] = None
    away_from: List[str] = field(default_factory=list)
    priority: int = 0


ConstraintMap = Dict[str, Constraint]


def build_constraint_map(guests: Iterable[Guest], rules: ProximityRules) -> ConstraintMap:
    """Derive togetherWith, awayFrom and priority for every known guest.

    A guest keeps only the first sit-together partner it is named with.
    Rules naming an unknown guest are skipped.
    """
    constraints: ConstraintMap = {g.id: Constraint() for g in guests}

    for rule in rules.sit_together:
        a, b = rule.guest1_id, rule.guest2_id
        if a == b or a not in constraints or b not in constraints:
            continue
        if constraints[a].together_with is None:
            constraints[a].together_with = b
        if constraints[b].together_with is None:
            constraints[b].together_with = a

    # Symmetric away map
    for rule in rules.sit_away:
        a, b = rule.guest1_id, rule.guest2_id
        if a == b or a not in constraints or b not in constraints:
            continue
        if b not in constraints[a].away_from:
            constraints[a].away_from.append(b)
        if a not in constraints[b].away_from:
            constraints[b].away_from.append(a)

    for c in constraints.values():
        c.priority = (PAIRED_PRIORITY if c.together_with else 0) + AWAY_PRIORITY * len(c.away_from)
    return constraints


def priority_of(constraints: ConstraintMap, guest_id: str) -> int:
    c = constraints.get(guest_id)
    return c.priority if c else 0


def reorder_by_priority(pool: List[Guest], constraints: ConstraintMap) -> List[Guest]:
    """Stable sort by descending priority; sort-rule order breaks ties."""
    return sorted(pool, key=lambda g: -priority_of(constraints, g.id))
