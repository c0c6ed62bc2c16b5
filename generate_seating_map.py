import math
from typing import Dict, Iterable, List, Tuple

import networkx as nx
from pyvis.network import Network

from seat_autofill.layout import ordered_tables

# ---------------------------
# Public API
# ---------------------------

HOST_COLOR = "#AEC6CF"
EXTERNAL_COLOR = "#FFB347"
EMPTY_COLOR = "#444444"


def build_seating_graph(tables: Iterable, guests: Iterable, violations: Iterable = ()) -> nx.Graph:
    """
    Graph with one node per seat, adjacency edges within tables and one
    extra edge per proximity violation.

    Node attributes: label, title, color, table, x, y.
    Edge attributes: kind ("adjacent", "sit-together", "sit-away"), color, width.
    """
    tables = ordered_tables(tables)
    guest_by_id = {str(g.id): g for g in guests}

    centers = _compute_table_centers([t.id for t in tables], 1600, 1000)
    G = nx.Graph()

    seat_node: Dict[Tuple[str, str], str] = {}
    guest_node: Dict[str, str] = {}
    for table in tables:
        seats = sorted(table.seats, key=lambda s: s.seat_number)
        cx, cy = centers[table.id]
        coords = _circle_layout(cx, cy, 60 + 6 * len(seats), max(1, len(seats)))
        for seat, (x, y) in zip(seats, coords):
            node = f"{table.id}/{seat.id}"
            seat_node[(table.id, seat.id)] = node
            if seat.assigned_guest_id:
                guest_node[seat.assigned_guest_id] = node
            g = guest_by_id.get(seat.assigned_guest_id or "")
            if g is None:
                color, label = EMPTY_COLOR, str(seat.seat_number)
            else:
                color = HOST_COLOR if g.is_host else EXTERNAL_COLOR
                label = g.name
            G.add_node(
                node,
                label=label,
                title=_node_tooltip(table.label or table.id, seat, g),
                color=color,
                table=table.id,
                x=x,
                y=y,
                physics=False,
                borderWidth=4 if seat.locked else 2,
                shape="dot",
                size=18,
            )

    for table in tables:
        for seat in table.seats:
            for other in seat.adjacent_seats:
                a, b = seat_node[(table.id, seat.id)], seat_node.get((table.id, other))
                if b is None or G.has_edge(a, b):
                    continue
                G.add_edge(a, b, kind="adjacent", color="#A9A9A9", width=1)

    for v in violations:
        a = guest_node.get(v.guest1_id)
        b = guest_node.get(v.guest2_id)
        if a is None or b is None:
            continue
        color = "#FF6B6B" if v.type == "sit-away" else "#FFD700"
        # Violation edges replace plain adjacency
        G.add_edge(a, b, kind=v.type, color=color, width=4, title=v.reason)
    return G


def generate_seating_map(tables: Iterable, guests: Iterable, violations: Iterable = ()) -> str:
    """
    Build an interactive seating visualization.

    Returns:
      HTML string with embedded network.
    """
    G = build_seating_graph(tables, guests, violations)
    net = Network(height="700px", width="100%", bgcolor="#111111", font_color="#EEEEEE")
    net.toggle_physics(False)  # positions are fixed
    net.from_nx(G)
    return net.generate_html() + _legend_html()

# ---------------------------
# Internals
# ---------------------------

def _compute_table_centers(tables: List[str], width: int, height: int) -> Dict[str, Tuple[int, int]]:
    """
    Place table centers on a grid inside the canvas area.
    """
    if not tables:
        return {}
    n = len(tables)
    cols = max(1, int(math.ceil(math.sqrt(n))))
    rows = int(math.ceil(n / cols))
    margin = 120
    step_x = max(1, width - 2 * margin) // cols
    step_y = max(1, height - 2 * margin) // max(1, rows)

    centers: Dict[str, Tuple[int, int]] = {}
    for idx, table in enumerate(tables):
        r, c = divmod(idx, cols)
        centers[table] = (margin + c * step_x + step_x // 2, margin + r * step_y + step_y // 2)
    return centers


def _circle_layout(cx: int, cy: int, r: int, n: int) -> List[Tuple[int, int]]:
    pts = []
    for i in range(n):
        theta = 2 * math.pi * i / n
        pts.append((int(cx + r * math.cos(theta)), int(cy + r * math.sin(theta))))
    return pts


def _node_tooltip(table: str, seat, guest) -> str:
    who = guest.name if guest else "empty"
    kind = guest.category if guest else "n/a"
    return (
        f"<b>{who}</b><br>"
        f"Table: {table}<br>"
        f"Seat: {seat.seat_number}<br>"
        f"Category: {kind}<br>"
        f"Mode: {seat.mode}<br>"
        f"Locked: {'Yes' if seat.locked else 'No'}"
    )


def _legend_html() -> str:
    css = """
    <style>
    .legend-box{
      position:absolute;right:12px;bottom:12px;
      background:#222;color:#eee;border:1px solid #444;border-radius:8px;
      padding:8px 12px;font-family:system-ui, -apple-system, Segoe UI, Roboto, Arial;font-size:12px;
      z-index:10;
    }
    .legend-swatch{display:inline-block;width:12px;height:12px;margin-right:6px;vertical-align:middle;border:1px solid #444;}
    </style>
    """
    html = f"""
    {css}
    <div class="legend-box">
      <div><span class="legend-swatch" style="background:{HOST_COLOR}"></span>host guest</div>
      <div><span class="legend-swatch" style="background:{EXTERNAL_COLOR}"></span>external guest</div>
      <div><span class="legend-swatch" style="background:{EMPTY_COLOR}"></span>empty seat</div>
      <div><span class="legend-swatch" style="background:#FFD700"></span>sit-together unmet</div>
      <div><span class="legend-swatch" style="background:#FF6B6B"></span>sit-away broken</div>
      <div style="margin-top:6px;">thick border: locked seat</div>
    </div>
    """
    return html
