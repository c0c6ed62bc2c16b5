from generate_seating_map import (
    EMPTY_COLOR,
    EXTERNAL_COLOR,
    HOST_COLOR,
    build_seating_graph,
    generate_seating_map,
)
from seat_autofill.models import Violation

from factories import external, host, round_table, seat


def seated_table():
    table = round_table(seat_count=4)
    seat(table, 1).assigned_guest_id = "a"
    seat(table, 2).assigned_guest_id = "b"
    seat(table, 3).assigned_guest_id = "x"
    return table, [host("a"), host("b"), external("x")]


def test_graph_has_one_node_per_seat_and_ring_edges():
    table, guests = seated_table()
    G = build_seating_graph([table], guests)

    assert G.number_of_nodes() == 4
    assert G.number_of_edges() == 4
    assert G.nodes["t1/t1-s1"]["color"] == HOST_COLOR
    assert G.nodes["t1/t1-s3"]["color"] == EXTERNAL_COLOR
    assert G.nodes["t1/t1-s4"]["color"] == EMPTY_COLOR
    assert G.nodes["t1/t1-s4"]["label"] == "4"
    assert all(d["kind"] == "adjacent" for _, _, d in G.edges(data=True))


def test_violation_marks_the_edge_between_guests():
    table, guests = seated_table()
    v = Violation(
        type="sit-away", guest1_id="a", guest2_id="b", guest1_name="A", guest2_name="B",
        table_id="t1", seat1_id="t1-s1", seat2_id="t1-s2", reason="A and B should not sit together but are adjacent",
    )
    G = build_seating_graph([table], guests, [v])

    assert G.number_of_edges() == 4
    assert G.edges["t1/t1-s1", "t1/t1-s2"]["kind"] == "sit-away"


def test_generate_seating_map_returns_html():
    table, guests = seated_table()
    html = generate_seating_map([table], guests)
    assert "<html" in html.lower()
    assert "legend-box" in html
