"""Streamlit UI for SeatAutofill with CSV previews and validations."""
from __future__ import annotations

# Add src to sys.path so seat_autofill can be found
import sys
import os
import io
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "src"))

import pandas as pd
import streamlit as st
import streamlit.components.v1 as components

from seat_autofill.audit import compute_table_stats
from seat_autofill.csv_loader import (
    load_guests,
    load_proximity_rules,
    load_tables,
    split_guests,
)
from seat_autofill.layout import ordered_tables
from seat_autofill.models import (
    AutoFillOptions,
    ProximityRules,
    RatioRule,
    SORT_FIELDS,
    SortRule,
    SpacingRule,
    TableRules,
)
from seat_autofill.solver import AutoFillModel

# -----------------------------
# Helpers
# -----------------------------

def uploadedfile_to_df(uploaded_file) -> pd.DataFrame | None:
    """Read a Streamlit UploadedFile or file-like object into a DataFrame."""
    if uploaded_file is None:
        return None
    if hasattr(uploaded_file, "read"):
        uploaded_file.seek(0)
        return pd.read_csv(io.StringIO(uploaded_file.read().decode("utf-8")), dtype=str, keep_default_na=False)
    return pd.read_csv(uploaded_file, dtype=str, keep_default_na=False)

def df_to_csvio(df: pd.DataFrame) -> io.StringIO:
    """Serialize a DataFrame to a StringIO CSV buffer positioned at start."""
    buf = io.StringIO()
    df.to_csv(buf, index=False)
    buf.seek(0)
    return buf

def validate_columns(df: pd.DataFrame, required: list[str], file_label: str) -> bool:
    """Check required columns and show an error if any are missing."""
    missing = [col for col in required if col not in df.columns]
    if missing:
        st.error(f"Error in {file_label}: missing columns: {', '.join(missing)}")
        return False
    return True

def build_and_solve(
    guests_df: pd.DataFrame,
    seats_df: pd.DataFrame,
    rules_df: pd.DataFrame | None,
    options: AutoFillOptions,
):
    """Run loaders, build model, and run autofill."""
    guests = load_guests(df_to_csvio(guests_df))
    guest_ids = {g.id for g in guests}
    tables = load_tables(df_to_csvio(seats_df), guest_ids)
    if rules_df is not None:
        options.proximity_rules = load_proximity_rules(df_to_csvio(rules_df), guest_ids)
    else:
        options.proximity_rules = ProximityRules()

    host_guests, external_guests = split_guests(guests)
    model = AutoFillModel(options)
    model.build(tables, host_guests, external_guests)
    violations = model.solve()
    return guests, ordered_tables(tables), violations

# -----------------------------
# Sidebar options
# -----------------------------

st.sidebar.header("Autofill Options")
include_host = st.sidebar.checkbox("Include host guests", value=True)
include_external = st.sidebar.checkbox("Include external guests", value=True)
sort_field = st.sidebar.selectbox("Sort by", SORT_FIELDS, index=SORT_FIELDS.index("ranking"))
sort_direction = st.sidebar.radio("Direction", ["asc", "desc"], horizontal=True)

ratio_enabled = st.sidebar.checkbox(
    "Host : external ratio per table",
    value=False,
    help="Aim for this split of host and external guests on every table.",
)
host_ratio = st.sidebar.number_input("Host share", min_value=0, max_value=100, value=50, disabled=not ratio_enabled)
external_ratio = st.sidebar.number_input("External share", min_value=0, max_value=100, value=50,
                                         disabled=not ratio_enabled)

spacing_enabled = st.sidebar.checkbox(
    "Alternate host and external guests",
    value=False,
    help="Seat one host guest, then this many external guests, and repeat.",
)
spacing = st.sidebar.number_input("Spacing", min_value=1, max_value=10, value=1, disabled=not spacing_enabled)
start_with_external = st.sidebar.checkbox("Start with external guest", value=False, disabled=not spacing_enabled)

# -----------------------------
# Main UI and previews
# -----------------------------

st.title("Seat Autofill")

_guests_file = st.file_uploader("Guests CSV", type="csv")
_seats_file = st.file_uploader("Seats CSV", type="csv")
_rules_file = st.file_uploader("Proximity rules CSV (optional)", type="csv")

guests_df = uploadedfile_to_df(_guests_file)
seats_df = uploadedfile_to_df(_seats_file)
rules_df = uploadedfile_to_df(_rules_file)

if guests_df is not None:
    st.subheader("Guests preview")
    st.dataframe(guests_df, use_container_width=True)
if seats_df is not None:
    st.subheader("Seats preview")
    st.dataframe(seats_df, use_container_width=True)
if rules_df is not None:
    st.subheader("Rules preview")
    st.dataframe(rules_df, use_container_width=True)

# -----------------------------
# Run button
# -----------------------------

# Disabled until the required files are present; also keeps runs from overlapping
run_disabled = guests_df is None or seats_df is None
run_clicked = st.button("Run autofill", disabled=run_disabled, key="run_autofill_button")

if run_clicked and not run_disabled:
    if not validate_columns(guests_df, ["id", "name", "category"], "guests.csv"):
        st.stop()
    if not validate_columns(seats_df, ["table_id", "seat_id", "seat_number"], "seats.csv"):
        st.stop()
    if rules_df is not None and not validate_columns(rules_df, ["guest1_id", "guest2_id", "rule"], "rules.csv"):
        st.stop()

    options = AutoFillOptions(
        include_host=include_host,
        include_external=include_external,
        sort_rules=[SortRule(field=sort_field, direction=sort_direction)],
        table_rules=TableRules(
            ratio_rule=RatioRule(enabled=ratio_enabled, host_ratio=host_ratio, external_ratio=external_ratio),
            spacing_rule=SpacingRule(enabled=spacing_enabled, spacing=int(spacing),
                                     start_with_external=start_with_external),
        ),
    )

    try:
        guests, tables, violations = build_and_solve(guests_df, seats_df, rules_df, options)
    except ValueError as e:
        st.error(f"Input validation error: {e}")
        st.stop()

    if not include_host and not include_external:
        st.warning("Both guest lists are excluded; nothing was assigned.")

    guest_by_id = {g.id: g for g in guests}
    rows = []
    for table in tables:
        for seat in sorted(table.seats, key=lambda s: s.seat_number):
            g = guest_by_id.get(seat.assigned_guest_id or "")
            rows.append({
                "table": table.label or table.id,
                "seat": seat.seat_number,
                "guest": g.name if g else "",
                "category": g.category if g else "",
                "locked": seat.locked,
            })
    result_df = pd.DataFrame(rows)
    st.subheader("Assignments")
    st.dataframe(result_df, use_container_width=True)

    st.subheader("Tables")
    st.dataframe(pd.DataFrame([compute_table_stats(t, guest_by_id) for t in tables]), use_container_width=True)

    st.subheader("Proximity violations")
    if violations:
        st.dataframe(
            pd.DataFrame([{"type": v.type, "table": v.table_label or v.table_id, "reason": v.reason}
                          for v in violations]),
            use_container_width=True,
        )
    else:
        st.success("All proximity rules are satisfied.")

    st.download_button(
        "Download assignments as CSV",
        result_df.to_csv(index=False).encode("utf-8"),
        file_name="assignments.csv",
    )

    st.subheader("Seating Map")
    from generate_seating_map import generate_seating_map
    components.html(generate_seating_map(tables, guests, violations), height=720, scrolling=True)
