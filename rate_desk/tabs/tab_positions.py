"""
Rate Desk - Positions Tab
Build a staffing mix: each position derives its client rate from the
desired margin. Summary compares the all-onshore / offshore / nearshore
what-if totals.
"""

import streamlit as st
import pandas as pd
import plotly.graph_objects as go

from rate_desk.utils.errors import RoleNotFoundError, ValidationError
from rate_desk.utils.formatting import format_currency, format_percentage
from rate_desk.utils.models import LOCATIONS, LOCATION_LABELS, RateTable
from rate_desk.utils.positions import PositionBook
from rate_desk.utils.state_manager import get_state, set_state

LOCATION_COLORS = {'onshore': 'steelblue', 'offshore': 'seagreen', 'nearshore': 'darkorange'}


def render_position_form(table: RateTable, book: PositionBook):
    """Add-position form. Invalid input shows an error and adds nothing."""
    with st.form('position_form', clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            role = st.selectbox("Role", options=[''] + table.roles(), key='pos_role')
            location = st.radio(
                "Location", options=list(LOCATIONS),
                format_func=lambda loc: LOCATION_LABELS[loc],
                horizontal=True, key='pos_location'
            )
        with col2:
            hours = st.number_input("Hours", min_value=0.0, value=0.0, step=1.0, key='pos_hours')
            margin_pct = st.number_input(
                "Desired Margin (%)", min_value=0.0, max_value=99.9,
                value=get_state('desired_margin_pct', 30.0), step=1.0, key='pos_margin'
            )
        submitted = st.form_submit_button("➕ Add Position", type="primary")

    if submitted:
        try:
            position = book.add_from_form(table, role, location, hours, margin_pct / 100)
        except (ValidationError, RoleNotFoundError) as e:
            st.error(f"❌ {e}")
            return
        set_state('desired_margin_pct', margin_pct)
        st.success(f"✅ Added {position.input.role} ({LOCATION_LABELS[position.input.location]}) "
                   f"at {format_currency(position.result.selected_client_rate)}/hr")


def render_position_list(book: PositionBook):
    count = len(book)
    st.subheader(f"📋 Positions ({count} position{'s' if count != 1 else ''})")

    for p in book.positions:
        with st.container(border=True):
            head, delete = st.columns([6, 1])
            with head:
                st.markdown(f"**{p.input.role}** · {LOCATION_LABELS[p.input.location]}")
            with delete:
                if st.button("✕", key=f'delete_{p.id}', help="Delete"):
                    book.delete(p.id)
                    st.rerun()

            c1, c2, c3, c4, c5 = st.columns(5)
            c1.metric("Hours", f"{p.input.hours:g}")
            c2.metric("Desired Margin", format_percentage(p.input.margin))
            c3.metric("My Cost/hr", format_currency(p.result.selected_cost))
            c4.metric("Client Rate/hr", format_currency(p.result.selected_client_rate))
            c5.metric("Total Cost to Client", format_currency(p.result.total_cost))

    if st.button("🗑️ Clear All", key='clear_all'):
        set_state('confirm_clear', True)

    if get_state('confirm_clear'):
        st.warning("Are you sure you want to clear all positions?")
        yes, no = st.columns(2)
        if yes.button("Yes, clear all", key='confirm_clear_yes'):
            book.clear()
            set_state('confirm_clear', False)
            st.rerun()
        if no.button("Cancel", key='confirm_clear_no'):
            set_state('confirm_clear', False)
            st.rerun()


def render_summary(book: PositionBook):
    summary = book.summary()

    st.subheader("📊 Summary")
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Positions", summary.total_positions)
    c2.metric("Total Hours", f"{summary.total_hours:g}")
    c3.metric("Avg Client Rate", format_currency(summary.avg_client_rate))
    c4.metric("Avg Desired Margin", format_percentage(summary.avg_desired_margin))

    st.caption("What-if totals: every position priced at each location with its own desired margin.")
    cols = st.columns(4)
    for col, loc in zip(cols, LOCATIONS):
        col.metric(f"All {LOCATION_LABELS[loc]}", format_currency(summary.location_totals[loc]),
                   help=f"at {format_percentage(summary.location_margins[loc])} margin")
    cols[3].metric("Selected Locations", format_currency(summary.total_selected),
                   help=f"at {format_percentage(summary.avg_desired_margin)} avg margin")

    fig = go.Figure()
    fig.add_trace(go.Bar(
        x=[LOCATION_LABELS[loc] for loc in LOCATIONS] + ['Selected'],
        y=[summary.location_totals[loc] for loc in LOCATIONS] + [summary.total_selected],
        marker_color=[LOCATION_COLORS[loc] for loc in LOCATIONS] + ['slategray'],
        text=[format_currency(summary.location_totals[loc]) for loc in LOCATIONS]
             + [format_currency(summary.total_selected)],
        textposition='outside'
    ))
    fig.update_layout(title="Total Cost to Client by Location", yaxis_tickprefix="$", height=380)
    st.plotly_chart(fig, use_container_width=True)

    breakdown = pd.DataFrame([
        {
            'Role': p.input.role,
            'Location': LOCATION_LABELS[p.input.location],
            'Hours': p.input.hours,
            **{f'{LOCATION_LABELS[loc]} Rate': round(p.result.comparison[loc].client_rate, 2)
               for loc in LOCATIONS},
            'Total': round(p.result.total_cost, 2),
        }
        for p in book.positions
    ])
    with st.expander("Per-position location comparison"):
        st.dataframe(breakdown, hide_index=True, use_container_width=True)


def render_positions_tab(table: RateTable, book: PositionBook):
    """Render the positions tab."""
    st.header("🧮 Position Builder - Desired Margin")
    st.caption("Client rate = cost ÷ (1 − desired margin). Locations without a cost are not priced.")

    form_col, results_col = st.columns([2, 3])
    with form_col:
        render_position_form(table, book)

    with results_col:
        if not len(book):
            st.info("💡 Add a position to see client rates and totals")
            return
        render_position_list(book)

    render_summary(book)
