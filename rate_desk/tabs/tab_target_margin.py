"""
Rate Desk - Target Margin Tab
Checks each location's margin at the role's fixed client rate against a
target margin and recommends where to staff.
"""

import streamlit as st
import pandas as pd
import plotly.graph_objects as go

from rate_desk.utils.errors import RoleNotFoundError, ValidationError
from rate_desk.utils.formatting import (
    format_currency, format_margin_or_na, format_rate_or_na, format_whole_percentage,
)
from rate_desk.utils.models import LOCATIONS, LOCATION_LABELS, RateTable, TargetMarginResult
from rate_desk.utils.rate_engine import CalculatorMode, build_input, calculate
from rate_desk.utils.state_manager import get_state, set_state


def render_result(result: TargetMarginResult):
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Client Rate/hr", format_currency(result.client_rate))
    c2.metric("My Cost/hr", format_currency(result.selected_cost))
    c3.metric("Margin", format_margin_or_na(result.selected_margin, result.selected_cost))
    c4.metric("Total Cost", format_currency(result.total_cost),
              help="Hours × cost at the selected location")

    rows = []
    for loc in LOCATIONS:
        q = result.comparison[loc]
        rows.append({
            'Location': LOCATION_LABELS[loc],
            'Cost/hr': format_rate_or_na(q.cost),
            'Margin': format_margin_or_na(q.margin, q.cost),
            'Meets Target': '🟢 Yes' if q.meets_target else '🔴 No',
        })
    st.dataframe(pd.DataFrame(rows), hide_index=True, use_container_width=True)

    fig = go.Figure()
    fig.add_trace(go.Bar(
        x=[LOCATION_LABELS[loc] for loc in LOCATIONS],
        y=[result.comparison[loc].margin if result.comparison[loc].cost > 0 else 0 for loc in LOCATIONS],
        marker_color=['seagreen' if result.comparison[loc].meets_target else 'indianred' for loc in LOCATIONS]
    ))
    fig.add_hline(y=result.target_margin, line_dash="dash", line_color="red",
                  annotation_text=f"{format_whole_percentage(result.target_margin)} Target")
    fig.update_layout(title="Margin by Location", yaxis_tickformat=".0%", height=350)
    st.plotly_chart(fig, use_container_width=True)

    if any(result.meets_target.values()):
        st.success(f"💡 {result.recommendation}")
    else:
        st.error(f"⚠️ {result.recommendation}")


def render_target_margin_tab(table: RateTable):
    """Render the target margin tab."""
    st.header("🎯 Target Margin Check")
    st.caption("Margin = (client rate − cost) ÷ client rate, at the role's fixed client rate.")

    with st.form('target_form'):
        col1, col2 = st.columns(2)
        with col1:
            role = st.selectbox("Role", options=[''] + table.roles(), key='tgt_role')
            location = st.radio(
                "Location", options=list(LOCATIONS),
                format_func=lambda loc: LOCATION_LABELS[loc],
                horizontal=True, key='tgt_location'
            )
        with col2:
            hours = st.number_input("Hours", min_value=0.0, value=0.0, step=1.0, key='tgt_hours')
            target_pct = st.number_input(
                "Target Margin (%)", min_value=0.0, max_value=99.9,
                value=get_state('target_margin_pct', 60.0), step=1.0, key='tgt_margin'
            )
        submitted = st.form_submit_button("Calculate", type="primary")

    if submitted:
        try:
            inp = build_input(role, location, hours, target_pct / 100)
            result = calculate(table, inp, CalculatorMode.TARGET_MARGIN)
        except (ValidationError, RoleNotFoundError) as e:
            st.error(f"❌ {e}")
        else:
            set_state('target_margin_pct', target_pct)
            set_state('last_target_result', result)

    result = get_state('last_target_result')
    if result is None:
        st.info("💡 Pick a role, location and hours to check the margin")
        return
    render_result(result)
