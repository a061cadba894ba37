"""
Rate Desk - Rate Card Tab
Shows the loaded rate card and where it came from.
Accepts an uploaded CSV / XLSX / JSON rate card for this session.
"""

import streamlit as st
import pandas as pd
from st_aggrid import AgGrid, GridOptionsBuilder

from rate_desk import config
from rate_desk.utils.data_loader import SHEET_HEADERS
from rate_desk.utils.errors import DataAcquisitionError
from rate_desk.utils.models import RateTable
from rate_desk.utils.state_manager import (
    apply_uploaded_rate_card, get_state, revert_uploaded_rate_card,
)
from rate_desk.utils.table_store import RateTableStore


def rate_table_frame(table: RateTable) -> pd.DataFrame:
    return pd.DataFrame([
        {
            'Role': r.role,
            'Onshore Cost/hr': r.onshore_cost,
            'Offshore Cost/hr': r.offshore_cost,
            'Nearshore Cost/hr': r.nearshore_cost,
            'Client Rate/hr': r.client_rate,
        }
        for r in table
    ], columns=SHEET_HEADERS)


def render_upload():
    st.subheader("📁 Use a Local Rate Card")
    st.caption(f"First row headers: {', '.join(SHEET_HEADERS[:4])} (Client Rate/hr optional). "
               f"Workbooks are read from the '{config.WORKSHEET_NAME}' sheet.")

    template = pd.DataFrame(columns=SHEET_HEADERS).to_csv(index=False)
    st.download_button("⬇️ Download CSV template", data=template,
                       file_name="rate_card_template.csv", mime="text/csv")

    uploaded = st.file_uploader("Rate card file", type=['csv', 'xlsx', 'json'], key='rate_card_upload')
    try:
        table = apply_uploaded_rate_card(uploaded)
    except DataAcquisitionError as e:
        st.error(f"❌ {uploaded.name}: {e}")
    else:
        if table is not None:
            # the other tabs already rendered against the previous table
            st.rerun()

    if get_state('uploaded_table') is not None:
        if st.button("↩️ Revert to live rate card", key='revert_upload'):
            revert_uploaded_rate_card()
            st.rerun()


def render_rate_card_tab(table: RateTable, store: RateTableStore):
    """Render the rate card tab."""
    st.header("📇 Rate Card")

    uploaded_name = get_state('uploaded_name')
    if uploaded_name:
        st.info(f"Using uploaded file **{uploaded_name}** ({len(table)} roles) for this session")
    elif store.source == 'backup data':
        st.warning("Using backup data. The remote rate card is not configured or could not be loaded.")
    else:
        st.success(f"✅ Live data from {store.source}")

    df = rate_table_frame(table)
    gb = GridOptionsBuilder.from_dataframe(df)
    gb.configure_default_column(editable=False)
    gb.configure_column('Role', pinned='left')
    for col in SHEET_HEADERS[1:]:
        gb.configure_column(col, type=['numericColumn'])
    AgGrid(df, gridOptions=gb.build(), fit_columns_on_grid_load=True, height=300, key='rate_card_grid')

    st.caption("A cost of 0 means the role is not offered at that location.")
    st.markdown("---")
    render_upload()
