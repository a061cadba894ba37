"""
Rate Desk - Main Application
Margin and client rate calculator for onshore / offshore / nearshore staffing.

Run with: streamlit run rate_desk/app.py
"""

import streamlit as st

from rate_desk import config
from rate_desk.utils.errors import DataAcquisitionError
from rate_desk.utils.export_engine import create_export_zip
from rate_desk.utils.logging_config import setup_logging
from rate_desk.utils.state_manager import (
    get_position_book, get_state, get_table_store, init_session_state,
)

from rate_desk.tabs.tab_positions import render_positions_tab
from rate_desk.tabs.tab_target_margin import render_target_margin_tab
from rate_desk.tabs.tab_rate_card import render_rate_card_tab

# =============================================================================
# PAGE CONFIG
# =============================================================================
st.set_page_config(
    page_title="Rate Desk",
    page_icon="💲",
    layout="wide",
    initial_sidebar_state="expanded"
)

setup_logging(config.LOG_LEVEL)
init_session_state()

store = get_table_store()
try:
    store.refresh_if_stale()
except DataAcquisitionError as e:
    st.error(f"Could not load the rate card: {e}")
    st.stop()

table = get_state('uploaded_table') or store.table
book = get_position_book()
mode = get_state('calculator_mode', config.CALCULATOR_MODE)

# =============================================================================
# SIDEBAR - Data source and export
# =============================================================================
with st.sidebar:
    st.title("💲 Rate Desk")

    st.subheader("📡 Rate Card")
    if store.last_updated:
        st.caption(f"Last updated: {store.last_updated:%H:%M:%S} (from {store.source})")
    if store.auto_refresh:
        st.caption(f"Auto-refresh every {store.refresh_interval} seconds")
    if store.last_error is not None:
        st.warning(f"Last refresh failed, keeping previous data: {store.last_error}")

    if st.button("🔄 Refresh Data", use_container_width=True):
        with st.spinner("Refreshing..."):
            if store.refresh():
                st.success(f"✓ {len(store.table)} roles loaded")
            else:
                st.error("Refresh failed, previous data kept")

    st.markdown("---")

    st.subheader("📤 Export Positions")
    if len(book):
        st.download_button(
            label="💾 Download positions.zip",
            data=create_export_zip(book.positions, book.summary()),
            file_name="positions.zip",
            mime="application/zip",
            use_container_width=True
        )
    else:
        st.caption("Add positions to enable export.")

# =============================================================================
# MAIN CONTENT - Tabs
# =============================================================================
tab_specs = []
if mode in ('desired_margin', 'both'):
    tab_specs.append(("🧮 Positions", lambda: render_positions_tab(table, book)))
if mode in ('target_margin', 'both'):
    tab_specs.append(("🎯 Target Margin", lambda: render_target_margin_tab(table)))
if not tab_specs:
    st.warning(f"Unknown calculator mode '{mode}', showing both calculators")
    tab_specs = [
        ("🧮 Positions", lambda: render_positions_tab(table, book)),
        ("🎯 Target Margin", lambda: render_target_margin_tab(table)),
    ]
tab_specs.append(("📇 Rate Card", lambda: render_rate_card_tab(table, store)))

tabs = st.tabs([label for label, _ in tab_specs])
for tab, (_, render) in zip(tabs, tab_specs):
    with tab:
        render()
