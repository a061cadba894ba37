"""
Rate Desk - State Manager
Session state for the position book, form defaults and the shared rate table store.
"""

import streamlit as st
from typing import Any, MutableMapping, Optional

from rate_desk import config
from rate_desk.utils.data_loader import build_default_strategies, load_rate_card_file
from rate_desk.utils.models import RateTable
from rate_desk.utils.positions import PositionBook
from rate_desk.utils.table_store import RateTableStore


@st.cache_resource
def get_table_store() -> RateTableStore:
    """One store per server process; every session reads the same table."""
    return RateTableStore(build_default_strategies())


def init_session_state():
    """Initialize all session state variables."""
    defaults = {
        'position_book': PositionBook(),
        'confirm_clear': False,
        'last_target_result': None,
        'desired_margin_pct': 30.0,
        'target_margin_pct': 60.0,
        'calculator_mode': config.CALCULATOR_MODE,
    }

    for key, default in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = default


def get_state(key: str, default: Any = None) -> Any:
    """Get a value from session state."""
    return st.session_state.get(key, default)


def set_state(key: str, value: Any):
    """Set a value in session state."""
    st.session_state[key] = value


def get_position_book() -> PositionBook:
    book = st.session_state.get('position_book')
    if book is None:
        book = PositionBook()
        st.session_state['position_book'] = book
    return book


def apply_uploaded_rate_card(uploaded, state: MutableMapping = None) -> Optional[RateTable]:
    """
    Load an uploaded rate card into the session, once per upload.

    The uploader hands back the same file on every rerun; a file whose
    ``file_id`` was already handled is skipped, so a revert stays reverted
    until a new file is uploaded. Raises DataAcquisitionError for a bad file.
    """
    state = st.session_state if state is None else state
    if uploaded is None or state.get('uploaded_file_id') == uploaded.file_id:
        return None

    state['uploaded_file_id'] = uploaded.file_id
    table = load_rate_card_file(uploaded, name=uploaded.name)
    state['uploaded_table'] = table
    state['uploaded_name'] = uploaded.name
    return table


def revert_uploaded_rate_card(state: MutableMapping = None):
    """Go back to the shared rate card. The handled file id is kept."""
    state = st.session_state if state is None else state
    state['uploaded_table'] = None
    state['uploaded_name'] = None
