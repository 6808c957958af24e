"""Streamlit frontend for chatting with an uploaded spreadsheet."""

import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

import streamlit as st

from backend.logging_config import setup_logging
from frontend.utils import init_session_state
from frontend.components import chat_area, sidebar, upload_panel

# Page config
st.set_page_config(
    page_title="ExcelMind",
    page_icon="📊",
    layout="wide",
)


def main() -> None:
    """Main Streamlit application."""
    setup_logging()
    init_session_state()

    sidebar.render()

    if st.session_state.show_upload:
        upload_panel.render()
        st.divider()

    chat_area.render()


if __name__ == "__main__":
    main()
