"""Shared utilities for the frontend application."""

import asyncio
from typing import Any, List, Optional

import pandas as pd
import streamlit as st

from backend.models.schemas import ChatMessage, TablePayload
from backend.services.session_store import SessionStore


def init_session_state():
    """Initialize session state variables."""
    if "store" not in st.session_state:
        st.session_state.store = SessionStore()
    if "show_upload" not in st.session_state:
        st.session_state.show_upload = False
    if "pending_workbook" not in st.session_state:
        st.session_state.pending_workbook = None
    if "upload_error" not in st.session_state:
        st.session_state.upload_error = None
    if "processed_upload" not in st.session_state:
        st.session_state.processed_upload = None


def get_store() -> SessionStore:
    """Return the SessionStore owned by this browser session."""
    return st.session_state.store


def ask_and_wait(store: SessionStore, text: str) -> Optional[ChatMessage]:
    """Drive the store's reply task to completion on a fresh event loop."""
    return asyncio.run(store.ask(text))


def table_to_dataframe(table: TablePayload) -> pd.DataFrame:
    """Build a DataFrame from an inline table, padding short rows with None."""
    width = max([len(table.headers)] + [len(row) for row in table.rows])
    labels = list(table.headers) + [""] * (width - len(table.headers))

    # Blank or repeated labels get positional names
    columns: List[Any] = []
    for i, label in enumerate(labels, 1):
        name = label or f"col_{i}"
        columns.append(name if name not in columns else f"{name}_{i}")

    rows = [list(row) + [None] * (width - len(row)) for row in table.rows]
    return pd.DataFrame(rows, columns=columns)
