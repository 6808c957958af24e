"""Chat area: message log, inline tables and the chat input."""

import streamlit as st

from backend.models.schemas import ChatMessage
from backend.services.response_dispatcher import EXAMPLE_QUESTIONS
from frontend.utils import ask_and_wait, get_store, table_to_dataframe


def _render_welcome():
    st.markdown("## Welcome to Excel Analytics Chatbot")
    st.markdown(
        "Upload an Excel file and ask me anything about your data. "
        "I'll provide summaries, column listings and row previews instantly."
    )
    col1, col2, col3 = st.columns(3)
    col1.markdown("📊 **Data Analysis**  \nGet summaries & statistics")
    col2.markdown("🔍 **Smart Search**  \nFind patterns in your data")
    col3.markdown("📈 **Insights**  \nDiscover trends & outliers")
    st.caption("Try: " + " · ".join(f'"{q}"' for q in EXAMPLE_QUESTIONS))


def _render_message(message: ChatMessage):
    with st.chat_message("user" if message.role == "user" else "assistant"):
        st.markdown(message.content)
        if message.table is not None:
            st.dataframe(table_to_dataframe(message.table), use_container_width=True, hide_index=True)
        st.caption(message.timestamp.strftime("%H:%M"))


def render():
    """Render the active session's conversation."""
    store = get_store()
    current_file = store.current_file

    st.title("💬 Excel Analytics Chat")
    if current_file is not None:
        st.info(
            f"📄 **{current_file.name}** "
            f"({current_file.selected_sheet} · {current_file.row_count} rows)"
        )

    messages = store.active_messages
    if not messages:
        _render_welcome()
    for message in messages:
        _render_message(message)

    placeholder = "Ask about your data..." if current_file is not None else "Upload a file to start analyzing..."
    user_query = st.chat_input(placeholder)
    if user_query and user_query.strip():
        with st.chat_message("user"):
            st.markdown(user_query.strip())
        with st.chat_message("assistant"):
            with st.spinner("Analyzing..."):
                ask_and_wait(store, user_query)
        st.rerun()
