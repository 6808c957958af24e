"""Sidebar with the session list."""

import streamlit as st

from frontend.utils import get_store


def render():
    """Render the session list and session gestures."""
    store = get_store()

    with st.sidebar:
        st.title("📊 ExcelMind")
        st.caption("AI Analytics")

        if st.button("➕ New Chat", use_container_width=True):
            store.create_session()
            st.rerun()

        if st.button("📤 Upload File", type="primary", use_container_width=True):
            st.session_state.show_upload = True
            st.rerun()

        st.divider()
        st.markdown("**Recent Chats**")

        for session in store.sessions:
            is_active = session.id == store.active_session_id
            icon = "📄" if session.file_name else "💬"
            col1, col2 = st.columns([5, 1])

            with col1:
                if st.button(
                    f"{icon} {session.name}",
                    key=f"select_{session.id}",
                    type="primary" if is_active else "secondary",
                    help=session.file_name,
                    use_container_width=True,
                ):
                    store.select_session(session.id)
                    st.rerun()

            with col2:
                if st.button("🗑️", key=f"delete_{session.id}", help="Delete chat"):
                    store.delete_session(session.id)
                    st.rerun()
