"""Upload panel: file selection, sheet selection and confirmation."""

import streamlit as st

from backend.exceptions import UploadError
from backend.services.file_loader import load_upload
from frontend.utils import get_store


def _reset():
    st.session_state.pending_workbook = None
    st.session_state.upload_error = None
    st.session_state.processed_upload = None


def render():
    """Render the upload panel."""
    store = get_store()

    st.subheader("📤 Upload Excel File")
    st.markdown("Supported formats: `.xlsx`, `.xls`, `.csv`")

    uploaded_file = st.file_uploader(
        "Drop your file here or browse",
        type=["xlsx", "xls", "csv"],
        help="Select a spreadsheet to analyze",
    )

    upload_key = (uploaded_file.name, uploaded_file.size) if uploaded_file is not None else None
    if upload_key is not None and upload_key != st.session_state.processed_upload:
        st.session_state.processed_upload = upload_key
        try:
            with st.spinner("Processing file..."):
                st.session_state.pending_workbook = load_upload(
                    uploaded_file.name,
                    uploaded_file.getvalue(),
                    mime_type=uploaded_file.type,
                )
            st.session_state.upload_error = None
        except UploadError as e:
            st.session_state.pending_workbook = None
            st.session_state.upload_error = e.message

    if st.session_state.upload_error:
        col1, col2 = st.columns([6, 1])
        with col1:
            st.error(st.session_state.upload_error)
        with col2:
            if st.button("✖", key="dismiss_upload_error", help="Dismiss"):
                st.session_state.upload_error = None
                st.rerun()

    workbook = st.session_state.pending_workbook
    if workbook is not None:
        st.info(f"📄 **File Name**: {workbook.name} | **Sheets**: {len(workbook.sheet_names)}")
        sheet_name = st.selectbox(
            "Select Sheet",
            options=workbook.sheet_names,
            index=0,
            help="Select the sheet to analyze",
        )

        if st.button("✅ Confirm & Start Analysis", type="primary", use_container_width=True):
            store.attach_file(workbook.to_dataset(sheet_name))
            _reset()
            st.session_state.show_upload = False
            st.rerun()

    if st.button("Cancel", use_container_width=True):
        _reset()
        st.session_state.show_upload = False
        st.rerun()
