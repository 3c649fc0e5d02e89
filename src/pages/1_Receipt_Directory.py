"""
Receipt Directory page.
Folder view of expense receipts with selection, ZIP downloads and CSV listing export.
"""

import streamlit as st
import logging
import sys
from pathlib import Path

# Add src directory to path
src_path = Path(__file__).parent.parent
sys.path.insert(0, str(src_path))

from receipt_directory.export import DataExporter, MemorySaver
from receipt_directory.formatting import receipt_count_label
from ui.components import (
    display_directory_filters, display_folder_tree, display_selection_toolbar,
    display_pending_downloads, display_receipt_preview, display_error_message
)

logger = logging.getLogger(__name__)


def main():
    """Main function for the Receipt Directory page."""
    st.title("🗂️ Receipt Directory")
    st.markdown("Browse receipts by year and month and download them in bulk")

    if 'directory' not in st.session_state:
        st.error("Receipt directory not initialized. Please return to the main page.")
        return

    directory = st.session_state.directory
    saver = st.session_state.saver

    try:
        filters = display_directory_filters(directory)
        if filters != directory.filters:
            directory.apply_filters(filters)

        st.caption(receipt_count_label(directory.visible_count))

        display_selection_toolbar(directory)
        st.markdown("---")
        display_folder_tree(directory)

        preview_id = st.session_state.get('preview_record_id')
        if preview_id:
            record = directory.get_record(preview_id)
            if record is not None:
                st.markdown("---")
                display_receipt_preview(record)
                if st.button("Close Preview"):
                    st.session_state.preview_record_id = None
                    st.rerun()

        if not isinstance(saver, MemorySaver):
            st.caption(f"Downloads are saved to {saver.download_dir}")
        elif saver.files:
            st.markdown("---")
            st.subheader("💾 Ready to Save")
            display_pending_downloads(saver)
            if st.button("🧹 Clear Downloads"):
                saver.pop_all()
                st.rerun()

        with st.expander("📄 Export Listing"):
            records = directory.filtered_records()
            exporter = DataExporter()
            if records:
                st.download_button(
                    "📥 Download CSV",
                    data=exporter.export_to_csv(records),
                    file_name=exporter.get_export_filename("filtered"),
                    mime="text/csv"
                )
            else:
                st.info("No receipts to export")

    except Exception as e:
        logger.error(f"Receipt directory error: {str(e)}")
        display_error_message("Error loading receipt directory", str(e))

if __name__ == "__main__":
    main()
