"""
Receipt Directory Application - Main Entry Point
Browse expense receipts by year and month and download them individually or as ZIP archives.
"""

import streamlit as st
import sys
import logging
from pathlib import Path

# Add src directory to Python path
src_path = Path(__file__).parent / "src"
sys.path.insert(0, str(src_path))

from receipt_directory.config import load_config, configure_logging
from receipt_directory.database import ExpenseStore
from receipt_directory.directory import ReceiptDirectory
from receipt_directory.export import ReceiptExporter, build_saver
from ui.components import setup_sidebar

logger = logging.getLogger(__name__)


def _show_preview(record):
    st.session_state.preview_record_id = record.id


def initialize_app():
    """Initialize configuration, the expense store and session state."""
    try:
        if 'config' not in st.session_state:
            config = load_config()
            configure_logging(config)
            st.session_state.config = config

        config = st.session_state.config

        if 'expense_store' not in st.session_state:
            expense_store = ExpenseStore(config.db_path)
            expense_store.initialize_database()
            st.session_state.expense_store = expense_store

        if 'saver' not in st.session_state:
            st.session_state.saver = build_saver(config.download_dir)

        if 'directory' not in st.session_state:
            exporter = ReceiptExporter(
                saver=st.session_state.saver,
                timeout=config.request_timeout,
                filename_max_length=config.filename_max_length
            )
            st.session_state.directory = ReceiptDirectory(
                exporter,
                records=st.session_state.expense_store.get_expenses_with_receipts(),
                on_view_receipt=_show_preview
            )

        logger.info("Application initialized successfully")

    except Exception as e:
        logger.error(f"Failed to initialize application: {str(e)}")
        st.error(f"Failed to initialize application: {str(e)}")
        st.stop()


def home():
    """Landing page."""
    st.title("🗂️ Receipt Directory")
    st.markdown("---")

    col1, col2 = st.columns([2, 1])

    with col1:
        st.markdown("""
        ## Your receipts, organized

        ### 📁 **Folders by Year and Month**
        - Receipts grouped automatically by expense date
        - Running totals per folder

        ### 🔍 **Search & Filter**
        - Search descriptions and categories
        - Filter by year and category

        ### 📦 **Batch Downloads**
        - Download a whole year, a month, or your selection as one ZIP
        - Download single receipts as image or PDF
        """)

    with col2:
        st.info("""
        **Quick Start:**
        1. Open the Receipt Directory
        2. Expand a year and a month
        3. Tick receipts or use a folder's ZIP button
        4. Save the produced file
        """)

    directory = st.session_state.directory
    if st.button("🔄 Reload Receipts"):
        directory.set_records(st.session_state.expense_store.get_expenses_with_receipts())
        st.success(f"Loaded {len(directory.records)} receipts")

    st.markdown("---")
    st.markdown("""
    <div style='text-align: center; color: #666;'>
        Receipt Directory | Built with Streamlit
    </div>
    """, unsafe_allow_html=True)


def main():
    """Main application function."""
    st.set_page_config(
        page_title="Receipt Directory",
        page_icon="🗂️",
        layout="wide",
        initial_sidebar_state="expanded"
    )

    initialize_app()
    setup_sidebar()

    pages_dir = src_path / "pages"
    navigation = st.navigation([
        st.Page(home, title="Home", icon="🏠", default=True),
        st.Page(str(pages_dir / "1_Receipt_Directory.py"), title="Receipt Directory", icon="🗂️"),
        st.Page(str(pages_dir / "2_Expense_Dashboard.py"), title="Expense Dashboard", icon="📊"),
    ])
    navigation.run()


if __name__ == "__main__":
    main()
