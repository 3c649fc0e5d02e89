"""
UI components for the receipt directory application.
Provides the filter bar, folder tree, selection toolbar and download widgets.
"""

import streamlit as st
import logging
from typing import Optional, List, Callable

from receipt_directory.directory import ReceiptDirectory
from receipt_directory.export import MemorySaver
from receipt_directory.formatting import (
    format_currency, category_color, receipt_count_label, progress_label
)
from receipt_directory.models import (
    ExpenseRecord, DirectoryFilters, DownloadJob, JobStatus, MonthNode, YearNode, ALL
)
from receipt_directory.selection import folder_id, FOLDER_ALL

logger = logging.getLogger(__name__)


def setup_sidebar():
    """Setup the main sidebar with global controls and information."""
    with st.sidebar:
        st.header("🗂️ Receipt Directory")

        st.markdown("""
        **Version:** 1.0.0
        **Status:** ✅ Ready
        """)

        if 'directory' in st.session_state:
            try:
                directory = st.session_state.directory
                if directory.records:
                    st.markdown("---")
                    st.subheader("📊 Quick Stats")
                    st.metric("Receipts", len(directory.records))
                    st.metric("Shown", directory.visible_count)
                    st.metric("Selected", directory.selection.size())

            except Exception as e:
                logger.error(f"Error loading sidebar stats: {e}")
                st.error("Error loading statistics")

        st.markdown("---")

        st.markdown("""
        ### 📍 Navigation
        - **Home**: Overview
        - **Receipt Directory**: Browse & download receipts
        - **Expense Dashboard**: Spending by category
        """)


def display_directory_filters(directory: ReceiptDirectory) -> DirectoryFilters:
    """Display the search/year/category filter bar and return the chosen filters."""
    col1, col2, col3 = st.columns([3, 1, 1])

    with col1:
        search_text = st.text_input(
            "Search receipts",
            value=directory.filters.search_text,
            placeholder="Search receipts...",
            help="Matches description or category"
        )

    with col2:
        year_options = [ALL] + directory.available_years
        current_year = directory.filters.year if directory.filters.year in year_options else ALL
        year = st.selectbox(
            "Year",
            options=year_options,
            index=year_options.index(current_year),
            format_func=lambda y: "All Years" if y == ALL else str(y)
        )

    with col3:
        category_options = [ALL] + directory.available_categories
        current_category = directory.filters.category if directory.filters.category in category_options else ALL
        category = st.selectbox(
            "Category",
            options=category_options,
            index=category_options.index(current_category),
            format_func=lambda c: "All Categories" if c == ALL else c
        )

    return DirectoryFilters(search_text=search_text, year=year, category=category)


def run_download(action: Callable[..., DownloadJob], label: str, **kwargs) -> DownloadJob:
    """Run an archive download with a live progress bar.

    Args:
        action: Directory download method accepting `on_progress`
        label: Name shown in status messages
        **kwargs: Arguments passed to the action

    Returns:
        Final job state
    """
    progress_bar = st.progress(0.0)
    status_text = st.empty()

    def on_progress(job: DownloadJob):
        progress_bar.progress(job.progress)
        status_text.text(progress_label(job))

    try:
        job = action(on_progress=on_progress, **kwargs)
    finally:
        progress_bar.empty()
        status_text.empty()

    display_job_result(job, label)
    return job


def display_job_result(job: DownloadJob, label: str):
    """Report the outcome of a download job."""
    if job.status == JobStatus.SKIPPED:
        st.info(f"No receipts to download for {label}")
    elif job.status == JobStatus.FAILED:
        display_error_message("Download failed", job.error)
    else:
        st.success(f"✅ {job.filename} ready ({len(job.saved_entries)}/{job.total} receipts)")
        if job.failed_record_ids:
            st.warning(f"{len(job.failed_record_ids)} receipt(s) could not be fetched and were skipped")


def display_selection_toolbar(directory: ReceiptDirectory):
    """Show the selected count with download and clear actions."""
    count = directory.selection.size()
    if count == 0:
        return

    col1, col2, col3 = st.columns([2, 1, 1])
    with col1:
        st.markdown(f"**{count} selected**")
    with col2:
        if st.button("📦 Download Selected", type="primary", use_container_width=True):
            run_download(directory.download_selected, "selection")
    with col3:
        if st.button("✖️ Clear", use_container_width=True):
            directory.selection.clear()
            st.rerun()


def display_folder_tree(directory: ReceiptDirectory):
    """Render the year/month folder tree, most recent first."""
    tree = directory.tree
    if not tree:
        if directory.records:
            st.info("No receipts match your filters.")
        else:
            st.info("📝 No receipts yet. Attach receipt images to expenses to see them here.")
        return

    for year_node in directory.indexer.sorted_years(tree):
        display_year_folder(directory, year_node)


def display_year_folder(directory: ReceiptDirectory, year_node: YearNode):
    folder = folder_id(year_node.year)
    expanded = directory.expanded.is_expanded(folder)
    records = year_node.all_records()

    col1, col2, col3 = st.columns([4, 1, 1])
    with col1:
        icon = "📂" if expanded else "📁"
        label = f"{icon} {year_node.year} · {receipt_count_label(year_node.count)} · {format_currency(year_node.total_amount)}"
        if st.button(label, key=f"folder_{folder}"):
            directory.expanded.toggle(folder)
            st.rerun()
    with col2:
        display_folder_select_button(directory, records, folder)
    with col3:
        if st.button("⬇️ ZIP", key=f"zip_{folder}", help=f"Download all {year_node.year} receipts"):
            run_download(directory.download_year, str(year_node.year), year=year_node.year)

    if expanded:
        for month_node in year_node.sorted_months():
            display_month_folder(directory, year_node.year, month_node)


def display_month_folder(directory: ReceiptDirectory, year: int, month_node: MonthNode):
    folder = folder_id(year, month_node.month_index)
    expanded = directory.expanded.is_expanded(folder)

    col1, col2, col3 = st.columns([4, 1, 1])
    with col1:
        icon = "📂" if expanded else "📁"
        label = f" {icon} {month_node.name} · {receipt_count_label(month_node.count)} · {format_currency(month_node.total_amount)}"
        if st.button(label, key=f"folder_{folder}"):
            directory.expanded.toggle(folder)
            st.rerun()
    with col2:
        display_folder_select_button(directory, month_node.records, folder)
    with col3:
        if st.button("⬇️ ZIP", key=f"zip_{folder}", help=f"Download {month_node.name} {year} receipts"):
            run_download(
                directory.download_month, f"{month_node.name} {year}",
                year=year, month_index=month_node.month_index
            )

    if expanded:
        for record in sorted(month_node.records, key=lambda r: r.expense_date, reverse=True):
            display_receipt_row(directory, record)


def display_folder_select_button(directory: ReceiptDirectory, records: List[ExpenseRecord], folder: str):
    """Select or deselect every record of a folder."""
    if directory.selection.folder_state(records) == FOLDER_ALL:
        if st.button("☑️ None", key=f"deselect_{folder}", help="Deselect all in folder"):
            directory.selection.deselect_all(records)
            st.rerun()
    else:
        if st.button("☐ All", key=f"select_{folder}", help="Select all in folder"):
            directory.selection.select_all(records)
            st.rerun()


def _toggle_selection(directory: ReceiptDirectory, record_id: str):
    directory.selection.toggle(record_id)


def display_receipt_row(directory: ReceiptDirectory, record: ExpenseRecord):
    """One receipt line with selection, preview and download controls."""
    key = f"sel_{record.id}"
    st.session_state[key] = directory.selection.is_selected(record.id)

    col1, col2, col3, col4, col5 = st.columns([3, 1, 1, 1, 1])
    with col1:
        st.checkbox(
            f"{record.description or 'Receipt'}",
            key=key,
            on_change=_toggle_selection,
            args=(directory, record.id)
        )
    with col2:
        st.caption(record.expense_date.isoformat() if record.expense_date else "")
    with col3:
        color = category_color(record.category)
        st.markdown(f"<span style='color: {color};'>{record.category}</span>", unsafe_allow_html=True)
    with col4:
        st.write(format_currency(record.amount, whole_dollars=False))
    with col5:
        view_col, download_col = st.columns(2)
        with view_col:
            if st.button("👁️", key=f"view_{record.id}", help="View receipt"):
                directory.view_receipt(record.id)
        with download_col:
            if st.button("⬇️", key=f"download_{record.id}", help="Download receipt"):
                if directory.download_receipt(record.id) is None:
                    st.error("Receipt could not be downloaded")


def display_receipt_preview(record: ExpenseRecord):
    """In-place preview of a receipt file."""
    st.subheader(f"🧾 {record.description or 'Receipt'}")
    st.caption(
        f"{record.expense_date.isoformat() if record.expense_date else 'Undated'} · "
        f"{record.category} · {format_currency(record.amount, whole_dollars=False)}"
    )
    if record.receipt_file_ref and record.receipt_file_ref.lower().split("?")[0].endswith(".pdf"):
        st.markdown(f"[Open PDF receipt]({record.receipt_file_ref})")
    else:
        st.image(record.receipt_file_ref, use_container_width=True)


def display_pending_downloads(saver: MemorySaver):
    """Offer files produced by the exporter as browser downloads."""
    for index, saved in enumerate(saver.files):
        st.download_button(
            f"💾 Save {saved.filename}",
            data=saved.data,
            file_name=saved.filename,
            mime=saved.mime_type,
            key=f"saved_{index}_{saved.filename}"
        )


def display_error_message(error: str, details: Optional[str] = None):
    """Display formatted error message.

    Args:
        error: Main error message
        details: Optional detailed error information
    """
    st.error(f"❌ {error}")

    if details:
        with st.expander("🔍 Error Details"):
            st.code(details, language="text")

