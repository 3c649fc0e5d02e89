"""
Receipt directory state and actions.
Ties the filter, folder index, selection and exporter together for the UI.
"""

import logging
from datetime import date
from typing import List, Optional, Callable, Iterable

from .algorithms import ReceiptFilter, FolderIndexer, FolderTree
from .export import (
    ReceiptExporter, ProgressCallback,
    archive_name_for_year, archive_name_for_month, archive_name_for_selection
)
from .models import ExpenseRecord, DirectoryFilters, DownloadJob, JobStatus, MonthNode
from .selection import SelectionSet, ExpandedFolders

logger = logging.getLogger(__name__)


class ReceiptDirectory:
    """Folder view over the receipts of the host page's expense records."""

    def __init__(self, exporter: ReceiptExporter, records: Optional[Iterable[ExpenseRecord]] = None,
                 on_view_receipt: Optional[Callable[[ExpenseRecord], None]] = None):
        """Initialize the directory.

        Args:
            exporter: Exporter used for all downloads
            records: Initial expense records
            on_view_receipt: Host callback for in-place receipt previews
        """
        self.exporter = exporter
        self.on_view_receipt = on_view_receipt
        self.filters = DirectoryFilters()
        self.selection = SelectionSet()
        self.expanded = ExpandedFolders()
        self.logger = logger

        self._filter = ReceiptFilter()
        self._indexer = FolderIndexer()
        self._records: List[ExpenseRecord] = []
        self._tree: FolderTree = {}
        self.set_records(records or [])

    @property
    def records(self) -> List[ExpenseRecord]:
        """Receipt-bearing records, regardless of filters."""
        return self._records

    @property
    def tree(self) -> FolderTree:
        return self._tree

    @property
    def indexer(self) -> FolderIndexer:
        return self._indexer

    @property
    def visible_count(self) -> int:
        return self._indexer.count_records(self._tree)

    @property
    def available_years(self) -> List[int]:
        return self._filter.available_years(self._records)

    @property
    def available_categories(self) -> List[str]:
        return self._filter.available_categories(self._records)

    def set_records(self, records: Iterable[ExpenseRecord]) -> None:
        """Replace the record set and rebuild the tree."""
        self._records = self._filter.eligible(records)
        self._rebuild()

    def apply_filters(self, filters: DirectoryFilters) -> FolderTree:
        """Apply new filters. Selection is kept as is."""
        self.filters = filters
        self._rebuild()
        return self._tree

    def filtered_records(self) -> List[ExpenseRecord]:
        return self._filter.filter(self._records, self.filters)

    def get_record(self, record_id: str) -> Optional[ExpenseRecord]:
        for record in self._records:
            if record.id == record_id:
                return record
        return None

    def download_year(self, year: int, on_progress: Optional[ProgressCallback] = None) -> DownloadJob:
        """Download every visible receipt of a year folder as one archive."""
        records = self._indexer.year_records(self._tree, year)
        return self.exporter.download_archive(records, archive_name_for_year(year), on_progress)

    def download_month(self, year: int, month_index: int,
                       on_progress: Optional[ProgressCallback] = None) -> DownloadJob:
        """Download every visible receipt of a month folder as one archive."""
        node = self._tree.get(year)
        month = node.months.get(month_index) if node else None
        if month is None:
            self.logger.info(f"No folder for {year}-{month_index + 1:02d}, nothing to download")
            return DownloadJob(archive_name=archive_name_for_month(year, MonthNode.for_month(month_index).name),
                               status=JobStatus.SKIPPED)

        return self.exporter.download_archive(
            list(month.records), archive_name_for_month(year, month.name), on_progress
        )

    def download_selected(self, today: Optional[date] = None,
                          on_progress: Optional[ProgressCallback] = None) -> DownloadJob:
        """Download all selected receipts, including ones hidden by the filters.

        The selection is cleared once the archive has been saved.
        """
        records = self.selection.resolve(self._records)
        job = self.exporter.download_archive(records, archive_name_for_selection(today), on_progress)
        if job.status == JobStatus.COMPLETED:
            self.selection.clear()
        return job

    def download_receipt(self, record_id: str) -> Optional[str]:
        """Download one receipt file without archiving."""
        record = self.get_record(record_id)
        if record is None:
            self.logger.warning(f"Unknown receipt {record_id}")
            return None
        return self.exporter.download_one(record)

    def view_receipt(self, record_id: str) -> bool:
        """Hand a record to the host preview callback. Returns whether it was shown."""
        record = self.get_record(record_id)
        if record is None or self.on_view_receipt is None:
            return False
        self.on_view_receipt(record)
        return True

    def _rebuild(self) -> None:
        self._tree = self._indexer.index(self.filtered_records())
