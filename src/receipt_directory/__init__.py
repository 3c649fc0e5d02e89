"""
Receipt directory: folder view and batch export of expense receipts.
"""

from .models import ExpenseRecord, DirectoryFilters, YearNode, MonthNode, DownloadJob, JobStatus
from .algorithms import ReceiptFilter, FolderIndexer, ExpenseAnalytics
from .selection import SelectionSet, ExpandedFolders
from .export import ReceiptExporter, DataExporter, FetchFailure, SerializationFailure
from .directory import ReceiptDirectory
from .database import ExpenseStore

__all__ = [
    'ExpenseRecord',
    'DirectoryFilters',
    'YearNode',
    'MonthNode',
    'DownloadJob',
    'JobStatus',
    'ReceiptFilter',
    'FolderIndexer',
    'ExpenseAnalytics',
    'SelectionSet',
    'ExpandedFolders',
    'ReceiptExporter',
    'DataExporter',
    'FetchFailure',
    'SerializationFailure',
    'ReceiptDirectory',
    'ExpenseStore'
]
