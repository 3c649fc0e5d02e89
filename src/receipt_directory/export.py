"""
Export functionality for receipt files.
Downloads single receipts, packages batches into ZIP archives and exports the listing as CSV.
"""

import csv
import io
import re
import logging
import zipfile
from abc import ABC, abstractmethod
from datetime import datetime, date
from pathlib import Path
from typing import List, Dict, Optional, Callable, Iterable
import requests
from pydantic import BaseModel

from .models import ExpenseRecord, DownloadJob, JobStatus

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = "jpg"
DEFAULT_DESCRIPTION = "receipt"
DEFAULT_FILENAME_LENGTH = 30

MIME_TYPES = {
    "png": "image/png",
    "pdf": "application/pdf",
    "jpg": "image/jpeg",
    "zip": "application/zip",
}

ProgressCallback = Callable[[DownloadJob], None]


class ReceiptDirectoryError(Exception):
    """Base class for receipt directory errors."""


class FetchFailure(ReceiptDirectoryError):
    """A receipt file could not be retrieved."""

    def __init__(self, record_id: str, url: Optional[str], reason: str = ""):
        self.record_id = record_id
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to fetch receipt {record_id} from {url}: {reason}")


class SerializationFailure(ReceiptDirectoryError):
    """The archive could not be written."""


class FetchedReceipt(BaseModel):
    """Bytes and content type of a downloaded receipt file."""

    content: bytes
    content_type: str = ""


class SavedFile(BaseModel):
    """A file handed to a saver."""

    filename: str
    data: bytes
    mime_type: str


def extension_for_content_type(content_type: Optional[str]) -> str:
    """Map a response content type to a file extension, defaulting to jpg."""
    content_type = (content_type or "").lower()
    if "png" in content_type:
        return "png"
    if "pdf" in content_type:
        return "pdf"
    return DEFAULT_EXTENSION


def sanitize_description(text: Optional[str], max_length: int = DEFAULT_FILENAME_LENGTH) -> str:
    """Turn a free-text description into a filename fragment.

    Keeps letters, digits, whitespace and hyphens, replaces whitespace runs
    with underscores, truncates and strips trailing underscores.

    Args:
        text: Record description
        max_length: Maximum fragment length

    Returns:
        Sanitized fragment, 'receipt' when nothing usable remains
    """
    if not text:
        return DEFAULT_DESCRIPTION
    cleaned = re.sub(r'[^a-zA-Z0-9\s-]', '', text)
    cleaned = re.sub(r'\s+', '_', cleaned)
    cleaned = cleaned[:max_length].rstrip('_')
    return cleaned or DEFAULT_DESCRIPTION


def build_filename(record: ExpenseRecord, content_type: Optional[str],
                   max_length: int = DEFAULT_FILENAME_LENGTH) -> str:
    """Filename for a receipt: '{YYYY-MM-DD}-{description}.{extension}'."""
    date_part = record.expense_date.isoformat() if record.expense_date else "undated"
    description = sanitize_description(record.description, max_length)
    return f"{date_part}-{description}.{extension_for_content_type(content_type)}"


def unique_entry_name(filename: str, used: Iterable[str]) -> str:
    """Append -2, -3, ... before the extension until the name is unused."""
    used = set(used)
    if filename not in used:
        return filename
    stem, dot, extension = filename.rpartition(".")
    if not dot:
        stem, extension = filename, ""
    counter = 2
    while True:
        candidate = f"{stem}-{counter}.{extension}" if dot else f"{stem}-{counter}"
        if candidate not in used:
            return candidate
        counter += 1


def archive_name_for_year(year: int) -> str:
    return f"receipts-{year}"


def archive_name_for_month(year: int, month_name: str) -> str:
    return f"receipts-{year}-{month_name}"


def archive_name_for_selection(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"selected-receipts-{today.isoformat()}"


class FileSaver(ABC):
    """Destination for produced files."""

    @abstractmethod
    def save(self, filename: str, data: bytes, mime_type: str):
        """Store one file and return a handle to it."""


class DirectorySaver(FileSaver):
    """Writes files into a local download directory."""

    def __init__(self, download_dir: str = "downloads"):
        self.download_dir = Path(download_dir)
        self.logger = logger

    def save(self, filename: str, data: bytes, mime_type: str) -> Path:
        self.download_dir.mkdir(parents=True, exist_ok=True)
        path = self.download_dir / Path(filename).name
        path.write_bytes(data)
        self.logger.info(f"Saved {filename} ({len(data)} bytes) to {self.download_dir}")
        return path


class MemorySaver(FileSaver):
    """Keeps produced files in memory until the UI hands them to the user."""

    def __init__(self):
        self.files: List[SavedFile] = []

    def save(self, filename: str, data: bytes, mime_type: str) -> SavedFile:
        saved = SavedFile(filename=filename, data=data, mime_type=mime_type)
        self.files.append(saved)
        return saved

    @property
    def latest(self) -> Optional[SavedFile]:
        return self.files[-1] if self.files else None

    def pop_all(self) -> List[SavedFile]:
        files, self.files = self.files, []
        return files


def build_saver(download_dir: Optional[str] = None) -> FileSaver:
    """Saver for the app: a download directory when configured, otherwise in memory."""
    if download_dir:
        return DirectorySaver(download_dir)
    return MemorySaver()


class ReceiptExporter:
    """Fetches receipt files and delivers them singly or as a ZIP archive.

    Batch downloads fetch one record at a time so that `DownloadJob.current`
    is exact after every record.
    """

    def __init__(self, session: Optional[requests.Session] = None, saver: Optional[FileSaver] = None,
                 timeout: float = 30.0, filename_max_length: int = DEFAULT_FILENAME_LENGTH):
        """Initialize the exporter.

        Args:
            session: HTTP session used for fetching, a new one when omitted
            saver: Destination for produced files, in-memory when omitted
            timeout: Per-request timeout in seconds
            filename_max_length: Maximum length of the description part of filenames
        """
        self.session = session or requests.Session()
        self.saver = saver or MemorySaver()
        self.timeout = timeout
        self.filename_max_length = filename_max_length
        self.logger = logger

    def fetch_receipt(self, record: ExpenseRecord) -> FetchedReceipt:
        """Download the receipt file of a record.

        Raises:
            FetchFailure: If the record has no receipt or the request fails
        """
        if not record.has_receipt:
            raise FetchFailure(record.id, None, "record has no receipt file")

        try:
            response = self.session.get(record.receipt_file_ref, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise FetchFailure(record.id, record.receipt_file_ref, str(e)) from e

        return FetchedReceipt(
            content=response.content,
            content_type=response.headers.get("Content-Type", "")
        )

    def download_one(self, record: ExpenseRecord) -> Optional[str]:
        """Download a single receipt without archiving.

        Args:
            record: Record whose receipt should be saved

        Returns:
            Saved filename, or None if nothing was saved
        """
        if not record.has_receipt:
            self.logger.info(f"Record {record.id} has no receipt, nothing to download")
            return None

        try:
            fetched = self.fetch_receipt(record)
            filename = build_filename(record, fetched.content_type, self.filename_max_length)
            extension = filename.rsplit(".", 1)[-1]
            self.saver.save(filename, fetched.content, MIME_TYPES[extension])
        except FetchFailure as e:
            self.logger.error(f"Download failed: {str(e)}")
            return None
        except Exception as e:
            self.logger.error(f"Saving receipt {record.id} failed: {str(e)}")
            return None

        self.logger.info(f"Downloaded receipt {record.id} as {filename}")
        return filename

    def collect_entries(self, records: List[ExpenseRecord], job: DownloadJob,
                        on_progress: Optional[ProgressCallback] = None) -> Dict[str, bytes]:
        """Fetch each record in order, skipping failures.

        Args:
            records: Records to fetch
            job: Job whose progress is advanced once per record
            on_progress: Called with the job after every record

        Returns:
            Archive entries keyed by unique filename
        """
        entries: Dict[str, bytes] = {}

        for record in records:
            try:
                fetched = self.fetch_receipt(record)
            except FetchFailure as e:
                self.logger.error(f"Failed to download receipt {record.id}: {e.reason}")
                job.failed_record_ids.append(record.id)
            else:
                filename = build_filename(record, fetched.content_type, self.filename_max_length)
                filename = unique_entry_name(filename, entries)
                entries[filename] = fetched.content
                job.saved_entries.append(filename)

            job.current += 1
            if on_progress:
                on_progress(job)

        return entries

    def serialize_archive(self, entries: Dict[str, bytes]) -> bytes:
        """Write entries into an in-memory ZIP archive.

        Raises:
            SerializationFailure: If the archive cannot be written
        """
        try:
            buffer = io.BytesIO()
            with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
                for filename, content in entries.items():
                    zf.writestr(filename, content)
            return buffer.getvalue()
        except (zipfile.LargeZipFile, OSError, ValueError, RuntimeError) as e:
            raise SerializationFailure(f"Could not build archive: {str(e)}") from e

    def build_archive(self, records: List[ExpenseRecord], job: Optional[DownloadJob] = None,
                      on_progress: Optional[ProgressCallback] = None) -> bytes:
        """Fetch records and package them into ZIP bytes."""
        job = job or DownloadJob(archive_name="receipts", total=len(records),
                                 target_record_ids=[r.id for r in records])
        entries = self.collect_entries(records, job, on_progress)
        return self.serialize_archive(entries)

    def download_archive(self, records: List[ExpenseRecord], archive_name: str,
                         on_progress: Optional[ProgressCallback] = None) -> DownloadJob:
        """Download several receipts as one ZIP archive.

        Per-record fetch failures are skipped. Any other failure aborts the
        job without saving a partial archive. Never raises.

        Args:
            records: Records to include, processed in the given order
            archive_name: Archive name without the .zip extension
            on_progress: Called with the job after every record

        Returns:
            Final state of the download job
        """
        records = list(records)
        job = DownloadJob(
            target_record_ids=[record.id for record in records],
            total=len(records),
            archive_name=archive_name
        )

        if not records:
            job.status = JobStatus.SKIPPED
            self.logger.info(f"No receipts to download for {archive_name}")
            return job

        job.status = JobStatus.RUNNING
        try:
            data = self.build_archive(records, job, on_progress)
            self.saver.save(job.filename, data, MIME_TYPES["zip"])
        except Exception as e:
            job.status = JobStatus.FAILED
            job.error = str(e)
            self.logger.error(f"ZIP download failed for {archive_name}: {str(e)}")
            return job

        job.status = JobStatus.COMPLETED
        self.logger.info(
            f"Exported {len(job.saved_entries)}/{job.total} receipts to {job.filename}"
            f" ({len(job.failed_record_ids)} failed)"
        )
        return job

    def close(self) -> None:
        self.session.close()


class DataExporter:
    """Exports the receipt listing as CSV."""

    FIELDNAMES = ["ID", "Date", "Category", "Description", "Amount", "Receipt"]

    def __init__(self):
        self.logger = logger

    def export_to_csv(self, records: List[ExpenseRecord]) -> str:
        """Export records to CSV format.

        Args:
            records: Records to export

        Returns:
            CSV content as string, empty when there are no records
        """
        try:
            if not records:
                return ""

            output = io.StringIO()
            writer = csv.DictWriter(output, fieldnames=self.FIELDNAMES)
            writer.writeheader()

            for record in records:
                writer.writerow({
                    "ID": record.id,
                    "Date": record.expense_date.isoformat() if record.expense_date else "",
                    "Category": record.category,
                    "Description": record.description or "",
                    "Amount": f"{record.amount_or_zero:.2f}",
                    "Receipt": record.receipt_file_ref or ""
                })

            csv_content = output.getvalue()
            output.close()

            self.logger.info(f"Exported {len(records)} receipts to CSV")
            return csv_content

        except Exception as e:
            self.logger.error(f"CSV export failed: {str(e)}")
            raise

    def get_export_filename(self, export_scope: str = "all") -> str:
        """Generate a timestamped filename for a CSV listing."""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        return f"receipts_{export_scope}_{timestamp}.csv"
