"""
Data models using Pydantic for the receipt directory.
Provides validation and coercion for expense records and the derived folder tree.
"""

import calendar
import logging
from datetime import datetime, date
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Optional, List, Dict, Any, Union
from pydantic import BaseModel, Field, field_validator, field_serializer

logger = logging.getLogger(__name__)

EXPENSE_CATEGORIES = [
    "Fuel", "Maintenance", "Insurance", "Tolls",
    "Office", "Permits", "Meals", "Other"
]

ALL = "all"


def parse_expense_date(value: Any) -> Optional[date]:
    """Coerce a backend date value into a calendar date.

    Args:
        value: date, datetime, or ISO-8601 string

    Returns:
        Calendar date, or None if the value cannot be parsed
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        except ValueError:
            pass
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            pass
    logger.warning(f"Unparseable expense date: {value!r}")
    return None


def parse_amount(value: Any) -> Optional[Decimal]:
    """Coerce a backend amount into a Decimal, or None when it is not numeric."""
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        logger.warning(f"Non-numeric expense amount: {value!r}")
        return None
    if not amount.is_finite():
        logger.warning(f"Non-finite expense amount: {value!r}")
        return None
    return amount


class ExpenseRecord(BaseModel):
    """Expense entry as stored by the backend, optionally carrying a receipt file."""

    id: str = Field(..., description="Opaque record identifier")
    expense_date: Optional[date] = Field(None, alias="date", description="Date of the expense")
    amount: Optional[Decimal] = Field(None, description="Expense amount")
    category: str = Field("Other", description="Expense category")
    description: Optional[str] = Field(None, description="Free-text description")
    receipt_file_ref: Optional[str] = Field(None, description="URL of the stored receipt file")

    model_config = {
        "populate_by_name": True,
        "frozen": True,
        "json_schema_extra": {
            "example": {
                "id": "7d0c4b1e",
                "date": "2024-03-05",
                "amount": 120.00,
                "category": "Fuel",
                "description": "Shell #4",
                "receipt_file_ref": "https://storage.example.com/receipts/7d0c4b1e.jpg"
            }
        }
    }

    @field_validator('id', mode='before')
    @classmethod
    def validate_id(cls, v):
        """Accept integer keys from the store as strings."""
        if v is None or str(v).strip() == "":
            raise ValueError('Record id cannot be empty')
        return str(v)

    @field_validator('expense_date', mode='before')
    @classmethod
    def validate_date(cls, v):
        return parse_expense_date(v)

    @field_validator('amount', mode='before')
    @classmethod
    def validate_amount(cls, v):
        return parse_amount(v)

    @field_validator('category', mode='before')
    @classmethod
    def validate_category(cls, v):
        """Normalize category to one of the known labels."""
        if not v:
            return "Other"
        for category in EXPENSE_CATEGORIES:
            if str(v).strip().lower() == category.lower():
                return category
        return "Other"

    @field_validator('receipt_file_ref', mode='before')
    @classmethod
    def validate_receipt_file_ref(cls, v):
        if v is None or not str(v).strip():
            return None
        return str(v).strip()

    @property
    def has_receipt(self) -> bool:
        """Whether the record carries a receipt file reference."""
        return bool(self.receipt_file_ref)

    @property
    def amount_or_zero(self) -> Decimal:
        return self.amount if self.amount is not None else Decimal("0")


class DirectoryFilters(BaseModel):
    """Search and filter criteria applied to the receipt directory."""

    search_text: str = Field("", description="Case-insensitive search on description or category")
    year: Union[int, str] = Field(ALL, description="Calendar year or 'all'")
    category: str = Field(ALL, description="Exact category or 'all'")

    @field_validator('search_text', mode='before')
    @classmethod
    def validate_search_text(cls, v):
        return v or ""

    @field_validator('year', mode='before')
    @classmethod
    def validate_year(cls, v):
        """Accept 'all', an integer year, or a numeric string."""
        if v is None or v == "" or (isinstance(v, str) and v.lower() == ALL):
            return ALL
        try:
            return int(v)
        except (TypeError, ValueError):
            raise ValueError("Year must be 'all' or a calendar year")

    @field_validator('category', mode='before')
    @classmethod
    def validate_category(cls, v):
        if not v or (isinstance(v, str) and v.lower() == ALL):
            return ALL
        return v


class MonthNode(BaseModel):
    """Month folder holding the receipts dated within that month."""

    month_index: int = Field(..., ge=0, le=11, description="Zero-based month index")
    name: str = Field(..., description="English long month name")
    records: List[ExpenseRecord] = Field(default_factory=list)
    total_amount: Decimal = Field(Decimal("0"))

    @classmethod
    def for_month(cls, month_index: int) -> "MonthNode":
        return cls(month_index=month_index, name=calendar.month_name[month_index + 1])

    @property
    def count(self) -> int:
        return len(self.records)


class YearNode(BaseModel):
    """Year folder grouping month folders."""

    year: int = Field(..., description="Calendar year")
    months: Dict[int, MonthNode] = Field(default_factory=dict)
    total_amount: Decimal = Field(Decimal("0"))

    @property
    def count(self) -> int:
        return sum(month.count for month in self.months.values())

    def sorted_months(self, descending: bool = True) -> List[MonthNode]:
        """Month folders in display order (most recent first by default)."""
        return sorted(self.months.values(), key=lambda m: m.month_index, reverse=descending)

    def all_records(self) -> List[ExpenseRecord]:
        """Every record in the year, month by month in calendar order."""
        records = []
        for month in self.sorted_months(descending=False):
            records.extend(month.records)
        return records


class JobStatus(str, Enum):
    """Lifecycle states of a download job."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


class DownloadJob(BaseModel):
    """Progress of one batch export. Never persisted."""

    target_record_ids: List[str] = Field(default_factory=list)
    current: int = Field(0, ge=0)
    total: int = Field(0, ge=0)
    archive_name: str = Field(..., description="Archive name without extension")
    status: JobStatus = Field(JobStatus.PENDING)
    saved_entries: List[str] = Field(default_factory=list, description="Filenames written to the archive")
    failed_record_ids: List[str] = Field(default_factory=list)
    error: Optional[str] = Field(None)

    @property
    def filename(self) -> str:
        return f"{self.archive_name}.zip"

    @property
    def progress(self) -> float:
        """Fraction of records processed, between 0 and 1."""
        if self.total == 0:
            return 0.0
        return self.current / self.total


class ExpenseStats(BaseModel):
    """Aggregated expense totals for dashboard widgets."""

    period: str = Field("month", description="'month', 'quarter', 'year' or 'all'")
    total: Decimal = Field(Decimal("0"))
    count: int = Field(0, ge=0)
    by_category: Dict[str, Decimal] = Field(default_factory=dict)

    @field_serializer('total', when_used='json')
    def serialize_total(self, v: Decimal) -> float:
        return float(v)

    @field_serializer('by_category', when_used='json')
    def serialize_by_category(self, v: Dict[str, Decimal]) -> Dict[str, float]:
        return {category: float(amount) for category, amount in v.items()}
