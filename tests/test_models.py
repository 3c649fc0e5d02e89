"""
Unit tests for Pydantic models in the receipt directory.
Tests coercion of backend values, filter validation and folder node behavior.
"""

import pytest
from datetime import date, datetime
from decimal import Decimal
from pydantic import ValidationError

from receipt_directory.models import (
    ExpenseRecord, DirectoryFilters, MonthNode, YearNode, DownloadJob,
    JobStatus, ExpenseStats, parse_expense_date, parse_amount
)


class TestExpenseRecordModel:
    """Test cases for the ExpenseRecord model."""

    def test_valid_record_creation(self):
        """Test creating a valid record using backend column names."""
        record = ExpenseRecord(
            id="abc",
            date="2024-03-05",
            amount="120.00",
            category="Fuel",
            description="Shell #4",
            receipt_file_ref="https://files.example.com/abc.jpg"
        )

        assert record.id == "abc"
        assert record.expense_date == date(2024, 3, 5)
        assert record.amount == Decimal("120.00")
        assert record.category == "Fuel"
        assert record.has_receipt

    def test_integer_id_coerced_to_string(self):
        record = ExpenseRecord(id=42, date="2024-01-01")
        assert record.id == "42"

    def test_empty_id_rejected(self):
        with pytest.raises(ValidationError):
            ExpenseRecord(id="  ", date="2024-01-01")

    def test_date_variants(self):
        """Test dates given as datetime, timestamp string and date."""
        assert ExpenseRecord(id="1", date=datetime(2024, 5, 1, 13, 30)).expense_date == date(2024, 5, 1)
        assert ExpenseRecord(id="1", date="2024-05-01T08:00:00Z").expense_date == date(2024, 5, 1)
        assert ExpenseRecord(id="1", date=date(2024, 5, 1)).expense_date == date(2024, 5, 1)
        assert ExpenseRecord(id="1", expense_date=date(2024, 5, 1)).expense_date == date(2024, 5, 1)

    def test_unparseable_date_becomes_none(self):
        record = ExpenseRecord(id="1", date="not a date")
        assert record.expense_date is None

    def test_non_numeric_amount_becomes_none(self):
        """Test that bad amounts never raise."""
        assert ExpenseRecord(id="1", amount="abc").amount is None
        assert ExpenseRecord(id="1", amount=None).amount is None
        assert ExpenseRecord(id="1", amount="NaN").amount is None
        assert ExpenseRecord(id="1", amount="abc").amount_or_zero == Decimal("0")

    def test_category_normalization(self):
        """Test category matching is case-insensitive and unknowns become Other."""
        assert ExpenseRecord(id="1", category="tolls").category == "Tolls"
        assert ExpenseRecord(id="1", category="Groceries").category == "Other"
        assert ExpenseRecord(id="1", category=None).category == "Other"

    def test_blank_receipt_reference(self):
        record = ExpenseRecord(id="1", receipt_file_ref="   ")
        assert record.receipt_file_ref is None
        assert not record.has_receipt

    def test_record_is_immutable(self):
        record = ExpenseRecord(id="1", description="Original")
        with pytest.raises(ValidationError):
            record.description = "Changed"


class TestParsingHelpers:
    """Test cases for the coercion helpers."""

    def test_parse_expense_date_empty(self):
        assert parse_expense_date(None) is None
        assert parse_expense_date("") is None

    def test_parse_expense_date_unknown_type(self):
        assert parse_expense_date(12345) is None

    def test_parse_amount_numbers(self):
        assert parse_amount(45.5) == Decimal("45.5")
        assert parse_amount(" 12.30 ") == Decimal("12.30")
        assert parse_amount(True) is None


class TestDirectoryFiltersModel:
    """Test cases for the DirectoryFilters model."""

    def test_defaults(self):
        filters = DirectoryFilters()
        assert filters.search_text == ""
        assert filters.year == "all"
        assert filters.category == "all"

    def test_year_coercion(self):
        assert DirectoryFilters(year="2024").year == 2024
        assert DirectoryFilters(year=2023).year == 2023
        assert DirectoryFilters(year="ALL").year == "all"
        assert DirectoryFilters(year=None).year == "all"

    def test_invalid_year(self):
        with pytest.raises(ValidationError):
            DirectoryFilters(year="last year")

    def test_empty_values_normalized(self):
        filters = DirectoryFilters(search_text=None, category="")
        assert filters.search_text == ""
        assert filters.category == "all"


class TestFolderNodes:
    """Test cases for MonthNode and YearNode."""

    def test_month_node_name(self):
        assert MonthNode.for_month(0).name == "January"
        assert MonthNode.for_month(2).name == "March"
        assert MonthNode.for_month(11).name == "December"

    def test_month_index_bounds(self):
        with pytest.raises(ValidationError):
            MonthNode(month_index=12, name="Smarch")

    def test_year_node_ordering(self):
        """Test months are listed most recent first and records in calendar order."""
        january = MonthNode.for_month(0)
        january.records.append(ExpenseRecord(id="jan", date="2024-01-10"))
        march = MonthNode.for_month(2)
        march.records.append(ExpenseRecord(id="mar", date="2024-03-10"))

        node = YearNode(year=2024, months={2: march, 0: january})

        assert [m.name for m in node.sorted_months()] == ["March", "January"]
        assert [r.id for r in node.all_records()] == ["jan", "mar"]
        assert node.count == 2


class TestDownloadJobModel:
    """Test cases for the DownloadJob model."""

    def test_defaults(self):
        job = DownloadJob(archive_name="receipts-2024")
        assert job.status == JobStatus.PENDING
        assert job.filename == "receipts-2024.zip"
        assert job.progress == 0.0

    def test_progress(self):
        job = DownloadJob(archive_name="x", current=1, total=4)
        assert job.progress == 0.25

    def test_negative_counter_rejected(self):
        with pytest.raises(ValidationError):
            DownloadJob(archive_name="x", current=-1)


class TestExpenseStatsModel:

    def test_defaults(self):
        stats = ExpenseStats()
        assert stats.total == Decimal("0")
        assert stats.count == 0
        assert stats.by_category == {}

    def test_json_dump_uses_floats(self):
        stats = ExpenseStats(total=Decimal("165.50"), count=2, by_category={"Fuel": Decimal("120.00")})

        dumped = stats.model_dump(mode="json")

        assert dumped["total"] == 165.5
        assert dumped["by_category"] == {"Fuel": 120.0}
        assert stats.model_dump()["total"] == Decimal("165.50")
