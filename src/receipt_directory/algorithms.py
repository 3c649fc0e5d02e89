"""
Filtering, folder indexing and aggregation for the receipt directory.
Implements the record filter, the year/month folder index and dashboard totals.
"""

import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import List, Dict, Optional, Tuple, Iterable
from collections import defaultdict
import pandas as pd

from .models import (
    ExpenseRecord, DirectoryFilters, YearNode, MonthNode, ExpenseStats,
    EXPENSE_CATEGORIES, ALL
)

logger = logging.getLogger(__name__)

FolderTree = Dict[int, YearNode]


class ReceiptFilter:
    """Reduces the record set to the receipts matching the directory filters."""

    def __init__(self):
        self.logger = logger

    def eligible(self, records: Iterable[ExpenseRecord]) -> List[ExpenseRecord]:
        """Records that carry a receipt file reference."""
        return [record for record in records if record.has_receipt]

    def filter(self, records: Iterable[ExpenseRecord], filters: Optional[DirectoryFilters] = None) -> List[ExpenseRecord]:
        """Apply year, category and search predicates to receipt-bearing records.

        Args:
            records: Records as loaded by the host page
            filters: Filter criteria, everything matches when omitted

        Returns:
            Matching records in input order
        """
        filters = filters or DirectoryFilters()
        query = filters.search_text.lower()

        return [
            record for record in self.eligible(records)
            if self.matches_year(record, filters.year)
            and self.matches_category(record, filters.category)
            and self.matches_search(record, query)
        ]

    @staticmethod
    def matches_year(record: ExpenseRecord, year) -> bool:
        if year == ALL:
            return True
        return record.expense_date is not None and record.expense_date.year == year

    @staticmethod
    def matches_category(record: ExpenseRecord, category: str) -> bool:
        return category == ALL or record.category == category

    @staticmethod
    def matches_search(record: ExpenseRecord, query: str) -> bool:
        """Substring match on description or category; query must be lower-cased."""
        if not query:
            return True
        description = (record.description or "").lower()
        return query in description or query in record.category.lower()

    def available_years(self, records: Iterable[ExpenseRecord]) -> List[int]:
        """Distinct years of dated receipts, most recent first."""
        years = {r.expense_date.year for r in self.eligible(records) if r.expense_date}
        return sorted(years, reverse=True)

    def available_categories(self, records: Iterable[ExpenseRecord]) -> List[str]:
        """Distinct categories of receipts, alphabetical."""
        return sorted({r.category for r in self.eligible(records)})


class FolderIndexer:
    """Groups filtered receipts into a year -> month folder tree with running totals."""

    def __init__(self):
        self.logger = logger

    def index(self, records: Iterable[ExpenseRecord]) -> FolderTree:
        """Build the folder tree.

        Records without a usable date are left out of the tree. Missing or
        non-numeric amounts count as zero.

        Args:
            records: Filtered receipt records

        Returns:
            Mapping of calendar year to YearNode
        """
        tree: FolderTree = {}
        skipped = 0

        for record in records:
            if record.expense_date is None:
                skipped += 1
                self.logger.debug(f"Record {record.id} has no usable date, not indexed")
                continue

            year = record.expense_date.year
            month_index = record.expense_date.month - 1
            amount = record.amount_or_zero

            year_node = tree.get(year)
            if year_node is None:
                year_node = tree[year] = YearNode(year=year)

            month_node = year_node.months.get(month_index)
            if month_node is None:
                month_node = year_node.months[month_index] = MonthNode.for_month(month_index)

            month_node.records.append(record)
            month_node.total_amount += amount
            year_node.total_amount += amount

        if skipped:
            self.logger.info(f"Skipped {skipped} receipt(s) without a valid date")

        return tree

    @staticmethod
    def sorted_years(tree: FolderTree, descending: bool = True) -> List[YearNode]:
        """Year folders in display order (most recent first by default)."""
        return [tree[year] for year in sorted(tree, reverse=descending)]

    @staticmethod
    def count_records(tree: FolderTree) -> int:
        return sum(node.count for node in tree.values())

    @staticmethod
    def total_amount(tree: FolderTree) -> Decimal:
        return sum((node.total_amount for node in tree.values()), Decimal("0"))

    @staticmethod
    def year_records(tree: FolderTree, year: int) -> List[ExpenseRecord]:
        """All records in a year folder, empty if the folder does not exist."""
        node = tree.get(year)
        return node.all_records() if node else []

    @staticmethod
    def month_records(tree: FolderTree, year: int, month_index: int) -> List[ExpenseRecord]:
        """All records in a month folder, empty if the folder does not exist."""
        node = tree.get(year)
        if node is None or month_index not in node.months:
            return []
        return list(node.months[month_index].records)


class ExpenseAnalytics:
    """Aggregation functions for the expense dashboard."""

    PERIODS = ("month", "quarter", "year", "all")

    def __init__(self):
        self.logger = logger

    def period_range(self, period: str, today: Optional[date] = None) -> Optional[Tuple[date, date]]:
        """Inclusive date range for a period containing `today`, None for 'all'."""
        today = today or date.today()

        if period == "month":
            start = today.replace(day=1)
            end = self._month_end(today.year, today.month)
        elif period == "quarter":
            first_month = (today.month - 1) // 3 * 3 + 1
            start = date(today.year, first_month, 1)
            end = self._month_end(today.year, first_month + 2)
        elif period == "year":
            start = date(today.year, 1, 1)
            end = date(today.year, 12, 31)
        else:
            return None

        return start, end

    def calculate_stats(self, records: Iterable[ExpenseRecord], period: str = "month",
                        today: Optional[date] = None) -> ExpenseStats:
        """Total and per-category spending for a period.

        Args:
            records: Expense records, with or without receipts
            period: 'month', 'quarter', 'year' or 'all'
            today: Reference date, defaults to today

        Returns:
            ExpenseStats with every known category present
        """
        if period not in self.PERIODS:
            self.logger.warning(f"Unknown stats period '{period}', using 'all'")
            period = "all"

        date_range = self.period_range(period, today)
        by_category = {category: Decimal("0") for category in EXPENSE_CATEGORIES}
        total = Decimal("0")
        count = 0

        for record in records:
            if date_range is not None:
                if record.expense_date is None:
                    continue
                if not (date_range[0] <= record.expense_date <= date_range[1]):
                    continue

            amount = record.amount_or_zero
            total += amount
            by_category[record.category] += amount
            count += 1

        return ExpenseStats(period=period, total=total, count=count, by_category=by_category)

    def monthly_totals(self, records: Iterable[ExpenseRecord]) -> pd.DataFrame:
        """Spending per calendar month as a DataFrame with month, total and count columns."""
        totals = defaultdict(lambda: {"total": Decimal("0"), "count": 0})

        for record in records:
            if record.expense_date is None:
                continue
            month_key = record.expense_date.strftime("%Y-%m")
            totals[month_key]["total"] += record.amount_or_zero
            totals[month_key]["count"] += 1

        rows = [
            {"month": month, "total": float(data["total"]), "count": data["count"]}
            for month, data in sorted(totals.items())
        ]
        return pd.DataFrame(rows, columns=["month", "total", "count"])

    @staticmethod
    def _month_end(year: int, month: int) -> date:
        if month == 12:
            return date(year, 12, 31)
        return date(year, month + 1, 1) - timedelta(days=1)
