"""
Shared fixtures for receipt directory tests.
"""

import sys
from datetime import date
from decimal import Decimal
from pathlib import Path
from unittest.mock import Mock

import pytest
import requests

src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from receipt_directory.models import ExpenseRecord


AUTO_RECEIPT = object()


def make_record(record_id, expense_date, amount="10.00", category="Fuel",
                description="Test receipt", receipt=AUTO_RECEIPT):
    """Build an ExpenseRecord; the receipt URL is derived from the id unless given."""
    if receipt is AUTO_RECEIPT:
        receipt = f"https://files.example.com/{record_id}.jpg"
    return ExpenseRecord(
        id=record_id,
        date=expense_date,
        amount=amount,
        category=category,
        description=description,
        receipt_file_ref=receipt
    )


class FakeSession:
    """Stand-in for requests.Session serving canned responses by URL.

    Values are (content, content_type) tuples or exceptions to raise.
    """

    def __init__(self, responses=None):
        self.responses = responses or {}
        self.requested = []

    def get(self, url, timeout=None):
        self.requested.append(url)
        outcome = self.responses.get(url, (b"image-bytes", "image/jpeg"))
        if isinstance(outcome, Exception):
            raise outcome

        content, content_type = outcome
        response = Mock()
        response.content = content
        response.headers = {"Content-Type": content_type} if content_type else {}
        response.raise_for_status = Mock()
        return response

    def fail(self, url, error=None):
        self.responses[url] = error or requests.ConnectionError("connection refused")

    def close(self):
        pass


@pytest.fixture
def sample_records():
    """A small spread of receipts over two years."""
    return [
        make_record("1", date(2024, 3, 5), "120.00", "Fuel", "Shell #4"),
        make_record("2", date(2024, 3, 18), "45.50", "Tolls", ""),
        make_record("3", date(2024, 1, 9), "300.00", "Maintenance", "Oil change and filters"),
        make_record("4", date(2023, 12, 30), "89.99", "Meals", "Truck stop dinner"),
        make_record("5", date(2023, 6, 1), "1200.00", "Insurance", "Cargo policy"),
        make_record("6", date(2024, 2, 14), "15.00", "Office", "Printer paper", receipt=None),
    ]


@pytest.fixture
def fake_session():
    return FakeSession()
