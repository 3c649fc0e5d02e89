"""
Display formatting helpers for the receipt directory.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union

from .models import DownloadJob

CATEGORY_COLORS = {
    "Fuel": "#b45309",
    "Maintenance": "#1d4ed8",
    "Insurance": "#15803d",
    "Tolls": "#7e22ce",
    "Office": "#374151",
    "Permits": "#4338ca",
    "Meals": "#b91c1c",
    "Other": "#334155",
}


def format_currency(value: Optional[Union[Decimal, float, int]], whole_dollars: bool = True) -> str:
    """Format an amount as USD, rounded to whole dollars by default."""
    amount = Decimal(str(value or 0))
    if whole_dollars:
        amount = amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP)
        sign = "-" if amount < 0 else ""
        return f"{sign}${abs(amount):,.0f}"
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"


def category_color(category: Optional[str]) -> str:
    return CATEGORY_COLORS.get(category or "Other", CATEGORY_COLORS["Other"])


def receipt_count_label(count: int) -> str:
    return f"{count} receipt" if count == 1 else f"{count} receipts"


def progress_label(job: DownloadJob) -> str:
    """Status line shown while an archive is being built."""
    return f"Downloading {job.current}/{job.total}..."
