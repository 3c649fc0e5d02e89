"""
Expense record store for the receipt directory.
SQLite stand-in for the hosted expenses table; the directory only reads from it.
"""

import sqlite3
import logging
from contextlib import contextmanager
from typing import List, Optional

from .models import ExpenseRecord

logger = logging.getLogger(__name__)


class ExpenseStore:
    """Reads expense records from the expenses table."""

    def __init__(self, db_path: str = "expenses.db"):
        """Initialize the store.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = db_path
        self.logger = logger

    @contextmanager
    def get_connection(self):
        """Context manager for database connections with automatic cleanup."""
        conn = None
        try:
            conn = sqlite3.connect(self.db_path)
            conn.row_factory = sqlite3.Row
            yield conn
        except Exception as e:
            if conn:
                conn.rollback()
            self.logger.error(f"Database error: {str(e)}")
            raise
        finally:
            if conn:
                conn.close()

    def initialize_database(self) -> None:
        """Create the expenses table and its indexes."""
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()

                # Amounts and dates stay TEXT: rows are validated on read, not on write
                cursor.execute("""
                    CREATE TABLE IF NOT EXISTS expenses (
                        id TEXT PRIMARY KEY,
                        date TEXT,
                        amount TEXT,
                        category TEXT DEFAULT 'Other',
                        description TEXT,
                        receipt_image TEXT,
                        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    )
                """)

                cursor.execute("CREATE INDEX IF NOT EXISTS idx_expenses_date ON expenses(date)")
                cursor.execute("CREATE INDEX IF NOT EXISTS idx_expenses_category ON expenses(category)")

                conn.commit()
                self.logger.info("Expense store initialized successfully")

        except Exception as e:
            self.logger.error(f"Failed to initialize expense store: {str(e)}")
            raise

    def add_expense(self, record: ExpenseRecord) -> str:
        """Insert an expense record, used for seeding.

        Args:
            record: Record to insert

        Returns:
            ID of the inserted record
        """
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute("""
                    INSERT INTO expenses (id, date, amount, category, description, receipt_image)
                    VALUES (?, ?, ?, ?, ?, ?)
                """, (
                    record.id,
                    record.expense_date.isoformat() if record.expense_date else None,
                    str(record.amount) if record.amount is not None else None,
                    record.category,
                    record.description,
                    record.receipt_file_ref
                ))
                conn.commit()

                self.logger.info(f"Added expense with ID: {record.id}")
                return record.id

        except Exception as e:
            self.logger.error(f"Failed to add expense: {str(e)}")
            raise

    def get_all_expenses(self, limit: Optional[int] = None, offset: int = 0) -> List[ExpenseRecord]:
        """Get all expenses, most recent first, with optional pagination.

        Args:
            limit: Maximum number of expenses to return
            offset: Number of expenses to skip

        Returns:
            List of ExpenseRecord objects
        """
        query = "SELECT * FROM expenses ORDER BY date DESC, created_at DESC"
        params = []

        if limit is not None:
            query += " LIMIT ? OFFSET ?"
            params.extend([limit, offset])

        return self._fetch(query, params)

    def get_expenses_with_receipts(self) -> List[ExpenseRecord]:
        """Get expenses that have a receipt file attached."""
        return self._fetch("""
            SELECT * FROM expenses
            WHERE receipt_image IS NOT NULL AND receipt_image != ''
            ORDER BY date DESC, created_at DESC
        """, [])

    def get_expense_count(self) -> int:
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute("SELECT COUNT(*) FROM expenses")
                return cursor.fetchone()[0]

        except Exception as e:
            self.logger.error(f"Failed to count expenses: {str(e)}")
            raise

    def _fetch(self, query: str, params: list) -> List[ExpenseRecord]:
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute(query, params)
                return [self._row_to_record(row) for row in cursor.fetchall()]

        except Exception as e:
            self.logger.error(f"Failed to load expenses: {str(e)}")
            raise

    def _row_to_record(self, row: sqlite3.Row) -> ExpenseRecord:
        return ExpenseRecord(
            id=row["id"],
            date=row["date"],
            amount=row["amount"],
            category=row["category"],
            description=row["description"],
            receipt_file_ref=row["receipt_image"]
        )
