"""
SQLite Storage Implementation

DESIGN DECISION: A local SQLite file is the only backend because:
1. The app is single-user and offline
2. No database server to set up
3. The file can be copied to back it up

Every call opens its own connection and closes it when done,
even on failure. Statements are parameterized; each write is a
single statement committed on its own.

Dates are stored as ISO text (YYYY-MM-DD) and amounts as REAL,
read back as Decimals rounded to the cent.
"""

import sqlite3
from contextlib import closing, contextmanager
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Iterator, Optional, Union

from subtrack.config import get_settings
from subtrack.models.operation import CENT, FinancialOperation, MonthlyIncome
from subtrack.services.storage.interface import (
    BudgetStorageInterface,
    ConnectionError,
    OperationStorageInterface,
    StorageError,
)


SCHEMA = """
CREATE TABLE IF NOT EXISTS FinancialOperations (
    Id INTEGER PRIMARY KEY AUTOINCREMENT,
    Title TEXT NOT NULL,
    Amount REAL NOT NULL,
    Date TEXT NOT NULL,
    Category TEXT,
    IsRecurrent INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS MonthlyBudgets (
    Id INTEGER PRIMARY KEY AUTOINCREMENT,
    Month INTEGER NOT NULL,
    Year INTEGER NOT NULL,
    Budget REAL NOT NULL,
    UNIQUE (Month, Year)
);

CREATE TABLE IF NOT EXISTS MonthlyIncomes (
    Id INTEGER PRIMARY KEY AUTOINCREMENT,
    Title TEXT NOT NULL,
    Amount REAL NOT NULL,
    Month INTEGER NOT NULL,
    Year INTEGER NOT NULL
);
"""


def _to_decimal(value: Union[float, int, str]) -> Decimal:
    # str() first so 0.1 stays 0.1 instead of its binary expansion
    return Decimal(str(value)).quantize(CENT)


class SQLiteDatabase:
    """
    Low-level SQLite wrapper.

    Owns the database path and the schema. Constructed once at
    startup and passed to the stores that need it.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self._path = Path(path) if path else get_settings().database.path
        self._initialized = False

    @property
    def path(self) -> Path:
        return self._path

    @contextmanager
    def connect(self) -> Iterator[sqlite3.Connection]:
        """
        Open a connection for the duration of one call.

        The connection is closed unconditionally on exit.
        """
        try:
            connection = sqlite3.connect(str(self._path))
        except sqlite3.Error as e:
            raise ConnectionError(f"Failed to open database {self._path}: {e}") from e

        with closing(connection):
            connection.row_factory = sqlite3.Row
            yield connection

    def initialize(self) -> None:
        """Create the database file and tables if missing."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConnectionError(f"Cannot create database folder: {e}") from e

        with self.connect() as connection:
            try:
                connection.executescript(SCHEMA)
                connection.commit()
            except sqlite3.Error as e:
                raise StorageError(f"Failed to create schema: {e}") from e
        self._initialized = True

    def close(self) -> None:
        """
        Shutdown hook.

        Connections are never kept open between calls, so there is
        nothing to release; the database must be initialized again
        before further use.
        """
        self._initialized = False

    @property
    def is_initialized(self) -> bool:
        return self._initialized


class SQLiteOperationStorage(OperationStorageInterface):
    """
    SQLite implementation of operation storage.

    One row per operation in FinancialOperations.
    """

    def __init__(self, database: SQLiteDatabase):
        self._db = database

    def _row_to_operation(self, row: sqlite3.Row) -> FinancialOperation:
        """Convert a FinancialOperations row to a FinancialOperation."""
        return FinancialOperation(
            id=row["Id"],
            title=row["Title"],
            amount=_to_decimal(row["Amount"]),
            date=date.fromisoformat(row["Date"]),
            category=row["Category"] or "",
            is_recurrent=bool(row["IsRecurrent"]),
        )

    async def add_operation(self, operation: FinancialOperation) -> int:
        """Insert an operation and return its new ID."""
        try:
            with self._db.connect() as connection:
                cursor = connection.execute(
                    "INSERT INTO FinancialOperations (Title, Amount, Date, Category, IsRecurrent) "
                    "VALUES (?, ?, ?, ?, ?)",
                    (
                        operation.title,
                        float(operation.amount),
                        operation.date.isoformat(),
                        operation.category,
                        int(operation.is_recurrent),
                    ),
                )
                connection.commit()
                return cursor.lastrowid
        except sqlite3.Error as e:
            raise StorageError(f"Failed to save operation: {e}") from e

    async def get_operation(self, operation_id: int) -> Optional[FinancialOperation]:
        """Retrieve an operation by its ID."""
        try:
            with self._db.connect() as connection:
                row = connection.execute(
                    "SELECT Id, Title, Amount, Date, Category, IsRecurrent "
                    "FROM FinancialOperations WHERE Id = ?",
                    (operation_id,),
                ).fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to get operation: {e}") from e

        return self._row_to_operation(row) if row else None

    async def delete_operation(self, operation_id: int) -> bool:
        """Delete an operation; a missing ID is not an error."""
        try:
            with self._db.connect() as connection:
                cursor = connection.execute(
                    "DELETE FROM FinancialOperations WHERE Id = ?",
                    (operation_id,),
                )
                connection.commit()
                return cursor.rowcount > 0
        except sqlite3.Error as e:
            raise StorageError(f"Failed to delete operation: {e}") from e

    async def list_operations(self) -> list[FinancialOperation]:
        """List every stored operation."""
        try:
            with self._db.connect() as connection:
                rows = connection.execute(
                    "SELECT Id, Title, Amount, Date, Category, IsRecurrent "
                    "FROM FinancialOperations"
                ).fetchall()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to list operations: {e}") from e

        return [self._row_to_operation(row) for row in rows]


class SQLiteBudgetStorage(BudgetStorageInterface):
    """
    SQLite implementation of budget and income storage.

    MonthlyBudgets has a UNIQUE (Month, Year) constraint that backs
    the upsert; MonthlyIncomes is append-only.
    """

    def __init__(self, database: SQLiteDatabase):
        self._db = database

    async def set_monthly_budget(self, month: int, year: int, amount: Decimal) -> None:
        """Insert or replace the budget for a month."""
        try:
            with self._db.connect() as connection:
                connection.execute(
                    "INSERT INTO MonthlyBudgets (Month, Year, Budget) VALUES (?, ?, ?) "
                    "ON CONFLICT (Month, Year) DO UPDATE SET Budget = excluded.Budget",
                    (month, year, float(amount)),
                )
                connection.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to set budget: {e}") from e

    async def get_monthly_budget(self, month: int, year: int) -> Optional[Decimal]:
        """Budget for a month, or None."""
        try:
            with self._db.connect() as connection:
                row = connection.execute(
                    "SELECT Budget FROM MonthlyBudgets WHERE Month = ? AND Year = ?",
                    (month, year),
                ).fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to get budget: {e}") from e

        return _to_decimal(row["Budget"]) if row else None

    async def add_monthly_income(
        self,
        title: str,
        amount: Decimal,
        month: int,
        year: int,
    ) -> int:
        """Record an income line for a month."""
        try:
            with self._db.connect() as connection:
                cursor = connection.execute(
                    "INSERT INTO MonthlyIncomes (Title, Amount, Month, Year) VALUES (?, ?, ?, ?)",
                    (title, float(amount), month, year),
                )
                connection.commit()
                return cursor.lastrowid
        except sqlite3.Error as e:
            raise StorageError(f"Failed to save income: {e}") from e

    async def list_monthly_incomes(self, month: int, year: int) -> list[MonthlyIncome]:
        """All income lines for a month."""
        try:
            with self._db.connect() as connection:
                rows = connection.execute(
                    "SELECT Id, Title, Amount, Month, Year FROM MonthlyIncomes "
                    "WHERE Month = ? AND Year = ? ORDER BY Id",
                    (month, year),
                ).fetchall()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to list incomes: {e}") from e

        return [
            MonthlyIncome(
                id=row["Id"],
                title=row["Title"],
                amount=_to_decimal(row["Amount"]),
                month=row["Month"],
                year=row["Year"],
            )
            for row in rows
        ]

    async def total_monthly_income(self, month: int, year: int) -> Decimal:
        """Sum of income for a month, zero if none."""
        try:
            with self._db.connect() as connection:
                row = connection.execute(
                    "SELECT COALESCE(SUM(Amount), 0) AS Total FROM MonthlyIncomes "
                    "WHERE Month = ? AND Year = ?",
                    (month, year),
                ).fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to sum incomes: {e}") from e

        return _to_decimal(row["Total"])
