"""Services package."""

from subtrack.services.storage import (
    BudgetStorageInterface,
    ConnectionError,
    OperationStorageInterface,
    SQLiteBudgetStorage,
    SQLiteDatabase,
    SQLiteOperationStorage,
    StorageError,
)

__all__ = [
    "BudgetStorageInterface",
    "ConnectionError",
    "OperationStorageInterface",
    "SQLiteBudgetStorage",
    "SQLiteDatabase",
    "SQLiteOperationStorage",
    "StorageError",
]
