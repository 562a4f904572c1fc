"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
Currently implements a local SQLite file as the backend, but designed to be swappable.
"""

from subtrack.services.storage.interface import (
    BudgetStorageInterface,
    ConnectionError,
    OperationStorageInterface,
    StorageError,
)
from subtrack.services.storage.sqlite import (
    SQLiteBudgetStorage,
    SQLiteDatabase,
    SQLiteOperationStorage,
)

__all__ = [
    # Interfaces
    "BudgetStorageInterface",
    "OperationStorageInterface",
    # Exceptions
    "ConnectionError",
    "StorageError",
    # SQLite implementation
    "SQLiteBudgetStorage",
    "SQLiteDatabase",
    "SQLiteOperationStorage",
]
