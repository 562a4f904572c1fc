"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep the calendar page independent of SQLite
2. Point the tests at a throwaway database file
3. Swap the backend later without touching business logic

The interface is intentionally small - we're not building an ORM.
Just the operations the calendar page needs.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Optional

from subtrack.models.operation import FinancialOperation, MonthlyIncome


class OperationStorageInterface(ABC):
    """
    Abstract interface for financial operation storage.

    Operations are inserted and deleted, never updated in place.
    """

    @abstractmethod
    async def add_operation(self, operation: FinancialOperation) -> int:
        """
        Save an operation.

        Args:
            operation: A validated operation (its id is ignored)

        Returns:
            The identifier assigned by storage

        Raises:
            StorageError: If save fails
        """
        pass

    @abstractmethod
    async def get_operation(self, operation_id: int) -> Optional[FinancialOperation]:
        """
        Retrieve an operation by its ID.

        Returns:
            The operation if found, None otherwise
        """
        pass

    @abstractmethod
    async def delete_operation(self, operation_id: int) -> bool:
        """
        Delete an operation by ID.

        Returns:
            True if a row was deleted, False if the ID did not exist
        """
        pass

    @abstractmethod
    async def list_operations(self) -> list[FinancialOperation]:
        """
        List every stored operation.

        No ordering is guaranteed; callers filter and sort.
        """
        pass


class BudgetStorageInterface(ABC):
    """
    Abstract interface for monthly budgets and incomes.

    There is at most one budget per (month, year); incomes are
    summed per (month, year).
    """

    @abstractmethod
    async def set_monthly_budget(self, month: int, year: int, amount: Decimal) -> None:
        """Insert or replace the budget for a month."""
        pass

    @abstractmethod
    async def get_monthly_budget(self, month: int, year: int) -> Optional[Decimal]:
        """Budget for a month, or None if it was never set."""
        pass

    @abstractmethod
    async def add_monthly_income(
        self,
        title: str,
        amount: Decimal,
        month: int,
        year: int,
    ) -> int:
        """Record an income line for a month and return its ID."""
        pass

    @abstractmethod
    async def list_monthly_incomes(self, month: int, year: int) -> list[MonthlyIncome]:
        """All income lines for a month."""
        pass

    @abstractmethod
    async def total_monthly_income(self, month: int, year: int) -> Decimal:
        """Sum of income for a month, zero if none."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class ConnectionError(StorageError):
    """Could not open the storage backend."""
    pass
