"""
Month Queries

Decides which stored operations belong to a displayed month and
computes the month's balance.

An operation is visible in a month when its own date falls in
that month, or when it is recurring. A recurring operation has
no interval and no end: it shows up in every month displayed,
before or after the month it was created in, unless
recurring_since_start is set.

Balance:
    budget (0 when unset) + total monthly income + sum of the
    signed amounts of the visible operations

Expenses are stored negative, so they lower the balance.
"""

from decimal import Decimal
from typing import Iterable, Optional

from subtrack.calendar.grid import check_month
from subtrack.models.operation import FinancialOperation, MonthSummary
from subtrack.services.storage import BudgetStorageInterface, OperationStorageInterface


ZERO = Decimal("0.00")


def visible_for_month(
    operations: Iterable[FinancialOperation],
    year: int,
    month: int,
    recurring_since_start: bool = False,
) -> list[FinancialOperation]:
    """
    Filter operations down to those shown for (year, month).

    Args:
        operations: All stored operations
        recurring_since_start: Hide recurring operations in months
            before their own month
    """
    check_month(month)
    visible = []
    for operation in operations:
        if operation.occurs_in(year, month):
            visible.append(operation)
        elif operation.is_recurrent:
            if recurring_since_start and (operation.date.year, operation.date.month) > (year, month):
                continue
            visible.append(operation)
    return visible


def sum_amounts(operations: Iterable[FinancialOperation]) -> Decimal:
    """Signed total of the operations."""
    return sum((operation.amount for operation in operations), ZERO)


def compute_balance(
    budget: Optional[Decimal],
    total_income: Decimal,
    operations: Iterable[FinancialOperation],
) -> Decimal:
    """Balance of a month from its budget, income and visible operations."""
    return (budget or ZERO) + total_income + sum_amounts(operations)


def sort_for_display(operations: Iterable[FinancialOperation]) -> list[FinancialOperation]:
    """
    Order used by the operation list.

    One-off operations by date, then recurring ones by day of month.
    """
    return sorted(
        operations,
        key=lambda op: (op.is_recurrent, op.date.day if op.is_recurrent else op.date.toordinal(), op.id or 0),
    )


class MonthQueryExecutor:
    """
    Executes month-scoped queries against storage.

    GUARANTEES:
    - Only returns data read from storage
    - Storage errors propagate unchanged
    """

    def __init__(
        self,
        operation_storage: OperationStorageInterface,
        budget_storage: BudgetStorageInterface,
        recurring_since_start: bool = False,
    ):
        self._operations = operation_storage
        self._budgets = budget_storage
        self._recurring_since_start = recurring_since_start

    async def visible_operations(self, year: int, month: int) -> list[FinancialOperation]:
        """Operations shown for a month, in display order."""
        all_operations = await self._operations.list_operations()
        return sort_for_display(visible_for_month(
            all_operations,
            year,
            month,
            recurring_since_start=self._recurring_since_start,
        ))

    async def compute_balance(self, year: int, month: int) -> Decimal:
        """Balance of a month."""
        summary = await self.summarize(year, month)
        return summary.balance

    async def summarize(self, year: int, month: int) -> MonthSummary:
        """Everything the calendar page shows for a month."""
        check_month(month)
        operations = await self.visible_operations(year, month)
        budget = await self._budgets.get_monthly_budget(month, year)
        total_income = await self._budgets.total_monthly_income(month, year)

        return MonthSummary(
            year=year,
            month=month,
            budget=budget,
            total_income=total_income,
            operations=operations,
            operations_total=sum_amounts(operations),
            balance=compute_balance(budget, total_income, operations),
        )
