"""Month queries package."""

from subtrack.queries.month import (
    MonthQueryExecutor,
    compute_balance,
    sort_for_display,
    sum_amounts,
    visible_for_month,
)

__all__ = [
    "MonthQueryExecutor",
    "compute_balance",
    "sort_for_display",
    "sum_amounts",
    "visible_for_month",
]
