"""
Integration tests for the calendar page flow.

The flow runs against a real SQLite file (see conftest.py) with
the cursor on March 2025.
"""

import asyncio
import pytest
from datetime import date
from decimal import Decimal

from subtrack.audit import AuditLogger
from subtrack.calendar import CalendarCursor, YearRangeError, month_number
from subtrack.models.audit import AuditEventType
from subtrack.models.operation import OperationDraft, OperationKind
from subtrack.orchestrator import CalendarPageFlow, create_app_components
from subtrack.services.storage import StorageError
from subtrack.validation import OperationValidationError


def make_draft(**overrides) -> OperationDraft:
    data = {
        "title": "Groceries",
        "amount": Decimal("200"),
        "kind": OperationKind.EXPENSE,
        "date": date(2025, 3, 10),
        "category": "Food",
    }
    data.update(overrides)
    return OperationDraft(**data)


def event_types(flow: CalendarPageFlow) -> list[AuditEventType]:
    return [event.event_type for event in flow.audit_logger.history]


class TestRefresh:
    """Tests for loading the displayed month."""

    def test_initial_state(self, flow):
        assert flow.summary is None
        assert flow.is_stale is True
        assert flow.operations == []
        assert flow.balance == Decimal("0.00")

    def test_refresh_loads_month(self, flow):
        summary = asyncio.run(flow.refresh())
        assert summary.year == 2025
        assert summary.month == 3
        assert flow.is_stale is False

    def test_ensure_fresh_reuses_summary(self, flow):
        first = asyncio.run(flow.ensure_fresh())
        second = asyncio.run(flow.ensure_fresh())
        assert first is second

    def test_cursor_move_marks_stale(self, flow):
        asyncio.run(flow.refresh())
        flow.cursor.month = 4
        assert flow.is_stale is True


class TestAddOperation:
    """Tests for the add-operation flow."""

    def test_add_then_visible(self, flow):
        stored = asyncio.run(flow.add_operation(make_draft()))

        assert stored.id is not None
        assert stored.amount == Decimal("-200.00")
        assert [op.id for op in flow.operations] == [stored.id]
        assert flow.balance == Decimal("-200.00")
        assert AuditEventType.OPERATION_ADDED in event_types(flow)

    def test_invalid_draft_changes_nothing(self, flow, operation_storage):
        asyncio.run(flow.refresh())
        before = flow.summary

        with pytest.raises(OperationValidationError):
            asyncio.run(flow.add_operation(make_draft(title="")))

        assert flow.summary is before
        assert asyncio.run(operation_storage.list_operations()) == []
        assert event_types(flow)[-1] == AuditEventType.VALIDATION_FAILED

    def test_storage_failure_keeps_summary(self, flow, database):
        asyncio.run(flow.refresh())
        before = flow.summary
        with database.connect() as connection:
            connection.execute("DROP TABLE FinancialOperations")
            connection.commit()

        with pytest.raises(StorageError):
            asyncio.run(flow.add_operation(make_draft()))

        assert flow.summary is before
        assert event_types(flow)[-1] == AuditEventType.STORAGE_ERROR

    def test_oversized_amount_is_a_validation_error(self, flow, operation_storage):
        """Test that an amount too large to round is rejected like any invalid input."""
        with pytest.raises(OperationValidationError) as exc_info:
            asyncio.run(flow.add_operation(make_draft(amount=Decimal("1e30"))))

        assert exc_info.value.result.error_fields == ["amount"]
        assert asyncio.run(operation_storage.list_operations()) == []

    def test_reload_failure_after_save_keeps_the_save(self, flow, database, operation_storage):
        """Test that a stored operation is returned even if the month cannot be reloaded."""
        asyncio.run(flow.refresh())
        before = flow.summary
        with database.connect() as connection:
            connection.execute("DROP TABLE MonthlyBudgets")
            connection.commit()

        stored = asyncio.run(flow.add_operation(make_draft(title="Rent")))

        assert stored.id is not None
        assert [op.title for op in asyncio.run(operation_storage.list_operations())] == ["Rent"]
        assert flow.summary is before
        assert flow.is_stale is True
        assert event_types(flow)[-2:] == [
            AuditEventType.OPERATION_ADDED,
            AuditEventType.STORAGE_ERROR,
        ]
        with pytest.raises(StorageError):
            asyncio.run(flow.ensure_fresh())

    def test_recurring_shows_in_other_months(self, flow):
        asyncio.run(flow.add_operation(make_draft(title="Rent", is_recurrent=True)))
        asyncio.run(flow.add_operation(make_draft(title="Cinema")))

        asyncio.run(flow.next_month())
        assert [op.title for op in flow.operations] == ["Rent"]

        asyncio.run(flow.previous_month())
        asyncio.run(flow.previous_month())
        assert [op.title for op in flow.operations] == ["Rent"]

    def test_income_kind(self, flow):
        stored = asyncio.run(flow.add_operation(make_draft(kind=OperationKind.INCOME)))
        assert stored.amount == Decimal("200.00")
        assert flow.balance == Decimal("200.00")


class TestDeleteOperation:
    """Tests for deleting operations."""

    def test_delete_removes_from_month(self, flow):
        stored = asyncio.run(flow.add_operation(make_draft()))

        assert asyncio.run(flow.delete_operation(stored.id)) is True
        assert flow.operations == []
        assert flow.balance == Decimal("0.00")

    def test_delete_missing_id(self, flow):
        assert asyncio.run(flow.delete_operation(12345)) is False
        assert event_types(flow)[-1] == AuditEventType.OPERATION_NOT_FOUND


class TestBudgetAndIncome:
    """Tests for the month's budget and income."""

    def test_balance_with_budget_and_income(self, flow):
        """Test budget 1000 + income 500 - expense 200."""
        asyncio.run(flow.set_monthly_budget(Decimal("1000")))
        asyncio.run(flow.add_monthly_income("Salary", Decimal("500")))
        asyncio.run(flow.add_operation(make_draft()))

        assert flow.balance == Decimal("1300.00")
        assert flow.summary.total_expenses == Decimal("200.00")

    def test_budget_replaced(self, flow):
        asyncio.run(flow.set_monthly_budget(Decimal("1000")))
        asyncio.run(flow.set_monthly_budget(Decimal("750")))
        assert flow.summary.budget == Decimal("750.00")

    def test_budget_is_per_month(self, flow):
        asyncio.run(flow.set_monthly_budget(Decimal("1000")))
        asyncio.run(flow.next_month())
        assert flow.summary.budget is None
        assert flow.balance == Decimal("0.00")

    def test_oversized_budget_rejected(self, flow, budget_storage):
        with pytest.raises(ValueError):
            asyncio.run(flow.set_monthly_budget(Decimal("1e30")))
        assert asyncio.run(budget_storage.get_monthly_budget(3, 2025)) is None

    def test_income_saved_when_reload_fails(self, flow, database, budget_storage):
        with database.connect() as connection:
            connection.execute("DROP TABLE FinancialOperations")
            connection.commit()

        income = asyncio.run(flow.add_monthly_income("Salary", Decimal("500")))

        assert income.id is not None
        assert asyncio.run(budget_storage.total_monthly_income(3, 2025)) == Decimal("500.00")
        assert flow.is_stale is True

    def test_income_must_be_positive(self, flow, budget_storage):
        with pytest.raises(ValueError):
            asyncio.run(flow.add_monthly_income("Salary", Decimal("0")))
        assert asyncio.run(budget_storage.total_monthly_income(3, 2025)) == Decimal("0.00")

    def test_list_incomes(self, flow):
        asyncio.run(flow.add_monthly_income("Salary", Decimal("500")))
        incomes = asyncio.run(flow.list_monthly_incomes())
        assert [income.title for income in incomes] == ["Salary"]
        assert (incomes[0].month, incomes[0].year) == (3, 2025)


class TestNavigation:
    """Tests for month navigation and day selection."""

    def test_next_month_rolls_year(self, operation_storage, budget_storage, validator):
        flow = CalendarPageFlow(
            operation_storage,
            budget_storage,
            cursor=CalendarCursor(2025, 12),
            validator=validator,
            recurring_since_start=False,
        )
        summary = asyncio.run(flow.next_month())
        assert (summary.year, summary.month) == (2026, 1)

    def test_next_month_stops_at_year_9999(self, operation_storage, budget_storage, validator):
        flow = CalendarPageFlow(
            operation_storage,
            budget_storage,
            cursor=CalendarCursor(9999, 12),
            validator=validator,
            recurring_since_start=False,
        )
        asyncio.run(flow.refresh())

        with pytest.raises(YearRangeError):
            asyncio.run(flow.next_month())
        assert (flow.summary.year, flow.summary.month) == (9999, 12)
        assert flow.grid(today=date(2025, 1, 1)).title == "December 9999"

    def test_go_to(self, flow):
        summary = asyncio.run(flow.go_to(2024, 7))
        assert (summary.year, summary.month) == (2024, 7)
        assert AuditEventType.MONTH_CHANGED in event_types(flow)

    def test_go_to_month_by_name(self, flow):
        """Test the month picker path: a month name and a year."""
        summary = asyncio.run(flow.go_to(2026, month_number("October")))
        assert (summary.year, summary.month) == (2026, 10)
        assert flow.grid(today=date(2026, 10, 1)).title == "October 2026"

    def test_grid_follows_cursor(self, flow):
        flow.toggle_day(14)
        grid = flow.grid(today=date(2025, 3, 1))
        assert grid.title == "March 2025"
        assert [cell.day for cell in grid.days if cell.is_selected] == [14]

    def test_toggle_day(self, flow):
        assert flow.toggle_day(14) == 14
        assert flow.toggle_day(14) is None

    def test_new_draft_uses_selected_day(self, flow):
        flow.toggle_day(14)
        assert flow.new_draft().date == date(2025, 3, 14)

    def test_new_draft_defaults_to_first(self, flow):
        """Test the default date when the month is not the current one."""
        assert flow.new_draft().date == date(2025, 3, 1)

    def test_new_draft_defaults_to_today(self, operation_storage, budget_storage, validator):
        flow = CalendarPageFlow(
            operation_storage,
            budget_storage,
            cursor=CalendarCursor(),
            validator=validator,
            recurring_since_start=False,
        )
        assert flow.new_draft().date == date.today()


class TestNotifications:
    """Tests for what subscribers receive."""

    def test_refresh_notifies(self, flow):
        received = []
        flow.subscribe(received.append)

        asyncio.run(flow.refresh())
        assert received == ["operations", "balance", "summary"]

    def test_cursor_changes_forwarded(self, flow):
        received = []
        flow.subscribe(received.append)

        flow.toggle_day(3)
        asyncio.run(flow.next_month())
        assert received == [
            "selected_day",
            "selected_day", "month",
            "operations", "balance", "summary",
        ]

    def test_failed_add_does_not_notify(self, flow):
        received = []
        flow.subscribe(received.append)

        with pytest.raises(OperationValidationError):
            asyncio.run(flow.add_operation(make_draft(amount=Decimal("-1"))))
        assert received == []

    def test_unsubscribe(self, flow):
        received = []
        unsubscribe = flow.subscribe(received.append)
        unsubscribe()

        asyncio.run(flow.refresh())
        assert received == []


class TestAppComponents:
    """Tests for the factory used by the Streamlit app."""

    def test_create_app_components(self, tmp_path):
        path = tmp_path / "app" / "expenses.db"
        flow, database = create_app_components(database_path=str(path))

        assert database.is_initialized
        assert path.exists()
        assert isinstance(flow, CalendarPageFlow)
        assert isinstance(flow.audit_logger, AuditLogger)
