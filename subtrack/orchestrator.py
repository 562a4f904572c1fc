"""
Main Orchestrator for SubTrack

This module ties together the calendar cursor, validation, storage
and month queries, and defines the flows behind the calendar page:
1. Navigate (previous/next month, select a day)
2. Add an operation (draft → validate → store → refresh)
3. Delete an operation (delete → refresh)
4. Record the month's budget and income

DESIGN DECISION: The orchestrator enforces the boundaries:
- Nothing reaches storage without validation
- A failed action leaves the displayed month untouched
- Every action is audited

Subscribers are called synchronously with the name of what
changed: "year", "month", "selected_day" (forwarded from the
cursor), "operations", "balance" and "summary".
"""

from datetime import date
from decimal import Decimal
from typing import Callable, Optional
from uuid import UUID

from subtrack.audit import AuditLogger, configure_logging, create_correlation_id
from subtrack.calendar import (
    CalendarCursor,
    CalendarGrid,
    advance_month,
    build_grid,
    toggle_selected_day,
)
from subtrack.config import Settings, get_settings
from subtrack.models.operation import (
    FinancialOperation,
    MonthlyBudget,
    MonthlyIncome,
    MonthSummary,
    OperationDraft,
)
from subtrack.queries import MonthQueryExecutor
from subtrack.services.storage import (
    BudgetStorageInterface,
    OperationStorageInterface,
    SQLiteBudgetStorage,
    SQLiteDatabase,
    SQLiteOperationStorage,
    StorageError,
)
from subtrack.validation import OperationValidationError, OperationValidator


PropertyCallback = Callable[[str], None]


class CalendarPageFlow:
    """
    View-model of the calendar page.

    Holds the cursor and the summary of the displayed month. The
    summary is reloaded after every change that can affect it;
    a cursor move made directly on the cursor only marks it stale
    until the next refresh().
    """

    def __init__(
        self,
        operation_storage: OperationStorageInterface,
        budget_storage: BudgetStorageInterface,
        cursor: Optional[CalendarCursor] = None,
        validator: Optional[OperationValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
        recurring_since_start: Optional[bool] = None,
    ):
        if recurring_since_start is None:
            recurring_since_start = get_settings().app.recurring_since_start

        self._operation_storage = operation_storage
        self._budget_storage = budget_storage
        self._cursor = cursor or CalendarCursor()
        self._validator = validator or OperationValidator()
        self._audit_logger = audit_logger or AuditLogger()
        self._executor = MonthQueryExecutor(
            operation_storage,
            budget_storage,
            recurring_since_start=recurring_since_start,
        )

        self._summary: Optional[MonthSummary] = None
        self._stale = True
        self._subscribers: list[PropertyCallback] = []
        self._cursor.subscribe(self._on_cursor_changed)

    # -------------------------------------------------------------------------
    # Observable state
    # -------------------------------------------------------------------------

    def subscribe(self, callback: PropertyCallback) -> Callable[[], None]:
        """Register a callback; returns a function that removes it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self, *names: str) -> None:
        for name in names:
            for callback in list(self._subscribers):
                callback(name)

    def _on_cursor_changed(self, name: str) -> None:
        if name in ("year", "month"):
            self._stale = True
            self._audit_logger.log_month_changed(self._cursor.year, self._cursor.month)
        self._notify(name)

    @property
    def cursor(self) -> CalendarCursor:
        return self._cursor

    @property
    def validator(self) -> OperationValidator:
        return self._validator

    @property
    def audit_logger(self) -> AuditLogger:
        return self._audit_logger

    @property
    def is_stale(self) -> bool:
        return self._stale

    @property
    def summary(self) -> Optional[MonthSummary]:
        """Summary of the displayed month, None before the first refresh."""
        return self._summary

    @property
    def operations(self) -> list[FinancialOperation]:
        return self._summary.operations if self._summary else []

    @property
    def balance(self) -> Decimal:
        return self._summary.balance if self._summary else Decimal("0.00")

    def grid(self, today: Optional[date] = None) -> CalendarGrid:
        """Calendar grid for the cursor's month."""
        return build_grid(
            self._cursor.year,
            self._cursor.month,
            today=today,
            selected_day=self._cursor.selected_day,
        )

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    async def refresh(self) -> MonthSummary:
        """
        Reload the displayed month from storage.

        On StorageError the previous summary is kept.
        """
        year, month = self._cursor.year, self._cursor.month
        try:
            summary = await self._executor.summarize(year, month)
        except StorageError as e:
            self._audit_logger.log_storage_error("refresh", str(e))
            raise

        # The cursor may have moved while storage was awaited
        self._summary = summary
        self._stale = (year, month) != (self._cursor.year, self._cursor.month)
        self._notify("operations", "balance", "summary")
        return summary

    async def _refresh_after_write(self) -> None:
        """
        Reload the month once a write has committed.

        The write stands even when the reload fails. refresh() has
        already logged the StorageError; the summary is left stale so
        the next ensure_fresh() tries again.
        """
        try:
            await self.refresh()
        except StorageError:
            self._stale = True

    async def ensure_fresh(self) -> MonthSummary:
        """Refresh only when the summary is missing or stale."""
        if self._stale or self._summary is None:
            return await self.refresh()
        return self._summary

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    async def next_month(self) -> MonthSummary:
        advance_month(self._cursor, 1)
        return await self.refresh()

    async def previous_month(self) -> MonthSummary:
        advance_month(self._cursor, -1)
        return await self.refresh()

    async def go_to(self, year: int, month: int) -> MonthSummary:
        """Jump straight to a month."""
        self._cursor.set_month(year, month)
        return await self.ensure_fresh()

    def toggle_day(self, day: int) -> Optional[int]:
        """Select or unselect a day; returns the selected day."""
        toggle_selected_day(self._cursor, day)
        return self._cursor.selected_day

    def new_draft(self) -> OperationDraft:
        """
        Empty form data for the add-operation page.

        The date defaults to the selected day, else today when the
        cursor shows the current month, else the 1st of the month.
        """
        selected = self._cursor.selected_date
        if selected is None:
            today = date.today()
            if (today.year, today.month) == (self._cursor.year, self._cursor.month):
                selected = today
            else:
                selected = date(self._cursor.year, self._cursor.month, 1)
        return OperationDraft(date=selected)

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def add_operation(
        self,
        draft: OperationDraft,
        correlation_id: Optional[UUID] = None,
    ) -> FinancialOperation:
        """
        Validate and store a new operation, then refresh the month.

        Raises:
            OperationValidationError: Draft rejected; nothing stored
            StorageError: Storage failed; nothing stored
        """
        correlation_id = correlation_id or create_correlation_id()

        try:
            operation = self._validator.to_operation(draft)
        except OperationValidationError as e:
            self._audit_logger.log_validation_failed(
                fields=e.result.error_fields,
                issues=[
                    {"field": i.field, "type": i.issue_type, "message": i.message}
                    for i in e.result.issues
                ],
                correlation_id=correlation_id,
            )
            raise

        try:
            operation_id = await self._operation_storage.add_operation(operation)
        except StorageError as e:
            self._audit_logger.log_storage_error("add_operation", str(e), correlation_id)
            raise

        stored = operation.model_copy(update={"id": operation_id})
        self._audit_logger.log_operation_added(
            operation_id=operation_id,
            title=stored.title,
            amount=str(stored.amount),
            is_recurrent=stored.is_recurrent,
            correlation_id=correlation_id,
        )

        await self._refresh_after_write()
        return stored

    async def delete_operation(
        self,
        operation_id: int,
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        """
        Delete an operation by ID, then refresh the month.

        Returns False when the ID did not exist.
        """
        correlation_id = correlation_id or create_correlation_id()

        try:
            found = await self._operation_storage.delete_operation(operation_id)
        except StorageError as e:
            self._audit_logger.log_storage_error("delete_operation", str(e), correlation_id)
            raise

        self._audit_logger.log_operation_deleted(
            operation_id=operation_id,
            found=found,
            correlation_id=correlation_id,
        )

        await self._refresh_after_write()
        return found

    # -------------------------------------------------------------------------
    # Budget and income
    # -------------------------------------------------------------------------

    async def set_monthly_budget(
        self,
        amount: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> MonthlyBudget:
        """Set (or replace) the budget of the displayed month."""
        budget = MonthlyBudget(
            month=self._cursor.month,
            year=self._cursor.year,
            budget=amount,
        )

        try:
            await self._budget_storage.set_monthly_budget(budget.month, budget.year, budget.budget)
        except StorageError as e:
            self._audit_logger.log_storage_error("set_monthly_budget", str(e), correlation_id)
            raise

        self._audit_logger.log_budget_set(
            month=budget.month,
            year=budget.year,
            amount=str(budget.budget),
            correlation_id=correlation_id,
        )

        await self._refresh_after_write()
        return budget

    async def add_monthly_income(
        self,
        title: str,
        amount: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> MonthlyIncome:
        """
        Record an income line for the displayed month.

        Raises:
            ValueError: Blank title or amount not above zero
        """
        income = MonthlyIncome(
            title=title,
            amount=amount,
            month=self._cursor.month,
            year=self._cursor.year,
        )
        if income.amount <= 0:
            raise ValueError("Income amount must be greater than zero")

        try:
            income_id = await self._budget_storage.add_monthly_income(
                income.title, income.amount, income.month, income.year
            )
        except StorageError as e:
            self._audit_logger.log_storage_error("add_monthly_income", str(e), correlation_id)
            raise

        stored = income.model_copy(update={"id": income_id})
        self._audit_logger.log_income_added(
            income_id=income_id,
            title=stored.title,
            amount=str(stored.amount),
            month=stored.month,
            year=stored.year,
            correlation_id=correlation_id,
        )

        await self._refresh_after_write()
        return stored

    async def list_monthly_incomes(self) -> list[MonthlyIncome]:
        """Income lines of the displayed month."""
        return await self._budget_storage.list_monthly_incomes(
            self._cursor.month, self._cursor.year
        )


def create_calendar_flow(
    database: SQLiteDatabase,
    settings: Optional[Settings] = None,
    cursor: Optional[CalendarCursor] = None,
    audit_logger: Optional[AuditLogger] = None,
) -> CalendarPageFlow:
    """Build a calendar page flow on top of an initialized database."""
    app_settings = (settings or get_settings()).app

    return CalendarPageFlow(
        operation_storage=SQLiteOperationStorage(database),
        budget_storage=SQLiteBudgetStorage(database),
        cursor=cursor,
        validator=OperationValidator(app_settings),
        audit_logger=audit_logger or AuditLogger(),
        recurring_since_start=app_settings.recurring_since_start,
    )


def create_app_components(
    settings: Optional[Settings] = None,
    database_path: Optional[str] = None,
) -> tuple[CalendarPageFlow, SQLiteDatabase]:
    """
    Factory function to create all application components.

    The database is initialized here (schema created if missing)
    and returned so the caller can close it at shutdown.

    Returns:
        (calendar_page_flow, database)
    """
    settings = settings or get_settings()

    configure_logging(settings.app.log_level)

    database = SQLiteDatabase(database_path or settings.database.path)
    database.initialize()

    return create_calendar_flow(database, settings), database
