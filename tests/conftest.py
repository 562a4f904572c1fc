"""Shared fixtures: explicit settings and a throwaway SQLite file per test."""

import pytest

from subtrack.audit import AuditLogger
from subtrack.calendar import CalendarCursor
from subtrack.config import AppSettings
from subtrack.orchestrator import CalendarPageFlow
from subtrack.services.storage import (
    SQLiteBudgetStorage,
    SQLiteDatabase,
    SQLiteOperationStorage,
)
from subtrack.validation import OperationValidator


@pytest.fixture
def app_settings():
    """Settings passed explicitly so a local .env cannot change the tests."""
    return AppSettings(
        categories="Food,Transport,Housing,Entertainment,Other",
        max_operation_amount=100000.0,
        future_date_tolerance_days=366,
        recurring_since_start=False,
    )


@pytest.fixture
def database(tmp_path):
    db = SQLiteDatabase(tmp_path / "data" / "expenses.db")
    db.initialize()
    yield db
    db.close()


@pytest.fixture
def operation_storage(database):
    return SQLiteOperationStorage(database)


@pytest.fixture
def budget_storage(database):
    return SQLiteBudgetStorage(database)


@pytest.fixture
def validator(app_settings):
    return OperationValidator(app_settings)


@pytest.fixture
def flow(operation_storage, budget_storage, validator):
    """Calendar page flow showing March 2025."""
    return CalendarPageFlow(
        operation_storage=operation_storage,
        budget_storage=budget_storage,
        cursor=CalendarCursor(2025, 3),
        validator=validator,
        audit_logger=AuditLogger(),
        recurring_since_start=False,
    )
