"""
Tests for SubTrack

Test strategy:
1. Unit tests for individual components (models, grid, validators)
2. Integration tests for flows against a temporary SQLite file
3. No shared state between tests (fresh database per test)
"""

import pytest
from datetime import date, timezone
from decimal import Decimal
from uuid import uuid4

from pydantic import ValidationError

from subtrack.models.operation import (
    FinancialOperation,
    MonthlyBudget,
    MonthlyIncome,
    MonthSummary,
    OperationDraft,
    OperationKind,
    ValidationIssue,
    ValidationResult,
)
from subtrack.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


def make_operation(**overrides) -> FinancialOperation:
    data = {
        "title": "Rent",
        "amount": Decimal("-800.00"),
        "date": date(2025, 3, 5),
        "category": "Housing",
        "is_recurrent": False,
    }
    data.update(overrides)
    return FinancialOperation(**data)


class TestOperationModels:
    """Tests for operation-related Pydantic models."""

    def test_operation_creation(self):
        """Test FinancialOperation model creation."""
        operation = make_operation()
        assert operation.id is None
        assert operation.title == "Rent"
        assert operation.amount == Decimal("-800.00")
        assert operation.kind == OperationKind.EXPENSE

    def test_operation_strips_whitespace(self):
        """Test that whitespace is stripped from the title."""
        operation = make_operation(title="  Groceries  ")
        assert operation.title == "Groceries"

    def test_operation_amount_rounded_to_cent(self):
        """Test that amounts are kept to two decimals."""
        operation = make_operation(amount=Decimal("12.345"))
        assert operation.amount == Decimal("12.34")

    def test_operation_rejects_zero_amount(self):
        """Test that a zero amount is refused."""
        with pytest.raises(ValidationError):
            make_operation(amount=Decimal("0"))

    def test_operation_rejects_oversized_amount(self):
        """Test that an amount with too many digits is a validation error."""
        with pytest.raises(ValidationError):
            make_operation(amount=Decimal("1e30"))

    def test_operation_rejects_blank_title(self):
        """Test that a blank title is refused."""
        with pytest.raises(ValidationError):
            make_operation(title="   ")

    def test_positive_amount_is_income(self):
        """Test that the sign decides the kind."""
        operation = make_operation(amount=Decimal("2500"))
        assert operation.kind == OperationKind.INCOME

    def test_recurrence_label(self):
        """Test the label shown in the operation list."""
        assert make_operation().recurrence_label == "Unique"
        assert make_operation(is_recurrent=True).recurrence_label == "Recurrent"

    def test_occurs_in(self):
        """Test that occurs_in only looks at the operation's own date."""
        operation = make_operation(is_recurrent=True)
        assert operation.occurs_in(2025, 3) is True
        assert operation.occurs_in(2025, 4) is False
        assert operation.occurs_in(2024, 3) is False

    def test_draft_defaults(self):
        """Test that a blank draft has every field empty but the kind."""
        draft = OperationDraft()
        assert draft.title is None
        assert draft.amount is None
        assert draft.date is None
        assert draft.kind == OperationKind.EXPENSE
        assert draft.is_recurrent is False


class TestMonthlyModels:
    """Tests for budget, income and summary models."""

    def test_budget_month_bounds(self):
        """Test that the month must be 1-12."""
        with pytest.raises(ValidationError):
            MonthlyBudget(month=13, year=2025, budget=Decimal("100"))
        with pytest.raises(ValidationError):
            MonthlyBudget(month=0, year=2025, budget=Decimal("100"))

    def test_budget_quantized(self):
        budget = MonthlyBudget(month=3, year=2025, budget=Decimal("1000"))
        assert budget.budget == Decimal("1000.00")

    def test_budget_oversized(self):
        with pytest.raises(ValidationError):
            MonthlyBudget(month=3, year=2025, budget=Decimal("1e30"))

    def test_income_requires_title(self):
        """Test that an income line needs a title."""
        with pytest.raises(ValidationError):
            MonthlyIncome(title="", amount=Decimal("10"), month=1, year=2025)

    def test_summary_total_expenses(self):
        """Test that total_expenses only counts negative amounts."""
        summary = MonthSummary(
            year=2025,
            month=3,
            operations=[
                make_operation(amount=Decimal("-200")),
                make_operation(amount=Decimal("-50.50")),
                make_operation(amount=Decimal("300")),
            ],
        )
        assert summary.total_expenses == Decimal("250.50")
        assert summary.computed_at.tzinfo == timezone.utc


class TestAuditModels:
    """Tests for audit models."""

    def test_audit_event_creation(self):
        """Test AuditEvent creation."""
        event = AuditEvent(
            event_type=AuditEventType.OPERATION_ADDED,
            description="Operation added: Rent",
        )
        assert event.severity == AuditSeverity.INFO
        assert event.event_id is not None

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        correlation_id = uuid4()
        event = AuditEvent(
            event_type=AuditEventType.BUDGET_SET,
            correlation_id=correlation_id,
            description="Budget set",
        )
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "budget_set"
        assert event.timestamp.tzinfo == timezone.utc
        assert log_dict["correlation_id"] == str(correlation_id)
        assert "timestamp" in log_dict

    def test_audit_event_builder_operation_added(self):
        """Test AuditEventBuilder.operation_added."""
        event = AuditEventBuilder.operation_added(
            operation_id=7,
            title="Rent",
            amount="-800.00",
            is_recurrent=True,
        )
        assert event.event_type == AuditEventType.OPERATION_ADDED
        assert event.entity_id == "7"
        assert event.details["is_recurrent"] is True
        assert event.is_user_action is True

    def test_audit_event_builder_missing_delete(self):
        """Test that deleting an unknown ID is a warning, not an error."""
        event = AuditEventBuilder.operation_deleted(operation_id=99, found=False)
        assert event.event_type == AuditEventType.OPERATION_NOT_FOUND
        assert event.severity == AuditSeverity.WARNING

    def test_audit_event_builder_storage_error(self):
        event = AuditEventBuilder.storage_error("add_operation", "disk I/O error")
        assert event.severity == AuditSeverity.ERROR
        assert event.error_message == "disk I/O error"
        assert event.details == {"action": "add_operation"}


class TestValidationResult:
    """Tests for ValidationResult model."""

    def test_validation_result_has_errors(self):
        """Test has_errors property."""
        result = ValidationResult(
            schema_valid=False,
            semantic_valid=False,
            is_valid=False,
            issues=[
                ValidationIssue(
                    field="title",
                    issue_type="missing",
                    message="Title is required",
                    severity="error",
                ),
            ],
        )
        assert result.has_errors is True
        assert result.error_count == 1
        assert result.error_fields == ["title"]

    def test_validation_result_warnings_only(self):
        """Test that warnings don't count as errors."""
        result = ValidationResult(
            schema_valid=True,
            semantic_valid=True,
            is_valid=True,
            issues=[
                ValidationIssue(
                    field="date",
                    issue_type="future_date",
                    message="Date in future",
                    severity="warning",
                ),
            ],
        )
        assert result.has_errors is False
        assert result.error_count == 0

    def test_issue_severity_pattern(self):
        """Test that unknown severities are refused."""
        with pytest.raises(ValidationError):
            ValidationIssue(
                field="title",
                issue_type="missing",
                message="Title is required",
                severity="fatal",
            )
