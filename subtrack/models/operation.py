"""
Core Data Models for SubTrack

These models define the schemas for everything that flows between
the add-operation form, validation, storage and the calendar page.

DESIGN DECISION: Amounts are signed Decimals.
Expenses are stored negative and income positive, so a month's
total is a plain sum. The form only ever asks for a magnitude and
a kind; the sign is applied once, when a draft becomes an operation.
"""

import datetime as dt
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


CENT = Decimal("0.01")


def to_cents(value) -> Decimal:
    """
    Round an amount to the cent.

    Raises ValueError when the amount has too many digits to be
    represented to the cent.
    """
    try:
        return Decimal(value).quantize(CENT)
    except InvalidOperation as e:
        raise ValueError(f"Amount {value} is out of range") from e


def utc_now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


# =============================================================================
# ENUMS
# =============================================================================

class OperationKind(str, Enum):
    """Direction of money for an operation."""
    EXPENSE = "expense"
    INCOME = "income"


# =============================================================================
# OPERATION MODELS
# =============================================================================

class OperationDraft(BaseModel):
    """
    Data entered in the add-operation form.

    CRITICAL: This is PROPOSED data, NOT validated.
    Every field may be missing because the user may not have
    filled it in. It must go through OperationValidator before
    it can be stored.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    title: Optional[str] = None
    amount: Optional[Decimal] = Field(
        default=None,
        description="Magnitude entered by the user (sign comes from kind)"
    )
    kind: Optional[OperationKind] = OperationKind.EXPENSE
    date: Optional[dt.date] = None
    category: Optional[str] = None
    is_recurrent: bool = False


class FinancialOperation(BaseModel):
    """
    An expense or income line.

    Only FinancialOperation objects are persisted to storage.
    id is None until the store assigns one on insert.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: Optional[int] = Field(
        default=None,
        description="Identifier assigned by storage on insert"
    )
    title: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Label of the operation"
    )
    amount: Decimal = Field(
        ...,
        description="Signed amount: negative = expense, positive = income"
    )
    date: dt.date = Field(
        ...,
        description="Day the operation happens"
    )
    category: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Free-text category label"
    )
    is_recurrent: bool = Field(
        default=False,
        description="Shown in every displayed month"
    )

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v: Decimal) -> Decimal:
        """Amounts are kept to the cent and can never be zero."""
        v = to_cents(v)
        if v == 0:
            raise ValueError("Amount cannot be zero")
        return v

    @property
    def kind(self) -> OperationKind:
        return OperationKind.EXPENSE if self.amount < 0 else OperationKind.INCOME

    @property
    def recurrence_label(self) -> str:
        return "Recurrent" if self.is_recurrent else "Unique"

    def occurs_in(self, year: int, month: int) -> bool:
        """True when the operation's own date falls in the given month."""
        return self.date.year == year and self.date.month == month


# =============================================================================
# MONTHLY MODELS
# =============================================================================

class MonthlyBudget(BaseModel):
    """Budget for one (month, year). At most one per month."""

    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=1, le=9999)
    budget: Decimal

    @field_validator('budget')
    @classmethod
    def quantize_budget(cls, v: Decimal) -> Decimal:
        return to_cents(v)


class MonthlyIncome(BaseModel):
    """An income line attached to a (month, year) rather than a day."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: Optional[int] = None
    title: str = Field(..., min_length=1, max_length=200)
    amount: Decimal
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=1, le=9999)

    @field_validator('amount')
    @classmethod
    def quantize_amount(cls, v: Decimal) -> Decimal:
        return to_cents(v)


class MonthSummary(BaseModel):
    """
    Everything the calendar page shows for one month.

    balance = budget (0 when unset) + total income + sum of the
    signed amounts of the visible operations.
    """

    year: int
    month: int = Field(..., ge=1, le=12)
    budget: Optional[Decimal] = None
    total_income: Decimal = Decimal("0.00")
    operations: list[FinancialOperation] = Field(default_factory=list)
    operations_total: Decimal = Decimal("0.00")
    balance: Decimal = Decimal("0.00")
    computed_at: dt.datetime = Field(default_factory=utc_now)

    @property
    def total_expenses(self) -> Decimal:
        """Magnitude of the visible expenses."""
        return -sum((op.amount for op in self.operations if op.amount < 0), Decimal("0.00"))


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'suspicious_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """
    Result of the two-stage validation.

    Stage 1: Schema validation (required fields)
    Stage 2: Semantic validation (warnings only)
    """

    validated_at: dt.datetime = Field(
        default_factory=utc_now
    )
    schema_valid: bool
    semantic_valid: bool
    is_valid: bool
    issues: list[ValidationIssue] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def error_fields(self) -> list[str]:
        return [issue.field for issue in self.issues if issue.severity == "error"]
