"""
Data Models Package

This package contains all Pydantic models used in SubTrack.
All data flowing between the form, validation, storage and the
calendar page must conform to these schemas.
"""

from subtrack.models.operation import (
    CENT,
    FinancialOperation,
    MonthlyBudget,
    MonthlyIncome,
    MonthSummary,
    OperationDraft,
    OperationKind,
    ValidationIssue,
    ValidationResult,
    to_cents,
    utc_now,
)
from subtrack.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Operation models
    "CENT",
    "FinancialOperation",
    "MonthlyBudget",
    "MonthlyIncome",
    "MonthSummary",
    "OperationDraft",
    "OperationKind",
    "ValidationIssue",
    "ValidationResult",
    "to_cents",
    "utc_now",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
