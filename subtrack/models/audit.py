"""
Audit Models for SubTrack

Every user-visible action on the calendar page is logged.
This provides:
1. A trace of what was added, deleted or changed
2. Debugging information when storage fails
3. A record of rejected (invalid) operations

DESIGN DECISION: Audit events are append-only. They are never edited.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from subtrack.models.operation import utc_now


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Operations
    OPERATION_ADDED = "operation_added"
    OPERATION_DELETED = "operation_deleted"
    OPERATION_NOT_FOUND = "operation_not_found"
    VALIDATION_FAILED = "validation_failed"

    # Monthly records
    BUDGET_SET = "budget_set"
    INCOME_ADDED = "income_added"

    # Calendar
    MONTH_CHANGED = "month_changed"

    # System events
    STORAGE_ERROR = "storage_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'operation', 'budget', 'income')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate the events of one user action"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.operation_added(operation_id, title, amount)
        event = AuditEventBuilder.month_changed(2025, 3)
    """

    @staticmethod
    def operation_added(
        operation_id: int,
        title: str,
        amount: str,
        is_recurrent: bool,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OPERATION_ADDED,
            entity_type="operation",
            entity_id=str(operation_id),
            correlation_id=correlation_id,
            description=f"Operation added: {title}",
            details={
                "title": title,
                "amount": amount,
                "is_recurrent": is_recurrent,
            },
            is_user_action=True,
        )

    @staticmethod
    def operation_deleted(
        operation_id: int,
        found: bool,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        if found:
            return AuditEvent(
                event_type=AuditEventType.OPERATION_DELETED,
                entity_type="operation",
                entity_id=str(operation_id),
                correlation_id=correlation_id,
                description=f"Operation {operation_id} deleted",
                is_user_action=True,
            )
        return AuditEvent(
            event_type=AuditEventType.OPERATION_NOT_FOUND,
            severity=AuditSeverity.WARNING,
            entity_type="operation",
            entity_id=str(operation_id),
            correlation_id=correlation_id,
            description=f"Operation {operation_id} not found for deletion",
            is_user_action=True,
        )

    @staticmethod
    def validation_failed(
        fields: list[str],
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="operation",
            correlation_id=correlation_id,
            description=f"Operation rejected: invalid {', '.join(fields)}",
            details={"issues": issues},
            is_user_action=True,
        )

    @staticmethod
    def budget_set(
        month: int,
        year: int,
        amount: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGET_SET,
            entity_type="budget",
            entity_id=f"{year}-{month:02d}",
            correlation_id=correlation_id,
            description=f"Budget for {year}-{month:02d} set to {amount}",
            details={"month": month, "year": year, "amount": amount},
            is_user_action=True,
        )

    @staticmethod
    def income_added(
        income_id: int,
        title: str,
        amount: str,
        month: int,
        year: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INCOME_ADDED,
            entity_type="income",
            entity_id=str(income_id),
            correlation_id=correlation_id,
            description=f"Income added for {year}-{month:02d}: {title}",
            details={"title": title, "amount": amount, "month": month, "year": year},
            is_user_action=True,
        )

    @staticmethod
    def month_changed(year: int, month: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MONTH_CHANGED,
            severity=AuditSeverity.DEBUG,
            entity_type="calendar",
            description=f"Calendar moved to {year}-{month:02d}",
            details={"year": year, "month": month},
            is_user_action=True,
        )

    @staticmethod
    def storage_error(
        action: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"Storage failed during {action}",
            correlation_id=correlation_id,
            details={"action": action},
            error_message=error_message,
        )
