"""
Audit Logger

Every significant action on the calendar page is logged as a
structured event. The logger never raises: a logging failure must
not break adding or deleting an operation.

Correlation IDs tie together the events of one user action
(e.g. a rejected draft followed by the corrected save).
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from subtrack.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


def configure_logging(level: str = "INFO") -> None:
    """
    Configure stdlib logging and structlog for JSON output.

    Safe to call more than once.
    """
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper(), logging.INFO),
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class AuditLogger:
    """
    Central audit logging service.

    Events go to the structured local log. The last events are
    kept in memory so the UI can show a short history.
    """

    def __init__(self, history_size: int = 50):
        self._logger = structlog.get_logger("subtrack.audit")
        self._history: list[AuditEvent] = []
        self._history_size = history_size

    @property
    def history(self) -> list[AuditEvent]:
        """Most recent events, newest last."""
        return list(self._history)

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns True if the event was written to the log.
        """
        self._history.append(event)
        del self._history[:-self._history_size]

        log_dict = event.to_log_dict()
        try:
            if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception:
            # A broken log handler must not break the calling action
            return False
        return True

    def log_operation_added(
        self,
        operation_id: int,
        title: str,
        amount: str,
        is_recurrent: bool,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a stored operation."""
        self.log(AuditEventBuilder.operation_added(
            operation_id=operation_id,
            title=title,
            amount=amount,
            is_recurrent=is_recurrent,
            correlation_id=correlation_id,
        ))

    def log_operation_deleted(
        self,
        operation_id: int,
        found: bool,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a deletion (or a deletion of an unknown ID)."""
        self.log(AuditEventBuilder.operation_deleted(
            operation_id=operation_id,
            found=found,
            correlation_id=correlation_id,
        ))

    def log_validation_failed(
        self,
        fields: list[str],
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a rejected draft."""
        self.log(AuditEventBuilder.validation_failed(
            fields=fields,
            issues=issues,
            correlation_id=correlation_id,
        ))

    def log_budget_set(
        self,
        month: int,
        year: int,
        amount: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.budget_set(
            month=month,
            year=year,
            amount=amount,
            correlation_id=correlation_id,
        ))

    def log_income_added(
        self,
        income_id: int,
        title: str,
        amount: str,
        month: int,
        year: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.income_added(
            income_id=income_id,
            title=title,
            amount=amount,
            month=month,
            year=year,
            correlation_id=correlation_id,
        ))

    def log_month_changed(self, year: int, month: int) -> None:
        self.log(AuditEventBuilder.month_changed(year=year, month=month))

    def log_storage_error(
        self,
        action: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a storage failure."""
        self.log(AuditEventBuilder.storage_error(
            action=action,
            error_message=error_message,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action.
    """
    return uuid4()
