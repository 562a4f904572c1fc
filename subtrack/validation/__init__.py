"""Validation package."""

from subtrack.validation.validator import OperationValidationError, OperationValidator

__all__ = ["OperationValidationError", "OperationValidator"]
