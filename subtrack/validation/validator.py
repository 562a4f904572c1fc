"""
Two-Stage Validation Pipeline

Validation happens in two distinct stages:

STAGE 1 - SCHEMA VALIDATION:
- Required field presence (title, amount, date, category, kind)
- Amount must be a positive magnitude
- Errors here block the operation

STAGE 2 - SEMANTIC VALIDATION:
- Unusually large amounts
- Dates far in the future
- Categories outside the configured list
- Only warnings; the user may still save

IMPORTANT: Validation NEVER silently fixes issues.
It reports them, and to_operation() refuses drafts with errors.
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from subtrack.config import AppSettings, get_settings
from subtrack.models.operation import (
    FinancialOperation,
    OperationDraft,
    OperationKind,
    ValidationIssue,
    ValidationResult,
    to_cents,
)


class OperationValidationError(Exception):
    """
    A draft failed validation and was not stored.

    Distinct from StorageError: nothing reached the database.
    """

    def __init__(self, result: ValidationResult):
        self.result = result
        fields = ", ".join(result.error_fields) or "unknown"
        super().__init__(f"Invalid operation ({fields})")


class OperationValidator:
    """
    Validates operation drafts through a two-stage pipeline.

    Stage 1: Schema validation
    Stage 2: Semantic validation (only when stage 1 passes)
    """

    def __init__(self, settings: Optional[AppSettings] = None):
        self._settings = settings or get_settings().app

    def _validate_schema(
        self,
        draft: OperationDraft,
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 1: required fields.

        Returns: (is_valid, list_of_issues)
        """
        issues = []

        if not draft.title:
            issues.append(ValidationIssue(
                field="title",
                issue_type="missing",
                message="Title is required",
                severity="error",
                suggested_fix="Give the operation a short label",
            ))
        elif len(draft.title) > 200:
            issues.append(ValidationIssue(
                field="title",
                issue_type="too_long",
                message="Title must be 200 characters or fewer",
                severity="error",
            ))

        if draft.amount is None:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="missing",
                message="Amount is required",
                severity="error",
            ))
        else:
            try:
                cents = to_cents(draft.amount)
            except ValueError:
                issues.append(ValidationIssue(
                    field="amount",
                    issue_type="invalid_value",
                    message="Amount is too large",
                    severity="error",
                    suggested_fix="Check the number of digits",
                ))
            else:
                if cents <= 0:
                    issues.append(ValidationIssue(
                        field="amount",
                        issue_type="invalid_value",
                        message="Amount must be greater than zero",
                        severity="error",
                        suggested_fix="Enter the amount without a sign and pick expense or income",
                    ))

        if draft.date is None:
            issues.append(ValidationIssue(
                field="date",
                issue_type="missing",
                message="Date is required",
                severity="error",
            ))

        if not draft.category:
            issues.append(ValidationIssue(
                field="category",
                issue_type="missing",
                message="Category is required",
                severity="error",
                suggested_fix="Pick one of the categories",
            ))
        elif len(draft.category) > 100:
            issues.append(ValidationIssue(
                field="category",
                issue_type="too_long",
                message="Category must be 100 characters or fewer",
                severity="error",
            ))

        if draft.kind is None:
            issues.append(ValidationIssue(
                field="kind",
                issue_type="missing",
                message="Choose whether this is an expense or an income",
                severity="error",
            ))

        is_valid = not any(issue.severity == "error" for issue in issues)

        return is_valid, issues

    def _validate_semantic(
        self,
        draft: OperationDraft,
        today: date,
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 2: plausibility checks.

        Returns: (is_valid, list_of_issues)
        """
        issues = []

        max_amount = Decimal(str(self._settings.max_operation_amount))
        if draft.amount > max_amount:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=f"Amount ({draft.amount:,.2f}) seems unusually high",
                severity="warning",
                suggested_fix="Please verify this amount is correct",
            ))

        max_future_date = today + timedelta(days=self._settings.future_date_tolerance_days)
        if draft.date > max_future_date:
            issues.append(ValidationIssue(
                field="date",
                issue_type="future_date",
                message=f"Date ({draft.date}) is far in the future",
                severity="warning",
                suggested_fix="Please verify the date",
            ))

        known = {cat.lower() for cat in self._settings.categories_list}
        if known and draft.category.lower() not in known:
            issues.append(ValidationIssue(
                field="category",
                issue_type="unknown_category",
                message=f"Category '{draft.category}' is not in the category list",
                severity="info",
            ))

        is_valid = not any(issue.severity == "error" for issue in issues)

        return is_valid, issues

    def validate(
        self,
        draft: OperationDraft,
        today: Optional[date] = None,
    ) -> ValidationResult:
        """
        Run full two-stage validation pipeline.

        Args:
            draft: The form data to validate
            today: Reference date for the future-date check

        Returns:
            ValidationResult with all issues found
        """
        all_issues = []

        schema_valid, schema_issues = self._validate_schema(draft)
        all_issues.extend(schema_issues)

        # Only run stage 2 if stage 1 passes
        semantic_valid = False
        if schema_valid:
            semantic_valid, semantic_issues = self._validate_semantic(
                draft, today or date.today()
            )
            all_issues.extend(semantic_issues)

        warnings = [issue.message for issue in all_issues if issue.severity == "warning"]

        return ValidationResult(
            schema_valid=schema_valid,
            semantic_valid=semantic_valid,
            is_valid=schema_valid and semantic_valid,
            issues=all_issues,
            warnings=warnings,
        )

    def to_operation(
        self,
        draft: OperationDraft,
        today: Optional[date] = None,
    ) -> FinancialOperation:
        """
        Turn a draft into a storable operation.

        Expenses get a negative amount, income a positive one.

        Raises:
            OperationValidationError: If the draft has errors
        """
        result = self.validate(draft, today=today)
        if result.has_errors:
            raise OperationValidationError(result)

        amount = draft.amount if draft.kind == OperationKind.INCOME else -draft.amount

        return FinancialOperation(
            title=draft.title,
            amount=amount,
            date=draft.date,
            category=draft.category,
            is_recurrent=draft.is_recurrent,
        )

    def get_user_friendly_summary(
        self,
        result: ValidationResult,
    ) -> str:
        """Summary of validation results for the add-operation form."""
        if not result.issues:
            return "All checks passed."

        lines = []

        if result.has_errors:
            lines.append("Please fix the following before saving:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"     {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("Please verify the following:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        notes = [issue.message for issue in result.issues if issue.severity == "info"]
        if notes:
            if lines:
                lines.append("")
            lines.extend(notes)

        return "\n".join(lines)
