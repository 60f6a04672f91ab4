"""
Result models.

Validation results keep the issue/severity shape used throughout the
app. ActionResult is what every user action returns: failures are
carried as a message for an alert, never raised to the caller.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field


class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_format', 'mismatch')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        default="error",
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )


class ValidationResult(BaseModel):
    """Result of validating one form."""

    form: str = Field(
        ...,
        description="Which form was validated"
    )
    is_valid: bool
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def first_error(self) -> Optional[str]:
        """The message to show in an alert: the first error found."""
        for issue in self.issues:
            if issue.severity == "error":
                return issue.message
        return None


class ActionResult(BaseModel):
    """
    Outcome of a user action (sign in, create goal, save profile...).

    title/message map directly onto an alert dialog. next_route, when
    set, is where the UI should navigate after a success.
    """

    success: bool
    title: str = ""
    message: str = ""
    next_route: Optional[str] = None
    issues: list[ValidationIssue] = Field(default_factory=list)
    data: Optional[Any] = None

    @classmethod
    def ok(cls, message: str = "", title: str = "Success", **kwargs) -> "ActionResult":
        return cls(success=True, title=title, message=message, **kwargs)

    @classmethod
    def fail(cls, message: str, title: str = "Error", **kwargs) -> "ActionResult":
        return cls(success=False, title=title, message=message, **kwargs)

    @classmethod
    def from_validation(cls, result: ValidationResult, title: str = "Error") -> "ActionResult":
        return cls(
            success=False,
            title=title,
            message=result.first_error or "Please check the form",
            issues=result.issues,
        )
