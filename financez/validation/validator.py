"""
Client-Side Form Validation

Every form is validated before anything is sent to the backend.
If a ValidationResult is not valid, the caller shows the first error
and issues no request.

Checks are split the same way for every form:
- PRESENCE: required fields are filled in
- FORMAT: numbers parse, choices are known values
- CONSISTENCY: fields agree with each other (e.g. password confirmation)

Presence failures short-circuit: there is no point complaining that an
empty amount is not a number.

IMPORTANT: Validation NEVER silently fixes input.
"""

from decimal import Decimal
from typing import Optional

from financez.config import get_settings
from financez.config.settings import AppSettings
from financez.models.forms import GoalDraft, OnboardingForm, SignInForm, SignUpForm
from financez.models.money import parse_amount
from financez.models.profile import RiskTolerance
from financez.models.results import ValidationIssue, ValidationResult


FILL_ALL_FIELDS = "Please fill in all fields"
PASSWORDS_DO_NOT_MATCH = "Passwords do not match"
INVALID_TARGET_AMOUNT = "Please enter a valid target amount."
INCOMPLETE_ONBOARDING = "Please fill out all fields to continue."

MAX_AGE = 120


def _missing(field: str, message: str) -> ValidationIssue:
    return ValidationIssue(field=field, issue_type="missing", message=message)


def _result(form: str, issues: list[ValidationIssue]) -> ValidationResult:
    return ValidationResult(
        form=form,
        is_valid=not any(issue.severity == "error" for issue in issues),
        issues=issues,
    )


class FormValidator:
    """
    Validates user-entered forms.

    Stateless apart from the settings it reads thresholds from.
    """

    def __init__(self, settings: Optional[AppSettings] = None):
        self._settings = settings or get_settings().app

    def validate_sign_in(self, form: SignInForm) -> ValidationResult:
        """Email and password must both be present."""
        issues = []
        if not form.email:
            issues.append(_missing("email", FILL_ALL_FIELDS))
        if not form.password:
            issues.append(_missing("password", FILL_ALL_FIELDS))
        return _result("sign_in", issues)

    def validate_sign_up(self, form: SignUpForm) -> ValidationResult:
        """
        Sign-up checks, in the order the user sees them:
        presence, then confirmation match, then password length.
        """
        issues = []
        for field in ("email", "password", "confirm_password"):
            if not getattr(form, field):
                issues.append(_missing(field, FILL_ALL_FIELDS))
        if issues:
            return _result("sign_up", issues)

        if form.password != form.confirm_password:
            issues.append(ValidationIssue(
                field="confirm_password",
                issue_type="mismatch",
                message=PASSWORDS_DO_NOT_MATCH,
            ))

        min_length = self._settings.min_password_length
        if len(form.password) < min_length:
            issues.append(ValidationIssue(
                field="password",
                issue_type="too_short",
                message=f"Password must be at least {min_length} characters",
            ))

        if "@" not in form.email:
            issues.append(ValidationIssue(
                field="email",
                issue_type="invalid_format",
                message="Please enter a valid email address",
            ))

        return _result("sign_up", issues)

    def validate_goal(self, draft: GoalDraft) -> ValidationResult:
        """Title required; target must parse to a positive amount."""
        issues = []
        if not draft.title:
            issues.append(_missing("title", FILL_ALL_FIELDS))
        if not draft.target_amount:
            issues.append(_missing("target_amount", FILL_ALL_FIELDS))
        if issues:
            return _result("create_goal", issues)

        target = parse_amount(draft.target_amount)
        if target is None or target <= 0:
            issues.append(ValidationIssue(
                field="target_amount",
                issue_type="invalid_value",
                message=INVALID_TARGET_AMOUNT,
            ))

        return _result("create_goal", issues)

    def validate_onboarding(self, form: OnboardingForm) -> ValidationResult:
        """
        Every field is required, at least one goal must be picked,
        and the numeric answers must parse.
        """
        issues = []
        for field in ("full_name", "age", "occupation", "monthly_income", "risk_tolerance"):
            if not getattr(form, field):
                issues.append(_missing(field, INCOMPLETE_ONBOARDING))
        if not form.financial_goals:
            issues.append(_missing("financial_goals", INCOMPLETE_ONBOARDING))
        if issues:
            return _result("onboarding", issues)

        age = parse_age(form.age)
        if age is None:
            issues.append(ValidationIssue(
                field="age",
                issue_type="invalid_value",
                message=f"Please enter your age as a whole number between 1 and {MAX_AGE}",
            ))

        income = parse_amount(form.monthly_income)
        if income is None or income < 0:
            issues.append(ValidationIssue(
                field="monthly_income",
                issue_type="invalid_value",
                message="Please enter a valid monthly income",
            ))

        if parse_risk_tolerance(form.risk_tolerance) is None:
            issues.append(ValidationIssue(
                field="risk_tolerance",
                issue_type="invalid_choice",
                message="Please choose a risk tolerance",
            ))

        return _result("onboarding", issues)


def parse_age(text: str) -> Optional[int]:
    """Whole years between 1 and MAX_AGE, else None."""
    try:
        age = int(str(text).strip())
    except ValueError:
        return None
    if age < 1 or age > MAX_AGE:
        return None
    return age


def parse_risk_tolerance(text: str) -> Optional[RiskTolerance]:
    """Case-insensitive match against the three tolerance levels."""
    try:
        return RiskTolerance(str(text).strip().lower())
    except ValueError:
        return None


def parse_target_amount(text: str) -> Decimal:
    """
    Parse a target amount that has already passed validate_goal.

    Raises:
        ValueError: If called on text that did not validate
    """
    amount = parse_amount(text)
    if amount is None or amount <= 0:
        raise ValueError(f"Not a valid target amount: {text!r}")
    return amount
