"""Form validation package."""

from financez.validation.validator import (
    FILL_ALL_FIELDS,
    INCOMPLETE_ONBOARDING,
    INVALID_TARGET_AMOUNT,
    PASSWORDS_DO_NOT_MATCH,
    FormValidator,
    parse_age,
    parse_risk_tolerance,
    parse_target_amount,
)

__all__ = [
    "FILL_ALL_FIELDS",
    "INCOMPLETE_ONBOARDING",
    "INVALID_TARGET_AMOUNT",
    "PASSWORDS_DO_NOT_MATCH",
    "FormValidator",
    "parse_age",
    "parse_risk_tolerance",
    "parse_target_amount",
]
