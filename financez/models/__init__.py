"""
Data Models Package

This package contains all Pydantic models used in FinanceZ.
Backend rows, form inputs and action results all pass through these schemas.
"""

from financez.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from financez.models.auth import (
    AuthEvent,
    AuthResponse,
    AuthSession,
    AuthState,
    AuthUser,
)
from financez.models.finance import (
    CARDS_TABLE,
    GOAL_COLOR_OPTIONS,
    GOAL_EMOJI_OPTIONS,
    GOALS_TABLE,
    INVESTMENTS_TABLE,
    TRANSACTIONS_TABLE,
    Card,
    Investment,
    SavingsGoal,
    Transaction,
    TransactionType,
)
from financez.models.forms import (
    GoalDraft,
    OnboardingForm,
    SignInForm,
    SignUpForm,
)
from financez.models.money import (
    Money,
    OptionalMoney,
    from_minor_units,
    parse_amount,
    to_minor_units,
    round_cents,
    to_money,
    to_wire,
)
from financez.models.profile import (
    FINANCIAL_GOAL_OPTIONS,
    PROFILES_TABLE,
    Profile,
    RiskTolerance,
)
from financez.models.results import (
    ActionResult,
    ValidationIssue,
    ValidationResult,
)

__all__ = [
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
    # Auth models
    "AuthEvent",
    "AuthResponse",
    "AuthSession",
    "AuthState",
    "AuthUser",
    # Finance rows
    "CARDS_TABLE",
    "GOAL_COLOR_OPTIONS",
    "GOAL_EMOJI_OPTIONS",
    "GOALS_TABLE",
    "INVESTMENTS_TABLE",
    "TRANSACTIONS_TABLE",
    "Card",
    "Investment",
    "SavingsGoal",
    "Transaction",
    "TransactionType",
    # Forms
    "GoalDraft",
    "OnboardingForm",
    "SignInForm",
    "SignUpForm",
    # Money
    "Money",
    "OptionalMoney",
    "from_minor_units",
    "parse_amount",
    "to_minor_units",
    "round_cents",
    "to_money",
    "to_wire",
    # Profile
    "FINANCIAL_GOAL_OPTIONS",
    "PROFILES_TABLE",
    "Profile",
    "RiskTolerance",
    # Results
    "ActionResult",
    "ValidationIssue",
    "ValidationResult",
]
