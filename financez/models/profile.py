"""
User profile model.

One row per user in the user_profiles table. Created at sign-up with
only the email and an incomplete onboarding flag, filled in by the
onboarding form, and read by every screen that shows a name.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from financez.models.money import OptionalMoney


PROFILES_TABLE = "user_profiles"


class RiskTolerance(str, Enum):
    """Investment risk appetite chosen during onboarding."""
    CONSERVATIVE = "conservative"
    MODERATE = "moderate"
    AGGRESSIVE = "aggressive"


# Goal tags offered on the onboarding form, stored by label
FINANCIAL_GOAL_OPTIONS: dict[str, str] = {
    "New House": "🏠",
    "New Car": "🚗",
    "Dream Vacation": "🏖️",
    "Education": "🎓",
    "Retirement": "👴",
    "Emergency Fund": "🛡️",
}


class Profile(BaseModel):
    """
    A user_profiles row.

    onboarding_completed is the flag that gates the main application.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: Optional[str] = None
    user_id: str = Field(
        ...,
        min_length=1,
        description="Auth user this profile belongs to"
    )
    email: str = Field(
        ...,
        description="Email the account was created with"
    )

    full_name: Optional[str] = None
    age: Optional[int] = Field(default=None, ge=0, le=150)
    occupation: Optional[str] = None
    monthly_income: OptionalMoney = None
    risk_tolerance: Optional[RiskTolerance] = None
    financial_goals: list[str] = Field(default_factory=list)
    avatar_url: Optional[str] = None

    onboarding_completed: bool = False

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator('financial_goals', mode='before')
    @classmethod
    def null_goals_to_empty(cls, v):
        """The column is nullable; treat null as no goals."""
        return [] if v is None else v

    @property
    def first_name(self) -> Optional[str]:
        """First word of the full name, if any."""
        if not self.full_name:
            return None
        parts = self.full_name.split()
        return parts[0] if parts else None

    @property
    def display_name(self) -> str:
        return self.full_name or "User"

    @property
    def initial(self) -> str:
        """Avatar letter."""
        return self.full_name[0].upper() if self.full_name else "U"
