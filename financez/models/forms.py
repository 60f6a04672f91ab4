"""
Form input models.

These hold exactly what the user typed. Numbers stay as text here;
FormValidator decides whether they parse before anything is sent.
"""

from pydantic import BaseModel, ConfigDict, Field

from financez.models.finance import GOAL_EMOJI_OPTIONS


class SignInForm(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    email: str = ""
    password: str = ""


class SignUpForm(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    email: str = ""
    password: str = ""
    confirm_password: str = ""


class GoalDraft(BaseModel):
    """The create-goal form."""
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = ""
    target_amount: str = ""
    emoji: str = GOAL_EMOJI_OPTIONS[0]


class OnboardingForm(BaseModel):
    """The profile questionnaire shown once after sign-up."""
    model_config = ConfigDict(str_strip_whitespace=True)

    full_name: str = ""
    age: str = ""
    occupation: str = ""
    monthly_income: str = ""
    financial_goals: list[str] = Field(default_factory=list)
    risk_tolerance: str = ""

    def toggle_goal(self, goal: str) -> None:
        """Select or deselect a financial goal tag."""
        if goal in self.financial_goals:
            self.financial_goals = [g for g in self.financial_goals if g != goal]
        else:
            self.financial_goals = [*self.financial_goals, goal]
