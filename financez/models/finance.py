"""
Finance row models: savings goals, cards, transactions, investments.

Each model mirrors one backend table. Rows are always owned by a user
through the user_id column; ownership is enforced by the query filter,
not by these models.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from financez.models.money import ZERO, Money


GOALS_TABLE = "savings_goals"
CARDS_TABLE = "cards"
TRANSACTIONS_TABLE = "transactions"
INVESTMENTS_TABLE = "investments"

# A daily move larger than this is a bad row, not a market event
MAX_CHANGE_PERCENT = Decimal("100000")

GOAL_EMOJI_OPTIONS = ["🎯", "📱", "🏖️", "🎮", "🚗", "🏠", "💍", "🎓"]
GOAL_COLOR_OPTIONS = ["#8B5CF6", "#EC4899", "#10B981", "#F59E0B", "#3B82F6", "#EF4444"]


class TransactionType(str, Enum):
    """Kind of money movement."""
    INCOME = "income"
    EXPENSE = "expense"
    SAVINGS = "savings"


# =============================================================================
# SAVINGS GOALS
# =============================================================================

class SavingsGoal(BaseModel):
    """
    A savings goal.

    current_amount starts at 0 on creation. Progress is
    current/target and is 0 (not NaN) when the target is 0.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: Optional[str] = None
    user_id: str
    title: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="What the user is saving for"
    )
    target_amount: Money = Field(
        ...,
        description="Amount to reach"
    )
    current_amount: Money = Field(
        default=ZERO,
        description="Amount saved so far"
    )
    emoji: str = Field(default=GOAL_EMOJI_OPTIONS[0])
    color: str = Field(default=GOAL_COLOR_OPTIONS[0])
    deadline: Optional[date] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def progress_percent(self) -> float:
        """Raw progress, may exceed 100."""
        if self.target_amount <= 0:
            return 0.0
        return float(self.current_amount / self.target_amount * 100)

    @property
    def display_progress(self) -> float:
        """Progress clamped to [0, 100] for progress bars."""
        return max(0.0, min(self.progress_percent, 100.0))

    @property
    def remaining(self) -> Decimal:
        return self.target_amount - self.current_amount


# =============================================================================
# WALLET
# =============================================================================

class Card(BaseModel):
    """A payment card shown in the wallet. Read-only."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: Optional[str] = None
    user_id: str
    card_name: str
    card_type: str
    balance: Money = ZERO
    card_number: str = ""

    created_at: Optional[datetime] = None

    @property
    def masked_number(self) -> str:
        """Only the last four digits are ever displayed."""
        digits = "".join(ch for ch in self.card_number if ch.isdigit())
        if len(digits) < 4:
            return "•••• ••••"
        return f"•••• {digits[-4:]}"


class Transaction(BaseModel):
    """
    A transaction log entry. Append-only.

    amount is signed: positive is money in, negative is money out.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: Optional[str] = None
    user_id: str
    title: str
    merchant: str = ""
    amount: Money
    category: str = ""
    icon: str = ""
    type: TransactionType = TransactionType.EXPENSE

    created_at: Optional[datetime] = None

    @property
    def is_credit(self) -> bool:
        return self.amount > 0


# =============================================================================
# INVESTMENTS
# =============================================================================

class Investment(BaseModel):
    """A holding in the investment overview. Read-only."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: Optional[str] = None
    user_id: str
    name: str
    symbol: str
    value: Money = ZERO
    change_percent: Decimal = Field(
        default=Decimal("0"),
        description="Today's change in percent (e.g. 2.5 for +2.5%)"
    )

    created_at: Optional[datetime] = None

    @field_validator('change_percent', mode='before')
    @classmethod
    def percent_from_number(cls, v):
        """Go through str() so float noise does not leak into the Decimal."""
        if v is None:
            return Decimal("0")
        if isinstance(v, float):
            v = Decimal(str(v))
        return v

    @field_validator('change_percent')
    @classmethod
    def percent_in_range(cls, v: Decimal) -> Decimal:
        if not v.is_finite() or abs(v) >= MAX_CHANGE_PERCENT:
            raise ValueError(f"Change percent out of range: {v}")
        return v

    @property
    def change_amount(self) -> Decimal:
        """Today's change in money: value * change_percent / 100."""
        return self.value * self.change_percent / 100

    @property
    def is_gaining(self) -> bool:
        return self.change_percent >= 0
