"""
In-memory reductions over fetched rows.

All sums are Decimal and exact to the cent. Percentages are floats and
are defined as 0 whenever their denominator is not positive, so a
screen can never show NaN or Infinity.
"""

from decimal import Decimal
from typing import Iterable

from pydantic import BaseModel, Field

from financez.models.finance import Card, Investment, SavingsGoal, Transaction
from financez.models.money import ZERO, round_cents


def _percent(part: Decimal, whole: Decimal) -> float:
    if whole <= 0:
        return 0.0
    return float(part / whole * 100)


def goal_progress(current: Decimal, target: Decimal) -> float:
    """current/target*100, clamped to [0, 100]; 0 when the target is 0."""
    return max(0.0, min(_percent(current, target), 100.0))


# =============================================================================
# GOALS
# =============================================================================

class GoalsSummary(BaseModel):
    """Totals shown above the goals list."""
    goal_count: int = 0
    total_saved: Decimal = ZERO
    total_target: Decimal = ZERO
    average_progress: float = 0.0


def summarize_goals(goals: Iterable[SavingsGoal]) -> GoalsSummary:
    """
    Saved and target totals plus overall progress.

    average_progress is total saved over total target, not a mean of
    per-goal percentages.
    """
    goals = list(goals)
    total_saved = round_cents(sum((g.current_amount for g in goals), ZERO))
    total_target = round_cents(sum((g.target_amount for g in goals), ZERO))
    return GoalsSummary(
        goal_count=len(goals),
        total_saved=total_saved,
        total_target=total_target,
        average_progress=_percent(total_saved, total_target),
    )


# =============================================================================
# INVESTMENTS
# =============================================================================

class HoldingShare(BaseModel):
    symbol: str
    value: Decimal
    share_percent: float


class PortfolioSummary(BaseModel):
    """Portfolio header figures and allocation breakdown."""
    portfolio_value: Decimal = ZERO
    total_change: Decimal = ZERO
    total_change_percent: float = 0.0
    allocation: list[HoldingShare] = Field(default_factory=list)

    @property
    def is_gaining(self) -> bool:
        return self.total_change >= 0


def summarize_portfolio(holdings: Iterable[Investment]) -> PortfolioSummary:
    """
    Total value, today's change in money and percent, and each
    holding's share of the total.
    """
    holdings = list(holdings)
    portfolio_value = round_cents(sum((h.value for h in holdings), ZERO))
    total_change = round_cents(sum((h.change_amount for h in holdings), Decimal("0")))
    return PortfolioSummary(
        portfolio_value=portfolio_value,
        total_change=total_change,
        total_change_percent=_percent(total_change, portfolio_value),
        allocation=[
            HoldingShare(
                symbol=h.symbol,
                value=h.value,
                share_percent=_percent(h.value, portfolio_value),
            )
            for h in holdings
        ],
    )


# =============================================================================
# WALLET
# =============================================================================

def card_total(cards: Iterable[Card]) -> Decimal:
    return round_cents(sum((c.balance for c in cards), ZERO))


def total_balance(cards: Iterable[Card], investments: Iterable[Investment]) -> Decimal:
    """Everything the user holds: card balances plus investment values."""
    invested = sum((i.value for i in investments), ZERO)
    return round_cents(card_total(cards) + invested)


class CashflowSummary(BaseModel):
    income: Decimal = ZERO
    spending: Decimal = ZERO
    net: Decimal = ZERO


def summarize_cashflow(transactions: Iterable[Transaction]) -> CashflowSummary:
    """
    Split signed amounts into money in and money out.

    spending is reported as a positive number.
    """
    income = ZERO
    spending = ZERO
    for t in transactions:
        if t.amount > 0:
            income += t.amount
        else:
            spending -= t.amount
    return CashflowSummary(
        income=round_cents(income),
        spending=round_cents(spending),
        net=round_cents(income - spending),
    )


# =============================================================================
# PROFILE
# =============================================================================

class ProfileStats(BaseModel):
    goals: int = 0
    saved: Decimal = ZERO
    invested: Decimal = ZERO


def profile_stats(
    goal_count: int,
    goals: Iterable[SavingsGoal],
    investments: Iterable[Investment],
) -> ProfileStats:
    return ProfileStats(
        goals=goal_count,
        saved=round_cents(sum((g.current_amount for g in goals), ZERO)),
        invested=round_cents(sum((i.value for i in investments), ZERO)),
    )
