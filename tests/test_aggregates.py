"""Tests for goal, portfolio, wallet and profile aggregates."""

from decimal import Decimal

from financez.models.finance import Card, Investment, SavingsGoal, Transaction
from financez.queries import (
    goal_progress,
    profile_stats,
    summarize_cashflow,
    summarize_goals,
    summarize_portfolio,
    total_balance,
)


def goal(current, target) -> SavingsGoal:
    return SavingsGoal(user_id="u1", title="g", current_amount=current, target_amount=target)


def holding(symbol, value, change) -> Investment:
    return Investment(user_id="u1", name=symbol, symbol=symbol, value=value, change_percent=change)


class TestGoalProgress:

    def test_zero_target_is_zero(self):
        assert goal_progress(Decimal("50"), Decimal("0")) == 0.0

    def test_clamped(self):
        assert goal_progress(Decimal("150"), Decimal("100")) == 100.0
        assert goal_progress(Decimal("-5"), Decimal("100")) == 0.0

    def test_fraction(self):
        assert goal_progress(Decimal("1"), Decimal("3")) == float(Decimal(1) / Decimal(3) * 100)


class TestSummarizeGoals:

    def test_totals_and_average(self):
        summary = summarize_goals([goal(100, 400), goal("50.25", "100"), goal(0, 0)])
        assert summary.goal_count == 3
        assert summary.total_saved == Decimal("150.25")
        assert summary.total_target == Decimal("500.00")
        assert summary.average_progress == float(Decimal("150.25") / Decimal("500.00") * 100)

    def test_average_is_ratio_of_totals_not_mean_of_ratios(self):
        summary = summarize_goals([goal(100, 100), goal(0, 900)])
        assert summary.average_progress == 10.0

    def test_empty(self):
        summary = summarize_goals([])
        assert summary.goal_count == 0
        assert summary.total_saved == Decimal("0.00")
        assert summary.average_progress == 0.0

    def test_all_zero_targets(self):
        assert summarize_goals([goal(10, 0), goal(5, 0)]).average_progress == 0.0

    def test_cents_add_exactly(self):
        goals = [goal("0.10", 1) for _ in range(3)]
        assert summarize_goals(goals).total_saved == Decimal("0.30")


class TestSummarizePortfolio:

    def test_total_change(self):
        summary = summarize_portfolio([holding("TECH", 1000, 2.5), holding("SPY", 3000, -1)])
        assert summary.portfolio_value == Decimal("4000.00")
        assert summary.total_change == Decimal("-5.00")
        assert summary.total_change_percent == -0.125
        assert not summary.is_gaining

    def test_allocation_shares(self):
        summary = summarize_portfolio([holding("A", 750, 0), holding("B", 250, 0)])
        assert [(h.symbol, h.share_percent) for h in summary.allocation] == [
            ("A", 75.0),
            ("B", 25.0),
        ]

    def test_empty_portfolio(self):
        summary = summarize_portfolio([])
        assert summary.portfolio_value == Decimal("0.00")
        assert summary.total_change_percent == 0.0
        assert summary.allocation == []

    def test_zero_value_portfolio(self):
        summary = summarize_portfolio([holding("A", 0, 5)])
        assert summary.total_change_percent == 0.0
        assert summary.allocation[0].share_percent == 0.0


class TestWalletAggregates:

    def test_total_balance(self):
        cards = [
            Card(user_id="u1", card_name="Main", card_type="Visa", balance="1200.10"),
            Card(user_id="u1", card_name="Save", card_type="Debit", balance="0.20"),
        ]
        investments = [holding("A", "99.70", 0)]
        assert total_balance(cards, investments) == Decimal("1300.00")

    def test_total_balance_empty(self):
        assert total_balance([], []) == Decimal("0.00")

    def test_cashflow(self):
        transactions = [
            Transaction(user_id="u1", title="Salary", amount=3000),
            Transaction(user_id="u1", title="Rent", amount=-1200),
            Transaction(user_id="u1", title="Coffee", amount="-4.50"),
        ]
        cashflow = summarize_cashflow(transactions)
        assert cashflow.income == Decimal("3000.00")
        assert cashflow.spending == Decimal("1204.50")
        assert cashflow.net == Decimal("1795.50")


class TestProfileStats:

    def test_stats(self):
        stats = profile_stats(2, [goal(100, 500), goal("20.5", 50)], [holding("A", 1000, 1)])
        assert stats.goals == 2
        assert stats.saved == Decimal("120.50")
        assert stats.invested == Decimal("1000.00")
