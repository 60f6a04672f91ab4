from financez.queries.scoped import QueryExecutionError, ScopedQuery, ScopedQueryExecutor
from financez.queries.aggregates import (
    CashflowSummary,
    GoalsSummary,
    HoldingShare,
    PortfolioSummary,
    ProfileStats,
    card_total,
    goal_progress,
    profile_stats,
    summarize_cashflow,
    summarize_goals,
    summarize_portfolio,
    total_balance,
)
from financez.queries import catalog

__all__ = [
    "QueryExecutionError",
    "ScopedQuery",
    "ScopedQueryExecutor",
    "CashflowSummary",
    "GoalsSummary",
    "HoldingShare",
    "PortfolioSummary",
    "ProfileStats",
    "card_total",
    "goal_progress",
    "profile_stats",
    "summarize_cashflow",
    "summarize_goals",
    "summarize_portfolio",
    "total_balance",
    "catalog",
]
