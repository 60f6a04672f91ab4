"""
The queries the screens run.

Each is scoped by user_id when executed. Screens refer to these by
name instead of building selects inline.
"""

from financez.models.finance import (
    CARDS_TABLE,
    GOALS_TABLE,
    INVESTMENTS_TABLE,
    TRANSACTIONS_TABLE,
    Card,
    Investment,
    SavingsGoal,
    Transaction,
)
from financez.models.profile import PROFILES_TABLE, Profile
from financez.queries.aggregates import summarize_goals, summarize_portfolio
from financez.queries.scoped import ScopedQuery


RECENT_LIMIT = 3


PROFILE = ScopedQuery(table=PROFILES_TABLE, model=Profile, limit=1)

GOALS = ScopedQuery(
    table=GOALS_TABLE,
    model=SavingsGoal,
    order_by="created_at",
    aggregate=summarize_goals,
)

RECENT_GOALS = GOALS.with_limit(RECENT_LIMIT)

TRANSACTIONS = ScopedQuery(
    table=TRANSACTIONS_TABLE,
    model=Transaction,
    order_by="created_at",
)

RECENT_TRANSACTIONS = TRANSACTIONS.with_limit(RECENT_LIMIT)

CARDS = ScopedQuery(table=CARDS_TABLE, model=Card)

INVESTMENTS = ScopedQuery(
    table=INVESTMENTS_TABLE,
    model=Investment,
    order_by="value",
    aggregate=summarize_portfolio,
)
