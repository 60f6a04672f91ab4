"""Home dashboard: greeting, total balance, recent goals and activity."""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from financez.audit.logger import AuditLogger
from financez.backend.interface import RowStoreInterface
from financez.models.finance import SavingsGoal, Transaction
from financez.models.money import ZERO
from financez.models.profile import Profile
from financez.queries import catalog
from financez.queries.aggregates import total_balance
from financez.screens.base import ScreenController


class HomeView(BaseModel):
    profile: Optional[Profile] = None
    recent_goals: list[SavingsGoal] = Field(default_factory=list)
    recent_transactions: list[Transaction] = Field(default_factory=list)
    total_balance: Decimal = ZERO

    @property
    def greeting_name(self) -> str:
        if self.profile and self.profile.first_name:
            return self.profile.first_name
        return "there"

    @property
    def initial(self) -> str:
        return self.profile.initial if self.profile else "U"


class HomeController(ScreenController[HomeView]):
    screen_name = "home"
    fetch_error_message = "Failed to load your dashboard."

    def __init__(
        self,
        session_manager,
        store: RowStoreInterface,
        audit_logger: Optional[AuditLogger] = None,
        recent_limit: int = catalog.RECENT_LIMIT,
    ):
        super().__init__(session_manager, store, audit_logger)
        self._recent_goals = catalog.GOALS.with_limit(recent_limit)
        self._recent_transactions = catalog.TRANSACTIONS.with_limit(recent_limit)

    async def fetch(self, user_id: str) -> HomeView:
        # Independent reads, combined once all have returned
        profile, goals, transactions, cards, investments = await self._gather(
            self._queries.fetch_one(catalog.PROFILE, user_id),
            self._queries.fetch(self._recent_goals, user_id),
            self._queries.fetch(self._recent_transactions, user_id),
            self._queries.fetch(catalog.CARDS, user_id),
            self._queries.fetch(catalog.INVESTMENTS, user_id),
        )
        return HomeView(
            profile=profile,
            recent_goals=goals,
            recent_transactions=transactions,
            total_balance=total_balance(cards, investments),
        )
