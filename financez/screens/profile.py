"""Profile screen: identity, headline stats and sign-out."""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from financez.models.profile import Profile
from financez.models.results import ActionResult
from financez.queries import catalog
from financez.queries.aggregates import ProfileStats, profile_stats
from financez.screens.base import ScreenController


class ProfileView(BaseModel):
    profile: Optional[Profile] = None
    stats: ProfileStats = Field(default_factory=ProfileStats)

    @property
    def member_since(self) -> str:
        """Month and year the profile was created, e.g. 'Mar 2025'."""
        if self.profile is None or self.profile.created_at is None:
            return ""
        return self.profile.created_at.strftime("%b %Y")

    @property
    def total_worth(self) -> Decimal:
        return self.stats.saved + self.stats.invested


class ProfileController(ScreenController[ProfileView]):
    screen_name = "profile"
    fetch_error_message = "Failed to load your profile."

    async def fetch(self, user_id: str) -> ProfileView:
        profile, goal_count, goals, investments = await self._gather(
            self._queries.fetch_one(catalog.PROFILE, user_id),
            self._queries.count(catalog.GOALS, user_id),
            self._queries.fetch(catalog.GOALS, user_id),
            self._queries.fetch(catalog.INVESTMENTS, user_id),
        )
        return ProfileView(
            profile=profile,
            stats=profile_stats(goal_count, goals, investments),
        )

    async def sign_out(self) -> ActionResult:
        """Sign out and forget what this screen showed."""
        result = await self._session.sign_out()
        self._clear()
        return result
