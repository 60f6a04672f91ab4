"""Investment overview: holdings by value and portfolio totals."""

from pydantic import BaseModel, Field

from financez.models.finance import Investment
from financez.queries import catalog
from financez.queries.aggregates import PortfolioSummary, summarize_portfolio
from financez.screens.base import ScreenController


class Recommendation(BaseModel):
    title: str
    description: str
    risk: str
    potential_return: str
    color: str


# Fixed suggestions; not derived from the user's holdings
RECOMMENDATIONS = [
    Recommendation(
        title="Diversify with Bonds",
        description="Add stability to your portfolio",
        risk="Low",
        potential_return="4-6%",
        color="#3B82F6",
    ),
    Recommendation(
        title="Growth Stocks",
        description="High potential tech companies",
        risk="High",
        potential_return="10-15%",
        color="#8B5CF6",
    ),
    Recommendation(
        title="Real Estate ETF",
        description="Exposure to property market",
        risk="Medium",
        potential_return="6-9%",
        color="#10B981",
    ),
]


class InvestView(BaseModel):
    holdings: list[Investment] = Field(default_factory=list)
    summary: PortfolioSummary = Field(default_factory=PortfolioSummary)
    recommendations: list[Recommendation] = Field(default_factory=lambda: list(RECOMMENDATIONS))


class InvestController(ScreenController[InvestView]):
    screen_name = "invest"
    fetch_error_message = "Failed to fetch your investments."

    async def fetch(self, user_id: str) -> InvestView:
        holdings = await self._queries.fetch(catalog.INVESTMENTS, user_id)
        return InvestView(
            holdings=holdings,
            summary=summarize_portfolio(holdings),
        )
