"""Wallet screen: cards, transaction history and the balance toggle."""

from decimal import Decimal

from pydantic import BaseModel, Field

from financez.models.finance import Card, Transaction
from financez.models.money import ZERO
from financez.queries import catalog
from financez.queries.aggregates import CashflowSummary, card_total, summarize_cashflow
from financez.screens.base import ScreenController


class WalletView(BaseModel):
    cards: list[Card] = Field(default_factory=list)
    transactions: list[Transaction] = Field(default_factory=list)
    card_total: Decimal = ZERO
    cashflow: CashflowSummary = Field(default_factory=CashflowSummary)


class WalletController(ScreenController[WalletView]):
    screen_name = "wallet"
    fetch_error_message = "Failed to fetch wallet data."

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.show_balance = True

    def toggle_balance(self) -> bool:
        """Hide or reveal card balances. Returns the new visibility."""
        self.show_balance = not self.show_balance
        return self.show_balance

    async def fetch(self, user_id: str) -> WalletView:
        cards, transactions = await self._gather(
            self._queries.fetch(catalog.CARDS, user_id),
            self._queries.fetch(catalog.TRANSACTIONS, user_id),
        )
        return WalletView(
            cards=cards,
            transactions=transactions,
            card_total=card_total(cards),
            cashflow=summarize_cashflow(transactions),
        )
