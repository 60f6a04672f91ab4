"""Tests for the screen controllers and display formatting."""

import asyncio
import random
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from financez.backend import BackendError
from financez.models.audit import AuditEventType
from financez.models.finance import (
    CARDS_TABLE,
    GOAL_COLOR_OPTIONS,
    GOALS_TABLE,
    INVESTMENTS_TABLE,
    TRANSACTIONS_TABLE,
)
from financez.models.forms import GoalDraft, SignInForm
from financez.models.profile import PROFILES_TABLE
from financez.screens import (
    GOAL_CREATE_FAILED,
    GOAL_CREATED,
    NOT_SIGNED_IN,
    RECOMMENDATIONS,
    GoalsController,
    HomeController,
    InvestController,
    ProfileController,
    ScreenController,
    WalletController,
)
from financez.screens.formatting import (
    HIDDEN_BALANCE,
    format_balance,
    format_money,
    format_percent,
    format_signed_amount,
    time_ago,
)
from financez.validation import FILL_ALL_FIELDS, INVALID_TARGET_AMOUNT


@pytest.fixture
def finances(store, alice):
    """A small but complete data set for alice, plus rows owned by someone else."""
    store.seed(
        GOALS_TABLE,
        {"user_id": alice.id, "title": "Emergency Fund", "target_amount": 1000, "current_amount": 250},
        {"user_id": alice.id, "title": "Vacation", "target_amount": 3000, "current_amount": 1950},
        {"user_id": alice.id, "title": "Laptop", "target_amount": 0, "current_amount": 0},
        {"user_id": alice.id, "title": "Car", "target_amount": 8000, "current_amount": 800},
        {"user_id": "someone-else", "title": "Yacht", "target_amount": 1e6, "current_amount": 5},
    )
    store.seed(
        TRANSACTIONS_TABLE,
        {"user_id": alice.id, "title": "Salary", "amount": 5200, "type": "income"},
        {"user_id": alice.id, "title": "Rent", "amount": -1500, "type": "expense"},
        {"user_id": alice.id, "title": "Groceries", "amount": -82.35, "type": "expense"},
        {"user_id": alice.id, "title": "To savings", "amount": -200, "type": "savings"},
    )
    store.seed(
        CARDS_TABLE,
        {"user_id": alice.id, "card_name": "Everyday", "card_type": "Visa",
         "balance": 2450.75, "card_number": "4000123412341234"},
        {"user_id": alice.id, "card_name": "Savings", "card_type": "Debit",
         "balance": 10000, "card_number": "5000987698769876"},
    )
    store.seed(
        INVESTMENTS_TABLE,
        {"user_id": alice.id, "name": "S&P 500", "symbol": "SPY", "value": 3000, "change_percent": 1.2},
        {"user_id": alice.id, "name": "Tech ETF", "symbol": "TECH", "value": 1245, "change_percent": -2.0},
        {"user_id": "someone-else", "name": "Gold", "symbol": "GLD", "value": 99999, "change_percent": 0},
    )


class TestScreenPattern:
    """Behaviour shared by every controller."""

    async def test_no_user_stops_loading(self, session_manager, store):
        await session_manager.start()
        controller = GoalsController(session_manager, store)
        assert controller.loading is True
        assert await controller.on_focus() is None
        assert controller.loading is False
        assert store.calls == []

    async def test_failure_keeps_previous_data(self, signed_in, store, finances, audit_logger):
        controller = WalletController(signed_in, store, audit_logger)
        first = await controller.on_focus()

        store.fail("select", TRANSACTIONS_TABLE)
        again = await controller.on_refresh()

        assert again is first
        assert controller.data is first
        assert controller.error == "Failed to fetch wallet data."
        assert controller.refreshing is False
        assert AuditEventType.SCREEN_FETCH_FAILED in [
            e.event_type for e in audit_logger.recent_events()
        ]

        store.heal()
        await controller.on_refresh()
        assert controller.error is None

    async def test_refresh_refetches_everything(self, signed_in, store, finances):
        controller = InvestController(signed_in, store)
        await controller.on_focus()
        before = store.calls_to("select", INVESTMENTS_TABLE)
        await controller.on_refresh()
        assert store.calls_to("select", INVESTMENTS_TABLE) == before + 1

    async def test_stale_response_is_dropped(self, signed_in, store, finances, alice):
        """A slow fetch finishing after a newer one cannot overwrite it."""
        controller = GoalsController(signed_in, store)
        release = asyncio.Event()
        original_fetch = controller.fetch
        calls = []

        async def fetch(user_id):
            calls.append(user_id)
            view = await original_fetch(user_id)
            if len(calls) == 1:
                await release.wait()
            return view

        controller.fetch = fetch

        slow = asyncio.ensure_future(controller.on_focus())
        await asyncio.sleep(0)
        store.seed(GOALS_TABLE, {"user_id": alice.id, "title": "Newer", "target_amount": 10})
        fresh = await controller.on_refresh()
        release.set()
        await slow

        assert controller.data is fresh
        assert controller.data.goals[0].title == "Newer"

    async def test_user_switch_never_shows_previous_rows(self, signed_in, auth, store, finances):
        controller = GoalsController(signed_in, store)
        await controller.on_focus()
        assert controller.data.goals

        await signed_in.sign_out()
        bob = auth.register("bob@example.com", "secret123")
        store.seed(PROFILES_TABLE, {"user_id": bob.id, "email": bob.email,
                                    "onboarding_completed": True})
        await signed_in.sign_in(SignInForm(email="bob@example.com", password="secret123"))

        store.fail("select", GOALS_TABLE)
        assert await controller.on_focus() is None
        assert controller.data is None
        assert controller.error == "Failed to fetch your goals."

    async def test_signed_out_screen_is_emptied(self, signed_in, store, finances):
        controller = WalletController(signed_in, store)
        await controller.on_focus()
        await signed_in.sign_out()
        assert await controller.on_refresh() is None
        assert controller.refreshing is False

    async def test_fetch_for_departed_user_is_dropped(self, signed_in, store, finances):
        controller = GoalsController(signed_in, store)
        release = asyncio.Event()
        original_fetch = controller.fetch

        async def fetch(user_id):
            view = await original_fetch(user_id)
            await release.wait()
            return view

        controller.fetch = fetch
        pending = asyncio.ensure_future(controller.on_focus())
        await asyncio.sleep(0)
        await signed_in.sign_out()
        release.set()

        assert await pending is None
        assert controller.data is None
        assert controller.loading is False

    async def test_every_read_finishes_before_a_failure_is_raised(self):
        finished = []

        async def failing():
            raise BackendError("backend unavailable")

        async def slow():
            await asyncio.sleep(0.01)
            finished.append("slow")

        with pytest.raises(BackendError):
            await ScreenController._gather(failing(), slow())
        assert finished == ["slow"]

    async def test_screen_with_several_failing_reads(self, signed_in, store, audit_logger):
        store.fail("select")
        controller = HomeController(signed_in, store, audit_logger)
        assert await controller.on_focus() is None
        assert controller.error == "Failed to load your dashboard."
        assert controller.loading is False


class TestHome:

    async def test_dashboard(self, signed_in, store, finances):
        view = await HomeController(signed_in, store).on_focus()
        assert view.greeting_name == "Alice"
        assert view.initial == "A"
        assert [g.title for g in view.recent_goals] == ["Car", "Laptop", "Vacation"]
        assert [t.title for t in view.recent_transactions] == ["To savings", "Groceries", "Rent"]
        assert view.total_balance == Decimal("16695.75")

    async def test_recent_limit(self, signed_in, store, finances):
        view = await HomeController(signed_in, store, recent_limit=1).on_focus()
        assert len(view.recent_goals) == 1
        assert len(view.recent_transactions) == 1

    async def test_missing_profile_defaults(self, signed_in, store):
        store.tables.clear()
        view = await HomeController(signed_in, store).on_focus()
        assert view.greeting_name == "there"
        assert view.initial == "U"
        assert view.total_balance == Decimal("0.00")


class TestGoals:

    @pytest.fixture
    def goals(self, signed_in, store, validator, audit_logger):
        return GoalsController(signed_in, store, validator, audit_logger, rng=random.Random(7))

    async def test_list_and_summary(self, goals, finances):
        view = await goals.on_focus()
        assert [g.title for g in view.goals] == ["Car", "Laptop", "Vacation", "Emergency Fund"]
        assert view.summary.goal_count == 4
        assert view.summary.total_saved == Decimal("3000.00")
        assert view.summary.total_target == Decimal("12000.00")
        assert view.summary.average_progress == 25.0
        laptop = view.goals[1]
        assert laptop.display_progress == 0.0

    async def test_create_goal(self, goals, store, alice):
        result = await goals.create_goal(GoalDraft(title="Trip", target_amount="500", emoji="🏖️"))

        assert result.success
        assert result.message == GOAL_CREATED
        row = store.tables[GOALS_TABLE][-1]
        assert row["user_id"] == alice.id
        assert row["target_amount"] == 500.0
        assert row["color"] in GOAL_COLOR_OPTIONS

        trip = goals.data.goals[0]
        assert trip.title == "Trip"
        assert trip.current_amount == Decimal("0.00")
        assert trip.emoji == "🏖️"

    @pytest.mark.parametrize("draft,message", [
        (GoalDraft(title="", target_amount="500"), FILL_ALL_FIELDS),
        (GoalDraft(title="Trip", target_amount=""), FILL_ALL_FIELDS),
        (GoalDraft(title="Trip", target_amount="lots"), INVALID_TARGET_AMOUNT),
        (GoalDraft(title="Trip", target_amount="-20"), INVALID_TARGET_AMOUNT),
    ])
    async def test_invalid_goal_issues_no_insert(self, goals, store, draft, message):
        result = await goals.create_goal(draft)
        assert not result.success
        assert result.message == message
        assert store.calls_to("insert") == 0

    async def test_signed_out(self, session_manager, store):
        await session_manager.start()
        result = await GoalsController(session_manager, store).create_goal(
            GoalDraft(title="Trip", target_amount="500")
        )
        assert result.message == NOT_SIGNED_IN

    async def test_insert_failure(self, goals, store, audit_logger):
        store.fail("insert", GOALS_TABLE)
        result = await goals.create_goal(GoalDraft(title="Trip", target_amount="500"))
        assert not result.success
        assert result.message == GOAL_CREATE_FAILED
        assert goals.creating is False
        assert AuditEventType.GOAL_CREATE_FAILED in [
            e.event_type for e in audit_logger.recent_events()
        ]

    async def test_absurd_target_is_rejected_without_insert(self, goals, store):
        result = await goals.create_goal(GoalDraft(title="Trip", target_amount="1e30"))
        assert not result.success
        assert result.message == INVALID_TARGET_AMOUNT
        assert store.calls_to("insert") == 0

    async def test_concurrent_submission_rejected(self, goals, store):
        goals.creating = True
        result = await goals.create_goal(GoalDraft(title="Trip", target_amount="500"))
        assert not result.success
        assert store.calls_to("insert") == 0


class TestWallet:

    async def test_wallet(self, signed_in, store, finances):
        view = await WalletController(signed_in, store).on_focus()
        assert [c.masked_number for c in view.cards] == ["•••• 1234", "•••• 9876"]
        assert view.card_total == Decimal("12450.75")
        assert len(view.transactions) == 4
        assert view.transactions[0].title == "To savings"
        assert view.cashflow.income == Decimal("5200.00")
        assert view.cashflow.spending == Decimal("1782.35")

    def test_toggle_balance(self, session_manager, store):
        wallet = WalletController(session_manager, store)
        assert wallet.show_balance is True
        assert wallet.toggle_balance() is False
        assert wallet.toggle_balance() is True


class TestInvest:

    async def test_portfolio(self, signed_in, store, finances):
        view = await InvestController(signed_in, store).on_focus()
        assert [h.symbol for h in view.holdings] == ["SPY", "TECH"]
        assert view.summary.portfolio_value == Decimal("4245.00")
        assert view.summary.total_change == Decimal("11.10")
        assert view.summary.total_change_percent == float(
            Decimal("11.10") / Decimal("4245.00") * 100
        )
        assert [r.title for r in view.recommendations] == [r.title for r in RECOMMENDATIONS]

    async def test_error_message(self, signed_in, store):
        store.fail("select", INVESTMENTS_TABLE)
        controller = InvestController(signed_in, store)
        await controller.on_focus()
        assert controller.error == "Failed to fetch your investments."

    async def test_out_of_range_row_is_reported_not_raised(self, signed_in, store, alice):
        store.seed(INVESTMENTS_TABLE, {"user_id": alice.id, "name": "Broken", "symbol": "BRK",
                                       "value": 1e30, "change_percent": 0})
        controller = InvestController(signed_in, store)
        assert await controller.on_focus() is None
        assert controller.error == "Failed to fetch your investments."
        assert controller.loading is False


class TestProfile:

    async def test_profile_stats(self, signed_in, store, finances):
        view = await ProfileController(signed_in, store).on_focus()
        assert view.profile.display_name == "Alice Walker"
        assert view.stats.goals == 4
        assert view.stats.saved == Decimal("3000.00")
        assert view.stats.invested == Decimal("4245.00")
        assert view.total_worth == Decimal("7245.00")
        assert view.member_since == "Jan 2025"

    async def test_sign_out(self, signed_in, store):
        controller = ProfileController(signed_in, store)
        await controller.on_focus()
        result = await controller.sign_out()
        assert result.next_route == "login"
        assert controller.data is None
        assert signed_in.profile is None


class TestFormatting:

    def test_money(self):
        assert format_money(Decimal("1234.5")) == "$1,234.50"
        assert format_money(Decimal("-3")) == "-$3.00"
        assert format_money(Decimal("7"), symbol="€") == "€7.00"

    def test_signed_amount(self):
        assert format_signed_amount(Decimal("25")) == "+$25.00"
        assert format_signed_amount(Decimal("-9.99")) == "-$9.99"
        assert format_signed_amount(Decimal("0")) == "$0.00"

    def test_hidden_balance(self):
        assert format_balance(Decimal("10"), visible=False) == HIDDEN_BALANCE

    def test_percent(self):
        assert format_percent(12.346) == "12.35%"
        assert format_percent(1.5, signed=True) == "+1.50%"
        assert format_percent(-1.5, signed=True) == "-1.50%"

    @pytest.mark.parametrize("delta,text", [
        (timedelta(seconds=10), "less than a minute ago"),
        (timedelta(minutes=5), "5 minutes ago"),
        (timedelta(hours=3), "3 hours ago"),
        (timedelta(days=1), "1 day ago"),
        (timedelta(days=60), "2 months ago"),
    ])
    def test_time_ago(self, delta, text):
        now = datetime(2025, 6, 1, tzinfo=timezone.utc)
        assert time_ago(now - delta, now=now) == text

    def test_time_ago_none(self):
        assert time_ago(None) == ""
