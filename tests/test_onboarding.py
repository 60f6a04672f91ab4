"""Tests for the onboarding flow and component wiring."""

import pytest

from financez.config import Settings
from financez.models.audit import AuditEventType
from financez.models.auth import AuthState
from financez.models.forms import OnboardingForm, SignInForm
from financez.models.profile import PROFILES_TABLE, RiskTolerance
from financez.navigation import Flow, Navigator, Route
from financez.orchestrator import (
    PROFILE_SAVE_FAILED,
    PROFILE_SAVE_NOT_SIGNED_IN,
    AppComponents,
    OnboardingFlow,
    build_components,
)
from financez.validation import INCOMPLETE_ONBOARDING


def filled_form(**overrides) -> OnboardingForm:
    values = {
        "full_name": "Bob Stone",
        "age": "29",
        "occupation": "Designer",
        "monthly_income": "4200.50",
        "financial_goals": ["Emergency Fund", "Travel"],
        "risk_tolerance": "Aggressive",
    }
    values.update(overrides)
    return OnboardingForm(**values)


@pytest.fixture
def bob(auth, store):
    """Signed up, profile row written, questionnaire not yet answered."""
    user = auth.register("bob@example.com", "secret123")
    store.seed(PROFILES_TABLE, {"user_id": user.id, "email": user.email})
    return user


@pytest.fixture
async def onboarding(session_manager, store, validator, audit_logger, app_settings, bob):
    await session_manager.start()
    await session_manager.sign_in(SignInForm(email="bob@example.com", password="secret123"))
    yield OnboardingFlow(store, session_manager, validator, audit_logger, app_settings)
    await session_manager.stop()


class TestOnboardingFlow:

    async def test_complete_opens_main_app(self, onboarding, session_manager, store, bob):
        navigator = Navigator(session_manager)
        assert navigator.flow == Flow.ONBOARDING

        result = await onboarding.complete(filled_form())

        assert result.success
        assert result.title == "Profile Complete!"
        assert result.message == "Welcome to FinanceZ. Let's get started!"
        assert result.next_route == "home"

        row = store.tables[PROFILES_TABLE][0]
        assert row["full_name"] == "Bob Stone"
        assert row["age"] == 29
        assert row["monthly_income"] == 4200.5
        assert row["risk_tolerance"] == "aggressive"
        assert row["financial_goals"] == ["Emergency Fund", "Travel"]
        assert row["onboarding_completed"] is True

        assert session_manager.profile.risk_tolerance == RiskTolerance.AGGRESSIVE
        assert session_manager.auth_state == AuthState.AUTHENTICATED_COMPLETE_PROFILE
        assert navigator.flow == Flow.MAIN
        assert navigator.current_route == Route.HOME
        navigator.close()

    @pytest.mark.parametrize("overrides", [
        {"full_name": ""},
        {"occupation": "  "},
        {"financial_goals": []},
        {"risk_tolerance": ""},
    ])
    async def test_incomplete_form_writes_nothing(self, onboarding, store, overrides):
        result = await onboarding.complete(filled_form(**overrides))
        assert not result.success
        assert result.title == "Incomplete Form"
        assert result.message == INCOMPLETE_ONBOARDING
        assert store.calls_to("update") == 0
        assert store.calls_to("upsert") == 0

    async def test_unparseable_numbers_are_rejected(self, onboarding, store):
        result = await onboarding.complete(filled_form(age="twenty"))
        assert not result.success
        assert store.calls_to("update") == 0

    async def test_save_failure(self, onboarding, session_manager, store, audit_logger):
        store.fail("update", PROFILES_TABLE)
        result = await onboarding.complete(filled_form())

        assert not result.success
        assert result.message == PROFILE_SAVE_FAILED
        assert store.tables[PROFILES_TABLE][0].get("full_name") is None
        assert session_manager.auth_state == AuthState.AUTHENTICATED_INCOMPLETE_PROFILE
        assert AuditEventType.ONBOARDING_FAILED in [
            e.event_type for e in audit_logger.recent_events()
        ]

    async def test_missing_row_is_created(self, onboarding, session_manager, store, bob):
        store.tables[PROFILES_TABLE].clear()
        result = await onboarding.complete(filled_form())

        assert result.success
        assert store.calls_to("upsert", PROFILES_TABLE) == 1
        rows = store.tables[PROFILES_TABLE]
        assert len(rows) == 1
        assert rows[0]["user_id"] == bob.id
        assert rows[0]["email"] == "bob@example.com"
        assert session_manager.profile.onboarding_completed is True

    async def test_signed_out(self, session_manager, store, audit_logger):
        await session_manager.start()
        flow = OnboardingFlow(store, session_manager, audit_logger=audit_logger)
        result = await flow.complete(filled_form())
        assert not result.success
        assert result.message == PROFILE_SAVE_NOT_SIGNED_IN
        assert result.next_route == "login"
        assert store.calls == []


class TestBuildComponents:

    def test_wiring(self, auth, store, audit_logger):
        components = build_components(auth, store, settings=Settings(), audit_logger=audit_logger)

        assert isinstance(components, AppComponents)
        assert components.audit_logger is audit_logger
        for controller in (
            components.home,
            components.goals,
            components.wallet,
            components.invest,
            components.profile,
        ):
            assert controller.user_id is None
        assert components.navigator.current_route == Route.SPLASH
        components.navigator.close()

    async def test_started_components_follow_the_session(self, auth, store, alice):
        components = build_components(auth, store, settings=Settings())
        auth.restore(alice)
        await components.session.start()

        assert components.navigator.current_route == Route.HOME
        home = await components.home.on_focus()
        assert home.greeting_name == "Alice"

        await components.session.stop()
