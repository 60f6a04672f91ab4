"""
Main Orchestrator for FinanceZ

This module ties together all the components and defines the
end-to-end flow for onboarding (questionnaire -> validate -> save
profile -> refresh session state -> main app), plus the factory that
wires the backend, the session manager, the navigator and the screens.

The orchestrator enforces the boundaries:
- Nothing is written unless the form validated
- The gate only opens once the saved profile has been read back
- Every step is audited
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

import structlog

from financez.audit import AuditLogger, configure_logging
from financez.backend import (
    AuthInterface,
    BackendError,
    RowStoreInterface,
    SupabaseAuth,
    SupabaseClient,
    SupabaseRowStore,
)
from financez.config import Settings, get_settings
from financez.config.settings import AppSettings
from financez.models.audit import AuditEventBuilder
from financez.models.forms import OnboardingForm
from financez.models.money import parse_amount, to_wire
from financez.models.profile import PROFILES_TABLE
from financez.models.results import ActionResult
from financez.navigation import Navigator, Route
from financez.screens import (
    GoalsController,
    HomeController,
    InvestController,
    ProfileController,
    WalletController,
)
from financez.session import SessionManager
from financez.validation import FormValidator, parse_age, parse_risk_tolerance


logger = structlog.get_logger(__name__)

PROFILE_SAVE_FAILED = "Failed to save your profile. Please try again."
PROFILE_SAVE_NOT_SIGNED_IN = "You must be logged in to save your profile."


class OnboardingFlow:
    """
    Orchestrates the onboarding questionnaire.

    Flow:
    1. Validate → every field, at least one goal
    2. Save → update the user's profile row, completed flag set
    3. Refresh → re-read the profile so the gate moves to the main app

    If the save fails the profile is left as it was and the user stays
    on the form.
    """

    def __init__(
        self,
        store: RowStoreInterface,
        session_manager: SessionManager,
        validator: Optional[FormValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[AppSettings] = None,
    ):
        self._store = store
        self._session = session_manager
        self._settings = settings or get_settings().app
        self._validator = validator or FormValidator(self._settings)
        self._audit_logger = audit_logger or AuditLogger()

    async def complete(self, form: OnboardingForm) -> ActionResult:
        user = self._session.user
        if user is None:
            return ActionResult.fail(
                PROFILE_SAVE_NOT_SIGNED_IN,
                next_route=Route.LOGIN.value,
            )

        validation = self._validator.validate_onboarding(form)
        if not validation.is_valid:
            self._audit_logger.log_validation_failed(validation, user.id)
            return ActionResult.from_validation(validation, title="Incomplete Form")

        payload = {
            "full_name": form.full_name,
            "age": parse_age(form.age),
            "occupation": form.occupation,
            "monthly_income": to_wire(parse_amount(form.monthly_income)),
            "financial_goals": list(form.financial_goals),
            "risk_tolerance": parse_risk_tolerance(form.risk_tolerance).value,
            "onboarding_completed": True,
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }

        try:
            rows = await self._store.update(PROFILES_TABLE, payload, {"user_id": user.id})
            if not rows:
                # Profile row was never written at sign-up
                await self._store.upsert(
                    PROFILES_TABLE,
                    {"user_id": user.id, "email": user.email or "", **payload},
                    on_conflict="user_id",
                )
        except BackendError as e:
            self._audit_logger.log(AuditEventBuilder.onboarding_failed(user.id, str(e)))
            return ActionResult.fail(PROFILE_SAVE_FAILED)

        self._audit_logger.log(AuditEventBuilder.onboarding_completed(user.id))
        await self._session.refresh_profile()

        return ActionResult.ok(
            f"Welcome to {self._settings.app_name}. Let's get started!",
            title="Profile Complete!",
            next_route=Route.HOME.value,
        )


@dataclass
class AppComponents:
    """Everything the UI needs, wired together."""
    settings: Settings
    audit_logger: AuditLogger
    session: SessionManager
    navigator: Navigator
    onboarding: OnboardingFlow
    home: HomeController
    goals: GoalsController
    wallet: WalletController
    invest: InvestController
    profile: ProfileController


def build_components(
    auth: AuthInterface,
    store: RowStoreInterface,
    settings: Optional[Settings] = None,
    audit_logger: Optional[AuditLogger] = None,
) -> AppComponents:
    """
    Wire components around an already-constructed backend.

    The session manager is not started; call `await components.session.start()`.
    """
    settings = settings or get_settings()
    app_settings = settings.app
    audit_logger = audit_logger or AuditLogger()
    validator = FormValidator(app_settings)

    session = SessionManager(
        auth,
        store,
        validator=validator,
        audit_logger=audit_logger,
        settings=app_settings,
    )
    navigator = Navigator(session, audit_logger)

    return AppComponents(
        settings=settings,
        audit_logger=audit_logger,
        session=session,
        navigator=navigator,
        onboarding=OnboardingFlow(store, session, validator, audit_logger, app_settings),
        home=HomeController(
            session, store, audit_logger, recent_limit=app_settings.recent_items_limit
        ),
        goals=GoalsController(session, store, validator, audit_logger),
        wallet=WalletController(session, store, audit_logger),
        invest=InvestController(session, store, audit_logger),
        profile=ProfileController(session, store, audit_logger),
    )


async def create_app_components(settings: Optional[Settings] = None) -> AppComponents:
    """
    Factory function to create all application components against Supabase.

    Configures logging, connects the client, builds everything and
    runs the initial session check.

    Raises:
        ConnectionError: If the backend client cannot be created
    """
    settings = settings or get_settings()
    app_settings = settings.app
    configure_logging(app_settings.log_level, app_settings.log_json)

    client = SupabaseClient(settings.supabase)
    await client.connect()

    components = build_components(
        SupabaseAuth(client),
        SupabaseRowStore(client),
        settings=settings,
    )
    await components.session.start()
    logger.info(
        "app_started",
        environment=app_settings.app_environment,
        auth_state=components.session.auth_state.value,
    )
    return components
