"""
Session/Profile Synchronizer

Holds the one {session, user, profile} triple the whole app reads.

LIFECYCLE:
1. start(): ask the backend for the current session, load the profile
   if someone is signed in, then subscribe to auth notifications
2. Notifications keep the triple current: sign-in reloads the profile,
   sign-out clears it, token refreshes only replace the session
3. stop(): unsubscribe and drop any profile load still in flight

STATES (see auth_state):
    loading -> unauthenticated
            -> authenticated_incomplete_profile
            -> authenticated_complete_profile

GUARANTEES:
- No method raises on a backend failure; user actions return an
  ActionResult and background loads record last_error
- Nothing is retried
- A profile load that finishes after a later sign-in/sign-out is
  discarded, so a slow response never resurrects a signed-out user
"""

import asyncio
from typing import Callable, Optional

import structlog

from financez.audit.logger import AuditLogger, create_correlation_id
from financez.backend.interface import (
    AuthInterface,
    AuthSubscription,
    BackendError,
    RowStoreInterface,
)
from financez.config.settings import AppSettings
from financez.models.audit import AuditEventBuilder
from financez.models.auth import AuthEvent, AuthSession, AuthState, AuthUser
from financez.models.forms import SignInForm, SignUpForm
from financez.models.profile import PROFILES_TABLE, Profile
from financez.models.results import ActionResult
from financez.navigation.routes import Route
from financez.queries import catalog
from financez.queries.scoped import ScopedQueryExecutor
from financez.validation.validator import FormValidator


logger = structlog.get_logger(__name__)

SIGN_UP_SUCCESS = "Account created successfully! Please check your email to verify your account."

# Events that change who is signed in; these invalidate in-flight loads
_IDENTITY_EVENTS = (AuthEvent.INITIAL_SESSION, AuthEvent.SIGNED_IN, AuthEvent.SIGNED_OUT)


class SessionManager:
    """
    Process-wide auth and profile state, injected wherever it is needed.

    Observers register with on_change() and are called after every
    state change, synchronously.
    """

    def __init__(
        self,
        auth: AuthInterface,
        store: RowStoreInterface,
        validator: Optional[FormValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[AppSettings] = None,
    ):
        self._auth = auth
        self._store = store
        self._queries = ScopedQueryExecutor(store)
        self._validator = validator or FormValidator(settings)
        self._audit = audit_logger or AuditLogger()

        self.session: Optional[AuthSession] = None
        self.user: Optional[AuthUser] = None
        self.profile: Optional[Profile] = None
        self.loading = True
        self.last_error: Optional[str] = None

        self._generation = 0
        self._profile_pending = False
        self._pending: set[asyncio.Task] = set()
        self._subscription: Optional[AuthSubscription] = None
        self._listeners: list[Callable[[], None]] = []

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def user_id(self) -> Optional[str]:
        return self.user.id if self.user else None

    @property
    def auth_state(self) -> AuthState:
        if self.loading:
            return AuthState.LOADING
        if self.user is None:
            return AuthState.UNAUTHENTICATED
        if self.profile is None and self._profile_pending:
            # Signed in, profile not back yet
            return AuthState.LOADING
        if self.profile is not None and self.profile.onboarding_completed:
            return AuthState.AUTHENTICATED_COMPLETE_PROFILE
        return AuthState.AUTHENTICATED_INCOMPLETE_PROFILE

    def on_change(self, listener: Callable[[], None]) -> Callable[[], None]:
        """Register an observer. Returns a function that removes it."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def start(self) -> None:
        """Initial session check, then subscribe for notifications."""
        try:
            session = await self._auth.get_session()
        except BackendError as e:
            self.last_error = str(e)
            self._audit.log(AuditEventBuilder.session_check_failed(str(e)))
            session = None

        self._set_session(session)
        if self.user is not None:
            await self._load_profile(self.user.id, self._generation)
            self._audit.log(AuditEventBuilder.session_restored(self.user_id))

        self._subscription = self._auth.on_auth_state_change(self._on_auth_change)
        self.loading = False
        logger.info("session_started", auth_state=self.auth_state.value)
        self._notify()

    async def stop(self) -> None:
        """Unsubscribe and cancel profile loads still in flight."""
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
        tasks = list(self._pending)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._pending.clear()
        self._listeners.clear()

    async def settle(self) -> None:
        """Wait until every profile load triggered by a notification is done."""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    # -------------------------------------------------------------------------
    # Auth notifications
    # -------------------------------------------------------------------------

    def _on_auth_change(self, event: AuthEvent, session: Optional[AuthSession]) -> None:
        previous_user_id = self.user_id
        self._set_session(session)

        if event in _IDENTITY_EVENTS or self.user_id != previous_user_id:
            self._generation += 1
        self._audit.log(AuditEventBuilder.auth_state_changed(event.value, self.user_id))

        if event == AuthEvent.SIGNED_OUT or self.user is None:
            self.profile = None
            self._profile_pending = False
        elif event == AuthEvent.TOKEN_REFRESHED:
            self._audit.log(AuditEventBuilder.session_refreshed(self.user_id))
        elif (
            event == AuthEvent.SIGNED_IN
            or self.user_id != previous_user_id
            or self.profile is None
        ):
            if self.profile is not None and self.profile.user_id != self.user_id:
                self.profile = None
            self._schedule_profile_load(self.user.id, self._generation)

        self.loading = False
        self._notify()

    def _set_session(self, session: Optional[AuthSession]) -> None:
        self.session = session
        self.user = session.user if session else None

    def _schedule_profile_load(self, user_id: str, generation: int) -> None:
        self._profile_pending = True
        task = asyncio.get_running_loop().create_task(
            self._load_profile(user_id, generation)
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    # -------------------------------------------------------------------------
    # Profile
    # -------------------------------------------------------------------------

    async def _load_profile(self, user_id: str, generation: int) -> None:
        try:
            profile = await self._queries.fetch_one(catalog.PROFILE, user_id)
            if profile is None:
                profile = await self._repair_profile(user_id)
        except BackendError as e:
            self.last_error = str(e)
            self._audit.log(AuditEventBuilder.profile_load_failed(user_id, str(e)))
            if generation == self._generation:
                self._profile_pending = False
                self._notify()
            return

        if generation != self._generation or user_id != self.user_id:
            logger.debug("stale_profile_discarded", user_id=user_id)
            return

        self.profile = profile
        self._profile_pending = False
        self._notify()

    async def _repair_profile(self, user_id: str) -> Profile:
        """Recreate a profile row that sign-up failed to write."""
        email = self.user.email if self.user and self.user.email else ""
        rows = await self._store.upsert(
            PROFILES_TABLE,
            {"user_id": user_id, "email": email, "onboarding_completed": False},
            on_conflict="user_id",
        )
        self._audit.log(AuditEventBuilder.profile_repaired(user_id))
        if rows:
            return Profile.model_validate(rows[0])
        return Profile(user_id=user_id, email=email)

    async def refresh_profile(self) -> Optional[Profile]:
        """Re-read the profile row for the signed-in user."""
        if self.user is None:
            return None
        await self._load_profile(self.user.id, self._generation)
        return self.profile

    async def refresh_session(self) -> Optional[AuthSession]:
        """Exchange the refresh token for a new session."""
        try:
            session = await self._auth.refresh_session()
        except BackendError as e:
            self.last_error = str(e)
            self._audit.log(AuditEventBuilder.session_check_failed(str(e)))
            return None
        if session is not None and session.user.id == self.user_id:
            self._set_session(session)
            self._audit.log(AuditEventBuilder.session_refreshed(self.user_id))
            self._notify()
        return session

    # -------------------------------------------------------------------------
    # User actions
    # -------------------------------------------------------------------------

    async def sign_up(self, form: SignUpForm) -> ActionResult:
        """
        Create a credential, then the profile row.

        The two writes are not atomic. If the profile write fails the
        sign-up still succeeds; the next profile load recreates the row.
        """
        validation = self._validator.validate_sign_up(form)
        if not validation.is_valid:
            self._audit.log_validation_failed(validation)
            return ActionResult.from_validation(validation)

        correlation_id = create_correlation_id()
        try:
            response = await self._auth.sign_up(form.email, form.password)
        except BackendError as e:
            self._audit.log(AuditEventBuilder.sign_up_failed(form.email, str(e), correlation_id))
            return ActionResult.fail(str(e), title="Signup Failed")

        user = response.user
        self._audit.log(AuditEventBuilder.sign_up_succeeded(
            user.id if user else None, form.email, correlation_id
        ))

        if user is not None:
            try:
                await self._store.upsert(
                    PROFILES_TABLE,
                    {
                        "user_id": user.id,
                        "email": user.email or form.email,
                        "onboarding_completed": False,
                    },
                    on_conflict="user_id",
                )
                self._audit.log(AuditEventBuilder.profile_created(user.id, correlation_id))
            except BackendError as e:
                self._audit.log(AuditEventBuilder.profile_create_failed(
                    user.id, str(e), correlation_id
                ))

        await self.settle()
        return ActionResult.ok(
            SIGN_UP_SUCCESS,
            title="Success!",
            next_route=Route.ONBOARDING_STEP1.value,
        )

    async def sign_in(self, form: SignInForm) -> ActionResult:
        """Sign in and wait for the profile before reporting success."""
        validation = self._validator.validate_sign_in(form)
        if not validation.is_valid:
            self._audit.log_validation_failed(validation)
            return ActionResult.from_validation(validation)

        try:
            response = await self._auth.sign_in(form.email, form.password)
        except BackendError as e:
            self._audit.log(AuditEventBuilder.sign_in_failed(form.email, str(e)))
            return ActionResult.fail(str(e), title="Login Failed")

        session = response.session
        if session is not None and session.user.id != self.user_id:
            # Provider did not notify; apply the sign-in ourselves
            self._on_auth_change(AuthEvent.SIGNED_IN, session)
        await self.settle()

        self._audit.log(AuditEventBuilder.sign_in_succeeded(self.user_id, form.email))
        if self.auth_state == AuthState.AUTHENTICATED_COMPLETE_PROFILE:
            next_route = Route.HOME
        else:
            next_route = Route.ONBOARDING_STEP1
        return ActionResult.ok(title="Success!", next_route=next_route.value)

    async def sign_out(self) -> ActionResult:
        """
        Sign out. Local state is cleared even if the backend call fails,
        so the user always lands back in the auth flow.
        """
        user_id = self.user_id
        try:
            await self._auth.sign_out()
            self._audit.log(AuditEventBuilder.signed_out(user_id))
        except BackendError as e:
            self.last_error = str(e)
            self._audit.log(AuditEventBuilder.sign_out_failed(user_id, str(e)))

        if self.session is not None or self.profile is not None:
            self._generation += 1
            self._set_session(None)
            self.profile = None
            self._profile_pending = False
            self._notify()

        return ActionResult.ok(title="Signed Out", next_route=Route.LOGIN.value)
