"""
Shared fixtures.

The backend is replaced by in-memory fakes of both interfaces so that
tests never touch the network. The fakes behave like the hosted
backend where the app depends on it:
- selects honour equality filters, ordering, limit and exact count
- inserts fill in id, created_at and the goal column defaults
- auth notifications fire synchronously from inside the auth calls
- any operation can be made to fail with a BackendError
"""

import itertools
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import pytest

from financez.audit import AuditLogger
from financez.backend.interface import (
    AuthenticationError,
    AuthInterface,
    AuthListener,
    AuthSubscription,
    BackendError,
    QueryResponse,
    RowQuery,
    RowStoreInterface,
)
from financez.config.settings import AppSettings
from financez.models.auth import AuthEvent, AuthResponse, AuthSession, AuthUser
from financez.models.finance import GOALS_TABLE
from financez.models.profile import PROFILES_TABLE
from financez.session import SessionManager
from financez.validation import FormValidator


EPOCH = datetime(2025, 1, 1, tzinfo=timezone.utc)

TABLE_DEFAULTS: dict[str, dict[str, Any]] = {
    GOALS_TABLE: {"current_amount": 0, "emoji": "🎯", "color": "#8B5CF6", "deadline": None},
    PROFILES_TABLE: {"onboarding_completed": False, "financial_goals": None},
}


def _sort_key(column: str):
    return lambda row: (row.get(column) is not None, row.get(column))


class InMemoryRowStore(RowStoreInterface):
    """Tables as lists of dicts."""

    def __init__(self):
        self.tables: dict[str, list[dict[str, Any]]] = defaultdict(list)
        self.calls: list[tuple[str, str]] = []
        self._failures: dict[tuple[str, str], str] = {}
        self._ids = itertools.count(1)
        self._ticks = itertools.count(1)

    # -- test helpers ---------------------------------------------------------

    def seed(self, table: str, *rows: dict[str, Any]) -> list[dict[str, Any]]:
        """Add rows directly, as if written earlier. Later rows are newer."""
        return [self._new_row(table, row) for row in rows]

    def fail(self, operation: str, table: str = "*", message: str = "backend unavailable"):
        """Make `operation` ('select', 'insert'...) on `table` raise BackendError."""
        self._failures[(operation, table)] = message

    def heal(self):
        self._failures.clear()

    def calls_to(self, operation: str, table: Optional[str] = None) -> int:
        return sum(
            1 for op, t in self.calls
            if op == operation and (table is None or t == table)
        )

    # -- interface ------------------------------------------------------------

    async def select(self, query: RowQuery) -> QueryResponse:
        self._check("select", query.table)
        rows = [r for r in self.tables[query.table] if self._matches(r, query.filters)]
        if query.order_by:
            rows.sort(key=_sort_key(query.order_by), reverse=query.descending)
        count = len(rows) if query.count else None
        if query.limit:
            rows = rows[: query.limit]
        return QueryResponse(rows=[dict(r) for r in rows], count=count)

    async def insert(self, table: str, payload: dict[str, Any]) -> list[dict[str, Any]]:
        self._check("insert", table)
        return [dict(self._new_row(table, payload))]

    async def update(
        self,
        table: str,
        payload: dict[str, Any],
        filters: dict[str, Any],
    ) -> list[dict[str, Any]]:
        self._check("update", table)
        updated = []
        for row in self.tables[table]:
            if self._matches(row, filters):
                row.update(payload)
                updated.append(dict(row))
        return updated

    async def upsert(
        self,
        table: str,
        payload: dict[str, Any],
        on_conflict: str,
    ) -> list[dict[str, Any]]:
        self._check("upsert", table)
        for row in self.tables[table]:
            if row.get(on_conflict) == payload.get(on_conflict):
                row.update(payload)
                return [dict(row)]
        return [dict(self._new_row(table, payload))]

    # -- internals ------------------------------------------------------------

    def _check(self, operation: str, table: str) -> None:
        self.calls.append((operation, table))
        for key in ((operation, table), (operation, "*")):
            if key in self._failures:
                raise BackendError(self._failures[key])

    def _new_row(self, table: str, payload: dict[str, Any]) -> dict[str, Any]:
        row = {
            "id": str(next(self._ids)),
            "created_at": (EPOCH + timedelta(minutes=next(self._ticks))).isoformat(),
            **TABLE_DEFAULTS.get(table, {}),
            **payload,
        }
        self.tables[table].append(row)
        return row

    @staticmethod
    def _matches(row: dict[str, Any], filters: dict[str, Any]) -> bool:
        return all(row.get(column) == value for column, value in filters.items())


class _Subscription(AuthSubscription):
    def __init__(self, auth: "InMemoryAuth", listener: AuthListener):
        self._auth = auth
        self._listener = listener

    def unsubscribe(self) -> None:
        if self._listener in self._auth.listeners:
            self._auth.listeners.remove(self._listener)


class InMemoryAuth(AuthInterface):
    """
    Email/password accounts held in a dict.

    With confirm_email=True, sign_up returns a user but no session,
    like a project that requires email verification.
    """

    def __init__(self, confirm_email: bool = False):
        self.accounts: dict[str, tuple[AuthUser, str]] = {}
        self.current: Optional[AuthSession] = None
        self.listeners: list[AuthListener] = []
        self.confirm_email = confirm_email
        self._failures: dict[str, BackendError] = {}
        self._ids = itertools.count(1)
        self._tokens = itertools.count(1)

    # -- test helpers ---------------------------------------------------------

    def register(self, email: str, password: str) -> AuthUser:
        user = AuthUser(id=f"user-{next(self._ids)}", email=email)
        self.accounts[email] = (user, password)
        return user

    def restore(self, user: AuthUser) -> AuthSession:
        """Pretend a session was persisted from a previous run."""
        self.current = self._issue(user)
        return self.current

    def fail(self, operation: str, error: Optional[BackendError] = None):
        self._failures[operation] = error or BackendError("auth service unavailable")

    def emit(self, event: AuthEvent, session: Optional[AuthSession]) -> None:
        for listener in list(self.listeners):
            listener(event, session)

    # -- interface ------------------------------------------------------------

    async def sign_up(self, email: str, password: str) -> AuthResponse:
        self._check("sign_up")
        if email in self.accounts:
            raise AuthenticationError("User already registered")
        user = self.register(email, password)
        if self.confirm_email:
            return AuthResponse(user=user, session=None)
        self.current = self._issue(user)
        self.emit(AuthEvent.SIGNED_IN, self.current)
        return AuthResponse(user=user, session=self.current)

    async def sign_in(self, email: str, password: str) -> AuthResponse:
        self._check("sign_in")
        account = self.accounts.get(email)
        if account is None or account[1] != password:
            raise AuthenticationError("Invalid login credentials")
        self.current = self._issue(account[0])
        self.emit(AuthEvent.SIGNED_IN, self.current)
        return AuthResponse(user=account[0], session=self.current)

    async def sign_out(self) -> None:
        self._check("sign_out")
        self.current = None
        self.emit(AuthEvent.SIGNED_OUT, None)

    async def get_session(self) -> Optional[AuthSession]:
        self._check("get_session")
        return self.current

    async def refresh_session(self) -> Optional[AuthSession]:
        self._check("refresh_session")
        if self.current is None:
            return None
        self.current = self._issue(self.current.user)
        self.emit(AuthEvent.TOKEN_REFRESHED, self.current)
        return self.current

    def on_auth_state_change(self, listener: AuthListener) -> AuthSubscription:
        self.listeners.append(listener)
        return _Subscription(self, listener)

    # -- internals ------------------------------------------------------------

    def _check(self, operation: str) -> None:
        if operation in self._failures:
            raise self._failures[operation]

    def _issue(self, user: AuthUser) -> AuthSession:
        token = next(self._tokens)
        return AuthSession(
            access_token=f"access-{token}",
            refresh_token=f"refresh-{token}",
            expires_at=EPOCH + timedelta(hours=token),
            user=user,
        )


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def store() -> InMemoryRowStore:
    return InMemoryRowStore()


@pytest.fixture
def auth() -> InMemoryAuth:
    return InMemoryAuth()


@pytest.fixture
def audit_logger() -> AuditLogger:
    return AuditLogger()


@pytest.fixture
def app_settings() -> AppSettings:
    return AppSettings()


@pytest.fixture
def validator(app_settings) -> FormValidator:
    return FormValidator(app_settings)


@pytest.fixture
def session_manager(auth, store, validator, audit_logger, app_settings) -> SessionManager:
    return SessionManager(
        auth,
        store,
        validator=validator,
        audit_logger=audit_logger,
        settings=app_settings,
    )


@pytest.fixture
def alice(auth, store) -> AuthUser:
    """A registered user whose onboarding is done."""
    user = auth.register("alice@example.com", "secret123")
    store.seed(PROFILES_TABLE, {
        "user_id": user.id,
        "email": user.email,
        "full_name": "Alice Walker",
        "age": 34,
        "occupation": "Engineer",
        "monthly_income": 5200,
        "risk_tolerance": "moderate",
        "financial_goals": ["New House"],
        "onboarding_completed": True,
    })
    return user


@pytest.fixture
async def signed_in(session_manager, auth, alice):
    """A started session manager, restored with alice signed in."""
    auth.restore(alice)
    await session_manager.start()
    yield session_manager
    await session_manager.stop()
