"""
Supabase Backend Implementation

Supabase is the hosted backend: a Postgres database exposed through
PostgREST plus a GoTrue auth provider. This module is the only place
that touches the SDK.

TRADEOFFS:
- Every SDK exception is wrapped into BackendError/AuthenticationError
- No retries: a failed call is reported once and the caller decides
- Row ownership is enforced by the client-side user_id filter (and
  by whatever row-level security the project configures)
"""

from datetime import datetime, timezone
from typing import Any, Optional

import structlog
from supabase import AsyncClient, acreate_client

from financez.config import get_settings
from financez.config.settings import SupabaseSettings
from financez.models.auth import AuthEvent, AuthResponse, AuthSession, AuthUser
from financez.backend.interface import (
    AuthenticationError,
    AuthInterface,
    AuthListener,
    AuthSubscription,
    BackendError,
    ConnectionError,
    QueryResponse,
    RowQuery,
    RowStoreInterface,
)


logger = structlog.get_logger(__name__)


def _error_message(error: Exception) -> str:
    """SDK errors carry their text in .message; fall back to str()."""
    message = getattr(error, "message", None)
    return str(message) if message else str(error)


def _to_user(sdk_user: Any) -> Optional[AuthUser]:
    if sdk_user is None:
        return None
    return AuthUser(id=str(sdk_user.id), email=getattr(sdk_user, "email", None))


def _to_session(sdk_session: Any) -> Optional[AuthSession]:
    if sdk_session is None:
        return None
    expires_at = getattr(sdk_session, "expires_at", None)
    return AuthSession(
        access_token=sdk_session.access_token,
        refresh_token=getattr(sdk_session, "refresh_token", None),
        expires_at=(
            datetime.fromtimestamp(expires_at, tz=timezone.utc)
            if expires_at
            else None
        ),
        user=_to_user(sdk_session.user),
    )


def _to_response(sdk_response: Any) -> AuthResponse:
    return AuthResponse(
        user=_to_user(getattr(sdk_response, "user", None)),
        session=_to_session(getattr(sdk_response, "session", None)),
    )


class SupabaseClient:
    """
    Low-level Supabase client wrapper.

    Creates the async SDK client once, on first use.
    """

    def __init__(self, settings: Optional[SupabaseSettings] = None):
        self._client: Optional[AsyncClient] = None
        self._settings = settings or get_settings().supabase

    async def connect(self) -> AsyncClient:
        """Create (once) and return the SDK client."""
        if self._client is None:
            try:
                self._client = await acreate_client(
                    self._settings.url,
                    self._settings.anon_key,
                )
            except Exception as e:
                raise ConnectionError(f"Failed to create backend client: {e}")
            logger.debug("backend_connected", url=self._settings.url)
        return self._client

    @property
    def client(self) -> AsyncClient:
        """The connected client. connect() must have been awaited first."""
        if self._client is None:
            raise ConnectionError("Backend client used before connect()")
        return self._client


class SupabaseRowStore(RowStoreInterface):
    """PostgREST implementation of the row store."""

    def __init__(self, client: SupabaseClient):
        self._client = client

    async def select(self, query: RowQuery) -> QueryResponse:
        """Run a filtered, ordered select."""
        try:
            sdk = await self._client.connect()
            if query.count:
                request = sdk.table(query.table).select(query.columns, count="exact")
            else:
                request = sdk.table(query.table).select(query.columns)
            for column, value in query.filters.items():
                request = request.eq(column, value)
            if query.order_by:
                request = request.order(query.order_by, desc=query.descending)
            if query.limit:
                request = request.limit(query.limit)
            response = await request.execute()
        except BackendError:
            raise
        except Exception as e:
            raise BackendError(f"Failed to query {query.table}: {_error_message(e)}")

        return QueryResponse(rows=response.data or [], count=response.count)

    async def insert(self, table: str, payload: dict[str, Any]) -> list[dict[str, Any]]:
        """Insert one row and return it as stored."""
        try:
            sdk = await self._client.connect()
            response = await sdk.table(table).insert(payload).execute()
        except BackendError:
            raise
        except Exception as e:
            raise BackendError(f"Failed to insert into {table}: {_error_message(e)}")
        return response.data or []

    async def update(
        self,
        table: str,
        payload: dict[str, Any],
        filters: dict[str, Any],
    ) -> list[dict[str, Any]]:
        """Update rows matching the filters."""
        if not filters:
            # An unfiltered update would touch every row the caller can see
            raise BackendError(f"Refusing to update {table} without a filter")
        try:
            sdk = await self._client.connect()
            request = sdk.table(table).update(payload)
            for column, value in filters.items():
                request = request.eq(column, value)
            response = await request.execute()
        except BackendError:
            raise
        except Exception as e:
            raise BackendError(f"Failed to update {table}: {_error_message(e)}")
        return response.data or []

    async def upsert(
        self,
        table: str,
        payload: dict[str, Any],
        on_conflict: str,
    ) -> list[dict[str, Any]]:
        """Insert or update on the conflict column."""
        try:
            sdk = await self._client.connect()
            response = await (
                sdk.table(table)
                .upsert(payload, on_conflict=on_conflict)
                .execute()
            )
        except BackendError:
            raise
        except Exception as e:
            raise BackendError(f"Failed to upsert into {table}: {_error_message(e)}")
        return response.data or []


class _SupabaseSubscription(AuthSubscription):
    def __init__(self, sdk_subscription: Any):
        self._sdk_subscription = sdk_subscription
        self._active = True

    def unsubscribe(self) -> None:
        if self._active:
            self._active = False
            self._sdk_subscription.unsubscribe()


class SupabaseAuth(AuthInterface):
    """
    GoTrue implementation of the auth provider.

    Session persistence and automatic token refresh are handled by the SDK.
    """

    def __init__(self, client: SupabaseClient):
        self._client = client

    async def sign_up(self, email: str, password: str) -> AuthResponse:
        try:
            sdk = await self._client.connect()
            response = await sdk.auth.sign_up({"email": email, "password": password})
        except ConnectionError:
            raise
        except Exception as e:
            raise AuthenticationError(_error_message(e))
        return _to_response(response)

    async def sign_in(self, email: str, password: str) -> AuthResponse:
        try:
            sdk = await self._client.connect()
            response = await sdk.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except ConnectionError:
            raise
        except Exception as e:
            raise AuthenticationError(_error_message(e))
        return _to_response(response)

    async def sign_out(self) -> None:
        try:
            sdk = await self._client.connect()
            await sdk.auth.sign_out()
        except ConnectionError:
            raise
        except Exception as e:
            raise AuthenticationError(_error_message(e))

    async def get_session(self) -> Optional[AuthSession]:
        try:
            sdk = await self._client.connect()
            session = await sdk.auth.get_session()
        except ConnectionError:
            raise
        except Exception as e:
            raise AuthenticationError(_error_message(e))
        return _to_session(session)

    async def refresh_session(self) -> Optional[AuthSession]:
        try:
            sdk = await self._client.connect()
            response = await sdk.auth.refresh_session()
        except ConnectionError:
            raise
        except Exception as e:
            raise AuthenticationError(_error_message(e))
        return _to_session(getattr(response, "session", None))

    def on_auth_state_change(self, listener: AuthListener) -> AuthSubscription:
        """
        Forward SDK notifications as AuthEvent values.

        Events this app has no use for (e.g. MFA) are dropped.
        """
        def _forward(event: Any, sdk_session: Any) -> None:
            try:
                auth_event = AuthEvent(str(getattr(event, "value", event)))
            except ValueError:
                logger.debug("auth_event_ignored", auth_event=str(event))
                return
            listener(auth_event, _to_session(sdk_session))

        sdk_subscription = self._client.client.auth.on_auth_state_change(_forward)
        return _SupabaseSubscription(sdk_subscription)
