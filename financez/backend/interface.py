"""
Abstract Backend Interface

The hosted backend is an external collaborator exposing two things:
1. A row store: query/insert/update/upsert by table and filter
2. An auth provider: sessions, sign-up/in/out, change notifications

Both are defined as abstract interfaces so that:
1. The Supabase SDK stays inside one adapter module
2. Tests run against in-memory fakes
3. Business logic never sees SDK types

The interface is intentionally small - only the operations the
screens and the session synchronizer need.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from pydantic import BaseModel, Field

from financez.models.auth import AuthEvent, AuthResponse, AuthSession


# =============================================================================
# QUERY SHAPES
# =============================================================================

class RowQuery(BaseModel):
    """
    A single select against one table.

    Filters are equality filters (column == value), combined with AND.
    """

    table: str = Field(..., min_length=1)
    columns: str = Field(default="*")
    filters: dict[str, Any] = Field(default_factory=dict)
    order_by: Optional[str] = None
    descending: bool = True
    limit: Optional[int] = Field(default=None, ge=1)
    count: bool = Field(
        default=False,
        description="Ask the backend for an exact row count"
    )


class QueryResponse(BaseModel):
    """Rows returned by a select, plus the exact count when requested."""

    rows: list[dict[str, Any]] = Field(default_factory=list)
    count: Optional[int] = None


AuthListener = Callable[[AuthEvent, Optional[AuthSession]], None]


class AuthSubscription(ABC):
    """Handle returned by on_auth_state_change."""

    @abstractmethod
    def unsubscribe(self) -> None:
        """Stop receiving auth notifications. Safe to call twice."""
        pass


# =============================================================================
# ROW STORE
# =============================================================================

class RowStoreInterface(ABC):
    """
    Abstract interface for table row operations.

    Any backend implementation must implement these methods.
    """

    @abstractmethod
    async def select(self, query: RowQuery) -> QueryResponse:
        """
        Run a select.

        Args:
            query: Table, filters, ordering, limit and count flag

        Returns:
            Matching rows in the requested order

        Raises:
            BackendError: If the query is rejected or the backend is unreachable
        """
        pass

    @abstractmethod
    async def insert(self, table: str, payload: dict[str, Any]) -> list[dict[str, Any]]:
        """
        Insert one row.

        Returns:
            The inserted row(s) as stored, including backend defaults

        Raises:
            BackendError: If the insert fails
        """
        pass

    @abstractmethod
    async def update(
        self,
        table: str,
        payload: dict[str, Any],
        filters: dict[str, Any],
    ) -> list[dict[str, Any]]:
        """
        Update rows matching equality filters with a partial payload.

        Returns:
            The updated rows (empty if nothing matched)

        Raises:
            BackendError: If the update fails
        """
        pass

    @abstractmethod
    async def upsert(
        self,
        table: str,
        payload: dict[str, Any],
        on_conflict: str,
    ) -> list[dict[str, Any]]:
        """
        Insert a row, or update the existing one sharing on_conflict.

        Returns:
            The resulting row(s)

        Raises:
            BackendError: If the write fails
        """
        pass


# =============================================================================
# AUTH
# =============================================================================

class AuthInterface(ABC):
    """
    Abstract interface for the auth provider.

    Credentials, token storage and refresh are owned by the provider.
    """

    @abstractmethod
    async def sign_up(self, email: str, password: str) -> AuthResponse:
        """
        Create a credential.

        Raises:
            AuthenticationError: With the provider's message on rejection
        """
        pass

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> AuthResponse:
        """
        Sign in with email and password.

        Raises:
            AuthenticationError: With the provider's message on bad credentials
        """
        pass

    @abstractmethod
    async def sign_out(self) -> None:
        """Invalidate the current session."""
        pass

    @abstractmethod
    async def get_session(self) -> Optional[AuthSession]:
        """Return the current session, or None if signed out."""
        pass

    @abstractmethod
    async def refresh_session(self) -> Optional[AuthSession]:
        """Exchange the refresh token for a new session."""
        pass

    @abstractmethod
    def on_auth_state_change(self, listener: AuthListener) -> AuthSubscription:
        """
        Register for sign-in/sign-out/refresh notifications.

        The listener is called synchronously by the provider.
        """
        pass


# =============================================================================
# ERRORS
# =============================================================================

class BackendError(Exception):
    """Base exception for backend operations."""
    pass


class ConnectionError(BackendError):
    """Could not reach or configure the backend."""
    pass


class AuthenticationError(BackendError):
    """
    The auth provider rejected a request.

    The message is the provider's own wording and is shown to the user.
    """
    pass
