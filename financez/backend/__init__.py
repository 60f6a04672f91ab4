"""
Backend Package

Abstract interfaces for the hosted backend (row store + auth provider)
and the Supabase implementation of both.
"""

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
from financez.backend.supabase_backend import (
    SupabaseAuth,
    SupabaseClient,
    SupabaseRowStore,
)

__all__ = [
    # Interfaces
    "AuthInterface",
    "AuthListener",
    "AuthSubscription",
    "RowStoreInterface",
    # Query shapes
    "QueryResponse",
    "RowQuery",
    # Exceptions
    "AuthenticationError",
    "BackendError",
    "ConnectionError",
    # Supabase implementation
    "SupabaseAuth",
    "SupabaseClient",
    "SupabaseRowStore",
]
