"""
Authentication models.

The backend SDK has its own session and user objects; the backend
adapter converts them into these so nothing above the adapter depends
on the SDK.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class AuthEvent(str, Enum):
    """Auth state change notifications emitted by the backend."""
    INITIAL_SESSION = "INITIAL_SESSION"
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"
    USER_UPDATED = "USER_UPDATED"
    PASSWORD_RECOVERY = "PASSWORD_RECOVERY"


class AuthState(str, Enum):
    """
    Where the signed-in user stands.

    LOADING lasts until the first session check resolves.
    """
    LOADING = "loading"
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED_INCOMPLETE_PROFILE = "authenticated_incomplete_profile"
    AUTHENTICATED_COMPLETE_PROFILE = "authenticated_complete_profile"


class AuthUser(BaseModel):
    """The authenticated identity."""

    id: str = Field(..., min_length=1)
    email: Optional[str] = None


class AuthSession(BaseModel):
    """A backend-issued session."""

    access_token: str
    refresh_token: Optional[str] = None
    expires_at: Optional[datetime] = None
    user: AuthUser


class AuthResponse(BaseModel):
    """
    Result of sign-up or sign-in.

    session is None after sign-up when the backend requires email
    confirmation before issuing one.
    """

    user: Optional[AuthUser] = None
    session: Optional[AuthSession] = None
