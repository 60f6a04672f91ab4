"""
Audit Models for FinanceZ

Every user action and every caught failure is recorded as an event.
This provides:
1. Traceability of auth and profile changes
2. Debugging information when a backend call fails
3. A record of what the user was told

Audit events are append-only and logged locally.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Session lifecycle
    SESSION_RESTORED = "session_restored"
    SESSION_CHECK_FAILED = "session_check_failed"
    AUTH_STATE_CHANGED = "auth_state_changed"
    SESSION_REFRESHED = "session_refreshed"

    # Account actions
    SIGN_UP_SUCCEEDED = "sign_up_succeeded"
    SIGN_UP_FAILED = "sign_up_failed"
    SIGN_IN_SUCCEEDED = "sign_in_succeeded"
    SIGN_IN_FAILED = "sign_in_failed"
    SIGNED_OUT = "signed_out"
    SIGN_OUT_FAILED = "sign_out_failed"

    # Profile
    PROFILE_CREATED = "profile_created"
    PROFILE_CREATE_FAILED = "profile_create_failed"
    PROFILE_REPAIRED = "profile_repaired"
    PROFILE_LOAD_FAILED = "profile_load_failed"
    ONBOARDING_COMPLETED = "onboarding_completed"
    ONBOARDING_FAILED = "onboarding_failed"

    # Forms
    VALIDATION_FAILED = "validation_failed"

    # Screens
    SCREEN_FETCH_FAILED = "screen_fetch_failed"
    GOAL_CREATED = "goal_created"
    GOAL_CREATE_FAILED = "goal_create_failed"

    # Navigation
    NAVIGATION_REDIRECTED = "navigation_redirected"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - who and what is this about?
    user_id: Optional[str] = Field(
        default=None,
        description="Auth user the event concerns, if known"
    )
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'profile', 'savings_goals', 'screen')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one sign-up flow)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "user_id": self.user_id,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.sign_in_failed(email, message)
        event = AuditEventBuilder.goal_created(user_id, goal_id, title)
    """

    @staticmethod
    def session_restored(user_id: Optional[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SESSION_RESTORED,
            user_id=user_id,
            description=(
                "Existing session restored" if user_id else "No existing session"
            ),
            details={"has_session": user_id is not None},
        )

    @staticmethod
    def session_check_failed(error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SESSION_CHECK_FAILED,
            severity=AuditSeverity.WARNING,
            description="Could not read the current session",
            error_message=error_message,
        )

    @staticmethod
    def auth_state_changed(event: str, user_id: Optional[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.AUTH_STATE_CHANGED,
            user_id=user_id,
            description=f"Auth state changed: {event}",
            details={"auth_event": event},
        )

    @staticmethod
    def session_refreshed(user_id: Optional[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SESSION_REFRESHED,
            user_id=user_id,
            description="Session token refreshed",
        )

    @staticmethod
    def sign_up_succeeded(
        user_id: Optional[str],
        email: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SIGN_UP_SUCCEEDED,
            user_id=user_id,
            correlation_id=correlation_id,
            description=f"Account created for {email}",
            details={"email": email},
            is_user_action=True,
        )

    @staticmethod
    def sign_up_failed(
        email: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SIGN_UP_FAILED,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description=f"Sign-up rejected for {email}",
            details={"email": email},
            error_message=error_message,
            is_user_action=True,
        )

    @staticmethod
    def sign_in_succeeded(user_id: Optional[str], email: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SIGN_IN_SUCCEEDED,
            user_id=user_id,
            description=f"Signed in as {email}",
            details={"email": email},
            is_user_action=True,
        )

    @staticmethod
    def sign_in_failed(email: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SIGN_IN_FAILED,
            severity=AuditSeverity.WARNING,
            description=f"Sign-in rejected for {email}",
            details={"email": email},
            error_message=error_message,
            is_user_action=True,
        )

    @staticmethod
    def signed_out(user_id: Optional[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SIGNED_OUT,
            user_id=user_id,
            description="User signed out",
            is_user_action=True,
        )

    @staticmethod
    def sign_out_failed(user_id: Optional[str], error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SIGN_OUT_FAILED,
            severity=AuditSeverity.WARNING,
            user_id=user_id,
            description="Backend sign-out failed; local state cleared anyway",
            error_message=error_message,
            is_user_action=True,
        )

    @staticmethod
    def profile_created(
        user_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PROFILE_CREATED,
            user_id=user_id,
            entity_type="profile",
            correlation_id=correlation_id,
            description="Profile row created",
        )

    @staticmethod
    def profile_create_failed(
        user_id: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PROFILE_CREATE_FAILED,
            severity=AuditSeverity.ERROR,
            user_id=user_id,
            entity_type="profile",
            correlation_id=correlation_id,
            description="Credential created but profile row could not be written",
            error_message=error_message,
        )

    @staticmethod
    def profile_repaired(user_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PROFILE_REPAIRED,
            severity=AuditSeverity.WARNING,
            user_id=user_id,
            entity_type="profile",
            description="Missing profile row recreated on load",
        )

    @staticmethod
    def profile_load_failed(user_id: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PROFILE_LOAD_FAILED,
            severity=AuditSeverity.ERROR,
            user_id=user_id,
            entity_type="profile",
            description="Could not load profile",
            error_message=error_message,
        )

    @staticmethod
    def onboarding_completed(user_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ONBOARDING_COMPLETED,
            user_id=user_id,
            entity_type="profile",
            description="Onboarding questionnaire saved",
            is_user_action=True,
        )

    @staticmethod
    def onboarding_failed(user_id: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ONBOARDING_FAILED,
            severity=AuditSeverity.ERROR,
            user_id=user_id,
            entity_type="profile",
            description="Onboarding questionnaire could not be saved",
            error_message=error_message,
            is_user_action=True,
        )

    @staticmethod
    def validation_failed(
        form: str,
        issues: list[dict],
        user_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.INFO,
            user_id=user_id,
            entity_type="form",
            entity_id=form,
            description=f"{form} form rejected with {len(issues)} issues",
            details={"form": form, "issues": issues},
            is_user_action=True,
        )

    @staticmethod
    def screen_fetch_failed(
        screen: str,
        user_id: Optional[str],
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SCREEN_FETCH_FAILED,
            severity=AuditSeverity.ERROR,
            user_id=user_id,
            entity_type="screen",
            entity_id=screen,
            description=f"Error fetching {screen} data",
            error_message=error_message,
        )

    @staticmethod
    def goal_created(user_id: str, goal_id: Optional[str], title: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GOAL_CREATED,
            user_id=user_id,
            entity_type="savings_goals",
            entity_id=goal_id,
            description=f"Goal created: {title}",
            details={"title": title},
            is_user_action=True,
        )

    @staticmethod
    def goal_create_failed(user_id: str, title: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GOAL_CREATE_FAILED,
            severity=AuditSeverity.ERROR,
            user_id=user_id,
            entity_type="savings_goals",
            description=f"Goal could not be created: {title}",
            details={"title": title},
            error_message=error_message,
            is_user_action=True,
        )

    @staticmethod
    def navigation_redirected(
        requested: str,
        resolved: str,
        state: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.NAVIGATION_REDIRECTED,
            severity=AuditSeverity.DEBUG,
            description=f"Redirected from {requested} to {resolved}",
            details={"requested": requested, "resolved": resolved, "auth_state": state},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
        )
