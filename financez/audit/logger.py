"""
Audit Logger

Every significant action in the app is logged. This provides:
1. Traceability of sign-up, sign-in and profile changes
2. Debugging capability when a backend call fails
3. A record of every message shown to the user

The audit logger never raises: a logging failure must not turn a
handled error into a crash.
"""

import logging
import sys
from typing import Optional
from uuid import UUID, uuid4

import structlog

from financez.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from financez.models.results import ValidationResult


def configure_logging(level: str = "INFO", json_output: bool = True) -> None:
    """
    Configure structlog on top of the standard library logger.

    JSON lines by default; a console renderer for local debugging.
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class AuditLogger:
    """
    Central audit logging service.

    Writes each AuditEvent to the structured local log at the level
    matching its severity. Events are also kept in memory (bounded)
    so the UI can show the most recent ones.
    """

    def __init__(self, history_size: int = 200):
        self._logger = structlog.get_logger("financez.audit")
        self._history: list[AuditEvent] = []
        self._history_size = history_size

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns True if the event was written.
        """
        log_dict = event.to_log_dict()

        try:
            if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception as e:
            # Never let logging break the main flow
            print(f"WARNING: Failed to write audit event: {e}", file=sys.stderr)
            return False
        finally:
            self._history.append(event)
            if len(self._history) > self._history_size:
                del self._history[: len(self._history) - self._history_size]

        return True

    def recent_events(self, limit: int = 20) -> list[AuditEvent]:
        """Most recent events, newest first."""
        return list(reversed(self._history[-limit:]))

    def log_validation_failed(
        self,
        result: ValidationResult,
        user_id: Optional[str] = None,
    ) -> None:
        """Log a rejected form."""
        issues = [
            {"field": i.field, "type": i.issue_type, "message": i.message}
            for i in result.issues
        ]
        self.log(AuditEventBuilder.validation_failed(
            form=result.form,
            issues=issues,
            user_id=user_id,
        ))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> None:
        """Log an unexpected error."""
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a multi-step action (e.g., sign-up,
    which writes a credential and then a profile row).
    """
    return uuid4()
