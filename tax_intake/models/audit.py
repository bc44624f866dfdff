"""
Audit Models for Tax Intake

Every significant session and auto-save action produces an audit event.
This provides:
1. Traceability of what was saved, when, and for which session
2. Debugging information when a remote save silently fails
3. A record of access denials

DESIGN DECISION: Audit events are append-only. We never modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Access
    ACCESS_GRANTED = "access_granted"
    ACCESS_DENIED = "access_denied"

    # Session lifecycle
    SESSION_CREATED = "session_created"
    SESSION_RESUMED = "session_resumed"
    SESSION_CLEARED = "session_cleared"
    SESSION_INIT_FAILED = "session_init_failed"

    # Progress
    PROGRESS_LOADED = "progress_loaded"
    PROGRESS_LOAD_FAILED = "progress_load_failed"
    PAGE_REJECTED = "page_rejected"

    # Auto-save
    SAVE_SCHEDULED = "save_scheduled"
    SAVE_PERSISTED = "save_persisted"
    SAVE_SKIPPED = "save_skipped"
    SAVE_FAILED = "save_failed"
    SAVE_DROPPED = "save_dropped"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


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
        default_factory=_utc_now,
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

    # Context - what is this about?
    session_id: Optional[str] = Field(
        default=None,
        description="Remote session the event relates to"
    )
    page: Optional[str] = Field(
        default=None,
        description="Wizard page the event relates to"
    )
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one intake visit)"
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
    error_code: Optional[str] = None
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
            "session_id": self.session_id,
            "page": self.page,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.session_created(session_id, email)
        event = AuditEventBuilder.save_failed(session_id, revision, error)
    """

    @staticmethod
    def access_granted(email: str, correlation_id: Optional[UUID] = None) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCESS_GRANTED,
            correlation_id=correlation_id,
            description="Access granted to intake form",
            details={"email": email},
            is_user_action=True,
        )

    @staticmethod
    def access_denied(reason: str, correlation_id: Optional[UUID] = None) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCESS_DENIED,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description="Access to intake form denied",
            error_code="ACCESS_DENIED",
            error_message=reason,
            is_user_action=True,
        )

    @staticmethod
    def session_created(session_id: str, email: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SESSION_CREATED,
            session_id=session_id,
            description=f"New session created for {email}",
            details={"email": email},
        )

    @staticmethod
    def session_resumed(session_id: str, email: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SESSION_RESUMED,
            session_id=session_id,
            description=f"Existing session resumed for {email}",
            details={"email": email},
        )

    @staticmethod
    def session_cleared(session_id: Optional[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SESSION_CLEARED,
            session_id=session_id,
            description="Local session record discarded",
            is_user_action=True,
        )

    @staticmethod
    def session_error(
        event_type: AuditEventType,
        error_code: str,
        error_message: str,
        session_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=event_type,
            severity=AuditSeverity.ERROR,
            session_id=session_id,
            description=f"Session operation failed: {error_code}",
            error_code=error_code,
            error_message=error_message[:1000],
        )

    @staticmethod
    def progress_loaded(session_id: str, pages: list[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PROGRESS_LOADED,
            session_id=session_id,
            description=f"Loaded saved progress for {len(pages)} page(s)",
            details={"pages": pages},
        )

    @staticmethod
    def page_rejected(page: str, reason: str, session_id: Optional[str] = None) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PAGE_REJECTED,
            severity=AuditSeverity.WARNING,
            session_id=session_id,
            page=page,
            description="Saved data for a page did not match its schema",
            error_message=reason[:1000],
        )

    @staticmethod
    def save_persisted(session_id: str, revision: int, pages: list[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_PERSISTED,
            session_id=session_id,
            description=f"Progress saved (revision {revision})",
            details={"revision": revision, "pages": pages},
        )

    @staticmethod
    def save_failed(
        revision: int,
        error_message: str,
        session_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            session_id=session_id,
            description=f"Auto-save failed (revision {revision})",
            details={"revision": revision},
            error_code="SAVE_FAILED",
            error_message=error_message[:1000],
        )
