"""
Audit Logger

DESIGN DECISION: Every significant session and auto-save action is
logged. Auto-save failures are silent in the UI by design, so this log
is the only place they become visible.

The audit logger:
- Never raises (a logging failure must not break the wizard)
- Supports correlation IDs to trace one visit end to end
- Optionally forwards events to a sink (e.g. the UI's notice area)
"""

import logging
from typing import Callable, Optional
from uuid import UUID, uuid4

import structlog

from tax_intake.models.audit import AuditEvent, AuditSeverity


# Configure structlog for local logging
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
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(debug: bool = False) -> None:
    """Route structlog output through the stdlib root logger."""
    logging.basicConfig(
        format="%(message)s",
        level=logging.DEBUG if debug else logging.INFO,
    )


EventSink = Callable[[AuditEvent], None]


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An optional sink supplied by the host application
    """

    def __init__(
        self,
        sink: Optional[EventSink] = None,
        correlation_id: Optional[UUID] = None,
    ):
        """
        Initialize audit logger.

        Args:
            sink: Callable receiving every event. If None, only logs locally.
            correlation_id: Stamped on events that do not carry their own.
        """
        self._sink = sink
        self._correlation_id = correlation_id
        self._logger = structlog.get_logger("tax_intake.audit")

    @property
    def correlation_id(self) -> Optional[UUID]:
        return self._correlation_id

    def bind(self, correlation_id: UUID) -> "AuditLogger":
        """A logger sharing this sink that stamps a correlation id."""
        return AuditLogger(sink=self._sink, correlation_id=correlation_id)

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Returns False if the sink failed.
        """
        if event.correlation_id is None and self._correlation_id is not None:
            event = event.model_copy(update={"correlation_id": self._correlation_id})

        log_dict = event.to_log_dict()

        if event.severity == AuditSeverity.ERROR:
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._sink:
            try:
                self._sink(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_sink_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a visit (landing page) and pass it through
    all subsequent operations.
    """
    return uuid4()
