"""
Audit Logger

DESIGN DECISION: Every change to a split is logged.
This provides:
1. Traceability of how a total came about
2. Debugging capability
3. A visible record of tolerated no-ops and extraction failures

The audit logger:
- Is synchronous, like the mutations it records
- Never raises into the caller if logging fails
- Keeps an append-only in-memory trail per logger
"""

import logging
from collections import deque
from typing import Optional
from uuid import UUID, uuid4

import structlog

from dietsplit.models.audit import AuditEvent, AuditSeverity


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


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An in-memory trail (for showing recent activity)
    """

    def __init__(self, max_events: int = 1000):
        """
        Initialize audit logger.

        Args:
            max_events: How many events the in-memory trail keeps.
                       Oldest events are dropped first.
        """
        self._events: deque[AuditEvent] = deque(maxlen=max_events)
        self._logger = structlog.get_logger("dietsplit.audit")

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns True if the event was written to the local log.
        """
        self._events.append(event)

        log_dict = event.to_log_dict()
        try:
            if event.severity == AuditSeverity.ERROR:
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception:
            # Logging must never break a mutation
            return False

        return True

    def recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """Most recent events, newest first."""
        events = list(self._events)
        events.reverse()
        return events[:limit]

    def events_for_session(self, session_id: UUID) -> list[AuditEvent]:
        """All events of one session in chronological order."""
        return [e for e in self._events if e.session_id == session_id]

    def events_for_entity(self, entity_type: str, entity_id: UUID) -> list[AuditEvent]:
        """All events about one entity in chronological order."""
        return [
            e for e in self._events
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]


def create_session_id() -> UUID:
    """
    Create a new id grouping all events of one split session.

    Use this when a session starts and pass it to every event.
    """
    return uuid4()


def configure_logging(debug_mode: bool = False) -> None:
    """
    Set the level of every dietsplit logger.

    DEBUG when debug_mode is on (unknown-id no-ops become visible),
    INFO otherwise.
    """
    level = logging.DEBUG if debug_mode else logging.INFO
    logging.getLogger("dietsplit").setLevel(level)


def get_logger(name: Optional[str] = None):
    """Structured logger for modules outside the audit trail."""
    return structlog.get_logger(name or "dietsplit")
