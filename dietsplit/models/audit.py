"""
Audit Models for DietSplit

Every change to a split is recorded as an audit event.
This provides:
1. A trace of who was added, removed and reassigned
2. Debugging information when a total looks wrong
3. Visibility into extraction failures

DESIGN DECISION: Audit trails are append-only. Events are never modified.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # People
    PERSON_ADDED = "person_added"
    PERSON_REMOVED = "person_removed"
    PERSON_REJECTED = "person_rejected"

    # Dishes
    DISH_ADDED = "dish_added"
    DISH_REMOVED = "dish_removed"
    DISH_REJECTED = "dish_rejected"
    DISHES_BULK_ADDED = "dishes_bulk_added"
    DISH_CATEGORY_CHANGED = "dish_category_changed"
    PARTICIPATION_TOGGLED = "participation_toggled"

    # Bill context
    TAX_UPDATED = "tax_updated"
    TIP_UPDATED = "tip_updated"
    AMOUNT_REJECTED = "amount_rejected"

    # Extraction
    EXTRACTION_COMPLETED = "extraction_completed"
    EXTRACTION_FAILED = "extraction_failed"

    # History
    SPLIT_SAVED = "split_saved"
    SPLIT_LOADED = "split_loaded"
    SPLIT_RESET = "split_reset"

    # Tolerated no-ops
    UNKNOWN_IDENTIFIER = "unknown_identifier"

    # Collaborators
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every mutation of a split session creates one of these.
    """

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # What entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'person', 'dish', 'split')"
    )
    entity_id: Optional[UUID] = None

    # Groups all events of one split session
    session_id: Optional[UUID] = None

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "session_id": str(self.session_id) if self.session_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.person_added(person, session_id)
        event = AuditEventBuilder.dish_removed(dish, session_id)
    """

    @staticmethod
    def person_added(person_id: UUID, name: str, diet: str, session_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PERSON_ADDED,
            entity_type="person",
            entity_id=person_id,
            session_id=session_id,
            description=f"Person added: {name}",
            details={"name": name, "diet": diet},
        )

    @staticmethod
    def person_removed(
        person_id: UUID,
        name: str,
        affected_dishes: int,
        session_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PERSON_REMOVED,
            entity_type="person",
            entity_id=person_id,
            session_id=session_id,
            description=f"Person removed: {name}",
            details={"name": name, "dishes_affected": affected_dishes},
        )

    @staticmethod
    def entry_rejected(
        entity_type: str,
        issues: list[dict],
        session_id: UUID,
    ) -> AuditEvent:
        event_type = {
            "person": AuditEventType.PERSON_REJECTED,
            "dish": AuditEventType.DISH_REJECTED,
        }.get(entity_type, AuditEventType.AMOUNT_REJECTED)
        return AuditEvent(
            event_type=event_type,
            severity=AuditSeverity.WARNING,
            entity_type=entity_type,
            session_id=session_id,
            description=f"Invalid {entity_type} rejected with {len(issues)} issues",
            details={"issues": issues},
        )

    @staticmethod
    def dish_added(
        dish_id: UUID,
        name: str,
        price: float,
        category: str,
        participant_count: int,
        smart: bool,
        session_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DISH_ADDED,
            entity_type="dish",
            entity_id=dish_id,
            session_id=session_id,
            description=f"Dish added: {name}",
            details={
                "price": price,
                "category": category,
                "participants": participant_count,
                "smart_add": smart,
            },
        )

    @staticmethod
    def dishes_bulk_added(count: int, session_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DISHES_BULK_ADDED,
            entity_type="dish",
            session_id=session_id,
            description=f"{count} dishes added in bulk",
            details={"count": count},
        )

    @staticmethod
    def dish_removed(dish_id: UUID, name: str, session_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DISH_REMOVED,
            entity_type="dish",
            entity_id=dish_id,
            session_id=session_id,
            description=f"Dish removed: {name}",
        )

    @staticmethod
    def dish_category_changed(
        dish_id: UUID,
        old_category: str,
        new_category: str,
        changed: int,
        participant_count: int,
        session_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DISH_CATEGORY_CHANGED,
            entity_type="dish",
            entity_id=dish_id,
            session_id=session_id,
            description=f"Dish category changed: {old_category} -> {new_category}",
            details={
                "old_category": old_category,
                "new_category": new_category,
                "participants": participant_count,
                "participants_changed": changed,
            },
        )

    @staticmethod
    def participation_toggled(
        dish_id: UUID,
        person_id: UUID,
        joined: bool,
        session_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PARTICIPATION_TOGGLED,
            entity_type="dish",
            entity_id=dish_id,
            session_id=session_id,
            description="Participant joined dish" if joined else "Participant left dish",
            details={"person_id": str(person_id), "joined": joined},
        )

    @staticmethod
    def amount_updated(field: str, old: float, new: float, session_id: UUID) -> AuditEvent:
        event_type = (
            AuditEventType.TAX_UPDATED if field == "tax" else AuditEventType.TIP_UPDATED
        )
        return AuditEvent(
            event_type=event_type,
            entity_type="split",
            session_id=session_id,
            description=f"{field.capitalize()} updated",
            details={"old": old, "new": new},
        )

    @staticmethod
    def unknown_identifier(operation: str, identifier: UUID, session_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.UNKNOWN_IDENTIFIER,
            severity=AuditSeverity.DEBUG,
            session_id=session_id,
            description=f"{operation}: unknown identifier ignored",
            details={"operation": operation, "identifier": str(identifier)},
        )

    @staticmethod
    def extraction_completed(count: int, session_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTRACTION_COMPLETED,
            entity_type="extraction",
            session_id=session_id,
            description=f"Text extraction proposed {count} dishes",
            details={"count": count},
        )

    @staticmethod
    def extraction_failed(error_message: str, session_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTRACTION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="extraction",
            session_id=session_id,
            description="Text extraction failed, no dishes added",
            error_message=error_message,
        )

    @staticmethod
    def split_saved(split_id: UUID, total: float, session_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SPLIT_SAVED,
            entity_type="split",
            entity_id=split_id,
            session_id=session_id,
            description="Split saved to history",
            details={"total": total},
        )

    @staticmethod
    def split_loaded(split_id: UUID, session_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SPLIT_LOADED,
            entity_type="split",
            entity_id=split_id,
            session_id=session_id,
            description="Split loaded from history",
        )

    @staticmethod
    def split_reset(session_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SPLIT_RESET,
            entity_type="split",
            session_id=session_id,
            description="Session reset for a new split",
        )

    @staticmethod
    def external_service_error(
        service: str,
        error_message: str,
        session_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"External service error: {service}",
            error_message=error_message,
            details={"service": service},
            session_id=session_id,
        )
