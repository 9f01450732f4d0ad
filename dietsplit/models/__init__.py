"""
Data Models Package

This package contains all Pydantic models used by DietSplit.
Everything the engine reads or produces conforms to these schemas.
"""

from dietsplit.models.split import (
    AllocationResult,
    DietType,
    Dish,
    DishType,
    ExtractedDish,
    Person,
    PersonAllocation,
    SavedSplit,
    ShareLine,
    round_currency,
)
from dietsplit.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Split models
    "AllocationResult",
    "DietType",
    "Dish",
    "DishType",
    "ExtractedDish",
    "Person",
    "PersonAllocation",
    "SavedSplit",
    "ShareLine",
    "round_currency",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
