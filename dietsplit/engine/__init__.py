"""
Allocation Engine Package

Pure rules and in-place mutations. Nothing here does I/O or logging;
that belongs to the session and the services.
"""

from dietsplit.engine.allocation import AllocationCache, allocate, bill_subtotal
from dietsplit.engine.compatibility import (
    incompatible_participants,
    infer_dish_category,
    is_compatible,
    resolve_participants,
)
from dietsplit.engine.mutations import (
    InvalidEntryError,
    bulk_create_dishes,
    create_dish,
    create_person,
    find_dish,
    find_person,
    remove_dish,
    remove_person,
    set_dish_category,
    toggle_participation,
)
from dietsplit.engine.tax import (
    TaxPercentControl,
    percentage_from_tax,
    tax_from_percentage,
)

__all__ = [
    # Allocation
    "AllocationCache",
    "allocate",
    "bill_subtotal",
    # Compatibility
    "incompatible_participants",
    "infer_dish_category",
    "is_compatible",
    "resolve_participants",
    # Mutations
    "InvalidEntryError",
    "bulk_create_dishes",
    "create_dish",
    "create_person",
    "find_dish",
    "find_person",
    "remove_dish",
    "remove_person",
    "set_dish_category",
    "toggle_participation",
    # Tax
    "TaxPercentControl",
    "percentage_from_tax",
    "tax_from_percentage",
]
