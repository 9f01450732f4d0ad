"""
Allocation Engine

Turns a list of dishes (each with a price and a participant set) plus a
single tax and tip amount into what every person owes.

ALGORITHM:
1. Each participant of a dish accrues price / n, where n is the
   dish's participant count. Unassigned dishes accrue to nobody but
   still count toward the bill subtotal.
2. assigned_subtotal is the sum of all personal shares.
3. Tax and tip are split by each person's share of assigned_subtotal.
   When nothing is assigned every ratio is 0.

GUARANTEES:
- grand_total == sum of dish prices + tax + tip
- Tax and tip are fully distributed whenever assigned_subtotal > 0
- No rounding inside the computation; see AllocationResult.rounded()
- Same inputs give the same output, bit for bit
"""

from collections.abc import Iterable, Sequence
from typing import Optional
from uuid import UUID

from dietsplit.models.split import (
    AllocationResult,
    Dish,
    Person,
    PersonAllocation,
    ShareLine,
)


def allocate(
    people: Sequence[Person],
    dishes: Sequence[Dish],
    tax: float = 0.0,
    tip: float = 0.0,
) -> AllocationResult:
    """
    Compute the split.

    People appear in the result in input order. Participant ids that
    don't match anyone in `people` still dilute the dish's share but
    their portion is not credited to anyone.
    """
    tax = float(tax or 0.0)
    tip = float(tip or 0.0)

    shares: dict[UUID, float] = {person.id: 0.0 for person in people}
    items: dict[UUID, list[ShareLine]] = {person.id: [] for person in people}

    subtotal = 0.0
    for dish in dishes:
        subtotal += dish.price

        count = dish.split_count
        if count == 0:
            continue

        share = dish.price / count
        # Sorted so float accumulation order never depends on set order
        for participant_id in sorted(dish.participant_ids, key=str):
            if participant_id not in shares:
                continue
            shares[participant_id] += share
            items[participant_id].append(ShareLine(
                dish_id=dish.id,
                dish_name=dish.name,
                dish_price=dish.price,
                split_count=count,
                share=share,
            ))

    assigned_subtotal = sum(shares.values())

    entries = []
    for person in people:
        subtotal_share = shares[person.id]
        ratio = subtotal_share / assigned_subtotal if assigned_subtotal > 0 else 0.0
        tax_share = tax * ratio
        tip_share = tip * ratio
        entries.append(PersonAllocation(
            person_id=person.id,
            name=person.name,
            subtotal_share=subtotal_share,
            tax_share=tax_share,
            tip_share=tip_share,
            final_total=subtotal_share + tax_share + tip_share,
            items=tuple(items[person.id]),
        ))

    return AllocationResult(
        subtotal=subtotal,
        assigned_subtotal=assigned_subtotal,
        tax=tax,
        tip=tip,
        grand_total=subtotal + tax + tip,
        people=tuple(entries),
    )


def bill_subtotal(dishes: Iterable[Dish]) -> float:
    """Sum of every dish price, assigned or not."""
    return sum(dish.price for dish in dishes)


def _fingerprint(
    people: Sequence[Person],
    dishes: Sequence[Dish],
    tax: float,
    tip: float,
) -> tuple:
    return (
        tuple((p.id, p.name, p.diet) for p in people),
        tuple(
            (d.id, d.name, d.price, d.category, frozenset(d.participant_ids))
            for d in dishes
        ),
        float(tax or 0.0),
        float(tip or 0.0),
    )


class AllocationCache:
    """
    Memoizes the most recent allocate() call.

    Keyed on the structural content of the inputs, so in-place edits to
    a dish or person invalidate it automatically. Callers must treat the
    returned result as read-only.
    """

    def __init__(self):
        self._key: Optional[tuple] = None
        self._result: Optional[AllocationResult] = None
        self.hits = 0
        self.misses = 0

    def allocate(
        self,
        people: Sequence[Person],
        dishes: Sequence[Dish],
        tax: float = 0.0,
        tip: float = 0.0,
    ) -> AllocationResult:
        key = _fingerprint(people, dishes, tax, tip)
        if key == self._key and self._result is not None:
            self.hits += 1
            return self._result

        self.misses += 1
        self._result = allocate(people, dishes, tax, tip)
        self._key = key
        return self._result

    def clear(self) -> None:
        self._key = None
        self._result = None
