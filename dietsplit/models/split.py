"""
Core Data Models for DietSplit

These models define the schemas for everything the allocation engine
consumes and produces:
1. People and their diets
2. Dishes and who shares them
3. Computed allocation results
4. History snapshots

DESIGN DECISION: We use Pydantic v2 so that invalid names and prices are
rejected at construction time. A model that exists is a model the engine
can work with.
"""

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class DietType(str, Enum):
    """
    A person's dietary restriction.

    OMNIVOROUS eats everything, VEGETARIAN eats no meat or fish,
    VEGAN eats plant-based food only.
    """
    OMNIVOROUS = "omnivorous"
    VEGETARIAN = "vegetarian"
    VEGAN = "vegan"


class DishType(str, Enum):
    """
    A dish's classification for compatibility purposes.

    MEAT also covers fish and dishes with unknown ingredients.
    """
    MEAT = "meat"
    VEGETARIAN = "vegetarian"
    VEGAN = "vegan"


# =============================================================================
# MONEY HELPERS
# =============================================================================

def round_currency(amount: Optional[float], places: int = 2) -> float:
    """
    Round a monetary amount for presentation.

    Only ever applied to output. The running computation keeps full
    precision.
    """
    if amount is None:
        return 0.0
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(amount)).quantize(quantum, rounding=ROUND_HALF_UP))


# =============================================================================
# CORE MODELS
# =============================================================================

class Person(BaseModel):
    """
    Someone sharing the meal.

    The id is stable for the lifetime of the person and is what dishes
    reference in their participant sets.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique person identifier"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Display name"
    )
    diet: DietType = Field(
        default=DietType.OMNIVOROUS,
        description="Dietary restriction"
    )


class Dish(BaseModel):
    """
    A dish on the bill.

    participant_ids is a set: order is irrelevant and duplicates are
    impossible. An empty set means the dish is unassigned.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique dish identifier"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Dish name"
    )
    price: float = Field(
        ...,
        ge=0,
        allow_inf_nan=False,
        description="Price of the whole dish"
    )
    category: DishType = Field(
        ...,
        description="Dish category"
    )
    participant_ids: set[UUID] = Field(
        default_factory=set,
        description="People sharing this dish"
    )

    @property
    def split_count(self) -> int:
        return len(self.participant_ids)

    @property
    def is_assigned(self) -> bool:
        return bool(self.participant_ids)

    def share_per_participant(self) -> float:
        """Exact per-participant share, 0.0 when nobody shares the dish."""
        if not self.participant_ids:
            return 0.0
        return self.price / len(self.participant_ids)


class ExtractedDish(BaseModel):
    """
    A dish proposed by a text extraction collaborator.

    Carries no id and no participants: those are assigned on insertion.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=200)
    price: float = Field(..., ge=0, allow_inf_nan=False)
    category: DishType


# =============================================================================
# ALLOCATION RESULTS
# =============================================================================

class ShareLine(BaseModel):
    """One dish as it appears on a single person's tab."""
    model_config = ConfigDict(frozen=True)

    dish_id: UUID
    dish_name: str
    dish_price: float
    split_count: int = Field(ge=1)
    share: float


class PersonAllocation(BaseModel):
    """What one person owes."""
    model_config = ConfigDict(frozen=True)

    person_id: UUID
    name: str
    subtotal_share: float = 0.0
    tax_share: float = 0.0
    tip_share: float = 0.0
    final_total: float = 0.0
    items: tuple[ShareLine, ...] = ()


class AllocationResult(BaseModel):
    """
    Output of the allocation engine.

    subtotal includes unassigned dishes, assigned_subtotal does not.
    Values are unrounded; call rounded() for presentation.

    Frozen: a result may be shared by every caller of a memoized
    allocation.
    """
    model_config = ConfigDict(frozen=True)

    subtotal: float
    assigned_subtotal: float
    tax: float
    tip: float
    grand_total: float
    people: tuple[PersonAllocation, ...] = ()

    @property
    def unassigned_subtotal(self) -> float:
        return self.subtotal - self.assigned_subtotal

    @property
    def by_person(self) -> dict[UUID, PersonAllocation]:
        return {entry.person_id: entry for entry in self.people}

    def rounded(self, places: int = 2) -> "AllocationResult":
        """Return a copy with every monetary value rounded to `places`."""
        people = tuple(
            entry.model_copy(update={
                "subtotal_share": round_currency(entry.subtotal_share, places),
                "tax_share": round_currency(entry.tax_share, places),
                "tip_share": round_currency(entry.tip_share, places),
                "final_total": round_currency(entry.final_total, places),
                "items": tuple(
                    line.model_copy(update={"share": round_currency(line.share, places)})
                    for line in entry.items
                ),
            })
            for entry in self.people
        )
        return self.model_copy(update={
            "subtotal": round_currency(self.subtotal, places),
            "assigned_subtotal": round_currency(self.assigned_subtotal, places),
            "tax": round_currency(self.tax, places),
            "tip": round_currency(self.tip, places),
            "grand_total": round_currency(self.grand_total, places),
            "people": people,
        })


# =============================================================================
# HISTORY
# =============================================================================

class SavedSplit(BaseModel):
    """
    A finished split kept in history.

    Snapshots are never edited after creation. Loading one copies its
    people and dishes back into a session.
    """

    id: UUID = Field(default_factory=uuid4)
    date: datetime = Field(default_factory=datetime.utcnow)
    subtotal: float = 0.0
    tax: float = 0.0
    tip: float = 0.0
    total: float = 0.0
    friend_count: int = Field(default=0, ge=0)
    dish_count: int = Field(default=0, ge=0)
    people: list[Person] = Field(default_factory=list)
    dishes: list[Dish] = Field(default_factory=list)
    totals: dict[UUID, float] = Field(
        default_factory=dict,
        description="Each person's final total at the time of saving"
    )
