"""
Mutation Operations on the People and Dish Collections

These functions operate IN PLACE on lists owned by the caller.
They are synchronous and deterministic.

DESIGN DECISION: Mutations are total over the identifier space.
Toggling, removing or recategorizing something that doesn't exist is a
no-op that returns None, never an error. Only construction can fail,
and it fails before anything is created.
"""

from collections.abc import Iterable
from typing import Optional, Union
from uuid import UUID

from pydantic import ValidationError

from dietsplit.engine.compatibility import infer_dish_category, resolve_participants
from dietsplit.models.split import DietType, Dish, DishType, ExtractedDish, Person


DishInput = Union[ExtractedDish, tuple, dict]


class InvalidEntryError(ValueError):
    """
    A person or dish could not be created from the given input.

    `issues` lists {field, message} pairs for the caller to surface.
    """

    def __init__(self, entity_type: str, issues: list[dict]):
        self.entity_type = entity_type
        self.issues = issues
        summary = "; ".join(f"{i['field']}: {i['message']}" for i in issues)
        super().__init__(f"Invalid {entity_type}: {summary}")

    @classmethod
    def from_validation_error(cls, entity_type: str, error: ValidationError) -> "InvalidEntryError":
        issues = [
            {
                "field": ".".join(str(part) for part in err["loc"]) or entity_type,
                "message": err["msg"],
            }
            for err in error.errors()
        ]
        return cls(entity_type, issues)


# =============================================================================
# LOOKUP
# =============================================================================

def find_person(people: Iterable[Person], person_id: UUID) -> Optional[Person]:
    return next((p for p in people if p.id == person_id), None)


def find_dish(dishes: Iterable[Dish], dish_id: UUID) -> Optional[Dish]:
    return next((d for d in dishes if d.id == dish_id), None)


# =============================================================================
# CONSTRUCTION
# =============================================================================

def create_person(name: str, diet: DietType = DietType.OMNIVOROUS) -> Person:
    """
    Create a validated person with a fresh id.

    Raises:
        InvalidEntryError: empty/whitespace name or unknown diet
    """
    try:
        return Person(name=name, diet=diet)
    except ValidationError as e:
        raise InvalidEntryError.from_validation_error("person", e) from e


def create_dish(
    name: str,
    price: float,
    category: Optional[DishType] = None,
    people: Iterable[Person] = (),
    participants: Optional[Iterable[UUID]] = None,
) -> Dish:
    """
    Create a validated dish.

    Smart add (participants is None): participants are everyone in
    `people` whose diet accepts `category`.

    Manual add (participants given): the set is used verbatim, whatever
    the diets. If `category` is None it is inferred from those
    participants.

    Raises:
        InvalidEntryError: empty name, negative or non-numeric price,
            or no category on a smart add
    """
    people = list(people)

    if participants is not None:
        participant_ids = set(participants)
        if category is None:
            category = infer_dish_category(
                p for p in people if p.id in participant_ids
            )
    elif category is None:
        raise InvalidEntryError(
            "dish",
            [{"field": "category", "message": "Category is required for a smart add"}],
        )
    else:
        participant_ids = None

    try:
        dish = Dish(name=name, price=price, category=category)
    except ValidationError as e:
        raise InvalidEntryError.from_validation_error("dish", e) from e

    if participant_ids is None:
        participant_ids = resolve_participants(people, dish.category)
    dish.participant_ids = participant_ids
    return dish


def _coerce_dish_input(item: DishInput) -> ExtractedDish:
    if isinstance(item, ExtractedDish):
        return item
    try:
        if isinstance(item, dict):
            return ExtractedDish.model_validate(item)
        name, price, category = item
        return ExtractedDish(name=name, price=price, category=category)
    except ValidationError as e:
        raise InvalidEntryError.from_validation_error("dish", e) from e
    except (TypeError, ValueError) as e:
        raise InvalidEntryError(
            "dish",
            [{"field": "dish", "message": f"Expected (name, price, category): {e}"}],
        ) from e


def bulk_create_dishes(people: Iterable[Person], items: Iterable[DishInput]) -> list[Dish]:
    """
    Create one smart-added dish per (name, price, category) item.

    Every item is validated before any dish is built, so either all
    dishes are returned or InvalidEntryError is raised and none are.
    An empty input yields an empty list.
    """
    people = list(people)
    validated = [_coerce_dish_input(item) for item in items]
    return [
        create_dish(item.name, item.price, item.category, people=people)
        for item in validated
    ]


# =============================================================================
# IN-PLACE MUTATIONS
# =============================================================================

def toggle_participation(
    dishes: list[Dish],
    people: Iterable[Person],
    dish_id: UUID,
    person_id: UUID,
) -> Optional[bool]:
    """
    Flip whether a person shares a dish.

    Returns True if the person joined, False if they left, None if the
    dish or person is unknown. Other dishes are untouched.
    """
    dish = find_dish(dishes, dish_id)
    if dish is None:
        return None

    if person_id in dish.participant_ids:
        dish.participant_ids.discard(person_id)
        return False

    if find_person(people, person_id) is None:
        return None
    dish.participant_ids.add(person_id)
    return True


def remove_dish(dishes: list[Dish], dish_id: UUID) -> Optional[Dish]:
    """Delete a dish. Returns it, or None if it wasn't there."""
    dish = find_dish(dishes, dish_id)
    if dish is not None:
        dishes.remove(dish)
    return dish


def remove_person(
    people: list[Person],
    dishes: list[Dish],
    person_id: UUID,
) -> Optional[Person]:
    """
    Delete a person and strip them from every dish's participants.

    No other dish field changes. Returns the person, or None if unknown.
    """
    person = find_person(people, person_id)
    if person is None:
        return None

    people.remove(person)
    for dish in dishes:
        dish.participant_ids.discard(person_id)
    return person


def set_dish_category(
    dishes: list[Dish],
    people: Iterable[Person],
    dish_id: UUID,
    category: DishType,
) -> Optional[Dish]:
    """
    Change a dish's category and re-derive its participants.

    The participant set is REPLACED by a fresh resolve over `people`.
    Manual edits made to this dish are discarded, even when the category
    doesn't actually change.
    """
    dish = find_dish(dishes, dish_id)
    if dish is None:
        return None

    dish.category = DishType(category)
    dish.participant_ids = resolve_participants(people, dish.category)
    return dish
