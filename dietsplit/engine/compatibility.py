"""
Diet Compatibility Rules

DESIGN DECISION: Compatibility is a fixed 3x3 truth table, not a scoring
model. A vegan dish suits everyone, a vegetarian dish suits everyone but
vegans, a meat dish suits omnivores only.

The rule is used in two ways:
1. To derive default participants ("smart add", category change)
2. To flag participants assigned to a dish they can't eat

The flag is ADVISORY. It never blocks a manual assignment.
"""

from collections.abc import Iterable
from uuid import UUID

from dietsplit.models.split import DietType, Dish, DishType, Person


# Which diets accept each dish category
_ACCEPTED_DIETS: dict[DishType, frozenset[DietType]] = {
    DishType.VEGAN: frozenset(DietType),
    DishType.VEGETARIAN: frozenset({DietType.OMNIVOROUS, DietType.VEGETARIAN}),
    DishType.MEAT: frozenset({DietType.OMNIVOROUS}),
}


def is_compatible(diet: DietType, category: DishType) -> bool:
    """Does a person with `diet` eat a dish of `category`?"""
    return diet in _ACCEPTED_DIETS[category]


def resolve_participants(people: Iterable[Person], category: DishType) -> set[UUID]:
    """Ids of every person whose diet accepts `category`."""
    return {person.id for person in people if is_compatible(person.diet, category)}


def incompatible_participants(dish: Dish, people: Iterable[Person]) -> set[UUID]:
    """
    Participants of `dish` whose diet does not accept its category.

    People not on the dish are ignored. Used for warnings only.
    """
    return {
        person.id
        for person in people
        if person.id in dish.participant_ids
        and not is_compatible(person.diet, dish.category)
    }


def infer_dish_category(participants: Iterable[Person]) -> DishType:
    """
    Guess a dish's category from the people sharing it.

    Used for manual adds where the caller picked people but no category,
    so the incompatibility flag doesn't fire on a correct assignment.
    Any vegan makes it vegan; otherwise any vegetarian makes it
    vegetarian; otherwise it's meat.
    """
    diets = {person.diet for person in participants}
    if DietType.VEGAN in diets:
        return DishType.VEGAN
    if DietType.VEGETARIAN in diets:
        return DishType.VEGETARIAN
    return DishType.MEAT
