"""
Tests for diet compatibility rules and participant resolution.
"""

import pytest

from dietsplit.engine.compatibility import (
    incompatible_participants,
    infer_dish_category,
    is_compatible,
    resolve_participants,
)
from dietsplit.models.split import DietType, Dish, DishType


class TestIsCompatible:
    """The full 3x3 truth table."""

    @pytest.mark.parametrize("diet", list(DietType))
    def test_vegan_dish_suits_everyone(self, diet):
        assert is_compatible(diet, DishType.VEGAN) is True

    def test_vegetarian_dish_excludes_only_vegans(self):
        assert is_compatible(DietType.OMNIVOROUS, DishType.VEGETARIAN) is True
        assert is_compatible(DietType.VEGETARIAN, DishType.VEGETARIAN) is True
        assert is_compatible(DietType.VEGAN, DishType.VEGETARIAN) is False

    def test_meat_dish_suits_only_omnivores(self):
        assert is_compatible(DietType.OMNIVOROUS, DishType.MEAT) is True
        assert is_compatible(DietType.VEGETARIAN, DishType.MEAT) is False
        assert is_compatible(DietType.VEGAN, DishType.MEAT) is False


class TestResolveParticipants:

    def test_meat_resolves_to_omnivore(self, trio, omnivore):
        assert resolve_participants(trio, DishType.MEAT) == {omnivore.id}

    def test_vegetarian_resolves_to_non_vegans(self, trio, omnivore, vegetarian):
        assert resolve_participants(trio, DishType.VEGETARIAN) == {omnivore.id, vegetarian.id}

    def test_vegan_resolves_to_everyone(self, trio):
        assert resolve_participants(trio, DishType.VEGAN) == {p.id for p in trio}

    def test_no_people_resolves_to_empty_set(self):
        assert resolve_participants([], DishType.VEGAN) == set()


class TestIncompatibleParticipants:

    def test_flags_vegan_on_meat_dish(self, trio, omnivore, vegan):
        dish = Dish(
            name="Burger",
            price=10,
            category=DishType.MEAT,
            participant_ids={omnivore.id, vegan.id},
        )
        assert incompatible_participants(dish, trio) == {vegan.id}

    def test_ignores_people_not_on_dish(self, trio, omnivore):
        dish = Dish(
            name="Steak",
            price=30,
            category=DishType.MEAT,
            participant_ids={omnivore.id},
        )
        assert incompatible_participants(dish, trio) == set()


class TestInferDishCategory:

    def test_any_vegan_makes_it_vegan(self, trio):
        assert infer_dish_category(trio) == DishType.VEGAN

    def test_vegetarian_without_vegan(self, omnivore, vegetarian):
        assert infer_dish_category([omnivore, vegetarian]) == DishType.VEGETARIAN

    def test_omnivores_only_is_meat(self, omnivore):
        assert infer_dish_category([omnivore]) == DishType.MEAT

    def test_nobody_is_meat(self):
        assert infer_dish_category([]) == DishType.MEAT
