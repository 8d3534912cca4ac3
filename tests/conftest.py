"""Pytest fixtures shared by the unit tests.

Every test gets its own InMemoryAppStorage so no state leaks between tests.
"""

import pytest

from recipe_store.models.models import (
    DietaryRestriction,
    Ingredient,
    IngredientRestriction,
    MeasurementUnit,
    Recipe,
    RecipeIngredient,
)
from recipe_store.services.business_logic import BusinessLogicLayer
from recipe_store.storage.app_storage import InMemoryAppStorage


@pytest.fixture
def storage():
    """Empty in-memory storage whose keys start at 1."""
    return InMemoryAppStorage(key_seed=1)


@pytest.fixture
def layer(storage):
    """Business logic layer over the per-test storage, case-sensitive names."""
    return BusinessLogicLayer(storage, case_sensitive=True)


@pytest.fixture
def seeded_storage():
    """Storage populated directly, bypassing the layer.

    Recipes: Soup(1), Stew(2), Pesto(3), Salad(4)
    Ingredients: Salt(1) in Soup+Stew, Basil(2) in Pesto only, Pepper(3) unused,
                 Lettuce(4) + Tomato(5) in Salad
    Restrictions: Low Sodium(1) disallows Salt, Nightshade Free(2) disallows Tomato
    Key generator resumes at 100.
    """
    store = InMemoryAppStorage(key_seed=100)
    for recipe_id, name in [(1, "Soup"), (2, "Stew"), (3, "Pesto"), (4, "Salad")]:
        store.recipes.add(Recipe(id=recipe_id, name=name))
    for ingredient_id, name in [(1, "Salt"), (2, "Basil"), (3, "Pepper"), (4, "Lettuce"), (5, "Tomato")]:
        store.ingredients.add(Ingredient(id=ingredient_id, name=name))
    for recipe_id, ingredient_id in [(1, 1), (2, 1), (3, 2), (4, 4), (4, 5)]:
        store.recipe_ingredients.add(
            RecipeIngredient(
                recipe_id=recipe_id, ingredient_id=ingredient_id, amount=10, measurement_unit=MeasurementUnit.GRAMS
            )
        )
    store.dietary_restrictions.add(DietaryRestriction(id=1, name="Low Sodium"))
    store.dietary_restrictions.add(DietaryRestriction(id=2, name="Nightshade Free"))
    store.ingredient_restrictions.add(IngredientRestriction(dietary_restriction_id=1, ingredient_id=1))
    store.ingredient_restrictions.add(IngredientRestriction(dietary_restriction_id=2, ingredient_id=5))
    return store


@pytest.fixture
def seeded_layer(seeded_storage):
    return BusinessLogicLayer(seeded_storage, case_sensitive=True)


@pytest.fixture
def counts():
    """Callable returning the size of every collection in a storage."""

    def _counts(store) -> dict:
        return {
            "recipes": len(store.recipes),
            "ingredients": len(store.ingredients),
            "dietary_restrictions": len(store.dietary_restrictions),
            "recipe_ingredients": len(store.recipe_ingredients),
            "ingredient_restrictions": len(store.ingredient_restrictions),
        }

    return _counts
