"""Data models for the recipe store.

Defines Pydantic models for the stored entities, the association rows that link
them, and the input schema used when adding a recipe with its ingredients.
All models use Pydantic v2. Entities are mutable so the storage layer can assign
primary keys at insertion time.

An id of 0 means "not stored yet"; stored entities always carry a positive key.
"""

from enum import Enum
from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class MeasurementUnit(str, Enum):
    """Unit in which a recipe ingredient amount is expressed."""

    GRAMS = "Grams"
    KILOGRAMS = "Kilograms"
    MILLILITERS = "Milliliters"
    LITERS = "Liters"
    TEASPOONS = "Teaspoons"
    TABLESPOONS = "Tablespoons"
    CUPS = "Cups"
    UNITS = "Units"


class Recipe(BaseModel):
    """A stored recipe. Ingredients are linked through RecipeIngredient rows."""

    model_config = ConfigDict(str_strip_whitespace=True)

    id: Annotated[int, Field(0, ge=0, description="Primary key (0 until stored)")]
    name: Annotated[str, Field(min_length=1, max_length=200, description="Recipe name (1-200 chars)")]


class Ingredient(BaseModel):
    """A stored ingredient, referenced by recipes and dietary restrictions."""

    model_config = ConfigDict(str_strip_whitespace=True)

    id: Annotated[int, Field(0, ge=0, description="Primary key (0 until stored)")]
    name: Annotated[str, Field(min_length=1, max_length=200, description="Ingredient name (1-200 chars)")]


class DietaryRestriction(BaseModel):
    """A named dietary restriction (e.g. vegan, gluten free)."""

    model_config = ConfigDict(str_strip_whitespace=True)

    id: Annotated[int, Field(0, ge=0, description="Primary key (0 until stored)")]
    name: Annotated[str, Field(min_length=1, max_length=200, description="Restriction name (1-200 chars)")]


class RecipeIngredient(BaseModel):
    """Association row: recipe `recipe_id` uses ingredient `ingredient_id`.

    Duplicate rows for the same pair are not prevented here.
    """

    recipe_id: Annotated[int, Field(ge=0, description="Referenced recipe id")]
    ingredient_id: Annotated[int, Field(ge=0, description="Referenced ingredient id")]
    amount: Annotated[float, Field(0.0, ge=0, description="Quantity of the ingredient")]
    measurement_unit: Annotated[
        MeasurementUnit, Field(MeasurementUnit.UNITS, description="Unit the amount is expressed in")
    ]


class IngredientRestriction(BaseModel):
    """Association row: ingredient `ingredient_id` is disallowed under the restriction."""

    dietary_restriction_id: Annotated[int, Field(ge=0, description="Referenced restriction id")]
    ingredient_id: Annotated[int, Field(ge=0, description="Referenced ingredient id")]


class IngredientLine(BaseModel):
    """One ingredient of a RecipeInput, with an optional quantity."""

    ingredient: Ingredient
    amount: Annotated[Optional[float], Field(None, ge=0, description="Quantity, or None for the default")]
    measurement_unit: Annotated[
        Optional[MeasurementUnit], Field(None, description="Unit, or None for the default")
    ]


class RecipeInput(BaseModel):
    """Input schema for adding a recipe together with its ingredients.

    Ingredients may be given as IngredientLine objects, bare Ingredient objects,
    or plain dicts; the latter two are wrapped into IngredientLine entries.
    """

    recipe: Recipe
    ingredients: Annotated[List[IngredientLine], Field(default_factory=list, description="Ingredient lines")]

    @field_validator("ingredients", mode="before")
    @classmethod
    def wrap_ingredients(cls, ingredients: Optional[list]) -> list:
        """Normalize bare ingredients into IngredientLine entries."""
        if not ingredients:
            return []

        lines = []
        for item in ingredients:
            if isinstance(item, Ingredient):
                lines.append({"ingredient": item})
            elif isinstance(item, dict) and "ingredient" not in item:
                # Flat dict: {"name": ..., "amount": ..., "measurement_unit": ...}
                line = {"ingredient": {k: v for k, v in item.items() if k in ("id", "name")}}
                if "amount" in item:
                    line["amount"] = item["amount"]
                if "measurement_unit" in item:
                    line["measurement_unit"] = item["measurement_unit"]
                lines.append(line)
            else:
                lines.append(item)
        return lines
