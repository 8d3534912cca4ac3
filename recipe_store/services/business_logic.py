"""Business logic over the recipe store.

BusinessLogicLayer runs queries and mutations against an injected AppStorage:

Queries:
- get_recipes_by_ingredient(): recipes using an ingredient (by id or name)
- get_recipes_by_dietary_restriction(): recipes containing ingredients a restriction disallows
- get_recipes_by_name_or_id(): union of name and id matches
- does_recipe_exist(): exact name check
- get_ingredients_for_recipe(): ingredients linked to a recipe

Mutations:
- add_recipe_and_ingredients(): insert a recipe, new ingredients and their links
- add_dietary_restriction(): insert a restriction and its ingredient rows
- delete_ingredient(): refuse if shared, cascade to the recipe if used by exactly one
- delete_recipe(): remove a recipe and its rows, never its ingredients

Misses are reported through return values (False / []), never exceptions. The only
error raised is StorageContractError, when the key generator misbehaves.
All calls are synchronous and assume a single writer.
"""

from typing import Iterable, List, Optional, Set

from recipe_store.models.models import (
    DietaryRestriction,
    Ingredient,
    IngredientRestriction,
    MeasurementUnit,
    Recipe,
    RecipeIngredient,
    RecipeInput,
)
from recipe_store.storage.app_storage import AppStorage, EntitySet, StorageContractError
from recipe_store.utils.config import config
from recipe_store.utils.logger import operation_logger

_query_log = operation_logger("query")
_add_log = operation_logger("add_recipe_and_ingredients")
_restriction_log = operation_logger("add_dietary_restriction")
_delete_ingredient_log = operation_logger("delete_ingredient")
_delete_recipe_log = operation_logger("delete_recipe")


class BusinessLogicLayer:
    """Referential-integrity-aware operations over an AppStorage."""

    def __init__(self, storage: AppStorage, *, case_sensitive: Optional[bool] = None) -> None:
        self.storage = storage
        self.case_sensitive = config.NAME_MATCH_CASE_SENSITIVE if case_sensitive is None else case_sensitive

    # ========================================================================
    # Lookup helpers
    # ========================================================================

    def _name_matches(self, candidate: str, name: Optional[str]) -> bool:
        if not name:
            return False
        if self.case_sensitive:
            return candidate == name
        return candidate.casefold() == name.casefold()

    @staticmethod
    def _find_by_id(collection: EntitySet, entity_id: Optional[int]):
        if entity_id is None or entity_id <= 0:
            return None
        return next((entity for entity in collection if entity.id == entity_id), None)

    def _find_by_name(self, collection: EntitySet, name: Optional[str]):
        return next((entity for entity in collection if self._name_matches(entity.name, name)), None)

    def _resolve(self, collection: EntitySet, entity_id: Optional[int], name: Optional[str]):
        """Find an entity by id, falling back to the first name match."""
        entity = self._find_by_id(collection, entity_id)
        if entity is None:
            entity = self._find_by_name(collection, name)
        return entity

    def _recipes_with_ids(self, recipe_ids: Set[int]) -> List[Recipe]:
        if not recipe_ids:
            return []
        return [recipe for recipe in self.storage.recipes if recipe.id in recipe_ids]

    def _draw_keys(self, collections: List[EntitySet]) -> List[int]:
        """Draw one key per target collection, all checked before anything is inserted.

        Raises:
            StorageContractError: If a key is not a positive int, is already used in
                its collection, or repeats a key drawn earlier in the same batch.
        """
        keys: List[int] = []
        for collection in collections:
            key = self.storage.generate_primary_key()
            if not isinstance(key, int) or isinstance(key, bool) or key <= 0:
                raise StorageContractError(f"generate_primary_key returned an invalid key: {key!r}")
            if key in keys or any(entity.id == key for entity in collection):
                raise StorageContractError(f"generate_primary_key returned a key already in use: {key}")
            keys.append(key)
        return keys

    # ========================================================================
    # Queries
    # ========================================================================

    def get_recipes_by_ingredient(
        self, ingredient_id: Optional[int] = None, ingredient_name: Optional[str] = None
    ) -> List[Recipe]:
        """Return the distinct recipes that use an ingredient.

        A positive `ingredient_id` present in storage wins. Otherwise every
        ingredient whose name matches `ingredient_name` is used, since the
        always-insert policy allows several ingredients to share a name.
        """
        ingredient = self._find_by_id(self.storage.ingredients, ingredient_id)
        if ingredient is not None:
            target_ids = {ingredient.id}
        else:
            target_ids = {
                ing.id for ing in self.storage.ingredients if self._name_matches(ing.name, ingredient_name)
            }

        if not target_ids:
            _query_log.debug(f"Ingredient not found (id={ingredient_id}, name={ingredient_name!r})")
            return []

        recipe_ids = {row.recipe_id for row in self.storage.recipe_ingredients if row.ingredient_id in target_ids}
        return self._recipes_with_ids(recipe_ids)

    def get_recipes_by_dietary_restriction(
        self, name: Optional[str] = None, restriction_id: Optional[int] = None
    ) -> List[Recipe]:
        """Return recipes that contain at least one ingredient the restriction disallows.

        The restriction is resolved by name first, then by id.
        """
        restriction = self._find_by_name(self.storage.dietary_restrictions, name)
        if restriction is None:
            restriction = self._find_by_id(self.storage.dietary_restrictions, restriction_id)
        if restriction is None:
            _query_log.debug(f"Dietary restriction not found (name={name!r}, id={restriction_id})")
            return []

        disallowed = {
            row.ingredient_id
            for row in self.storage.ingredient_restrictions
            if row.dietary_restriction_id == restriction.id
        }
        recipe_ids = {row.recipe_id for row in self.storage.recipe_ingredients if row.ingredient_id in disallowed}
        return self._recipes_with_ids(recipe_ids)

    def get_recipes_by_name_or_id(self, name: Optional[str] = None, recipe_id: Optional[int] = None) -> List[Recipe]:
        """Return recipes matching `name`, plus the recipe with `recipe_id`, without duplicates."""
        has_id = recipe_id is not None and recipe_id > 0
        return [
            recipe
            for recipe in self.storage.recipes
            if self._name_matches(recipe.name, name) or (has_id and recipe.id == recipe_id)
        ]

    def does_recipe_exist(self, name: Optional[str]) -> bool:
        """True if a recipe is named exactly `name`, regardless of the case setting."""
        return any(recipe.name == name for recipe in self.storage.recipes)

    def get_ingredients_for_recipe(self, recipe_id: int) -> List[Ingredient]:
        ingredient_ids = {row.ingredient_id for row in self.storage.recipe_ingredients if row.recipe_id == recipe_id}
        return [ingredient for ingredient in self.storage.ingredients if ingredient.id in ingredient_ids]

    # ========================================================================
    # Mutations
    # ========================================================================

    def add_recipe_and_ingredients(
        self,
        recipe_input: RecipeInput,
        default_amount: Optional[float] = None,
        default_unit: Optional[MeasurementUnit] = None,
    ) -> None:
        """Insert the recipe, each of its ingredients as a new entity, and the links between them.

        Makes exactly one key-generation call per inserted entity, and draws every
        key before the first insert, so a failing generator leaves storage as it
        was. Stored entities are keyed copies; the input models are not mutated.
        Existing ingredients with the same name are never reused.

        Args:
            recipe_input: Recipe plus ingredient lines to insert.
            default_amount: Amount for lines without one (falls back to DEFAULT_INGREDIENT_AMOUNT).
            default_unit: Unit for lines without one (falls back to DEFAULT_MEASUREMENT_UNIT).

        Raises:
            StorageContractError: If the key generator returns an unusable key.
        """
        if default_amount is None:
            default_amount = config.DEFAULT_INGREDIENT_AMOUNT
        if default_unit is None:
            default_unit = config.default_measurement_unit

        lines = recipe_input.ingredients
        recipe_key, *ingredient_keys = self._draw_keys(
            [self.storage.recipes] + [self.storage.ingredients] * len(lines)
        )

        recipe = recipe_input.recipe.model_copy(update={"id": recipe_key})
        self.storage.recipes.add(recipe)
        for line, key in zip(lines, ingredient_keys):
            ingredient = line.ingredient.model_copy(update={"id": key})
            self.storage.ingredients.add(ingredient)
            self.storage.recipe_ingredients.add(
                RecipeIngredient(
                    recipe_id=recipe.id,
                    ingredient_id=ingredient.id,
                    amount=default_amount if line.amount is None else line.amount,
                    measurement_unit=default_unit if line.measurement_unit is None else line.measurement_unit,
                )
            )
            _add_log.debug(f"Linked ingredient '{ingredient.name}' to recipe '{recipe.name}'", extra={"entity_id": key})

        _add_log.info(f"Added recipe '{recipe.name}' with {len(lines)} ingredient(s)", extra={"entity_id": recipe.id})

    def add_dietary_restriction(
        self, restriction: DietaryRestriction, ingredient_ids: Iterable[int] = ()
    ) -> DietaryRestriction:
        """Insert a keyed copy of `restriction` and one IngredientRestriction row per known ingredient id.

        Unknown ingredient ids are skipped with a warning. Returns the stored copy.
        """
        (key,) = self._draw_keys([self.storage.dietary_restrictions])
        stored = restriction.model_copy(update={"id": key})
        self.storage.dietary_restrictions.add(stored)

        known_ids = {ingredient.id for ingredient in self.storage.ingredients}
        for ingredient_id in dict.fromkeys(ingredient_ids):
            if ingredient_id not in known_ids:
                _restriction_log.warning(
                    f"Skipping unknown ingredient for restriction '{stored.name}'", extra={"entity_id": ingredient_id}
                )
                continue
            self.storage.ingredient_restrictions.add(
                IngredientRestriction(dietary_restriction_id=key, ingredient_id=ingredient_id)
            )

        _restriction_log.info(f"Added dietary restriction '{stored.name}'", extra={"entity_id": key})
        return stored

    def delete_ingredient(self, ingredient_id: Optional[int] = None, ingredient_name: Optional[str] = None) -> bool:
        """Delete an ingredient, honouring the sharing rules.

        - Used by more than one recipe: refused, storage untouched, returns False.
        - Used by exactly one recipe: that recipe goes too, along with every
          RecipeIngredient row pointing at either of them.
        - Used by no recipe: only the ingredient goes.

        IngredientRestriction rows for a deleted ingredient are removed as well.

        Returns:
            True if the ingredient was deleted, False if not found or refused.
        """
        ingredient = self._resolve(self.storage.ingredients, ingredient_id, ingredient_name)
        if ingredient is None:
            _delete_ingredient_log.debug(f"Ingredient not found (id={ingredient_id}, name={ingredient_name!r})")
            return False

        recipe_ids = {row.recipe_id for row in self.storage.recipe_ingredients if row.ingredient_id == ingredient.id}

        if len(recipe_ids) > 1:
            _delete_ingredient_log.warning(
                f"Refusing to delete ingredient '{ingredient.name}': used by {len(recipe_ids)} recipes",
                extra={"entity_id": ingredient.id},
            )
            return False

        if recipe_ids:
            (owner_id,) = recipe_ids
            for row in self.storage.recipe_ingredients:
                if row.ingredient_id == ingredient.id or row.recipe_id == owner_id:
                    self.storage.recipe_ingredients.discard(row)
            owner = self._find_by_id(self.storage.recipes, owner_id)
            if owner is not None:
                self.storage.recipes.discard(owner)
                _delete_ingredient_log.info(
                    f"Deleted recipe '{owner.name}' along with its only-use ingredient '{ingredient.name}'",
                    extra={"entity_id": owner.id},
                )

        for row in self.storage.ingredient_restrictions:
            if row.ingredient_id == ingredient.id:
                self.storage.ingredient_restrictions.discard(row)

        self.storage.ingredients.discard(ingredient)
        _delete_ingredient_log.info(f"Deleted ingredient '{ingredient.name}'", extra={"entity_id": ingredient.id})
        return True

    def delete_recipe(self, recipe_id: Optional[int] = None, recipe_name: Optional[str] = None) -> bool:
        """Delete a recipe and all its RecipeIngredient rows. Ingredients are kept."""
        recipe = self._resolve(self.storage.recipes, recipe_id, recipe_name)
        if recipe is None:
            _delete_recipe_log.debug(f"Recipe not found (id={recipe_id}, name={recipe_name!r})")
            return False

        for row in self.storage.recipe_ingredients:
            if row.recipe_id == recipe.id:
                self.storage.recipe_ingredients.discard(row)
        self.storage.recipes.discard(recipe)

        _delete_recipe_log.info(f"Deleted recipe '{recipe.name}'", extra={"entity_id": recipe.id})
        return True
