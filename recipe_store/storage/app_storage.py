"""Storage contract for the recipe store.

AppStorage is the narrow surface the business logic layer works against: five
mutable collections plus a primary-key generator. Implementations hold data and
hand out keys; they do not validate, lock, or cascade.

InMemoryAppStorage is the in-process implementation. Create one per consumer
and pass it in; no module-level instance exists.
"""

from abc import ABC, abstractmethod
from typing import Dict, Generic, Iterator, Optional, TypeVar

from recipe_store.models.models import (
    DietaryRestriction,
    Ingredient,
    IngredientRestriction,
    Recipe,
    RecipeIngredient,
)
from recipe_store.utils.config import config

T = TypeVar("T")


class StorageContractError(RuntimeError):
    """Raised when a storage implementation breaks the AppStorage contract."""


class EntitySet(Generic[T]):
    """Unordered mutable collection keyed by object identity.

    Pydantic models compare by field values, so two association rows with the
    same fields are still distinct members here.
    """

    def __init__(self, items=()) -> None:
        self._items: Dict[int, T] = {}
        for item in items:
            self.add(item)

    def add(self, item: T) -> None:
        self._items[id(item)] = item

    def remove(self, item: T) -> None:
        """Remove `item`; raises KeyError if it is not a member."""
        del self._items[id(item)]

    def discard(self, item: T) -> None:
        self._items.pop(id(item), None)

    def __contains__(self, item: object) -> bool:
        return id(item) in self._items

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._items.values()))

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"EntitySet({list(self._items.values())!r})"


class AppStorage(ABC):
    """Collections and key generation consumed by BusinessLogicLayer."""

    recipes: EntitySet[Recipe]
    ingredients: EntitySet[Ingredient]
    dietary_restrictions: EntitySet[DietaryRestriction]
    recipe_ingredients: EntitySet[RecipeIngredient]
    ingredient_restrictions: EntitySet[IngredientRestriction]

    @abstractmethod
    def generate_primary_key(self) -> int:
        """Return a positive integer never returned before by this storage."""


class InMemoryAppStorage(AppStorage):
    """AppStorage backed by plain in-process collections."""

    def __init__(self, key_seed: Optional[int] = None) -> None:
        self.recipes = EntitySet()
        self.ingredients = EntitySet()
        self.dietary_restrictions = EntitySet()
        self.recipe_ingredients = EntitySet()
        self.ingredient_restrictions = EntitySet()
        self._next_key = config.PRIMARY_KEY_SEED if key_seed is None else key_seed
        if self._next_key < 1:
            raise ValueError(f"key_seed must be at least 1, got: {self._next_key}")

    def generate_primary_key(self) -> int:
        key = self._next_key
        self._next_key += 1
        return key
