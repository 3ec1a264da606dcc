"""Turn raw recipe form input into validated Recipe records."""

import random
import time
from collections.abc import Iterable, Mapping
from typing import Any

from .models import Ingredient, IngredientEntry, Recipe
from .units import UnitError, normalize_unit, parse_specification


class RecipeValidationError(Exception):
    """Exception raised when form input cannot become a Recipe."""

    pass


class NoValidIngredientsError(RecipeValidationError):
    """Every submitted ingredient had a blank name."""

    def __init__(self) -> None:
        super().__init__("Add at least one ingredient with a name")


class EmptyTitleError(RecipeValidationError):
    """The recipe title was blank."""

    def __init__(self) -> None:
        super().__init__("Recipe title cannot be empty")


class InvalidIngredientError(RecipeValidationError):
    """A named ingredient has an unusable quantity or unit."""

    def __init__(self, position: int, name: str, reason: str) -> None:
        self.position = position
        self.name = name
        self.reason = reason
        super().__init__(f"Ingredient {position} ('{name}'): {reason}")


def provisional_id(ingredient_count: int = 0) -> int:
    """
    Generate a candidate identifier for a recipe that has not been stored yet.

    The store assigns the real id on add; this value only matters for
    recipes that are never persisted.
    """
    return int(time.time() * 1000) + random.randint(0, 1000 + ingredient_count)


def _coerce_entry(entry: Any) -> IngredientEntry:
    if isinstance(entry, IngredientEntry):
        return entry
    if isinstance(entry, Ingredient):
        return IngredientEntry(name=entry.name, specification=entry.specification, unit=entry.unit)
    if isinstance(entry, Mapping):
        return IngredientEntry(
            name=entry.get("name") or "",
            specification=entry.get("specification"),
            unit=entry.get("unit"),
        )
    raise TypeError(f"Unsupported ingredient entry: {entry!r}")


def filter_ingredients(entries: Iterable[Any]) -> list[IngredientEntry]:
    """Drop entries whose name is blank, keeping the order of the rest."""
    return [e for e in (_coerce_entry(entry) for entry in entries) if not e.is_blank]


def normalize_ingredient(entry: IngredientEntry, position: int) -> Ingredient:
    """
    Validate one named entry and convert it into an Ingredient.

    Raises:
        InvalidIngredientError: If the quantity or unit is invalid
    """
    name = entry.name.strip()
    try:
        specification = parse_specification(entry.specification)
        unit = normalize_unit(entry.unit)
    except UnitError as e:
        raise InvalidIngredientError(position, name, str(e)) from e

    return Ingredient(name=name, specification=specification, unit=unit)


def build_recipe(
    title: str,
    ingredients: Iterable[Any],
    description: str | None = None,
    *,
    recipe_id: int | None = None,
    require_ingredients: bool = True,
) -> Recipe:
    """
    Build a Recipe from raw form state.

    Blank-name ingredients are discarded first. If nothing is left the
    submission is rejected.

    Args:
        title: Recipe name as typed
        ingredients: Ordered entries (IngredientEntry, Ingredient or mapping)
        description: Optional free text
        recipe_id: Existing id to keep (edit path); a provisional id otherwise
        require_ingredients: Reject submissions with no named ingredient

    Returns:
        The validated Recipe

    Raises:
        NoValidIngredientsError: If no ingredient has a name
        EmptyTitleError: If the title is blank
        InvalidIngredientError: If a named ingredient has a bad quantity or unit
    """
    kept = filter_ingredients(ingredients)

    if not kept and require_ingredients:
        raise NoValidIngredientsError()

    clean_title = (title or "").strip()
    if not clean_title:
        raise EmptyTitleError()

    normalized = [normalize_ingredient(entry, i) for i, entry in enumerate(kept, 1)]

    clean_description = (description or "").strip() or None

    return Recipe(
        id=recipe_id if recipe_id is not None else provisional_id(len(normalized)),
        title=clean_title,
        description=clean_description,
        ingredients=normalized,
    )
