"""In-memory view of the recipe collection kept in step with the store."""

from collections.abc import Iterable
from pathlib import Path
from typing import Any

from loguru import logger

from .builder import build_recipe
from .models import Recipe
from .store import RecipeStore
from .transfer import export_recipes, import_recipes


class RecipeCatalog:
    """
    Cache of every stored recipe.

    Mutations go through the store first and are then applied to the
    cached list directly; refresh() re-reads the whole collection and is
    only needed on a cold start or after an outside change.
    """

    def __init__(self, store: RecipeStore) -> None:
        self.store = store
        self._recipes: list[Recipe] | None = None

    @property
    def recipes(self) -> list[Recipe]:
        if self._recipes is None:
            self.refresh()
        return list(self._recipes or [])

    def refresh(self) -> list[Recipe]:
        """Reload the cache from the store."""
        self._recipes = self.store.list_all()
        logger.debug(f"Catalog loaded {len(self._recipes)} recipes")
        return list(self._recipes)

    def find(self, recipe_id: int) -> Recipe | None:
        """Get a cached recipe by id."""
        for recipe in self.recipes:
            if recipe.id == recipe_id:
                return recipe
        return None

    def create(
        self,
        title: str,
        ingredients: Iterable[Any],
        description: str | None = None,
    ) -> Recipe:
        """
        Validate form input and store it as a new recipe.

        Raises:
            RecipeValidationError: If the input is rejected (nothing is written)
            StoreError: If the write fails
        """
        recipe = build_recipe(title, ingredients, description)
        stored = self.store.add(recipe)
        if self._recipes is not None:
            self._recipes.append(stored)
        return stored

    def edit(
        self,
        recipe_id: int,
        title: str,
        ingredients: Iterable[Any],
        description: str | None = None,
        *,
        require_ingredients: bool = True,
    ) -> Recipe:
        """
        Replace an existing recipe with new form input, keeping its id.

        Raises:
            RecipeValidationError: If the input is rejected (nothing is written)
            StoreError: If the write fails
        """
        recipe = build_recipe(
            title,
            ingredients,
            description,
            recipe_id=recipe_id,
            require_ingredients=require_ingredients,
        )
        stored = self.store.update(recipe)
        if self._recipes is not None:
            for i, cached in enumerate(self._recipes):
                if cached.id == recipe_id:
                    self._recipes[i] = stored
                    break
            else:
                self._recipes.append(stored)
        return stored

    def remove(self, recipe_id: int) -> bool:
        """Delete a recipe; False if it did not exist."""
        removed = self.store.delete(recipe_id)
        if self._recipes is not None:
            self._recipes = [r for r in self._recipes if r.id != recipe_id]
        return removed

    def import_payload(self, payload: str | bytes) -> list[Recipe]:
        """Import an exported collection as new recipes."""
        stored = import_recipes(self.store, payload)
        if self._recipes is not None:
            self._recipes.extend(stored)
        return stored

    def export(self, filepath: str | Path, *, format: str | None = None) -> str:
        """Export the whole collection; returns the format used."""
        return export_recipes(self.recipes, filepath, format=format)
