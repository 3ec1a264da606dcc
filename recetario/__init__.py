"""Recetario - a small personal recipe manager."""

__version__ = "1.0.0"

from .builder import (
    EmptyTitleError,
    InvalidIngredientError,
    NoValidIngredientsError,
    RecipeValidationError,
    build_recipe,
)
from .catalog import RecipeCatalog
from .models import Ingredient, IngredientEntry, Recipe
from .store import RecipeStore, StoreError
from .transfer import ImportFormatError, TransferError, dump_recipes, import_recipes, parse_recipes

__all__ = [
    "Recipe",
    "Ingredient",
    "IngredientEntry",
    "build_recipe",
    "RecipeValidationError",
    "NoValidIngredientsError",
    "EmptyTitleError",
    "InvalidIngredientError",
    "RecipeStore",
    "StoreError",
    "RecipeCatalog",
    "dump_recipes",
    "parse_recipes",
    "import_recipes",
    "TransferError",
    "ImportFormatError",
]
