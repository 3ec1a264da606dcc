"""Whole-collection export and import."""

import json
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path
from typing import Any

from loguru import logger

from .models import Ingredient, Recipe
from .store import RecipeStore
from .units import UnitError, normalize_unit, parse_specification


class TransferError(Exception):
    """Exception raised for export/import errors."""

    pass


class EmptyCollectionError(TransferError):
    """There are no recipes to export."""

    def __init__(self) -> None:
        super().__init__("There are no recipes to export")


class ImportFormatError(TransferError):
    """The import payload is not a valid recipe collection."""

    pass


# ============================================================================
# Export
# ============================================================================


def dump_recipes(recipes: Sequence[Recipe]) -> str:
    """Serialize recipes as an indented JSON array."""
    return json.dumps([recipe.to_dict() for recipe in recipes], indent=2, ensure_ascii=False)


def render_markdown(recipes: Sequence[Recipe]) -> str:
    """Render recipes as a Markdown document, one section per recipe."""
    lines: list[str] = []

    lines.append("# Recetas")
    lines.append("")
    lines.append(f"*Generated: {datetime.now().strftime('%Y-%m-%d %H:%M')}*")
    lines.append("")

    for recipe in recipes:
        lines.append(f"## {recipe.title}")
        lines.append("")
        if recipe.description:
            lines.append(recipe.description)
            lines.append("")
        for ing in recipe.ingredients:
            lines.append(f"- {ing}")
        lines.append("")

    return "\n".join(lines)


def export_to_json(recipes: Sequence[Recipe], filepath: str | Path) -> None:
    """Export recipes to a JSON file."""
    with open(filepath, "w", encoding="utf-8") as f:
        f.write(dump_recipes(recipes))


def export_to_markdown(recipes: Sequence[Recipe], filepath: str | Path) -> None:
    """Export recipes to a Markdown file."""
    with open(filepath, "w", encoding="utf-8") as f:
        f.write(render_markdown(recipes))


def export_recipes(
    recipes: Sequence[Recipe],
    filepath: str | Path,
    *,
    format: str | None = None,
) -> str:
    """
    Export the recipe collection to file.

    Format is auto-detected from file extension if not specified.

    Args:
        recipes: Every recipe in the collection
        filepath: Output file path
        format: Output format (json, md) - auto-detected if None

    Returns:
        The format used for export

    Raises:
        EmptyCollectionError: If there are no recipes
        ValueError: If the format is not supported
    """
    if not recipes:
        raise EmptyCollectionError()

    path = Path(filepath)

    # Auto-detect format from extension
    if format is None:
        ext = path.suffix.lower()
        format_map = {
            ".json": "json",
            ".md": "md",
            ".markdown": "md",
        }
        format = format_map.get(ext, "json")

    if format == "json":
        export_to_json(recipes, path)
    elif format in ("md", "markdown"):
        export_to_markdown(recipes, path)
    else:
        raise ValueError(f"Unsupported format: {format}")

    logger.info(f"Exported {len(recipes)} recipes to {path} ({format})")
    return format


# ============================================================================
# Import
# ============================================================================


def _check_ingredient(value: Any, recipe_pos: int, ing_pos: int) -> Ingredient | None:
    where = f"Recipe {recipe_pos}, ingredient {ing_pos}"
    if not isinstance(value, dict):
        raise ImportFormatError(f"{where}: expected an object")
    if not isinstance(value.get("name"), str):
        raise ImportFormatError(f"{where}: 'name' must be a string")

    # Blank rows left over from the entry form are dropped, not stored
    name = value["name"].strip()
    if not name:
        return None

    unit = value.get("unit")
    if unit is not None and not isinstance(unit, str):
        raise ImportFormatError(f"{where}: 'unit' must be a string")

    # Older exports stored the raw form text, so numeric strings are accepted
    try:
        specification = parse_specification(value.get("specification"))
        unit = normalize_unit(unit)
    except UnitError as e:
        raise ImportFormatError(f"{where}: {e}") from e

    return Ingredient(name=name, specification=specification, unit=unit)


def _check_recipe(value: Any, position: int) -> Recipe:
    if not isinstance(value, dict):
        raise ImportFormatError(f"Recipe {position}: expected an object")

    # Identifiers are never carried over
    data = {key: item for key, item in value.items() if key != "id"}

    if not isinstance(data.get("title"), str):
        raise ImportFormatError(f"Recipe {position}: 'title' must be a string")
    title = data["title"].strip()
    if not title:
        raise ImportFormatError(f"Recipe {position}: 'title' must not be blank")

    description = data.get("description")
    if description is not None and not isinstance(description, str):
        raise ImportFormatError(f"Recipe {position}: 'description' must be a string")

    ingredients = data.get("ingredients", [])
    if not isinstance(ingredients, list):
        raise ImportFormatError(f"Recipe {position}: 'ingredients' must be a list")

    checked = (_check_ingredient(ing, position, i) for i, ing in enumerate(ingredients, 1))
    return Recipe(
        title=title,
        description=description,
        ingredients=[ing for ing in checked if ing is not None],
    )


def parse_recipes(payload: str | bytes) -> list[Recipe]:
    """
    Parse an exported collection into new, id-less recipes.

    The whole payload is checked before anything is returned, so a bad
    element rejects the import as a whole.

    Raises:
        ImportFormatError: If the payload is not JSON, not an array, or
            holds an element that is not a recipe
    """
    try:
        data = json.loads(payload)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ImportFormatError(f"Invalid JSON: {e}") from e

    if not isinstance(data, list):
        raise ImportFormatError("Expected a JSON array of recipes")

    return [_check_recipe(item, i) for i, item in enumerate(data, 1)]


def import_recipes(store: RecipeStore, payload: str | bytes) -> list[Recipe]:
    """
    Import an exported collection as new records.

    Returns:
        The stored recipes with their new ids

    Raises:
        ImportFormatError: If the payload is malformed (nothing is written)
        StoreError: If the write fails (nothing is written)
    """
    recipes = parse_recipes(payload)
    stored = store.add_many(recipes)
    logger.info(f"Imported {len(stored)} recipes")
    return stored

