"""CLI entry point for Recetario."""

from pathlib import Path
from typing import NoReturn

import click

from . import __version__
from .builder import RecipeValidationError
from .catalog import RecipeCatalog
from .config import DEFAULT_EXPORT_FILE, get_log_file, get_log_level
from .logger import setup_logging
from .models import IngredientEntry, Recipe
from .store import RecipeStore, StoreError
from .transfer import TransferError
from .units import UNITS, format_specification, units_by_type


def get_catalog(ctx: click.Context) -> RecipeCatalog:
    """Get or create the catalog for this invocation, opening the store once."""
    obj = ctx.ensure_object(dict)
    if obj.get("catalog") is None:
        store = RecipeStore(obj.get("db_path"))
        try:
            store.open()
        except StoreError as e:
            click.echo(f"✗ Could not open the recipe database: {e}", err=True)
            raise SystemExit(1) from None
        ctx.call_on_close(store.close)
        obj["catalog"] = RecipeCatalog(store)
    return obj["catalog"]


def parse_ingredient_option(value: str) -> IngredientEntry:
    """
    Parse an ingredient given on the command line.

    Format is name[:quantity[:unit]], e.g. "Huevo:3:uds", "Sal::pizca"
    or just "Pimienta".
    """
    parts = value.split(":", 2)
    name = parts[0]
    specification = parts[1] if len(parts) > 1 else None
    unit = parts[2] if len(parts) > 2 else None
    return IngredientEntry(name=name, specification=specification, unit=unit)


def fail(message: str) -> NoReturn:
    """Print an error line and exit with status 1."""
    click.echo(f"✗ {message}", err=True)
    raise SystemExit(1)


def display_recipe(recipe: Recipe) -> None:
    """Display a stored recipe."""
    click.echo()
    click.echo("=" * 60)
    click.echo(f"RECIPE #{recipe.id}: {recipe.title}")
    click.echo("=" * 60)

    if recipe.description:
        click.echo(recipe.description)

    click.echo("\nIngredients:")
    for i, ing in enumerate(recipe.ingredients, 1):
        click.echo(f"  {i}. {ing}")

    click.echo()


# ============================================================================
# Main CLI Group
# ============================================================================


@click.group()
@click.version_option(version=__version__, prog_name="recetas")
@click.option(
    "--db",
    "db_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Recipe database file (default: ~/.recetario/recetas.db)",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.pass_context
def cli(ctx: click.Context, db_path: Path | None, verbose: bool):
    """Recetario - a small personal recipe manager.

    Keep your recipes in a local database, edit them, and move the whole
    collection between machines as JSON.
    """
    setup_logging("DEBUG" if verbose else get_log_level(), get_log_file())
    ctx.ensure_object(dict)
    ctx.obj["db_path"] = db_path


# ============================================================================
# Collection Commands
# ============================================================================


@cli.command()
@click.pass_context
def init(ctx: click.Context):
    """Create the recipe database if it does not exist yet."""
    catalog = get_catalog(ctx)
    store = catalog.store
    click.echo(f"✓ Recipe database ready: {store.db_path}")
    click.echo(f"  Schema version: {store.version}")
    click.echo(f"  Recipes: {store.count()}")


@cli.command("list")
@click.pass_context
def list_recipes(ctx: click.Context):
    """List all recipes."""
    catalog = get_catalog(ctx)
    try:
        recipes = catalog.recipes
    except StoreError as e:
        fail(str(e))

    click.echo()
    click.echo("RECIPES")
    click.echo("=" * 50)

    if recipes:
        for recipe in recipes:
            count = len(recipe.ingredients)
            noun = "ingredient" if count == 1 else "ingredients"
            click.echo(f"  [{recipe.id}] {recipe.title} ({count} {noun})")
    else:
        click.echo("  (empty)")

    click.echo()
    click.echo(f"Total: {len(recipes)} recipes")
    click.echo()


@cli.command()
@click.argument("recipe_id", type=int)
@click.pass_context
def show(ctx: click.Context, recipe_id: int):
    """Show a recipe with its ingredients."""
    catalog = get_catalog(ctx)
    try:
        recipe = catalog.store.get(recipe_id)
    except StoreError as e:
        fail(str(e))

    if recipe is None:
        fail(f"Recipe {recipe_id} not found")

    display_recipe(recipe)


@cli.command()
@click.option("--title", "-t", prompt="Recipe title", help="Recipe title")
@click.option("--description", "-d", default="", help="Free-text description")
@click.option(
    "--ingredient",
    "-i",
    "ingredients",
    multiple=True,
    help="Ingredient as name[:quantity[:unit]] (repeatable)",
)
@click.pass_context
def add(ctx: click.Context, title: str, description: str, ingredients: tuple[str, ...]):
    """Add a new recipe.

    Examples:

        recetas add -t Tortilla -i "Huevo:3:uds" -i "Patata:500:gr"

        recetas add -t Gazpacho -d "Servir frío" -i Tomate -i "Sal::pizca"
    """
    catalog = get_catalog(ctx)
    entries = [parse_ingredient_option(value) for value in ingredients]

    try:
        recipe = catalog.create(title, entries, description)
    except (RecipeValidationError, StoreError) as e:
        fail(str(e))

    click.echo(f"✓ Added recipe #{recipe.id}: {recipe.title}")
    for ing in recipe.ingredients:
        click.echo(f"  • {ing}")


@cli.command()
@click.argument("recipe_id", type=int)
@click.option("--title", "-t", help="New title")
@click.option("--description", "-d", help="New description")
@click.option(
    "--ingredient",
    "-i",
    "ingredients",
    multiple=True,
    help="Replace ingredients with name[:quantity[:unit]] (repeatable)",
)
@click.option(
    "--allow-empty",
    is_flag=True,
    help="Allow saving the recipe without any named ingredient (refused by default)",
)
@click.pass_context
def edit(
    ctx: click.Context,
    recipe_id: int,
    title: str | None,
    description: str | None,
    ingredients: tuple[str, ...],
    allow_empty: bool,
):
    """Edit an existing recipe.

    Fields that are not given keep their current value. Giving any
    --ingredient replaces the whole ingredient list.

    Like add, edit refuses to save a recipe left without any named
    ingredient. Pass --allow-empty to save it anyway.
    """
    catalog = get_catalog(ctx)
    try:
        current = catalog.store.get(recipe_id)
    except StoreError as e:
        fail(str(e))

    if current is None:
        fail(f"Recipe {recipe_id} not found")

    new_ingredients = (
        [parse_ingredient_option(value) for value in ingredients]
        if ingredients
        else current.ingredients
    )

    try:
        recipe = catalog.edit(
            recipe_id,
            title if title is not None else current.title,
            new_ingredients,
            description if description is not None else current.description,
            require_ingredients=not allow_empty,
        )
    except (RecipeValidationError, StoreError) as e:
        fail(str(e))

    click.echo(f"✓ Updated recipe #{recipe.id}: {recipe.title}")


@cli.command()
@click.argument("recipe_id", type=int)
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.pass_context
def delete(ctx: click.Context, recipe_id: int, yes: bool):
    """Delete a recipe."""
    catalog = get_catalog(ctx)
    try:
        recipe = catalog.store.get(recipe_id)
    except StoreError as e:
        fail(str(e))

    if recipe is None:
        fail(f"Recipe {recipe_id} not found")

    if not yes:
        if not click.confirm(f"Delete recipe '{recipe.title}'?"):
            click.echo("Cancelled.")
            return

    try:
        catalog.remove(recipe_id)
    except StoreError as e:
        fail(str(e))

    click.echo(f"✓ Deleted recipe #{recipe_id}: {recipe.title}")


# ============================================================================
# Export / Import Commands
# ============================================================================


@cli.command("export")
@click.argument("output", type=click.Path(dir_okay=False), default=DEFAULT_EXPORT_FILE)
@click.option("--format", "-f", type=click.Choice(["json", "md"]), help="Output format")
@click.pass_context
def export_cmd(ctx: click.Context, output: str, format: str | None):
    """Export all recipes to a file (JSON by default)."""
    catalog = get_catalog(ctx)
    try:
        used_format = catalog.export(output, format=format)
    except (TransferError, StoreError) as e:
        fail(str(e))

    click.echo(f"✓ Exported {len(catalog.recipes)} recipes to {output} ({used_format})")


@cli.command("import")
@click.argument("source", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def import_cmd(ctx: click.Context, source: str):
    """Import recipes from a JSON export.

    Every imported recipe gets a new id; existing recipes are never
    overwritten.
    """
    catalog = get_catalog(ctx)

    try:
        imported = catalog.import_payload(Path(source).read_bytes())
    except (OSError, TransferError, StoreError) as e:
        fail(f"Could not import recipes: {e}")

    click.echo(f"✓ Imported {len(imported)} recipes")
    for recipe in imported:
        click.echo(f"  • [{recipe.id}] {recipe.title}")


# ============================================================================
# Reference Commands
# ============================================================================


@cli.command()
def units():
    """Show the units ingredients can use."""
    click.echo()
    click.echo("UNITS")
    click.echo("=" * 50)
    click.echo(f"({len(UNITS)} units)")

    for unit_type, names in units_by_type().items():
        click.echo()
        click.echo(f"  {unit_type}: {', '.join(names)}")

    click.echo()
    click.echo(f"Quantities are positive numbers, e.g. {format_specification(0.5)} or 3.")
    click.echo()


# ============================================================================
# Entry Point
# ============================================================================


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
