"""Tests for the CLI module."""

import json

import pytest
from click.testing import CliRunner

from recetario.cli import cli, parse_ingredient_option
from recetario.models import Ingredient, IngredientEntry
from recetario.store import RecipeStore


@pytest.fixture
def runner():
    """Create a CLI runner for testing."""
    return CliRunner()


@pytest.fixture
def invoke(runner, db_path):
    """Invoke the CLI against the test database."""

    def _invoke(*args, **kwargs):
        return runner.invoke(cli, ["--db", str(db_path), *args], **kwargs)

    return _invoke


@pytest.fixture
def saved(db_path, tortilla, gazpacho):
    """Database holding the tortilla (id 1) and gazpacho (id 2) recipes."""
    with RecipeStore(db_path) as store:
        store.add(tortilla)
        store.add(gazpacho)
    return db_path


def read_all(db_path):
    """Read every recipe back from the test database."""
    with RecipeStore(db_path) as store:
        return store.list_all()


# ============================================================================
# Main CLI Tests
# ============================================================================


class TestMainCli:
    """Tests for the main CLI group."""

    def test_cli_help(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "small personal recipe manager" in result.output

    def test_cli_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "1.0.0" in result.output

    def test_init(self, invoke, db_path):
        result = invoke("init")

        assert result.exit_code == 0
        assert "Recipe database ready" in result.output
        assert "Schema version: 1" in result.output
        assert "Recipes: 0" in result.output
        assert db_path.exists()

    def test_init_twice_keeps_data(self, invoke, saved):
        invoke("init")
        result = invoke("init")

        assert result.exit_code == 0
        assert "Recipes: 2" in result.output

    def test_db_from_environment(self, runner, tmp_path, monkeypatch):
        env_db = tmp_path / "env.db"
        monkeypatch.setenv("RECETARIO_DB", str(env_db))

        result = runner.invoke(cli, ["init"])

        assert result.exit_code == 0
        assert env_db.exists()


class TestParseIngredientOption:
    """Tests for parse_ingredient_option function."""

    def test_full(self):
        assert parse_ingredient_option("Huevo:3:uds") == IngredientEntry("Huevo", "3", "uds")

    def test_name_only(self):
        assert parse_ingredient_option("Pimienta") == IngredientEntry("Pimienta")

    def test_unit_without_quantity(self):
        assert parse_ingredient_option("Sal::pizca") == IngredientEntry("Sal", "", "pizca")

    def test_blank_name(self):
        assert parse_ingredient_option(":1:gr").is_blank


# ============================================================================
# Recipe Commands
# ============================================================================


class TestAddCommand:
    """Tests for the add command."""

    def test_add_drops_blank_ingredient(self, invoke, db_path):
        result = invoke("add", "-t", "Tortilla", "-i", "Huevo:3:uds", "-i", ":1:gr")

        assert result.exit_code == 0
        assert "✓ Added recipe #1: Tortilla" in result.output
        assert "Huevo (3 uds)" in result.output

        recipes = read_all(db_path)
        assert len(recipes) == 1
        assert recipes[0].ingredients == [Ingredient("Huevo", 3, "uds")]

    def test_add_with_description(self, invoke, db_path):
        result = invoke("add", "-t", "Gazpacho", "-d", "Servir frío", "-i", "Tomate:1:kg")

        assert result.exit_code == 0
        assert read_all(db_path)[0].description == "Servir frío"

    def test_add_only_blank_ingredients_rejected(self, invoke, db_path):
        result = invoke("add", "-t", "Tortilla", "-i", ":3:uds", "-i", "  ")

        assert result.exit_code == 1
        assert "Add at least one ingredient with a name" in result.output
        assert read_all(db_path) == []

    def test_add_without_ingredients_rejected(self, invoke, db_path):
        result = invoke("add", "-t", "Tortilla")

        assert result.exit_code == 1
        assert read_all(db_path) == []

    def test_add_bad_quantity(self, invoke, db_path):
        result = invoke("add", "-t", "Tortilla", "-i", "Huevo:muchos:uds")

        assert result.exit_code == 1
        assert "Invalid quantity" in result.output
        assert read_all(db_path) == []

    def test_add_prompts_for_title(self, invoke, db_path):
        result = invoke("add", "-i", "Agua", input="Sopa\n")

        assert result.exit_code == 0
        assert read_all(db_path)[0].title == "Sopa"


class TestListCommand:
    """Tests for the list command."""

    def test_list_empty(self, invoke):
        result = invoke("list")

        assert result.exit_code == 0
        assert "(empty)" in result.output
        assert "Total: 0 recipes" in result.output

    def test_list_recipes(self, invoke, saved):
        result = invoke("list")

        assert result.exit_code == 0
        assert "[1] Tortilla (3 ingredients)" in result.output
        assert "[2] Gazpacho (3 ingredients)" in result.output
        assert "Total: 2 recipes" in result.output


class TestShowCommand:
    """Tests for the show command."""

    def test_show(self, invoke, saved):
        result = invoke("show", "1")

        assert result.exit_code == 0
        assert "RECIPE #1: Tortilla" in result.output
        assert "Tortilla de patatas clásica" in result.output
        assert "1. Huevo (3 uds)" in result.output
        assert "3. Sal (pizca)" in result.output

    def test_show_missing(self, invoke, saved):
        result = invoke("show", "99")

        assert result.exit_code == 1
        assert "Recipe 99 not found" in result.output


class TestEditCommand:
    """Tests for the edit command."""

    def test_edit_title_keeps_ingredients(self, invoke, saved, tortilla):
        result = invoke("edit", "1", "-t", "Tortilla de patatas")

        assert result.exit_code == 0
        assert "✓ Updated recipe #1: Tortilla de patatas" in result.output

        recipe = read_all(saved)[0]
        assert recipe.id == 1
        assert recipe.title == "Tortilla de patatas"
        assert recipe.description == tortilla.description
        assert recipe.ingredients == tortilla.ingredients

    def test_edit_replaces_ingredients(self, invoke, saved):
        result = invoke("edit", "2", "-i", "Tomate:2:kg", "-i", "", "-i", "Pepino")

        assert result.exit_code == 0
        recipe = [r for r in read_all(saved) if r.id == 2][0]
        assert recipe.ingredients == [Ingredient("Tomate", 2, "kg"), Ingredient("Pepino")]

    def test_edit_all_blank_rejected(self, invoke, saved, tortilla):
        result = invoke("edit", "1", "-i", " ")

        assert result.exit_code == 1
        assert read_all(saved)[0].ingredients == tortilla.ingredients

    def test_edit_allow_empty(self, invoke, saved):
        result = invoke("edit", "1", "-i", " ", "--allow-empty")

        assert result.exit_code == 0
        assert read_all(saved)[0].ingredients == []

    def test_edit_help_mentions_ingredient_rule(self, runner):
        result = runner.invoke(cli, ["edit", "--help"])
        text = " ".join(result.output.split())

        assert result.exit_code == 0
        assert "refuses to save a recipe left without any named ingredient" in text
        assert "Pass --allow-empty to save it anyway." in text

    def test_edit_missing(self, invoke, saved):
        result = invoke("edit", "99", "-t", "Nada")

        assert result.exit_code == 1
        assert "Recipe 99 not found" in result.output
        assert len(read_all(saved)) == 2


class TestDeleteCommand:
    """Tests for the delete command."""

    def test_delete_confirmed(self, invoke, saved):
        result = invoke("delete", "1", input="y\n")

        assert result.exit_code == 0
        assert "Delete recipe 'Tortilla'?" in result.output
        assert "✓ Deleted recipe #1" in result.output
        assert [r.id for r in read_all(saved)] == [2]

    def test_delete_cancelled(self, invoke, saved):
        result = invoke("delete", "1", input="n\n")

        assert result.exit_code == 0
        assert "Cancelled." in result.output
        assert len(read_all(saved)) == 2

    def test_delete_yes_flag(self, invoke, saved):
        result = invoke("delete", "2", "--yes")

        assert result.exit_code == 0
        assert [r.id for r in read_all(saved)] == [1]

    def test_delete_missing(self, invoke, saved):
        result = invoke("delete", "99", "--yes")

        assert result.exit_code == 1
        assert "Recipe 99 not found" in result.output


# ============================================================================
# Export / Import Commands
# ============================================================================


class TestExportCommand:
    """Tests for the export command."""

    def test_export_json(self, invoke, saved, tmp_path):
        output = tmp_path / "out.json"

        result = invoke("export", str(output))

        assert result.exit_code == 0
        assert "✓ Exported 2 recipes" in result.output
        data = json.loads(output.read_text(encoding="utf-8"))
        assert [r["title"] for r in data] == ["Tortilla", "Gazpacho"]

    def test_export_default_file(self, runner, saved):
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["--db", str(saved), "export"])

            assert result.exit_code == 0
            with open("recetas.json", encoding="utf-8") as f:
                assert len(json.load(f)) == 2

    def test_export_markdown(self, invoke, saved, tmp_path):
        output = tmp_path / "out.txt"

        result = invoke("export", str(output), "--format", "md")

        assert result.exit_code == 0
        assert "## Gazpacho" in output.read_text(encoding="utf-8")

    def test_export_empty(self, invoke, tmp_path):
        output = tmp_path / "out.json"

        result = invoke("export", str(output))

        assert result.exit_code == 1
        assert "There are no recipes to export" in result.output
        assert not output.exists()


class TestImportCommand:
    """Tests for the import command."""

    def test_import_assigns_new_ids(self, invoke, saved, tmp_path):
        source = tmp_path / "in.json"
        source.write_text(
            '[{"id": 1, "title": "Sopa", "ingredients": [{"name": "Agua"}]}]', encoding="utf-8"
        )

        result = invoke("import", str(source))

        assert result.exit_code == 0
        assert "✓ Imported 1 recipes" in result.output
        assert "[3] Sopa" in result.output

        recipes = read_all(saved)
        assert [r.id for r in recipes] == [1, 2, 3]
        assert recipes[0].title == "Tortilla"

    def test_import_malformed(self, invoke, saved, tmp_path):
        source = tmp_path / "in.json"
        source.write_text('{"title": "Sopa"}', encoding="utf-8")

        result = invoke("import", str(source))

        assert result.exit_code == 1
        assert "Could not import recipes" in result.output
        assert len(read_all(saved)) == 2

    def test_import_unreadable_file(self, invoke, saved, tmp_path, monkeypatch):
        source = tmp_path / "in.json"
        source.write_text("[]", encoding="utf-8")

        def deny(self):
            raise PermissionError(13, "Permission denied", str(self))

        monkeypatch.setattr("recetario.cli.Path.read_bytes", deny)
        result = invoke("import", str(source))

        assert result.exit_code == 1
        assert "✗ Could not import recipes: " in result.output
        assert "Permission denied" in result.output
        assert len(read_all(saved)) == 2

    def test_export_then_import(self, invoke, saved, tmp_path, runner):
        exported = tmp_path / "backup.json"
        invoke("export", str(exported))

        other_db = tmp_path / "other.db"
        result = runner.invoke(cli, ["--db", str(other_db), "import", str(exported)])

        assert result.exit_code == 0
        original = read_all(saved)
        restored = read_all(other_db)
        assert [r.content_key() for r in restored] == [r.content_key() for r in original]


class TestUnitsCommand:
    """Tests for the units command."""

    def test_units(self, runner):
        result = runner.invoke(cli, ["units"])

        assert result.exit_code == 0
        assert "(13 units)" in result.output
        assert "mass: gr, kg, mg" in result.output
        assert "cucharadita" in result.output
