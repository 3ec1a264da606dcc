"""Shared fixtures for recetario tests."""

import pytest
from loguru import logger

from recetario.models import Ingredient, Recipe
from recetario.store import RecipeStore


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep every test away from the real ~/.recetario directory."""
    monkeypatch.setenv("RECETARIO_DB", str(tmp_path / "default.db"))
    monkeypatch.delenv("RECETARIO_LOG_FILE", raising=False)
    monkeypatch.delenv("RECETARIO_LOG_LEVEL", raising=False)
    yield
    # CLI runs attach a sink to their captured stderr
    logger.remove()


@pytest.fixture
def db_path(tmp_path):
    """Path for a fresh recipe database."""
    return tmp_path / "recetas.db"


@pytest.fixture
def store(db_path):
    """An opened recipe store on a fresh database."""
    store = RecipeStore(db_path)
    store.open()
    yield store
    store.close()


@pytest.fixture
def tortilla():
    """A typical recipe as the builder would produce it."""
    return Recipe(
        title="Tortilla",
        description="Tortilla de patatas clásica",
        ingredients=[
            Ingredient(name="Huevo", specification=3, unit="uds"),
            Ingredient(name="Patata", specification=500, unit="gr"),
            Ingredient(name="Sal", unit="pizca"),
        ],
    )


@pytest.fixture
def gazpacho():
    """A second recipe, without description."""
    return Recipe(
        title="Gazpacho",
        ingredients=[
            Ingredient(name="Tomate", specification=1, unit="kg"),
            Ingredient(name="Aceite de oliva", specification=0.5, unit="taza"),
            Ingredient(name="Jamón"),
        ],
    )


@pytest.fixture
def populated_store(store, tortilla, gazpacho):
    """A store holding the tortilla (id 1) and gazpacho (id 2) recipes."""
    store.add(tortilla)
    store.add(gazpacho)
    return store
