"""Recipe persistence with SQLite storage."""

import json
import sqlite3
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from loguru import logger

from .config import COLLECTION_NAME, SCHEMA_VERSION, get_db_path
from .models import Ingredient, Recipe


class StoreError(Exception):
    """Exception raised for storage-related errors."""

    pass


class StoreNotOpenError(StoreError):
    """An operation was attempted before the store was opened."""

    pass


class CollectionMissingError(StoreError):
    """The recipe collection does not exist in the database."""

    pass


class SchemaVersionError(StoreError):
    """The database was written by a newer schema version."""

    pass


def get_connection(db_path: Path | None = None) -> sqlite3.Connection:
    """Get a database connection."""
    path = db_path or get_db_path()
    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    return conn


def get_schema_version(conn: sqlite3.Connection) -> int:
    """Read the schema version recorded in the database."""
    return conn.execute("PRAGMA user_version").fetchone()[0]


def collection_exists(conn: sqlite3.Connection) -> bool:
    """Check whether the recipe collection table exists."""
    row = conn.execute(
        "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ?",
        (COLLECTION_NAME,),
    ).fetchone()
    return row is not None


def init_db(conn: sqlite3.Connection, version: int = SCHEMA_VERSION) -> None:
    """
    Initialize the database schema at the given version.

    Creates the collection if it is missing and records the version.
    Running it again on an up-to-date database changes nothing.

    Raises:
        SchemaVersionError: If the database already has a higher version
    """
    current = get_schema_version(conn)
    if version < current:
        raise SchemaVersionError(
            f"Database is at schema version {current}, cannot open it as version {version}"
        )

    if current == version and collection_exists(conn):
        return

    logger.info(f"Upgrading recipe database from version {current} to {version}")
    with conn:
        conn.execute(f"""
            CREATE TABLE IF NOT EXISTS {COLLECTION_NAME} (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                title TEXT NOT NULL,
                description TEXT,
                ingredients TEXT NOT NULL
            )
        """)
        # PRAGMA does not take bound parameters
        conn.execute(f"PRAGMA user_version = {int(version)}")


def _encode_ingredients(ingredients: Iterable[Ingredient]) -> str:
    return json.dumps([ing.to_dict() for ing in ingredients], ensure_ascii=False)


def _recipe_from_row(row: Any) -> Recipe:
    return Recipe(
        id=row["id"],
        title=row["title"],
        description=row["description"],
        ingredients=[Ingredient.from_dict(ing) for ing in json.loads(row["ingredients"])],
    )


class RecipeStore:
    """Keyed storage for Recipe records in a local SQLite database."""

    def __init__(self, db_path: Path | None = None) -> None:
        self.db_path = db_path or get_db_path()
        self._conn: sqlite3.Connection | None = None

    def __enter__(self) -> "RecipeStore":
        if self._conn is None:
            self.open()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StoreNotOpenError("Recipe store is not open; call open() first")
        return self._conn

    @property
    def version(self) -> int:
        """Schema version recorded in the open database."""
        return get_schema_version(self.conn)

    def open(self, version: int = SCHEMA_VERSION) -> None:
        """
        Open the database, creating the collection if needed.

        Calling it again with the same version is a no-op.

        Raises:
            SchemaVersionError: If the database has a higher version
            StoreError: If the database cannot be opened
        """
        if self._conn is None:
            try:
                self._conn = get_connection(self.db_path)
            except sqlite3.Error as e:
                logger.error(f"Failed to open recipe database {self.db_path}: {e}")
                raise StoreError(f"Failed to open recipe database: {e}") from e
            logger.debug(f"Opened recipe database {self.db_path}")

        try:
            init_db(self._conn, version)
        except SchemaVersionError as e:
            logger.error(str(e))
            raise
        except sqlite3.Error as e:
            logger.error(f"Failed to initialize recipe database {self.db_path}: {e}")
            raise StoreError(f"Failed to initialize recipe database: {e}") from e

    def close(self) -> None:
        """Close the database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None
            logger.debug(f"Closed recipe database {self.db_path}")

    def _execute(self, operation: str, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        """Run one statement as its own transaction."""
        conn = self.conn
        if not collection_exists(conn):
            logger.error(f"Cannot {operation}: collection '{COLLECTION_NAME}' does not exist")
            raise CollectionMissingError(f"Collection '{COLLECTION_NAME}' does not exist")
        try:
            with conn:
                return conn.execute(sql, params)
        except sqlite3.Error as e:
            logger.error(f"Failed to {operation}: {e}")
            raise StoreError(f"Failed to {operation}: {e}") from e

    def list_all(self) -> list[Recipe]:
        """
        Get every stored recipe.

        Returns:
            Recipes in insertion order
        """
        rows = self._execute(
            "list recipes",
            f"SELECT id, title, description, ingredients FROM {COLLECTION_NAME} ORDER BY id",
        ).fetchall()
        return [_recipe_from_row(row) for row in rows]

    def get(self, recipe_id: int) -> Recipe | None:
        """Get a single recipe by id, or None if absent."""
        row = self._execute(
            "get recipe",
            f"SELECT id, title, description, ingredients FROM {COLLECTION_NAME} WHERE id = ?",
            (recipe_id,),
        ).fetchone()
        if not row:
            return None
        return _recipe_from_row(row)

    def add(self, recipe: Recipe) -> Recipe:
        """
        Insert a new recipe. Any id on the recipe is ignored.

        Returns:
            Copy of the recipe carrying the store-assigned id
        """
        cursor = self._execute(
            "add recipe",
            f"INSERT INTO {COLLECTION_NAME} (title, description, ingredients) VALUES (?, ?, ?)",
            (recipe.title, recipe.description, _encode_ingredients(recipe.ingredients)),
        )
        stored = recipe.with_id(cursor.lastrowid)
        logger.info(f"Added recipe {stored.id}: {stored.title}")
        return stored

    def add_many(self, recipes: Iterable[Recipe]) -> list[Recipe]:
        """
        Insert several new recipes in a single transaction.

        Either every recipe is written or none is.

        Returns:
            Copies of the recipes carrying their store-assigned ids
        """
        conn = self.conn
        if not collection_exists(conn):
            logger.error(f"Cannot add recipes: collection '{COLLECTION_NAME}' does not exist")
            raise CollectionMissingError(f"Collection '{COLLECTION_NAME}' does not exist")

        stored: list[Recipe] = []
        try:
            with conn:
                for recipe in recipes:
                    cursor = conn.execute(
                        f"INSERT INTO {COLLECTION_NAME} (title, description, ingredients) "
                        "VALUES (?, ?, ?)",
                        (recipe.title, recipe.description, _encode_ingredients(recipe.ingredients)),
                    )
                    stored.append(recipe.with_id(cursor.lastrowid))
        except sqlite3.Error as e:
            logger.error(f"Failed to add recipes, nothing was written: {e}")
            raise StoreError(f"Failed to add recipes: {e}") from e

        logger.info(f"Added {len(stored)} recipes")
        return stored

    def update(self, recipe: Recipe) -> Recipe:
        """
        Replace the recipe with the same id, inserting it if absent.

        Raises:
            StoreError: If the recipe has no id
        """
        if recipe.id is None:
            raise StoreError("Cannot update a recipe without an id")

        self._execute(
            "update recipe",
            f"""
            INSERT INTO {COLLECTION_NAME} (id, title, description, ingredients)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                title = excluded.title,
                description = excluded.description,
                ingredients = excluded.ingredients
            """,
            (
                recipe.id,
                recipe.title,
                recipe.description,
                _encode_ingredients(recipe.ingredients),
            ),
        )
        logger.info(f"Updated recipe {recipe.id}: {recipe.title}")
        return recipe

    def delete(self, recipe_id: int) -> bool:
        """
        Delete a recipe by id.

        Returns:
            True if a recipe was removed, False if there was none
        """
        cursor = self._execute(
            "delete recipe",
            f"DELETE FROM {COLLECTION_NAME} WHERE id = ?",
            (recipe_id,),
        )
        removed = cursor.rowcount > 0
        if removed:
            logger.info(f"Deleted recipe {recipe_id}")
        else:
            logger.debug(f"Delete skipped, no recipe {recipe_id}")
        return removed

    def count(self) -> int:
        """Get the number of stored recipes."""
        row = self._execute(
            "count recipes", f"SELECT COUNT(*) as count FROM {COLLECTION_NAME}"
        ).fetchone()
        return row["count"] if row else 0
