"""Configuration and path management for Recetario."""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# App directories
APP_NAME = "recetario"
CONFIG_DIR = Path.home() / f".{APP_NAME}"
DB_FILE = CONFIG_DIR / "recetas.db"
LOG_FILE = CONFIG_DIR / "recetario.log"

# Storage layout
COLLECTION_NAME = "recetas"
SCHEMA_VERSION = 1

DEFAULT_EXPORT_FILE = "recetas.json"
DEFAULT_LOG_LEVEL = "WARNING"


def get_db_path() -> Path:
    """Get the database path from environment or the default location."""
    override = os.getenv("RECETARIO_DB")
    if override:
        path = Path(override).expanduser()
    else:
        path = DB_FILE

    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def get_log_level() -> str:
    """Get the stderr log level from environment."""
    return os.getenv("RECETARIO_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()


def get_log_file() -> Path | None:
    """Get the log file path, if file logging is enabled.

    Set RECETARIO_LOG_FILE to a path, or to "1" for the default location.
    """
    value = os.getenv("RECETARIO_LOG_FILE")
    if not value:
        return None
    if value.lower() in ("1", "true", "yes"):
        return LOG_FILE
    return Path(value).expanduser()
