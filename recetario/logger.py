"""Logging setup for Recetario."""

import sys
from pathlib import Path

from loguru import logger


def setup_logging(level: str = "WARNING", log_file: Path | None = None) -> None:
    """Replace loguru's default sink with Recetario's sinks.

    Args:
        level: Minimum level written to stderr
        log_file: Optional file that receives everything from DEBUG up
    """
    logger.remove()

    logger.add(
        sys.stderr,
        level=level,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>",
        colorize=True,
    )

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            level="DEBUG",
            format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function} | {message}",
            rotation="5 MB",
            retention=3,
        )

    logger.debug(f"Logging configured (stderr level={level}, file={log_file})")
