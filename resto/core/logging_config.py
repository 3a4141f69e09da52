"""
Logging configuration for the ordering core.

Usage:
    from resto.core.logging_config import setup_logging
    setup_logging()  # Call once at application startup

Environment variables:
    LOG_LEVEL: DEBUG, INFO, WARNING, ERROR or CRITICAL (default: INFO)
"""
import logging
import os
import sys

VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def setup_logging(level: str | None = None) -> int:
    """Configure the root logger and return the numeric level applied."""
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO")
    level = level.upper()
    if level not in VALID_LEVELS:
        level = "INFO"

    numeric_level = getattr(logging, level)

    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )
    logging.getLogger("resto").setLevel(numeric_level)

    if level != "DEBUG":
        logging.getLogger("aiohttp").setLevel(logging.WARNING)
        logging.getLogger("redis").setLevel(logging.WARNING)

    logging.getLogger(__name__).debug("Logging configured at %s level", level)
    return numeric_level
