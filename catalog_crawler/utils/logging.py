from __future__ import annotations

import logging
import os

_LEVELS = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def resolve_level(level: str | int | None = None) -> int:
    if level is None:
        level = os.getenv("CATALOG_LOG_LEVEL", "INFO")
    if isinstance(level, str):
        return _LEVELS.get(level.upper(), logging.INFO)
    return level


def setup_logging(level: str | int | None = None) -> None:
    """
    Configure process-wide logging. Called once by the CLI; library code only
    ever uses logging.getLogger(__name__).
    """
    logging.basicConfig(level=resolve_level(level), format=LOG_FORMAT)
    # aiohttp is chatty at DEBUG and adds nothing to crawl diagnostics.
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
