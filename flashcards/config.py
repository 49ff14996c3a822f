"""
Configuration for the flashcard core.

Values come from the environment (optionally seeded from a .env file).
The only thing the core strictly needs is the path of the JSON document.
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from flashcards.fsrs.constants import MAXIMUM_INTERVAL, REQUEST_RETENTION

DEFAULT_DIR = Path.home() / ".flashcards"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def is_test_mode() -> bool:
    """Check if running in test mode."""
    return os.getenv("TEST_MODE", "false").lower() == "true"


def get_store_path() -> Path:
    """
    Get the store path from FLASHCARDS_FILE, or the default location.

    Uses test_flashcards.json instead of flashcards.json in test mode.
    """
    explicit = os.getenv("FLASHCARDS_FILE")
    if explicit:
        return Path(explicit).expanduser()
    file_name = "test_flashcards.json" if is_test_mode() else "flashcards.json"
    return DEFAULT_DIR / file_name


@dataclass(frozen=True)
class Settings:
    store_path: Path
    log_level: str = "INFO"
    request_retention: float = REQUEST_RETENTION
    maximum_interval: int = MAXIMUM_INTERVAL


def load_settings(store_path: Optional[str] = None) -> Settings:
    """
    Collect settings once at startup.

    Args:
        store_path: Explicit document path; overrides FLASHCARDS_FILE

    Returns:
        Frozen Settings instance to pass into constructors
    """
    load_dotenv()

    retention = float(os.getenv("FSRS_REQUEST_RETENTION", REQUEST_RETENTION))
    if not 0.0 < retention < 1.0:
        raise ValueError(
            f"FSRS_REQUEST_RETENTION must be between 0 and 1, got {retention}"
        )

    return Settings(
        store_path=Path(store_path).expanduser() if store_path else get_store_path(),
        log_level=os.getenv("FLASHCARDS_LOG_LEVEL", "INFO").upper(),
        request_retention=retention,
        maximum_interval=int(os.getenv("FSRS_MAXIMUM_INTERVAL", MAXIMUM_INTERVAL)),
    )


def configure_logging(level: str = "INFO") -> None:
    """Send log output to stderr; stdout belongs to whatever transport is in front."""
    root = logging.getLogger()
    root.setLevel(level)
    if not any(getattr(h, "_flashcards", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._flashcards = True
        root.addHandler(handler)
