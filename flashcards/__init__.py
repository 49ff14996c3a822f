"""
Flashcards - spaced-repetition review scheduling and storage.

Quick start:
    from flashcards import FlashcardService, load_settings

    service = FlashcardService.from_settings(load_settings("cards.json"))
    card = service.create_card("Q", "A", ["biology"])
    due, stats = service.get_due_card()
    service.submit_review(due.id, "good")
"""

from flashcards.config import Settings, configure_logging, load_settings
from flashcards.errors import (
    CardNotFoundError,
    DueDateNotFoundError,
    FlashcardError,
    NoCardsDueError,
    NoTagMatchError,
    NotFoundError,
    StorageIOError,
    ValidationError,
)
from flashcards.schemas import Card, CardStats, DueDate, Rating, Review, State
from flashcards.service import FlashcardService
from flashcards.storage import FileStorage, Storage

__version__ = "0.1.0"

__all__ = [
    "Card",
    "CardNotFoundError",
    "CardStats",
    "DueDate",
    "DueDateNotFoundError",
    "FileStorage",
    "FlashcardError",
    "FlashcardService",
    "NoCardsDueError",
    "NoTagMatchError",
    "NotFoundError",
    "Rating",
    "Review",
    "Settings",
    "State",
    "Storage",
    "StorageIOError",
    "ValidationError",
    "configure_logging",
    "load_settings",
]
