"""
Typed failures surfaced by the flashcard core.

NotFound, Validation, NoCardsDue and NoTagMatch are expected, recoverable
conditions. StorageIOError means in-memory state may no longer match what
is on disk.
"""

from __future__ import annotations


class FlashcardError(Exception):
    """Base class for all flashcard failures."""


class NotFoundError(FlashcardError):
    """A referenced entity does not exist."""


class CardNotFoundError(NotFoundError):
    def __init__(self, card_id: str):
        super().__init__(f"card not found: {card_id}")
        self.card_id = card_id


class DueDateNotFoundError(NotFoundError):
    def __init__(self, due_date_id: str):
        super().__init__(f"due date not found: {due_date_id}")
        self.due_date_id = due_date_id


class ValidationError(FlashcardError):
    """Malformed input (e.g. rating outside 1-4)."""


class NoCardsDueError(FlashcardError):
    """
    Nothing is due for review.

    Carries the aggregate stats so callers can still render feedback.
    """

    def __init__(self, stats, tags=None):
        if tags:
            message = f"no cards due for review with the specified tags: {list(tags)}"
        else:
            message = "no cards due for review"
        super().__init__(message)
        self.stats = stats
        self.tags = list(tags or [])


class NoTagMatchError(FlashcardError):
    """No card in the whole collection carries every requested tag."""

    def __init__(self, stats, tags):
        super().__init__(f"no cards found with the specified tags: {list(tags)}")
        self.stats = stats
        self.tags = list(tags)


class StorageIOError(FlashcardError):
    """Load or save of the backing document failed."""

    def __init__(self, message: str, path=None):
        super().__init__(message)
        self.path = path
