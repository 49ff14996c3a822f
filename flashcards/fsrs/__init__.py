"""
FSRS - Free Spaced Repetition Scheduler

Memory model and review priority for the flashcard core.

Quick start:
    from flashcards import fsrs

    model = fsrs.FSRSMemoryModel()
    new_memory = model.schedule(card.fsrs, fsrs.Rating.GOOD, now)

    score = fsrs.review_priority(card.fsrs.state, card.fsrs.due, now)
"""

# Core scheduler API (algorithm logic)
from flashcards.fsrs.scheduler import FSRSMemoryModel, MemoryModel

# Selection order
from flashcards.fsrs.priority import BASE_PRIORITY, review_priority

# Memory state helpers
from flashcards.fsrs.memory_state import (
    calculate_retrievability,
    elapsed_whole_days,
    next_interval,
)

# Constants and parameters
from flashcards.fsrs.constants import (
    DEFAULT_WEIGHTS,
    MAXIMUM_INTERVAL,
    REQUEST_RETENTION,
)

from flashcards.schemas import Rating, State


__all__ = [
    # Core algorithm
    "FSRSMemoryModel",
    "MemoryModel",

    # Priority
    "BASE_PRIORITY",
    "review_priority",

    # Memory state
    "calculate_retrievability",
    "elapsed_whole_days",
    "next_interval",

    # Enums
    "Rating",
    "State",

    # Parameters
    "DEFAULT_WEIGHTS",
    "MAXIMUM_INTERVAL",
    "REQUEST_RETENTION",
]
