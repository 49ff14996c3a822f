"""
Review priority for due-card selection.

Higher priority means the card should be reviewed sooner:
1. Overdue cards gain priority the longer they wait
2. Learning/Relearning cards outrank Review cards, which outrank New cards
3. Cards not yet due lose priority the further out they sit
"""

from __future__ import annotations
from datetime import datetime

from flashcards.schemas import State

BASE_PRIORITY = {
    State.NEW: 1.0,
    State.REVIEW: 2.0,
    State.LEARNING: 3.0,
    State.RELEARNING: 3.0,
}

OVERDUE_WEIGHT = 0.1  # +10% per overdue day


def review_priority(state: State, due: datetime, now: datetime) -> float:
    """
    Score a card for selection order.

    Args:
        state: Card lifecycle state
        due: When the card becomes due
        now: Current time

    Returns:
        Priority score (higher = more urgent)
    """
    base = BASE_PRIORITY[State(state)]
    overdue_days = (now - due).total_seconds() / 86400.0

    if overdue_days >= 0:
        return base * (1.0 + overdue_days * OVERDUE_WEIGHT)

    return base / (1.0 + (-overdue_days))
