"""
Summary counters for the whole collection.

Computed on demand from a consistent snapshot of the store.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from flashcards.schemas import CardStats, FlashcardStore, Rating, utc_now


def is_due(card, now: datetime) -> bool:
    return card.fsrs.due <= now


def is_same_local_day(timestamp: datetime, now: datetime) -> bool:
    """Compare calendar days in the machine's local timezone."""
    return timestamp.astimezone().date() == now.astimezone().date()


def compute_stats(store: FlashcardStore, now: Optional[datetime] = None) -> CardStats:
    """
    Build the stats block.

    - total_cards: all cards
    - due_cards: cards with due <= now
    - reviews_today: reviews logged on the current local calendar day
    - retention_rate: share of today's reviews rated Good or Easy, in percent

    Args:
        store: Snapshot of the document
        now: Reference time (defaults to now)

    Returns:
        CardStats
    """
    if now is None:
        now = utc_now()

    cards = list(store.cards.values())
    due_cards = sum(1 for card in cards if is_due(card, now))

    todays = [r for r in store.reviews if is_same_local_day(r.timestamp, now)]
    correct = sum(1 for r in todays if r.rating >= Rating.GOOD)
    retention = (correct / len(todays) * 100.0) if todays else 0.0

    return CardStats(
        total_cards=len(cards),
        due_cards=due_cards,
        reviews_today=len(todays),
        retention_rate=retention,
    )


def calculate_stats(storage, now: Optional[datetime] = None) -> CardStats:
    """Stats for everything currently held by a Storage."""
    return compute_stats(storage.snapshot(), now)
