"""
Due-card selection.

Picks the single most urgent card to review next:
1. Keep cards that are due (due <= now)
2. If tags were requested, keep only due cards carrying all of them
3. Score each with review_priority and take the highest

Ties on score go to the lowest card ID so the choice never depends on
dict iteration order.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Optional

from flashcards.errors import NoCardsDueError, NoTagMatchError
from flashcards.fsrs.priority import review_priority
from flashcards.schemas import Card, CardStats, normalize_tags
from flashcards.stats import is_due

logger = logging.getLogger(__name__)


def rank_due_cards(cards: Iterable[Card], now: datetime) -> list[tuple[float, Card]]:
    """
    Score every due card.

    Returns:
        (priority, card) pairs, most urgent first
    """
    scored = [
        (review_priority(card.fsrs.state, card.fsrs.due, now), card)
        for card in cards
        if is_due(card, now)
    ]
    scored.sort(key=lambda pair: (-pair[0], pair[1].id))
    return scored


def select_due_card(
    cards: list[Card],
    now: datetime,
    tags: Optional[Iterable[str]] = None,
    stats: Optional[CardStats] = None
) -> Card:
    """
    Choose the next card to review.

    Args:
        cards: The whole collection
        now: Reference time
        tags: Optional filter; a card must carry every tag
        stats: Attached to the failure so callers can still show counters

    Returns:
        The highest-priority due card

    Raises:
        NoTagMatchError: tags given and no card at all (due or not) carries them
        NoCardsDueError: nothing in the (filtered) pool is due
    """
    required = normalize_tags(tags)
    stats = stats or CardStats()

    if required and not any(card.has_all_tags(required) for card in cards):
        logger.debug("No card carries tags %s", required)
        raise NoTagMatchError(stats, required)

    pool = [card for card in cards if card.has_all_tags(required)]
    ranked = rank_due_cards(pool, now)
    logger.debug(
        "Due selection: %d cards, %d considered, %d due",
        len(cards), len(pool), len(ranked)
    )

    if not ranked:
        raise NoCardsDueError(stats, required)

    priority, card = ranked[0]
    logger.debug("Selected card %s (priority=%.3f)", card.id, priority)
    return card
