"""
Service layer to assemble learning insights from a store snapshot.
"""

from __future__ import annotations

from collections import Counter

import pandas as pd

from flashcards.analytics.metrics import (
    build_day_index,
    compute_daily_retention,
    compute_daily_review_counts,
    compute_state_counts,
    compute_unique_cards_reviewed,
)
from flashcards.analytics.queries import load_cards_df, load_review_events_df
from flashcards.analytics.types import ReviewDashboardData
from flashcards.schemas import DueDateProgressStats, FlashcardStore, Rating


def build_review_dashboard(store: FlashcardStore) -> ReviewDashboardData:
    """
    Build all KPI values and series for the review history.
    """
    events_df = load_review_events_df(store)
    day_index = build_day_index(events_df)

    daily = compute_daily_review_counts(events_df, day_index)
    cumulative = daily.cumsum() if not daily.empty else pd.Series(dtype="int64")

    return ReviewDashboardData(
        total_reviews=len(events_df),
        cards_reviewed=compute_unique_cards_reviewed(events_df),
        state_counts=compute_state_counts(load_cards_df(store)),
        daily_reviews=daily,
        daily_retention=compute_daily_retention(events_df, day_index),
        cumulative_reviews=cumulative,
    )


def tag_counts(store: FlashcardStore) -> dict[str, int]:
    """Number of cards carrying each tag."""
    counts = Counter(tag for card in store.cards.values() for tag in card.tags)
    return dict(sorted(counts.items()))


def analyze_learning(store: FlashcardStore) -> str:
    """
    Point at the card that most recently gave the learner trouble.

    Looks for the latest Again/Hard review among existing cards.
    """
    if not store.cards:
        return "No cards available to analyze yet. Let's create some!"

    struggles = [
        review for review in store.reviews
        if review.card_id in store.cards and review.rating <= Rating.HARD
    ]
    if not struggles:
        return "Great job so far! All recent reviews look good. Keep up the excellent work!"

    worst = max(struggles, key=lambda r: r.timestamp)
    card = store.cards[worst.card_id]
    return (
        f"It looks like the card '{card.front}' was challenging "
        f"(rated {int(worst.rating)} on {worst.timestamp:%d %b %y %H:%M %Z}). "
        "Maybe we can break down the concept or create related cards?"
    )


def due_date_progress(store: FlashcardStore, tag: str) -> DueDateProgressStats:
    """
    Progress toward a due date: share of tagged cards whose latest review was Easy.
    """
    cards = [card for card in store.cards.values() if tag in card.tags]
    if not cards:
        return DueDateProgressStats()

    latest = {}
    for review in store.reviews:
        current = latest.get(review.card_id)
        if current is None or review.timestamp >= current.timestamp:
            latest[review.card_id] = review

    mastered = sum(
        1 for card in cards
        if card.id in latest and latest[card.id].rating == Rating.EASY
    )
    return DueDateProgressStats(
        total_cards=len(cards),
        mastered_cards=mastered,
        progress_percent=mastered / len(cards) * 100.0,
    )
