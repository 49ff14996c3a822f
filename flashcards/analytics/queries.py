"""
DataFrame loaders over a store snapshot.
"""

from __future__ import annotations

import pandas as pd

from flashcards.schemas import FlashcardStore, Rating

REVIEW_COLUMNS = [
    "review_id",
    "card_id",
    "rating",
    "timestamp",
    "day_utc",
    "state",
    "scheduled_days",
    "elapsed_days",
    "correct",
]


def load_review_events_df(store: FlashcardStore) -> pd.DataFrame:
    """
    One row per review, oldest first.

    `correct` is True for Good/Easy; `day_utc` is the review's UTC day.
    """
    if not store.reviews:
        return pd.DataFrame(columns=REVIEW_COLUMNS)

    df = pd.DataFrame(
        [
            {
                "review_id": review.id,
                "card_id": review.card_id,
                "rating": int(review.rating),
                "timestamp": review.timestamp,
                "state": int(review.state),
                "scheduled_days": review.scheduled_days,
                "elapsed_days": review.elapsed_days,
                "correct": review.rating >= Rating.GOOD,
            }
            for review in store.reviews
        ]
    )
    df["timestamp"] = pd.to_datetime(df["timestamp"], utc=True)
    df["day_utc"] = df["timestamp"].dt.floor("D")
    return df.sort_values("timestamp", kind="stable")[REVIEW_COLUMNS].reset_index(drop=True)


def load_cards_df(store: FlashcardStore) -> pd.DataFrame:
    """One row per card with its current memory state."""
    columns = ["card_id", "front", "state", "due", "stability", "difficulty", "reps", "lapses"]
    if not store.cards:
        return pd.DataFrame(columns=columns)

    df = pd.DataFrame(
        [
            {
                "card_id": card.id,
                "front": card.front,
                "state": int(card.fsrs.state),
                "due": card.fsrs.due,
                "stability": card.fsrs.stability,
                "difficulty": card.fsrs.difficulty,
                "reps": card.fsrs.reps,
                "lapses": card.fsrs.lapses,
            }
            for card in store.cards.values()
        ],
        columns=columns,
    )
    df["due"] = pd.to_datetime(df["due"], utc=True)
    return df
