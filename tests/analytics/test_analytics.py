"""Tests for review-history analytics."""

from datetime import datetime, timedelta, timezone

import pandas as pd
import pytest

from flashcards.analytics import (
    analyze_learning,
    build_review_dashboard,
    due_date_progress,
    tag_counts,
)
from flashcards.analytics.metrics import build_day_index, compute_daily_review_counts
from flashcards.analytics.queries import REVIEW_COLUMNS, load_review_events_df
from flashcards.schemas import Card, FlashcardStore, FSRSState, Rating, Review, State

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def store():
    cards = {
        "a": Card(id="a", front="alpha", tags=["bio"], fsrs=FSRSState(due=NOW, state=State.REVIEW)),
        "b": Card(id="b", front="beta", tags=["bio", "exam"], fsrs=FSRSState(due=NOW, state=State.LEARNING)),
        "c": Card(id="c", front="gamma", fsrs=FSRSState(due=NOW, state=State.NEW)),
    }
    reviews = [
        Review(card_id="a", rating=Rating.GOOD, timestamp=NOW - timedelta(days=2)),
        Review(card_id="a", rating=Rating.EASY, timestamp=NOW),
        Review(card_id="b", rating=Rating.AGAIN, timestamp=NOW - timedelta(days=2, hours=1)),
        Review(card_id="b", rating=Rating.HARD, timestamp=NOW - timedelta(hours=1)),
    ]
    return FlashcardStore(cards=cards, reviews=reviews)


def test_review_events_frame(store):
    df = load_review_events_df(store)
    assert list(df.columns) == REVIEW_COLUMNS
    assert len(df) == 4
    assert df["timestamp"].is_monotonic_increasing
    assert df["correct"].sum() == 2


def test_empty_store_frames():
    df = load_review_events_df(FlashcardStore())
    assert df.empty
    assert len(build_day_index(df)) == 0
    assert compute_daily_review_counts(df, build_day_index(df)).empty


def test_daily_counts_are_zero_filled(store):
    df = load_review_events_df(store)
    index = build_day_index(df)
    counts = compute_daily_review_counts(df, index)
    assert list(counts.values) == [2, 0, 2]
    assert counts.index[0] == pd.Timestamp("2024-04-29", tz="UTC")


def test_dashboard(store):
    dashboard = build_review_dashboard(store)
    assert dashboard.total_reviews == 4
    assert dashboard.cards_reviewed == 2
    assert dashboard.state_counts == {
        int(State.REVIEW): 1,
        int(State.LEARNING): 1,
        int(State.NEW): 1,
    }
    assert list(dashboard.cumulative_reviews.values) == [2, 2, 4]
    assert list(dashboard.daily_retention.values) == [50.0, 0.0, 50.0]


def test_empty_dashboard():
    dashboard = build_review_dashboard(FlashcardStore())
    assert dashboard.total_reviews == 0
    assert dashboard.cards_reviewed == 0
    assert dashboard.state_counts == {}


def test_tag_counts(store):
    assert tag_counts(store) == {"bio": 2, "exam": 1}


def test_analyze_learning_picks_latest_struggle(store):
    message = analyze_learning(store)
    assert "beta" in message
    assert "rated 2" in message


def test_analyze_learning_ignores_deleted_cards(store):
    del store.cards["b"]
    assert "Great job" in analyze_learning(store)


def test_due_date_progress(store):
    progress = due_date_progress(store, "bio")
    assert progress.total_cards == 2
    assert progress.mastered_cards == 1
    assert progress.progress_percent == 50.0


def test_due_date_progress_unknown_tag(store):
    progress = due_date_progress(store, "chem")
    assert progress.total_cards == 0
    assert progress.progress_percent == 0.0
