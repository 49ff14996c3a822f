"""Tests for the persisted models and rating parsing."""

from datetime import datetime, timezone

import pytest

from flashcards.errors import ValidationError
from flashcards.schemas import Card, FlashcardStore, Rating, State, normalize_tags


def test_rating_ordinals():
    assert [int(r) for r in Rating] == [1, 2, 3, 4]
    assert [int(s) for s in State] == [0, 1, 2, 3]


@pytest.mark.parametrize("raw,expected", [
    (Rating.HARD, Rating.HARD),
    (3, Rating.GOOD),
    (4.0, Rating.EASY),
    (" 1 ", Rating.AGAIN),
    ("AGAIN", Rating.AGAIN),
])
def test_rating_parse(raw, expected):
    assert Rating.parse(raw) is expected


@pytest.mark.parametrize("raw", [0, 5, "0", "perfect", False, [3]])
def test_rating_parse_rejects(raw):
    with pytest.raises(ValidationError):
        Rating.parse(raw)


def test_tags_are_a_sorted_set():
    assert normalize_tags(["b", "a", "b"]) == ["a", "b"]
    assert normalize_tags(None) == []
    assert Card(tags=["z", "a", "z"]).tags == ["a", "z"]


def test_has_all_tags():
    card = Card(tags=["bio", "exam"])
    assert card.has_all_tags([])
    assert card.has_all_tags(["bio"])
    assert not card.has_all_tags(["bio", "chem"])


def test_new_card_defaults():
    card = Card()
    assert card.fsrs.state == State.NEW
    assert card.fsrs.reps == 0
    assert card.last_reviewed_at is None
    assert card.created_at.tzinfo is not None


def test_naive_datetime_becomes_utc():
    card = Card(created_at=datetime(2024, 5, 1, 12, 0))
    assert card.created_at == datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def test_store_accepts_nulls():
    store = FlashcardStore.model_validate({"cards": None, "reviews": None, "due_dates": None})
    assert store.cards == {}
    assert store.reviews == []
    assert store.due_dates == []
