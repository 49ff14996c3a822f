"""Tests for due-card selection."""

from datetime import datetime, timedelta, timezone

import pytest

from flashcards.errors import NoCardsDueError, NoTagMatchError
from flashcards.scheduler import rank_due_cards, select_due_card
from flashcards.schemas import Card, CardStats, FSRSState, State

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def card(card_id, state, due, tags=()):
    return Card(id=card_id, front=card_id, tags=list(tags), fsrs=FSRSState(due=due, state=state))


def test_learning_beats_review_at_same_lateness():
    overdue = NOW - timedelta(hours=2)
    cards = [card("a", State.REVIEW, overdue), card("b", State.LEARNING, overdue)]
    assert select_due_card(cards, NOW).id == "b"


def test_not_due_cards_are_skipped():
    cards = [
        card("future", State.LEARNING, NOW + timedelta(minutes=1)),
        card("now", State.NEW, NOW),
    ]
    assert select_due_card(cards, NOW).id == "now"


def test_ties_go_to_lowest_id():
    cards = [card("c", State.NEW, NOW), card("a", State.NEW, NOW), card("b", State.NEW, NOW)]
    assert select_due_card(cards, NOW).id == "a"
    assert select_due_card(list(reversed(cards)), NOW).id == "a"


def test_rank_orders_by_priority():
    cards = [
        card("new", State.NEW, NOW),
        card("old-review", State.REVIEW, NOW - timedelta(days=30)),
        card("learning", State.LEARNING, NOW),
    ]
    ranked = [c.id for _, c in rank_due_cards(cards, NOW)]
    assert ranked == ["old-review", "learning", "new"]


def test_tag_filter_requires_all_tags():
    cards = [
        card("bio", State.LEARNING, NOW, ["bio"]),
        card("bio-exam", State.NEW, NOW, ["bio", "exam"]),
    ]
    assert select_due_card(cards, NOW, ["bio", "exam"]).id == "bio-exam"


def test_no_tag_match_beats_no_cards_due():
    stats = CardStats(total_cards=1, due_cards=1)
    cards = [card("a", State.NEW, NOW, ["bio"])]
    with pytest.raises(NoTagMatchError) as info:
        select_due_card(cards, NOW, ["nonexistent-tag"], stats)
    assert info.value.stats == stats
    assert info.value.tags == ["nonexistent-tag"]


def test_tagged_cards_exist_but_none_due():
    cards = [
        card("a", State.REVIEW, NOW + timedelta(days=3), ["bio"]),
        card("b", State.NEW, NOW, ["chem"]),
    ]
    with pytest.raises(NoCardsDueError) as info:
        select_due_card(cards, NOW, ["bio"])
    assert info.value.tags == ["bio"]


def test_empty_collection():
    with pytest.raises(NoCardsDueError):
        select_due_card([], NOW)
