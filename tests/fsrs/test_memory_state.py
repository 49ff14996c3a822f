"""Tests for the forgetting curve and interval helpers."""

from datetime import datetime, timedelta, timezone

import pytest

from flashcards.fsrs import calculate_retrievability, elapsed_whole_days, next_interval
from flashcards.fsrs.updates import (
    init_difficulty,
    next_forget_stability,
    next_recall_stability,
)
from flashcards.fsrs.constants import DEFAULT_WEIGHTS
from flashcards.schemas import Rating

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def test_retrievability_is_one_right_after_review():
    assert calculate_retrievability(0, 5.0) == 1.0


def test_retrievability_at_stability_is_ninety_percent():
    assert calculate_retrievability(7, 7.0) == pytest.approx(0.9)


def test_retrievability_decays():
    values = [calculate_retrievability(t, 5.0) for t in (1, 5, 20, 100)]
    assert values == sorted(values, reverse=True)


def test_interval_equals_stability_at_default_retention():
    assert next_interval(12.4, 0.9, 36500) == 12


def test_interval_bounds():
    assert next_interval(0.0, 0.9, 36500) == 1
    assert next_interval(1e9, 0.9, 100) == 100


def test_higher_retention_means_shorter_interval():
    assert next_interval(30.0, 0.95, 36500) < next_interval(30.0, 0.9, 36500)


def test_elapsed_whole_days():
    assert elapsed_whole_days(None, NOW) == 0
    assert elapsed_whole_days(NOW + timedelta(hours=1), NOW) == 0
    assert elapsed_whole_days(NOW - timedelta(days=2, hours=23), NOW) == 2


def test_initial_difficulty_is_clipped():
    assert init_difficulty(DEFAULT_WEIGHTS, Rating.AGAIN) == pytest.approx(6.81)
    assert 1.0 <= init_difficulty(DEFAULT_WEIGHTS, Rating.EASY) <= 10.0


def test_recall_stability_rejects_again():
    with pytest.raises(ValueError):
        next_recall_stability(DEFAULT_WEIGHTS, 5.0, 10.0, 0.9, Rating.AGAIN)


def test_easy_gains_more_than_hard():
    hard = next_recall_stability(DEFAULT_WEIGHTS, 5.0, 10.0, 0.9, Rating.HARD)
    easy = next_recall_stability(DEFAULT_WEIGHTS, 5.0, 10.0, 0.9, Rating.EASY)
    assert 10.0 < hard < easy


def test_forget_stability_drops():
    assert next_forget_stability(DEFAULT_WEIGHTS, 5.0, 10.0, 0.9) < 10.0
