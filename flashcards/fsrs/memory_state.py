"""
Memory State - Retrievability and Interval Math

Derived quantities used by the memory model.

Key concepts:
- Stability (S): days until retrievability falls to 90%
- Difficulty (D): how hard the card is to learn (1-10 scale)
- Retrievability (R): probability of successful recall at time t
"""

from __future__ import annotations
from datetime import datetime
from typing import Optional
import math

from flashcards.fsrs.constants import D_MAX, D_MIN, DECAY, FACTOR, S_MIN


def calculate_retrievability(elapsed_days: float, stability: float) -> float:
    """
    Calculate retrievability using the FSRS power forgetting curve.

    Formula: R = (1 + FACTOR * t / S) ^ DECAY

    Interpretation:
    - Immediately after review: R = 1.0
    - At t = S: R = 0.9
    - As time passes: R decays smoothly toward 0

    Args:
        elapsed_days: Time since last review in days
        stability: Current stability in days

    Returns:
        Retrievability between 0 and 1
    """
    if elapsed_days <= 0:
        return 1.0
    return math.pow(1.0 + FACTOR * elapsed_days / clamp_stability(stability), DECAY)


def next_interval(stability: float, request_retention: float, maximum_interval: int) -> int:
    """
    Days until R decays to the requested retention.

    Inverse of the forgetting curve, rounded and clipped to [1, maximum_interval].
    """
    raw = clamp_stability(stability) / FACTOR * (math.pow(request_retention, 1.0 / DECAY) - 1.0)
    return int(min(max(round(raw), 1), maximum_interval))


def elapsed_whole_days(last_review: Optional[datetime], now: datetime) -> int:
    """Whole days between the last review and now (0 if never reviewed)."""
    if last_review is None or now <= last_review:
        return 0
    return int((now - last_review).total_seconds() // 86400)


def clamp_stability(stability: float) -> float:
    return max(S_MIN, stability)


def clamp_difficulty(difficulty: float) -> float:
    return max(D_MIN, min(D_MAX, difficulty))
