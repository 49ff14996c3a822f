"""
Stability and Difficulty Updates

Implements the FSRS v4 update formulas.

Key principles:
- Successful recall at low R produces the largest stability gains
- A lapse resets stability relative to how much was known
- Difficulty drifts with each rating and reverts slowly toward its initial value
"""

from __future__ import annotations
from typing import Sequence
import math

from flashcards.fsrs.constants import S_MIN
from flashcards.fsrs.memory_state import clamp_difficulty, clamp_stability
from flashcards.schemas import Rating


def init_stability(weights: Sequence[float], rating: Rating) -> float:
    """
    Stability after the very first review.

    Formula: S_0 = w[rating - 1]
    """
    return max(weights[int(rating) - 1], S_MIN)


def init_difficulty(weights: Sequence[float], rating: Rating) -> float:
    """
    Difficulty after the very first review.

    Formula: D_0 = w4 - w5 * (rating - 3), clipped to [1, 10]
    """
    return clamp_difficulty(weights[4] - weights[5] * (int(rating) - 3))


def next_difficulty(weights: Sequence[float], difficulty: float, rating: Rating) -> float:
    """
    Update difficulty based on the rating.

    Formula:
        D' = D - w6 * (rating - 3)
        D'' = w7 * D_0(3) + (1 - w7) * D'   (mean reversion)

    Again/Hard raise difficulty, Easy lowers it.
    """
    stepped = difficulty - weights[6] * (int(rating) - 3)
    reverted = weights[7] * init_difficulty(weights, Rating.GOOD) + (1.0 - weights[7]) * stepped
    return clamp_difficulty(reverted)


def next_recall_stability(
    weights: Sequence[float],
    difficulty: float,
    stability: float,
    retrievability: float,
    rating: Rating
) -> float:
    """
    Update stability after successful recall (Hard/Good/Easy).

    Formula:
        S' = S * (1 + e^w8 * (11 - D) * S^-w9 * (e^((1 - R) * w10) - 1) * penalty * bonus)

    Where penalty = w15 for Hard and bonus = w16 for Easy.

    Args:
        weights: Model weights
        difficulty: Current difficulty (D)
        stability: Current stability (S)
        retrievability: Recall probability at review time (R)
        rating: HARD, GOOD or EASY

    Returns:
        New stability value
    """
    if rating == Rating.AGAIN:
        raise ValueError("Use next_forget_stability for AGAIN")

    d = clamp_difficulty(difficulty)
    s = clamp_stability(stability)
    hard_penalty = weights[15] if rating == Rating.HARD else 1.0
    easy_bonus = weights[16] if rating == Rating.EASY else 1.0

    growth = (
        math.exp(weights[8])
        * (11.0 - d)
        * math.pow(s, -weights[9])
        * (math.exp((1.0 - retrievability) * weights[10]) - 1.0)
        * hard_penalty
        * easy_bonus
    )
    return clamp_stability(s * (1.0 + growth))


def next_forget_stability(
    weights: Sequence[float],
    difficulty: float,
    stability: float,
    retrievability: float
) -> float:
    """
    Update stability after a lapse (Again).

    Formula:
        S' = w11 * D^-w12 * ((S + 1)^w13 - 1) * e^((1 - R) * w14)
    """
    d = clamp_difficulty(difficulty)
    s = clamp_stability(stability)
    forgotten = (
        weights[11]
        * math.pow(d, -weights[12])
        * (math.pow(s + 1.0, weights[13]) - 1.0)
        * math.exp((1.0 - retrievability) * weights[14])
    )
    return clamp_stability(forgotten)
