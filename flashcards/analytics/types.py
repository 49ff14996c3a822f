"""
Types for review dashboards.
"""

from __future__ import annotations

from dataclasses import dataclass

import pandas as pd


@dataclass(frozen=True)
class ReviewDashboardData:
    """
    Precomputed metrics and series for the review history.
    """
    total_reviews: int
    cards_reviewed: int
    state_counts: dict[int, int]
    daily_reviews: pd.Series
    daily_retention: pd.Series
    cumulative_reviews: pd.Series
