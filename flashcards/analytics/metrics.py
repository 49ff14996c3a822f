"""
Metric computations for review dashboards.
"""

from __future__ import annotations

import pandas as pd


def build_day_index(events_df: pd.DataFrame) -> pd.DatetimeIndex:
    """
    Build a dense UTC day index spanning the event range.
    """
    if events_df.empty:
        return pd.DatetimeIndex([], tz="UTC")
    start = events_df["day_utc"].min()
    end = events_df["day_utc"].max()
    return pd.date_range(start=start, end=end, freq="D")


def compute_daily_review_counts(
    events_df: pd.DataFrame,
    day_index: pd.DatetimeIndex
) -> pd.Series:
    """
    Reviews per day, zero-filled over the index.
    """
    if events_df.empty or len(day_index) == 0:
        return pd.Series(dtype="int64")
    counts = events_df.groupby("day_utc").size()
    return counts.reindex(day_index, fill_value=0).astype("int64")


def compute_daily_retention(
    events_df: pd.DataFrame,
    day_index: pd.DatetimeIndex
) -> pd.Series:
    """
    Percent of reviews rated Good/Easy per day; 0 on days without reviews.
    """
    if events_df.empty or len(day_index) == 0:
        return pd.Series(dtype="float64")
    rate = events_df.groupby("day_utc")["correct"].mean() * 100.0
    return rate.reindex(day_index, fill_value=0.0).astype("float64")


def compute_unique_cards_reviewed(events_df: pd.DataFrame) -> int:
    """
    Count distinct card IDs that have at least one review.
    """
    if events_df.empty:
        return 0
    return int(events_df["card_id"].nunique())


def compute_state_counts(cards_df: pd.DataFrame) -> dict[int, int]:
    """Number of cards in each lifecycle state."""
    if cards_df.empty:
        return {}
    return {int(state): int(count) for state, count in cards_df["state"].value_counts().items()}
