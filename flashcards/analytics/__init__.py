"""
Review-history analytics.
"""

from flashcards.analytics.service import (
    analyze_learning,
    build_review_dashboard,
    due_date_progress,
    tag_counts,
)
from flashcards.analytics.types import ReviewDashboardData

__all__ = [
    "ReviewDashboardData",
    "analyze_learning",
    "build_review_dashboard",
    "due_date_progress",
    "tag_counts",
]
