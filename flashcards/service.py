"""
Flashcard service - the public operation surface.

Ties storage, the memory model and due-card selection together. Every
mutating operation persists the store before returning.

Main workflow:
1. Caller creates cards
2. get_due_card() picks the most urgent one (plus stats)
3. submit_review() runs the memory model, records the review, saves
"""

from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Callable, Iterable, Optional

from flashcards import analytics
from flashcards.config import Settings
from flashcards.errors import ValidationError
from flashcards.fsrs.scheduler import FSRSMemoryModel, MemoryModel
from flashcards.scheduler import select_due_card
from flashcards.schemas import (
    Card,
    CardStats,
    DueDate,
    DueDateProgressStats,
    FSRSState,
    Rating,
    Review,
    State,
    as_utc,
    normalize_tags,
    utc_now,
)
from flashcards.stats import calculate_stats, compute_stats
from flashcards.storage import FileStorage, Storage

logger = logging.getLogger(__name__)


def _check_text(name: str, value) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"{name} must be a string, got {type(value).__name__}")
    return value


def _check_tags(tags) -> list[str]:
    if tags is None:
        return []
    if isinstance(tags, str):
        raise ValidationError("tags must be a list of strings, not a single string")
    tags = list(tags)
    if not all(isinstance(tag, str) for tag in tags):
        raise ValidationError("tags must be a list of strings")
    return normalize_tags(tags)


class FlashcardService:
    """
    Manages flashcard operations on top of a Storage and a MemoryModel.

    Args:
        storage: Loaded Storage instance (the one owner of all state)
        memory_model: Scheduling algorithm; FSRS v4 by default
        clock: Returns "now"; injectable for deterministic callers
    """

    def __init__(
        self,
        storage: Storage,
        memory_model: Optional[MemoryModel] = None,
        clock: Callable[[], datetime] = utc_now
    ):
        self.storage = storage
        self.memory_model = memory_model or FSRSMemoryModel()
        self.clock = clock

    @classmethod
    def from_settings(cls, settings: Settings) -> "FlashcardService":
        """Open (or create) the store named in settings and wrap it."""
        storage = FileStorage(settings.store_path)
        storage.load()
        model = FSRSMemoryModel(
            request_retention=settings.request_retention,
            maximum_interval=settings.maximum_interval,
        )
        return cls(storage, model)

    def now(self) -> datetime:
        """Current time from the clock, as aware UTC."""
        return as_utc(self.clock())

    # ---- Cards ----

    def create_card(self, front: str, back: str, tags: Optional[Iterable[str]] = None) -> Card:
        """Create a card (empty content allowed) and persist it."""
        front = _check_text("front", front)
        back = _check_text("back", back)
        card = self.storage.create_card(front, back, _check_tags(tags), now=self.now())
        self.storage.save()
        logger.info("Created card %s", card.id)
        return card

    def get_card(self, card_id: str) -> Card:
        return self.storage.get_card(card_id)

    def update_card(
        self,
        card_id: str,
        front: Optional[str] = None,
        back: Optional[str] = None,
        tags: Optional[Iterable[str]] = None
    ) -> Card:
        """
        Change only the fields that were given.

        Saves only when something actually changed.

        Raises:
            CardNotFoundError: if the card does not exist
        """
        card = self.storage.get_card(card_id)
        changes = {}
        if front is not None and _check_text("front", front) != card.front:
            changes["front"] = front
        if back is not None and _check_text("back", back) != card.back:
            changes["back"] = back
        if tags is not None:
            new_tags = _check_tags(tags)
            if new_tags != card.tags:
                changes["tags"] = new_tags

        if not changes:
            logger.debug("No changes for card %s", card_id)
            return card

        updated = self.storage.update_card(card.model_copy(update=changes))
        self.storage.save()
        logger.info("Updated card %s (%s)", card_id, ", ".join(sorted(changes)))
        return updated

    def delete_card(self, card_id: str) -> None:
        """Delete a card; its review history is kept."""
        self.storage.delete_card(card_id)
        self.storage.save()
        logger.info("Deleted card %s", card_id)

    def list_cards(self, tags: Optional[Iterable[str]] = None) -> list[Card]:
        """All cards, or only those carrying every tag in `tags`."""
        return self.storage.list_cards(_check_tags(tags))

    def list_cards_with_stats(
        self,
        tags: Optional[Iterable[str]] = None
    ) -> tuple[list[Card], CardStats]:
        """Filtered cards plus stats over the whole collection."""
        return self.list_cards(tags), self.get_stats()

    def get_tags(self) -> dict[str, int]:
        """Map each tag to the number of cards carrying it."""
        return analytics.tag_counts(self.storage.snapshot())

    def get_cards_by_tag(self, tag: str) -> list[Card]:
        if not tag:
            raise ValidationError("tag cannot be empty")
        return self.storage.list_cards([tag])

    # ---- Reviewing ----

    def get_stats(self, now: Optional[datetime] = None) -> CardStats:
        return calculate_stats(self.storage, as_utc(now) if now is not None else self.now())

    def get_due_card(self, tags: Optional[Iterable[str]] = None) -> tuple[Card, CardStats]:
        """
        Pick the next card to review.

        Returns:
            (card, stats) where stats cover the whole collection

        Raises:
            NoTagMatchError: no card carries all of `tags`
            NoCardsDueError: nothing matching is due
        """
        required = _check_tags(tags)
        now = self.now()
        snapshot = self.storage.snapshot()
        stats = compute_stats(snapshot, now)
        cards = sorted(snapshot.cards.values(), key=lambda c: c.id)
        card = select_due_card(cards, now, required, stats)
        return card, stats

    def submit_review(
        self,
        card_id: str,
        rating,
        answer: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> Card:
        """
        Apply a rating to a card and persist the result.

        Elapsed time is measured from the most recent logged review when
        there is one. Reading the card, running the memory model and
        writing the result happen under one storage write lock, so
        concurrent reviews of a card never overwrite each other. The update
        and the review record are saved before returning; if the save fails
        the whole submission has failed. A naive `now` is taken as UTC.

        Args:
            card_id: Card being reviewed
            rating: 1-4 or again/hard/good/easy
            answer: Optional free-text answer
            now: Review time (defaults to the service clock)

        Returns:
            The updated card

        Raises:
            ValidationError: bad rating
            CardNotFoundError: unknown card
            StorageIOError: the save failed
        """
        started = time.monotonic()
        rating = Rating.parse(rating)
        answer = _check_text("answer", answer)
        now = as_utc(now) if now is not None else self.now()

        def reschedule(card: Card, previous: list[Review]) -> FSRSState:
            memory = card.fsrs
            if previous and memory.state != State.NEW:
                last_logged = max(review.timestamp for review in previous)
                memory = memory.model_copy(update={"last_review": last_logged})

            new_memory = self.memory_model.schedule(memory, rating, now)
            logger.debug(
                "Scheduled card %s: %s -> %s, due %s (S=%.3f, D=%.3f, reps=%d)",
                card_id, memory.state.name, new_memory.state.name,
                new_memory.due.isoformat(), new_memory.stability,
                new_memory.difficulty, new_memory.reps
            )
            return new_memory

        updated, review = self.storage.review_card(card_id, reschedule, rating, answer, now)
        self.storage.save()

        logger.info(
            "Recorded review %s for card %s (rating=%s) in %.1f ms",
            review.id, card_id, rating.name, (time.monotonic() - started) * 1000
        )
        return updated

    def get_card_reviews(self, card_id: str) -> list[Review]:
        return self.storage.get_card_reviews(card_id)

    def analyze_learning(self) -> str:
        return analytics.analyze_learning(self.storage.snapshot())

    def review_dashboard(self) -> analytics.ReviewDashboardData:
        return analytics.build_review_dashboard(self.storage.snapshot())

    # ---- Due dates ----

    def add_due_date(self, topic: str, tag: str, due_date: Optional[datetime]) -> DueDate:
        """
        Register a deadline for the cards carrying `tag`.

        Raises:
            ValidationError: if topic, tag or date is missing
        """
        if not topic or not tag or due_date is None:
            raise ValidationError("due date topic, tag, and date are required")
        entry = self.storage.add_due_date(DueDate(topic=topic, tag=tag, due_date=due_date))
        self.storage.save()
        return entry

    def list_due_dates(self) -> list[DueDate]:
        return self.storage.list_due_dates()

    def update_due_date(self, due_date: DueDate) -> DueDate:
        if not due_date.id:
            raise ValidationError("due date ID is required for update")
        updated = self.storage.update_due_date(due_date)
        self.storage.save()
        return updated

    def delete_due_date(self, due_date_id: str) -> None:
        if not due_date_id:
            raise ValidationError("due date ID is required for delete")
        self.storage.delete_due_date(due_date_id)
        self.storage.save()

    def get_due_date_progress_stats(self, tag: str) -> DueDateProgressStats:
        """Mastery progress for a due date's tag (mastered = last rated Easy)."""
        if not tag:
            raise ValidationError("tag cannot be empty")
        return analytics.due_date_progress(self.storage.snapshot(), tag)
