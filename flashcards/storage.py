"""
Storage - Card Store backed by a single JSON document

Handles all persistence for cards, reviews and due dates.

Document:
- cards: card ID -> Card
- reviews: append-only review log, in creation order
- due_dates: deadlines tied to tags
- last_updated: timestamp of the last save

Concurrency: one reader/writer lock guards the in-memory document. Reads
run concurrently, writes are exclusive. Save snapshots under the lock and
writes the file after releasing it. Only one process may own the file;
there is no cross-process locking.
"""

from __future__ import annotations

import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, Optional

from pydantic import ValidationError as SchemaError

from flashcards.errors import CardNotFoundError, DueDateNotFoundError, StorageIOError
from flashcards.schemas import (
    Card,
    DueDate,
    FlashcardStore,
    FSRSState,
    Rating,
    Review,
    State,
    normalize_tags,
    utc_now,
)

logger = logging.getLogger(__name__)


class ReadWriteLock:
    """
    Writer-preferring reader/writer lock.

    Not reentrant: never take it twice on the same thread.
    """

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read_locked(self):
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write_locked(self):
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class Storage(ABC):
    """
    Port for card and review persistence.

    Every read returns a copy; callers never hold a live alias into the store.
    Mutations stay in memory until save() is called.
    """

    # Card operations
    @abstractmethod
    def create_card(
        self,
        front: str,
        back: str,
        tags: Optional[Iterable[str]] = None,
        now: Optional[datetime] = None
    ) -> Card: ...

    @abstractmethod
    def get_card(self, card_id: str) -> Card: ...

    @abstractmethod
    def update_card(self, card: Card) -> Card: ...

    @abstractmethod
    def delete_card(self, card_id: str) -> None: ...

    @abstractmethod
    def list_cards(self, tags: Optional[Iterable[str]] = None) -> list[Card]: ...

    # Review operations
    @abstractmethod
    def add_review(self, card_id: str, rating: Rating, answer: str = "") -> Review: ...

    @abstractmethod
    def record_review(
        self,
        card_id: str,
        memory: FSRSState,
        rating: Rating,
        answer: str,
        timestamp: datetime
    ) -> tuple[Card, Review]: ...

    @abstractmethod
    def review_card(
        self,
        card_id: str,
        reschedule: Callable[[Card, list[Review]], FSRSState],
        rating: Rating,
        answer: str,
        timestamp: datetime
    ) -> tuple[Card, Review]: ...

    @abstractmethod
    def get_card_reviews(self, card_id: str) -> list[Review]: ...

    # Due date operations
    @abstractmethod
    def add_due_date(self, due_date: DueDate) -> DueDate: ...

    @abstractmethod
    def list_due_dates(self) -> list[DueDate]: ...

    @abstractmethod
    def update_due_date(self, due_date: DueDate) -> DueDate: ...

    @abstractmethod
    def delete_due_date(self, due_date_id: str) -> None: ...

    # Whole-document operations
    @abstractmethod
    def snapshot(self) -> FlashcardStore: ...

    @abstractmethod
    def load(self) -> None: ...

    @abstractmethod
    def save(self) -> None: ...


class FileStorage(Storage):
    """Storage implementation using one JSON file for persistence."""

    def __init__(self, path):
        self.path = Path(path)
        self._store = FlashcardStore()
        self._lock = ReadWriteLock()
        # Serializes disk writes so an older snapshot never replaces a newer one
        self._save_lock = threading.Lock()
        logger.debug("Creating FileStorage for %s", self.path)

    # ---- Cards ----

    def create_card(
        self,
        front: str,
        back: str,
        tags: Optional[Iterable[str]] = None,
        now: Optional[datetime] = None
    ) -> Card:
        """
        Create a new card in state New, due immediately.

        Empty front/back/tags are accepted.
        """
        if now is None:
            now = utc_now()
        card = Card(
            front=front or "",
            back=back or "",
            created_at=now,
            tags=normalize_tags(tags),
            fsrs=FSRSState(due=now, state=State.NEW),
        )
        with self._lock.write_locked():
            self._store.cards[card.id] = card
            self._store.last_updated = now
        logger.debug("Created card %s (tags=%s)", card.id, card.tags)
        return card.model_copy(deep=True)

    def get_card(self, card_id: str) -> Card:
        with self._lock.read_locked():
            card = self._store.cards.get(card_id)
            if card is None:
                raise CardNotFoundError(card_id)
            return card.model_copy(deep=True)

    def update_card(self, card: Card) -> Card:
        """
        Replace the content fields (front, back, tags) of an existing card.

        Memory-state fields are never touched here.

        Raises:
            CardNotFoundError: if no card has this ID
        """
        with self._lock.write_locked():
            stored = self._store.cards.get(card.id)
            if stored is None:
                raise CardNotFoundError(card.id)
            updated = stored.model_copy(update={
                "front": card.front,
                "back": card.back,
                "tags": normalize_tags(card.tags),
            }, deep=True)
            self._store.cards[card.id] = updated
            self._store.last_updated = utc_now()
            logger.debug("Updated content of card %s", card.id)
            return updated.model_copy(deep=True)

    def delete_card(self, card_id: str) -> None:
        """Remove a card. Its reviews stay in the log."""
        with self._lock.write_locked():
            if card_id not in self._store.cards:
                raise CardNotFoundError(card_id)
            del self._store.cards[card_id]
            self._store.last_updated = utc_now()
        logger.debug("Deleted card %s", card_id)

    def list_cards(self, tags: Optional[Iterable[str]] = None) -> list[Card]:
        """
        List cards, oldest first.

        Args:
            tags: If given, only cards carrying every one of these tags

        Returns:
            Copies of the matching cards
        """
        required = normalize_tags(tags)
        with self._lock.read_locked():
            matches = [
                card.model_copy(deep=True)
                for card in self._store.cards.values()
                if card.has_all_tags(required)
            ]
        matches.sort(key=lambda c: (c.created_at, c.id))
        return matches

    # ---- Reviews ----

    def add_review(self, card_id: str, rating: Rating, answer: str = "") -> Review:
        """
        Append a review that snapshots the card's current scheduling state.

        Raises:
            CardNotFoundError: if no card has this ID
        """
        now = utc_now()
        with self._lock.write_locked():
            card = self._store.cards.get(card_id)
            if card is None:
                raise CardNotFoundError(card_id)
            review = Review(
                card_id=card_id,
                rating=Rating(rating),
                timestamp=now,
                answer=answer or "",
                scheduled_days=card.fsrs.scheduled_days,
                elapsed_days=card.fsrs.elapsed_days,
                state=card.fsrs.state,
            )
            self._store.reviews.append(review)
            self._store.last_updated = now
        logger.debug("Added review %s for card %s (rating=%d)", review.id, card_id, rating)
        return review.model_copy(deep=True)

    def record_review(
        self,
        card_id: str,
        memory: FSRSState,
        rating: Rating,
        answer: str,
        timestamp: datetime
    ) -> tuple[Card, Review]:
        """
        Apply a new memory state to a card and log the review, as one step.

        Both changes happen under a single write lock so no reader can see
        one without the other.

        Raises:
            CardNotFoundError: if the card was deleted in the meantime
        """
        with self._lock.write_locked():
            if card_id not in self._store.cards:
                raise CardNotFoundError(card_id)
            return self._apply_review(card_id, memory, rating, answer, timestamp)

    def review_card(
        self,
        card_id: str,
        reschedule: Callable[[Card, list[Review]], FSRSState],
        rating: Rating,
        answer: str,
        timestamp: datetime
    ) -> tuple[Card, Review]:
        """
        Read, reschedule and write a card under one write lock.

        `reschedule` receives a copy of the card and its logged reviews and
        returns the new memory state. Concurrent reviews of the same card
        therefore apply one after the other, each starting from the state
        the previous one left behind.

        Raises:
            CardNotFoundError: if no card has this ID
        """
        with self._lock.write_locked():
            stored = self._store.cards.get(card_id)
            if stored is None:
                raise CardNotFoundError(card_id)
            previous = [
                review.model_copy(deep=True)
                for review in self._store.reviews
                if review.card_id == card_id
            ]
            memory = reschedule(stored.model_copy(deep=True), previous)
            return self._apply_review(card_id, memory, rating, answer, timestamp)

    def get_card_reviews(self, card_id: str) -> list[Review]:
        """
        All reviews logged for a card ID, in creation order.

        Works for deleted cards too; an unknown ID yields an empty list.
        """
        with self._lock.read_locked():
            return [
                review.model_copy(deep=True)
                for review in self._store.reviews
                if review.card_id == card_id
            ]

    # ---- Due dates ----

    def add_due_date(self, due_date: DueDate) -> DueDate:
        with self._lock.write_locked():
            self._store.due_dates.append(due_date.model_copy(deep=True))
            self._store.last_updated = utc_now()
            logger.debug(
                "Added due date %s (topic=%s, tag=%s), count=%d",
                due_date.id, due_date.topic, due_date.tag, len(self._store.due_dates)
            )
        return due_date.model_copy(deep=True)

    def list_due_dates(self) -> list[DueDate]:
        with self._lock.read_locked():
            return [d.model_copy(deep=True) for d in self._store.due_dates]

    def update_due_date(self, due_date: DueDate) -> DueDate:
        with self._lock.write_locked():
            for index, existing in enumerate(self._store.due_dates):
                if existing.id == due_date.id:
                    self._store.due_dates[index] = due_date.model_copy(deep=True)
                    self._store.last_updated = utc_now()
                    logger.debug("Updated due date %s", due_date.id)
                    return due_date.model_copy(deep=True)
        raise DueDateNotFoundError(due_date.id)

    def delete_due_date(self, due_date_id: str) -> None:
        with self._lock.write_locked():
            remaining = [d for d in self._store.due_dates if d.id != due_date_id]
            if len(remaining) == len(self._store.due_dates):
                raise DueDateNotFoundError(due_date_id)
            self._store.due_dates = remaining
            self._store.last_updated = utc_now()
        logger.debug("Deleted due date %s", due_date_id)

    # ---- Whole document ----

    def snapshot(self) -> FlashcardStore:
        """Consistent deep copy of the whole document."""
        with self._lock.read_locked():
            return self._store.model_copy(deep=True)

    def load(self) -> None:
        """
        Replace the in-memory document with the file's contents.

        A missing file yields an empty store (and the empty document is
        written out). An empty file also yields an empty store.

        Raises:
            StorageIOError: if the file cannot be read or is malformed
        """
        logger.info("Loading flashcards from %s", self.path)
        with self._lock.write_locked():
            if not self.path.exists():
                logger.info("File not found, initializing empty store")
                self._store = FlashcardStore()
                created = True
            else:
                self._store = self._read_document()
                created = False

        if created:
            self.save()

    def save(self) -> None:
        """
        Write the document atomically: temp file in the same directory, then rename.

        Raises:
            StorageIOError: on any filesystem failure; the previous file is untouched
        """
        with self._save_lock:
            with self._lock.write_locked():
                self._store.last_updated = utc_now()
                payload = self._store.model_dump_json(indent=2)
            self._write_atomic(payload)

    # ---- Helpers ----

    def _apply_review(
        self,
        card_id: str,
        memory: FSRSState,
        rating: Rating,
        answer: str,
        timestamp: datetime
    ) -> tuple[Card, Review]:
        # Caller holds the write lock
        card = self._store.cards[card_id].model_copy(update={
            "fsrs": memory.model_copy(deep=True),
            "last_reviewed_at": timestamp,
        }, deep=True)
        review = Review(
            card_id=card_id,
            rating=Rating(rating),
            timestamp=timestamp,
            answer=answer or "",
            scheduled_days=memory.scheduled_days,
            elapsed_days=memory.elapsed_days,
            state=memory.state,
        )
        self._store.cards[card_id] = card
        self._store.reviews.append(review)
        self._store.last_updated = utc_now()
        return card.model_copy(deep=True), review.model_copy(deep=True)

    def _read_document(self) -> FlashcardStore:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Error reading %s: %s", self.path, exc)
            raise StorageIOError(f"failed to read storage file: {exc}", self.path) from exc

        if not raw.strip():
            logger.info("File is empty, initializing empty store")
            return FlashcardStore()

        try:
            store = FlashcardStore.model_validate_json(raw)
        except SchemaError as exc:
            logger.error("Malformed storage file %s: %s", self.path, exc)
            raise StorageIOError(f"failed to parse storage file: {exc}", self.path) from exc

        logger.info(
            "Loaded %d cards, %d reviews, %d due dates",
            len(store.cards), len(store.reviews), len(store.due_dates)
        )
        return store

    def _write_atomic(self, payload: str) -> None:
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(payload)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, self.path)
        except OSError as exc:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.remove(tmp_name)
            logger.error("Error saving %s: %s", self.path, exc)
            raise StorageIOError(f"failed to save storage file: {exc}", self.path) from exc
        logger.debug("Saved %s", self.path)
