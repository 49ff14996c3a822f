"""
Pydantic models for the flashcard store.

These models define the structure of the persisted JSON document and the
payloads returned to callers.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import IntEnum
from typing import Annotated, Optional
import uuid

from pydantic import AfterValidator, BaseModel, Field, field_validator

from flashcards.errors import ValidationError


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # Naive timestamps (older documents, callers) are taken to be UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


UTCDateTime = Annotated[datetime, AfterValidator(as_utc)]


def normalize_tags(tags) -> list[str]:
    """Collapse duplicates and drop ordering; tags are a set stored sorted."""
    if not tags:
        return []
    return sorted({str(tag) for tag in tags})


# ---- Enums ----

class Rating(IntEnum):
    """Learner's self-assessment of recall quality."""
    AGAIN = 1   # Retrieval failed
    HARD = 2    # Retrieved with high effort
    GOOD = 3    # Retrieved normally
    EASY = 4    # Retrieved fluently

    @classmethod
    def parse(cls, value) -> "Rating":
        """
        Validate a raw rating from a caller.

        Accepts the ordinals 1-4 (as int or numeric string) and the names
        again/hard/good/easy in any case.

        Raises:
            ValidationError: for anything else
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise ValidationError(f"invalid rating: {value!r} (must be 1-4)")
        if isinstance(value, str):
            text = value.strip()
            if text.upper() in cls.__members__:
                return cls[text.upper()]
            if not text.isdigit():
                raise ValidationError(f"invalid rating: {value!r} (must be 1-4)")
            value = int(text)
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        if not isinstance(value, int) or not 1 <= value <= 4:
            raise ValidationError(f"invalid rating: {value!r} (must be 1-4)")
        return cls(value)


class State(IntEnum):
    """Lifecycle phase of a card."""
    NEW = 0
    LEARNING = 1
    REVIEW = 2
    RELEARNING = 3


# ---- Card Memory State ----

class FSRSState(BaseModel):
    """
    Memory-state block of a card.

    Owned by the memory model; the rest of the system only reads `due` and
    `state`.
    """
    due: UTCDateTime = Field(default_factory=utc_now)
    stability: float = 0.0
    difficulty: float = 0.0
    elapsed_days: int = 0
    scheduled_days: int = 0
    reps: int = 0
    lapses: int = 0
    state: State = State.NEW
    last_review: Optional[UTCDateTime] = None


# ---- Documents ----

class Card(BaseModel):
    """A single reviewable question/answer item."""
    id: str = Field(default_factory=new_id)
    front: str = ""
    back: str = ""
    created_at: UTCDateTime = Field(default_factory=utc_now)
    tags: list[str] = Field(default_factory=list)
    last_reviewed_at: Optional[UTCDateTime] = None
    fsrs: FSRSState = Field(default_factory=FSRSState)

    @field_validator("tags", mode="before")
    @classmethod
    def collapse_tags(cls, value):
        return normalize_tags(value)

    def has_all_tags(self, required) -> bool:
        """AND semantics: every required tag must be on the card."""
        return set(required).issubset(self.tags)


class Review(BaseModel):
    """
    Immutable record of one rating event.

    Captures the scheduling outputs the review produced. May outlive its card.
    """
    id: str = Field(default_factory=new_id)
    card_id: str
    rating: Rating
    timestamp: UTCDateTime = Field(default_factory=utc_now)
    answer: str = ""
    scheduled_days: int = 0
    elapsed_days: int = 0
    state: State = State.NEW


class DueDate(BaseModel):
    """A test or deadline associated with a tag (e.g. "Biology Test")."""
    id: str = Field(default_factory=new_id)
    topic: str
    due_date: UTCDateTime
    tag: str


class FlashcardStore(BaseModel):
    """The persisted document: aggregate root of all cards and reviews."""
    cards: dict[str, Card] = Field(default_factory=dict)
    reviews: list[Review] = Field(default_factory=list)
    due_dates: list[DueDate] = Field(default_factory=list)
    last_updated: Optional[UTCDateTime] = None

    @field_validator("cards", "reviews", "due_dates", mode="before")
    @classmethod
    def null_is_empty(cls, value, info):
        # Documents written by older versions may carry explicit nulls
        if value is None:
            return {} if info.field_name == "cards" else []
        return value


# ---- Responses ----

class CardStats(BaseModel):
    """Summary counters computed on demand from the store."""
    total_cards: int = 0
    due_cards: int = 0
    reviews_today: int = 0
    retention_rate: float = 0.0


class DueDateProgressStats(BaseModel):
    """Progress for the cards behind one due-date tag."""
    total_cards: int = 0
    mastered_cards: int = 0
    progress_percent: float = 0.0
