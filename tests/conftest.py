import os
from datetime import datetime, timedelta, timezone

import pytest

os.environ["TEST_MODE"] = "true"

from flashcards.schemas import FSRSState, State
from flashcards.service import FlashcardService
from flashcards.storage import FileStorage

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class FixedClock:
    """Callable clock that tests can move forward."""

    def __init__(self, now=NOW):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "flashcards.json"


@pytest.fixture
def storage(store_path):
    fs = FileStorage(store_path)
    fs.load()
    return fs


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def service(storage, clock):
    return FlashcardService(storage, clock=clock)


@pytest.fixture
def make_card(storage):
    """Create a card and force its memory state."""

    def _make(*, state, due, tags=None, stability=2.0, difficulty=5.0):
        card = storage.create_card("front", "back", tags or [])
        stored = storage._store.cards[card.id]
        stored.fsrs = FSRSState(
            due=due,
            state=state,
            stability=stability if state != State.NEW else 0.0,
            difficulty=difficulty if state != State.NEW else 0.0,
            last_review=None if state == State.NEW else due - timedelta(days=1),
        )
        return storage.get_card(card.id)

    return _make
