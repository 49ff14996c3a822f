"""
Scheduler - Memory Model

Pure scheduling and state updates (no storage calls).

Main workflow:
1. Caller passes the card's current memory state, a rating and "now"
2. Work out elapsed days and retrievability
3. Apply the update rules for the card's lifecycle state
4. Return the new memory state (new state, due, S, D, bookkeeping)

Storage I/O is handled by the caller. Any MemoryModel subclass can stand
in for FSRSMemoryModel.
"""

from __future__ import annotations
from datetime import datetime, timedelta
from abc import ABC, abstractmethod
from typing import Optional, Sequence

from flashcards.fsrs import memory_state, updates
from flashcards.fsrs.constants import (
    DEFAULT_WEIGHTS,
    MAXIMUM_INTERVAL,
    NEW_AGAIN_DELAY,
    NEW_GOOD_DELAY,
    NEW_HARD_DELAY,
    REQUEST_RETENTION,
    STEP_AGAIN_DELAY,
    STEP_HARD_DELAY,
)
from flashcards.schemas import FSRSState, Rating, State


class MemoryModel(ABC):
    """
    Contract for a pluggable spaced-repetition algorithm.

    Must be deterministic, must schedule every rating strictly after `now`,
    and the resulting interval must grow with the rating.
    """

    @abstractmethod
    def schedule(self, memory: FSRSState, rating: Rating, now: datetime) -> FSRSState:
        ...


class FSRSMemoryModel(MemoryModel):
    """FSRS v4 with fixed short-term learning steps and no fuzz."""

    def __init__(
        self,
        weights: Optional[Sequence[float]] = None,
        request_retention: float = REQUEST_RETENTION,
        maximum_interval: int = MAXIMUM_INTERVAL
    ):
        self.weights = tuple(weights) if weights is not None else DEFAULT_WEIGHTS
        if len(self.weights) != len(DEFAULT_WEIGHTS):
            raise ValueError(
                f"expected {len(DEFAULT_WEIGHTS)} weights, got {len(self.weights)}"
            )
        self.request_retention = request_retention
        self.maximum_interval = maximum_interval

    def schedule(self, memory: FSRSState, rating: Rating, now: datetime) -> FSRSState:
        """
        Apply a single rating.

        Args:
            memory: Current memory-state block (not modified)
            rating: Learner's rating
            now: Review timestamp

        Returns:
            New memory-state block
        """
        return self.repeat(memory, now)[Rating(rating)]

    def repeat(self, memory: FSRSState, now: datetime) -> dict[Rating, FSRSState]:
        """
        Compute the outcome of every possible rating at once.

        Useful for showing the learner what each button would do.
        """
        if memory.state == State.NEW:
            return self._from_new(memory, now)

        elapsed = memory_state.elapsed_whole_days(memory.last_review, now)
        if memory.state in (State.LEARNING, State.RELEARNING):
            return self._from_learning(memory, now, elapsed)
        return self._from_review(memory, now, elapsed)

    # ---- Per-state rules ----

    def _from_new(self, memory: FSRSState, now: datetime) -> dict[Rating, FSRSState]:
        w = self.weights
        out = {}
        for rating, state, delay in (
            (Rating.AGAIN, State.LEARNING, NEW_AGAIN_DELAY),
            (Rating.HARD, State.LEARNING, NEW_HARD_DELAY),
            (Rating.GOOD, State.LEARNING, NEW_GOOD_DELAY),
        ):
            out[rating] = self._outcome(
                memory, now, 0,
                state=state,
                due=now + delay,
                scheduled_days=0,
                stability=updates.init_stability(w, rating),
                difficulty=updates.init_difficulty(w, rating),
            )

        easy_stability = updates.init_stability(w, Rating.EASY)
        easy_interval = self._interval(easy_stability)
        out[Rating.EASY] = self._outcome(
            memory, now, 0,
            state=State.REVIEW,
            due=now + timedelta(days=easy_interval),
            scheduled_days=easy_interval,
            stability=easy_stability,
            difficulty=updates.init_difficulty(w, Rating.EASY),
        )
        return out

    def _from_learning(
        self,
        memory: FSRSState,
        now: datetime,
        elapsed: int
    ) -> dict[Rating, FSRSState]:
        # S and D are left alone until the card graduates
        good_interval = self._interval(memory.stability)
        easy_interval = good_interval + 1
        keep = dict(stability=memory.stability, difficulty=memory.difficulty)

        return {
            Rating.AGAIN: self._outcome(
                memory, now, elapsed, state=memory.state,
                due=now + STEP_AGAIN_DELAY, scheduled_days=0, **keep),
            Rating.HARD: self._outcome(
                memory, now, elapsed, state=memory.state,
                due=now + STEP_HARD_DELAY, scheduled_days=0, **keep),
            Rating.GOOD: self._outcome(
                memory, now, elapsed, state=State.REVIEW,
                due=now + timedelta(days=good_interval),
                scheduled_days=good_interval, **keep),
            Rating.EASY: self._outcome(
                memory, now, elapsed, state=State.REVIEW,
                due=now + timedelta(days=easy_interval),
                scheduled_days=easy_interval, **keep),
        }

    def _from_review(
        self,
        memory: FSRSState,
        now: datetime,
        elapsed: int
    ) -> dict[Rating, FSRSState]:
        w = self.weights
        retrievability = memory_state.calculate_retrievability(elapsed, memory.stability)

        difficulty = {r: updates.next_difficulty(w, memory.difficulty, r) for r in Rating}
        stability = {
            Rating.AGAIN: updates.next_forget_stability(
                w, difficulty[Rating.AGAIN], memory.stability, retrievability),
        }
        for rating in (Rating.HARD, Rating.GOOD, Rating.EASY):
            stability[rating] = updates.next_recall_stability(
                w, difficulty[rating], memory.stability, retrievability, rating)

        hard_interval = self._interval(stability[Rating.HARD])
        good_interval = self._interval(stability[Rating.GOOD])
        hard_interval = min(hard_interval, good_interval)
        good_interval = max(good_interval, hard_interval + 1)
        easy_interval = max(self._interval(stability[Rating.EASY]), good_interval + 1)

        out = {
            Rating.AGAIN: self._outcome(
                memory, now, elapsed,
                state=State.RELEARNING,
                due=now + STEP_AGAIN_DELAY,
                scheduled_days=0,
                stability=stability[Rating.AGAIN],
                difficulty=difficulty[Rating.AGAIN],
                lapses=memory.lapses + 1,
            ),
        }
        for rating, interval in (
            (Rating.HARD, hard_interval),
            (Rating.GOOD, good_interval),
            (Rating.EASY, easy_interval),
        ):
            out[rating] = self._outcome(
                memory, now, elapsed,
                state=State.REVIEW,
                due=now + timedelta(days=interval),
                scheduled_days=interval,
                stability=stability[rating],
                difficulty=difficulty[rating],
            )
        return out

    # ---- Helpers ----

    def _interval(self, stability: float) -> int:
        return memory_state.next_interval(
            stability, self.request_retention, self.maximum_interval
        )

    @staticmethod
    def _outcome(
        memory: FSRSState,
        now: datetime,
        elapsed: int,
        *,
        state: State,
        due: datetime,
        scheduled_days: int,
        stability: float,
        difficulty: float,
        lapses: Optional[int] = None
    ) -> FSRSState:
        return FSRSState(
            due=due,
            stability=stability,
            difficulty=difficulty,
            elapsed_days=elapsed,
            scheduled_days=scheduled_days,
            reps=memory.reps + 1,
            lapses=memory.lapses if lapses is None else lapses,
            state=state,
            last_review=now,
        )
