"""
Scheduler - Continuous Memory Model Logic

Pure state machine over (review_state, stability, difficulty). No database
calls and no clock reads.

Main workflow:
1. Caller loads the latest prior attempt (or None for a new item)
2. Caller supplies elapsed days since that attempt and a rating
3. schedule() returns the new memory state
4. apply_memory_update() writes it onto the draft attempt
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from gapfinder.fsrs import memory_state
from gapfinder.fsrs.constants import FSRSParameters, Rating
from gapfinder.schemas import Attempt, ReviewState


DEFAULT_PARAMETERS = FSRSParameters()


@dataclass(frozen=True)
class MemoryState:
    """Continuous-model fields carried from one attempt to the next."""
    review_state: ReviewState = ReviewState.NEW
    stability: float = 0.0
    difficulty: float = 0.0

    @classmethod
    def from_attempt(cls, attempt: Optional[Attempt]) -> MemoryState:
        if attempt is None:
            return cls()
        return cls(
            review_state=attempt.review_state,
            stability=attempt.stability,
            difficulty=attempt.difficulty,
        )


@dataclass(frozen=True)
class MemoryUpdate:
    """Output of one scheduling step."""
    difficulty: float
    stability: float
    scheduled_days: int
    review_state: ReviewState


def rating_from_response(is_correct: bool, confidence: int) -> Rating:
    """
    Map a graded response onto a rating.

    Incorrect answers are AGAIN; correct answers use the stated confidence
    clipped to HARD..EASY.
    """
    if not is_correct:
        return Rating.AGAIN
    return Rating(max(int(Rating.HARD), min(int(Rating.EASY), confidence)))


def schedule(
    state: MemoryState,
    elapsed_days: int,
    rating: int,
    params: FSRSParameters = DEFAULT_PARAMETERS
) -> MemoryUpdate:
    """
    Advance the memory model by one review.

    Transitions:
    - New -> Learning (AGAIN) or Review
    - Learning/Relearning -> Review (rating > AGAIN) or Relearning
    - Review -> Relearning (AGAIN) or Review

    Args:
        state: Memory state from the latest prior attempt
        elapsed_days: Days since the latest prior attempt
        rating: Rating 1-4
        params: Model weights

    Returns:
        MemoryUpdate with the new difficulty, stability, interval and state
    """
    if state.review_state == ReviewState.NEW:
        difficulty = memory_state.init_difficulty(params, rating)
        stability = memory_state.init_stability(params, rating)
        review_state = ReviewState.LEARNING if rating == Rating.AGAIN else ReviewState.REVIEW

    elif state.review_state in (ReviewState.LEARNING, ReviewState.RELEARNING):
        difficulty = memory_state.next_difficulty(params, state.difficulty, rating)
        stability = memory_state.short_term_stability(params, state.stability, rating)
        review_state = ReviewState.REVIEW if rating > Rating.AGAIN else ReviewState.RELEARNING

    else:
        r = memory_state.forgetting_curve(elapsed_days, state.stability)
        difficulty = memory_state.next_difficulty(params, state.difficulty, rating)
        # Growth uses the difficulty from before this review
        stability = memory_state.next_recall_stability(
            params, state.difficulty, state.stability, r, rating
        )
        review_state = ReviewState.RELEARNING if rating == Rating.AGAIN else ReviewState.REVIEW

    return MemoryUpdate(
        difficulty=difficulty,
        stability=stability,
        scheduled_days=memory_state.next_interval(params, stability),
        review_state=review_state,
    )


def apply_memory_update(
    draft: Attempt,
    prior: Optional[Attempt],
    params: FSRSParameters = DEFAULT_PARAMETERS
) -> Attempt:
    """
    Schedule a draft attempt with the continuous model.

    The draft's `elapsed_days` must already be set by the caller. The prior
    attempt is read, never modified.

    Returns:
        A copy of the draft with difficulty, stability, scheduled_days and
        review_state filled in
    """
    rating = rating_from_response(draft.is_correct, draft.confidence)
    update = schedule(
        MemoryState.from_attempt(prior),
        draft.elapsed_days,
        rating,
        params,
    )
    return draft.model_copy(update={
        "difficulty": update.difficulty,
        "stability": update.stability,
        "scheduled_days": update.scheduled_days,
        "review_state": update.review_state,
    })
