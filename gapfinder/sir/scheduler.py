"""
Phase Scheduler - Discrete Retrieval-Phase Logic

Moves an item through five ordered phases:

    Encoding -> ShortTermRetrieval -> InterleavedRetrieval
             -> MediumSpacing -> IntegrationTransfer

A correct, confident, unflagged answer advances one phase; an incorrect or
low-confidence answer, or a "needs review" / "felt confusing" self-report,
regresses one phase and shortens the interval. The next review date is the
attempt time plus the interval for the new phase.

is_due() on the latest attempt is the due-ness predicate the planner uses.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from gapfinder.schemas import Attempt, MetacognitiveReflection, SirPhase
from gapfinder.sir.constants import (
    CONFIDENT_MIN,
    LOW_CONFIDENCE_MAX,
    PHASE_INTERVALS,
    PHASE_MIN_AGE,
    REGRESSION_INTERVAL_FACTOR,
    TOP_CONFIDENCE,
    Transition,
)


PHASES: tuple[SirPhase, ...] = tuple(SirPhase)


@dataclass(frozen=True)
class PhaseUpdate:
    """Output of one phase step."""
    phase: SirPhase
    interval: timedelta
    transition: Transition


def phase_order(phase: object) -> int:
    """Index of a phase in the progression; unknown values rank as Encoding."""
    return SirPhase.parse(phase).order


def decide_transition(
    is_correct: bool,
    confidence: int,
    metacognitive: Optional[MetacognitiveReflection] = None
) -> Transition:
    """
    Classify a response as advance, hold or regress.

    Rules (first match wins):
    1. Incorrect, confidence <= 2, or flagged needs_review / felt_confusing -> REGRESS
    2. Correct with confidence >= 4 and not felt_uncertain -> ADVANCE
    3. Anything else (e.g. correct at confidence 3) -> HOLD
    """
    flagged = metacognitive is not None and (
        metacognitive.needs_review or metacognitive.felt_confusing
    )
    if not is_correct or confidence <= LOW_CONFIDENCE_MAX or flagged:
        return Transition.REGRESS

    uncertain = metacognitive is not None and metacognitive.felt_uncertain
    if confidence >= CONFIDENT_MIN and not uncertain:
        return Transition.ADVANCE

    return Transition.HOLD


def interval_for_phase(
    phase: SirPhase,
    confidence: int,
    transition: Transition
) -> timedelta:
    """
    Interval until the next review for a phase.

    Regressions use half of the window's lower bound; top-confidence
    answers use the upper bound; everything else the lower bound.
    """
    lower, upper = PHASE_INTERVALS[phase]
    if transition == Transition.REGRESS:
        return lower * REGRESSION_INTERVAL_FACTOR
    if confidence >= TOP_CONFIDENCE:
        return upper
    return lower


def advance(
    prior_phase: Optional[SirPhase],
    is_correct: bool,
    confidence: int,
    metacognitive: Optional[MetacognitiveReflection],
    time_since_encoding: timedelta
) -> PhaseUpdate:
    """
    Compute the next phase and interval.

    Args:
        prior_phase: Phase of the latest prior attempt (None for a new item)
        is_correct: Whether the answer was correct
        confidence: Stated confidence 1-5
        metacognitive: Optional self-report
        time_since_encoding: Time since the item's first attempt

    Returns:
        PhaseUpdate with the new phase, interval and transition taken
    """
    current = SirPhase.parse(prior_phase)
    index = current.order
    transition = decide_transition(is_correct, confidence, metacognitive)

    if transition == Transition.ADVANCE:
        target = PHASES[min(index + 1, len(PHASES) - 1)]
        if time_since_encoding < PHASE_MIN_AGE[target]:
            # Too soon after first exposure to space further out
            target = current
            transition = Transition.HOLD
    elif transition == Transition.REGRESS:
        target = PHASES[max(index - 1, 0)]
    else:
        target = current

    return PhaseUpdate(
        phase=target,
        interval=interval_for_phase(target, confidence, transition),
        transition=transition,
    )


def schedule_phase(
    draft: Attempt,
    prior: Optional[Attempt],
    first_attempted_at: Optional[datetime] = None
) -> Attempt:
    """
    Schedule a draft attempt with the phase model.

    Args:
        draft: Unscheduled attempt (uses its metacognitive report)
        prior: Latest prior attempt on the same item, or None
        first_attempted_at: Time of the item's first attempt (defaults to the draft's time)

    Returns:
        A copy of the draft with sir_phase and next_review_date filled in
    """
    encoded_at = first_attempted_at or draft.attempted_at
    time_since_encoding = max(draft.attempted_at - encoded_at, timedelta(0))

    update = advance(
        prior.sir_phase if prior is not None else None,
        draft.is_correct,
        draft.confidence,
        draft.metacognitive,
        time_since_encoding,
    )
    return draft.model_copy(update={
        "sir_phase": update.phase,
        "next_review_date": draft.attempted_at + update.interval,
    })


def is_due(attempt: Attempt, now: Optional[datetime] = None) -> bool:
    """True when the current time has reached the attempt's next review date."""
    if now is None:
        now = datetime.now(timezone.utc)
    return now >= attempt.next_review_date
