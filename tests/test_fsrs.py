from __future__ import annotations

import math

import pytest

from gapfinder import fsrs
from gapfinder.fsrs import memory_state
from gapfinder.fsrs.constants import D_MAX, D_MIN, S_FLOOR, FSRSParameters, Rating
from gapfinder.fsrs.scheduler import DEFAULT_PARAMETERS, MemoryState
from gapfinder.schemas import Attempt, ReviewState

from conftest import T0, make_attempt


W = DEFAULT_PARAMETERS.w
ALL_RATINGS = [Rating.AGAIN, Rating.HARD, Rating.GOOD, Rating.EASY]


@pytest.mark.parametrize("rating", ALL_RATINGS)
def test_new_item_stays_in_bounds(rating):
    update = fsrs.schedule(MemoryState(), elapsed_days=0, rating=rating)

    assert D_MIN <= update.difficulty <= D_MAX
    assert update.stability >= S_FLOOR
    assert 1 <= update.scheduled_days <= DEFAULT_PARAMETERS.maximum_interval


def test_new_item_good_uses_initial_weights():
    update = fsrs.schedule(MemoryState(), elapsed_days=0, rating=Rating.GOOD)

    assert update.difficulty == pytest.approx(4.93)
    assert update.stability == pytest.approx(2.4)
    assert update.review_state == ReviewState.REVIEW


def test_new_item_again_goes_to_learning():
    update = fsrs.schedule(MemoryState(), elapsed_days=0, rating=Rating.AGAIN)

    assert update.difficulty == pytest.approx(4.93 + 2 * 0.94)
    assert update.stability == pytest.approx(0.4)
    assert update.review_state == ReviewState.LEARNING


def test_learning_good_graduates_to_review():
    state = MemoryState(ReviewState.LEARNING, stability=0.4, difficulty=6.81)
    update = fsrs.schedule(state, elapsed_days=0, rating=Rating.GOOD)

    expected_d = W[7] * W[4] + (1 - W[7]) * 6.81
    assert update.difficulty == pytest.approx(expected_d)
    assert update.stability == pytest.approx(0.4 * (1 + W[11]))
    assert update.review_state == ReviewState.REVIEW


def test_relearning_again_stays_relearning_with_positive_stability():
    state = MemoryState(ReviewState.RELEARNING, stability=3.0, difficulty=7.0)
    update = fsrs.schedule(state, elapsed_days=2, rating=Rating.AGAIN)

    assert update.review_state == ReviewState.RELEARNING
    assert update.stability >= S_FLOOR


def test_review_growth_uses_prior_difficulty():
    state = MemoryState(ReviewState.REVIEW, stability=2.4, difficulty=4.93)
    update = fsrs.schedule(state, elapsed_days=0, rating=Rating.GOOD)

    growth = 1 + math.exp(-2.4) * W[8] + (11 - 4.93) * W[9] + 1.0 * W[10]
    assert update.stability == pytest.approx(2.4 * growth)
    assert update.review_state == ReviewState.REVIEW


def test_review_again_lapses_to_relearning():
    state = MemoryState(ReviewState.REVIEW, stability=10.0, difficulty=5.0)
    update = fsrs.schedule(state, elapsed_days=10, rating=Rating.AGAIN)

    assert update.review_state == ReviewState.RELEARNING
    assert update.difficulty > 5.0


def test_review_hard_and_easy_modifiers():
    state = MemoryState(ReviewState.REVIEW, stability=10.0, difficulty=5.0)
    good = fsrs.schedule(state, 3, Rating.GOOD).stability
    hard = fsrs.schedule(state, 3, Rating.HARD).stability
    easy = fsrs.schedule(state, 3, Rating.EASY).stability

    assert hard == pytest.approx(good * W[15])
    assert easy == pytest.approx(good * W[16])


def test_review_hard_scores_below_again():
    # Hard penalty applies only to HARD, so it falls below an unmodified AGAIN
    state = MemoryState(ReviewState.REVIEW, stability=10.0, difficulty=5.0)
    again, hard, good, easy = [fsrs.schedule(state, 3, r).stability for r in ALL_RATINGS]

    assert hard < again
    assert again == pytest.approx(good)
    assert good < easy


@pytest.mark.parametrize("state", [
    MemoryState(),
    MemoryState(ReviewState.LEARNING, stability=1.5, difficulty=5.0),
    MemoryState(ReviewState.RELEARNING, stability=0.8, difficulty=8.0),
])
def test_stability_non_decreasing_in_rating(state):
    stabilities = [fsrs.schedule(state, 0, rating).stability for rating in ALL_RATINGS]

    assert stabilities == sorted(stabilities)


def test_schedule_is_deterministic():
    state = MemoryState(ReviewState.REVIEW, stability=17.3, difficulty=6.2)

    first = fsrs.schedule(state, 11, Rating.HARD)
    second = fsrs.schedule(state, 11, Rating.HARD)

    assert first == second


@pytest.mark.parametrize("stability", [0.0, 0.1, 2.4, 1e3, 1e9, float("inf"), float("nan")])
def test_next_interval_is_clamped(stability):
    days = memory_state.next_interval(DEFAULT_PARAMETERS, stability)

    assert 1 <= days <= DEFAULT_PARAMETERS.maximum_interval


def test_next_interval_floor_at_half_retention():
    params = FSRSParameters(request_retention=0.5, maximum_interval=30)

    # retention 0.5 -> ln(0.5)/ln(0.5) - 1 == 0, so any stability rounds down to the floor
    assert memory_state.next_interval(params, 500.0) == 1


def test_forgetting_curve_floor_and_identity():
    assert memory_state.forgetting_curve(0, 5.0) == 1.0
    assert memory_state.forgetting_curve(10_000_000, 0.1) == pytest.approx(0.01)
    assert memory_state.forgetting_curve(9, 1.0) == pytest.approx(0.5)


def test_retrievability_tolerates_unscheduled_items():
    assert fsrs.retrievability(0.0, 5) == 1.0
    assert fsrs.retrievability(3.0, 0) == 1.0
    assert fsrs.retrievability(3.0, 27) == pytest.approx(0.5)


@pytest.mark.parametrize("is_correct, confidence, expected", [
    (False, 5, Rating.AGAIN),
    (True, 1, Rating.HARD),
    (True, 2, Rating.HARD),
    (True, 3, Rating.GOOD),
    (True, 4, Rating.EASY),
    (True, 5, Rating.EASY),
])
def test_rating_from_response(is_correct, confidence, expected):
    assert fsrs.rating_from_response(is_correct, confidence) == expected


def test_apply_memory_update_reads_prior_without_mutating():
    prior = make_attempt("item-1", stability=5.0, difficulty=5.0, review_state=ReviewState.REVIEW)
    draft = Attempt.new("item-1", "answer", True, 3, 1000, attempted_at=T0)
    draft = draft.model_copy(update={"elapsed_days": 4})

    scheduled = fsrs.apply_memory_update(draft, prior)

    assert scheduled.review_state == ReviewState.REVIEW
    assert scheduled.stability > prior.stability
    assert scheduled.scheduled_days >= 1
    assert prior.stability == 5.0
    assert draft.review_state == ReviewState.NEW


def test_apply_memory_update_first_attempt_starts_new():
    draft = Attempt.new("item-1", "answer", False, 4, 1000, attempted_at=T0)

    scheduled = fsrs.apply_memory_update(draft, None)

    assert scheduled.review_state == ReviewState.LEARNING
    assert scheduled.stability == pytest.approx(W[0])


def test_parameters_reject_wrong_weight_count():
    with pytest.raises(ValueError):
        FSRSParameters(w=(1.0, 2.0))

    with pytest.raises(ValueError):
        FSRSParameters(request_retention=1.5)
