"""
Memory State - Stability, Difficulty and Retrievability

Pure formulas for the continuous memory model.

Key concepts:
- Stability (S): days until recall probability decays to the target retention
- Difficulty (D): how hard the item is for this learner (1-10 scale)
- Retrievability (R): probability of successful recall after t days

Nothing in here reads the clock; callers supply elapsed time.
"""

from __future__ import annotations

import math

from gapfinder.fsrs.constants import (
    CURVE_FACTOR,
    D_MAX,
    D_MIN,
    R_FLOOR,
    S_FLOOR,
    FSRSParameters,
)


def forgetting_curve(elapsed_days: int, stability: float) -> float:
    """
    Calculate retrievability using the hyperbolic forgetting curve.

    Formula: R = (1 + t / (9 * S)) ** -1, floored at 0.01

    Args:
        elapsed_days: Days since the previous attempt
        stability: Current stability in days

    Returns:
        Retrievability between 0.01 and 1
    """
    return max((1.0 + elapsed_days / (CURVE_FACTOR * stability)) ** -1.0, R_FLOOR)


def retrievability(stability: float, elapsed_days: float) -> float:
    """
    Retrievability for analytics, tolerant of unscheduled (zero) stability.

    Returns 1.0 when no time has passed or the item was never scheduled.
    """
    if elapsed_days <= 0 or stability <= 0:
        return 1.0
    return forgetting_curve(elapsed_days, stability)


def constrain_difficulty(difficulty: float) -> float:
    """Clip difficulty to [1, 10]."""
    return max(D_MIN, min(D_MAX, difficulty))


def mean_reversion(params: FSRSParameters, init: float, current: float) -> float:
    """Pull difficulty toward the global anchor: w7 * init + (1 - w7) * current."""
    w = params.w
    return w[7] * init + (1.0 - w[7]) * current


def init_stability(params: FSRSParameters, rating: int) -> float:
    """Initial stability is a per-rating constant, floored at 0.1 days."""
    return max(params.w[rating - 1], S_FLOOR)


def init_difficulty(params: FSRSParameters, rating: int) -> float:
    """
    Initial difficulty for a first attempt.

    Formula: D0 = clip(w4 - w5 * (rating - 3))
    """
    w = params.w
    return constrain_difficulty(w[4] - w[5] * (rating - 3))


def next_difficulty(params: FSRSParameters, difficulty: float, rating: int) -> float:
    """
    Update difficulty after a review.

    Formula:
        D' = clip(mean_reversion(w4, D - w6 * (rating - 3)))

    Ratings above GOOD lower difficulty, AGAIN and HARD raise it, and every
    update drifts slightly back toward w4 so difficulty cannot run away.
    """
    w = params.w
    next_d = difficulty - w[6] * (rating - 3)
    return constrain_difficulty(mean_reversion(params, w[4], next_d))


def short_term_stability(params: FSRSParameters, stability: float, rating: int) -> float:
    """
    Stability update while learning or relearning.

    Formula: S' = max(S * (1 + w11 * (rating - 2)), 0.1)
    No retrievability term; AGAIN shrinks, HARD holds, GOOD/EASY grow.
    """
    # w11 > 1 would push AGAIN below zero; stability must stay positive
    return max(stability * (1.0 + params.w[11] * (rating - 2)), S_FLOOR)


def next_recall_stability(
    params: FSRSParameters,
    difficulty: float,
    stability: float,
    retrievability_value: float,
    rating: int
) -> float:
    """
    Stability update for an item in the Review state.

    Formula:
        S' = S * (1 + exp(-S) * w8 + (11 - D) * w9 + R * w10) * penalty * bonus

    Where:
        - penalty = w15 when rating is HARD, else 1
        - bonus = w16 when rating is EASY, else 1

    Args:
        params: Model weights
        difficulty: Difficulty before this review
        stability: Stability before this review
        retrievability_value: Output of the forgetting curve
        rating: Rating 1-4

    Returns:
        New stability value
    """
    w = params.w
    hard_penalty = w[15] if rating == 2 else 1.0
    easy_bonus = w[16] if rating == 4 else 1.0

    growth = (
        1.0
        + math.exp(-stability) * w[8]
        + (11.0 - difficulty) * w[9]
        + retrievability_value * w[10]
    )
    return stability * growth * hard_penalty * easy_bonus


def _round_half_away(value: float) -> int:
    if value >= 0:
        return int(math.floor(value + 0.5))
    return int(math.ceil(value - 0.5))


def next_interval(params: FSRSParameters, stability: float) -> int:
    """
    Recommended interval in days for a given stability.

    Formula:
        I = round(S / w16 * (ln(retention) / ln(0.5) - 1)), clipped to [1, maximum_interval]
    """
    factor = math.log(params.request_retention) / math.log(0.5) - 1.0
    raw = stability / params.w[16] * factor

    # Clamp before converting so non-finite stabilities still land in range
    if math.isnan(raw) or raw < 1.0:
        return 1
    if raw > params.maximum_interval:
        return params.maximum_interval
    return max(1, min(params.maximum_interval, _round_half_away(raw)))
