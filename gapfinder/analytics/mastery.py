"""
Mastery and calibration scores for a concept's attempt history.

Pure computation over attempts already annotated by the memory model.
"""

from __future__ import annotations

from typing import Final, Sequence

from gapfinder.schemas import Attempt


EMPTY_BRIER: Final[float] = 0.5   # uninformative default with no history
CONFIDENCE_SCALE: Final[float] = 5.0

# ---- Mastery policy weights ----
ACCURACY_WEIGHT: Final[float] = 0.6
STABILITY_POINTS: Final[float] = 20.0      # points contributed by avg stability of 100 days
STABILITY_NORMALIZER: Final[float] = 100.0
CALIBRATION_BASE: Final[float] = 0.7
CALIBRATION_WEIGHT: Final[float] = 0.3
RECENT_WINDOW: Final[int] = 5
RECENT_WEIGHT: Final[float] = 1.5
RECENT_BLEND: Final[float] = 0.3
HISTORY_BLEND: Final[float] = 0.7
MAX_SCORE: Final[float] = 100.0


def brier_score(attempts: Sequence[Attempt]) -> float:
    """
    Mean squared error between stated confidence and correctness.

    Formula: mean((confidence / 5 - correct) ** 2)

    Lower is better calibrated. Empty history returns 0.5.
    """
    if not attempts:
        return EMPTY_BRIER

    total = 0.0
    for attempt in attempts:
        predicted = attempt.confidence / CONFIDENCE_SCALE
        actual = 1.0 if attempt.is_correct else 0.0
        total += (predicted - actual) ** 2
    return total / len(attempts)


def accuracy(attempts: Sequence[Attempt]) -> float:
    """Fraction of correct attempts (0.0 for no attempts)."""
    if not attempts:
        return 0.0
    return sum(1 for a in attempts if a.is_correct) / len(attempts)


def mastery_score(attempts: Sequence[Attempt]) -> float:
    """
    Composite 0-100 mastery score.

    Steps:
        base       = accuracy% * 0.6 + (avg_stability / 100) * 20
        calibrated = base * (0.7 + 0.3 * max(0, 1 - brier))
        final      = calibrated * 0.7 + recent_accuracy * 100 * 1.5 * 0.3

    recent_accuracy covers the first five attempts, so the input must be
    ordered newest-first. The result is capped at 100; empty history is 0.

    This is a heuristic, not a probability.
    """
    if not attempts:
        return 0.0

    total = len(attempts)
    accuracy_pct = accuracy(attempts) * 100.0
    avg_stability = sum(a.stability for a in attempts) / total

    calibration = max(0.0, 1.0 - brier_score(attempts))

    recent = attempts[:RECENT_WINDOW]
    recent_accuracy = sum(1 for a in recent if a.is_correct) / max(len(recent), 1)

    base = accuracy_pct * ACCURACY_WEIGHT + (avg_stability / STABILITY_NORMALIZER) * STABILITY_POINTS
    calibrated = base * (CALIBRATION_BASE + calibration * CALIBRATION_WEIGHT)
    final = (
        calibrated * HISTORY_BLEND
        + recent_accuracy * 100.0 * RECENT_WEIGHT * RECENT_BLEND
    )
    return min(final, MAX_SCORE)
