from __future__ import annotations

from datetime import timedelta

import pytest

from gapfinder.analytics import brier_score, mastery_score

from conftest import T0, make_attempt


def history(outcomes: list[bool], confidence: int = 3, stability: float = 0.0):
    """Attempts newest first, one hour apart."""
    return [
        make_attempt(
            "item-1",
            is_correct=correct,
            confidence=confidence,
            attempted_at=T0 - timedelta(hours=i),
            stability=stability,
        )
        for i, correct in enumerate(outcomes)
    ]


def test_brier_empty_is_half():
    assert brier_score([]) == 0.5


def test_brier_perfectly_calibrated_is_zero():
    assert brier_score(history([True] * 4, confidence=5)) == 0.0


def test_brier_mean_squared_residual():
    attempts = history([True, False], confidence=3)

    assert brier_score(attempts) == pytest.approx((0.4 ** 2 + 0.6 ** 2) / 2)


def test_mastery_empty_is_zero():
    assert mastery_score([]) == 0.0


def test_mastery_all_correct_confident():
    # base 60, fully calibrated, recent blend 45
    assert mastery_score(history([True] * 5, confidence=5)) == pytest.approx(87.0)


def test_mastery_mixed_history():
    attempts = history([True] * 5 + [False] * 5, confidence=3, stability=10.0)

    base = 50.0 * 0.6 + (10.0 / 100.0) * 20.0
    calibrated = base * (0.7 + (1 - 0.26) * 0.3)
    expected = calibrated * 0.7 + 1.0 * 100.0 * 1.5 * 0.3

    assert mastery_score(attempts) == pytest.approx(expected)


def test_mastery_is_capped_at_100():
    attempts = history([True] * 5, confidence=5, stability=10_000.0)

    assert mastery_score(attempts) == 100.0


def test_mastery_non_decreasing_in_accuracy():
    scores = []
    for correct in range(0, 11):
        outcomes = [True] * correct + [False] * (10 - correct)
        scores.append(mastery_score(history(outcomes, confidence=3, stability=5.0)))

    assert scores == sorted(scores)


def test_mastery_weights_recent_attempts():
    recent_good = history([True] * 5 + [False] * 5)
    recent_bad = history([False] * 5 + [True] * 5)

    assert mastery_score(recent_good) > mastery_score(recent_bad)
