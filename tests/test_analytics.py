from __future__ import annotations

from datetime import timedelta

import pandas as pd
import pytest

from gapfinder.analytics import (
    build_concept_mastery,
    calibration_curve,
    compute_trend,
    concept_attempts,
    daily_accuracy,
    performance_trends,
)
from gapfinder.schemas import Concept, ExamSession, StudySession

from conftest import T0, make_attempt, make_item


def test_trend_needs_more_than_five_attempts():
    attempts = [make_attempt("a", is_correct=True) for _ in range(5)]

    assert compute_trend(attempts) == "stable"


def test_trend_improving_and_declining():
    improving = [make_attempt("a", is_correct=i < 5) for i in range(10)]
    declining = [make_attempt("a", is_correct=i >= 5) for i in range(10)]

    assert compute_trend(improving) == "improving"
    assert compute_trend(declining) == "declining"


def test_calibration_curve_groups_by_confidence():
    attempts = [
        make_attempt("a", is_correct=True, confidence=5),
        make_attempt("a", is_correct=False, confidence=5),
        make_attempt("b", is_correct=False, confidence=1),
    ]

    curve = calibration_curve(attempts)

    assert [b.confidence for b in curve] == [1, 5]
    assert curve[0].accuracy == 0.0
    assert curve[1].accuracy == pytest.approx(0.5)
    assert curve[1].count == 2


def test_calibration_curve_empty():
    assert calibration_curve([]) == []


def test_daily_accuracy_fills_missing_days():
    attempts = [
        make_attempt("a", is_correct=True, attempted_at=T0),
        make_attempt("a", is_correct=False, attempted_at=T0 + timedelta(days=2)),
    ]

    series = daily_accuracy(attempts)

    assert len(series) == 3
    assert series.iloc[0] == 1.0
    assert pd.isna(series.iloc[1])
    assert series.iloc[2] == 0.0


def test_performance_trends_only_completed_oldest_first():
    sessions = [
        StudySession(started_at=T0 + timedelta(days=1), completed_at=T0 + timedelta(days=1, hours=1),
                     completed_items=8, accuracy=0.75, average_confidence=3.5),
        StudySession(started_at=T0, completed_at=T0 + timedelta(hours=1),
                     completed_items=4, accuracy=0.5, average_confidence=2.0,
                     session_type=ExamSession(time_limit_ms=60_000)),
        StudySession(started_at=T0 + timedelta(days=2)),
    ]

    trends = performance_trends(sessions)

    assert [t.items_completed for t in trends] == [4, 8]
    assert trends[1].accuracy == 0.75


def test_concept_attempts_union_across_items():
    concept = Concept(name="Renal")
    other = Concept(name="Cardio")
    shared = make_item([concept.id, other.id])
    only_renal = make_item([concept.id])

    older = make_attempt(shared.id, attempted_at=T0)
    newer = make_attempt(only_renal.id, attempted_at=T0 + timedelta(days=1))

    attempts = concept_attempts(
        concept,
        [shared, only_renal],
        {shared.id: [older], only_renal.id: [newer]},
    )

    assert attempts == [newer, older]


def test_build_concept_mastery_reports():
    studied = Concept(name="Renal")
    untouched = Concept(name="Cardio")
    item = make_item([studied.id])
    attempts = [
        make_attempt(item.id, is_correct=True, confidence=4, attempted_at=T0 + timedelta(days=1), stability=6.0),
        make_attempt(item.id, is_correct=False, confidence=2, attempted_at=T0, stability=2.0),
    ]

    reports = build_concept_mastery([studied, untouched], [item], {item.id: attempts})

    renal, cardio = reports
    assert renal.attempts == 2
    assert renal.correct == 1
    assert renal.avg_confidence == pytest.approx(3.0)
    assert renal.stability == pytest.approx(4.0)
    assert renal.last_attempted == T0 + timedelta(days=1)
    assert renal.mastery_score > 0
    assert cardio.attempts == 0
    assert cardio.mastery_score == 0.0
    assert cardio.brier_score == 0.5
    assert cardio.last_attempted is None
