"""
Metric computations for analytics views.
"""

from __future__ import annotations

from typing import Iterable, Sequence

import pandas as pd

from gapfinder.analytics.mastery import accuracy
from gapfinder.schemas import Attempt, CalibrationBin, PerformanceTrend, StudySession


TREND_WINDOW = 5
TREND_THRESHOLD = 10.0  # percentage points


def attempts_to_df(attempts: Iterable[Attempt]) -> pd.DataFrame:
    """
    Flatten attempts into a dataframe with a UTC day column.
    """
    rows = [
        {
            "item_id": a.item_id,
            "attempted_at": a.attempted_at,
            "is_correct": a.is_correct,
            "confidence": a.confidence,
            "stability": a.stability,
        }
        for a in attempts
    ]
    if not rows:
        return pd.DataFrame(
            columns=["item_id", "attempted_at", "is_correct", "confidence", "stability", "day_utc"]
        )

    df = pd.DataFrame(rows)
    df["attempted_at"] = pd.to_datetime(df["attempted_at"], utc=True)
    df["day_utc"] = df["attempted_at"].dt.floor("D")
    return df.sort_values("attempted_at").reset_index(drop=True)


def calibration_curve(attempts: Iterable[Attempt]) -> list[CalibrationBin]:
    """
    Observed accuracy per stated confidence level, lowest confidence first.
    """
    df = attempts_to_df(attempts)
    if df.empty:
        return []

    grouped = df.groupby("confidence")["is_correct"].agg(["mean", "count"]).sort_index()
    return [
        CalibrationBin(confidence=int(conf), accuracy=float(row["mean"]), count=int(row["count"]))
        for conf, row in grouped.iterrows()
    ]


def daily_accuracy(attempts: Iterable[Attempt]) -> pd.Series:
    """
    Accuracy per UTC day over a dense day index (days without attempts are NaN).
    """
    df = attempts_to_df(attempts)
    if df.empty:
        return pd.Series(dtype="float64")

    daily = df.groupby("day_utc")["is_correct"].mean().astype("float64")
    day_index = pd.date_range(start=daily.index.min(), end=daily.index.max(), freq="D", tz="UTC")
    return daily.reindex(day_index)


def performance_trends(sessions: Iterable[StudySession]) -> list[PerformanceTrend]:
    """
    One trend point per completed session, oldest first.
    """
    completed = sorted(
        (s for s in sessions if s.completed_at is not None),
        key=lambda s: s.started_at,
    )
    return [
        PerformanceTrend(
            date=s.started_at,
            accuracy=s.accuracy,
            items_completed=s.completed_items,
            avg_confidence=s.average_confidence,
        )
        for s in completed
    ]


def compute_trend(attempts: Sequence[Attempt]) -> str:
    """
    Compare recent accuracy with overall accuracy (newest-first input).

    Returns "improving" or "declining" when the last five attempts differ
    from the overall rate by more than ten points, else "stable".
    """
    if len(attempts) <= TREND_WINDOW:
        return "stable"

    delta = (accuracy(attempts[:TREND_WINDOW]) - accuracy(attempts)) * 100.0
    if delta > TREND_THRESHOLD:
        return "improving"
    if delta < -TREND_THRESHOLD:
        return "declining"
    return "stable"
