"""
Analytics package exports.
"""

from gapfinder.analytics.mastery import accuracy, brier_score, mastery_score
from gapfinder.analytics.metrics import (
    attempts_to_df,
    calibration_curve,
    compute_trend,
    daily_accuracy,
    performance_trends,
)
from gapfinder.analytics.service import (
    build_concept_mastery,
    build_concept_report,
    concept_attempts,
)

__all__ = [
    "accuracy",
    "brier_score",
    "mastery_score",
    "attempts_to_df",
    "calibration_curve",
    "compute_trend",
    "daily_accuracy",
    "performance_trends",
    "build_concept_mastery",
    "build_concept_report",
    "concept_attempts",
]
