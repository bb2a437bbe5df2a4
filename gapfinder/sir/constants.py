"""
Retrieval-phase policy tables.

Interval windows and thresholds for the discrete phase model. These are
tunable policy, not derived from data.
"""

from __future__ import annotations

from datetime import timedelta
from enum import Enum
from typing import Final

from gapfinder.schemas import SirPhase


class Transition(str, Enum):
    """Direction an item moves through the phases after an attempt."""
    ADVANCE = "advance"
    HOLD = "hold"
    REGRESS = "regress"


# ---- Interval windows (lower, upper) per phase ----

PHASE_INTERVALS: Final[dict[SirPhase, tuple[timedelta, timedelta]]] = {
    SirPhase.ENCODING: (timedelta(hours=1), timedelta(hours=1)),
    SirPhase.SHORT_TERM_RETRIEVAL: (timedelta(days=1), timedelta(days=2)),
    SirPhase.INTERLEAVED_RETRIEVAL: (timedelta(days=3), timedelta(days=5)),
    SirPhase.MEDIUM_SPACING: (timedelta(days=7), timedelta(days=10)),
    SirPhase.INTEGRATION_TRANSFER: (timedelta(days=14), timedelta(days=21)),
}


# ---- Minimum time since first encoding before a phase can be entered ----
# Measured from the first attempt on the item.

PHASE_MIN_AGE: Final[dict[SirPhase, timedelta]] = {
    SirPhase.ENCODING: timedelta(0),
    SirPhase.SHORT_TERM_RETRIEVAL: timedelta(0),
    SirPhase.INTERLEAVED_RETRIEVAL: timedelta(days=1),
    SirPhase.MEDIUM_SPACING: timedelta(days=3),
    SirPhase.INTEGRATION_TRANSFER: timedelta(days=7),
}


# ---- Response thresholds ----

LOW_CONFIDENCE_MAX: Final[int] = 2   # confidence at or below this regresses
CONFIDENT_MIN: Final[int] = 4        # confidence at or above this may advance
TOP_CONFIDENCE: Final[int] = 5       # uses the upper end of the interval window

REGRESSION_INTERVAL_FACTOR: Final[float] = 0.5
