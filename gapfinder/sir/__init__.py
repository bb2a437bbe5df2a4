"""
SIR - discrete retrieval-phase scheduler.

Owns the phase progression and the authoritative due-ness predicate.
"""

from gapfinder.sir.constants import (
    CONFIDENT_MIN,
    LOW_CONFIDENCE_MAX,
    PHASE_INTERVALS,
    PHASE_MIN_AGE,
    REGRESSION_INTERVAL_FACTOR,
    TOP_CONFIDENCE,
    Transition,
)
from gapfinder.sir.scheduler import (
    PHASES,
    PhaseUpdate,
    advance,
    decide_transition,
    interval_for_phase,
    is_due,
    phase_order,
    schedule_phase,
)


__all__ = [
    "advance",
    "decide_transition",
    "interval_for_phase",
    "is_due",
    "phase_order",
    "schedule_phase",
    "PhaseUpdate",
    "PHASES",
    "Transition",
    "PHASE_INTERVALS",
    "PHASE_MIN_AGE",
    "LOW_CONFIDENCE_MAX",
    "CONFIDENT_MIN",
    "REGRESSION_INTERVAL_FACTOR",
    "TOP_CONFIDENCE",
]
