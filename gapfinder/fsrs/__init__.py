"""
FSRS - continuous memory model

Stability/difficulty forgetting-curve engine used to annotate every attempt.

Quick start:
    from gapfinder import fsrs

    update = fsrs.schedule(fsrs.MemoryState(), elapsed_days=0, rating=fsrs.Rating.GOOD)
    attempt = fsrs.apply_memory_update(draft, prior_attempt)
"""

from gapfinder.fsrs.constants import (
    D_MAX,
    D_MIN,
    DEFAULT_MAXIMUM_INTERVAL,
    DEFAULT_REQUEST_RETENTION,
    DEFAULT_WEIGHTS,
    S_FLOOR,
    FSRSParameters,
    Rating,
)
from gapfinder.fsrs.memory_state import (
    forgetting_curve,
    next_interval,
    retrievability,
)
from gapfinder.fsrs.scheduler import (
    MemoryState,
    MemoryUpdate,
    apply_memory_update,
    rating_from_response,
    schedule,
)


__all__ = [
    # Core algorithm
    "schedule",
    "apply_memory_update",
    "rating_from_response",
    "MemoryState",
    "MemoryUpdate",

    # Curves
    "forgetting_curve",
    "next_interval",
    "retrievability",

    # Parameters
    "FSRSParameters",
    "Rating",
    "DEFAULT_WEIGHTS",
    "DEFAULT_REQUEST_RETENTION",
    "DEFAULT_MAXIMUM_INTERVAL",
    "S_FLOOR",
    "D_MIN",
    "D_MAX",
]
