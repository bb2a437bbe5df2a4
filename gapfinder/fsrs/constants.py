"""
FSRS Constants and Parameters

All configurable parameters for the continuous memory model in one place.
The weights are fixed configuration, not fitted from review history.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


# ---- Ratings ----

class Rating(IntEnum):
    """Graded outcome of a retrieval attempt."""
    AGAIN = 1   # Incorrect answer
    HARD = 2    # Correct, low confidence
    GOOD = 3    # Correct, moderate confidence
    EASY = 4    # Correct, high confidence


# ---- Global Constants ----

S_FLOOR = 0.1            # Minimum initial stability (days)
D_MIN = 1.0              # Minimum difficulty
D_MAX = 10.0             # Maximum difficulty
R_FLOOR = 0.01           # Minimum retrievability returned by the forgetting curve
CURVE_FACTOR = 9.0       # Hyperbolic forgetting curve: R = (1 + t / (9 * S)) ** -1


# ---- Default Weights ----
# w[0..3]  initial stability per rating
# w[4..5]  initial difficulty anchor and slope
# w[6]     difficulty step per rating
# w[7]     mean-reversion weight toward w[4]
# w[8..10] recall stability growth (stability, difficulty, retrievability terms)
# w[11]    short-term stability step
# w[15]    hard penalty
# w[16]    easy bonus, also the interval divisor

DEFAULT_WEIGHTS: tuple[float, ...] = (
    0.4, 0.6, 2.4, 5.8,
    4.93, 0.94,
    0.86,
    0.01,
    1.49, 0.14, 0.94,
    2.18,
    0.05, 0.34, 1.26,
    0.29,
    2.61,
)

DEFAULT_REQUEST_RETENTION = 0.9
DEFAULT_MAXIMUM_INTERVAL = 36500


@dataclass(frozen=True)
class FSRSParameters:
    """Weights and targets for the memory model."""
    w: tuple[float, ...] = DEFAULT_WEIGHTS
    request_retention: float = DEFAULT_REQUEST_RETENTION
    maximum_interval: int = DEFAULT_MAXIMUM_INTERVAL

    def __post_init__(self):
        if len(self.w) != 17:
            raise ValueError(f"FSRS expects 17 weights, got {len(self.w)}")
        if not 0.0 < self.request_retention < 1.0:
            raise ValueError("request_retention must be between 0 and 1")
        if self.maximum_interval < 1:
            raise ValueError("maximum_interval must be at least 1 day")
