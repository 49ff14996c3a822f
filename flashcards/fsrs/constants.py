"""
FSRS Constants and Parameters

All configurable parameters for the memory model in one place.
Values are the FSRS v4 defaults.
"""

from datetime import timedelta


# ---- Forgetting Curve ----

DECAY = -0.5
FACTOR = 19.0 / 81.0  # Makes R(t=S) == 0.9


# ---- Global Constants ----

REQUEST_RETENTION = 0.90   # Target recall probability when a card comes due
MAXIMUM_INTERVAL = 36500   # Cap on any scheduled interval (days)
S_MIN = 0.1                # Minimum stability (days)
D_MIN = 1.0                # Minimum difficulty
D_MAX = 10.0               # Maximum difficulty


# ---- Model Weights ----
# w[0..3]   initial stability per rating
# w[4..7]   difficulty init, step and mean reversion
# w[8..10]  stability gain on successful recall
# w[11..14] stability after a lapse
# w[15..16] hard penalty, easy bonus

DEFAULT_WEIGHTS = (
    0.4, 0.6, 2.4, 5.8,
    4.93, 0.94, 0.86, 0.01,
    1.49, 0.14, 0.94,
    2.18, 0.05, 0.34, 1.26,
    0.29, 2.61,
)


# ---- Short-Term Steps ----
# Fixed delays used while a card is still being learned.

NEW_AGAIN_DELAY = timedelta(minutes=1)
NEW_HARD_DELAY = timedelta(minutes=5)
NEW_GOOD_DELAY = timedelta(minutes=10)

STEP_AGAIN_DELAY = timedelta(minutes=5)   # Learning / Relearning / lapse
STEP_HARD_DELAY = timedelta(minutes=10)   # Learning / Relearning
