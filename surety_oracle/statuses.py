# surety_oracle/statuses.py
"""
Flight status codes reported by the simulated oracles.

The labels follow the FlightSuretyApp contract constants. They are only
used for logging; the contract decides what a code means.
"""

import random

STATUS_CODES = (0, 10, 20, 30, 40, 50)

STATUS_LABELS = {
    0: "UNKNOWN",
    10: "ON_TIME",
    20: "LATE_AIRLINE",
    30: "LATE_WEATHER",
    40: "LATE_TECHNICAL",
    50: "LATE_OTHER",
}


def random_status_code(rng=None) -> int:
    """Pick one code uniformly. randint covers the closed range [0, len - 1]."""
    rng = rng or random
    pos = rng.randint(0, len(STATUS_CODES) - 1)
    return STATUS_CODES[pos]


def status_label(code) -> str:
    return STATUS_LABELS.get(code, f"CODE_{code}")
