"""
Expiry countdown arithmetic.

Converts an epoch timestamp into a signed whole-day count relative to now
and classifies that count into the urgency levels shown on the dashboard.
"""

import math
import time
from typing import Optional

from .enums import ExpiryUrgency

SECONDS_PER_DAY = 86400

# Upper bounds (exclusive) for each urgency level, checked in order.
URGENCY_THRESHOLDS = (
    (0, ExpiryUrgency.EXPIRED),
    (7, ExpiryUrgency.CRITICAL),
    (14, ExpiryUrgency.WARNING),
    (30, ExpiryUrgency.NOTICE),
)


def days_until(epoch_seconds: Optional[float], now: Optional[float] = None) -> Optional[int]:
    """
    Whole days from ``now`` until ``epoch_seconds``, rounded up.

    A certificate expiring later today reports 0; negative values mean
    already expired. Unknown input yields None, never a number.

    Args:
        epoch_seconds: Target timestamp, or None if unknown
        now: Reference time in epoch seconds (defaults to the current time)

    Returns:
        Signed day count, or None
    """
    if epoch_seconds is None:
        return None
    if now is None:
        now = time.time()
    return math.ceil((epoch_seconds - now) / SECONDS_PER_DAY)


def classify_urgency(days: Optional[int]) -> ExpiryUrgency:
    """Map a day count onto the dashboard badge level."""
    if days is None:
        return ExpiryUrgency.UNKNOWN
    for bound, urgency in URGENCY_THRESHOLDS:
        if days < bound:
            return urgency
    return ExpiryUrgency.OK
