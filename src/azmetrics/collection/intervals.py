"""Sampling intervals supported by Azure Monitor."""

from typing import List, Tuple

from azmetrics.core.models import SupportedInterval
from azmetrics.core.utils import parse_duration_ms

INTERVAL_DISPLAYS: Tuple[str, ...] = ('1m', '5m', '15m', '30m', '1h', '6h', '12h', '1d')

SUPPORTED_INTERVALS: List[SupportedInterval] = [
    SupportedInterval(display=display, duration_ms=parse_duration_ms(display))
    for display in INTERVAL_DISPLAYS
]


def quantize(step_ms: float) -> str:
    """
    Snap a requested step to the closest supported interval.

    Nearest match, not floor or ceiling; on a tie the smaller interval wins.
    """
    closest = SUPPORTED_INTERVALS[0]
    for interval in SUPPORTED_INTERVALS[1:]:
        if abs(interval.duration_ms - step_ms) < abs(closest.duration_ms - step_ms):
            closest = interval
    return closest.display
