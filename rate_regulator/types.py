"""Shared typing aliases for the rate regulator, plus the default clock.

The aliases exist for static analysis and readability only. ``system_clock``
is the clock regulators read when none is injected.
"""

import time
from typing import Any, Callable, Dict

Timestamp = float
Seconds = float
# Zero-argument callable returning the current epoch time in fractional seconds.
Clock = Callable[[], Timestamp]
Status = Dict[str, Any]


def system_clock() -> Timestamp:
    """Return the wall-clock time used when no clock is injected."""
    return time.time()
