"""Rate Regulator - keep a process within a target amount of work per period.

This package provides tools for:
- Tracking processed work against a regulated rate
- Reporting whether a process is over or under its rate
- Computing how long to wait before processing more work
- Building regulators from relative periods such as "+1 hour"
"""

__version__ = "1.0.0"
__author__ = "Rate Regulator Team"
__email__ = "rate-regulator@example.com"

from .factory import PeriodFromStringBuilder, create_from_string
from .regulator import RateRegulator
from .relative_time import ParseError, parse_relative_time, resolve_relative_time
from .types import Clock, system_clock

__all__ = [
    "RateRegulator",
    "PeriodFromStringBuilder",
    "create_from_string",
    "ParseError",
    "parse_relative_time",
    "resolve_relative_time",
    "Clock",
    "system_clock",
]
