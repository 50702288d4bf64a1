"""Parsing of relative time expressions such as ``"+1 hour"`` or ``"2 days ago"``."""
from __future__ import annotations

import logging
import math
import re
from datetime import datetime, timezone
from typing import Dict

from dateutil.relativedelta import relativedelta

from rate_regulator.types import Timestamp


logger = logging.getLogger(__name__)

# unit name -> (relativedelta field, multiplier)
UNITS: Dict[str, tuple] = {
    "sec": ("seconds", 1),
    "secs": ("seconds", 1),
    "second": ("seconds", 1),
    "seconds": ("seconds", 1),
    "min": ("minutes", 1),
    "mins": ("minutes", 1),
    "minute": ("minutes", 1),
    "minutes": ("minutes", 1),
    "hour": ("hours", 1),
    "hours": ("hours", 1),
    "day": ("days", 1),
    "days": ("days", 1),
    "week": ("days", 7),
    "weeks": ("days", 7),
    "fortnight": ("days", 14),
    "fortnights": ("days", 14),
    "month": ("months", 1),
    "months": ("months", 1),
    "year": ("years", 1),
    "years": ("years", 1),
}

_CALENDAR_FIELDS = {"months", "years"}

_TERM = re.compile(
    r"\s*(?:"
    r"(?P<sign>[+-])?\s*(?P<number>\d+(?:\.\d+)?)\s*(?P<unit>[a-z]+)"
    r"|(?P<relative>next|last)\s+(?P<relative_unit>[a-z]+)"
    r"|(?P<word>now|ago)"
    r")\s*"
)


class ParseError(ValueError):
    """Raised when a relative time expression cannot be resolved."""

    def __init__(self, expression: str, reason: str) -> None:
        self.expression = expression
        self.reason = reason
        super().__init__(f"Cannot parse relative time {expression!r}: {reason}")


def _unit_field(expression: str, unit: str) -> tuple:
    try:
        return UNITS[unit]
    except KeyError:
        raise ParseError(expression, f"unknown unit {unit!r}") from None


def parse_relative_time(expression: str) -> relativedelta:
    """Return the offset described by ``expression``.

    Terms may be chained (``"+1 hour 30 minutes"``); unsigned counts are
    positive, ``next``/``last`` mean one unit forward/back, and a trailing
    ``ago`` negates everything before it. ``"now"`` is a zero offset.
    """
    text = (expression or "").strip().lower()
    if not text:
        raise ParseError(expression, "empty expression")

    offsets: Dict[str, float] = {}
    pos = 0
    seen_ago = False
    while pos < len(text):
        match = _TERM.match(text, pos)
        if match is None or match.end() == pos:
            raise ParseError(expression, f"unexpected input at {text[pos:]!r}")
        pos = match.end()
        if seen_ago:
            raise ParseError(expression, "'ago' must be the last term")

        if match.group("word") == "ago":
            if not offsets:
                raise ParseError(expression, "'ago' without a preceding term")
            offsets = {name: -value for name, value in offsets.items()}
            seen_ago = True
            continue
        if match.group("word") == "now":
            continue

        if match.group("relative"):
            name, factor = _unit_field(expression, match.group("relative_unit"))
            count = 1.0 if match.group("relative") == "next" else -1.0
        else:
            name, factor = _unit_field(expression, match.group("unit"))
            count = float(match.group("number"))
            if match.group("sign") == "-":
                count = -count
        value = count * factor
        if not math.isfinite(value):
            raise ParseError(expression, f"count for {name} is out of range")
        if name in _CALENDAR_FIELDS and value != int(value):
            raise ParseError(expression, f"fractional {name} are ambiguous")
        offsets[name] = offsets.get(name, 0) + value

    fields = {
        name: int(value) if value == int(value) else value
        for name, value in offsets.items()
    }
    try:
        return relativedelta(**fields)
    except (OverflowError, ValueError) as e:
        raise ParseError(expression, str(e)) from e


def resolve_relative_time(expression: str, base: Timestamp) -> float:
    """Return the epoch timestamp ``expression`` points to, relative to ``base``.

    ``base`` is truncated to a whole second and the calendar arithmetic is
    done in UTC.
    """
    delta = parse_relative_time(expression)
    origin = datetime.fromtimestamp(int(base), tz=timezone.utc)
    try:
        resolved = (origin + delta).timestamp()
    except (OverflowError, ValueError) as e:
        raise ParseError(expression, str(e)) from e
    logger.debug("Resolved %r from %s to %s", expression, int(base), resolved)
    return resolved
