"""Convenience constructors for :class:`RateRegulator`."""
from __future__ import annotations

import logging
from typing import Optional

from rate_regulator.regulator import RateRegulator
from rate_regulator.relative_time import resolve_relative_time
from rate_regulator.types import Clock, Timestamp, system_clock


logger = logging.getLogger(__name__)


class PeriodFromStringBuilder:
    """Build regulators whose period is given as a relative time string."""

    def __init__(self) -> None:
        raise TypeError("PeriodFromStringBuilder is not meant to be instantiated")

    @staticmethod
    def create_from_relative_time(
        amount: float,
        expression: str,
        start: Optional[Timestamp] = None,
        count: Optional[float] = None,
        *,
        clock: Clock = system_clock,
    ) -> RateRegulator:
        """Create a regulator processing ``amount`` units per relative period.

        ``expression`` (for example ``"+1 hour"``) is resolved against
        ``start`` and the difference between the two becomes the period
        length, so ``"+1 hour"`` yields a period of 3600 seconds.

        Parameters
        ----------
        amount: float
            Quantity to process in a period.
        expression: str
            Relative time expression understood by
            :func:`rate_regulator.relative_time.parse_relative_time`.
        start: float or None
            Starting timestamp in epoch seconds. Defaults to ``clock()``.
        count: float or None
            Quantity already processed. Defaults to zero.

        Raises
        ------
        ParseError
            If ``expression`` cannot be resolved.
        """
        if start is None:
            start = clock()
        period = float(resolve_relative_time(expression, start)) - start
        logger.info(
            "Regulating %s units per %r (%.3f seconds)", amount, expression, period
        )
        return RateRegulator(amount, period, start, count, clock=clock)


def create_from_string(
    amount: float,
    expression: str,
    start: Optional[Timestamp] = None,
    count: Optional[float] = None,
    *,
    clock: Clock = system_clock,
) -> RateRegulator:
    """Shortcut for :meth:`PeriodFromStringBuilder.create_from_relative_time`."""
    return PeriodFromStringBuilder.create_from_relative_time(
        amount, expression, start, count, clock=clock
    )
