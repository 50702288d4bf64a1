"""Rate regulation of a process against a target amount per period."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from rate_regulator.types import Clock, Seconds, Status, Timestamp, system_clock


logger = logging.getLogger(__name__)


def _divide(numerator: float, denominator: float) -> float:
    """Divide with IEEE-754 semantics: ``x / 0`` is ``±inf`` and ``0 / 0`` is ``nan``."""
    with np.errstate(divide="ignore", invalid="ignore"):
        return float(np.divide(np.float64(numerator), np.float64(denominator)))


@dataclass
class RateRegulator:
    """Regulate a process to ``amount`` units of work per ``period`` seconds.

    As work is processed the caller records it with :meth:`add_quantity`.
    :meth:`is_over` and :meth:`is_under` report whether the regulator is
    currently above or below its regulated rate, and :meth:`get_wait_time`
    returns the number of seconds the caller should wait before processing
    more work. The regulator never sleeps itself.

    Parameters
    ----------
    amount: float
        Quantity to process within a period.
    period: float
        Length of a period in seconds.
    start: float or None
        Starting timestamp in epoch seconds. Defaults to ``clock()``.
    count: float or None
        Quantity processed so far. Defaults to zero.
    clock: callable
        Zero-argument callable returning the current epoch time.
    """

    amount: float
    period: Seconds
    start: Optional[Timestamp] = None
    count: Optional[float] = 0.0
    clock: Clock = field(default=system_clock, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.set_amount(self.amount)
        self.set_period(self.period)
        self.set_start(self.start)
        self.set_count(self.count)

    def get_amount(self) -> float:
        return self.amount

    def set_amount(self, amount: float) -> None:
        self.amount = float(amount)

    def get_period(self) -> Seconds:
        return self.period

    def set_period(self, period: Seconds) -> None:
        self.period = float(period)
        if self.period <= 0:
            logger.warning(
                "Non-positive regulation period %s; regulated rate will be degenerate",
                self.period,
            )

    def get_start(self) -> Timestamp:
        return self.start

    def set_start(self, start: Optional[Timestamp] = None) -> None:
        """Set the starting time, defaulting to the current clock time."""
        if start is None:
            start = self.clock()
        self.start = float(start)

    def get_count(self) -> float:
        return self.count

    def set_count(self, count: Optional[float] = None) -> None:
        self.count = float(count if count is not None else 0)

    def increment_quantity(self) -> None:
        self.add_quantity(1)

    def add_quantity(self, amount: float) -> None:
        """Record the quantity processed.

        The stored count is replaced by ``amount`` rather than increased by
        it, so callers pass their cumulative total.
        """
        self.count = float(amount)
        logger.debug("Regulator count set to %s", self.count)

    def get_runtime(self, now: Optional[Timestamp] = None) -> Seconds:
        """Return seconds elapsed since ``start``; negative if ``now`` precedes it."""
        if now is None:
            now = self.clock()
        return now - self.start

    def get_regulated_rate(self) -> float:
        """Return the allowed number of units per second."""
        return _divide(self.amount, self.period)

    def get_actual_rate(self, now: Optional[Timestamp] = None) -> float:
        """Return ``amount`` over the time the regulator has been running."""
        return _divide(self.amount, self.get_runtime(now))

    def is_over(self, now: Optional[Timestamp] = None) -> bool:
        return self.get_actual_rate(now) > self.get_regulated_rate()

    def is_under(self, now: Optional[Timestamp] = None) -> bool:
        return not self.is_over(now)

    def get_wait_time(self, amount: float, now: Optional[Timestamp] = None) -> Seconds:
        """Return seconds to wait before processing ``amount`` more units.

        A negative result means no wait is needed; callers clamp to zero
        before sleeping.
        """
        # current count plus the additional amount, scaled by the regulated
        # rate, minus the time already run
        return (self.count + amount) * self.get_regulated_rate() - self.get_runtime(now)

    def status(self, now: Optional[Timestamp] = None) -> Status:
        """Return a snapshot of the regulator metrics at a single instant."""
        if now is None:
            now = self.clock()
        return {
            "count": self.count,
            "runtime": self.get_runtime(now),
            "regulated_rate": self.get_regulated_rate(),
            "actual_rate": self.get_actual_rate(now),
            "over": self.is_over(now),
            "wait_time": self.get_wait_time(1, now),
        }
