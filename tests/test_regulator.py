import logging
import math

import pytest

from rate_regulator.regulator import RateRegulator


def test_defaults_use_clock_and_zero_count(clock, t0):
    regulator = RateRegulator(1000, 3600, clock=clock)
    assert regulator.get_start() == t0
    assert regulator.get_count() == 0
    assert isinstance(regulator.get_amount(), float)
    assert isinstance(regulator.get_period(), float)


def test_none_count_resolves_to_zero(clock, t0):
    regulator = RateRegulator(1000, 3600, t0, None, clock=clock)
    assert regulator.get_count() == 0


def test_regulated_rate():
    regulator = RateRegulator(1000, 3600, start=0)
    assert regulator.get_regulated_rate() == pytest.approx(1000 / 3600)


def test_runtime_uses_explicit_now_and_clock(clock, t0):
    regulator = RateRegulator(1000, 3600, start=t0, clock=clock)
    assert regulator.get_runtime(t0 + 42.5) == pytest.approx(42.5)
    clock.advance(10)
    assert regulator.get_runtime() == pytest.approx(10)


def test_runtime_can_be_negative(t0):
    regulator = RateRegulator(1000, 3600, start=t0)
    assert regulator.get_runtime(t0 - 5) == pytest.approx(-5)


def test_over_at_half_period(t0):
    regulator = RateRegulator(1000, 3600, start=t0, count=0)
    now = t0 + 1800
    assert regulator.get_regulated_rate() == pytest.approx(0.2778, abs=1e-4)
    assert regulator.get_actual_rate(now) == pytest.approx(0.5556, abs=1e-4)
    assert regulator.is_over(now) is True
    assert regulator.is_under(now) is False


def test_under_after_two_periods(t0):
    regulator = RateRegulator(1000, 3600, start=t0, count=0)
    now = t0 + 7200
    assert regulator.get_actual_rate(now) == pytest.approx(1000 / 7200)
    assert regulator.is_over(now) is False
    assert regulator.is_under(now) is True


@pytest.mark.parametrize("offset", [-10, 0.5, 1800, 3600, 3601, 1e6])
def test_is_over_is_negation_of_is_under(t0, offset):
    regulator = RateRegulator(1000, 3600, start=t0)
    assert regulator.is_over(t0 + offset) == (not regulator.is_under(t0 + offset))


def test_actual_rate_ignores_processed_count(t0):
    regulator = RateRegulator(1000, 3600, start=t0)
    before = regulator.get_actual_rate(t0 + 100)
    regulator.add_quantity(500)
    assert regulator.get_actual_rate(t0 + 100) == before


def test_add_quantity_overwrites_count(t0):
    regulator = RateRegulator(1000, 3600, start=t0, count=10)
    regulator.add_quantity(5)
    assert regulator.get_count() == 5
    regulator.add_quantity(7)
    assert regulator.get_count() == 7


def test_increment_quantity_sets_count_to_one(t0):
    regulator = RateRegulator(1000, 3600, start=t0, count=42)
    regulator.increment_quantity()
    assert regulator.get_count() == 1


def test_wait_time_negative_when_behind(t0):
    regulator = RateRegulator(1000, 3600, start=t0, count=50)
    wait = regulator.get_wait_time(1, t0 + 100)
    assert wait == pytest.approx((50 + 1) * (1000 / 3600) - 100)
    assert wait == pytest.approx(-85.83, abs=0.01)
    assert wait < 0


def test_wait_time_matches_formula(clock, t0):
    regulator = RateRegulator(10, 60, start=t0, count=3, clock=clock)
    clock.advance(0.25)
    expected = (3 + 2) * regulator.get_regulated_rate() - regulator.get_runtime()
    assert regulator.get_wait_time(2) == pytest.approx(expected)
    assert regulator.get_wait_time(2) > 0


def test_zero_period_gives_infinite_rate(caplog, t0):
    with caplog.at_level(logging.WARNING):
        regulator = RateRegulator(1000, 0, start=t0)
    assert math.isinf(regulator.get_regulated_rate())
    assert regulator.get_regulated_rate() > 0
    assert any("Non-positive regulation period" in r.message for r in caplog.records)


def test_zero_amount_and_period_gives_nan(t0):
    regulator = RateRegulator(0, 0, start=t0)
    assert math.isnan(regulator.get_regulated_rate())


def test_zero_runtime_gives_infinite_actual_rate(t0):
    regulator = RateRegulator(1000, 3600, start=t0)
    assert regulator.get_actual_rate(t0) == math.inf
    assert regulator.is_over(t0) is True


def test_negative_period_gives_negative_rate(t0):
    regulator = RateRegulator(1000, -3600, start=t0)
    assert regulator.get_regulated_rate() == pytest.approx(-1000 / 3600)


def test_setters_store_values(clock, t0):
    regulator = RateRegulator(1, 1, start=0, clock=clock)
    regulator.set_amount(20)
    regulator.set_period(40)
    regulator.set_start(t0 - 10)
    regulator.set_count(3)
    assert regulator.get_amount() == 20
    assert regulator.get_period() == 40
    assert regulator.get_start() == t0 - 10
    assert regulator.get_count() == 3
    assert regulator.get_regulated_rate() == pytest.approx(0.5)


def test_setters_reset_on_none(clock, t0):
    regulator = RateRegulator(1000, 3600, start=0, count=9, clock=clock)
    clock.advance(30)
    regulator.set_start(None)
    regulator.set_count(None)
    assert regulator.get_start() == t0 + 30
    assert regulator.get_count() == 0


def test_status_snapshot(clock, t0):
    regulator = RateRegulator(1000, 3600, start=t0, count=50, clock=clock)
    clock.advance(100)
    status = regulator.status()
    assert status["runtime"] == pytest.approx(100)
    assert status["count"] == 50
    assert status["regulated_rate"] == pytest.approx(1000 / 3600)
    assert status["actual_rate"] == pytest.approx(10)
    assert status["over"] is True
    assert status["wait_time"] == pytest.approx(51 * 1000 / 3600 - 100)


def test_clock_not_part_of_equality(t0):
    a = RateRegulator(1, 2, start=t0, clock=lambda: 1.0)
    b = RateRegulator(1, 2, start=t0, clock=lambda: 2.0)
    assert a == b
