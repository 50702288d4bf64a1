import pytest


T0 = 1_700_000_000.0


class FakeClock:
    """Deterministic clock that only moves when told to."""

    def __init__(self, now=T0):
        self.now = float(now)

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds
        return self.now


@pytest.fixture
def t0():
    return T0


@pytest.fixture
def clock():
    return FakeClock()
