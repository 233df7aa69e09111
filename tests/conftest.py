import pytest


class FakeClock:
    """Deterministic clock, advanced by hand"""
    def __init__(self, start: float):
        self.start = start
        self._now = start

    def now(self) -> float:
        return self._now

    def tick(self, seconds: float) -> None:
        self._now += seconds


@pytest.fixture
def t0():
    return 1_700_000_000.0


@pytest.fixture
def clock(t0):
    return FakeClock(t0)
