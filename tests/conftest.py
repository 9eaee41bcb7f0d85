import typing

import pytest

import kairos.clock
import kairos.session


class FakeTime:

	"""Manually advanced time source for cache expiry tests."""

	def __init__ (self, start: float = 1000.0) -> None:

		self.now = start

	def __call__ (self) -> float:

		return self.now

	def advance (self, seconds: float) -> None:

		"""Move time forward by ``seconds``."""

		self.now += seconds


def at (pulses: int, ppqn: int = 24, time_signature: typing.Tuple[int, int] = (4, 4)) -> kairos.clock.ClockPosition:

	"""Build a clock snapshot at the given pulse."""

	return kairos.clock.ClockPosition(pulses, ppqn, time_signature)


@pytest.fixture
def fake_time () -> FakeTime:

	"""A time source that only moves when told to."""

	return FakeTime()


@pytest.fixture
def session (fake_time: FakeTime) -> kairos.session.Session:

	"""A session at pulse 0 with a controllable cache clock."""

	return kairos.session.Session(time_source=fake_time)


def run_ticks (session: kairos.session.Session, count: int) -> typing.List[bool]:

	"""Evaluate and advance the clock ``count`` times, returning each result."""

	results = []

	for _ in range(count):
		results.append(session.tick())
		session.clock.advance()

	return results
