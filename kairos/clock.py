"""Clock position adapter.

The audio clock itself lives outside Kairos. Everything the core needs from it
is captured in a :class:`ClockPosition` snapshot: the pulse count since the
origin, the resolution (pulses per quarter note) and the time signature.

Predicates never read a live clock. The session takes exactly one snapshot per
tick and every predicate evaluated during that tick sees the same values.
"""

import dataclasses
import logging
import typing

import kairos.constants


logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class ClockPosition:

	"""
	An immutable view of the clock at one tick.
	"""

	pulses_since_origin: int = 0
	ppqn: int = kairos.constants.DEFAULT_PPQN
	time_signature: typing.Tuple[int, int] = kairos.constants.DEFAULT_TIME_SIGNATURE

	def __post_init__ (self) -> None:

		if self.ppqn <= 0:
			raise ValueError(f"ppqn must be positive, got {self.ppqn}")

		if self.pulses_since_origin < 0:
			raise ValueError(f"pulses_since_origin cannot be negative, got {self.pulses_since_origin}")

		numerator, denominator = self.time_signature

		if numerator <= 0 or denominator <= 0:
			raise ValueError(f"Invalid time signature {numerator}/{denominator}")

	@property
	def numerator (self) -> int:
		return self.time_signature[0]

	@property
	def denominator (self) -> int:
		return self.time_signature[1]

	@property
	def pulse_in_beat (self) -> int:

		"""0-based pulse within the current beat."""

		return self.pulses_since_origin % self.ppqn

	@property
	def elapsed_beats (self) -> int:

		"""Whole beats since the origin."""

		return self.pulses_since_origin // self.ppqn

	@property
	def beat_in_bar (self) -> int:

		"""1-based beat within the current bar."""

		return self.elapsed_beats % self.numerator + 1

	@property
	def pulses_per_bar (self) -> int:
		return self.ppqn * self.numerator

	@property
	def bar (self) -> int:

		"""0-based bar count since the origin."""

		return self.pulses_since_origin // self.pulses_per_bar


class Clock:

	"""
	A minimal, manually driven clock adapter.

	The transport (or a test) calls :meth:`advance` once per pulse. A warp via
	:meth:`set_pulse` jumps the pulse count anywhere, including backwards; this
	is the only operation that may make the count decrease.

	Example:
		```python
		clock = kairos.clock.Clock(ppqn=24, time_signature=(3, 4))
		clock.set_pulse(72)
		clock.position().bar  # 1
		```
	"""

	def __init__ (
		self,
		ppqn: int = kairos.constants.DEFAULT_PPQN,
		time_signature: typing.Tuple[int, int] = kairos.constants.DEFAULT_TIME_SIGNATURE,
		pulses_since_origin: int = 0
	) -> None:

		# Validate through a throwaway snapshot so bad values fail here, not mid-tick.
		ClockPosition(pulses_since_origin, ppqn, tuple(time_signature))  # type: ignore[arg-type]

		self.ppqn = ppqn
		self.time_signature: typing.Tuple[int, int] = (int(time_signature[0]), int(time_signature[1]))
		self.pulses_since_origin = pulses_since_origin

	def position (self) -> ClockPosition:

		"""Return a snapshot of the current position."""

		return ClockPosition(self.pulses_since_origin, self.ppqn, self.time_signature)

	def advance (self, pulses: int = 1) -> int:

		"""Move forward by ``pulses`` and return the new pulse count."""

		if pulses < 0:
			raise ValueError("The clock only moves forward; use set_pulse() to warp")

		self.pulses_since_origin += pulses

		return self.pulses_since_origin

	def set_pulse (self, pulse: int) -> None:

		"""Warp the clock to an absolute pulse count."""

		if pulse < 0:
			raise ValueError(f"Cannot warp to a negative pulse ({pulse})")

		logger.info(f"Clock warped from pulse {self.pulses_since_origin} to {pulse}")
		self.pulses_since_origin = pulse

	def set_time_signature (self, numerator: int, denominator: int) -> None:

		"""Change the time signature; takes effect from the next snapshot."""

		if numerator <= 0 or denominator <= 0:
			raise ValueError(f"Invalid time signature {numerator}/{denominator}")

		self.time_signature = (numerator, denominator)
		logger.info(f"Time signature set to {numerator}/{denominator}")
