"""Clock-relative temporal predicates.

Every function here takes the current :class:`~kairos.clock.ClockPosition` as
its first argument and answers "does this fire now?". Nothing is remembered
between calls, so a predicate gives the same answer however many times the
program is re-evaluated during a tick.

Arguments documented as ``Numbers`` accept a scalar or a list. A list means
"any of these" (logical OR).

Malformed arguments such as a zero or negative period never raise. They make
the predicate return ``False`` so that a typo during a performance silences a
line instead of stopping the clock.
"""

import logging
import math
import typing

import kairos.clock
import kairos.rhythm


logger = logging.getLogger(__name__)

Number = typing.Union[int, float]
Numbers = typing.Union[Number, typing.Sequence[Number]]

T = typing.TypeVar("T")


def _as_list (values: Numbers) -> typing.List[Number]:

	"""Normalise a scalar-or-list argument to a list."""

	if isinstance(values, (list, tuple)):
		return list(values)

	return [values]  # type: ignore[list-item]


def _on_period (pulses: int, period: int, offset: int) -> bool:

	if period <= 0:
		logger.debug(f"Ignoring non-positive period {period}")
		return False

	return (pulses - offset) % period == 0


def beat (position: kairos.clock.ClockPosition, n: Numbers = 1, nudge: Number = 0) -> bool:

	"""
	True on every ``n`` beats.

	Parameters:
		n: Beat interval(s). Fractions are allowed (``0.5`` fires on eighths).
		nudge: Shift the grid later by this many beats.

	Example:
		```python
		if beat([1, 1.5]):
			...
		```
	"""

	offset = math.floor(nudge * position.ppqn)

	return any(
		_on_period(position.pulses_since_origin, math.floor(value * position.ppqn), offset)
		for value in _as_list(n)
	)


def bar (position: kairos.clock.ClockPosition, n: Numbers = 1, nudge: Number = 0) -> bool:

	"""True on every ``n`` bars, where a bar lasts ``denominator * ppqn`` pulses."""

	bar_length = position.denominator * position.ppqn
	offset = math.floor(nudge * bar_length)

	return any(
		_on_period(position.pulses_since_origin, math.floor(value * bar_length), offset)
		for value in _as_list(n)
	)


def pulse (position: kairos.clock.ClockPosition, n: Numbers = 1, nudge: int = 0) -> bool:

	"""True on every ``n`` pulses."""

	return any(
		_on_period(position.pulses_since_origin, int(value), nudge)
		for value in _as_list(n)
	)


def tick (position: kairos.clock.ClockPosition, n: Numbers, offset: int = 0) -> bool:

	"""True when the 0-based pulse within the beat equals ``n + offset``."""

	return any(position.pulse_in_beat == value + offset for value in _as_list(n))


def oncount (position: kairos.clock.ClockPosition, beats: Numbers, count: Number) -> bool:

	"""
	True on the given 1-based beat positions of a repeating ``count``-beat window.

	Positions may be fractional: ``oncount([1, 2.5], 3)`` fires on the first
	beat and half way through the second beat of every three beats.
	"""

	window = math.floor(position.ppqn * count)

	if window <= 0:
		logger.debug(f"Ignoring non-positive oncount window {count}")
		return False

	meter_position = position.pulses_since_origin % window

	for b in _as_list(beats):
		b = 0 if b < 1 else b - 1
		if meter_position == math.ceil(b * position.ppqn):
			return True

	return False


def onbeat (position: kairos.clock.ClockPosition, *beats: Number) -> bool:

	"""
	True on the given beats of the bar.

	Beats are 1-based and may be fractional: ``onbeat(1, 2.5)`` fires on the
	downbeat and on the "and" of two. Values wrap at the time signature
	numerator, so in 4/4 ``onbeat(5)`` is the same as ``onbeat(1)`` and
	``onbeat(0)`` is the same as ``onbeat(4)``.
	"""

	numerator = position.numerator
	ppqn = position.ppqn
	current_pulse = position.pulse_in_beat + 1

	for b in beats:

		reduced = b % numerator
		# Beat 0 of the bar is the last beat of the previous one.
		integral = math.floor(reduced) or numerator
		offset = round((reduced - integral) * ppqn) + 1

		if offset <= 0:
			offset += ppqn * numerator

		if integral == position.beat_in_bar and offset == current_pulse:
			return True

	return False


def onbar (position: kairos.clock.ClockPosition, bars: Numbers, n: typing.Optional[int] = None) -> bool:

	"""
	True during the given 1-based bars of an ``n``-bar cycle.

	``n`` defaults to the time signature numerator.
	"""

	if n is None:
		n = position.numerator

	if n <= 0:
		logger.debug(f"Ignoring non-positive onbar cycle {n}")
		return False

	current = position.bar % n + 1

	return any(value == current for value in _as_list(bars))


def modbar (position: kairos.clock.ClockPosition, n: Numbers) -> bool:

	"""True during every ``n``-th bar."""

	return any(value > 0 and position.bar % value == 0 for value in _as_list(n))


def flip (position: kairos.clock.ClockPosition, chunk: Number, ratio: Number = 50) -> bool:

	"""
	Alternate between True and False over a ``2 * chunk``-beat window.

	``ratio`` is the percentage of the window spent True.
	"""

	window = math.floor(chunk * 2 * position.ppqn)

	if window <= 0:
		logger.debug(f"Ignoring non-positive flip chunk {chunk}")
		return False

	threshold = math.floor((ratio / 100) * window)

	return position.pulses_since_origin % window < threshold


def flipbar (position: kairos.clock.ClockPosition, chunk: int = 1) -> bool:

	"""True for ``chunk`` bars, then False for ``chunk`` bars."""

	if chunk <= 0:
		logger.debug(f"Ignoring non-positive flipbar chunk {chunk}")
		return False

	return (position.bar // chunk) % 2 == 0


def oneuclid (position: kairos.clock.ClockPosition, pulses: int, length: int, rotate: int = 0) -> bool:

	"""True on the beats of a Euclidean rhythm spread over ``length`` beats."""

	cycle = kairos.rhythm.euclidean_cycle(pulses, length, rotate)
	positions = kairos.rhythm.hit_positions(cycle)

	if not positions:
		return False

	return oncount(position, positions, length)


def rhythm (position: kairos.clock.ClockPosition, div: Number, pulses: int, length: int, rotate: int = 0) -> bool:

	"""
	True on every ``div`` beats where the Euclidean cycle has a hit.

	Steps through the cycle once per ``div`` beats.
	"""

	if div <= 0 or not beat(position, div):
		return False

	step = math.floor(position.pulses_since_origin / (div * position.ppqn))

	return kairos.rhythm.euclid(step, pulses, length, rotate)


def binrhythm (position: kairos.clock.ClockPosition, div: Number = 1, n: int = 34) -> bool:

	"""Like :func:`rhythm`, using the binary digits of ``n`` as the cycle."""

	if div <= 0 or not beat(position, div):
		return False

	step = math.floor(position.pulses_since_origin / (div * position.ppqn))

	return kairos.rhythm.binary_rhythm(step, n)


def seqbeat (position: kairos.clock.ClockPosition, *values: T) -> typing.Optional[T]:

	"""Pick one of ``values`` by the current beat of the bar."""

	if not values:
		return None

	return values[position.beat_in_bar % len(values)]


def seqbar (position: kairos.clock.ClockPosition, *values: T) -> typing.Optional[T]:

	"""Pick one of ``values`` by the current bar."""

	if not values:
		return None

	return values[position.bar % len(values)]


def seqpulse (position: kairos.clock.ClockPosition, *values: T) -> typing.Optional[T]:

	"""Pick one of ``values`` by the current pulse of the beat."""

	if not values:
		return None

	return values[position.pulse_in_beat % len(values)]
