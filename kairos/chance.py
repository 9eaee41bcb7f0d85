import random
import typing

T = typing.TypeVar("T")


def prob (rng: random.Random, percent: float) -> bool:

	"""True with the given probability, expressed as a percentage (0-100)."""

	return rng.random() * 100 < percent


def toss (rng: random.Random) -> bool:

	"""A fair coin."""

	return rng.random() > 0.5


def almost_never (rng: random.Random) -> bool:
	return rng.random() > 0.9


def rarely (rng: random.Random) -> bool:
	return rng.random() > 0.75


def sometimes (rng: random.Random) -> bool:
	return rng.random() > 0.5


def often (rng: random.Random) -> bool:
	return rng.random() > 0.25


def almost_always (rng: random.Random) -> bool:
	return rng.random() > 0.1


def dice (rng: random.Random, sides: int) -> int:

	"""Roll a die with ``sides`` faces, returning 1 to ``sides``."""

	if sides <= 0:
		raise ValueError(f"A die needs at least one side, got {sides}")

	return rng.randint(1, sides)


def rand (rng: random.Random, low: float, high: float) -> float:

	"""A float in ``[low, high)``."""

	return rng.random() * (high - low) + low


def rand_int (rng: random.Random, low: int, high: int) -> int:

	"""An integer in ``[low, high]``."""

	return rng.randint(low, high)


def pick (rng: random.Random, *values: T) -> typing.Optional[T]:

	"""One of ``values`` at random, or None when there are none."""

	if not values:
		return None

	return rng.choice(values)


def quantize (value: float, quantization: typing.Sequence[float]) -> float:

	"""
	Snap ``value`` to the nearest member of ``quantization``.

	Ties go to the earliest member. An empty ``quantization`` returns
	``value`` unchanged.

	Example:
		```python
		quantize(61, [60, 63, 67])  # 60
		```
	"""

	if not quantization:
		return value

	closest = quantization[0]

	for q in quantization:
		if abs(q - value) < abs(closest - value):
			closest = q

	return closest


def clamp (value: float, low: float, high: float) -> float:

	"""Limit ``value`` to ``[low, high]``."""

	return min(max(value, low), high)
