import random
import typing


class RandomWalk:

	"""
	A bounded integer random walk, similar to Max/MSP's ``drunk`` object.

	Each :meth:`step` moves the position by -1, 0 or +1. Outside the bounds the
	position either clamps to the nearest bound or, with ``wrap``, jumps to the
	opposite one. Bounds, ``wrap`` and ``position`` can be changed at any time;
	the change applies from the next step.
	"""

	def __init__ (
		self,
		min_value: int,
		max_value: int,
		wrap: bool = False,
		position: int = 0,
		rng: typing.Optional[random.Random] = None
	) -> None:

		if min_value > max_value:
			raise ValueError(f"min ({min_value}) must be <= max ({max_value})")

		self.min = min_value
		self.max = max_value
		self.wrap = wrap
		self.position = position
		self.rng = rng or random.Random()

	def step (self) -> int:

		"""Take one step and return the new position."""

		self.position += self.rng.randint(-1, 1)

		if self.wrap:
			if self.position > self.max:
				self.position = self.min
			elif self.position < self.min:
				self.position = self.max

		else:
			self.position = max(self.min, min(self.max, self.position))

		return self.position
