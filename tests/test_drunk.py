import random

import pytest

import kairos.drunk


def test_step_moves_at_most_one () -> None:

	"""Every step changes the position by -1, 0 or +1."""

	walk = kairos.drunk.RandomWalk(-100, 100, rng=random.Random(1))
	previous = walk.position

	for _ in range(500):
		current = walk.step()
		assert abs(current - previous) <= 1
		previous = current


def test_clamps_to_bounds () -> None:

	"""Without wrap the position never leaves [min, max]."""

	walk = kairos.drunk.RandomWalk(0, 2, rng=random.Random(7))

	for _ in range(500):
		assert 0 <= walk.step() <= 2


def test_wraps_to_opposite_bound () -> None:

	"""With wrap, stepping past a bound jumps to the other one."""

	class Up:

		def randint (self, low: int, high: int) -> int:
			return 1

	walk = kairos.drunk.RandomWalk(0, 3, wrap=True, position=3, rng=Up())  # type: ignore[arg-type]

	assert walk.step() == 0
	assert walk.step() == 1


def test_clamp_at_upper_bound () -> None:

	"""Without wrap, stepping past the upper bound stays on it."""

	class Up:

		def randint (self, low: int, high: int) -> int:
			return 1

	walk = kairos.drunk.RandomWalk(0, 3, position=3, rng=Up())  # type: ignore[arg-type]

	assert walk.step() == 3


def test_seeded_walks_repeat () -> None:

	"""The same seed produces the same walk."""

	a = kairos.drunk.RandomWalk(-10, 10, rng=random.Random(42))
	b = kairos.drunk.RandomWalk(-10, 10, rng=random.Random(42))

	assert [a.step() for _ in range(50)] == [b.step() for _ in range(50)]


def test_rejects_inverted_bounds () -> None:

	"""min above max is a configuration error."""

	with pytest.raises(ValueError):
		kairos.drunk.RandomWalk(5, 1)
