"""Named state that survives re-evaluation.

A live-coded program is re-run from the top on every tick, so any local
variable it creates is thrown away immediately. :class:`StateStore` keeps the
things that must persist - counters, variables, seeded random generators and
the drunk walk - addressed by a name the program supplies. The same name on
the next run finds the same state.

The store belongs to a :class:`~kairos.session.Session` and is only reset
when a new program is loaded.
"""

import dataclasses
import logging
import random
import typing

import kairos.constants
import kairos.drunk


logger = logging.getLogger(__name__)

_MISSING: typing.Any = object()

Seed = typing.Union[int, str]


def _seed_value (seed: Seed) -> str:

	"""Seeds are compared and applied as text, so ``42`` and ``"42"`` are one seed."""

	return str(seed)


@dataclasses.dataclass
class Counter:

	"""A named counter; see :meth:`StateStore.counter`."""

	value: int = 0
	step: int = 1
	limit: typing.Optional[int] = None


class StateStore:

	"""Counters, variables, seeded generators and the drunk walk for one session."""

	def __init__ (self, seed: typing.Optional[Seed] = None) -> None:

		self.counters: typing.Dict[str, Counter] = {}
		self.variables: typing.Dict[typing.Any, typing.Any] = {}
		self.local_seeds: typing.Dict[str, random.Random] = {}

		self._initial_seed = _seed_value(seed) if seed is not None else None
		self._seed: typing.Optional[str] = self._initial_seed
		self.rng = random.Random(self._seed) if self._seed is not None else random.Random()

		self.walk = kairos.drunk.RandomWalk(
			kairos.constants.DRUNK_MIN,
			kairos.constants.DRUNK_MAX,
			rng = self.rng
		)

	def counter (self, name: str, limit: typing.Optional[int] = None, step: typing.Optional[int] = None) -> int:

		"""
		Advance a named counter and return its value.

		The first call creates the counter and returns 0 without incrementing.
		Every later call adds ``step`` and returns the result. When ``limit``
		is set the counter goes back to 0 after passing it, so
		``counter("x", limit=3)`` yields 0, 1, 2, 3, 0, 1, ...

		Calling with a different ``limit`` than last time (including omitting
		it) restarts the count from 0. Passing a different ``step`` changes
		the increment; omitting ``step`` keeps the previous one.
		"""

		if name not in self.counters:
			self.counters[name] = Counter(value=0, step=step if step is not None else 1, limit=limit)
			return 0

		state = self.counters[name]

		if state.limit != limit:
			state.value = 0
			state.limit = limit

		if step is not None and state.step != step:
			state.step = step

		state.value += state.step

		if state.limit is not None and state.value > state.limit:
			state.value = 0

		return state.value

	def variable (self, name: typing.Any, value: typing.Any = _MISSING) -> typing.Any:

		"""Read a named variable, or write it when ``value`` is given."""

		if value is _MISSING:
			return self.variables.get(name)

		self.variables[name] = value

		return value

	def delete_variable (self, name: typing.Any) -> None:

		"""Remove one variable. Unknown names are ignored."""

		self.variables.pop(name, None)

	def clear_variables (self) -> None:

		"""Remove every variable."""

		self.variables.clear()

	def seed (self, value: Seed) -> None:

		"""
		Replace the global generator with one seeded by ``value``.

		Seeding again with the current seed does nothing, so a program that
		calls ``seed(42)`` on every run keeps a single, advancing stream
		rather than replaying its first value forever.

		Numbers and their text form are the same seed.
		"""

		normalised = _seed_value(value)

		if self._seed is not None and self._seed == normalised:
			return

		self._seed = normalised
		self.rng = random.Random(normalised)
		self.walk.rng = self.rng

		logger.info(f"Global seed set to {value!r}")

	def local_seeded_random (self, seed: Seed) -> random.Random:

		"""Return the generator for ``seed``, creating it on first use."""

		key = _seed_value(seed)

		if key not in self.local_seeds:
			self.local_seeds[key] = random.Random(key)

		return self.local_seeds[key]

	def drunk (self) -> int:

		"""Step the drunk walk and return its position."""

		return self.walk.step()

	def drunk_position (self, position: int) -> None:
		self.walk.position = position

	def drunk_min (self, value: int) -> None:

		"""Set the lower bound; values above the upper bound are ignored with a warning."""

		if value > self.walk.max:
			logger.warning(f"drunk_min({value}) is above drunk max {self.walk.max}; ignored")
			return

		self.walk.min = value

	def drunk_max (self, value: int) -> None:

		"""Set the upper bound; values below the lower bound are ignored with a warning."""

		if value < self.walk.min:
			logger.warning(f"drunk_max({value}) is below drunk min {self.walk.min}; ignored")
			return

		self.walk.max = value

	def drunk_wrap (self, wrap: bool) -> None:
		self.walk.wrap = wrap

	def reset (self) -> None:

		"""Forget all state. Called when a new program is loaded."""

		self.counters.clear()
		self.variables.clear()
		self.local_seeds.clear()

		self._seed = self._initial_seed
		self.rng = random.Random(self._seed) if self._seed is not None else random.Random()

		self.walk.rng = self.rng
		self.walk.position = 0
		self.walk.min = kairos.constants.DRUNK_MIN
		self.walk.max = kairos.constants.DRUNK_MAX
		self.walk.wrap = False
