"""The session: everything one loaded program can see and remember.

A :class:`Session` owns the clock adapter, the keyed state store, the
expression cache and the evaluator for the committed program. Nothing in
Kairos is a module-level global; two sessions never share state.

Lifecycle:

- :meth:`Session.load` starts a new program. All counters, variables, seeds,
  cached expressions and players are forgotten.
- :meth:`Session.commit` replaces the program text after an edit. State is
  kept, so counters carry on counting and players carry on playing.
- :meth:`Session.tick` runs the committed program once against a single
  clock snapshot.
"""

import functools
import logging
import random
import typing

import kairos.chance
import kairos.clock
import kairos.constants
import kairos.evaluator
import kairos.expression_cache
import kairos.player
import kairos.predicates
import kairos.rhythm
import kairos.state_store

if typing.TYPE_CHECKING:
	import kairos.config


logger = logging.getLogger(__name__)

# Predicates receive the tick's clock snapshot as their first argument.
_CLOCK_FUNCTIONS = (
	"beat", "bar", "pulse", "tick", "oncount", "onbeat", "onbar", "modbar",
	"flip", "flipbar", "oneuclid", "rhythm", "binrhythm",
	"seqbeat", "seqbar", "seqpulse",
)

# Chance helpers draw from whichever global generator is active at call time.
_RANDOM_FUNCTIONS = (
	"prob", "toss", "almost_never", "rarely", "sometimes", "often",
	"almost_always", "dice", "rand", "rand_int", "pick",
)


class Session:

	"""
	The context object for one loaded program.

	Parameters:
		clock: The clock adapter. A fresh :class:`~kairos.clock.Clock` when omitted.
		seed: Initial seed of the global generator; unseeded when omitted.
		cache_capacity: Maximum number of cached expressions.
		cache_ttl: Seconds an unused cached expression survives.
		time_source: Wall clock for cache expiry (injectable for tests).

	Example:
		```python
		session = kairos.Session()
		session.load("if beat(1): print(counter('beats'))")

		for _ in range(96):
			session.tick()
			session.clock.advance()
		```
	"""

	def __init__ (
		self,
		clock: typing.Optional[kairos.clock.Clock] = None,
		seed: typing.Optional[typing.Union[int, str]] = None,
		cache_capacity: int = kairos.constants.CACHE_CAPACITY,
		cache_ttl: float = kairos.constants.CACHE_TTL_SECONDS,
		time_source: typing.Optional[typing.Callable[[], float]] = None
	) -> None:

		self.clock = clock or kairos.clock.Clock()
		self.state = kairos.state_store.StateStore(seed)

		if time_source is None:
			self.cache = kairos.expression_cache.ExpressionCache(cache_capacity, cache_ttl)
		else:
			self.cache = kairos.expression_cache.ExpressionCache(cache_capacity, cache_ttl, time_source)

		self.parser: kairos.player.PatternParser = kairos.player.MiniNotationParser(lookup=self.cache.peek_player)
		self.evaluator = kairos.evaluator.ScriptEvaluator(self.namespace)
		self.position = self.clock.position()

	@classmethod
	def from_config (cls, config: "kairos.config.Config") -> "Session":

		"""Build a session from a loaded configuration."""

		clock = kairos.clock.Clock(ppqn=config.ppqn, time_signature=config.time_signature)

		return cls(
			clock = clock,
			seed = config.seed,
			cache_capacity = config.cache_capacity,
			cache_ttl = config.cache_ttl
		)

	# -- lifecycle ---------------------------------------------------------

	def load (self, source: str) -> typing.Optional[str]:

		"""
		Start a new program, discarding all state from the previous one.

		Returns:
			None on success, or the syntax error traceback. On a syntax error
			nothing is reset and the previous program keeps running.
		"""

		error = kairos.evaluator.check_syntax(source)

		if error is not None:
			logger.warning(f"Program rejected:\n{error}")
			return error

		self.teardown()

		return self.evaluator.commit(source)

	def commit (self, source: str) -> typing.Optional[str]:

		"""Replace the program text, keeping all state. Same return as :meth:`load`."""

		return self.evaluator.commit(source)

	def teardown (self) -> None:

		"""Forget the program and all state tied to it."""

		self.state.reset()
		self.cache.reset()
		self.evaluator.clear()

		logger.info("Session state cleared")

	def tick (self) -> bool:

		"""
		Evaluate the committed program once at the clock's current position.

		Returns whether the program ran without error. Errors are logged and
		never propagate, so a broken program cannot stop the clock.
		"""

		self.position = self.clock.position()

		if self.position.pulses_since_origin % self.position.pulses_per_bar == 0:
			self.cache.sweep()

		return self.evaluator.evaluate()

	# -- user-facing state -------------------------------------------------

	@property
	def rng (self) -> random.Random:

		"""The active global generator."""

		return self.state.rng

	def counter (self, name: str, limit: typing.Optional[int] = None, step: typing.Optional[int] = None) -> int:
		return self.state.counter(name, limit, step)

	def variable (self, name: typing.Any, *value: typing.Any) -> typing.Any:

		"""``variable("x")`` reads, ``variable("x", 3)`` writes and returns 3."""

		if value:
			return self.state.variable(name, value[0])

		return self.state.variable(name)

	def seed (self, value: typing.Union[int, str]) -> None:
		self.state.seed(value)

	def seeded (self, seed: typing.Union[int, str]) -> random.Random:

		"""A generator private to ``seed``, independent of the global one."""

		return self.state.local_seeded_random(seed)

	def cache_value (self, key: typing.Hashable, *value: typing.Any) -> typing.Any:

		"""Exposed to programs as ``cache``; see :meth:`kairos.expression_cache.ExpressionCache.cache`."""

		if value:
			return self.cache.cache(key, value[0])

		return self.cache.cache(key)

	def player (self, text: str, key: typing.Any = None, sync: bool = True, **options: typing.Any) -> typing.Any:

		"""Pull the next value of a mini-notation pattern player."""

		return self.cache.player(text, self.parser, key=key, sync=sync, **options)

	def _with_rng (self, function: typing.Callable[..., typing.Any]) -> typing.Callable[..., typing.Any]:

		"""Bind a chance helper to the global generator active when it is called."""

		@functools.wraps(function)
		def call (*args: typing.Any, **kwargs: typing.Any) -> typing.Any:
			return function(self.state.rng, *args, **kwargs)

		return call

	def namespace (self) -> typing.Dict[str, typing.Any]:

		"""
		Build the names a program sees for the current tick.

		Clock functions are bound to this tick's snapshot, so every predicate
		evaluated during one run agrees on the time.
		"""

		names: typing.Dict[str, typing.Any] = {
			name: functools.partial(getattr(kairos.predicates, name), self.position)
			for name in _CLOCK_FUNCTIONS
		}

		names.update({
			name: self._with_rng(getattr(kairos.chance, name))
			for name in _RANDOM_FUNCTIONS
		})

		names.update({
			"position": self.position,
			"euclid": kairos.rhythm.euclid,
			"euclidean_cycle": kairos.rhythm.euclidean_cycle,
			"bin": kairos.rhythm.binary_rhythm,
			"quantize": kairos.chance.quantize,
			"clamp": kairos.chance.clamp,
			"counter": self.counter,
			"variable": self.variable,
			"delete_variable": self.state.delete_variable,
			"clear_variables": self.state.clear_variables,
			"seed": self.seed,
			"seeded": self.seeded,
			"cache": self.cache_value,
			"player": self.player,
			"drunk": self.state.drunk,
			"drunk_position": self.state.drunk_position,
			"drunk_min": self.state.drunk_min,
			"drunk_max": self.state.drunk_max,
			"drunk_wrap": self.state.drunk_wrap,
		})

		return names
