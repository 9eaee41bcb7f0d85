"""Identity-keyed memory for expressions that are re-evaluated every tick.

A live program is re-run from the top on every tick. An expression like
``cache("notes", itertools.cycle([60, 63, 67]))`` builds a brand new iterator
on every run; on its own it would only ever produce 60. The expression cache
keeps the *first* iterator under the key ``"notes"`` and pulls from that one,
discarding the fresh copy, so the expression advances exactly once per run.

Entries come in three kinds - :class:`Plain`, :class:`LazySequence` and
:class:`Player` - and all dispatch is on that kind, never on the shape of the
stored object.

The cache is bounded: least recently used entries are evicted past
``capacity``, and entries not touched for ``ttl`` seconds expire. Expiry is
checked lazily on access and by :meth:`BoundedCache.sweep`; there is no
background thread.
"""

import collections
import collections.abc
import dataclasses
import json
import logging
import numbers
import time
import typing

import kairos.constants
import kairos.player


logger = logging.getLogger(__name__)

_MISSING: typing.Any = object()
_EXHAUSTED: typing.Any = object()


@dataclasses.dataclass
class Plain:

	"""A value stored verbatim."""

	value: typing.Any


@dataclasses.dataclass
class LazySequence:

	"""An iterator pulled once per evaluation, with the last pulled element."""

	iterator: typing.Iterator[typing.Any]
	last: typing.Any = None


@dataclasses.dataclass
class Player:

	"""A pattern player, with the last value it produced."""

	player: kairos.player.PatternPlayer
	last: typing.Any = None


CacheEntry = typing.Union[Plain, LazySequence, Player]


def generate_key (*args: typing.Any, **kwargs: typing.Any) -> str:

	"""
	Build a stable identity key from arguments.

	Equal arguments give equal keys across runs; changing any value or the
	order of positional arguments changes the key. Objects JSON cannot
	represent are serialised by :func:`_describe`: functions and classes by
	their qualified name, instances with a custom ``repr`` by that ``repr``,
	and other instances by their type alone. Two distinct instances of such a
	type therefore share a key.

	Example:
		```python
		generate_key("0 3 5", repeats=2) == generate_key("0 3 5", repeats=2)  # True
		generate_key(1, 2) == generate_key(2, 1)  # False
		```
	"""

	return json.dumps([list(args), kwargs], sort_keys=True, default=_describe, separators=(",", ":"))



def _describe (value: typing.Any) -> str:

	"""A representation of ``value`` that is the same on every run."""

	if callable(value) and hasattr(value, "__qualname__"):
		return f"{getattr(value, '__module__', None)}.{value.__qualname__}"

	if type(value).__repr__ is object.__repr__:
		return f"<{type(value).__module__}.{type(value).__qualname__}>"

	return repr(value)

class BoundedCache:

	"""
	A mapping with least-recently-used eviction and idle expiry.

	Parameters:
		capacity: Maximum number of entries.
		ttl: Seconds an entry may go unaccessed before it expires.
		time_source: Clock used for expiry, in seconds. Tests inject a fake.
	"""

	def __init__ (
		self,
		capacity: int = kairos.constants.CACHE_CAPACITY,
		ttl: float = kairos.constants.CACHE_TTL_SECONDS,
		time_source: typing.Callable[[], float] = time.monotonic
	) -> None:

		if capacity <= 0:
			raise ValueError(f"capacity must be positive, got {capacity}")

		if ttl <= 0:
			raise ValueError(f"ttl must be positive, got {ttl}")

		self.capacity = capacity
		self.ttl = ttl
		self._time = time_source

		# key -> (entry, last access time), least recently used first.
		self._entries: "collections.OrderedDict[typing.Hashable, typing.Tuple[CacheEntry, float]]" = collections.OrderedDict()

	def __len__ (self) -> int:
		return len(self._entries)

	def __contains__ (self, key: typing.Hashable) -> bool:
		return self.peek(key) is not None

	def _expired (self, accessed: float, now: float) -> bool:
		return now - accessed > self.ttl

	def get (self, key: typing.Hashable) -> typing.Optional[CacheEntry]:

		"""Return the entry for ``key`` and mark it as recently used."""

		item = self._entries.get(key)

		if item is None:
			return None

		entry, accessed = item
		now = self._time()

		if self._expired(accessed, now):
			del self._entries[key]
			logger.debug(f"Cache entry {key!r} expired")
			return None

		self._entries[key] = (entry, now)
		self._entries.move_to_end(key)

		return entry

	def peek (self, key: typing.Hashable) -> typing.Optional[CacheEntry]:

		"""Return the entry for ``key`` without changing its recency."""

		item = self._entries.get(key)

		if item is None or self._expired(item[1], self._time()):
			return None

		return item[0]

	def set (self, key: typing.Hashable, entry: CacheEntry) -> None:

		"""Store ``entry``, evicting the least recently used entries past capacity."""

		self._entries[key] = (entry, self._time())
		self._entries.move_to_end(key)

		while len(self._entries) > self.capacity:
			evicted, _ = self._entries.popitem(last=False)
			logger.debug(f"Cache full, evicted {evicted!r}")

	def delete (self, key: typing.Hashable) -> bool:

		"""Remove ``key``. Returns whether it was present."""

		return self._entries.pop(key, None) is not None

	def clear (self) -> None:
		self._entries.clear()

	def sweep (self) -> int:

		"""Drop every expired entry and return how many were removed."""

		now = self._time()
		expired = [key for key, (_, accessed) in self._entries.items() if self._expired(accessed, now)]

		for key in expired:
			del self._entries[key]

		if expired:
			logger.debug(f"Swept {len(expired)} expired cache entries")

		return len(expired)


def _pull (iterator: typing.Iterator[typing.Any]) -> typing.Any:
	return next(iterator, _EXHAUSTED)


def _is_spent (value: typing.Any, falsy_is_spent: bool) -> bool:

	"""
	Decide whether a pulled element means the sequence should be restarted.

	Exhaustion and ``None`` always count. With ``falsy_is_spent`` other falsy
	values count too, except numbers: a sequence that yields 0 is still going.
	"""

	if value is _EXHAUSTED or value is None:
		return True

	if not falsy_is_spent:
		return False

	if isinstance(value, bool):
		return not value

	if isinstance(value, numbers.Number):
		return False

	return not value


def _observed (entry: typing.Optional[CacheEntry]) -> typing.Any:

	"""The value a reader sees for an entry."""

	if entry is None:
		return None

	if isinstance(entry, Plain):
		return entry.value

	return entry.last


class ExpressionCache:

	"""
	Gives values, lazy sequences and pattern players continuity across runs.

	Also remembers, per player key, the text that last failed to parse there,
	so a broken pattern is reported once and then skipped until its text
	changes. A later failure under the same key replaces the entry.
	"""

	def __init__ (
		self,
		capacity: int = kairos.constants.CACHE_CAPACITY,
		ttl: float = kairos.constants.CACHE_TTL_SECONDS,
		time_source: typing.Callable[[], float] = time.monotonic
	) -> None:

		self.entries = BoundedCache(capacity, ttl, time_source)
		# Player key -> Plain(text) of the last text that failed to parse under it.
		self.invalid_patterns = BoundedCache(capacity, ttl, time_source)

	def get (self, key: typing.Hashable) -> typing.Any:

		"""Return the value currently observed under ``key``, or None."""

		return _observed(self.entries.get(key))

	def set (self, key: typing.Hashable, entry: CacheEntry) -> None:
		self.entries.set(key, entry)

	def delete (self, key: typing.Hashable) -> bool:
		return self.entries.delete(key)

	def clear (self) -> None:
		self.entries.clear()

	def sweep (self) -> int:
		return self.entries.sweep()

	def reset (self) -> None:

		"""Forget every entry and every recorded invalid pattern."""

		self.entries.clear()
		self.invalid_patterns.clear()

	def cache (self, key: typing.Hashable, value: typing.Any = _MISSING) -> typing.Any:

		"""
		Memoise an expression under ``key``.

		- Without ``value``: return what is cached, changing nothing.
		- With an iterator: advance the iterator already cached under ``key``
		  and return its next element, ignoring the one passed in. When the
		  cached iterator is exhausted (or yields None) it is replaced by the
		  one passed in, whose first element is returned.
		- With a zero-argument callable: the same, except the callable is
		  only invoked when a new sequence is needed, and any falsy element
		  other than a number also triggers a restart.
		- With anything else: store it and return it.

		Example:
			```python
			# Inside a program re-run every tick:
			note = cache("arp", itertools.cycle([60, 64, 67]))
			```
		"""

		if value is _MISSING:
			return self.get(key)

		if isinstance(value, collections.abc.Iterator):
			return self._advance(key, lambda: value, falsy_is_spent=False)

		if callable(value):
			return self._advance(key, value, falsy_is_spent=True)

		self.entries.set(key, Plain(value))

		return value

	def _advance (self, key: typing.Hashable, make: typing.Callable[[], typing.Any], falsy_is_spent: bool) -> typing.Any:

		entry = self.entries.get(key)

		if isinstance(entry, LazySequence):

			pulled = _pull(entry.iterator)

			if not _is_spent(pulled, falsy_is_spent):
				entry.last = pulled
				return pulled

			logger.debug(f"Sequence {key!r} is spent, starting a new one")

		return self._start(key, iter(make()))

	def _start (self, key: typing.Hashable, iterator: typing.Iterator[typing.Any]) -> typing.Any:

		first = _pull(iterator)

		if first is _EXHAUSTED:
			self.entries.delete(key)
			return None

		self.entries.set(key, LazySequence(iterator, first))

		return first

	@staticmethod
	def player_key (identifier: typing.Any) -> str:

		"""The cache key for a player identifier."""

		return f"player:{identifier}"

	def peek_player (self, key: str) -> typing.Optional[kairos.player.PatternPlayer]:

		"""Return the player cached under ``key`` without touching its recency."""

		entry = self.entries.peek(key)

		if isinstance(entry, Player):
			return entry.player

		return None

	def player (
		self,
		text: str,
		parser: kairos.player.PatternParser,
		key: typing.Any = None,
		sync: bool = True,
		**options: typing.Any
	) -> typing.Any:

		"""
		Pull the next value from the player for ``text``.

		The player's identity is ``key`` when given, otherwise the pattern
		text and options themselves. An existing player whose text was edited
		keeps playing until it reaches the end of its cycle and is only then
		replaced, so edits never cut a pattern off mid-cycle.

		Text that fails to parse is reported once and skipped until it
		changes; meanwhile any previous player under the same key carries on.
		New players follow the phase of the default player (identifier
		``kairos.constants.DEFAULT_PLAYER_ID``) unless ``sync`` is False.

		Returns:
			The pulled value, or None when there is no playable player.
		"""

		cache_key = self.player_key(generate_key(text, **options) if key is None else key)
		default_key = self.player_key(kairos.constants.DEFAULT_PLAYER_ID)

		entry = self.entries.get(cache_key)
		current = entry if isinstance(entry, Player) else None

		if current is None or (current.player.input != text and current.player.at_cycle_boundary()):

			built = self._build_player(cache_key, text, parser, options)

			if built is not None:

				if sync and cache_key != default_key:
					built.sync_to(default_key, immediate=False)

				if current is not None:
					logger.debug(f"Replacing player {cache_key!r} at cycle boundary")

				current = Player(built)
				self.entries.set(cache_key, current)

		if current is None:
			return None

		current.last = current.player.pull_next()

		if current.player.remaining_generator_exhausted():
			self.entries.delete(cache_key)
			logger.debug(f"Player {cache_key!r} finished and was evicted")

		return current.last

	def _build_player (
		self,
		cache_key: str,
		text: str,
		parser: kairos.player.PatternParser,
		options: typing.Dict[str, typing.Any]
	) -> typing.Optional[kairos.player.PatternPlayer]:

		if not parser.is_valid(text):
			return None

		failed = self.invalid_patterns.get(cache_key)

		if isinstance(failed, Plain) and failed.value == text:
			return None

		try:
			built = parser.build(text, **options)

		except Exception as e:
			self.invalid_patterns.set(cache_key, Plain(text))
			logger.warning(f"Invalid pattern {text!r}: {e}")
			return None

		self.invalid_patterns.delete(cache_key)

		return built
