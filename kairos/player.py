"""Pattern players and the parser capability that builds them.

The expression cache treats pattern players as opaque: it only needs the
small interface described by :class:`PatternParser` and :class:`PatternPlayer`.
Any pattern language can be plugged in by implementing those two protocols.

:class:`MiniNotationParser` is the built-in implementation. Its players step
through the events of a :mod:`kairos.mini_notation` string, one event per
pull, cycling forever or for a fixed number of ``repeats``.
"""

import typing

import kairos.mini_notation


PlayerLookup = typing.Callable[[str], typing.Optional["PatternPlayer"]]


@typing.runtime_checkable
class PatternPlayer (typing.Protocol):

	"""
	A stateful player owned by the expression cache.
	"""

	input: str

	def at_cycle_boundary (self) -> bool:

		"""True when the next pull starts a new cycle."""

		...

	def remaining_generator_exhausted (self) -> bool:

		"""True once the player has nothing left to produce."""

		...

	def sync_to (self, other_key: str, immediate: bool) -> None:

		"""Follow the phase of the player cached under ``other_key``."""

		...

	def pull_next (self) -> typing.Any:

		"""Produce the next value."""

		...


@typing.runtime_checkable
class PatternParser (typing.Protocol):

	"""
	Builds players from pattern text.
	"""

	def is_valid (self, text: str) -> bool:

		"""Cheap precheck; a full parse happens in :meth:`build`."""

		...

	def build (self, text: str, **options: typing.Any) -> PatternPlayer:

		"""Construct a player, raising an exception when ``text`` does not parse."""

		...


class MiniNotationPlayer:

	"""
	Steps through the events of a mini-notation pattern.

	``position`` counts every pull and is the player's phase. Followers copy
	their leader's phase, so two patterns of different lengths stay aligned
	to the same pull count.
	"""

	def __init__ (
		self,
		text: str,
		events: typing.List[kairos.mini_notation.ParsedEvent],
		repeats: typing.Optional[int] = None,
		lookup: typing.Optional[PlayerLookup] = None
	) -> None:

		if not events:
			raise ValueError("A player needs at least one event")

		if repeats is not None and repeats <= 0:
			raise ValueError(f"repeats must be positive, got {repeats}")

		self.input = text
		self.events = events
		self.repeats = repeats
		self.position = 0

		self._pulled = 0
		self._lookup = lookup
		self._pending_sync: typing.Optional[str] = None

	def __repr__ (self) -> str:
		return f"MiniNotationPlayer({self.input!r}, position={self.position})"

	def at_cycle_boundary (self) -> bool:
		return self.position % len(self.events) == 0

	def remaining_generator_exhausted (self) -> bool:

		if self.repeats is None:
			return False

		return self._pulled >= self.repeats * len(self.events)

	def sync_to (self, other_key: str, immediate: bool) -> None:

		"""
		Follow another player's phase.

		With ``immediate`` the phase is copied now. Otherwise it is copied the
		next time this player reaches a cycle boundary.
		"""

		if immediate:
			self._apply_sync(other_key)
		else:
			self._pending_sync = other_key

	def pull_next (self) -> typing.Any:

		if self.remaining_generator_exhausted():
			return None

		if self._pending_sync is not None and self.at_cycle_boundary():
			self._apply_sync(self._pending_sync)
			self._pending_sync = None

		event = self.events[self.position % len(self.events)]

		self.position += 1
		self._pulled += 1

		return event.value

	def _apply_sync (self, other_key: str) -> None:

		if self._lookup is None:
			return

		leader = self._lookup(other_key)

		if leader is None or leader is self:
			return

		leader_position = getattr(leader, "position", None)

		if isinstance(leader_position, int):
			self.position = leader_position


class MiniNotationParser:

	"""
	Builds :class:`MiniNotationPlayer` instances.

	Parameters:
		lookup: Resolves a cache key to a cached player, used for syncing.
			The session passes :meth:`ExpressionCache.peek_player`.
	"""

	def __init__ (self, lookup: typing.Optional[PlayerLookup] = None) -> None:
		self.lookup = lookup

	def is_valid (self, text: str) -> bool:
		return kairos.mini_notation.looks_valid(text)

	def build (self, text: str, repeats: typing.Optional[int] = None) -> MiniNotationPlayer:

		"""Parse ``text``; raises :class:`~kairos.mini_notation.MiniNotationError` on bad input."""

		events = kairos.mini_notation.parse(text)

		return MiniNotationPlayer(text, events, repeats=repeats, lookup=self.lookup)
