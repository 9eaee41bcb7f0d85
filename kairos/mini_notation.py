import dataclasses
import typing


@dataclasses.dataclass
class ParsedEvent:

	"""
	A single event parsed from mini-notation.

	``time`` and ``duration`` are fractions of one pattern cycle.
	"""

	time: float
	duration: float
	symbol: str

	@property
	def value (self) -> typing.Union[int, float, str]:

		"""The symbol as a number when it looks like one, else the raw symbol."""

		return parse_value(self.symbol)


class MiniNotationError(Exception):
	pass


def parse (notation: str) -> typing.List[ParsedEvent]:

	"""
	Parse a mini-notation string into the events of one cycle.

	**Syntax:**
	- `x y z`: Items separated by spaces share the cycle equally.
	- `[a b]`: Groups items into a single subdivided step.
	- `~` or `.`: A rest.
	- `_`: Extends the previous event (sustain).

	Raises:
		MiniNotationError: On unbalanced brackets, or when the pattern has
			no events at all (empty, or only rests and sustains).

	Example:
		```python
		# "0 [3 5] 7" -> 0 for a third, 3 and 5 for a sixth each, 7 for a third
		parse("0 [3 5] 7")
		```
	"""

	tokens = _tokenize(notation)
	events = _post_process_sustains(_parse_recursive(tokens, 0.0, 1.0))

	if not events:
		raise MiniNotationError(f"Pattern {notation!r} contains no events")

	return events


def looks_valid (notation: typing.Any) -> bool:

	"""
	Cheap precheck run before a full parse.

	Only rejects non-strings and blank strings. Passing this does not
	guarantee :func:`parse` succeeds.
	"""

	return isinstance(notation, str) and bool(notation.strip())


def parse_value (symbol: str) -> typing.Union[int, float, str]:

	"""Convert ``"3"`` to 3 and ``"-0.5"`` to -0.5; leave other symbols unchanged."""

	try:
		return int(symbol)
	except ValueError:
		pass

	try:
		return float(symbol)
	except ValueError:
		return symbol


def _tokenize (text: str) -> typing.List[typing.Union[str, list]]:

	"""
	Convert string into nested lists of tokens.
	"a [b c]" -> ["a", ["b", "c"]]
	"""

	text = text.replace("[", " [ ").replace("]", " ] ")

	stack: typing.List[list] = [[]]

	for token in text.split():

		if token == "[":
			group: typing.List[typing.Any] = []
			stack[-1].append(group)
			stack.append(group)

		elif token == "]":
			if len(stack) <= 1:
				raise MiniNotationError("Unexpected closing bracket")
			stack.pop()

		else:
			stack[-1].append(token)

	if len(stack) > 1:
		raise MiniNotationError("Missing closing bracket")

	return stack[0]


def _parse_recursive (tokens: list, start: float, span: float) -> typing.List[ParsedEvent]:

	"""Distribute tokens evenly over ``span``, starting at ``start``."""

	events: typing.List[ParsedEvent] = []

	if not tokens:
		return events

	step = span / len(tokens)

	for i, token in enumerate(tokens):

		time = start + i * step

		if isinstance(token, list):
			events.extend(_parse_recursive(token, time, step))

		elif token not in ("~", "."):
			events.append(ParsedEvent(time, step, token))

	return events


def _post_process_sustains (events: typing.List[ParsedEvent]) -> typing.List[ParsedEvent]:

	"""Merge `_` events into the previous event's duration."""

	processed: typing.List[ParsedEvent] = []

	for event in events:

		if event.symbol == "_":
			if processed:
				processed[-1].duration += event.duration

		else:
			processed.append(event)

	return processed
