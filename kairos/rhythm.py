import logging
import typing


logger = logging.getLogger(__name__)


def euclidean_cycle (pulses: int, length: int, rotate: int = 0) -> typing.List[bool]:

	"""
	Generate a Euclidean rhythm as a boolean cycle.

	Each slot ``i`` is a hit when the sequence ``(pulses * (i - 1)) mod length``
	descends between ``i`` and ``i + 1``. This spreads ``pulses`` hits over
	``length`` slots as evenly as possible.

	Parameters:
		pulses: Number of hits.
		length: Number of slots in the cycle.
		rotate: Left rotation applied to the cycle. Negative values and values
			of ``length`` or more wrap around.

	Returns:
		A list of ``length`` booleans. Two cases differ: when ``pulses`` exceeds
		``length`` the result is the single-element ``[True]``, and a
		non-positive ``length`` gives an empty list.

	Example:
		```python
		euclidean_cycle(3, 8)     # [True, False, False, True, False, False, True, False]
		euclidean_cycle(3, 8, 1)  # [False, False, True, False, False, True, False, True]
		```
	"""

	if length <= 0:
		logger.debug(f"euclidean_cycle called with non-positive length {length}")
		return []

	if pulses == length:
		return [True] * length

	if pulses > length:
		return [True]

	residues = [((pulses * (i - 1)) % length + length) % length for i in range(length)]
	cycle = [residues[i] > residues[(i + 1) % length] for i in range(length)]

	shift = rotate % length

	if shift:
		cycle = cycle[shift:] + cycle[:shift]

	return cycle


def euclid (iterator: int, pulses: int, length: int, rotate: int = 0) -> bool:

	"""
	Return the Euclidean cycle slot at ``iterator``, wrapping around ``length``.

	Slots past the end of a short cycle (the single-slot cycle given when
	``pulses`` exceeds ``length``) are rests.
	"""

	cycle = euclidean_cycle(pulses, length, rotate)

	if not cycle:
		return False

	index = iterator % length

	return index < len(cycle) and cycle[index]


def binary_digits (n: int) -> typing.List[bool]:

	"""Binary digits of ``n``, most significant first, as booleans."""

	return [digit == "1" for digit in format(abs(int(n)), "b")]


def binary_rhythm (iterator: int, n: int) -> bool:

	"""
	Use the binary representation of ``n`` as a rhythm.

	Example:
		```python
		# 34 is 100010 - hits on the first and fifth of every six steps
		[binary_rhythm(i, 34) for i in range(6)]
		```
	"""

	digits = binary_digits(n)

	return digits[iterator % len(digits)]


def hit_positions (cycle: typing.List[bool]) -> typing.List[int]:

	"""1-based positions of the hits in a boolean cycle."""

	return [i + 1 for i, hit in enumerate(cycle) if hit]
