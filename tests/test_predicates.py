import math

import pytest

import kairos.predicates

from conftest import at


# --- beat / bar / pulse / tick ---


@pytest.mark.parametrize("n", [0.25, 0.5, 1, 1.5, 2, 3])
def test_beat_matches_period (n: float) -> None:

	"""beat(n) fires exactly when the pulse count is a multiple of floor(n * ppqn)."""

	period = math.floor(n * 24)

	for pulses in range(0, 300):
		assert kairos.predicates.beat(at(pulses), n) == (pulses % period == 0)


def test_beat_list_is_or () -> None:

	"""A list of intervals fires when any of them does."""

	assert kairos.predicates.beat(at(48), [2, 3]) is True
	assert kairos.predicates.beat(at(72), [2, 3]) is True
	assert kairos.predicates.beat(at(24), [2, 3]) is False


def test_beat_nudge () -> None:

	"""Nudging by half a beat moves the grid to the off-beats."""

	assert kairos.predicates.beat(at(12), 1, nudge=0.5) is True
	assert kairos.predicates.beat(at(0), 1, nudge=0.5) is False


def test_beat_non_positive_period () -> None:

	"""A zero interval silences the predicate instead of raising."""

	assert kairos.predicates.beat(at(0), 0) is False
	assert kairos.predicates.beat(at(0), -1) is False


def test_bar_uses_denominator_length () -> None:

	"""A bar lasts denominator * ppqn pulses."""

	assert kairos.predicates.bar(at(96), 1) is True
	assert kairos.predicates.bar(at(48), 1) is False
	assert kairos.predicates.bar(at(192, time_signature=(3, 8)), 1) is True
	assert kairos.predicates.bar(at(96, time_signature=(3, 8)), 1) is False


def test_bar_every_two_with_nudge () -> None:

	"""bar(2, nudge=1) fires on odd bars."""

	assert kairos.predicates.bar(at(96), 2, nudge=1) is True
	assert kairos.predicates.bar(at(192), 2, nudge=1) is False


def test_pulse () -> None:

	"""pulse(n) fires every n pulses, shifted by the nudge."""

	assert kairos.predicates.pulse(at(9), 3) is True
	assert kairos.predicates.pulse(at(10), 3) is False
	assert kairos.predicates.pulse(at(10), 3, nudge=1) is True
	assert kairos.predicates.pulse(at(10), [3, 5]) is True


def test_tick_within_beat () -> None:

	"""tick(n) compares against the 0-based pulse inside the beat."""

	assert kairos.predicates.tick(at(48), 0) is True
	assert kairos.predicates.tick(at(30), 6) is True
	assert kairos.predicates.tick(at(30), 5, offset=1) is True
	assert kairos.predicates.tick(at(26), [1, 2]) is True
	assert kairos.predicates.tick(at(27), [1, 2]) is False


# --- oncount / onbeat / onbar ---


def test_oncount_integer_beats () -> None:

	"""Beats 1 and 3 of a repeating four-beat window."""

	assert kairos.predicates.oncount(at(0), [1, 3], 4) is True
	assert kairos.predicates.oncount(at(48), [1, 3], 4) is True
	assert kairos.predicates.oncount(at(24), [1, 3], 4) is False
	assert kairos.predicates.oncount(at(96 + 48), [1, 3], 4) is True


def test_oncount_fractional_beat () -> None:

	"""Beat 2.5 of a three-beat window is 36 pulses in."""

	assert kairos.predicates.oncount(at(36), 2.5, 3) is True
	assert kairos.predicates.oncount(at(72 + 36), 2.5, 3) is True
	assert kairos.predicates.oncount(at(37), 2.5, 3) is False


def test_oncount_zero_maps_to_window_start () -> None:

	"""Beat 0 is the start of the window."""

	assert kairos.predicates.oncount(at(96), 0, 4) is True


def test_onbeat_start_of_bar () -> None:

	"""Pulse 96 is the downbeat of bar two in 4/4 at 24 ppqn."""

	assert kairos.predicates.onbeat(at(96), 1) is True


def test_onbeat_fractional () -> None:

	"""Beat 1.5 fires half a beat after the downbeat and nowhere else nearby."""

	assert kairos.predicates.onbeat(at(108), 1.5) is True
	assert kairos.predicates.onbeat(at(96), 1.5) is False
	assert kairos.predicates.onbeat(at(107), 1.5) is False
	assert kairos.predicates.onbeat(at(109), 1.5) is False
	assert kairos.predicates.onbeat(at(204), 1.5) is True


def test_onbeat_wraps_at_numerator () -> None:

	"""Beats reduce modulo the numerator; 0 means the last beat."""

	assert kairos.predicates.onbeat(at(96), 5) is True
	assert kairos.predicates.onbeat(at(72), 0) is True
	assert kairos.predicates.onbeat(at(72), 4) is True
	assert kairos.predicates.onbeat(at(84), 4.5) is True


def test_onbeat_several_beats () -> None:

	"""Several arguments fire on any of them."""

	assert kairos.predicates.onbeat(at(24), 2, 4) is True
	assert kairos.predicates.onbeat(at(72), 2, 4) is True
	assert kairos.predicates.onbeat(at(48), 2, 4) is False


def test_onbeat_three_four () -> None:

	"""In 3/4, beat 4 wraps around to beat 1."""

	assert kairos.predicates.onbeat(at(72, time_signature=(3, 4)), 1) is True
	assert kairos.predicates.onbeat(at(72, time_signature=(3, 4)), 4) is True
	assert kairos.predicates.onbeat(at(48, time_signature=(3, 4)), 3) is True


def test_onbar () -> None:

	"""Bars are 1-based within an n-bar cycle."""

	assert kairos.predicates.onbar(at(0), 1) is True
	assert kairos.predicates.onbar(at(96), 2) is True
	assert kairos.predicates.onbar(at(96), 1) is False
	assert kairos.predicates.onbar(at(192), [1, 3], 4) is True
	assert kairos.predicates.onbar(at(384), [1, 3], 4) is True
	assert kairos.predicates.onbar(at(192), 1, n=2) is True


def test_modbar () -> None:

	"""Every other bar."""

	assert kairos.predicates.modbar(at(0), 2) is True
	assert kairos.predicates.modbar(at(96), 2) is False
	assert kairos.predicates.modbar(at(192), 2) is True


# --- flip / flipbar ---


def test_flip_half () -> None:

	"""flip(1) is True for one beat, then False for one beat."""

	assert kairos.predicates.flip(at(0), 1) is True
	assert kairos.predicates.flip(at(23), 1) is True
	assert kairos.predicates.flip(at(24), 1) is False
	assert kairos.predicates.flip(at(47), 1) is False
	assert kairos.predicates.flip(at(48), 1) is True


def test_flip_ratio () -> None:

	"""A 25% ratio shortens the True part of the window."""

	assert kairos.predicates.flip(at(11), 1, 25) is True
	assert kairos.predicates.flip(at(12), 1, 25) is False


def test_flipbar () -> None:

	"""Alternates every chunk of bars."""

	assert [kairos.predicates.flipbar(at(bar * 96)) for bar in range(4)] == [True, False, True, False]
	assert [kairos.predicates.flipbar(at(bar * 96), 2) for bar in range(4)] == [True, True, False, False]


# --- euclidean helpers ---


def test_oneuclid () -> None:

	"""Three hits over eight beats land on beats 1, 4 and 7."""

	assert kairos.predicates.oneuclid(at(0), 3, 8) is True
	assert kairos.predicates.oneuclid(at(72), 3, 8) is True
	assert kairos.predicates.oneuclid(at(144), 3, 8) is True
	assert kairos.predicates.oneuclid(at(24), 3, 8) is False
	assert kairos.predicates.oneuclid(at(192), 3, 8) is True


def test_oneuclid_no_hits () -> None:

	"""A cycle without hits never fires."""

	assert kairos.predicates.oneuclid(at(0), 0, 8) is False


def test_rhythm () -> None:

	"""Steps through the Euclidean cycle once per beat."""

	assert kairos.predicates.rhythm(at(0), 1, 3, 8) is True
	assert kairos.predicates.rhythm(at(24), 1, 3, 8) is False
	assert kairos.predicates.rhythm(at(72), 1, 3, 8) is True
	assert kairos.predicates.rhythm(at(12), 1, 3, 8) is False


def test_binrhythm () -> None:

	"""Steps through the binary digits once per beat."""

	assert kairos.predicates.binrhythm(at(0), 1, 34) is True
	assert kairos.predicates.binrhythm(at(24), 1, 34) is False
	assert kairos.predicates.binrhythm(at(96), 1, 34) is True


# --- selectors ---


def test_seqbeat_seqbar_seqpulse () -> None:

	"""Selectors index their values by the clock position."""

	assert kairos.predicates.seqbeat(at(0), "a", "b") == "b"
	assert kairos.predicates.seqbeat(at(24), "a", "b") == "a"
	assert kairos.predicates.seqbar(at(0), "a", "b", "c") == "a"
	assert kairos.predicates.seqbar(at(96), "a", "b", "c") == "b"
	assert kairos.predicates.seqpulse(at(1), "a", "b") == "b"


def test_selectors_without_values () -> None:

	"""No values selects nothing."""

	assert kairos.predicates.seqbeat(at(0)) is None
	assert kairos.predicates.seqbar(at(0)) is None
	assert kairos.predicates.seqpulse(at(0)) is None
