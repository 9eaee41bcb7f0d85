"""Defaults shared across Kairos.

The clock counts in **pulses**. At the default resolution of 24 pulses per
quarter note (PPQN = 24) a beat is 24 pulses and a 4/4 bar is 96.
"""

DEFAULT_PPQN = 24
DEFAULT_TIME_SIGNATURE = (4, 4)
DEFAULT_BPM = 120

# Expression cache bounds.
CACHE_CAPACITY = 10000
CACHE_TTL_SECONDS = 300.0

# The session's drunk walk starts at 0 and wanders within these bounds.
DRUNK_MIN = -100
DRUNK_MAX = 100

# Players without an explicit identifier (and every explicit identifier
# other than this one) follow the phase of this player.
DEFAULT_PLAYER_ID = 0

# Live coding server.
LIVE_PORT = 5555
