"""YAML configuration.

Example ``kairos.yaml``::

    clock:
      ppqn: 24
      bpm: 120
      time_signature: [4, 4]
    cache:
      capacity: 10000
      ttl_seconds: 300
    live:
      enabled: true
      port: 5555
    session:
      seed: 42

Every key is optional.
"""

import dataclasses
import logging
import os
import typing

import yaml

import kairos.constants


logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "kairos.yaml"


@dataclasses.dataclass
class Config:

	"""Settings for a session, its transport and the live server."""

	ppqn: int = kairos.constants.DEFAULT_PPQN
	bpm: float = kairos.constants.DEFAULT_BPM
	time_signature: typing.Tuple[int, int] = kairos.constants.DEFAULT_TIME_SIGNATURE
	cache_capacity: int = kairos.constants.CACHE_CAPACITY
	cache_ttl: float = kairos.constants.CACHE_TTL_SECONDS
	live_enabled: bool = False
	live_port: int = kairos.constants.LIVE_PORT
	seed: typing.Optional[typing.Union[int, str]] = None


def config_from_dict (raw: typing.Dict[str, typing.Any]) -> Config:

	"""Build a :class:`Config` from parsed YAML, falling back to defaults per key."""

	clock = raw.get("clock") or {}
	cache = raw.get("cache") or {}
	live = raw.get("live") or {}
	session = raw.get("session") or {}

	defaults = Config()
	numerator, denominator = clock.get("time_signature", defaults.time_signature)

	return Config(
		ppqn = int(clock.get("ppqn", defaults.ppqn)),
		bpm = float(clock.get("bpm", defaults.bpm)),
		time_signature = (int(numerator), int(denominator)),
		cache_capacity = int(cache.get("capacity", defaults.cache_capacity)),
		cache_ttl = float(cache.get("ttl_seconds", defaults.cache_ttl)),
		live_enabled = bool(live.get("enabled", defaults.live_enabled)),
		live_port = int(live.get("port", defaults.live_port)),
		seed = session.get("seed", defaults.seed)
	)


def load_config (config_path: str = DEFAULT_CONFIG_PATH) -> Config:

	"""
	Load configuration from a YAML file.

	A missing file is not an error: a warning is logged and defaults are used.
	"""

	if not os.path.exists(config_path):
		logger.warning(f"Config file {config_path} not found. Using defaults.")
		return Config()

	with open(config_path, "r") as f:
		raw = yaml.safe_load(f) or {}

	if not isinstance(raw, dict):
		raise ValueError(f"Config file {config_path} must contain a mapping")

	return config_from_dict(raw)
