import asyncio
import logging
import time
import typing

import kairos.constants

if typing.TYPE_CHECKING:
	import kairos.session


logger = logging.getLogger(__name__)


class Transport:

	"""
	Drives a session's clock: one program evaluation per pulse.

	In real time the loop sleeps between pulses to hold the tempo. In render
	mode (:meth:`render`) it runs as fast as possible for a fixed number of
	bars, which is how programs are tested and benchmarked offline.

	Each pulse evaluates the program at the current position and then
	advances the clock, so the first evaluation sees pulse 0.
	"""

	def __init__ (
		self,
		session: "kairos.session.Session",
		bpm: float = kairos.constants.DEFAULT_BPM,
		spin_wait: bool = False
	) -> None:

		"""
		Parameters:
			session: The session whose clock and program are driven.
			bpm: Tempo in quarter notes per minute.
			spin_wait: When True, busy-wait for the final sub-millisecond of
				each pulse interval. Lower jitter, slightly more CPU.
		"""

		self.session = session
		self.running = False
		self.task: typing.Optional[asyncio.Task] = None

		self.current_bpm: float = 0
		self.seconds_per_pulse = 0.0

		self._spin_wait = spin_wait
		self._spin_threshold = 0.001

		self.set_bpm(bpm)

	def set_bpm (self, bpm: float) -> None:

		"""Change the tempo; applies from the next pulse."""

		if bpm <= 0:
			raise ValueError("BPM must be positive")

		self.current_bpm = bpm
		self.seconds_per_pulse = 60.0 / bpm / self.session.clock.ppqn

		logger.info(f"BPM set to {self.current_bpm:.2f}")

	def step (self) -> None:

		"""Evaluate at the current pulse, then advance the clock by one."""

		position = self.session.clock.position()

		if position.pulses_since_origin % position.pulses_per_bar == 0:
			logger.debug(f"Bar {position.bar}")

		self.session.tick()
		self.session.clock.advance()

	async def start (self) -> None:

		"""Start real-time playback in a separate asyncio task."""

		if self.running:
			return

		self.running = True
		self.task = asyncio.create_task(self._run_loop())

		logger.info("Transport started")

	async def stop (self) -> None:

		"""Stop playback and wait for the loop to finish its current pulse."""

		if not self.running:
			return

		self.running = False

		if self.task:
			try:
				await self.task
			except asyncio.CancelledError:
				pass
			self.task = None

		logger.info("Transport stopped")

	async def play (self) -> None:

		"""Start playback and wait until it is stopped or cancelled."""

		await self.start()

		try:
			if self.task:
				await self.task
		except asyncio.CancelledError:
			pass
		finally:
			await self.stop()

	async def render (self, bars: int) -> None:

		"""
		Run ``bars`` bars as fast as possible.

		Yields to the event loop between pulses so a live server can still
		commit edits during a render.
		"""

		if bars <= 0:
			raise ValueError("bars must be positive")

		total = self.session.clock.position().pulses_per_bar * bars

		logger.info(f"Rendering {bars} bars ({total} pulses)")

		for _ in range(total):
			self.step()
			await asyncio.sleep(0)

	async def _run_loop (self) -> None:

		"""Real-time loop: catch up on due pulses, then sleep until the next one."""

		next_pulse_time = time.perf_counter()

		while self.running:

			while time.perf_counter() >= next_pulse_time:
				self.step()
				next_pulse_time += self.seconds_per_pulse

				if not self.running:
					break

			sleep_time = next_pulse_time - time.perf_counter()

			if sleep_time <= 0:
				await asyncio.sleep(0)
				continue

			if self._spin_wait and sleep_time > self._spin_threshold:
				await asyncio.sleep(sleep_time - self._spin_threshold)
				while time.perf_counter() < next_pulse_time:
					pass
			else:
				await asyncio.sleep(sleep_time)
