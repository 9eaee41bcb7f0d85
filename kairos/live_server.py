"""TCP server for committing program edits to a running session.

Start it alongside the transport (``python -m kairos program.py --live``).
It listens on localhost (default port 5555). Each message is a complete
program, terminated by ``\\x04`` (ASCII EOT). The server commits it to the
session and replies ``OK`` or the SyntaxError traceback, followed by
``\\x04``. A rejected program leaves the running one untouched.

Committing keeps all session state: counters, variables and players carry
on from where they were.

Security note: the server binds to ``localhost`` only. Committed programs run
arbitrary Python in this process, so the port should not be exposed to
untrusted networks.
"""

import asyncio
import logging
import typing

import kairos.constants

if typing.TYPE_CHECKING:
	import kairos.session


logger = logging.getLogger(__name__)

SENTINEL = b"\x04"
MESSAGE_LIMIT = 1024 * 1024


class LiveServer:

	"""Async TCP server that commits programs to a session."""

	def __init__ (self, session: "kairos.session.Session", port: int = kairos.constants.LIVE_PORT) -> None:

		self._session = session
		self._port = port
		self._server: typing.Optional[asyncio.AbstractServer] = None

	@property
	def port (self) -> int:

		"""The bound port; useful when started with port 0."""

		if self._server is None or not self._server.sockets:
			return self._port

		return self._server.sockets[0].getsockname()[1]

	async def start (self) -> None:

		"""Start listening for connections on localhost."""

		self._server = await asyncio.start_server(
			self._handle_connection,
			host = "127.0.0.1",
			port = self._port,
			limit = MESSAGE_LIMIT
		)

		logger.info(f"Live server listening on 127.0.0.1:{self.port}")

	async def stop (self) -> None:

		"""Close the server and wait for it to shut down."""

		if self._server is not None:
			self._server.close()
			await self._server.wait_closed()
			self._server = None
			logger.info("Live server stopped")

	async def _handle_connection (self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:

		"""Commit each program received on a connection until it closes."""

		peer = writer.get_extra_info("peername")
		logger.info(f"Live client connected: {peer}")

		try:

			while True:

				data = await self._read_message(reader)

				if data is None:
					break

				try:
					source = data.decode("utf-8")
				except UnicodeDecodeError as e:
					logger.warning(f"Live message from {peer} is not valid UTF-8: {e}")
					response = f"Error: message is not valid UTF-8 ({e})"
				else:
					error = self._session.commit(source)
					response = "OK" if error is None else error

				writer.write(response.encode("utf-8") + SENTINEL)
				await writer.drain()

		except ConnectionResetError:
			logger.info(f"Live client disconnected (reset): {peer}")

		finally:
			writer.close()
			try:
				await writer.wait_closed()
			except ConnectionError:
				pass
			logger.info(f"Live client disconnected: {peer}")

	async def _read_message (self, reader: asyncio.StreamReader) -> typing.Optional[bytes]:

		"""Read one sentinel-terminated message, or None at end of stream."""

		try:
			data = await reader.readuntil(SENTINEL)
		except asyncio.IncompleteReadError:
			return None
		except asyncio.LimitOverrunError:
			logger.warning("Live message exceeded the stream limit; closing connection")
			return None

		payload = data[:-len(SENTINEL)].strip()

		return payload if payload else None
