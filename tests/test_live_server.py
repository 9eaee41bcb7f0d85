import asyncio

import pytest

import kairos.live_server
import kairos.session

from conftest import FakeTime


SENTINEL = b"\x04"


async def _send_recv (reader: asyncio.StreamReader, writer: asyncio.StreamWriter, code: str) -> str:

	"""Send a program to the live server and return the response string."""

	writer.write(code.encode("utf-8") + SENTINEL)
	await writer.drain()

	data = await asyncio.wait_for(reader.readuntil(SENTINEL), timeout=5.0)

	return data[:-1].decode("utf-8")


@pytest.fixture
def live_session () -> kairos.session.Session:

	"""A session already running a counting program."""

	session = kairos.session.Session(time_source=FakeTime())
	session.load("variable('n', counter('n'))")

	return session


@pytest.mark.asyncio
async def test_commit_ok (live_session: kairos.session.Session) -> None:

	"""A valid program is committed and acknowledged."""

	server = kairos.live_server.LiveServer(live_session, port=0)
	await server.start()

	reader, writer = await asyncio.open_connection("127.0.0.1", server.port)

	try:
		assert await _send_recv(reader, writer, "variable('n', counter('n') + 100)") == "OK"
	finally:
		writer.close()
		await writer.wait_closed()
		await server.stop()

	live_session.tick()

	assert live_session.state.variable("n") == 100


@pytest.mark.asyncio
async def test_syntax_error_rejected (live_session: kairos.session.Session) -> None:

	"""A broken program is answered with its traceback and not committed."""

	server = kairos.live_server.LiveServer(live_session, port=0)
	await server.start()

	reader, writer = await asyncio.open_connection("127.0.0.1", server.port)

	try:
		response = await _send_recv(reader, writer, "def broken(:")
	finally:
		writer.close()
		await writer.wait_closed()
		await server.stop()

	assert "SyntaxError" in response
	assert live_session.evaluator.source == "variable('n', counter('n'))"


@pytest.mark.asyncio
async def test_state_survives_commits (live_session: kairos.session.Session) -> None:

	"""Counters keep counting across live edits."""

	server = kairos.live_server.LiveServer(live_session, port=0)
	await server.start()

	live_session.tick()
	live_session.tick()

	reader, writer = await asyncio.open_connection("127.0.0.1", server.port)

	try:
		assert await _send_recv(reader, writer, "variable('n', counter('n'))") == "OK"
		assert await _send_recv(reader, writer, "variable('n', counter('n') * 2)") == "OK"
	finally:
		writer.close()
		await writer.wait_closed()
		await server.stop()

	live_session.tick()

	assert live_session.state.variable("n") == 4


@pytest.mark.asyncio
async def test_stop_is_idempotent (live_session: kairos.session.Session) -> None:

	"""Stopping twice is harmless."""

	server = kairos.live_server.LiveServer(live_session, port=0)
	await server.start()

	assert server.port != 0

	await server.stop()
	await server.stop()


@pytest.mark.asyncio
async def test_invalid_utf8_is_rejected (live_session: kairos.session.Session) -> None:

	"""Undecodable bytes get an error reply and the connection stays usable."""

	server = kairos.live_server.LiveServer(live_session, port=0)
	await server.start()

	reader, writer = await asyncio.open_connection("127.0.0.1", server.port)

	try:
		writer.write(b"\xff\xfe" + SENTINEL)
		await writer.drain()

		data = await asyncio.wait_for(reader.readuntil(SENTINEL), timeout=5.0)

		assert b"UTF-8" in data
		assert await _send_recv(reader, writer, "variable('n', 1)") == "OK"
	finally:
		writer.close()
		await writer.wait_closed()
		await server.stop()

	assert live_session.evaluator.source == "variable('n', 1)"
