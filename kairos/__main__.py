import argparse
import asyncio
import logging
import sys
import typing

import kairos.config
import kairos.live_server
import kairos.session
import kairos.transport


# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def parse_args (argv: typing.Optional[typing.List[str]] = None) -> argparse.Namespace:

	parser = argparse.ArgumentParser(prog="kairos", description="Run a live-coded program against the Kairos clock.")

	parser.add_argument("program", help="Path to the program file")
	parser.add_argument("--config", default=kairos.config.DEFAULT_CONFIG_PATH, help="YAML configuration file")
	parser.add_argument("--bars", type=int, default=None, help="Render this many bars as fast as possible, then exit")
	parser.add_argument("--live", action="store_true", help="Accept program edits over TCP")
	parser.add_argument("--port", type=int, default=None, help="Live server port (overrides the config)")

	return parser.parse_args(argv)


async def run (
	session: kairos.session.Session,
	config: kairos.config.Config,
	bars: typing.Optional[int] = None
) -> None:

	"""Run the transport, with the live server alongside when enabled."""

	transport = kairos.transport.Transport(session, bpm=config.bpm)
	server: typing.Optional[kairos.live_server.LiveServer] = None

	if config.live_enabled:
		server = kairos.live_server.LiveServer(session, port=config.live_port)
		await server.start()

	try:
		if bars is not None:
			await transport.render(bars)
		else:
			await transport.play()
	finally:
		if server is not None:
			await server.stop()


def main (argv: typing.Optional[typing.List[str]] = None) -> int:

	"""
	Main entry point for the kairos command.
	"""

	args = parse_args(argv)
	config = kairos.config.load_config(args.config)

	if args.live:
		config.live_enabled = True

	if args.port is not None:
		config.live_port = args.port

	with open(args.program, "r") as f:
		source = f.read()

	session = kairos.session.Session.from_config(config)

	if session.load(source) is not None:
		logger.error(f"Could not load {args.program}")
		return 1

	logger.info(f"Kairos starting: {args.program} at {config.bpm} BPM")

	try:
		asyncio.run(run(session, config, args.bars))
	except KeyboardInterrupt:
		logger.info("Stopping...")

	return 0


if __name__ == "__main__":
	sys.exit(main())
