import pathlib

import kairos.__main__


def test_parse_args () -> None:

	"""Defaults and flags."""

	args = kairos.__main__.parse_args(["song.py", "--bars", "2", "--live", "--port", "7000"])

	assert args.program == "song.py"
	assert args.bars == 2
	assert args.live is True
	assert args.port == 7000
	assert args.config == "kairos.yaml"


def test_main_renders_bars (tmp_path: pathlib.Path) -> None:

	"""A valid program renders offline and exits cleanly."""

	program = tmp_path / "song.py"
	program.write_text("if beat(1): counter('beats')\n")

	assert kairos.__main__.main([str(program), "--bars", "1", "--config", str(tmp_path / "none.yaml")]) == 0


def test_main_rejects_syntax_error (tmp_path: pathlib.Path) -> None:

	"""A program that does not compile exits with status 1."""

	program = tmp_path / "broken.py"
	program.write_text("if True print(1)\n")

	assert kairos.__main__.main([str(program), "--bars", "1", "--config", str(tmp_path / "none.yaml")]) == 1
