"""Re-evaluation of the committed program.

The program is compiled once when committed and executed from the top on
every tick, each time in a fresh namespace. Anything the program wants to keep
between runs must go through the session's state functions (``counter``,
``variable``, ``cache``, ``player`` ...).

Errors never escape :meth:`ScriptEvaluator.evaluate`. A failing program is
logged once per distinct error rather than once per tick, and the clock keeps
running.
"""

import builtins
import logging
import traceback
import types
import typing


logger = logging.getLogger(__name__)

PROGRAM_FILENAME = "<program>"


def check_syntax (source: str) -> typing.Optional[str]:

	"""Return a SyntaxError traceback for ``source``, or None if it compiles."""

	try:
		compile(source, PROGRAM_FILENAME, "exec")
	except SyntaxError:
		return traceback.format_exc()

	return None


class ScriptEvaluator:

	"""
	Holds the committed program and runs it on demand.

	Parameters:
		namespace_factory: Called before every run to build the names the
			program sees. The session binds its clock snapshot here.
	"""

	def __init__ (self, namespace_factory: typing.Callable[[], typing.Dict[str, typing.Any]]) -> None:

		self._namespace_factory = namespace_factory
		self._builtins = _safe_builtins()
		self._code: typing.Optional[types.CodeType] = None
		self._last_error: typing.Optional[str] = None

		self.source: typing.Optional[str] = None
		self.evaluations = 0

	def commit (self, source: str) -> typing.Optional[str]:

		"""
		Replace the program. Invalid syntax is rejected and the previous
		program stays in place.

		Returns:
			None on success, otherwise the SyntaxError traceback.
		"""

		try:
			code = compile(source, PROGRAM_FILENAME, "exec")
		except SyntaxError:
			error = traceback.format_exc()
			logger.warning(f"Program rejected:\n{error}")
			return error

		self._code = code
		self._last_error = None
		self.source = source

		logger.info(f"Program committed ({len(source.splitlines())} lines)")

		return None

	def clear (self) -> None:

		"""Drop the program and reset the evaluation count."""

		self._code = None
		self._last_error = None
		self.source = None
		self.evaluations = 0

	def evaluate (self) -> bool:

		"""Run the program once. Returns False when there is none or it failed."""

		if self._code is None:
			return False

		namespace = self._namespace_factory()
		namespace["__builtins__"] = self._builtins
		namespace["i"] = self.evaluations

		self.evaluations += 1

		try:
			exec(self._code, namespace)

		except SystemExit:
			self._report("SystemExit is not allowed in a live program.")
			return False

		except Exception:
			self._report(traceback.format_exc())
			return False

		self._last_error = None

		return True

	def _report (self, error: str) -> None:

		"""Log an error unless it is the same one as last run."""

		if error == self._last_error:
			return

		self._last_error = error
		logger.warning(f"Program error:\n{error}")


def _safe_builtins () -> typing.Dict[str, typing.Any]:

	"""Builtins with the ones that would block the clock replaced."""

	safe = {name: getattr(builtins, name) for name in dir(builtins)}

	for name in ("help", "input", "breakpoint", "exit", "quit"):
		safe[name] = _blocked(name)

	return safe


def _blocked (name: str) -> typing.Callable:

	"""Return a function that raises RuntimeError when called."""

	def _raise (*args: typing.Any, **kwargs: typing.Any) -> None:
		raise RuntimeError(f"{name}() is not available in a live program - it would block the clock.")

	_raise.__name__ = name
	_raise.__qualname__ = name

	return _raise
