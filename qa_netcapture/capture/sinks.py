"""
Network Log Sinks

Destinations for the network log of one test execution: a file per test in
a log directory, or the console.
"""
import logging
import re
import sys
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, Protocol, Sequence, TextIO, Union

from qa_netcapture.config import Settings
from qa_netcapture.errors import SinkWriteError

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class LogSink(Protocol):
	def write(self, test_name: str, lines: Sequence[str]) -> None:
		"""Write the log lines of one test execution."""


def safe_test_name(test_name: str) -> str:
	"""Make a test name usable as a file name (parametrize ids contain [, / and spaces)."""
	cleaned = _UNSAFE_FILENAME_CHARS.sub("_", test_name).strip("._")
	return cleaned or "unknown-test"


class FileLogSink:
	"""
	Write each test's network log to its own file.

	Files are named ``<test_name>_<YYYY-MM-DD_HH-MM-SS>.log`` and placed in
	``log_dir``, which is created on first write.
	"""

	def __init__(self, log_dir: Union[str, Path] = "logs", clock: Callable[[], datetime] = datetime.now):
		self.log_dir = Path(log_dir)
		self._clock = clock

	def log_path_for(self, test_name: str) -> Path:
		timestamp = self._clock().strftime(TIMESTAMP_FORMAT)
		return self.log_dir / f"{safe_test_name(test_name)}_{timestamp}.log"

	def write(self, test_name: str, lines: Sequence[str]) -> None:
		log_file = self.log_path_for(test_name)
		try:
			self.log_dir.mkdir(parents=True, exist_ok=True)
			with open(log_file, "a", encoding="utf-8") as writer:
				for line in lines:
					writer.write(line + "\n")
		except OSError as e:
			raise SinkWriteError(f"Failed to write network logs to file {log_file}: {e}") from e
		logger.info(f"Saved {len(lines)} network log line(s) to {log_file}")


class ConsoleLogSink:
	"""Print each test's network log to a text stream (stdout by default)."""

	def __init__(self, stream: Optional[TextIO] = None):
		self._stream = stream

	def write(self, test_name: str, lines: Sequence[str]) -> None:
		stream = self._stream if self._stream is not None else sys.stdout
		try:
			stream.write(f"--- network log: {test_name} ---\n")
			for line in lines:
				stream.write(line + "\n")
			stream.flush()
		except (OSError, ValueError) as e:
			# ValueError: write to a closed stream
			raise SinkWriteError(f"Failed to write network logs to console: {e}") from e


def create_sink(config: Settings) -> LogSink:
	"""
	Build the sink selected in settings

	Args:
		config: Settings carrying network_log_sink and network_log_dir

	Returns:
		FileLogSink or ConsoleLogSink
	"""
	if config.network_log_sink == "console":
		return ConsoleLogSink()
	if config.network_log_sink == "file":
		return FileLogSink(config.network_log_dir)
	raise ValueError(f"Unknown network log sink: {config.network_log_sink!r}")
