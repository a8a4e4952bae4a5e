"""
Network Capture Lifecycle

Brackets one test execution: starts a browser session, publishes it as the
current session, records every request/response the browser reports while
the test body runs, and on the way out writes the recorded events to a log
sink and tears the session down.

State machine per test execution:

	IDLE -> SESSION_STARTING -> CAPTURING -> FLUSHING -> TERMINATED

The two terminal hooks (after_test for normal completion, on_test_exception
for a raising test body) lead to the same flush and teardown, which runs at
most once per execution.
"""
import logging
import threading
from contextlib import contextmanager
from enum import Enum
from typing import Any, Iterator, List, NoReturn, Optional

from qa_netcapture.browser.interfaces import EventFeed, SessionFactory
from qa_netcapture.capture.buffer import EventBuffer
from qa_netcapture.capture.sinks import LogSink
from qa_netcapture.errors import SessionInitError
from qa_netcapture.utils.session_registry import SessionRegistry, get_session_registry
from qa_netcapture.views import NetworkEvent, RequestEvent, ResponseEvent

logger = logging.getLogger(__name__)

NO_ACTIVITY_MARKER = "No network requests were intercepted."


class CaptureState(str, Enum):
	IDLE = "idle"
	SESSION_STARTING = "session_starting"
	CAPTURING = "capturing"
	FLUSHING = "flushing"
	TERMINATED = "terminated"


def format_log_lines(events: List[NetworkEvent]) -> List[str]:
	"""Render events one line each, or the no-activity marker when there are none."""
	if not events:
		return [NO_ACTIVITY_MARKER]
	return [event.to_log_line() for event in events]


class CaptureLifecycle:
	"""
	Session setup/teardown and network capture around one test execution.

	The runner calls before_test() before the test body, then exactly one of
	after_test() or on_test_exception(error). A lifecycle object handles one
	execution at a time; call reset() to reuse it.
	"""

	def __init__(
		self,
		session_factory: SessionFactory,
		event_feed: EventFeed,
		sink: LogSink,
		registry: Optional[SessionRegistry] = None,
	):
		self._session_factory = session_factory
		self._event_feed = event_feed
		self._sink = sink
		self._registry = registry if registry is not None else get_session_registry()

		self._lock = threading.Lock()
		self._state = CaptureState.IDLE
		self._session: Optional[Any] = None
		self._buffer = EventBuffer()
		self.test_name: Optional[str] = None

	@property
	def state(self) -> CaptureState:
		return self._state

	@property
	def session(self) -> Optional[Any]:
		return self._session

	@property
	def events(self) -> List[NetworkEvent]:
		"""Events captured so far, in delivery order"""
		return self._buffer.snapshot()

	# ---- runner hooks ----

	def before_test(self, test_name: str = "unknown-test") -> Any:
		"""
		Start the browser session and begin capturing network activity

		Args:
			test_name: Name of the test, used as registry key and log file name

		Returns:
			The session handle, also published as the current session

		Raises:
			SessionInitError: If the session, its debug channel or the listeners cannot be set up
		"""
		with self._lock:
			if self._state is not CaptureState.IDLE:
				raise RuntimeError(f"before_test() called in state {self._state.value}")
			self._state = CaptureState.SESSION_STARTING

		self.test_name = test_name if test_name and test_name.strip() else "unknown-test"
		self._buffer = EventBuffer()
		logger.info(f"Starting browser session for test: {self.test_name}")

		try:
			handle = self._session_factory.create_session()
		except SessionInitError:
			self._state = CaptureState.TERMINATED
			raise
		except Exception as e:
			self._state = CaptureState.TERMINATED
			raise SessionInitError(f"Failed to create browser session: {e}") from e
		if handle is None:
			self._state = CaptureState.TERMINATED
			raise SessionInitError("Browser session is not initialized")

		self._session = handle
		self._registry.set_current(handle)
		self._registry.put(self.test_name, handle)

		try:
			channel = self._session_factory.open_debug_channel(handle)
			self._event_feed.enable(channel)
			self._event_feed.on_request(channel, self._on_request)
			self._event_feed.on_response(channel, self._on_response)
		except Exception as e:
			logger.error(f"Failed to start network capture for {self.test_name}: {e}")
			self._teardown()
			self._state = CaptureState.TERMINATED
			if isinstance(e, SessionInitError):
				raise
			raise SessionInitError(f"Failed to start network capture: {e}") from e

		self._state = CaptureState.CAPTURING
		logger.debug(f"Network capture enabled for test: {self.test_name}")
		return handle

	def after_test(self) -> None:
		"""Flush captured events and tear the session down after normal completion."""
		self._finish(failed=False)

	def on_test_exception(self, error: BaseException) -> NoReturn:
		"""
		Flush captured events and tear the session down, then re-raise

		Args:
			error: Exception raised by the test body

		Raises:
			The same exception object, unchanged
		"""
		self._finish(failed=True)
		raise error

	@contextmanager
	def capture(self, test_name: str = "unknown-test") -> Iterator[Any]:
		"""
		Run a block as one test execution

		Usage:
			with lifecycle.capture("test_login") as session:
				...
		"""
		handle = self.before_test(test_name)
		try:
			yield handle
		except BaseException as error:
			self.on_test_exception(error)
		else:
			self.after_test()

	def reset(self) -> None:
		"""Return a terminated lifecycle to IDLE so it can run another test."""
		with self._lock:
			if self._state not in (CaptureState.IDLE, CaptureState.TERMINATED):
				raise RuntimeError(f"Cannot reset lifecycle in state {self._state.value}")
			self._state = CaptureState.IDLE
			self._session = None
			self._buffer = EventBuffer()
			self.test_name = None

	# ---- listeners ----

	def _on_request(self, event: RequestEvent) -> None:
		self._buffer.append(event)

	def _on_response(self, event: ResponseEvent) -> None:
		self._buffer.append(event)

	# ---- flush / teardown ----

	def _finish(self, failed: bool) -> bool:
		with self._lock:
			if self._state is not CaptureState.CAPTURING:
				logger.debug(f"Skipping flush in state {self._state.value}")
				return False
			self._state = CaptureState.FLUSHING

		outcome = "failed" if failed else "completed"
		logger.info(f"Test {self.test_name} {outcome}, flushing network logs")
		try:
			self._flush()
		finally:
			self._teardown()
			self._state = CaptureState.TERMINATED
		return True

	def _flush(self) -> None:
		events = self._buffer.drain()
		lines = format_log_lines(events)
		try:
			self._sink.write(self.test_name, lines)
		except Exception as e:
			logger.error(f"Failed to write network logs for {self.test_name}: {e}", exc_info=True)
		else:
			logger.info(f"Flushed {len(events)} network event(s) for test {self.test_name}")

	def _teardown(self) -> None:
		handle = self._session
		if handle is None:
			return
		try:
			self._session_factory.close_session(handle)
		except Exception as e:
			logger.error(f"Error closing browser session for {self.test_name}: {e}", exc_info=True)
		finally:
			self._registry.clear_current_if(handle)
			if self._registry.get(self.test_name) is handle:
				self._registry.remove(self.test_name)
			if self._buffer.dropped:
				logger.debug(f"Dropped {self._buffer.dropped} network event(s) that arrived after flush")
