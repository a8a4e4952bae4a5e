"""
Event Buffer

Per-test, append-only store of captured network events. Listeners append
from the CDP event thread while the test body runs; the lifecycle drains it
once when the test ends.
"""
import logging
import threading
from typing import List

from qa_netcapture.views import NetworkEvent

logger = logging.getLogger(__name__)


class EventBuffer:
	"""Thread-safe ordered buffer drained exactly once."""

	def __init__(self):
		self._lock = threading.Lock()
		self._events: List[NetworkEvent] = []
		self._drained = False
		self._dropped = 0

	def append(self, event: NetworkEvent) -> bool:
		"""
		Append an event in delivery order

		Returns:
			False if the buffer was already drained and the event was dropped
		"""
		with self._lock:
			if self._drained:
				self._dropped += 1
				return False
			self._events.append(event)
			return True

	def drain(self) -> List[NetworkEvent]:
		"""
		Take every buffered event in insertion order and close the buffer

		Raises:
			RuntimeError: If the buffer was already drained
		"""
		with self._lock:
			if self._drained:
				raise RuntimeError("Event buffer already drained")
			self._drained = True
			events, self._events = self._events, []
		return events

	def snapshot(self) -> List[NetworkEvent]:
		with self._lock:
			return list(self._events)

	@property
	def dropped(self) -> int:
		"""Number of events that arrived after the drain"""
		return self._dropped

	def __len__(self) -> int:
		with self._lock:
			return len(self._events)
