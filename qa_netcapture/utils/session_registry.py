"""
Browser Session Registry

Process-wide store of live browser sessions for end-to-end tests.

Maps caller-chosen string keys to session handles and keeps one unlabeled
"current session" slot, so test code can fetch the session it should drive
without wiring it through every fixture. The registry only references
sessions: whoever created a session closes it.
"""
import logging
import threading
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from qa_netcapture.errors import InvalidKeyError
from qa_netcapture.utils.singleton import singleton

logger = logging.getLogger(__name__)


def _validate_key(key: Optional[str]) -> str:
	if key is None or not isinstance(key, str) or not key.strip():
		raise InvalidKeyError("Key must be a non-empty string")
	return key


class SessionRegistry:
	"""
	Thread-safe registry of browser session handles.

	A single re-entrant lock guards both the keyed map and the current-session
	slot, so every operation is safe to call concurrently without external
	locking.
	"""

	def __init__(self):
		self._lock = threading.RLock()
		self._sessions: Dict[str, Any] = {}
		self._current: Optional[Any] = None

	def put(self, key: str, handle: Any) -> None:
		"""
		Register a session handle under a key, replacing any previous handle

		Args:
			key: Non-empty session key
			handle: Session handle (must not be None)

		Raises:
			InvalidKeyError: If the key is empty or missing
			ValueError: If the handle is None
		"""
		_validate_key(key)
		if handle is None:
			raise ValueError("Session handle must not be None")
		with self._lock:
			replaced = key in self._sessions
			self._sessions[key] = handle
		if replaced:
			logger.debug(f"Replaced browser session under key: {key}")
		else:
			logger.debug(f"Registered browser session under key: {key}")

	def get(self, key: str) -> Optional[Any]:
		"""
		Retrieve a session handle by key

		Returns:
			The stored handle, or None if nothing is registered under the key
		"""
		_validate_key(key)
		with self._lock:
			return self._sessions.get(key)

	def remove(self, key: str) -> None:
		"""Remove the handle stored under a key. Removing an absent key is a no-op."""
		_validate_key(key)
		with self._lock:
			removed = self._sessions.pop(key, None) is not None
		if removed:
			logger.debug(f"Unregistered browser session: {key}")

	def contains(self, key: str) -> bool:
		_validate_key(key)
		with self._lock:
			return key in self._sessions

	def size(self) -> int:
		with self._lock:
			return len(self._sessions)

	def keys(self) -> List[str]:
		with self._lock:
			return list(self._sessions)

	def all_entries(self) -> Mapping[str, Any]:
		"""
		Snapshot of every registered session

		Returns:
			Read-only mapping over a copy of the registry contents
		"""
		with self._lock:
			return MappingProxyType(dict(self._sessions))

	def clear_all(self) -> None:
		"""Empty the keyed map. The current-session slot is left untouched."""
		with self._lock:
			count = len(self._sessions)
			self._sessions.clear()
		logger.debug(f"Cleared {count} browser session(s) from registry")

	def set_current(self, handle: Any) -> None:
		"""Mark a session as the one the running test should use."""
		with self._lock:
			self._current = handle

	def get_current(self) -> Optional[Any]:
		"""
		Get the current session

		Returns:
			The current session handle, or None if no session is current
		"""
		with self._lock:
			return self._current

	def clear_current(self) -> None:
		with self._lock:
			self._current = None

	def clear_current_if(self, handle: Any) -> bool:
		"""
		Clear the current slot only if it still holds the given handle

		Returns:
			True if the slot was cleared
		"""
		with self._lock:
			if self._current is handle:
				self._current = None
				return True
			return False

	def __len__(self) -> int:
		return self.size()

	def __contains__(self, key: str) -> bool:
		return self.contains(key)


_shared_registry = singleton(SessionRegistry)


def get_session_registry() -> SessionRegistry:
	"""Get the process-wide session registry."""
	return _shared_registry()


def register_session(key: str, session: Any) -> None:
	"""
	Register a browser session in the shared registry

	Args:
		key: Unique session key
		session: Session handle
	"""
	get_session_registry().put(key, session)


def get_session(key: str) -> Optional[Any]:
	"""
	Retrieve a browser session from the shared registry

	Returns:
		Session handle or None if not found
	"""
	session = get_session_registry().get(key)
	if session is None:
		logger.debug(f"Browser session not found: {key}")
	return session


def unregister_session(key: str) -> None:
	get_session_registry().remove(key)


def has_session(key: str) -> bool:
	return get_session_registry().contains(key)


def list_sessions() -> List[str]:
	"""Get list of all registered session keys"""
	return get_session_registry().keys()


def session_count() -> int:
	"""Get count of registered sessions"""
	return get_session_registry().size()


def clear_sessions() -> None:
	get_session_registry().clear_all()


def set_current_session(session: Any) -> None:
	"""
	Mark a session as current in the shared registry.

	Test bodies and fixtures read it back through get_current_session().
	"""
	get_session_registry().set_current(session)
	logger.info("Set current browser session")


def get_current_session() -> Optional[Any]:
	"""
	Get the session the running test should use.

	Returns:
		Session handle or None if no test session is active
	"""
	return get_session_registry().get_current()


def clear_current_session() -> None:
	get_session_registry().clear_current()
	logger.info("Cleared current browser session")
