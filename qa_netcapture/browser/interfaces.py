"""Ports describing the browser collaborators the capture lifecycle drives."""

from typing import Any, Callable, Protocol

from qa_netcapture.views import RequestEvent, ResponseEvent

RequestListener = Callable[[RequestEvent], None]
ResponseListener = Callable[[ResponseEvent], None]


class SessionFactory(Protocol):
	"""Starts and stops browser sessions."""

	def create_session(self) -> Any:
		"""Start a browser session and return its handle."""

	def open_debug_channel(self, handle: Any) -> Any:
		"""Open a debugging-protocol channel against ``handle``."""

	def close_session(self, handle: Any) -> None:
		"""Tear the session down."""


class EventFeed(Protocol):
	"""Push-based source of request/response notifications."""

	def enable(self, channel: Any) -> None:
		"""Start network event delivery on ``channel``."""

	def on_request(self, channel: Any, callback: RequestListener) -> None:
		"""Invoke ``callback`` for every outgoing request."""

	def on_response(self, channel: Any, callback: ResponseListener) -> None:
		"""Invoke ``callback`` for every received response."""


__all__ = ["EventFeed", "RequestListener", "ResponseListener", "SessionFactory"]
