"""
Network Feed - CDP Network domain event source

Enables the Network domain on a session's page target and turns
Network.requestWillBeSent / Network.responseReceived notifications into
RequestEvent / ResponseEvent objects for the registered listeners.
Payload bodies are never fetched; only method, URL, status and MIME type
are read.
"""
import logging
from typing import Any, Optional

from qa_netcapture.browser.cdp_session import CDPChannel
from qa_netcapture.browser.interfaces import RequestListener, ResponseListener
from qa_netcapture.views import RequestEvent, ResponseEvent

logger = logging.getLogger(__name__)


def parse_request_event(event: dict) -> RequestEvent:
	"""Build a RequestEvent from a Network.requestWillBeSent payload."""
	request = event.get("request") or {}
	return RequestEvent(method=request.get("method", "GET"), url=request.get("url") or "")


def parse_response_event(event: dict) -> ResponseEvent:
	"""Build a ResponseEvent from a Network.responseReceived payload."""
	response = event.get("response") or {}
	return ResponseEvent(
		status=int(response.get("status", 0)),
		url=response.get("url") or "",
		content_type=response.get("mimeType"),
	)


class CDPNetworkFeed:
	"""Event feed over a CDPChannel"""

	def enable(self, channel: CDPChannel) -> None:
		channel.run(channel.cdp_client.send.Network.enable(session_id=channel.session_id))
		logger.debug(f"🌐 Network monitoring enabled (session={channel.session_id[-4:]})")

	def on_request(self, channel: CDPChannel, callback: RequestListener) -> None:
		def _on_request_will_be_sent(event: Any, session_id: Optional[str] = None) -> None:
			if session_id is not None and session_id != channel.session_id:
				return
			callback(parse_request_event(event))

		channel.cdp_client.register.Network.requestWillBeSent(_on_request_will_be_sent)

	def on_response(self, channel: CDPChannel, callback: ResponseListener) -> None:
		def _on_response_received(event: Any, session_id: Optional[str] = None) -> None:
			if session_id is not None and session_id != channel.session_id:
				return
			callback(parse_response_event(event))

		channel.cdp_client.register.Network.responseReceived(_on_response_received)
