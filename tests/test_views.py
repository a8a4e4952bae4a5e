import pytest
from pydantic import ValidationError

from qa_netcapture.views import RequestEvent, ResponseEvent


def test_request_log_line():
	event = RequestEvent(method="POST", url="https://x/api")
	assert event.to_log_line() == "Request: [Method: POST, URL: https://x/api]"


def test_response_log_line_accepts_cdp_field_name():
	event = ResponseEvent(status=404, url="https://x/missing", contentType="text/plain")
	assert event.content_type == "text/plain"
	assert event.to_log_line() == "Response: [Status: 404, URL: https://x/missing, Content-Type: text/plain]"


def test_events_are_immutable():
	event = RequestEvent(method="GET", url="https://x/")
	with pytest.raises(ValidationError):
		event.url = "https://y/"
