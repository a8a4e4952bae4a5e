"""
qa_netcapture - network capture for browser end-to-end tests

Keeps a process-wide registry of browser sessions and records the network
activity of each test to a per-test log.
"""
from .capture.lifecycle import NO_ACTIVITY_MARKER, CaptureLifecycle, CaptureState
from .capture.sinks import ConsoleLogSink, FileLogSink, create_sink
from .errors import InvalidKeyError, NetworkCaptureError, SessionInitError, SinkWriteError
from .utils.session_registry import SessionRegistry, get_current_session, get_session_registry
from .views import RequestEvent, ResponseEvent

__all__ = [
	"CaptureLifecycle",
	"CaptureState",
	"ConsoleLogSink",
	"FileLogSink",
	"InvalidKeyError",
	"NO_ACTIVITY_MARKER",
	"NetworkCaptureError",
	"RequestEvent",
	"ResponseEvent",
	"SessionInitError",
	"SessionRegistry",
	"SinkWriteError",
	"create_sink",
	"get_current_session",
	"get_session_registry",
]
