"""
pytest plugin - network capture around browser tests

Tests marked ``@pytest.mark.network_capture`` (or every test, with
``--network-capture``) get a fresh browser session published as the current
session before their fixtures run. Network activity is recorded while the
test body runs and flushed to the configured sink when it completes or
raises.

Usage:
	@pytest.mark.network_capture
	def test_search(browser_session):
		...
"""
import logging
from pathlib import Path
from typing import Any, Optional

import pytest

from qa_netcapture.browser.cdp_session import CDPSessionFactory
from qa_netcapture.browser.interfaces import EventFeed, SessionFactory
from qa_netcapture.browser.network_feed import CDPNetworkFeed
from qa_netcapture.capture.lifecycle import CaptureLifecycle, CaptureState
from qa_netcapture.capture.sinks import LogSink, create_sink
from qa_netcapture.config import Settings, settings
from qa_netcapture.utils.session_registry import get_current_session

logger = logging.getLogger(__name__)

MARKER = "network_capture"

lifecycle_key = pytest.StashKey[CaptureLifecycle]()
_backend_key = pytest.StashKey["CaptureBackend"]()


def settings_from_options(config: pytest.Config, base: Optional[Settings] = None) -> Settings:
	"""Apply command-line overrides on top of environment settings."""
	base = base or settings
	updates = {}
	if config.getoption("network_capture", None):
		updates["network_capture_all"] = True
	log_dir = config.getoption("network_log_dir", None)
	if log_dir:
		updates["network_log_dir"] = Path(log_dir)
	sink = config.getoption("network_log_sink", None)
	if sink:
		updates["network_log_sink"] = sink
	return base.model_copy(update=updates) if updates else base


class CaptureBackend:
	"""Collaborators shared by every test of one pytest run."""

	def __init__(self, config: pytest.Config):
		self.settings = settings_from_options(config)
		hook = config.hook
		self.session_factory: SessionFactory = (
			hook.pytest_netcapture_session_factory(config=config) or CDPSessionFactory(self.settings)
		)
		self.event_feed: EventFeed = hook.pytest_netcapture_event_feed(config=config) or CDPNetworkFeed()
		self.sink: LogSink = hook.pytest_netcapture_sink(config=config) or create_sink(self.settings)

	def new_lifecycle(self) -> CaptureLifecycle:
		return CaptureLifecycle(self.session_factory, self.event_feed, self.sink)

	def shutdown(self) -> None:
		shutdown = getattr(self.session_factory, "shutdown", None)
		if callable(shutdown):
			shutdown()


def _get_backend(config: pytest.Config) -> CaptureBackend:
	backend = config.stash.get(_backend_key, None)
	if backend is None:
		backend = CaptureBackend(config)
		config.stash[_backend_key] = backend
	return backend


def _capture_enabled(item: pytest.Item) -> bool:
	if item.get_closest_marker(MARKER) is not None:
		return True
	return settings_from_options(item.config).network_capture_all


def pytest_addhooks(pluginmanager: pytest.PytestPluginManager) -> None:
	from qa_netcapture import hookspecs

	pluginmanager.add_hookspecs(hookspecs)


def pytest_addoption(parser: pytest.Parser) -> None:
	group = parser.getgroup("netcapture", "browser network capture")
	group.addoption(
		"--network-capture",
		action="store_true",
		default=False,
		help="Record network activity for every test, not only those marked network_capture.",
	)
	group.addoption(
		"--network-log-dir",
		default=None,
		help="Directory for per-test network log files (default: NETWORK_LOG_DIR or ./logs).",
	)
	group.addoption(
		"--network-log-sink",
		choices=("file", "console"),
		default=None,
		help="Where captured network logs are written (default: NETWORK_LOG_SINK or file).",
	)


def pytest_configure(config: pytest.Config) -> None:
	config.addinivalue_line(
		"markers",
		f"{MARKER}: start a browser session for the test and record its network activity",
	)
	logging.getLogger("qa_netcapture").setLevel(settings.log_level.upper())


def pytest_unconfigure(config: pytest.Config) -> None:
	backend = config.stash.get(_backend_key, None)
	if backend is not None:
		backend.shutdown()


@pytest.hookimpl(tryfirst=True)
def pytest_runtest_setup(item: pytest.Item) -> None:
	"""Start the session before fixtures run so they can read the current session."""
	if not _capture_enabled(item):
		return
	lifecycle = _get_backend(item.config).new_lifecycle()
	item.stash[lifecycle_key] = lifecycle
	lifecycle.before_test(item.name)


@pytest.hookimpl(wrapper=True)
def pytest_runtest_call(item: pytest.Item):
	lifecycle = item.stash.get(lifecycle_key, None)
	if lifecycle is None or lifecycle.state is not CaptureState.CAPTURING:
		return (yield)
	try:
		result = yield
	except BaseException as error:
		lifecycle.on_test_exception(error)
	lifecycle.after_test()
	return result


@pytest.hookimpl(trylast=True)
def pytest_runtest_teardown(item: pytest.Item) -> None:
	# Setup failed after the session started: the call phase never ran
	lifecycle = item.stash.get(lifecycle_key, None)
	if lifecycle is not None and lifecycle.state is CaptureState.CAPTURING:
		lifecycle.after_test()


@pytest.fixture
def browser_session() -> Any:
	"""The current browser session of a network_capture test."""
	session = get_current_session()
	if session is None:
		pytest.fail(
			f"No current browser session. Mark the test with @pytest.mark.{MARKER}.",
			pytrace=False,
		)
	return session


@pytest.fixture
def network_capture(request: pytest.FixtureRequest) -> Optional[CaptureLifecycle]:
	"""The capture lifecycle of the running test, or None if capture is off."""
	return request.node.stash.get(lifecycle_key, None)
