"""End-to-end tests of the pytest plugin, run in a nested pytest session with fake browser collaborators."""
import pytest

PLUGIN_ARGS = ("-p", "qa_netcapture.plugin")

CONFTEST = """
import pytest

from fakes import FakeEventFeed, FakeSessionFactory

FACTORY = FakeSessionFactory(fail_create={fail_create})
FEED = FakeEventFeed()


def pytest_netcapture_session_factory(config):
    return FACTORY


def pytest_netcapture_event_feed(config):
    return FEED


@pytest.fixture
def feed():
    return FEED


def pytest_sessionfinish(session):
    summary = session.config.rootpath / "summary.txt"
    summary.write_text(f"created={{len(FACTORY.created)}} closed={{len(FACTORY.closed)}}")
"""


@pytest.fixture
def log_dir(pytester):
	return pytester.path / "netlogs"


def _make_conftest(pytester, fail_create=False):
	pytester.makeconftest(CONFTEST.format(fail_create=fail_create))


def _log_files(log_dir, prefix):
	return sorted(log_dir.glob(f"{prefix}_*.log"))


def test_marked_tests_are_captured_and_flushed(pytester, log_dir):
	_make_conftest(pytester)
	pytester.makepyfile(
		"""
		import pytest

		from qa_netcapture.utils.session_registry import get_current_session


		@pytest.fixture
		def start_page(browser_session):
			return browser_session


		@pytest.mark.network_capture
		def test_passes(start_page, browser_session, feed, network_capture):
			assert start_page is browser_session
			assert network_capture.session is browser_session
			feed.emit_request("GET", "https://x/")
			feed.emit_response(200, "https://x/", "text/html")


		@pytest.mark.network_capture
		def test_fails(feed):
			feed.emit_request("GET", "https://y/")
			assert False, "URL does not contain the expected text."


		def test_unmarked(network_capture):
			assert network_capture is None
			assert get_current_session() is None
		"""
	)

	result = pytester.runpytest(*PLUGIN_ARGS, f"--network-log-dir={log_dir}")

	result.assert_outcomes(passed=2, failed=1)
	result.stdout.fnmatch_lines(["*AssertionError: URL does not contain the expected text.*"])

	[passed_log] = _log_files(log_dir, "test_passes")
	assert passed_log.read_text().splitlines() == [
		"Request: [Method: GET, URL: https://x/]",
		"Response: [Status: 200, URL: https://x/, Content-Type: text/html]",
	]
	[failed_log] = _log_files(log_dir, "test_fails")
	assert failed_log.read_text().splitlines() == ["Request: [Method: GET, URL: https://y/]"]
	assert _log_files(log_dir, "test_unmarked") == []
	assert (pytester.path / "summary.txt").read_text() == "created=2 closed=2"


def test_session_start_failure_errors_the_test(pytester, log_dir):
	_make_conftest(pytester, fail_create=True)
	pytester.makepyfile(
		"""
		import pytest


		@pytest.mark.network_capture
		def test_needs_browser():
			pass
		"""
	)

	result = pytester.runpytest(*PLUGIN_ARGS, f"--network-log-dir={log_dir}")

	result.assert_outcomes(errors=1)
	result.stdout.fnmatch_lines(["*SessionInitError*"])
	assert not log_dir.exists()


def test_fixture_setup_failure_still_flushes_and_closes(pytester, log_dir):
	_make_conftest(pytester)
	pytester.makepyfile(
		"""
		import pytest


		@pytest.fixture
		def broken_login(browser_session):
			raise RuntimeError("login page did not load")


		@pytest.mark.network_capture
		def test_after_login(broken_login):
			pass
		"""
	)

	result = pytester.runpytest(*PLUGIN_ARGS, f"--network-log-dir={log_dir}")

	result.assert_outcomes(errors=1)
	[log] = _log_files(log_dir, "test_after_login")
	assert log.read_text().splitlines() == ["No network requests were intercepted."]
	assert (pytester.path / "summary.txt").read_text() == "created=1 closed=1"


def test_capture_all_option_with_console_sink(pytester):
	_make_conftest(pytester)
	pytester.makepyfile(
		"""
		def test_plain(feed, browser_session):
			feed.emit_request("POST", "https://x/login")
		"""
	)

	result = pytester.runpytest(*PLUGIN_ARGS, "-s", "--network-capture", "--network-log-sink=console")

	result.assert_outcomes(passed=1)
	result.stdout.fnmatch_lines([
		"*--- network log: test_plain ---*",
		"*Request: [[]Method: POST, URL: https://x/login[]]*",
	])


def test_browser_session_fixture_without_capture_fails(pytester):
	_make_conftest(pytester)
	pytester.makepyfile(
		"""
		def test_forgot_marker(browser_session):
			pass
		"""
	)

	result = pytester.runpytest(*PLUGIN_ARGS)

	result.assert_outcomes(errors=1)
	result.stdout.fnmatch_lines(["*No current browser session*network_capture*"])


def test_marker_is_registered(pytester):
	result = pytester.runpytest(*PLUGIN_ARGS, "--markers")
	result.stdout.fnmatch_lines(["*@pytest.mark.network_capture*"])
