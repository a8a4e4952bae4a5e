"""
Plugin hook specifications

Implement these in a conftest.py to run network capture against a browser
backend other than the default kernel-image CDP endpoint.
"""
import pytest


@pytest.hookspec(firstresult=True)
def pytest_netcapture_session_factory(config):
	"""Return the SessionFactory used to start a browser session per test."""


@pytest.hookspec(firstresult=True)
def pytest_netcapture_event_feed(config):
	"""Return the EventFeed used to subscribe to network notifications."""


@pytest.hookspec(firstresult=True)
def pytest_netcapture_sink(config):
	"""Return the LogSink network logs are flushed to."""
