"""
Shared pytest fixtures for qa_netcapture tests.

Provides fresh registries and in-memory fakes for the session factory,
the network event feed and the log sink, so lifecycle tests run without
a browser.
"""
import pytest

from fakes import FakeEventFeed, FakeSessionFactory, RecordingSink
from qa_netcapture.capture.lifecycle import CaptureLifecycle
from qa_netcapture.utils.session_registry import SessionRegistry


@pytest.fixture
def registry():
	"""Registry private to one test."""
	return SessionRegistry()


@pytest.fixture
def factory():
	return FakeSessionFactory()


@pytest.fixture
def feed():
	return FakeEventFeed()


@pytest.fixture
def sink():
	return RecordingSink()


@pytest.fixture
def lifecycle(factory, feed, sink, registry):
	return CaptureLifecycle(factory, feed, sink, registry=registry)
